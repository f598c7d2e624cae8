"""Tests for line item builder."""

from dataclasses import replace
from decimal import Decimal
from uuid import uuid4

from nomina_engine.calculators import (
    AttendanceSummary,
    EmployeeSnapshot,
    LineItemBuilder,
    PayrollCalculator,
)
from nomina_engine.models import PayrollRun


def _result(scenario_rates):
    employee = EmployeeSnapshot(
        employee_id=uuid4(),
        full_name="María José Soto",
        national_id="15.555.555-5",
        position="Supervisora",
        base_salary=Decimal("800000"),
        contract_type="indefinite",
    )
    summary = AttendanceSummary(worked_days=30, normal_hours=Decimal("240"), overtime_hours=Decimal("4"))
    return PayrollCalculator.calculate_employee(employee, summary, scenario_rates)


class TestLineItemBuilder:
    """Test line item builder functionality."""

    def test_round_to_peso(self):
        """Test rounding to whole pesos."""
        assert LineItemBuilder.round_to_peso(Decimal("10.4")) == 10
        assert LineItemBuilder.round_to_peso(Decimal("10.6")) == 11

        # Half-up rounding
        assert LineItemBuilder.round_to_peso(Decimal("10.5")) == 11
        assert LineItemBuilder.round_to_peso(Decimal("11.5")) == 12
        assert LineItemBuilder.round_to_peso(Decimal("0.5")) == 1

    def test_net_from_components(self):
        assert LineItemBuilder.net_from_components(1000000, 15000, 102700, 70000, 6000, 0) == 836300

    def test_validate_accepts_calculated_result(self, scenario_rates):
        assert LineItemBuilder.validate(_result(scenario_rates)) == []

    def test_validate_flags_net_mismatch(self, scenario_rates):
        broken = replace(_result(scenario_rates), net_pay=1)

        errors = LineItemBuilder.validate(broken)

        assert len(errors) == 1
        assert "Net pay" in errors[0]

    def test_validate_flags_negative_amounts(self, scenario_rates):
        result = _result(scenario_rates)
        broken = replace(result, afc_deduction=-1, net_pay=result.net_pay + result.afc_deduction + 1)

        assert LineItemBuilder.validate(broken) == ["afc_deduction is negative"]

    def test_to_model_snapshots_employee(self, scenario_rates):
        result = _result(scenario_rates)
        run = PayrollRun(payroll_run_id=uuid4(), tenant_id=uuid4(), period="2026-10")

        item = LineItemBuilder.to_model(result, run)

        assert item.payroll_run_id == run.payroll_run_id
        assert item.tenant_id == run.tenant_id
        assert item.employee_id == result.employee.employee_id
        assert item.employee_name == "María José Soto"
        assert item.employee_national_id == "15.555.555-5"
        assert item.position == "Supervisora"
        assert item.contract_type == "indefinite"
        assert item.worked_days == 30
        assert item.overtime_hours == Decimal("4")
        assert item.net_pay == result.net_pay
        assert item.email_sent is False
