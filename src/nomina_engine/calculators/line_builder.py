"""Line item builder: peso rounding and persistence mapping."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from nomina_engine.calculators.types import LineItemResult
from nomina_engine.models import PayrollLineItem

if TYPE_CHECKING:
    from nomina_engine.models import PayrollRun


class LineItemBuilder:
    """Builds persisted line items from calculation results.

    Rounding:
    - Internal compute at full Decimal precision
    - Whole pesos (half-up) on every monetary output
    - Net pay derived from the rounded components, never rounded itself
    """

    OUTPUT_PRECISION = Decimal("1")

    @staticmethod
    def round_to_peso(amount: Decimal) -> int:
        """Round amount to whole pesos."""
        return int(Decimal(amount).quantize(LineItemBuilder.OUTPUT_PRECISION, rounding=ROUND_HALF_UP))

    @staticmethod
    def net_from_components(
        gross_taxable: int,
        gross_non_taxable: int,
        afp_deduction: int,
        health_deduction: int,
        afc_deduction: int,
        tax_deduction: int,
    ) -> int:
        """NET = taxable + non-taxable - (AFP + health + AFC + tax)."""
        return (
            gross_taxable
            + gross_non_taxable
            - afp_deduction
            - health_deduction
            - afc_deduction
            - tax_deduction
        )

    @staticmethod
    def validate(result: LineItemResult) -> list[str]:
        """Validate a line item result, returning error messages (empty if valid)."""
        errors: list[str] = []

        expected_net = LineItemBuilder.net_from_components(
            result.gross_taxable,
            result.gross_non_taxable,
            result.afp_deduction,
            result.health_deduction,
            result.afc_deduction,
            result.tax_deduction,
        )
        if result.net_pay != expected_net:
            errors.append(f"Net pay {result.net_pay} does not match components ({expected_net})")

        for name in (
            "overtime_amount",
            "gratification_amount",
            "gross_taxable",
            "gross_non_taxable",
            "afp_deduction",
            "health_deduction",
            "afc_deduction",
            "tax_deduction",
        ):
            if getattr(result, name) < 0:
                errors.append(f"{name} is negative")

        return errors

    @staticmethod
    def to_model(result: LineItemResult, run: PayrollRun) -> PayrollLineItem:
        """Map a calculation result onto a new PayrollLineItem row for ``run``."""
        employee = result.employee
        return PayrollLineItem(
            payroll_run_id=run.payroll_run_id,
            tenant_id=run.tenant_id,
            employee_id=employee.employee_id,
            employee_name=employee.full_name,
            employee_national_id=employee.national_id,
            position=employee.position,
            contract_type=employee.contract_type,
            worked_days=result.attendance.worked_days,
            normal_hours=result.attendance.normal_hours,
            overtime_hours=result.attendance.overtime_hours,
            base_salary=result.base_salary,
            overtime_amount=result.overtime_amount,
            gratification_amount=result.gratification_amount,
            family_allowance_amount=result.family_allowance_amount,
            gross_taxable=result.gross_taxable,
            gross_non_taxable=result.gross_non_taxable,
            afp_deduction=result.afp_deduction,
            health_deduction=result.health_deduction,
            afc_deduction=result.afc_deduction,
            tax_deduction=result.tax_deduction,
            net_pay=result.net_pay,
            email_sent=False,
        )
