"""Tests for pay slip rendering."""

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from nomina_engine.models import PayrollLineItem, RateSet
from nomina_engine.rendering import (
    SECTION_ORDER,
    PayslipRenderer,
    RenderFailureError,
    format_clp,
    format_percent,
    payslip_file_name,
)
from nomina_engine.services.rate_set_service import DEFAULT_RATES

ITEM_ID = UUID("3f2a9c1e-0000-4000-8000-000000000001")


def make_item(**overrides) -> PayrollLineItem:
    values = dict(
        payroll_line_item_id=ITEM_ID,
        payroll_run_id=uuid4(),
        tenant_id=uuid4(),
        employee_id=uuid4(),
        employee_name="Juan Pérez Soto",
        employee_national_id="12.345.678-9",
        position="Técnico",
        contract_type="indefinite",
        worked_days=30,
        normal_hours=Decimal("240"),
        overtime_hours=Decimal("0"),
        base_salary=800000,
        overtime_amount=0,
        gratification_amount=200000,
        family_allowance_amount=15000,
        gross_taxable=1000000,
        gross_non_taxable=15000,
        afp_deduction=102700,
        health_deduction=70000,
        afc_deduction=6000,
        tax_deduction=0,
        net_pay=836300,
        email_sent=False,
    )
    values.update(overrides)
    return PayrollLineItem(**values)


@pytest.fixture
def rates() -> RateSet:
    return RateSet(tenant_id=uuid4(), period="2026-10", **DEFAULT_RATES)


@pytest.fixture
def document(renderer, rates):
    return renderer.render(make_item(), "2026-10", rates, issue_date=date(2026, 10, 31))


class TestFormatting:
    def test_format_clp(self):
        assert format_clp(0) == "$0"
        assert format_clp(999) == "$999"
        assert format_clp(1000) == "$1.000"
        assert format_clp(836300) == "$836.300"
        assert format_clp(1234567) == "$1.234.567"

    def test_format_percent(self):
        assert format_percent(Decimal("0.1027")) == "10,27%"
        assert format_percent(Decimal("0.07")) == "7,00%"


class TestPayslipLayout:
    def test_sections_in_order(self, document):
        assert tuple(s.name for s in document.sections) == SECTION_ORDER

    def test_masthead_and_employer(self, document):
        assert document.section("masthead").get("Empresa") == "WAYCO LIMITADA"
        assert document.section("masthead").get("RUT") == "76.123.456-7"
        assert document.section("employer").get("Dirección") == "Av. Principal 123, Santiago"

    def test_title_spells_month(self, document):
        title = document.section("title")
        assert title.get("Documento") == "LIQUIDACIÓN DE SUELDO"
        assert title.get("Período") == "Octubre 2026"

    def test_employee_block(self, document):
        employee = document.section("employee")
        assert employee.get("Nombre") == "JUAN PÉREZ SOTO"
        assert employee.get("RUT") == "12.345.678-9"
        assert employee.get("Código") == "3F2A9C1E"

    def test_contributions(self, document):
        contributions = document.section("contributions")
        assert contributions.get("AFP") == "AFP"
        assert contributions.get("% AFP") == "10,27%"
        assert contributions.get("Monto AFP") == "$102.700"
        assert contributions.get("Salud") == "FONASA"
        assert contributions.get("% Salud") == "7,00%"
        assert contributions.get("Monto Salud") == "$70.000"

    def test_work_summary(self, document):
        summary = document.section("work_summary")
        assert summary.get("Días Trabajados") == "30"
        assert summary.get("Horas Extras") == "0,00"
        assert summary.get("Horas de Ausencia") == "0"
        assert summary.get("Cargas Familiares") == "0"
        assert summary.get("Total Imponible") == "$1.000.000"
        assert summary.get("Total Líquido") == "$836.300"

    def test_earnings_and_deductions(self, document):
        earnings = document.section("earnings")
        assert [f.label for f in earnings.fields] == [
            "Sueldo Base",
            "Gratificación Legal",
            "Total Imponible",
            "Total No Imponible",
        ]
        assert earnings.get("Sueldo Base") == "$800.000"
        assert earnings.get("Total No Imponible") == "$15.000"

        deductions = document.section("deductions")
        assert deductions.get("Seguro de Cesantía") == "$6.000"
        assert deductions.get("Total Descuentos Legales") == "$178.700"
        assert deductions.get("Impuesto Único") is None

    def test_closing_and_words(self, document):
        closing = document.section("closing")
        assert closing.get("Total Haberes") == "$1.015.000"
        assert closing.get("Total Descuentos") == "$178.700"
        assert closing.get("Fecha de Emisión") == "31/10/2026"
        assert closing.get("Líquido a Pagar") == "$836.300"

        assert document.section("amount_in_words").get("Son") == (
            "OCHOCIENTOS TREINTA Y SEIS MIL TRESCIENTOS PESOS"
        )

    def test_signatures(self, document):
        signatures = document.section("signatures")
        assert [f.value for f in signatures.fields] == ["FIRMA EMPLEADOR", "FIRMA TRABAJADOR"]

    def test_overtime_and_tax_lines_when_present(self, renderer, rates):
        item = make_item(
            overtime_amount=50000,
            gross_taxable=1062500,
            gratification_amount=212500,
            tax_deduction=1000,
            afp_deduction=109119,
            health_deduction=74375,
            afc_deduction=6375,
            net_pay=1062500 + 15000 - 109119 - 74375 - 6375 - 1000,
        )
        document = renderer.render(item, "2026-10", rates)

        assert document.section("earnings").get("Horas Extras") == "$50.000"
        assert document.section("deductions").get("Impuesto Único") == "$1.000"


class TestDocumentOutput:
    def test_file_name(self, document):
        assert document.file_name == "liquidacion_Juan_Pérez_Soto_2026-10.html"

    def test_file_name_collapses_whitespace(self):
        assert payslip_file_name("Ana   María\tRojas", "2026-01") == "liquidacion_Ana_María_Rojas_2026-01.html"

    def test_html_contains_sections_and_escapes(self, renderer, rates):
        document = renderer.render(make_item(position="<b>Jefe</b>"), "2026-10", rates)

        output = document.to_html()

        assert output.startswith("<!DOCTYPE html>")
        assert "LIQUIDACIÓN DE SUELDO" in output
        assert "$836.300" in output
        assert "&lt;b&gt;Jefe&lt;/b&gt;" in output
        assert "<b>Jefe</b>" not in output

    def test_to_dict(self, document):
        data = document.to_dict()

        assert data["fileName"] == document.file_name
        assert [s["name"] for s in data["sections"]] == list(SECTION_ORDER)


class TestRenderFailures:
    def test_negative_net_pay_cannot_be_spelled(self, renderer, rates):
        item = make_item(tax_deduction=2_000_000, net_pay=836300 - 2_000_000)

        with pytest.raises(RenderFailureError) as exc_info:
            renderer.render(item, "2026-10", rates)

        assert exc_info.value.employee_name == "Juan Pérez Soto"

    def test_invalid_period(self, renderer, rates):
        with pytest.raises(RenderFailureError):
            renderer.render(make_item(), "2026-13", rates)
