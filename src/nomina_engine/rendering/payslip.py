"""Pay slip (liquidación de sueldo) rendering.

A pay slip is an ordered list of named sections, each holding labelled
fields. The section order and field content are fixed; ``to_html`` is one
backend for turning the document into something printable.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from nomina_engine.calculators.types import PayPeriod
from nomina_engine.errors import PayrollError
from nomina_engine.rendering.amount_to_words import to_words
from nomina_engine.rendering.formatting import (
    format_clp,
    format_date,
    format_hours,
    format_percent,
    month_name,
)

if TYPE_CHECKING:
    from nomina_engine.config import Settings
    from nomina_engine.models import PayrollLineItem, RateSet

logger = logging.getLogger(__name__)

SECTION_ORDER = (
    "masthead",
    "title",
    "employer",
    "employee",
    "contributions",
    "work_summary",
    "earnings",
    "deductions",
    "closing",
    "amount_in_words",
    "acknowledgement",
    "signatures",
)

DOCUMENT_TITLE = "LIQUIDACIÓN DE SUELDO"

ACKNOWLEDGEMENT = (
    "Certifico que he recibido de mi empleador, a mi entera satisfacción, el "
    "total líquido indicado en la presente liquidación y que no tengo cargo ni "
    "cobro alguno posterior que hacer por los conceptos en ella señalados."
)

_WHITESPACE = re.compile(r"\s+")


class RenderFailureError(PayrollError):
    """Raised when one employee's pay slip cannot be rendered."""

    code = "RENDER_FAILURE"
    status_code = 500

    def __init__(self, employee_name: str, reason: str):
        self.employee_name = employee_name
        self.reason = reason
        super().__init__(f"Could not render pay slip for {employee_name}: {reason}")


@dataclass(frozen=True)
class PayslipField:
    label: str
    value: str


@dataclass(frozen=True)
class PayslipSection:
    name: str
    title: str
    fields: tuple[PayslipField, ...] = ()

    def get(self, label: str) -> str | None:
        """Value of the first field with ``label``."""
        for f in self.fields:
            if f.label == label:
                return f.value
        return None


@dataclass(frozen=True)
class PayslipDocument:
    """A rendered pay slip."""

    employee_name: str
    period: str
    file_name: str
    sections: tuple[PayslipSection, ...] = field(default_factory=tuple)

    def section(self, name: str) -> PayslipSection:
        for s in self.sections:
            if s.name == name:
                return s
        raise KeyError(name)

    def to_dict(self) -> dict:
        return {
            "employeeName": self.employee_name,
            "period": self.period,
            "fileName": self.file_name,
            "sections": [
                {
                    "name": s.name,
                    "title": s.title,
                    "fields": [{"label": f.label, "value": f.value} for f in s.fields],
                }
                for s in self.sections
            ],
        }

    def to_html(self) -> str:
        """Printable HTML, one block per section in document order."""
        blocks = []
        for s in self.sections:
            rows = "\n".join(
                f'<tr><td>{html.escape(f.label)}</td><td class="value">{html.escape(f.value)}</td></tr>'
                for f in s.fields
            )
            title = f"<h2>{html.escape(s.title)}</h2>" if s.title else ""
            blocks.append(
                f'<section class="{s.name}">{title}<table class="table">{rows}</table></section>'
            )
        body = "\n".join(blocks)
        return (
            "<!DOCTYPE html>\n"
            '<html lang="es">\n<head>\n<meta charset="UTF-8">\n'
            f"<title>{html.escape(DOCUMENT_TITLE)} {html.escape(self.period)}</title>\n"
            f"<style>{_STYLE}</style>\n</head>\n<body>\n{body}\n</body>\n</html>\n"
        )


_STYLE = (
    "body { font-family: Arial, sans-serif; font-size: 11px; margin: 20px; }"
    " h2 { font-size: 12px; margin: 12px 0 4px; }"
    " .masthead, .title { text-align: center; }"
    " .title h2 { font-size: 14px; }"
    " .table { width: 100%; border-collapse: collapse; }"
    " .table td { border: 1px solid #000; padding: 4px 6px; }"
    " .value { text-align: right; }"
    " .signatures .table td { border: none; border-top: 1px solid #000; text-align: center; padding-top: 40px; }"
)


def payslip_file_name(employee_name: str, period: str) -> str:
    """liquidacion_<name with underscores>_<period>.html"""
    return f"liquidacion_{_WHITESPACE.sub('_', employee_name.strip())}_{period}.html"


class PayslipRenderer:
    """Builds pay slip documents from stored line items."""

    def __init__(
        self,
        employer_name: str,
        employer_rut: str,
        employer_address: str,
        afp_scheme_name: str = "AFP",
        health_scheme_name: str = "FONASA",
    ):
        self.employer_name = employer_name
        self.employer_rut = employer_rut
        self.employer_address = employer_address
        self.afp_scheme_name = afp_scheme_name
        self.health_scheme_name = health_scheme_name

    @classmethod
    def from_settings(cls, settings: Settings) -> PayslipRenderer:
        return cls(
            employer_name=settings.employer_name,
            employer_rut=settings.employer_rut,
            employer_address=settings.employer_address,
            afp_scheme_name=settings.afp_scheme_name,
            health_scheme_name=settings.health_scheme_name,
        )

    def render(
        self,
        line_item: PayrollLineItem,
        period: str,
        rate_set: RateSet,
        issue_date: date | None = None,
    ) -> PayslipDocument:
        """Render one line item.

        Raises:
            RenderFailureError: If the line item cannot be laid out
        """
        employee_name = line_item.employee_name or ""
        try:
            pay_period = PayPeriod.parse(period)
            sections = self._build_sections(
                line_item, pay_period, rate_set, issue_date or date.today()
            )
        except (PayrollError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Pay slip rendering failed for %s: %s", employee_name, exc)
            raise RenderFailureError(employee_name, str(exc)) from exc

        return PayslipDocument(
            employee_name=employee_name,
            period=period,
            file_name=payslip_file_name(employee_name, period),
            sections=sections,
        )

    @staticmethod
    def sequence_code(line_item: PayrollLineItem) -> str:
        """Short reference printed on the slip: first 8 hex digits of the item id."""
        if line_item.payroll_line_item_id is None:
            return ""
        return line_item.payroll_line_item_id.hex[:8].upper()

    def _build_sections(
        self,
        item: PayrollLineItem,
        period: PayPeriod,
        rate_set: RateSet,
        issue_date: date,
    ) -> tuple[PayslipSection, ...]:
        legal_deductions = item.total_deductions - item.tax_deduction

        earnings = [PayslipField("Sueldo Base", format_clp(item.base_salary))]
        if item.overtime_amount > 0:
            earnings.append(PayslipField("Horas Extras", format_clp(item.overtime_amount)))
        earnings += [
            PayslipField("Gratificación Legal", format_clp(item.gratification_amount)),
            PayslipField("Total Imponible", format_clp(item.gross_taxable)),
            PayslipField("Total No Imponible", format_clp(item.gross_non_taxable)),
        ]

        deductions = [
            PayslipField("Cotización Previsional", format_clp(item.afp_deduction)),
            PayslipField("Cotización Salud", format_clp(item.health_deduction)),
            PayslipField("Seguro de Cesantía", format_clp(item.afc_deduction)),
            PayslipField("Total Descuentos Legales", format_clp(legal_deductions)),
        ]
        if item.tax_deduction > 0:
            deductions.append(PayslipField("Impuesto Único", format_clp(item.tax_deduction)))

        return (
            PayslipSection(
                "masthead",
                "",
                (
                    PayslipField("Empresa", self.employer_name),
                    PayslipField("RUT", self.employer_rut),
                ),
            ),
            PayslipSection(
                "title",
                DOCUMENT_TITLE,
                (
                    PayslipField("Documento", DOCUMENT_TITLE),
                    PayslipField("Período", f"{month_name(period.month)} {period.year}"),
                ),
            ),
            PayslipSection(
                "employer",
                "DATOS DEL EMPLEADOR",
                (
                    PayslipField("Razón Social", self.employer_name),
                    PayslipField("RUT", self.employer_rut),
                    PayslipField("Dirección", self.employer_address),
                ),
            ),
            PayslipSection(
                "employee",
                "DATOS DEL TRABAJADOR",
                (
                    PayslipField("Nombre", item.employee_name.upper()),
                    PayslipField("RUT", item.employee_national_id or ""),
                    PayslipField("Cargo", item.position or ""),
                    PayslipField("Código", self.sequence_code(item)),
                ),
            ),
            PayslipSection(
                "contributions",
                "PREVISIÓN",
                (
                    PayslipField("AFP", self.afp_scheme_name),
                    PayslipField("% AFP", format_percent(rate_set.afp_worker_rate)),
                    PayslipField("Monto AFP", format_clp(item.afp_deduction)),
                    PayslipField("Salud", self.health_scheme_name),
                    PayslipField("% Salud", format_percent(rate_set.fonasa_rate)),
                    PayslipField("Monto Salud", format_clp(item.health_deduction)),
                ),
            ),
            PayslipSection(
                "work_summary",
                "RESUMEN",
                (
                    PayslipField("Días Trabajados", str(item.worked_days)),
                    PayslipField("Horas Extras", format_hours(item.overtime_hours)),
                    PayslipField("Horas de Ausencia", "0"),
                    PayslipField("Cargas Familiares", "0"),
                    PayslipField("Total Imponible", format_clp(item.gross_taxable)),
                    PayslipField("Total Líquido", format_clp(item.net_pay)),
                ),
            ),
            PayslipSection("earnings", "HABERES", tuple(earnings)),
            PayslipSection("deductions", "DESCUENTOS", tuple(deductions)),
            PayslipSection(
                "closing",
                "TOTALES",
                (
                    PayslipField("Total Haberes", format_clp(item.total_earnings)),
                    PayslipField("Total Descuentos", format_clp(item.total_deductions)),
                    PayslipField("Fecha de Emisión", format_date(issue_date)),
                    PayslipField("Líquido a Pagar", format_clp(item.net_pay)),
                ),
            ),
            PayslipSection(
                "amount_in_words",
                "",
                (PayslipField("Son", f"{to_words(item.net_pay)} PESOS"),),
            ),
            PayslipSection(
                "acknowledgement",
                "",
                (PayslipField("Declaración", ACKNOWLEDGEMENT),),
            ),
            PayslipSection(
                "signatures",
                "",
                (
                    PayslipField("Empleador", "FIRMA EMPLEADOR"),
                    PayslipField("Trabajador", "FIRMA TRABAJADOR"),
                ),
            ),
        )
