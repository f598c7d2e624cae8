"""Pay slip rendering."""

from nomina_engine.rendering.amount_to_words import InvalidArgumentError, to_words
from nomina_engine.rendering.formatting import format_clp, format_percent, month_name
from nomina_engine.rendering.payslip import (
    SECTION_ORDER,
    PayslipDocument,
    PayslipField,
    PayslipRenderer,
    PayslipSection,
    RenderFailureError,
    payslip_file_name,
)

__all__ = [
    "InvalidArgumentError",
    "to_words",
    "format_clp",
    "format_percent",
    "month_name",
    "SECTION_ORDER",
    "PayslipDocument",
    "PayslipField",
    "PayslipRenderer",
    "PayslipSection",
    "RenderFailureError",
    "payslip_file_name",
]
