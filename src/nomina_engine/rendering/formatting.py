"""es-CL number and date formatting for pay slips."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

MONTH_NAMES = (
    "Enero",
    "Febrero",
    "Marzo",
    "Abril",
    "Mayo",
    "Junio",
    "Julio",
    "Agosto",
    "Septiembre",
    "Octubre",
    "Noviembre",
    "Diciembre",
)


def group_thousands(value: int) -> str:
    """1234567 -> '1.234.567'."""
    sign = "-" if value < 0 else ""
    return sign + f"{abs(int(value)):,}".replace(",", ".")


def format_clp(value: int) -> str:
    """Whole pesos with '.' as thousands separator: 1234567 -> '$1.234.567'."""
    if value < 0:
        return f"-${group_thousands(-value)}"
    return f"${group_thousands(value)}"


def format_percent(rate: Decimal) -> str:
    """Fraction to a two-decimal percentage with comma decimals: 0.1027 -> '10,27%'."""
    pct = (Decimal(rate) * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{pct}%".replace(".", ",")


def format_hours(hours: Decimal) -> str:
    """Hours with two decimals and a comma: 7.5 -> '7,50'."""
    return str(Decimal(hours).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)).replace(".", ",")


def format_date(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]
