"""Spanish cardinal spelling of peso amounts."""

from __future__ import annotations

from decimal import Decimal

from nomina_engine.errors import PayrollError

UNITS = ("", "UNO", "DOS", "TRES", "CUATRO", "CINCO", "SEIS", "SIETE", "OCHO", "NUEVE")
TEENS = (
    "DIEZ",
    "ONCE",
    "DOCE",
    "TRECE",
    "CATORCE",
    "QUINCE",
    "DIECISEIS",
    "DIECISIETE",
    "DIECIOCHO",
    "DIECINUEVE",
)
TENS = (
    "",
    "",
    "VEINTE",
    "TREINTA",
    "CUARENTA",
    "CINCUENTA",
    "SESENTA",
    "SETENTA",
    "OCHENTA",
    "NOVENTA",
)
HUNDREDS = (
    "",
    "CIENTO",
    "DOSCIENTOS",
    "TRESCIENTOS",
    "CUATROCIENTOS",
    "QUINIENTOS",
    "SEISCIENTOS",
    "SETECIENTOS",
    "OCHOCIENTOS",
    "NOVECIENTOS",
)

THOUSAND = 1_000
MILLION = 1_000_000


class InvalidArgumentError(PayrollError, ValueError):
    """Raised when an amount cannot be spelled out."""

    code = "INVALID_ARGUMENT"
    status_code = 422

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Expected a non-negative integer, got {value!r}")


def _as_int(n: object) -> int:
    # bool is an int subclass but never an amount
    if isinstance(n, bool):
        raise InvalidArgumentError(n)
    if isinstance(n, int):
        value = n
    elif isinstance(n, Decimal) and n.is_finite() and n == n.to_integral_value():
        value = int(n)
    else:
        raise InvalidArgumentError(n)
    if value < 0:
        raise InvalidArgumentError(n)
    return value


def _below_hundred(n: int) -> str:
    if n < 10:
        return UNITS[n]
    if n < 20:
        return TEENS[n - 10]
    tens, units = divmod(n, 10)
    if units == 0:
        return TENS[tens]
    return f"{TENS[tens]} Y {UNITS[units]}"


def _below_thousand(n: int) -> str:
    if n == 100:
        return "CIEN"
    hundreds, rest = divmod(n, 100)
    parts = []
    if hundreds:
        parts.append(HUNDREDS[hundreds])
    if rest:
        parts.append(_below_hundred(rest))
    return " ".join(parts)


def _apocope(words: str) -> str:
    """UNO becomes UN in front of MIL or MILLONES."""
    if words.endswith("UNO"):
        return words[:-1]
    return words


def _spell(n: int) -> str:
    if n >= MILLION:
        millions, rest = divmod(n, MILLION)
        head = "UN MILLON" if millions == 1 else f"{_apocope(_spell(millions))} MILLONES"
        return f"{head} {_spell(rest)}" if rest else head

    if n >= THOUSAND:
        thousands, rest = divmod(n, THOUSAND)
        head = "MIL" if thousands == 1 else f"{_apocope(_below_thousand(thousands))} MIL"
        return f"{head} {_spell(rest)}" if rest else head

    return _below_thousand(n)


def to_words(n: int) -> str:
    """Spell out a non-negative integer in uppercase Spanish.

    >>> to_words(2500000)
    'DOS MILLONES QUINIENTOS MIL'

    Raises:
        InvalidArgumentError: If ``n`` is negative or not an integer
    """
    value = _as_int(n)
    if value == 0:
        return "CERO"
    return _spell(value)
