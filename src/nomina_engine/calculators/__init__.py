"""Payroll calculation engine."""

from nomina_engine.calculators.engine import PayrollCalculator
from nomina_engine.calculators.line_builder import LineItemBuilder
from nomina_engine.calculators.rate_resolver import RateNotConfiguredError, RateResolver
from nomina_engine.calculators.types import (
    AttendanceSummary,
    EmployeeSnapshot,
    InvalidPeriodError,
    LineItemResult,
    PayPeriod,
    ResolvedRates,
    RunCalculation,
    RunTotals,
)

__all__ = [
    "PayrollCalculator",
    "LineItemBuilder",
    "RateResolver",
    "RateNotConfiguredError",
    "AttendanceSummary",
    "EmployeeSnapshot",
    "InvalidPeriodError",
    "LineItemResult",
    "PayPeriod",
    "ResolvedRates",
    "RunCalculation",
    "RunTotals",
]
