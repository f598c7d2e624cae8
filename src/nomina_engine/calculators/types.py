"""Type definitions for the calculation pipeline."""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from nomina_engine.errors import PayrollError
from nomina_engine.models.personnel import ContractType

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


class InvalidPeriodError(PayrollError, ValueError):
    """Raised when a period string is not a valid ``YYYY-MM`` month."""

    code = "INVALID_PERIOD"
    status_code = 422

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Invalid period '{period}', expected YYYY-MM")


@dataclass(frozen=True)
class PayPeriod:
    """A calendar month, first through last day inclusive."""

    year: int
    month: int

    @classmethod
    def parse(cls, period: str) -> PayPeriod:
        match = _PERIOD_RE.match(period or "")
        if match is None:
            raise InvalidPeriodError(period)
        year, month = int(match.group(1)), int(match.group(2))
        if year < 1 or not 1 <= month <= 12:
            raise InvalidPeriodError(period)
        return cls(year=year, month=month)

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class ResolvedRates:
    """Rate set values needed by the calculator, caps already in pesos."""

    period: str
    utm_value: Decimal
    gratification_rate: Decimal
    gratification_cap: Decimal
    family_allowance_amount: Decimal
    afp_worker_rate: Decimal
    afp_cap: Decimal
    fonasa_rate: Decimal
    health_cap: Decimal
    afc_worker_indefinite: Decimal
    afc_worker_fixed_term: Decimal

    def afc_rate_for(self, contract_type: str) -> Decimal:
        """Worker unemployment-insurance rate for a contract type."""
        if contract_type == ContractType.INDEFINITE.value:
            return self.afc_worker_indefinite
        return self.afc_worker_fixed_term


@dataclass(frozen=True)
class EmployeeSnapshot:
    """Employee identity and pay data captured at calculation time."""

    employee_id: UUID
    full_name: str
    national_id: str | None
    position: str | None
    base_salary: Decimal
    contract_type: str


@dataclass(frozen=True)
class AttendanceSummary:
    """Aggregated approved attendance for one employee and period."""

    worked_days: int = 0
    normal_hours: Decimal = Decimal("0")
    overtime_hours: Decimal = Decimal("0")

    @classmethod
    def from_records(cls, records: Iterable[tuple[Decimal, Decimal]]) -> AttendanceSummary:
        """Build from (normal_hours, overtime_hours) pairs, one per record."""
        worked_days = 0
        normal = Decimal("0")
        overtime = Decimal("0")
        for normal_hours, overtime_hours in records:
            worked_days += 1
            normal += Decimal(normal_hours or 0)
            overtime += Decimal(overtime_hours or 0)
        return cls(worked_days=worked_days, normal_hours=normal, overtime_hours=overtime)


@dataclass(frozen=True)
class LineItemResult:
    """Computed payroll line for one employee (whole pesos)."""

    employee: EmployeeSnapshot
    attendance: AttendanceSummary
    base_salary: int
    overtime_amount: int
    gratification_amount: int
    family_allowance_amount: int
    gross_taxable: int
    gross_non_taxable: int
    afp_deduction: int
    health_deduction: int
    afc_deduction: int
    tax_deduction: int
    net_pay: int

    @property
    def total_deductions(self) -> int:
        return self.afp_deduction + self.health_deduction + self.afc_deduction + self.tax_deduction

    @property
    def total_earnings(self) -> int:
        return self.gross_taxable + self.gross_non_taxable


@dataclass(frozen=True)
class RunTotals:
    """Aggregated totals of a payroll run."""

    total_employees: int = 0
    total_gross_pay: int = 0
    total_deductions: int = 0
    total_net_pay: int = 0

    def add(self, item: LineItemResult) -> RunTotals:
        """Return new totals including one more line item."""
        return RunTotals(
            total_employees=self.total_employees + 1,
            total_gross_pay=self.total_gross_pay + item.total_earnings,
            total_deductions=self.total_deductions + item.total_deductions,
            total_net_pay=self.total_net_pay + item.net_pay,
        )


@dataclass(frozen=True)
class RunCalculation:
    """Result of folding the calculator over a run's employees."""

    items: tuple[LineItemResult, ...] = ()
    totals: RunTotals = RunTotals()

    def append(self, item: LineItemResult) -> RunCalculation:
        return RunCalculation(items=self.items + (item,), totals=self.totals.add(item))
