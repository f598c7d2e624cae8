"""Payroll calculation engine."""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal
from functools import reduce
from typing import Iterable, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nomina_engine.calculators.line_builder import LineItemBuilder
from nomina_engine.calculators.types import (
    AttendanceSummary,
    EmployeeSnapshot,
    LineItemResult,
    PayPeriod,
    ResolvedRates,
    RunCalculation,
)
from nomina_engine.models import (
    ApprovalStatus,
    AttendanceRecord,
    Employee,
    EmployeeStatus,
    PayrollRun,
)

logger = logging.getLogger(__name__)


class PayrollCalculator:
    """Computes line items and run totals for a payroll run.

    Calculation pipeline (stable order per employee):
    1) Attendance: worked days, normal hours, overtime hours
    2) Daily salary on a fixed 30-day month
    3) Normal pay = daily salary * worked days
    4) Overtime at 1.5x the hourly rate of an 8-hour day
    5) Taxable income = normal pay + overtime
    6) Gratification, capped
    7) Gross taxable = normal pay + overtime + gratification
    8) Gross non-taxable = family allowance (flat)
    9) AFP, capped
    10) Health, capped
    11) AFC by contract type, uncapped
    12) Simplified income tax: 5% of (gross - AFP - health) above 13.5 UTM
    13) Net from the rounded components
    """

    MONTH_DAYS = Decimal("30")
    WORKDAY_HOURS = Decimal("8")
    OVERTIME_PREMIUM = Decimal("1.5")
    TAX_RATE = Decimal("0.05")
    TAX_THRESHOLD_UTM = Decimal("13.5")

    def __init__(self, session: AsyncSession):
        self.session = session

    async def calculate(self, run: PayrollRun, rates: ResolvedRates) -> RunCalculation:
        """Load the run's inputs and fold the calculator over them."""
        period = PayPeriod.parse(run.period)
        employees = await self._get_active_employees(run.tenant_id)
        attendance = await self._get_approved_attendance(
            run.tenant_id, [e.employee_id for e in employees], period
        )
        logger.info(
            "Calculating payroll run %s (%s): %d active employees",
            run.payroll_run_id,
            run.period,
            len(employees),
        )
        return self.calculate_run(employees, attendance, rates)

    @classmethod
    def calculate_run(
        cls,
        employees: Iterable[EmployeeSnapshot],
        attendance: Mapping[UUID, AttendanceSummary],
        rates: ResolvedRates,
    ) -> RunCalculation:
        """Fold over employees producing line items and totals."""
        return reduce(
            lambda acc, emp: acc.append(
                cls.calculate_employee(
                    emp, attendance.get(emp.employee_id, AttendanceSummary()), rates
                )
            ),
            employees,
            RunCalculation(),
        )

    @classmethod
    def calculate_employee(
        cls,
        employee: EmployeeSnapshot,
        attendance: AttendanceSummary,
        rates: ResolvedRates,
    ) -> LineItemResult:
        """Calculate one employee's pay. Pure function of its inputs."""
        base_salary = Decimal(employee.base_salary)

        # 2-3) Normal pay
        daily_salary = base_salary / cls.MONTH_DAYS
        normal_pay = daily_salary * attendance.worked_days

        # 4) Overtime accrues from hours alone, even with zero worked days
        overtime_hourly_rate = (base_salary / cls.MONTH_DAYS / cls.WORKDAY_HOURS) * cls.OVERTIME_PREMIUM
        overtime_amount = attendance.overtime_hours * overtime_hourly_rate

        # 5-6) Gratification
        taxable_income = normal_pay + overtime_amount
        gratification = min(taxable_income * rates.gratification_rate, rates.gratification_cap)

        # 7-8) Gross
        gross_taxable = normal_pay + overtime_amount + gratification
        gross_non_taxable = rates.family_allowance_amount

        # 9-11) Social security
        afp = min(gross_taxable * rates.afp_worker_rate, rates.afp_cap)
        health = min(gross_taxable * rates.fonasa_rate, rates.health_cap)
        afc = gross_taxable * rates.afc_rate_for(employee.contract_type)

        # 12) Simplified tax
        tax_base = gross_taxable - afp - health
        if tax_base > rates.utm_value * cls.TAX_THRESHOLD_UTM:
            tax = tax_base * cls.TAX_RATE
        else:
            tax = Decimal("0")

        # 13) Round outputs, derive net from the rounded figures
        r = LineItemBuilder.round_to_peso
        gross_taxable_out = r(gross_taxable)
        gross_non_taxable_out = r(gross_non_taxable)
        afp_out = r(afp)
        health_out = r(health)
        afc_out = r(afc)
        tax_out = r(tax)

        return LineItemResult(
            employee=employee,
            attendance=attendance,
            base_salary=r(base_salary),
            overtime_amount=r(overtime_amount),
            gratification_amount=r(gratification),
            family_allowance_amount=gross_non_taxable_out,
            gross_taxable=gross_taxable_out,
            gross_non_taxable=gross_non_taxable_out,
            afp_deduction=afp_out,
            health_deduction=health_out,
            afc_deduction=afc_out,
            tax_deduction=tax_out,
            net_pay=LineItemBuilder.net_from_components(
                gross_taxable_out,
                gross_non_taxable_out,
                afp_out,
                health_out,
                afc_out,
                tax_out,
            ),
        )

    # === Data Loading Methods ===

    async def _get_active_employees(self, tenant_id: UUID) -> list[EmployeeSnapshot]:
        """Get active employees of a tenant as immutable snapshots."""
        result = await self.session.execute(
            select(Employee)
            .where(
                Employee.tenant_id == tenant_id,
                Employee.status == EmployeeStatus.ACTIVE.value,
            )
            .order_by(Employee.full_name, Employee.employee_id)
        )
        return [
            EmployeeSnapshot(
                employee_id=e.employee_id,
                full_name=e.full_name,
                national_id=e.national_id,
                position=e.position,
                base_salary=Decimal(e.base_salary or 0),
                contract_type=e.contract_type,
            )
            for e in result.scalars().all()
        ]

    async def _get_approved_attendance(
        self,
        tenant_id: UUID,
        employee_ids: list[UUID],
        period: PayPeriod,
    ) -> dict[UUID, AttendanceSummary]:
        """Get approved attendance inside the period, summarized per employee."""
        if not employee_ids:
            return {}

        result = await self.session.execute(
            select(
                AttendanceRecord.employee_id,
                AttendanceRecord.normal_hours,
                AttendanceRecord.overtime_hours,
            ).where(
                AttendanceRecord.tenant_id == tenant_id,
                AttendanceRecord.employee_id.in_(employee_ids),
                AttendanceRecord.approval_status == ApprovalStatus.APPROVED.value,
                AttendanceRecord.work_date >= period.start,
                AttendanceRecord.work_date <= period.end,
            )
        )

        grouped: dict[UUID, list[tuple[Decimal, Decimal]]] = defaultdict(list)
        for employee_id, normal_hours, overtime_hours in result.all():
            grouped[employee_id].append((normal_hours, overtime_hours))

        return {
            employee_id: AttendanceSummary.from_records(records)
            for employee_id, records in grouped.items()
        }
