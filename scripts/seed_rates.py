"""Seed script for a demo tenant.

Run with:
    python scripts/seed_rates.py [TENANT_ID] [PERIOD]

Creates the schema if needed, the period's rate set and a small roster of
employees with a month of approved attendance.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nomina_engine.calculators import PayPeriod
from nomina_engine.database import create_schema, dispose_db, get_session
from nomina_engine.models import AttendanceRecord, Employee, RateSet
from nomina_engine.services import RateSetService

DEMO_TENANT_ID = UUID("00000000-0000-4000-8000-000000000001")

ROSTER = [
    # name, RUT, position, email, base salary, contract
    ("Juan Pérez Soto", "12.345.678-9", "Técnico", "juan.perez@example.cl", 800000, "indefinite"),
    ("María González Rojas", "15.432.198-K", "Contadora", "maria.gonzalez@example.cl", 1200000, "indefinite"),
    ("Pedro Muñoz Vera", "18.765.432-1", "Operario", "pedro.munoz@example.cl", 550000, "fixed_term"),
    ("Camila Fuentes Díaz", "19.876.543-2", "Administrativa", None, 650000, "indefinite"),
]


async def seed_rate_set(session: AsyncSession, tenant_id: UUID, period: str) -> None:
    """Create the period's rate set with default values."""
    result = await session.execute(
        select(RateSet).where(RateSet.tenant_id == tenant_id, RateSet.period == period)
    )
    if result.scalar_one_or_none():
        print(f"Rates for {period} already exist, skipping...")
        return

    await RateSetService(session).create_rate_set(tenant_id, period)
    print(f"Created rate set for {period}")


async def seed_employees(session: AsyncSession, tenant_id: UUID, period: str) -> None:
    """Create the demo roster with approved weekday attendance for the period."""
    result = await session.execute(select(Employee).where(Employee.tenant_id == tenant_id))
    if result.scalars().first():
        print("Employees already exist, skipping...")
        return

    month = PayPeriod.parse(period)
    weekdays = [
        month.start + timedelta(days=offset)
        for offset in range((month.end - month.start).days + 1)
        if (month.start + timedelta(days=offset)).weekday() < 5
    ]

    for full_name, rut, position, email, salary, contract in ROSTER:
        employee = Employee(
            employee_id=uuid4(),
            tenant_id=tenant_id,
            full_name=full_name,
            national_id=rut,
            position=position,
            email=email,
            base_salary=salary,
            contract_type=contract,
        )
        session.add(employee)
        session.add_all(
            AttendanceRecord(
                tenant_id=tenant_id,
                employee_id=employee.employee_id,
                work_date=day,
                normal_hours=Decimal("9"),
                overtime_hours=Decimal("1") if day.weekday() == 4 else Decimal("0"),
                approval_status="approved",
            )
            for day in weekdays
        )
        print(f"Created employee {full_name} ({len(weekdays)} days)")

    await session.flush()


async def main():
    """Run seed script."""
    tenant_id = UUID(sys.argv[1]) if len(sys.argv) > 1 else DEMO_TENANT_ID
    period = sys.argv[2] if len(sys.argv) > 2 else date.today().strftime("%Y-%m")

    print(f"Seeding tenant {tenant_id} for {period}...")
    await create_schema()

    async with get_session() as session:
        await seed_rate_set(session, tenant_id, period)
        await seed_employees(session, tenant_id, period)

    await dispose_db()
    print("\nDone! Demo tenant seeded successfully.")


if __name__ == "__main__":
    asyncio.run(main())
