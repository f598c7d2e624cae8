"""Pytest fixtures for nomina engine tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import AsyncGenerator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from nomina_engine.calculators import ResolvedRates
from nomina_engine.models import (
    ApprovalStatus,
    AttendanceRecord,
    Base,
    ContractType,
    Employee,
    EmployeeStatus,
    RateSet,
)
from nomina_engine.rendering import PayslipRenderer
from nomina_engine.services.rate_set_service import DEFAULT_RATES

# In-memory SQLite shared by every connection of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PERIOD = "2026-10"


@pytest.fixture
async def engine():
    """Create a fresh test database per test (services commit)."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def tenant_id() -> UUID:
    return uuid4()


@pytest.fixture
def renderer() -> PayslipRenderer:
    return PayslipRenderer(
        employer_name="WAYCO LIMITADA",
        employer_rut="76.123.456-7",
        employer_address="Av. Principal 123, Santiago",
    )


@pytest.fixture
def scenario_rates() -> ResolvedRates:
    """Rates of the reference scenario, caps already in pesos."""
    return ResolvedRates(
        period=TEST_PERIOD,
        utm_value=Decimal("65000"),
        gratification_rate=Decimal("0.25"),
        gratification_cap=Decimal("4750000000"),
        family_allowance_amount=Decimal("15000"),
        afp_worker_rate=Decimal("0.1027"),
        afp_cap=Decimal("3148700"),
        fonasa_rate=Decimal("0.07"),
        health_cap=Decimal("3148700"),
        afc_worker_indefinite=Decimal("0.006"),
        afc_worker_fixed_term=Decimal("0.008"),
    )


@pytest.fixture
def add_rate_set(session: AsyncSession, tenant_id: UUID):
    """Factory: store a rate set for the test tenant."""

    async def _add(period: str = TEST_PERIOD, tenant: UUID | None = None, **overrides) -> RateSet:
        rate_set = RateSet(
            tenant_id=tenant or tenant_id,
            period=period,
            **{**DEFAULT_RATES, **overrides},
        )
        session.add(rate_set)
        await session.flush()
        return rate_set

    return _add


@pytest.fixture
async def rate_set(add_rate_set) -> RateSet:
    """Rate set of TEST_PERIOD with an effectively unlimited gratification cap."""
    return await add_rate_set(gratification_cap=Decimal("1000"))


@pytest.fixture
def add_employee(session: AsyncSession, tenant_id: UUID):
    """Factory: store an employee for the test tenant."""

    async def _add(
        full_name: str,
        base_salary: int = 800000,
        contract_type: str = ContractType.INDEFINITE.value,
        status: str = EmployeeStatus.ACTIVE.value,
        email: str | None = None,
        national_id: str | None = "12.345.678-9",
        position: str | None = "Técnico",
        tenant: UUID | None = None,
    ) -> Employee:
        employee = Employee(
            tenant_id=tenant or tenant_id,
            full_name=full_name,
            national_id=national_id,
            position=position,
            email=email,
            base_salary=base_salary,
            contract_type=contract_type,
            status=status,
        )
        session.add(employee)
        await session.flush()
        return employee

    return _add


@pytest.fixture
def add_attendance(session: AsyncSession, tenant_id: UUID):
    """Factory: store attendance records, one per day."""

    async def _add(
        employee: Employee,
        days: list[date],
        normal_hours: Decimal = Decimal("8"),
        overtime_hours: Decimal = Decimal("0"),
        approval_status: str = ApprovalStatus.APPROVED.value,
    ) -> list[AttendanceRecord]:
        records = [
            AttendanceRecord(
                tenant_id=employee.tenant_id,
                employee_id=employee.employee_id,
                work_date=day,
                normal_hours=normal_hours,
                overtime_hours=overtime_hours,
                approval_status=approval_status,
            )
            for day in days
        ]
        session.add_all(records)
        await session.flush()
        return records

    return _add

