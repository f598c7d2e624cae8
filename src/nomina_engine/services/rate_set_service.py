"""Rate set management."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nomina_engine.calculators import PayPeriod
from nomina_engine.errors import ConflictError
from nomina_engine.models import RateSet

logger = logging.getLogger(__name__)

# Reference values for a new period; callers override what changed
DEFAULT_RATES: dict[str, Any] = {
    "minimum_wage": 500000,
    "uf_value": Decimal("37000"),
    "utm_value": Decimal("65000"),
    "afp_worker_rate": Decimal("0.1027"),
    "afp_employer_rate": Decimal("0"),
    "fonasa_rate": Decimal("0.07"),
    "afc_worker_indefinite": Decimal("0.006"),
    "afc_worker_fixed_term": Decimal("0.008"),
    "afc_employer_indefinite": Decimal("0.024"),
    "afc_employer_fixed_term": Decimal("0.03"),
    "accident_rate": Decimal("0.0095"),
    "gratification_rate": Decimal("0.25"),
    "gratification_cap": Decimal("4.75"),
    "family_allowance_amount": 15000,
    "afp_taxable_cap": Decimal("85.1"),
    "health_taxable_cap": Decimal("85.1"),
}


class RateSetService:
    """Create and list a tenant's rate sets. Rate sets are never updated."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_rate_set(self, tenant_id: UUID, period: str, **values: Any) -> RateSet:
        """Create the rate set of ``period``, filling unspecified values with defaults.

        Raises:
            InvalidPeriodError: If ``period`` is malformed
            ConflictError: If the period already has a rate set
        """
        period = str(PayPeriod.parse(period))

        unknown = set(values) - set(DEFAULT_RATES)
        if unknown:
            raise ValueError(f"Unknown rate fields: {', '.join(sorted(unknown))}")

        existing = await self.session.execute(
            select(RateSet.rate_set_id).where(
                RateSet.tenant_id == tenant_id,
                RateSet.period == period,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(f"Rates for period {period} already exist")

        fields = {**DEFAULT_RATES, **{k: v for k, v in values.items() if v is not None}}
        rate_set = RateSet(tenant_id=tenant_id, period=period, **fields)
        self.session.add(rate_set)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError(f"Rates for period {period} already exist") from exc

        logger.info("Created rate set for tenant %s period %s", tenant_id, period)
        return rate_set

    async def list_rate_sets(self, tenant_id: UUID) -> list[RateSet]:
        """List a tenant's rate sets, newest period first."""
        result = await self.session.execute(
            select(RateSet)
            .where(RateSet.tenant_id == tenant_id)
            .order_by(RateSet.period.desc())
        )
        return list(result.scalars().all())
