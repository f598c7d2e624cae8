"""Statutory rate set resolution."""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nomina_engine.calculators.types import PayPeriod, ResolvedRates
from nomina_engine.errors import PayrollError
from nomina_engine.models import RateSet


class RateNotConfiguredError(PayrollError):
    """Raised when no rate set exists for a tenant and period."""

    code = "RATE_NOT_CONFIGURED"
    status_code = 404

    def __init__(self, tenant_id: UUID, period: str):
        self.tenant_id = tenant_id
        self.period = period
        super().__init__(f"No payroll rates configured for period {period}")


class RateResolver:
    """Resolves the rate set of a period.

    There is exactly one rate set per (tenant, period). A missing row is
    fatal for the caller: no defaults are substituted.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def resolve(self, tenant_id: UUID, period: str) -> RateSet:
        """Get the rate set for a tenant and period.

        Raises:
            InvalidPeriodError: If ``period`` is not ``YYYY-MM``
            RateNotConfiguredError: If no rate set exists
        """
        PayPeriod.parse(period)

        result = await self.session.execute(
            select(RateSet).where(
                RateSet.tenant_id == tenant_id,
                RateSet.period == period,
            )
        )
        rate_set = result.scalar_one_or_none()
        if rate_set is None:
            raise RateNotConfiguredError(tenant_id, period)
        return rate_set

    async def resolve_by_id(self, tenant_id: UUID, rate_set_id: UUID, period: str) -> RateSet:
        """Get the rate set a run references, scoped to the tenant."""
        result = await self.session.execute(
            select(RateSet).where(
                RateSet.rate_set_id == rate_set_id,
                RateSet.tenant_id == tenant_id,
            )
        )
        rate_set = result.scalar_one_or_none()
        if rate_set is None:
            raise RateNotConfiguredError(tenant_id, period)
        return rate_set

    @staticmethod
    def resolve_rates(rate_set: RateSet) -> ResolvedRates:
        """Convert a rate set into calculator inputs.

        Caps are stored as UF multiples and are converted to whole pesos
        here, rounded down, before any comparison against an amount. A
        capped amount therefore never rounds above its cap.
        """
        uf_value = Decimal(rate_set.uf_value)

        def to_pesos(cap) -> Decimal:
            return (Decimal(cap) * uf_value).quantize(Decimal("1"), rounding=ROUND_FLOOR)

        return ResolvedRates(
            period=rate_set.period,
            utm_value=Decimal(rate_set.utm_value),
            gratification_rate=Decimal(rate_set.gratification_rate),
            gratification_cap=to_pesos(rate_set.gratification_cap),
            family_allowance_amount=Decimal(rate_set.family_allowance_amount),
            afp_worker_rate=Decimal(rate_set.afp_worker_rate),
            afp_cap=to_pesos(rate_set.afp_taxable_cap),
            fonasa_rate=Decimal(rate_set.fonasa_rate),
            health_cap=to_pesos(rate_set.health_taxable_cap),
            afc_worker_indefinite=Decimal(rate_set.afc_worker_indefinite),
            afc_worker_fixed_term=Decimal(rate_set.afc_worker_fixed_term),
        )
