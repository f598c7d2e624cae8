"""Tests for rate set management."""

from decimal import Decimal

import pytest

from nomina_engine.calculators import InvalidPeriodError
from nomina_engine.errors import ConflictError
from nomina_engine.services.rate_set_service import RateSetService


class TestRateSetService:
    async def test_defaults_applied(self, session, tenant_id):
        rate_set = await RateSetService(session).create_rate_set(tenant_id, "2026-10")

        assert rate_set.minimum_wage == 500000
        assert rate_set.uf_value == Decimal("37000")
        assert rate_set.afp_worker_rate == Decimal("0.1027")
        assert rate_set.gratification_cap == Decimal("4.75")
        assert rate_set.afp_taxable_cap == Decimal("85.1")

    async def test_overrides(self, session, tenant_id):
        rate_set = await RateSetService(session).create_rate_set(
            tenant_id, "2026-10", uf_value=Decimal("38000"), fonasa_rate=None
        )

        assert rate_set.uf_value == Decimal("38000")
        assert rate_set.fonasa_rate == Decimal("0.07")

    async def test_unknown_field_rejected(self, session, tenant_id):
        with pytest.raises(ValueError):
            await RateSetService(session).create_rate_set(tenant_id, "2026-10", bonus_rate=Decimal("1"))

    async def test_duplicate_period(self, session, tenant_id):
        service = RateSetService(session)
        await service.create_rate_set(tenant_id, "2026-10")

        with pytest.raises(ConflictError):
            await service.create_rate_set(tenant_id, "2026-10")

    async def test_invalid_period(self, session, tenant_id):
        with pytest.raises(InvalidPeriodError):
            await RateSetService(session).create_rate_set(tenant_id, "octubre")

    async def test_list_newest_first(self, session, tenant_id):
        service = RateSetService(session)
        for period in ("2026-08", "2026-10", "2026-09"):
            await service.create_rate_set(tenant_id, period)

        rate_sets = await service.list_rate_sets(tenant_id)

        assert [r.period for r in rate_sets] == ["2026-10", "2026-09", "2026-08"]
