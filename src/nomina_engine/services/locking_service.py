"""Calculation lease on payroll runs."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from nomina_engine.config import get_settings
from nomina_engine.errors import PayrollError
from nomina_engine.models import PayrollRun

logger = logging.getLogger(__name__)


class CalculationInProgressError(PayrollError):
    """Raised when another calculation pass holds the run's lease."""

    code = "CALCULATION_IN_PROGRESS"
    status_code = 409

    def __init__(self, payroll_run_id: UUID):
        self.payroll_run_id = payroll_run_id
        super().__init__(f"Payroll run {payroll_run_id} is already being calculated")


class LockingService:
    """Service for the exclusive calculation lease on a payroll run.

    The lease is a pair of columns on the run row (``locked_by``,
    ``locked_at``) taken with a conditional UPDATE, so it works the same on
    every backend. A lease older than the TTL is considered abandoned and can
    be taken over. Acquire and release both commit immediately so the lease
    is visible to other sessions while the pass is running.
    """

    def __init__(self, session: AsyncSession, lease_seconds: int | None = None):
        self.session = session
        if lease_seconds is None:
            lease_seconds = get_settings().calculation_lease_seconds
        self.lease_seconds = lease_seconds

    async def acquire(self, payroll_run_id: UUID) -> str:
        """Take the lease, returning the owner token.

        Raises:
            CalculationInProgressError: If a live lease is held by someone else
        """
        token = uuid4().hex
        now = datetime.now(timezone.utc)
        stale_before = now - timedelta(seconds=self.lease_seconds)

        result = await self.session.execute(
            update(PayrollRun)
            .where(
                PayrollRun.payroll_run_id == payroll_run_id,
                or_(
                    PayrollRun.locked_by.is_(None),
                    PayrollRun.locked_at < stale_before,
                ),
            )
            .values(locked_by=token, locked_at=now)
            .execution_options(synchronize_session=False)
        )
        if (result.rowcount or 0) == 0:
            logger.warning("Calculation lease on run %s is held, refusing", payroll_run_id)
            raise CalculationInProgressError(payroll_run_id)

        await self.session.commit()
        logger.debug("Acquired calculation lease %s on run %s", token, payroll_run_id)
        return token

    async def release(self, payroll_run_id: UUID, token: str) -> bool:
        """Release the lease if ``token`` still owns it."""
        result = await self.session.execute(
            update(PayrollRun)
            .where(
                PayrollRun.payroll_run_id == payroll_run_id,
                PayrollRun.locked_by == token,
            )
            .values(locked_by=None, locked_at=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        released = (result.rowcount or 0) > 0
        if not released:
            logger.warning("Calculation lease %s on run %s was lost before release", token, payroll_run_id)
        return released
