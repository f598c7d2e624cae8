"""Payroll run service - orchestrates the calculation lifecycle."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from nomina_engine.calculators import (
    LineItemBuilder,
    PayPeriod,
    PayrollCalculator,
    RateResolver,
    RunCalculation,
    RunTotals,
)
from nomina_engine.errors import ConflictError, NotFoundError, PayrollError
from nomina_engine.models import PayrollLineItem, PayrollRun
from nomina_engine.services.locking_service import LockingService
from nomina_engine.services.state_machine import (
    InvalidTransitionError,
    PayrollRunStateMachine,
    PayrollRunStatus,
)

logger = logging.getLogger(__name__)


class NoActiveEmployeesError(PayrollError):
    """Raised when a tenant has no active employees to pay."""

    code = "NO_ACTIVE_EMPLOYEES"
    status_code = 422

    def __init__(self, payroll_run_id: UUID):
        self.payroll_run_id = payroll_run_id
        super().__init__("No active employees found for this payroll run")


class PersistenceFailureError(PayrollError):
    """Raised when calculation results could not be stored."""

    code = "PERSISTENCE_FAILURE"
    status_code = 500

    def __init__(self, payroll_run_id: UUID, detail: str):
        self.payroll_run_id = payroll_run_id
        super().__init__(f"Could not store results for payroll run {payroll_run_id}: {detail}")


class PayrollRunService:
    """Service for managing payroll run lifecycle.

    Operations:
    - create_run: Open a draft run for a period that has a rate set
    - calculate_run: Compute and store line items and totals (replace, not append)
    - approve_run: calculated → approved
    - mark_paid: approved → paid
    """

    def __init__(self, session: AsyncSession, locking_service: LockingService | None = None):
        self.session = session
        self.locking_service = locking_service or LockingService(session)
        self.rate_resolver = RateResolver(session)

    async def get_run(
        self,
        tenant_id: UUID,
        payroll_run_id: UUID,
        load_items: bool = False,
    ) -> PayrollRun:
        """Load a tenant's payroll run, raising NotFoundError if missing."""
        stmt = (
            select(PayrollRun)
            .where(
                PayrollRun.payroll_run_id == payroll_run_id,
                PayrollRun.tenant_id == tenant_id,
            )
            .execution_options(populate_existing=True)
        )
        if load_items:
            stmt = stmt.options(selectinload(PayrollRun.items))

        result = await self.session.execute(stmt)
        run = result.scalar_one_or_none()
        if run is None:
            raise NotFoundError("Payroll run", payroll_run_id)
        return run

    async def list_runs(self, tenant_id: UUID) -> list[PayrollRun]:
        """List a tenant's payroll runs, newest period first."""
        result = await self.session.execute(
            select(PayrollRun)
            .where(PayrollRun.tenant_id == tenant_id)
            .order_by(PayrollRun.period.desc())
        )
        return list(result.scalars().all())

    async def create_run(
        self,
        tenant_id: UUID,
        period: str,
        notes: str | None = None,
    ) -> PayrollRun:
        """Create a draft run for ``period``.

        Raises:
            InvalidPeriodError: If ``period`` is malformed
            RateNotConfiguredError: If the period has no rate set
            ConflictError: If the tenant already has a run for the period
        """
        period = str(PayPeriod.parse(period))
        rate_set = await self.rate_resolver.resolve(tenant_id, period)

        existing = await self.session.execute(
            select(PayrollRun.payroll_run_id).where(
                PayrollRun.tenant_id == tenant_id,
                PayrollRun.period == period,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(f"A payroll run already exists for period {period}")

        run = PayrollRun(
            tenant_id=tenant_id,
            period=period,
            rate_set_id=rate_set.rate_set_id,
            status=PayrollRunStatus.DRAFT.value,
            notes=notes,
        )
        self.session.add(run)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError(f"A payroll run already exists for period {period}") from exc

        logger.info("Created payroll run %s for period %s", run.payroll_run_id, period)
        return run

    async def calculate_run(self, tenant_id: UUID, payroll_run_id: UUID) -> RunTotals:
        """Calculate a payroll run and persist its line items and totals.

        The whole pass is all-or-nothing: previous line items of the run are
        deleted and the new ones inserted in the same transaction that writes
        the totals and marks the run calculated.

        Raises:
            NotFoundError: If the run does not exist for the tenant
            InvalidTransitionError: If the run is already approved or paid
            CalculationInProgressError: If another pass holds the lease
            RateNotConfiguredError: If the run's rate set is missing
            NoActiveEmployeesError: If the tenant has no active employees
            PersistenceFailureError: If the results could not be stored
        """
        run = await self.get_run(tenant_id, payroll_run_id)
        self._check_can_calculate(run)

        token = await self.locking_service.acquire(payroll_run_id)
        try:
            # Re-read under the lease; the status may have moved meanwhile
            run = await self.get_run(tenant_id, payroll_run_id)
            self._check_can_calculate(run)

            rate_set = await self.rate_resolver.resolve_by_id(
                tenant_id, run.rate_set_id, run.period
            )
            rates = RateResolver.resolve_rates(rate_set)

            calculation = await PayrollCalculator(self.session).calculate(run, rates)
            if not calculation.items:
                raise NoActiveEmployeesError(payroll_run_id)

            for item in calculation.items:
                errors = LineItemBuilder.validate(item)
                if errors:
                    raise PayrollError(
                        f"Invalid result for {item.employee.full_name}: {'; '.join(errors)}"
                    )

            await self._store_results(run, calculation)
            logger.info(
                "Calculated payroll run %s: %d employees, net %d",
                payroll_run_id,
                calculation.totals.total_employees,
                calculation.totals.total_net_pay,
            )
            return calculation.totals
        finally:
            await self.locking_service.release(payroll_run_id, token)

    async def approve_run(self, tenant_id: UUID, payroll_run_id: UUID) -> PayrollRun:
        """Approve a calculated run."""
        run = await self.get_run(tenant_id, payroll_run_id)
        PayrollRunStateMachine.validate_transition(run.status, PayrollRunStatus.APPROVED.value)

        run.status = PayrollRunStatus.APPROVED.value
        run.approved_at = datetime.now(timezone.utc)
        await self.session.flush()
        return run

    async def mark_paid(self, tenant_id: UUID, payroll_run_id: UUID) -> PayrollRun:
        """Mark an approved run as paid."""
        run = await self.get_run(tenant_id, payroll_run_id)
        PayrollRunStateMachine.validate_transition(run.status, PayrollRunStatus.PAID.value)

        run.status = PayrollRunStatus.PAID.value
        run.paid_at = datetime.now(timezone.utc)
        await self.session.flush()
        return run

    # === Internal ===

    @staticmethod
    def _check_can_calculate(run: PayrollRun) -> None:
        if not PayrollRunStateMachine.can_calculate(run.status):
            raise InvalidTransitionError(
                run.status,
                PayrollRunStatus.CALCULATED.value,
                "Run can no longer be recalculated",
            )

    async def _store_results(self, run: PayrollRun, calculation: RunCalculation) -> None:
        """Replace the run's line items and totals in one transaction."""
        payroll_run_id = run.payroll_run_id
        totals = calculation.totals
        try:
            await self.session.execute(
                delete(PayrollLineItem).where(PayrollLineItem.payroll_run_id == payroll_run_id)
            )
            self.session.add_all(
                [LineItemBuilder.to_model(item, run) for item in calculation.items]
            )

            run.total_employees = totals.total_employees
            run.total_gross_pay = totals.total_gross_pay
            run.total_deductions = totals.total_deductions
            run.total_net_pay = totals.total_net_pay
            run.status = PayrollRunStatus.CALCULATED.value
            run.calculated_at = datetime.now(timezone.utc)

            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("Failed to store results for payroll run %s", payroll_run_id)
            raise PersistenceFailureError(payroll_run_id, str(exc)) from exc
