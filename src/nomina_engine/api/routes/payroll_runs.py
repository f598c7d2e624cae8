"""Payroll run API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from nomina_engine.api.dependencies import DbSession, TenantId
from nomina_engine.api.schemas import (
    ErrorResponse,
    PayrollRunCreate,
    PayrollRunDetailResponse,
    PayrollRunListResponse,
    PayrollRunResponse,
)
from nomina_engine.services.payroll_run_service import PayrollRunService

router = APIRouter(prefix="/payroll-runs", tags=["payroll-runs"])


@router.post(
    "",
    response_model=PayrollRunResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_payroll_run(
    db: DbSession,
    tenant_id: TenantId,
    payload: PayrollRunCreate,
) -> PayrollRunResponse:
    """Create a draft payroll run for a period that has rates configured."""
    service = PayrollRunService(db)
    run = await service.create_run(tenant_id, payload.period, payload.notes)
    await db.commit()
    return PayrollRunResponse.model_validate(run)


@router.get("", response_model=PayrollRunListResponse)
async def list_payroll_runs(db: DbSession, tenant_id: TenantId) -> PayrollRunListResponse:
    """List payroll runs, newest period first."""
    runs = await PayrollRunService(db).list_runs(tenant_id)
    return PayrollRunListResponse(
        items=[PayrollRunResponse.model_validate(r) for r in runs],
        total=len(runs),
    )


@router.get(
    "/{payroll_run_id}",
    response_model=PayrollRunDetailResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll_run(
    db: DbSession,
    tenant_id: TenantId,
    payroll_run_id: Annotated[UUID, Path()],
) -> PayrollRunDetailResponse:
    """Get a payroll run with its line items."""
    run = await PayrollRunService(db).get_run(tenant_id, payroll_run_id, load_items=True)
    return PayrollRunDetailResponse.model_validate(run)


@router.post(
    "/{payroll_run_id}/approve",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def approve_payroll_run(
    db: DbSession,
    tenant_id: TenantId,
    payroll_run_id: Annotated[UUID, Path()],
) -> PayrollRunResponse:
    """Approve a calculated run. Approved runs can no longer be recalculated."""
    run = await PayrollRunService(db).approve_run(tenant_id, payroll_run_id)
    await db.commit()
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/{payroll_run_id}/pay",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def pay_payroll_run(
    db: DbSession,
    tenant_id: TenantId,
    payroll_run_id: Annotated[UUID, Path()],
) -> PayrollRunResponse:
    """Mark an approved run as paid."""
    run = await PayrollRunService(db).mark_paid(tenant_id, payroll_run_id)
    await db.commit()
    return PayrollRunResponse.model_validate(run)
