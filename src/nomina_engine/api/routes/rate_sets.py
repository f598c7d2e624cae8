"""Rate set API endpoints."""

from fastapi import APIRouter, status

from nomina_engine.api.dependencies import DbSession, TenantId
from nomina_engine.api.schemas import ErrorResponse, RateSetCreate, RateSetResponse
from nomina_engine.services.rate_set_service import RateSetService

router = APIRouter(prefix="/rate-sets", tags=["rate-sets"])


@router.post(
    "",
    response_model=RateSetResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_rate_set(
    db: DbSession,
    tenant_id: TenantId,
    payload: RateSetCreate,
) -> RateSetResponse:
    """Create the rate set for a period. A period's rates are never replaced."""
    rate_set = await RateSetService(db).create_rate_set(
        tenant_id, payload.period, **payload.rate_values()
    )
    await db.commit()
    return RateSetResponse.model_validate(rate_set)


@router.get("", response_model=list[RateSetResponse])
async def list_rate_sets(db: DbSession, tenant_id: TenantId) -> list[RateSetResponse]:
    """List rate sets, newest period first."""
    rate_sets = await RateSetService(db).list_rate_sets(tenant_id)
    return [RateSetResponse.model_validate(r) for r in rate_sets]
