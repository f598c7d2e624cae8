"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from nomina_engine.config import get_settings
from nomina_engine.database import async_session_factory
from nomina_engine.notifications import EmailSender, get_email_sender
from nomina_engine.rendering import PayslipRenderer


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session per request. Routes commit; anything left pending on error is rolled back."""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_tenant_id(
    x_tenant_id: Annotated[str | None, Header()] = None
) -> UUID:
    """Extract tenant ID from header."""
    if not x_tenant_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Tenant-ID header is required",
        )
    try:
        return UUID(x_tenant_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-Tenant-ID format",
        )


def get_payslip_renderer() -> PayslipRenderer:
    """Renderer configured with the employer details from settings."""
    return PayslipRenderer.from_settings(get_settings())


def get_sender() -> EmailSender:
    """Email sender selected by EMAIL_PROVIDER."""
    return get_email_sender(get_settings())


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
TenantId = Annotated[UUID, Depends(get_tenant_id)]
Renderer = Annotated[PayslipRenderer, Depends(get_payslip_renderer)]
Sender = Annotated[EmailSender, Depends(get_sender)]
