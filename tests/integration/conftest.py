"""Integration test fixtures: the FastAPI app wired to the test database."""

from collections.abc import AsyncGenerator
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from nomina_engine.api.app import create_app
from nomina_engine.api.dependencies import get_db_session, get_payslip_renderer, get_sender
from nomina_engine.notifications import MockEmailSender


@pytest.fixture
def sender() -> MockEmailSender:
    return MockEmailSender()


@pytest.fixture
async def client(session_factory, renderer, sender) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = create_app()

    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_payslip_renderer] = lambda: renderer
    app.dependency_overrides[get_sender] = lambda: sender

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def headers(tenant_id) -> dict[str, str]:
    return {"X-Tenant-ID": str(tenant_id)}


@pytest.fixture
async def staffed_tenant(session, add_employee, add_attendance):
    """Two employees with a full month of approved attendance, committed."""
    october = [date(2026, 10, d) for d in range(1, 31)]
    juan = await add_employee("Juan Pérez", email="juan@example.cl")
    maria = await add_employee("María Soto", email="maria@example.cl")
    await add_attendance(juan, october)
    await add_attendance(maria, october)
    await session.commit()
    return juan, maria
