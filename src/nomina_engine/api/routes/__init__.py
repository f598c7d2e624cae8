"""API routes."""

from nomina_engine.api.routes.health import router as health_router
from nomina_engine.api.routes.payroll import router as payroll_router
from nomina_engine.api.routes.payroll_runs import router as payroll_runs_router
from nomina_engine.api.routes.rate_sets import router as rate_sets_router

__all__ = ["health_router", "payroll_router", "payroll_runs_router", "rate_sets_router"]
