"""Payroll services."""

from nomina_engine.services.locking_service import CalculationInProgressError, LockingService
from nomina_engine.services.payroll_run_service import (
    NoActiveEmployeesError,
    PayrollRunService,
    PersistenceFailureError,
)
from nomina_engine.services.payslip_service import (
    PayslipService,
    PayslipsNotAvailableError,
    SendPayslipsResult,
)
from nomina_engine.services.rate_set_service import DEFAULT_RATES, RateSetService
from nomina_engine.services.state_machine import (
    InvalidTransitionError,
    PayrollRunStateMachine,
    PayrollRunStatus,
)

__all__ = [
    "CalculationInProgressError",
    "LockingService",
    "NoActiveEmployeesError",
    "PayrollRunService",
    "PersistenceFailureError",
    "PayslipService",
    "PayslipsNotAvailableError",
    "SendPayslipsResult",
    "DEFAULT_RATES",
    "RateSetService",
    "InvalidTransitionError",
    "PayrollRunStateMachine",
    "PayrollRunStatus",
]
