"""Payroll run state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from nomina_engine.errors import PayrollError


class PayrollRunStatus(str, Enum):
    """Payroll run status values."""

    DRAFT = "draft"
    CALCULATED = "calculated"
    APPROVED = "approved"
    PAID = "paid"


class InvalidTransitionError(PayrollError):
    """Raised when an invalid state transition is attempted."""

    code = "INVALID_TRANSITION"
    status_code = 409

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PayrollRunStateMachine:
    """State machine for payroll run status transitions.

    Status only moves forward:
    - draft → calculated
    - calculated → calculated (recalculation replaces the results)
    - calculated → approved
    - approved → paid
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayrollRunStatus.DRAFT.value: [PayrollRunStatus.CALCULATED.value],
        PayrollRunStatus.CALCULATED.value: [
            PayrollRunStatus.CALCULATED.value,
            PayrollRunStatus.APPROVED.value,
        ],
        PayrollRunStatus.APPROVED.value: [PayrollRunStatus.PAID.value],
        PayrollRunStatus.PAID.value: [],  # Terminal state
    }

    # Statuses where (re)calculation is allowed
    CALCULATION_ALLOWED = {
        PayrollRunStatus.DRAFT.value,
        PayrollRunStatus.CALCULATED.value,
    }

    # Statuses where line items exist and pay slips can be issued
    PAYSLIPS_AVAILABLE = {
        PayrollRunStatus.CALCULATED.value,
        PayrollRunStatus.APPROVED.value,
        PayrollRunStatus.PAID.value,
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def can_calculate(cls, status: str) -> bool:
        """Check if calculation is allowed in this status."""
        return status in cls.CALCULATION_ALLOWED

    @classmethod
    def has_payslips(cls, status: str) -> bool:
        """Check if the run has calculated line items to issue."""
        return status in cls.PAYSLIPS_AVAILABLE

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return list(cls.VALID_TRANSITIONS.get(current_status, []))
