"""Base exception for payroll domain errors.

Concrete errors live next to the component that raises them; they all share
this base so the API layer can map them to a response in one place.
"""

from __future__ import annotations


class PayrollError(Exception):
    """Base class for payroll domain errors."""

    code: str = "PAYROLL_ERROR"
    status_code: int = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(PayrollError):
    """Raised when a requested payroll entity does not exist for the tenant."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ConflictError(PayrollError):
    """Raised when a business uniqueness constraint would be violated."""

    code = "CONFLICT"
    status_code = 409
