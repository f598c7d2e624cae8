"""ORM models."""

from nomina_engine.models.base import Base, TenantMixin, TimestampMixin
from nomina_engine.models.payroll import PayrollLineItem, PayrollRun
from nomina_engine.models.personnel import (
    ApprovalStatus,
    AttendanceRecord,
    ContractType,
    Employee,
    EmployeeStatus,
)
from nomina_engine.models.rates import RateSet

__all__ = [
    "Base",
    "TenantMixin",
    "TimestampMixin",
    "RateSet",
    "Employee",
    "EmployeeStatus",
    "ContractType",
    "AttendanceRecord",
    "ApprovalStatus",
    "PayrollRun",
    "PayrollLineItem",
]
