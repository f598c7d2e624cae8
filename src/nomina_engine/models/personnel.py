"""Employee roster and attendance models (read-only inputs to payroll)."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, CheckConstraint, Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nomina_engine.models.base import Base, TenantMixin, TimestampMixin


class ContractType(str, Enum):
    """Employment contract types."""

    INDEFINITE = "indefinite"
    FIXED_TERM = "fixed_term"


class EmployeeStatus(str, Enum):
    """Employee roster status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class ApprovalStatus(str, Enum):
    """Attendance record approval status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Employee(Base, TenantMixin, TimestampMixin):
    """Employee record."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    full_name: Mapped[str] = mapped_column(String, nullable=False)
    national_id: Mapped[str | None] = mapped_column(String, nullable=True)
    position: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    base_salary: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    contract_type: Mapped[str] = mapped_column(
        String, nullable=False, default=ContractType.INDEFINITE.value
    )
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=EmployeeStatus.ACTIVE.value
    )

    __table_args__ = (
        CheckConstraint(
            "contract_type IN ('indefinite', 'fixed_term')",
            name="employee_contract_type_check",
        ),
        CheckConstraint(
            "status IN ('active', 'inactive')",
            name="employee_status_check",
        ),
        CheckConstraint("base_salary >= 0", name="employee_base_salary_check"),
    )

    # Relationships
    attendance: Mapped[list[AttendanceRecord]] = relationship(back_populates="employee")


class AttendanceRecord(Base, TenantMixin, TimestampMixin):
    """One day of worked hours for an employee."""

    __tablename__ = "attendance_record"

    attendance_record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    normal_hours: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), nullable=False, default=Decimal("0")
    )
    overtime_hours: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), nullable=False, default=Decimal("0")
    )
    approval_status: Mapped[str] = mapped_column(
        String, nullable=False, default=ApprovalStatus.PENDING.value
    )

    __table_args__ = (
        CheckConstraint(
            "approval_status IN ('pending', 'approved', 'rejected')",
            name="attendance_record_status_check",
        ),
        CheckConstraint(
            "normal_hours >= 0 AND overtime_hours >= 0",
            name="attendance_record_hours_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="attendance")
