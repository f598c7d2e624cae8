"""Payroll run and line item models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nomina_engine.models.base import Base, TenantMixin, TimestampMixin
from nomina_engine.models.rates import RateSet


class PayrollRun(Base, TenantMixin, TimestampMixin):
    """Payroll run for one tenant and period."""

    __tablename__ = "payroll_run"

    payroll_run_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    period: Mapped[str] = mapped_column(String(7), nullable=False)
    rate_set_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_rate_set.rate_set_id", ondelete="RESTRICT"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")

    # Totals, recomputed wholesale on each calculation
    total_employees: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_gross_pay: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_deductions: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_net_pay: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    calculated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Calculation lease
    locked_by: Mapped[str | None] = mapped_column(String, nullable=True)
    locked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "period", name="payroll_run_tenant_period_unique"),
        CheckConstraint(
            "status IN ('draft', 'calculated', 'approved', 'paid')",
            name="payroll_run_status_check",
        ),
    )

    # Relationships
    rate_set: Mapped[RateSet] = relationship()
    items: Mapped[list[PayrollLineItem]] = relationship(
        back_populates="payroll_run",
        order_by="PayrollLineItem.employee_name",
    )


class PayrollLineItem(Base, TenantMixin, TimestampMixin):
    """Per-employee payroll result.

    Employee identity fields are snapshots taken at calculation time so a
    historical pay slip never changes when the roster does. Only the
    ``email_sent`` columns are updated after creation.
    """

    __tablename__ = "payroll_line_item"

    payroll_line_item_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_run_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_run.payroll_run_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Snapshot of the employee
    employee_id: Mapped[UUID] = mapped_column(nullable=False)
    employee_name: Mapped[str] = mapped_column(String, nullable=False)
    employee_national_id: Mapped[str | None] = mapped_column(String, nullable=True)
    position: Mapped[str | None] = mapped_column(String, nullable=True)
    contract_type: Mapped[str] = mapped_column(String, nullable=False)

    # Attendance
    worked_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    normal_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))

    # Amounts (whole pesos)
    base_salary: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    overtime_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    gratification_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    family_allowance_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    gross_taxable: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    gross_non_taxable: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    afp_deduction: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    health_deduction: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    afc_deduction: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tax_deduction: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    net_pay: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # Set by the pay slip notifier
    email_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("payroll_run_id", "employee_id", name="payroll_line_item_run_employee_unique"),
        CheckConstraint(
            "net_pay = gross_taxable + gross_non_taxable"
            " - afp_deduction - health_deduction - afc_deduction - tax_deduction",
            name="payroll_line_item_net_check",
        ),
    )

    # Relationships
    payroll_run: Mapped[PayrollRun] = relationship(back_populates="items")

    @property
    def total_deductions(self) -> int:
        """Legal deductions (AFP + health + AFC + tax)."""
        return (
            self.afp_deduction
            + self.health_deduction
            + self.afc_deduction
            + self.tax_deduction
        )

    @property
    def total_earnings(self) -> int:
        """Taxable plus non-taxable earnings."""
        return self.gross_taxable + self.gross_non_taxable
