"""Statutory rate set model (one row per tenant and period)."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, CheckConstraint, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from nomina_engine.models.base import Base, TenantMixin, TimestampMixin

RATE = Numeric(9, 6)
UNIT_MULTIPLE = Numeric(9, 4)

# Columns holding fractions that must stay within [0, 1]
FRACTION_COLUMNS = (
    "afp_worker_rate",
    "afp_employer_rate",
    "fonasa_rate",
    "afc_worker_indefinite",
    "afc_worker_fixed_term",
    "afc_employer_indefinite",
    "afc_employer_fixed_term",
    "accident_rate",
    "gratification_rate",
)

# Caps and flat amounts: non-negative, no upper bound
NON_NEGATIVE_COLUMNS = (
    "minimum_wage",
    "uf_value",
    "utm_value",
    "gratification_cap",
    "family_allowance_amount",
    "afp_taxable_cap",
    "health_taxable_cap",
)


class RateSet(Base, TenantMixin, TimestampMixin):
    """Statutory rates for one payroll period.

    Immutable once created. Caps (``gratification_cap``, ``afp_taxable_cap``,
    ``health_taxable_cap``) are stored as UF multiples and converted to pesos
    by the rate resolver before they are compared with any amount.
    """

    __tablename__ = "payroll_rate_set"

    rate_set_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    period: Mapped[str] = mapped_column(String(7), nullable=False)

    # Period reference values (pesos)
    minimum_wage: Mapped[int] = mapped_column(BigInteger, nullable=False)
    uf_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    utm_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Contribution rates
    afp_worker_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False)
    afp_employer_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False, default=Decimal("0"))
    fonasa_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False)
    afc_worker_indefinite: Mapped[Decimal] = mapped_column(RATE, nullable=False)
    afc_worker_fixed_term: Mapped[Decimal] = mapped_column(RATE, nullable=False)
    afc_employer_indefinite: Mapped[Decimal] = mapped_column(RATE, nullable=False)
    afc_employer_fixed_term: Mapped[Decimal] = mapped_column(RATE, nullable=False)
    accident_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False)

    # Bonuses
    gratification_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False)
    gratification_cap: Mapped[Decimal] = mapped_column(UNIT_MULTIPLE, nullable=False)
    family_allowance_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Taxable income caps (UF multiples)
    afp_taxable_cap: Mapped[Decimal] = mapped_column(UNIT_MULTIPLE, nullable=False)
    health_taxable_cap: Mapped[Decimal] = mapped_column(UNIT_MULTIPLE, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "period", name="payroll_rate_set_tenant_period_unique"),
        *(
            CheckConstraint(f"{col} >= 0 AND {col} <= 1", name=f"payroll_rate_set_{col}_check")
            for col in FRACTION_COLUMNS
        ),
        *(
            CheckConstraint(f"{col} >= 0", name=f"payroll_rate_set_{col}_check")
            for col in NON_NEGATIVE_COLUMNS
        ),
    )

    def __repr__(self) -> str:
        return f"<RateSet {self.tenant_id} {self.period}>"
