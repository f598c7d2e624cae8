"""Pydantic schemas for API request/response models.

Payloads use camelCase on the wire (``payrollRunId``) and snake_case in
Python; both spellings are accepted on input.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# Errors
# ============================================================================


class ErrorResponse(CamelModel):
    """Error payload returned for every domain failure."""

    success: bool = False
    error: str
    code: str


# ============================================================================
# Payroll operations
# ============================================================================


class CalculatePayrollRequest(CamelModel):
    payroll_run_id: UUID


class CalculatePayrollResponse(CamelModel):
    success: bool = True
    total_employees: int
    total_gross_pay: int
    total_deductions: int
    total_net_pay: int


class GeneratePayslipRequest(CamelModel):
    payroll_item_id: UUID


class PayslipFieldResponse(CamelModel):
    label: str
    value: str


class PayslipSectionResponse(CamelModel):
    name: str
    title: str
    fields: list[PayslipFieldResponse]


class PayslipDocumentResponse(CamelModel):
    employee_name: str
    period: str
    sections: list[PayslipSectionResponse]


class GeneratePayslipResponse(CamelModel):
    success: bool = True
    html_content: str
    file_name: str
    document: PayslipDocumentResponse


class SendPayslipsRequest(CamelModel):
    payroll_run_id: UUID


class SendPayslipsResponse(CamelModel):
    success: bool = True
    total_emails: int
    success_count: int
    error_count: int
    errors: list[str] = Field(default_factory=list)


# ============================================================================
# Payroll runs
# ============================================================================


class PayrollRunCreate(CamelModel):
    """Schema for creating a new payroll run."""

    period: str = Field(pattern=r"^\d{4}-\d{2}$", examples=["2026-10"])
    notes: str | None = None


class PayrollLineItemResponse(CamelModel):
    payroll_line_item_id: UUID
    employee_id: UUID
    employee_name: str
    employee_national_id: str | None = None
    position: str | None = None
    contract_type: str
    worked_days: int
    normal_hours: Decimal
    overtime_hours: Decimal
    base_salary: int
    overtime_amount: int
    gratification_amount: int
    family_allowance_amount: int
    gross_taxable: int
    gross_non_taxable: int
    afp_deduction: int
    health_deduction: int
    afc_deduction: int
    tax_deduction: int
    net_pay: int
    email_sent: bool
    email_sent_at: datetime | None = None


class PayrollRunResponse(CamelModel):
    """Schema for payroll run response."""

    payroll_run_id: UUID
    tenant_id: UUID
    period: str
    rate_set_id: UUID
    status: str
    total_employees: int
    total_gross_pay: int
    total_deductions: int
    total_net_pay: int
    calculated_at: datetime | None = None
    approved_at: datetime | None = None
    paid_at: datetime | None = None
    notes: str | None = None


class PayrollRunDetailResponse(PayrollRunResponse):
    items: list[PayrollLineItemResponse] = Field(default_factory=list)


class PayrollRunListResponse(CamelModel):
    items: list[PayrollRunResponse]
    total: int


# ============================================================================
# Rate sets
# ============================================================================


class RateSetCreate(CamelModel):
    """Schema for creating a period's rate set. Omitted values take defaults."""

    period: str = Field(pattern=r"^\d{4}-\d{2}$", examples=["2026-10"])
    minimum_wage: int | None = Field(default=None, ge=0)
    uf_value: Decimal | None = Field(default=None, ge=0)
    utm_value: Decimal | None = Field(default=None, ge=0)
    afp_worker_rate: Decimal | None = Field(default=None, ge=0, le=1)
    afp_employer_rate: Decimal | None = Field(default=None, ge=0, le=1)
    fonasa_rate: Decimal | None = Field(default=None, ge=0, le=1)
    afc_worker_indefinite: Decimal | None = Field(default=None, ge=0, le=1)
    afc_worker_fixed_term: Decimal | None = Field(default=None, ge=0, le=1)
    afc_employer_indefinite: Decimal | None = Field(default=None, ge=0, le=1)
    afc_employer_fixed_term: Decimal | None = Field(default=None, ge=0, le=1)
    accident_rate: Decimal | None = Field(default=None, ge=0, le=1)
    gratification_rate: Decimal | None = Field(default=None, ge=0, le=1)
    gratification_cap: Decimal | None = Field(default=None, ge=0)
    family_allowance_amount: int | None = Field(default=None, ge=0)
    afp_taxable_cap: Decimal | None = Field(default=None, ge=0)
    health_taxable_cap: Decimal | None = Field(default=None, ge=0)

    def rate_values(self) -> dict[str, Any]:
        return self.model_dump(exclude={"period"}, exclude_none=True)


class RateSetResponse(CamelModel):
    rate_set_id: UUID
    tenant_id: UUID
    period: str
    minimum_wage: int
    uf_value: Decimal
    utm_value: Decimal
    afp_worker_rate: Decimal
    afp_employer_rate: Decimal
    fonasa_rate: Decimal
    afc_worker_indefinite: Decimal
    afc_worker_fixed_term: Decimal
    afc_employer_indefinite: Decimal
    afc_employer_fixed_term: Decimal
    accident_rate: Decimal
    gratification_rate: Decimal
    gratification_cap: Decimal
    family_allowance_amount: int
    afp_taxable_cap: Decimal
    health_taxable_cap: Decimal
