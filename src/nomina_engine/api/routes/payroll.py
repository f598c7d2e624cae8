"""Payroll operation endpoints: calculate, render and send pay slips."""

from fastapi import APIRouter, status

from nomina_engine.api.dependencies import DbSession, Renderer, Sender, TenantId
from nomina_engine.api.schemas import (
    CalculatePayrollRequest,
    CalculatePayrollResponse,
    ErrorResponse,
    GeneratePayslipRequest,
    GeneratePayslipResponse,
    PayslipDocumentResponse,
    SendPayslipsRequest,
    SendPayslipsResponse,
)
from nomina_engine.services.payroll_run_service import PayrollRunService
from nomina_engine.services.payslip_service import PayslipService

router = APIRouter(tags=["payroll"])


@router.post(
    "/calculate-payroll",
    response_model=CalculatePayrollResponse,
    status_code=status.HTTP_200_OK,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def calculate_payroll(
    db: DbSession,
    tenant_id: TenantId,
    payload: CalculatePayrollRequest,
) -> CalculatePayrollResponse:
    """Calculate a payroll run, replacing any earlier results."""
    service = PayrollRunService(db)
    totals = await service.calculate_run(tenant_id, payload.payroll_run_id)
    return CalculatePayrollResponse(
        total_employees=totals.total_employees,
        total_gross_pay=totals.total_gross_pay,
        total_deductions=totals.total_deductions,
        total_net_pay=totals.total_net_pay,
    )


@router.post(
    "/generate-payslip-pdf",
    response_model=GeneratePayslipResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_payslip(
    db: DbSession,
    tenant_id: TenantId,
    renderer: Renderer,
    payload: GeneratePayslipRequest,
) -> GeneratePayslipResponse:
    """Render one employee's pay slip as printable HTML."""
    service = PayslipService(db, renderer)
    document = await service.generate_payslip(tenant_id, payload.payroll_item_id)
    return GeneratePayslipResponse(
        html_content=document.to_html(),
        file_name=document.file_name,
        document=PayslipDocumentResponse.model_validate(document),
    )


@router.post(
    "/send-payslips",
    response_model=SendPayslipsResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def send_payslips(
    db: DbSession,
    tenant_id: TenantId,
    renderer: Renderer,
    sender: Sender,
    payload: SendPayslipsRequest,
) -> SendPayslipsResponse:
    """Email every unsent pay slip of a run. Per-employee failures are reported, not raised."""
    service = PayslipService(db, renderer, sender)
    result = await service.send_payslips(tenant_id, payload.payroll_run_id)
    return SendPayslipsResponse(
        total_emails=result.total_emails,
        success_count=result.success_count,
        error_count=result.error_count,
        errors=result.errors,
    )
