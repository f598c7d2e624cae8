"""Pay slip generation and email dispatch."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import and_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from nomina_engine.errors import NotFoundError, PayrollError
from nomina_engine.models import Employee, PayrollLineItem, PayrollRun
from nomina_engine.notifications import EmailDispatchError, EmailMessage, EmailSender
from nomina_engine.rendering import PayslipDocument, PayslipRenderer, RenderFailureError, format_clp
from nomina_engine.services.state_machine import PayrollRunStateMachine

logger = logging.getLogger(__name__)


class PayslipsNotAvailableError(PayrollError):
    """Raised when a run has not been calculated yet."""

    code = "PAYSLIPS_NOT_AVAILABLE"
    status_code = 409

    def __init__(self, payroll_run_id: UUID, status: str):
        self.payroll_run_id = payroll_run_id
        super().__init__(f"Payroll run {payroll_run_id} is '{status}', no pay slips to send")


@dataclass
class SendPayslipsResult:
    """Summary of one send-payslips batch."""

    total_emails: int = 0
    success_count: int = 0
    error_count: int = 0
    errors: list[str] = field(default_factory=list)

    def record_failure(self, employee_name: str, reason: str) -> None:
        self.error_count += 1
        self.errors.append(f"{employee_name}: {reason}")


def build_payslip_email(
    to: str,
    employee_name: str,
    period: str,
    net_pay: int,
    document: PayslipDocument,
    employer_name: str,
) -> EmailMessage:
    """Email carrying the net-pay headline and the rendered pay slip."""
    name = html.escape(employee_name)
    body_html = (
        "<h2>Liquidación de Sueldo</h2>"
        f"<p>Estimado/a {name},</p>"
        f"<p>Adjunto encontrará su liquidación de sueldo correspondiente al período {period}.</p>"
        f"<p>Su sueldo líquido para este período es: <strong>{format_clp(net_pay)}</strong></p>"
        "<br>"
        "<p>Saludos cordiales,<br>"
        "Departamento de Recursos Humanos<br>"
        f"{html.escape(employer_name)}</p>"
        "<hr>"
        f'<div style="font-size: 12px; color: #666;">{document.to_html()}</div>'
    )
    body_text = (
        f"Estimado/a {employee_name},\n\n"
        f"Su sueldo líquido para el período {period} es: {format_clp(net_pay)}\n\n"
        f"Departamento de Recursos Humanos\n{employer_name}\n"
    )
    return EmailMessage(
        to=to,
        subject=f"Liquidación de Sueldo - {period}",
        body_html=body_html,
        body_text=body_text,
    )


class PayslipService:
    """Renders pay slips and sends them to employees.

    Each line item is handled on its own: a render or dispatch failure is
    recorded and the batch moves on. Sent items are flagged and committed
    one by one, so a retry only picks up what is still unsent.
    """

    def __init__(
        self,
        session: AsyncSession,
        renderer: PayslipRenderer,
        sender: EmailSender | None = None,
    ):
        self.session = session
        self.renderer = renderer
        self.sender = sender

    async def generate_payslip(self, tenant_id: UUID, payroll_line_item_id: UUID) -> PayslipDocument:
        """Render the pay slip of one line item."""
        result = await self.session.execute(
            select(PayrollLineItem)
            .where(
                PayrollLineItem.payroll_line_item_id == payroll_line_item_id,
                PayrollLineItem.tenant_id == tenant_id,
            )
            .options(selectinload(PayrollLineItem.payroll_run).selectinload(PayrollRun.rate_set))
            .execution_options(populate_existing=True)
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise NotFoundError("Payroll item", payroll_line_item_id)

        run = item.payroll_run
        return self.renderer.render(item, run.period, run.rate_set)

    async def send_payslips(self, tenant_id: UUID, payroll_run_id: UUID) -> SendPayslipsResult:
        """Email every unsent pay slip of a run whose employee has an address."""
        if self.sender is None:
            raise PayrollError("No email sender configured")

        run = await self._get_run(tenant_id, payroll_run_id)
        rate_set = run.rate_set
        pending = await self._get_pending_items(run)

        # Detached so a rollback after a failed flag cannot expire the rest of the batch
        for obj in (rate_set, run, *(item for item, _ in pending)):
            self.session.expunge(obj)

        outcome = SendPayslipsResult(total_emails=len(pending))
        logger.info(
            "Sending %d pay slips for run %s via %s",
            len(pending),
            payroll_run_id,
            self.sender.provider_name,
        )

        for item, email in pending:
            employee_name = item.employee_name
            try:
                document = self.renderer.render(item, run.period, rate_set)
                message = build_payslip_email(
                    to=email,
                    employee_name=employee_name,
                    period=run.period,
                    net_pay=item.net_pay,
                    document=document,
                    employer_name=self.renderer.employer_name,
                )
                await self.sender.send(message)
            except (RenderFailureError, EmailDispatchError) as exc:
                logger.error("Error sending pay slip to %s: %s", employee_name, exc.reason)
                outcome.record_failure(employee_name, exc.reason)
                continue
            except Exception as exc:
                logger.exception("Unexpected error sending pay slip to %s", employee_name)
                outcome.record_failure(employee_name, str(exc) or type(exc).__name__)
                continue

            try:
                await self._mark_sent(item.payroll_line_item_id)
            except SQLAlchemyError as exc:
                await self.session.rollback()
                logger.error("Sent pay slip to %s but could not flag it: %s", employee_name, exc)
                outcome.record_failure(employee_name, "email sent but not recorded")
                continue

            outcome.success_count += 1

        logger.info(
            "Pay slips for run %s: %d sent, %d failed",
            payroll_run_id,
            outcome.success_count,
            outcome.error_count,
        )
        return outcome

    # === Data Loading Methods ===

    async def _get_run(self, tenant_id: UUID, payroll_run_id: UUID) -> PayrollRun:
        result = await self.session.execute(
            select(PayrollRun)
            .where(
                PayrollRun.payroll_run_id == payroll_run_id,
                PayrollRun.tenant_id == tenant_id,
            )
            .options(selectinload(PayrollRun.rate_set))
            .execution_options(populate_existing=True)
        )
        run = result.scalar_one_or_none()
        if run is None:
            raise NotFoundError("Payroll run", payroll_run_id)
        if not PayrollRunStateMachine.has_payslips(run.status):
            raise PayslipsNotAvailableError(payroll_run_id, run.status)
        return run

    async def _get_pending_items(self, run: PayrollRun) -> list[tuple[PayrollLineItem, str]]:
        """Unsent line items of the run joined to their employee's email."""
        result = await self.session.execute(
            select(PayrollLineItem, Employee.email)
            .join(
                Employee,
                and_(
                    Employee.employee_id == PayrollLineItem.employee_id,
                    Employee.tenant_id == PayrollLineItem.tenant_id,
                ),
            )
            .where(
                PayrollLineItem.payroll_run_id == run.payroll_run_id,
                PayrollLineItem.email_sent.is_(False),
                Employee.email.is_not(None),
                Employee.email != "",
            )
            .order_by(PayrollLineItem.employee_name)
        )
        return [(item, email) for item, email in result.all()]

    async def _mark_sent(self, payroll_line_item_id: UUID) -> None:
        await self.session.execute(
            update(PayrollLineItem)
            .where(PayrollLineItem.payroll_line_item_id == payroll_line_item_id)
            .values(email_sent=True, email_sent_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
