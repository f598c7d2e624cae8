"""Tests for pay slip generation and batch email dispatch."""

import json
from datetime import date
from uuid import uuid4

import httpx
import pytest
from sqlalchemy import select

from nomina_engine.errors import NotFoundError
from nomina_engine.models import PayrollLineItem
from nomina_engine.notifications import MockEmailSender, ResendEmailSender
from nomina_engine.rendering import PayslipRenderer, RenderFailureError
from nomina_engine.services.payroll_run_service import PayrollRunService
from nomina_engine.services.payslip_service import (
    PayslipService,
    PayslipsNotAvailableError,
)

ROSTER = [
    ("Ana Rojas", "ana@example.cl"),
    ("Bruno Díaz", "bruno@example.cl"),
    ("Carla Muñoz", "carla@example.cl"),
    ("Diego Fuentes", "diego@example.cl"),
    ("Elena Vera", None),
]


class CrashingSender(MockEmailSender):
    """Sender that blows up with an error outside the dispatch contract."""

    def __init__(self, crash_for: set[str]):
        super().__init__()
        self.crash_for = crash_for

    async def send(self, message):
        if message.to in self.crash_for:
            raise RuntimeError("connection pool exhausted")
        return await super().send(message)


class FailingRenderer(PayslipRenderer):
    """Renderer that cannot lay out the pay slips of some employees."""

    def __init__(self, fail_for: set[str]):
        super().__init__("WAYCO LIMITADA", "76.123.456-7", "Av. Principal 123, Santiago")
        self.fail_for = fail_for

    def render(self, line_item, period, rate_set, issue_date=None):
        if line_item.employee_name in self.fail_for:
            raise RenderFailureError(line_item.employee_name, "layout overflow")
        return super().render(line_item, period, rate_set, issue_date)


@pytest.fixture
async def calculated_run(session, tenant_id, rate_set, add_employee, add_attendance):
    for name, email in ROSTER:
        employee = await add_employee(name, email=email)
        await add_attendance(employee, [date(2026, 10, d) for d in range(1, 31)])

    service = PayrollRunService(session)
    run = await service.create_run(tenant_id, "2026-10")
    await service.calculate_run(tenant_id, run.payroll_run_id)
    return run


async def sent_names(session, run) -> list[str]:
    result = await session.execute(
        select(PayrollLineItem.employee_name)
        .where(
            PayrollLineItem.payroll_run_id == run.payroll_run_id,
            PayrollLineItem.email_sent.is_(True),
        )
        .order_by(PayrollLineItem.employee_name)
    )
    return list(result.scalars().all())


class TestSendPayslips:
    async def test_all_sent(self, session, tenant_id, renderer, calculated_run):
        sender = MockEmailSender()
        service = PayslipService(session, renderer, sender)

        result = await service.send_payslips(tenant_id, calculated_run.payroll_run_id)

        assert result.total_emails == 4
        assert result.success_count == 4
        assert result.error_count == 0
        assert result.errors == []
        assert sorted(sender.recipients()) == [
            "ana@example.cl",
            "bruno@example.cl",
            "carla@example.cl",
            "diego@example.cl",
        ]

    async def test_render_failure_does_not_stop_batch(self, session, tenant_id, calculated_run):
        sender = MockEmailSender()
        service = PayslipService(session, FailingRenderer({"Carla Muñoz"}), sender)

        result = await service.send_payslips(tenant_id, calculated_run.payroll_run_id)

        assert result.total_emails == 4
        assert result.success_count == 3
        assert result.error_count == 1
        assert result.errors[0].startswith("Carla Muñoz: ")
        assert await sent_names(session, calculated_run) == [
            "Ana Rojas",
            "Bruno Díaz",
            "Diego Fuentes",
        ]

    async def test_dispatch_failure_recorded(self, session, tenant_id, renderer, calculated_run):
        sender = MockEmailSender(fail_for={"bruno@example.cl"})
        service = PayslipService(session, renderer, sender)

        result = await service.send_payslips(tenant_id, calculated_run.payroll_run_id)

        assert result.success_count == 3
        assert result.error_count == 1
        assert "Bruno Díaz" in result.errors[0]
        assert "Bruno Díaz" not in await sent_names(session, calculated_run)

    async def test_unexpected_error_does_not_stop_batch(
        self, session, tenant_id, renderer, calculated_run
    ):
        sender = CrashingSender({"ana@example.cl"})
        service = PayslipService(session, renderer, sender)

        result = await service.send_payslips(tenant_id, calculated_run.payroll_run_id)

        assert result.success_count == 3
        assert result.errors == ["Ana Rojas: connection pool exhausted"]
        assert "Ana Rojas" not in await sent_names(session, calculated_run)

    async def test_unreadable_provider_reply_recorded(
        self, session, tenant_id, renderer, calculated_run
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            if json.loads(request.content)["to"] == ["ana@example.cl"]:
                return httpx.Response(200, text="OK")
            return httpx.Response(200, json={"id": "msg_1"})

        sender = ResendEmailSender(
            api_key="re_test",
            from_email="noreply@wayco.cl",
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        service = PayslipService(session, renderer, sender)

        result = await service.send_payslips(tenant_id, calculated_run.payroll_run_id)

        assert result.total_emails == 4
        assert result.success_count == 3
        assert result.error_count == 1
        assert result.errors[0].startswith("Ana Rojas: ")
        assert await sent_names(session, calculated_run) == [
            "Bruno Díaz",
            "Carla Muñoz",
            "Diego Fuentes",
        ]

    async def test_retry_only_targets_unsent(self, session, tenant_id, renderer, calculated_run):
        failing = PayslipService(session, renderer, MockEmailSender(fail_for={"diego@example.cl"}))
        await failing.send_payslips(tenant_id, calculated_run.payroll_run_id)

        sender = MockEmailSender()
        retry = await PayslipService(session, renderer, sender).send_payslips(
            tenant_id, calculated_run.payroll_run_id
        )

        assert retry.total_emails == 1
        assert retry.success_count == 1
        assert sender.recipients() == ["diego@example.cl"]

    async def test_email_content(self, session, tenant_id, renderer, calculated_run):
        sender = MockEmailSender()
        await PayslipService(session, renderer, sender).send_payslips(
            tenant_id, calculated_run.payroll_run_id
        )

        message = next(m for m in sender.sent if m.to == "ana@example.cl")
        assert message.subject == "Liquidación de Sueldo - 2026-10"
        assert "Estimado/a Ana Rojas" in message.body_html
        assert "$836.300" in message.body_html
        assert "LIQUIDACIÓN DE SUELDO" in message.body_html
        assert "WAYCO LIMITADA" in message.body_html

    async def test_draft_run_has_no_payslips(self, session, tenant_id, rate_set, renderer):
        run = await PayrollRunService(session).create_run(tenant_id, "2026-10")
        service = PayslipService(session, renderer, MockEmailSender())

        with pytest.raises(PayslipsNotAvailableError):
            await service.send_payslips(tenant_id, run.payroll_run_id)

    async def test_unknown_run(self, session, tenant_id, renderer):
        service = PayslipService(session, renderer, MockEmailSender())

        with pytest.raises(NotFoundError):
            await service.send_payslips(tenant_id, uuid4())


class TestGeneratePayslip:
    async def test_generate(self, session, tenant_id, renderer, calculated_run):
        item = await session.scalar(
            select(PayrollLineItem).where(
                PayrollLineItem.payroll_run_id == calculated_run.payroll_run_id,
                PayrollLineItem.employee_name == "Ana Rojas",
            )
        )

        document = await PayslipService(session, renderer).generate_payslip(
            tenant_id, item.payroll_line_item_id
        )

        assert document.file_name == "liquidacion_Ana_Rojas_2026-10.html"
        assert document.section("closing").get("Líquido a Pagar") == "$836.300"

    async def test_other_tenant_cannot_read(self, session, renderer, calculated_run):
        item = await session.scalar(
            select(PayrollLineItem).where(
                PayrollLineItem.payroll_run_id == calculated_run.payroll_run_id
            )
        )

        with pytest.raises(NotFoundError):
            await PayslipService(session, renderer).generate_payslip(
                uuid4(), item.payroll_line_item_id
            )
