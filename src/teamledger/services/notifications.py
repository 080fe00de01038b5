"""Notification dispatch - fire-and-forget email jobs.

Services depend on the NotificationDispatcher protocol. The production
implementation hands each email to a Temporal workflow, which retries
delivery; enqueue failures are logged and never fail the caller.
"""

from typing import Protocol
from uuid import uuid4

from src.teamledger.core.config import get_settings
from src.teamledger.core.logging import get_logger
from src.teamledger.core.notifications import EmailMessage, render_invite_email, render_otp_email
from src.teamledger.models.enums import OtpType
from src.teamledger.temporal.activities.email import SendEmailInput
from src.teamledger.temporal.client import get_temporal_client
from src.teamledger.temporal.workflows import EmailDeliveryWorkflow

logger = get_logger(__name__)


class NotificationDispatcher(Protocol):
    async def send_otp(self, email: str, code: str, otp_type: OtpType) -> None: ...

    async def send_invite(
        self,
        email: str,
        token: str,
        organization_name: str,
        inviter_name: str,
        role: str,
        is_registered: bool,
    ) -> None: ...


class TemporalNotificationDispatcher:
    """Enqueue emails as EmailDeliveryWorkflow runs."""

    async def _enqueue(self, message: EmailMessage, kind: str) -> None:
        settings = get_settings()
        workflow_id = f"email-{kind}-{uuid4().hex}"
        try:
            client = await get_temporal_client()
            await client.start_workflow(
                EmailDeliveryWorkflow.run,
                SendEmailInput(
                    to=message.to,
                    subject=message.subject,
                    html=message.html,
                    idempotency_key=workflow_id,
                ),
                id=workflow_id,
                task_queue=settings.temporal_task_queue,
            )
            logger.info("Email enqueued", kind=kind, workflow_id=workflow_id)
        except Exception as e:
            logger.error("Failed to enqueue email", kind=kind, to=message.to, error=str(e))

    async def send_otp(self, email: str, code: str, otp_type: OtpType) -> None:
        settings = get_settings()
        message = render_otp_email(email, code, otp_type, settings.otp_expiry_minutes)
        await self._enqueue(message, otp_type.value)

    async def send_invite(
        self,
        email: str,
        token: str,
        organization_name: str,
        inviter_name: str,
        role: str,
        is_registered: bool,
    ) -> None:
        settings = get_settings()
        message = render_invite_email(
            email,
            token,
            organization_name,
            inviter_name,
            role,
            is_registered,
            settings.invite_expire_days,
        )
        await self._enqueue(message, "invite")
