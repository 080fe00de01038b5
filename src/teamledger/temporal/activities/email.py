"""Email delivery activity."""

import asyncio
from dataclasses import dataclass

from temporalio import activity
from temporalio.exceptions import ApplicationError

from src.teamledger.core.notifications import EmailMessage, send_email


@dataclass
class SendEmailInput:
    to: str
    subject: str
    html: str
    idempotency_key: str | None = None


@activity.defn
async def deliver_email(input: SendEmailInput) -> bool:
    """Send one rendered email.

    Raises ApplicationError on failure so the workflow's retry policy
    re-attempts delivery (at-least-once).
    """
    activity.logger.info(f"Delivering email to {input.to}: {input.subject}")
    sent = await asyncio.to_thread(
        send_email, EmailMessage(to=input.to, subject=input.subject, html=input.html)
    )
    if not sent:
        raise ApplicationError(f"Email delivery to {input.to} failed")
    return True
