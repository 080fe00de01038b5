"""Email rendering and delivery through the Resend API."""

import html
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass

import resend

from src.teamledger.core.config import get_settings
from src.teamledger.core.logging import get_logger
from src.teamledger.models.enums import OtpType

logger = get_logger(__name__)

# Thread pool for email sending with timeout support
_email_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="email_sender")

_BODY_STYLE = (
    "font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;"
)
_BUTTON_STYLE = (
    "background-color: #2563eb; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px; display: inline-block; font-weight: 500;"
)
_CODE_STYLE = (
    "font-size: 32px; font-weight: bold; letter-spacing: 8px; "
    "background: #f3f4f6; padding: 16px 24px; border-radius: 6px; display: inline-block;"
)
_LINK_STYLE = "color: #2563eb; word-break: break-all;"
_MUTED_STYLE = "color: #666; font-size: 14px;"


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str


def send_email(message: EmailMessage) -> bool:
    """Send an email. Blocking; run it off the event loop.

    Returns:
        True if sent (or logged in dev mode), False on error
    """
    settings = get_settings()

    if not settings.resend_api_key:
        logger.warning(
            "RESEND_API_KEY not set - email not sent",
            to=message.to,
            subject=message.subject,
        )
        return True

    resend.api_key = settings.resend_api_key

    def _send() -> None:
        resend.Emails.send(
            {
                "from": settings.email_from,
                "to": [message.to],
                "subject": message.subject,
                "html": message.html,
            }
        )

    try:
        future = _email_executor.submit(_send)
        future.result(timeout=settings.email_send_timeout_seconds)
        logger.info("Email sent", to=message.to, subject=message.subject)
        return True
    except FuturesTimeoutError:
        logger.error(
            "Email send timed out", to=message.to, timeout=settings.email_send_timeout_seconds
        )
        return False
    except Exception as e:
        logger.error("Failed to send email", to=message.to, error=str(e))
        return False


def render_otp_email(to: str, code: str, otp_type: OtpType, expiry_minutes: int) -> EmailMessage:
    """One-time code email for verification or password reset."""
    if otp_type is OtpType.PASSWORD_RESET:
        subject = "Reset your password"
        heading = "Password reset"
        intro = "Use the code below to reset your password:"
    else:
        subject = "Verify your email address"
        heading = "Verify your email"
        intro = "Thanks for signing up! Enter the code below to verify your email address:"

    body = f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{_BODY_STYLE}">
    <h1 style="color: #2563eb; margin-bottom: 24px;">{heading}</h1>
    <p>{intro}</p>
    <p style="margin: 32px 0;"><span style="{_CODE_STYLE}">{html.escape(code)}</span></p>
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        This code will expire in {expiry_minutes} minutes. If you didn't request it,
        you can safely ignore this email.
    </p>
</body>
</html>"""
    return EmailMessage(to=to, subject=subject, html=body)


def render_invite_email(
    to: str,
    token: str,
    organization_name: str,
    inviter_name: str,
    role: str,
    is_registered: bool,
    expire_days: int,
) -> EmailMessage:
    """Invitation email. Unregistered recipients are pointed at signup."""
    settings = get_settings()
    path = "accept-invite" if is_registered else "signup"
    invite_url = f"{settings.app_url}/{path}?token={token}"
    safe_org = html.escape(organization_name)
    safe_inviter = html.escape(inviter_name)
    action = "Accept Invitation" if is_registered else "Create Account"

    body = f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{_BODY_STYLE}">
    <h1 style="color: #2563eb; margin-bottom: 24px;">You're invited!</h1>
    <p><strong>{safe_inviter}</strong> has invited you to join <strong>{safe_org}</strong>
    as {html.escape(role)}.</p>
    <p style="margin: 32px 0;">
        <a href="{invite_url}" style="{_BUTTON_STYLE}">{action}</a>
    </p>
    <p style="{_MUTED_STYLE}">
        Or copy and paste this link into your browser:<br>
        <a href="{invite_url}" style="{_LINK_STYLE}">{invite_url}</a>
    </p>
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        This invitation will expire in {expire_days} days. If you didn't expect this
        invitation, you can safely ignore this email.
    </p>
</body>
</html>"""
    return EmailMessage(
        to=to,
        subject=f"{inviter_name} invited you to join {organization_name}",
        html=body,
    )
