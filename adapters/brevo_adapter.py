"""
Brevo adapter: transactional invite email, with dry-run support.

send_invite never raises; every failure comes back as EmailResult(success=False).
"""
from __future__ import annotations

from dataclasses import dataclass
import hashlib
from urllib.parse import quote

from apps.core.errors import GatewayError
from packages.utils.logging import get_logger

from .http_client import HTTPClientProtocol

_log = get_logger("adapters.brevo")

INVITE_SUBJECT = "Invitation to join our platform"
NOT_CONFIGURED = "Email service not configured"


@dataclass(frozen=True)
class EmailSender:
    name: str = "Love&Pixels"
    email: str = ""


@dataclass(frozen=True)
class EmailResult:
    success: bool
    error: str | None = None
    message_id: str | None = None


def signup_link(app_url: str, email: str) -> str:
    return f"{app_url.rstrip('/')}/auth/signup?email={quote(email, safe='')}"


def invite_html(role: str, link: str) -> str:
    return (
        "<h1>You've been invited!</h1>"
        f"<p>You have been invited to join our platform as a {role}.</p>"
        "<p>Click the link below to set up your account:</p>"
        f'<a href="{link}">Set up your account</a>'
    )


class BrevoAdapter:
    """Send templated invites through the Brevo SMTP API.

    In dry-run mode, returns a deterministic success without network calls.
    """

    SEND_URL = "https://api.brevo.com/v3/smtp/email"

    def __init__(
        self,
        api_key: str | None,
        *,
        sender: EmailSender | None = None,
        app_url: str = "http://localhost:3000",
        http_client: HTTPClientProtocol | None = None,
        dry_run: bool = False,
    ) -> None:
        self.api_key = api_key
        self.sender = sender or EmailSender()
        self.app_url = app_url
        self.http_client = http_client
        self.dry_run = bool(dry_run)

    def build_payload(self, email: str, role: str) -> dict:
        return {
            "sender": {"name": self.sender.name, "email": self.sender.email},
            "to": [{"email": email, "name": email.split("@")[0]}],
            "subject": INVITE_SUBJECT,
            "htmlContent": invite_html(role, signup_link(self.app_url, email)),
        }

    def send_invite(self, email: str, role: str) -> EmailResult:
        payload = self.build_payload(email, role)
        if self.dry_run:
            digest = hashlib.sha1(f"{email}|{role}".encode("utf-8")).hexdigest()[:12]
            return EmailResult(success=True, message_id=f"dry-run-{digest}")

        if not self.api_key:
            _log.error("brevo.not_configured")
            return EmailResult(success=False, error=NOT_CONFIGURED)
        if self.http_client is None:
            return EmailResult(success=False, error="BrevoAdapter requires an http_client in non-dry-run mode")

        headers = {"Accept": "application/json", "api-key": self.api_key}
        try:
            res = self.http_client.post(self.SEND_URL, headers=headers, json=payload)
        except GatewayError as exc:
            _log.warning("brevo.send_failed", extra={"data": {"role": role, "error": str(exc)}})
            return EmailResult(success=False, error=str(exc))
        message_id = res.get("messageId") if isinstance(res, dict) else None
        _log.info("brevo.sent", extra={"data": {"role": role, "message_id": message_id}})
        return EmailResult(success=True, message_id=message_id)
