"""Transactional email over an HTTP email API."""

import html
from typing import Iterable

import httpx

from ..core.config import settings
from ..core.observability import get_logger

logger = get_logger(__name__)


def _dedupe_emails(emails: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    deduped: list[str] = []
    for email in emails:
        normalized = (email or "").strip().lower()
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        deduped.append(normalized)
    return deduped


class EmailService:
    """
    Sends mail through a Resend-compatible JSON API.

    Sending never raises: a missing configuration or a provider failure is
    logged and reported as ``False`` so that the business operation that
    triggered the mail still succeeds.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None, timeout: float = 10.0):
        self._transport = transport
        self._timeout = timeout

    async def send(
        self,
        to: Iterable[str] | str,
        subject: str,
        html_body: str,
        text_body: str | None = None,
    ) -> bool:
        if not settings.email_enabled:
            logger.info("Email skipped (missing configuration)", subject=subject)
            return False

        recipients = _dedupe_emails([to] if isinstance(to, str) else to)
        if not recipients:
            logger.info("Email skipped (no recipients)", subject=subject)
            return False

        payload = {
            "from": settings.email_from,
            "to": recipients,
            "subject": subject,
            "html": html_body,
            "text": text_body or subject,
        }
        headers = {"Authorization": f"Bearer {settings.email_api_key}"}

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(settings.email_api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Email delivery failed", subject=subject, error=str(e))
            return False

        if response.status_code >= 400:
            logger.warning(
                "Email provider rejected message",
                subject=subject,
                status_code=response.status_code,
                body=response.text[:500],
            )
            return False

        logger.info("Email sent", subject=subject, recipient_count=len(recipients))
        return True

    async def send_approval_decision(
        self,
        to: str,
        item_type: str,
        item_name: str,
        approved: bool,
        reason: str | None = None,
    ) -> bool:
        decision = "approved" if approved else "rejected"
        subject = f"Your {item_type} \"{item_name}\" was {decision}"
        body = f"<p>Your {html.escape(item_type)} <strong>{html.escape(item_name)}</strong> was {decision}.</p>"
        if reason:
            body += f"<p>Reason: {html.escape(reason)}</p>"
        return await self.send(to, subject, body, f"{subject}. {reason or ''}".strip())

    async def send_withdrawal_decision(
        self,
        to: str,
        amount: str,
        approved: bool,
        admin_notes: str | None = None,
    ) -> bool:
        decision = "approved" if approved else "rejected"
        subject = f"Withdrawal request of {amount} {decision}"
        body = f"<p>Your withdrawal request of <strong>{html.escape(amount)}</strong> was {decision}.</p>"
        if admin_notes:
            body += f"<p>Notes: {html.escape(admin_notes)}</p>"
        return await self.send(to, subject, body)

    async def send_agency_registration(self, agency_name: str, owner_email: str) -> bool:
        """Tell the platform administrators a new agency awaits verification."""
        subject = f"New agency registration: {agency_name}"
        body = (
            f"<p>The agency <strong>{html.escape(agency_name)}</strong> "
            f"({html.escape(owner_email)}) registered and awaits verification.</p>"
        )
        return await self.send(settings.admin_email, subject, body)

    async def send_agency_verified(self, to: str, agency_name: str) -> bool:
        subject = "Your agency has been verified"
        body = f"<p>Congratulations, <strong>{html.escape(agency_name)}</strong> is now verified on Booki.</p>"
        return await self.send(to, subject, body)


def get_email_service() -> EmailService:
    return EmailService()
