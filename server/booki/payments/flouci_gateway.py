"""Flouci (Tunisian dinar wallet and card) integration over its HTTP API."""

import re
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..core.config import settings
from ..core.exceptions import PaymentProviderError
from ..core.observability import get_logger
from .base import CheckoutRequest, CheckoutSession, PaymentGateway
from .currency import to_minor_units

logger = get_logger(__name__)

_TRACKING_PATTERNS = (
    (re.compile(r"^trip_booking_(\d+)$"), "trip"),
    (re.compile(r"^room_booking_(\d+)$"), "hotel"),
    (re.compile(r"^car_(?:full|advance)_(\d+)(?:_\d+pct)?$"), "car"),
    (re.compile(r"^booking_(\d+)$"), None),
    (re.compile(r"^(\d+)$"), None),
)


@dataclass(frozen=True)
class TrackingId:
    booking_id: int
    kind: Optional[str]


def build_tracking_id(request: CheckoutRequest) -> str:
    """Opaque id Flouci echoes back so the webhook can find the booking."""
    if request.kind == "hotel":
        return f"room_booking_{request.booking_id}"
    if request.kind == "car":
        if request.payment_type == "advance":
            return f"car_advance_{request.booking_id}_{request.advance_percentage}pct"
        return f"car_full_{request.booking_id}"
    return f"trip_booking_{request.booking_id}"


def parse_tracking_id(value: str) -> Optional[TrackingId]:
    """
    Recover the booking from a ``developer_tracking_id``.

    Returns None when the value matches none of the known forms. ``kind`` is
    None for the generic ``booking_<id>`` and bare-integer forms.
    """
    value = (value or "").strip()
    for pattern, kind in _TRACKING_PATTERNS:
        match = pattern.match(value)
        if match:
            return TrackingId(booking_id=int(match.group(1)), kind=kind)
    return None


def normalize_status(status: Any) -> str:
    """Map provider payment states onto ``completed``/``failed``/``canceled``/others."""
    value = str(status or "").strip().lower()
    if value in ("success", "completed", "succeeded"):
        return "completed"
    if value in ("failure", "failed"):
        return "failed"
    if value in ("canceled", "cancelled", "expired"):
        return "canceled"
    return value or "unknown"


class FlouciGateway(PaymentGateway):
    """Flouci hosted payment page, charged in TND with amounts in millimes."""

    provider = "flouci"
    payment_method = "FLOUCI_TND"
    currency = "TND"

    def __init__(
        self,
        api_url: str | None = None,
        app_token: str | None = None,
        app_secret: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ):
        self.api_url = (api_url or settings.flouci_api_url).rstrip("/")
        self.app_token = app_token if app_token is not None else settings.flouci_app_token
        self.app_secret = app_secret if app_secret is not None else settings.flouci_app_secret
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            headers={
                "Content-Type": "application/json",
                "apppublic": self.app_token,
                "appsecret": self.app_secret,
            },
        )

    async def create_checkout(self, request: CheckoutRequest) -> CheckoutSession:
        if not self.app_token or not self.app_secret:
            raise PaymentProviderError("flouci", "Flouci is not configured")

        payload = {
            "app_token": self.app_token,
            "app_secret": self.app_secret,
            "amount": str(to_minor_units(request.amount, "TND")),
            "accept_card": "true",
            "session_timeout_secs": settings.flouci_session_timeout_secs,
            "success_link": self.return_url(request, "success"),
            "fail_link": self.return_url(request, "failed"),
            "developer_tracking_id": build_tracking_id(request),
        }

        try:
            async with self._client() as client:
                response = await client.post(f"{self.api_url}/generate_payment", json=payload)
        except httpx.HTTPError as e:
            logger.error("Flouci request failed", booking_id=request.booking_id, error=str(e))
            raise PaymentProviderError("flouci", "Flouci is unreachable") from e

        body = self._json(response)
        result = body.get("result") or {}
        if response.status_code >= 400 or not result.get("success") or not result.get("link"):
            logger.warning(
                "Flouci refused payment generation",
                booking_id=request.booking_id,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise PaymentProviderError("flouci", "Flouci could not generate a payment")

        logger.info(
            "Flouci payment generated",
            booking_id=request.booking_id,
            kind=request.kind,
            payment_id=result.get("payment_id"),
        )
        return CheckoutSession(payment_id=str(result["payment_id"]), url=result["link"])

    async def verify_payment(self, payment_id: str) -> str:
        """
        Ask Flouci for the current state of a payment.

        Returns:
            str: Normalized status, e.g. ``completed``, ``failed`` or ``canceled``

        Raises:
            PaymentProviderError: If the verification call fails
        """
        try:
            async with self._client() as client:
                response = await client.get(f"{self.api_url}/payment_intent/{payment_id}")
        except httpx.HTTPError as e:
            logger.error("Flouci verification request failed", payment_id=payment_id, error=str(e))
            raise PaymentProviderError("flouci", "Flouci is unreachable") from e

        if response.status_code >= 400:
            logger.warning(
                "Flouci verification rejected",
                payment_id=payment_id,
                status_code=response.status_code,
            )
            raise PaymentProviderError("flouci", "Flouci could not verify the payment")

        result = self._json(response).get("result") or {}
        status = normalize_status(result.get("status"))
        logger.info("Flouci payment verified", payment_id=payment_id, status=status)
        return status

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
