"""Development payment provider that needs no external account."""

from urllib.parse import urlencode
from uuid import uuid4

from .base import KIND_PATHS, CheckoutRequest, CheckoutSession, PaymentGateway
from ..core.config import settings


class MockGateway(PaymentGateway):
    """
    Sends the customer to a local mock payment page.

    The page completes the payment by calling
    ``POST /v1/payments/mock/{kind}/{booking_id}``.
    """

    provider = "mock"
    payment_method = "MOCK"
    currency = None

    async def create_checkout(self, request: CheckoutRequest) -> CheckoutSession:
        query = urlencode(
            {"bookingId": request.booking_id, "amount": str(request.amount), "currency": request.currency}
        )
        url = f"{settings.app_url}/{request.locale}/{KIND_PATHS[request.kind]}/mock-payment?{query}"
        return CheckoutSession(payment_id=f"mock_{uuid4().hex}", url=url)
