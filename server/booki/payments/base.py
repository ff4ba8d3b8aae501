"""Payment gateway interface shared by the Stripe, Flouci and mock providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from ..core.config import settings

# Frontend route segment per booking kind
KIND_PATHS = {"trip": "trips", "hotel": "hotels", "car": "cars"}


@dataclass(frozen=True)
class CheckoutRequest:
    """Everything a provider needs to open a payment page for one booking."""

    kind: str
    booking_id: int
    amount: Decimal
    currency: str
    description: str
    original_currency: str
    payment_type: str = "full"
    advance_percentage: Optional[int] = None
    customer_email: Optional[str] = None
    locale: str = "en"
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class CheckoutSession:
    payment_id: str
    url: str


class PaymentGateway(ABC):
    """
    A payment provider able to start a hosted checkout.

    ``currency`` is the currency the provider charges in; ``None`` means the
    offer's own currency is charged as is.
    """

    provider: str
    payment_method: str
    currency: Optional[str] = None

    @abstractmethod
    async def create_checkout(self, request: CheckoutRequest) -> CheckoutSession:
        """
        Open a checkout for ``request``.

        Raises:
            PaymentProviderError: If the provider rejects the request or is unreachable
        """

    def charge_currency(self, offer_currency: str) -> str:
        return self.currency or offer_currency

    @staticmethod
    def return_url(request: CheckoutRequest, outcome: str) -> str:
        """Frontend page the customer lands on after paying (or giving up)."""
        path = KIND_PATHS[request.kind]
        return (
            f"{settings.app_url}/{request.locale}/{path}/payment/{outcome}"
            f"?bookingId={request.booking_id}"
        )
