"""Payment providers and currency conversion."""

from functools import lru_cache

from ..core.exceptions import ValidationError
from .base import CheckoutRequest, CheckoutSession, PaymentGateway
from .currency import convert_currency
from .flouci_gateway import FlouciGateway, parse_tracking_id
from .mock_gateway import MockGateway
from .stripe_gateway import StripeGateway


class PaymentGateways:
    """Registry of the configured providers, keyed by provider name."""

    def __init__(self, stripe: StripeGateway, flouci: FlouciGateway, mock: MockGateway):
        self.stripe = stripe
        self.flouci = flouci
        self.mock = mock

    def get(self, provider: str) -> PaymentGateway:
        gateway = {"stripe": self.stripe, "flouci": self.flouci, "mock": self.mock}.get(provider)
        if gateway is None:
            raise ValidationError(f"Unsupported payment provider '{provider}'")
        return gateway


@lru_cache
def get_payment_gateways() -> PaymentGateways:
    """FastAPI dependency; tests override it with fakes."""
    return PaymentGateways(stripe=StripeGateway(), flouci=FlouciGateway(), mock=MockGateway())


__all__ = [
    "CheckoutRequest",
    "CheckoutSession",
    "PaymentGateway",
    "PaymentGateways",
    "StripeGateway",
    "FlouciGateway",
    "MockGateway",
    "convert_currency",
    "get_payment_gateways",
    "parse_tracking_id",
]
