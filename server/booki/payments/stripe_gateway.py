"""Stripe Checkout integration."""

import json
from typing import Any

import stripe
from starlette.concurrency import run_in_threadpool

from ..core.config import settings
from ..core.exceptions import PaymentProviderError, ValidationError
from ..core.observability import get_logger
from .base import CheckoutRequest, CheckoutSession, PaymentGateway
from .currency import to_minor_units

logger = get_logger(__name__)


class StripeGateway(PaymentGateway):
    """Hosted Stripe Checkout, always charged in USD."""

    provider = "stripe"
    payment_method = "STRIPE_USD"
    currency = "USD"

    def __init__(self, secret_key: str | None = None, webhook_secret: str | None = None):
        self.secret_key = secret_key if secret_key is not None else settings.stripe_secret_key
        self.webhook_secret = (
            webhook_secret if webhook_secret is not None else settings.stripe_webhook_secret
        )

    def _session_params(self, request: CheckoutRequest) -> dict[str, Any]:
        metadata = {
            "booking_id": str(request.booking_id),
            "booking_type": request.kind,
            "original_currency": request.original_currency,
            "payment_type": request.payment_type,
            "advance_payment_percentage": str(request.advance_percentage or ""),
            **{key: str(value) for key, value in request.metadata.items()},
        }
        params: dict[str, Any] = {
            "payment_method_types": ["card"],
            "mode": "payment",
            "line_items": [
                {
                    "price_data": {
                        "currency": request.currency.lower(),
                        "product_data": {"name": request.description[:100]},
                        # Stripe expects the amount in cents
                        "unit_amount": to_minor_units(request.amount, request.currency),
                    },
                    "quantity": 1,
                }
            ],
            "success_url": self.return_url(request, "success") + "&session_id={CHECKOUT_SESSION_ID}",
            "cancel_url": self.return_url(request, "cancel"),
            "metadata": metadata,
        }
        if request.customer_email:
            params["customer_email"] = request.customer_email
        return params

    async def create_checkout(self, request: CheckoutRequest) -> CheckoutSession:
        if not self.secret_key:
            raise PaymentProviderError("stripe", "Stripe is not configured")

        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.create,
                api_key=self.secret_key,
                **self._session_params(request),
            )
        except stripe.StripeError as e:
            logger.error(
                "Stripe checkout creation failed",
                booking_id=request.booking_id,
                kind=request.kind,
                error=str(e),
            )
            raise PaymentProviderError("stripe", "Could not create Stripe checkout session") from e

        logger.info(
            "Stripe checkout session created",
            booking_id=request.booking_id,
            kind=request.kind,
            session_id=session.id,
        )
        return CheckoutSession(payment_id=session.id, url=session.url)

    def verify_webhook(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """
        Check the ``Stripe-Signature`` header and decode the event.

        Raises:
            ValidationError: If the signature is missing or invalid, or the payload malformed
        """
        if not signature:
            raise ValidationError("Missing Stripe-Signature header")
        if not self.webhook_secret:
            raise PaymentProviderError("stripe", "Stripe webhook secret is not configured")

        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError:
            logger.warning("Stripe webhook signature verification failed")
            raise ValidationError("Invalid Stripe signature")
        except ValueError:
            raise ValidationError("Invalid Stripe webhook payload")

        # Plain dicts downstream, independent of the SDK object model
        return json.loads(payload)
