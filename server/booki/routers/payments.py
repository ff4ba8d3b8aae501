"""Payment provider webhooks, return-page verification and currency conversion."""

import json
import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, CurrentUser
from ..core.exceptions import ValidationError
from ..models.booking import BookingKind
from ..models.user import User
from ..payments import PaymentGateways, convert_currency, get_payment_gateways
from ..payments.currency import SUPPORTED_CURRENCIES
from ..schemas.common import CurrencyConversion
from ..schemas.payment import MockPaymentRequest, PaymentVerification, WebhookAck
from ..services.payment_service import PaymentService
from .bookings import BookingOut, booking_out

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])

GATEWAYS_DEPENDENCY = Depends(get_payment_gateways)


@router.post("/v1/webhooks/stripe", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    db: AsyncSession = DB_DEPENDENCY,
    gateways: PaymentGateways = GATEWAYS_DEPENDENCY,
) -> WebhookAck:
    """
    Stripe checkout events.

    ``checkout.session.completed`` confirms the booking named in the session
    metadata, ``checkout.session.expired`` fails it. Other events are
    acknowledged and ignored.
    """
    payload = await request.body()
    event = gateways.stripe.verify_webhook(payload, stripe_signature)
    return await PaymentService(db).handle_stripe_event(event)


@router.post("/v1/webhooks/flouci/{kind}", response_model=WebhookAck)
async def flouci_webhook(
    kind: BookingKind,
    request: Request,
    db: AsyncSession = DB_DEPENDENCY,
    gateways: PaymentGateways = GATEWAYS_DEPENDENCY,
) -> WebhookAck:
    """Flouci payment notifications; the status is re-checked with Flouci before use."""
    try:
        body = json.loads(await request.body() or b"{}")
    except ValueError:
        raise ValidationError("Webhook body is not valid JSON")
    if not isinstance(body, dict):
        raise ValidationError("Webhook body must be a JSON object")
    return await PaymentService(db).handle_flouci_webhook(kind, body, gateways.flouci)


@router.get("/v1/payments/flouci/verify", response_model=PaymentVerification)
async def verify_flouci_payment(
    kind: BookingKind,
    booking_id: int = Query(..., gt=0),
    payment_id: str = Query(..., min_length=1),
    db: AsyncSession = DB_DEPENDENCY,
    gateways: PaymentGateways = GATEWAYS_DEPENDENCY,
) -> PaymentVerification:
    """Called by the frontend success/failure page after a Flouci redirect."""
    return await PaymentService(db).verify_flouci_return(kind, booking_id, payment_id, gateways.flouci)


@router.post("/v1/payments/mock/{kind}/{booking_id}", response_model=BookingOut)
async def complete_mock_payment(
    kind: BookingKind,
    booking_id: int,
    request: MockPaymentRequest,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingOut:
    booking = await PaymentService(db).complete_mock_payment(user, kind, booking_id, request.success)
    return booking_out(kind, booking)


@router.get("/v1/currency/convert", response_model=CurrencyConversion)
async def convert(
    amount: Decimal = Query(..., ge=0),
    from_currency: str = Query(..., alias="from", min_length=3, max_length=3),
    to_currency: str = Query(..., alias="to", min_length=3, max_length=3),
) -> CurrencyConversion:
    source, target = from_currency.upper(), to_currency.upper()
    for code in (source, target):
        if code not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency '{code}'")
    return CurrencyConversion(
        amount=amount,
        from_currency=source,
        to_currency=target,
        converted=float(convert_currency(amount, source, target)),
    )
