"""Reconciliation of booking payments with provider callbacks."""

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import utcnow
from ..core.exceptions import AuthorizationError, ConflictError, UnavailableError, ValidationError
from ..core.observability import metrics_collector
from ..models.booking import BookingKind, BookingStatus, PaymentMethod, PaymentStatus, PaymentType
from ..models.notification import NotificationType
from ..models.trip import Trip
from ..models.user import User, UserRole
from ..payments import FlouciGateway, parse_tracking_id
from ..schemas.booking import CompletePaymentResponse
from ..schemas.payment import PaymentVerification, WebhookAck
from .agency_service import AgencyService
from .booking_service import AnyBooking, BookingService
from .notification_service import NotificationService
from .wallet_service import WalletService

logger = logging.getLogger(__name__)

STRIPE_COMPLETED = "checkout.session.completed"
STRIPE_EXPIRED = "checkout.session.expired"


def parse_kind(value: Any) -> BookingKind:
    try:
        return BookingKind(str(value).lower())
    except ValueError:
        raise ValidationError(f"Unknown booking type '{value}'")


class PaymentService:
    """
    Moves bookings to paid or failed exactly once, whatever the callback path.

    Every transition to a completed payment credits the agency wallet; repeated
    callbacks for the same outcome are acknowledged without side effects.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookings = BookingService(db)
        self.wallets = WalletService(db)
        self.notifications = NotificationService(db)
        self.agencies = AgencyService(db)

    async def _reclaim_resources(self, kind: BookingKind, booking: AnyBooking) -> bool:
        """
        Take back the seats of a booking whose hold was released.

        Returns False, leaving the trip untouched, when the seats were resold
        in the meantime.
        """
        if kind != BookingKind.TRIP:
            return True
        trip = await self.db.get(Trip, booking.trip_id)
        if trip is None:
            return True
        if trip.capacity < booking.seats_booked:
            logger.warning(
                "Late payment for a trip without enough seats left",
                extra={
                    "trip_id": trip.id,
                    "booking_id": booking.id,
                    "seats": booking.seats_booked,
                    "available": trip.capacity,
                },
            )
            return False
        trip.capacity -= booking.seats_booked
        return True

    async def _refuse_late_payment(
        self,
        kind: BookingKind,
        booking: AnyBooking,
        provider: str,
        payment_id: Optional[str],
    ) -> tuple[AnyBooking, str]:
        """Leave the booking failed and ask the admins to refund the customer."""
        if payment_id and not booking.payment_id:
            booking.payment_id = payment_id
        title = await self.bookings.offer_title(kind, booking)
        await self.notifications.notify_admins(
            title="Refund required",
            message=(
                f"Booking #{booking.id} for {title} was paid via {provider} after its seats were resold; "
                f"refund {booking.total_price} {booking.payment_currency} (payment {booking.payment_id})"
            ),
            type=NotificationType.ERROR,
            related_item_type=BookingKind(kind).value,
            related_item_id=booking.id,
        )
        await self.notifications.notify_user(
            booking.user_id,
            title="Booking could not be confirmed",
            message=f"Your payment for {title} arrived after the seats were sold out and will be refunded",
            type=NotificationType.WARNING,
            related_item_type=BookingKind(kind).value,
            related_item_id=booking.id,
        )
        await self.db.commit()
        await self.db.refresh(booking)
        metrics_collector.record_payment_reconciled(provider, "refund_required")
        logger.warning(
            "Late payment refused",
            extra={"kind": BookingKind(kind).value, "booking_id": booking.id, "provider": provider},
        )
        return booking, "refund_required"

    async def _record_payment(self, kind: BookingKind, booking: AnyBooking) -> None:
        """Mark the payment completed, credit the agency and queue notifications."""
        booking.payment_status = PaymentStatus.COMPLETED
        booking.payment_date = utcnow()

        agency_id = await self.bookings.get_agency_id(kind, booking)
        title = await self.bookings.offer_title(kind, booking)
        if agency_id is not None:
            await self.wallets.credit_booking(agency_id, kind, booking)
            await self.notifications.notify_agency(
                agency_id,
                title="New paid booking",
                message=f"Booking #{booking.id} for {title} was paid ({booking.total_price} {booking.payment_currency})",
                type=NotificationType.SUCCESS,
                related_item_type=BookingKind(kind).value,
                related_item_id=booking.id,
            )
        else:
            logger.warning(
                "Paid booking has no agency to credit",
                extra={"kind": BookingKind(kind).value, "booking_id": booking.id},
            )
        await self.notifications.notify_user(
            booking.user_id,
            title="Payment received",
            message=f"Your payment for {title} was received",
            type=NotificationType.SUCCESS,
            related_item_type=BookingKind(kind).value,
            related_item_id=booking.id,
        )

    async def mark_paid(
        self,
        kind: BookingKind,
        booking_id: int,
        provider: str,
        payment_id: Optional[str] = None,
    ) -> tuple[AnyBooking, str]:
        """
        Record a successful payment.

        A payment for a failed or canceled booking first takes its released
        seats back; if they were resold the booking stays failed and the
        admins are asked to refund it.

        Returns:
            The booking and ``completed``, ``unchanged`` when it was already
            paid, or ``refund_required``

        Raises:
            NotFoundError: If the booking does not exist
        """
        booking = await self.bookings.get_booking_for_update(kind, booking_id)
        if booking.is_paid:
            logger.info(
                "Payment already recorded",
                extra={"kind": BookingKind(kind).value, "booking_id": booking_id, "provider": provider},
            )
            metrics_collector.record_payment_reconciled(provider, "unchanged")
            return booking, "unchanged"

        if not booking.is_active and not await self._reclaim_resources(kind, booking):
            return await self._refuse_late_payment(kind, booking, provider, payment_id)

        if payment_id and not booking.payment_id:
            booking.payment_id = payment_id
        await self._record_payment(kind, booking)
        booking.status = (
            BookingStatus.PARTIALLY_PAID if booking.payment_type == PaymentType.ADVANCE else BookingStatus.CONFIRMED
        )
        await self.db.commit()
        await self.db.refresh(booking)
        metrics_collector.record_payment_reconciled(provider, "completed")

        logger.info(
            "Payment completed",
            extra={
                "kind": BookingKind(kind).value,
                "booking_id": booking_id,
                "provider": provider,
                "status": booking.status,
            },
        )
        return booking, "completed"

    async def mark_failed(self, kind: BookingKind, booking_id: int, provider: str) -> tuple[AnyBooking, str]:
        """
        Record a failed or abandoned payment and release held resources.

        A completed payment is never downgraded.
        """
        booking = await self.bookings.get_booking_for_update(kind, booking_id)
        if booking.is_paid:
            logger.warning(
                "Ignoring failure for a paid booking",
                extra={"kind": BookingKind(kind).value, "booking_id": booking_id, "provider": provider},
            )
            metrics_collector.record_payment_reconciled(provider, "unchanged")
            return booking, "unchanged"
        if booking.payment_status == PaymentStatus.FAILED and not booking.is_active:
            metrics_collector.record_payment_reconciled(provider, "unchanged")
            return booking, "unchanged"

        was_active = booking.is_active
        booking.status = BookingStatus.FAILED
        booking.payment_status = PaymentStatus.FAILED
        if was_active:
            await self.bookings.release_resources(kind, booking)
        await self.notifications.notify_user(
            booking.user_id,
            title="Payment failed",
            message=f"The payment for your booking #{booking.id} did not go through",
            type=NotificationType.ERROR,
            related_item_type=BookingKind(kind).value,
            related_item_id=booking.id,
        )
        await self.db.commit()
        await self.db.refresh(booking)
        metrics_collector.record_payment_reconciled(provider, "failed")

        logger.info(
            "Payment failed",
            extra={"kind": BookingKind(kind).value, "booking_id": booking_id, "provider": provider},
        )
        return booking, "failed"

    # Provider callbacks

    async def handle_stripe_event(self, event: dict[str, Any]) -> WebhookAck:
        """
        Apply a verified Stripe event.

        Raises:
            ValidationError: If a checkout event carries no usable booking metadata
            NotFoundError: If the booking does not exist
        """
        event_type = event.get("type", "unknown")
        metrics_collector.record_webhook("stripe", event_type)

        if event_type not in (STRIPE_COMPLETED, STRIPE_EXPIRED):
            logger.info("Stripe event ignored", extra={"event_type": event_type, "event_id": event.get("id")})
            return WebhookAck(outcome="ignored")

        session = (event.get("data") or {}).get("object") or {}
        metadata = session.get("metadata") or {}
        raw_id = metadata.get("booking_id")
        if raw_id is None or not str(raw_id).isdigit():
            raise ValidationError("Stripe session metadata has no booking_id")
        kind = parse_kind(metadata.get("booking_type") or BookingKind.TRIP.value)
        booking_id = int(raw_id)

        if event_type == STRIPE_COMPLETED:
            _, outcome = await self.mark_paid(kind, booking_id, "stripe", payment_id=session.get("id"))
        else:
            _, outcome = await self.mark_failed(kind, booking_id, "stripe")
        return WebhookAck(outcome=outcome, booking_id=booking_id, kind=kind)

    async def handle_flouci_webhook(
        self,
        kind: BookingKind,
        body: dict[str, Any],
        gateway: FlouciGateway,
    ) -> WebhookAck:
        """
        Apply a Flouci notification after checking its status with Flouci.

        Raises:
            ValidationError: If the body lacks ids or the tracking id is unknown
            PaymentProviderError: If Flouci cannot confirm the payment state
            NotFoundError: If the booking does not exist
        """
        payment_id = body.get("payment_id")
        tracking_value = body.get("developer_tracking_id")
        if not payment_id or not tracking_value:
            raise ValidationError("payment_id and developer_tracking_id are required")

        tracking = parse_tracking_id(str(tracking_value))
        if tracking is None:
            raise ValidationError(f"Unrecognized tracking id '{tracking_value}'")
        if tracking.kind is not None and tracking.kind != BookingKind(kind).value:
            raise ValidationError(f"Tracking id '{tracking_value}' is not a {BookingKind(kind).value} booking")

        status = await gateway.verify_payment(str(payment_id))
        metrics_collector.record_webhook("flouci", status)

        if status == "completed":
            _, outcome = await self.mark_paid(kind, tracking.booking_id, "flouci", payment_id=str(payment_id))
        elif status in ("failed", "canceled"):
            _, outcome = await self.mark_failed(kind, tracking.booking_id, "flouci")
        else:
            await self.bookings.get_booking_or_raise(kind, tracking.booking_id)
            logger.info(
                "Flouci payment still in progress",
                extra={"booking_id": tracking.booking_id, "status": status},
            )
            outcome = "unchanged"
        return WebhookAck(outcome=outcome, booking_id=tracking.booking_id, kind=kind)

    async def verify_flouci_return(
        self,
        kind: BookingKind,
        booking_id: int,
        payment_id: str,
        gateway: FlouciGateway,
    ) -> PaymentVerification:
        """Settle a booking when the customer comes back from the Flouci page."""
        booking = await self.bookings.get_booking_or_raise(kind, booking_id)
        if booking.payment_id and booking.payment_id != payment_id:
            raise ValidationError("payment_id does not belong to this booking")

        status = await gateway.verify_payment(payment_id)
        if status == "completed":
            _, outcome = await self.mark_paid(kind, booking_id, "flouci", payment_id=payment_id)
            success = outcome != "refund_required"
        else:
            await self.mark_failed(kind, booking_id, "flouci")
            success = False
        return PaymentVerification(success=success, status=status, booking_id=booking_id, kind=kind)

    async def complete_mock_payment(
        self,
        user: User,
        kind: BookingKind,
        booking_id: int,
        success: bool,
    ) -> AnyBooking:
        """Finish a mock checkout; only the customer who booked may do it."""
        booking = await self.bookings.get_booking_or_raise(kind, booking_id)
        if booking.user_id != user.id:
            raise AuthorizationError("You cannot pay for this booking")
        if booking.payment_method != PaymentMethod.MOCK:
            raise ConflictError(detail="This booking is not paid through the mock provider")

        if success:
            booking, _ = await self.mark_paid(kind, booking_id, "mock")
        else:
            booking, _ = await self.mark_failed(kind, booking_id, "mock")
        return booking

    async def complete_payment_manually(self, user: User, kind: BookingKind, booking_id: int) -> CompletePaymentResponse:
        """
        Mark a booking completed and paid outside any provider, e.g. cash on site.

        Agency staff may only do this for bookings of their own offers.
        """
        booking = await self.bookings.get_booking_for_update(kind, booking_id)
        if user.role != UserRole.ADMIN:
            if not user.is_agency_staff:
                raise AuthorizationError("Only agency staff or administrators can complete payments")
            agency = await self.agencies.get_agency_for_user(user)
            if agency.id != await self.bookings.get_agency_id(kind, booking):
                raise AuthorizationError("This booking belongs to another agency")

        wallet_credited = False
        if not booking.is_paid:
            if not booking.is_active and not await self._reclaim_resources(kind, booking):
                raise UnavailableError(
                    detail="The seats of this booking were resold; it cannot be completed",
                    resource_type=BookingKind(kind).value,
                    resource_id=booking.id,
                )
            if not booking.payment_method:
                booking.payment_method = PaymentMethod.MANUAL
            await self._record_payment(kind, booking)
            wallet_credited = True
        booking.status = BookingStatus.COMPLETED

        await self.db.commit()
        await self.db.refresh(booking)
        metrics_collector.record_payment_reconciled("manual", "completed" if wallet_credited else "unchanged")

        logger.info(
            "Payment completed manually",
            extra={
                "kind": BookingKind(kind).value,
                "booking_id": booking_id,
                "by_user_id": user.id,
                "wallet_credited": wallet_credited,
            },
        )
        return CompletePaymentResponse(
            kind=kind,
            booking_id=booking.id,
            status=booking.status,
            payment_status=booking.payment_status,
            wallet_credited=wallet_credited,
        )
