"""Payment provider callback schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from ..models.booking import BookingKind


class WebhookAck(BaseModel):
    """Acknowledgement returned to a payment provider."""

    received: bool = True
    outcome: str = Field(..., description="completed, failed, unchanged, refund_required or ignored")
    booking_id: Optional[int] = None
    kind: Optional[BookingKind] = None


class MockPaymentRequest(BaseModel):
    success: bool = Field(True, description="Simulate a successful or failed payment")


class PaymentVerification(BaseModel):
    success: bool
    status: str
    booking_id: int
    kind: BookingKind
