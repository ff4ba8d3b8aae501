"""PDF invoices for bookings."""

import logging
from datetime import date, datetime

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import utcnow
from ..models.agency import Agency
from ..models.booking import BookingKind
from ..models.user import User
from .booking_service import AnyBooking, BookingService

logger = logging.getLogger(__name__)


def pdf_text(value) -> str:
    """Core PDF fonts only cover latin-1."""
    return str(value if value is not None else "").encode("latin-1", "replace").decode("latin-1")


def format_date(value) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.isoformat()
    return "-"


class InvoicePDF(FPDF):
    def header(self):
        self.set_font("Helvetica", "B", 18)
        self.cell(0, 10, "Booki", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_font("Helvetica", "", 9)
        self.cell(0, 5, "Travel booking platform", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(6)

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.cell(0, 10, f"Page {self.page_no()}", align="C")

    def row(self, label: str, value) -> None:
        self.set_font("Helvetica", "B", 10)
        self.cell(55, 7, pdf_text(label))
        self.set_font("Helvetica", "", 10)
        self.cell(0, 7, pdf_text(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


class InvoiceService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookings = BookingService(db)

    def _details(self, kind: BookingKind, booking: AnyBooking) -> list[tuple[str, str]]:
        if kind == BookingKind.TRIP:
            return [
                ("Seats", str(booking.seats_booked)),
                ("Price per seat", f"{booking.original_price_per_seat} {booking.original_currency}"),
            ]
        if kind == BookingKind.HOTEL:
            return [
                ("Check-in", format_date(booking.check_in)),
                ("Check-out", format_date(booking.check_out)),
                ("Guests", f"{booking.adult_count} adult(s), {booking.child_count} child(ren)"),
            ]
        return [
            ("Pick-up", format_date(booking.start_date)),
            ("Return", format_date(booking.end_date)),
            ("Driver", booking.full_name),
            ("Driving licence", booking.driving_license or "-"),
        ]

    async def render_invoice(self, user: User, kind: BookingKind, booking_id: int) -> bytes:
        """
        Render the invoice of a booking the caller may see.

        Raises:
            NotFoundError: If the booking does not exist
            AuthorizationError: If the caller may not see the booking
        """
        booking = await self.bookings.get_booking_or_raise(kind, booking_id)
        await self.bookings.ensure_can_view(user, kind, booking)

        customer = await self.db.get(User, booking.user_id)
        agency_id = await self.bookings.get_agency_id(kind, booking)
        agency = await self.db.get(Agency, agency_id) if agency_id is not None else None
        title = await self.bookings.offer_title(kind, booking)

        pdf = InvoicePDF()
        pdf.add_page()
        pdf.set_font("Helvetica", "B", 14)
        pdf.cell(0, 10, pdf_text(f"Invoice {kind.value.upper()}-{booking.id:06d}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Helvetica", "", 9)
        pdf.cell(0, 6, f"Issued {utcnow().strftime('%Y-%m-%d')}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(4)

        pdf.row("Customer", customer.name if customer else "-")
        pdf.row("Email", customer.email if customer else "-")
        if agency is not None:
            pdf.row("Agency", f"{agency.agency_name} ({agency.agency_unique_id})")
            pdf.row("Agency contact", agency.contact_email)
        pdf.ln(3)

        pdf.row("Booking", title)
        pdf.row("Booked on", format_date(booking.created_at))
        for label, value in self._details(kind, booking):
            pdf.row(label, value)
        pdf.ln(3)

        pdf.row("Status", booking.status)
        pdf.row("Payment status", booking.payment_status)
        pdf.row("Payment method", booking.payment_method or "-")
        pdf.row("Paid on", format_date(booking.payment_date))
        pdf.row("Full price", f"{booking.full_price} {booking.payment_currency}")
        if booking.payment_type == "advance":
            pdf.row("Advance", f"{booking.advance_payment_percentage}%")
        pdf.set_font("Helvetica", "B", 12)
        pdf.cell(
            0,
            10,
            pdf_text(f"Amount charged: {booking.total_price} {booking.payment_currency}"),
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )

        logger.info("Invoice rendered", extra={"kind": kind.value, "booking_id": booking.id, "user_id": user.id})
        return bytes(pdf.output())
