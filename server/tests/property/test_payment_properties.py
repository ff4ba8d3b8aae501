"""Property-based tests for pricing and payment invariants."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from hypothesis import given
from hypothesis import strategies as st

from booki.models.booking import PaymentType
from booki.payments.base import CheckoutRequest
from booki.payments.currency import SUPPORTED_CURRENCIES, convert_currency, to_minor_units
from booki.payments.flouci_gateway import build_tracking_id, parse_tracking_id
from booki.services.booking_service import compute_payment_amount
from booki.services.car_booking_service import rental_days

# Strategies for generating test data
amounts = st.decimals(min_value=Decimal("0"), max_value=Decimal("100000"), places=2, allow_nan=False, allow_infinity=False)
percentages = st.integers(min_value=1, max_value=100)
currencies = st.sampled_from(sorted(SUPPORTED_CURRENCIES))
booking_ids = st.integers(min_value=1, max_value=10**9)


@given(full=amounts)
def test_full_payment_charges_everything(full):
    assert compute_payment_amount(full, PaymentType.FULL, None) == full


@given(full=amounts, percentage=percentages)
def test_advance_never_exceeds_full_price(full, percentage):
    """An advance is a share of the full price, rounded to cents."""
    advance = compute_payment_amount(full, PaymentType.ADVANCE, percentage)

    assert Decimal("0") <= advance <= full
    assert advance.as_tuple().exponent == -2
    assert abs(advance - full * percentage / 100) <= Decimal("0.005")


@given(full=amounts)
def test_full_advance_equals_full_payment(full):
    assert compute_payment_amount(full, PaymentType.ADVANCE, 100) == full


@given(amount=amounts, source=currencies, target=currencies)
def test_conversion_is_rounded_to_cents(amount, source, target):
    converted = convert_currency(amount, source, target)

    assert converted >= 0
    assert converted.as_tuple().exponent == -2


@given(a=amounts, b=amounts, source=currencies, target=currencies)
def test_conversion_preserves_order(a, b, source, target):
    low, high = sorted((a, b))
    assert convert_currency(low, source, target) <= convert_currency(high, source, target)


@given(amount=amounts)
def test_dinar_minor_units_are_millimes(amount):
    assert to_minor_units(amount, "TND") == int(amount * 1000)


@given(
    booking_id=booking_ids,
    kind=st.sampled_from(["trip", "hotel", "car"]),
    payment_type=st.sampled_from(["full", "advance"]),
    percentage=percentages,
)
def test_flouci_tracking_id_identifies_the_booking(booking_id, kind, payment_type, percentage):
    request = CheckoutRequest(
        kind=kind,
        booking_id=booking_id,
        amount=Decimal("10"),
        currency="TND",
        description="test",
        original_currency="TND",
        payment_type=payment_type,
        advance_percentage=percentage if payment_type == "advance" else None,
    )

    tracking = parse_tracking_id(build_tracking_id(request))

    assert tracking.booking_id == booking_id
    assert tracking.kind == kind


@given(minutes=st.integers(min_value=1, max_value=60 * 24 * 60))
def test_rental_days_cover_the_whole_period(minutes):
    start = datetime(2026, 6, 1, 8, tzinfo=timezone.utc)
    end = start + timedelta(minutes=minutes)

    days = rental_days(start, end)

    assert days >= 1
    assert timedelta(days=days) >= end - start
    assert timedelta(days=days - 1) < end - start
