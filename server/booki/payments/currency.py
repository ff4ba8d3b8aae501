"""Fixed-rate currency conversion used to price checkouts."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# Units of the target currency per one unit of the source currency
EXCHANGE_RATES: dict[str, dict[str, Decimal]] = {
    "USD": {
        "TND": Decimal("3.125"),
        "EUR": Decimal("0.92"),
        "GBP": Decimal("0.78"),
        "JPY": Decimal("154.5"),
        "CAD": Decimal("1.37"),
        "AUD": Decimal("1.51"),
    },
    "TND": {
        "USD": Decimal("0.32"),
        "EUR": Decimal("0.29"),
        "GBP": Decimal("0.25"),
        "JPY": Decimal("48.5"),
        "CAD": Decimal("0.44"),
        "AUD": Decimal("0.48"),
    },
}

SUPPORTED_CURRENCIES = frozenset(
    {"USD", "TND"} | {code for rates in EXCHANGE_RATES.values() for code in rates}
)


def _direct_rate(source: str, target: str) -> Optional[Decimal]:
    return EXCHANGE_RATES.get(source, {}).get(target)


def _rate(source: str, target: str) -> Optional[Decimal]:
    """Direct rate, its inverse, or a rate derived through a pivot currency."""
    rate = _direct_rate(source, target)
    if rate is not None:
        return rate
    inverse = _direct_rate(target, source)
    if inverse is not None:
        return Decimal(1) / inverse
    return None


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def convert_currency(amount: Decimal, source: str, target: str) -> Decimal:
    """
    Convert ``amount`` from ``source`` to ``target`` currency.

    Lookup order is a direct rate, then a path through USD, then a path
    through TND. When no path exists the amount is returned unchanged.

    Returns:
        Decimal: Converted amount rounded to cents
    """
    amount = Decimal(amount)
    source = source.upper()
    target = target.upper()

    if source == target:
        return quantize(amount)

    rate = _rate(source, target)
    if rate is None:
        for pivot in ("USD", "TND"):
            if pivot in (source, target):
                continue
            first = _rate(source, pivot)
            second = _rate(pivot, target)
            if first is not None and second is not None:
                rate = first * second
                break

    if rate is None:
        logger.warning(
            "No exchange rate available, amount left unconverted",
            extra={"from_currency": source, "to_currency": target},
        )
        return quantize(amount)

    return quantize(amount * rate)


def to_minor_units(amount: Decimal, currency: str) -> int:
    """Smallest indivisible unit used by providers: cents, or millimes for TND."""
    factor = Decimal(1000) if currency.upper() == "TND" else Decimal(100)
    if currency.upper() == "JPY":
        factor = Decimal(1)
    return int((Decimal(amount) * factor).quantize(Decimal(1), rounding=ROUND_HALF_UP))
