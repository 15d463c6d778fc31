"""Fixed-point units — ledger amounts vs. raw price-feed quotes.

Ledger values (collateral amounts, debt, USD values, health factors) are
integers scaled by ``PRECISION``.  Price feeds quote at ``FEED_PRECISION``;
the only way to bring a feed price onto the ledger scale is
:func:`rescale_feed_price`.
"""
from __future__ import annotations

from decimal import Decimal
from typing import NewType

Amount = NewType("Amount", int)
FeedPrice = NewType("FeedPrice", int)

PRECISION = 10**18
FEED_DECIMALS = 8
FEED_PRECISION = 10**FEED_DECIMALS
ADDITIONAL_FEED_PRECISION = PRECISION // FEED_PRECISION

LIQUIDATION_THRESHOLD = 50
LIQUIDATION_BONUS = 10
LIQUIDATION_PRECISION = 100

MIN_HEALTH_FACTOR = Amount(PRECISION)
MAX_HEALTH_FACTOR = Amount(2**256 - 1)


def rescale_feed_price(price: FeedPrice) -> Amount:
    """Lift a feed quote to ledger precision."""
    return Amount(price * ADDITIONAL_FEED_PRECISION)


def to_feed_price(raw: int, expo: int) -> FeedPrice:
    """Convert a ``raw * 10**expo`` quote to ``FEED_PRECISION``.

    Digits beyond ``FEED_DECIMALS`` are truncated.

    Examples:
        to_feed_price(200000000000, -8) → 200000000000
        to_feed_price(2000, 0)          → 200000000000
        to_feed_price(2000123456789, -9) → 200012345678
    """
    shift = expo + FEED_DECIMALS
    if shift >= 0:
        return FeedPrice(raw * 10**shift)
    return FeedPrice(raw // 10**-shift)


def to_amount(value: str | int | float | Decimal) -> Amount:
    """Convert a human-readable quantity (e.g. ``"4.4"``) to an ``Amount``."""
    return Amount(int(Decimal(str(value)) * PRECISION))


def to_feed_amount(value: str | int | float | Decimal) -> FeedPrice:
    """Convert a human-readable USD price (e.g. ``"2000"``) to a ``FeedPrice``."""
    return FeedPrice(int(Decimal(str(value)) * FEED_PRECISION))


def format_amount(value: int, places: int = 4) -> str:
    """Render a ledger-precision integer for logs, e.g. ``1.2500``."""
    if value >= MAX_HEALTH_FACTOR:
        return "inf"
    quantum = Decimal(1).scaleb(-places)
    return str((Decimal(value) / PRECISION).quantize(quantum))
