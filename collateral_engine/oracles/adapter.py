"""The engine's only window onto external price data."""
from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..errors import EngineError, InvalidPrice, PriceUnavailable, StalePrice
from ..fixed_point import PRECISION, Amount, FeedPrice, rescale_feed_price
from ..registry import TokenRegistry

logger = logging.getLogger(__name__)


class PriceOracleAdapter:
    """Reads live feed quotes and converts between asset amounts and USD.

    Nothing is cached: every call re-reads the feed.  Non-positive prices are
    rejected outright.  Staleness is only checked when ``stale_after_seconds``
    is set.
    """

    def __init__(
        self,
        registry: TokenRegistry,
        stale_after_seconds: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._registry = registry
        self._stale_after = stale_after_seconds
        self._clock = clock

    def get_unit_price_usd(self, asset: str) -> Amount:
        """USD price of one whole unit of ``asset`` at ``PRECISION``."""
        feed = self._registry.feed_for(asset)
        try:
            price, updated_at = feed.latest_price()
        except EngineError:
            raise
        except Exception as e:
            logger.error("Price feed for %s failed: %s", asset, e)
            raise PriceUnavailable(asset, str(e)) from e

        if price <= 0:
            raise InvalidPrice(asset, price)

        if self._stale_after is not None:
            age = self._clock() - updated_at
            if age > self._stale_after:
                raise StalePrice(asset, age)

        return rescale_feed_price(FeedPrice(price))

    def usd_value(self, asset: str, amount: int) -> Amount:
        return Amount(self.get_unit_price_usd(asset) * amount // PRECISION)

    def amount_from_usd(self, asset: str, usd_amount: int) -> Amount:
        """Quantity of ``asset`` currently worth ``usd_amount``."""
        return Amount(usd_amount * PRECISION // self.get_unit_price_usd(asset))
