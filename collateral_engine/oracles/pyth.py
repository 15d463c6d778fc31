"""Pyth Network price source backed by the Hermes REST API."""
from __future__ import annotations

import logging
import ssl
from collections.abc import Iterable
from dataclasses import dataclass

import aiohttp
import certifi

from ..config import PythConfig
from ..errors import PriceUnavailable
from ..fixed_point import to_feed_price

logger = logging.getLogger(__name__)


def normalize_feed_id(feed_id: str) -> str:
    """Hermes reports feed ids lower-case and without the ``0x`` prefix."""
    feed_id = feed_id.lower()
    return feed_id[2:] if feed_id.startswith("0x") else feed_id


@dataclass(frozen=True)
class PythQuote:
    """Raw Pyth quote: ``price * 10**expo`` USD, published at ``publish_time``."""

    price: int
    expo: int
    publish_time: int


class PythPriceFeed:
    """Price feed holding the last quote pushed in by :class:`PythOracle`."""

    def __init__(self, feed_id: str) -> None:
        self.feed_id = normalize_feed_id(feed_id)
        self._quote: PythQuote | None = None

    @property
    def quote(self) -> PythQuote | None:
        return self._quote

    def update(self, quote: PythQuote) -> None:
        self._quote = quote

    def latest_price(self) -> tuple[int, int]:
        if self._quote is None:
            raise PriceUnavailable(self.feed_id, "no quote received yet")
        return to_feed_price(self._quote.price, self._quote.expo), self._quote.publish_time


class PythOracle:
    """Fetch quotes from Pyth Network's Hermes service."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url

    async def fetch_quotes(self, feed_ids: Iterable[str]) -> dict[str, PythQuote]:
        """Fetch the latest quote for each feed id.

        Errors are logged and produce an empty (or partial) result; callers
        keep whatever quote they had before.
        """
        quotes: dict[str, PythQuote] = {}

        ids = sorted({normalize_feed_id(fid) for fid in feed_ids})
        if not ids:
            return quotes

        query_params = "&".join([f"ids[]={fid}" for fid in ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return quotes

                    data = await response.json()
                    for item in data.get("parsed", []):
                        feed_id = normalize_feed_id(item.get("id", ""))
                        price_data = item.get("price", {})
                        quotes[feed_id] = PythQuote(
                            price=int(price_data.get("price", 0)),
                            expo=int(price_data.get("expo", 0)),
                            publish_time=int(price_data.get("publish_time", 0)),
                        )

                    logger.info("Fetched %d quotes from Pyth Network", len(quotes))
                    for feed_id, quote in sorted(quotes.items()):
                        logger.debug(
                            "  %s: %de%d @ %d",
                            feed_id, quote.price, quote.expo, quote.publish_time,
                        )

        except Exception as e:
            logger.error("Error fetching prices from Pyth: %s", e)

        return quotes

    async def refresh(self, feeds: Iterable[PythPriceFeed]) -> int:
        """Push fresh quotes into ``feeds``; return how many were updated."""
        feeds = list(feeds)
        quotes = await self.fetch_quotes(feed.feed_id for feed in feeds)

        updated = 0
        for feed in feeds:
            quote = quotes.get(feed.feed_id)
            if quote is None:
                logger.warning("No Pyth quote returned for feed %s", feed.feed_id)
                continue
            feed.update(quote)
            updated += 1
        return updated
