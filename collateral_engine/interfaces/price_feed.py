"""Price feed protocol."""
from typing import Protocol


class PriceFeed(Protocol):
    """A USD price source quoting at ``FEED_PRECISION``."""

    def latest_price(self) -> tuple[int, int]:
        """Return ``(price, updated_at)``; ``updated_at`` is a Unix timestamp."""
        ...
