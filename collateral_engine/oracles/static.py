"""Settable price feed for local deployments and simulations."""
from __future__ import annotations

import time

from ..fixed_point import FeedPrice


class StaticPriceFeed:
    """Price feed that reports whatever was last set via ``update_answer``."""

    def __init__(self, price: FeedPrice, updated_at: int | None = None) -> None:
        self._price = price
        self._updated_at = int(time.time()) if updated_at is None else updated_at

    def update_answer(self, price: FeedPrice, updated_at: int | None = None) -> None:
        self._price = price
        self._updated_at = int(time.time()) if updated_at is None else updated_at

    def latest_price(self) -> tuple[int, int]:
        return self._price, self._updated_at
