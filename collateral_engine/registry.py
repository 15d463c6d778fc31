"""Accepted collateral assets and the price feed each one is valued with."""
from __future__ import annotations

from collections.abc import Iterator, Sequence
from types import MappingProxyType

from .errors import AssetNotAllowed, ConfigMismatch, TokenPriceFeedLengthMismatch
from .interfaces.price_feed import PriceFeed


class TokenRegistry:
    """Immutable AssetId → PriceFeed mapping, fixed at construction."""

    def __init__(self, assets: Sequence[str], feeds: Sequence[PriceFeed]) -> None:
        if len(assets) != len(feeds):
            raise TokenPriceFeedLengthMismatch(len(assets), len(feeds))

        mapping: dict[str, PriceFeed] = {}
        for asset, feed in zip(assets, feeds):
            if asset in mapping:
                raise ConfigMismatch(f"Collateral asset '{asset}' registered twice")
            mapping[asset] = feed

        self._assets = tuple(assets)
        self._feeds = MappingProxyType(mapping)

    @property
    def assets(self) -> tuple[str, ...]:
        return self._assets

    def is_allowed(self, asset: str) -> bool:
        return asset in self._feeds

    def require_allowed(self, asset: str) -> None:
        if asset not in self._feeds:
            raise AssetNotAllowed(asset)

    def feed_for(self, asset: str) -> PriceFeed:
        try:
            return self._feeds[asset]
        except KeyError:
            raise AssetNotAllowed(asset) from None

    def __contains__(self, asset: object) -> bool:
        return asset in self._feeds

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)
