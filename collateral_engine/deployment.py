"""Wire an in-process engine from configuration."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .config import AppConfig
from .engine import PositionEngine
from .fixed_point import to_feed_amount
from .interfaces.price_feed import PriceFeed
from .liquidation import LiquidationEngine
from .logging_setup import configure_logging
from .oracles.pyth import PythOracle, PythPriceFeed
from .oracles.static import StaticPriceFeed
from .registry import TokenRegistry
from .services.monitor import PositionMonitor
from .tokens import InMemoryDebtToken, InMemoryToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deployment:
    config: AppConfig
    engine: PositionEngine
    liquidations: LiquidationEngine
    registry: TokenRegistry
    debt_token: InMemoryDebtToken
    collateral_tokens: dict[str, InMemoryToken]
    feeds: dict[str, PriceFeed]
    oracle: PythOracle | None = None
    pyth_feeds: tuple[PythPriceFeed, ...] = field(default=())

    def monitor(self) -> PositionMonitor:
        return PositionMonitor(
            self.engine, self.config.monitor, self.oracle, self.pyth_feeds
        )

    async def run_monitor(self, log_level: str = "INFO") -> None:
        """Configure logging and watch this deployment's positions until cancelled."""
        configure_logging(log_level)
        await self.monitor().run_continuous()


def _build_feed(config: AppConfig, name: str) -> PriceFeed:
    oracle_cfg = config.price_oracle
    if oracle_cfg.provider == "pyth":
        return PythPriceFeed(oracle_cfg.pyth.feeds[name])
    return StaticPriceFeed(to_feed_amount(oracle_cfg.static.prices[name]))


def deploy(config: AppConfig) -> Deployment:
    """Build tokens, feeds, registry and engines described by ``config``.

    Raises:
        TokenPriceFeedLengthMismatch: collateral tokens and price feeds differ
            in length.
    """
    address = config.engine.address
    tokens = config.collateral.tokens

    # One feed object per name, so assets sharing a name share a feed.
    feeds: dict[str, PriceFeed] = {}
    for name in config.collateral.price_feeds:
        if name not in feeds:
            feeds[name] = _build_feed(config, name)

    registry = TokenRegistry(tokens, [feeds[name] for name in config.collateral.price_feeds])

    collateral_tokens = {asset: InMemoryToken(asset, address) for asset in tokens}
    debt_token = InMemoryDebtToken(config.engine.debt_token, address)

    engine = PositionEngine(
        registry,
        debt_token,
        collateral_tokens,
        engine_address=address,
        stale_after_seconds=config.price_oracle.stale_after_seconds,
    )

    oracle = None
    pyth_feeds: tuple[PythPriceFeed, ...] = ()
    if config.price_oracle.provider == "pyth":
        oracle = PythOracle(config.price_oracle.pyth)
        pyth_feeds = tuple(f for f in feeds.values() if isinstance(f, PythPriceFeed))

    logger.info(
        "Deployed engine %s with collateral %s (%s prices)",
        address, ", ".join(tokens), config.price_oracle.provider,
    )
    return Deployment(
        config=config,
        engine=engine,
        liquidations=LiquidationEngine(engine),
        registry=registry,
        debt_token=debt_token,
        collateral_tokens=collateral_tokens,
        feeds=feeds,
        oracle=oracle,
        pyth_feeds=pyth_feeds,
    )
