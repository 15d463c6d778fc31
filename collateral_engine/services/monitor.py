"""Position monitoring — refreshes prices and reports at-risk accounts."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from ..config import MonitorConfig
from ..engine import PositionEngine
from ..errors import EngineError
from ..fixed_point import MIN_HEALTH_FACTOR, format_amount, to_amount
from ..models import PositionSnapshot
from ..oracles.pyth import PythOracle, PythPriceFeed

logger = logging.getLogger(__name__)


def liquidatable(snapshots: Iterable[PositionSnapshot]) -> list[PositionSnapshot]:
    """Positions whose health factor is below the minimum."""
    return [s for s in snapshots if s.health_factor < MIN_HEALTH_FACTOR]


class PositionMonitor:
    """Watches every indebted account of an engine."""

    def __init__(
        self,
        engine: PositionEngine,
        config: MonitorConfig,
        oracle: PythOracle | None = None,
        feeds: Sequence[PythPriceFeed] = (),
    ) -> None:
        self._engine = engine
        self._config = config
        self._oracle = oracle
        self._feeds = list(feeds)
        self._warning_health_factor = to_amount(config.warning_health_factor)

    def _get_status(self, health_factor: int) -> str:
        if health_factor < MIN_HEALTH_FACTOR:
            return "LIQUIDATABLE"
        if health_factor < self._warning_health_factor:
            return "WARNING"
        return "Healthy"

    async def refresh_prices(self) -> int:
        if self._oracle is None or not self._feeds:
            return 0
        return await self._oracle.refresh(self._feeds)

    async def check(self) -> list[PositionSnapshot]:
        """Snapshot every account with outstanding debt."""
        await self.refresh_prices()

        snapshots: list[PositionSnapshot] = []
        for account in self._engine.accounts():
            if self._engine.get_debt(account) == 0:
                continue
            try:
                snapshot = self._engine.position_snapshot(account)
            except EngineError as e:
                logger.error("Could not value position of %s: %s", account, e)
                continue

            status = self._get_status(snapshot.health_factor)
            logger.info(
                "Position — %s · Collateral: $%s  Debt: %s  HF: %s  %s",
                account,
                format_amount(snapshot.collateral_value_usd, 2),
                format_amount(snapshot.total_debt, 2),
                format_amount(snapshot.health_factor),
                status,
            )
            if status == "LIQUIDATABLE":
                logger.error("Account %s is liquidatable", account)
            elif status == "WARNING":
                logger.warning("Account %s is close to liquidation", account)
            snapshots.append(snapshot)

        return snapshots

    async def run_continuous(self, check_interval_minutes: int | None = None) -> None:
        """Run continuous monitoring loop."""
        interval = check_interval_minutes or self._config.check_interval_minutes
        logger.info(
            "Starting continuous monitoring (checking every %d minutes)", interval
        )

        while True:
            try:
                await self.check()
                await asyncio.sleep(interval * 60)
            except Exception as e:
                logger.error("Error in monitoring loop: %s", e)
                await asyncio.sleep(60)
