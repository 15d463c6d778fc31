"""Health factor: discounted collateral value over outstanding debt."""
from __future__ import annotations

import logging

from .errors import HealthFactorBroken
from .fixed_point import (
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MAX_HEALTH_FACTOR,
    MIN_HEALTH_FACTOR,
    PRECISION,
    Amount,
)
from .ledgers import CollateralLedger, DebtLedger
from .oracles.adapter import PriceOracleAdapter
from .registry import TokenRegistry

logger = logging.getLogger(__name__)


def calculate_health_factor(total_debt: int, collateral_value_usd: int) -> Amount:
    """health_factor = collateral * threshold% * PRECISION / debt.

    Zero debt is treated as unbounded (``MAX_HEALTH_FACTOR``).
    """
    if total_debt == 0:
        return MAX_HEALTH_FACTOR
    adjusted = collateral_value_usd * LIQUIDATION_THRESHOLD // LIQUIDATION_PRECISION
    return Amount(adjusted * PRECISION // total_debt)


class HealthFactorCalculator:
    def __init__(
        self,
        registry: TokenRegistry,
        collateral: CollateralLedger,
        debt: DebtLedger,
        oracle: PriceOracleAdapter,
    ) -> None:
        self._registry = registry
        self._collateral = collateral
        self._debt = debt
        self._oracle = oracle

    def total_collateral_value_usd(self, account: str) -> Amount:
        total = 0
        for asset in self._registry.assets:
            amount = self._collateral.get(account, asset)
            if amount:
                total += self._oracle.usd_value(asset, amount)
        return Amount(total)

    def health_factor(self, account: str) -> Amount:
        debt = self._debt.get(account)
        if debt == 0:
            return MAX_HEALTH_FACTOR
        return calculate_health_factor(debt, self.total_collateral_value_usd(account))

    def require_healthy(self, account: str) -> None:
        value = self.health_factor(account)
        if value < MIN_HEALTH_FACTOR:
            logger.warning("Health factor of %s would drop to %d", account, value)
            raise HealthFactorBroken(account, value)

    def projected_health_factor(
        self, account: str, asset: str, collateral_removed: int, debt_removed: int
    ) -> Amount:
        """Health factor ``account`` would have after removing the given amounts."""
        debt = self._debt.get(account) - debt_removed
        if debt <= 0:
            return MAX_HEALTH_FACTOR
        total = 0
        for registered in self._registry.assets:
            amount = self._collateral.get(account, registered)
            if registered == asset:
                amount -= collateral_removed
            if amount > 0:
                total += self._oracle.usd_value(registered, amount)
        return calculate_health_factor(debt, total)
