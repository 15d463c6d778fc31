"""Liquidation of undercollateralized positions.

A liquidator repays part of a target's debt with their own debt tokens and
receives the equivalent collateral plus a bonus.  The whole exchange runs as
one engine transaction and is rejected unless the target's health factor
strictly improves.
"""
from __future__ import annotations

import logging

from .engine import PositionEngine
from .errors import HealthFactorNotImproved, HealthFactorOk, InsufficientBalance, InvalidAmount
from .fixed_point import (
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    MIN_HEALTH_FACTOR,
    format_amount,
)
from .ledgers import DebtLedger
from .models import LiquidationResult

logger = logging.getLogger(__name__)


class LiquidationEngine:
    def __init__(self, engine: PositionEngine) -> None:
        self._engine = engine

    def _size(self, asset: str, target: str, debt_to_cover: int) -> tuple[int, int, int]:
        """Return ``(starting_health_factor, seized_base, bonus)``."""
        if debt_to_cover <= 0:
            raise InvalidAmount(debt_to_cover)

        starting = self._engine.get_health_factor(target)
        if starting >= MIN_HEALTH_FACTOR:
            raise HealthFactorOk(target, starting)

        seized_base = self._engine.get_token_amount_from_usd(asset, debt_to_cover)
        bonus = seized_base * LIQUIDATION_BONUS // LIQUIDATION_PRECISION
        return starting, seized_base, bonus

    def preview_liquidation(
        self, asset: str, target: str, debt_to_cover: int, liquidator: str = ""
    ) -> LiquidationResult:
        """Compute what :meth:`liquidate` would do, without changing anything."""
        starting, seized_base, bonus = self._size(asset, target, debt_to_cover)
        seized = seized_base + bonus

        held = self._engine.get_collateral_balance(target, asset)
        if seized > held:
            raise InsufficientBalance(target, asset, seized, held)
        debt = self._engine.get_debt(target)
        if debt_to_cover > debt:
            raise InsufficientBalance(target, DebtLedger.KEY, debt_to_cover, debt)

        ending = self._engine.projected_health_factor(target, asset, seized, debt_to_cover)
        return LiquidationResult(
            target=target,
            liquidator=liquidator,
            asset=asset,
            debt_covered=debt_to_cover,
            collateral_seized=seized,
            bonus=bonus,
            starting_health_factor=starting,
            ending_health_factor=ending,
        )

    def liquidate(
        self, liquidator: str, asset: str, target: str, debt_to_cover: int
    ) -> LiquidationResult:
        """Cover ``debt_to_cover`` of ``target``'s debt in exchange for its ``asset``."""
        engine = self._engine
        with engine.transaction() as tx:
            starting, seized_base, bonus = self._size(asset, target, debt_to_cover)
            seized = seized_base + bonus

            engine._apply_redeem(tx, target, liquidator, asset, seized)
            engine._apply_burn(tx, target, liquidator, debt_to_cover)

            ending = engine.get_health_factor(target)
            if ending <= starting:
                raise HealthFactorNotImproved(target, starting, ending)

        logger.info(
            "Liquidated %s: %s covered %s debt for %d %s (bonus %d), hf %s -> %s",
            target, liquidator, format_amount(debt_to_cover), seized, asset, bonus,
            format_amount(starting), format_amount(ending),
        )
        return LiquidationResult(
            target=target,
            liquidator=liquidator,
            asset=asset,
            debt_covered=debt_to_cover,
            collateral_seized=seized,
            bonus=bonus,
            starting_health_factor=starting,
            ending_health_factor=ending,
        )
