"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass

from .fixed_point import MIN_HEALTH_FACTOR


@dataclass(frozen=True)
class AccountInformation:
    """Debt and collateral totals of one account, both at ``PRECISION``."""

    total_debt: int
    collateral_value_usd: int


@dataclass(frozen=True)
class AssetBalance:
    """Single collateral holding within a position."""

    asset: str
    amount: int
    usd_value: int


@dataclass(frozen=True)
class PositionSnapshot:
    """Point-in-time view of an account's position."""

    account: str
    total_debt: int
    collateral_value_usd: int
    health_factor: int
    collateral: tuple[AssetBalance, ...] = ()

    @property
    def liquidatable(self) -> bool:
        return self.health_factor < MIN_HEALTH_FACTOR


@dataclass(frozen=True)
class LiquidationResult:
    """Outcome of a liquidation (or its preview)."""

    target: str
    liquidator: str
    asset: str
    debt_covered: int
    collateral_seized: int
    bonus: int
    starting_health_factor: int
    ending_health_factor: int
