"""Collateralized debt engine: collateral deposits, pegged-debt minting and liquidation."""
from .engine import PositionEngine
from .liquidation import LiquidationEngine
from .registry import TokenRegistry

__all__ = ["LiquidationEngine", "PositionEngine", "TokenRegistry"]
