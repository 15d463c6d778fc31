"""Protocol interfaces for the engine's external collaborators."""
from .price_feed import PriceFeed
from .tokens import CollateralToken, DebtToken

__all__ = ["CollateralToken", "DebtToken", "PriceFeed"]
