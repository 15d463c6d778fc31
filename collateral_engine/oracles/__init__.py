"""Price sources and the engine-facing price adapter."""
from .adapter import PriceOracleAdapter
from .pyth import PythOracle, PythPriceFeed, PythQuote
from .static import StaticPriceFeed

__all__ = [
    "PriceOracleAdapter",
    "PythOracle",
    "PythPriceFeed",
    "PythQuote",
    "StaticPriceFeed",
]
