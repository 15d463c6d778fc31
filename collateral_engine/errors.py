"""Engine error taxonomy.

Every failure aborts the enclosing operation; the engine restores its ledgers
before the error reaches the caller.
"""
from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine failures."""


class InvalidAmount(EngineError):
    def __init__(self, amount: int) -> None:
        super().__init__(f"Amount must be greater than zero, got {amount}")
        self.amount = amount


class AssetNotAllowed(EngineError):
    def __init__(self, asset: str) -> None:
        super().__init__(f"Collateral asset '{asset}' is not allowed")
        self.asset = asset


class TransferFailed(EngineError):
    def __init__(self, token: str, sender: str, recipient: str, amount: int) -> None:
        super().__init__(
            f"Transfer of {amount} {token} from '{sender}' to '{recipient}' failed"
        )
        self.token = token
        self.sender = sender
        self.recipient = recipient
        self.amount = amount


class MintFailed(EngineError):
    def __init__(self, recipient: str, amount: int) -> None:
        super().__init__(f"Minting {amount} to '{recipient}' failed")
        self.recipient = recipient
        self.amount = amount


class InsufficientBalance(EngineError):
    def __init__(self, account: str, key: str, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient {key} balance for '{account}': "
            f"requested {requested}, available {available}"
        )
        self.account = account
        self.key = key
        self.requested = requested
        self.available = available


class HealthFactorBroken(EngineError):
    def __init__(self, account: str, health_factor: int) -> None:
        super().__init__(f"Health factor of '{account}' broken: {health_factor}")
        self.account = account
        self.health_factor = health_factor


class HealthFactorOk(EngineError):
    def __init__(self, account: str, health_factor: int) -> None:
        super().__init__(
            f"Account '{account}' is not liquidatable (health factor {health_factor})"
        )
        self.account = account
        self.health_factor = health_factor


class HealthFactorNotImproved(EngineError):
    def __init__(self, account: str, starting: int, ending: int) -> None:
        super().__init__(
            f"Liquidation did not improve health factor of '{account}': "
            f"{starting} -> {ending}"
        )
        self.account = account
        self.starting = starting
        self.ending = ending


class ReentrantCall(EngineError):
    def __init__(self) -> None:
        super().__init__("Reentrant call into a mutating engine operation")


class ConfigMismatch(EngineError):
    """Construction-time configuration is inconsistent."""


class TokenPriceFeedLengthMismatch(ConfigMismatch):
    def __init__(self, tokens: int, feeds: int) -> None:
        super().__init__(
            f"Token and price feed lists differ in length: {tokens} != {feeds}"
        )
        self.tokens = tokens
        self.feeds = feeds


class PriceUnavailable(EngineError):
    def __init__(self, asset: str, reason: str = "") -> None:
        message = f"No price available for '{asset}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.asset = asset


class InvalidPrice(EngineError):
    def __init__(self, asset: str, price: int) -> None:
        super().__init__(f"Price feed for '{asset}' returned non-positive price {price}")
        self.asset = asset
        self.price = price


class StalePrice(EngineError):
    def __init__(self, asset: str, age_seconds: float) -> None:
        super().__init__(f"Price for '{asset}' is stale ({age_seconds:.0f}s old)")
        self.asset = asset
        self.age_seconds = age_seconds
