"""Token protocols — collateral asset and debt token primitives.

``transfer`` and ``burn`` always act on the engine's own holding.
"""
from typing import Protocol


class CollateralToken(Protocol):
    """Abstract interface for moving one collateral asset."""

    symbol: str

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer(self, recipient: str, amount: int) -> bool: ...


class DebtToken(Protocol):
    """Abstract interface for the pegged debt token the engine controls."""

    symbol: str

    def mint(self, to: str, amount: int) -> bool: ...

    def burn(self, amount: int) -> None: ...

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer(self, recipient: str, amount: int) -> bool: ...
