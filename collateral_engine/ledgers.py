"""Per-account collateral and debt bookkeeping.

Pure containers: solvency rules are enforced by the engine, not here.

Between ``begin()`` and ``end()`` each ledger journals the prior value of
every entry it writes, so ``rollback()`` only touches what the failed
operation changed.
"""
from __future__ import annotations

from .errors import InsufficientBalance
from .fixed_point import Amount


class CollateralLedger:
    """Deposited amount per (account, asset)."""

    def __init__(self) -> None:
        self._balances: dict[str, dict[str, int]] = {}
        self._journal: dict[tuple[str, str], int | None] | None = None

    def get(self, account: str, asset: str) -> Amount:
        return Amount(self._balances.get(account, {}).get(asset, 0))

    def _record(self, account: str, asset: str) -> None:
        if self._journal is None or (account, asset) in self._journal:
            return
        self._journal[(account, asset)] = self._balances.get(account, {}).get(asset)

    def increase(self, account: str, asset: str, amount: int) -> None:
        self._record(account, asset)
        holdings = self._balances.setdefault(account, {})
        holdings[asset] = holdings.get(asset, 0) + amount

    def decrease(self, account: str, asset: str, amount: int) -> None:
        available = self.get(account, asset)
        if amount > available:
            raise InsufficientBalance(account, asset, amount, available)
        self._record(account, asset)
        self._balances[account][asset] = available - amount

    def holdings(self, account: str) -> dict[str, Amount]:
        return {a: Amount(v) for a, v in self._balances.get(account, {}).items()}

    def accounts(self) -> list[str]:
        return list(self._balances)

    def begin(self) -> None:
        self._journal = {}

    def rollback(self) -> None:
        """Undo every write since ``begin()``."""
        for (account, asset), previous in (self._journal or {}).items():
            holdings = self._balances[account]
            if previous is not None:
                holdings[asset] = previous
                continue
            del holdings[asset]
            if not holdings:
                del self._balances[account]
        self._journal = None

    def end(self) -> None:
        self._journal = None


class DebtLedger:
    """Outstanding debt per account, in the pegged unit."""

    KEY = "debt"

    def __init__(self) -> None:
        self._minted: dict[str, int] = {}
        self._journal: dict[str, int | None] | None = None

    def get(self, account: str) -> Amount:
        return Amount(self._minted.get(account, 0))

    def _record(self, account: str) -> None:
        if self._journal is not None and account not in self._journal:
            self._journal[account] = self._minted.get(account)

    def increase(self, account: str, amount: int) -> None:
        self._record(account)
        self._minted[account] = self._minted.get(account, 0) + amount

    def decrease(self, account: str, amount: int) -> None:
        available = self.get(account)
        if amount > available:
            raise InsufficientBalance(account, self.KEY, amount, available)
        self._record(account)
        self._minted[account] = available - amount

    def accounts(self) -> list[str]:
        return list(self._minted)

    def begin(self) -> None:
        self._journal = {}

    def rollback(self) -> None:
        for account, previous in (self._journal or {}).items():
            if previous is None:
                del self._minted[account]
            else:
                self._minted[account] = previous
        self._journal = None

    def end(self) -> None:
        self._journal = None
