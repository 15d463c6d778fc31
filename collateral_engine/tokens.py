"""In-process token ledgers implementing the collateral and debt token protocols."""
from __future__ import annotations

import logging
from collections import defaultdict

logger = logging.getLogger(__name__)


class InMemoryToken:
    """Balance sheet for a single fungible asset.

    ``operator`` is the party whose holding ``transfer`` draws from and who
    spends allowances in ``transfer_from`` (the engine).
    """

    def __init__(self, symbol: str, operator: str) -> None:
        self.symbol = symbol
        self.operator = operator
        self._balances: dict[str, int] = defaultdict(int)
        self._allowances: dict[str, int] = defaultdict(int)
        self._total_supply = 0

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str) -> int:
        """Amount the operator may still pull from ``owner``."""
        return self._allowances.get(owner, 0)

    def total_supply(self) -> int:
        return self._total_supply

    def credit(self, account: str, amount: int) -> None:
        """Create ``amount`` out of thin air for ``account`` (faucet)."""
        self._balances[account] += amount
        self._total_supply += amount

    def approve(self, owner: str, amount: int) -> None:
        self._allowances[owner] = amount

    def _move(self, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0 or self._balances.get(sender, 0) < amount:
            return False
        self._balances[sender] -= amount
        self._balances[recipient] += amount
        return True

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool:
        if sender != self.operator and self._allowances.get(sender, 0) < amount:
            logger.debug("%s allowance of %s too low for %d", self.symbol, sender, amount)
            return False
        if not self._move(sender, recipient, amount):
            logger.debug("%s balance of %s too low for %d", self.symbol, sender, amount)
            return False
        if sender != self.operator:
            self._allowances[sender] -= amount
        return True

    def transfer(self, recipient: str, amount: int) -> bool:
        return self._move(self.operator, recipient, amount)


class InMemoryDebtToken(InMemoryToken):
    """Debt token whose supply only the operator can expand or contract."""

    def mint(self, to: str, amount: int) -> bool:
        if amount <= 0:
            return False
        self.credit(to, amount)
        return True

    def burn(self, amount: int) -> None:
        held = self._balances.get(self.operator, 0)
        if amount <= 0 or held < amount:
            raise ValueError(
                f"Cannot burn {amount} {self.symbol}: operator holds {held}"
            )
        self._balances[self.operator] -= amount
        self._total_supply -= amount
