"""Deposits, debt minting, burning and redemption.

Every mutating operation runs inside :meth:`PositionEngine.transaction`: it is
non-reentrant, and either all of its ledger changes and token movements happen
or none do.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager

from .errors import ConfigMismatch, InvalidAmount, ReentrantCall
from .fixed_point import Amount, format_amount
from .health import HealthFactorCalculator, calculate_health_factor
from .interfaces.price_feed import PriceFeed
from .interfaces.tokens import CollateralToken, DebtToken
from .ledgers import CollateralLedger, DebtLedger
from .models import AccountInformation, AssetBalance, PositionSnapshot
from .oracles.adapter import PriceOracleAdapter
from .registry import TokenRegistry
from .transaction import (
    BurnDebtTokens,
    MintDebtTokens,
    PullTokens,
    PushCollateral,
    Transaction,
)

logger = logging.getLogger(__name__)


def _require_positive(amount: int) -> None:
    if amount <= 0:
        raise InvalidAmount(amount)


class PositionEngine:
    """Owns the collateral and debt ledgers and every write to them."""

    def __init__(
        self,
        registry: TokenRegistry,
        debt_token: DebtToken,
        collateral_tokens: Mapping[str, CollateralToken],
        engine_address: str = "collateral-engine",
        stale_after_seconds: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        missing = [asset for asset in registry.assets if asset not in collateral_tokens]
        if missing:
            raise ConfigMismatch(f"No token supplied for collateral {', '.join(missing)}")

        self.address = engine_address
        self._registry = registry
        self._debt_token = debt_token
        self._tokens = {asset: collateral_tokens[asset] for asset in registry.assets}

        self._collateral = CollateralLedger()
        self._debt = DebtLedger()
        self._oracle = PriceOracleAdapter(registry, stale_after_seconds, clock)
        self._health = HealthFactorCalculator(
            registry, self._collateral, self._debt, self._oracle
        )
        self._active: Transaction | None = None

    # ------------------------------------------------------------------
    # Transaction scope
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Guarded, all-or-nothing scope for one top-level operation."""
        if self._active is not None:
            raise ReentrantCall()
        tx = self._active = Transaction()
        self._collateral.begin()
        self._debt.begin()
        try:
            yield tx
            tx.commit()
        except BaseException:
            self._collateral.rollback()
            self._debt.rollback()
            raise
        finally:
            self._collateral.end()
            self._debt.end()
            self._active = None

    def _require_active(self, tx: Transaction) -> None:
        if tx is not self._active:
            raise RuntimeError("Ledger writes must run inside PositionEngine.transaction()")

    # ------------------------------------------------------------------
    # Building blocks (only on the transaction yielded by ``transaction()``)
    # ------------------------------------------------------------------

    def _apply_deposit(self, tx: Transaction, account: str, asset: str, amount: int) -> None:
        self._require_active(tx)
        _require_positive(amount)
        self._registry.require_allowed(asset)
        self._collateral.increase(account, asset, amount)
        tx.stage(PullTokens(self._tokens[asset], account, self.address, amount))

    def _apply_mint(self, tx: Transaction, account: str, amount: int) -> None:
        self._require_active(tx)
        _require_positive(amount)
        self._debt.increase(account, amount)
        tx.stage(MintDebtTokens(self._debt_token, account, amount))
        self._health.require_healthy(account)

    def _apply_burn(
        self, tx: Transaction, on_behalf_of: str, payer: str, amount: int
    ) -> None:
        """Reduce ``on_behalf_of``'s debt using debt tokens supplied by ``payer``."""
        self._require_active(tx)
        _require_positive(amount)
        self._debt.decrease(on_behalf_of, amount)
        tx.stage(PullTokens(self._debt_token, payer, self.address, amount))
        tx.stage(BurnDebtTokens(self._debt_token, self.address, amount))

    def _apply_redeem(
        self, tx: Transaction, from_account: str, to: str, asset: str, amount: int
    ) -> None:
        """Release ``amount`` of ``from_account``'s ``asset`` to ``to``; no health check."""
        self._require_active(tx)
        _require_positive(amount)
        self._registry.require_allowed(asset)
        self._collateral.decrease(from_account, asset, amount)
        tx.stage(PushCollateral(self._tokens[asset], self.address, to, amount))

    # ------------------------------------------------------------------
    # Self-service operations
    # ------------------------------------------------------------------

    def deposit_collateral(self, caller: str, asset: str, amount: int) -> None:
        with self.transaction() as tx:
            self._apply_deposit(tx, caller, asset, amount)
        logger.info("Collateral deposited: %s +%d %s", caller, amount, asset)

    def mint_debt(self, caller: str, amount: int) -> None:
        with self.transaction() as tx:
            self._apply_mint(tx, caller, amount)
        logger.info("Debt minted: %s +%d %s", caller, amount, self._debt_token.symbol)

    def deposit_collateral_and_mint_debt(
        self, caller: str, asset: str, collateral_amount: int, debt_amount: int
    ) -> None:
        with self.transaction() as tx:
            self._apply_deposit(tx, caller, asset, collateral_amount)
            self._apply_mint(tx, caller, debt_amount)
        logger.info(
            "Collateral deposited and debt minted: %s +%d %s, +%d %s",
            caller, collateral_amount, asset, debt_amount, self._debt_token.symbol,
        )

    def burn_debt(self, caller: str, amount: int) -> None:
        with self.transaction() as tx:
            self._apply_burn(tx, caller, caller, amount)
            self._health.require_healthy(caller)
        logger.info("Debt burned: %s -%d %s", caller, amount, self._debt_token.symbol)

    def redeem_collateral(self, caller: str, asset: str, amount: int) -> None:
        with self.transaction() as tx:
            self._apply_redeem(tx, caller, caller, asset, amount)
            self._health.require_healthy(caller)
        logger.info("Collateral redeemed: %s -%d %s", caller, amount, asset)

    def redeem_collateral_for_debt(
        self, caller: str, asset: str, collateral_amount: int, debt_amount: int
    ) -> None:
        """Burn debt first, then release collateral, as one unit."""
        with self.transaction() as tx:
            self._apply_burn(tx, caller, caller, debt_amount)
            self._apply_redeem(tx, caller, caller, asset, collateral_amount)
            self._health.require_healthy(caller)
        logger.info(
            "Debt burned and collateral redeemed: %s -%d %s, -%d %s",
            caller, debt_amount, self._debt_token.symbol, collateral_amount, asset,
        )

    # ------------------------------------------------------------------
    # Read-only queries (never blocked by the guard)
    # ------------------------------------------------------------------

    def get_health_factor(self, account: str) -> Amount:
        return self._health.health_factor(account)

    def projected_health_factor(
        self, account: str, asset: str, collateral_removed: int, debt_removed: int
    ) -> Amount:
        return self._health.projected_health_factor(
            account, asset, collateral_removed, debt_removed
        )

    @staticmethod
    def calculate_health_factor(total_debt: int, collateral_value_usd: int) -> Amount:
        return calculate_health_factor(total_debt, collateral_value_usd)

    def get_account_information(self, account: str) -> AccountInformation:
        return AccountInformation(
            total_debt=self._debt.get(account),
            collateral_value_usd=self._health.total_collateral_value_usd(account),
        )

    def get_account_collateral_value(self, account: str) -> Amount:
        return self._health.total_collateral_value_usd(account)

    def get_collateral_balance(self, account: str, asset: str) -> Amount:
        return self._collateral.get(account, asset)

    def get_debt(self, account: str) -> Amount:
        return self._debt.get(account)

    def get_usd_value(self, asset: str, amount: int) -> Amount:
        return self._oracle.usd_value(asset, amount)

    def get_unit_price_usd(self, asset: str) -> Amount:
        return self._oracle.get_unit_price_usd(asset)

    def get_token_amount_from_usd(self, asset: str, usd_amount: int) -> Amount:
        return self._oracle.amount_from_usd(asset, usd_amount)

    def get_collateral_tokens(self) -> tuple[str, ...]:
        return self._registry.assets

    def get_collateral_token_price_feed(self, asset: str) -> PriceFeed:
        return self._registry.feed_for(asset)

    def get_debt_token(self) -> DebtToken:
        return self._debt_token

    def accounts(self) -> list[str]:
        """Every account that has ever held collateral or debt."""
        seen = dict.fromkeys(self._collateral.accounts())
        seen.update(dict.fromkeys(self._debt.accounts()))
        return list(seen)

    def position_snapshot(self, account: str) -> PositionSnapshot:
        balances = tuple(
            AssetBalance(
                asset=asset,
                amount=amount,
                usd_value=self._oracle.usd_value(asset, amount),
            )
            for asset, amount in self._collateral.holdings(account).items()
            if amount
        )
        collateral_value = sum(b.usd_value for b in balances)
        debt = self._debt.get(account)
        health_factor = calculate_health_factor(debt, collateral_value)
        logger.debug(
            "Snapshot %s: debt=%s collateral=$%s hf=%s",
            account, format_amount(debt), format_amount(collateral_value),
            format_amount(health_factor),
        )
        return PositionSnapshot(
            account=account,
            total_debt=debt,
            collateral_value_usd=collateral_value,
            health_factor=health_factor,
            collateral=balances,
        )
