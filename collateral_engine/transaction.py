"""All-or-nothing execution of engine operations.

An operation mutates the ledgers directly and *stages* the external token
calls it needs.  On commit the staged effects run in phase order:

1. ``PULL``: tokens moved into the engine (undone by handing them back)
2. ``BURN``: debt tokens destroyed from the engine's holding (undone by
   minting them back to the engine)
3. ``RELEASE``: tokens leaving the engine: collateral pushed out or debt
   minted. Not reversible, so at most one per operation and always last.

If anything raises, already-executed effects are compensated in reverse and
the ledgers roll back every entry the operation wrote.  Exceptions raised by
a token itself surface as ``TransferFailed`` or ``MintFailed``.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

from .errors import EngineError, MintFailed, TransferFailed
from .interfaces.tokens import CollateralToken, DebtToken

logger = logging.getLogger(__name__)


class Phase(IntEnum):
    PULL = 0
    BURN = 1
    RELEASE = 2


def _invoke(call: Callable[[], bool | None], failure: EngineError) -> bool | None:
    """Run a token call, surfacing foreign exceptions as ``failure``."""
    try:
        return call()
    except EngineError:
        raise
    except Exception as e:
        raise failure from e


@dataclass(frozen=True)
class PullTokens:
    """Move ``amount`` from ``sender`` into the engine."""

    token: CollateralToken | DebtToken
    sender: str
    engine: str
    amount: int
    phase: Phase = Phase.PULL

    def apply(self) -> None:
        failure = TransferFailed(self.token.symbol, self.sender, self.engine, self.amount)
        if not _invoke(
            lambda: self.token.transfer_from(self.sender, self.engine, self.amount), failure
        ):
            raise failure

    def compensate(self) -> None:
        if not self.token.transfer(self.sender, self.amount):
            logger.error(
                "Could not return %d %s to %s", self.amount, self.token.symbol, self.sender
            )


@dataclass(frozen=True)
class BurnDebtTokens:
    token: DebtToken
    engine: str
    amount: int
    phase: Phase = Phase.BURN

    def apply(self) -> None:
        _invoke(
            lambda: self.token.burn(self.amount),
            TransferFailed(self.token.symbol, self.engine, "burn", self.amount),
        )

    def compensate(self) -> None:
        if not self.token.mint(self.engine, self.amount):
            logger.error("Could not re-mint %d burnt %s", self.amount, self.token.symbol)


# Release effects have no compensate(): they run last, so nothing can fail after them.


@dataclass(frozen=True)
class PushCollateral:
    token: CollateralToken
    engine: str
    recipient: str
    amount: int
    phase: Phase = Phase.RELEASE

    def apply(self) -> None:
        failure = TransferFailed(self.token.symbol, self.engine, self.recipient, self.amount)
        if not _invoke(lambda: self.token.transfer(self.recipient, self.amount), failure):
            raise failure


@dataclass(frozen=True)
class MintDebtTokens:
    token: DebtToken
    recipient: str
    amount: int
    phase: Phase = Phase.RELEASE

    def apply(self) -> None:
        failure = MintFailed(self.recipient, self.amount)
        if not _invoke(lambda: self.token.mint(self.recipient, self.amount), failure):
            raise failure


Reversible = PullTokens | BurnDebtTokens
Effect = PullTokens | BurnDebtTokens | PushCollateral | MintDebtTokens


class Transaction:
    """Collects the external effects of one operation and runs them on commit."""

    def __init__(self) -> None:
        self._effects: list[Effect] = []

    @property
    def effects(self) -> tuple[Effect, ...]:
        return tuple(self._effects)

    def stage(self, effect: Effect) -> None:
        if effect.phase is Phase.RELEASE and any(
            e.phase is Phase.RELEASE for e in self._effects
        ):
            raise RuntimeError("An operation may release tokens only once")
        self._effects.append(effect)

    def commit(self) -> None:
        applied: list[Reversible] = []
        try:
            for effect in sorted(self._effects, key=lambda e: e.phase):
                effect.apply()
                if isinstance(effect, (PullTokens, BurnDebtTokens)):
                    applied.append(effect)
        except Exception:
            for reversible in reversed(applied):
                try:
                    reversible.compensate()
                except Exception as e:
                    logger.error("Compensation of %s failed: %s", reversible, e)
            raise
