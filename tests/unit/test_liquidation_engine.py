"""Unit tests for liquidation sizing, execution and previews."""
from __future__ import annotations

import pytest

from collateral_engine.engine import PositionEngine
from collateral_engine.errors import (
    HealthFactorNotImproved,
    HealthFactorOk,
    InsufficientBalance,
    InvalidAmount,
    TransferFailed,
)
from collateral_engine.fixed_point import to_amount, to_feed_amount
from collateral_engine.liquidation import LiquidationEngine
from collateral_engine.oracles.static import StaticPriceFeed
from collateral_engine.tokens import InMemoryDebtToken, InMemoryToken

BOB = "0xBOB"
ENGINE = "engine"


def _set_price(feed: StaticPriceFeed, usd: str) -> None:
    feed.update_answer(to_feed_amount(usd), 1_700_000_000)


@pytest.fixture()
def liquidator(dsc: InMemoryDebtToken) -> str:
    """BOB holds 10,000 DSC and lets the engine pull all of it."""
    dsc.credit(BOB, to_amount("10000"))
    dsc.approve(BOB, to_amount("10000"))
    return BOB


class TestLiquidate:
    def test_partial_liquidation(
        self,
        engine: PositionEngine,
        liquidations: LiquidationEngine,
        alice_with_debt: str,
        liquidator: str,
        weth_feed: StaticPriceFeed,
        weth: InMemoryToken,
        dsc: InMemoryDebtToken,
    ) -> None:
        _set_price(weth_feed, "1000")
        assert engine.get_health_factor(alice_with_debt) == to_amount("0.625")

        result = liquidations.liquidate(liquidator, "WETH", alice_with_debt, to_amount("4000"))

        assert result.collateral_seized == to_amount("4.4")
        assert result.bonus == to_amount("0.4")
        assert result.starting_health_factor == to_amount("0.625")
        assert result.ending_health_factor == to_amount("0.7")

        assert engine.get_debt(alice_with_debt) == to_amount("4000")
        assert engine.get_collateral_balance(alice_with_debt, "WETH") == to_amount("5.6")
        assert weth.balance_of(liquidator) == to_amount("4.4")
        assert dsc.balance_of(liquidator) == to_amount("6000")
        assert dsc.total_supply() == to_amount("14000")

    def test_healthy_target_rejected(
        self, liquidations: LiquidationEngine, alice_with_debt: str, liquidator: str
    ) -> None:
        with pytest.raises(HealthFactorOk):
            liquidations.liquidate(liquidator, "WETH", alice_with_debt, to_amount("100"))

    def test_zero_amount_rejected(
        self,
        liquidations: LiquidationEngine,
        alice_with_debt: str,
        liquidator: str,
        weth_feed: StaticPriceFeed,
    ) -> None:
        _set_price(weth_feed, "1000")
        with pytest.raises(InvalidAmount):
            liquidations.liquidate(liquidator, "WETH", alice_with_debt, 0)

    def test_covering_more_than_debt(
        self,
        engine: PositionEngine,
        liquidations: LiquidationEngine,
        alice_with_debt: str,
        liquidator: str,
        weth_feed: StaticPriceFeed,
    ) -> None:
        _set_price(weth_feed, "1000")
        with pytest.raises(InsufficientBalance):
            liquidations.liquidate(liquidator, "WETH", alice_with_debt, to_amount("9000"))
        assert engine.get_collateral_balance(alice_with_debt, "WETH") == to_amount("10")
        assert engine.get_debt(alice_with_debt) == to_amount("8000")

    def test_seizing_more_than_held(
        self,
        liquidations: LiquidationEngine,
        alice_with_debt: str,
        liquidator: str,
        weth_feed: StaticPriceFeed,
    ) -> None:
        _set_price(weth_feed, "500")
        with pytest.raises(InsufficientBalance):
            liquidations.liquidate(liquidator, "WETH", alice_with_debt, to_amount("8000"))

    def test_health_factor_must_improve(
        self,
        engine: PositionEngine,
        liquidations: LiquidationEngine,
        alice_with_debt: str,
        liquidator: str,
        weth_feed: StaticPriceFeed,
        weth: InMemoryToken,
        dsc: InMemoryDebtToken,
    ) -> None:
        _set_price(weth_feed, "800")
        with pytest.raises(HealthFactorNotImproved) as exc:
            liquidations.liquidate(liquidator, "WETH", alice_with_debt, to_amount("1000"))

        assert exc.value.starting == to_amount("0.5")
        assert exc.value.ending < exc.value.starting
        assert engine.get_debt(alice_with_debt) == to_amount("8000")
        assert engine.get_collateral_balance(alice_with_debt, "WETH") == to_amount("10")
        assert weth.balance_of(liquidator) == 0
        assert dsc.balance_of(liquidator) == to_amount("10000")

    def test_liquidator_without_allowance(
        self,
        engine: PositionEngine,
        liquidations: LiquidationEngine,
        alice_with_debt: str,
        weth_feed: StaticPriceFeed,
        weth: InMemoryToken,
        dsc: InMemoryDebtToken,
    ) -> None:
        dsc.credit(BOB, to_amount("4000"))
        _set_price(weth_feed, "1000")

        with pytest.raises(TransferFailed):
            liquidations.liquidate(BOB, "WETH", alice_with_debt, to_amount("4000"))

        assert engine.get_debt(alice_with_debt) == to_amount("8000")
        assert weth.balance_of(BOB) == 0
        assert weth.balance_of(ENGINE) == to_amount("10")

    def test_target_debt_tokens_untouched(
        self,
        liquidations: LiquidationEngine,
        alice_with_debt: str,
        liquidator: str,
        weth_feed: StaticPriceFeed,
        dsc: InMemoryDebtToken,
    ) -> None:
        _set_price(weth_feed, "1000")
        liquidations.liquidate(liquidator, "WETH", alice_with_debt, to_amount("4000"))
        assert dsc.balance_of(alice_with_debt) == to_amount("8000")


class TestPreviewLiquidation:
    def test_matches_execution(
        self,
        engine: PositionEngine,
        liquidations: LiquidationEngine,
        alice_with_debt: str,
        liquidator: str,
        weth_feed: StaticPriceFeed,
    ) -> None:
        _set_price(weth_feed, "1000")

        preview = liquidations.preview_liquidation(
            "WETH", alice_with_debt, to_amount("4000"), liquidator=liquidator
        )
        assert engine.get_debt(alice_with_debt) == to_amount("8000")

        result = liquidations.liquidate(liquidator, "WETH", alice_with_debt, to_amount("4000"))
        assert preview == result

    def test_healthy_target(
        self, liquidations: LiquidationEngine, alice_with_debt: str
    ) -> None:
        with pytest.raises(HealthFactorOk):
            liquidations.preview_liquidation("WETH", alice_with_debt, to_amount("1"))

    def test_over_seizure(
        self,
        liquidations: LiquidationEngine,
        alice_with_debt: str,
        weth_feed: StaticPriceFeed,
    ) -> None:
        _set_price(weth_feed, "500")
        with pytest.raises(InsufficientBalance) as exc:
            liquidations.preview_liquidation("WETH", alice_with_debt, to_amount("8000"))
        assert exc.value.key == "WETH"
        assert exc.value.requested == to_amount("17.6")
