"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from collateral_engine.config import (
    AppConfig,
    CollateralConfig,
    EngineConfig,
    MonitorConfig,
    PriceOracleConfig,
    StaticFeedsConfig,
)
from collateral_engine.engine import PositionEngine
from collateral_engine.fixed_point import to_amount, to_feed_amount
from collateral_engine.liquidation import LiquidationEngine
from collateral_engine.models import AssetBalance, PositionSnapshot
from collateral_engine.oracles.static import StaticPriceFeed
from collateral_engine.registry import TokenRegistry
from collateral_engine.tokens import InMemoryDebtToken, InMemoryToken

ENGINE = "engine"
ALICE = "0xALICE"
BOB = "0xBOB"

# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def weth_feed() -> StaticPriceFeed:
    return StaticPriceFeed(to_feed_amount(2000), updated_at=1_700_000_000)


@pytest.fixture()
def wbtc_feed() -> StaticPriceFeed:
    return StaticPriceFeed(to_feed_amount(1000), updated_at=1_700_000_000)


@pytest.fixture()
def weth() -> InMemoryToken:
    return InMemoryToken("WETH", ENGINE)


@pytest.fixture()
def wbtc() -> InMemoryToken:
    return InMemoryToken("WBTC", ENGINE)


@pytest.fixture()
def dsc() -> InMemoryDebtToken:
    return InMemoryDebtToken("DSC", ENGINE)


@pytest.fixture()
def registry(weth_feed: StaticPriceFeed, wbtc_feed: StaticPriceFeed) -> TokenRegistry:
    return TokenRegistry(["WETH", "WBTC"], [weth_feed, wbtc_feed])


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine(
    registry: TokenRegistry,
    dsc: InMemoryDebtToken,
    weth: InMemoryToken,
    wbtc: InMemoryToken,
) -> PositionEngine:
    return PositionEngine(
        registry, dsc, {"WETH": weth, "WBTC": wbtc}, engine_address=ENGINE
    )


@pytest.fixture()
def liquidations(engine: PositionEngine) -> LiquidationEngine:
    return LiquidationEngine(engine)


@pytest.fixture()
def fund() -> Callable[[InMemoryToken, str, str], None]:
    """Give ``account`` a balance and approve the engine to pull all of it."""

    def _fund(token: InMemoryToken, account: str, amount: str) -> None:
        value = to_amount(amount)
        token.credit(account, value)
        token.approve(account, token.allowance(account) + value)

    return _fund


@pytest.fixture()
def alice_funded(fund, weth: InMemoryToken) -> str:
    fund(weth, ALICE, "10")
    return ALICE


@pytest.fixture()
def alice_with_debt(engine: PositionEngine, alice_funded: str) -> str:
    """ALICE: 10 WETH @ $2000 deposited, 8,000 DSC minted (hf 1.25)."""
    engine.deposit_collateral_and_mint_debt(
        alice_funded, "WETH", to_amount("10"), to_amount("8000")
    )
    return alice_funded


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_static_config() -> AppConfig:
    return AppConfig(
        engine=EngineConfig(address=ENGINE, debt_token="DSC"),
        collateral=CollateralConfig(
            tokens=("WETH", "WBTC"), price_feeds=("eth_usd", "btc_usd")
        ),
        price_oracle=PriceOracleConfig(
            provider="static",
            static=StaticFeedsConfig(prices={"eth_usd": "2000", "btc_usd": "1000"}),
        ),
        monitor=MonitorConfig(check_interval_minutes=5, warning_health_factor="1.5"),
    )


@pytest.fixture()
def sample_snapshot() -> PositionSnapshot:
    return PositionSnapshot(
        account=ALICE,
        total_debt=to_amount("8000"),
        collateral_value_usd=to_amount("20000"),
        health_factor=to_amount("1.25"),
        collateral=(
            AssetBalance(
                asset="WETH", amount=to_amount("10"), usd_value=to_amount("20000")
            ),
        ),
    )


SAMPLE_YAML = textwrap.dedent("""\
    engine:
      address: dsc-engine
      debt_token: DSC
    collateral:
      tokens: [WETH, WBTC]
      price_feeds: [eth_usd, btc_usd]
    price_oracle:
      provider: pyth
      stale_after_seconds: 10800
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds:
          eth_usd: "0xff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace"
          btc_usd: "0xe62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43"
    monitor:
      check_interval_minutes: 5
      warning_health_factor: "1.5"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
