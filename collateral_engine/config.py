"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROVIDERS = ("pyth", "static")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineConfig:
    address: str = "collateral-engine"
    debt_token: str = "DSC"


@dataclass(frozen=True)
class CollateralConfig:
    """Ordered construction lists; position ``i`` of each list pairs up."""

    tokens: tuple[str, ...] = ()
    price_feeds: tuple[str, ...] = ()


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StaticFeedsConfig:
    prices: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "pyth"
    stale_after_seconds: int | None = None
    pyth: PythConfig = field(default_factory=PythConfig)
    static: StaticFeedsConfig = field(default_factory=StaticFeedsConfig)


@dataclass(frozen=True)
class MonitorConfig:
    check_interval_minutes: int = 15
    warning_health_factor: str = "1.5"


@dataclass(frozen=True)
class AppConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    collateral: CollateralConfig = field(default_factory=CollateralConfig)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_engine(raw: dict[str, Any]) -> EngineConfig:
    return EngineConfig(
        address=str(raw.get("address", EngineConfig.address)),
        debt_token=str(raw.get("debt_token", EngineConfig.debt_token)),
    )


def _build_collateral(raw: dict[str, Any]) -> CollateralConfig:
    return CollateralConfig(
        tokens=tuple(str(t) for t in raw.get("tokens", [])),
        price_feeds=tuple(str(f) for f in raw.get("price_feeds", [])),
    )


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    static_raw = raw.get("static", {})
    stale_after = raw.get("stale_after_seconds")
    return PriceOracleConfig(
        provider=raw.get("provider", "pyth"),
        stale_after_seconds=int(stale_after) if stale_after is not None else None,
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds={k: str(v) for k, v in pyth_raw.get("feeds", {}).items()},
        ),
        static=StaticFeedsConfig(
            # Kept as strings so "1999.99" reaches Decimal without float rounding.
            prices={k: str(v) for k, v in static_raw.get("prices", {}).items()},
        ),
    )


def _build_monitor(raw: dict[str, Any]) -> MonitorConfig:
    return MonitorConfig(
        check_interval_minutes=int(raw.get("check_interval_minutes", 15)),
        warning_health_factor=str(raw.get("warning_health_factor", "1.5")),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate engine configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        engine=_build_engine(raw.get("engine", {})),
        collateral=_build_collateral(raw.get("collateral", {})),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
        monitor=_build_monitor(raw.get("monitor", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.collateral.tokens:
        raise ValueError("At least one collateral token must be configured")

    oracle = cfg.price_oracle
    if oracle.provider not in PROVIDERS:
        raise ValueError(f"Unknown price oracle provider '{oracle.provider}'")

    if oracle.stale_after_seconds is not None and oracle.stale_after_seconds <= 0:
        raise ValueError("stale_after_seconds must be positive")

    known = oracle.pyth.feeds if oracle.provider == "pyth" else oracle.static.prices
    for name in cfg.collateral.price_feeds:
        if name not in known:
            raise ValueError(
                f"Price feed '{name}' has no {oracle.provider} entry"
            )
