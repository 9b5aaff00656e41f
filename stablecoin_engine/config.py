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

from .constants import DEFAULT_FEED_DECIMALS
from .models import CollateralAsset

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineConfig:
    address: str = "engine"
    pegged_symbol: str = "DSC"


@dataclass(frozen=True)
class StaticFeedConfig:
    decimals: int = DEFAULT_FEED_DECIMALS
    prices: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "static"
    static: StaticFeedConfig = field(default_factory=StaticFeedConfig)
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class AppConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    collateral: tuple[CollateralAsset, ...] = ()
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)


_PROVIDERS = ("static", "pyth")

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
        address=str(raw.get("address", "engine")),
        pegged_symbol=str(raw.get("pegged_symbol", "DSC")),
    )


def _build_collateral(raw: list[dict[str, Any]]) -> tuple[CollateralAsset, ...]:
    assets: list[CollateralAsset] = []
    for c in raw:
        assets.append(
            CollateralAsset(
                symbol=str(c.get("symbol", "")),
                price_feed=str(c.get("price_feed", "")),
            )
        )
    return tuple(assets)


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    static_raw = raw.get("static") or {}
    pyth_raw = raw.get("pyth") or {}
    return PriceOracleConfig(
        provider=raw.get("provider", "static"),
        static=StaticFeedConfig(
            decimals=int(static_raw.get("decimals", DEFAULT_FEED_DECIMALS)),
            prices={k: int(v) for k, v in (static_raw.get("prices") or {}).items()},
        ),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds=dict(pyth_raw.get("feeds") or {}),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate engine configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
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
        engine=_build_engine(raw.get("engine") or {}),
        collateral=_build_collateral(raw.get("collateral") or []),
        price_oracle=_build_price_oracle(raw.get("price_oracle") or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.engine.address:
        raise ValueError("Engine address must not be empty")

    if not cfg.collateral:
        raise ValueError("At least one collateral asset must be configured")

    if cfg.price_oracle.provider not in _PROVIDERS:
        raise ValueError(
            f"Unknown price oracle provider '{cfg.price_oracle.provider}'"
        )

    if cfg.price_oracle.provider == "static":
        priced = cfg.price_oracle.static.prices
    else:
        priced = cfg.price_oracle.pyth.feeds

    seen: set[str] = set()
    for asset in cfg.collateral:
        if not asset.symbol:
            raise ValueError("Collateral asset has no symbol")
        if asset.symbol in seen:
            raise ValueError(f"Collateral asset '{asset.symbol}' is listed twice")
        seen.add(asset.symbol)
        if asset.price_feed not in priced:
            raise ValueError(
                f"Collateral '{asset.symbol}' references unknown price feed "
                f"'{asset.price_feed}'"
            )
