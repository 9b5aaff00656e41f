"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from stablecoin_engine.config import (
    AppConfig,
    EngineConfig,
    PriceOracleConfig,
    PythConfig,
    StaticFeedConfig,
)
from stablecoin_engine.engine import StablecoinEngine
from stablecoin_engine.models import CollateralAsset
from stablecoin_engine.oracles import StaticPriceFeed
from stablecoin_engine.tokens import InMemoryToken

ENGINE = "engine"
FAUCET = "faucet"
ETH_USD_PRICE = 4000 * 10**8
BTC_USD_PRICE = 60000 * 10**8

# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def collateral() -> tuple[CollateralAsset, ...]:
    return (
        CollateralAsset(symbol="WETH", price_feed="ETH/USD"),
        CollateralAsset(symbol="WBTC", price_feed="BTC/USD"),
    )


@pytest.fixture()
def oracle() -> StaticPriceFeed:
    return StaticPriceFeed({"ETH/USD": ETH_USD_PRICE, "BTC/USD": BTC_USD_PRICE})


@pytest.fixture()
def weth() -> InMemoryToken:
    return InMemoryToken("WETH", owner=FAUCET)


@pytest.fixture()
def wbtc() -> InMemoryToken:
    return InMemoryToken("WBTC", owner=FAUCET)


@pytest.fixture()
def dsc() -> InMemoryToken:
    return InMemoryToken("DSC", owner=ENGINE)


@pytest.fixture()
def engine(
    collateral: tuple[CollateralAsset, ...],
    oracle: StaticPriceFeed,
    weth: InMemoryToken,
    wbtc: InMemoryToken,
    dsc: InMemoryToken,
) -> StablecoinEngine:
    return StablecoinEngine(
        collateral=collateral,
        collateral_tokens={"WETH": weth, "WBTC": wbtc},
        pegged=dsc,
        oracle=oracle,
        address=ENGINE,
    )


@pytest.fixture()
def fund() -> Callable[[InMemoryToken, str, int], None]:
    """Give ``user`` collateral tokens and let the engine pull them."""

    def _fund(token: InMemoryToken, user: str, amount: int) -> None:
        token.mint(FAUCET, user, amount)
        token.approve(user, ENGINE, amount)

    return _fund


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config(collateral: tuple[CollateralAsset, ...]) -> AppConfig:
    return AppConfig(
        engine=EngineConfig(address=ENGINE, pegged_symbol="DSC"),
        collateral=collateral,
        price_oracle=PriceOracleConfig(
            provider="static",
            static=StaticFeedConfig(
                decimals=8,
                prices={"ETH/USD": ETH_USD_PRICE, "BTC/USD": BTC_USD_PRICE},
            ),
            pyth=PythConfig(feeds={"ETH/USD": "aaa111", "BTC/USD": "bbb222"}),
        ),
    )


SAMPLE_YAML = textwrap.dedent("""\
    engine:
      address: engine
      pegged_symbol: DSC
    collateral:
      - symbol: WETH
        price_feed: ETH/USD
      - symbol: WBTC
        price_feed: BTC/USD
    price_oracle:
      provider: static
      static:
        decimals: 8
        prices:
          ETH/USD: 400000000000
          BTC/USD: 6000000000000
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {ETH/USD: "aaa", BTC/USD: "bbb"}
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
