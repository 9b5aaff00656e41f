"""Scenario runner — replays scripted operations against an in-memory engine."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from ..config import AppConfig
from ..constants import PRECISION
from ..engine import StablecoinEngine
from ..errors import EngineError
from ..interfaces.price_oracle import PriceOracle
from ..oracles import PythOracle, StaticPriceFeed
from ..tokens import InMemoryToken

logger = logging.getLogger(__name__)

FAUCET = "faucet"
UNLIMITED = 2**256 - 1


@dataclass(frozen=True)
class StepResult:
    index: int
    action: str
    ok: bool
    error: str = ""


def build_oracle(config: AppConfig) -> StaticPriceFeed | PythOracle:
    """Oracle selected by ``price_oracle.provider``."""
    if config.price_oracle.provider == "pyth":
        return PythOracle(config.price_oracle.pyth)
    return StaticPriceFeed.from_config(config.price_oracle.static)


def to_wei(value: Any, decimals: int = 18) -> int:
    """Whole units (``"1.5"``, ``10``) to a scaled integer."""
    return int(Decimal(str(value)) * (10**decimals))


class Simulator:
    """Engine wired to in-memory tokens, driven by scenario steps."""

    def __init__(self, config: AppConfig, oracle: PriceOracle | None = None) -> None:
        self._config = config
        self.oracle = oracle if oracle is not None else build_oracle(config)
        address = config.engine.address

        self.pegged = InMemoryToken(config.engine.pegged_symbol, owner=address)
        self.collateral_tokens = {
            asset.symbol: InMemoryToken(asset.symbol, owner=FAUCET)
            for asset in config.collateral
        }
        self.engine = StablecoinEngine(
            collateral=config.collateral,
            collateral_tokens=self.collateral_tokens,
            pegged=self.pegged,
            oracle=self.oracle,
            address=address,
        )
        self.users: list[str] = []

    # ------------------------------------------------------------------
    # Step handlers
    # ------------------------------------------------------------------

    def _fund(self, step: dict[str, Any]) -> None:
        user = step["user"]
        token = self.collateral_tokens[step["asset"]]
        token.mint(FAUCET, user, to_wei(step["amount"]))
        token.approve(user, self.engine.address, UNLIMITED)

    def _set_price(self, step: dict[str, Any]) -> None:
        if not isinstance(self.oracle, StaticPriceFeed):
            raise ValueError("set_price requires the static price oracle")
        self.oracle.set_price(
            step["feed"], to_wei(step["price"], self.oracle.decimals)
        )

    def _approve_pegged(self, user: str, amount: int) -> None:
        self.pegged.approve(user, self.engine.address, amount)

    def _apply(self, step: dict[str, Any]) -> None:
        action = step["action"]
        user = step.get("user", "")
        if user and user not in self.users:
            self.users.append(user)

        if action == "fund":
            self._fund(step)
        elif action == "set_price":
            self._set_price(step)
        elif action == "deposit_collateral":
            self.engine.deposit_collateral(user, step["asset"], to_wei(step["amount"]))
        elif action == "deposit_collateral_and_mint":
            self.engine.deposit_collateral_and_mint(
                user, step["asset"], to_wei(step["collateral"]), to_wei(step["mint"])
            )
        elif action == "mint":
            self.engine.mint(user, to_wei(step["amount"]))
        elif action == "burn":
            amount = to_wei(step["amount"])
            self._approve_pegged(user, amount)
            self.engine.burn(user, amount)
        elif action == "redeem_collateral":
            self.engine.redeem_collateral(user, step["asset"], to_wei(step["amount"]))
        elif action == "redeem_collateral_and_burn":
            burn_amount = to_wei(step["burn"])
            self._approve_pegged(user, burn_amount)
            self.engine.redeem_collateral_and_burn(
                user, step["asset"], to_wei(step["collateral"]), burn_amount
            )
        elif action == "liquidate":
            debt = to_wei(step["debt"])
            self._approve_pegged(user, debt)
            self.engine.liquidate(user, step["asset"], step["target"], debt)
        else:
            raise ValueError(f"Unknown scenario action '{action}'")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, steps: list[dict[str, Any]]) -> list[StepResult]:
        """Apply steps in order. Engine rejections are recorded, not raised."""
        results: list[StepResult] = []
        for index, step in enumerate(steps):
            action = step.get("action", "")
            try:
                self._apply(step)
            except EngineError as e:
                logger.warning("Step %d (%s) rejected: %s", index, action, e)
                results.append(
                    StepResult(index=index, action=action, ok=False, error=type(e).__name__)
                )
                continue
            logger.info("Step %d (%s) applied", index, action)
            results.append(StepResult(index=index, action=action, ok=True))
        return results

    def account_report(self, user: str) -> str:
        info = self.engine.account_information(user)
        health_factor = self.engine.health_factor(user)
        hf_str = (
            "∞" if info.debt_minted == 0 else f"{Decimal(health_factor) / PRECISION:.4f}"
        )
        balances = ", ".join(
            f"{asset} {Decimal(self.engine.collateral_balance_of(user, asset)) / PRECISION:f}"
            for asset in self.engine.collateral_tokens
        )
        return (
            f"{user}: debt {Decimal(info.debt_minted) / PRECISION:f} · "
            f"collateral ${Decimal(info.collateral_value_usd) / PRECISION:,.2f} "
            f"({balances}) · HF {hf_str}"
        )


def load_scenario(path: str | Path) -> list[dict[str, Any]]:
    """Read the ``steps`` list from a scenario YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    steps = raw.get("steps", [])
    if not isinstance(steps, list):
        raise ValueError("Scenario 'steps' must be a list")
    return steps
