"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CollateralAsset:
    """Accepted collateral asset and the price feed that values it."""

    symbol: str
    price_feed: str


@dataclass(frozen=True)
class PriceRound:
    """Latest answer of a price feed."""

    price: int
    decimals: int
    updated_at: int = 0


@dataclass(frozen=True)
class AccountInformation:
    """Debt and collateral value of one account, both 18-decimal."""

    debt_minted: int
    collateral_value_usd: int


@dataclass(frozen=True)
class CollateralDeposited:
    user: str
    asset: str
    amount: int


@dataclass(frozen=True)
class CollateralRedeemed:
    redeemed_from: str
    redeemed_to: str
    asset: str
    amount: int


@dataclass(frozen=True)
class LiquidationResult:
    """Outcome of a successful liquidation."""

    user: str
    liquidator: str
    asset: str
    debt_covered: int
    collateral_seized: int
    bonus_collateral: int
    starting_health_factor: int
    ending_health_factor: int


@dataclass(frozen=True)
class SolvencyReport:
    """Aggregate pegged supply against aggregate collateral value."""

    total_debt: int
    total_collateral_value_usd: int

    @property
    def is_solvent(self) -> bool:
        return self.total_debt <= self.total_collateral_value_usd
