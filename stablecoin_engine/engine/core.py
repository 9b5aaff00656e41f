"""Engine facade — the public surface of the accounting engine."""
from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager

from .. import constants
from ..interfaces.price_oracle import PriceOracle
from ..interfaces.token_ledger import MintableTokenLedger, TokenLedger
from ..models import (
    AccountInformation,
    CollateralAsset,
    LiquidationResult,
    SolvencyReport,
)
from .health import calculate_health_factor
from .ledger import CollateralLedger, LedgerEvent
from .liquidation import LiquidationEngine
from .positions import PositionController
from .transaction import ReentrancyGuard, Transaction, atomic

logger = logging.getLogger(__name__)


class StablecoinEngine:
    """Over-collateralized pegged-unit engine.

    Every mutating method is one top-level call: it holds the engine's
    reentrancy guard for its whole duration and either commits all of its
    effects or none of them. Read methods never mutate state.
    """

    PRECISION = constants.PRECISION
    LIQUIDATION_THRESHOLD = constants.LIQUIDATION_THRESHOLD
    LIQUIDATION_BONUS = constants.LIQUIDATION_BONUS
    LIQUIDATION_PRECISION = constants.LIQUIDATION_PRECISION
    MIN_HEALTH_FACTOR = constants.MIN_HEALTH_FACTOR

    def __init__(
        self,
        collateral: Sequence[CollateralAsset],
        collateral_tokens: Mapping[str, TokenLedger],
        pegged: MintableTokenLedger,
        oracle: PriceOracle,
        address: str = "engine",
    ) -> None:
        missing = [a.symbol for a in collateral if a.symbol not in collateral_tokens]
        if missing:
            raise ValueError(f"No token ledger for collateral: {', '.join(missing)}")

        self.address = address
        self.pegged = pegged
        self._ledger = CollateralLedger(collateral, oracle)
        self._guard = ReentrancyGuard()
        self._positions = PositionController(
            self._ledger, pegged, collateral_tokens, address
        )
        self._liquidations = LiquidationEngine(self._ledger, self._positions)
        logger.info(
            "Engine %s accepting %s", address, ", ".join(self._ledger.collateral_tokens)
        )

    @contextmanager
    def _operation(self) -> Iterator[Transaction]:
        with self._guard.hold(), atomic(self._ledger) as tx:
            yield tx

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def deposit_collateral(self, caller: str, asset: str, amount: int) -> None:
        with self._operation() as tx:
            self._positions.deposit_collateral(tx, caller, asset, amount)

    def deposit_collateral_and_mint(
        self, caller: str, asset: str, collateral_amount: int, mint_amount: int
    ) -> None:
        with self._operation() as tx:
            self._positions.deposit_collateral_and_mint(
                tx, caller, asset, collateral_amount, mint_amount
            )

    def redeem_collateral(self, caller: str, asset: str, amount: int) -> None:
        with self._operation() as tx:
            self._positions.redeem_collateral(tx, caller, asset, amount)

    def redeem_collateral_and_burn(
        self, caller: str, asset: str, collateral_amount: int, burn_amount: int
    ) -> None:
        with self._operation() as tx:
            self._positions.redeem_collateral_and_burn(
                tx, caller, asset, collateral_amount, burn_amount
            )

    def mint(self, caller: str, amount: int) -> None:
        with self._operation() as tx:
            self._positions.mint(tx, caller, amount)

    def burn(self, caller: str, amount: int) -> None:
        with self._operation() as tx:
            self._positions.burn(tx, caller, amount)

    def liquidate(
        self, caller: str, asset: str, user: str, debt_to_cover: int
    ) -> LiquidationResult:
        with self._operation() as tx:
            return self._liquidations.liquidate(tx, caller, asset, user, debt_to_cover)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    calculate_health_factor = staticmethod(calculate_health_factor)

    def account_information(self, user: str) -> AccountInformation:
        return self._ledger.account_info(user)

    def total_collateral_value(self, user: str) -> int:
        return self._ledger.total_collateral_value(user)

    def usd_value(self, asset: str, amount: int) -> int:
        return self._ledger.usd_value(asset, amount)

    def asset_amount_from_usd(self, asset: str, usd_amount: int) -> int:
        return self._ledger.asset_amount_from_usd(asset, usd_amount)

    def health_factor(self, user: str) -> int:
        return self._positions.health_factor(user)

    def collateral_balance_of(self, user: str, asset: str) -> int:
        return self._ledger.collateral_balance(user, asset)

    @property
    def collateral_tokens(self) -> tuple[str, ...]:
        return self._ledger.collateral_tokens

    def collateral_price_feed(self, asset: str) -> str:
        return self._ledger.price_feed(asset)

    @property
    def events(self) -> tuple[LedgerEvent, ...]:
        return self._ledger.events

    def solvency_report(self) -> SolvencyReport:
        """Aggregate debt against aggregate collateral value across all accounts."""
        total_debt = 0
        total_collateral = 0
        for user in self._ledger.users():
            info = self._ledger.account_info(user)
            total_debt += info.debt_minted
            total_collateral += info.collateral_value_usd
        return SolvencyReport(
            total_debt=total_debt, total_collateral_value_usd=total_collateral
        )
