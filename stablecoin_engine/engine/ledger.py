"""Collateral ledger — per-user deposits, pegged debt and USD valuation."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Union

from ..errors import InsufficientBalanceError, UnsupportedAssetError
from ..interfaces.price_oracle import PriceOracle
from ..models import (
    AccountInformation,
    CollateralAsset,
    CollateralDeposited,
    CollateralRedeemed,
)

logger = logging.getLogger(__name__)

LedgerEvent = Union[CollateralDeposited, CollateralRedeemed]


class CollateralLedger:
    """Authoritative store of collateral deposits and minted debt.

    All amounts are non-negative integers with 18 decimals. Accounts are
    created implicitly on first write and read as zero before that.
    """

    def __init__(self, assets: Iterable[CollateralAsset], oracle: PriceOracle) -> None:
        self._assets: dict[str, CollateralAsset] = {}
        for asset in assets:
            if asset.symbol in self._assets:
                raise ValueError(f"Collateral asset '{asset.symbol}' registered twice")
            self._assets[asset.symbol] = asset
        self._oracle = oracle
        self._deposits: dict[str, dict[str, int]] = {}
        self._debt: dict[str, int] = {}
        self._events: list[LedgerEvent] = []
        self._journal: list[Callable[[], None]] = []
        self._open_scopes = 0

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    @property
    def collateral_tokens(self) -> tuple[str, ...]:
        """Accepted asset symbols in registration order."""
        return tuple(self._assets)

    @property
    def events(self) -> tuple[LedgerEvent, ...]:
        return tuple(self._events)

    def is_accepted(self, asset: str) -> bool:
        return asset in self._assets

    def require_accepted(self, asset: str) -> CollateralAsset:
        if not self.is_accepted(asset):
            raise UnsupportedAssetError(asset)
        return self._assets[asset]

    def price_feed(self, asset: str) -> str:
        return self.require_accepted(asset).price_feed

    # ------------------------------------------------------------------
    # Valuation
    # ------------------------------------------------------------------

    def usd_value(self, asset: str, amount: int) -> int:
        """USD value (18 decimals) of ``amount`` of ``asset``."""
        price_round = self._oracle.latest_price(self.price_feed(asset))
        return price_round.price * amount // 10**price_round.decimals

    def asset_amount_from_usd(self, asset: str, usd_amount: int) -> int:
        """Amount of ``asset`` worth ``usd_amount`` (18 decimals) at the current price."""
        price_round = self._oracle.latest_price(self.price_feed(asset))
        return usd_amount * 10**price_round.decimals // price_round.price

    def total_collateral_value(self, user: str) -> int:
        total = 0
        deposits = self._deposits.get(user, {})
        for asset in self._assets:
            amount = deposits.get(asset, 0)
            if amount:
                total += self.usd_value(asset, amount)
        return total

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def collateral_balance(self, user: str, asset: str) -> int:
        return self._deposits.get(user, {}).get(asset, 0)

    def debt_of(self, user: str) -> int:
        return self._debt.get(user, 0)

    def account_info(self, user: str) -> AccountInformation:
        return AccountInformation(
            debt_minted=self.debt_of(user),
            collateral_value_usd=self.total_collateral_value(user),
        )

    def users(self) -> tuple[str, ...]:
        return tuple(set(self._deposits) | set(self._debt))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def record_deposit(self, user: str, asset: str, amount: int) -> None:
        self.require_accepted(asset)
        self._set_deposit(user, asset, self.collateral_balance(user, asset) + amount)
        self._emit(CollateralDeposited(user=user, asset=asset, amount=amount))

    def record_withdrawal(
        self, user: str, asset: str, amount: int, to: str | None = None
    ) -> None:
        """Debit ``user``'s deposit; ``to`` names who receives it (default ``user``)."""
        current = self.collateral_balance(user, asset)
        if amount > current:
            raise InsufficientBalanceError(available=current, requested=amount)
        self._set_deposit(user, asset, current - amount)
        self._emit(
            CollateralRedeemed(
                redeemed_from=user,
                redeemed_to=to if to is not None else user,
                asset=asset,
                amount=amount,
            )
        )

    def record_mint(self, user: str, amount: int) -> None:
        self._set_debt(user, self.debt_of(user) + amount)

    def record_burn(self, user: str, amount: int) -> None:
        current = self.debt_of(user)
        if amount > current:
            raise InsufficientBalanceError(available=current, requested=amount)
        self._set_debt(user, current - amount)

    # ------------------------------------------------------------------
    # Staging support
    # ------------------------------------------------------------------

    def begin(self) -> tuple[int, int]:
        """Open a staging scope; the returned mark is passed to ``rollback_to``.

        While a scope is open every write journals the value it replaced, so
        undoing a scope costs as much as the writes made inside it.
        """
        self._open_scopes += 1
        return len(self._journal), len(self._events)

    def commit(self) -> None:
        self._close_scope()

    def rollback_to(self, mark: tuple[int, int]) -> None:
        journal_len, events_len = mark
        while len(self._journal) > journal_len:
            undo = self._journal.pop()
            undo()
        del self._events[events_len:]
        self._close_scope()

    def _close_scope(self) -> None:
        self._open_scopes -= 1
        if not self._open_scopes:
            self._journal.clear()

    def _set_deposit(self, user: str, asset: str, value: int) -> None:
        if self._open_scopes:
            previous = self._deposits.get(user, {}).get(asset)
            self._journal.append(lambda: self._put_deposit(user, asset, previous))
        self._put_deposit(user, asset, value)

    def _put_deposit(self, user: str, asset: str, value: int | None) -> None:
        if value is not None:
            self._deposits.setdefault(user, {})[asset] = value
            return
        deposits = self._deposits.get(user, {})
        deposits.pop(asset, None)
        if not deposits:
            self._deposits.pop(user, None)

    def _set_debt(self, user: str, value: int) -> None:
        if self._open_scopes:
            previous = self._debt.get(user)
            self._journal.append(lambda: self._put_debt(user, previous))
        self._put_debt(user, value)

    def _put_debt(self, user: str, value: int | None) -> None:
        if value is None:
            self._debt.pop(user, None)
        else:
            self._debt[user] = value

    def _emit(self, event: LedgerEvent) -> None:
        self._events.append(event)
        logger.info("%s %s", type(event).__name__, event)
