"""Position controller — deposit, mint, redeem and burn flows.

Every flow updates the ledger first, then talks to the token ledgers. Calls
that pull funds into custody register a compensation on the transaction;
calls that pay out of custody always run last, after the health factor has
been validated, so nothing after them can fail.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from ..errors import (
    ExternalTransferFailed,
    HealthFactorBreach,
    MintOperationFailed,
    ValidationError,
)
from ..interfaces.token_ledger import MintableTokenLedger, TokenLedger
from .health import calculate_health_factor, is_healthy
from .ledger import CollateralLedger
from .transaction import Transaction

logger = logging.getLogger(__name__)


def require_positive(amount: int) -> None:
    if amount <= 0:
        raise ValidationError(amount)


class PositionController:
    """Owner-initiated position changes, enforced by the health factor."""

    def __init__(
        self,
        ledger: CollateralLedger,
        pegged: MintableTokenLedger,
        collateral_tokens: Mapping[str, TokenLedger],
        address: str,
    ) -> None:
        self._ledger = ledger
        self._pegged = pegged
        self._tokens = dict(collateral_tokens)
        self.address = address

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def health_factor(self, user: str) -> int:
        info = self._ledger.account_info(user)
        return calculate_health_factor(info.debt_minted, info.collateral_value_usd)

    def require_healthy(self, user: str) -> None:
        health_factor = self.health_factor(user)
        if not is_healthy(health_factor):
            raise HealthFactorBreach(health_factor)

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def deposit_collateral(
        self, tx: Transaction, caller: str, asset: str, amount: int
    ) -> None:
        require_positive(amount)
        self._ledger.require_accepted(asset)
        self._ledger.record_deposit(caller, asset, amount)
        self._pull(tx, self._tokens[asset], asset, caller, amount)

    def mint(self, tx: Transaction, caller: str, amount: int) -> None:
        require_positive(amount)
        self._ledger.record_mint(caller, amount)
        self.require_healthy(caller)
        if not self._pegged.mint(self.address, caller, amount):
            raise MintOperationFailed(f"Minting {amount} to {caller} failed")
        logger.info("Minted %d to %s", amount, caller)

    def redeem_collateral(
        self, tx: Transaction, caller: str, asset: str, amount: int
    ) -> None:
        require_positive(amount)
        self._ledger.require_accepted(asset)
        self._ledger.record_withdrawal(caller, asset, amount)
        self.require_healthy(caller)
        self.release(asset, caller, amount)

    def burn(self, tx: Transaction, caller: str, amount: int) -> None:
        require_positive(amount)
        self._ledger.record_burn(caller, amount)
        self.collect_and_destroy(tx, caller, amount)
        # Burning cannot lower the health factor; a failure here means the
        # account was already in breach.
        self.require_healthy(caller)

    def deposit_collateral_and_mint(
        self,
        tx: Transaction,
        caller: str,
        asset: str,
        collateral_amount: int,
        mint_amount: int,
    ) -> None:
        self.deposit_collateral(tx, caller, asset, collateral_amount)
        self.mint(tx, caller, mint_amount)

    def redeem_collateral_and_burn(
        self,
        tx: Transaction,
        caller: str,
        asset: str,
        collateral_amount: int,
        burn_amount: int,
    ) -> None:
        require_positive(collateral_amount)
        require_positive(burn_amount)
        self._ledger.require_accepted(asset)
        self._ledger.record_burn(caller, burn_amount)
        self.collect_and_destroy(tx, caller, burn_amount)
        self._ledger.record_withdrawal(caller, asset, collateral_amount)
        self.require_healthy(caller)
        self.release(asset, caller, collateral_amount)

    # ------------------------------------------------------------------
    # Token movements
    # ------------------------------------------------------------------

    def collect_and_destroy(self, tx: Transaction, payer: str, amount: int) -> None:
        """Take ``amount`` pegged units from ``payer`` into custody and burn them."""
        self._pull(tx, self._pegged, "pegged", payer, amount)
        self._pegged.burn(self.address, amount)
        tx.on_rollback(lambda: self._pegged.mint(self.address, self.address, amount))
        logger.info("Burned %d taken from %s", amount, payer)

    def release(self, asset: str, recipient: str, amount: int) -> None:
        """Pay ``amount`` of ``asset`` out of custody."""
        if not self._tokens[asset].transfer(self.address, recipient, amount):
            raise ExternalTransferFailed(
                f"Transfer of {amount} {asset} to {recipient} failed"
            )

    def _pull(
        self,
        tx: Transaction,
        token: TokenLedger,
        label: str,
        owner: str,
        amount: int,
    ) -> None:
        if not token.transfer_from(self.address, owner, self.address, amount):
            raise ExternalTransferFailed(
                f"Transfer of {amount} {label} from {owner} failed"
            )
        tx.on_rollback(lambda: token.transfer(self.address, owner, amount))
