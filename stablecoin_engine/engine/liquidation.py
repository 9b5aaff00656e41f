"""Liquidation of undercollateralized positions by third parties."""
from __future__ import annotations

import logging

from ..constants import LIQUIDATION_BONUS, LIQUIDATION_PRECISION
from ..errors import LiquidationIneffective, LiquidationNotEligible
from ..models import LiquidationResult
from .health import is_healthy
from .ledger import CollateralLedger
from .positions import PositionController, require_positive
from .transaction import Transaction

logger = logging.getLogger(__name__)


class LiquidationEngine:
    """Lets a liquidator repay a user's debt in exchange for that user's
    collateral plus a ``LIQUIDATION_BONUS`` percent bonus.

    The bonus is paid out of the user's surplus collateral. When a position
    is worth 100% of its debt or less there is no surplus to pay it from, so
    such positions are not attractive to liquidate.
    """

    def __init__(self, ledger: CollateralLedger, positions: PositionController) -> None:
        self._ledger = ledger
        self._positions = positions

    def liquidate(
        self,
        tx: Transaction,
        liquidator: str,
        asset: str,
        user: str,
        debt_to_cover: int,
    ) -> LiquidationResult:
        require_positive(debt_to_cover)
        self._ledger.require_accepted(asset)

        starting = self._positions.health_factor(user)
        if is_healthy(starting):
            raise LiquidationNotEligible(starting)

        covered = self._ledger.asset_amount_from_usd(asset, debt_to_cover)
        bonus = covered * LIQUIDATION_BONUS // LIQUIDATION_PRECISION
        seized = covered + bonus

        self._ledger.record_withdrawal(user, asset, seized, to=liquidator)
        self._ledger.record_burn(user, debt_to_cover)
        self._positions.collect_and_destroy(tx, liquidator, debt_to_cover)

        ending = self._positions.health_factor(user)
        if ending <= starting:
            raise LiquidationIneffective(starting, ending)

        # The liquidator may hold a position of their own.
        self._positions.require_healthy(liquidator)
        self._positions.release(asset, liquidator, seized)

        logger.info(
            "Liquidated %s: %d debt covered by %s for %d %s (bonus %d), HF %d -> %d",
            user, debt_to_cover, liquidator, seized, asset, bonus, starting, ending,
        )
        return LiquidationResult(
            user=user,
            liquidator=liquidator,
            asset=asset,
            debt_covered=debt_to_cover,
            collateral_seized=seized,
            bonus_collateral=bonus,
            starting_health_factor=starting,
            ending_health_factor=ending,
        )
