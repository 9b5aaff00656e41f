"""Health factor calculation."""
from ..constants import (
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MAX_HEALTH_FACTOR,
    MIN_HEALTH_FACTOR,
    PRECISION,
)


def calculate_health_factor(debt_minted: int, collateral_value_usd: int) -> int:
    """Return the 18-decimal health factor of a position.

    Only ``LIQUIDATION_THRESHOLD`` percent of the collateral value counts
    toward solvency. A position without debt can never be liquidated and
    reports ``MAX_HEALTH_FACTOR``.
    """
    if debt_minted == 0:
        return MAX_HEALTH_FACTOR
    collateral_adjusted = (
        collateral_value_usd * LIQUIDATION_THRESHOLD
    ) // LIQUIDATION_PRECISION
    return collateral_adjusted * PRECISION // debt_minted


def is_healthy(health_factor: int) -> bool:
    return health_factor >= MIN_HEALTH_FACTOR
