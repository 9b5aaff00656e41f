"""Fixed-point scales and risk parameters."""

# Fixed point scale factors
PRECISION = 10**18  # 18 decimals for amounts, USD values and health factors
LIQUIDATION_PRECISION = 100  # percentages

# Risk parameters
LIQUIDATION_THRESHOLD = 50  # only 50% of collateral value backs debt (200% overcollateralized)
LIQUIDATION_BONUS = 10  # 10% extra collateral to the liquidator
MIN_HEALTH_FACTOR = 1 * PRECISION

# Health factor reported for positions without debt (uint256 max)
MAX_HEALTH_FACTOR = 2**256 - 1

# Default decimals of an 8-decimal USD price feed
DEFAULT_FEED_DECIMALS = 8
