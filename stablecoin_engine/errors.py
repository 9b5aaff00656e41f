"""Engine error hierarchy.

Every error is raised synchronously and aborts the operation that raised it;
the engine discards all staged state before the error reaches the caller.
"""
from __future__ import annotations


class EngineError(Exception):
    """Base error class for engine errors"""


class ValidationError(EngineError):
    """Amount must be strictly positive"""

    def __init__(self, amount: int) -> None:
        self.amount = amount
        super().__init__(f"Amount must be more than zero, got {amount}")


class UnsupportedAssetError(EngineError):
    """Asset is not registered as collateral"""

    def __init__(self, asset: str) -> None:
        self.asset = asset
        super().__init__(f"Asset '{asset}' is not accepted as collateral")


class InsufficientBalanceError(EngineError):
    """Withdrawal or burn exceeds the recorded balance"""

    def __init__(self, available: int, requested: int) -> None:
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient balance: requested {requested}, available {available}"
        )


class ExternalTransferFailed(EngineError):
    """A token ledger transfer returned failure"""


class MintOperationFailed(EngineError):
    """The pegged token ledger refused to mint"""


class HealthFactorBreach(EngineError):
    """Operation would leave an account below the minimum health factor"""

    def __init__(self, health_factor: int) -> None:
        self.health_factor = health_factor
        super().__init__(f"Health factor would drop to {health_factor}")


class LiquidationNotEligible(EngineError):
    """Target account is not undercollateralized"""

    def __init__(self, health_factor: int) -> None:
        self.health_factor = health_factor
        super().__init__(f"Health factor {health_factor} is not liquidatable")


class LiquidationIneffective(EngineError):
    """Liquidation did not strictly improve the target's health factor"""

    def __init__(self, starting: int, ending: int) -> None:
        self.starting = starting
        self.ending = ending
        super().__init__(
            f"Health factor not improved: {starting} -> {ending}"
        )


class ReentrancyError(EngineError):
    """A collaborator re-entered the engine during an in-flight operation"""


class PriceUnavailableError(EngineError):
    """No price is known for the requested feed"""

    def __init__(self, feed_id: str) -> None:
        self.feed_id = feed_id
        super().__init__(f"No price available for feed '{feed_id}'")
