"""Protocol interfaces for the engine's external collaborators."""
from .price_oracle import PriceOracle
from .token_ledger import MintableTokenLedger, TokenLedger

__all__ = ["MintableTokenLedger", "PriceOracle", "TokenLedger"]
