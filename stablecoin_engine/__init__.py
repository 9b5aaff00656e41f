"""Over-collateralized stablecoin accounting engine."""
from .engine import StablecoinEngine, calculate_health_factor
from .models import AccountInformation, CollateralAsset, PriceRound

__all__ = [
    "AccountInformation",
    "CollateralAsset",
    "PriceRound",
    "StablecoinEngine",
    "calculate_health_factor",
]
