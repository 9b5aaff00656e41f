"""Accounting and risk engine."""
from .core import StablecoinEngine
from .health import calculate_health_factor
from .ledger import CollateralLedger

__all__ = ["CollateralLedger", "StablecoinEngine", "calculate_health_factor"]
