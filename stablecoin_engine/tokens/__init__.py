"""Token ledger implementations."""
from .memory import InMemoryToken

__all__ = ["InMemoryToken"]
