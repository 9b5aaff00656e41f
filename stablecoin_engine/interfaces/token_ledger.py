"""Token ledger protocols — fungible asset abstraction.

The first argument of every mutating call is the identity performing it.
"""
from typing import Protocol


class TokenLedger(Protocol):
    """Abstract interface for moving a fungible asset."""

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int
    ) -> bool: ...


class MintableTokenLedger(TokenLedger, Protocol):
    """Token ledger whose supply the engine controls (the pegged unit)."""

    def mint(self, caller: str, recipient: str, amount: int) -> bool: ...

    def burn(self, caller: str, amount: int) -> None: ...
