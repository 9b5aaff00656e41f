"""In-memory fungible token ledger."""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class InMemoryToken:
    """Balances and allowances kept in dicts.

    Transfers report failure by returning ``False``. ``mint`` and ``burn`` are
    restricted to ``owner``; the engine owns the pegged token it controls.
    """

    def __init__(self, symbol: str, owner: str = "") -> None:
        self.symbol = symbol
        self.owner = owner
        self.total_supply = 0
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        return self._move(sender, recipient, amount)

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int
    ) -> bool:
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            logger.debug(
                "%s: allowance %d of %s for %s below %d",
                self.symbol, allowed, owner, spender, amount,
            )
            return False
        if not self._move(owner, recipient, amount):
            return False
        self._allowances[(owner, spender)] = allowed - amount
        return True

    def mint(self, caller: str, recipient: str, amount: int) -> bool:
        self._require_owner(caller)
        if not recipient:
            raise ValueError("Cannot mint to an empty account")
        if amount <= 0:
            raise ValueError("Mint amount must be more than zero")
        self._balances[recipient] = self.balance_of(recipient) + amount
        self.total_supply += amount
        return True

    def burn(self, caller: str, amount: int) -> None:
        self._require_owner(caller)
        if amount <= 0:
            raise ValueError("Burn amount must be more than zero")
        balance = self.balance_of(caller)
        if balance < amount:
            raise ValueError(f"Burn amount {amount} exceeds balance {balance}")
        self._balances[caller] = balance - amount
        self.total_supply -= amount

    def _move(self, sender: str, recipient: str, amount: int) -> bool:
        balance = self.balance_of(sender)
        if amount < 0 or balance < amount:
            return False
        self._balances[sender] = balance - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        return True

    def _require_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise PermissionError(f"{caller} is not the owner of {self.symbol}")
