"""Reentrancy guard and all-or-nothing operation scope."""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from ..errors import ReentrancyError
from .ledger import CollateralLedger

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    """Non-reentrant lock held for the whole of a top-level engine call."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def entered(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise ReentrancyError("Reentrant call into the engine")
        try:
            yield
        finally:
            self._lock.release()


class Transaction:
    """Staged ledger writes plus compensations for collaborator calls already made.

    Rolling back runs the compensations newest first, then undoes the ledger
    writes made since the transaction began.
    """

    def __init__(self, ledger: CollateralLedger) -> None:
        self._ledger = ledger
        self._mark = ledger.begin()
        self._compensations: list[Callable[[], Any]] = []

    def on_rollback(self, compensation: Callable[[], Any]) -> None:
        self._compensations.append(compensation)

    def commit(self) -> None:
        self._compensations.clear()
        self._ledger.commit()

    def rollback(self) -> None:
        while self._compensations:
            compensation = self._compensations.pop()
            try:
                compensation()
            except Exception:
                # Keep unwinding; the first failure is what reaches the caller.
                logger.exception("Compensation failed during rollback")
        self._ledger.rollback_to(self._mark)


@contextmanager
def atomic(ledger: CollateralLedger) -> Iterator[Transaction]:
    """Run the body as one unit: any exception discards every staged change."""
    tx = Transaction(ledger)
    try:
        yield tx
    except BaseException as e:
        logger.warning("Operation rolled back: %s: %s", type(e).__name__, e)
        tx.rollback()
        raise
    tx.commit()
