# ledger.py
"""
The ledger store: the single writer of the transaction list.

Mutations go through reduce_transactions(), a pure function over an immutable
tuple, and every accepted mutation is persisted straight away. Persist failures
are logged and the in-memory list stays the source of truth for the session.
"""

import time
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from logging_setup import get_logger
from models import Transaction, TransactionDraft, normalize_category, today_iso
from storage import load_budget, load_transactions, save_budget, save_transactions

logger = get_logger("expense_tracker.ledger")

ADD = "ADD"
DELETE = "DELETE"


class UnknownActionError(ValueError):
    """Raised when the reducer receives an action type it does not handle."""


@dataclass(frozen=True)
class Action:
    type: str
    payload: Any = None


def reduce_transactions(state: Tuple[Transaction, ...], action: Action) -> Tuple[Transaction, ...]:
    if action.type == ADD:
        tx = action.payload
        if not tx.category:
            tx = Transaction(id=tx.id, description=tx.description, amount=tx.amount,
                             date=tx.date, category=normalize_category(tx.category))
        return state + (tx,)
    if action.type == DELETE:
        return tuple(t for t in state if t.id != action.payload)
    raise UnknownActionError(f"Unknown ledger action: {action.type!r}")


def now_ms() -> int:
    return int(time.time() * 1000)


class Ledger:
    def __init__(self, storage, clock=now_ms):
        self.storage = storage
        self.clock = clock
        self._transactions = tuple(load_transactions(storage))
        logger.debug("Loaded %d transactions", len(self._transactions))

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self._transactions

    def next_id(self, requested: Optional[int] = None) -> int:
        candidate = requested if requested is not None else self.clock()
        highest = max((t.id for t in self._transactions), default=0)
        return candidate if candidate > highest else highest + 1

    def dispatch(self, action: Action) -> Tuple[Transaction, ...]:
        self._transactions = reduce_transactions(self._transactions, action)
        self.persist()
        return self._transactions

    def add(self, draft: TransactionDraft) -> Tuple[Transaction, ...]:
        """Appends a transaction built from an already-validated draft."""
        tx = Transaction(
            id=self.next_id(draft.id),
            description=draft.description,
            amount=float(draft.amount),
            date=draft.date or today_iso(),
            category=normalize_category(draft.category),
        )
        logger.info("Adding transaction %d (%s, %.2f)", tx.id, tx.category, tx.amount)
        return self.dispatch(Action(ADD, tx))

    def delete(self, transaction_id: int) -> Tuple[Transaction, ...]:
        logger.info("Deleting transaction %s", transaction_id)
        return self.dispatch(Action(DELETE, transaction_id))

    def persist(self) -> bool:
        try:
            save_transactions(self.storage, self._transactions)
        except OSError as e:
            logger.error("Error saving transactions to storage: %s", e)
            return False
        return True

    def reload(self) -> Tuple[Transaction, ...]:
        self._transactions = tuple(load_transactions(self.storage))
        return self._transactions

    @property
    def budget(self) -> Optional[float]:
        return load_budget(self.storage)

    def set_budget(self, value: float) -> bool:
        try:
            save_budget(self.storage, value)
        except OSError as e:
            logger.error("Error saving budget to storage: %s", e)
            return False
        return True
