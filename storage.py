# storage.py
import json
import math
import os
from typing import Dict, List, Optional

import pandas as pd
from filelock import FileLock

from logging_setup import get_logger
from models import Transaction

logger = get_logger("expense_tracker.storage")

STORAGE_ENV = "EXPENSE_TRACKER_STORAGE"
STORAGE_PATH = os.environ.get(STORAGE_ENV, "expense_tracker.json")
TRANSACTIONS_KEY = "transactions"
BUDGET_KEY = "monthlyBudget"
LOCK_TIMEOUT = 5
CSV_COLUMNS = ["id", "date", "description", "category", "amount"]


class MemoryStorage:
    """Dict-backed key-value storage. Values are strings, like browser local storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """
    Key-value storage kept as one JSON object in a file.
    Every read and write takes a file lock so two processes never interleave a write.
    """

    def __init__(self, path: str = STORAGE_PATH, timeout: float = LOCK_TIMEOUT):
        self.path = path
        self.lock = FileLock(path + ".lock", timeout=timeout)

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path) or os.path.getsize(self.path) == 0:
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except ValueError:
                logger.error("Storage file %s is not valid JSON; treating it as empty", self.path)
                return {}
        if not isinstance(data, dict):
            logger.error("Storage file %s does not hold a JSON object; treating it as empty", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write_all(self, items: Dict[str, str]) -> None:
        tmp_path = self.path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self.lock:
            return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self.lock:
            items = self._read_all()
            items[key] = str(value)
            self._write_all(items)

    def remove_item(self, key: str) -> None:
        with self.lock:
            items = self._read_all()
            if key in items:
                del items[key]
                self._write_all(items)


def parse_transactions(raw: Optional[str]) -> List[Transaction]:
    """
    Deserializes the stored transaction array.
    Absent data, invalid JSON and non-array values give an empty list. Malformed
    entries inside a valid array are skipped one by one so the rest survive.
    Problems are logged, never raised.
    """
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.error("Error parsing stored transactions: %s", e)
        return []
    if not isinstance(data, list):
        logger.error("Stored transactions are not a JSON array (got %s)", type(data).__name__)
        return []

    txs = []
    for index, d in enumerate(data):
        try:
            txs.append(Transaction.from_dict(d))
        except (ValueError, TypeError, KeyError) as e:
            logger.error("Skipping malformed stored transaction at index %d: %r", index, e)
    return txs


def serialize_transactions(txs) -> str:
    return json.dumps([t.to_dict() for t in txs])


def load_transactions(storage) -> List[Transaction]:
    try:
        raw = storage.get_item(TRANSACTIONS_KEY)
    except OSError as e:
        logger.error("Error reading transactions from storage: %s", e)
        return []
    return parse_transactions(raw)


def save_transactions(storage, txs) -> None:
    storage.set_item(TRANSACTIONS_KEY, serialize_transactions(txs))


def format_budget(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def load_budget(storage) -> Optional[float]:
    try:
        raw = storage.get_item(BUDGET_KEY)
    except OSError as e:
        logger.error("Error reading budget from storage: %s", e)
        return None
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.error("Stored budget %r is not a number; ignoring it", raw)
        return None
    if not math.isfinite(value) or value < 0:
        logger.error("Stored budget %r is not a non-negative number; ignoring it", raw)
        return None
    return value


def save_budget(storage, value: float) -> None:
    storage.set_item(BUDGET_KEY, format_budget(value))


def transactions_to_df(txs) -> pd.DataFrame:
    return pd.DataFrame([t.to_dict() for t in txs], columns=CSV_COLUMNS)


def transactions_to_csv_bytes(txs) -> bytes:
    return transactions_to_df(txs).to_csv(index=False).encode("utf-8")


def write_transactions_csv(path: str, txs) -> None:
    """Exports transactions to a CSV file using a file lock."""
    lock = FileLock(path + ".lock", timeout=LOCK_TIMEOUT)
    with lock:
        transactions_to_df(txs).to_csv(path, index=False)
