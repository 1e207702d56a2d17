import json

import pandas as pd

from models import Transaction
from storage import (
    BUDGET_KEY, TRANSACTIONS_KEY, JsonFileStorage, MemoryStorage, format_budget, load_budget,
    load_transactions, parse_transactions, save_budget, save_transactions, write_transactions_csv,
)


def make_tx(id, amount, day, category="food", description="Item"):
    return Transaction(id=id, description=description, amount=amount, date=day, category=category)


def test_parse_absent_key_is_empty():
    assert parse_transactions(None) == []


def test_parse_corrupt_blob_is_empty():
    assert parse_transactions("{not json") == []
    assert parse_transactions('{"id": 1}') == []
    assert parse_transactions('"text"') == []


def test_parse_skips_malformed_entries_only():
    good = make_tx(1, 10, "2024-06-01").to_dict()
    raw = json.dumps([good, {"id": 2, "description": "bad", "date": "2024-06-01"}, 7, None,
                      {"id": 3, "description": "Tea", "amount": "x", "date": "2024-06-02"}])
    assert parse_transactions(raw) == [make_tx(1, 10, "2024-06-01")]
    assert parse_transactions('[{"id": 1}]') == []


def test_parse_normalizes_missing_category():
    raw = json.dumps([{"id": 1, "desc": "Lunch", "amount": 12.5, "date": "2024-06-01"}])
    txs = parse_transactions(raw)
    assert txs == [make_tx(1, 12.5, "2024-06-01", category="other", description="Lunch")]


def test_save_and_load_transactions_memory():
    storage = MemoryStorage()
    txs = [make_tx(1, 10, "2024-06-01"), make_tx(2, 20, "2024-06-02", "health")]
    save_transactions(storage, txs)
    assert isinstance(storage.get_item(TRANSACTIONS_KEY), str)
    assert load_transactions(storage) == txs


def test_json_file_storage_persists_across_instances(tmp_path):
    path = str(tmp_path / "store.json")
    txs = [make_tx(1, 10, "2024-06-01")]
    save_transactions(JsonFileStorage(path), txs)
    save_budget(JsonFileStorage(path), 1500)

    again = JsonFileStorage(path)
    assert load_transactions(again) == txs
    assert load_budget(again) == 1500.0
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert set(data) == {TRANSACTIONS_KEY, BUDGET_KEY}
    assert data[BUDGET_KEY] == "1500"


def test_json_file_storage_missing_file(tmp_path):
    storage = JsonFileStorage(str(tmp_path / "missing.json"))
    assert storage.get_item(TRANSACTIONS_KEY) is None
    assert load_transactions(storage) == []
    assert load_budget(storage) is None


def test_json_file_storage_corrupt_file_is_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("garbage", encoding="utf-8")
    storage = JsonFileStorage(str(path))
    assert load_transactions(storage) == []
    storage.set_item(BUDGET_KEY, "10")
    assert storage.get_item(BUDGET_KEY) == "10"


def test_remove_item(tmp_path):
    storage = JsonFileStorage(str(tmp_path / "store.json"))
    storage.set_item(BUDGET_KEY, "10")
    storage.remove_item(BUDGET_KEY)
    assert storage.get_item(BUDGET_KEY) is None
    memory = MemoryStorage({BUDGET_KEY: "10"})
    memory.remove_item(BUDGET_KEY)
    assert memory.get_item(BUDGET_KEY) is None


def test_load_budget_rejects_bad_values():
    assert load_budget(MemoryStorage({BUDGET_KEY: "abc"})) is None
    assert load_budget(MemoryStorage({BUDGET_KEY: "-5"})) is None
    assert load_budget(MemoryStorage({BUDGET_KEY: ""})) is None
    assert load_budget(MemoryStorage({BUDGET_KEY: "2500.75"})) == 2500.75


def test_format_budget():
    assert format_budget(5000) == "5000"
    assert format_budget(5000.0) == "5000"
    assert format_budget(99.5) == "99.5"


def test_write_transactions_csv(tmp_path):
    path = str(tmp_path / "out.csv")
    write_transactions_csv(path, [make_tx(1, 10, "2024-06-01"), make_tx(2, 5.5, "2024-06-02", "health")])
    df = pd.read_csv(path)
    assert list(df.columns) == ["id", "date", "description", "category", "amount"]
    assert df["amount"].sum() == 15.5
