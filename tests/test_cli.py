import json
from datetime import date

import matplotlib

matplotlib.use("Agg")

from cli import main
from storage import TRANSACTIONS_KEY


def run(tmp_path, *args):
    return main(["--storage", str(tmp_path / "store.json"), *args])


def stored(tmp_path):
    with open(tmp_path / "store.json", encoding="utf-8") as f:
        return json.loads(json.load(f)[TRANSACTIONS_KEY])


def test_add_and_list(tmp_path, capsys):
    assert run(tmp_path, "add", "Coffee", "4.50", "--category", "food") == 0
    assert run(tmp_path, "add", "Taxi", "12", "--category", "transportation") == 0
    rows = stored(tmp_path)
    assert [r["description"] for r in rows] == ["Coffee", "Taxi"]
    assert rows[0]["date"] == date.today().isoformat()

    capsys.readouterr()
    assert run(tmp_path, "list", "--search", "foo") == 0
    out = capsys.readouterr().out
    assert "Coffee" in out
    assert "Taxi" not in out


def test_add_rejects_invalid_input(tmp_path, capsys):
    assert run(tmp_path, "add", "x", "-5") == 2
    err = capsys.readouterr().err
    assert "Min. 2 characters" in err
    assert "Must be positive" in err
    assert not (tmp_path / "store.json").exists()


def test_delete_requires_confirmation(tmp_path, capsys, monkeypatch):
    run(tmp_path, "add", "Coffee", "4.50")
    tx_id = stored(tmp_path)[0]["id"]

    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    assert run(tmp_path, "delete", str(tx_id)) == 0
    assert len(stored(tmp_path)) == 1

    monkeypatch.setattr("builtins.input", lambda prompt: "y")
    assert run(tmp_path, "delete", str(tx_id)) == 0
    assert stored(tmp_path) == []

    assert run(tmp_path, "delete", str(tx_id), "--yes") == 1


def test_budget_and_summary(tmp_path, capsys):
    assert run(tmp_path, "budget", "abc") == 2
    assert run(tmp_path, "budget", "100") == 0
    run(tmp_path, "add", "Groceries", "120", "--category", "food")
    capsys.readouterr()

    assert run(tmp_path, "summary") == 0
    out = capsys.readouterr().out
    assert "Today: 120.00 (1 transaction(s))" in out
    assert "Food" in out
    assert "remaining: -20.00" in out
    assert "over" in out

    assert run(tmp_path, "budget") == 0
    assert "Monthly budget: 100.00" in capsys.readouterr().out


def test_chart_and_export(tmp_path, capsys):
    assert run(tmp_path, "chart") == 0
    assert "No expense data" in capsys.readouterr().out

    run(tmp_path, "add", "Groceries", "120", "--category", "food")
    run(tmp_path, "add", "Bus", "30", "--category", "transportation")
    chart = tmp_path / "pie.png"
    assert run(tmp_path, "chart", "--output", str(chart)) == 0
    assert chart.exists()
    for kind in ("time", "month"):
        out_png = tmp_path / f"{kind}.png"
        assert run(tmp_path, "chart", "--kind", kind, "--output", str(out_png)) == 0
        assert out_png.exists()

    csv_path = tmp_path / "out.csv"
    assert run(tmp_path, "export", str(csv_path)) == 0
    assert csv_path.read_text(encoding="utf-8").startswith("id,date,description,category,amount")


def test_time_and_month_charts_on_empty_ledger(tmp_path, capsys):
    for kind in ("time", "month"):
        out_png = tmp_path / f"{kind}.png"
        assert run(tmp_path, "chart", "--kind", kind, "--output", str(out_png)) == 0
        assert out_png.exists()


def test_plot_helpers_draw_series():
    from analysis import txs_to_df
    from models import Transaction
    from viz import plot_monthly_totals, plot_time_series

    df = txs_to_df([
        Transaction(id=1, description="Rent", amount=900, date="2024-05-01", category="housing"),
        Transaction(id=2, description="Food", amount=100, date="2024-06-03", category="food"),
    ])
    ax = plot_time_series(df)
    assert len(ax.get_lines()) == 2
    bars = plot_monthly_totals(df)
    assert [p.get_height() for p in bars.patches] == [900, 100]


def test_no_command_prints_help(tmp_path, capsys):
    assert run(tmp_path) == 1
    assert "usage" in capsys.readouterr().out
