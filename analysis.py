# analysis.py
"""
Pure aggregations over the transaction list.
Nothing here is cached; every view recomputes from the current snapshot.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from models import Transaction, today_iso
from storage import transactions_to_df

WARNING_PERCENT = 75
OVER_PERCENT = 100
TOP_CATEGORIES = 3


@dataclass(frozen=True)
class PeriodTotal:
    total: float
    count: int


@dataclass(frozen=True)
class MonthSummary:
    total: float
    count: int
    top_categories: List[Tuple[str, float]]


@dataclass(frozen=True)
class BudgetStatus:
    budget: float
    spent: float
    remaining: float
    percent_used: float
    severity: str


@dataclass(frozen=True)
class CategoryShare:
    category: str
    amount: float
    percentage: float


@dataclass(frozen=True)
class DateFilterResult:
    transactions: List[Transaction]
    total: float
    count: int


def txs_to_df(txs: Iterable[Transaction]) -> pd.DataFrame:
    df = transactions_to_df(list(txs))
    df["amount"] = df["amount"].astype(float)
    df["date"] = df["date"].astype(str)
    df["category"] = df["category"].astype(str)
    return df


def _year_month(value: str) -> Optional[Tuple[int, int]]:
    parts = str(value).split("-")
    try:
        return int(parts[0]), int(parts[1])
    except (IndexError, ValueError):
        return None


def _month_frame(df: pd.DataFrame, year: int, month: int) -> pd.DataFrame:
    mask = df["date"].map(lambda d: _year_month(d) == (year, month)).astype(bool)
    return df[mask]


def _category_totals(df: pd.DataFrame) -> pd.Series:
    # groupby(sort=False) keeps first-appearance order, and the stable sort keeps it for ties.
    totals = df.groupby("category", sort=False)["amount"].sum()
    return totals.sort_values(ascending=False, kind="stable")


def today_total(txs: Iterable[Transaction], today: Optional[str] = None) -> PeriodTotal:
    today = today or today_iso()
    df = txs_to_df(txs)
    sub = df[df["date"] == today]
    return PeriodTotal(total=float(sub["amount"].sum()), count=int(len(sub)))


def month_total(txs: Iterable[Transaction], year: int, month: int) -> MonthSummary:
    """Month is 1-indexed. Also returns the top three categories by spend for that month."""
    sub = _month_frame(txs_to_df(txs), year, month)
    top = _category_totals(sub).head(TOP_CATEGORIES)
    return MonthSummary(
        total=float(sub["amount"].sum()),
        count=int(len(sub)),
        top_categories=[(str(cat), float(amount)) for cat, amount in top.items()],
    )


def severity_for(percent_used: float) -> str:
    if percent_used >= OVER_PERCENT:
        return "over"
    if percent_used >= WARNING_PERCENT:
        return "warning"
    return "normal"


def budget_status(txs: Iterable[Transaction], budget: Optional[float], year: int, month: int) -> BudgetStatus:
    budget = float(budget or 0.0)
    spent = month_total(txs, year, month).total
    if budget > 0:
        percent_used = min(100.0, max(0.0, spent / budget * 100))
    else:
        percent_used = 0.0
    return BudgetStatus(
        budget=budget,
        spent=spent,
        remaining=budget - spent,
        percent_used=percent_used,
        severity=severity_for(percent_used),
    )


def current_budget_status(txs: Iterable[Transaction], budget: Optional[float], now: Optional[date] = None) -> BudgetStatus:
    now = now or date.today()
    return budget_status(txs, budget, now.year, now.month)


def _date_key(value: str) -> Tuple[int, int, int]:
    # Unparseable dates sort as oldest.
    parts = str(value).split("-")
    try:
        return int(parts[0]), int(parts[1]), int(parts[2])
    except (IndexError, ValueError):
        return 0, 0, 0


def sort_newest_first(txs: Iterable[Transaction]) -> List[Transaction]:
    return sorted(txs, key=lambda t: (_date_key(t.date), t.id), reverse=True)


def recent_transactions(txs: Iterable[Transaction], n: int = 5) -> List[Transaction]:
    return sort_newest_first(txs)[:max(0, n)]


def category_breakdown(txs: Iterable[Transaction]) -> List[CategoryShare]:
    """
    Spend per category over the whole ledger with each category's share of the total.
    An empty list means there is nothing to chart.
    """
    totals = _category_totals(txs_to_df(txs))
    grand_total = float(totals.sum())
    if totals.empty or grand_total <= 0:
        return []
    return [
        CategoryShare(category=str(cat), amount=float(amount), percentage=round(float(amount) / grand_total * 100, 1))
        for cat, amount in totals.items()
    ]


def filter_by_search_term(txs: Iterable[Transaction], term: Optional[str]) -> List[Transaction]:
    needle = (term or "").lower()
    return [t for t in txs if needle in t.description.lower() or needle in (t.category or "").lower()]


def filter_by_date(txs: Iterable[Transaction], day: str) -> DateFilterResult:
    matches = [t for t in txs if t.date == day]
    return DateFilterResult(transactions=matches, total=float(sum(t.amount for t in matches)), count=len(matches))


def daily_summary(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=["date", "total_spent"])
    df = df.assign(date=pd.to_datetime(df["date"], errors="coerce")).dropna(subset=["date"])
    daily = df.set_index("date")["amount"].resample("D").sum().rename("total_spent")
    return daily.reset_index()


def monthly_summary(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=["date", "total_spent"])
    df = df.assign(date=pd.to_datetime(df["date"], errors="coerce")).dropna(subset=["date"])
    monthly = df.set_index("date")["amount"].resample("MS").sum().rename("total_spent")
    return monthly.reset_index()
