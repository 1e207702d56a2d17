# viz.py
from typing import List

import matplotlib.pyplot as plt
import pandas as pd

from analysis import CategoryShare, daily_summary, monthly_summary
from models import display_category

CHART_COLORS = [
    "#4CAF50", "#2196F3", "#FFC107", "#F44336", "#9C27B0",
    "#FF9800", "#00BCD4", "#795548", "#607D8B",
]


def pie_labels(breakdown: List[CategoryShare]) -> List[str]:
    return [f"{display_category(s.category)} ({s.percentage:.1f}%)" for s in breakdown]


def plot_category_pie(breakdown: List[CategoryShare], ax=None, title="Spending by category"):
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 6))
    if not breakdown:
        ax.text(0.5, 0.5, "No expense data to display", ha="center", va="center")
        ax.set_axis_off()
        ax.set_title(title)
        return ax
    colors = [CHART_COLORS[i % len(CHART_COLORS)] for i in range(len(breakdown))]
    ax.pie([s.amount for s in breakdown], labels=pie_labels(breakdown), colors=colors,
           wedgeprops={"edgecolor": "#ffffff", "linewidth": 2})
    ax.set_title(title)
    return ax


def plot_time_series(df: pd.DataFrame, ax=None, title="Spending over time", window_days=7):
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 4))
    daily = daily_summary(df)
    if not daily.empty:
        rolling = daily["total_spent"].rolling(window_days, min_periods=1).mean()
        ax.plot(daily["date"], daily["total_spent"], label="Daily total")
        ax.plot(daily["date"], rolling, label=f"{window_days}-day rolling mean", linewidth=2)
        ax.legend()
    ax.set_title(title)
    ax.set_ylabel("Amount")
    ax.set_xlabel("Date")
    plt.tight_layout()
    return ax


def plot_monthly_totals(df: pd.DataFrame, ax=None, title="Spending per month"):
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 4))
    monthly = monthly_summary(df)
    if not monthly.empty:
        labels = [d.strftime("%b %Y") for d in monthly["date"]]
        ax.bar(labels, monthly["total_spent"], color=CHART_COLORS[1])
    ax.set_title(title)
    ax.set_ylabel("Amount")
    ax.set_xlabel("Month")
    plt.tight_layout()
    return ax
