# models.py

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Dict, Any

CATEGORIES = (
    "food", "transportation", "entertainment", "utilities",
    "shopping", "health", "education", "housing", "other",
)
DEFAULT_CATEGORY = "other"


def today_iso() -> str:
    return date.today().isoformat()


def normalize_category(category: Optional[str]) -> str:
    # Any category string is kept verbatim; only missing/empty values fall back.
    return category or DEFAULT_CATEGORY


def display_category(category: Optional[str]) -> str:
    category = normalize_category(category)
    return category[:1].upper() + category[1:]


@dataclass(frozen=True)
class Transaction:
    id: int
    description: str
    amount: float
    date: str
    category: str = DEFAULT_CATEGORY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "amount": float(self.amount),
            "date": self.date,
            "category": self.category,
        }

    @staticmethod
    def from_dict(d):
        """
        Builds a Transaction from its stored form.
        Accepts the older "desc" key for the description. Raises KeyError,
        TypeError or ValueError when a required field is missing or malformed.
        """
        if "description" in d:
            description = d["description"]
        else:
            description = d["desc"]
        return Transaction(
            id=int(d["id"]),
            description=str(description),
            amount=float(d["amount"]),
            date=str(d["date"]),
            category=normalize_category(d.get("category")),
        )


@dataclass
class TransactionDraft:
    """What the add form hands to the ledger: validated input without an id yet."""
    description: str
    amount: float
    date: str = field(default_factory=lambda: today_iso())
    category: Optional[str] = None
    id: Optional[int] = None
