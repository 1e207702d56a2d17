# validation.py
import math
from typing import Dict, Optional, Union

MIN_DESCRIPTION_LENGTH = 2


class InvalidBudgetError(ValueError):
    pass


def _to_float(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def validate_transaction_form(description: Optional[str], amount: Union[str, float, None],
                              category: Optional[str]) -> Dict[str, str]:
    """
    Returns field -> message for every invalid field; an empty dict means the
    input can be turned into a TransactionDraft.
    """
    errors = {}
    desc = (description or "").strip()
    if not desc:
        errors["description"] = "Description is required"
    elif len(desc) < MIN_DESCRIPTION_LENGTH:
        errors["description"] = f"Min. {MIN_DESCRIPTION_LENGTH} characters"

    if amount is None or (isinstance(amount, str) and not amount.strip()):
        errors["amount"] = "Amount is required"
    else:
        number = _to_float(amount)
        if number is None or number <= 0:
            errors["amount"] = "Must be positive"

    if not category:
        errors["category"] = "Category required"
    return errors


def parse_budget(raw: Union[str, float, None]) -> float:
    if isinstance(raw, str):
        raw = raw.strip()
    number = _to_float(raw)
    if number is None or number < 0:
        raise InvalidBudgetError("Please enter a valid non-negative number for the budget.")
    return number
