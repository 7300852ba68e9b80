"""Helpers for values read from uploaded rows."""

from typing import Any, Optional

import pandas as pd


def is_valid_value(value: Any) -> bool:
    """
    Check if value is present and not blank.

    Args:
        value: Value to check (may be a pandas NA/NaN)

    Returns:
        True if value is valid and non-empty, False otherwise
    """
    if value is None:
        return False
    try:
        if pd.isna(value):
            return False
    except (TypeError, ValueError):
        # Containers make pd.isna return arrays; treat them as present
        pass
    return bool(str(value).strip())


def coerce_payee_name(value: Any) -> str:
    """Convert a cell value into a payee name string; missing values become ''."""
    if not is_valid_value(value):
        return ""
    return str(value).strip()


def sanitize_for_logging(value: Optional[str], max_length: int = 200) -> str:
    """Truncate a value so that it can be logged safely."""
    if value is None:
        return ""
    value_str = str(value)
    if len(value_str) > max_length:
        return value_str[:max_length] + "..."
    return value_str
