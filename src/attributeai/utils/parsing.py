"""Lenient value parsing for raw journey records.

Journeys usually arrive as decoded JSON or spreadsheet rows exported from a
CRM, where costs look like "$1,234.50" and empty cells come through as
"N/A" or NaN. These helpers normalize such values before model validation.
"""

import logging
import math
import re
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

MISSING_TOKENS = frozenset({"n/a", "na", "nan", "<na>", "--", "-", "null", "none"})

# Largest cost or conversion value accepted; keeps batch totals finite
MAX_MONETARY_VALUE = 1e15


def is_missing_value(value: Any) -> bool:
    """Check if a value is missing, handling pandas NA properly."""
    try:
        if value is None:
            return True
        if isinstance(value, str):
            return value.strip() == "" or value.strip().lower() in MISSING_TOKENS
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        # pandas NA can't be used in boolean context
        return str(value).lower() in MISSING_TOKENS
    return False


def clean_monetary_value(value: Any) -> float | None:
    """Clean and parse a monetary amount.

    Handles the formats that show up in exported marketing data:
    - Comma-separated numbers: "4,894" → 4894.0
    - Currency symbols: "$1,234.56" → 1234.56
    - Accounting negatives: "(12.50)" → -12.5
    - Empty/null values: "" → None
    - Invalid formats: "N/A" → None

    Args:
        value: Raw value that should be numeric

    Returns:
        Cleaned float, or None if the value is missing or unparsable
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return float(value)
        except OverflowError:
            logger.debug("Monetary value is too large to convert, returning None")
            return None

    if is_missing_value(value):
        return None

    if isinstance(value, str):
        cleaned = re.sub(r"[,$€£%\s]", "", value.strip())

        if cleaned.startswith("(") and cleaned.endswith(")"):
            cleaned = "-" + cleaned[1:-1]

        try:
            parsed = float(cleaned)
        except (ValueError, OverflowError):
            logger.debug(f"Unable to parse monetary value: '{value}', returning None")
            return None
        return parsed if math.isfinite(parsed) else None

    logger.debug(f"Unable to convert value to numeric: '{value}' (type: {type(value)})")
    return None


def bounded_monetary_value(value: Any) -> float | None:
    """Clean a monetary amount and reject implausibly large ones.

    Missing and unparsable values still return None, like
    ``clean_monetary_value``. Negative amounts are not bounded; callers
    treat them as zero spend or an invalid conversion.

    Raises:
        ValueError: If the amount is above MAX_MONETARY_VALUE
    """
    amount = clean_monetary_value(value)
    if amount is None:
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            raise ValueError("Monetary value is too large to represent")
        return None
    if amount > MAX_MONETARY_VALUE:
        raise ValueError(
            f"Monetary value {amount:g} exceeds the supported maximum of "
            f"{MAX_MONETARY_VALUE:g}"
        )
    return amount


def clean_label(value: Any) -> str | None:
    """Normalize a categorical label such as a channel or weather condition.

    Returns:
        Stripped string, or None when the value is missing
    """
    if is_missing_value(value):
        return None
    return str(value).strip()
