"""
Display Formatting

Figures are shown the UK way: pounds sterling with thousands separators
and a leading minus for negatives ("-£1,234.50"); ratios as percentages
with two decimals.
"""

import math
from operator import attrgetter
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")

BLANK = "(blank)"


def format_pounds(value: float) -> str:
    """
    Format as GBP.

    Examples:
        1234.5   -> '£1,234.50'
        -20      -> '-£20.00'
    """
    text = f"£{abs(value):,.2f}"
    return f"-{text}" if value < 0 and text != "£0.00" else text


def format_compact_pounds(value: float) -> str:
    """Short GBP for chart labels: '£950', '£1.2K', '£12K', '£3.4M'."""
    magnitude = abs(value)
    for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if magnitude >= threshold:
            scaled = f"{magnitude / threshold:.1f}".rstrip("0").rstrip(".")
            text = f"£{scaled}{suffix}"
            break
    else:
        text = f"£{round(magnitude):,}"
    return f"-{text}" if value < 0 and text != "£0" else text


def format_signed_percent(ratio: Optional[float]) -> str:
    """
    A ratio as a percentage with two decimals; 'n/a' when it is undefined.

    Only negatives carry a sign: 0.0714 -> '7.14%', -0.05 -> '-5.00%'.
    """
    if ratio is None or not math.isfinite(ratio):
        return "n/a"
    text = f"{abs(ratio) * 100:,.2f}%"
    return f"-{text}" if ratio < 0 else text


def format_audit_value(value: object) -> str:
    """
    Render a before/after value for the audit trail.

    Numbers become pounds, blank text and missing values become '(blank)'.
    """
    if value is None:
        return BLANK
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_pounds(float(value))
    text = str(value).strip()
    return text or BLANK


def sort_by_label(rows: Iterable[T], key: Callable[[T], str] = attrgetter("label")) -> list[T]:
    """Case-insensitive label order with blank labels last. Stable."""
    return sorted(rows, key=lambda row: (not key(row).strip(), key(row).strip().lower()))
