"""
Date Normalizer

Dates arrive as spreadsheet serial numbers, ISO strings, UK strings or
bare day numbers. Everything is shown as UK display strings:

- full:      DD/MM/YYYY
- day:       DD          (monthly expenses)
- dayMonth:  DD/MM       (yearly expenses)

DESIGN DECISION: Normalization is total. Unparseable full dates are kept
as typed (trimmed) so nothing the user entered is lost; the partial modes
return "" because a half-valid day is worse than none.
"""

import re
from datetime import date, timedelta
from enum import Enum
from typing import Optional


class DateInputMode(str, Enum):
    FULL = "full"
    DAY = "day"
    DAY_MONTH = "dayMonth"


# Spreadsheet serial dates count days from this epoch
EXCEL_EPOCH = date(1899, 12, 30)

_UK_DATE = re.compile(r"^[0-9]{2}/[0-9]{2}/[0-9]{4}$")
_SERIAL = re.compile(r"^[0-9]+(?:\.[0-9]+)?$")
_ISO_DATE = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})$")
_ISO_LOOSE = re.compile(r"^[0-9]{4}-([0-9]{1,2})-([0-9]{1,2})$")
_DAY_FIRST = re.compile(r"^([0-9]{1,2})(?:[/-][0-9]{1,2}(?:[/-][0-9]{2,4})?)?$")
_DAY_MONTH_FIRST = re.compile(r"^([0-9]{1,2})[/-]([0-9]{1,2})(?:[/-][0-9]{2,4})?$")


def _text(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _two_digits(value: int) -> str:
    return f"{value:02d}"


def _valid_day(day: int) -> bool:
    return 1 <= day <= 31


def _valid_month(month: int) -> bool:
    return 1 <= month <= 12


def format_uk_date(value: date) -> str:
    return f"{value.day:02d}/{value.month:02d}/{value.year}"


def excel_serial_to_uk_date(value: str) -> Optional[str]:
    """
    Convert a spreadsheet serial day count to DD/MM/YYYY.

    Fractional serials (time of day) are floored. Returns None when the
    value is not a positive number or lands outside the calendar.
    """
    trimmed = _text(value)
    if not trimmed or not _SERIAL.match(trimmed):
        return None

    serial = float(trimmed)
    if serial <= 0:
        return None

    try:
        converted = EXCEL_EPOCH + timedelta(days=int(serial))
    except OverflowError:
        return None
    return format_uk_date(converted)


def iso_date_to_uk_date(value: str) -> Optional[str]:
    """Reorder YYYY-MM-DD as DD/MM/YYYY without validating the calendar."""
    match = _ISO_DATE.match(_text(value))
    if not match:
        return None
    year, month, day = match.groups()
    return f"{day}/{month}/{year}"


def normalize_date_to_uk(value: str) -> str:
    """Full-date normalization. Unrecognised input is returned trimmed."""
    trimmed = _text(value)
    if not trimmed:
        return ""

    if _UK_DATE.match(trimmed):
        return trimmed

    excel_date = excel_serial_to_uk_date(trimmed)
    if excel_date:
        return excel_date

    iso_date = iso_date_to_uk_date(trimmed)
    if iso_date:
        return iso_date

    return trimmed


def normalize_day_of_month(value: str) -> str:
    """Extract a day of month as DD, or "" if there is no valid day."""
    trimmed = _text(value)
    if not trimmed:
        return ""

    iso_match = _ISO_LOOSE.match(trimmed)
    if iso_match:
        day = int(iso_match.group(2))
        return _two_digits(day) if _valid_day(day) else ""

    day_match = _DAY_FIRST.match(trimmed)
    if day_match:
        day = int(day_match.group(1))
        return _two_digits(day) if _valid_day(day) else ""

    return ""


def normalize_day_and_month(value: str) -> str:
    """Extract day and month as DD/MM, or "" if either is invalid."""
    trimmed = _text(value)
    if not trimmed:
        return ""

    iso_match = _ISO_LOOSE.match(trimmed)
    if iso_match:
        month, day = int(iso_match.group(1)), int(iso_match.group(2))
    else:
        day_month_match = _DAY_MONTH_FIRST.match(trimmed)
        if not day_month_match:
            return ""
        day, month = int(day_month_match.group(1)), int(day_month_match.group(2))

    if _valid_day(day) and _valid_month(month):
        return f"{_two_digits(day)}/{_two_digits(month)}"
    return ""


def normalize_date(raw: str, mode: DateInputMode = DateInputMode.FULL) -> str:
    """
    Normalize a date string for display in the given mode.

    Examples:
        normalize_date("45505") -> "01/08/2024"
        normalize_date("2024-08-01") -> "01/08/2024"
        normalize_date("31", DateInputMode.DAY) -> "31"
        normalize_date("32", DateInputMode.DAY) -> ""
    """
    mode = DateInputMode(mode)
    if mode is DateInputMode.DAY:
        return normalize_day_of_month(raw)
    if mode is DateInputMode.DAY_MONTH:
        return normalize_day_and_month(raw)
    return normalize_date_to_uk(raw)
