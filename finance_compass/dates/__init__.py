"""Date normalization package."""

from finance_compass.dates.normalizer import (
    DateInputMode,
    excel_serial_to_uk_date,
    iso_date_to_uk_date,
    normalize_date,
    normalize_date_to_uk,
    normalize_day_and_month,
    normalize_day_of_month,
)

__all__ = [
    "DateInputMode",
    "excel_serial_to_uk_date",
    "iso_date_to_uk_date",
    "normalize_date",
    "normalize_date_to_uk",
    "normalize_day_and_month",
    "normalize_day_of_month",
]
