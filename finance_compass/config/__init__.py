"""Configuration package."""

from finance_compass.config.settings import (
    FinanceSettings,
    get_settings,
)

__all__ = [
    "FinanceSettings",
    "get_settings",
]
