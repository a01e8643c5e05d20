"""
Calculation Engine Package

Pure functions from ledger models to summary models. Nothing here reads
storage, settings or the audit trail.
"""

from finance_compass.engine.dashboard import (
    calculate_dashboard,
    project_net_worth,
    yearly_from_monthly,
)
from finance_compass.engine.holdings import summarize_holdings
from finance_compass.engine.reconciliation import (
    derive_investment_row_delta,
    normalize_savings_market_changes,
    reconcile_market_change,
    relink_investment_change,
    resolve_investment_row_current_value,
    set_investment_change_value,
)
from finance_compass.engine.savings import (
    calculate_savings_summary,
    renormalize_bucket,
)

__all__ = [
    "calculate_dashboard",
    "calculate_savings_summary",
    "derive_investment_row_delta",
    "normalize_savings_market_changes",
    "project_net_worth",
    "reconcile_market_change",
    "relink_investment_change",
    "renormalize_bucket",
    "resolve_investment_row_current_value",
    "set_investment_change_value",
    "summarize_holdings",
    "yearly_from_monthly",
]
