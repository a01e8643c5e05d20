"""
Data Models Package

This package contains all Pydantic models used in Finance Compass.
Everything the engines read conforms to the ledger models; everything
they produce conforms to the summary models.
"""

from finance_compass.models.ledger import (
    AdditionalDepositRow,
    AmountRow,
    AppState,
    BudgetCategory,
    BudgetState,
    HoldingRow,
    IncomeRow,
    InvestmentsState,
    LedgerModel,
    MarketChangeRow,
    MonthlyBudgetItem,
    RegularDepositRow,
    SavingsBucket,
    SavingsSection,
    SavingsSectionTab,
    SavingsState,
    WithdrawalRow,
)
from finance_compass.models.summary import (
    DashboardSummary,
    HoldingSummary,
    NetWorthTrendPoint,
    SavingsSummary,
    SectionSummary,
)
from finance_compass.models.audit import (
    BudgetAuditAction,
    BudgetAuditEntry,
)

__all__ = [
    # Ledger models
    "AdditionalDepositRow",
    "AmountRow",
    "AppState",
    "BudgetCategory",
    "BudgetState",
    "HoldingRow",
    "IncomeRow",
    "InvestmentsState",
    "LedgerModel",
    "MarketChangeRow",
    "MonthlyBudgetItem",
    "RegularDepositRow",
    "SavingsBucket",
    "SavingsSection",
    "SavingsSectionTab",
    "SavingsState",
    "WithdrawalRow",
    # Summary models
    "DashboardSummary",
    "HoldingSummary",
    "NetWorthTrendPoint",
    "SavingsSummary",
    "SectionSummary",
    # Audit models
    "BudgetAuditAction",
    "BudgetAuditEntry",
]
