"""
Seed Data and Structural Defaults

The seed record (data/seed.json) is the built-in starting point: it is
used on first run, on "reload defaults", and as the per-field fallback
when persisted data is missing whole sections.

The seed keeps the original spreadsheet layout (flat budget numbers,
three named savings buckets, serial dates). It is turned into an
AppState by the migrator like any other legacy blob.
"""

import copy
import json
from functools import lru_cache
from importlib import resources
from typing import Any

from finance_compass.models.ledger import BudgetCategory


SEED_PACKAGE = "finance_compass.data"
SEED_FILENAME = "seed.json"

# (legacy flat field, label, category) for the five-item monthly budget template
LEGACY_BUDGET_FIELDS: list[tuple[str, str, BudgetCategory]] = [
    ("monthlySpendingBudget", "Monthly spending budget (£)", BudgetCategory.SPENDING),
    ("monthlyPrimarySavings", "Monthly primary savings amount (£)", BudgetCategory.SAVING),
    ("monthlySecondarySavings", "Monthly secondary savings amount (£)", BudgetCategory.SAVING),
    ("monthlyInvestmentBudget", "Monthly investment budget (£)", BudgetCategory.INVESTING),
    ("monthlyPensionContribution", "Monthly pension contribution (£)", BudgetCategory.INVESTING),
]

# (legacy bucket key, section id, title, tab, row id prefix)
LEGACY_SAVINGS_BUCKETS: list[tuple[str, str, str, str, str]] = [
    ("primary", "savings-section-primary", "Primary savings", "savings", "primary"),
    ("secondary", "savings-section-secondary", "Secondary savings", "savings", "secondary"),
    ("investmentFund", "savings-section-investment-fund", "Investments tracker", "investments", "fund"),
]


@lru_cache()
def _load_seed_text() -> str:
    return resources.files(SEED_PACKAGE).joinpath(SEED_FILENAME).read_text(encoding="utf-8")


def load_seed() -> dict[str, Any]:
    """
    Load the seed record.

    Returns a fresh copy each call so callers may mutate it freely.
    """
    return json.loads(_load_seed_text())


def seed_budget_value(field_name: str) -> float:
    """A flat legacy budget number from the seed (0 if the seed lacks it)."""
    value = load_seed().get("budget", {}).get(field_name, 0)
    return float(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else 0.0


def build_default_monthly_budget_items() -> list[dict[str, Any]]:
    """The five-item monthly budget template, valued from the seed."""
    seed_budget = load_seed().get("budget", {})
    return [
        {
            "id": f"monthly-budget-{index + 1}",
            "label": label,
            "category": category.value,
            "monthlyAmount": seed_budget.get(field_name, 0),
        }
        for index, (field_name, label, category) in enumerate(LEGACY_BUDGET_FIELDS)
    ]


def build_default_savings_layout() -> dict[str, Any]:
    """The seed's savings buckets in their legacy primary/secondary/investmentFund layout."""
    return copy.deepcopy(load_seed().get("savings", {}))


def build_initial_raw_state() -> dict[str, Any]:
    """
    The seed arranged as a (partly legacy) persisted blob.

    Pass this through `migrate` to obtain the starting AppState.
    """
    seed = load_seed()
    budget = seed.get("budget", {})
    investments = seed.get("investments", {})

    return {
        "budget": {
            "monthlyExpenses": [
                {"id": f"monthly-expense-{index + 1}", "label": row.get("label", ""), "date": "", "amount": row.get("amount", 0)}
                for index, row in enumerate(budget.get("monthlyExpenses", []))
            ],
            "yearlyExpenses": [
                {"id": f"yearly-expense-{index + 1}", "label": row.get("label", ""), "date": "", "amount": row.get("amount", 0)}
                for index, row in enumerate(budget.get("yearlyExpenses", []))
            ],
            "monthlyBudgetItems": build_default_monthly_budget_items(),
            "incomeStreams": [
                {"id": f"income-stream-{index + 1}", "label": row.get("label", ""), "monthlyAmount": row.get("monthlyAmount", 0)}
                for index, row in enumerate(budget.get("incomeStreams", []))
            ],
        },
        "savings": seed.get("savings", {}),
        "investments": {
            "startDate": investments.get("startDate", ""),
            "holdings": [
                {
                    "id": f"holding-{index + 1}",
                    "name": row.get("name", ""),
                    "location": row.get("location", ""),
                    "amount": row.get("amount", 0),
                }
                for index, row in enumerate(investments.get("holdings", []))
            ],
            "marketChanges": [],
        },
    }
