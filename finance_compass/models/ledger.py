"""
Ledger Models for Finance Compass

These models define the canonical in-memory shape of the tracked data:
budget rows, savings buckets and investment holdings.

DESIGN DECISION: The models are NOT the place where loose persisted data
is tolerated. Anything read from storage goes through the migrator first,
which always produces values these models accept. The models only carry
types and the camelCase wire names of the stored blob.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LedgerModel(BaseModel):
    """Base for every persisted model: snake_case in Python, camelCase on disk."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        allow_inf_nan=False,
    )

    def to_storage_dict(self) -> dict:
        """Dump in the canonical persisted shape."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class BudgetCategory(str, Enum):
    """
    Monthly budget item categories.

    Legacy or unknown tags are resolved by the migrator from the item label.
    """
    SPENDING = "spending"
    SAVING = "saving"
    INVESTING = "investing"


class SavingsSectionTab(str, Enum):
    """
    Which grouping a savings section is shown under.

    Both tabs use identical calculation logic.
    """
    SAVINGS = "savings"
    INVESTMENTS = "investments"


# =============================================================================
# BUDGET ROWS
# =============================================================================

class AmountRow(LedgerModel):
    """A recurring expense line (monthly or yearly)."""

    id: str
    label: str = ""
    date: str = Field(
        default="",
        description="Day (DD) for monthly rows, day and month (DD/MM) for yearly rows"
    )
    amount: float = 0.0


class IncomeRow(LedgerModel):
    """A monthly income stream."""

    id: str
    label: str = ""
    monthly_amount: float = 0.0


class MonthlyBudgetItem(LedgerModel):
    """A planned monthly allocation to spending, saving or investing."""

    id: str
    label: str = ""
    category: BudgetCategory = BudgetCategory.SAVING
    monthly_amount: float = 0.0


# =============================================================================
# SAVINGS BUCKET ROWS
# =============================================================================

class RegularDepositRow(LedgerModel):
    """A planned deposit: `target` is the plan, `amount` what was paid in."""

    id: str
    date: str = ""
    amount: float = 0.0
    target: float = 0.0


class AdditionalDepositRow(LedgerModel):
    id: str
    date: str = ""
    amount: float = 0.0
    note: str = ""


class WithdrawalRow(LedgerModel):
    id: str
    date: str = ""
    amount: float = 0.0
    reason: str = ""


class MarketChangeRow(LedgerModel):
    """
    Growth or decline of a bucket or holding.

    A row may carry an absolute snapshot (`current_value`), a relative
    delta (`amount`), or both. The engines reconcile the two.
    """

    id: str
    date: str = ""
    amount: float = Field(
        default=0.0,
        description="Signed change relative to the previous value in the chain"
    )
    current_value: Optional[float] = Field(
        default=None,
        description="Absolute value after this change, when recorded"
    )
    note: str = ""
    holding_id: str = Field(
        default="",
        description="Linked holding id; empty means unassigned"
    )


class SavingsBucket(LedgerModel):
    """One account or goal's ledger."""

    location: str = ""
    cash_stash: float = Field(
        default=0.0,
        description="Cash set aside and excluded from the tracked base value"
    )
    regular_deposits: list[RegularDepositRow] = Field(default_factory=list)
    additional_deposits: list[AdditionalDepositRow] = Field(default_factory=list)
    withdrawals: list[WithdrawalRow] = Field(default_factory=list)
    market_changes: list[MarketChangeRow] = Field(
        default_factory=list,
        description="Chained in list order, not date order"
    )


class SavingsSection(LedgerModel):
    id: str
    title: str = ""
    tab: SavingsSectionTab = SavingsSectionTab.SAVINGS
    bucket: SavingsBucket = Field(default_factory=SavingsBucket)


# =============================================================================
# INVESTMENTS
# =============================================================================

class HoldingRow(LedgerModel):
    """An investment position. `amount` is what was invested, not its value."""

    id: str
    name: str = ""
    location: str = ""
    amount: float = 0.0


# =============================================================================
# APP STATE
# =============================================================================

class BudgetState(LedgerModel):
    monthly_expenses: list[AmountRow] = Field(default_factory=list)
    yearly_expenses: list[AmountRow] = Field(default_factory=list)
    monthly_budget_items: list[MonthlyBudgetItem] = Field(default_factory=list)
    income_streams: list[IncomeRow] = Field(default_factory=list)


class SavingsState(LedgerModel):
    sections: list[SavingsSection] = Field(default_factory=list)


class InvestmentsState(LedgerModel):
    start_date: str = ""
    holdings: list[HoldingRow] = Field(default_factory=list)
    market_changes: list[MarketChangeRow] = Field(default_factory=list)


class AppState(LedgerModel):
    """
    The whole tracked state.

    This is persisted verbatim after every committed change and passed
    back through the migrator when loaded.
    """

    budget: BudgetState = Field(default_factory=BudgetState)
    savings: SavingsState = Field(default_factory=SavingsState)
    investments: InvestmentsState = Field(default_factory=InvestmentsState)

    def find_section(self, section_id: str) -> Optional[SavingsSection]:
        """Look up a savings section by id."""
        for section in self.savings.sections:
            if section.id == section_id:
                return section
        return None

    def find_holding(self, holding_id: str) -> Optional[HoldingRow]:
        """Look up a holding by id."""
        if not holding_id:
            return None
        for holding in self.investments.holdings:
            if holding.id == holding_id:
                return holding
        return None
