"""
Derived Summary Models

Outputs of the calculation engines. None of these are persisted; they are
recomputed from the ledger whenever the state changes.

Ratios are Optional: None means "not applicable" (the base was zero) and
is rendered as "n/a" rather than a NaN or infinite percentage.
"""

from typing import Optional

from pydantic import BaseModel, Field

from finance_compass.models.ledger import (
    HoldingRow,
    MarketChangeRow,
    SavingsSectionTab,
)


class SavingsSummary(BaseModel):
    """Totals for one savings bucket."""

    regular_total: float
    regular_target_total: float
    additional_total: float
    withdrawal_total: float
    total_before_withdrawals: float
    base_value: float = Field(
        ...,
        description="Deposits less withdrawals less cash stash, before market movement"
    )
    normalized_market_changes: list[MarketChangeRow] = Field(
        default_factory=list,
        description="Market-change rows with amount and current_value both populated"
    )
    market_change_total: float
    market_change_ratio: Optional[float] = None
    final_total: float

    @property
    def amount_saved(self) -> float:
        """Final total without the market movement."""
        return self.final_total - self.market_change_total


class SectionSummary(BaseModel):
    """A savings section paired with its bucket summary."""

    section_id: str
    title: str
    tab: SavingsSectionTab
    cash_stash: float
    summary: SavingsSummary

    @property
    def display_title(self) -> str:
        return self.title.strip() or "Untitled"


class HoldingSummary(BaseModel):
    """Current value and growth of one holding."""

    holding: HoldingRow
    name_label: str
    current_value: float
    market_change_total: float
    market_change_ratio: Optional[float] = None
    change_count: int = Field(
        default=0,
        ge=0,
        description="Number of market-change rows linked to this holding"
    )


class NetWorthTrendPoint(BaseModel):
    label: str
    month_index: int = Field(ge=0)
    value: float


class DashboardSummary(BaseModel):
    """
    Whole-portfolio figures.

    Yearly figures are always the monthly figure times twelve.
    """

    # Budget
    total_monthly_expenses: float
    total_yearly_expenses: float
    yearly_monthly_expenses: float
    monthly_spending_budget_total: float
    monthly_saving_budget_total: float
    monthly_investing_budget_total: float
    yearly_spending_budget: float
    total_yearly_saving: float
    total_yearly_investing: float
    total_yearly_saving_investing: float
    total_yearly_spending: float
    total_yearly_expenditure: float
    total_monthly_income: float
    total_yearly_income: float
    income_minus_expenditure: float
    monthly_spending_outflow: float
    monthly_saving_investing: float

    # Savings
    section_summaries: list[SectionSummary] = Field(default_factory=list)
    total_tracked_savings: float
    investment_funds_cash_account: float
    total_cash_stash: float

    # Investments
    holding_summaries: list[HoldingSummary] = Field(default_factory=list)
    total_amount_invested: float
    total_investment_market_change: float
    total_investment_growth_ratio: Optional[float] = None
    total_current_investments_value: float
    unassigned_investment_rows: int = Field(default=0, ge=0)

    # Net worth
    tracked_net_worth: float
    projected_monthly_net_worth_change: float
    net_worth_trend: list[NetWorthTrendPoint] = Field(default_factory=list)

    @property
    def is_within_income(self) -> bool:
        """Income covers planned expenditure."""
        return self.income_minus_expenditure >= 0
