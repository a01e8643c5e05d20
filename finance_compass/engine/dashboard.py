"""
Aggregate Dashboard Calculator

Combines bucket and holding summaries with the budget into
whole-portfolio figures.

- Yearly figures are monthly figures x 12; no calendar-aware compounding.
- Net worth = savings-tab finals + investments-tab finals
              + holding current values + every bucket's cash stash.
- The trend is a straight line: net worth now plus the monthly surplus
  (income less expenses, yearly expenses / 12 and the spending budget)
  for each projected month.
"""

from finance_compass.engine.holdings import summarize_holdings
from finance_compass.engine.savings import calculate_savings_summary
from finance_compass.models.ledger import (
    AppState,
    BudgetCategory,
    BudgetState,
    SavingsSectionTab,
)
from finance_compass.models.summary import (
    DashboardSummary,
    NetWorthTrendPoint,
    SectionSummary,
)


MONTHS_PER_YEAR = 12
DEFAULT_PROJECTION_MONTHS = 12


def yearly_from_monthly(value: float) -> float:
    return value * MONTHS_PER_YEAR


def monthly_budget_total(budget: BudgetState, category: BudgetCategory) -> float:
    return sum(item.monthly_amount for item in budget.monthly_budget_items if item.category == category)


def project_net_worth(
    net_worth: float,
    monthly_change: float,
    months: int = DEFAULT_PROJECTION_MONTHS,
) -> list[NetWorthTrendPoint]:
    """Linear projection for month 0 ("Now") through `months` ("M1".."Mn")."""
    return [
        NetWorthTrendPoint(
            label="Now" if month_index == 0 else f"M{month_index}",
            month_index=month_index,
            value=net_worth + monthly_change * month_index,
        )
        for month_index in range(months + 1)
    ]


def summarize_sections(state: AppState) -> list[SectionSummary]:
    return [
        SectionSummary(
            section_id=section.id,
            title=section.title,
            tab=section.tab,
            cash_stash=section.bucket.cash_stash,
            summary=calculate_savings_summary(section.bucket),
        )
        for section in state.savings.sections
    ]


def calculate_dashboard(
    state: AppState,
    projection_months: int = DEFAULT_PROJECTION_MONTHS,
) -> DashboardSummary:
    """Every dashboard figure for a state. Pure."""
    budget = state.budget

    # Budget
    total_monthly_expenses = sum(row.amount for row in budget.monthly_expenses)
    total_yearly_expenses = sum(row.amount for row in budget.yearly_expenses)
    yearly_monthly_expenses = yearly_from_monthly(total_monthly_expenses)

    monthly_spending_budget_total = monthly_budget_total(budget, BudgetCategory.SPENDING)
    monthly_saving_budget_total = monthly_budget_total(budget, BudgetCategory.SAVING)
    monthly_investing_budget_total = monthly_budget_total(budget, BudgetCategory.INVESTING)

    yearly_spending_budget = yearly_from_monthly(monthly_spending_budget_total)
    total_yearly_saving = yearly_from_monthly(monthly_saving_budget_total)
    total_yearly_investing = yearly_from_monthly(monthly_investing_budget_total)
    total_yearly_saving_investing = total_yearly_saving + total_yearly_investing

    total_yearly_spending = yearly_monthly_expenses + total_yearly_expenses + yearly_spending_budget
    total_yearly_expenditure = total_yearly_spending + total_yearly_saving_investing

    total_monthly_income = sum(stream.monthly_amount for stream in budget.income_streams)
    total_yearly_income = yearly_from_monthly(total_monthly_income)
    income_minus_expenditure = total_yearly_income - total_yearly_expenditure

    monthly_spending_outflow = (
        total_monthly_expenses + total_yearly_expenses / MONTHS_PER_YEAR + monthly_spending_budget_total
    )
    monthly_saving_investing = monthly_saving_budget_total + monthly_investing_budget_total

    # Savings
    section_summaries = summarize_sections(state)
    total_tracked_savings = sum(
        entry.summary.final_total for entry in section_summaries if entry.tab == SavingsSectionTab.SAVINGS
    )
    investment_funds_cash_account = sum(
        entry.summary.final_total for entry in section_summaries if entry.tab == SavingsSectionTab.INVESTMENTS
    )
    total_cash_stash = sum(section.bucket.cash_stash for section in state.savings.sections)

    # Investments
    holding_summaries = summarize_holdings(state.investments.holdings, state.investments.market_changes)
    total_amount_invested = sum(entry.holding.amount for entry in holding_summaries)
    total_investment_market_change = sum(entry.market_change_total for entry in holding_summaries)
    total_investment_growth_ratio = (
        total_investment_market_change / total_amount_invested if total_amount_invested != 0 else None
    )
    total_current_investments_value = sum(entry.current_value for entry in holding_summaries)
    unassigned_investment_rows = sum(1 for row in state.investments.market_changes if not row.holding_id)

    # Net worth
    tracked_net_worth = (
        total_tracked_savings
        + investment_funds_cash_account
        + total_current_investments_value
        + total_cash_stash
    )
    projected_monthly_net_worth_change = total_monthly_income - monthly_spending_outflow

    return DashboardSummary(
        total_monthly_expenses=total_monthly_expenses,
        total_yearly_expenses=total_yearly_expenses,
        yearly_monthly_expenses=yearly_monthly_expenses,
        monthly_spending_budget_total=monthly_spending_budget_total,
        monthly_saving_budget_total=monthly_saving_budget_total,
        monthly_investing_budget_total=monthly_investing_budget_total,
        yearly_spending_budget=yearly_spending_budget,
        total_yearly_saving=total_yearly_saving,
        total_yearly_investing=total_yearly_investing,
        total_yearly_saving_investing=total_yearly_saving_investing,
        total_yearly_spending=total_yearly_spending,
        total_yearly_expenditure=total_yearly_expenditure,
        total_monthly_income=total_monthly_income,
        total_yearly_income=total_yearly_income,
        income_minus_expenditure=income_minus_expenditure,
        monthly_spending_outflow=monthly_spending_outflow,
        monthly_saving_investing=monthly_saving_investing,
        section_summaries=section_summaries,
        total_tracked_savings=total_tracked_savings,
        investment_funds_cash_account=investment_funds_cash_account,
        total_cash_stash=total_cash_stash,
        holding_summaries=holding_summaries,
        total_amount_invested=total_amount_invested,
        total_investment_market_change=total_investment_market_change,
        total_investment_growth_ratio=total_investment_growth_ratio,
        total_current_investments_value=total_current_investments_value,
        unassigned_investment_rows=unassigned_investment_rows,
        tracked_net_worth=tracked_net_worth,
        projected_monthly_net_worth_change=projected_monthly_net_worth_change,
        net_worth_trend=project_net_worth(tracked_net_worth, projected_monthly_net_worth_change, projection_months),
    )
