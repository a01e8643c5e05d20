"""
Investment Holding Summary Engine

Each holding's current value comes from the LAST market-change row
linked to it, by list position. Not the latest date and not the largest
value: the last row the user added or kept at the end.
"""

from finance_compass.engine.reconciliation import resolve_investment_row_current_value
from finance_compass.models.ledger import HoldingRow, MarketChangeRow
from finance_compass.models.summary import HoldingSummary


def holding_label(holding: HoldingRow, index: int) -> str:
    return holding.name.strip() or f"Holding {index + 1}"


def summarize_holding(
    holding: HoldingRow,
    index: int,
    market_changes: list[MarketChangeRow],
    holdings: list[HoldingRow],
) -> HoldingSummary:
    linked_rows = [row for row in market_changes if row.holding_id == holding.id]
    latest_row = linked_rows[-1] if linked_rows else None

    current_value = (
        resolve_investment_row_current_value(latest_row, holdings)
        if latest_row is not None
        else holding.amount
    )
    market_change_total = current_value - holding.amount
    market_change_ratio = market_change_total / holding.amount if holding.amount != 0 else None

    return HoldingSummary(
        holding=holding,
        name_label=holding_label(holding, index),
        current_value=current_value,
        market_change_total=market_change_total,
        market_change_ratio=market_change_ratio,
        change_count=len(linked_rows),
    )


def summarize_holdings(
    holdings: list[HoldingRow],
    market_changes: list[MarketChangeRow],
) -> list[HoldingSummary]:
    """One summary per holding, in holding order."""
    return [
        summarize_holding(holding, index, market_changes, holdings)
        for index, holding in enumerate(holdings)
    ]
