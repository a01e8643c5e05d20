"""
Market-Change Reconciliation Rules

A market-change row records growth or decline either as an absolute
snapshot (current_value) or as a delta (amount). These rules fill in
whichever half is missing so the pair stays consistent:

    amount == current_value - previous_value

Savings buckets chain their rows: each row's previous value is the row
before it, and the first row's is the bucket's base value. Holdings do
not chain: every linked row is measured against the holding's invested
amount.
"""

import math
from typing import Optional

from finance_compass.models.ledger import HoldingRow, MarketChangeRow


def _explicit_current_value(row: MarketChangeRow) -> Optional[float]:
    value = row.current_value
    if value is None or not math.isfinite(value):
        return None
    return value


def reconcile_market_change(row: MarketChangeRow, previous_current_value: float) -> MarketChangeRow:
    """
    Apply the two-field rule to one row of a chain.

    An explicit current_value wins; otherwise it is derived from the
    delta. The delta is then recomputed from the resolved value.
    """
    explicit = _explicit_current_value(row)
    current_value = explicit if explicit is not None else previous_current_value + row.amount
    return row.model_copy(update={
        "amount": current_value - previous_current_value,
        "current_value": current_value,
    })


def normalize_savings_market_changes(
    rows: list[MarketChangeRow],
    base_value: float,
) -> list[MarketChangeRow]:
    """
    Reconcile a bucket's market-change chain in list order.

    List order is append order, not date order; moving a row changes
    the deltas derived for it and its neighbours. The output is a fixed
    point: normalizing it again returns equal rows.
    """
    previous_current_value = base_value
    normalized = []
    for row in rows:
        reconciled = reconcile_market_change(row, previous_current_value)
        previous_current_value = reconciled.current_value
        normalized.append(reconciled)
    return normalized


def _find_holding(holding_id: str, holdings: list[HoldingRow]) -> Optional[HoldingRow]:
    if not holding_id:
        return None
    return next((holding for holding in holdings if holding.id == holding_id), None)


def resolve_investment_row_current_value(row: MarketChangeRow, holdings: list[HoldingRow]) -> float:
    """
    The absolute value an investment market-change row stands for.

    Explicit current_value first; else the linked holding's invested
    amount plus the delta; else (unlinked) the delta itself.
    """
    explicit = _explicit_current_value(row)
    if explicit is not None:
        return explicit

    linked_holding = _find_holding(row.holding_id, holdings)
    if linked_holding is not None:
        return linked_holding.amount + row.amount

    return row.amount


def derive_investment_row_delta(
    current_value: float,
    holding_id: Optional[str],
    holdings: list[HoldingRow],
) -> float:
    """
    The delta to store alongside a current value.

    Linked rows store growth over the invested amount; unlinked rows
    store the current value verbatim.
    """
    linked_holding = _find_holding(holding_id or "", holdings)
    if linked_holding is None:
        return current_value
    return current_value - linked_holding.amount


def relink_investment_change(
    row: MarketChangeRow,
    holding_id: str,
    holdings: list[HoldingRow],
) -> MarketChangeRow:
    """Move a row to another holding, keeping its absolute value."""
    current_value = resolve_investment_row_current_value(row, holdings)
    return row.model_copy(update={
        "holding_id": holding_id,
        "current_value": current_value,
        "amount": derive_investment_row_delta(current_value, holding_id, holdings),
    })


def set_investment_change_value(
    row: MarketChangeRow,
    current_value: float,
    holdings: list[HoldingRow],
) -> MarketChangeRow:
    """Record a new absolute value on a row and re-derive its delta."""
    return row.model_copy(update={
        "current_value": current_value,
        "amount": derive_investment_row_delta(current_value, row.holding_id, holdings),
    })
