"""
State Reducer

    reduce(state, action) -> state

Pure apart from id generation for new rows (pass `row_id` / `section_id`
in the action for fully deterministic results). Actions that point at a
missing section or row leave the state unchanged, so the store sees a
structurally equal result and skips the update.

Rules carried by specific tables:
- Bucket market changes are re-chained against the bucket's base value
  after every add/update/delete. A patch that sets `amount` without
  `current_value` is a relative edit: the row's snapshot is dropped and
  re-derived from the delta.
- Investment market changes keep absolute value and delta consistent
  with the linked holding when re-linked or re-valued.
- Deleting a holding unlinks every market-change row that pointed at it.
- A holding link naming no existing holding is stored as "" (unassigned).
"""

import random
import time
from typing import Any, Callable, Optional

from pydantic import BaseModel

from finance_compass.engine.reconciliation import (
    relink_investment_change,
    resolve_investment_row_current_value,
    set_investment_change_value,
)
from finance_compass.engine.savings import (
    calculate_savings_summary,
    renormalize_bucket,
)
from finance_compass.migration.migrator import build_initial_state
from finance_compass.models.ledger import (
    AdditionalDepositRow,
    AmountRow,
    AppState,
    HoldingRow,
    IncomeRow,
    MarketChangeRow,
    MonthlyBudgetItem,
    RegularDepositRow,
    SavingsBucket,
    SavingsSection,
    SavingsSectionTab,
    WithdrawalRow,
)
from finance_compass.state.actions import (
    Action,
    AddRow,
    AddSection,
    DeleteRow,
    LinkInvestmentChange,
    RemoveSection,
    ResetState,
    RowCollection,
    SetInvestmentChangeValue,
    SetInvestmentStartDate,
    UpdateRow,
    UpdateSection,
)


ROW_MODELS: dict[RowCollection, type[BaseModel]] = {
    RowCollection.MONTHLY_EXPENSES: AmountRow,
    RowCollection.YEARLY_EXPENSES: AmountRow,
    RowCollection.MONTHLY_BUDGET_ITEMS: MonthlyBudgetItem,
    RowCollection.INCOME_STREAMS: IncomeRow,
    RowCollection.REGULAR_DEPOSITS: RegularDepositRow,
    RowCollection.ADDITIONAL_DEPOSITS: AdditionalDepositRow,
    RowCollection.WITHDRAWALS: WithdrawalRow,
    RowCollection.BUCKET_MARKET_CHANGES: MarketChangeRow,
    RowCollection.HOLDINGS: HoldingRow,
    RowCollection.INVESTMENT_MARKET_CHANGES: MarketChangeRow,
}

_BUDGET_ATTRS = {
    RowCollection.MONTHLY_EXPENSES: "monthly_expenses",
    RowCollection.YEARLY_EXPENSES: "yearly_expenses",
    RowCollection.MONTHLY_BUDGET_ITEMS: "monthly_budget_items",
    RowCollection.INCOME_STREAMS: "income_streams",
}

_BUCKET_ATTRS = {
    RowCollection.REGULAR_DEPOSITS: "regular_deposits",
    RowCollection.ADDITIONAL_DEPOSITS: "additional_deposits",
    RowCollection.WITHDRAWALS: "withdrawals",
    RowCollection.BUCKET_MARKET_CHANGES: "market_changes",
}

_INVESTMENT_ATTRS = {
    RowCollection.HOLDINGS: "holdings",
    RowCollection.INVESTMENT_MARKET_CHANGES: "market_changes",
}

_ID_PREFIXES = {
    RowCollection.MONTHLY_EXPENSES: "monthly-expense",
    RowCollection.YEARLY_EXPENSES: "yearly-expense",
    RowCollection.MONTHLY_BUDGET_ITEMS: "monthly-budget",
    RowCollection.INCOME_STREAMS: "income-stream",
    RowCollection.REGULAR_DEPOSITS: "regular",
    RowCollection.ADDITIONAL_DEPOSITS: "extra",
    RowCollection.WITHDRAWALS: "withdraw",
    RowCollection.BUCKET_MARKET_CHANGES: "market",
    RowCollection.HOLDINGS: "holding",
    RowCollection.INVESTMENT_MARKET_CHANGES: "investment-market",
}

NEW_SECTION_TITLES = {
    SavingsSectionTab.SAVINGS: "New savings section",
    SavingsSectionTab.INVESTMENTS: "New investments tracker",
}


def make_id(prefix: str, taken: Optional[set[str]] = None) -> str:
    """`<prefix>-<epoch ms>-<random>`, retried until it is not in `taken`."""
    taken = taken or set()
    while True:
        candidate = f"{prefix}-{int(time.time() * 1000)}-{random.randint(0, 1_000_000)}"
        if candidate not in taken:
            return candidate


def _field_names(model: type[BaseModel], values: dict[str, Any]) -> dict[str, Any]:
    """Translate camelCase keys to attribute names and drop unknown keys and `id`."""
    by_alias = {info.alias or name: name for name, info in model.model_fields.items()}
    translated = {}
    for key, value in values.items():
        name = key if key in model.model_fields else by_alias.get(key)
        if name is not None and name != "id":
            translated[name] = value
    return translated


def _patched(row: BaseModel, patch: dict[str, Any]) -> BaseModel:
    """
    Apply a validated patch.

    Raises:
        pydantic.ValidationError: If a patched value has the wrong type
    """
    model = type(row)
    return model.model_validate({**row.model_dump(), **_field_names(model, patch)})


# =============================================================================
# ROW ACCESS
# =============================================================================

def _get_rows(state: AppState, collection: RowCollection, section_id: Optional[str]) -> Optional[list]:
    if collection in _BUDGET_ATTRS:
        return getattr(state.budget, _BUDGET_ATTRS[collection])
    if collection in _INVESTMENT_ATTRS:
        return getattr(state.investments, _INVESTMENT_ATTRS[collection])
    section = state.find_section(section_id or "")
    if section is None:
        return None
    return getattr(section.bucket, _BUCKET_ATTRS[collection])


def _replace_section(
    state: AppState,
    section_id: str,
    update: Callable[[SavingsSection], Optional[SavingsSection]],
) -> AppState:
    """Rebuild the sections list with one section updated (or removed when update returns None)."""
    sections = []
    for section in state.savings.sections:
        if section.id == section_id:
            section = update(section)
        if section is not None:
            sections.append(section)
    return state.model_copy(update={"savings": state.savings.model_copy(update={"sections": sections})})


def _set_rows(state: AppState, collection: RowCollection, section_id: Optional[str], rows: list) -> AppState:
    if collection in _BUDGET_ATTRS:
        budget = state.budget.model_copy(update={_BUDGET_ATTRS[collection]: rows})
        return state.model_copy(update={"budget": budget})

    if collection in _INVESTMENT_ATTRS:
        investments = state.investments.model_copy(update={_INVESTMENT_ATTRS[collection]: rows})
        return state.model_copy(update={"investments": investments})

    def update_bucket(section: SavingsSection) -> SavingsSection:
        bucket = section.bucket.model_copy(update={_BUCKET_ATTRS[collection]: rows})
        if collection is RowCollection.BUCKET_MARKET_CHANGES:
            bucket = renormalize_bucket(bucket)
        return section.model_copy(update={"bucket": bucket})

    return _replace_section(state, section_id or "", update_bucket)


# =============================================================================
# ROW HANDLERS
# =============================================================================

def _known_holding_id(state: AppState, holding_id: Any) -> str:
    """A holding link that names an existing holding, or "" (unassigned)."""
    holding = state.find_holding(holding_id) if isinstance(holding_id, str) else None
    return holding.id if holding is not None else ""


def _new_row_defaults(state: AppState, action: AddRow, values: dict[str, Any]) -> dict[str, Any]:
    """
    Starting values for a new market-change row.

    A new row records "no change yet": its snapshot is the value the
    chain (or the linked holding) already stands at. Rows added with an
    explicit delta get no snapshot so the delta is kept.
    """
    if "amount" in values and "current_value" not in values:
        return {}

    if action.collection is RowCollection.BUCKET_MARKET_CHANGES:
        section = state.find_section(action.section_id or "")
        bucket = section.bucket if section is not None else SavingsBucket()
        return {"current_value": calculate_savings_summary(bucket).final_total}

    if action.collection is RowCollection.INVESTMENT_MARKET_CHANGES:
        holdings = state.investments.holdings
        if "holding_id" in values:
            linked = state.find_holding(values["holding_id"])
        else:
            linked = holdings[0] if holdings else None
        return {
            "current_value": linked.amount if linked is not None else 0.0,
            "holding_id": linked.id if linked is not None else "",
        }

    return {}


def _add_row(state: AppState, action: AddRow) -> AppState:
    rows = _get_rows(state, action.collection, action.section_id)
    if rows is None:
        return state

    model = ROW_MODELS[action.collection]
    prefix = _ID_PREFIXES[action.collection]
    if action.collection.is_bucket_collection:
        prefix = f"{action.section_id}-{prefix}"

    taken = {row.id for row in rows}
    row_id = action.row_id if action.row_id and action.row_id not in taken else make_id(prefix, taken)
    values = _field_names(model, action.values)
    if action.collection is RowCollection.INVESTMENT_MARKET_CHANGES and "holding_id" in values:
        values["holding_id"] = _known_holding_id(state, values["holding_id"])
    new_row = model.model_validate({**_new_row_defaults(state, action, values), **values, "id": row_id})

    if action.collection is RowCollection.INVESTMENT_MARKET_CHANGES and new_row.current_value is not None:
        new_row = set_investment_change_value(new_row, new_row.current_value, state.investments.holdings)

    return _set_rows(state, action.collection, action.section_id, [*rows, new_row])


def _update_investment_change(state: AppState, row: MarketChangeRow, patch: dict[str, Any]) -> MarketChangeRow:
    """
    Patch an investment market-change row.

    Order: plain fields, then a relative `amount` edit, then a re-link
    (keeps the absolute value), then an explicit `current_value`.
    """
    holdings = state.investments.holdings
    plain = {key: value for key, value in patch.items() if key not in {"holding_id", "current_value", "amount"}}
    updated = _patched(row, plain) if plain else row

    if "amount" in patch and "current_value" not in patch:
        updated = _patched(updated, {"amount": patch["amount"], "current_value": None})
        updated = set_investment_change_value(
            updated, resolve_investment_row_current_value(updated, holdings), holdings
        )
    if "holding_id" in patch:
        updated = relink_investment_change(updated, _known_holding_id(state, patch["holding_id"]), holdings)
    if "current_value" in patch and patch["current_value"] is not None:
        updated = _patched(updated, {"current_value": patch["current_value"]})
        updated = set_investment_change_value(updated, updated.current_value, holdings)
    return updated


def _update_row(state: AppState, action: UpdateRow) -> AppState:
    rows = _get_rows(state, action.collection, action.section_id)
    if rows is None or not any(row.id == action.row_id for row in rows):
        return state

    model = ROW_MODELS[action.collection]
    patch = _field_names(model, action.patch)

    def apply(row: BaseModel) -> BaseModel:
        if action.collection is RowCollection.INVESTMENT_MARKET_CHANGES:
            return _update_investment_change(state, row, patch)
        if (
            action.collection is RowCollection.BUCKET_MARKET_CHANGES
            and "amount" in patch
            and "current_value" not in patch
        ):
            return _patched(row, {**patch, "current_value": None})
        return _patched(row, patch)

    updated = [apply(row) if row.id == action.row_id else row for row in rows]
    return _set_rows(state, action.collection, action.section_id, updated)


def _delete_row(state: AppState, action: DeleteRow) -> AppState:
    rows = _get_rows(state, action.collection, action.section_id)
    if rows is None or not any(row.id == action.row_id for row in rows):
        return state

    remaining = [row for row in rows if row.id != action.row_id]
    next_state = _set_rows(state, action.collection, action.section_id, remaining)

    if action.collection is RowCollection.HOLDINGS:
        unlinked = [
            row.model_copy(update={"holding_id": ""}) if row.holding_id == action.row_id else row
            for row in next_state.investments.market_changes
        ]
        next_state = _set_rows(next_state, RowCollection.INVESTMENT_MARKET_CHANGES, None, unlinked)

    return next_state


# =============================================================================
# SECTION AND INVESTMENT HANDLERS
# =============================================================================

def _add_section(state: AppState, action: AddSection) -> AppState:
    taken = {section.id for section in state.savings.sections}
    section_id = (
        action.section_id
        if action.section_id and action.section_id not in taken
        else make_id("savings-section", taken)
    )
    section = SavingsSection(
        id=section_id,
        title=action.title if action.title is not None else NEW_SECTION_TITLES[action.tab],
        tab=action.tab,
        bucket=SavingsBucket(),
    )
    savings = state.savings.model_copy(update={"sections": [*state.savings.sections, section]})
    return state.model_copy(update={"savings": savings})


def _update_section(state: AppState, action: UpdateSection) -> AppState:
    if state.find_section(action.section_id) is None:
        return state

    def update(section: SavingsSection) -> SavingsSection:
        bucket_update = {}
        if action.location is not None:
            bucket_update["location"] = action.location
        if action.cash_stash is not None:
            bucket_update["cash_stash"] = action.cash_stash
        section_update: dict[str, Any] = {}
        if action.title is not None:
            section_update["title"] = action.title
        if bucket_update:
            section_update["bucket"] = section.bucket.model_copy(update=bucket_update)
        return section.model_copy(update=section_update)

    return _replace_section(state, action.section_id, update)


def _remove_section(state: AppState, action: RemoveSection) -> AppState:
    return _replace_section(state, action.section_id, lambda section: None)


def _set_investment_start_date(state: AppState, action: SetInvestmentStartDate) -> AppState:
    investments = state.investments.model_copy(update={"start_date": action.start_date})
    return state.model_copy(update={"investments": investments})


def _link_investment_change(state: AppState, action: LinkInvestmentChange) -> AppState:
    return _update_row(state, UpdateRow(
        collection=RowCollection.INVESTMENT_MARKET_CHANGES,
        row_id=action.row_id,
        patch={"holding_id": action.holding_id},
    ))


def _set_investment_change_value(state: AppState, action: SetInvestmentChangeValue) -> AppState:
    return _update_row(state, UpdateRow(
        collection=RowCollection.INVESTMENT_MARKET_CHANGES,
        row_id=action.row_id,
        patch={"current_value": action.current_value},
    ))


def _reset_state(state: AppState, action: ResetState) -> AppState:
    return build_initial_state()


_HANDLERS: dict[type, Callable[[AppState, Any], AppState]] = {
    AddRow: _add_row,
    UpdateRow: _update_row,
    DeleteRow: _delete_row,
    AddSection: _add_section,
    UpdateSection: _update_section,
    RemoveSection: _remove_section,
    SetInvestmentStartDate: _set_investment_start_date,
    LinkInvestmentChange: _link_investment_change,
    SetInvestmentChangeValue: _set_investment_change_value,
    ResetState: _reset_state,
}


def reduce(state: AppState, action: Action) -> AppState:
    """
    Apply one action and return the next state.

    The input state is never modified.

    Raises:
        pydantic.ValidationError: If a row patch has a value of the wrong type
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unsupported action: {type(action).__name__}")
    return handler(state, action)
