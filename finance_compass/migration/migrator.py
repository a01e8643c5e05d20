"""
Schema Migrator

Upgrades any persisted or seed blob into the current AppState.

Accepted inputs include:
1. The current canonical camelCase layout
2. Older layouts (flat budget numbers, primary/secondary/investmentFund
   buckets, `savingInvesting` budget tags)
3. Partially corrupt data (wrong types, missing arrays, dangling links)
4. Garbage (anything that is not a mapping)

DESIGN DECISION: Migration always succeeds. Each field that cannot be
read is replaced by its structural default, so the result is never a
partial or corrupt in-memory value. Migration is idempotent:
migrate(migrate(x)) == migrate(x).

Order of work: structural migration first, then date normalization,
then holding-link repair for investment market changes.
"""

import json
from collections.abc import Mapping
from typing import Any, Callable, Optional

from finance_compass.dates import DateInputMode, normalize_date
from finance_compass.migration.coercion import (
    RowIdAllocator,
    read_field,
    to_finite_number,
    to_mapping,
    to_object_list,
    to_optional_finite_number,
    to_text,
)
from finance_compass.migration.defaults import (
    LEGACY_BUDGET_FIELDS,
    LEGACY_SAVINGS_BUCKETS,
    build_default_monthly_budget_items,
    build_default_savings_layout,
    build_initial_raw_state,
    seed_budget_value,
)
from finance_compass.models.ledger import (
    AdditionalDepositRow,
    AmountRow,
    AppState,
    BudgetCategory,
    BudgetState,
    HoldingRow,
    IncomeRow,
    InvestmentsState,
    MarketChangeRow,
    MonthlyBudgetItem,
    RegularDepositRow,
    SavingsBucket,
    SavingsSection,
    SavingsSectionTab,
    SavingsState,
    WithdrawalRow,
)


LEGACY_SAVING_INVESTING_TAG = "savingInvesting"


# =============================================================================
# GENERIC ROW NORMALIZATION
# =============================================================================

def _normalize_rows(
    raw_rows: Any,
    prefix: str,
    build: Callable[[Mapping, str], Any],
) -> list:
    """Filter non-object entries, backfill unique ids, build each row."""
    allocator = RowIdAllocator(prefix)
    rows = []
    for index, raw in enumerate(to_object_list(raw_rows)):
        row_id = allocator.allocate(raw.get("id"), index)
        rows.append(build(raw, row_id))
    return rows


def _date(raw: Mapping, mode: DateInputMode = DateInputMode.FULL) -> str:
    return normalize_date(to_text(raw.get("date")), mode)


# =============================================================================
# BUDGET
# =============================================================================

def infer_budget_category(category_raw: Any, label: str) -> BudgetCategory:
    """
    Resolve a monthly budget item's category.

    Valid tags are kept. The legacy combined `savingInvesting` tag and
    missing/unknown tags fall back to label keywords:
    "spend" -> spending, "invest"/"pension" -> investing, else saving.
    """
    if isinstance(category_raw, str):
        try:
            return BudgetCategory(category_raw)
        except ValueError:
            pass

    normalized_label = label.strip().lower()
    mentions_investing = "invest" in normalized_label or "pension" in normalized_label

    if category_raw == LEGACY_SAVING_INVESTING_TAG:
        return BudgetCategory.INVESTING if mentions_investing else BudgetCategory.SAVING

    if "spend" in normalized_label:
        return BudgetCategory.SPENDING
    if mentions_investing:
        return BudgetCategory.INVESTING
    return BudgetCategory.SAVING


def _amount_row(mode: DateInputMode) -> Callable[[Mapping, str], AmountRow]:
    def build(raw: Mapping, row_id: str) -> AmountRow:
        return AmountRow(
            id=row_id,
            label=to_text(raw.get("label")),
            date=_date(raw, mode),
            amount=to_finite_number(raw.get("amount")),
        )
    return build


def _income_row(raw: Mapping, row_id: str) -> IncomeRow:
    return IncomeRow(
        id=row_id,
        label=to_text(raw.get("label")),
        monthly_amount=to_finite_number(read_field(raw, "monthlyAmount", "monthly_amount")),
    )


def _budget_item(raw: Mapping, row_id: str) -> MonthlyBudgetItem:
    label = to_text(raw.get("label"))
    return MonthlyBudgetItem(
        id=row_id,
        label=label,
        category=infer_budget_category(raw.get("category"), label),
        monthly_amount=to_finite_number(read_field(raw, "monthlyAmount", "monthly_amount")),
    )


def _legacy_budget_items(raw_budget: Mapping) -> Optional[list[dict[str, Any]]]:
    """Rebuild the five-item template from flat legacy numbers, if any exist."""
    legacy_values = {
        field_name: to_optional_finite_number(raw_budget.get(field_name))
        for field_name, _, _ in LEGACY_BUDGET_FIELDS
    }
    if all(value is None for value in legacy_values.values()):
        return None

    return [
        {
            "id": f"monthly-budget-{index + 1}",
            "label": label,
            "category": category.value,
            "monthlyAmount": (
                legacy_values[field_name]
                if legacy_values[field_name] is not None
                else seed_budget_value(field_name)
            ),
        }
        for index, (field_name, label, category) in enumerate(LEGACY_BUDGET_FIELDS)
    ]


def migrate_monthly_budget_items(raw_budget: Mapping) -> list[MonthlyBudgetItem]:
    """
    Monthly budget items, in order of preference:
    the stored items, the legacy flat numbers, the seed template.
    """
    items = _normalize_rows(
        read_field(raw_budget, "monthlyBudgetItems", "monthly_budget_items"),
        "monthly-budget",
        _budget_item,
    )
    if items:
        return items

    fallback = _legacy_budget_items(raw_budget) or build_default_monthly_budget_items()
    return _normalize_rows(fallback, "monthly-budget", _budget_item)


def migrate_budget(raw_budget: Any) -> BudgetState:
    raw_budget = to_mapping(raw_budget)
    return BudgetState(
        monthly_expenses=_normalize_rows(
            read_field(raw_budget, "monthlyExpenses", "monthly_expenses"),
            "monthly-expense",
            _amount_row(DateInputMode.DAY),
        ),
        yearly_expenses=_normalize_rows(
            read_field(raw_budget, "yearlyExpenses", "yearly_expenses"),
            "yearly-expense",
            _amount_row(DateInputMode.DAY_MONTH),
        ),
        monthly_budget_items=migrate_monthly_budget_items(raw_budget),
        income_streams=_normalize_rows(
            read_field(raw_budget, "incomeStreams", "income_streams"),
            "income-stream",
            _income_row,
        ),
    )


# =============================================================================
# SAVINGS
# =============================================================================

def _regular_deposit(raw: Mapping, row_id: str) -> RegularDepositRow:
    return RegularDepositRow(
        id=row_id,
        date=_date(raw),
        amount=to_finite_number(raw.get("amount")),
        target=to_finite_number(raw.get("target")),
    )


def _additional_deposit(raw: Mapping, row_id: str) -> AdditionalDepositRow:
    return AdditionalDepositRow(
        id=row_id,
        date=_date(raw),
        amount=to_finite_number(raw.get("amount")),
        note=to_text(raw.get("note")),
    )


def _withdrawal(raw: Mapping, row_id: str) -> WithdrawalRow:
    return WithdrawalRow(
        id=row_id,
        date=_date(raw),
        amount=to_finite_number(raw.get("amount")),
        reason=to_text(raw.get("reason")),
    )


def _market_change(raw: Mapping, row_id: str) -> MarketChangeRow:
    return MarketChangeRow(
        id=row_id,
        date=_date(raw),
        amount=to_finite_number(raw.get("amount")),
        current_value=to_optional_finite_number(read_field(raw, "currentValue", "current_value")),
        note=to_text(raw.get("note")),
        holding_id=to_text(read_field(raw, "holdingId", "holding_id")),
    )


def migrate_market_changes(raw_rows: Any, prefix: str) -> list[MarketChangeRow]:
    return _normalize_rows(raw_rows, prefix, _market_change)


def migrate_bucket(raw_bucket: Any, prefix: str) -> SavingsBucket:
    """Normalize one savings bucket; row ids are backfilled as `<prefix>-<kind>-<n>`."""
    if not isinstance(raw_bucket, Mapping):
        return SavingsBucket()

    return SavingsBucket(
        location=to_text(raw_bucket.get("location")),
        cash_stash=to_finite_number(read_field(raw_bucket, "cashStash", "cash_stash")),
        regular_deposits=_normalize_rows(
            read_field(raw_bucket, "regularDeposits", "regular_deposits"),
            f"{prefix}-regular",
            _regular_deposit,
        ),
        additional_deposits=_normalize_rows(
            read_field(raw_bucket, "additionalDeposits", "additional_deposits"),
            f"{prefix}-extra",
            _additional_deposit,
        ),
        withdrawals=_normalize_rows(
            raw_bucket.get("withdrawals"),
            f"{prefix}-withdraw",
            _withdrawal,
        ),
        market_changes=migrate_market_changes(
            read_field(raw_bucket, "marketChanges", "market_changes"),
            f"{prefix}-market",
        ),
    )


def _section(raw: Mapping, section_id: str, index: int) -> SavingsSection:
    tab = SavingsSectionTab.INVESTMENTS if raw.get("tab") == "investments" else SavingsSectionTab.SAVINGS
    return SavingsSection(
        id=section_id,
        title=to_text(raw.get("title")),
        tab=tab,
        bucket=migrate_bucket(raw.get("bucket"), f"section-{index + 1}"),
    )


def _legacy_sections(raw_savings: Mapping) -> list[SavingsSection]:
    """Three named sections from the old primary/secondary/investmentFund layout."""
    sections = []
    for key, section_id, title, tab, prefix in LEGACY_SAVINGS_BUCKETS:
        raw_bucket = raw_savings.get(key)
        if isinstance(raw_bucket, Mapping):
            sections.append(SavingsSection(
                id=section_id,
                title=title,
                tab=SavingsSectionTab(tab),
                bucket=migrate_bucket(raw_bucket, prefix),
            ))
    return sections


def migrate_savings(raw_savings: Any) -> SavingsState:
    """
    Savings sections, in order of preference:
    the stored sections array, the legacy three-bucket layout, the seed.
    """
    raw_savings = to_mapping(raw_savings)

    allocator = RowIdAllocator("savings-section")
    sections = [
        _section(raw, allocator.allocate(raw.get("id"), index), index)
        for index, raw in enumerate(to_object_list(raw_savings.get("sections")))
    ]
    if sections:
        return SavingsState(sections=sections)

    sections = _legacy_sections(raw_savings)
    if sections:
        return SavingsState(sections=sections)

    return SavingsState(sections=_legacy_sections(build_default_savings_layout()))


# =============================================================================
# INVESTMENTS
# =============================================================================

def _holding(raw: Mapping, row_id: str) -> HoldingRow:
    return HoldingRow(
        id=row_id,
        name=to_text(raw.get("name")),
        location=to_text(raw.get("location")),
        amount=to_finite_number(raw.get("amount")),
    )


def infer_holding_id_from_note(note: str, holdings: list[HoldingRow]) -> str:
    """
    Guess which holding a market-change note is about.

    The first holding whose trimmed, lower-cased name appears in the note
    wins. No match (or an empty note) means unassigned.
    """
    normalized_note = note.strip().lower()
    if not normalized_note:
        return ""

    for holding in holdings:
        name = holding.name.strip().lower()
        if name and name in normalized_note:
            return holding.id
    return ""


def repair_holding_links(
    rows: list[MarketChangeRow],
    holdings: list[HoldingRow],
) -> list[MarketChangeRow]:
    """Keep valid links; re-infer missing or dangling ones from the note."""
    holding_ids = {holding.id for holding in holdings}
    repaired = []
    for row in rows:
        if row.holding_id.strip() and row.holding_id in holding_ids:
            repaired.append(row)
        else:
            repaired.append(row.model_copy(
                update={"holding_id": infer_holding_id_from_note(row.note, holdings)}
            ))
    return repaired


def migrate_investments(raw_investments: Any) -> InvestmentsState:
    raw_investments = to_mapping(raw_investments)
    holdings = _normalize_rows(raw_investments.get("holdings"), "holding", _holding)
    market_changes = migrate_market_changes(
        read_field(raw_investments, "marketChanges", "market_changes"),
        "investment-market",
    )
    return InvestmentsState(
        start_date=normalize_date(to_text(read_field(raw_investments, "startDate", "start_date"))),
        holdings=holdings,
        market_changes=repair_holding_links(market_changes, holdings),
    )


# =============================================================================
# ENTRY POINT
# =============================================================================

def _as_raw(value: Any) -> Mapping:
    if isinstance(value, AppState):
        return value.to_storage_dict()
    if isinstance(value, (str, bytes, bytearray)):
        try:
            value = json.loads(value)
        except ValueError:
            return {}
    return to_mapping(value)


def migrate(raw_state: Any) -> AppState:
    """
    Upgrade any persisted or seed blob into the current AppState.

    Never raises. Accepts a mapping, a JSON string, an AppState, or
    anything else (treated as an empty blob, i.e. seed defaults where
    defaults exist and empty collections elsewhere).
    """
    raw = _as_raw(raw_state)
    return AppState(
        budget=migrate_budget(raw.get("budget")),
        savings=migrate_savings(raw.get("savings")),
        investments=migrate_investments(raw.get("investments")),
    )


def build_initial_state() -> AppState:
    """The seed-derived starting state, already migrated."""
    return migrate(build_initial_raw_state())
