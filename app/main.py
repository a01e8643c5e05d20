"""
Streamlit Frontend for Finance Compass

One page, four tabs: Dashboard, Budgeting, Savings and Investments.

DESIGN PRINCIPLES:
1. The UI never edits state directly; every change is an action
2. Every change is undoable from the sidebar
3. Budget edits are audited; the trail is searchable
4. Figures are always recalculated from the current state

Widgets commit on change through callbacks. Widget keys carry a revision
number that is bumped on undo/redo/reset so inputs re-read the restored
state instead of keeping their last typed value.
"""

import logging
from typing import Any

import streamlit as st
from pydantic import ValidationError

from finance_compass.config import get_settings
from finance_compass.dates import DateInputMode, normalize_date
from finance_compass.engine import (
    calculate_savings_summary,
    resolve_investment_row_current_value,
    summarize_holdings,
)
from finance_compass.formatting import (
    format_compact_pounds,
    format_pounds,
    format_signed_percent,
    sort_by_label,
)
from finance_compass.models.ledger import BudgetCategory, SavingsSection, SavingsSectionTab
from finance_compass.orchestrator import BudgetEditFlow, budget_category_label, create_app_components
from finance_compass.state import (
    AddRow,
    AddSection,
    DeleteRow,
    LinkInvestmentChange,
    RemoveSection,
    RowCollection,
    SetInvestmentChangeValue,
    SetInvestmentStartDate,
    StateStore,
    UpdateRow,
    UpdateSection,
)


# Page configuration
st.set_page_config(
    page_title="Finance Compass",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    settings = get_settings()
    logging.basicConfig(level=settings.effective_log_level)
    return create_app_components(settings=settings, use_storage=True)


def _rev() -> int:
    return st.session_state.setdefault("revision", 0)


def _key(*parts: Any) -> str:
    return "-".join(str(part) for part in (_rev(), *parts))


def _dispatch(store: StateStore, action) -> None:
    try:
        store.dispatch(action)
    except ValidationError as e:
        st.session_state.error = f"That value was not accepted: {e.errors()[0]['msg']}"


def _dispatch_from_widget(store: StateStore, build, key: str) -> None:
    """Callback: build an action from the widget's new value and dispatch it."""
    _dispatch(store, build(st.session_state[key]))


def _history_step(store: StateStore, step: str) -> None:
    getattr(store, step)()
    st.session_state.revision = _rev() + 1


def main():
    """Main application entry point."""
    store, budget_flow, audit_logger = get_components()

    # Sidebar: history controls
    st.sidebar.title("🧭 Finance Compass")
    st.sidebar.markdown("---")
    col1, col2 = st.sidebar.columns(2)
    col1.button("↩️ Undo", disabled=not store.can_undo, on_click=_history_step, args=(store, "undo"))
    col2.button("↪️ Redo", disabled=not store.can_redo, on_click=_history_step, args=(store, "redo"))
    st.sidebar.button("🔄 Reload defaults", on_click=_history_step, args=(store, "reset"))
    st.sidebar.caption(f"{store.history.undo_depth} change(s) can be undone")

    if st.session_state.get("error"):
        st.error(st.session_state.pop("error"))

    dashboard_tab, budget_tab, savings_tab, investments_tab = st.tabs(
        ["📊 Dashboard", "🧾 Budgeting", "🏦 Savings", "📈 Investments"]
    )
    with dashboard_tab:
        render_dashboard(store)
    with budget_tab:
        render_budget(store, budget_flow, audit_logger)
    with savings_tab:
        render_sections(store, SavingsSectionTab.SAVINGS)
    with investments_tab:
        render_sections(store, SavingsSectionTab.INVESTMENTS)
        render_holdings(store)


# =============================================================================
# DASHBOARD
# =============================================================================

def render_dashboard(store: StateStore):
    summary = store.dashboard()

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Tracked net worth", format_pounds(summary.tracked_net_worth))
    col2.metric("Yearly income", format_pounds(summary.total_yearly_income))
    col3.metric("Yearly expenditure", format_pounds(summary.total_yearly_expenditure))
    col4.metric(
        "Income minus expenditure",
        format_pounds(summary.income_minus_expenditure),
        delta="within income" if summary.is_within_income else "over income",
        delta_color="normal" if summary.is_within_income else "inverse",
    )

    col1, col2, col3 = st.columns(3)
    col1.metric("Yearly spending", format_pounds(summary.total_yearly_spending))
    col2.metric("Yearly saving + investing", format_pounds(summary.total_yearly_saving_investing))
    col3.metric(
        "Projected monthly change",
        format_pounds(summary.projected_monthly_net_worth_change),
    )

    st.markdown("### Net worth trend")
    st.line_chart(
        [{"Month": point.month_index, "Net worth": point.value} for point in summary.net_worth_trend],
        x="Month",
        y="Net worth",
    )
    st.caption(" · ".join(
        f"{point.label}: {format_compact_pounds(point.value)}" for point in summary.net_worth_trend
    ))

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("### Savings and investment buckets")
        for entry in summary.section_summaries:
            st.markdown(
                f"**{entry.display_title}** ({entry.tab.value}): "
                f"{format_pounds(entry.summary.final_total)} "
                f"({format_signed_percent(entry.summary.market_change_ratio)})"
            )
        st.markdown(f"Cash stash across buckets: **{format_pounds(summary.total_cash_stash)}**")
    with col2:
        st.markdown("### Holdings")
        for entry in summary.holding_summaries:
            st.markdown(
                f"**{entry.name_label}**: {format_pounds(entry.current_value)} "
                f"(invested {format_pounds(entry.holding.amount)}, "
                f"{format_signed_percent(entry.market_change_ratio)})"
            )
        st.markdown(
            f"Total invested **{format_pounds(summary.total_amount_invested)}**, "
            f"growth {format_signed_percent(summary.total_investment_growth_ratio)}"
        )
        if summary.unassigned_investment_rows:
            st.warning(f"{summary.unassigned_investment_rows} investment change(s) are not linked to a holding")

    st.markdown("### Yearly outgoings by category")
    breakdown = {
        "Monthly expenses": summary.yearly_monthly_expenses,
        "Yearly expenses": summary.total_yearly_expenses,
        "Spending budget": summary.yearly_spending_budget,
        "Saving": summary.total_yearly_saving,
        "Investing": summary.total_yearly_investing,
    }
    st.bar_chart(
        [{"Category": name, "Amount": value} for name, value in breakdown.items() if value > 0],
        x="Category",
        y="Amount",
    )


# =============================================================================
# BUDGETING
# =============================================================================

def _budget_commit(flow: BudgetEditFlow, collection: RowCollection, row_id: str, field: str, key: str) -> None:
    try:
        flow.update_field(collection, row_id, field, st.session_state[key])
    except ValidationError as e:
        st.session_state.error = f"That value was not accepted: {e.errors()[0]['msg']}"


def render_amount_rows(store: StateStore, flow: BudgetEditFlow, collection: RowCollection, title: str):
    st.markdown(f"### {title}")
    rows = getattr(store.state.budget, collection.value)
    date_help = "Day of month (DD)" if collection is RowCollection.MONTHLY_EXPENSES else "Day and month (DD/MM)"

    for row in sort_by_label(rows):
        col1, col2, col3, col4 = st.columns([4, 2, 2, 1])
        for column, field, widget in (
            (col1, "label", "text"),
            (col2, "date", "text"),
            (col3, "amount", "number"),
        ):
            key = _key(collection.value, row.id, field)
            kwargs = dict(
                key=key,
                label_visibility="collapsed",
                on_change=_budget_commit,
                args=(flow, collection, row.id, field, key),
            )
            if widget == "number":
                column.number_input("Amount (£)", value=float(row.amount), step=1.0, **kwargs)
            elif field == "date":
                column.text_input("Date", value=row.date, placeholder=date_help, **kwargs)
            else:
                column.text_input("Name", value=row.label, placeholder="Example: Gym membership", **kwargs)
        col4.button("🗑️", key=_key(collection.value, row.id, "delete"),
                    on_click=flow.delete_row, args=(collection, row.id))

    st.button(f"+ Add {title.lower()[:-1]}", key=_key(collection.value, "add"),
              on_click=flow.add_row, args=(collection,))


def render_budget(store: StateStore, flow: BudgetEditFlow, audit_logger):
    summary = store.dashboard()
    st.title("🧾 Budgeting")

    col1, col2, col3 = st.columns(3)
    col1.metric("Monthly expenses", format_pounds(summary.total_monthly_expenses))
    col2.metric("Yearly expenses", format_pounds(summary.total_yearly_expenses))
    col3.metric("Monthly income", format_pounds(summary.total_monthly_income))

    render_amount_rows(store, flow, RowCollection.MONTHLY_EXPENSES, "Monthly expenses")
    render_amount_rows(store, flow, RowCollection.YEARLY_EXPENSES, "Yearly expenses")

    # Monthly budgets
    st.markdown("### Monthly budgets")
    collection = RowCollection.MONTHLY_BUDGET_ITEMS
    categories = list(BudgetCategory)
    for item in store.state.budget.monthly_budget_items:
        col1, col2, col3, col4 = st.columns([4, 2, 2, 1])
        label_key = _key(collection.value, item.id, "label")
        col1.text_input("Name", value=item.label, key=label_key, label_visibility="collapsed",
                        on_change=_budget_commit, args=(flow, collection, item.id, "label", label_key))
        category_key = _key(collection.value, item.id, "category")
        col2.selectbox("Category", options=categories, index=categories.index(item.category),
                       format_func=budget_category_label, key=category_key, label_visibility="collapsed",
                       on_change=_budget_commit, args=(flow, collection, item.id, "category", category_key))
        amount_key = _key(collection.value, item.id, "monthly_amount")
        col3.number_input("Amount (£)", value=float(item.monthly_amount), step=1.0, key=amount_key,
                          label_visibility="collapsed",
                          on_change=_budget_commit, args=(flow, collection, item.id, "monthly_amount", amount_key))
        col4.button("🗑️", key=_key(collection.value, item.id, "delete"),
                    on_click=flow.delete_row, args=(collection, item.id))
    st.button("+ Add monthly budget field", key=_key(collection.value, "add"),
              on_click=flow.add_row, args=(collection,))
    st.caption(
        f"Spending {format_pounds(summary.monthly_spending_budget_total)} · "
        f"Saving {format_pounds(summary.monthly_saving_budget_total)} · "
        f"Investing {format_pounds(summary.monthly_investing_budget_total)} per month"
    )

    # Income
    st.markdown("### Income streams")
    collection = RowCollection.INCOME_STREAMS
    for stream in sort_by_label(store.state.budget.income_streams):
        col1, col2, col3 = st.columns([6, 2, 1])
        label_key = _key(collection.value, stream.id, "label")
        col1.text_input("Name", value=stream.label, key=label_key, label_visibility="collapsed",
                        on_change=_budget_commit, args=(flow, collection, stream.id, "label", label_key))
        amount_key = _key(collection.value, stream.id, "monthly_amount")
        col2.number_input("Monthly amount (£)", value=float(stream.monthly_amount), step=1.0, key=amount_key,
                          label_visibility="collapsed",
                          on_change=_budget_commit, args=(flow, collection, stream.id, "monthly_amount", amount_key))
        col3.button("🗑️", key=_key(collection.value, stream.id, "delete"),
                    on_click=flow.delete_row, args=(collection, stream.id))
    st.button("+ Add income source", key=_key(collection.value, "add"),
              on_click=flow.add_row, args=(collection,))

    # Audit trail
    st.markdown("### Budget audit trail")
    if not audit_logger.entries:
        st.info("No changes yet. Edit any budget value to start the audit trail.")
        return
    search = st.text_input("Search changes", placeholder="Search by section, name, amount or action")
    matches = audit_logger.search(search)
    st.caption(f"{len(matches)} changes shown (newest first)")
    if not matches:
        st.info("No audit entries match your search.")
    for entry in matches:
        st.markdown(
            f"**{entry.action.display_text}** | {entry.section} | {entry.item} | {entry.field}  \n"
            f"{entry.before} -> {entry.after}  \n"
            f"<small>{entry.at}</small>",
            unsafe_allow_html=True,
        )


# =============================================================================
# SAVINGS SECTIONS
# =============================================================================

def _bucket_row_editor(store: StateStore, section: SavingsSection, collection: RowCollection, rows, fields):
    """Editable rows for one bucket collection. `fields` is [(name, label, kind)]."""
    for row in rows:
        columns = st.columns([2] * len(fields) + [1])
        for column, (field, label, kind) in zip(columns, fields):
            key = _key(section.id, row.id, field)

            def build(value, field=field, kind=kind, row_id=row.id):
                if kind == "date":
                    value = normalize_date(value, DateInputMode.FULL)
                return UpdateRow(collection=collection, section_id=section.id, row_id=row_id, patch={field: value})

            kwargs = dict(key=key, on_change=_dispatch_from_widget, args=(store, build, key))
            value = getattr(row, field)
            if kind == "number":
                column.number_input(label, value=float(value) if value is not None else 0.0, step=1.0, **kwargs)
            else:
                column.text_input(label, value=value, **kwargs)
        columns[-1].button("🗑️", key=_key(section.id, row.id, "delete"), on_click=_dispatch, args=(
            store, DeleteRow(collection=collection, section_id=section.id, row_id=row.id),
        ))
    st.button("+ Add row", key=_key(section.id, collection.value, "add"), on_click=_dispatch, args=(
        store, AddRow(collection=collection, section_id=section.id),
    ))


def render_section(store: StateStore, section: SavingsSection):
    summary = calculate_savings_summary(section.bucket)

    col1, col2, col3, col4 = st.columns([3, 3, 2, 1])
    for column, field, label in ((col1, "title", "Title"), (col2, "location", "Location")):
        key = _key(section.id, field)
        value = section.title if field == "title" else section.bucket.location
        column.text_input(label, value=value, key=key, on_change=_dispatch_from_widget, args=(
            store, lambda text, field=field: UpdateSection(section_id=section.id, **{field: text}), key,
        ))
    stash_key = _key(section.id, "cash_stash")
    col3.number_input("Cash stash (£)", value=float(section.bucket.cash_stash), step=1.0, key=stash_key,
                      on_change=_dispatch_from_widget, args=(
                          store, lambda value: UpdateSection(section_id=section.id, cash_stash=value), stash_key,
                      ))
    col4.button("Remove", key=_key(section.id, "remove"), on_click=_dispatch, args=(
        store, RemoveSection(section_id=section.id),
    ))

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Deposited", format_pounds(summary.total_before_withdrawals),
                delta=f"target {format_pounds(summary.regular_target_total)}", delta_color="off")
    col2.metric("Withdrawn", format_pounds(summary.withdrawal_total))
    col3.metric("Market change", format_pounds(summary.market_change_total),
                delta=format_signed_percent(summary.market_change_ratio))
    col4.metric("Final total", format_pounds(summary.final_total))

    bucket = section.bucket
    with st.expander("Regular deposits"):
        _bucket_row_editor(store, section, RowCollection.REGULAR_DEPOSITS, bucket.regular_deposits, [
            ("date", "Date", "date"), ("amount", "Amount (£)", "number"), ("target", "Target (£)", "number"),
        ])
    with st.expander("Additional deposits"):
        _bucket_row_editor(store, section, RowCollection.ADDITIONAL_DEPOSITS, bucket.additional_deposits, [
            ("date", "Date", "date"), ("amount", "Amount (£)", "number"), ("note", "Note", "text"),
        ])
    with st.expander("Withdrawals"):
        _bucket_row_editor(store, section, RowCollection.WITHDRAWALS, bucket.withdrawals, [
            ("date", "Date", "date"), ("amount", "Amount (£)", "number"), ("reason", "Reason", "text"),
        ])
    with st.expander("Market changes"):
        _bucket_row_editor(store, section, RowCollection.BUCKET_MARKET_CHANGES, summary.normalized_market_changes, [
            ("date", "Date", "date"), ("current_value", "Current value (£)", "number"),
            ("amount", "Change (£)", "number"), ("note", "Note", "text"),
        ])


def render_sections(store: StateStore, tab: SavingsSectionTab):
    label = "savings section" if tab is SavingsSectionTab.SAVINGS else "investments tracker"
    st.button(f"+ Add {label}", key=_key(tab.value, "add-section"), on_click=_dispatch, args=(
        store, AddSection(tab=tab),
    ))
    for section in store.state.savings.sections:
        if section.tab is not tab:
            continue
        st.markdown(f"## {section.title.strip() or 'Untitled section'}")
        render_section(store, section)
        st.markdown("---")


# =============================================================================
# INVESTMENT HOLDINGS
# =============================================================================

def render_holdings(store: StateStore):
    investments = store.state.investments
    st.markdown("## Holdings")

    start_key = _key("investments", "start-date")
    st.text_input("Investing since", value=investments.start_date, key=start_key,
                  on_change=_dispatch_from_widget, args=(
                      store, lambda value: SetInvestmentStartDate(start_date=normalize_date(value)), start_key,
                  ))

    summaries = {entry.holding.id: entry for entry in summarize_holdings(investments.holdings, investments.market_changes)}
    collection = RowCollection.HOLDINGS
    for holding in investments.holdings:
        col1, col2, col3, col4, col5 = st.columns([3, 3, 2, 2, 1])
        for column, field, label in ((col1, "name", "Name"), (col2, "location", "Location")):
            key = _key(holding.id, field)
            column.text_input(label, value=getattr(holding, field), key=key, on_change=_dispatch_from_widget, args=(
                store,
                lambda value, field=field, row_id=holding.id: UpdateRow(
                    collection=collection, row_id=row_id, patch={field: value}
                ),
                key,
            ))
        amount_key = _key(holding.id, "amount")
        col3.number_input("Invested (£)", value=float(holding.amount), step=1.0, key=amount_key,
                          on_change=_dispatch_from_widget, args=(
                              store,
                              lambda value, row_id=holding.id: UpdateRow(
                                  collection=collection, row_id=row_id, patch={"amount": value}
                              ),
                              amount_key,
                          ))
        entry = summaries[holding.id]
        col4.metric("Current value", format_pounds(entry.current_value),
                    delta=format_signed_percent(entry.market_change_ratio))
        col5.button("🗑️", key=_key(holding.id, "delete"), on_click=_dispatch, args=(
            store, DeleteRow(collection=collection, row_id=holding.id),
        ))
    st.button("+ Add holding", key=_key("holdings", "add"), on_click=_dispatch, args=(
        store, AddRow(collection=collection),
    ))

    st.markdown("### Investment market changes")
    holding_ids = [""] + [holding.id for holding in investments.holdings]
    names = {entry.holding.id: entry.name_label for entry in summaries.values()}
    collection = RowCollection.INVESTMENT_MARKET_CHANGES
    for row in investments.market_changes:
        col1, col2, col3, col4, col5 = st.columns([2, 3, 2, 3, 1])
        date_key = _key(row.id, "date")
        col1.text_input("Date", value=row.date, key=date_key, on_change=_dispatch_from_widget, args=(
            store,
            lambda value, row_id=row.id: UpdateRow(
                collection=collection, row_id=row_id, patch={"date": normalize_date(value)}
            ),
            date_key,
        ))
        link_key = _key(row.id, "holding")
        col2.selectbox(
            "Holding",
            options=holding_ids,
            index=holding_ids.index(row.holding_id) if row.holding_id in holding_ids else 0,
            format_func=lambda holding_id: names.get(holding_id, "Unassigned"),
            key=link_key,
            on_change=_dispatch_from_widget,
            args=(store, lambda value, row_id=row.id: LinkInvestmentChange(row_id=row_id, holding_id=value), link_key),
        )
        value_key = _key(row.id, "current_value")
        col3.number_input(
            "Current value (£)",
            value=float(resolve_investment_row_current_value(row, investments.holdings)),
            step=1.0,
            key=value_key,
            on_change=_dispatch_from_widget,
            args=(store, lambda value, row_id=row.id: SetInvestmentChangeValue(row_id=row_id, current_value=value), value_key),
        )
        note_key = _key(row.id, "note")
        col4.text_input("Note", value=row.note, key=note_key, on_change=_dispatch_from_widget, args=(
            store,
            lambda value, row_id=row.id: UpdateRow(collection=collection, row_id=row_id, patch={"note": value}),
            note_key,
        ))
        col5.button("🗑️", key=_key(row.id, "delete"), on_click=_dispatch, args=(
            store, DeleteRow(collection=collection, row_id=row.id),
        ))
    st.button("+ Add market change", key=_key("investment-market", "add"), on_click=_dispatch, args=(
        store, AddRow(collection=collection),
    ))


if __name__ == "__main__":
    main()
