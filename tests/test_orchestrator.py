"""
Tests for the budget edit flow and the component factory.

Integration tests: the flow runs against a real store and audit logger
backed by in-memory storage (or tmp_path files for the factory).
"""

import pytest
from structlog.testing import capture_logs

from finance_compass.config import FinanceSettings
from finance_compass.models.audit import BudgetAuditAction
from finance_compass.models.ledger import BudgetCategory
from finance_compass.orchestrator import budget_category_label, create_app_components
from finance_compass.state import RowCollection


def make_components():
    return create_app_components(FinanceSettings(), use_storage=False)


class TestBudgetEditFlow:
    """Tests for audited budget edits."""

    def test_add_row_is_audited(self):
        store, flow, audit = make_components()
        count = len(store.state.budget.monthly_expenses)

        assert flow.add_row(RowCollection.MONTHLY_EXPENSES) is True

        assert len(store.state.budget.monthly_expenses) == count + 1
        entry = audit.entries[0]
        assert (entry.section, entry.item, entry.field) == ("Monthly expenses", "New expense", "Row")
        assert entry.action == BudgetAuditAction.ADD
        assert (entry.before, entry.after) == ("(blank)", "Created")

    def test_update_amount(self):
        store, flow, audit = make_components()
        row = store.state.budget.monthly_expenses[0]

        assert flow.update_field(RowCollection.MONTHLY_EXPENSES, row.id, "amount", 1234.5) is True

        entry = audit.entries[0]
        assert entry.item == row.label
        assert entry.field == "Amount"
        assert entry.action == BudgetAuditAction.UPDATE
        assert entry.after == "£1,234.50"

    def test_monthly_date_is_normalized(self):
        store, flow, audit = make_components()
        flow.add_row(RowCollection.MONTHLY_EXPENSES)
        row = store.state.budget.monthly_expenses[-1]

        flow.update_field(RowCollection.MONTHLY_EXPENSES, row.id, "date", "5")

        assert store.state.budget.monthly_expenses[-1].date == "05"
        entry = audit.entries[0]
        assert (entry.item, entry.field, entry.before, entry.after) == ("Unnamed expense", "Date", "(blank)", "05")

    def test_yearly_date_is_normalized(self):
        store, flow, _ = make_components()
        flow.add_row(RowCollection.YEARLY_EXPENSES)
        row = store.state.budget.yearly_expenses[-1]

        flow.update_field(RowCollection.YEARLY_EXPENSES, row.id, "date", "2024-03-07")

        assert store.state.budget.yearly_expenses[-1].date == "07/03"

    def test_category_shown_by_label(self):
        store, flow, audit = make_components()
        flow.add_row(RowCollection.MONTHLY_BUDGET_ITEMS, {"category": "spending"})
        row = store.state.budget.monthly_budget_items[-1]

        flow.update_field(RowCollection.MONTHLY_BUDGET_ITEMS, row.id, "category", "investing")

        assert store.state.budget.monthly_budget_items[-1].category == BudgetCategory.INVESTING
        entry = audit.entries[0]
        assert (entry.item, entry.field, entry.before, entry.after) == (
            "Unnamed budget field", "Category", "Spending", "Investing",
        )

    def test_income_field_label(self):
        store, flow, audit = make_components()
        row = store.state.budget.income_streams[0]
        flow.update_field(RowCollection.INCOME_STREAMS, row.id, "monthly_amount", 2100)
        assert audit.entries[0].field == "Monthly amount"
        assert audit.entries[0].section == "Income streams"

    def test_unchanged_value_is_not_audited(self):
        store, flow, audit = make_components()
        row = store.state.budget.monthly_expenses[0]
        assert flow.update_field(RowCollection.MONTHLY_EXPENSES, row.id, "amount", row.amount) is False
        assert audit.entries == []

    def test_unknown_row(self):
        _, flow, audit = make_components()
        assert flow.update_field(RowCollection.MONTHLY_EXPENSES, "missing", "amount", 1) is False
        assert flow.delete_row(RowCollection.MONTHLY_EXPENSES, "missing") is False
        assert audit.entries == []

    def test_unknown_row_is_logged(self):
        with capture_logs() as logs:
            _, flow, _ = make_components()
            flow.delete_row(RowCollection.INCOME_STREAMS, "missing")
        warnings = [entry for entry in logs if entry["event"] == "budget_row_not_found"]
        assert len(warnings) == 1
        assert warnings[0]["log_level"] == "warning"
        assert warnings[0]["row_id"] == "missing"

    def test_delete_row(self):
        store, flow, audit = make_components()
        row = store.state.budget.income_streams[0]

        assert flow.delete_row(RowCollection.INCOME_STREAMS, row.id) is True

        assert all(r.id != row.id for r in store.state.budget.income_streams)
        entry = audit.entries[0]
        assert entry.action == BudgetAuditAction.DELETE
        assert entry.item == row.label
        assert entry.after == "Deleted"

    def test_edits_are_undoable_and_audit_is_kept(self):
        store, flow, audit = make_components()
        before = store.state
        flow.add_row(RowCollection.INCOME_STREAMS)
        store.undo()
        assert store.state == before
        assert len(audit.entries) == 1

    def test_non_budget_collection_rejected(self):
        _, flow, _ = make_components()
        with pytest.raises(ValueError):
            flow.add_row(RowCollection.HOLDINGS)

    def test_category_label(self):
        assert budget_category_label(BudgetCategory.SAVING) == "Saving"


class TestCreateAppComponents:

    def test_file_storage_round_trip(self, tmp_path):
        settings = FinanceSettings(storage_dir=str(tmp_path))
        store, flow, _ = create_app_components(settings)
        flow.add_row(RowCollection.INCOME_STREAMS, {"label": "Side job"})

        reloaded_store, _, reloaded_audit = create_app_components(settings)
        assert reloaded_store.state == store.state
        assert reloaded_audit.entries[0].item == "New income source"
        assert (tmp_path / f"{settings.state_key}.json").exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
