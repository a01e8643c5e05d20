"""
Main Orchestrator for Finance Compass

This module ties together the state store and the audit trail and
defines the budget editing flow used by the UI.

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every budget edit goes through the store (so it is undoable)
- Every budget edit that changes something is audited
- Savings and investment edits are dispatched directly; they are not audited

Budget dates are normalized here, on commit, the same way the migrator
normalizes stored ones (DD for monthly rows, DD/MM for yearly rows).
"""

from typing import Any, Optional

import structlog

from finance_compass.audit import AuditLogger
from finance_compass.config import FinanceSettings, get_settings
from finance_compass.dates import DateInputMode, normalize_date
from finance_compass.models.audit import BudgetAuditAction
from finance_compass.models.ledger import BudgetCategory
from finance_compass.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
)
from finance_compass.state import AddRow, DeleteRow, RowCollection, StateStore, UpdateRow


# collection -> (audit section, placeholder for unnamed rows, name of a new row)
BUDGET_AUDIT_SECTIONS: dict[RowCollection, tuple[str, str, str]] = {
    RowCollection.MONTHLY_EXPENSES: ("Monthly expenses", "Unnamed expense", "New expense"),
    RowCollection.YEARLY_EXPENSES: ("Yearly expenses", "Unnamed expense", "New expense"),
    RowCollection.MONTHLY_BUDGET_ITEMS: ("Monthly budgets", "Unnamed budget field", "New monthly budget field"),
    RowCollection.INCOME_STREAMS: ("Income streams", "Unnamed income source", "New income source"),
}

FIELD_LABELS = {
    "label": "Name",
    "date": "Date",
    "amount": "Amount",
    "category": "Category",
    "monthly_amount": "Amount",
}

DATE_MODES = {
    RowCollection.MONTHLY_EXPENSES: DateInputMode.DAY,
    RowCollection.YEARLY_EXPENSES: DateInputMode.DAY_MONTH,
}


def budget_category_label(category: BudgetCategory) -> str:
    return category.value.capitalize()


def _field_label(collection: RowCollection, field: str) -> str:
    if collection is RowCollection.INCOME_STREAMS and field == "monthly_amount":
        return "Monthly amount"
    return FIELD_LABELS.get(field, field.replace("_", " ").capitalize())


def _display_value(value: Any) -> Any:
    # Enums show their label, numbers are formatted by the audit logger
    if isinstance(value, BudgetCategory):
        return budget_category_label(value)
    return value


class BudgetEditFlow:
    """
    Orchestrates budget edits.

    Flow:
    1. Normalize the input (dates)
    2. Dispatch the action to the store
    3. If the state changed, record an audit entry
    """

    def __init__(self, store: StateStore, audit_logger: AuditLogger):
        self._store = store
        self._audit = audit_logger
        self._logger = structlog.get_logger()

    @staticmethod
    def _check_collection(collection: RowCollection) -> tuple[str, str, str]:
        if collection not in BUDGET_AUDIT_SECTIONS:
            raise ValueError(f"{collection.value} is not a budget collection")
        return BUDGET_AUDIT_SECTIONS[collection]

    def _find_row(self, collection: RowCollection, row_id: str):
        budget = self._store.state.budget
        rows = getattr(budget, collection.value)
        return next((row for row in rows if row.id == row_id), None)

    def add_row(
        self,
        collection: RowCollection,
        values: Optional[dict[str, Any]] = None,
    ) -> bool:
        """Append a budget row. Returns True if a row was added."""
        section, _, new_name = self._check_collection(collection)
        changed = self._store.dispatch(AddRow(collection=collection, values=values or {}))
        if changed:
            self._audit.record(
                section=section,
                item=new_name,
                field="Row",
                action=BudgetAuditAction.ADD,
                before="",
                after="Created",
            )
        return changed

    def update_field(
        self,
        collection: RowCollection,
        row_id: str,
        field: str,
        value: Any,
    ) -> bool:
        """
        Commit one field edit.

        Returns:
            True if the value changed (and was audited)
        """
        section, unnamed, _ = self._check_collection(collection)
        before_row = self._find_row(collection, row_id)
        if before_row is None:
            self._logger.warning("budget_row_not_found", collection=collection.value, row_id=row_id)
            return False

        if field == "date" and collection in DATE_MODES:
            value = normalize_date(value, DATE_MODES[collection])

        changed = self._store.dispatch(UpdateRow(
            collection=collection,
            row_id=row_id,
            patch={field: value},
        ))
        if not changed:
            return False

        after_row = self._find_row(collection, row_id)
        self._audit.record(
            section=section,
            item=before_row.label or unnamed,
            field=_field_label(collection, field),
            action=BudgetAuditAction.UPDATE,
            before=_display_value(getattr(before_row, field)),
            after=_display_value(getattr(after_row, field)),
        )
        return True

    def delete_row(self, collection: RowCollection, row_id: str) -> bool:
        section, unnamed, _ = self._check_collection(collection)
        row = self._find_row(collection, row_id)
        if row is None:
            self._logger.warning("budget_row_not_found", collection=collection.value, row_id=row_id)
            return False

        changed = self._store.dispatch(DeleteRow(collection=collection, row_id=row_id))
        if changed:
            amount = row.amount if hasattr(row, "amount") else row.monthly_amount
            self._audit.record(
                section=section,
                item=row.label or unnamed,
                field="Row",
                action=BudgetAuditAction.DELETE,
                before=amount,
                after="Deleted",
            )
        return changed


def create_app_components(
    settings: Optional[FinanceSettings] = None,
    use_storage: bool = True,
) -> tuple[StateStore, BudgetEditFlow, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        settings: Defaults to get_settings()
        use_storage: Whether to persist to JSON files under settings.storage_dir.
                    Set to False for an in-memory session.

    Returns:
        (state_store, budget_edit_flow, audit_logger)
    """
    settings = settings or get_settings()
    storage: KeyValueStorageInterface = (
        JsonFileStorage(settings.storage_dir) if use_storage else InMemoryStorage()
    )

    store = StateStore(storage=storage, settings=settings)
    audit_logger = AuditLogger(storage=storage, key=settings.audit_key, limit=settings.audit_limit)
    audit_logger.load()

    structlog.get_logger().info(
        "app_components_created",
        storage=type(storage).__name__,
        environment=settings.app_environment,
    )
    return store, BudgetEditFlow(store, audit_logger), audit_logger
