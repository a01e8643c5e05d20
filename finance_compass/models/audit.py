"""
Audit Models for Finance Compass

Budget edits are recorded as before/after pairs so the user can see what
changed and when.

DESIGN DECISION: Audit entries are a write-only side channel. The
calculation core and the state store never read them.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import Field

from finance_compass.models.ledger import LedgerModel


class BudgetAuditAction(str, Enum):
    """What happened to the audited item."""
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def display_text(self) -> str:
        return {
            BudgetAuditAction.ADD: "Added",
            BudgetAuditAction.UPDATE: "Updated",
            BudgetAuditAction.DELETE: "Deleted",
        }[self]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class BudgetAuditEntry(LedgerModel):
    """
    One recorded edit.

    `before` and `after` are already formatted for display, so an entry
    reads the same however the value was typed.
    """

    id: str
    at: str = Field(
        default_factory=_utc_now_iso,
        description="ISO-8601 UTC timestamp"
    )
    section: str = Field(
        ...,
        description="Area of the budget (e.g. 'Monthly expenses')"
    )
    item: str = Field(
        ...,
        description="Label of the edited row"
    )
    field: str = Field(
        ...,
        description="Edited field (e.g. 'Amount', 'Row')"
    )
    action: BudgetAuditAction
    before: str = "(blank)"
    after: str = "(blank)"

    def matches(self, text: str) -> bool:
        """Case-insensitive search across every displayed field."""
        needle = text.strip().lower()
        if not needle:
            return True
        haystack = " ".join(
            [self.section, self.item, self.field, self.before, self.after, self.action.value]
        )
        return needle in haystack.lower()
