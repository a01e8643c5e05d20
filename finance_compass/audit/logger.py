"""
Audit Logger

DESIGN DECISION: Every budget edit is recorded as a before/after entry.
This provides:
1. A readable history of what changed and when
2. A way to spot accidental edits
3. Search across past changes

The audit logger:
- Keeps the newest entries only (400 by default)
- Persists the whole trail as one JSON list after every entry
- Gracefully handles storage failures (a failed save never blocks an edit)
"""

import json
import random
import time
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from finance_compass.formatting import format_audit_value
from finance_compass.models.audit import BudgetAuditAction, BudgetAuditEntry
from finance_compass.services.storage import KeyValueStorageInterface, StorageError


DEFAULT_AUDIT_KEY = "finance-compass-budget-audit-v2"
DEFAULT_AUDIT_LIMIT = 400


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def make_audit_id() -> str:
    return f"budget-audit-{int(time.time() * 1000)}-{random.randint(0, 1_000_000)}"


class AuditLogger:
    """
    Budget audit trail.

    Logs entries both to:
    1. Structured local log (for debugging)
    2. Key-value storage (for the audit panel)
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorageInterface] = None,
        key: str = DEFAULT_AUDIT_KEY,
        limit: int = DEFAULT_AUDIT_LIMIT,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, entries are only kept in memory.
            key: Storage key for the trail
            limit: Number of newest entries to keep
        """
        if limit < 1:
            raise ValueError("Audit limit must be at least 1")
        self._storage = storage
        self._key = key
        self._limit = limit
        self._entries: list[BudgetAuditEntry] = []
        self._logger = structlog.get_logger()

    @property
    def entries(self) -> list[BudgetAuditEntry]:
        """Newest first."""
        return list(self._entries)

    def load(self) -> list[BudgetAuditEntry]:
        """
        Replace the in-memory trail with the saved one.

        Unreadable storage or a non-list document leaves the trail empty;
        individual malformed entries are dropped.
        """
        self._entries = []
        if self._storage is None:
            return self.entries

        try:
            raw = self._storage.get(self._key)
            parsed = json.loads(raw) if raw else []
        except (StorageError, ValueError) as e:
            self._logger.warning("audit_trail_unreadable", key=self._key, error=str(e))
            return self.entries

        if not isinstance(parsed, list):
            return self.entries

        for item in parsed[: self._limit]:
            try:
                self._entries.append(BudgetAuditEntry.model_validate(item))
            except ValidationError:
                continue
        return self.entries

    def record(
        self,
        section: str,
        item: str,
        field: str,
        action: BudgetAuditAction,
        before: Any = None,
        after: Any = None,
    ) -> BudgetAuditEntry:
        """
        Record one edit.

        Numbers are shown as pounds and blank values as '(blank)'.
        """
        entry = BudgetAuditEntry(
            id=make_audit_id(),
            section=section,
            item=item,
            field=field,
            action=action,
            before=format_audit_value(before),
            after=format_audit_value(after),
        )
        self._entries = [entry, *self._entries][: self._limit]

        self._logger.info(
            "budget_audit_recorded",
            section=section,
            item=item,
            field=field,
            action=action.value,
        )
        self._persist()
        return entry

    def search(self, text: str) -> list[BudgetAuditEntry]:
        """Entries matching `text` anywhere (case-insensitive); all entries for blank text."""
        return [entry for entry in self._entries if entry.matches(text)]

    def clear(self) -> None:
        self._entries = []
        self._persist()

    def _persist(self) -> None:
        if self._storage is None:
            return
        try:
            payload = json.dumps([entry.to_storage_dict() for entry in self._entries])
            self._storage.set(self._key, payload)
        except StorageError as e:
            # Log failure but don't raise
            self._logger.error(
                "audit_storage_failed",
                key=self._key,
                error=str(e),
            )
