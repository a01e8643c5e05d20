"""
State Store

The single owner of the current AppState. The UI dispatches actions and
reads summaries; it never edits the state directly.

DESIGN DECISION: The store keeps snapshots, not diffs. AppState is an
immutable-by-convention pydantic tree and the reducer always returns a
new one, so a history entry is just the previous object.

Flow per dispatch:
1. reduce(current, action)
2. Skip if the result equals the current state
3. Push the current state onto the undo stack (clears redo)
4. Persist; a storage failure is logged, the change is kept in memory
"""

from typing import Optional

import structlog

from finance_compass.config import FinanceSettings, get_settings
from finance_compass.engine.dashboard import calculate_dashboard
from finance_compass.models.ledger import AppState
from finance_compass.models.summary import DashboardSummary
from finance_compass.services.storage import (
    InMemoryStorage,
    KeyValueStorageInterface,
    StorageError,
)
from finance_compass.state.actions import Action, ResetState
from finance_compass.state.history import UndoRedoHistory
from finance_compass.state.persistence import load_state, save_state
from finance_compass.state.reducer import reduce


class StateStore:
    """
    App state plus undo/redo and persistence.

    Usage:
        store = StateStore(JsonFileStorage(".finance_compass"))
        store.dispatch(AddRow(collection=RowCollection.INCOME_STREAMS))
        store.dashboard().tracked_net_worth
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorageInterface] = None,
        settings: Optional[FinanceSettings] = None,
    ):
        """
        Load the saved state (or the seed defaults).

        Args:
            storage: Where to persist. In-memory if None.
            settings: Keys and limits. Defaults to get_settings().
        """
        self._settings = settings or get_settings()
        self._storage = storage if storage is not None else InMemoryStorage()
        self._history: UndoRedoHistory[AppState] = UndoRedoHistory(self._settings.history_limit)
        self._logger = structlog.get_logger()
        self._state = load_state(self._storage, self._settings.state_key)

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def history(self) -> UndoRedoHistory[AppState]:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def dispatch(self, action: Action) -> bool:
        """
        Apply an action.

        Returns:
            True if the state changed, False if the action was a no-op

        Raises:
            pydantic.ValidationError: If a row patch has invalid values
        """
        next_state = reduce(self._state, action)
        if next_state == self._state:
            self._logger.debug("state_update_skipped", action=action.type)
            return False

        self._history.record(self._state)
        self._state = next_state
        self._persist()
        self._logger.debug(
            "state_update_committed",
            action=action.type,
            undo_depth=self._history.undo_depth,
        )
        return True

    def undo(self) -> bool:
        previous = self._history.undo(self._state)
        if previous is None:
            return False
        self._state = previous
        self._persist()
        self._logger.debug("state_undone", undo_depth=self._history.undo_depth)
        return True

    def redo(self) -> bool:
        following = self._history.redo(self._state)
        if following is None:
            return False
        self._state = following
        self._persist()
        self._logger.debug("state_redone", redo_depth=self._history.redo_depth)
        return True

    def reset(self) -> bool:
        """Reload the seed defaults. Undoable."""
        return self.dispatch(ResetState())

    def dashboard(self) -> DashboardSummary:
        return calculate_dashboard(self._state, self._settings.projection_months)

    def _persist(self) -> None:
        try:
            save_state(self._storage, self._settings.state_key, self._state)
        except StorageError as e:
            # Keep working in memory
            self._logger.error(
                "state_persist_failed",
                key=self._settings.state_key,
                error=str(e),
            )
