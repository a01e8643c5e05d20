"""State container package: actions, reducer, undo/redo history and the store."""

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
    parse_action,
)
from finance_compass.state.history import UndoRedoHistory
from finance_compass.state.persistence import load_state, save_state
from finance_compass.state.reducer import make_id, reduce
from finance_compass.state.store import StateStore

__all__ = [
    "Action",
    "AddRow",
    "AddSection",
    "DeleteRow",
    "LinkInvestmentChange",
    "RemoveSection",
    "ResetState",
    "RowCollection",
    "SetInvestmentChangeValue",
    "SetInvestmentStartDate",
    "StateStore",
    "UndoRedoHistory",
    "UpdateRow",
    "UpdateSection",
    "load_state",
    "make_id",
    "parse_action",
    "reduce",
    "save_state",
]
