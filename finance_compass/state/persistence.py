"""
State Persistence

Loading never fails: unreadable or corrupt saved state falls back to the
seed defaults with a warning. Saving raises StorageError and leaves the
decision to the caller (the store logs and carries on).
"""

import json
from collections.abc import Mapping

import structlog

from finance_compass.migration.migrator import build_initial_state, migrate
from finance_compass.models.ledger import AppState
from finance_compass.services.storage import KeyValueStorageInterface, StorageError


logger = structlog.get_logger()


def load_state(storage: KeyValueStorageInterface, key: str) -> AppState:
    """
    Read and migrate the saved state under `key`.

    A missing key gives the seed defaults silently. A read error, invalid
    JSON, or a document that is not a JSON object gives the seed defaults
    and logs a warning.
    """
    try:
        raw = storage.get(key)
        if raw is None:
            return build_initial_state()
        document = json.loads(raw)
    except (StorageError, ValueError) as e:
        logger.warning(
            "saved_state_unreadable",
            key=key,
            error=str(e),
        )
        return build_initial_state()

    if not isinstance(document, Mapping):
        logger.warning(
            "saved_state_unreadable",
            key=key,
            error=f"expected a JSON object, got {type(document).__name__}",
        )
        return build_initial_state()
    return migrate(document)


def save_state(storage: KeyValueStorageInterface, key: str, state: AppState) -> None:
    """
    Write the state in its canonical camelCase shape.

    Raises:
        StorageError: If the backend cannot store it
    """
    storage.set(key, json.dumps(state.to_storage_dict()))
