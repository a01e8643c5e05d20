"""In-memory storage for tests and throwaway sessions."""

from typing import Optional

from finance_compass.services.storage.interface import KeyValueStorageInterface


class InMemoryStorage(KeyValueStorageInterface):

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._values)
