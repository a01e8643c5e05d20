"""
Abstract Storage Interface

DESIGN DECISION: Persistence is a plain string key-value store. The app
saves two blobs (the state and the audit trail), each as one JSON
document, so there is nothing to query and no schema to keep in sync.
This allows us to:
1. Keep the local JSON files for the desktop app
2. Use in-memory storage for testing
3. Swap in a browser or database backend without touching the store
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for key-value persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key (e.g. 'finance-compass-v3')

        Returns:
            The stored text, or None if the key has never been written

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Deleting a missing key is not an error."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageWriteError(StorageError):
    """A value could not be written."""
    pass
