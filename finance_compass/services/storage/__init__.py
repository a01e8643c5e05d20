"""
Storage Services Package

Provides the key-value storage interface and its implementations:
local JSON files for the app and an in-memory store for tests.
"""

from finance_compass.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
    StorageWriteError,
)
from finance_compass.services.storage.json_file import JsonFileStorage
from finance_compass.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "KeyValueStorageInterface",
    # Exceptions
    "StorageError",
    "StorageWriteError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
