"""
JSON File Storage Implementation

One file per key under a directory, e.g.

    .finance_compass/finance-compass-v3.json

Writes go to a temporary file in the same directory which then replaces
the target, so a crash mid-write never leaves a half-written document.
Transient OS errors (locked files on network drives, antivirus scans)
are retried with exponential backoff.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from finance_compass.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
    StorageWriteError,
)


_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class JsonFileStorage(KeyValueStorageInterface):
    """Key-value storage backed by files in a local directory."""

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory)
        self._logger = structlog.get_logger()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """File path for a key. Characters unsafe in file names become '_'."""
        return self._directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self._write_file(path, value)
        except OSError as e:
            self._logger.error(
                "storage_write_failed",
                path=str(path),
                error=str(e),
            )
            raise StorageWriteError(f"Failed to write {path}: {e}")

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}")

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _write_file(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(temp_name, path)
        except OSError:
            Path(temp_name).unlink(missing_ok=True)
            raise
