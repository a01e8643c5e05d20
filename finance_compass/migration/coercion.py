"""
Total Coercion Helpers

Persisted data is untrusted: it may come from an older release, a hand
edit, or a half-written save. These helpers turn any value into the type
a field needs, substituting a default instead of raising.

DESIGN DECISION: Coercion is explicit and applied uniformly by the
migrator. Nothing downstream of the migrator coerces again.
"""

import math
from collections.abc import Mapping
from typing import Any, Optional


def to_finite_number(value: Any, default: float = 0.0) -> float:
    """
    Return value as a float if it is a finite real number, else default.

    Strings are NOT parsed: a stored "12" is as invalid as a stored None.
    Booleans are not numbers.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    number = float(value)
    return number if math.isfinite(number) else default


def to_optional_finite_number(value: Any) -> Optional[float]:
    """Like to_finite_number, but absent/invalid stays None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def to_text(value: Any, default: str = "") -> str:
    """Return value if it is a string, else default."""
    return value if isinstance(value, str) else default


def to_mapping(value: Any) -> Mapping:
    """Return value if it is a mapping, else an empty dict."""
    return value if isinstance(value, Mapping) else {}


def to_object_list(value: Any) -> list[Mapping]:
    """
    Keep only the mapping entries of a list.

    Anything that is not a list becomes an empty list.
    """
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def read_field(raw: Mapping, camel_name: str, snake_name: Optional[str] = None) -> Any:
    """
    Read a field by its stored camelCase name, falling back to snake_case.

    Snapshots dumped without aliases are therefore still readable.
    """
    if camel_name in raw:
        return raw[camel_name]
    if snake_name is not None:
        return raw.get(snake_name)
    return None


class RowIdAllocator:
    """
    Backfills and de-duplicates row ids within one array.

    Missing, blank or non-string ids become `<prefix>-<index+1>`. An id
    already used earlier in the same array gets a numeric suffix.
    """

    def __init__(self, prefix: str):
        self._prefix = prefix
        self._seen: set[str] = set()

    def allocate(self, raw_id: Any, index: int) -> str:
        candidate = raw_id if isinstance(raw_id, str) and raw_id.strip() else f"{self._prefix}-{index + 1}"
        unique = candidate
        suffix = 2
        while unique in self._seen:
            unique = f"{candidate}-{suffix}"
            suffix += 1
        self._seen.add(unique)
        return unique

