"""Typed section merge — how partial updates combine with stored sections."""

from __future__ import annotations

import copy
import logging
from typing import Any

from settings_store.exceptions import InvalidValueError
from settings_store.schema import ConfigEntry

logger = logging.getLogger(__name__)


def merge_section(entry: ConfigEntry, current: Any, patch: Any) -> Any:
    """Merge *patch* into the stored value of *entry*'s section.

    The declared default is the section's shape:

    * nested records (non-empty mappings in the default) merge field by field;
    * scalars, arrays and open mappings are replaced wholesale.  Arrays are
      never merged element-wise;
    * fields the shape does not declare are ignored.

    Sections whose default is not a mapping are simply replaced.  Neither
    argument is mutated.
    """
    if not isinstance(entry.default, dict):
        return copy.deepcopy(patch)
    if not isinstance(patch, dict):
        raise InvalidValueError(f"Section '{entry.key}' expects a mapping, got {type(patch).__name__}")
    base = current if isinstance(current, dict) else entry.default
    return _merge_record(entry.key, entry.default, base, patch, entry.open_fields)


def _merge_record(
    path: str,
    shape: dict[str, Any],
    current: dict[str, Any],
    patch: dict[str, Any],
    open_fields: frozenset[str],
) -> dict[str, Any]:
    result = copy.deepcopy(current)
    for name, value in patch.items():
        if name not in shape:
            logger.debug("Ignoring undeclared field '%s.%s'", path, name)
            continue
        declared = shape[name]
        is_record = isinstance(declared, dict) and bool(declared) and name not in open_fields
        if is_record and isinstance(value, dict):
            existing = result.get(name)
            result[name] = _merge_record(
                f"{path}.{name}",
                declared,
                existing if isinstance(existing, dict) else declared,
                value,
                frozenset(),
            )
        else:
            result[name] = copy.deepcopy(value)
    return result
