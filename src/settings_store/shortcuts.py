"""Keyboard shortcut normalization and conflict detection."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from settings_store.reports import ShortcutConflict

ANY_CONTEXT = "any"

_KEY_NAMES = {
    "ctrl": "Ctrl",
    "control": "Ctrl",
    "alt": "Alt",
    "option": "Alt",
    "shift": "Shift",
    "meta": "Meta",
    "cmd": "Meta",
    "command": "Meta",
    "home": "Home",
    "end": "End",
    "pageup": "PageUp",
    "pagedown": "PageDown",
    "arrowup": "ArrowUp",
    "up": "ArrowUp",
    "arrowdown": "ArrowDown",
    "down": "ArrowDown",
    "arrowleft": "ArrowLeft",
    "left": "ArrowLeft",
    "arrowright": "ArrowRight",
    "right": "ArrowRight",
    "escape": "Escape",
    "esc": "Escape",
    "space": " ",
    "enter": "Enter",
    "return": "Enter",
    "tab": "Tab",
    "backspace": "Backspace",
    "delete": "Delete",
    "del": "Delete",
}

MODIFIER_KEYS = frozenset(
    {
        "Control",
        "Alt",
        "Shift",
        "Meta",
        "AltGraph",
        "CapsLock",
        "NumLock",
        "ScrollLock",
        "Ctrl",
        "Command",
        "Option",
    }
)

_FUNCTION_KEY_RE = re.compile(r"^f\d+$", re.IGNORECASE)
_TWO_CHAR_KEYS = frozenset({"up", *(f"f{n}" for n in range(1, 10))})


def _normalize_single(combo: str) -> str:
    parts = [p.strip() for p in combo.lower().split("+")]
    normalized = []
    for part in parts:
        if part in _KEY_NAMES:
            normalized.append(_KEY_NAMES[part])
        elif len(part) == 1 or _FUNCTION_KEY_RE.match(part):
            normalized.append(part.upper())
        else:
            normalized.append(part)
    return "+".join(normalized)


def normalize_key_string(keys: str | None) -> str:
    """Canonical form of a key combination or chord.

    >>> normalize_key_string("ctrl+k")
    'Ctrl+K'
    >>> normalize_key_string("gg")
    'G G'
    """
    if not keys:
        return ""
    keys = keys.strip()
    if " " in keys:
        return " ".join(_normalize_single(part) for part in keys.split())
    if len(keys) == 2 and "+" not in keys:
        if keys.lower() in _TWO_CHAR_KEYS or _FUNCTION_KEY_RE.match(keys):
            return _normalize_single(keys)
        return " ".join(_normalize_single(ch) for ch in keys)
    return _normalize_single(keys)


def validate_key_string(keys: Any) -> str | None:
    """Return an error message for an unusable combination, else ``None``."""
    if not isinstance(keys, str) or not keys.strip():
        return "Key combination cannot be empty"
    normalized = normalize_key_string(keys)
    if " " not in normalized and all(p in MODIFIER_KEYS for p in normalized.split("+")):
        return "Shortcuts must include at least one non-modifier key"
    return None


def contexts_overlap(first: Any, second: Any) -> bool:
    if first == ANY_CONTEXT or second == ANY_CONTEXT:
        return True
    return first == second


def detect_conflicts(shortcuts: Mapping[str, Any]) -> list[ShortcutConflict]:
    """Report every unordered pair of enabled shortcuts bound to the same keys.

    Pairs whose contexts overlap are errors; pairs in disjoint contexts
    are warnings.  Pairwise, so quadratic in the number of shortcuts.
    """
    enabled = [
        (shortcut_id, entry, normalize_key_string(entry.get("keys")).lower())
        for shortcut_id, entry in shortcuts.items()
        if isinstance(entry, Mapping)
        and entry.get("enabled")
        and isinstance(entry.get("keys"), str)
        and entry["keys"].strip()
    ]

    conflicts: list[ShortcutConflict] = []
    for i, (id1, entry1, keys1) in enumerate(enabled):
        for id2, entry2, keys2 in enabled[i + 1 :]:
            if keys1 != keys2:
                continue
            overlap = contexts_overlap(
                entry1.get("context", ANY_CONTEXT), entry2.get("context", ANY_CONTEXT)
            )
            conflicts.append(
                ShortcutConflict(
                    shortcut1=id1,
                    shortcut2=id2,
                    keys=entry1["keys"],
                    severity="error" if overlap else "warning",
                )
            )
    return conflicts
