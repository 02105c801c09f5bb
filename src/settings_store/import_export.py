"""Settings export and validated import, plus reading-history transfer."""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any

from settings_store._internal.clock import Clock, SystemClock
from settings_store.bounded import READING_HISTORY_KEY
from settings_store.config import StoreConfig
from settings_store.exceptions import ImportValidationError, InvalidValueError
from settings_store.reports import ImportValidation
from settings_store.schema import ENUM_FIELDS

if TYPE_CHECKING:
    from settings_store.accessor import CoreAccessor
    from settings_store.bounded import BoundedCollections

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1
MAX_IMPORT_BYTES = 5 * 1024 * 1024
MAX_SUBREDDIT_LIST = 500
MAX_MUTED_KEYWORDS = 200
MAX_MUTED_DOMAINS = 500
READING_HISTORY_EXPORT_VERSION = "1.0"

SUBREDDIT_NAME_RE = re.compile(r"^[a-z0-9_]+$", re.IGNORECASE)

# Sections carried by a settings bundle.  Stats and transient state stay put.
EXPORT_SECTIONS: tuple[str, ...] = (
    "frontend",
    "subredditOverrides",
    "ui",
    "contentFiltering",
    "darkMode",
    "accessibility",
    "nagBlocking",
    "commentEnhancements",
    "feedEnhancements",
    "nsfwControls",
    "commentMinimap",
)

_SECTION_TYPE_ERRORS = {
    "frontend": "Invalid frontend config",
    "subredditOverrides": "Invalid subreddit overrides",
    "ui": "Invalid UI config",
    "contentFiltering": "Invalid content filtering config",
}

_ENUM_ERRORS = {
    ("ui", "badgeStyle"): "Invalid badge style",
}


# ── validation ───────────────────────────────────────────────


def _check_subreddit_list(errors: list[str], label: str, names: Any) -> None:
    if not isinstance(names, list):
        errors.append(f"{label} must be an array")
        return
    if len(names) > MAX_SUBREDDIT_LIST:
        errors.append(f"{label} exceeds {MAX_SUBREDDIT_LIST} entry limit")
    invalid = [n for n in names if not isinstance(n, str) or not SUBREDDIT_NAME_RE.match(n)]
    if invalid:
        errors.append(f"Invalid subreddit names: {', '.join(str(n) for n in invalid)}")


def _check_content_filtering(errors: list[str], section: dict[str, Any]) -> None:
    keywords = section.get("mutedKeywords")
    if keywords is not None:
        if not isinstance(keywords, list):
            errors.append("Muted keywords must be an array")
        else:
            if len(keywords) > MAX_MUTED_KEYWORDS:
                errors.append(f"Muted keywords exceeds {MAX_MUTED_KEYWORDS} entry limit")
            if section.get("useRegex"):
                for keyword in keywords:
                    if not isinstance(keyword, str):
                        continue
                    try:
                        re.compile(keyword)
                    except re.error:
                        errors.append(f"Invalid regex pattern: {keyword}")

    domains = section.get("mutedDomains")
    if domains is not None:
        if not isinstance(domains, list):
            errors.append("Muted domains must be an array")
        elif len(domains) > MAX_MUTED_DOMAINS:
            errors.append(f"Muted domains exceeds {MAX_MUTED_DOMAINS} entry limit")


def validate_import(bundle: Any) -> ImportValidation:
    """Check a settings bundle, collecting every violation rather than the first."""
    errors: list[str] = []

    if not isinstance(bundle, dict):
        return ImportValidation(valid=False, errors=["Data must be an object"])

    try:
        size = len(json.dumps(bundle, separators=(",", ":"), ensure_ascii=False))
    except (TypeError, ValueError):
        return ImportValidation(valid=False, errors=["Import data is not serializable"])
    if size > MAX_IMPORT_BYTES:
        return ImportValidation(valid=False, errors=["Import data exceeds 5MB size limit"])

    version = bundle.get("_exportVersion")
    if (
        not isinstance(version, int)
        or isinstance(version, bool)
        or version < 1
        or version > EXPORT_VERSION
    ):
        errors.append("Unsupported export version")

    sections: dict[str, dict[str, Any]] = {}
    for name in EXPORT_SECTIONS:
        value = bundle.get(name)
        if value is None:
            continue
        if not isinstance(value, dict):
            errors.append(_SECTION_TYPE_ERRORS.get(name, f"Invalid {name} config"))
            continue
        sections[name] = value

    frontend = sections.get("frontend")
    if frontend and frontend.get("target") is not None and not isinstance(frontend["target"], str):
        errors.append("Invalid frontend target")

    overrides = sections.get("subredditOverrides")
    if overrides:
        if overrides.get("whitelist") is not None:
            _check_subreddit_list(errors, "Whitelist", overrides["whitelist"])
        if overrides.get("mutedSubreddits") is not None:
            _check_subreddit_list(errors, "Muted subreddits", overrides["mutedSubreddits"])

    filtering = sections.get("contentFiltering")
    if filtering:
        _check_content_filtering(errors, filtering)

    for (section_name, field), allowed in ENUM_FIELDS.items():
        section = sections.get(section_name)
        if not section or field not in section:
            continue
        value = section[field]
        if not isinstance(value, str) or value not in allowed:
            errors.append(
                _ENUM_ERRORS.get((section_name, field), f"Invalid {section_name}.{field}: {value!r}")
            )

    return ImportValidation(valid=not errors, errors=errors)


# ── gate ─────────────────────────────────────────────────────


class ImportExportGate:
    """Moves settings bundles and reading history in and out of the store.

    An invalid bundle raises :class:`ImportValidationError` before any
    write, so a rejected import leaves storage exactly as it was.
    """

    def __init__(
        self,
        accessor: CoreAccessor,
        collections: BoundedCollections,
        *,
        config: StoreConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._accessor = accessor
        self._collections = collections
        self._config = config or StoreConfig()
        self._clock = clock or SystemClock()

    async def export_settings(self) -> dict[str, Any]:
        bundle: dict[str, Any] = {
            "_exportVersion": EXPORT_VERSION,
            "_exportDate": self._clock.now().isoformat(),
            "_extensionVersion": self._config.extension_version,
        }
        for name in EXPORT_SECTIONS:
            bundle[name] = await self._accessor.get(name)
        return bundle

    async def import_settings(self, bundle: Any) -> list[str]:
        """Validate *bundle* and merge its known sections; returns their names."""
        validation = validate_import(bundle)
        if not validation.valid:
            logger.warning("Rejected settings import: %s", "; ".join(validation.errors))
            raise ImportValidationError(validation.errors)

        imported: list[str] = []
        for name in EXPORT_SECTIONS:
            if bundle.get(name) is None:
                continue
            await self._accessor.update(name, bundle[name])
            imported.append(name)

        ignored = sorted(k for k in bundle if not k.startswith("_") and k not in EXPORT_SECTIONS)
        if ignored:
            logger.debug("Ignoring unknown import sections: %s", ", ".join(ignored))
        logger.info("Imported settings sections: %s", ", ".join(imported) or "none")
        return imported

    async def export_reading_history(self) -> dict[str, Any]:
        config = await self._accessor.get(READING_HISTORY_KEY)
        entries = (config.get("entries") or []) if isinstance(config, dict) else []
        return {
            "version": READING_HISTORY_EXPORT_VERSION,
            "exportedAt": self._clock.now().isoformat(),
            "entryCount": len(entries),
            "entries": entries,
        }

    async def import_reading_history(self, data: Any, *, merge: bool = True) -> int:
        """Add entries from an exported history; returns how many were new."""
        if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
            raise InvalidValueError("Invalid reading history format")
        entries = [e for e in data["entries"] if isinstance(e, dict)]
        return await self._collections.merge_history(entries, merge=merge)
