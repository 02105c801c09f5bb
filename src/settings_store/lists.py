"""Shareable filter lists and subscriptions to lists hosted elsewhere."""

from __future__ import annotations

import logging
import re
import uuid
from typing import TYPE_CHECKING, Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from settings_store._internal.clock import Clock, SystemClock
from settings_store.exceptions import InvalidValueError, ListFetchError

if TYPE_CHECKING:
    from settings_store.accessor import CoreAccessor

logger = logging.getLogger(__name__)

LIST_TYPE = "orr-list"
LIST_VERSION = "1.0"
COMMUNITY_KEY = "community"

ContentType = Literal["subreddits", "keywords", "domains"]

_SUBREDDIT_RE = re.compile(r"^[a-z0-9_]+$", re.IGNORECASE)
_DOMAIN_PREFIX_RE = re.compile(r"^(https?://)?(www\.)?")
_ALIASES: dict[str, ContentType] = {
    "subreddit": "subreddits",
    "subreddits": "subreddits",
    "keyword": "keywords",
    "keywords": "keywords",
    "domain": "domains",
    "domains": "domains",
}

# content type -> (config section, list field)
_TARGETS: dict[str, tuple[str, str]] = {
    "subreddits": ("subredditOverrides", "mutedSubreddits"),
    "keywords": ("contentFiltering", "mutedKeywords"),
    "domains": ("contentFiltering", "mutedDomains"),
}


def canonicalize_content_type(value: Any) -> ContentType | None:
    if not isinstance(value, str):
        return None
    return _ALIASES.get(value.strip().lower())


def normalize_subreddit(value: Any) -> str:
    text = str(value).lower()
    if text.startswith("r/"):
        text = text[2:]
    return text.strip()


def normalize_domain(value: Any) -> str:
    text = _DOMAIN_PREFIX_RE.sub("", str(value).lower(), count=1)
    return text.rstrip("/").strip()


def _normalizer(content_type: str) -> Any:
    if content_type == "subreddits":
        return normalize_subreddit
    if content_type == "domains":
        return normalize_domain
    return lambda item: str(item).strip()


def normalize_items(content_type: str, items: list[Any]) -> list[str]:
    """Normalize, filter and de-duplicate list items, keeping first-seen order."""
    normalize = _normalizer(content_type)
    seen: dict[str, None] = {}
    for item in items:
        value = normalize(item)
        if not value:
            continue
        if content_type == "subreddits" and not _SUBREDDIT_RE.match(value):
            continue
        seen.setdefault(value, None)
    return list(seen)


class ListMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    description: str = ""
    author: str = ""
    version: str = LIST_VERSION
    timestamp: str = ""


class ListBundle(BaseModel):
    """A shareable list of subreddits, keywords or domains.

    Attributes:
        type:         Always ``"orr-list"``.
        content_type: Canonical plural content type (``contentType`` on the wire).
        metadata:     Name, description, author, version and timestamp.
        items:        Raw items; normalized when merged.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["orr-list"]
    content_type: ContentType | None = Field(default=None, alias="contentType")
    metadata: ListMetadata
    items: list[Any]

    @field_validator("content_type", mode="before")
    @classmethod
    def _canonical_content_type(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        canonical = canonicalize_content_type(value)
        if canonical is None:
            raise ValueError("Invalid list content type")
        return canonical


def parse_list_bundle(data: Any) -> ListBundle:
    """Validate an incoming bundle, raising ``InvalidValueError`` if malformed."""
    if isinstance(data, ListBundle):
        return data
    try:
        return ListBundle.model_validate(data)
    except ValidationError as exc:
        raise InvalidValueError(f"Invalid list format: {exc.error_count()} error(s)") from exc


def build_list_bundle(
    content_type: str,
    items: list[Any],
    metadata: dict[str, Any],
    *,
    clock: Clock | None = None,
) -> dict[str, Any]:
    """Package *items* as a shareable list."""
    clock = clock or SystemClock()
    return {
        "type": LIST_TYPE,
        "contentType": content_type,
        "metadata": {
            **metadata,
            "version": LIST_VERSION,
            "timestamp": clock.now().isoformat(),
        },
        "items": list(items),
    }


class ListSubscriptions:
    """Merges shared lists into the mute settings and tracks subscriptions.

    Subscriptions live under ``community.subscriptions``.  Each remembers
    which items it actually added (``appliedItems``).

    Parameters:
        accessor: Core accessor.
        client:   Optional ``httpx.AsyncClient``; one is created per fetch
                  when omitted.
        timeout:  Fetch timeout in seconds.
        clock:    Injectable clock.
    """

    def __init__(
        self,
        accessor: CoreAccessor,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        clock: Clock | None = None,
    ) -> None:
        self._accessor = accessor
        self._client = client
        self._timeout = timeout
        self._clock = clock or SystemClock()

    async def merge_list_bundle(self, bundle: Any) -> list[str]:
        """Union a bundle's items into the matching mute list; returns the new ones."""
        parsed = parse_list_bundle(bundle)
        if parsed.content_type is None:
            logger.debug("List '%s' has no content type; nothing merged", parsed.metadata.name)
            return []
        return await self._apply(parsed.content_type, parsed.items)

    async def _apply(self, content_type: str, items: list[Any]) -> list[str]:
        incoming = normalize_items(content_type, items)
        if not incoming:
            return []
        section_key, field = _TARGETS[content_type]
        normalize = _normalizer(content_type)

        def mutate(section: Any) -> list[str]:
            current = section.get(field) or []
            existing = {normalize(item) for item in current}
            applied = [item for item in incoming if item not in existing]
            if applied:
                section[field] = sorted(set(current) | set(applied))
            return applied

        applied = await self._accessor.modify(section_key, mutate)
        logger.debug("Merged %d new %s", len(applied), content_type)
        return applied

    async def _fetch(self, url: str) -> Any:
        try:
            if self._client is not None:
                response = await self._client.get(url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise ListFetchError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ListFetchError(url, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise ListFetchError(url, "response is not JSON") from exc

    async def list(self) -> list[dict[str, Any]]:
        community = await self._accessor.get(COMMUNITY_KEY)
        subs = community.get("subscriptions") if isinstance(community, dict) else None
        return subs if isinstance(subs, list) else []

    async def subscribe(self, url: str) -> dict[str, Any]:
        """Fetch the list at *url*, merge it and record the subscription."""
        if any(s.get("url") == url for s in await self.list()):
            raise InvalidValueError("Already subscribed to this list")

        bundle = parse_list_bundle(await self._fetch(url))
        subscription: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "url": url,
            "name": bundle.metadata.name,
            "description": bundle.metadata.description,
            "author": bundle.metadata.author,
            "type": bundle.content_type,
            "lastUpdated": self._clock.now().isoformat(),
            "items": bundle.items,
            "appliedItems": [],
        }
        if bundle.content_type is not None:
            subscription["appliedItems"] = await self._apply(bundle.content_type, bundle.items)

        def record(community: Any) -> None:
            subs = community.get("subscriptions")
            if not isinstance(subs, list):
                subs = community["subscriptions"] = []
            if any(s.get("url") == url for s in subs):
                raise InvalidValueError("Already subscribed to this list")
            subs.append(subscription)

        await self._accessor.modify(COMMUNITY_KEY, record)
        logger.info("Subscribed to list '%s' (%s)", subscription["name"], url)
        return subscription

    async def unsubscribe(self, subscription_id: str) -> bool:
        def drop(community: Any) -> bool:
            subs = community.get("subscriptions") or []
            kept = [s for s in subs if s.get("id") != subscription_id]
            community["subscriptions"] = kept
            return len(kept) != len(subs)

        return await self._accessor.modify(COMMUNITY_KEY, drop)
