"""Tests for shareable lists and list subscriptions."""

import httpx
import pytest

from settings_store.exceptions import InvalidValueError, ListFetchError
from settings_store.lists import (
    ListBundle,
    ListSubscriptions,
    build_list_bundle,
    normalize_domain,
    normalize_items,
    normalize_subreddit,
    parse_list_bundle,
)

LIST_URL = "https://lists.example.com/spam.json"


def _bundle(content_type="subreddits", items=("Spam", "r/Ads")):
    return {
        "type": "orr-list",
        "contentType": content_type,
        "metadata": {"name": "Spam", "description": "Spammy places", "author": "mod"},
        "items": list(items),
    }


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_normalizers():
    assert normalize_subreddit("r/AskReddit ") == "askreddit"
    assert normalize_domain("https://www.Example.com/") == "example.com"
    assert normalize_items("subreddits", ["r/A", "a", "not valid", ""]) == ["a"]
    assert normalize_items("keywords", [" spoiler ", "spoiler", 3]) == ["spoiler", "3"]


def test_build_list_bundle_stamps_metadata(clock):
    bundle = build_list_bundle("domains", ["x.com"], {"name": "Mine"}, clock=clock)
    assert bundle["type"] == "orr-list"
    assert bundle["contentType"] == "domains"
    assert bundle["metadata"] == {
        "name": "Mine",
        "version": "1.0",
        "timestamp": "2024-01-15T12:00:00+00:00",
    }


def test_bundle_content_type_aliases():
    assert ListBundle.model_validate(_bundle("Keyword")).content_type == "keywords"
    assert ListBundle.model_validate(_bundle("subreddit")).content_type == "subreddits"


def test_parse_rejects_malformed_bundles():
    with pytest.raises(InvalidValueError, match="Invalid list format"):
        parse_list_bundle({"type": "other", "metadata": {"name": "x"}, "items": []})
    with pytest.raises(InvalidValueError, match="Invalid list format"):
        parse_list_bundle(_bundle("videos"))


async def test_merge_unions_into_mute_list(accessor, clock):
    lists = ListSubscriptions(accessor, clock=clock)
    await accessor.set("subredditOverrides", {"whitelist": [], "mutedSubreddits": ["spam"]})

    applied = await lists.merge_list_bundle(_bundle(items=["Spam", "r/Ads", "news"]))

    assert applied == ["ads", "news"]
    overrides = await accessor.get("subredditOverrides")
    assert overrides["mutedSubreddits"] == ["ads", "news", "spam"]


async def test_merge_domains(accessor, clock):
    lists = ListSubscriptions(accessor, clock=clock)
    await lists.merge_list_bundle(_bundle("domains", ["https://www.Tracker.io/"]))
    assert (await accessor.get("contentFiltering"))["mutedDomains"] == ["tracker.io"]


async def test_merge_without_content_type_is_noop(accessor, local, clock):
    lists = ListSubscriptions(accessor, clock=clock)
    bundle = _bundle()
    del bundle["contentType"]
    assert await lists.merge_list_bundle(bundle) == []
    assert await local.get() == {}


async def test_subscribe_fetches_and_records(accessor, clock):
    requested = []

    def handler(request):
        requested.append(str(request.url))
        return httpx.Response(200, json=_bundle(items=["Spam"]))

    async with _client(handler) as client:
        lists = ListSubscriptions(accessor, client=client, clock=clock)
        subscription = await lists.subscribe(LIST_URL)

        assert requested == [LIST_URL]
        assert subscription["name"] == "Spam"
        assert subscription["type"] == "subreddits"
        assert subscription["appliedItems"] == ["spam"]
        assert subscription["lastUpdated"] == "2024-01-15T12:00:00+00:00"
        assert await lists.list() == [subscription]

        with pytest.raises(InvalidValueError, match="Already subscribed"):
            await lists.subscribe(LIST_URL)
        assert len(requested) == 1

        assert await lists.unsubscribe(subscription["id"]) is True
        assert await lists.unsubscribe(subscription["id"]) is False
        assert await lists.list() == []


async def test_subscribe_http_error(accessor, clock):
    async with _client(lambda request: httpx.Response(404)) as client:
        lists = ListSubscriptions(accessor, client=client, clock=clock)
        with pytest.raises(ListFetchError, match="HTTP 404"):
            await lists.subscribe(LIST_URL)
        assert await lists.list() == []


async def test_subscribe_non_json(accessor, clock):
    async with _client(lambda request: httpx.Response(200, text="<html>")) as client:
        lists = ListSubscriptions(accessor, client=client, clock=clock)
        with pytest.raises(ListFetchError, match="not JSON"):
            await lists.subscribe(LIST_URL)
