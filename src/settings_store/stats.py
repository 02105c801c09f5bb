"""StatsTracker — redirect counters with daily rollover and bounded history."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from settings_store._internal.clock import Clock, SystemClock, today_iso

if TYPE_CHECKING:
    from settings_store.accessor import CoreAccessor

STATS_KEY = "stats"
MAX_SUBREDDIT_STATS = 50
WEEKLY_HISTORY_DAYS = 7


def _count(value: Any) -> int:
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def normalize_stats(stats: Any, today: str) -> dict[str, Any]:
    """Return a well-formed stats record, replacing missing or mistyped fields."""
    stats = stats if isinstance(stats, dict) else {}
    per_subreddit = stats.get("perSubreddit")
    weekly = stats.get("weeklyHistory")
    return {
        "totalRedirects": _count(stats.get("totalRedirects")),
        "todayRedirects": _count(stats.get("todayRedirects")),
        "todayDate": stats.get("todayDate") or today,
        "lastRedirect": stats.get("lastRedirect") or None,
        "perSubreddit": dict(per_subreddit) if isinstance(per_subreddit, dict) else {},
        "weeklyHistory": [e for e in weekly if isinstance(e, dict)] if isinstance(weekly, list) else [],
    }


def top_subreddits(per_subreddit: dict[str, int], limit: int) -> dict[str, int]:
    ranked = sorted(per_subreddit.items(), key=lambda item: item[1], reverse=True)
    return dict(ranked[:limit])


class StatsTracker:
    """Redirect statistics stored under the ``stats`` key.

    ``todayRedirects`` resets lazily: the first read or write after the
    date changes zeroes it.  ``perSubreddit`` keeps the 50 busiest
    subreddits and ``weeklyHistory`` the last seven days, oldest first.
    """

    def __init__(self, accessor: CoreAccessor, clock: Clock | None = None) -> None:
        self._accessor = accessor
        self._clock = clock or SystemClock()

    def _rolled_over(self, raw: Any) -> tuple[dict[str, Any], bool]:
        today = today_iso(self._clock)
        stats = normalize_stats(raw, today)
        if stats["todayDate"] != today:
            stats["todayRedirects"] = 0
            stats["todayDate"] = today
            return stats, True
        return stats, False

    async def get_stats(self) -> dict[str, Any]:
        async with self._accessor.serializer:
            stats, reset = self._rolled_over(await self._accessor.get(STATS_KEY))
            if reset:
                await self._accessor.set(STATS_KEY, stats)
        return stats

    async def increment_redirect_count(self, subreddit: str | None = None) -> dict[str, Any]:
        def mutate(value: Any) -> dict[str, Any]:
            stats, _ = self._rolled_over(value)
            stats["totalRedirects"] += 1
            stats["todayRedirects"] += 1
            stats["lastRedirect"] = self._clock.now().isoformat()

            if subreddit:
                per_subreddit = stats["perSubreddit"]
                per_subreddit[subreddit] = _count(per_subreddit.get(subreddit)) + 1
                if len(per_subreddit) > MAX_SUBREDDIT_STATS:
                    stats["perSubreddit"] = top_subreddits(per_subreddit, MAX_SUBREDDIT_STATS)

            today = stats["todayDate"]
            history = stats["weeklyHistory"]
            entry = next((e for e in history if e.get("date") == today), None)
            if entry is not None:
                entry["count"] = _count(entry.get("count")) + 1
            else:
                history.append({"date": today, "count": 1})
            stats["weeklyHistory"] = history[-WEEKLY_HISTORY_DAYS:]

            if isinstance(value, dict):
                value.clear()
                value.update(stats)
            return stats

        return await self._accessor.modify(STATS_KEY, mutate)

    async def trim_subreddits(self, keep: int) -> int:
        """Keep only the *keep* busiest subreddits; returns how many were dropped."""

        def mutate(value: Any) -> int:
            if not isinstance(value, dict) or not isinstance(value.get("perSubreddit"), dict):
                return 0
            before = len(value["perSubreddit"])
            if before > keep:
                value["perSubreddit"] = top_subreddits(value["perSubreddit"], keep)
            return before - len(value["perSubreddit"])

        return await self._accessor.modify(STATS_KEY, mutate)

    async def clear_stats(self) -> None:
        await self._accessor.set(STATS_KEY, self._accessor.default(STATS_KEY))
