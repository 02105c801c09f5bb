"""Report models returned by the quota monitor, maintenance and import gate.

All models serialize to plain JSON with ``model_dump()`` so diagnostic
UIs and the CLI can emit them directly.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

HealthStatus = Literal["healthy", "warning", "critical"]


class AreaUsage(BaseModel):
    used: int
    quota: int
    percentage: int


class UsageReport(BaseModel):
    """Estimated bytes per area plus a per-key breakdown, largest first."""

    local: AreaUsage
    sync: AreaUsage
    total: int
    breakdown: dict[str, int] = Field(default_factory=dict)


class AreaQuotaStatus(BaseModel):
    is_near_limit: bool
    percentage: int


class Recommendation(BaseModel):
    """A remediation tied to one oversized key.

    Attributes:
        action:  Machine-readable action, e.g. ``"cleanup_user_tags"``.
        message: Advice for the user.
        savings: Estimated bytes the action could free.
    """

    action: str
    message: str
    savings: int


class QuotaCheck(BaseModel):
    is_near_limit: bool
    local: AreaQuotaStatus
    sync: AreaQuotaStatus
    recommendations: list[Recommendation] = Field(default_factory=list)


class HealthReport(BaseModel):
    status: HealthStatus
    issues: list[str] = Field(default_factory=list)
    usage: UsageReport
    counts: dict[str, int] = Field(default_factory=dict)
    recommendations: list[Recommendation] = Field(default_factory=list)
    last_checked: str


class CleanupResult(BaseModel):
    scroll_positions: int = 0
    sort_preferences: int = 0
    reading_history: int = 0
    subreddit_stats_trimmed: int = 0
    start_usage: int = 0
    end_usage: int = 0
    total_bytes_freed: int = 0


class CompactResult(BaseModel):
    keys_compacted: int = 0
    bytes_freed: int = 0


class MaintenanceResult(BaseModel):
    """Outcome of one maintenance run.

    Steps that completed keep their results even when a later step failed;
    ``error`` carries the failure messages.
    """

    timestamp: str
    cleanup: CleanupResult | None = None
    compact: CompactResult | None = None
    health_report: HealthReport | None = None
    error: str | None = None


class ImportValidation(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


class ShortcutConflict(BaseModel):
    """Two enabled shortcuts sharing a normalized key combination."""

    shortcut1: str
    shortcut2: str
    keys: str
    severity: Literal["error", "warning"]

    def as_pair(self) -> frozenset[str]:
        return frozenset((self.shortcut1, self.shortcut2))


def dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json")
