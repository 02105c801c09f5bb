"""Schema registry — every configuration key, its default and its sync eligibility.

Pure data.  Nothing in here touches storage.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

SCHEMA_VERSION = 3
SCHEMA_VERSION_KEY = "_schemaVersion"

# Application limits
MAX_USER_TAGS = 500
MAX_MUTED_USERS = 500
MAX_SORT_PREFERENCES = 100
MAX_SCROLL_POSITIONS = 100
MAX_SUBREDDIT_MAPPINGS = 100
MAX_LAYOUT_PRESETS = 20
MAX_READING_HISTORY = 500
MAX_NSFW_ALLOWED_SUBREDDITS = 100
SCROLL_RETENTION_HOURS = 24
SORT_RETENTION_DAYS = 30
READING_HISTORY_RETENTION_DAYS = 30
KEYBOARD_CHORD_TIMEOUT_MS = 1000
MAX_INLINE_IMAGE_WIDTH = 600
COLOR_STRIPE_WIDTH = 3
MINIMAP_DEFAULT_WIDTH = 120
MAX_TAG_TEXT_LENGTH = 50
MAX_MUTE_REASON_LENGTH = 100
MAX_PRESET_NAME_LENGTH = 50


@dataclass(frozen=True)
class ConfigEntry:
    """A schema-declared configuration key.

    Attributes:
        key:           Storage key.
        default:       Default value; never handed out directly, see :func:`default_for`.
        sync_eligible: Whether the key follows the user into the sync area.
        open_fields:   Record fields that are open mappings (keyed by user,
                       URL, shortcut id...) even though their default is
                       populated.  Merges replace them wholesale.
    """

    key: str
    default: Any
    sync_eligible: bool = False
    open_fields: frozenset[str] = field(default_factory=frozenset)


_DEFAULT_SHORTCUTS: dict[str, dict[str, Any]] = {
    "toggle-redirect": {
        "keys": "Alt+Shift+R",
        "description": "Toggle redirect on/off",
        "type": "command",
        "context": "any",
        "enabled": True,
    },
    "nav-next-comment": {
        "keys": "Shift+J",
        "description": "Next parent comment",
        "type": "content",
        "context": "comments",
        "enabled": True,
    },
    "nav-prev-comment": {
        "keys": "Shift+K",
        "description": "Previous parent comment",
        "type": "content",
        "context": "comments",
        "enabled": True,
    },
    "jump-to-top": {
        "keys": "Shift+Home",
        "description": "Jump to top of page",
        "type": "content",
        "context": "any",
        "enabled": True,
    },
    "toggle-dark-mode": {
        "keys": "d",
        "description": "Toggle dark mode",
        "type": "content",
        "context": "any",
        "enabled": True,
    },
    "toggle-compact-mode": {
        "keys": "c",
        "description": "Toggle compact feed mode",
        "type": "content",
        "context": "feed",
        "enabled": True,
    },
    "toggle-text-only": {
        "keys": "t",
        "description": "Toggle text-only mode",
        "type": "content",
        "context": "feed",
        "enabled": True,
    },
    "cycle-color-palette": {
        "keys": "p",
        "description": "Cycle comment color palette",
        "type": "content",
        "context": "comments",
        "enabled": True,
    },
    "toggle-inline-images": {
        "keys": "i",
        "description": "Toggle inline image expansion",
        "type": "content",
        "context": "comments",
        "enabled": True,
    },
    "show-help-overlay": {
        "keys": "Shift+/",
        "description": "Show keyboard shortcuts help",
        "type": "content",
        "context": "any",
        "enabled": True,
    },
    "go-top-vim": {
        "keys": "g g",
        "description": "Jump to top (Vim-style)",
        "type": "content",
        "context": "any",
        "enabled": False,
    },
    "cycle-layout-preset": {
        "keys": "l",
        "description": "Cycle through layout presets",
        "type": "content",
        "context": "any",
        "enabled": True,
    },
}

_TRACKING_PARAMS = [
    # UTM
    "utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content", "utm_name", "utm_cid",
    # Social
    "fbclid", "igshid", "twclid", "ttclid", "li_fat_id", "li_sharer", "pin_share", "epik",
    "scid", "sclid", "vero_id", "wbraid",
    # Analytics
    "gclid", "gclsrc", "dclid", "_ga", "_gl", "msclkid", "yclid", "_ym_uid", "_ym_visorc",
    "zanpid",
    # Affiliate / referral
    "ref", "ref_source", "ref_url", "referrer", "aff_id", "affiliate_id", "partner_id",
    "click_id", "clickid", "rb_clickid",
    # Reddit
    "rdt_cid", "share_id", "shared", "correlation_id", "ref_campaign",
    # Deep linking
    "$deep_link", "$3p", "_branch_match_id", "_branch_referrer", "adjust_tracker",
    "adjust_campaign",
    # Email marketing
    "mc_cid", "mc_eid", "oly_anon_id", "oly_enc_id",
    # Misc
    "mkt_tok", "trk", "campaignid",
]  # fmt: skip

_ENTRIES: list[ConfigEntry] = [
    ConfigEntry(SCHEMA_VERSION_KEY, SCHEMA_VERSION),
    ConfigEntry("enabled", True),
    ConfigEntry("debug", {"enabled": False}),
    ConfigEntry(
        "stats",
        {
            "totalRedirects": 0,
            "todayRedirects": 0,
            "todayDate": "",
            "lastRedirect": None,
            "perSubreddit": {},
            "weeklyHistory": [],
        },
    ),
    ConfigEntry("temporaryDisable", {"active": False, "expiresAt": None, "duration": None}),
    ConfigEntry(
        "subredditOverrides",
        {"whitelist": [], "mutedSubreddits": []},
        sync_eligible=True,
    ),
    ConfigEntry(
        "contentFiltering",
        {
            "mutedKeywords": [],
            "mutedDomains": [],
            "caseSensitive": False,
            "useRegex": False,
            "filterContent": False,
            "filterByFlair": False,
            "mutedFlairs": [],
            "filterByScore": False,
            "minScore": 0,
        },
        sync_eligible=True,
    ),
    ConfigEntry(
        "frontend",
        {"target": "old.reddit.com", "customDomain": None},
        sync_eligible=True,
    ),
    ConfigEntry(
        "ui",
        {
            "showNotifications": False,
            "showRedirectNotice": False,
            "badgeStyle": "text",
            "animateToggle": True,
            "iconClickBehavior": "popup",
        },
        sync_eligible=True,
    ),
    ConfigEntry(
        "darkMode",
        {"enabled": "auto", "autoCollapseAutomod": True},
        sync_eligible=True,
    ),
    ConfigEntry(
        "accessibility",
        {"fontSize": "medium", "reduceMotion": "auto", "highContrast": False},
        sync_eligible=True,
    ),
    ConfigEntry(
        "nagBlocking",
        {
            "enabled": True,
            "blockLoginPrompts": True,
            "blockEmailVerification": True,
            "blockPremiumBanners": True,
            "blockAppPrompts": True,
            "blockAIContent": True,
            "blockTrending": True,
            "blockRecommended": True,
            "blockCommunityHighlights": True,
            "blockMorePosts": True,
        },
        sync_eligible=True,
    ),
    ConfigEntry(
        "commentEnhancements",
        {
            "colorCodedComments": True,
            "colorPalette": "standard",
            "stripeWidth": COLOR_STRIPE_WIDTH,
            "navigationButtons": True,
            "navButtonPosition": "bottom-right",
            "inlineImages": True,
            "maxImageWidth": MAX_INLINE_IMAGE_WIDTH,
            "jumpToTopShortcut": True,
        },
        sync_eligible=True,
    ),
    ConfigEntry(
        "sortPreferences",
        {"enabled": True, "maxEntries": MAX_SORT_PREFERENCES, "preferences": {}},
        sync_eligible=True,
    ),
    ConfigEntry(
        "userTags",
        {"enabled": True, "maxTags": MAX_USER_TAGS, "tags": {}},
        sync_eligible=True,
    ),
    ConfigEntry(
        "mutedUsers",
        {"enabled": True, "maxUsers": MAX_MUTED_USERS, "users": {}},
    ),
    ConfigEntry(
        "scrollPositions",
        {
            "enabled": True,
            "maxEntries": MAX_SCROLL_POSITIONS,
            "retentionHours": SCROLL_RETENTION_HOURS,
            "positions": {},
        },
    ),
    ConfigEntry(
        "keyboardShortcuts",
        {
            "enabled": True,
            "chordTimeout": KEYBOARD_CHORD_TIMEOUT_MS,
            "shortcuts": _DEFAULT_SHORTCUTS,
            "conflicts": [],
        },
        open_fields=frozenset({"shortcuts"}),
    ),
    ConfigEntry(
        "feedEnhancements",
        {
            "compactMode": False,
            "hideJoinButtons": False,
            "hideActionLinks": False,
            "uncropImages": False,
            "textOnlyMode": False,
            "customCSS": "",
            "customCSSEnabled": False,
        },
        sync_eligible=True,
    ),
    ConfigEntry(
        "layoutPresets",
        {
            "enabled": True,
            "maxPresets": MAX_LAYOUT_PRESETS,
            "activePreset": None,
            "presets": {},
            "subredditLayouts": {},
            "maxSubredditMappings": MAX_SUBREDDIT_MAPPINGS,
        },
        sync_eligible=True,
    ),
    ConfigEntry(
        "privacy",
        {
            "removeTracking": True,
            "trackingParams": _TRACKING_PARAMS,
            "showTrackingBadge": True,
            "cleanReferrer": False,
            "referrerPolicy": "same-origin",
            "trackingStats": {
                "totalCleaned": 0,
                "lastCleaned": None,
                "byType": {
                    "utm": 0,
                    "social": 0,
                    "analytics": 0,
                    "affiliate": 0,
                    "reddit": 0,
                    "other": 0,
                },
            },
        },
        sync_eligible=True,
    ),
    ConfigEntry(
        "readingHistory",
        {
            "enabled": True,
            "showVisitedIndicator": True,
            "maxEntries": MAX_READING_HISTORY,
            "retentionDays": READING_HISTORY_RETENTION_DAYS,
            "entries": [],
        },
        sync_eligible=True,
    ),
    ConfigEntry(
        "nsfwControls",
        {
            "enabled": False,
            "visibility": "show",
            "blurIntensity": 10,
            "revealOnHover": True,
            "showWarning": True,
            "allowedSubreddits": [],
        },
        sync_eligible=True,
    ),
    ConfigEntry(
        "commentMinimap",
        {
            "enabled": True,
            "position": "right",
            "width": MINIMAP_DEFAULT_WIDTH,
            "opacity": 0.9,
            "showViewportIndicator": True,
            "useDepthColors": True,
            "collapsedIndicator": True,
            "autoHide": False,
        },
        sync_eligible=True,
    ),
    ConfigEntry("community", {"subscriptions": []}),
    ConfigEntry("sync", {"enabled": False, "lastSync": None}),
]

REGISTRY: dict[str, ConfigEntry] = {entry.key: entry for entry in _ENTRIES}

SYNC_KEYS: frozenset[str] = frozenset(e.key for e in _ENTRIES if e.sync_eligible)

# Fields restricted to a declared value set, keyed by (section, field).
ENUM_FIELDS: dict[tuple[str, str], frozenset[str]] = {
    ("ui", "badgeStyle"): frozenset({"text", "count", "color"}),
    ("ui", "iconClickBehavior"): frozenset({"popup", "toggle"}),
    ("darkMode", "enabled"): frozenset({"auto", "light", "dark", "oled", "high-contrast"}),
    ("accessibility", "fontSize"): frozenset({"small", "medium", "large", "x-large"}),
    ("accessibility", "reduceMotion"): frozenset({"auto", "always", "never"}),
    ("commentEnhancements", "colorPalette"): frozenset({"standard", "colorblind"}),
    ("commentEnhancements", "navButtonPosition"): frozenset({"bottom-right", "bottom-left"}),
    ("nsfwControls", "visibility"): frozenset({"show", "blur", "hide"}),
    ("commentMinimap", "position"): frozenset({"left", "right"}),
}


def is_sync_eligible(key: str) -> bool:
    entry = REGISTRY.get(key)
    return entry is not None and entry.sync_eligible


def default_for(key: str, *, today: str = "") -> Any:
    """Return a fresh copy of *key*'s default (``None`` for unknown keys).

    ``today`` fills the date-dependent ``stats.todayDate`` field.
    """
    entry = REGISTRY.get(key)
    if entry is None:
        return None
    value = copy.deepcopy(entry.default)
    if key == "stats":
        value["todayDate"] = today
    return value

