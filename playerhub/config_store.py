"""Global configuration document: branding, feature flags and content collections.

Everything coming from a client or from disk passes through
``normalize_config`` which always returns the canonical shape::

    {
        "branding": {"appName", "tagline", "accent"},
        "preferences": {<feature flags>, "enabledActivities": {<activity>: bool}},
        "collections": [{"id", "name", "description", "activities": {<activity>: [items]}}],
    }

Normalisation merges field by field over a *base* document (the current
one for writes, the defaults for loads) and silently drops invalid input.
Applying it twice gives the same result as applying it once.
"""
from __future__ import annotations

import copy
import re
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

from .constants import DEFAULT_BRANDING, FEATURE_FLAGS, HEX_COLOR_PATTERN, KNOWN_ACTIVITIES

APP_NAME_MAX = 64
TAGLINE_MAX = 140
COLLECTION_NAME_MAX = 80
COLLECTION_DESCRIPTION_MAX = 500
COLLECTION_ID_MAX = 64
ITEM_TEXT_MAX = 500
ITEMS_PER_ACTIVITY_MAX = 200
DEFAULT_COLLECTION_NAME = "Untitled collection"

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}
_SLUG_SEPARATOR = re.compile(r"[^a-z0-9]+")


def default_document() -> Dict[str, Any]:
    return {
        "branding": dict(DEFAULT_BRANDING),
        "preferences": {
            **{flag: True for flag in FEATURE_FLAGS},
            "enabledActivities": {activity: True for activity in KNOWN_ACTIVITIES},
        },
        "collections": [],
    }


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def is_valid_hex_color(value: Any) -> bool:
    if value is None:
        return False
    return HEX_COLOR_PATTERN.fullmatch(str(value).strip()) is not None


def _clean_text(value: Any, fallback: str, limit: int) -> str:
    if value is None:
        return fallback
    text = str(value).strip()[:limit].strip()
    return text or fallback


def _coerce_bool(value: Any, fallback: bool) -> bool:
    if value is None:
        return fallback
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return fallback


def slugify_collection_id(value: Any) -> str:
    """Lowercase *value* and collapse every non-alphanumeric run to ``-``."""
    if value is None:
        return ""
    slug = _SLUG_SEPARATOR.sub("-", str(value).lower()).strip("-")
    return slug[:COLLECTION_ID_MAX].strip("-")


# ---------------------------------------------------------------------------
# Section normalisers
# ---------------------------------------------------------------------------

def _normalize_branding(raw: Any, current: Dict[str, str]) -> Dict[str, str]:
    raw = raw if isinstance(raw, dict) else {}
    accent = raw.get("accent")
    return {
        "appName": _clean_text(raw.get("appName"), current["appName"], APP_NAME_MAX),
        "tagline": _clean_text(raw.get("tagline"), current["tagline"], TAGLINE_MAX),
        # Invalid colours are discarded in favour of the previous value.
        "accent": str(accent).strip() if is_valid_hex_color(accent) else current["accent"],
    }


def _normalize_preferences(raw: Any, current: Dict[str, Any]) -> Dict[str, Any]:
    raw = raw if isinstance(raw, dict) else {}
    preferences: Dict[str, Any] = {
        flag: _coerce_bool(raw.get(flag), bool(current.get(flag, True))) for flag in FEATURE_FLAGS
    }

    current_activities = current.get("enabledActivities") or {}
    raw_activities = raw.get("enabledActivities")
    raw_activities = raw_activities if isinstance(raw_activities, dict) else {}
    preferences["enabledActivities"] = {
        activity: _coerce_bool(
            raw_activities.get(activity),
            bool(current_activities.get(activity, True)),
        )
        for activity in KNOWN_ACTIVITIES
    }
    return preferences


def _normalize_item(item: Any) -> Optional[Any]:
    if isinstance(item, str):
        text = item.strip()[:ITEM_TEXT_MAX].strip()
        return text or None
    if isinstance(item, bool):
        return None
    if isinstance(item, (int, float)):
        return str(item)
    if isinstance(item, dict) and item:
        return {str(k): v for k, v in item.items()}
    return None


def _normalize_activities(raw: Any) -> Dict[str, List[Any]]:
    if not isinstance(raw, dict):
        return {}
    activities: Dict[str, List[Any]] = {}
    for activity in KNOWN_ACTIVITIES:
        items = raw.get(activity)
        if not isinstance(items, list):
            continue
        cleaned = [c for c in (_normalize_item(i) for i in items) if c is not None]
        if cleaned:
            activities[activity] = cleaned[:ITEMS_PER_ACTIVITY_MAX]
    return activities


def normalize_collections(raw: Any) -> List[Dict[str, Any]]:
    """Canonicalise a list of collections.

    Collections without any recognised, non-empty activity are dropped, and
    when two collections derive the same id only the first is kept.
    """
    if not isinstance(raw, list):
        return []
    collections: List[Dict[str, Any]] = []
    seen_ids = set()
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        activities = _normalize_activities(entry.get("activities"))
        if not activities:
            continue
        name = _clean_text(entry.get("name"), DEFAULT_COLLECTION_NAME, COLLECTION_NAME_MAX)
        collection_id = (
            slugify_collection_id(entry.get("id"))
            or slugify_collection_id(name)
            or f"collection-{uuid.uuid4().hex[:8]}"
        )
        if collection_id in seen_ids:
            continue
        seen_ids.add(collection_id)
        collections.append(
            {
                "id": collection_id,
                "name": name,
                "description": _clean_text(entry.get("description"), "", COLLECTION_DESCRIPTION_MAX),
                "activities": activities,
            }
        )
    return collections


def normalize_config(raw: Any, base: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merge the partial document *raw* over *base* (defaults if omitted)."""
    base = base if base is not None else default_document()
    raw = raw if isinstance(raw, dict) else {}
    if "collections" in raw and isinstance(raw["collections"], list):
        collections = normalize_collections(raw["collections"])
    else:
        collections = copy.deepcopy(base.get("collections") or [])
    return {
        "branding": _normalize_branding(raw.get("branding"), base["branding"]),
        "preferences": _normalize_preferences(raw.get("preferences"), base["preferences"]),
        "collections": collections,
    }


def from_persisted(raw: Any) -> Dict[str, Any]:
    """Flatten the persisted ``{config: {...}, collections: [...]}`` layout into a partial document."""
    if not isinstance(raw, dict):
        return {}
    config = raw.get("config")
    config = config if isinstance(config, dict) else {}
    partial: Dict[str, Any] = {
        "branding": config.get("branding"),
        "preferences": config.get("preferences"),
    }
    collections = raw.get("collections", config.get("collections"))
    if isinstance(collections, list):
        partial["collections"] = collections
    return partial


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class ConfigStore:
    """Owns the canonical configuration document.

    Writes are assumed to be authorised already. Each accepted write calls
    *on_change* so the owner can schedule persistence to every backend.
    """

    def __init__(self, on_change: Optional[Callable[[], None]] = None) -> None:
        self._lock = threading.Lock()
        self._document = default_document()
        self._on_change = on_change

    @property
    def document(self) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._document)

    def update(self, partial: Any) -> Dict[str, Any]:
        with self._lock:
            self._document = normalize_config(partial, self._document)
            result = copy.deepcopy(self._document)
        if self._on_change is not None:
            self._on_change()
        return result

    def load(self, persisted: Any) -> Dict[str, Any]:
        """Replace the document with a persisted one, normalised over defaults. Does not persist."""
        with self._lock:
            self._document = normalize_config(from_persisted(persisted))
            return copy.deepcopy(self._document)

    def config_view(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "branding": copy.deepcopy(self._document["branding"]),
                "preferences": copy.deepcopy(self._document["preferences"]),
            }

    def collections(self) -> List[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._document["collections"])

    def snapshot(self) -> Dict[str, Any]:
        """Persisted layout: ``{"config": {branding, preferences}, "collections": [...]}``."""
        return {"config": self.config_view(), "collections": self.collections()}


__all__ = [
    "ConfigStore",
    "default_document",
    "from_persisted",
    "is_valid_hex_color",
    "normalize_collections",
    "normalize_config",
    "slugify_collection_id",
]
