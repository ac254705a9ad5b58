"""Feedback tickets submitted by players and triaged by admins.

Tickets share the config document's file and debounced flusher; the store
itself only keeps the list (newest first) and validates input.
"""
from __future__ import annotations

import copy
import random
import string
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .constants import FEEDBACK_STATUSES, FEEDBACK_TYPES

TITLE_MAX = 120
DETAILS_MAX = 2000
NAME_MAX = 64
NOTES_MAX = 2000


class FeedbackError(ValueError):
    pass


class FeedbackNotFound(LookupError):
    pass


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_feedback_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"fb_{int(time.time() * 1000)}_{suffix}"


def _text(value: Any, default: str, limit: int) -> str:
    if value is None:
        value = default
    return str(value).strip()[:limit]


class FeedbackStore:
    def __init__(self, on_change: Optional[Callable[[], None]] = None) -> None:
        self._lock = threading.Lock()
        self._items: List[Dict[str, Any]] = []
        self._on_change = on_change

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def create(self, user_token: str, body: Dict[str, Any]) -> Dict[str, Any]:
        user_token = (user_token or "").strip()
        if not user_token:
            raise FeedbackError("Missing user token")

        title = _text(body.get("title"), "", TITLE_MAX)
        details = _text(body.get("details"), "", DETAILS_MAX)
        if not title or not details:
            raise FeedbackError("Title and details are required")

        kind = _text(body.get("type"), "idea", 32).lower()
        created = now_iso()
        item = {
            "id": create_feedback_id(),
            "userToken": user_token,
            "userId": _text(body.get("userId"), "", NAME_MAX),
            "userName": _text(body.get("userName"), "Anonymous", NAME_MAX) or "Anonymous",
            "type": kind if kind in FEEDBACK_TYPES else "general",
            "title": title,
            "details": details,
            "status": "open",
            "adminNotes": "",
            "createdAt": created,
            "updatedAt": created,
            "resolvedAt": None,
        }
        with self._lock:
            self._items.insert(0, item)
        self._changed()
        return copy.deepcopy(item)

    def for_user(self, user_token: str) -> List[Dict[str, Any]]:
        user_token = (user_token or "").strip()
        if not user_token:
            raise FeedbackError("Missing user token")
        with self._lock:
            return [copy.deepcopy(i) for i in self._items if i.get("userToken") == user_token]

    def all(self) -> List[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._items)

    def update(self, feedback_id: str, status: Optional[str] = None, admin_notes: Optional[str] = None) -> Dict[str, Any]:
        with self._lock:
            item = next((i for i in self._items if i.get("id") == feedback_id), None)
            if item is None:
                raise FeedbackNotFound("Feedback not found")
            new_status = str(status if status is not None else item["status"]).strip().lower()
            if new_status not in FEEDBACK_STATUSES:
                raise FeedbackError("Invalid status")
            notes = admin_notes if admin_notes is not None else item.get("adminNotes", "")
            item["status"] = new_status
            item["adminNotes"] = str(notes)[:NOTES_MAX]
            item["updatedAt"] = now_iso()
            item["resolvedAt"] = item["updatedAt"] if new_status == "resolved" else None
            result = copy.deepcopy(item)
        self._changed()
        return result

    def load(self, items: Any) -> int:
        if not isinstance(items, list):
            return 0
        with self._lock:
            self._items = [copy.deepcopy(i) for i in items if isinstance(i, dict)]
            return len(self._items)

    def snapshot(self) -> List[Dict[str, Any]]:
        return self.all()


__all__ = ["FeedbackStore", "FeedbackError", "FeedbackNotFound", "create_feedback_id", "now_iso"]
