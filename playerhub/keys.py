"""Room key validation.

A room key is the only scope for shared state and broadcast membership, so
every handler that touches room-scoped data checks it here first.
"""
from __future__ import annotations

from typing import Any

from .constants import ROOM_KEY_PATTERN


def is_room_key(key: Any) -> bool:
    """Return *True* iff *key* is exactly ``room:`` followed by 6 of ``[A-Z0-9]``."""
    if not isinstance(key, str):
        return False
    return ROOM_KEY_PATTERN.fullmatch(key) is not None


__all__ = ["is_room_key"]
