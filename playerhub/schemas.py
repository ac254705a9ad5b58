"""Pydantic data schemas used across the hub service.

Event-channel payloads are parsed leniently (values are ``Any``) because the
handlers own validation and must answer with an acknowledgment instead of
raising.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

# -----------------------------
# Event channel
# -----------------------------

class ClientEvent(BaseModel):
    """One JSON frame received on the websocket."""

    type: str
    data: Any = None
    ack: Optional[Any] = None


class SharedGetRequest(BaseModel):
    key: Any = None


class SharedSetRequest(BaseModel):
    key: Any = None
    value: Any = None


class Ack(BaseModel):
    """Result of a request/response event: success with a value, or failure with an error."""

    ok: bool
    value: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, **kwargs: Any) -> "Ack":
        return cls(ok=True, **kwargs)

    @classmethod
    def failure(cls, error: str) -> "Ack":
        return cls(ok=False, error=error)

    def payload(self) -> Dict[str, Any]:
        # ``value`` is only present when it was set explicitly (``shared:get``).
        return self.model_dump(exclude_unset=True)


# -----------------------------
# REST request / response models
# -----------------------------

class ConfigUpdateRequest(BaseModel):
    # sections stay untyped; normalize_config drops whatever is malformed
    branding: Any = None
    preferences: Any = None
    collections: Any = None


class ConfigResponse(BaseModel):
    ok: bool = True
    config: Dict[str, Any]
    collections: List[Dict[str, Any]] = []


class FeedbackCreateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Any = None
    title: Any = None
    details: Any = None
    userName: Any = None
    userId: Any = None


class FeedbackUpdateRequest(BaseModel):
    status: Optional[str] = None
    adminNotes: Optional[str] = None


class FeedbackResponse(BaseModel):
    ok: bool = True
    feedback: Dict[str, Any]


class FeedbackListResponse(BaseModel):
    ok: bool = True
    feedback: List[Dict[str, Any]]


class OkResponse(BaseModel):
    ok: bool = True


__all__ = [
    # event channel
    "ClientEvent",
    "SharedGetRequest",
    "SharedSetRequest",
    "Ack",
    # rest
    "ConfigUpdateRequest",
    "ConfigResponse",
    "FeedbackCreateRequest",
    "FeedbackUpdateRequest",
    "FeedbackResponse",
    "FeedbackListResponse",
    "OkResponse",
]
