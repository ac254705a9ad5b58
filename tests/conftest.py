from __future__ import annotations

import pytest

from playerhub.state import Hub


class FakeConnection:
    """Stands in for a websocket: records ``send_json`` payloads, optionally failing."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list = []
        self.fail = fail

    async def send_json(self, payload: dict) -> None:
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(payload)


@pytest.fixture
def make_connection():
    return FakeConnection


@pytest.fixture
def hub(tmp_path):
    return Hub(data_dir=str(tmp_path), database_url=None, debounce_ms=20)
