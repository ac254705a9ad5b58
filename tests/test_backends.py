import asyncio
import json

import pytest

from playerhub import backends
from playerhub.backends import DatabaseBackend, FileBackend
from playerhub.models import AppState


async def test_file_backend_round_trip(tmp_path):
    backend = FileBackend(str(tmp_path / "doc.json"))
    assert await backend.load() is None
    await backend.save({"config": {"branding": {}}, "collections": []})
    assert await backend.load() == {"config": {"branding": {}}, "collections": []}


async def test_file_backend_rejects_non_object(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text(json.dumps(["not", "an", "object"]), encoding="utf-8")
    with pytest.raises(ValueError):
        await FileBackend(str(path)).load()


async def test_file_backend_surfaces_corrupt_json(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text("{broken", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        await FileBackend(str(path)).load()


async def test_database_backend_upserts_single_row():
    backend = DatabaseBackend("sqlite://:memory:", timeout=5)
    await backend.connect()
    try:
        assert await backend.load() is None

        await backend.save({"feedback": [{"id": "fb"}], "config": {"v": 1}, "collections": []})
        await backend.save({"feedback": [], "config": {"v": 2}, "collections": [{"id": "c"}]})

        assert await AppState.all().count() == 1
        # feedback tickets are never stored in the database row
        assert await backend.load() == {"config": {"v": 2}, "collections": [{"id": "c"}]}
    finally:
        await backend.close()
    assert backend.connected is False


async def test_database_backend_connect_failure_raises():
    backend = DatabaseBackend("nosuchdb://nowhere/db", timeout=1)
    with pytest.raises(Exception):
        await backend.connect()
    assert backend.connected is False


async def test_database_backend_init_timeout_closes_connections(monkeypatch):
    closed = []

    async def slow_init(**kwargs):
        await asyncio.sleep(10)

    async def record_close_all():
        closed.append(True)

    monkeypatch.setattr(backends.Tortoise, "init", slow_init)
    monkeypatch.setattr(backends.connections, "close_all", record_close_all)

    backend = DatabaseBackend("sqlite://:memory:", timeout=0.05)
    with pytest.raises(asyncio.TimeoutError):
        await backend.connect()
    assert closed == [True]
    assert backend.connected is False
