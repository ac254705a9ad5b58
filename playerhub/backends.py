"""Persistence backends for the configuration document.

``FileBackend`` is always present. ``DatabaseBackend`` exists only when a
database url was configured *and* the connection succeeded at startup; the
choice is made once by the bootstrapper and never revisited.
"""
from __future__ import annotations

import abc
import asyncio
from typing import Any, Dict, Optional

from tortoise import Tortoise, connections

from .constants import DB_TIMEOUT_SECONDS, GLOBAL_CONFIG_KEY
from .logging_config import get_logger
from .models import AppState
from .persistence import atomic_write_json, read_json

logger = get_logger(__name__)


class PersistenceBackend(abc.ABC):
    name = "backend"

    @abc.abstractmethod
    async def load(self) -> Optional[Dict[str, Any]]:
        """Return the stored document, or ``None`` if nothing has been stored yet."""

    @abc.abstractmethod
    async def save(self, document: Dict[str, Any]) -> None:
        """Durably store *document*, replacing any previous copy."""

    async def close(self) -> None:
        return None


class FileBackend(PersistenceBackend):
    """JSON file written with the temp-file-then-rename discipline."""

    name = "file"

    def __init__(self, path: str) -> None:
        self.path = path

    async def load(self) -> Optional[Dict[str, Any]]:
        data = await asyncio.to_thread(read_json, self.path)
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data

    async def save(self, document: Dict[str, Any]) -> None:
        await asyncio.to_thread(atomic_write_json, self.path, document)


class DatabaseBackend(PersistenceBackend):
    """Single row in the ``app_state`` table keyed by ``GLOBAL_CONFIG_KEY``.

    Only the ``config`` and ``collections`` parts of a document are stored;
    feedback tickets stay file-only. Every query is bounded by *timeout*.
    """

    name = "database"
    STORED_FIELDS = ("config", "collections")

    def __init__(
        self,
        db_url: str,
        key: str = GLOBAL_CONFIG_KEY,
        timeout: float = DB_TIMEOUT_SECONDS,
    ) -> None:
        self.db_url = db_url
        self.key = key
        self.timeout = timeout
        self.connected = False

    async def connect(self) -> None:
        try:
            await asyncio.wait_for(
                Tortoise.init(db_url=self.db_url, modules={"models": ["playerhub.models"]}),
                timeout=self.timeout,
            )
            await asyncio.wait_for(Tortoise.generate_schemas(safe=True), timeout=self.timeout)
        except BaseException:
            try:
                await connections.close_all()
            except Exception as e:
                # init can fail before any connection config exists
                logger.debug(f"No database connections to release: {e}")
            raise
        self.connected = True
        logger.info(f"Database backend ready (row key {self.key!r})")

    async def load(self) -> Optional[Dict[str, Any]]:
        row = await asyncio.wait_for(AppState.get_or_none(key=self.key), timeout=self.timeout)
        if row is None or not isinstance(row.value, dict):
            return None
        return row.value

    async def save(self, document: Dict[str, Any]) -> None:
        value = {field: document.get(field) for field in self.STORED_FIELDS if field in document}
        await asyncio.wait_for(
            AppState.update_or_create(key=self.key, defaults={"value": value}),
            timeout=self.timeout,
        )

    async def close(self) -> None:
        if self.connected:
            await connections.close_all()
            self.connected = False


__all__ = ["PersistenceBackend", "FileBackend", "DatabaseBackend"]
