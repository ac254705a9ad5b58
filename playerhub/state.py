"""Centralised in-memory runtime state.

``Hub`` owns the process-wide singletons (shared state store, broadcaster,
config and feedback stores) together with the flushers and backends that
make them durable. The FastAPI app keeps exactly one instance on
``app.state.hub``; routers reach it through ``get_hub``.
"""
from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from fastapi import Request, WebSocket

from .backends import DatabaseBackend, FileBackend, PersistenceBackend
from .broadcaster import Broadcaster
from .config_store import ConfigStore
from .constants import (
    DATA_DIR,
    DATABASE_URL,
    DB_TIMEOUT_SECONDS,
    FEEDBACK_FILE,
    PERSIST_DEBOUNCE_MS,
    SHARED_STATE_FILE,
)
from .feedback import FeedbackStore
from .logging_config import get_logger
from .persistence import DebouncedFlusher
from .store import SharedStateStore

logger = get_logger(__name__)


class Hub:
    def __init__(
        self,
        data_dir: str = DATA_DIR,
        database_url: Optional[str] = DATABASE_URL,
        debounce_ms: int = PERSIST_DEBOUNCE_MS,
        db_timeout: float = DB_TIMEOUT_SECONDS,
    ) -> None:
        self.data_dir = data_dir
        self.database_url = database_url
        self.db_timeout = db_timeout
        delay = debounce_ms / 1000.0

        self.shared = SharedStateStore()
        self.broadcaster = Broadcaster()

        self.shared_backend = FileBackend(os.path.join(data_dir, SHARED_STATE_FILE))
        self.file_backend = FileBackend(os.path.join(data_dir, FEEDBACK_FILE))
        # Set by the bootstrapper only if the connection succeeded at startup.
        self.database: Optional[DatabaseBackend] = None

        self.shared_flusher = DebouncedFlusher("shared state", self._persist_shared, delay)
        self.config_flusher = DebouncedFlusher("config document", self._persist_config, delay)

        self.config = ConfigStore(on_change=self.config_flusher.schedule_flush)
        self.feedback = FeedbackStore(on_change=self.config_flusher.schedule_flush)

    @property
    def backends(self) -> List[PersistenceBackend]:
        """File backend always, database backend additionally when connected."""
        active: List[PersistenceBackend] = [self.file_backend]
        if self.database is not None:
            active.append(self.database)
        return active

    def document(self) -> Dict[str, Any]:
        """File layout of the config document: ``{feedback, config, collections}``."""
        return {"feedback": self.feedback.snapshot(), **self.config.snapshot()}

    async def _persist_shared(self) -> None:
        await self.shared_backend.save(self.shared.snapshot())

    async def _persist_config(self) -> None:
        document = self.document()
        failed = []
        for backend in self.backends:
            try:
                await backend.save(document)
            except Exception as e:
                logger.warning(f"Could not save config document to {backend.name} backend: {e}")
                failed.append(backend.name)
        if failed:
            raise RuntimeError(f"config document not saved to: {', '.join(failed)}")

    async def shutdown(self) -> None:
        """Cancel pending timers, flush both documents once, then release the database."""
        self.shared_flusher.cancel()
        self.config_flusher.cancel()
        await self.shared_flusher.flush_now()
        await self.config_flusher.flush_now()
        if self.database is not None:
            await self.database.close()
            self.database = None
        logger.info("Final flush complete")


def get_hub(request: Request) -> Hub:
    return request.app.state.hub


def get_ws_hub(websocket: WebSocket) -> Hub:
    return websocket.app.state.hub


__all__ = ["Hub", "get_hub", "get_ws_hub"]
