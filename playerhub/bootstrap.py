"""Startup ordering and backend reconciliation.

Phases run strictly in order and never go back::

    LOAD_FILE -> CONNECT_DATABASE -> LOAD_DATABASE -> ACCEPT_CONNECTIONS

The local files are always read first. A database, when configured and
reachable, is authoritative for the config document and overrides what the
file provided. No step is fatal: whatever fails is logged and the hub keeps
the state it already has (ultimately the in-memory defaults).
"""
from __future__ import annotations

import enum
from typing import List

from .backends import DatabaseBackend
from .logging_config import get_logger
from .state import Hub

logger = get_logger(__name__)


class BootPhase(enum.IntEnum):
    PENDING = 0
    LOAD_FILE = 1
    CONNECT_DATABASE = 2
    LOAD_DATABASE = 3
    ACCEPT_CONNECTIONS = 4


class Bootstrapper:
    def __init__(self, hub: Hub) -> None:
        self.hub = hub
        self.phase = BootPhase.PENDING
        self.history: List[BootPhase] = []
        self.config_source = "defaults"

    def _advance(self, phase: BootPhase) -> None:
        if phase <= self.phase:
            raise RuntimeError(f"Cannot move from {self.phase.name} back to {phase.name}")
        self.phase = phase
        self.history.append(phase)
        logger.debug(f"Startup phase: {phase.name}")

    async def run(self) -> BootPhase:
        self._advance(BootPhase.LOAD_FILE)
        await self._load_files()

        self._advance(BootPhase.CONNECT_DATABASE)
        await self._connect_database()

        self._advance(BootPhase.LOAD_DATABASE)
        await self._load_database()

        self._advance(BootPhase.ACCEPT_CONNECTIONS)
        logger.info(
            f"Ready: {len(self.hub.shared)} shared entries, config from {self.config_source}, "
            f"backends={[b.name for b in self.hub.backends]}"
        )
        return self.phase

    async def _load_files(self) -> None:
        hub = self.hub
        try:
            entries = await hub.shared_backend.load()
            if entries:
                count = hub.shared.load(entries)
                logger.info(f"Loaded {count} shared entries from {hub.shared_backend.path}")
        except Exception as e:
            logger.error(f"Failed to load persisted state: {e}")

        try:
            document = await hub.file_backend.load()
            if document:
                hub.feedback.load(document.get("feedback"))
                hub.config.load(document)
                self.config_source = "file"
                logger.info(f"Loaded config document from {hub.file_backend.path}")
        except Exception as e:
            logger.error(f"Failed to load feedback state: {e}")

    async def _connect_database(self) -> None:
        hub = self.hub
        if not hub.database_url:
            logger.info("No database configured; using file persistence only")
            return
        backend = DatabaseBackend(hub.database_url, timeout=hub.db_timeout)
        try:
            await backend.connect()
        except Exception as e:
            logger.warning(f"Database unavailable, continuing with file persistence only: {e}")
            return
        hub.database = backend

    async def _load_database(self) -> None:
        hub = self.hub
        if hub.database is None:
            return
        try:
            document = await hub.database.load()
        except Exception as e:
            logger.warning(f"Failed to read config from database, keeping {self.config_source} copy: {e}")
            return
        if document:
            hub.config.load(document)
            self.config_source = "database"
            logger.info("Config document loaded from database")


__all__ = ["BootPhase", "Bootstrapper"]
