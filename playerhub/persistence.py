"""Debounced, crash-safe JSON persistence.

Two primitives live here:

* ``atomic_write_json`` / ``read_json`` - the on-disk discipline. A snapshot is
  written to ``<path>.tmp`` and then renamed over ``<path>`` so a reader only
  ever sees the previous complete file or the new complete file.
* ``DebouncedFlusher`` - coalesces bursts of ``schedule_flush()`` calls into
  one flush of the *current* state after a quiet period, with at most one
  flush in flight at a time.
"""
from __future__ import annotations

import asyncio
import json
import os
from typing import Any, Awaitable, Callable, Optional, Set

from .logging_config import get_logger

logger = get_logger(__name__)


def atomic_write_json(path: str, data: Any) -> None:
    """Serialise *data* to ``path + ".tmp"`` then atomically replace *path*."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    tmp_path = f"{path}.tmp"
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise


def read_json(path: str) -> Optional[Any]:
    """Return the parsed JSON at *path*, or ``None`` if the file does not exist."""
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


class DebouncedFlusher:
    """Explicit debounce primitive: a pending-deadline handle plus a single-flight lock.

    ``schedule_flush`` (re)arms a timer; when it fires the flush callable runs
    once and reads whatever the in-memory state is at that moment. Flush errors
    are logged and swallowed - the next scheduled flush retries naturally.
    """

    def __init__(
        self,
        name: str,
        flush_fn: Callable[[], Awaitable[None]],
        delay: float = 0.15,
    ) -> None:
        self.name = name
        self.delay = delay
        self._flush_fn = flush_fn
        self._handle: Optional[asyncio.TimerHandle] = None
        self._lock: Optional[asyncio.Lock] = None
        self._inflight: Set[asyncio.Task] = set()
        self.flush_count = 0
        self.error_count = 0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def _get_lock(self) -> asyncio.Lock:
        # Created lazily so the lock binds to the loop that actually runs flushes.
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def schedule_flush(self) -> None:
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        task = asyncio.ensure_future(self.flush())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def flush(self) -> bool:
        """Run one flush, waiting for any flush already in progress. Returns success."""
        async with self._get_lock():
            try:
                await self._flush_fn()
            except Exception as e:
                self.error_count += 1
                logger.error(f"Failed to persist {self.name}: {e}", exc_info=True)
                return False
            self.flush_count += 1
            logger.debug(f"Persisted {self.name} (flush #{self.flush_count})")
            return True

    async def flush_now(self) -> bool:
        """Cancel the pending timer and flush immediately. Used on shutdown."""
        self.cancel()
        return await self.flush()

    async def wait_idle(self) -> None:
        """Wait for timer-triggered flushes that already started."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)


__all__ = ["atomic_write_json", "read_json", "DebouncedFlusher"]
