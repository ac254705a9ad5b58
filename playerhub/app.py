from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .bootstrap import Bootstrapper
from .logging_config import get_logger
from .routers import config as config_router
from .routers import feedback as feedback_router
from .routers import websockets as ws_router
from .state import Hub

logger = get_logger(__name__)


def create_app(hub: Optional[Hub] = None) -> FastAPI:
    """Build the FastAPI app around *hub* (a fresh one from the environment if omitted).

    Startup runs the bootstrapper before any request is served; shutdown
    (uvicorn turns SIGINT/SIGTERM into it) performs the final flush.
    """
    hub = hub if hub is not None else Hub()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        bootstrapper = Bootstrapper(hub)
        await bootstrapper.run()
        app.state.bootstrapper = bootstrapper
        try:
            yield
        finally:
            await hub.shutdown()

    # -----------------------------
    # FastAPI app instance
    # -----------------------------

    app = FastAPI(title="Player Hub Realtime", lifespan=lifespan)
    app.state.hub = hub

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(config_router.router)
    app.include_router(feedback_router.router)
    app.include_router(ws_router.router)

    logger.info("FastAPI application initialized")
    return app


__all__ = ["create_app"]
