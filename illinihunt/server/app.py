"""HTTP app: REST API mounted under /api."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from illinihunt.config import IlliniHuntConfig
from illinihunt.server.api import router
from illinihunt.state import closeState, initState
from illinihunt.version import __version__


def createApp(config: IlliniHuntConfig | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        initState(config)
        yield
        closeState()

    app = FastAPI(title="IlliniHunt", version=__version__, lifespan=lifespan)
    app.include_router(router, prefix="/api")
    return app
