"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import APIRouter, FastAPI

from locale_sync.interface.dependencies import shutdown, startup
from locale_sync.interface.error_handlers import register_error_handlers
from locale_sync.interface.routes import router

logger = logging.getLogger(__name__)

health_router = APIRouter(include_in_schema=False)


@health_router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    await startup()
    logger.info("%s ready", app.title)
    try:
        yield
    finally:
        # Running syncs are cancelled here and report "cancelled".
        await shutdown()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Locale Sync",
        version="1.0.0",
        summary="Local cache of the Android strings.xml files of GitHub repositories.",
        lifespan=_lifespan,
    )
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(router)
    return app
