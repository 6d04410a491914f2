"""ASGI entry point.

    uvicorn pitch_arena.main:app --port 8090

or, once installed, ``pitch-arena`` (host and port from PITCH_ARENA_* settings).
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pitch_arena import __version__
from pitch_arena.api.dependencies import close_dependencies
from pitch_arena.api.error_handlers import register_error_handlers
from pitch_arena.api.routes import arenas, health, sessions
from pitch_arena.core.config import Settings, get_settings
from pitch_arena.core.logging import configure_logging, get_logger


configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    logger.info(
        "Pitch arena starting",
        port=settings.port,
        gateway=settings.llm_gateway_url,
        assets=settings.arena_assets_dir or settings.arena_assets_url,
    )
    health.mark_started()
    try:
        yield
    finally:
        # Live sessions are in memory only and are dropped here.
        await close_dependencies(app)
        logger.info("Pitch arena stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="Pitch Arena",
        description="Practice a startup pitch against a panel of AI judges",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    for router in (arenas.router, sessions.router, health.router):
        app.include_router(router)
    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    settings = get_settings()
    uvicorn.run("pitch_arena.main:app", host=settings.host, port=settings.port)
