"""API route modules."""

from pitch_arena.api.routes.arenas import router as arenas_router
from pitch_arena.api.routes.health import router as health_router
from pitch_arena.api.routes.sessions import router as sessions_router


__all__ = [
    "arenas_router",
    "health_router",
    "sessions_router",
]
