"""Arena API routes.

Service Endpoints:
- GET /v1/arenas/{path} - Load and validate an arena config
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from pitch_arena.api.dependencies import get_loader
from pitch_arena.arena.loader import ArenaConfigLoader
from pitch_arena.core.constants import API_PREFIX


router = APIRouter(
    prefix=f"{API_PREFIX}/arenas",
    tags=["Arenas"],
)


class ArenaResponse(BaseModel):
    """Loaded arena config plus a few derived fields.

    Attributes:
        path: Requested arena path
        max_rounds: Rounds a session on this arena will run
        host_enabled: Whether the host warm-up and filler questions run
        panel: Panel judge ids in config order (host excluded)
        config: The validated config, camelCase keys
    """

    path: str
    max_rounds: int
    host_enabled: bool
    panel: list[str] = Field(default_factory=list)
    config: dict[str, Any]


@router.get(
    "/{path:path}",
    response_model=ArenaResponse,
    summary="Get arena config",
    description="Loads the arena config at the given path (e.g. gemini or hackathons/devpost).",
)
async def get_arena(
    path: str,
    loader: ArenaConfigLoader = Depends(get_loader),
) -> ArenaResponse:
    config = await loader.load(path)
    return ArenaResponse(
        path=path,
        max_rounds=config.max_rounds(loader.default_max_rounds),
        host_enabled=config.host_enabled,
        panel=[j.id for j in config.panel_judges],
        config=config.model_dump(by_alias=True, exclude_none=True),
    )


__all__ = ["ArenaResponse", "router"]
