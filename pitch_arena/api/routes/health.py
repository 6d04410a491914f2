"""Health routes.

- GET /health - dependency report plus live session count
- GET /health/ready - 200 when the model gateway and arena assets are usable, else 503
- GET /health/live - process is up
"""

from __future__ import annotations

import asyncio
import os
import time
from enum import Enum
from pathlib import Path

import httpx
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from pitch_arena.api.dependencies import get_app_settings, get_session_manager
from pitch_arena.core.config import Settings, get_settings
from pitch_arena.core.http import HTTPClientFactory, ServiceName
from pitch_arena.core.logging import get_logger
from pitch_arena.session.manager import SessionManager


logger = get_logger(__name__)


router = APIRouter(prefix="/health", tags=["Health"])


SERVICE_NAME = "pitch-arena"
SERVICE_VERSION = os.environ.get("SERVICE_VERSION", "0.1.0")
PROBE_TIMEOUT_SECONDS = 2.0

_started_at: float | None = None


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class DependencyStatus(str, Enum):
    UP = "up"
    DOWN = "down"
    UNKNOWN = "unknown"


class DependencyHealth(BaseModel):
    name: str
    status: DependencyStatus
    latency_ms: float | None = None
    message: str | None = None


class HealthResponse(BaseModel):
    status: HealthStatus
    service: str = SERVICE_NAME
    version: str = SERVICE_VERSION
    uptime_seconds: float | None = None
    active_sessions: int = 0
    dependencies: list[DependencyHealth]


class ReadinessResponse(BaseModel):
    ready: bool
    checks: dict[str, bool]


class LivenessResponse(BaseModel):
    alive: bool = True
    uptime_seconds: float | None = None


def mark_started() -> None:
    """Record process start; called from the app lifespan."""
    global _started_at
    _started_at = time.monotonic()


def uptime_seconds() -> float | None:
    if _started_at is None:
        return None
    return round(time.monotonic() - _started_at, 3)


# =============================================================================
# Dependency Checks
# =============================================================================

async def check_llm_gateway(
    transport: httpx.AsyncBaseTransport | None = None,
    settings: Settings | None = None,
) -> DependencyHealth:
    """Probe ``GET {llm_gateway_url}/health``.

    Args:
        transport: Optional httpx transport (tests pass a MockTransport).
        settings: Settings to probe with; defaults to get_settings().
    """
    name = ServiceName.LLM_GATEWAY.value
    kwargs = {"transport": transport} if transport is not None else {}
    started = time.perf_counter()
    try:
        async with HTTPClientFactory(settings or get_settings()).get_client(
            ServiceName.LLM_GATEWAY, timeout=PROBE_TIMEOUT_SECONDS, **kwargs
        ) as client:
            response = await client.get("/health")
    except httpx.HTTPError as exc:
        logger.warning("LLM gateway probe failed", error=str(exc))
        return DependencyHealth(
            name=name,
            status=DependencyStatus.DOWN,
            message=str(exc) or type(exc).__name__,
        )

    latency_ms = round((time.perf_counter() - started) * 1000, 1)
    if response.status_code >= 400:
        return DependencyHealth(
            name=name,
            status=DependencyStatus.DOWN,
            latency_ms=latency_ms,
            message=f"HTTP {response.status_code}",
        )
    return DependencyHealth(name=name, status=DependencyStatus.UP, latency_ms=latency_ms)


async def check_arena_assets(settings: Settings | None = None) -> DependencyHealth:
    """Local asset directory check; remote assets are fetched on demand and not probed."""
    name = ServiceName.ARENA_ASSETS.value
    assets_dir = (settings or get_settings()).arena_assets_dir
    if not assets_dir:
        return DependencyHealth(name=name, status=DependencyStatus.UNKNOWN, message="remote assets")
    if Path(assets_dir).is_dir():
        return DependencyHealth(name=name, status=DependencyStatus.UP)
    return DependencyHealth(
        name=name,
        status=DependencyStatus.DOWN,
        message=f"Directory not found: {assets_dir}",
    )


async def run_dependency_checks(settings: Settings) -> list[DependencyHealth]:
    return list(await asyncio.gather(
        check_llm_gateway(settings=settings),
        check_arena_assets(settings),
    ))


def calculate_overall_status(dependencies: list[DependencyHealth]) -> HealthStatus:
    """DOWN anywhere is unhealthy, UNKNOWN anywhere is degraded."""
    statuses = {d.status for d in dependencies}
    if DependencyStatus.DOWN in statuses:
        return HealthStatus.UNHEALTHY
    if DependencyStatus.UNKNOWN in statuses:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


# =============================================================================
# API Endpoints
# =============================================================================

@router.get("", response_model=HealthResponse, summary="Health check")
async def health_check(
    manager: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    dependencies = await run_dependency_checks(settings)
    return HealthResponse(
        status=calculate_overall_status(dependencies),
        uptime_seconds=uptime_seconds(),
        active_sessions=manager.session_count,
        dependencies=dependencies,
    )


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness check")
async def readiness_check(
    response: Response,
    settings: Settings = Depends(get_app_settings),
) -> ReadinessResponse:
    dependencies = await run_dependency_checks(settings)
    checks = {d.name.replace("-", "_"): d.status != DependencyStatus.DOWN for d in dependencies}
    ready = all(checks.values())
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(ready=ready, checks=checks)


@router.get("/live", response_model=LivenessResponse, summary="Liveness check")
async def liveness_check() -> LivenessResponse:
    return LivenessResponse(uptime_seconds=uptime_seconds())


__all__ = [
    "DependencyHealth",
    "DependencyStatus",
    "HealthStatus",
    "calculate_overall_status",
    "check_arena_assets",
    "check_llm_gateway",
    "mark_started",
    "router",
]
