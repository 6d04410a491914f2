"""Shared service instances for the API.

Instances live on ``app.state`` and are built on first use from the
settings the app was created with (``create_app(settings)``), falling back
to ``get_settings()`` for apps that carry none. The lifespan closes them.
Tests replace them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import FastAPI, Request

from pitch_arena.arena.loader import ArenaConfigLoader
from pitch_arena.core.config import Settings, get_settings
from pitch_arena.llm.client import LLMClient
from pitch_arena.session.manager import SessionManager


def app_settings(app: FastAPI) -> Settings:
    settings = getattr(app.state, "settings", None)
    return settings if settings is not None else get_settings()


def get_app_settings(request: Request) -> Settings:
    return app_settings(request.app)


def get_llm_client(request: Request) -> LLMClient:
    """Get or create the app's LLM client."""
    state = request.app.state
    if getattr(state, "llm_client", None) is None:
        state.llm_client = LLMClient(app_settings(request.app))
    return state.llm_client


def get_loader(request: Request) -> ArenaConfigLoader:
    state = request.app.state
    if getattr(state, "arena_loader", None) is None:
        state.arena_loader = ArenaConfigLoader(settings=app_settings(request.app))
    return state.arena_loader


def get_session_manager(request: Request) -> SessionManager:
    """Get or create the app's session manager."""
    state = request.app.state
    if getattr(state, "session_manager", None) is None:
        state.session_manager = SessionManager(
            llm=get_llm_client(request),
            loader=get_loader(request),
            settings=app_settings(request.app),
        )
    return state.session_manager


async def close_dependencies(app: FastAPI) -> None:
    """Close the app's LLM client and drop cached instances."""
    state = app.state
    client = getattr(state, "llm_client", None)
    if client is not None:
        await client.close()
    state.llm_client = None
    state.arena_loader = None
    state.session_manager = None
