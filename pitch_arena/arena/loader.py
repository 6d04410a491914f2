"""
Arena Config Loader - Fetches arena configs from static assets.

Configs live at ``{arena_assets_url}/arenas/{path}.json``. When
``arena_assets_dir`` is configured, ``{arena_assets_dir}/{path}.json`` is
read from disk instead. Loaded configs are cached per path for the life of
the loader.
"""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from pitch_arena.arena.models import ArenaConfig
from pitch_arena.core.config import Settings, get_settings
from pitch_arena.core.exceptions import ArenaConfigInvalidError, ArenaConfigNotFoundError
from pitch_arena.core.http import HTTPClientFactory, ServiceName
from pitch_arena.core.logging import get_logger


logger = get_logger(__name__)

_SEGMENT = re.compile(r"^[A-Za-z0-9_-]+$")


def is_valid_arena_path(path: str) -> bool:
    """True when every ``/``-separated segment is ``[A-Za-z0-9_-]+``."""
    if not path:
        return False
    return all(_SEGMENT.match(segment) for segment in path.split("/"))


class ArenaConfigLoader:
    """Loads and caches ArenaConfig objects by path."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            settings: Application settings. Uses get_settings() if not provided.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self._settings = settings or get_settings()
        self._factory = HTTPClientFactory(self._settings)
        self._transport = transport
        self._cache: dict[str, ArenaConfig] = {}
        self._lock = asyncio.Lock()

    @property
    def default_max_rounds(self) -> int:
        return self._settings.default_max_rounds

    @property
    def cached_paths(self) -> list[str]:
        return list(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    async def load(self, path: str) -> ArenaConfig:
        """Load the arena config for ``path``.

        Args:
            path: Arena path such as ``gemini`` or ``hackathons/devpost``.

        Returns:
            Validated ArenaConfig.

        Raises:
            ArenaConfigNotFoundError: Invalid path or missing asset.
            ArenaConfigInvalidError: Asset is not valid JSON or not an arena.
        """
        if not is_valid_arena_path(path):
            logger.warning("Rejected arena path", path=path)
            raise ArenaConfigNotFoundError(path)

        cached = self._cache.get(path)
        if cached is not None:
            return cached

        async with self._lock:
            cached = self._cache.get(path)
            if cached is not None:
                return cached

            if self._settings.arena_assets_dir:
                data = self._read_local(path)
            else:
                data = await self._fetch_remote(path)

            config = self._validate(path, data)
            self._cache[path] = config
            logger.info(
                "Arena config loaded",
                path=path,
                arena_id=config.id,
                judges=len(config.judges),
            )
            return config

    def _read_local(self, path: str) -> Any:
        file_path = Path(self._settings.arena_assets_dir or ".") / f"{path}.json"
        if not file_path.is_file():
            raise ArenaConfigNotFoundError(path)
        try:
            return json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ArenaConfigInvalidError(path, str(exc)) from exc

    async def _fetch_remote(self, path: str) -> Any:
        kwargs: dict[str, Any] = {}
        if self._transport is not None:
            kwargs["transport"] = self._transport

        try:
            async with self._factory.get_client(ServiceName.ARENA_ASSETS, **kwargs) as client:
                response = await client.get(f"/arenas/{path}.json")
        except httpx.HTTPError as exc:
            logger.error("Arena asset request failed", path=path, error=str(exc))
            raise ArenaConfigNotFoundError(path) from exc

        if response.status_code == 404:
            raise ArenaConfigNotFoundError(path)
        if response.status_code >= 400:
            raise ArenaConfigInvalidError(path, f"HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise ArenaConfigInvalidError(path, "asset is not valid JSON") from exc

    @staticmethod
    def _validate(path: str, data: Any) -> ArenaConfig:
        if not isinstance(data, dict):
            raise ArenaConfigInvalidError(path, "asset is not a JSON object")
        try:
            return ArenaConfig.model_validate(data)
        except ValidationError as exc:
            raise ArenaConfigInvalidError(path, f"{exc.error_count()} validation error(s)") from exc
