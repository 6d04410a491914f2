"""httpx clients for the two remote endpoints pitch-arena depends on.

- llm-gateway: OpenAI-compatible chat completions, long timeout
- arena-assets: static ``/arenas/{path}.json`` configs, short timeout

The LLM client keeps one long-lived client (``create_client``); asset
fetches and health probes open a short-lived one (``get_client``).
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any

import httpx

from pitch_arena import __version__
from pitch_arena.core.config import Settings, get_settings
from pitch_arena.core.logging import get_logger


logger = get_logger(__name__)


ASSET_TIMEOUT_SECONDS = 10.0
DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": f"pitch-arena/{__version__}",
}


class ServiceName(str, Enum):
    """Remote service identifiers."""
    LLM_GATEWAY = "llm-gateway"
    ARENA_ASSETS = "arena-assets"


class HTTPClientFactory:
    """Builds httpx.AsyncClient instances with a service's base URL and timeout.

    Example:
        ```python
        factory = HTTPClientFactory(settings)
        async with factory.get_client(ServiceName.ARENA_ASSETS) as client:
            response = await client.get("/arenas/gemini.json")
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def get_base_url(self, service: ServiceName) -> str:
        """Base URL for ``service`` without a trailing slash.

        Raises:
            ValueError: If the service has no URL configured.
        """
        urls = {
            ServiceName.LLM_GATEWAY: self._settings.llm_gateway_url,
            ServiceName.ARENA_ASSETS: self._settings.arena_assets_url,
        }
        url = urls.get(service)
        if not url:
            raise ValueError(f"No URL configured for service: {service}")
        return url.rstrip("/")

    def default_timeout(self, service: ServiceName) -> float:
        if service == ServiceName.LLM_GATEWAY:
            return self._settings.llm_timeout_seconds
        return ASSET_TIMEOUT_SECONDS

    def _client_options(
        self,
        service: ServiceName,
        timeout: float | None,
        extra: dict[str, Any],
    ) -> dict[str, Any]:
        headers = {**DEFAULT_HEADERS, **extra.pop("headers", {})}
        return {
            "base_url": self.get_base_url(service),
            "timeout": httpx.Timeout(timeout or self.default_timeout(service)),
            "headers": headers,
            **extra,
        }

    @asynccontextmanager
    async def get_client(
        self,
        service: ServiceName,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> AsyncGenerator[httpx.AsyncClient, None]:
        """Short-lived client, closed when the block exits.

        Args:
            service: Target service.
            timeout: Seconds; defaults to the service's timeout.
            **kwargs: Passed to httpx.AsyncClient (e.g. ``transport``).
        """
        options = self._client_options(service, timeout, kwargs)
        logger.debug(
            "Opening HTTP client",
            service=service.value,
            base_url=options["base_url"],
            timeout=options["timeout"].read,
        )
        async with httpx.AsyncClient(**options) as client:
            yield client

    def create_client(
        self,
        service: ServiceName,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> httpx.AsyncClient:
        """Long-lived client; the caller must ``await client.aclose()``."""
        return httpx.AsyncClient(**self._client_options(service, timeout, kwargs))
