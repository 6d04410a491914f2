"""
LLM Client - Text prompts via llm-gateway.

Every model call in the service (panel judges, single judges, host,
resolution checks, summary, coach) is a two-message chat completion: one
system message with the instructions and one user message with the
content. The gateway handles provider routing.

A failed call raises LLMProviderError. Callers decide the fallback.
"""

from __future__ import annotations

import time
from typing import Any, Protocol

import httpx

from pitch_arena.core.config import Settings, get_settings
from pitch_arena.core.exceptions import LLMProviderError
from pitch_arena.core.http import HTTPClientFactory, ServiceName
from pitch_arena.core.logging import get_logger


logger = get_logger(__name__)


class TextPrompt(Protocol):
    """Anything that can answer a (user, system) prompt pair with text."""

    async def text_prompt(self, user: str, system: str = "", purpose: str = "dev") -> str:
        ...


class LLMClient:
    """Chat completion client for the llm-gateway.

    Attributes:
        model: Model name sent with every request.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Application settings. Uses get_settings() if not provided.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self._settings = settings or get_settings()
        self.model = self._settings.llm_model
        factory = HTTPClientFactory(self._settings)
        kwargs: dict[str, Any] = {}
        if transport is not None:
            kwargs["transport"] = transport
        self._client = factory.create_client(ServiceName.LLM_GATEWAY, **kwargs)

    def _build_request(self, user: str, system: str) -> dict[str, Any]:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": user})
        return {
            "model": self.model,
            "messages": messages,
            "temperature": self._settings.llm_temperature,
            "max_tokens": self._settings.llm_max_tokens,
        }

    async def text_prompt(self, user: str, system: str = "", purpose: str = "dev") -> str:
        """Send one prompt and return the first choice's text.

        Args:
            user: User message (content for the model to work on).
            system: System message (instructions). Omitted when empty.
            purpose: Label for logs (e.g. ``panel``, ``host``, ``coach``).

        Returns:
            Reply text; empty string when the gateway returned no choices.

        Raises:
            LLMProviderError: On HTTP status >= 400 or transport failure.
        """
        started = time.perf_counter()
        request_body = self._build_request(user, system)

        try:
            response = await self._client.post("/v1/chat/completions", json=request_body)
        except httpx.HTTPError as exc:
            logger.error(
                "LLM transport error",
                purpose=purpose,
                model=self.model,
                error=str(exc),
            )
            raise LLMProviderError(message=str(exc) or type(exc).__name__, model=self.model) from exc

        if response.status_code >= 400:
            try:
                error_data = response.json() if response.content else {}
            except ValueError:
                error_data = {}
            error = error_data.get("error") if isinstance(error_data, dict) else None
            error = error if isinstance(error, dict) else {}
            error_msg = error.get("message") or response.text or f"HTTP {response.status_code}"
            error_code = error.get("code")

            logger.error(
                "LLM provider error",
                purpose=purpose,
                model=self.model,
                status=response.status_code,
                code=error_code,
                message=error_msg,
            )
            raise LLMProviderError(
                message=error_msg,
                model=self.model,
                status_code=response.status_code,
                error_code=error_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMProviderError(
                message="Gateway returned a non-JSON body",
                model=self.model,
                status_code=response.status_code,
            ) from exc

        content = self._extract_content(data, purpose, response.status_code)

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "LLM response received",
            purpose=purpose,
            model=self.model,
            input_chars=len(user) + len(system),
            output_chars=len(content),
            latency_ms=elapsed_ms,
        )
        return content

    def _extract_content(self, data: Any, purpose: str, status_code: int) -> str:
        """Text of ``choices[0].message.content``; no choices is an empty reply.

        Raises:
            LLMProviderError: If the body is not a chat completion.
        """
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            return ""

        first = choices[0] if isinstance(choices, list) else None
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            logger.error("Unexpected completion body", purpose=purpose, model=self.model)
            raise LLMProviderError(
                message="Gateway returned an unexpected body",
                model=self.model,
                status_code=status_code,
            )

        content = message.get("content")
        return "" if content is None else str(content)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
