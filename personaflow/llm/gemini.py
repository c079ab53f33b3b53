"""Google Gemini LLM provider.

This provider uses httpx to communicate with Gemini's OpenAI-compatible REST API.
Supports models like gemini-2.0-flash, gemini-1.5-pro, etc.
"""

from __future__ import annotations

import json
import os
from typing import Any, AsyncIterator

import httpx

from personaflow.core.types import LLMResponse, Message, StreamChunk, Usage
from personaflow.errors.exceptions import (
    APIError,
    AuthenticationError,
    MissingAPIKeyError,
    RateLimitError,
    TimeoutError,
)
from personaflow.llm.base import BaseLLMProvider

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai"


class GeminiProvider(BaseLLMProvider):
    """Google Gemini LLM provider.

    Uses Gemini's OpenAI-compatible API endpoint. Requires a Google API key
    from AI Studio, passed explicitly or read from ``GOOGLE_API_KEY``.

    Example:
        >>> provider = GeminiProvider(model="gemini-2.0-flash")
        >>> response = await provider.complete([Message.user("Hello")])
    """

    def __init__(
        self,
        model: str = "gemini-2.0-flash",
        api_key: str | None = None,
        timeout: float = 60.0,
        base_url: str = GEMINI_BASE_URL,
    ) -> None:
        """Initialize Gemini provider.

        Args:
            model: Model name (e.g., "gemini-2.0-flash", "gemini-1.5-pro")
            api_key: Google API key. If None, reads from GOOGLE_API_KEY env var.
            timeout: Request timeout in seconds (default: 60.0)
            base_url: API root, overridable for proxies.
        """
        self._model = model
        self._api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _require_api_key(self) -> str:
        if not self._api_key:
            raise MissingAPIKeyError("gemini", env_var="GOOGLE_API_KEY")
        return self._api_key

    @property
    def model(self) -> str:
        return self._model

    @property
    def provider_name(self) -> str:
        return "gemini"

    def _build_request(
        self,
        messages: list[Message],
        temperature: float,
        max_tokens: int,
        stream: bool = False,
    ) -> tuple[str, dict[str, Any], dict[str, str]]:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": m.role.value, "content": m.content} for m in messages],
            "temperature": temperature,
            "max_completion_tokens": max_tokens,
        }
        if stream:
            payload["stream"] = True

        headers = {
            "Authorization": f"Bearer {self._require_api_key()}",
            "Content-Type": "application/json",
        }
        return f"{self._base_url}/chat/completions", payload, headers

    async def complete(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a completion using Gemini.

        Raises:
            MissingAPIKeyError: If API key is not set.
            AuthenticationError: If API key is invalid.
            RateLimitError: If Gemini returns 429.
            APIError: If Gemini API returns another error.
            TimeoutError: If the request times out.
        """
        url, payload, headers = self._build_request(messages, temperature, max_tokens)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.ConnectError as e:
            raise APIError(
                f"Failed to connect to Gemini API at {self._base_url}: {e}",
                provider="gemini",
                model=self._model,
            ) from e
        except httpx.TimeoutException as e:
            raise TimeoutError(
                f"Request to Gemini timed out after {self._timeout}s",
                provider="gemini",
                model=self._model,
                timeout_seconds=self._timeout,
            ) from e
        except httpx.HTTPStatusError as e:
            self._handle_error(e)

        try:
            choice = data["choices"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise APIError(
                "Gemini API returned no choices",
                provider="gemini",
                model=self._model,
            ) from e

        usage_data = data.get("usage") or {}
        return LLMResponse(
            content=choice.get("message", {}).get("content") or "",
            model=self._model,
            usage=Usage(
                prompt_tokens=usage_data.get("prompt_tokens", 0),
                completion_tokens=usage_data.get("completion_tokens", 0),
            ),
            finish_reason=choice.get("finish_reason") or "stop",
            raw_response=data,
        )

    async def stream(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs: Any,
    ) -> AsyncIterator[StreamChunk]:
        """Stream a completion using Gemini server-sent events.

        Yields:
            StreamChunk containing incremental content.
        """
        url, payload, headers = self._build_request(
            messages, temperature, max_tokens, stream=True
        )
        accumulated = ""

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                async with client.stream("POST", url, json=payload, headers=headers) as response:
                    response.raise_for_status()

                    async for line in response.aiter_lines():
                        if not line.startswith("data: "):
                            continue

                        data_str = line[6:].strip()
                        if data_str == "[DONE]":
                            break

                        try:
                            chunk_data = json.loads(data_str)
                        except json.JSONDecodeError:
                            continue

                        choice = (chunk_data.get("choices") or [{}])[0]
                        delta = (choice.get("delta") or {}).get("content") or ""
                        accumulated += delta
                        finish_reason = choice.get("finish_reason")

                        usage = None
                        if finish_reason and "usage" in chunk_data:
                            usage = Usage(
                                prompt_tokens=chunk_data["usage"].get("prompt_tokens", 0),
                                completion_tokens=chunk_data["usage"].get("completion_tokens", 0),
                            )

                        yield StreamChunk(
                            content=accumulated,
                            delta=delta,
                            finish_reason=finish_reason,
                            usage=usage,
                        )
        except httpx.ConnectError as e:
            raise APIError(
                f"Failed to connect to Gemini API at {self._base_url}: {e}",
                provider="gemini",
                model=self._model,
            ) from e
        except httpx.TimeoutException as e:
            raise TimeoutError(
                f"Request to Gemini timed out after {self._timeout}s",
                provider="gemini",
                model=self._model,
                timeout_seconds=self._timeout,
            ) from e
        except httpx.HTTPStatusError as e:
            self._handle_error(e)

    def _handle_error(self, error: httpx.HTTPStatusError) -> None:
        """Map HTTP errors from Gemini to PersonaFlow errors.

        Raises:
            AuthenticationError: For 401/403 errors.
            RateLimitError: For 429 errors.
            APIError: For all other HTTP errors.
        """
        status_code = error.response.status_code

        if status_code in (401, 403):
            raise AuthenticationError(
                "Invalid or missing API key. Get a key at https://aistudio.google.com/app/apikey",
                provider="gemini",
            ) from error

        if status_code == 429:
            retry_after = error.response.headers.get("retry-after")
            raise RateLimitError(
                "Gemini rate limit exceeded",
                provider="gemini",
                model=self._model,
                retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
            ) from error

        raise APIError(
            f"Gemini API error: {status_code} - {error.response.text}",
            provider="gemini",
            model=self._model,
            status_code=status_code,
        ) from error
