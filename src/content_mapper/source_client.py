from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional, Protocol

import httpx

from .models import SourceConfig

LOGGER = logging.getLogger("content_mapper.source")


class SourceClientError(Exception):
    """Base exception for source document fetch errors."""


class SourceNotFoundError(SourceClientError):
    """Raised when a requested source document does not exist."""


class SourceProvider(Protocol):
    async def fetch(self, url: str, headers: Optional[Mapping[str, str]] = None) -> Any: ...


class SourceClient:
    """Async HTTP client with retry and backoff logic for JSON source documents."""

    def __init__(
        self,
        config: Optional[SourceConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or SourceConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._headers = {"Accept": "application/json"}
        if self._config.api_key:
            self._headers["Authorization"] = f"ApiKey {self._config.api_key}"

    async def __aenter__(self) -> "SourceClient":
        self._client = httpx.AsyncClient(timeout=self._config.timeout, transport=self._transport)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str, headers: Optional[Mapping[str, str]] = None) -> Any:
        if self._client is None:
            raise RuntimeError("HTTP client is not ready")

        request_headers = {**self._headers, **dict(headers or {})}
        max_attempts = max(1, self._config.max_retries + 1)
        base_backoff = max(self._config.backoff_factor, 0.0)
        backoff_ceiling = (
            self._config.backoff_max
            if self._config.backoff_max and self._config.backoff_max > 0
            else float("inf")
        )
        sleep_time = base_backoff

        attempt = 0
        while attempt < max_attempts:
            attempt += 1
            try:
                LOGGER.debug("Requesting %s (attempt %s/%s)", url, attempt, max_attempts)
                response = await self._client.get(url, headers=request_headers)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                if status_code == 404:
                    LOGGER.warning("Source document not found at %s", url)
                    raise SourceNotFoundError(str(exc)) from exc

                retryable_status = status_code >= 500 or status_code in {408, 429}
                if not (retryable_status and attempt < max_attempts):
                    LOGGER.error(
                        "HTTP %s for %s; response preview: %s",
                        status_code,
                        url,
                        exc.response.text[:500],
                    )
                    raise SourceClientError(f"HTTP {status_code} for {url}") from exc
                wait_time = min(sleep_time, backoff_ceiling)
                LOGGER.warning(
                    "HTTP %s for %s (attempt %s/%s). Retrying in %.1fs",
                    status_code,
                    url,
                    attempt,
                    max_attempts,
                    wait_time,
                )
                await asyncio.sleep(wait_time)
                sleep_time = self._next_backoff(sleep_time, base_backoff, backoff_ceiling)
            except httpx.RequestError as exc:
                if attempt >= max_attempts:
                    raise SourceClientError(f"Network error for {url}: {exc}") from exc
                wait_time = min(sleep_time, backoff_ceiling)
                LOGGER.warning(
                    "Network error for %s (attempt %s/%s): %s. Retrying in %.1fs",
                    url,
                    attempt,
                    max_attempts,
                    exc,
                    wait_time,
                )
                await asyncio.sleep(wait_time)
                sleep_time = self._next_backoff(sleep_time, base_backoff, backoff_ceiling)
            except ValueError as exc:
                raise SourceClientError(f"Response from {url} is not JSON") from exc

        raise SourceClientError(f"Failed to fetch {url} after {max_attempts} attempts")

    @staticmethod
    def _next_backoff(current: float, base: float, ceiling: float) -> float:
        next_value = max(current, base) * 2
        if ceiling > 0:
            next_value = min(next_value, ceiling)
        return max(next_value, base)
