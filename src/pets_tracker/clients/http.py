# -*- coding: utf-8 -*-
"""Async HTTP client with short retries and rate-limit detection."""

from __future__ import annotations

import asyncio
import random
import uuid
import aiohttp
import structlog
from typing import Any, Callable, Dict, Optional
from structlog.contextvars import bound_contextvars

from pets_tracker.config import Settings
from pets_tracker.exceptions import RateLimited, TransientNetworkError


def _retry_after_seconds(response: aiohttp.ClientResponse) -> Optional[float]:
    header = response.headers.get("Retry-After")
    if not header:
        return None
    try:
        return float(header)
    except ValueError:
        return None


class AsyncHttpClient:
    """Async HTTP client shared by chain RPC and price clients.

    Connection errors, timeouts and 5xx responses are retried a few times with
    a short jittered backoff. HTTP 429 is not retried here: it is raised as
    RateLimited right away so the poll scheduler can apply its longer backoff.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        sleep: Callable[[float], Any] = asyncio.sleep,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Pass a shared ``session`` to reuse a pool; otherwise one is created lazily
        and closed by aclose(). ``sleep`` is awaited between retries.
        """
        self._settings = settings
        self._session = session
        self._owns_session = session is None
        self._sleep = sleep
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._settings.api.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def aclose(self) -> None:
        """Close the session if this client owns it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    @staticmethod
    def _backoff_delay(attempt: int) -> float:
        """Short jittered delay between in-call retries (0.25s doubling, at most 4s)."""
        return min(4.0, 0.25 * 2**attempt) + random.uniform(0.0, 0.15)

    async def get(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        """Perform a GET request and return parsed JSON.

        Raises:
            RateLimited: On HTTP 429.
            TransientNetworkError: If the request fails after all retries.
        """
        return await self._request("GET", url, params=params or {})

    async def post(self, url: str, *, json: Optional[Dict[str, Any]] = None) -> Any:
        """Perform a POST request with a JSON body and return parsed JSON.

        Raises:
            RateLimited: On HTTP 429.
            TransientNetworkError: If the request fails after all retries.
        """
        return await self._request("POST", url, json=json or {})

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        request_id = uuid.uuid4().hex[:12]
        max_retries = self._settings.api.max_retries
        last_error: Optional[Exception] = None
        event_prefix = f"http_{method.lower()}"

        with bound_contextvars(
            http_method=method,
            http_url=url,
            http_request_id=request_id,
            http_max_retries=max_retries,
        ):
            for attempt in range(max_retries):
                with bound_contextvars(http_attempt=attempt + 1):
                    try:
                        session = await self._get_session()
                        async with session.request(
                            method, url, params=params, json=json
                        ) as response:
                            if response.status == 429:
                                retry_after = _retry_after_seconds(response)
                                self._logger.warning(
                                    f"{event_prefix}_rate_limited",
                                    http_status_code=429,
                                    http_retry_after_seconds=retry_after,
                                )
                                raise RateLimited(url=url, retry_after=retry_after)
                            if 400 <= response.status < 500:
                                raise TransientNetworkError(
                                    f"{method} {url} returned {response.status}",
                                    url=url,
                                    status_code=response.status,
                                )
                            response.raise_for_status()
                            return await response.json(content_type=None)
                    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                        last_error = e
                        self._logger.debug(
                            f"{event_prefix}_retry",
                            error_type=type(e).__name__,
                            error_message=str(e),
                            http_status_code=getattr(e, "status", None),
                        )
                        if attempt + 1 < max_retries:
                            await self._sleep(self._backoff_delay(attempt))

            status_code = (
                getattr(last_error, "status", None)
                if isinstance(last_error, aiohttp.ClientResponseError)
                else None
            )
            self._logger.warning(
                f"{event_prefix}_failed",
                http_status_code=status_code,
                http_attempts=max_retries,
                error_type=type(last_error).__name__ if last_error else None,
                error_message=str(last_error) if last_error else None,
            )
            raise TransientNetworkError(
                f"{method} failed after {max_retries} attempts: {url}",
                url=url,
                status_code=status_code,
                cause=last_error,
            ) from last_error
