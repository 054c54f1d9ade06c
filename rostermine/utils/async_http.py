"""Async HTTP client utilities."""

import asyncio
import json
import logging
import aiohttp
from typing import Optional, Dict, Any

from ..errors import NetworkError, RetryExhaustedError

logger = logging.getLogger(__name__)


class AsyncHTTPClient:
    """Reusable async HTTP client with a bounded retry policy.

    Connection errors, timeouts and 5xx responses are retried up to
    ``retries`` times in total, sleeping ``backoff * 2 ** attempt`` seconds
    between attempts. Other HTTP errors are raised straight away.
    """

    def __init__(self, headers: Optional[Dict[str, str]] = None, retries: int = 5,
                 backoff: float = 0.5, timeout: float = 30.0):
        self.default_headers = headers or {}
        self.retries = max(1, retries)
        self.backoff = backoff
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(headers=self.default_headers, timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def _request(self, url: str, headers: Optional[Dict[str, str]] = None) -> bytes:
        """Single GET attempt."""
        if not self.session or self.session.closed:
            self.session = aiohttp.ClientSession(headers=self.default_headers, timeout=self.timeout)
        async with self.session.get(url, headers=headers) as resp:
            resp.raise_for_status()
            return await resp.read()

    async def get_bytes(self, url: str, headers: Optional[Dict[str, str]] = None) -> bytes:
        """GET request body, retried on transient failures."""
        last_error: Optional[BaseException] = None
        for attempt in range(self.retries):
            try:
                return await self._request(url, headers)
            except aiohttp.ClientResponseError as e:
                if e.status < 500:
                    raise NetworkError(f"GET {url} returned {e.status}: {e.message}") from e
                last_error = e
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = e

            logger.debug(f"GET {url} failed ({last_error!r}), attempt {attempt + 1}/{self.retries}")
            if attempt < self.retries - 1:
                await asyncio.sleep(self.backoff * 2 ** attempt)

        raise RetryExhaustedError(url, self.retries, last_error)

    async def get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        return (await self.get_bytes(url, headers)).decode('utf-8')

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """GET request."""
        return json.loads(await self.get_text(url, headers))
