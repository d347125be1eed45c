"""
HTTP client utilities for swiftfs
"""

import asyncio
from typing import Any, Dict, Optional

import httpx


class HttpClient:
    """
    HTTP client wrapper with connection pooling and retry logic.
    """

    def __init__(
        self,
        timeout: int = 30,
        max_retries: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=100),
            transport=transport,
        )

    async def get(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs
    ) -> httpx.Response:
        """Make a GET request with retry logic."""
        return await self._request("GET", url, headers=headers, **kwargs)

    async def put(
        self,
        url: str,
        content: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs
    ) -> httpx.Response:
        """Make a PUT request with retry logic."""
        return await self._request("PUT", url, content=content, headers=headers, **kwargs)

    async def delete(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs
    ) -> httpx.Response:
        """Make a DELETE request with retry logic."""
        return await self._request("DELETE", url, headers=headers, **kwargs)

    async def post(
        self,
        url: str,
        content: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs
    ) -> httpx.Response:
        """Make a POST request with retry logic."""
        return await self._request("POST", url, content=content, headers=headers, **kwargs)

    async def head(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs
    ) -> httpx.Response:
        """Make a HEAD request with retry logic."""
        return await self._request("HEAD", url, headers=headers, **kwargs)

    async def _request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        retry: bool = True,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with exponential backoff retry logic.

        Streamed bodies can only be sent once, so callers pass
        ``retry=False`` for them.
        """
        attempts = max(self.max_retries, 1) if retry else 1
        for attempt in range(attempts):
            try:
                response = await self._client.request(method, url, headers=headers, **kwargs)
                return response
            except httpx.RequestError:
                if attempt < attempts - 1:
                    wait_time = min(1000 * (2 ** attempt), 10000) / 1000
                    await asyncio.sleep(wait_time)
                else:
                    raise

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
