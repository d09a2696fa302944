"""HTTP adapter for backend handshake calls."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import HandshakeError

logger = logging.getLogger(__name__)


class HTTPAPIClient:
    """
    HTTP client adapter for JSON API calls.

    Implements IAPIClient protocol. GET requests are retried on 5xx and
    network errors up to ``max_retries`` attempts; POST requests are sent once.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60,
        token: Optional[str] = None,
        max_retries: int = 1,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url
        self._timeout = timeout
        self._token = token
        self._max_retries = max(1, max_retries)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")
        return self._client

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        client = self._require_client()
        last_exception: Optional[Exception] = None

        for attempt in range(self._max_retries):
            try:
                response = await client.get(endpoint, params=params)
            except httpx.RequestError as exc:
                last_exception = exc
                if attempt < self._max_retries - 1:
                    logger.debug("GET %s failed (%s), retrying", endpoint, exc)
                    await asyncio.sleep(0.5 * (attempt + 1))
                    continue
                raise HandshakeError(
                    f"Network error on GET {endpoint}: {exc}", endpoint=endpoint
                ) from exc

            if response.status_code >= 500 and attempt < self._max_retries - 1:
                logger.debug("GET %s returned %s, retrying", endpoint, response.status_code)
                await asyncio.sleep(0.5 * (attempt + 1))
                continue

            return self._check(response, "GET", endpoint)

        raise HandshakeError(
            f"Failed to GET {endpoint} after {self._max_retries} attempts: {last_exception}",
            endpoint=endpoint,
        )

    async def post(
        self,
        endpoint: str,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
    ) -> httpx.Response:
        client = self._require_client()
        try:
            response = await client.post(endpoint, json=json, files=files, timeout=timeout)
        except httpx.RequestError as exc:
            raise HandshakeError(
                f"Network error on POST {endpoint}: {exc}", endpoint=endpoint
            ) from exc
        return self._check(response, "POST", endpoint)

    @staticmethod
    def _check(response: httpx.Response, method: str, endpoint: str) -> httpx.Response:
        if response.status_code >= 400:
            try:
                error_detail = response.json()
            except ValueError:
                error_detail = response.text
            raise HandshakeError(
                f"API error {response.status_code} on {method} {endpoint}: {error_detail}",
                endpoint=endpoint,
                status_code=response.status_code,
                details={"body": error_detail},
            )
        return response
