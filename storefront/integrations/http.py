"""Shared aiohttp plumbing for the storefront backend endpoints."""
from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp

from storefront.core.exceptions import GatewayException


class ApiClient:
    """Base client holding one lazily created ``aiohttp`` session.

    A session passed in by the caller is shared and never closed here.
    """

    def __init__(self, base_url: str, session: aiohttp.ClientSession | None = None):
        self._base_url = (base_url or "").rstrip("/")
        self._session = session
        self._owns_session = session is None

    @property
    def base_url(self) -> str:
        return self._base_url

    def url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        payload: Any = None,
        timeout: float | None = None,
    ) -> str:
        """Send one request and return the raw body text.

        Raises:
            GatewayException: transport failure or a non-2xx status.
        """
        if not self._base_url:
            raise GatewayException(f"No API base URL configured for {path}")

        session = await self._get_session()
        kwargs: dict[str, Any] = {"headers": dict(headers or {})}
        if payload is not None:
            kwargs["json"] = payload
        if timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)

        try:
            async with session.request(method, self.url(path), **kwargs) as resp:
                if resp.status >= 400:
                    raise GatewayException(f"{method} {path} answered {resp.status}", status=resp.status)
                return await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise GatewayException(f"{method} {path} failed: {exc!r}") from exc

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        payload: Any = None,
        timeout: float | None = None,
    ) -> Any:
        """Like :meth:`request`, but decode the body as JSON.

        Raises:
            GatewayException: as :meth:`request`, or a body that is not JSON.
        """
        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)
        body = await self.request(method, path, headers=request_headers, payload=payload, timeout=timeout)

        if not body:
            return None
        try:
            return json.loads(body)
        except ValueError as exc:
            raise GatewayException(f"{method} {path} returned invalid JSON") from exc
