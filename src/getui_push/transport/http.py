"""
REST HTTP client for the Getui push API.

Every path is relative to ``{base_url}/{app_id}/``. The credential travels in
the ``authtoken`` header, not ``Authorization``.
"""

import logging
from typing import Any, Optional

import httpx

from getui_push.errors import TransportError

DEFAULT_BASE_URL = "https://restapi.getui.com/v1"
DEFAULT_TIMEOUT = 30.0
TOKEN_HEADER = "authtoken"

logger = logging.getLogger(__name__)


class HttpClient:
    def __init__(
        self,
        app_id: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/{app_id}/",
            headers={"User-Agent": "getui-push/0.1.0", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @staticmethod
    def headers(token: Optional[str] = None) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if token:
            headers[TOKEN_HEADER] = token
        return headers

    async def send(
        self,
        method: str,
        path: str,
        body: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send one request. Transport failures become TransportError; HTTP status is left to the caller."""
        kwargs: dict[str, Any] = {"headers": headers or self.headers()}
        if body is not None:
            kwargs["json"] = body
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}", cause=e) from e
        logger.debug("%s %s -> HTTP %s", method, path, resp.status_code)
        return resp

    async def close(self) -> None:
        await self._client.aclose()
