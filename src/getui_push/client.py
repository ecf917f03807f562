"""
GetuiClient / AsyncGetuiClient — main SDK clients.
"""

import asyncio
import threading
from typing import Any, Optional

import httpx

from getui_push.auth import RenewalHook, SessionManager
from getui_push.config import ApplicationCredentials, ClientConfig
from getui_push.dispatcher import RequestDispatcher
from getui_push.errors import AuthError
from getui_push.models.envelope import Envelope, UserStatus
from getui_push.models.push import AppPush, ListPush, SinglePush
from getui_push.models.session import SessionState, StalePolicy
from getui_push.transport.http import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, HttpClient


class AsyncGetuiClient:
    """Async Getui push client (primary). Each instance owns its own session."""

    def __init__(
        self,
        app_id: str,
        app_key: str,
        master_secret: str,
        app_secret: Optional[str] = None,
        *,
        renewal_interval: Optional[float] = None,
        stale_policy: StalePolicy = StalePolicy.KEEP,
        on_renewal: Optional[RenewalHook] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = ApplicationCredentials(
            app_id=app_id, app_key=app_key, master_secret=master_secret, app_secret=app_secret,
        )
        self.http = HttpClient(app_id, base_url=base_url, timeout=timeout, transport=transport)
        self.session = SessionManager(
            self.http, self.credentials, renewal_interval,
            stale_policy=stale_policy, on_renewal=on_renewal,
        )
        self.dispatcher = RequestDispatcher(self.http, self.session)

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "AsyncGetuiClient":
        creds = config.credentials
        return cls(
            creds.app_id, creds.app_key, creds.master_secret, creds.app_secret,
            renewal_interval=config.renewal_interval,
            stale_policy=config.stale_policy,
            base_url=config.base_url,
            timeout=config.timeout,
            **kwargs,
        )

    @property
    def started(self) -> bool:
        return self.session.state in (SessionState.ACTIVE, SessionState.RENEWING)

    @property
    def auth_token(self) -> str:
        return self.session.current_token()

    async def start(self) -> None:
        """Acquire the auth token and start background renewal."""
        try:
            await self.session.initialize()
        except Exception:
            await self.http.close()
            raise

    async def close(self, close_auth: bool = True) -> None:
        """Stop renewal, revoke the token (unless ``close_auth`` is false) and release the HTTP pool."""
        if self.session.state is not SessionState.CLOSED:
            await self.session.close(invalidate=close_auth)
        await self.http.close()

    async def __aenter__(self) -> "AsyncGetuiClient":
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close_auth(self) -> Envelope:
        """Revoke the current token. Later calls fail until the next renewal."""
        return await self.session.invalidate()

    async def push_to_single(self, body: SinglePush, timeout: Optional[float] = None) -> Envelope:
        return await self.dispatcher.push_to_single(body, timeout=timeout)

    async def push_to_list(self, body: ListPush, timeout: Optional[float] = None) -> Envelope:
        return await self.dispatcher.push_to_list(body, timeout=timeout)

    async def push_to_app(self, body: AppPush, timeout: Optional[float] = None) -> Envelope:
        return await self.dispatcher.push_to_app(body, timeout=timeout)

    async def stop_task(self, task_id: str, timeout: Optional[float] = None) -> Envelope:
        return await self.dispatcher.stop_task(task_id, timeout=timeout)

    async def user_status(self, cid: str, timeout: Optional[float] = None) -> UserStatus:
        return await self.dispatcher.user_status(cid, timeout=timeout)

    async def user_exists(self, cid: str, timeout: Optional[float] = None) -> bool:
        return await self.dispatcher.user_exists(cid, timeout=timeout)


class GetuiClient:
    """Sync wrapper around AsyncGetuiClient.

    Runs a private event loop on a daemon thread so token renewal keeps
    ticking between blocking calls.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, name="getui-push-loop", daemon=True)
        self._thread.start()
        try:
            self._async = self._run(self._create(*args, **kwargs))
        except BaseException:
            self._shutdown()
            raise

    def _shutdown(self) -> None:
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop.close()

    @staticmethod
    async def _create(*args: Any, **kwargs: Any) -> AsyncGetuiClient:
        return AsyncGetuiClient(*args, **kwargs)

    def _run(self, coro: Any) -> Any:
        if self._loop.is_closed():
            coro.close()
            raise AuthError("Client is closed", code="closed")
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    @property
    def aio(self) -> AsyncGetuiClient:
        return self._async

    @property
    def auth_token(self) -> str:
        return self._async.auth_token

    def start(self) -> None:
        self._run(self._async.start())

    def close(self, close_auth: bool = True) -> None:
        if self._loop.is_closed():
            return
        try:
            self._run(self._async.close(close_auth=close_auth))
        finally:
            self._shutdown()

    def __enter__(self) -> "GetuiClient":
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close_auth(self) -> Envelope:
        return self._run(self._async.close_auth())

    def push_to_single(self, body: SinglePush, timeout: Optional[float] = None) -> Envelope:
        return self._run(self._async.push_to_single(body, timeout=timeout))

    def push_to_list(self, body: ListPush, timeout: Optional[float] = None) -> Envelope:
        return self._run(self._async.push_to_list(body, timeout=timeout))

    def push_to_app(self, body: AppPush, timeout: Optional[float] = None) -> Envelope:
        return self._run(self._async.push_to_app(body, timeout=timeout))

    def stop_task(self, task_id: str, timeout: Optional[float] = None) -> Envelope:
        return self._run(self._async.stop_task(task_id, timeout=timeout))

    def user_status(self, cid: str, timeout: Optional[float] = None) -> UserStatus:
        return self._run(self._async.user_status(cid, timeout=timeout))

    def user_exists(self, cid: str, timeout: Optional[float] = None) -> bool:
        return self._run(self._async.user_exists(cid, timeout=timeout))
