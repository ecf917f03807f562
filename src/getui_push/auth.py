"""
Session manager — owns the Getui auth token.

Acquires a token with a signed ``auth_sign`` call, renews it on a fixed
interval from a background asyncio task (revoke the old token, then sign for a
new one), and hands the current token to the dispatcher without blocking.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from getui_push.config import ApplicationCredentials, DEFAULT_RENEWAL_INTERVAL_S
from getui_push.endpoints import Operation, lookup
from getui_push.errors import AuthError, GetuiError
from getui_push.models.envelope import Envelope, TokenEnvelope
from getui_push.models.session import Credential, RenewalOutcome, SessionState, StalePolicy
from getui_push.signing import now_millis, sign
from getui_push.transport.envelope import check_envelope, decode_envelope
from getui_push.transport.http import HttpClient

logger = logging.getLogger(__name__)

RenewalHook = Callable[[RenewalOutcome], None]


class SessionManager:
    def __init__(
        self,
        http: HttpClient,
        credentials: ApplicationCredentials,
        renewal_interval: Optional[float] = None,
        *,
        stale_policy: StalePolicy = StalePolicy.KEEP,
        on_renewal: Optional[RenewalHook] = None,
    ):
        self._http = http
        self._credentials = credentials
        self._renewal_interval = renewal_interval or DEFAULT_RENEWAL_INTERVAL_S
        self._stale_policy = StalePolicy(stale_policy)
        self._on_renewal = on_renewal

        self._credential: Optional[Credential] = None
        self._stale = False
        self._state = SessionState.UNINITIALIZED
        self._last_renewed_at: Optional[datetime] = None
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def app_key(self) -> str:
        return self._credentials.app_key

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def renewal_interval(self) -> float:
        return self._renewal_interval

    @property
    def last_renewed_at(self) -> Optional[datetime]:
        return self._last_renewed_at

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def current_token(self) -> str:
        """Return the current token without waiting for an in-progress renewal."""
        credential = self._credential
        if credential is None:
            raise AuthError(f"No active auth token (session {self._state.value})", code="no_token")
        if self._stale and self._stale_policy is StalePolicy.FAIL:
            raise AuthError("Auth token renewal failed; stale token refused", code="stale_token")
        return credential.token

    async def initialize(self) -> None:
        """Acquire the first token and start the renewal loop. Failure here is fatal."""
        if self._state is not SessionState.UNINITIALIZED:
            raise AuthError(f"Session already initialized (state {self._state.value})")
        self._state = SessionState.ACQUIRING
        async with self._lock:
            try:
                self._credential = await self._acquire()
            except GetuiError:
                self._state = SessionState.FAILED
                raise
        self._last_renewed_at = self._credential.issued_at
        self._state = SessionState.ACTIVE
        logger.info("Getui auth token acquired for app %s", self._credentials.app_id)
        self.start()

    def start(self) -> None:
        """Start the background renewal task. Requires a running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._renewal_loop())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def renew(self) -> RenewalOutcome:
        """Revoke the held token (best effort), then acquire a new one.

        Never raises: the outcome is logged and passed to the ``on_renewal`` hook.
        """
        async with self._lock:
            self._state = SessionState.RENEWING
            revoked = False
            revoke_error: Optional[str] = None
            if self._credential is not None:
                try:
                    await self.revoke(self._credential.token)
                    revoked = True
                except GetuiError as e:
                    revoke_error = str(e)
                    logger.warning("Revoking Getui auth token before renewal failed: %s", e)
                except Exception as e:
                    revoke_error = repr(e)
                    logger.exception("Revoking Getui auth token before renewal failed")
            try:
                credential = await self._acquire()
            except Exception as e:
                self._stale = True
                self._state = SessionState.ACTIVE if self._credential else SessionState.FAILED
                if isinstance(e, GetuiError):
                    outcome = RenewalOutcome(ok=False, revoked=revoked, error=str(e))
                    logger.error("Getui auth token renewal failed: %s", e)
                else:
                    outcome = RenewalOutcome(ok=False, revoked=revoked, error=repr(e))
                    logger.exception("Getui auth token renewal failed")
            else:
                self._credential = credential
                self._stale = False
                self._last_renewed_at = credential.issued_at
                self._state = SessionState.ACTIVE
                outcome = RenewalOutcome(ok=True, token_rotated=True, revoked=revoked, error=revoke_error)
                logger.info("Getui auth token renewed")
        self._notify(outcome)
        return outcome

    async def invalidate(self) -> Envelope:
        """Revoke the current token remotely and forget it."""
        async with self._lock:
            if self._credential is None:
                raise AuthError("No auth token to close", code="no_token")
            envelope = await self.revoke(self._credential.token)
            self._credential = None
            return envelope

    async def close(self, invalidate: bool = True) -> None:
        """Stop renewing and optionally revoke the token. Revocation errors are logged."""
        await self.stop()
        if invalidate and self._credential is not None:
            try:
                await self.invalidate()
            except GetuiError as e:
                logger.warning("Closing Getui auth token failed: %s", e)
        self._credential = None
        self._state = SessionState.CLOSED

    async def _renewal_loop(self) -> None:
        while True:
            await asyncio.sleep(self._renewal_interval)
            await self.renew()

    async def _acquire(self) -> Credential:
        timestamp = now_millis()
        body = {
            "appkey": self._credentials.app_key,
            "timestamp": str(timestamp),
            "sign": sign(self._credentials.app_key, self._credentials.master_secret, timestamp),
        }
        endpoint = lookup(Operation.AUTH_SIGN)
        resp = await self._http.send(endpoint.method, endpoint.render(), body, headers=self._http.headers())
        envelope = decode_envelope(resp, TokenEnvelope)
        if not envelope.ok or not envelope.auth_token:
            raise AuthError(
                f"Failed to acquire auth token: {envelope.desc or envelope.result}",
                details=envelope.model_dump(exclude_none=True),
            )
        return Credential(
            token=envelope.auth_token,
            issued_at=datetime.now(timezone.utc),
            expire_time=envelope.expire_time,
        )

    async def revoke(self, token: str) -> Envelope:
        """Revoke ``token`` remotely. The held credential is left untouched."""
        endpoint = lookup(Operation.AUTH_CLOSE)
        resp = await self._http.send(endpoint.method, endpoint.render(), headers=self._http.headers(token))
        return check_envelope(decode_envelope(resp))

    def _notify(self, outcome: RenewalOutcome) -> None:
        if self._on_renewal is None:
            return
        try:
            self._on_renewal(outcome)
        except Exception:
            logger.exception("on_renewal hook raised")
