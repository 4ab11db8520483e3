"""
Spotify client credentials and access token lifecycle.

Authentication:
    The resolver uses the Client Credentials flow only: client_id and
    client_secret are exchanged for a bearer token at the accounts
    endpoint. This grants access to public track, album and playlist
    metadata, which is all the resolver reads.

Renewal:
    TokenManager.start() performs the first renewal, then runs a background
    task that sleeps for the token lifetime Spotify reported and renews
    again, for as long as the process runs. stop() cancels that task.

    The token is a single string attribute replaced wholesale on each
    renewal. Readers never see a partial value, so no lock is needed; a
    request that straddles a renewal simply uses the new token for its
    later HTTP calls.

Usage:
    credentials = Credentials(client_id, client_secret)
    tokens = TokenManager(credentials, session)
    await tokens.start()

    headers = {"Authorization": tokens.current_token}
    ...
    await tokens.stop()
"""

import asyncio
import base64
from dataclasses import dataclass, field
from enum import Enum

import aiohttp

from spot_resolver.core.exceptions import AuthError
from spot_resolver.core.http import request_json
from spot_resolver.core.logger import get_logger

logger = get_logger(__name__)


TOKEN_URL = "https://accounts.spotify.com/api/token"


@dataclass(frozen=True)
class Credentials:
    """
    Spotify application credentials.

    Attributes:
        client_id: The Spotify application client ID.
        client_secret: The Spotify application client secret.
        basic_auth_header: base64("client_id:client_secret"), derived once.
    """
    client_id: str
    client_secret: str
    basic_auth_header: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        encoded = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode("utf-8")).decode("ascii")
        object.__setattr__(self, "basic_auth_header", encoded)


class TokenState(Enum):
    """Lifecycle state of the access token."""

    UNINITIALIZED = "uninitialized"
    RENEWING = "renewing"
    VALID = "valid"
    FAILED = "failed"


class TokenManager:
    """
    Exchanges client credentials for bearer tokens and keeps them fresh.

    Attributes:
        _credentials: Credentials used for every renewal.
        _session: aiohttp session used for the token request.
        _token: Current "Bearer <access_token>" value ("" until the first renewal).
        _task: Background renewal task, None when not running.
        _stop_event: Set by stop() to end the renewal loop.
    """

    def __init__(
        self,
        credentials: Credentials,
        session: aiohttp.ClientSession,
        token_url: str = TOKEN_URL,
        retries: int = 0,
        retry_delay: float = 5.0
    ) -> None:
        self._credentials = credentials
        self._session = session
        self._token_url = token_url
        self._retries = retries
        self._retry_delay = retry_delay
        self._token = ""
        self._state = TokenState.UNINITIALIZED
        self._next_renewal_in_ms: int | None = None
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._start_lock = asyncio.Lock()

    @property
    def current_token(self) -> str:
        """Authorization header value for catalog requests."""
        return self._token

    @property
    def state(self) -> TokenState:
        return self._state

    @property
    def next_renewal_in_ms(self) -> int | None:
        """Delay until the next scheduled renewal, None if none is scheduled."""
        return self._next_renewal_in_ms

    @property
    def is_running(self) -> bool:
        """Check if the renewal loop is running."""
        return self._task is not None and not self._task.done()

    async def renew(self) -> int:
        """
        Request a new access token.

        Returns:
            Token lifetime in milliseconds (expires_in * 1000).

        Raises:
            AuthError: If the response contains no access_token
                       (e.g. invalid client credentials) or no positive
                       expires_in.
            TransportError: If the token endpoint could not be reached.

        Behavior:
            On success the current token is replaced by "Bearer <access_token>".
            On failure the previous token is left untouched.
        """
        previous_state = self._state
        self._state = TokenState.RENEWING

        try:
            status, payload = await request_json(
                self._session,
                "POST",
                self._token_url,
                headers={
                    "Authorization": f"Basic {self._credentials.basic_auth_header}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                data="grant_type=client_credentials",
                raise_for_status=False,
            )
        except Exception:
            self._state = previous_state
            raise

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            self._state = previous_state
            raise AuthError(
                "Invalid Spotify client.",
                details={"status": status, "response": payload}
            )

        expires_in = payload.get("expires_in")
        if not isinstance(expires_in, (int, float)) or isinstance(expires_in, bool) or expires_in * 1000 < 1:
            self._state = previous_state
            raise AuthError(
                "Invalid Spotify token lifetime.",
                details={"status": status, "expires_in": expires_in}
            )

        self._token = f"Bearer {access_token}"
        self._state = TokenState.VALID

        expires_in_ms = int(expires_in * 1000)
        logger.info(f"Spotify token renewed, valid for {expires_in}s")
        return expires_in_ms

    async def start(self) -> None:
        """
        Perform the first renewal and start the renewal loop.

        Raises:
            AuthError: If the first renewal is rejected. The loop is not
                       started in that case.
            TransportError: If the token endpoint could not be reached.
        """
        async with self._start_lock:
            if self.is_running:
                return

            expires_in_ms = await self.renew()
            self._stop_event.clear()
            self._next_renewal_in_ms = expires_in_ms
            self._task = asyncio.create_task(self._run_loop(expires_in_ms))
            logger.debug("Token renewal loop started")

    async def stop(self) -> None:
        """Cancel the renewal loop. Safe to call when not running."""
        if self._task is None:
            return
        self._stop_event.set()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self._next_renewal_in_ms = None
        logger.debug("Token renewal loop stopped")

    async def _run_loop(self, delay_ms: int) -> None:
        """Wait for the token lifetime, renew, repeat until stopped."""
        while not self._stop_event.is_set():
            self._next_renewal_in_ms = delay_ms
            if await self._wait(delay_ms / 1000):
                break

            try:
                delay_ms = await self._renew_with_retries()
            except Exception as e:
                self._state = TokenState.FAILED
                self._next_renewal_in_ms = None
                logger.error(f"Spotify token renewal failed, renewal loop stopped: {e}")
                return

    async def _renew_with_retries(self) -> int:
        """Renew, retrying up to the configured number of extra attempts."""
        attempt = 0
        while True:
            try:
                return await self.renew()
            except Exception as e:
                if attempt >= self._retries:
                    raise
                attempt += 1
                logger.warning(
                    f"Spotify token renewal failed ({e}), "
                    f"retry {attempt}/{self._retries} in {self._retry_delay}s"
                )
                if await self._wait(self._retry_delay):
                    raise

    async def _wait(self, seconds: float) -> bool:
        """Sleep for the given time. Returns True if stop() was requested."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
            return True
        except asyncio.TimeoutError:
            return False
