# -*- coding: utf-8 -*-
"""
NativeHub Authentication Flow Controller

Strategy 1: reuse the token of a pre-authenticated gh CLI session.
Strategy 2: OAuth device flow (requires GITHUB_CLIENT_ID).

On success the token is committed to the shared context (generation checked)
and persisted to the credential store, then AuthSucceeded is emitted.
Failures propagate as NativeHubError subclasses; the work unit running the
controller turns them into a single Failed event.
"""

from __future__ import annotations

import asyncio
import enum
from typing import Callable, Optional, Sequence

from nativehub.auth import config
from nativehub.auth.oauth_device_flow import (
    Sleeper,
    poll_for_token,
    request_device_code,
)
from nativehub.auth.token_store import CredentialStore
from nativehub.core import log
from nativehub.core.context import SharedContext
from nativehub.core.events import AuthSucceeded, DeviceCodeIssued, Event, LogLine
from nativehub.github.errors import AuthError, ExternalToolError, NativeHubError, ParseError
from nativehub.github.gh_cli import GhCli

Emit = Callable[[Event], None]

MISSING_CLIENT_ID_MESSAGE = (
    "GITHUB_CLIENT_ID environment variable not set. "
    "Please set it to your GitHub OAuth App Client ID."
)


class AuthState(enum.Enum):
    IDLE = "idle"
    PROBING_LOCAL_CREDENTIAL = "probing_local_credential"
    REQUESTING_DEVICE_CODE = "requesting_device_code"
    AWAITING_AUTHORIZATION = "awaiting_authorization"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class AuthFlowController:
    """
    Orchestrates credential discovery, the device flow, and persistence.

    The only component that writes the shared context token.
    """

    def __init__(
        self,
        context: SharedContext,
        gh: GhCli,
        store: Optional[CredentialStore],
        client_id_loader: Callable[[], Optional[str]] = config.get_client_id,
        scopes: Sequence[str] = tuple(config.DEFAULT_SCOPES),
        device_code_url: str = config.DEVICE_CODE_URL,
        token_url: str = config.TOKEN_URL,
        sleep: Optional[Sleeper] = None,
    ):
        self._context = context
        self._gh = gh
        self._store = store
        self._client_id_loader = client_id_loader
        self._scopes = scopes
        self._device_code_url = device_code_url
        self._token_url = token_url
        self._sleep = sleep
        self._state = AuthState.IDLE
        self._persist_lock: Optional[asyncio.Lock] = None

    @property
    def state(self) -> AuthState:
        return self._state

    def _set_state(self, state: AuthState) -> None:
        log.debug(f"Auth state {self._state.value} -> {state.value}")
        self._state = state

    async def login(self, emit: Emit) -> str:
        """
        Run one login attempt.

        Returns:
            str: The token that was committed

        Raises:
            AuthError: Missing client id, terminal OAuth code, superseded attempt
            TransportError, HttpStatusError, ParseError: device flow failures
        """
        generation = self._context.begin_login()
        try:
            token = await self._probe_local_credential(emit)
            if token is None:
                token = await self._device_flow(emit)
            await self._persist(token, generation, emit)
        except NativeHubError:
            self._set_state(AuthState.FAILED)
            raise
        except asyncio.CancelledError:
            self._set_state(AuthState.IDLE)
            raise

        self._set_state(AuthState.AUTHENTICATED)
        emit(AuthSucceeded(token))
        return token

    async def _probe_local_credential(self, emit: Emit) -> Optional[str]:
        self._set_state(AuthState.PROBING_LOCAL_CREDENTIAL)
        emit(LogLine("SCANNING FOR GH CLI..."))

        try:
            token = await self._gh.auth_token()
        except (ExternalToolError, ParseError) as e:
            emit(LogLine(f"GH CLI not available: {e}"))
            emit(LogLine("FALLING BACK TO OAUTH DEVICE FLOW..."))
            return None

        emit(LogLine("GH CLI TOKEN FOUND!"))
        return token

    async def _device_flow(self, emit: Emit) -> str:
        emit(LogLine("EXECUTING PROTOCOL: OAUTH_DEVICE_FLOW"))

        client_id = self._client_id_loader()
        if not client_id:
            raise AuthError(MISSING_CLIENT_ID_MESSAGE, error_code="missing_client_id")

        self._set_state(AuthState.REQUESTING_DEVICE_CODE)
        client = self._context.http_client
        code = await request_device_code(
            client, client_id, self._scopes, self._device_code_url
        )
        emit(LogLine("DEVICE CODE RECEIVED."))
        emit(DeviceCodeIssued(code))

        self._set_state(AuthState.AWAITING_AUTHORIZATION)
        emit(LogLine("POLLING FOR TOKEN..."))
        try:
            granted = await poll_for_token(
                client,
                client_id,
                code.device_code,
                code.interval,
                token_url=self._token_url,
                sleep=self._sleep,
            )
        except NativeHubError:
            emit(LogLine("ABORTING OAUTH FLOW."))
            raise

        emit(LogLine("ACCESS TOKEN ACQUIRED."))
        return granted.access_token

    async def _persist(self, token: str, generation: int, emit: Emit) -> None:
        if self._persist_lock is None:
            self._persist_lock = asyncio.Lock()

        async with self._persist_lock:
            if not self._context.commit_token(token, generation):
                raise AuthError(
                    "Login attempt superseded by a newer successful login",
                    error_code="superseded",
                )

            # Commit is the point of no return: a Cancel from here on is
            # absorbed and the login still completes.
            write = asyncio.ensure_future(self._store_token(token, emit))
            while not write.done():
                try:
                    await asyncio.shield(write)
                except asyncio.CancelledError:
                    log.info("Cancel after token commit ignored; finishing login")
            write.result()

    async def _store_token(self, token: str, emit: Emit) -> None:
        if self._store is None:
            emit(LogLine("NO CREDENTIAL STORE. TOKEN KEPT FOR THIS SESSION ONLY."))
            return

        try:
            await asyncio.to_thread(
                self._store.set,
                config.CREDENTIAL_NAMESPACE,
                config.CREDENTIAL_ACCOUNT,
                token,
            )
        except OSError as e:
            log.warning(f"Token not persisted: {e}")
            emit(LogLine(f"TOKEN NOT PERSISTED: {e}"))
            return

        emit(LogLine("TOKEN ENCRYPTED & STORED."))
