# -*- coding: utf-8 -*-
"""
Token resolution for REST work units.

Priority: gh CLI session token, then a token committed by a login during this
session, then the persisted credential store entry, then whatever the shared
context was primed with at startup. The store can lag behind a login whose
write failed.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from nativehub.auth import config
from nativehub.auth.token_store import CredentialStore
from nativehub.core import log
from nativehub.core.context import SharedContext
from nativehub.github.errors import AuthError, ExternalToolError, ParseError
from nativehub.github.gh_cli import GhCli

SOURCE_GH_CLI = "gh"
SOURCE_STORE = "credential_store"
SOURCE_SESSION = "session"

NOT_AUTHENTICATED_MESSAGE = (
    "Not authenticated. Log in first (run 'gh auth login' or use the device login)."
)


class TokenResolver:
    """Resolve a bearer token for the REST engine."""

    def __init__(
        self,
        gh: GhCli,
        store: Optional[CredentialStore],
        context: SharedContext,
        namespace: str = config.CREDENTIAL_NAMESPACE,
        account: str = config.CREDENTIAL_ACCOUNT,
    ):
        self._gh = gh
        self._store = store
        self._context = context
        self._namespace = namespace
        self._account = account
        self.last_source: Optional[str] = None

    async def resolve(self) -> str:
        """
        Find a usable token.

        The credential store is not consulted once the gh CLI or a login
        committed during this session yields a token.

        Raises:
            AuthError: If no source yields a token
        """
        try:
            token = await self._gh.auth_token()
            self.last_source = SOURCE_GH_CLI
            return token
        except (ExternalToolError, ParseError) as e:
            log.debug(f"gh CLI token unavailable: {e}")

        token = self._context.login_token()
        if token:
            self.last_source = SOURCE_SESSION
            return token

        if self._store is not None:
            try:
                token = await asyncio.to_thread(
                    self._store.get, self._namespace, self._account
                )
            except (OSError, ValueError) as e:
                log.warning(f"Credential store lookup failed: {e}")
                token = None
            if token:
                self.last_source = SOURCE_STORE
                return token

        token = self._context.get_token()
        if token:
            self.last_source = SOURCE_SESSION
            return token

        self.last_source = None
        raise AuthError(NOT_AUTHENTICATED_MESSAGE)
