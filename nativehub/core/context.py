# -*- coding: utf-8 -*-
"""
NativeHub Shared Context
Process-wide state handed to every work unit: the reusable HTTP client and
the current bearer token.

The token is the only field mutated after construction. Writes go through
``commit_token`` with the generation obtained from ``begin_login`` so that a
login attempt that started earlier can never overwrite the token of one that
started later.
"""

from __future__ import annotations

import threading
from typing import Optional

import httpx

from nativehub import __version__
from nativehub.core import log

USER_AGENT = f"NativeHub/{__version__}"


def create_http_client() -> httpx.AsyncClient:
    """Create the shared async HTTP client (one per process)."""
    return httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT},
        timeout=httpx.Timeout(30.0, connect=10.0),
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        follow_redirects=True,
    )


class SharedContext:
    """
    Shared HTTP client plus a lock-protected optional token.

    Readers may be any thread; only the authentication controller writes.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self._http_client = http_client or create_http_client()
        self._lock = threading.RLock()
        self._token: Optional[str] = None
        self._next_generation = 0
        self._committed_generation = -1

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http_client

    def get_token(self) -> Optional[str]:
        with self._lock:
            return self._token

    def login_token(self) -> Optional[str]:
        """Token committed by a login in this session, if any."""
        with self._lock:
            if self._committed_generation < 0:
                return None
            return self._token

    @property
    def is_authenticated(self) -> bool:
        return self.get_token() is not None

    def begin_login(self) -> int:
        """
        Reserve a generation number for a new login attempt.

        Returns:
            int: Generation to pass to commit_token()
        """
        with self._lock:
            generation = self._next_generation
            self._next_generation += 1
            return generation

    def commit_token(self, token: str, generation: int) -> bool:
        """
        Store ``token`` unless a newer login attempt already committed.

        Args:
            token: Bearer token
            generation: Value returned by begin_login() for this attempt

        Returns:
            bool: True if the token is now the active one
        """
        with self._lock:
            if generation < self._committed_generation:
                log.warning(
                    f"Discarding token from stale login attempt {generation} "
                    f"(attempt {self._committed_generation} already succeeded)"
                )
                return False
            self._token = token
            self._committed_generation = generation
            return True

    def load_initial_token(self, token: str) -> bool:
        """
        Prime the token at startup (e.g. from the credential store).

        Ignored once any login attempt has committed.
        """
        with self._lock:
            if self._committed_generation >= 0 or self._token is not None:
                return False
            self._token = token
            return True

    def clear_token(self) -> None:
        with self._lock:
            self._token = None

    async def aclose(self) -> None:
        """Close the shared HTTP client."""
        if not self._http_client.is_closed:
            await self._http_client.aclose()
