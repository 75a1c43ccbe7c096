# -*- coding: utf-8 -*-
"""
GitHub REST engine
Direct HTTPS calls with a bearer token over the shared httpx.AsyncClient.

- Headers: Authorization bearer, Accept, X-GitHub-Api-Version, User-Agent
- Non-2xx responses become HttpStatusError (status + body)
- Undecodable bodies become ParseError, transport failures TransportError

Security: never logs Authorization headers or tokens.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import httpx

from nativehub import __version__
from nativehub.core import log
from nativehub.github.engine import FetchEngine
from nativehub.github.errors import HttpStatusError, ParseError, TransportError

API_VERSION = "2022-11-28"
CLIENT_ID_HEADER = f"NativeHub/{__version__}"
DEFAULT_TIMEOUT_S = 30.0


class RestEngine(FetchEngine):
    """
    Fetch engine backed by api.github.com.

    The client is owned by the caller (normally the shared context) and is
    never closed here.
    """

    name = "rest"

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str,
        api_base: str = "https://api.github.com",
        user_agent: str = CLIENT_ID_HEADER,
    ):
        self._client = client
        self._token = token or ""
        self._api_base = api_base.rstrip("/")
        self._user_agent = user_agent or CLIENT_ID_HEADER

    def _headers(self, accept: str = "application/vnd.github+json") -> Dict[str, str]:
        headers = {
            "Accept": accept,
            "User-Agent": self._user_agent,
            "X-GitHub-Api-Version": API_VERSION,
        }
        if self._token:
            # Do NOT log or expose this header
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith("http://") or endpoint.startswith("https://"):
            return endpoint
        return f"{self._api_base}/{endpoint.lstrip('/')}"

    async def _send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method.upper(),
                url,
                headers=headers,
                params=params,
                json=body,
                timeout=DEFAULT_TIMEOUT_S,
            )
        except httpx.HTTPError as e:
            log.debug(f"GitHub API {method} {url} transport error: {e}")
            raise TransportError.from_exception(e) from e

        # Log status only (never logs Authorization)
        log.debug(f"GitHub API {method} {url} -> {response.status_code}")

        if not response.is_success:
            raise HttpStatusError.from_response(
                response.status_code, dict(response.headers), response.text
            )
        return response

    async def _request_json(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        response = await self._send(
            method, self._url(endpoint), self._headers(), params=params, body=body
        )
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError.from_exception("GitHub response", e, response.text) from e

    async def read_file(self, url: str) -> str:
        """Fetch raw file content from a download URL."""
        response = await self._send(
            "GET", self._url(url), self._headers(accept="application/vnd.github.raw")
        )
        try:
            return response.content.decode(response.encoding or "utf-8")
        except (UnicodeDecodeError, LookupError) as e:
            raise ParseError.from_exception("file content", e) from e
