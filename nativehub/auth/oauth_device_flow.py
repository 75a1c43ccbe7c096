# -*- coding: utf-8 -*-
"""
NativeHub OAuth Device Flow Client

Implements the OAuth Device Authorization Grant (RFC 8628) against GitHub
on top of an httpx.AsyncClient.

Poll responses are decoded into an explicit tagged result: ``TokenGranted``
is tried first, then ``PollError``; anything else is a ParseError.

Expiry is passive: the poll loop runs until GitHub answers with a success or
a terminal error code (``expired_token`` included). There is no client-side
deadline derived from ``expires_in``.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

import httpx

from nativehub.auth import config
from nativehub.core import log
from nativehub.github.errors import AuthError, HttpStatusError, ParseError, TransportError

PENDING = "authorization_pending"
SLOW_DOWN = "slow_down"
EXPIRED_TOKEN = "expired_token"
ACCESS_DENIED = "access_denied"

REQUEST_TIMEOUT_S = 10.0

_TERMINAL_MESSAGES = {
    EXPIRED_TOKEN: "Device code expired",
    ACCESS_DENIED: "User denied access",
}


class DeviceFlowError(AuthError):
    """
    Terminal OAuth device flow failure.

    Attributes:
        error_code: str - OAuth error code (e.g., "access_denied")
        error_description: str - Human-readable error description
    """

    def __init__(self, error_code: str, error_description: str = ""):
        self.error_description = error_description
        message = _TERMINAL_MESSAGES.get(error_code, f"Auth error: {error_code}")
        if error_description:
            message += f" ({error_description})"
        super().__init__(message, error_code=error_code, details=error_description)


@dataclass(frozen=True)
class DeviceCodeResponse:
    """
    Response from GitHub's device code endpoint.

    Attributes:
        device_code: str - Code used by the client to poll for a token
        user_code: str - Short code the user enters on github.com
        verification_uri: str - URL the user visits to enter the code
        expires_in: int - Seconds until device_code expires
        interval: int - Minimum seconds to wait between polls
    """

    device_code: str
    user_code: str
    verification_uri: str
    expires_in: int
    interval: int


@dataclass(frozen=True)
class TokenGranted:
    """Successful token poll."""

    access_token: str
    token_type: str = "bearer"
    scope: str = ""


@dataclass(frozen=True)
class PollError:
    """OAuth error answer to a token poll (pending states included)."""

    error: str
    error_description: str = ""


PollResult = Union[TokenGranted, PollError]

Sleeper = Callable[[float], Awaitable[Any]]


def _headers() -> dict:
    # User-Agent comes from the shared client
    return {"Accept": "application/json"}


async def _post_form(client: httpx.AsyncClient, url: str, form: dict) -> httpx.Response:
    try:
        return await client.post(url, data=form, headers=_headers(), timeout=REQUEST_TIMEOUT_S)
    except httpx.HTTPError as e:
        log.error(f"OAuth request to {url} failed: {e}")
        raise TransportError.from_exception(e) from e


def _decode_json(response: httpx.Response, what: str) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError.from_exception(what, e, response.text) from e


def decode_poll_response(data: Any) -> PollResult:
    """
    Decode a token endpoint body into a tagged PollResult.

    Raises:
        ParseError: If the body matches neither the success nor the error shape
    """
    if isinstance(data, dict):
        token = data.get("access_token")
        if isinstance(token, str) and token:
            return TokenGranted(
                access_token=token,
                token_type=data.get("token_type") or "bearer",
                # GitHub may return {"scope": null}
                scope=data.get("scope") or "",
            )
        error = data.get("error")
        if isinstance(error, str) and error:
            return PollError(
                error=error,
                error_description=data.get("error_description") or "",
            )

    raise ParseError(
        "Failed to parse token response.",
        details="neither access_token nor error present",
    )


async def request_device_code(
    client: httpx.AsyncClient,
    client_id: str,
    scopes: Sequence[str] = tuple(config.DEFAULT_SCOPES),
    device_code_url: str = config.DEVICE_CODE_URL,
) -> DeviceCodeResponse:
    """
    Request a device code from GitHub.

    This is the first step of the device flow. The user visits
    ``verification_uri`` and enters ``user_code`` to grant access.

    Args:
        client: Shared async HTTP client
        client_id: GitHub OAuth app client ID
        scopes: OAuth scopes
        device_code_url: Endpoint URL (overridable for testing)

    Returns:
        DeviceCodeResponse with device code and verification instructions

    Raises:
        TransportError, HttpStatusError, ParseError
    """
    log.debug(f"Requesting device code from {device_code_url}")

    response = await _post_form(
        client,
        device_code_url,
        {"client_id": client_id, "scope": " ".join(scopes)},
    )

    if not response.is_success:
        log.error(f"Device code request failed: {response.status_code}")
        raise HttpStatusError.from_response(
            response.status_code, dict(response.headers), response.text
        )

    data = _decode_json(response, "device code response")

    try:
        result = DeviceCodeResponse(
            device_code=str(data["device_code"]),
            user_code=str(data["user_code"]),
            verification_uri=str(data.get("verification_uri") or config.VERIFICATION_URI_DEFAULT),
            expires_in=int(data["expires_in"]),
            interval=int(data.get("interval") or 5),
        )
    except (KeyError, TypeError, ValueError) as e:
        log.error("Device code response missing required fields")
        raise ParseError.from_exception("device code response", e, response.text) from e

    log.debug(f"Device code received, expires in {result.expires_in}s")
    return result


async def poll_once(
    client: httpx.AsyncClient,
    client_id: str,
    device_code: str,
    token_url: str = config.TOKEN_URL,
) -> PollResult:
    """
    Send a single token request.

    Raises:
        TransportError, HttpStatusError, ParseError
    """
    response = await _post_form(
        client,
        token_url,
        {
            "client_id": client_id,
            "device_code": device_code,
            "grant_type": config.DEVICE_GRANT_TYPE,
        },
    )

    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        if not response.is_success:
            raise HttpStatusError.from_response(
                response.status_code, dict(response.headers), response.text
            ) from e
        raise ParseError.from_exception("token response", e, response.text) from e

    try:
        return decode_poll_response(data)
    except ParseError:
        if not response.is_success:
            raise HttpStatusError.from_response(
                response.status_code, dict(response.headers), response.text
            )
        raise


async def poll_for_token(
    client: httpx.AsyncClient,
    client_id: str,
    device_code: str,
    interval: int,
    token_url: str = config.TOKEN_URL,
    sleep: Optional[Sleeper] = None,
) -> TokenGranted:
    """
    Poll GitHub until the user approves, denies, or the code expires.

    Each iteration sleeps ``interval + 1`` seconds before polling.
    ``slow_down`` raises the interval by 5 seconds; ``authorization_pending``
    keeps it. Cancellation of the surrounding task stops the loop at the
    next sleep or request.

    Args:
        client: Shared async HTTP client
        client_id: GitHub OAuth app client ID
        device_code: Device code from request_device_code()
        interval: Poll interval from the device code response
        token_url: Endpoint URL (overridable for testing)
        sleep: Awaitable sleep function (overridable for testing)

    Returns:
        TokenGranted

    Raises:
        DeviceFlowError: expired_token, access_denied or any other error code
        TransportError, HttpStatusError, ParseError
    """
    sleep = sleep or asyncio.sleep
    poll_count = 0

    while True:
        await sleep(interval + config.POLL_BUFFER_S)
        poll_count += 1

        result = await poll_once(client, client_id, device_code, token_url)

        if isinstance(result, TokenGranted):
            log.info(
                f"Token obtained after {poll_count} poll attempts. "
                f"Granted scopes: '{result.scope}'"
            )
            return result

        if result.error == PENDING:
            log.debug(f"Authorization pending (attempt {poll_count})")
            continue

        if result.error == SLOW_DOWN:
            interval += config.SLOW_DOWN_INCREMENT_S
            log.warning(f"Polling too fast, slowing down to {interval}s")
            continue

        log.error(f"Device flow terminated by GitHub: {result.error}")
        raise DeviceFlowError(result.error, result.error_description)
