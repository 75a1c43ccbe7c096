# -*- coding: utf-8 -*-
"""
NativeHub Error Taxonomy
Structured errors for GitHub REST calls, the gh CLI, and authentication.

Every error carries a user-facing ``message`` (no tokens, no headers) and
optional redacted ``details`` suitable for logs.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import time
from typing import Mapping, Optional


class NativeHubError(Exception):
    """
    Base class for all errors a work unit converts into a Failed event.

    Attributes:
        message: User-friendly message
        details: Technical details safe for logs
    """

    def __init__(self, message: str, details: str = ""):
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def code(self) -> str:
        """Taxonomy name reported to the UI."""
        return type(self).__name__

    def __str__(self) -> str:
        return self.message


class TransportError(NativeHubError):
    """Network-level failure: DNS, connect, TLS, timeout."""

    def __init__(self, message: str, details: str = "", timeout: bool = False):
        super().__init__(message, details)
        self.timeout = timeout

    @staticmethod
    def from_exception(exc: BaseException) -> TransportError:
        """
        Create a transport error from an underlying exception.

        Args:
            exc: The transport exception (already free of secrets)

        Returns:
            TransportError with a message matching the failure kind
        """
        error_msg = str(exc) or type(exc).__name__
        error_lower = f"{type(exc).__name__} {error_msg}".lower()

        if "timeout" in error_lower:
            return TransportError(
                "Request timed out. Check your network connection and try again.",
                details=f"Network timeout: {error_msg}",
                timeout=True,
            )

        if "connect" in error_lower or "ssl" in error_lower or "dns" in error_lower:
            return TransportError(
                "Network error. Check your internet connection and try again.",
                details=f"Connection error: {error_msg}",
            )

        return TransportError(
            "Network error. Please check your connection and try again.",
            details=f"Network error: {error_msg}",
        )


class HttpStatusError(NativeHubError):
    """
    Non-2xx response from GitHub.

    Attributes:
        status: HTTP status code
        body: Raw response body text
        kind: Classification (UNAUTHORIZED, FORBIDDEN, RATE_LIMITED,
              NOT_FOUND, VALIDATION, SERVER, UNKNOWN)
        retry_after_s: Seconds to wait before retry, when known
        rate_limit_reset_utc: ISO 8601 time when the rate limit resets
    """

    def __init__(
        self,
        status: int,
        body: str = "",
        message: str = "",
        kind: str = "UNKNOWN",
        retry_after_s: Optional[int] = None,
        rate_limit_reset_utc: Optional[str] = None,
    ):
        self.status = status
        self.body = body
        self.kind = kind
        self.retry_after_s = retry_after_s
        self.rate_limit_reset_utc = rate_limit_reset_utc
        super().__init__(
            message or f"GitHub API returned {status}: {body}",
            details=f"HTTP {status}: {body[:500]}",
        )

    @staticmethod
    def from_response(
        status: int,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> HttpStatusError:
        """
        Classify an HTTP error response.

        Args:
            status: HTTP status code
            headers: Response headers (never includes Authorization)
            body: Response body text

        Returns:
            HttpStatusError with kind, message and retry/rate limit info
        """
        headers = headers or {}
        body = body or ""

        headers_lower = {k.lower(): v for k, v in headers.items()}

        rate_limit_remaining = headers_lower.get("x-ratelimit-remaining")
        rate_limit_reset = headers_lower.get("x-ratelimit-reset")
        retry_after = headers_lower.get("retry-after")

        retry_after_s: Optional[int] = None
        rate_limit_reset_utc: Optional[str] = None

        if rate_limit_reset:
            try:
                reset_ts = int(rate_limit_reset)
                retry_after_s = max(0, reset_ts - int(time.time()))
                rate_limit_reset_utc = datetime.fromtimestamp(
                    reset_ts, tz=timezone.utc
                ).isoformat()
            except (ValueError, OverflowError, OSError):
                pass

        if retry_after:
            try:
                retry_after_s = int(retry_after)
            except ValueError:
                pass

        if status == 401:
            return HttpStatusError(
                status,
                body,
                "Your GitHub session has expired. Log in again.",
                kind="UNAUTHORIZED",
            )

        if status in (403, 429):
            if status == 429 or str(rate_limit_remaining) == "0":
                reset_msg = ""
                if rate_limit_reset_utc:
                    reset_msg = f" (resets at {rate_limit_reset_utc})"
                return HttpStatusError(
                    status,
                    body,
                    f"GitHub rate limit reached. Please try again later.{reset_msg}",
                    kind="RATE_LIMITED",
                    retry_after_s=retry_after_s,
                    rate_limit_reset_utc=rate_limit_reset_utc,
                )
            return HttpStatusError(
                status,
                body,
                "Access denied. Check your GitHub permissions and token scopes.",
                kind="FORBIDDEN",
            )

        if status == 404:
            return HttpStatusError(
                status, body, "Not found on GitHub.", kind="NOT_FOUND"
            )

        if status in (400, 405, 409, 422):
            return HttpStatusError(
                status,
                body,
                f"GitHub rejected the request ({status}): {_short_message(body)}",
                kind="VALIDATION",
            )

        if status >= 500:
            return HttpStatusError(
                status,
                body,
                "GitHub is experiencing issues. Please try again.",
                kind="SERVER",
                retry_after_s=retry_after_s or 10,
            )

        return HttpStatusError(status, body, kind="UNKNOWN")


class ParseError(NativeHubError):
    """Response body could not be decoded into the expected shape."""

    @staticmethod
    def from_exception(what: str, exc: BaseException, raw: str = "") -> ParseError:
        return ParseError(
            f"Failed to parse {what}.",
            details=f"{exc}. Raw: {raw[:200]}",
        )


class AuthError(NativeHubError):
    """
    Missing or invalid credential, or a terminal OAuth error.

    Attributes:
        error_code: OAuth error code when the failure came from GitHub
    """

    def __init__(self, message: str, error_code: Optional[str] = None, details: str = ""):
        self.error_code = error_code
        super().__init__(message, details)


class ArgumentError(NativeHubError):
    """Malformed input, e.g. a repository id not in owner/name form."""


class ExternalToolError(NativeHubError):
    """
    The gh CLI is absent or exited non-zero.

    Attributes:
        stderr: Tool stderr, verbatim and stripped
        exit_code: Process exit code (None when it never started)
    """

    def __init__(self, message: str, stderr: str = "", exit_code: Optional[int] = None):
        self.stderr = stderr
        self.exit_code = exit_code
        super().__init__(message, details=stderr)


def _short_message(body: str) -> str:
    """Pull GitHub's "message" field out of an error body, if present."""
    try:
        data = json.loads(body)
    except ValueError:
        return body[:200]
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return body[:200]
