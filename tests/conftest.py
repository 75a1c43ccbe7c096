# -*- coding: utf-8 -*-
"""
Pytest configuration and fixtures for NativeHub tests
"""

import json

import httpx
import pytest

from nativehub.auth.token_store import CredentialStore
from nativehub.core.context import SharedContext
from nativehub.github.errors import ExternalToolError


class MemoryCredentialStore(CredentialStore):
    """In-memory credential store; set ``fail_writes`` to simulate a locked keychain."""

    def __init__(self, initial=None, fail_writes=False):
        self.secrets = dict(initial or {})
        self.fail_writes = fail_writes
        self.get_calls = 0

    def get(self, namespace, account):
        self.get_calls += 1
        return self.secrets.get((namespace, account))

    def set(self, namespace, account, secret):
        if self.fail_writes:
            raise OSError("keychain locked")
        self.secrets[(namespace, account)] = secret

    def delete(self, namespace, account):
        self.secrets.pop((namespace, account), None)


class FakeGh:
    """Stand-in for GhCli with canned answers."""

    def __init__(self, token=None, repos=None, api_responses=None, search=None):
        self.token = token
        self.repos = repos or []
        self.search = search or []
        self.api_responses = api_responses or {}
        self.calls = []

    async def auth_token(self):
        self.calls.append(("auth_token",))
        if self.token:
            return self.token
        raise ExternalToolError(
            "gh auth token failed: not logged in. Run 'gh auth login' first.",
            stderr="not logged in",
            exit_code=1,
        )

    async def repo_list(self, fields, limit):
        self.calls.append(("repo_list", tuple(fields), limit))
        return self.repos

    async def search_repos(self, query, fields, limit):
        self.calls.append(("search_repos", query, tuple(fields), limit))
        return self.search

    async def api(self, endpoint, method="GET", fields=None):
        self.calls.append(("api", method, endpoint, dict(fields or {})))
        return self.api_responses.get((method, endpoint))

    async def browse(self, repo):
        self.calls.append(("browse", repo))


def json_response(data, status=200, headers=None):
    return httpx.Response(
        status,
        content=json.dumps(data).encode("utf-8"),
        headers={"Content-Type": "application/json", **(headers or {})},
    )


def mock_client(handler):
    """AsyncClient whose requests are answered by ``handler(request)``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def no_sleep(seconds):
    return None


@pytest.fixture
def memory_store():
    return MemoryCredentialStore()


@pytest.fixture
def fake_gh():
    return FakeGh()


@pytest.fixture
def context():
    return SharedContext(http_client=mock_client(lambda request: httpx.Response(500)))
