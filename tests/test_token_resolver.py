# -*- coding: utf-8 -*-
"""
Tests for auth.token_resolver - token precedence for REST work units
"""

import asyncio

import pytest

from conftest import FakeGh, MemoryCredentialStore
from nativehub.auth import config
from nativehub.auth.token_resolver import (
    SOURCE_GH_CLI,
    SOURCE_SESSION,
    SOURCE_STORE,
    TokenResolver,
)
from nativehub.github.errors import AuthError

STORE_KEY = (config.CREDENTIAL_NAMESPACE, config.CREDENTIAL_ACCOUNT)


class BrokenStore(MemoryCredentialStore):
    def get(self, namespace, account):
        raise OSError("dbus gone")


class TestTokenPrecedence:
    """gh CLI first, then this session's login, then the credential store"""

    def test_gh_cli_wins_and_store_is_not_consulted(self, context):
        store = MemoryCredentialStore({STORE_KEY: "stored"})
        resolver = TokenResolver(FakeGh(token="gho_cli"), store, context)

        assert asyncio.run(resolver.resolve()) == "gho_cli"
        assert resolver.last_source == SOURCE_GH_CLI
        assert store.get_calls == 0

    def test_store_when_cli_fails(self, context):
        store = MemoryCredentialStore({STORE_KEY: "stored"})
        resolver = TokenResolver(FakeGh(), store, context)

        assert asyncio.run(resolver.resolve()) == "stored"
        assert resolver.last_source == SOURCE_STORE

    def test_session_token_without_store_entry(self, context):
        context.commit_token("gho_session", context.begin_login())
        resolver = TokenResolver(FakeGh(), MemoryCredentialStore(), context)

        assert asyncio.run(resolver.resolve()) == "gho_session"
        assert resolver.last_source == SOURCE_SESSION

    def test_login_beats_stale_store_entry(self, context):
        """A login whose store write failed still wins over the old entry"""
        store = MemoryCredentialStore({STORE_KEY: "gho_old_revoked"}, fail_writes=True)
        context.commit_token("gho_new", context.begin_login())
        resolver = TokenResolver(FakeGh(), store, context)

        assert asyncio.run(resolver.resolve()) == "gho_new"
        assert resolver.last_source == SOURCE_SESSION
        assert store.get_calls == 0

    def test_store_beats_primed_token(self, context):
        context.load_initial_token("gho_primed")
        store = MemoryCredentialStore({STORE_KEY: "gho_stored"})
        resolver = TokenResolver(FakeGh(), store, context)

        assert asyncio.run(resolver.resolve()) == "gho_stored"
        assert resolver.last_source == SOURCE_STORE

    def test_store_error_falls_through(self, context):
        context.load_initial_token("gho_session")
        resolver = TokenResolver(FakeGh(), BrokenStore(), context)

        assert asyncio.run(resolver.resolve()) == "gho_session"

    def test_nothing_available(self, context):
        resolver = TokenResolver(FakeGh(), None, context)

        with pytest.raises(AuthError) as exc:
            asyncio.run(resolver.resolve())
        assert "Not authenticated" in exc.value.message
        assert resolver.last_source is None
