# -*- coding: utf-8 -*-
"""NativeHub Services / Composition Root

Minimal dependency container to centralize object creation.

Design goals:
- No UI/Qt imports at module import time.
- Provide a single place to construct shared services (gh CLI, credential
  store, shared context, engines, auth controller, bridge).
- Support injection of factories and settings for tests.

There is no process-wide singleton: the container is built by the entry
point and its products are passed explicitly.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Optional

from nativehub.auth import config
from nativehub.auth.controller import AuthFlowController
from nativehub.auth.token_resolver import TokenResolver
from nativehub.auth.token_store import CredentialStore
from nativehub.core import log
from nativehub.core import settings as settings_module
from nativehub.core.bridge import CancelPolicy, CommandBridge
from nativehub.core.context import SharedContext
from nativehub.core.handlers import ActionHandlers, failure_prefix
from nativehub.github.gh_cli import GhCli


@dataclass
class ServiceContainer:
    """Small container for shared service construction.

    Built products are cached so every consumer sees the same instance.
    """

    settings: object = settings_module
    credential_store_factory: Optional[Callable[[], Optional[CredentialStore]]] = None
    gh_factory: Optional[Callable[[], GhCli]] = None
    context_factory: Optional[Callable[[], SharedContext]] = None
    _cache: dict = field(default_factory=dict, repr=False)

    def _cached(self, key: str, build: Callable[[], object]):
        if key not in self._cache:
            self._cache[key] = build()
        return self._cache[key]

    def credential_store(self) -> Optional[CredentialStore]:
        def build():
            if self.credential_store_factory is not None:
                return self.credential_store_factory()

            from nativehub.auth.token_store_factory import create_credential_store

            try:
                return create_credential_store()
            except Exception as e:
                log.warning(f"No credential store available: {e}")
                return None

        return self._cached("credential_store", build)

    def gh(self) -> GhCli:
        def build():
            if self.gh_factory is not None:
                return self.gh_factory()
            return GhCli(self.settings.load_gh_path())

        return self._cached("gh", build)

    def context(self) -> SharedContext:
        def build():
            if self.context_factory is not None:
                return self.context_factory()
            return SharedContext()

        return self._cached("context", build)

    def token_resolver(self) -> TokenResolver:
        return self._cached(
            "token_resolver",
            lambda: TokenResolver(self.gh(), self.credential_store(), self.context()),
        )

    def auth_controller(self) -> AuthFlowController:
        return self._cached(
            "auth_controller",
            lambda: AuthFlowController(
                self.context(),
                self.gh(),
                self.credential_store(),
                client_id_loader=self.settings.load_client_id,
            ),
        )

    def rest_engine(self, token: str):
        """Create a REST engine bound to the shared HTTP client."""
        from nativehub.github.rest_engine import RestEngine

        return RestEngine(
            self.context().http_client, token, api_base=self.settings.load_api_base()
        )

    def cli_engine(self):
        from nativehub.github.cli_engine import CliEngine

        return CliEngine(self.gh())

    def handlers(self) -> ActionHandlers:
        return self._cached(
            "handlers",
            lambda: ActionHandlers(
                self.auth_controller(),
                self.token_resolver(),
                self.gh(),
                rest_engine_factory=self.rest_engine,
                cli_engine_factory=self.cli_engine,
                engine_profile=self.settings.load_engine_profile(),
            ),
        )

    async def load_token_from_store(self) -> bool:
        """
        Prime the shared context with a previously persisted token.

        Returns:
            bool: True if a stored token was loaded
        """
        store = self.credential_store()
        if store is None:
            return False
        try:
            token = await asyncio.to_thread(
                store.get, config.CREDENTIAL_NAMESPACE, config.CREDENTIAL_ACCOUNT
            )
        except OSError as e:
            log.warning(f"Could not read stored token: {e}")
            return False
        if not token:
            return False
        loaded = self.context().load_initial_token(token)
        if loaded:
            log.info("Loaded stored token")
        return loaded

    async def _close(self) -> None:
        await self.context().aclose()

    def bridge(self) -> CommandBridge:
        """Create the command/event bridge (not started)."""
        handlers = self.handlers()
        return self._cached(
            "bridge",
            lambda: CommandBridge(
                handlers.handle,
                describe=failure_prefix,
                cancel_policy=CancelPolicy.from_setting(self.settings.load_cancel_policy()),
                on_start=self.load_token_from_store,
                on_stop=self._close,
            ),
        )
