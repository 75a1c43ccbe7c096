# -*- coding: utf-8 -*-
"""
NativeHub Credential Store Factory
Platform-aware factory for the credential store implementation.
"""

from __future__ import annotations

import sys

from nativehub.auth.token_store import CredentialStore
from nativehub.core import log


def create_credential_store() -> CredentialStore:
    """
    Create the appropriate credential store for the current platform.

    Linux uses the Secret Service directly; when no Secret Service is
    reachable it falls back to keyring, which may find another backend
    (e.g. KWallet). Other platforms use keyring.

    Returns:
        CredentialStore: Platform-specific implementation
    """
    if sys.platform.startswith("linux"):
        from nativehub.auth.token_store_linux import LinuxSecretServiceStore

        store = LinuxSecretServiceStore()
        if store.available:
            return store
        log.info("Falling back to keyring credential store")

    from nativehub.auth.token_store_keyring import KeyringCredentialStore

    return KeyringCredentialStore()
