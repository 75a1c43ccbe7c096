# -*- coding: utf-8 -*-
"""
NativeHub keyring Credential Store
Secret storage through the keyring library (macOS Keychain, Windows
Credential Manager, or whatever backend keyring selects).
"""

from __future__ import annotations

from nativehub.auth.token_store import CredentialStore
from nativehub.core import log


class KeyringCredentialStore(CredentialStore):
    """
    Secure secret storage using the keyring library.

    The namespace is the keyring service name and the account is the
    keyring username.
    """

    def __init__(self):
        """Initialize keyring access."""
        self._available = False
        self._keyring = None

        try:
            import keyring

            backend = keyring.get_keyring()
            backend_name = backend.__class__.__name__

            # Verify we have a real backend (not the fail keyring)
            if "fail" in backend_name.lower() or "null" in backend_name.lower():
                log.warning(
                    f"Keyring backend is not functional: {backend_name}. "
                    "Credential storage not available."
                )
            else:
                self._keyring = keyring
                self._available = True
        except Exception as e:
            log.warning(f"Keyring not available: {e}")

    @property
    def available(self) -> bool:
        return self._available

    def get(self, namespace: str, account: str) -> str | None:
        if not self._available:
            log.debug("Keyring not available")
            return None

        log.debug(f"Loading secret {namespace}/{account} from keyring")
        try:
            secret = self._keyring.get_password(namespace, account)
        except Exception as e:
            log.error(f"Failed to load secret from keyring: {e}")
            raise OSError(f"Failed to load secret from keyring: {e}") from e

        if not secret:
            log.debug(f"Secret not found for {namespace}/{account}")
            return None
        return secret

    def set(self, namespace: str, account: str, secret: str) -> None:
        if not self._available:
            log.error("Keyring not available")
            raise OSError("No credential storage available on this system")

        log.debug(f"Storing secret {namespace}/{account} in keyring")
        try:
            self._keyring.set_password(namespace, account, secret)
        except Exception as e:
            log.error(f"Failed to store secret in keyring: {e}")
            raise OSError(f"Failed to store secret in keyring: {e}") from e

    def delete(self, namespace: str, account: str) -> None:
        if not self._available:
            log.error("Keyring not available")
            raise OSError("No credential storage available on this system")

        try:
            self._keyring.delete_password(namespace, account)
            log.debug(f"Secret deleted for {namespace}/{account}")
        except self._keyring.errors.PasswordDeleteError:
            log.debug(f"Secret not found for {namespace}/{account}")
        except Exception as e:
            log.error(f"Failed to delete secret from keyring: {e}")
            raise OSError(f"Failed to delete secret from keyring: {e}") from e
