# -*- coding: utf-8 -*-
"""
NativeHub Linux Secret Service Credential Store
Secret storage using the Secret Service API (D-Bus) via secretstorage.

Works with GNOME Keyring, KWallet (via Secret Service), and other
freedesktop.org Secret Service implementations.
"""

from __future__ import annotations

from nativehub.auth.keys import credential_target_name
from nativehub.auth.token_store import CredentialStore
from nativehub.core import log

APPLICATION_ATTR = "nativehub"


class LinuxSecretServiceStore(CredentialStore):
    """
    Secure secret storage using the Linux Secret Service API.

    Requires: secretstorage library and a running D-Bus session with a
    secret service provider.
    """

    def __init__(self):
        """Initialize Secret Service connection."""
        self._available = False
        self._connection = None
        self._collection = None

        try:
            import secretstorage

            self._connection = secretstorage.dbus_init()
            self._collection = secretstorage.get_default_collection(self._connection)
            if self._collection.is_locked():
                self._collection.unlock()
            self._available = True
        except Exception as e:
            log.warning(f"Secret Service not available: {e}")
            self._available = False

    @property
    def available(self) -> bool:
        return self._available

    def close(self) -> None:
        """Close the D-Bus connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            self._available = False

    def _attributes(self, namespace: str, account: str) -> dict:
        return {
            "application": APPLICATION_ATTR,
            "target": credential_target_name(namespace, account),
        }

    def get(self, namespace: str, account: str) -> str | None:
        if not self._available:
            log.debug("Secret Service not available")
            return None

        target_name = credential_target_name(namespace, account)
        log.debug(f"Loading secret for {target_name} from Secret Service")

        try:
            items = list(self._collection.search_items(self._attributes(namespace, account)))
            if not items:
                log.debug(f"Secret not found for {target_name}")
                return None
            return items[0].get_secret().decode("utf-8")
        except Exception as e:
            log.error(f"Failed to load secret: {e}")
            raise OSError(f"Failed to load secret from Secret Service: {e}") from e

    def set(self, namespace: str, account: str, secret: str) -> None:
        if not self._available:
            log.error("Secret Service not available")
            raise OSError("Secret Service not available on this system")

        target_name = credential_target_name(namespace, account)
        label = f"NativeHub secret ({target_name})"

        log.debug(f"Storing secret for {target_name} in Secret Service")

        try:
            self._collection.create_item(
                label,
                self._attributes(namespace, account),
                secret.encode("utf-8"),
                replace=True,
            )
        except Exception as e:
            log.error(f"Failed to store secret: {e}")
            raise OSError(f"Failed to store secret in Secret Service: {e}") from e

    def delete(self, namespace: str, account: str) -> None:
        if not self._available:
            log.error("Secret Service not available")
            raise OSError("Secret Service not available on this system")

        target_name = credential_target_name(namespace, account)
        log.debug(f"Deleting secret for {target_name} from Secret Service")

        try:
            for item in self._collection.search_items(self._attributes(namespace, account)):
                item.delete()
        except Exception as e:
            log.error(f"Failed to delete secret: {e}")
            raise OSError(f"Failed to delete secret from Secret Service: {e}") from e
