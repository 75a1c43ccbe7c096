# -*- coding: utf-8 -*-
"""
NativeHub Credential Store Abstraction
Interface for secret persistence in OS credential storage.

Secrets are addressed by (namespace, account). They are never written to
settings files or logs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class CredentialStore(ABC):
    """
    Abstract interface for secure secret storage.

    Implementations must use OS credential storage (Keychain, Secret Service,
    Windows Credential Manager), NOT plain files.
    """

    @abstractmethod
    def get(self, namespace: str, account: str) -> str | None:
        """
        Load a secret.

        Args:
            namespace: Service name (e.g., "native_hub")
            account: Account name (e.g., "github_oauth")

        Returns:
            The secret, or None if not found

        Raises:
            OSError: If credential storage operation fails
        """

    @abstractmethod
    def set(self, namespace: str, account: str, secret: str) -> None:
        """
        Save a secret, replacing any previous value.

        Raises:
            OSError: If credential storage operation fails
        """

    @abstractmethod
    def delete(self, namespace: str, account: str) -> None:
        """
        Delete a secret. Missing entries are not an error.

        Raises:
            OSError: If credential storage operation fails
        """
