# -*- coding: utf-8 -*-
"""
Tests for the credential stores (keyring and Linux Secret Service)
"""

from unittest.mock import MagicMock, patch

import keyring
import pytest

from nativehub.auth import token_store_factory
from nativehub.auth.keys import credential_target_name
from nativehub.auth.token_store_keyring import KeyringCredentialStore


class WorkingBackend:
    pass


class FailKeyring:
    pass


class TestKeyringCredentialStore:
    """Test keyring-backed storage"""

    @patch("keyring.get_keyring", return_value=WorkingBackend())
    def test_round_trip(self, _backend):
        vault = {}
        with patch("keyring.set_password", side_effect=lambda s, a, p: vault.__setitem__((s, a), p)), \
                patch("keyring.get_password", side_effect=lambda s, a: vault.get((s, a))):
            store = KeyringCredentialStore()
            assert store.available
            store.set("native_hub", "github_oauth", "gho_abc")
            assert store.get("native_hub", "github_oauth") == "gho_abc"
            assert store.get("native_hub", "other") is None

    @patch("keyring.get_keyring", return_value=FailKeyring())
    def test_fail_backend_unavailable(self, _backend):
        store = KeyringCredentialStore()
        assert not store.available
        assert store.get("native_hub", "github_oauth") is None
        with pytest.raises(OSError):
            store.set("native_hub", "github_oauth", "gho_abc")

    @patch("keyring.get_keyring", return_value=WorkingBackend())
    @patch("keyring.set_password", side_effect=RuntimeError("locked"))
    def test_write_error_is_oserror(self, _set, _backend):
        with pytest.raises(OSError) as exc:
            KeyringCredentialStore().set("native_hub", "github_oauth", "gho_abc")
        assert "locked" in str(exc.value)

    @patch("keyring.get_keyring", return_value=WorkingBackend())
    @patch("keyring.delete_password", side_effect=keyring.errors.PasswordDeleteError("missing"))
    def test_delete_missing_is_quiet(self, _delete, _backend):
        KeyringCredentialStore().delete("native_hub", "github_oauth")


class TestLinuxSecretServiceStore:
    """Secret Service store with a mocked D-Bus collection"""

    def _store(self, collection):
        secretstorage = pytest.importorskip("secretstorage")
        from nativehub.auth.token_store_linux import LinuxSecretServiceStore

        with patch.object(secretstorage, "dbus_init", return_value=MagicMock()), \
                patch.object(secretstorage, "get_default_collection", return_value=collection):
            return LinuxSecretServiceStore()

    def test_get_and_set(self):
        item = MagicMock()
        item.get_secret.return_value = b"gho_abc"
        collection = MagicMock()
        collection.is_locked.return_value = False
        collection.search_items.return_value = [item]

        store = self._store(collection)

        assert store.available
        assert store.get("native_hub", "github_oauth") == "gho_abc"
        store.set("native_hub", "github_oauth", "gho_new")
        label, attrs, secret = collection.create_item.call_args[0]
        assert attrs["target"] == credential_target_name("native_hub", "github_oauth")
        assert secret == b"gho_new"
        assert collection.create_item.call_args[1] == {"replace": True}

    def test_unlocks_locked_collection(self):
        collection = MagicMock()
        collection.is_locked.return_value = True
        self._store(collection)
        collection.unlock.assert_called_once()

    def test_missing_secret(self):
        collection = MagicMock()
        collection.is_locked.return_value = False
        collection.search_items.return_value = []
        assert self._store(collection).get("native_hub", "github_oauth") is None


class TestFactory:
    @patch("sys.platform", "darwin")
    @patch("keyring.get_keyring", return_value=WorkingBackend())
    def test_non_linux_uses_keyring(self, _backend):
        assert isinstance(token_store_factory.create_credential_store(), KeyringCredentialStore)

    @patch("sys.platform", "linux")
    @patch("keyring.get_keyring", return_value=WorkingBackend())
    def test_linux_falls_back_to_keyring(self, _backend):
        unavailable = MagicMock(available=False)
        with patch(
            "nativehub.auth.token_store_linux.LinuxSecretServiceStore", return_value=unavailable
        ):
            store = token_store_factory.create_credential_store()
        assert isinstance(store, KeyringCredentialStore)


def test_credential_target_name():
    assert credential_target_name() == "NativeHub:native_hub:github_oauth"
