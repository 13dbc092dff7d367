"""Unit tests for credential storage."""

import stat

from gamejolt.auth.credentials import FileCredentialStore
from gamejolt.auth.interfaces import Credentials, MemoryCredentialStore


def test_file_store_persists_with_owner_only_permissions(tmp_path):
    store = FileCredentialStore(tmp_path / "gj" / "credentials.json")
    store.write(Credentials("ana", "t0k"))
    assert FileCredentialStore(store.path).read() == Credentials("ana", "t0k")
    assert stat.S_IMODE(store.path.stat().st_mode) == 0o600


def test_file_store_missing_file(tmp_path):
    assert FileCredentialStore(tmp_path / "nope.json").read() is None


def test_file_store_corrupt_file(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text("{not json", encoding="utf-8")
    assert FileCredentialStore(path).read() is None


def test_file_store_half_filled_file(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text('{"username": "ana"}', encoding="utf-8")
    assert FileCredentialStore(path).read() is None


def test_writing_none_deletes_file(tmp_path):
    store = FileCredentialStore(tmp_path / "credentials.json")
    store.write(Credentials("ana", "t0k"))
    store.write(None)
    assert not store.path.exists()
    assert store.clear() is False


def test_memory_store():
    store = MemoryCredentialStore()
    assert store.read() is None
    store.write(Credentials("ana", "t0k"))
    assert store.read().username == "ana"
