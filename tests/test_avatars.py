"""Unit tests for the avatar cache and its SQLite store."""

from unittest.mock import MagicMock

import pytest
import requests
from structlog.testing import capture_logs

from gamejolt.avatars.cache import AvatarCache, avatar_variant_url
from gamejolt.avatars.store import AvatarStore
from conftest import FakeResponse


@pytest.mark.parametrize(
    "url, expected",
    [
        (
            "https://m.gjcdn.net/user-avatar/60/123-crop0_0_100_100-abc-v4.jpg",
            "https://m.gjcdn.net/user-avatar/200/123-crop0_0_100_100-abc-v4.png",
        ),
        (
            "https://m.gjcdn.net/user-avatar/60/9.png?v=2",
            "https://m.gjcdn.net/user-avatar/200/9.png",
        ),
        (
            "https://s.gjcdn.net/img/no-avatar-3.webp",
            "https://s.gjcdn.net/img/no-avatar-3.png",
        ),
        ("https://cdn.test/avatars/7", "https://cdn.test/avatars/7.png"),
    ],
)
def test_avatar_variant_url(url, expected):
    assert avatar_variant_url(url) == expected


def test_avatar_variant_url_custom_size():
    assert "/user-avatar/1000/" in avatar_variant_url(
        "https://m.gjcdn.net/user-avatar/60/1.jpg", size=1000
    )


@pytest.fixture()
def avatar_store(tmp_path):
    return AvatarStore(tmp_path / "avatars.db")


def _session(content=b"PNG", error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = FakeResponse(content=content)
    return session


class TestAvatarCache:
    def test_inline_download(self):
        session = _session(b"image-bytes")
        cache = AvatarCache(session=session, background=False)
        cache.request(5, "https://m.gjcdn.net/user-avatar/60/5.jpg")
        assert cache.get(5) == b"image-bytes"
        session.get.assert_called_once_with(
            "https://m.gjcdn.net/user-avatar/200/5.png", timeout=30
        )

    def test_background_download(self):
        cache = AvatarCache(session=_session(b"bg"))
        cache.request(6, "https://m.gjcdn.net/user-avatar/60/6.jpg")
        cache.wait()
        cache.close()
        assert cache.get(6) == b"bg"

    def test_failure_is_logged_not_raised(self):
        cache = AvatarCache(
            session=_session(error=requests.ConnectionError("down")),
            background=False,
        )
        with capture_logs() as logs:
            cache.request(7, "https://m.gjcdn.net/user-avatar/60/7.jpg")
        assert cache.get(7) is None
        assert logs[0]["event"] == "avatar_download_failed"

    def test_store_hit_skips_network(self, avatar_store):
        url = "https://m.gjcdn.net/user-avatar/200/8.png"
        avatar_store.set(8, url, b"stored")
        session = _session()
        cache = AvatarCache(session=session, store=avatar_store, background=False)
        cache.request(8, "https://m.gjcdn.net/user-avatar/60/8.jpg")
        assert cache.get(8) == b"stored"
        session.get.assert_not_called()

    def test_download_is_persisted(self, avatar_store):
        cache = AvatarCache(session=_session(b"new"), store=avatar_store, background=False)
        cache.request(9, "https://m.gjcdn.net/user-avatar/60/9.jpg")
        assert avatar_store.get(9) == b"new"


class TestAvatarStore:
    def test_round_trip(self, avatar_store):
        avatar_store.set(1, "https://x/1.png", b"\x89PNG")
        assert avatar_store.get(1, "https://x/1.png") == b"\x89PNG"

    def test_changed_url_misses(self, avatar_store):
        avatar_store.set(1, "https://x/old.png", b"old")
        assert avatar_store.get(1, "https://x/new.png") is None

    def test_expired_entry_misses_and_is_purged(self, tmp_path):
        store = AvatarStore(tmp_path / "avatars.db", ttl=-1)
        store.set(1, "https://x/1.png", b"old")
        assert store.stats()["expired"] == 1
        assert store.get(1) is None
        assert store.stats()["total"] == 0

    def test_clear_and_purge(self, tmp_path):
        store = AvatarStore(tmp_path / "avatars.db")
        store.set(1, "u1", b"a")
        store.set(2, "u2", b"b")
        assert store.purge_expired() == 0
        assert store.clear() == 2
        assert store.stats()["total"] == 0

    def test_stats(self, avatar_store):
        avatar_store.set(1, "u1", b"a")
        s = avatar_store.stats()
        assert s["total"] == 1
        assert s["active"] == 1
        assert s["size_bytes"] > 0
