"""Avatar download cache keyed by user ID."""

import re
import threading
from concurrent.futures import Future, ThreadPoolExecutor

import requests

from gamejolt.avatars.interfaces import ImageCache
from gamejolt.avatars.store import AvatarStore
from gamejolt.log import LogSink

DEFAULT_AVATAR_SIZE = 200
AVATAR_EXTENSION = ".png"

_SIZE_SEGMENT = re.compile(r"(/user-avatar/)\d+(/)")
_EXTENSION = re.compile(r"\.[A-Za-z0-9]+$")


def avatar_variant_url(url: str, size: int = DEFAULT_AVATAR_SIZE) -> str:
    """Rewrite a profile avatar URL to the larger PNG variant.

    Game Jolt serves avatars from ``.../user-avatar/<size>/<file>``; the
    profile endpoint returns a small thumbnail.  The size segment is
    replaced and the file extension forced to ``.png``.  Query strings
    and fragments are dropped.

    Args:
        url: The ``avatar_url`` field of a user profile.
        size: Requested edge length in pixels.

    Returns:
        The rewritten URL.
    """
    base = url.split("#", 1)[0].split("?", 1)[0]
    base = _SIZE_SEGMENT.sub(rf"\g<1>{size}\g<2>", base, count=1)
    head, sep, filename = base.rpartition("/")
    if _EXTENSION.search(filename):
        filename = _EXTENSION.sub(AVATAR_EXTENSION, filename)
    else:
        filename += AVATAR_EXTENSION
    return f"{head}{sep}{filename}"


class AvatarCache(ImageCache):
    """Downloads avatars in the background and keeps them in memory.

    An optional :class:`AvatarStore` persists images between runs; a
    fresh store hit skips the network entirely.

    Args:
        session: HTTP session used for downloads.
        store: Optional persistent store.
        size: Avatar edge length passed to :func:`avatar_variant_url`.
        background: When ``False`` downloads run inline in
            :meth:`request` (useful in tests and scripts).
        timeout: Per-download timeout in seconds.
        log: Diagnostic sink.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        store: AvatarStore | None = None,
        size: int = DEFAULT_AVATAR_SIZE,
        background: bool = True,
        timeout: float | None = 30,
        log: LogSink | None = None,
    ):
        self.session = session or requests.Session()
        self.store = store
        self.size = size
        self.timeout = timeout
        self._log = log or LogSink(__name__)
        self._images: dict[int, bytes] = {}
        self._lock = threading.Lock()
        self._executor = (
            ThreadPoolExecutor(max_workers=2, thread_name_prefix="avatar")
            if background
            else None
        )
        self._pending: list[Future] = []

    def request(self, user_id: int, avatar_url: str) -> None:
        url = avatar_variant_url(avatar_url, self.size)
        if self._executor is None:
            self._download(user_id, url)
            return
        future = self._executor.submit(self._download, user_id, url)
        with self._lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)

    def get(self, user_id: int) -> bytes | None:
        with self._lock:
            return self._images.get(user_id)

    def wait(self) -> None:
        """Block until every queued download has finished."""
        with self._lock:
            pending = list(self._pending)
        for future in pending:
            future.result()

    def close(self) -> None:
        """Finish queued downloads and stop the worker threads."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    def _download(self, user_id: int, url: str) -> None:
        if self.store is not None:
            stored = self.store.get(user_id, url)
            if stored is not None:
                with self._lock:
                    self._images[user_id] = stored
                return
        try:
            r = self.session.get(url, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            self._log.warning(
                "avatar_download_failed", user_id=user_id, error=str(e)
            )
            return
        body = r.content
        with self._lock:
            self._images[user_id] = body
        if self.store is not None:
            self.store.set(user_id, url, body)
