"""Abstract interface for the avatar image cache."""

from abc import ABC, abstractmethod


class ImageCache(ABC):
    """Process-wide ``user_id -> image`` cache fed by profile fetches.

    The client only ever calls :meth:`request`; presentation code reads
    images back with :meth:`get`.
    """

    @abstractmethod
    def request(self, user_id: int, avatar_url: str) -> None:
        """Schedule the avatar at *avatar_url* to be cached for *user_id*.

        Must not raise and must not block on the download.
        """

    @abstractmethod
    def get(self, user_id: int) -> bytes | None:
        """Return the cached image bytes, or ``None`` if not (yet) cached."""
