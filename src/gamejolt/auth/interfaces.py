"""Abstract interfaces for the credential layer.

The session manager and signer only ever talk to a
:class:`CredentialStore`; where the username/token pair actually lives
(a file, memory, a platform keychain) is the store's business.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Credentials:
    """A user's saved Game Jolt username and game token.

    Both fields are always present.  "No credentials" is represented by
    ``None``, never by a half-filled instance.

    Attributes:
        username: The Game Jolt username.
        token: The user's game token (not their password).
    """

    username: str
    token: str

    def __post_init__(self):
        if not self.username or not self.token:
            raise ValueError("Credentials need both a username and a token.")

    @classmethod
    def from_pair(
        cls, username: str | None, token: str | None
    ) -> "Credentials | None":
        """Build credentials, or ``None`` when either side is empty.

        Args:
            username: Candidate username.
            token: Candidate token.

        Returns:
            A :class:`Credentials` instance, or ``None``.
        """
        username = (username or "").strip()
        token = (token or "").strip()
        if not username or not token:
            return None
        return cls(username=username, token=token)


class CredentialStore(ABC):
    """Abstract key-value store holding at most one :class:`Credentials`."""

    @abstractmethod
    def read(self) -> Credentials | None:
        """Return the stored credentials, or ``None`` when logged out.

        This method must not raise; unreadable storage reads as empty.
        """

    @abstractmethod
    def write(self, credentials: Credentials | None) -> None:
        """Replace the stored credentials.

        Args:
            credentials: The new pair, or ``None`` to forget the user.
        """


class MemoryCredentialStore(CredentialStore):
    """Keeps credentials in process memory only."""

    def __init__(self, credentials: Credentials | None = None):
        self._credentials = credentials

    def read(self) -> Credentials | None:
        return self._credentials

    def write(self, credentials: Credentials | None) -> None:
        self._credentials = credentials
