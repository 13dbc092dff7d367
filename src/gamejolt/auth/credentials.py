"""Persistent storage for Game Jolt user credentials.

The username/token pair is written to
``~/.config/gamejolt/credentials.json`` with permissions restricted to the
owner (0o600).
"""

import json
from pathlib import Path

from gamejolt.auth.interfaces import CredentialStore, Credentials

_CONFIG_DIR = Path.home() / ".config" / "gamejolt"
_CREDENTIALS_FILE = _CONFIG_DIR / "credentials.json"


class FileCredentialStore(CredentialStore):
    """JSON-file backed :class:`CredentialStore`.

    Args:
        path: Location of the credentials file.  Defaults to
            ``~/.config/gamejolt/credentials.json``.
    """

    def __init__(self, path: Path | None = None):
        self._path = path or _CREDENTIALS_FILE

    @property
    def path(self) -> Path:
        """Path to the credentials JSON file."""
        return self._path

    def read(self) -> Credentials | None:
        """Load credentials from the file.

        Returns:
            The stored :class:`Credentials`, or ``None`` if the file does
            not exist, cannot be parsed, or holds only one of the two
            fields.
        """
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return None
        if not isinstance(data, dict):
            return None
        return Credentials.from_pair(data.get("username"), data.get("token"))

    def write(self, credentials: Credentials | None) -> None:
        """Persist *credentials*, or delete the file when ``None``.

        Creates the config directory if it does not already exist.
        """
        if credentials is None:
            self.clear()
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(
                {"username": credentials.username, "token": credentials.token},
                indent=2,
            ),
            encoding="utf-8",
        )
        self._path.chmod(0o600)

    def clear(self) -> bool:
        """Remove the credentials file.

        Returns:
            ``True`` if the file was deleted, ``False`` if it did not exist.
        """
        if self._path.exists():
            self._path.unlink()
            return True
        return False
