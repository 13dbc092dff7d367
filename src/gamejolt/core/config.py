"""Client configuration.

A :class:`ClientConfig` is built once and handed to
:class:`~gamejolt.api.client.GameJoltClient`.  Nothing in the library keeps
game identity or the digest selector in module globals.
"""

import os
from dataclasses import dataclass

DEFAULT_BASE_URL = "https://api.gamejolt.com/api/game/v1_2"
DEFAULT_USER_AGENT = "gamejolt-client/0.1"

_ENV_GAME_ID = "GAMEJOLT_GAME_ID"
_ENV_PRIVATE_KEY = "GAMEJOLT_PRIVATE_KEY"
_ENV_USE_MD5 = "GAMEJOLT_USE_MD5"
_ENV_VERBOSE = "GAMEJOLT_VERBOSE"
_ENV_BASE_URL = "GAMEJOLT_BASE_URL"
_ENV_TIMEOUT = "GAMEJOLT_TIMEOUT"

_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class GameIdentity:
    """The key pair identifying the calling game to the service."""

    id: int
    private_key: str


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by every request a client makes.

    Attributes:
        game_id: Numeric game ID issued by Game Jolt.  ``0`` means unset.
        private_key: The game's private key used to sign requests.
        use_md5: Sign with MD5 when ``True``, SHA-1 otherwise.
        base_url: API root, without a trailing slash.
        verbose: When ``False`` the diagnostic log sink is silent.
        timeout: Per-request timeout in seconds.  ``None`` waits forever.
        user_agent: The User-Agent header value for all HTTP requests.
    """

    game_id: int
    private_key: str
    use_md5: bool = True
    base_url: str = DEFAULT_BASE_URL
    verbose: bool = True
    timeout: float | None = None
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def is_configured(self) -> bool:
        """``True`` when both halves of the game identity are set."""
        return self.game_id != 0 and bool(self.private_key)

    @property
    def identity(self) -> GameIdentity:
        return GameIdentity(id=self.game_id, private_key=self.private_key)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build a configuration from ``GAMEJOLT_*`` environment variables.

        Missing or malformed values leave the config unconfigured rather
        than raising, so callers see a ``CONFIGURATION_MISSING`` result on
        their first request.

        Returns:
            A :class:`ClientConfig` instance.
        """
        try:
            game_id = int(os.getenv(_ENV_GAME_ID, "0"))
        except ValueError:
            game_id = 0

        timeout: float | None = None
        raw_timeout = os.getenv(_ENV_TIMEOUT)
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                timeout = None

        return cls(
            game_id=game_id,
            private_key=os.getenv(_ENV_PRIVATE_KEY, ""),
            use_md5=_env_flag(_ENV_USE_MD5, default=True),
            base_url=os.getenv(_ENV_BASE_URL, DEFAULT_BASE_URL).rstrip("/"),
            verbose=_env_flag(_ENV_VERBOSE, default=True),
            timeout=timeout,
        )


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() not in _FALSE_VALUES
