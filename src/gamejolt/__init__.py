"""Client for the Game Jolt game API."""

from gamejolt.api.client import RANK_UNAVAILABLE, GameJoltClient
from gamejolt.auth import Credentials, FileCredentialStore, MemoryCredentialStore
from gamejolt.core.config import ClientConfig
from gamejolt.core.result import Err, ErrorKind, Ok

__all__ = [
    "ClientConfig",
    "Credentials",
    "Err",
    "ErrorKind",
    "FileCredentialStore",
    "GameJoltClient",
    "MemoryCredentialStore",
    "Ok",
    "RANK_UNAVAILABLE",
]
