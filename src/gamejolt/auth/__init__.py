"""Credential layer: interfaces and storage."""

from gamejolt.auth.credentials import FileCredentialStore
from gamejolt.auth.interfaces import (
    CredentialStore,
    Credentials,
    MemoryCredentialStore,
)

__all__ = [
    "CredentialStore",
    "Credentials",
    "FileCredentialStore",
    "MemoryCredentialStore",
]
