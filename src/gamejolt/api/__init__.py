"""Game Jolt game API: signing, transport, sessions, and resources."""

from gamejolt.api.client import GameJoltClient
from gamejolt.api.session import SessionManager
from gamejolt.api.signer import SignedRequest, Signer
from gamejolt.api.transport import Transport

__all__ = [
    "GameJoltClient",
    "SessionManager",
    "SignedRequest",
    "Signer",
    "Transport",
]
