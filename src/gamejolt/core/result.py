"""Result type returned by every public client operation."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from gamejolt.core.exceptions import (
    AuthenticationError,
    ConfigurationMissingError,
    GameJoltError,
    TransportError,
)


class ErrorKind(str, Enum):
    """Why an operation produced no data."""

    CONFIGURATION_MISSING = "configuration_missing"
    TRANSPORT = "transport"
    SEMANTIC = "semantic"
    AUTHENTICATION = "authentication"
    NOT_LOGGED_IN = "not_logged_in"


@dataclass(frozen=True)
class Ok:
    """Successful outcome carrying the operation payload."""

    value: Any = None

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome.

    Attributes:
        kind: The :class:`ErrorKind` category.
        message: Human-readable detail, suitable for the log or CLI.
    """

    kind: ErrorKind
    message: str = ""

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Raise the exception matching :attr:`kind`.

        Raises:
            ConfigurationMissingError: For ``CONFIGURATION_MISSING``.
            TransportError: For ``TRANSPORT``.
            AuthenticationError: For ``AUTHENTICATION`` and
                ``NOT_LOGGED_IN``.
            GameJoltError: For a ``SEMANTIC`` refusal.
        """
        raise _EXCEPTIONS.get(self.kind, GameJoltError)(self.message)


_EXCEPTIONS: dict[ErrorKind, type[GameJoltError]] = {
    ErrorKind.CONFIGURATION_MISSING: ConfigurationMissingError,
    ErrorKind.TRANSPORT: TransportError,
    ErrorKind.AUTHENTICATION: AuthenticationError,
    ErrorKind.NOT_LOGGED_IN: AuthenticationError,
}


Result = Ok | Err
