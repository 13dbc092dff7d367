"""Domain exceptions for the gamejolt library."""


class GameJoltError(Exception):
    """Base class for all gamejolt library exceptions."""


class ConfigurationMissingError(GameJoltError):
    """Raised by :meth:`~gamejolt.core.result.Err.unwrap` for a
    ``CONFIGURATION_MISSING`` result.

    The client itself never raises it: a request that cannot be built
    because the game identity or the user credentials are missing comes
    back as an :class:`~gamejolt.core.result.Err`.
    """


class TransportError(GameJoltError):
    """Raised when an HTTP round trip fails.

    Covers network errors, non-2xx responses, and bodies that are not a
    JSON object carrying a ``response`` envelope.
    """


class AuthenticationError(GameJoltError):
    """Raised when the stored username/token pair is rejected."""
