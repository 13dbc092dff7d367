"""Shared request plumbing for the session manager and the client."""

from typing import Any

from gamejolt.api.signer import Signer
from gamejolt.api.transport import Transport
from gamejolt.avatars.interfaces import ImageCache
from gamejolt.core.exceptions import TransportError
from gamejolt.core.models import UserProfile
from gamejolt.core.result import Err, ErrorKind, Ok, Result
from gamejolt.log import LogSink


class ApiComponent:
    """Base for objects that issue signed calls.

    Subclasses share one :class:`Signer` and one :class:`Transport`, so
    credential changes made through either are seen by both.
    """

    def __init__(
        self,
        signer: Signer,
        transport: Transport,
        image_cache: ImageCache | None = None,
        log: LogSink | None = None,
    ):
        self.signer = signer
        self.transport = transport
        self.image_cache = image_cache
        self._log = log or LogSink(__name__, verbose=signer.config.verbose)

    def _call(
        self,
        resource: str,
        action: str | None = None,
        params: dict[str, Any] | None = None,
        include_username: bool = True,
        include_token: bool = True,
    ) -> Result:
        """Sign, send, and unwrap one request.

        Returns:
            ``Ok(envelope.data)`` when the service reports success;
            otherwise an :class:`Err` whose kind says which step failed.
        """
        request = self.signer.build(
            resource,
            action,
            params,
            include_username=include_username,
            include_token=include_token,
        )
        if request is None:
            return Err(
                ErrorKind.CONFIGURATION_MISSING,
                "Game identity or user credentials are not configured.",
            )
        try:
            envelope = self.transport.fetch(request)
        except TransportError as e:
            return Err(ErrorKind.TRANSPORT, str(e))
        if not envelope.success:
            return Err(
                ErrorKind.SEMANTIC,
                envelope.message or f"{request.endpoint} was rejected.",
            )
        return Ok(envelope.data)

    def _fetch_profile(
        self,
        params: dict[str, Any] | None = None,
        include_username: bool = False,
    ) -> Result:
        """Fetch a single user and queue their avatar for download."""
        result = self._call(
            "users",
            params=params,
            include_username=include_username,
            include_token=False,
        )
        if not result.ok:
            return result
        users = self._records(result.value, "users")
        if not users.ok:
            return users
        if not users.value:
            return Err(ErrorKind.SEMANTIC, "User not found.")
        profile = UserProfile.from_api(users.value[0])
        if self.image_cache is not None and profile.avatar_url:
            self.image_cache.request(profile.id, profile.avatar_url)
        return Ok(profile)

    def _records(self, data: dict[str, Any], key: str) -> Result:
        """Return the list of objects stored under *key* in a payload.

        A missing or empty field is an empty list.  Anything other than a
        list of JSON objects is treated like an unparseable body.

        Returns:
            ``Ok(list[dict])``, or ``Err(TRANSPORT)`` for a malformed field.
        """
        entries = data.get(key) or []
        if isinstance(entries, list) and all(
            isinstance(entry, dict) for entry in entries
        ):
            return Ok(entries)
        self._log.warning("malformed_payload", field=key)
        return Err(
            ErrorKind.TRANSPORT, f"Malformed '{key}' field in response."
        )
