"""Request signing for the Game Jolt game API.

Every call is a GET whose query string starts with ``game_id`` and ends
with ``signature``, the hex digest of everything before it concatenated
with the game's private key::

    {base}/{resource}[/{action}]/?game_id=1&username=u&user_token=t&k=v&signature=...
"""

import hashlib
from dataclasses import dataclass
from urllib.parse import quote

from gamejolt.auth.interfaces import CredentialStore
from gamejolt.core.config import ClientConfig
from gamejolt.log import LogSink


@dataclass(frozen=True)
class SignedRequest:
    """A fully built, signed request URL."""

    url: str
    endpoint: str
    """``resource`` or ``resource/action``, used in log events."""


def sign(url: str, private_key: str, use_md5: bool = True) -> str:
    """Return the hex signature for *url*.

    Args:
        url: The request URL up to, but not including, ``&signature=``.
        private_key: The game's private key.
        use_md5: MD5 when ``True`` (128-bit), SHA-1 otherwise (160-bit).

    Returns:
        The lowercase hex digest.
    """
    payload = (url + private_key).encode("utf-8")
    digest = hashlib.md5(payload) if use_md5 else hashlib.sha1(payload)
    return digest.hexdigest()


class Signer:
    """Builds signed request URLs for a single client.

    Construction is refused (``build`` returns ``None``) unless the game
    identity is configured *and* the credential store holds a user, even
    for endpoints that do not send the username or token.  The first
    refusal is logged; later ones stay quiet until
    :meth:`reset_diagnostic` is called after a successful authentication.

    Args:
        config: The client configuration.
        store: Where the user's credentials are read from.
        log: Diagnostic sink.
    """

    def __init__(
        self,
        config: ClientConfig,
        store: CredentialStore,
        log: LogSink | None = None,
    ):
        self.config = config
        self.store = store
        self._log = log or LogSink(__name__, verbose=config.verbose)
        self._refusal_reported = False

    def build(
        self,
        resource: str,
        action: str | None = None,
        params: dict[str, object] | None = None,
        include_username: bool = True,
        include_token: bool = True,
    ) -> SignedRequest | None:
        """Build a signed URL for ``resource[/action]``.

        Args:
            resource: Endpoint group, e.g. ``"scores"``.
            action: Optional sub-path, e.g. ``"add"``.
            params: Extra query parameters, appended in insertion order.
                ``None`` values are skipped.
            include_username: Append the stored username.
            include_token: Append the stored user token.

        Returns:
            A :class:`SignedRequest`, or ``None`` when the game identity
            or the credentials are missing.
        """
        if not resource:
            raise ValueError("resource must be a non-empty string")

        credentials = self.store.read()
        if not self.config.is_configured or credentials is None:
            self._report_refusal(
                missing="game identity"
                if not self.config.is_configured
                else "credentials"
            )
            return None

        endpoint = f"{resource}/{action}" if action else resource
        url = (
            f"{self.config.base_url}/{endpoint}/"
            f"?game_id={self.config.game_id}"
        )
        if include_username:
            url += f"&username={_encode(credentials.username)}"
        if include_token:
            url += f"&user_token={_encode(credentials.token)}"
        for key, value in (params or {}).items():
            if value is None:
                continue
            url += f"&{key}={_encode(value)}"

        signature = sign(url, self.config.private_key, self.config.use_md5)
        return SignedRequest(url=f"{url}&signature={signature}", endpoint=endpoint)

    def reset_diagnostic(self) -> None:
        """Re-arm the one-time refusal diagnostic."""
        self._refusal_reported = False

    def _report_refusal(self, missing: str) -> None:
        if self._refusal_reported:
            return
        self._refusal_reported = True
        self._log.warning("request_refused", missing=missing)


def _encode(value: object) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    return quote(str(value), safe="")
