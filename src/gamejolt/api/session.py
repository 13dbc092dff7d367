"""Session lifecycle: authenticate, open, ping, close, and credential swaps.

Whether a user is logged in is never stored.  :meth:`SessionManager.check_session`
asks ``sessions/check`` every time, so the answer can go stale between
calls but is never invented locally.
"""

import threading

from gamejolt.api.base import ApiComponent
from gamejolt.auth.interfaces import CredentialStore, Credentials
from gamejolt.core.result import Err, ErrorKind, Ok, Result

PING_STATUSES = ("active", "idle")


class SessionManager(ApiComponent):
    """Drives the login/logout/ping/auth sequences for one client.

    All credential mutations and every check-then-act sequence run under
    :attr:`lock`, a re-entrant lock callers may also hold to make their own
    ``check_session`` + mutation pairs atomic.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.lock = threading.RLock()

    @property
    def store(self) -> CredentialStore:
        return self.signer.store

    # -------------------------
    # Queries
    # -------------------------

    def check_session(self) -> bool:
        """Ask the service whether the stored user has an open session.

        This is a network round trip, not a cached flag.

        Returns:
            ``True`` only when ``sessions/check`` answers with success.
            Missing configuration or a transport failure reads as ``False``.
        """
        return self._call("sessions", "check").ok

    def authenticate(self) -> Result:
        """Verify the stored username/token pair with ``users/auth``.

        A success re-arms the signer's one-time refusal diagnostic.

        Returns:
            ``Ok(None)`` on success.  A rejected pair is reported as
            :attr:`ErrorKind.AUTHENTICATION`; other failures keep their kind.
        """
        result = self._call("users", "auth")
        if result.ok:
            self.signer.reset_diagnostic()
            return Ok(None)
        self._log.warning("auth_failed", reason=result.message)
        if result.kind is ErrorKind.SEMANTIC:
            return Err(ErrorKind.AUTHENTICATION, result.message)
        return result

    def fetch_current_user(self) -> Result:
        """Return the stored user's :class:`~gamejolt.core.models.UserProfile`."""
        return self._fetch_profile(include_username=True)

    # -------------------------
    # Transitions
    # -------------------------

    def login(self) -> Result:
        """Open a session and return the logged-in user's profile.

        No retry is attempted when the follow-up ``sessions/check`` still
        reports the user as logged out.

        Returns:
            ``Ok(UserProfile)`` on success.
        """
        with self.lock:
            result = self._call("sessions", "open")
            if not result.ok:
                self._log.warning("session_open_failed", reason=result.message)
                return result
            if not self.check_session():
                self._log.warning("session_not_confirmed")
                return Err(
                    ErrorKind.AUTHENTICATION,
                    "The session was opened but is not reported as active.",
                )
            profile = self.fetch_current_user()
            if profile.ok:
                self._log.emit("logged_in", username=profile.value.username)
            return profile

    def close_session(self) -> Result:
        """Close the open session without forgetting the credentials.

        Returns:
            ``Ok(None)`` when the call went through, including when the
            service reports there was no open session to close.
        """
        with self.lock:
            result = self._call("sessions", "close")
            if result.ok or result.kind is ErrorKind.SEMANTIC:
                return Ok(None)
            return result

    def logout(self, forget: bool = True) -> Result:
        """Close the session and, by default, forget the stored credentials.

        Best effort: the credentials are dropped even when the close call
        fails, and a session that still reads as open afterwards is only
        logged.  Logging out with nothing stored is a no-op.

        Args:
            forget: Also clear the credential store.

        Returns:
            ``Ok(None)``, or the transport/configuration error from
            ``sessions/close``.
        """
        with self.lock:
            if self.store.read() is None:
                return Ok(None)
            result = self.close_session()
            if result.ok and self.check_session():
                self._log.emit("logout_unconfirmed")
            if forget:
                self.store.write(None)
            if result.ok:
                self._log.emit("logged_out")
            return result

    def ping(self, status: str | None = None) -> Result:
        """Keep the open session alive.

        Only attempted while :meth:`check_session` is ``True``.  A failed
        ping is logged as a disconnection; nothing else is cleaned up.

        Args:
            status: ``"active"`` or ``"idle"``, or ``None`` to leave the
                status unchanged.

        Returns:
            ``Ok(None)`` on success, ``Err(NOT_LOGGED_IN)`` when there is no
            open session, or the ping's own error.
        """
        if status is not None and status not in PING_STATUSES:
            raise ValueError(f"status must be one of {PING_STATUSES}")
        with self.lock:
            if not self.check_session():
                return Err(ErrorKind.NOT_LOGGED_IN, "No open session to ping.")
            result = self._call("sessions", "ping", {"status": status})
            if not result.ok:
                self._log.warning("player_disconnected", reason=result.message)
                return result
            return Ok(None)

    def initialize(self) -> Result:
        """Bootstrap a session from previously stored credentials.

        Authenticates first.  If the service rejects the stored pair, the
        credentials are wiped and the refusal diagnostic is re-armed so the
        next attempt reports the missing credentials again.  When the user
        is already logged in the current profile is returned unchanged.

        Returns:
            ``Ok(UserProfile)`` on success.
        """
        with self.lock:
            if self.store.read() is None:
                return Err(
                    ErrorKind.CONFIGURATION_MISSING, "No stored credentials."
                )
            if self.check_session():
                return self.fetch_current_user()

            auth = self.authenticate()
            if not auth.ok:
                if auth.kind is ErrorKind.AUTHENTICATION:
                    self.store.write(None)
                    self.signer.reset_diagnostic()
                    self._log.warning("stored_credentials_invalidated")
                return auth
            return self.login()

    def set_user_info(
        self, username: str | None, token: str | None
    ) -> Result:
        """Replace the stored credentials.

        Any session held by the old user is closed first.  Empty values
        log the user out.  When the new pair fails to authenticate the
        previous credentials are restored; side effects of the failed
        attempt are not undone.

        Args:
            username: The new username, or empty/``None`` to clear.
            token: The new game token, or empty/``None`` to clear.

        Returns:
            ``Ok(Credentials)`` when the new pair authenticated,
            ``Ok(None)`` when the credentials were cleared, otherwise the
            authentication error.
        """
        with self.lock:
            previous = self.store.read()
            replacement = Credentials.from_pair(username, token)

            if previous is not None:
                self.close_session()
            self.store.write(replacement)
            if replacement is None:
                self._log.emit("credentials_cleared")
                return Ok(None)

            auth = self.authenticate()
            if auth.ok:
                self._log.emit(
                    "credentials_replaced", username=replacement.username
                )
                return Ok(replacement)

            self.store.write(previous)
            self._log.warning(
                "credentials_rolled_back", username=replacement.username
            )
            return auth
