"""Game Jolt game API client: scores, trophies, friends, and users."""

from concurrent.futures import ThreadPoolExecutor

import requests

from gamejolt.api.base import ApiComponent
from gamejolt.api.session import SessionManager
from gamejolt.api.signer import Signer
from gamejolt.api.transport import Transport
from gamejolt.auth.interfaces import CredentialStore, MemoryCredentialStore
from gamejolt.avatars.interfaces import ImageCache
from gamejolt.core.config import ClientConfig
from gamejolt.core.models import (
    Score,
    ScoreTable,
    Trophy,
    TrophyOutcome,
)
from gamejolt.core.result import Err, ErrorKind, Ok, Result
from gamejolt.log import LogSink

DEFAULT_SCORE_LIMIT = 10
MIN_SCORE_LIMIT = 1
MAX_SCORE_LIMIT = 100
RANK_UNAVAILABLE = -1


def clamp_limit(limit: int) -> int:
    """Clamp a requested score count into ``[1, 100]``."""
    return max(MIN_SCORE_LIMIT, min(MAX_SCORE_LIMIT, limit))


def delimiter_params(delimiter: int) -> dict[str, int]:
    """Map a signed delimiter to the service's score filter.

    Non-negative values ask for scores better than ``delimiter``; negative
    values ask for scores worse than its absolute value.

    Returns:
        A single-entry dict, ``better_than`` or ``worse_than``.
    """
    if delimiter >= 0:
        return {"better_than": abs(delimiter)}
    return {"worse_than": abs(delimiter)}


class GameJoltClient(ApiComponent):
    """Client for the Game Jolt game API.

    Every public method returns a :class:`~gamejolt.core.result.Result`
    (except :meth:`fetch_rank`, which keeps its ``-1`` sentinel) and never
    raises for missing configuration, network trouble, or a refusal from
    the service.

    Session handling lives in :attr:`sessions`; the most common session
    calls are also exposed here directly.

    Args:
        config: Game identity and transport settings.
        store: Where the user's credentials live.  Defaults to an
            in-memory store.
        session: Optional :class:`requests.Session` to send requests with.
        image_cache: Optional cache fed with the avatar of every fetched
            profile.
        log: Diagnostic sink.  Defaults to one honouring
            ``config.verbose``.
    """

    def __init__(
        self,
        config: ClientConfig,
        store: CredentialStore | None = None,
        session: requests.Session | None = None,
        image_cache: ImageCache | None = None,
        log: LogSink | None = None,
    ):
        log = log or LogSink("gamejolt", verbose=config.verbose)
        signer = Signer(
            config,
            store if store is not None else MemoryCredentialStore(),
            log.child("gamejolt.api.signer"),
        )
        transport = Transport(
            config, session=session, log=log.child("gamejolt.api.transport")
        )
        super().__init__(
            signer, transport, image_cache, log.child("gamejolt.api.client")
        )
        self.config = config
        self.sessions = SessionManager(
            signer, transport, image_cache, log.child("gamejolt.api.session")
        )

    @property
    def store(self) -> CredentialStore:
        return self.signer.store

    # -------------------------
    # Session shortcuts
    # -------------------------

    def check_session(self) -> bool:
        """Ask the service whether the stored user is logged in.

        This performs a network call every time.
        """
        return self.sessions.check_session()

    def initialize(self) -> Result:
        return self.sessions.initialize()

    def login(self) -> Result:
        return self.sessions.login()

    def logout(self) -> Result:
        return self.sessions.logout()

    def ping_session(self, status: str | None = None) -> Result:
        return self.sessions.ping(status)

    def set_user_info(self, username: str | None, token: str | None) -> Result:
        return self.sessions.set_user_info(username, token)

    # -------------------------
    # Users & friends
    # -------------------------

    def fetch_user(
        self, user_id: int | None = None, username: str | None = None
    ) -> Result:
        """Return another user's profile by ID or by username.

        Args:
            user_id: Numeric user ID.  Takes precedence over *username*.
            username: Username to look up.

        Returns:
            ``Ok(UserProfile)``.
        """
        if user_id is None and not username:
            raise ValueError("Pass either user_id or username.")
        params = {"user_id": user_id} if user_id is not None else {
            "username": username
        }
        return self._fetch_profile(params)

    def fetch_current_user(self) -> Result:
        """Return the profile of the user whose credentials are stored."""
        return self.sessions.fetch_current_user()

    def fetch_friends(self, max_workers: int = 1) -> Result:
        """Return the profiles of the stored user's friends.

        The roster is fetched first, then one profile per friend.  A
        friend whose profile cannot be fetched is logged and skipped; the
        call still succeeds with the remaining profiles.

        Args:
            max_workers: Number of profile fetches in flight at once.
                ``1`` (the default) fetches strictly one after another.

        Returns:
            ``Ok(list[UserProfile])`` in roster order.
        """
        roster = self._call("friends")
        if not roster.ok:
            return roster

        entries = roster.value.get("friends") or []
        if not isinstance(entries, list):
            self._log.warning("malformed_payload", field="friends")
            return Err(
                ErrorKind.TRANSPORT, "Malformed 'friends' field in response."
            )

        friend_ids: list[int] = []
        for entry in entries:
            try:
                friend_ids.append(int(entry["friend_id"]))
            except (KeyError, TypeError, ValueError):
                self._log.warning(
                    "friend_skipped",
                    entry=repr(entry),
                    reason="malformed roster entry",
                )

        if max_workers > 1 and len(friend_ids) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                results = list(
                    pool.map(lambda uid: self.fetch_user(user_id=uid), friend_ids)
                )
        else:
            results = [self.fetch_user(user_id=uid) for uid in friend_ids]

        friends = []
        for friend_id, result in zip(friend_ids, results):
            if result.ok:
                friends.append(result.value)
            else:
                self._log.warning(
                    "friend_skipped", friend_id=friend_id, reason=result.message
                )
        return Ok(friends)

    # -------------------------
    # Trophies
    # -------------------------

    def fetch_trophies(
        self, achieved: bool | None = None, trophy_id: int | None = None
    ) -> Result:
        """Return the game's trophies with the stored user's progress.

        Args:
            achieved: ``True`` for earned trophies only, ``False`` for
                unearned only, ``None`` for all.
            trophy_id: Restrict to a single trophy.

        Returns:
            ``Ok(list[Trophy])``.
        """
        result = self._call(
            "trophies",
            params={"achieved": achieved, "trophy_id": trophy_id},
        )
        if not result.ok:
            return result
        trophies = self._records(result.value, "trophies")
        if not trophies.ok:
            return trophies
        return Ok([Trophy.from_api(t) for t in trophies.value])

    def add_trophy(self, trophy_id: int) -> Result:
        """Mark a trophy as achieved for the stored user.

        The trophy list is fetched first; an already-achieved trophy is
        reported as :attr:`TrophyOutcome.ALREADY_ACHIEVED` without a second
        submission.

        Returns:
            ``Ok(TrophyOutcome.ACHIEVED)`` or
            ``Ok(TrophyOutcome.ALREADY_ACHIEVED)``.
        """
        with self.sessions.lock:
            found = self._find_trophy(trophy_id)
            if not found.ok:
                return found
            if found.value.is_achieved:
                self._log.emit("trophy_already_achieved", trophy_id=trophy_id)
                return Ok(TrophyOutcome.ALREADY_ACHIEVED)
            if not self.sessions.check_session():
                return Err(ErrorKind.NOT_LOGGED_IN, "User is not logged in.")
            result = self._call(
                "trophies", "add-achieved", {"trophy_id": trophy_id}
            )
            if not result.ok:
                return result
            self._log.emit("trophy_achieved", trophy_id=trophy_id)
            return Ok(TrophyOutcome.ACHIEVED)

    def remove_trophy(self, trophy_id: int) -> Result:
        """Revoke a trophy from the stored user.

        Returns:
            ``Ok(TrophyOutcome.REMOVED)``, or
            ``Ok(TrophyOutcome.NOT_ACHIEVED)`` when there was nothing to
            remove.
        """
        with self.sessions.lock:
            found = self._find_trophy(trophy_id)
            if not found.ok:
                return found
            if not found.value.is_achieved:
                self._log.emit("trophy_not_achieved", trophy_id=trophy_id)
                return Ok(TrophyOutcome.NOT_ACHIEVED)
            if not self.sessions.check_session():
                return Err(ErrorKind.NOT_LOGGED_IN, "User is not logged in.")
            result = self._call(
                "trophies", "remove-achieved", {"trophy_id": trophy_id}
            )
            if not result.ok:
                return result
            self._log.emit("trophy_removed", trophy_id=trophy_id)
            return Ok(TrophyOutcome.REMOVED)

    def _find_trophy(self, trophy_id: int) -> Result:
        listing = self.fetch_trophies()
        if not listing.ok:
            return listing
        for trophy in listing.value:
            if trophy.id == trophy_id:
                return Ok(trophy)
        return Err(ErrorKind.SEMANTIC, f"Trophy {trophy_id} does not exist.")

    # -------------------------
    # Scores
    # -------------------------

    def add_score(
        self,
        score: str,
        sort: int,
        table_id: int | None = None,
        extra_data: str = "",
        guest: str | None = None,
    ) -> Result:
        """Submit a score.

        Args:
            score: Display string, e.g. ``"500 jumps"``.
            sort: Numeric value used for ordering.
            table_id: Target table; ``None`` for the primary table.
            extra_data: Hidden data stored alongside the score.
            guest: Submit as this guest name instead of the stored user.

        Returns:
            ``Ok(Score)`` echoing the submitted values.
        """
        params: dict[str, object] = {"score": score, "sort": sort}
        if extra_data:
            params["extra_data"] = extra_data
        params["table_id"] = table_id
        params["guest"] = guest
        as_user = guest is None
        result = self._call(
            "scores",
            "add",
            params,
            include_username=as_user,
            include_token=as_user,
        )
        if not result.ok:
            return result
        self._log.emit("score_added", table_id=table_id, sort=sort)
        return Ok(
            Score(score=score, sort=sort, extra_data=extra_data, guest=guest)
        )

    def fetch_scores(
        self,
        table_id: int | None = None,
        limit: int = DEFAULT_SCORE_LIMIT,
        delimiter: int | None = None,
        only_user: bool = False,
        guest: str | None = None,
    ) -> Result:
        """Return scores from a table.

        Args:
            table_id: Source table; ``None`` for the primary table.
            limit: Number of scores, clamped into ``[1, 100]``.
            delimiter: Signed sort value; see :func:`delimiter_params`.
            only_user: Only the stored user's scores.
            guest: Only scores submitted under this guest name.

        Returns:
            ``Ok(list[Score])``.
        """
        params: dict[str, object] = {"table_id": table_id}
        clamped = clamp_limit(limit)
        if clamped != DEFAULT_SCORE_LIMIT:
            params["limit"] = clamped
        if delimiter is not None:
            params.update(delimiter_params(delimiter))
        params["guest"] = guest
        result = self._call(
            "scores",
            params=params,
            include_username=only_user,
            include_token=only_user,
        )
        if not result.ok:
            return result
        scores = self._records(result.value, "scores")
        if not scores.ok:
            return scores
        return Ok([Score.from_api(s) for s in scores.value])

    def fetch_tables(self) -> Result:
        """Return the score tables defined for the game.

        Returns:
            ``Ok(list[ScoreTable])``.
        """
        result = self._call(
            "scores", "tables", include_username=False, include_token=False
        )
        if not result.ok:
            return result
        tables = self._records(result.value, "tables")
        if not tables.ok:
            return tables
        return Ok([ScoreTable.from_api(t) for t in tables.value])

    def fetch_rank(self, table_id: int | None = None) -> int:
        """Return the stored user's global rank on a table.

        Derived in two steps: the user's best score, then the rank of that
        score's sort value.

        Returns:
            The 1-based rank, or :data:`RANK_UNAVAILABLE` (``-1``) when not
            logged in or when either step yields nothing.
        """
        if not self.sessions.check_session():
            return RANK_UNAVAILABLE
        best = self.fetch_scores(table_id=table_id, limit=1, only_user=True)
        if not best.ok or not best.value:
            return RANK_UNAVAILABLE
        result = self._call(
            "scores",
            "get-rank",
            {"sort": best.value[0].sort, "table_id": table_id},
            include_username=False,
            include_token=False,
        )
        if not result.ok:
            return RANK_UNAVAILABLE
        try:
            return int(result.value.get("rank"))
        except (TypeError, ValueError):
            return RANK_UNAVAILABLE
