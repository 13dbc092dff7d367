"""Data model dataclasses returned by the client."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


_TRUE_VALUES = ("true", "1")


def is_truthy(value: Any) -> bool:
    """Normalise the service's mixed boolean representations.

    Endpoints report flags either as JSON booleans or as the strings
    ``"true"``/``"false"``.  Both collapse to a single :class:`bool` here.

    Args:
        value: The raw field value from a response.

    Returns:
        ``True`` for ``True``, ``1``, ``"true"`` (any case) and ``"1"``.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return False


def _to_int(value: Any, default: int | None = None) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ----------------------
# Envelope
# ----------------------


@dataclass(frozen=True)
class Envelope:
    """The ``response`` object every endpoint wraps its payload in."""

    success: bool
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        """The service's explanation for a ``success: false`` reply."""
        return str(self.data.get("message", ""))

    @classmethod
    def from_body(cls, body: Any) -> "Envelope | None":
        """Extract the envelope from a decoded JSON body.

        Args:
            body: The decoded response body.

        Returns:
            An :class:`Envelope`, or ``None`` when the body has no
            ``response`` object.
        """
        if not isinstance(body, dict):
            return None
        response = body.get("response")
        if not isinstance(response, dict):
            return None
        return cls(success=is_truthy(response.get("success")), data=response)


# ----------------------
# Score
# ----------------------


@dataclass(frozen=True)
class Score:
    """Represents one entry on a score table."""

    score: str
    """Display string, e.g. ``"500 jumps"``."""

    sort: int
    """Numeric value the table is ordered by."""

    extra_data: str = ""
    user: str | None = None
    user_id: int | None = None
    guest: str | None = None
    """Guest name when the score was not submitted by a registered user."""

    stored: str | None = None
    """Human-readable age of the score, e.g. ``"2 weeks ago"``."""

    stored_timestamp: int | None = None

    @classmethod
    def from_api(cls, raw: dict) -> "Score":
        return cls(
            score=str(raw.get("score", "")),
            sort=_to_int(raw.get("sort"), 0),
            extra_data=raw.get("extra_data") or "",
            user=raw.get("user") or None,
            user_id=_to_int(raw.get("user_id")),
            guest=raw.get("guest") or None,
            stored=raw.get("stored") or None,
            stored_timestamp=_to_int(raw.get("stored_timestamp")),
        )


@dataclass(frozen=True)
class ScoreTable:
    """Represents a score table defined for the game."""

    id: int
    name: str
    description: str
    primary: bool
    """``True`` for the table used when no ``table_id`` is given."""

    @classmethod
    def from_api(cls, raw: dict) -> "ScoreTable":
        return cls(
            id=_to_int(raw.get("id"), 0),
            name=raw.get("name", ""),
            description=raw.get("description", ""),
            primary=is_truthy(raw.get("primary")),
        )


# ----------------------
# Trophy
# ----------------------


@dataclass(frozen=True)
class NotAchieved:
    """The trophy has not been earned by the user."""


@dataclass(frozen=True)
class Achieved:
    """The trophy has been earned."""

    elapsed: str
    """How long ago, as reported by the service (e.g. ``"5 days ago"``)."""


Achievement = NotAchieved | Achieved


def parse_achievement(value: Any) -> Achievement:
    """Map the raw ``achieved`` field to its tagged variant.

    The service sends ``false`` (boolean or string) for trophies that are
    not earned and an elapsed-time description for those that are.
    """
    if value is None or value is False:
        return NotAchieved()
    text = str(value).strip()
    if not text or text.lower() == "false":
        return NotAchieved()
    return Achieved(elapsed=text)


@dataclass(frozen=True)
class Trophy:
    """Represents a trophy defined for the game."""

    id: int
    title: str
    description: str
    difficulty: str
    """One of ``"Bronze"``, ``"Silver"``, ``"Gold"``, ``"Platinum"``."""

    image_url: str
    achieved: Achievement = NotAchieved()

    @property
    def is_achieved(self) -> bool:
        return isinstance(self.achieved, Achieved)

    @classmethod
    def from_api(cls, raw: dict) -> "Trophy":
        return cls(
            id=_to_int(raw.get("id"), 0),
            title=raw.get("title", ""),
            description=raw.get("description", ""),
            difficulty=raw.get("difficulty", ""),
            image_url=raw.get("image_url", ""),
            achieved=parse_achievement(raw.get("achieved")),
        )


class TrophyOutcome(str, Enum):
    """What a trophy add/remove call did."""

    ACHIEVED = "achieved"
    ALREADY_ACHIEVED = "already_achieved"
    REMOVED = "removed"
    NOT_ACHIEVED = "not_achieved"


# ----------------------
# UserProfile
# ----------------------


@dataclass(frozen=True)
class UserProfile:
    """Snapshot of a user's public profile."""

    id: int
    type: str
    """``"User"`` or ``"Developer"``."""

    username: str
    avatar_url: str
    signed_up: str
    signed_up_timestamp: int | None
    last_logged_in: str
    """Human-readable, e.g. ``"Online Now"`` or ``"2 days ago"``."""

    last_logged_in_timestamp: int | None
    status: str
    """``"Active"`` or ``"Banned"``."""

    developer_name: str = ""
    developer_website: str = ""
    developer_description: str = ""

    @classmethod
    def from_api(cls, raw: dict) -> "UserProfile":
        return cls(
            id=_to_int(raw.get("id"), 0),
            type=raw.get("type", ""),
            username=raw.get("username", ""),
            avatar_url=raw.get("avatar_url", ""),
            signed_up=raw.get("signed_up", ""),
            signed_up_timestamp=_to_int(raw.get("signed_up_timestamp")),
            last_logged_in=raw.get("last_logged_in", ""),
            last_logged_in_timestamp=_to_int(
                raw.get("last_logged_in_timestamp")
            ),
            status=raw.get("status", ""),
            developer_name=raw.get("developer_name") or "",
            developer_website=raw.get("developer_website") or "",
            developer_description=raw.get("developer_description") or "",
        )
