"""Unit tests for core domain models and configuration."""

import pytest

from gamejolt.auth.interfaces import Credentials
from gamejolt.core.config import DEFAULT_BASE_URL, ClientConfig
from gamejolt.core.exceptions import (
    AuthenticationError,
    ConfigurationMissingError,
    GameJoltError,
    TransportError,
)
from gamejolt.core.models import (
    Achieved,
    Envelope,
    NotAchieved,
    Score,
    Trophy,
    UserProfile,
    is_truthy,
    parse_achievement,
)
from gamejolt.core.result import Err, ErrorKind, Ok


class TestTruthy:
    @pytest.mark.parametrize("value", [True, "true", "TRUE", " true ", 1, "1"])
    def test_true(self, value):
        assert is_truthy(value) is True

    @pytest.mark.parametrize("value", [False, "false", "", None, 0, "0", "yes", 2])
    def test_false(self, value):
        assert is_truthy(value) is False


class TestEnvelope:
    def test_from_body(self):
        envelope = Envelope.from_body({"response": {"success": "false", "message": "bad"}})
        assert envelope.success is False
        assert envelope.message == "bad"

    @pytest.mark.parametrize("body", [None, [], {"response": "x"}, {"other": {}}])
    def test_missing_response(self, body):
        assert Envelope.from_body(body) is None


class TestTrophy:
    @pytest.mark.parametrize("raw", [False, "false", "FALSE", None, ""])
    def test_not_achieved(self, raw):
        assert parse_achievement(raw) == NotAchieved()

    def test_achieved_keeps_description(self):
        assert parse_achievement("3 weeks ago") == Achieved(elapsed="3 weeks ago")

    def test_defaults_to_not_achieved(self):
        trophy = Trophy(id=1, title="t", description="", difficulty="Gold", image_url="")
        assert trophy.is_achieved is False


class TestScore:
    def test_from_api_tolerates_blanks(self):
        score = Score.from_api({"score": "12 coins", "sort": "12", "user_id": ""})
        assert score.sort == 12
        assert score.user_id is None
        assert score.extra_data == ""

    def test_is_immutable(self):
        score = Score(score="1", sort=1)
        with pytest.raises(AttributeError):
            score.sort = 2


class TestUserProfile:
    def test_developer_fields_default_empty(self):
        profile = UserProfile.from_api({"id": "3", "username": "dev", "developer_name": None})
        assert profile.id == 3
        assert profile.developer_name == ""
        assert profile.signed_up_timestamp is None


class TestCredentials:
    @pytest.mark.parametrize(
        "username, token", [("", "t"), ("u", ""), (None, "t"), ("u", None), ("  ", "t")]
    )
    def test_from_pair_needs_both(self, username, token):
        assert Credentials.from_pair(username, token) is None

    def test_from_pair(self):
        assert Credentials.from_pair(" ana ", "t0k") == Credentials("ana", "t0k")

    def test_half_filled_rejected(self):
        with pytest.raises(ValueError):
            Credentials(username="ana", token="")


class TestResult:
    def test_ok(self):
        assert Ok(5).ok and Ok(5).unwrap() == 5

    @pytest.mark.parametrize(
        "kind, exc",
        [
            (ErrorKind.CONFIGURATION_MISSING, ConfigurationMissingError),
            (ErrorKind.TRANSPORT, TransportError),
            (ErrorKind.AUTHENTICATION, AuthenticationError),
            (ErrorKind.NOT_LOGGED_IN, AuthenticationError),
            (ErrorKind.SEMANTIC, GameJoltError),
        ],
    )
    def test_err_unwrap_raises(self, kind, exc):
        err = Err(kind, "down")
        assert not err.ok
        with pytest.raises(exc, match="down"):
            err.unwrap()


class TestClientConfig:
    @pytest.mark.parametrize(
        "game_id, key, configured",
        [(1, "k", True), (0, "k", False), (1, "", False)],
    )
    def test_is_configured(self, game_id, key, configured):
        assert ClientConfig(game_id=game_id, private_key=key).is_configured is configured

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("GAMEJOLT_GAME_ID", "555")
        monkeypatch.setenv("GAMEJOLT_PRIVATE_KEY", "abc")
        monkeypatch.setenv("GAMEJOLT_USE_MD5", "false")
        monkeypatch.setenv("GAMEJOLT_VERBOSE", "0")
        monkeypatch.setenv("GAMEJOLT_TIMEOUT", "2.5")
        monkeypatch.delenv("GAMEJOLT_BASE_URL", raising=False)
        config = ClientConfig.from_env()
        assert config.identity.id == 555
        assert config.private_key == "abc"
        assert config.use_md5 is False
        assert config.verbose is False
        assert config.timeout == 2.5
        assert config.base_url == DEFAULT_BASE_URL

    def test_from_env_malformed(self, monkeypatch):
        monkeypatch.setenv("GAMEJOLT_GAME_ID", "not-a-number")
        monkeypatch.setenv("GAMEJOLT_PRIVATE_KEY", "abc")
        monkeypatch.setenv("GAMEJOLT_TIMEOUT", "soon")
        monkeypatch.delenv("GAMEJOLT_USE_MD5", raising=False)
        config = ClientConfig.from_env()
        assert config.is_configured is False
        assert config.timeout is None
        assert config.use_md5 is True
