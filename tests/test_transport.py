"""Unit tests for the HTTP transport."""

import pytest
import requests
from structlog.testing import capture_logs

from gamejolt.api.signer import SignedRequest
from gamejolt.api.transport import Transport
from gamejolt.core.exceptions import TransportError
from conftest import BASE_URL, FakeResponse

REQUEST = SignedRequest(url=f"{BASE_URL}/scores/?game_id=1&signature=x", endpoint="scores")


@pytest.fixture()
def transport(config, http):
    return Transport(config, session=http)


def test_no_request_means_no_network(transport, http):
    assert transport.fetch(None) is None
    assert http.calls == []


@pytest.mark.parametrize("success", ["true", True, "True", 1])
def test_success_flag_normalised_true(transport, http, success):
    http.on("scores", {"success": success, "scores": []})
    envelope = transport.fetch(REQUEST)
    assert envelope.success is True
    assert envelope.data["scores"] == []


@pytest.mark.parametrize("success", ["false", False, None, "nope"])
def test_success_flag_normalised_false(transport, http, success):
    http.on("scores", {"success": success, "message": "bad"})
    envelope = transport.fetch(REQUEST)
    assert envelope.success is False
    assert envelope.message == "bad"


def test_sets_headers(transport, http, config):
    assert http.headers["User-Agent"] == config.user_agent
    assert http.headers["Accept"] == "application/json"


@pytest.mark.parametrize(
    "reply",
    [
        FakeResponse({"response": {"success": "true"}}, status_code=500),
        requests.ConnectionError("connection refused"),
        FakeResponse(ValueError("no json")),
        FakeResponse({"unexpected": True}),
        FakeResponse(["not", "an", "object"]),
    ],
)
def test_failures_raise_and_log(transport, http, reply):
    http.on("scores", reply)
    with capture_logs() as logs:
        with pytest.raises(TransportError):
            transport.fetch(REQUEST)
    assert logs[0]["event"] == "transport_failed"
    assert logs[0]["endpoint"] == "scores"


def test_timeout_passed_through(config):
    seen = {}

    class RecordingSession:
        headers = {}

        def get(self, url, timeout=None):
            seen["timeout"] = timeout
            return FakeResponse({"response": {"success": True}})

    Transport(config, session=RecordingSession()).fetch(REQUEST)
    assert seen["timeout"] is None
