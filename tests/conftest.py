"""Shared fixtures: a stub HTTP session routed by endpoint path."""

import pytest
import requests

from gamejolt.api.client import GameJoltClient
from gamejolt.auth.interfaces import Credentials, MemoryCredentialStore
from gamejolt.core.config import ClientConfig

BASE_URL = "https://api.test/v1"

OK = {"success": "true"}
FAIL = {"success": "false", "message": "No."}


class FakeResponse:
    """Minimal stand-in for :class:`requests.Response`."""

    def __init__(self, body=None, status_code=200, content=b""):
        self._body = body
        self.status_code = status_code
        self.content = content

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


class FakeSession:
    """Answers GETs from per-endpoint queues.

    Each queue entry is a response payload (wrapped in ``{"response": ...}``),
    a :class:`FakeResponse`, an exception to raise, or a callable taking the
    URL and returning one of those.  The last entry of a queue repeats.
    """

    def __init__(self, base_url=BASE_URL):
        self.base_url = base_url
        self.headers = {}
        self.routes = {}
        self.calls = []

    def on(self, endpoint, *payloads):
        self.routes[endpoint] = list(payloads)
        return self

    def endpoint_of(self, url):
        return url[len(self.base_url) + 1:].split("/?", 1)[0]

    @property
    def endpoints(self):
        return [self.endpoint_of(url) for url in self.calls]

    def get(self, url, timeout=None):
        self.calls.append(url)
        queue = self.routes.get(self.endpoint_of(url))
        if not queue:
            raise AssertionError(f"unexpected request: {url}")
        payload = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(payload):
            payload = payload(url)
        if isinstance(payload, Exception):
            raise payload
        if isinstance(payload, FakeResponse):
            return payload
        return FakeResponse({"response": payload})


@pytest.fixture()
def config():
    return ClientConfig(game_id=555, private_key="abc", base_url=BASE_URL)


@pytest.fixture()
def credentials():
    return Credentials(username="pablito", token="xyz")


@pytest.fixture()
def store(credentials):
    return MemoryCredentialStore(credentials)


@pytest.fixture()
def http():
    return FakeSession()


@pytest.fixture()
def client(config, store, http):
    return GameJoltClient(config, store=store, session=http)


def user_payload(user_id, username, avatar_url=""):
    return {
        "id": str(user_id),
        "type": "User",
        "username": username,
        "avatar_url": avatar_url,
        "signed_up": "1 year ago",
        "signed_up_timestamp": 1600000000,
        "last_logged_in": "Online Now",
        "last_logged_in_timestamp": 1700000000,
        "status": "Active",
        "developer_name": "",
        "developer_website": "",
        "developer_description": "",
    }
