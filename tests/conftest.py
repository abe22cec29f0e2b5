"""Pytest shared fixtures."""
import json
import os
import pathlib
import sys
from types import SimpleNamespace

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")
os.environ.setdefault("KEYCLOAK_URL", "http://kc.test")
os.environ.setdefault("KEYCLOAK_REALM", "demo")

import pytest
import requests


USERS_URL = "http://kc.test/admin/realms/demo/users"


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code: int = 200, text: str | None = None):
        self._payload = payload
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as exc:
            raise requests.JSONDecodeError(exc.msg, exc.doc, exc.pos) from exc

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(response=self)


class FakeKeycloak:
    """Provider and HTTP client double for UserFinder.

    Maps request URLs to canned responses or exceptions and records every
    URL sent, in order. Unknown URLs answer 200 with an empty array.
    """

    def __init__(self):
        self.routes = {}
        self.sent = []
        self.provider_error = None
        self.provider_calls = []

    def respond(self, url, payload=None, status_code=200, text=None):
        self.routes[url] = StubResponse(payload if payload is not None else [], status_code, text)

    def fail(self, url, exc):
        self.routes[url] = exc

    def get_http_client_and_request(self, method, url, data=None):
        self.provider_calls.append((method, url, data))
        if self.provider_error is not None:
            raise self.provider_error
        return self, SimpleNamespace(method=method, url=url, headers={"Authorization": "Bearer test-token"})

    def send(self, request, timeout=None):
        self.sent.append(request.url)
        outcome = self.routes.get(request.url, StubResponse([]))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def kc_user(user_id, username=None, email=None, **attributes):
    """Build a Keycloak user representation."""
    rep = {
        "id": user_id,
        "username": username or user_id,
        "email": email or f"{user_id}@example.com",
        "enabled": True,
    }
    if attributes:
        rep["attributes"] = {key: list(values) for key, values in attributes.items()}
    return rep


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from hitting a live Keycloak.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _stub_post(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP POST in unit test: {url}")

    def _stub_send(self, prepared, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP {prepared.method} in unit test: {prepared.url}")

    monkeypatch.setattr(requests, "post", _stub_post)
    monkeypatch.setattr(requests.Session, "send", _stub_send)


@pytest.fixture()
def fake_keycloak():
    return FakeKeycloak()


@pytest.fixture()
def finder(fake_keycloak):
    from userservice.core.user_finder import UserFinder

    return UserFinder(fake_keycloak, USERS_URL)


@pytest.fixture()
def users_url():
    return USERS_URL


@pytest.fixture(name="kc_user")
def kc_user_factory():
    """Factory for Keycloak user representations: kc_user("u1", type=["staff"])."""
    return kc_user


@pytest.fixture()
def stub_response():
    """The StubResponse class, for tests that stub requests.post."""
    return StubResponse
