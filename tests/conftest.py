"""Shared fixtures: a scripted transport, a controllable clock and a config."""

from __future__ import annotations

import json
from collections import deque
from types import SimpleNamespace
from typing import Any, Deque, Dict, List, Optional, Tuple

import pytest

from mobilepay_subscriptions.core.client import SubscriptionsClient
from mobilepay_subscriptions.core.config import (
    ApplicationCredentials,
    ClientConfiguration,
    MerchantCredentials,
)

DISCOVERY_URL = "https://auth.example.test/.well-known/openid-configuration"
TOKEN_URL = "https://auth/token"
API_URL = "https://api.example.test"
PROVIDER_ID = "provider-1"
PROVIDER_URL = f"{API_URL}/subscriptions/api/providers/{PROVIDER_ID}"


def make_response(
    status_code: int = 200,
    payload: Any = None,
    *,
    text: Optional[str] = None,
) -> SimpleNamespace:
    """Return a response double exposing ``status_code``, ``text`` and ``json()``."""
    body = text if text is not None else ("" if payload is None else json.dumps(payload))

    def _json() -> Any:
        return json.loads(body)

    return SimpleNamespace(status_code=status_code, text=body, json=_json)


def token_payload(access_token: str = "abc", expires_in: int = 100) -> Dict[str, Any]:
    return {
        "id_token": "id-token",
        "access_token": access_token,
        "expires_in": expires_in,
        "token_type": "Bearer",
        "refresh_token": "new-refresh",
        "scope": "openid subscriptions",
    }


class FakeSession:
    """Scripted stand-in for ``requests.Session`` that records every request."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self._routes: Dict[Tuple[str, str], Deque[Any]] = {}

    def add(self, method: str, url: str, *responses: Any) -> None:
        self._routes.setdefault((method, url), deque()).extend(responses)

    def request(self, method: str, url: str, **kwargs: Any) -> Any:
        self.calls.append({"method": method, "url": url, **kwargs})
        queue = self._routes.get((method, url))
        if not queue:
            raise AssertionError(f"unexpected request {method} {url}")
        outcome = queue[0] if len(queue) == 1 else queue.popleft()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def calls_to(self, url: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["url"] == url]


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def config() -> ClientConfiguration:
    return ClientConfiguration(
        discovery_endpoint=DISCOVERY_URL,
        api_endpoint=API_URL + "/",
        merchant=MerchantCredentials(
            client_id="merchant-id",
            client_secret="merchant-secret",
            refresh_token="refresh-1",
            provider_id=PROVIDER_ID,
        ),
        application=ApplicationCredentials(
            client_id="app-id",
            client_secret="app-secret",
        ),
    )


@pytest.fixture()
def fake_session() -> FakeSession:
    session = FakeSession()
    session.add("GET", DISCOVERY_URL, make_response(200, {"token_endpoint": TOKEN_URL}))
    session.add("POST", TOKEN_URL, make_response(200, token_payload()))
    return session


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def client(
    config: ClientConfiguration, fake_session: FakeSession, clock: FakeClock
) -> SubscriptionsClient:
    return SubscriptionsClient(config, session=fake_session, clock=clock)  # type: ignore[arg-type]


@pytest.fixture()
def ready_client(client: SubscriptionsClient) -> SubscriptionsClient:
    client.initialize()
    return client
