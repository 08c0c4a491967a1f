"""Unit tests for TokenSession discovery, renewal and the expiry guard.

Coverage:
* initialized flag transitions only after a complete initialize()
* form-encoded refresh-token exchange against the discovered endpoint
* half-life expiry watermark
* renewal happens once past the watermark and never before it
* renewal failures are reported uniformly and keep the previous token
* unusable discovery documents
"""

from __future__ import annotations

import pytest
import requests

from conftest import (
    DISCOVERY_URL,
    TOKEN_URL,
    FakeClock,
    FakeSession,
    make_response,
    token_payload,
)
from mobilepay_subscriptions.core.config import ClientConfiguration
from mobilepay_subscriptions.core.errors import (
    DiscoveryError,
    NotInitializedError,
    TokenRenewalError,
)
from mobilepay_subscriptions.core.session import TokenRecord, TokenResponse, TokenSession


def _session(
    config: ClientConfiguration, transport: FakeSession, clock: FakeClock
) -> TokenSession:
    return TokenSession(config, session=transport, clock=clock)  # type: ignore[arg-type]


# --------------------------------------------------------------------------- #
# Initialization                                                              #
# --------------------------------------------------------------------------- #
def test_initialized_flag_flips_after_initialize(config, fake_session, clock) -> None:
    tokens = _session(config, fake_session, clock)
    assert tokens.is_initialized() is False

    tokens.initialize()

    assert tokens.is_initialized() is True


def test_initialize_fetches_discovery_then_exchanges_refresh_token(
    config, fake_session, clock
) -> None:
    tokens = _session(config, fake_session, clock)
    tokens.initialize()

    assert [(c["method"], c["url"]) for c in fake_session.calls] == [
        ("GET", DISCOVERY_URL),
        ("POST", TOKEN_URL),
    ]
    token_call = fake_session.calls[1]
    assert token_call["headers"] == {"Content-Type": "application/x-www-form-urlencoded"}
    assert token_call["data"] == {
        "grant_type": "refresh_token",
        "client_id": "merchant-id",
        "client_secret": "merchant-secret",
        "refresh_token": "refresh-1",
    }
    assert tokens.ensure_fresh_token() == "abc"


def test_initialize_again_repeats_discovery_and_renewal(config, fake_session, clock) -> None:
    tokens = _session(config, fake_session, clock)
    tokens.initialize()
    tokens.initialize()

    assert len(fake_session.calls_to(DISCOVERY_URL)) == 2
    assert len(fake_session.calls_to(TOKEN_URL)) == 2
    assert tokens.is_initialized() is True


def test_guard_before_initialize_raises_without_http(config, clock) -> None:
    transport = FakeSession()
    tokens = _session(config, transport, clock)

    with pytest.raises(NotInitializedError, match="initialized before use"):
        tokens.ensure_fresh_token()
    assert transport.calls == []


# --------------------------------------------------------------------------- #
# Expiry watermark                                                            #
# --------------------------------------------------------------------------- #
def test_watermark_is_half_of_expires_in() -> None:
    response = TokenResponse.from_response(token_payload(expires_in=3600))
    record = TokenRecord.issue(response, now=5_000.0)

    assert record.issued_at == 5_000.0
    assert record.expires_at == 5_000.0 + 1_800
    assert record.access_token == "abc"
    assert record.response.token_type == "Bearer"


def test_renew_stores_watermark_from_clock(config, clock) -> None:
    transport = FakeSession()
    transport.add("GET", DISCOVERY_URL, make_response(200, {"token_endpoint": TOKEN_URL}))
    transport.add("POST", TOKEN_URL, make_response(200, token_payload(expires_in=3600)))
    tokens = _session(config, transport, clock)
    tokens.initialize()

    record = tokens.renew()

    assert record.expires_at == clock.now + 1_800


def test_no_renewal_before_watermark(config, fake_session, clock) -> None:
    tokens = _session(config, fake_session, clock)
    tokens.initialize()

    clock.advance(50)
    tokens.ensure_fresh_token()

    assert len(fake_session.calls_to(TOKEN_URL)) == 1


def test_exactly_one_renewal_after_watermark(config, clock) -> None:
    transport = FakeSession()
    transport.add("GET", DISCOVERY_URL, make_response(200, {"token_endpoint": TOKEN_URL}))
    transport.add(
        "POST",
        TOKEN_URL,
        make_response(200, token_payload("first")),
        make_response(200, token_payload("second")),
    )
    tokens = _session(config, transport, clock)
    tokens.initialize()

    clock.advance(51)
    assert tokens.ensure_fresh_token() == "second"
    assert tokens.ensure_fresh_token() == "second"

    assert len(transport.calls_to(TOKEN_URL)) == 2


# --------------------------------------------------------------------------- #
# Renewal failures                                                            #
# --------------------------------------------------------------------------- #
@pytest.mark.parametrize(
    "failure",
    [
        make_response(200, text="<html>oops</html>"),
        make_response(200, {"token_type": "Bearer"}),
        make_response(200, {"access_token": "abc", "expires_in": "soon"}),
        make_response(200, text='{"access_token": "abc", "expires_in": NaN}'),
        make_response(200, text='{"access_token": "abc", "expires_in": Infinity}'),
        make_response(200, {"access_token": "abc", "expires_in": -1}),
        make_response(200, {"access_token": "abc", "expires_in": 0}),
        make_response(200, {"access_token": "abc", "expires_in": 10**400}),
        make_response(400, {"error": "invalid_grant"}),
        requests.ConnectionError("connection refused"),
    ],
    ids=[
        "non-json",
        "missing-fields",
        "bad-expires-in",
        "nan-expires-in",
        "infinite-expires-in",
        "negative-expires-in",
        "zero-expires-in",
        "overflowing-expires-in",
        "error-status",
        "network",
    ],
)
def test_renewal_failure_is_uniform_and_keeps_previous_token(
    config, clock, failure
) -> None:
    transport = FakeSession()
    transport.add("GET", DISCOVERY_URL, make_response(200, {"token_endpoint": TOKEN_URL}))
    transport.add("POST", TOKEN_URL, make_response(200, token_payload("kept")), failure)
    tokens = _session(config, transport, clock)
    tokens.initialize()
    previous = tokens._token

    with pytest.raises(TokenRenewalError, match="Failed to renew access token") as excinfo:
        tokens.renew()

    assert excinfo.value.cause is not None
    assert excinfo.value.__cause__ is excinfo.value.cause
    assert tokens._token is previous


def test_initialize_fails_when_first_renewal_fails(config, clock) -> None:
    transport = FakeSession()
    transport.add("GET", DISCOVERY_URL, make_response(200, {"token_endpoint": TOKEN_URL}))
    transport.add("POST", TOKEN_URL, make_response(200, text="not json"))
    tokens = _session(config, transport, clock)

    with pytest.raises(TokenRenewalError):
        tokens.initialize()
    assert tokens.is_initialized() is False


# --------------------------------------------------------------------------- #
# Discovery failures                                                          #
# --------------------------------------------------------------------------- #
@pytest.mark.parametrize(
    "response",
    [
        make_response(503, text="unavailable"),
        make_response(200, text="not json"),
        make_response(200, {"issuer": "https://auth"}),
        make_response(200, ["token_endpoint"]),
    ],
    ids=["error-status", "non-json", "missing-endpoint", "not-an-object"],
)
def test_unusable_discovery_leaves_session_uninitialized(config, clock, response) -> None:
    transport = FakeSession()
    transport.add("GET", DISCOVERY_URL, response)
    tokens = _session(config, transport, clock)

    with pytest.raises(DiscoveryError):
        tokens.initialize()
    assert tokens.is_initialized() is False
    assert transport.calls_to(TOKEN_URL) == []


def test_discovery_transport_error_propagates(config, clock) -> None:
    transport = FakeSession()
    transport.add("GET", DISCOVERY_URL, requests.ConnectionError("down"))
    tokens = _session(config, transport, clock)

    with pytest.raises(requests.ConnectionError):
        tokens.initialize()
    assert tokens.is_initialized() is False


def test_nan_lifetime_never_leaves_an_unrenewable_token(config, clock) -> None:
    transport = FakeSession()
    transport.add("GET", DISCOVERY_URL, make_response(200, {"token_endpoint": TOKEN_URL}))
    transport.add(
        "POST",
        TOKEN_URL,
        make_response(200, text='{"access_token": "abc", "expires_in": NaN}'),
    )
    tokens = _session(config, transport, clock)

    with pytest.raises(TokenRenewalError):
        tokens.initialize()
    clock.advance(10**9)
    with pytest.raises(NotInitializedError):
        tokens.ensure_fresh_token()


# --------------------------------------------------------------------------- #
# Token type                                                                  #
# --------------------------------------------------------------------------- #
def test_token_type_is_read_from_current_token(config, fake_session, clock) -> None:
    tokens = _session(config, fake_session, clock)
    assert tokens.token_type() is None

    tokens.initialize()

    assert tokens.token_type() == "Bearer"
