"""
OIDC session management: discovery, refresh-token exchange and expiry guard.

The access token is considered stale half-way through its advertised
lifetime, so a renewal always happens well before the provider would reject
the token.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from .config import ClientConfiguration
from .errors import DiscoveryError, NotInitializedError, TokenRenewalError

__all__ = [
    "Clock",
    "DiscoveryDocument",
    "TokenRecord",
    "TokenResponse",
    "TokenSession",
    "fetch_discovery_document",
    "request_token",
]

Clock = Callable[[], float]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class DiscoveryDocument:
    token_endpoint: str
    raw: Dict[str, Any]

    @classmethod
    def from_response(cls, payload: Mapping[str, Any]) -> "DiscoveryDocument":
        token_endpoint = payload.get("token_endpoint")
        if not isinstance(token_endpoint, str) or not token_endpoint:
            raise DiscoveryError("Discovery document does not name a token_endpoint")
        return cls(token_endpoint=token_endpoint, raw=dict(payload))


@dataclass(frozen=True)
class TokenResponse:
    """Fields of a token endpoint response."""

    access_token: str
    expires_in: float
    raw: Dict[str, Any]
    id_token: Optional[str] = None
    token_type: Optional[str] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    @classmethod
    def from_response(cls, payload: Mapping[str, Any]) -> "TokenResponse":
        access_token = payload["access_token"]
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("access_token must be a non-empty string")
        expires_in = payload["expires_in"]
        if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
            raise ValueError(f"expires_in must be a number, got {expires_in!r}")
        try:
            lifetime = float(expires_in)
        except OverflowError:
            lifetime = math.inf
        if not math.isfinite(lifetime) or lifetime <= 0:
            raise ValueError(f"expires_in must be a positive finite number, got {expires_in!r}")
        return cls(
            access_token=access_token,
            expires_in=lifetime,
            raw=dict(payload),
            id_token=payload.get("id_token"),
            token_type=payload.get("token_type"),
            refresh_token=payload.get("refresh_token"),
            scope=payload.get("scope"),
        )


@dataclass(frozen=True)
class TokenRecord:
    """An access token together with the moment it stops being trusted."""

    response: TokenResponse
    access_token: str
    issued_at: float
    expires_at: float

    @classmethod
    def issue(cls, response: TokenResponse, *, now: float) -> "TokenRecord":
        return cls(
            response=response,
            access_token=response.access_token,
            issued_at=now,
            expires_at=now + response.expires_in / 2,
        )

    def is_stale(self, now: float) -> bool:
        return self.expires_at < now


def fetch_discovery_document(
    session: requests.Session,
    url: str,
    *,
    timeout: float,
) -> DiscoveryDocument:
    logging.info("Fetching OIDC discovery document from %s", url)
    response = session.request("GET", url, timeout=timeout)
    if response.status_code >= 400:
        raise DiscoveryError(
            f"Discovery endpoint responded with {response.status_code}: {response.text[:200]}"
        )
    try:
        payload = response.json()
    except ValueError as exc:
        raise DiscoveryError(f"Failed to parse JSON from discovery endpoint at {url}") from exc
    if not isinstance(payload, dict):
        raise DiscoveryError(f"Discovery endpoint at {url} did not return a JSON object")
    return DiscoveryDocument.from_response(payload)


def request_token(
    session: requests.Session,
    token_endpoint: str,
    config: ClientConfiguration,
) -> TokenResponse:
    """Exchange the merchant's refresh token at ``token_endpoint``."""
    form = {
        "grant_type": "refresh_token",
        "client_id": config.merchant.client_id,
        "client_secret": config.merchant.client_secret,
        "refresh_token": config.merchant.refresh_token,
    }
    response = session.request(
        "POST",
        token_endpoint,
        headers={"Content-Type": FORM_CONTENT_TYPE},
        data=form,
        timeout=config.timeout_seconds,
    )
    if response.status_code >= 400:
        raise RuntimeError(
            f"Token endpoint responded with {response.status_code}: {response.text[:200]}"
        )
    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError("Token endpoint did not return a JSON object")
    return TokenResponse.from_response(payload)


class TokenSession:
    """
    Owns the discovery document, the current token and the initialized flag.

    Nothing else reads or writes those three; callers go through
    :meth:`ensure_fresh_token`. Renewal is not serialized: two callers that
    observe a stale token at the same time both renew, and the later
    response wins.
    """

    def __init__(
        self,
        config: ClientConfiguration,
        *,
        session: Optional[requests.Session] = None,
        clock: Clock = time.time,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self._clock = clock
        self._discovery: Optional[DiscoveryDocument] = None
        self._token: Optional[TokenRecord] = None
        self._initialized = False

    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """
        Fetch discovery metadata and perform the first token exchange.

        Calling it again repeats both steps. Transport errors and
        :class:`DiscoveryError` propagate from the discovery step;
        :class:`TokenRenewalError` from the exchange.
        """
        self._discovery = fetch_discovery_document(
            self.session,
            self.config.discovery_endpoint,
            timeout=self.config.timeout_seconds,
        )
        self.renew()
        self._initialized = True

    def renew(self) -> TokenRecord:
        """Exchange the refresh token and replace the stored token record."""
        if self._discovery is None:
            raise NotInitializedError()
        token_endpoint = self._discovery.token_endpoint
        try:
            response = request_token(self.session, token_endpoint, self.config)
        except (requests.RequestException, RuntimeError, ValueError, KeyError, TypeError) as exc:
            logging.warning("Access token renewal against %s failed: %s", token_endpoint, exc)
            raise TokenRenewalError(exc) from exc

        record = TokenRecord.issue(response, now=self._clock())
        self._token = record
        logging.info(
            "Renewed access token (expires in %ss, renewing after %ss)",
            response.expires_in,
            response.expires_in / 2,
        )
        return record

    def ensure_fresh_token(self) -> str:
        """Return a usable access token, renewing it first when stale."""
        if not self._initialized or self._token is None:
            raise NotInitializedError()
        if self._token.is_stale(self._clock()):
            logging.debug("Access token passed its renewal watermark")
            self.renew()
        return self._token.access_token

    def token_type(self) -> Optional[str]:
        """Return the ``token_type`` of the current token, if one was issued."""
        if self._token is None:
            return None
        return self._token.response.token_type
