"""
Exception types raised by the subscriptions client.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "DiscoveryError",
    "NotInitializedError",
    "ResponseDecodeError",
    "SubscriptionsError",
    "TokenRenewalError",
]

NOT_INITIALIZED_MESSAGE = "MobilePay should be initialized before use"
TOKEN_RENEWAL_MESSAGE = "Failed to renew access token"


class SubscriptionsError(Exception):
    """Base exception for all client errors."""


class NotInitializedError(SubscriptionsError):
    """Raised when an operation runs before :meth:`initialize` succeeded."""

    def __init__(self, message: str = NOT_INITIALIZED_MESSAGE) -> None:
        super().__init__(message)


class TokenRenewalError(SubscriptionsError):
    """
    Raised for any failure while exchanging the refresh token.

    Transport failures and unusable token responses are reported the same
    way. The underlying exception is kept on ``cause`` for diagnostics only.
    """

    def __init__(self, cause: Optional[BaseException] = None) -> None:
        super().__init__(TOKEN_RENEWAL_MESSAGE)
        self.cause = cause


class DiscoveryError(SubscriptionsError):
    """Raised when the OIDC discovery document cannot be used."""


class ResponseDecodeError(SubscriptionsError):
    """Raised when a business endpoint answers with a non-JSON body."""

    def __init__(self, url: str, status_code: int, text: str) -> None:
        super().__init__(
            f"Failed to parse JSON from {url} (status {status_code}): {text[:200]}"
        )
        self.url = url
        self.status_code = status_code
