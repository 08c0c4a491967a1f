"""
Core primitives: configuration, the OIDC token session and the API client.
"""

from .client import SubscriptionsClient
from .config import (
    ApplicationCredentials,
    ClientConfiguration,
    ConfigError,
    MerchantCredentials,
    load_client_config,
)
from .environment import ClientEnvironment, build_environment, load_env_file
from .errors import (
    DiscoveryError,
    NotInitializedError,
    ResponseDecodeError,
    SubscriptionsError,
    TokenRenewalError,
)
from .session import DiscoveryDocument, TokenRecord, TokenResponse, TokenSession

__all__ = [
    "ApplicationCredentials",
    "ClientConfiguration",
    "ClientEnvironment",
    "ConfigError",
    "DiscoveryDocument",
    "DiscoveryError",
    "MerchantCredentials",
    "NotInitializedError",
    "ResponseDecodeError",
    "SubscriptionsClient",
    "SubscriptionsError",
    "TokenRecord",
    "TokenRenewalError",
    "TokenResponse",
    "TokenSession",
    "build_environment",
    "load_client_config",
    "load_env_file",
]
