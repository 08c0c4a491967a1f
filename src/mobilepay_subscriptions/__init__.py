"""
Client for the MobilePay Subscriptions API.

The commonly used pieces are re-exported here so integrators can
``from mobilepay_subscriptions import ...`` without navigating the package.
"""

from .api import connect, create_subscriptions_client
from .core import (
    ApplicationCredentials,
    ClientConfiguration,
    ConfigError,
    DiscoveryError,
    MerchantCredentials,
    NotInitializedError,
    ResponseDecodeError,
    SubscriptionsClient,
    SubscriptionsError,
    TokenRenewalError,
    build_environment,
    load_client_config,
    load_env_file,
)
from .core.payloads import (
    CreateAgreementParams,
    CreateAgreementResponse,
    CreateOneOffPaymentResponse,
    CreatePaymentRequestsResponse,
    OneOffPaymentParams,
    PaymentRequestParams,
    RefundPaymentParams,
    RefundPaymentResponse,
)

__all__ = (
    "ApplicationCredentials",
    "ClientConfiguration",
    "ConfigError",
    "CreateAgreementParams",
    "CreateAgreementResponse",
    "CreateOneOffPaymentResponse",
    "CreatePaymentRequestsResponse",
    "DiscoveryError",
    "MerchantCredentials",
    "NotInitializedError",
    "OneOffPaymentParams",
    "PaymentRequestParams",
    "RefundPaymentParams",
    "RefundPaymentResponse",
    "ResponseDecodeError",
    "SubscriptionsClient",
    "SubscriptionsError",
    "TokenRenewalError",
    "build_environment",
    "connect",
    "create_subscriptions_client",
    "load_client_config",
    "load_env_file",
)
