"""
Public, high-level helpers for building a subscriptions client.
"""

from __future__ import annotations

from typing import Mapping, Optional

import requests

from .core.client import SubscriptionsClient
from .core.config import ClientConfiguration, load_client_config

__all__ = ["connect", "create_subscriptions_client"]


def create_subscriptions_client(
    *,
    config: Optional[ClientConfiguration] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    discovery_endpoint: Optional[str] = None,
    api_endpoint: Optional[str] = None,
    merchant_client_id: Optional[str] = None,
    merchant_client_secret: Optional[str] = None,
    merchant_refresh_token: Optional[str] = None,
    provider_id: Optional[str] = None,
    application_client_id: Optional[str] = None,
    application_client_secret: Optional[str] = None,
    timeout_seconds: Optional[float | str] = None,
) -> SubscriptionsClient:
    """
    Construct an uninitialized :class:`SubscriptionsClient`.

    Callers can either supply a ready-made :class:`ClientConfiguration` or let
    the helper assemble one from environment data.
    """
    if config is not None:
        extras = (
            overrides,
            base,
            discovery_endpoint,
            api_endpoint,
            merchant_client_id,
            merchant_client_secret,
            merchant_refresh_token,
            provider_id,
            application_client_id,
            application_client_secret,
            timeout_seconds,
        )
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built ClientConfiguration or individual parameters, not both."
            )
        cfg = config
    else:
        cfg = load_client_config(
            env_file=env_file,
            overrides=overrides,
            base=base,
            discovery_endpoint=discovery_endpoint,
            api_endpoint=api_endpoint,
            merchant_client_id=merchant_client_id,
            merchant_client_secret=merchant_client_secret,
            merchant_refresh_token=merchant_refresh_token,
            provider_id=provider_id,
            application_client_id=application_client_id,
            application_client_secret=application_client_secret,
            timeout_seconds=timeout_seconds,
        )
    return SubscriptionsClient(cfg, session=session)


def connect(
    *,
    config: Optional[ClientConfiguration] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
) -> SubscriptionsClient:
    """
    Build a client and run :meth:`SubscriptionsClient.initialize` on it.
    """
    client = create_subscriptions_client(
        config=config,
        session=session,
        env_file=env_file,
        overrides=overrides,
    )
    client.initialize()
    return client
