"""
Configuration objects and helpers for the subscriptions client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .environment import ClientEnvironment, build_environment

__all__ = [
    "ApplicationCredentials",
    "ClientConfiguration",
    "ConfigError",
    "MerchantCredentials",
    "load_client_config",
]

DEFAULT_TIMEOUT_SECONDS = 30.0

_PARAMETER_TO_ENV_KEY = {
    "discovery_endpoint": "MOBILEPAY_DISCOVERY_ENDPOINT",
    "api_endpoint": "MOBILEPAY_API_ENDPOINT",
    "merchant_client_id": "MOBILEPAY_MERCHANT_CLIENT_ID",
    "merchant_client_secret": "MOBILEPAY_MERCHANT_CLIENT_SECRET",
    "merchant_refresh_token": "MOBILEPAY_MERCHANT_REFRESH_TOKEN",
    "provider_id": "MOBILEPAY_PROVIDER_ID",
    "application_client_id": "MOBILEPAY_APPLICATION_CLIENT_ID",
    "application_client_secret": "MOBILEPAY_APPLICATION_CLIENT_SECRET",
    "timeout_seconds": "MOBILEPAY_TIMEOUT_SECONDS",
}


class ConfigError(Exception):
    """Raised when the supplied configuration is invalid."""


def _collect_parameter_overrides(explicit: Mapping[str, Any]) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:
            raise TypeError(f"Unknown client parameter '{key}'") from exc
        overrides[env_key] = str(value)
    return overrides


def _require(environment: ClientEnvironment, key: str) -> str:
    try:
        return environment.require(key)
    except KeyError:
        raise ConfigError(f"{key} must be provided") from None


def _normalize_endpoint(raw_url: str, field_name: str) -> str:
    url = raw_url.strip().rstrip("/")
    if not url.startswith(("https://", "http://")):
        raise ConfigError(f"{field_name} must be an http(s) URL, got '{raw_url}'")
    return url


@dataclass(frozen=True)
class MerchantCredentials:
    """Credentials of the merchant the client acts for."""

    client_id: str
    client_secret: str
    refresh_token: str
    provider_id: str


@dataclass(frozen=True)
class ApplicationCredentials:
    """Credentials identifying the integrating application to the API gateway."""

    client_id: str
    client_secret: str


@dataclass(frozen=True)
class ClientConfiguration:
    discovery_endpoint: str
    api_endpoint: str
    merchant: MerchantCredentials
    application: ApplicationCredentials
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "discovery_endpoint",
            _normalize_endpoint(self.discovery_endpoint, "discovery_endpoint"),
        )
        object.__setattr__(
            self,
            "api_endpoint",
            _normalize_endpoint(self.api_endpoint, "api_endpoint"),
        )
        if self.timeout_seconds <= 0:
            raise ConfigError("timeout_seconds must be greater than zero")

    @property
    def provider_url(self) -> str:
        """Base URL of every business endpoint for the configured provider."""
        return (
            f"{self.api_endpoint}/subscriptions/api/providers/"
            f"{self.merchant.provider_id}"
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "ClientConfiguration":
        environment = ClientEnvironment(variables=values)

        timeout_raw = environment.get("MOBILEPAY_TIMEOUT_SECONDS") or str(
            DEFAULT_TIMEOUT_SECONDS
        )
        try:
            timeout_seconds = float(timeout_raw)
        except ValueError as exc:
            raise ConfigError(
                f"MOBILEPAY_TIMEOUT_SECONDS must be a number, got '{timeout_raw}'"
            ) from exc

        merchant = MerchantCredentials(
            client_id=_require(environment, "MOBILEPAY_MERCHANT_CLIENT_ID"),
            client_secret=_require(environment, "MOBILEPAY_MERCHANT_CLIENT_SECRET"),
            refresh_token=_require(environment, "MOBILEPAY_MERCHANT_REFRESH_TOKEN"),
            provider_id=_require(environment, "MOBILEPAY_PROVIDER_ID"),
        )
        application = ApplicationCredentials(
            client_id=_require(environment, "MOBILEPAY_APPLICATION_CLIENT_ID"),
            client_secret=_require(environment, "MOBILEPAY_APPLICATION_CLIENT_SECRET"),
        )

        return cls(
            discovery_endpoint=_require(environment, "MOBILEPAY_DISCOVERY_ENDPOINT"),
            api_endpoint=_require(environment, "MOBILEPAY_API_ENDPOINT"),
            merchant=merchant,
            application=application,
            timeout_seconds=timeout_seconds,
        )

    @classmethod
    def from_env(
        cls,
        *,
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
    ) -> "ClientConfiguration":
        parameter_overrides = _collect_parameter_overrides(
            {
                "discovery_endpoint": discovery_endpoint,
                "api_endpoint": api_endpoint,
                "merchant_client_id": merchant_client_id,
                "merchant_client_secret": merchant_client_secret,
                "merchant_refresh_token": merchant_refresh_token,
                "provider_id": provider_id,
                "application_client_id": application_client_id,
                "application_client_secret": application_client_secret,
                "timeout_seconds": timeout_seconds,
            }
        )
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_client_config(
    *,
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
) -> ClientConfiguration:
    """
    Convenience wrapper that mirrors :meth:`ClientConfiguration.from_env`.

    Settings can come from environment variables, a ``.env`` file, keyword
    arguments, or any combination of the three.
    """
    return ClientConfiguration.from_env(
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
