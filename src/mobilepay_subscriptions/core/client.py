"""
HTTP client for the MobilePay Subscriptions provider API.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Sequence
from urllib.parse import quote

import requests

from .config import ClientConfiguration
from .errors import ResponseDecodeError
from .payloads import (
    CreateAgreementParams,
    CreateAgreementResponse,
    CreateOneOffPaymentResponse,
    CreatePaymentRequestsResponse,
    OneOffPaymentParams,
    PaymentRequestParams,
    RefundPaymentParams,
    RefundPaymentResponse,
    encode_body,
)
from .session import Clock, TokenSession

__all__ = ["CAPTURED_STATUS", "SubscriptionsClient"]

CAPTURED_STATUS = 204


def _segment(value: str) -> str:
    return quote(str(value), safe="")


class SubscriptionsClient:
    """
    Typed operations over the provider endpoints of the Subscriptions API.

    Call :meth:`initialize` once before anything else. Every operation then
    makes sure the access token is fresh and issues exactly one request.
    Error bodies are handed back as-is; nothing is retried.
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
        self._tokens = TokenSession(config, session=self.session, clock=clock)

    def initialized(self) -> bool:
        return self._tokens.is_initialized()

    def initialize(self) -> None:
        self._tokens.initialize()

    def token_type(self) -> Optional[str]:
        return self._tokens.token_type()

    def _headers(self, access_token: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-ibm-client-id": self.config.application.client_id,
            "x-ibm-client-secret": self.config.application.client_secret,
            "Authorization": f"Bearer {access_token}",
        }

    def _url(self, path: str) -> str:
        return f"{self.config.provider_url}{path}"

    def _post(self, path: str, body: Optional[Any] = None) -> requests.Response:
        access_token = self._tokens.ensure_fresh_token()
        url = self._url(path)
        logging.info("POST %s", url)
        response = self.session.request(
            "POST",
            url,
            headers=self._headers(access_token),
            data=None if body is None else encode_body(body),
            timeout=self.config.timeout_seconds,
        )
        logging.debug("POST %s responded with %s", url, response.status_code)
        return response

    def _post_json(self, path: str, body: Any) -> Any:
        response = self._post(path, body)
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseDecodeError(
                self._url(path), response.status_code, response.text
            ) from exc

    def create_agreement(self, params: CreateAgreementParams) -> CreateAgreementResponse:
        return self._post_json("/agreements", params)

    def create_payment_requests(
        self, params: Sequence[PaymentRequestParams]
    ) -> CreatePaymentRequestsResponse:
        """
        Submit recurring payment requests in a single batch.

        The provider splits the batch into ``pending_payments`` and
        ``rejected_payments``; that split is returned untouched.
        """
        return self._post_json("/paymentrequests", list(params))

    def create_one_off_payment(
        self, agreement_id: str, params: OneOffPaymentParams
    ) -> CreateOneOffPaymentResponse:
        return self._post_json(
            f"/agreements/{_segment(agreement_id)}/oneoffpayments", params
        )

    def capture_one_off_payment(self, agreement_id: str, payment_id: str) -> bool:
        """Capture a reserved one-off payment. Only a 204 counts as captured."""
        response = self._post(
            f"/agreements/{_segment(agreement_id)}/oneoffpayments/"
            f"{_segment(payment_id)}/capture"
        )
        return response.status_code == CAPTURED_STATUS

    def refund_payment(
        self, agreement_id: str, payment_id: str, params: RefundPaymentParams
    ) -> RefundPaymentResponse:
        """Refund a payment; leave out ``amount`` to refund it in full."""
        return self._post_json(
            f"/agreements/{_segment(agreement_id)}/payments/{_segment(payment_id)}/refunds",
            params,
        )
