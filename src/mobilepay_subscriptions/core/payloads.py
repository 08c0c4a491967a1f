"""
Shapes of the JSON documents exchanged with the Subscriptions API.

These are annotations only: payloads are sent exactly as given and responses
are returned exactly as received.
"""

from __future__ import annotations

import json
from typing import Any, List, TypedDict

__all__ = [
    "AgreementOneOffPayment",
    "CreateAgreementParams",
    "CreateAgreementResponse",
    "CreateOneOffPaymentResponse",
    "CreatePaymentRequestsResponse",
    "Link",
    "OneOffPaymentParams",
    "PaymentRequestParams",
    "PendingPayment",
    "RefundPaymentParams",
    "RefundPaymentResponse",
    "RejectedPayment",
    "encode_body",
]


class Link(TypedDict):
    rel: str
    href: str


class _AgreementOneOffPaymentRequired(TypedDict):
    amount: float
    external_id: str
    description: str


class AgreementOneOffPayment(_AgreementOneOffPaymentRequired, total=False):
    expiration_timeout_minutes: int


class _CreateAgreementRequired(TypedDict):
    currency: str
    links: List[Link]
    country_code: str
    plan: str
    expiration_timeout_minutes: int


class CreateAgreementParams(_CreateAgreementRequired, total=False):
    external_id: str
    amount: float
    description: str
    next_payment_date: str
    frequency: int
    mobile_phone_number: str
    retention_period_hours: int
    disable_notification_management: bool
    one_off_payment: AgreementOneOffPayment


class CreateAgreementResponse(TypedDict):
    id: str
    links: List[Link]


class _PaymentRequestRequired(TypedDict):
    agreement_id: str
    amount: float
    due_date: str
    external_id: str
    description: str


class PaymentRequestParams(_PaymentRequestRequired, total=False):
    next_payment_date: str
    grace_period_days: int


class PendingPayment(TypedDict):
    payment_id: str
    external_id: str


class RejectedPayment(TypedDict):
    external_id: str
    error_description: str


class CreatePaymentRequestsResponse(TypedDict):
    pending_payments: List[PendingPayment]
    rejected_payments: List[RejectedPayment]


class _OneOffPaymentRequired(TypedDict):
    amount: float
    external_id: str
    description: str
    # a single "user-redirect" link
    links: List[Link]


class OneOffPaymentParams(_OneOffPaymentRequired, total=False):
    auto_reserve: bool
    expiration_timeout_minutes: int


class CreateOneOffPaymentResponse(TypedDict):
    id: str
    # a single "mobile-pay" link the user is redirected to
    links: List[Link]


class _RefundPaymentRequired(TypedDict):
    status_callback_url: str
    external_id: str


class RefundPaymentParams(_RefundPaymentRequired, total=False):
    # omitted for a full refund
    amount: float


class RefundPaymentResponse(TypedDict):
    id: str
    amount: float
    status_callback_url: str
    external_id: str


def encode_body(payload: Any) -> str:
    """Serialize a request payload (object or batch) to a JSON string."""
    return json.dumps(payload)
