"""
Minimal script that uses the public API to create an agreement and charge it.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, timedelta

from mobilepay_subscriptions import (
    ConfigError,
    SubscriptionsError,
    create_subscriptions_client,
    load_client_config,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create a MobilePay agreement and queue its first payment request"
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing MOBILEPAY_* settings",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument("--plan", default="Basic", help="Plan name shown to the user")
    parser.add_argument("--amount", type=float, default=49.0, help="Amount in DKK")
    parser.add_argument(
        "--redirect-url",
        default="https://example.com/subscribed",
        help="Where MobilePay sends the user after accepting the agreement",
    )
    parser.add_argument(
        "--external-id", default="agreement-1", help="Merchant reference for the agreement"
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        config = load_client_config(env_file=args.env_file)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    client = create_subscriptions_client(config=config)
    try:
        client.initialize()
        agreement = client.create_agreement(
            {
                "currency": "DKK",
                "country_code": "DK",
                "plan": args.plan,
                "amount": args.amount,
                "external_id": args.external_id,
                "expiration_timeout_minutes": 5,
                "links": [{"rel": "user-redirect", "href": args.redirect_url}],
            }
        )
    except SubscriptionsError as exc:
        logging.error("Agreement creation failed: %s", exc)
        return 1

    agreement_id = agreement.get("id")
    if not agreement_id:
        logging.error("Agreement rejected: %s", agreement)
        return 1

    confirmation = next(
        (link["href"] for link in agreement.get("links", []) if link.get("rel") == "mobile-pay"),
        None,
    )
    logging.info("Agreement %s created; confirm it at %s", agreement_id, confirmation)

    try:
        result = client.create_payment_requests(
            [
                {
                    "agreement_id": agreement_id,
                    "amount": args.amount,
                    "due_date": (date.today() + timedelta(days=8)).isoformat(),
                    "external_id": f"{args.external_id}-1",
                    "description": f"{args.plan} subscription",
                }
            ]
        )
    except SubscriptionsError as exc:
        logging.error("Payment request submission failed: %s", exc)
        return 1
    for rejected in result.get("rejected_payments", []):
        logging.error(
            "Payment request %s rejected: %s",
            rejected.get("external_id"),
            rejected.get("error_description"),
        )
    for pending in result.get("pending_payments", []):
        logging.info("Payment request %s queued as %s", pending["external_id"], pending["payment_id"])
    return 0 if not result.get("rejected_payments") else 1


if __name__ == "__main__":
    sys.exit(main())
