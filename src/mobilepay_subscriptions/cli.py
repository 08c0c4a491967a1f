"""
Command-line interface for exercising the Subscriptions API.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, Sequence, Tuple

import requests

from .api import create_subscriptions_client
from .core.config import ConfigError, load_client_config
from .core.client import SubscriptionsClient
from .core.errors import SubscriptionsError


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def _read_json(source: str) -> Any:
    """Read a JSON document from a file path, or from stdin for ``-``."""
    text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    return json.loads(text)


def _emit(result: Any) -> None:
    print(json.dumps(result, indent=2, sort_keys=True))


def _run_token(client: SubscriptionsClient, args: argparse.Namespace) -> int:
    # never print the access token
    _emit({"initialized": client.initialized(), "token_type": client.token_type()})
    return 0


def _run_create_agreement(client: SubscriptionsClient, args: argparse.Namespace) -> int:
    _emit(client.create_agreement(_read_json(args.params)))
    return 0


def _run_payment_requests(client: SubscriptionsClient, args: argparse.Namespace) -> int:
    params = _read_json(args.params)
    if not isinstance(params, list):
        logging.error("Payment requests must be given as a JSON array")
        return 1
    _emit(client.create_payment_requests(params))
    return 0


def _run_one_off_payment(client: SubscriptionsClient, args: argparse.Namespace) -> int:
    _emit(client.create_one_off_payment(args.agreement_id, _read_json(args.params)))
    return 0


def _run_capture(client: SubscriptionsClient, args: argparse.Namespace) -> int:
    captured = client.capture_one_off_payment(args.agreement_id, args.payment_id)
    _emit({"captured": captured})
    if not captured:
        logging.error(
            "Capture of payment %s on agreement %s was not accepted",
            args.payment_id,
            args.agreement_id,
        )
        return 1
    return 0


def _run_refund(client: SubscriptionsClient, args: argparse.Namespace) -> int:
    _emit(
        client.refund_payment(args.agreement_id, args.payment_id, _read_json(args.params))
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing MOBILEPAY_* settings (default: .env)",
    )
    common.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    common.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )

    parser = argparse.ArgumentParser(
        prog="mobilepay-subscriptions",
        description="Call the MobilePay Subscriptions API as a merchant",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    token = commands.add_parser(
        "token", parents=[common], help="Run discovery and obtain an access token"
    )
    token.set_defaults(handler=_run_token)

    agreement = commands.add_parser(
        "create-agreement", parents=[common], help="Create an agreement"
    )
    agreement.add_argument("params", help="JSON file with the agreement ('-' for stdin)")
    agreement.set_defaults(handler=_run_create_agreement)

    payment_requests = commands.add_parser(
        "payment-requests", parents=[common], help="Submit a batch of payment requests"
    )
    payment_requests.add_argument(
        "params", help="JSON file holding an array of payment requests ('-' for stdin)"
    )
    payment_requests.set_defaults(handler=_run_payment_requests)

    one_off = commands.add_parser(
        "one-off-payment", parents=[common], help="Create a one-off payment on an agreement"
    )
    one_off.add_argument("agreement_id")
    one_off.add_argument("params", help="JSON file with the payment ('-' for stdin)")
    one_off.set_defaults(handler=_run_one_off_payment)

    capture = commands.add_parser(
        "capture", parents=[common], help="Capture a reserved one-off payment"
    )
    capture.add_argument("agreement_id")
    capture.add_argument("payment_id")
    capture.set_defaults(handler=_run_capture)

    refund = commands.add_parser("refund", parents=[common], help="Refund a payment")
    refund.add_argument("agreement_id")
    refund.add_argument("payment_id")
    refund.add_argument("params", help="JSON file with the refund ('-' for stdin)")
    refund.set_defaults(handler=_run_refund)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        config = load_client_config(env_file=args.env_file, overrides=overrides)
    except (ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    client = create_subscriptions_client(config=config, session=requests.Session())

    try:
        client.initialize()
    except (SubscriptionsError, requests.RequestException) as exc:
        logging.error("Initialization failed: %s", exc)
        return 1

    try:
        return args.handler(client, args)
    # RequestException subclasses OSError
    except (SubscriptionsError, requests.RequestException) as exc:
        logging.error("Request failed: %s", exc)
        return 1
    except (OSError, ValueError) as exc:
        logging.error("Could not read request parameters: %s", exc)
        return 1


def main() -> None:
    sys.exit(run_cli())
