"""Command line interface for the SNS subscription handshake."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from sns_subscribe.application.handshake import HandshakeCoordinator
from sns_subscribe.config import AppSettings, get_settings
from sns_subscribe.domain.models import HandshakeError, SubscriptionRequest

if TYPE_CHECKING:
    from collections.abc import Sequence

PROG = "sns-subscribe"
SUCCESS_MESSAGE = "Successfully subscribed"

EXIT_OK = 0
EXIT_HANDSHAKE_FAILED = 1
EXIT_INVALID_CONFIG = 2
EXIT_INTERRUPTED = 130


def build_parser(settings: AppSettings | None = None) -> argparse.ArgumentParser:
    """Build the ``sns-subscribe`` argument parser."""
    resolved = settings or get_settings()
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Subscribe an HTTP(S) endpoint to an SNS topic and confirm it",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    subscribe = commands.add_parser(
        "subscribe",
        help="Subscribe the endpoint and wait for the confirmation callback",
    )
    subscribe.add_argument("-r", "--region", required=True, help="AWS region")
    subscribe.add_argument("-t", "--topic", required=True, help="AWS topic ARN")
    subscribe.add_argument(
        "-e",
        "--endpoint",
        required=True,
        help="Endpoint URL registered with SNS (path is used as the callback route)",
    )
    subscribe.add_argument(
        "-p",
        "--port",
        type=int,
        default=resolved.callback_port,
        help="Local port for the callback listener (default: %(default)s)",
    )
    subscribe.add_argument(
        "--host",
        default=resolved.callback_host,
        help="Bind address for the callback listener (default: %(default)s)",
    )
    subscribe.add_argument(
        "--timeout",
        type=float,
        default=resolved.handshake_timeout_seconds,
        help="Seconds to wait for the confirmation callback (default: wait forever)",
    )
    return parser


async def run_subscribe(
    args: argparse.Namespace,
    coordinator: HandshakeCoordinator | None = None,
) -> int:
    """Run one handshake from parsed arguments and report the outcome."""
    logger = logging.getLogger(__name__)
    try:
        request = SubscriptionRequest(
            region=args.region,
            topic=args.topic,
            endpoint=args.endpoint,
            port=args.port,
            host=args.host,
        )
    except ValidationError as exc:
        print(_format_validation_error(exc))
        return EXIT_INVALID_CONFIG

    coordinator = coordinator or HandshakeCoordinator()
    try:
        result = await coordinator.run(request, timeout=args.timeout)
    except HandshakeError as exc:
        print(str(exc))
        return EXIT_HANDSHAKE_FAILED

    logger.debug("subscription_result", extra={"result": result.model_dump()})
    print(SUCCESS_MESSAGE)
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv`` and run the requested command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return asyncio.run(run_subscribe(args))
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location}: {error.get('msg')}")
    return "invalid arguments: " + "; ".join(problems)
