"""Command-line interface for hydractl.

Provides the entry point for running the control server and for
sending single commands to a running server.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

CTL_COMMANDS = (
    "status",
    "open",
    "close",
    "open-to-end",
    "close-to-end",
    "stop",
    "sim-error",
    "sim-no-error",
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="hydractl",
        description="Remote control for a motorized closure",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/hydractl.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the control server")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    serve_parser.add_argument(
        "--plain-http", action="store_true", default=None,
        help="Don't use HTTPS",
    )
    serve_parser.add_argument("--cert-file", type=str, default=None, help="Server certificate")
    serve_parser.add_argument("--key-file", type=str, default=None, help="Server private key")
    serve_parser.add_argument(
        "--known-users-file", type=str, default=None,
        help="File with one known bearer token per line",
    )

    ctl_parser = subparsers.add_parser("ctl", help="Send one command to a running server")
    ctl_parser.add_argument("action", choices=CTL_COMMANDS, help="Command to send")
    ctl_parser.add_argument(
        "--hold", type=float, default=None, metavar="SECONDS",
        help="For open/close: keep refreshing the command for this long",
    )
    ctl_parser.add_argument("--base-url", type=str, default=None, help="Server base URL")
    ctl_parser.add_argument("--token", type=str, default=None, help="Bearer token")

    args = parser.parse_args(argv)
    if args.command == "ctl" and args.hold is not None:
        if args.action not in ("open", "close"):
            ctl_parser.error("--hold only applies to open and close")
        if args.hold <= 0:
            ctl_parser.error("--hold must be positive")
    return args


def _apply_serve_overrides(settings, args: argparse.Namespace) -> None:
    server = settings.server
    if args.port is not None:
        server.port = args.port
    if args.plain_http:
        server.plain_http = True
    if args.cert_file is not None:
        server.cert_file = args.cert_file
    if args.key_file is not None:
        server.key_file = args.key_file
    if args.known_users_file is not None:
        server.known_users_file = args.known_users_file


def _serve(settings) -> int:
    """Load the known users and run the server until interrupted."""
    from hydractl.api.server import serve
    from hydractl.config.known_users import KnownUsersError, load_known_users

    if not settings.server.known_users_file:
        print("Need --known-users-file", file=sys.stderr)
        return 2

    try:
        tokens = load_known_users(settings.server.known_users_file)
    except KnownUsersError as e:
        print(f"Error parsing {e.path}: {e}", file=sys.stderr)
        return 1

    try:
        serve(settings.server, tokens, settings.simulator)
    except ValueError as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        return 1
    return 0


async def _ctl(settings, args: argparse.Namespace) -> int:
    """Send a single command and print the result."""
    from hydractl.client import ControlClient, ControlClientError

    token = args.token or settings.token.get_secret_value()
    client = ControlClient(
        base_url=args.base_url or settings.client.base_url,
        token=token,
        environment=settings.client.environment,
        timeout=settings.client.timeout,
        route_prefix=settings.server.route_prefix,
    )
    refresh = settings.client.hold_refresh_interval

    async with client:
        try:
            action = args.action
            if action == "status":
                result = await client.status()
            elif action in ("open", "close") and args.hold:
                hold = client.hold_open if action == "open" else client.hold_close
                result = await hold(args.hold, refresh_interval=refresh)
            elif action == "open":
                result = await client.open()
            elif action == "close":
                result = await client.close()
            elif action == "open-to-end":
                result = await client.open_to_end()
            elif action == "close-to-end":
                result = await client.close_to_end()
            elif action == "stop":
                result = await client.stop()
            else:
                print(await client.set_simulated_error(action == "sim-error"))
                return 0
        except ControlClientError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    print(result.model_dump_json(exclude_none=True))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the hydractl CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return 0

    from hydractl.config.settings import load_settings
    from hydractl.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        _apply_serve_overrides(settings, args)
        logger.info("Starting control server")
        return _serve(settings)

    if args.command == "ctl":
        return asyncio.run(_ctl(settings, args))

    return 0


if __name__ == "__main__":
    sys.exit(main())
