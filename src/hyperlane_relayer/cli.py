"""Command-line interface for the relayer supervisor."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from ._internal.config import load_settings
from ._internal.logging import configure_logging
from .client import DEFAULT_URL, HttpClient
from .errors import RelayerError
from .server.app import run_server

logger = logging.getLogger(__name__)


def _format_response(response: dict[str, Any], verbose: bool = False) -> str:
    """Format a supervisor response for display.

    Args:
        response: Parsed JSON response.
        verbose: If True, show full details as JSON.
    """
    if verbose:
        return json.dumps(response, indent=2)

    status = "OK" if response.get("success") else "FAILED"
    message = response.get("message") or response.get("error") or ""
    return f"[{status}]: {message}" if message else f"[{status}]"


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the serve command."""
    try:
        settings = load_settings(
            data_dir=args.data_dir,
            host=args.host,
            port=args.port,
            image=args.image,
            test_network=args.test_network,
        )
        run_server(settings)
    except (RelayerError, RuntimeError) as e:
        print(f"[FAILED]: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_set_config(args: argparse.Namespace) -> int:
    """Handle the set-config command."""
    client = HttpClient(base_url=args.url, timeout=args.timeout)
    response = client.set_config(args.configs or None, args.relay_chains)
    print(_format_response(response, args.verbose))
    return 0 if response.get("success") else 1


def cmd_status(args: argparse.Namespace) -> int:
    """Handle the status command."""
    client = HttpClient(base_url=args.url, timeout=args.timeout)
    response = client.status()
    if args.verbose or not response.get("success"):
        print(_format_response(response, args.verbose))
        return 0 if response.get("success") else 1

    details = response.get("details", {})
    slot = details.get("slot", {})
    print(f"[OK]: container={slot.get('container_id') or '-'} state={slot.get('state')} phase={details.get('phase')}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="relayer-ctl",
        description="Supervisor for a Hyperlane relayer agent container",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output with full JSON details",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        required=True,
    )

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the supervisor and its job endpoint",
    )
    serve_parser.add_argument(
        "-d",
        "--data-dir",
        type=Path,
        default=None,
        help="Data directory (default: HYPERLANE_RELAYER_DATA_DIR or ./data)",
    )
    serve_parser.add_argument("--host", default=None, help="Host to bind to (default: HYPERLANE_RELAYER_HOST)")
    serve_parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: HYPERLANE_RELAYER_PORT or 8878)",
    )
    serve_parser.add_argument("--image", default=None, help="Agent image (default: HYPERLANE_RELAYER_IMAGE)")
    serve_parser.add_argument(
        "--test-network",
        default=None,
        help="Attach the agent to this internal network (test mode)",
    )
    serve_parser.set_defaults(func=cmd_serve)

    # client commands share the endpoint options
    client_options = argparse.ArgumentParser(add_help=False)
    client_options.add_argument("--url", default=DEFAULT_URL, help=f"Supervisor URL (default: {DEFAULT_URL})")
    client_options.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=300.0,
        help="Request timeout in seconds (default: 300)",
    )

    # set-config command
    set_config_parser = subparsers.add_parser(
        "set-config",
        parents=[client_options],
        help="Replace the agent configuration and restart it",
    )
    set_config_parser.add_argument(
        "-c",
        "--config",
        dest="configs",
        action="append",
        default=[],
        help="Config source: literal JSON, file:// URI or http(s):// URL (repeatable)",
    )
    set_config_parser.add_argument(
        "-r",
        "--relay-chains",
        required=True,
        help="Comma-separated relay chains, e.g. ethereum,polygon",
    )
    set_config_parser.set_defaults(func=cmd_set_config)

    # status command
    status_parser = subparsers.add_parser(
        "status",
        parents=[client_options],
        help="Show the tracked agent container",
    )
    status_parser.set_defaults(func=cmd_status)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments. Defaults to sys.argv[1:].

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    configure_logging()

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        logger.debug("Executing command: %s", args.command)
        return args.func(args)
    except (ConnectionError, RuntimeError) as e:
        logger.error("Error: %s", e)
        print(f"[FAILED]: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
