"""
Command line entry point for deployment pipelines.

Usage:
    swarm-status deployment SERVICE IMAGE [--api URL] [--timeout SECONDS]
    swarm-status service SERVICE [--api URL] [--timeout SECONDS]
    swarm-status serve

``--api`` and ``--timeout`` are accepted before or after the subcommand.

Exit codes:
    0  no problem detected
    1  the status API reported a diagnostic (``Err`` is set)
    2  invalid command line (argparse usage error)
    3  the status API could not be queried
"""

import argparse
import json
import sys
from typing import Optional, Sequence

from swarm_status.services.status_client import StatusAPIError, StatusClient

EXIT_OK = 0
EXIT_DIAGNOSTIC = 1
EXIT_USAGE = 2
EXIT_UNAVAILABLE = 3

DEFAULT_API = "http://localhost:8080"
DEFAULT_TIMEOUT = 30.0


def _add_connection_options(parser: argparse.ArgumentParser, suppress_defaults: bool = False) -> None:
    parser.add_argument(
        "--api",
        default=argparse.SUPPRESS if suppress_defaults else DEFAULT_API,
        help=f"Status API base URL (default: {DEFAULT_API})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=argparse.SUPPRESS if suppress_defaults else DEFAULT_TIMEOUT,
        help="Request timeout in seconds",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swarm-status",
        description="Check Docker Swarm service and deployment status",
    )
    _add_connection_options(parser)

    # Subcommand copies only set a value when given on the command line.
    common = argparse.ArgumentParser(add_help=False)
    _add_connection_options(common, suppress_defaults=True)

    sub = parser.add_subparsers(dest="cmd", required=True)

    deployment = sub.add_parser("deployment", parents=[common], help="Check that an image was rolled out")
    deployment.add_argument("service", help="Swarm service name")
    deployment.add_argument("image", help="Image reference, e.g. myapp:1.0.0")

    service = sub.add_parser("service", parents=[common], help="Check running replicas of a service")
    service.add_argument("service", help="Swarm service name")

    sub.add_parser("serve", help="Run the status API server")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.cmd == "serve":
        from swarm_status.main import run

        run()
        return EXIT_OK

    client = StatusClient(args.api, timeout=args.timeout)

    try:
        if args.cmd == "deployment":
            result = client.deployment_status(args.service, args.image)
        else:
            result = client.service_status(args.service)
    except StatusAPIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNAVAILABLE

    print(json.dumps(result.to_wire(), indent=2))
    return EXIT_OK if result.healthy else EXIT_DIAGNOSTIC


if __name__ == "__main__":
    sys.exit(main())
