"""Command-line interface for mockshell.

Provides the main entry point for running the SSH server and for
creating a host key to run it with.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="mockshell",
        description="SSH server that emulates an interactive shell prompt",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/mockshell.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the SSH server")
    serve_parser.add_argument("--host", type=str, default=None, help="Address to listen on")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    serve_parser.add_argument(
        "--host-key", type=str, default=None,
        help="Path to the SSH host private key",
    )

    keygen_parser = subparsers.add_parser("keygen", help="Generate an SSH host key")
    keygen_parser.add_argument(
        "--path", type=str, default=None,
        help="Where to write the key (default: server.host_key_path)",
    )
    keygen_parser.add_argument(
        "--force", action="store_true",
        help="Overwrite an existing key file",
    )

    return parser.parse_args(argv)


def _apply_overrides(settings, args: argparse.Namespace) -> None:  # type: ignore[no-untyped-def]
    """Let command-line flags take precedence over the config file."""
    if args.host is not None:
        settings.server.host = args.host
    if args.port is not None:
        settings.server.port = args.port
    if args.host_key is not None:
        settings.server.host_key_path = args.host_key


def _keygen(settings, args: argparse.Namespace) -> int:  # type: ignore[no-untyped-def]
    from mockshell.ssh.server import generate_host_key

    path = Path(args.path or settings.server.host_key_path)
    if path.exists() and not args.force:
        print(f"{path} already exists (use --force to overwrite)", file=sys.stderr)
        return 1
    key = generate_host_key(path)
    print(f"Wrote {key.get_algorithm()} host key to {path}")
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the mockshell CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from mockshell.config.settings import load_settings
    from mockshell.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        from mockshell.ssh.server import HostKeyError, serve_forever

        _apply_overrides(settings, args)
        logger.info("Starting SSH server on %s:%d", settings.server.host, settings.server.port)
        try:
            asyncio.run(serve_forever(settings))
        except HostKeyError as e:
            logger.error("%s", e)
            sys.exit(1)
        except OSError as e:
            logger.error("Failed to listen on %s:%d: %s", settings.server.host, settings.server.port, e)
            sys.exit(1)
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")

    elif args.command == "keygen":
        sys.exit(_keygen(settings, args))


if __name__ == "__main__":
    main()
