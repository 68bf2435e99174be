"""
=============================================================================
FILE SERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m fileserver

    # Serve ./public on all interfaces, port 3000
    python -m fileserver --root ./public --host 0.0.0.0 --port 3000

    # More workers, shorter deadline, JSON access logs
    python -m fileserver --workers 32 --timeout 10 --log-format json

Environment variables (FILESERVER_PORT, FILESERVER_ROOT, ...) provide the
defaults; command-line flags override them. See ServerConfig.from_env().

=============================================================================
"""

import argparse
import sys

from . import __version__
from .server import FileServer
from .config import ServerConfig


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Build the argument parser, with defaults taken from a config."""
    parser = argparse.ArgumentParser(
        prog="pyfileserver",
        description="Minimal GET-only HTTP/1.x file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m fileserver                           # Serve . on 127.0.0.1:8080
  python -m fileserver --root ./public           # Serve another directory
  python -m fileserver --host 0.0.0.0 -p 3000    # Listen on all interfaces
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=defaults.timeout,
        help=f"Per-connection read/write deadline in seconds (default: {defaults.timeout})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILES AND PERFORMANCE
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.root_dir,
        help=f"Document root to serve files from (default: {defaults.root_dir})"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=defaults.max_workers,
        help=f"Number of worker threads (default: {defaults.max_workers})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"PyFileServer {__version__}"
    )

    return parser


def config_from_args(argv=None) -> ServerConfig:
    """Parse command-line arguments on top of the environment defaults."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    return ServerConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        root_dir=args.root,
        max_workers=args.workers,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv=None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    try:
        config = config_from_args(argv)
        server = FileServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
