"""
=============================================================================
EXSERVER CLI ENTRY POINT
=============================================================================

    # Run with defaults (all interfaces, port 8080, misc/index.html)
    python -m exserver

    # Custom port and page
    python -m exserver --port 3000 --resource ./public/index.html

    # Debug mode: interest set checks after every pass + DEBUG logs
    python -m exserver --debug

Exit status:
    0   --help, --version, or stopped with Ctrl+C / SIGTERM
    1   invalid configuration, listener setup failed, event loop failed
    2   bad command-line usage (argparse)

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig, DEFAULT_PORT, DEFAULT_RESOURCE
from .server import ExServer
from .core.listener import ListenerError
from .core.event_loop import LoopError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exserver",
        description="Single-threaded static responder built on a readiness loop",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m exserver                          # Port 8080, misc/index.html
  python -m exserver --port 3000              # Custom port
  python -m exserver --host 127.0.0.1         # Localhost only
  python -m exserver --resource page.html     # Serve another file
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # SERVER OPTIONS
    # ─────────────────────────────────────────────────────────────────────

    server = parser.add_argument_group("Server Options")
    server.add_argument(
        "--port", "-p",
        default=DEFAULT_PORT,
        help=f"Server listener port (default: {DEFAULT_PORT})"
    )
    server.add_argument(
        "--host", "-H",
        default=None,
        help="IPv4 address to bind to (default: all interfaces)"
    )
    server.add_argument(
        "--resource", "-r",
        default=DEFAULT_RESOURCE,
        help=f"File sent back to every client (default: {DEFAULT_RESOURCE})"
    )
    server.add_argument(
        "--cache",
        action="store_true",
        help="Keep the resource in memory, reloading it when the file changes"
    )

    # ─────────────────────────────────────────────────────────────────────
    # DEBUGGING OPTIONS
    # ─────────────────────────────────────────────────────────────────────

    debugging = parser.add_argument_group("Debugging Options")
    debugging.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode assertions and logging"
    )

    # ─────────────────────────────────────────────────────────────────────
    # GENERIC OPTIONS
    # ─────────────────────────────────────────────────────────────────────

    generic = parser.add_argument_group("Generic Options")
    generic.add_argument(
        "--version", "-v",
        action="version",
        version=f"Version {__version__}",
        help="Display server version information and exit"
    )
    generic.add_argument(
        "--verbose",
        action="store_true",
        help="Output detailed info during execution"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        host=args.host,
        port=args.port,
        resource_path=args.resource,
        cache_resource=args.cache,
        debug=args.debug,
        log_level="DEBUG" if (args.debug or args.verbose) else "INFO",
    )


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    server = ExServer(config)

    try:
        server.run()
    except KeyboardInterrupt:
        print("Interrupted, exiting", file=sys.stderr)
        return 0
    except (ListenerError, LoopError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
