"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Configuration for exserver, built once at startup and handed to the
components that need it. Nothing reads process-wide globals.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m exserver --port 3000                            │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── EXSERVER_PORT=3000 python -m exserver                     │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional


DEFAULT_PORT = "8080"
DEFAULT_RESOURCE = "misc/index.html"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog

    BUFFERS
    - buffer_size (receive buffer and resource cap)

    STATIC RESOURCE
    - resource_path, cache_resource

    DIAGNOSTICS
    - debug, log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: Optional[str] = None
    """
    The IPv4 address to bind to.
    None = passive wildcard address (all interfaces, like 0.0.0.0).
    """

    port: str = DEFAULT_PORT
    """
    Port to listen on, kept as a string because it is handed to
    getaddrinfo() as a service name. "0" lets the OS pick a free port.
    """

    backlog: int = 10
    """Maximum number of established connections waiting for accept()."""

    # ─────────────────────────────────────────────────────────────────────
    # BUFFERS
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 4096
    """
    Bytes read per receive, and the most resource bytes sent per response.
    Larger resources are truncated to this many bytes.
    """

    # ─────────────────────────────────────────────────────────────────────
    # STATIC RESOURCE
    # ─────────────────────────────────────────────────────────────────────

    resource_path: str = DEFAULT_RESOURCE
    """File whose contents follow the header block in every response."""

    cache_resource: bool = False
    """
    Keep the resource in memory between requests.
    The cached copy is dropped when the file's mtime or size changes.
    """

    # ─────────────────────────────────────────────────────────────────────
    # DIAGNOSTICS
    # ─────────────────────────────────────────────────────────────────────

    debug: bool = False
    """Check interest set invariants after every pass of the event loop."""

    log_level: str = "INFO"

    @property
    def port_number(self) -> int:
        """The configured port as an integer."""
        return int(self.port)

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        EXSERVER_HOST       Bind address (default: all interfaces)
        EXSERVER_PORT       Listener port (default: 8080)
        EXSERVER_RESOURCE   Static resource path (default: misc/index.html)
        EXSERVER_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("EXSERVER_HOST") or None,
            port=os.getenv("EXSERVER_PORT", DEFAULT_PORT),
            resource_path=os.getenv("EXSERVER_RESOURCE", DEFAULT_RESOURCE),
            log_level=os.getenv("EXSERVER_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Runs at startup so a bad value stops the process before any
        socket is created.
        """
        if not self.port.isdigit() or not 0 <= int(self.port) < 65536:
            raise ValueError(f"Invalid port: {self.port!r}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level!r}")
