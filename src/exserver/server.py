"""
=============================================================================
EXSERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   ServerConfig ──► create_listener() ──► listening socket            │
    │                                              │                       │
    │   StaticResource ─────────────────┐          │                       │
    │                                   ▼          ▼                       │
    │                               EventLoop(listener, resource)          │
    │                                   │                                  │
    │                                   └──► run()  (blocks)               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Startup errors (ListenerError) and loop errors (LoopError) propagate to
the caller. The CLI turns them into a non-zero exit status.
=============================================================================
"""

import signal
import logging
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core.listener import create_listener
from .core.event_loop import EventLoop
from .handlers.static import StaticResource


logger = logging.getLogger(__name__)


class ExServer:
    """
    Single-threaded static responder.

    Usage:
        server = ExServer(ServerConfig(port="8080"))
        server.run()        # Blocks until shutdown() or a fatal error

    Args:
        config: Server configuration. Defaults to ServerConfig().
        resource: Object with ``read(limit) -> bytes``. Defaults to a
                  StaticResource over ``config.resource_path``.
    """

    def __init__(self, config: Optional[ServerConfig] = None, resource=None):
        self.config = config or ServerConfig()

        if resource is None:
            resource = StaticResource(
                self.config.resource_path,
                limit=self.config.buffer_size,
                cache=self.config.cache_resource,
            )
        self.resource = resource

        self._listener = None
        self._loop: Optional[EventLoop] = None
        self._ready = threading.Event()
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._loop is not None and self._loop.is_running

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """The listener's bound (ip, port), once it exists."""
        if self._listener is None or self._listener.fileno() == -1:
            return None
        return self._listener.getsockname()[:2]

    @property
    def loop(self) -> Optional[EventLoop]:
        return self._loop

    def run(self, setup_logging: bool = True):
        """
        Set up the listener and run the event loop (blocking).

        Args:
            setup_logging: Configure the logging module from the config.

        Raises:
            ValueError: if the configuration is invalid.
            ListenerError: if the listening socket cannot be set up.
            LoopError: if the event loop hits a fatal error.
        """
        self.config.validate()

        if setup_logging:
            self._setup_logging()

        logger.info("eXServer starting...")

        self._listener = create_listener(self.config)

        try:
            logger.info(f"Listening on port {self.address[1]}...")

            self._loop = EventLoop(
                self._listener,
                self.resource,
                buffer_size=self.config.buffer_size,
                debug=self.config.debug,
            )

            self._setup_signals()
            self._ready.set()

            try:
                self._loop.run()
            finally:
                self._restore_signals()
        finally:
            self._ready.clear()
            self._listener.close()
            logger.info("Server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Wait until the listener is up and the loop is about to run."""
        return self._ready.wait(timeout)

    def shutdown(self):
        """Stop the event loop. Safe to call from another thread."""
        if self._loop is not None:
            self._loop.stop()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = self.config.log_level_value

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("exserver").setLevel(level)

    def _setup_signals(self):
        """
        Stop the loop on SIGTERM (docker stop, systemd, kill).

        Signal handlers can only be installed from the main thread; a server
        running in a background thread is stopped with shutdown() instead.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, shutting down...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()
