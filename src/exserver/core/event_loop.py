"""
=============================================================================
READINESS LOOP
=============================================================================

A single-threaded, level-triggered event loop over the interest set. This
is the whole server: one thread, one blocking wait, and a fixed amount of
work for every descriptor that comes back ready.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         One Pass of the Loop                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ready = interest.wait()          ◄── blocks, no timeout            │
    │       │                                                              │
    │       └──► for fd in ready (ascending):                              │
    │               │                                                      │
    │               ├── fd is the listener?                                │
    │               │      accept() one connection                         │
    │               │      interest.add(client)                            │
    │               │                                                      │
    │               └── fd is a client?                                    │
    │                      recv() once                                     │
    │                      ├── 0 bytes / error ──► remove + close          │
    │                      └── data:                                       │
    │                             extract method token                     │
    │                             read static resource (bounded)           │
    │                             send header block, send resource         │
    │                             remove + close                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SCHEDULING
=============================================================================

The wait is the only place the loop suspends. Once a client is picked,
its recv/send sequence runs to completion on a blocking socket, so a peer
that trickles its request byte by byte holds up every other client until
it is done. Descriptors that are ready at the same time are served in
ascending descriptor order.

=============================================================================
ERRORS
=============================================================================

    Per-connection (drop that connection, keep serving):
        - peer closed / recv() failed
        - no method token in the request
        - resource could not be read
        - send failed

    Fatal (raise LoopError, the process exits non-zero):
        - the wait itself failed
        - accept() failed with anything but "no pending connection"

=============================================================================
"""

import socket
import logging
from typing import Dict, List, Optional

from .connection import Connection
from .interest_set import InterestSet
from ..http.request import extract_method, RequestParseError
from ..http.response import RESPONSE_HEAD


logger = logging.getLogger(__name__)


class LoopError(Exception):
    """Raised when the event loop cannot continue (wait or accept failed)."""


class EventLoop:
    """
    Accept/serve loop over one listening socket.

    Usage:
        loop = EventLoop(listener, StaticResource("misc/index.html"))
        loop.run()          # Blocks until stop() or a fatal error

    Args:
        listener: Bound, listening, non-blocking socket.
        resource: Anything with ``read(limit) -> bytes``.
        buffer_size: recv() size and resource cap.
        debug: Check interest set invariants after every pass.
        interest: Interest set to use (a fresh one by default).
    """

    def __init__(
        self,
        listener: socket.socket,
        resource,
        buffer_size: int = 4096,
        debug: bool = False,
        interest: Optional[InterestSet] = None,
    ):
        self._listener = listener
        self._listener_fd = listener.fileno()
        self._resource = resource
        self.buffer_size = buffer_size
        self.debug = debug

        self.interest = interest if interest is not None else InterestSet()
        self.interest.add(listener)

        self._connections: Dict[int, Connection] = {}
        self._running = False
        self._stop_requested = False
        self._closed = False

        self.requests_served = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def listener_fd(self) -> int:
        return self._listener_fd

    @property
    def connections(self) -> List[Connection]:
        """Accepted connections that are not closed yet, by descriptor."""
        return [self._connections[fd] for fd in sorted(self._connections)]

    def run(self):
        """
        Run until stop() is called or a fatal error occurs.

        Open client connections are closed and the listener is removed from
        the interest set on the way out. The listener itself is left open
        for its owner to close.

        Raises:
            LoopError: if the wait or accept() fails.
        """
        self._running = True
        logger.info("Waiting for client connections...")

        try:
            while not self._stop_requested:
                self.run_once()
        finally:
            self._running = False
            self.close()

    def run_once(self, timeout: Optional[float] = None) -> int:
        """
        Wait once and handle every ready descriptor.

        Args:
            timeout: Seconds to wait. None waits forever.

        Returns:
            Number of ready descriptors handled.
        """
        try:
            ready = self.interest.wait(timeout)
        except OSError as e:
            logger.error(f"select() failed: {e}")
            raise LoopError(f"select() failed: {e}") from e

        for fd, conn in ready:
            if fd == self._listener_fd:
                self._accept()
            elif fd in self.interest and self.interest.data(fd) is conn:
                self._serve(conn)
            # else: closed earlier in this pass

        if self.debug:
            self.check_invariants()

        return len(ready)

    def stop(self):
        """
        Ask the loop to exit after the current pass.

        Safe to call from another thread or a signal handler.
        """
        logger.info("Stopping event loop...")
        self._stop_requested = True
        self.interest.notify()

    # =========================================================================
    # LISTENER: accept and register
    # =========================================================================

    def _accept(self):
        try:
            client_socket, client_address = self._listener.accept()
        except (BlockingIOError, InterruptedError):
            # Readiness was reported but the connection is already gone
            return
        except OSError as e:
            logger.error(f"accept() failed: {e}")
            raise LoopError(f"accept() failed: {e}") from e

        conn = Connection(
            socket=client_socket,
            address=client_address,
            buffer_size=self.buffer_size,
        )

        self.interest.add(client_socket, conn)
        self._connections[conn.fd] = conn

        logger.info(f"New connection from {conn.client_ip}.")
        logger.debug(f"[{conn.id}] fd={conn.fd} port={conn.client_port} watching {len(self.interest)} descriptors")

    # =========================================================================
    # CLIENT: one read, one response, close
    # =========================================================================

    def _serve(self, conn: Connection):
        try:
            request = conn.receive()
            if request is None:
                return

            logger.info(request.decode("latin-1"))

            try:
                method = extract_method(request)
            except RequestParseError as e:
                logger.warning(f"[{conn.id}] {e}, dropping connection from {conn.client_ip}")
                return

            logger.info(f"HTTP Request Type: {method}")

            try:
                body = self._resource.read(self.buffer_size)
            except OSError as e:
                logger.error(f"[{conn.id}] Failed to load static resource: {e}")
                return

            if conn.send_response(RESPONSE_HEAD, body):
                self.requests_served += 1
        finally:
            self._drop(conn)

    def _drop(self, conn: Connection):
        self.interest.remove(conn.fd)
        del self._connections[conn.fd]
        conn.close()

    # =========================================================================
    # INVARIANTS AND CLEANUP
    # =========================================================================

    def check_invariants(self):
        """
        Verify the interest set is the listener plus the open connections.

        Raises:
            AssertionError: if the interest set and the connection table
                            disagree.
        """
        expected = {self._listener_fd, *self._connections}
        actual = set(self.interest.fds)

        if actual != expected or len(self.interest) != len(expected):
            raise AssertionError(
                f"Interest set {sorted(actual)} does not match "
                f"listener + open connections {sorted(expected)}"
            )

        for fd, conn in self._connections.items():
            if conn.is_closed:
                raise AssertionError(f"Closed connection {conn.id} still watched (fd={fd})")

    def close(self):
        """Close open connections and release the interest set. Idempotent."""
        if self._closed:
            return
        self._closed = True

        for conn in self.connections:
            self._drop(conn)

        if self._listener_fd in self.interest:
            self.interest.remove(self._listener_fd)

        self.interest.close()
        logger.debug("Event loop stopped")
