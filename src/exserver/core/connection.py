"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one exchange:

    accept() ──► receive() ──► send_response() ──► close()

There is no keep-alive and no reassembly of partial reads. A single
recv() of up to ``buffer_size`` bytes is all the request the server ever
sees. Whatever the peer sends afterwards is discarded when the socket is
closed.

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

One recv() may return only part of what the client sent. Requests split
across packets are therefore seen truncated. Method extraction only needs
the first token, so in practice the first segment is enough.

=============================================================================
"""

import time
import uuid
import socket
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Waiting on recv()
    WRITING = "writing"      # Sending the response
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    One accepted peer.

    Attributes:
        socket: The client socket (blocking).
        address: Peer (ip, port) tuple, used for logging only.
        id: Short identifier for log lines.
        state: Current lifecycle state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Maximum bytes read by receive().
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 4096

    def __post_init__(self):
        # The listener is non-blocking; its accepted sockets must not be.
        self.socket.setblocking(True)
        self.fd = self.socket.fileno()

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    def receive(self) -> Optional[bytes]:
        """
        Perform exactly one recv() of up to ``buffer_size`` bytes.

        Returns:
            The received bytes, or None when the connection has ended
            (orderly close by the peer, or a socket error).
        """
        self.state = ConnectionState.READING

        try:
            data = self.socket.recv(self.buffer_size)
        except OSError as e:
            logger.debug(f"[{self.id}] Receive failed: {e}")
            return None

        if not data:
            logger.debug(f"[{self.id}] Peer closed the connection")
            return None

        return data

    def send_response(self, head: bytes, body: bytes) -> bool:
        """
        Send the header block, then the body, as two separate writes.

        Each write goes out with sendall(), so a short write never leaves
        a truncated or interleaved response on the wire. Nothing is retried
        after a failure.

        Returns:
            True if both writes succeeded, False if the peer went away.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(head)
            if body:
                self.socket.sendall(body)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """Close the socket. Safe to call more than once."""
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.close()
        finally:
            self.state = ConnectionState.CLOSED

        logger.debug(f"[{self.id}] Connection from {self.client_ip} closed after {time.time() - self.created_at:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
