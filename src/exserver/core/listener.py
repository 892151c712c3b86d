"""
=============================================================================
LISTENER SETUP
=============================================================================

Creates the one listening socket the server owns for its whole lifetime.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. getaddrinfo()  Resolve a passive IPv4 stream address for the port
    2. socket()       Create a socket file descriptor
    3. bind()         Associate the socket with IP:PORT
    4. listen()       Mark the socket as listening (backlog = 10)

Every step can fail, and each failure is fatal at startup. There is no
retry: a port that is already taken or a name that does not resolve is a
configuration problem, not a transient one.

=============================================================================
"""

import socket
import logging

from ..config import ServerConfig


logger = logging.getLogger(__name__)


class ListenerError(Exception):
    """
    Raised when the listening socket cannot be set up.

    Carries the name of the step that failed so the CLI can report it:
    "getaddrinfo", "socket", "bind" or "listen".
    """

    def __init__(self, step: str, message: str):
        super().__init__(f"{step}() failed: {message}")
        self.step = step


def resolve_bind_address(host, port: str) -> tuple:
    """
    Resolve a passive IPv4 stream address for ``port``.

    With ``host=None`` and AI_PASSIVE the resolver hands back the wildcard
    address, so the socket accepts connections on every interface.

    Returns:
        (family, type, proto, sockaddr) of the first result.
    """
    try:
        results = socket.getaddrinfo(
            host, port, socket.AF_INET, socket.SOCK_STREAM, 0, socket.AI_PASSIVE
        )
    except (socket.gaierror, UnicodeError) as e:
        raise ListenerError("getaddrinfo", str(e)) from e

    if not results:
        raise ListenerError("getaddrinfo", f"no address for port {port}")

    family, socktype, proto, _canonname, sockaddr = results[0]
    return family, socktype, proto, sockaddr


def create_listener(config: ServerConfig) -> socket.socket:
    """
    Resolve, create, bind and listen.

    The returned socket is non-blocking: the event loop only calls accept()
    after the selector reports it readable, and a readiness signal with no
    connection left behind it must not block the whole server.

    Args:
        config: Server configuration (host, port, backlog).

    Returns:
        The bound, listening socket.

    Raises:
        ListenerError: naming the step that failed.
    """
    family, socktype, proto, sockaddr = resolve_bind_address(config.host, config.port)

    try:
        sock = socket.socket(family, socktype, proto)
    except OSError as e:
        raise ListenerError("socket", str(e)) from e

    try:
        # SO_REUSEADDR: restart without waiting out TIME_WAIT. A port held
        # by another listening socket still fails to bind.
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError as e:
            raise ListenerError("socket", str(e)) from e

        try:
            sock.bind(sockaddr)
        except OSError as e:
            raise ListenerError("bind", f"{sockaddr[0]}:{config.port}: {e}") from e

        try:
            sock.listen(config.backlog)
        except OSError as e:
            raise ListenerError("listen", str(e)) from e

        sock.setblocking(False)
    except BaseException:
        sock.close()
        raise

    logger.debug(f"Listener bound to {sock.getsockname()[0]}:{sock.getsockname()[1]}")
    return sock
