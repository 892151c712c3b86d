"""
=============================================================================
INTEREST SET
=============================================================================

The set of socket descriptors the event loop is watching for
read-readiness, built on the standard library ``selectors`` module
(epoll on Linux, kqueue on BSD/macOS, select() elsewhere).

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         INTEREST SET                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   fd 3  listening socket    ◄── member until shutdown                │
    │   fd 5  client connection   ◄── member from accept() to close()      │
    │   fd 6  client connection                                            │
    │                                                                      │
    │   wait()  ──►  [(3, None), (6, <Connection>)]   ascending fd order   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Readiness is level-triggered: a descriptor with unread data (or a pending
connection, or a closed peer) keeps being reported on every wait() until
the condition is resolved.

A private socketpair is also registered so that another thread can wake a
wait() that has no timeout. It is never reported as a member.
=============================================================================
"""

import socket
import selectors
from typing import Any, Dict, List, Optional, Tuple, Union


_WAKEUP = object()

SocketOrFd = Union[socket.socket, int]


def _fd(sock: SocketOrFd) -> int:
    return sock if isinstance(sock, int) else sock.fileno()


class InterestSet:
    """
    Descriptors watched for read-readiness.

    Each member carries a ``data`` value (the event loop stores the client's
    Connection there). A descriptor can only be added once; remove() must
    be called before the socket is closed, while its fileno() is still
    valid.

    Usage:
        interest = InterestSet()
        interest.add(listener)
        for fd, data in interest.wait():
            ...
    """

    def __init__(self, selector: Optional[selectors.BaseSelector] = None):
        self._selector = selector if selector is not None else selectors.DefaultSelector()
        self._members: Dict[int, Any] = {}

        self._wakeup_reader, self._wakeup_writer = socket.socketpair()
        self._wakeup_reader.setblocking(False)
        self._wakeup_writer.setblocking(False)
        self._selector.register(self._wakeup_reader, selectors.EVENT_READ, _WAKEUP)

        self._closed = False

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, sock: SocketOrFd) -> bool:
        return _fd(sock) in self._members

    @property
    def fds(self) -> List[int]:
        """Member descriptors in ascending order."""
        return sorted(self._members)

    @property
    def max_fd(self) -> int:
        """Highest member descriptor, or -1 when empty."""
        return max(self._members, default=-1)

    def data(self, sock: SocketOrFd) -> Any:
        return self._members[_fd(sock)]

    def add(self, sock: socket.socket, data: Any = None) -> None:
        """
        Start watching ``sock`` for read-readiness.

        Raises:
            ValueError: if the descriptor is already a member.
        """
        fd = sock.fileno()
        if fd in self._members:
            raise ValueError(f"Descriptor {fd} is already being watched")

        self._selector.register(sock, selectors.EVENT_READ, data)
        self._members[fd] = data

    def remove(self, sock: SocketOrFd) -> None:
        """
        Stop watching a descriptor.

        Raises:
            KeyError: if the descriptor is not a member.
        """
        fd = _fd(sock)
        if fd not in self._members:
            raise KeyError(f"Descriptor {fd} is not being watched")

        self._selector.unregister(fd)
        del self._members[fd]

    def wait(self, timeout: Optional[float] = None) -> List[Tuple[int, Any]]:
        """
        Block until at least one member is readable.

        With ``timeout=None`` this waits forever. The result is a snapshot:
        adding or removing members afterwards does not change it.

        Returns:
            (fd, data) for every ready member, in ascending fd order. Empty
            when the wait was ended by notify() or by the timeout.

        Raises:
            OSError: if the underlying selector call fails.
        """
        ready = []
        for key, _mask in self._selector.select(timeout):
            if key.data is _WAKEUP:
                self._drain_wakeup()
                continue
            ready.append((key.fd, key.data))

        ready.sort(key=lambda item: item[0])
        return ready

    def notify(self) -> None:
        """Wake up a blocked wait(). Safe to call from any thread."""
        try:
            self._wakeup_writer.send(b"\0")
        except BlockingIOError:
            pass  # A wakeup is already pending
        except OSError:
            if not self._closed:
                raise

    def _drain_wakeup(self) -> None:
        try:
            while self._wakeup_reader.recv(1024):
                pass
        except BlockingIOError:
            pass

    def close(self) -> None:
        """Release the selector. Member sockets are not closed."""
        if self._closed:
            return
        self._closed = True
        self._members.clear()
        self._selector.close()
        self._wakeup_reader.close()
        self._wakeup_writer.close()
