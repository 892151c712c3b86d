"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from exserver import ExServer, ServerConfig
from exserver.core.listener import create_listener


INDEX_HTML = b"<!DOCTYPE html>\n<html><body><p>Hello, world!</p></body></html>\n"


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return b"GET / HTTP/1.1\r\n\r\n"


@pytest.fixture
def resource_file(tmp_path: Path) -> Path:
    """A small static page on disk."""
    path = tmp_path / "index.html"
    path.write_bytes(INDEX_HTML)
    return path


@pytest.fixture
def config(resource_file: Path) -> ServerConfig:
    """Test configuration: localhost, OS-assigned port."""
    return ServerConfig(
        host="127.0.0.1",
        port="0",
        resource_path=str(resource_file),
        debug=True,
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def listener(config: ServerConfig) -> Generator[socket.socket, None, None]:
    """A bound, listening, non-blocking socket on 127.0.0.1."""
    sock = create_listener(config)
    yield sock
    sock.close()


def exchange(port: int, payload: bytes, timeout: float = 5.0) -> bytes:
    """Connect, send ``payload``, and read until the server closes."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as client:
        if payload:
            client.sendall(payload)
        return read_until_eof(client)


def read_until_eof(client: socket.socket) -> bytes:
    chunks = []
    while True:
        try:
            chunk = client.recv(65536)
        except ConnectionResetError:
            break
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def http_exchange():
    """The ``exchange(port, payload)`` helper."""
    return exchange


class ServerThread:
    """Runs an ExServer in a background thread."""

    def __init__(self, server: ExServer):
        self.server = server
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    @property
    def loop(self):
        return self.server.loop

    def _run(self):
        try:
            self.server.run(setup_logging=False)
        except BaseException as e:
            self.error = e

    def start(self):
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError(f"Server failed to start: {self.error!r}")

    def stop(self):
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[ServerThread, None, None]:
    """An ExServer serving ``resource_file`` on an OS-assigned port."""
    thread = ServerThread(ExServer(config))
    thread.start()

    yield thread

    thread.stop()


@pytest.fixture
def start_server() -> Generator:
    """Factory: start an ExServer for a config; stopped after the test."""
    started = []

    def _start(config: ServerConfig) -> ServerThread:
        thread = ServerThread(ExServer(config))
        thread.start()
        started.append(thread)
        return thread

    yield _start

    for thread in started:
        thread.stop()


@pytest.fixture
def index_html() -> bytes:
    """Contents of ``resource_file``."""
    return INDEX_HTML


@pytest.fixture
def read_eof():
    """The ``read_until_eof(client)`` helper."""
    return read_until_eof
