"""
Unit tests for the client connection wrapper.
"""

import socket

import pytest

from exserver.core.connection import Connection, ConnectionState


@pytest.fixture
def pair():
    server_side, client_side = socket.socketpair()
    client_side.settimeout(2.0)
    yield server_side, client_side
    server_side.close()
    client_side.close()


def make_connection(sock: socket.socket, buffer_size: int = 4096) -> Connection:
    return Connection(socket=sock, address=("127.0.0.1", 54321), buffer_size=buffer_size)


class TestConnection:
    """Tests for Connection."""
    
    def test_initial_state(self, pair):
        conn = make_connection(pair[0])
        
        assert conn.state == ConnectionState.NEW
        assert conn.client_ip == "127.0.0.1"
        assert conn.client_port == 54321
        assert conn.fd == pair[0].fileno()
        assert len(conn.id) == 8
    
    def test_socket_made_blocking(self):
        server_side, client_side = socket.socketpair()
        server_side.setblocking(False)
        try:
            make_connection(server_side)
            assert server_side.gettimeout() is None
        finally:
            server_side.close()
            client_side.close()
    
    def test_receive_reads_once(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side, buffer_size=8)
        client_side.sendall(b"0123456789abcdef")
        
        assert conn.receive() == b"01234567"
        assert conn.state == ConnectionState.READING
    
    def test_receive_peer_closed(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side)
        client_side.shutdown(socket.SHUT_WR)
        
        assert conn.receive() is None
    
    def test_receive_error_is_end_of_connection(self, pair):
        server_side, _client_side = pair
        conn = make_connection(server_side)
        server_side.shutdown(socket.SHUT_RDWR)
        server_side.close()
        
        assert conn.receive() is None
    
    def test_send_response_two_writes(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side)
        
        assert conn.send_response(b"HEAD\r\n\r\n", b"body") is True
        assert conn.state == ConnectionState.WRITING
        
        conn.close()
        data = b""
        while True:
            chunk = client_side.recv(1024)
            if not chunk:
                break
            data += chunk
        assert data == b"HEAD\r\n\r\nbody"
    
    def test_send_failure(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side)
        server_side.close()
        
        assert conn.send_response(b"HEAD", b"body") is False
    
    def test_close_idempotent(self, pair):
        conn = make_connection(pair[0])
        
        conn.close()
        conn.close()
        
        assert conn.is_closed
        assert pair[0].fileno() == -1
    
    def test_context_manager(self, pair):
        with make_connection(pair[0]) as conn:
            assert not conn.is_closed
        
        assert conn.is_closed
