"""
=============================================================================
FIXED RESPONSE HEADER
=============================================================================

Every served request gets the same header block, byte for byte:

    HTTP/1.1 200 OK\r\n
    Connection: close\r\n
    Content-Type: text/html; charset=UTF-8\r\n
    \r\n

No Content-Length is sent. The server closes the connection after the
body, and the client reads until EOF.
=============================================================================
"""

from typing import Dict


STATUS_CODE = 200
STATUS_PHRASE = "OK"

RESPONSE_HEADERS: Dict[str, str] = {
    "Connection": "close",
    "Content-Type": "text/html; charset=UTF-8",
}


def build_response_head(
    status_code: int = STATUS_CODE,
    phrase: str = STATUS_PHRASE,
    headers: Dict[str, str] = RESPONSE_HEADERS,
) -> bytes:
    """Serialize a status line and headers, terminated by a blank line."""
    lines = [f"HTTP/1.1 {status_code} {phrase}"]
    for name, value in headers.items():
        lines.append(f"{name}: {value}")

    return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")


RESPONSE_HEAD = build_response_head()
