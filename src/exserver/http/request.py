"""
=============================================================================
REQUEST METHOD EXTRACTION
=============================================================================

The server looks at exactly one thing in a request: the first
whitespace-delimited token, which for a well-formed HTTP request is the
method.

    GET / HTTP/1.1\r\n
    ─┬─
     └── method token

Nothing else is parsed. The path, version, headers and body are ignored
and every request gets the same response.

=============================================================================
"""

from typing import Optional


class RequestParseError(Exception):
    """
    Raised when no method token can be extracted from a request.

    Carries the raw bytes for logging. The event loop treats this as a
    per-connection error: the connection is dropped without a response and
    the server keeps serving.
    """

    def __init__(self, message: str, raw: bytes = b""):
        super().__init__(message)
        self.raw = raw


def first_token(data: bytes) -> Optional[bytes]:
    """Return the first whitespace-delimited token of ``data``, or None."""
    parts = data.split(None, 1)
    return parts[0] if parts else None


def extract_method(data: bytes) -> str:
    """
    Extract the request method from raw request bytes.

    Examples:
        extract_method(b"GET / HTTP/1.1\\r\\n\\r\\n")  → "GET"
        extract_method(b"\\r\\n")                      → RequestParseError

    Raises:
        RequestParseError: if the buffer is empty or holds only whitespace.
    """
    token = first_token(data)
    if token is None:
        raise RequestParseError("Failed to get HTTP request method", raw=data)

    return token.decode("latin-1")
