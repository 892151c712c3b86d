"""
HTTP pieces: the method token read from each request and the fixed
header block written in front of every response.
"""

from .request import extract_method, first_token, RequestParseError
from .response import RESPONSE_HEAD, RESPONSE_HEADERS, build_response_head

__all__ = [
    "extract_method",
    "first_token",
    "RequestParseError",
    "RESPONSE_HEAD",
    "RESPONSE_HEADERS",
    "build_response_head",
]
