"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

The small slice of HTTP/1.1 the file server speaks. Nothing in here
touches sockets or the filesystem layout of the document root; it only
turns bytes into requests and responses into bytes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py       one request head → HTTPRequest                     │
    │ response.py      HTTPResponse + ResponseWriter (8 KiB streaming)    │
    │ status_codes.py  200 / 301 / 400 / 403 / 404 / 405 / 500            │
    │ mime_types.py    extension → Content-Type, cacheable assets         │
    │ errors.py        per-request exceptions carrying their status       │
    └─────────────────────────────────────────────────────────────────────┘

    REQUEST:                          RESPONSE:
    ─────────                         ──────────
    GET /path HTTP/1.1\r\n            HTTP/1.1 200 OK\r\n
    Header: Value\r\n                 Content-Type: ...\r\n
    \r\n                              Connection: close\r\n
                                      \r\n
                                      [body unless HEAD]

=============================================================================
"""

from .errors import (
    HTTPError,
    ClientProtocolError,
    UnsupportedMethod,
    SecurityViolation,
    NotFound,
    InternalError,
)
from .request import HTTPRequest, Method, RequestParser, decode_request_path
from .response import (
    HTTPResponse,
    ResponseWriter,
    text_response,
    html_response,
    error_response,
    redirect,
    file_response,
    format_http_date,
)
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, is_cacheable

__all__ = [
    # Errors
    "HTTPError",
    "ClientProtocolError",
    "UnsupportedMethod",
    "SecurityViolation",
    "NotFound",
    "InternalError",

    # Request parsing
    "HTTPRequest",
    "Method",
    "RequestParser",
    "decode_request_path",

    # Responses
    "HTTPResponse",
    "ResponseWriter",
    "text_response",
    "html_response",
    "error_response",
    "redirect",
    "file_response",
    "format_http_date",

    # Status codes
    "HTTPStatus",

    # MIME types
    "get_mime_type",
    "is_cacheable",
]
