"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The file server speaks a small subset of HTTP/1.1. Every
response it can produce carries one of these seven status codes:

    ┌──────┬────────────────────────┬──────────────────────────────────────┐
    │ Code │ Reason phrase          │ When                                 │
    ├──────┼────────────────────────┼──────────────────────────────────────┤
    │ 200  │ OK                     │ File, index.html or directory listing│
    │ 301  │ Moved Permanently      │ Directory requested without "/"      │
    │ 400  │ Bad Request            │ Malformed request line               │
    │ 403  │ Forbidden              │ Traversal token / escapes the root   │
    │ 404  │ Not Found              │ Target does not exist                │
    │ 405  │ Method Not Allowed     │ Anything other than GET and HEAD     │
    │ 500  │ Internal Server Error  │ Canonicalization or file read failed │
    └──────┴────────────────────────┴──────────────────────────────────────┘

The reason phrase is fixed per code and appears verbatim in the status
line:

    HTTP/1.1 404 Not Found
             ─── ─────────
              │      │
              │      └── HTTPStatus.NOT_FOUND.phrase
              └───────── int(HTTPStatus.NOT_FOUND)

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Status codes produced by the server.

    IntEnum so values compare and format as plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> f"{HTTPStatus.OK:d}"
        '200'
    """

    OK = 200
    MOVED_PERMANENTLY = 301
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
