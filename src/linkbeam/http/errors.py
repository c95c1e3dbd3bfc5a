"""
=============================================================================
PER-REQUEST ERRORS
=============================================================================

Raised anywhere inside the handling of one connection. Each carries the
HTTP status it maps to, so the connection handler can turn it straight
into a plain-text response. They never leave the worker that raised them.

    ClientProtocolError  400  malformed request line / oversized lines
    SecurityViolation    403  traversal token, or path escapes the root
    NotFound             404  target does not exist
    UnsupportedMethod    405  anything other than GET / HEAD
    InternalError        500  canonicalization or file-read failure

A 301 redirect is not modelled as an exception: the static handler
returns it directly at the same decision point as the errors.

=============================================================================
"""

from .status_codes import HTTPStatus


class HTTPError(Exception):
    """
    Base class for failures that map to an HTTP error response.

    Attributes:
        status: Status code to send.
        message: Plain-text body sent to the client.
    """

    status = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = ""):
        message = message or self.status.phrase
        super().__init__(message)
        self.message = message


class ClientProtocolError(HTTPError):
    """The request line or header block could not be parsed."""

    status = HTTPStatus.BAD_REQUEST


class UnsupportedMethod(HTTPError):
    """The request method is neither GET nor HEAD."""

    status = HTTPStatus.METHOD_NOT_ALLOWED


class SecurityViolation(HTTPError):
    """The request path tried to leave the document root."""

    status = HTTPStatus.FORBIDDEN


class NotFound(HTTPError):
    """The requested path does not exist under the document root."""

    status = HTTPStatus.NOT_FOUND


class InternalError(HTTPError):
    """The server failed while resolving or reading the target."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR
