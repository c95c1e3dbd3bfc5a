"""
=============================================================================
DISPATCHER & CONNECTION HANDLER
=============================================================================

One call of handle_connection() is one unit of work on the pool: it runs
the whole request/response cycle for exactly one accepted connection and
closes it, whatever happens.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   with conn:                                     ← always closed     │
    │     parse request head ── EOF, nothing sent ──► close silently       │
    │           │             ── malformed ─────────► 400                  │
    │           ▼                                                          │
    │     dispatch(method)                                                 │
    │           ├── GET  ──► handler ──► response, body                    │
    │           ├── HEAD ──► handler ──► response, no body                 │
    │           └── else ──────────────► 405                               │
    │           ▼                                                          │
    │     write response                                                   │
    │           │                                                          │
    │     any fault ──► logged; 500 if nothing was written yet             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing raised in here ever reaches the pool's worker loop or the accept
loop: a broken request only affects its own connection.

=============================================================================
"""

import logging
from typing import Optional, Tuple

from ..core.connection import Connection
from ..http.errors import ClientProtocolError, HTTPError, InternalError, UnsupportedMethod
from ..http.request import HTTPRequest, Method, RequestParser
from ..http.response import HTTPResponse, ResponseWriter, error_response
from .static import StaticFileHandler


logger = logging.getLogger(__name__)


def dispatch(request: HTTPRequest, handler: StaticFileHandler) -> Tuple[HTTPResponse, bool]:
    """
    Route a parsed request by method.

    Returns:
        (response, include_body). GET and HEAD build the same response;
        only GET sends the body.
    """
    method = Method.parse(request.method)

    if method is None:
        return error_response(UnsupportedMethod()), True

    return handler.handle(request.path), method.sends_body


def handle_connection(
    conn: Connection,
    handler: StaticFileHandler,
    parser: Optional[RequestParser] = None,
    writer: Optional[ResponseWriter] = None,
):
    """Serve one request on `conn`, then close it."""
    parser = parser or RequestParser()
    writer = writer or ResponseWriter()

    request: Optional[HTTPRequest] = None
    response: Optional[HTTPResponse] = None
    body_sent = 0

    with conn:
        try:
            # ─────────────────────────────────────────────────────────────
            # PARSE
            # ─────────────────────────────────────────────────────────────
            try:
                request = parser.parse(conn.reader)
            except ClientProtocolError as e:
                response, include_body = error_response(e), True
            else:
                if request is None:
                    logger.debug(f"[{conn.id}] {conn.client} closed without sending a request")
                    return
                response, include_body = dispatch(request, handler)

            # ─────────────────────────────────────────────────────────────
            # WRITE
            # ─────────────────────────────────────────────────────────────
            try:
                body_sent = writer.write(conn, response, include_body)
            except HTTPError as e:
                # The file could not be opened; nothing has been written
                response = error_response(e)
                body_sent = writer.write(conn, response, include_body)

        except OSError as e:
            logger.debug(f"[{conn.id}] Connection to {conn.client} lost: {e}")

        except Exception as e:
            logger.exception(f"[{conn.id}] Error handling request from {conn.client}: {e}")
            if request is not None and not conn.headers_sent:
                response = error_response(InternalError())
                try:
                    body_sent = writer.write(conn, response, True)
                except OSError:
                    pass  # client already gone

        finally:
            if response is not None:
                _log_access(conn, request, response, body_sent)


def _log_access(
    conn: Connection,
    request: Optional[HTTPRequest],
    response: HTTPResponse,
    body_sent: int,
):
    line = f"{request.method} {request.target}" if request else "-"
    logger.info(f'{conn.client_ip} "{line}" {response.status:d} {body_sent}')
