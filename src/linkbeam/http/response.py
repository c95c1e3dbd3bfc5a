"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Builds the responses the file server can send and serializes them onto a
connection's output stream.

=============================================================================
WIRE FORMAT
=============================================================================

Every response has the same header sequence, in this exact order:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   HTTP/1.1 200 OK\r\n                         ← status line          │
    │   Content-Type: text/plain\r\n                                       │
    │   Content-Length: 5\r\n                       ← exact body length    │
    │   Connection: close\r\n                       ← never keep-alive     │
    │   Access-Control-Allow-Origin: *\r\n          ← permissive CORS      │
    │   Server: LinkBeam/1.0\r\n                                           │
    │   Last-Modified: Mon, 02 Mar 2026 ...\r\n     ← file responses only  │
    │   Cache-Control: public, max-age=3600\r\n     ← static assets only   │
    │   Location: /docs/\r\n                        ← redirects only       │
    │   \r\n                                                               │
    │   hello                                       ← omitted for HEAD     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
IN-MEMORY VS. STREAMED BODIES
=============================================================================

Small generated bodies (error text, redirects, directory listings) are
held in memory as bytes. File bodies are NOT: the response only records
the file's path and size, and the writer copies the file to the socket
in fixed-size chunks (8 KiB by default). A 2 GB video therefore costs
8 KiB of memory to serve, not 2 GB.

    HTTPResponse(body=b"...")           ─►  sendall(headers + body)

    HTTPResponse(file_path=..., length) ─►  open file
                                            sendall(headers)
                                            while remaining:
                                                sendall(read(8192))

The file is opened BEFORE the headers go out, so an unreadable file can
still be answered with a clean 500 instead of a truncated 200.

=============================================================================
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Dict, Optional

from .errors import HTTPError, InternalError
from .mime_types import CACHE_CONTROL_STATIC, is_cacheable
from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "LinkBeam/1.0"
DEFAULT_CHUNK_SIZE = 8192

TEXT_PLAIN = "text/plain; charset=UTF-8"
TEXT_HTML = "text/html; charset=UTF-8"


@dataclass
class HTTPResponse:
    """
    One response, ready to be written.

    Exactly one of `body` and `file_path` carries the payload. For file
    responses `content_length` is the file size taken when the response
    was built; the writer never sends more than that many bytes.

    Attributes:
        status:         Status code.
        content_type:   Value of the Content-Type header.
        body:           In-memory body (ignored when file_path is set).
        file_path:      File to stream as the body.
        content_length: Advertised length; defaults to len(body).
        headers:        Additional headers appended after the fixed set.
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = TEXT_PLAIN
    body: bytes = b""
    file_path: Optional[Path] = None
    content_length: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.content_length is None:
            self.content_length = len(self.body)

    @property
    def status_line(self) -> str:
        return f"HTTP/1.1 {self.status:d} {self.status.phrase}"

    @property
    def is_file(self) -> bool:
        return self.file_path is not None

    def header_block(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize the status line and headers, including the blank line.

            >>> HTTPResponse(body=b"hi").header_block().splitlines()[0]
            b'HTTP/1.1 200 OK'
        """
        lines = [
            self.status_line,
            f"Content-Type: {self.content_type}",
            f"Content-Length: {self.content_length}",
            "Connection: close",
            "Access-Control-Allow-Origin: *",
            f"Server: {server_name}",
        ]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")


# =============================================================================
# RESPONSE FACTORIES
# =============================================================================


def text_response(status: HTTPStatus, message: str) -> HTTPResponse:
    """Plain-text response, used for every error body."""
    return HTTPResponse(
        status=status,
        content_type=TEXT_PLAIN,
        body=message.encode("utf-8"),
    )


def html_response(html: str, status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
    """Generated HTML page (directory listings)."""
    return HTTPResponse(
        status=status,
        content_type=TEXT_HTML,
        body=html.encode("utf-8"),
    )


def error_response(error: HTTPError) -> HTTPResponse:
    """Turn a per-request exception into its plain-text response."""
    return text_response(error.status, error.message)


def redirect(location: str) -> HTTPResponse:
    """301 to `location` with an empty body."""
    return HTTPResponse(
        status=HTTPStatus.MOVED_PERMANENTLY,
        content_type=TEXT_PLAIN,
        headers={"Location": location},
    )


def file_response(
    path: Path,
    content_type: str,
    stat_result: Optional[os.stat_result] = None,
) -> HTTPResponse:
    """
    Build a streamed response for a regular file.

    Adds Last-Modified always and Cache-Control for static asset
    extensions. The stat is taken once here; later growth of the file is
    not sent.

    Raises:
        InternalError: The file could not be stat'ed.
    """
    if stat_result is None:
        try:
            stat_result = path.stat()
        except OSError as e:
            raise InternalError(f"Error reading file: {e}") from e

    modified = datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc)
    headers = {"Last-Modified": format_http_date(modified)}
    if is_cacheable(path.name):
        headers["Cache-Control"] = CACHE_CONTROL_STATIC

    return HTTPResponse(
        status=HTTPStatus.OK,
        content_type=content_type,
        file_path=path,
        content_length=stat_result.st_size,
        headers=headers,
    )


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Wed, 01 Jan 2026 12:00:00 GMT

    The month and weekday names are fixed English tokens, so we do not
    use strftime (which follows the process locale).
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# WRITER
# =============================================================================


class ResponseWriter:
    """
    Serializes HTTPResponse objects onto a writable byte sink.

    The sink only needs `write(bytes)`; a Connection, a socket makefile()
    or an io.BytesIO all work.

        writer = ResponseWriter(server_name="LinkBeam/1.0")
        writer.write(conn, response, include_body=(method == "GET"))
    """

    def __init__(
        self,
        server_name: str = DEFAULT_SERVER_NAME,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.server_name = server_name
        self.chunk_size = chunk_size

    def write(self, output, response: HTTPResponse, include_body: bool = True) -> int:
        """
        Write the response. Returns the number of body bytes sent.

        Raises:
            InternalError: A file body could not be opened. Nothing has
                been written in that case.
            OSError: The peer went away mid-write.
        """
        if response.is_file and include_body:
            try:
                source = open(response.file_path, "rb")
            except OSError as e:
                raise InternalError(f"Error reading file: {e}") from e

            with source:
                output.write(response.header_block(self.server_name))
                return self._stream(source, output, response.content_length)

        output.write(response.header_block(self.server_name))
        if include_body and response.body:
            output.write(response.body)
            return len(response.body)
        return 0

    def _stream(self, source: BinaryIO, output, length: int) -> int:
        # ─────────────────────────────────────────────────────────────────
        # Copy at most `length` bytes in chunk_size pieces. A file that
        # shrank after stat() just ends the body early; the client sees
        # a short read rather than a hung connection.
        # ─────────────────────────────────────────────────────────────────
        remaining = length
        sent = 0
        while remaining > 0:
            chunk = source.read(min(self.chunk_size, remaining))
            if not chunk:
                break
            output.write(chunk)
            sent += len(chunk)
            remaining -= len(chunk)
        return sent
