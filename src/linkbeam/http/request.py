"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads exactly one HTTP request head (request line + headers) from a
connection's input stream and turns it into an HTTPRequest.

=============================================================================
WHAT WE READ
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET /photos/cat%20pic.jpg?size=large HTTP/1.1\r\n   ← request line │
    │   ─┬─ ────────────────┬─────────────── ────┬───                      │
    │    │                  │                    │                         │
    │  Method             Target           Version (ignored)               │
    │                                                                      │
    │   Host: 192.168.1.20:8080\r\n                          ← headers     │
    │   User-Agent: curl/8.4.0\r\n                                         │
    │   \r\n                                                 ← end of head │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no request body to read: the server only answers GET and HEAD,
and every response closes the connection, so anything after the blank
line is ignored.

=============================================================================
LENIENCY RULES
=============================================================================

    - The request line needs at least two whitespace-separated tokens
      (METHOD and TARGET). The version token is accepted but ignored.
    - Header lines are split at the FIRST colon. Lines without a colon,
      or with the colon at position 0, are skipped silently.
    - Header names are lower-cased. A repeated header name overwrites
      the earlier value (last wins); values are never comma-combined.
    - Lines longer than MAX_LINE_LENGTH, or more than MAX_HEADERS header
      lines, are rejected with 400 so a client cannot grow the buffer
      without bound before we even know what it wants.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Dict, Optional, Tuple
from urllib.parse import unquote

from .errors import ClientProtocolError


MAX_LINE_LENGTH = 8192
MAX_HEADERS = 100


class Method(Enum):
    """
    The request methods the server answers.

    Anything not listed here is dispatched to the 405 branch.
    """

    GET = "GET"
    HEAD = "HEAD"

    @classmethod
    def parse(cls, token: str) -> Optional["Method"]:
        """Return the Method for a request-line token, or None if unsupported."""
        try:
            return cls(token)
        except ValueError:
            return None

    @property
    def sends_body(self) -> bool:
        return self is Method.GET


@dataclass
class HTTPRequest:
    """
    A parsed request head.

    Attributes:
        method:  Method token exactly as sent ("GET", "HEAD", "DELETE", ...).
        target:  Raw request target, including any query string.
        version: Version token, if the client sent one.
        headers: Header name (lower-case) → value. Last occurrence wins.
    """

    method: str
    target: str
    version: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def path(self) -> str:
        """
        The target with its query string stripped and percent-decoded.

        "/a%20b.txt?x=1" → "/a b.txt"
        """
        return decode_request_path(self.target)

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)


def decode_request_path(target: str) -> str:
    """
    Strip the query suffix and percent-decode the remainder.

    Decoding is strict UTF-8; if the escapes do not form valid UTF-8 the
    query-stripped, undecoded path is returned instead. Decoding never
    aborts the request.

    Examples:
        >>> decode_request_path("/docs/my%20file.txt?dl=1")
        '/docs/my file.txt'
        >>> decode_request_path("/bad%ff")
        '/bad%ff'
    """
    path = target.split("?", 1)[0]
    try:
        return unquote(path, encoding="utf-8", errors="strict")
    except UnicodeDecodeError:
        return path


class RequestParser:
    """
    Parses one request head from a binary stream.

    The stream only needs a `readline(limit)` method, so the parser works
    the same on a socket's makefile() reader and on io.BytesIO in tests.

        parser = RequestParser()
        request = parser.parse(conn.reader)
        if request is None:
            ...  # peer closed before sending anything
    """

    def __init__(
        self,
        max_line_length: int = MAX_LINE_LENGTH,
        max_headers: int = MAX_HEADERS,
    ):
        self.max_line_length = max_line_length
        self.max_headers = max_headers

    def parse(self, stream: BinaryIO) -> Optional[HTTPRequest]:
        """
        Read and parse a request head.

        Returns:
            The parsed request, or None if the stream hit EOF before a
            single byte arrived (the client connected and went away).

        Raises:
            ClientProtocolError: The request line is empty or has fewer
                than two tokens, or a line/header limit was exceeded.
        """
        raw = stream.readline(self.max_line_length + 1)
        if not raw:
            return None

        method, target, version = self._parse_request_line(self._decode_line(raw))
        headers = self._parse_headers(stream)

        return HTTPRequest(method=method, target=target, version=version, headers=headers)

    def _decode_line(self, raw: bytes) -> str:
        if len(raw) > self.max_line_length:
            raise ClientProtocolError("Request line too long")
        return raw.decode("utf-8", errors="replace").rstrip("\r\n")

    def _parse_request_line(self, line: str) -> Tuple[str, str, Optional[str]]:
        # METHOD SP TARGET [SP VERSION]
        tokens = line.split()
        if len(tokens) < 2:
            raise ClientProtocolError("Bad Request")

        version = tokens[2] if len(tokens) > 2 else None
        return tokens[0], tokens[1], version

    def _parse_headers(self, stream: BinaryIO) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        count = 0

        while True:
            raw = stream.readline(self.max_line_length + 1)
            if not raw:
                break  # EOF inside the head: use what we have

            line = self._decode_line(raw)
            if not line:
                break  # blank line ends the head

            count += 1
            if count > self.max_headers:
                raise ClientProtocolError("Too many header lines")

            colon = line.find(":")
            if colon <= 0:
                continue  # malformed header, skip it

            name = line[:colon].strip().lower()
            headers[name] = line[colon + 1:].strip()

        return headers
