"""
Unit tests for HTTP request parsing.
"""

import io

import pytest

from linkbeam.http.errors import ClientProtocolError
from linkbeam.http.request import (
    HTTPRequest,
    Method,
    RequestParser,
    decode_request_path,
)


def parse(data: bytes):
    return RequestParser().parse(io.BytesIO(data))


class TestRequestLine:
    """Tests for request line parsing."""

    def test_simple_get(self):
        """Test parsing a simple GET request."""
        request = parse(b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")

        assert request.method == "GET"
        assert request.target == "/index.html"
        assert request.version == "HTTP/1.1"

    def test_version_is_optional(self):
        """Two tokens are enough."""
        request = parse(b"HEAD /\r\n\r\n")

        assert request.method == "HEAD"
        assert request.target == "/"
        assert request.version is None

    def test_single_token_is_bad_request(self):
        with pytest.raises(ClientProtocolError) as exc_info:
            parse(b"GET\r\n\r\n")
        assert exc_info.value.status == 400

    def test_empty_line_is_bad_request(self):
        with pytest.raises(ClientProtocolError):
            parse(b"\r\n\r\n")

    def test_eof_before_anything_returns_none(self):
        """A client that connects and closes sends nothing at all."""
        assert parse(b"") is None

    def test_method_kept_verbatim(self):
        """Unsupported methods still parse; dispatch answers them."""
        request = parse(b"DELETE /a.txt HTTP/1.1\r\n\r\n")
        assert request.method == "DELETE"

    def test_overlong_line_rejected(self):
        parser = RequestParser(max_line_length=32)
        stream = io.BytesIO(b"GET /" + b"a" * 100 + b" HTTP/1.1\r\n\r\n")

        with pytest.raises(ClientProtocolError, match="too long"):
            parser.parse(stream)


class TestHeaders:
    """Tests for header parsing."""

    def test_headers_lowercased(self):
        request = parse(
            b"GET / HTTP/1.1\r\n"
            b"Host: localhost:8080\r\n"
            b"User-Agent: pytest\r\n"
            b"\r\n"
        )

        assert request.headers["host"] == "localhost:8080"
        assert request.get_header("USER-AGENT") == "pytest"

    def test_split_at_first_colon(self):
        request = parse(b"GET / HTTP/1.1\r\nReferer: http://x:1/y\r\n\r\n")
        assert request.headers["referer"] == "http://x:1/y"

    def test_malformed_headers_skipped(self):
        """No colon, or colon at position 0, is ignored."""
        request = parse(
            b"GET / HTTP/1.1\r\n"
            b"garbage line\r\n"
            b": no-name\r\n"
            b"Accept: */*\r\n"
            b"\r\n"
        )

        assert request.headers == {"accept": "*/*"}

    def test_last_duplicate_wins(self):
        request = parse(b"GET / HTTP/1.1\r\nX-A: 1\r\nx-a: 2\r\n\r\n")
        assert request.headers["x-a"] == "2"

    def test_eof_inside_headers(self):
        """A head cut short still yields what was read."""
        request = parse(b"GET / HTTP/1.1\r\nHost: x\r\n")
        assert request.headers["host"] == "x"

    def test_too_many_headers(self):
        parser = RequestParser(max_headers=2)
        stream = io.BytesIO(b"GET / HTTP/1.1\r\nA: 1\r\nB: 2\r\nC: 3\r\n\r\n")

        with pytest.raises(ClientProtocolError, match="Too many"):
            parser.parse(stream)

    def test_missing_header_default(self):
        request = HTTPRequest(method="GET", target="/")
        assert request.get_header("host", "none") == "none"


class TestPathDecoding:
    """Tests for query stripping and percent-decoding."""

    def test_query_stripped(self):
        assert decode_request_path("/a.txt?download=1") == "/a.txt"

    def test_percent_decoded(self):
        assert decode_request_path("/my%20file.txt") == "/my file.txt"

    def test_encoded_slashes_and_dots(self):
        assert decode_request_path("/..%2f..%2fetc%2fpasswd") == "/../../etc/passwd"

    def test_utf8_decoded(self):
        assert decode_request_path("/caf%C3%A9.txt") == "/café.txt"

    def test_invalid_utf8_left_undecoded(self):
        assert decode_request_path("/bad%ff.txt?x") == "/bad%ff.txt"

    def test_request_path_property(self):
        request = parse(b"GET /docs/a%20b.txt?x=1 HTTP/1.1\r\n\r\n")
        assert request.path == "/docs/a b.txt"


class TestMethod:
    """Tests for the supported-method enumeration."""

    def test_parse_supported(self):
        assert Method.parse("GET") is Method.GET
        assert Method.parse("HEAD") is Method.HEAD

    def test_parse_is_case_sensitive(self):
        assert Method.parse("get") is None

    def test_parse_unsupported(self):
        assert Method.parse("POST") is None

    def test_sends_body(self):
        assert Method.GET.sends_body
        assert not Method.HEAD.sends_body
