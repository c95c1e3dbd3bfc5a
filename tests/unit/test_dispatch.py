"""
Unit tests for method dispatch and the per-connection handler.
"""

import logging
import os
import socket
import threading

import pytest

from linkbeam.core.connection import Connection, ConnectionState
from linkbeam.handlers.dispatch import dispatch, handle_connection
from linkbeam.handlers.static import StaticFileHandler
from linkbeam.http.request import HTTPRequest
from linkbeam.http.status_codes import HTTPStatus


@pytest.fixture
def handler(doc_root):
    (doc_root / "a.txt").write_bytes(b"hello")
    return StaticFileHandler(doc_root)


def exchange(handler, raw: bytes) -> bytes:
    """Run handle_connection on one end of a socketpair, return what it sent."""
    server_sock, client_sock = socket.socketpair()
    conn = Connection(server_sock, ("127.0.0.1", 50000))

    worker = threading.Thread(target=handle_connection, args=(conn, handler))
    worker.start()

    client_sock.sendall(raw)
    chunks = []
    client_sock.settimeout(5.0)
    while True:
        data = client_sock.recv(65536)
        if not data:
            break
        chunks.append(data)
    client_sock.close()

    worker.join(timeout=5.0)
    assert not worker.is_alive()
    assert conn.closed
    return b"".join(chunks)


class TestDispatch:

    def test_get_includes_body(self, handler):
        response, include_body = dispatch(HTTPRequest("GET", "/a.txt"), handler)

        assert response.status == HTTPStatus.OK
        assert include_body

    def test_head_suppresses_body(self, handler):
        response, include_body = dispatch(HTTPRequest("HEAD", "/a.txt"), handler)

        assert response.status == HTTPStatus.OK
        assert response.content_length == 5
        assert not include_body

    @pytest.mark.parametrize("method", ["DELETE", "POST", "PUT", "get", "OPTIONS"])
    def test_other_methods_405(self, handler, method):
        response, _ = dispatch(HTTPRequest(method, "/a.txt"), handler)

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.body == b"Method Not Allowed"

    def test_query_string_ignored(self, handler):
        response, _ = dispatch(HTTPRequest("GET", "/a.txt?v=2"), handler)
        assert response.status == HTTPStatus.OK


class TestHandleConnection:

    def test_get_file(self, handler):
        raw = exchange(handler, b"GET /a.txt HTTP/1.1\r\nHost: x\r\n\r\n")

        assert raw.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"Content-Length: 5\r\n" in raw
        assert raw.endswith(b"\r\n\r\nhello")

    def test_head_file(self, handler):
        raw = exchange(handler, b"HEAD /a.txt HTTP/1.1\r\n\r\n")

        assert b"Content-Length: 5\r\n" in raw
        assert raw.endswith(b"\r\n\r\n")

    def test_malformed_request_line(self, handler):
        raw = exchange(handler, b"GARBAGE\r\n\r\n")

        assert raw.startswith(b"HTTP/1.1 400 Bad Request\r\n")
        assert raw.endswith(b"Bad Request")

    def test_client_closes_without_request(self, handler):
        server_sock, client_sock = socket.socketpair()
        conn = Connection(server_sock, ("127.0.0.1", 50000))
        client_sock.close()

        handle_connection(conn, handler)

        assert conn.state == ConnectionState.CLOSED
        assert conn.bytes_sent == 0

    def test_handler_bug_becomes_500(self, doc_root):
        class BrokenHandler(StaticFileHandler):
            def handle(self, request_path):
                raise RuntimeError("boom")

        raw = exchange(BrokenHandler(doc_root), b"GET / HTTP/1.1\r\n\r\n")

        assert raw.startswith(b"HTTP/1.1 500 Internal Server Error\r\n")

    def test_access_log_line(self, handler, caplog):
        with caplog.at_level("INFO", logger="linkbeam.handlers.dispatch"):
            exchange(handler, b"GET /a.txt?x=1 HTTP/1.1\r\n\r\n")

        assert '127.0.0.1 "GET /a.txt?x=1" 200 5' in caplog.text

    @pytest.mark.skipif(
        hasattr(os, "geteuid") and os.geteuid() == 0,
        reason="root ignores file permissions",
    )
    def test_unreadable_file_same_status_for_get_and_head(self, handler, doc_root):
        locked = doc_root / "locked.txt"
        locked.write_bytes(b"secret")
        locked.chmod(0o000)
        try:
            get = exchange(handler, b"GET /locked.txt HTTP/1.1\r\n\r\n")
            head = exchange(handler, b"HEAD /locked.txt HTTP/1.1\r\n\r\n")
        finally:
            locked.chmod(0o600)

        assert get.startswith(b"HTTP/1.1 500 Internal Server Error\r\n")
        assert head.startswith(b"HTTP/1.1 500 Internal Server Error\r\n")
        assert head.endswith(b"\r\n\r\n")

    def test_encoded_nul_is_404(self, handler, caplog):
        with caplog.at_level(logging.DEBUG, logger="linkbeam"):
            raw = exchange(handler, b"GET /a%00b HTTP/1.1\r\n\r\n")

        assert raw.startswith(b"HTTP/1.1 404 Not Found\r\n")
        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
