"""
pytest configuration and fixtures.
"""

import socket
from typing import Dict, Generator, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from linkbeam import FileServer, StorageLocations


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """Empty document root."""
    root = tmp_path / "share"
    root.mkdir()
    return root


@pytest.fixture
def storage(tmp_path: Path, doc_root: Path) -> StorageLocations:
    """Public storage = the test document root, private storage beside it."""
    return StorageLocations(
        public_root=str(doc_root),
        private_root=str(tmp_path / "private"),
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def file_server(storage: StorageLocations) -> Generator[FileServer, None, None]:
    """A stopped FileServer with fast shutdown; always stopped on teardown."""
    server = FileServer(
        storage=storage,
        ip_provider=lambda: None,
        max_workers=4,
        shutdown_grace=1.0,
        accept_poll_interval=0.05,
    )
    yield server
    server.stop()


@pytest.fixture
def running_server(file_server: FileServer, doc_root: Path) -> FileServer:
    """FileServer serving `doc_root` on an OS-assigned port."""
    result = file_server.start(0, str(doc_root))
    assert result.success, result.error
    return file_server


def http_request(port: int, raw: bytes, timeout: float = 5.0) -> Tuple[int, Dict[str, str], bytes]:
    """
    Send raw request bytes and read the whole response.

    Returns:
        (status code, headers with lower-case names, body)
    """
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        s.sendall(raw)
        chunks = []
        while True:
            data = s.recv(65536)
            if not data:
                break
            chunks.append(data)

    response = b"".join(chunks)
    head, _, body = response.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    status = int(lines[0].split()[1])

    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()

    return status, headers, body


def get(port: int, target: str, method: str = "GET") -> Tuple[int, Dict[str, str], bytes]:
    return http_request(port, f"{method} {target} HTTP/1.1\r\nHost: test\r\n\r\n".encode())
