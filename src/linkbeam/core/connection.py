"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for the duration of exactly one
request/response exchange.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

The file server never keeps connections alive. Every connection goes
through the same short life:

    NEW ──► READING ──► WRITING ──► CLOSING ──► CLOSED
     │         │           │                      ▲
     │         │           │                      │
     └─────────┴───────────┴──── abort() ─────────┘   (forced shutdown)

Whatever happens in between (a parse error, a security rejection, a
client vanishing mid-download, a bug in the handler) the connection is
closed on the way out. Use it as a context manager and that is
guaranteed:

    with Connection(sock, addr) as conn:
        request = parser.parse(conn.reader)
        writer.write(conn, response)
    # socket closed here, on every path

=============================================================================
READING AND WRITING
=============================================================================

    reader   a buffered binary file over the socket (socket.makefile("rb")),
             so the request parser can use readline() and never has to
             re-assemble lines from arbitrary recv() chunks.

    write()  sendall() straight to the socket, counting bytes. Once the
             first byte has gone out the status line is committed and a
             later failure can no longer be answered with a 500.

=============================================================================
"""

import logging
import socket
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    NEW = "new"
    READING = "reading"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        bytes_sent: Response bytes written so far.
        buffer_size: Read buffer size of the reader.
    """

    socket: socket.socket
    address: tuple
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    bytes_sent: int = 0
    buffer_size: int = 8192

    _reader: Optional[BinaryIO] = field(default=None, repr=False)
    _close_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self):
        # Accepted sockets inherit the listener's timeout on some
        # platforms; requests here have no read timeout of their own.
        self.socket.settimeout(None)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else "-"

    @property
    def client(self) -> str:
        """"ip:port" for log lines."""
        if not self.address or len(self.address) < 2:
            return self.client_ip
        return f"{self.address[0]}:{self.address[1]}"

    @property
    def age(self) -> float:
        return time.time() - self.created_at

    @property
    def headers_sent(self) -> bool:
        """True once any response byte has been written."""
        return self.bytes_sent > 0

    @property
    def closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    @property
    def reader(self) -> BinaryIO:
        """Buffered binary reader over the socket, created on first use."""
        if self._reader is None:
            self._reader = self.socket.makefile("rb", buffering=self.buffer_size)
        self.state = ConnectionState.READING
        return self._reader

    # =========================================================================
    # WRITING
    # =========================================================================

    def write(self, data: bytes):
        """
        Send all of `data`.

        Raises:
            OSError: The peer closed the connection or the socket was
                shut down by abort().
        """
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)
        self.bytes_sent += len(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

            1. shutdown(SHUT_WR)  → FIN to the client, "response complete"
            2. drain              → discard anything the client still sends
            3. close()            → release the file descriptor

        Idempotent and safe to race with abort().
        """
        with self._close_lock:
            if self.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
                return
            self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        self._release()
        logger.debug(f"[{self.id}] Connection from {self.client} closed after {self.age:.3f}s")

    def abort(self):
        """
        Tear the connection down immediately.

        Used for forced cancellation: shutting down both directions makes
        any read or write blocked in another thread fail at once. A
        connection no worker has picked up yet is released here; one in
        use is released by its owner's close() once the blocked call
        returns.
        """
        with self._close_lock:
            if self.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
                return
            untouched = self.state == ConnectionState.NEW
            if untouched:
                self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass

        if untouched:
            self._release()
        logger.debug(f"[{self.id}] Connection from {self.client} aborted")

    def _release(self):
        if self._reader is not None:
            try:
                self._reader.close()
            except OSError:
                pass
        try:
            self.socket.close()
        except OSError:
            pass
        self.state = ConnectionState.CLOSED

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
