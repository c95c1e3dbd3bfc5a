"""
=============================================================================
LISTENING SOCKET & ACCEPT LOOP
=============================================================================

Owns the server socket: binds it, accepts connections, and hands each
one to a callback (the lifecycle controller submits it to the pool).

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   bind()                                                             │
    │     ├──► socket(AF_INET, SOCK_STREAM)                                │
    │     ├──► setsockopt(SO_REUSEADDR, TCP_NODELAY)                       │
    │     ├──► bind(("0.0.0.0", port))       ← errors raised to caller     │
    │     ├──► listen(backlog)                                             │
    │     └──► settimeout(poll interval)                                   │
    │                                                                      │
    │   serve(on_connection)                 ← runs on its own thread      │
    │     └──► while running:                                              │
    │             accept()                                                 │
    │               ├── timeout     → check running flag, loop again       │
    │               ├── OSError     → closed by close()? exit : log, retry │
    │               └── connection  → on_connection(Connection(...))       │
    │                                  (may block: pool backpressure)      │
    │                                                                      │
    │   close()                                                            │
    │     └──► running = False, close the socket                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

SO_REUSEPORT is not set, so a second listener on the same port fails to
bind instead of silently sharing traffic.

=============================================================================
"""

import logging
import socket
import threading
import time
from typing import Callable, Optional

from ..config import ServerConfig
from ..errors import PoolClosedError
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP listener.

    Usage:
        server = SocketServer(config)
        port = server.bind()                     # raises OSError on failure
        threading.Thread(target=server.serve, args=(handle,)).start()
        ...
        server.close()                           # serve() returns shortly
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._stopped = threading.Event()
        self._stopped.set()
        self.port: Optional[int] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # accept() wakes up every poll interval to re-check the running
        # flag, so close() never depends on the OS interrupting accept().
        sock.settimeout(self.config.accept_poll_interval)
        return sock

    def bind(self) -> int:
        """
        Create, bind and listen.

        Returns:
            The bound port (useful when the configured port is 0).

        Raises:
            OSError: The address could not be bound.
        """
        sock = self._create_socket()
        try:
            sock.bind((self.config.bind_host, self.config.port))
            sock.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.bind_host}:{self.config.port}: {e}")
            sock.close()
            raise

        self._socket = sock
        self.port = sock.getsockname()[1]
        self._running = True
        self._stopped.clear()
        logger.info(f"Listening on {self.config.bind_host}:{self.port}")
        return self.port

    def serve(self, on_connection: Callable[[Connection], None]):
        """
        Run the accept loop until close() is called.

        A failing callback is logged and the loop carries on; only a pool
        that no longer takes work ends the loop early.
        """
        sock = self._socket
        if sock is None:
            raise RuntimeError("serve() called before bind()")

        try:
            while self._running:
                try:
                    client_socket, client_address = sock.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    if not self._running:
                        break  # socket closed by close()
                    logger.error(f"Accept error: {e}")
                    time.sleep(0.1)
                    continue

                logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")
                conn = Connection(
                    socket=client_socket,
                    address=client_address,
                    buffer_size=self.config.buffer_size,
                )

                try:
                    on_connection(conn)
                except PoolClosedError:
                    conn.abort()
                    break
                except Exception:
                    logger.exception(f"Failed to dispatch connection from {conn.client}")
                    conn.abort()
        finally:
            self._running = False
            self._stopped.set()
            logger.debug("Accept loop exited")

    def close(self):
        """Stop the accept loop and close the listening socket. Idempotent."""
        self._running = False
        sock, self._socket = self._socket, None
        if sock is None:
            return
        try:
            sock.close()
        except OSError:
            pass
        logger.info("Listening socket closed")

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        """Wait for serve() to return. True if it did within `timeout`."""
        return self._stopped.wait(timeout)
