"""
=============================================================================
NETWORKING CORE
=============================================================================

The transport half of the file server. Nothing here knows about HTTP:

    socket_server.py   listening socket + accept loop (one dedicated thread)
    thread_pool.py     10 worker threads, blocking submit, graceful stop
    connection.py      one accepted socket, its streams, guaranteed close

    accept loop ──► Connection ──► ThreadPool.submit() ──► worker runs
                                        │                   handle_connection()
                                        └── blocks while all slots are busy

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool, Task

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
    "Task",
]
