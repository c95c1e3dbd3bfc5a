"""
=============================================================================
LINKBEAM - Embedded Static-File HTTP Server
=============================================================================

Shares one directory over HTTP/1.1 so other devices on the same WiFi
network can browse and download its files from a web browser.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    linkbeam/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m linkbeam)
    ├── server.py            # FileServer lifecycle controller
    ├── config.py            # ServerConfig, StorageLocations, root specifiers
    ├── errors.py            # Exception hierarchy
    ├── network.py           # LAN IPv4 discovery
    ├── storage.py           # Storage probe and sample files
    ├── core/                # Low-level components
    │   ├── socket_server.py # Listening socket and accept loop
    │   ├── connection.py    # Accepted-socket wrapper
    │   └── thread_pool.py   # Bounded worker pool
    ├── http/                # HTTP protocol components
    │   ├── request.py       # Request head parsing
    │   ├── response.py      # Response model and writer
    │   ├── status_codes.py  # Status codes used by the server
    │   ├── mime_types.py    # Extension → Content-Type
    │   └── errors.py        # HTTP error types
    └── handlers/            # Request handling
        ├── dispatch.py      # Per-connection request/response cycle
        ├── static.py        # File and directory serving
        ├── paths.py         # Path safety and classification
        └── listing.py       # Directory listing HTML

=============================================================================
QUICK START
=============================================================================

    from linkbeam import FileServer

    server = FileServer()
    result = server.start(8080, "Download")
    print(result.url)
    ...
    server.stop()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig, StorageLocations
from .server import FileServer, ServerInfo, ServerState, StartResult, StopResult

__all__ = [
    "FileServer",
    "ServerConfig",
    "ServerInfo",
    "ServerState",
    "StartResult",
    "StopResult",
    "StorageLocations",
    "__version__",
]
