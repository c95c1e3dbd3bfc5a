"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Two pieces of configuration exist:

    StorageLocations   where "public" and "private" storage live on this
                       machine. Read from the environment once and used
                       to resolve document-root specifiers.

    ServerConfig       the immutable snapshot a running server works
                       from. Built by FileServer.start() and never
                       modified until stop().

=============================================================================
DOCUMENT-ROOT SPECIFIERS
=============================================================================

The caller names a document root with a short specifier string:

    ┌──────────────────┬────────────────────────────────────────────────┐
    │ Specifier        │ Resolved root                                  │
    ├──────────────────┼────────────────────────────────────────────────┤
    │ "" or "/"        │ public storage root                            │
    │ "internal"       │ application-private storage directory          │
    │ "/abs/path"      │ used verbatim                                  │
    │ "Download"       │ public storage root + "Download"               │
    └──────────────────┴────────────────────────────────────────────────┘

The result always ends with a path separator.

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    LINKBEAM_PUBLIC_ROOT    public storage root (default: home directory)
    LINKBEAM_PRIVATE_ROOT   private storage dir (default:
                            $XDG_DATA_HOME/linkbeam or
                            ~/.local/share/linkbeam)

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path


INTERNAL_SPECIFIER = "internal"


@dataclass(frozen=True)
class StorageLocations:
    """
    Where public and private storage live.

    Attributes:
        public_root: Root of user-visible storage; relative specifiers
            and the storage probes are resolved against it.
        private_root: Directory only this application uses; selected by
            the "internal" specifier.
    """

    public_root: str
    private_root: str

    @classmethod
    def from_env(cls) -> "StorageLocations":
        """
        Create storage locations from environment variables.

        # From shell:
        LINKBEAM_PUBLIC_ROOT=/srv/share python -m linkbeam --root Music
        """
        home = str(Path.home())
        data_home = os.getenv("XDG_DATA_HOME") or os.path.join(home, ".local", "share")

        return cls(
            public_root=os.getenv("LINKBEAM_PUBLIC_ROOT", home),
            private_root=os.getenv("LINKBEAM_PRIVATE_ROOT", os.path.join(data_home, "linkbeam")),
        )


def ensure_trailing_separator(path: str) -> str:
    return path if path.endswith(os.sep) else path + os.sep


def resolve_document_root(spec: str, locations: StorageLocations) -> str:
    """
    Resolve a document-root specifier to a directory path.

    Examples (public_root="/home/ana", private_root="/home/ana/.local/share/linkbeam"):
        >>> resolve_document_root("", locations)
        '/home/ana/'
        >>> resolve_document_root("Music", locations)
        '/home/ana/Music/'
        >>> resolve_document_root("/srv/share", locations)
        '/srv/share/'
        >>> resolve_document_root("internal", locations)
        '/home/ana/.local/share/linkbeam/'
    """
    spec = spec or ""

    if spec in ("", "/"):
        root = locations.public_root
    elif spec == INTERNAL_SPECIFIER:
        root = locations.private_root
    elif spec.startswith("/"):
        root = spec
    else:
        root = os.path.join(locations.public_root, spec)

    return ensure_trailing_separator(root)


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration snapshot of one running server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - port, bind_host, backlog, buffer_size, accept_poll_interval

    FILE SERVING
    - document_root, index_file, chunk_size, server_name

    THREADING
    - max_workers, shutdown_grace

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    port: int
    """Port to listen on. 0 asks the OS for a free port."""

    document_root: str
    """Absolute directory served, ending with a separator."""

    bind_host: str = "0.0.0.0"
    """Always the wildcard address: the point is to be reachable on the LAN."""

    backlog: int = 50
    """Connections the kernel queues while all workers are busy."""

    buffer_size: int = 8192
    """Read buffer size for request heads."""

    accept_poll_interval: float = 0.5
    """How often the accept loop wakes up to check for shutdown."""

    # ─────────────────────────────────────────────────────────────────────
    # FILE SERVING
    # ─────────────────────────────────────────────────────────────────────

    index_file: str = "index.html"
    chunk_size: int = 8192
    """File bodies are streamed in pieces of this size."""

    server_name: str = "LinkBeam/1.0"

    # ─────────────────────────────────────────────────────────────────────
    # THREADING
    # ─────────────────────────────────────────────────────────────────────

    max_workers: int = 10
    shutdown_grace: float = 5.0
    """Seconds stop() waits for in-flight requests before cancelling them."""

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if not os.path.isabs(self.document_root):
            raise ValueError(f"document_root must be absolute: {self.document_root}")

        if not self.document_root.endswith(os.sep):
            raise ValueError(f"document_root must end with {os.sep!r}: {self.document_root}")

        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be > 0")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.accept_poll_interval <= 0:
            raise ValueError("accept_poll_interval must be > 0")

        if self.shutdown_grace < 0:
            raise ValueError("shutdown_grace must be >= 0")
