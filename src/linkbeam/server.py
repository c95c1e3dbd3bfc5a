"""
=============================================================================
FILE SERVER LIFECYCLE CONTROLLER
=============================================================================

FileServer is the only object the outside world talks to. It owns the
listening socket, the worker pool and the accept thread, and it is the
only place that changes the server's state.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                        ┌─────────────────┐                           │
    │        start()/stop()  │   FileServer    │  is_running()             │
    │       ───────────────► │  (one lock, one │  get_server_info()        │
    │                        │   state value)  │                           │
    │                        └────────┬────────┘                           │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐               │
    │            ▼                    ▼                    ▼               │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────────┐      │
    │    │ SocketServer │───►│  ThreadPool  │───►│ handle_connection│      │
    │    │ accept thread│    │  10 workers  │    │ StaticFileHandler│      │
    │    └──────────────┘    └──────────────┘    └──────────────────┘      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
STATE MACHINE
=============================================================================

    STOPPED ──start()──► STARTING ──ok──► RUNNING ──stop()──► STOPPING
       ▲                     │                                   │
       │                     └── failure (result, not raise) ────┤
       └─────────────────────────────────────────────────────────┘

Both start() and stop() hold the same lock for their whole duration, so
two callers can never interleave: a second start() sees RUNNING and is
rejected, and no second socket is ever bound. Failures are returned as
`success=False` results and never raised.

=============================================================================
"""

import logging
import os
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from .config import INTERNAL_SPECIFIER, ServerConfig, StorageLocations, resolve_document_root
from .core.connection import Connection
from .core.socket_server import SocketServer
from .core.thread_pool import ThreadPool
from .errors import LifecycleError
from .handlers.dispatch import handle_connection
from .handlers.static import StaticFileHandler
from .http.request import RequestParser
from .http.response import ResponseWriter
from .network import find_wifi_ip
from .storage import SampleFilesResult, StorageAccess, check_storage_access, create_sample_files


logger = logging.getLogger(__name__)


LOOPBACK_HOST = "127.0.0.1"


class ServerState(Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


# =============================================================================
# RESULTS
# =============================================================================


@dataclass
class StartResult:
    success: bool
    url: Optional[str] = None
    local_url: Optional[str] = None
    wifi_url: Optional[str] = None
    document_root: Optional[str] = None
    port: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "StartResult":
        return cls(success=False, error=error)

    def as_dict(self) -> Dict[str, object]:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "url": self.url,
            "localUrl": self.local_url,
            "wifiUrl": self.wifi_url,
            "documentRoot": self.document_root,
            "port": self.port,
        }


@dataclass
class StopResult:
    success: bool
    forced: bool = False
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, object]:
        if not self.success:
            return {"success": False, "error": self.error}
        return {"success": True}


@dataclass
class ServerInfo:
    is_running: bool
    port: int
    document_root: str
    url: Optional[str] = None
    local_url: Optional[str] = None
    wifi_url: Optional[str] = None

    def as_dict(self) -> Dict[str, object]:
        info: Dict[str, object] = {
            "isRunning": self.is_running,
            "port": self.port,
            "documentRoot": self.document_root,
        }
        if self.is_running:
            info.update(url=self.url, localUrl=self.local_url, wifiUrl=self.wifi_url)
        return info


# =============================================================================
# CONTROLLER
# =============================================================================


class FileServer:
    """
    Embedded static-file HTTP server.

    =========================================================================
    USAGE
    =========================================================================

        server = FileServer()
        result = server.start(8080, "Download")
        if result.success:
            print(result.url)          # http://192.168.1.20:8080
        ...
        server.stop()

    =========================================================================
    """

    def __init__(
        self,
        storage: Optional[StorageLocations] = None,
        ip_provider: Callable[[], Optional[str]] = find_wifi_ip,
        max_workers: int = 10,
        shutdown_grace: float = 5.0,
        accept_poll_interval: float = 0.5,
    ):
        self.storage = storage or StorageLocations.from_env()
        self.ip_provider = ip_provider
        self.max_workers = max_workers
        self.shutdown_grace = shutdown_grace
        self.accept_poll_interval = accept_poll_interval

        self._lock = threading.Lock()
        self._state = ServerState.STOPPED

        self._config: Optional[ServerConfig] = None
        self._listener: Optional[SocketServer] = None
        self._pool: Optional[ThreadPool] = None
        self._accept_thread: Optional[threading.Thread] = None

        # Kept after stop() so get_server_info() can still report them
        self._port = 0
        self._document_root = ""

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def config(self) -> Optional[ServerConfig]:
        return self._config

    # =========================================================================
    # START
    # =========================================================================

    def start(self, port: int, document_root_spec: Optional[str] = "") -> StartResult:
        """
        Start serving `document_root_spec` on `port`.

        Never raises: every failure comes back as StartResult(success=False).
        """
        with self._lock:
            if self._state is not ServerState.STOPPED:
                logger.warning("start() rejected: server is already running")
                return StartResult.failure("Server is already running")

            self._state = ServerState.STARTING
            try:
                result = self._start_locked(port, document_root_spec or "")
            except LifecycleError as e:
                logger.error(f"Server failed to start: {e}")
                self._teardown(grace=0.0)
                return StartResult.failure(str(e))
            except Exception as e:
                logger.exception(f"Unexpected error while starting server: {e}")
                self._teardown(grace=0.0)
                return StartResult.failure(str(e))

            self._state = ServerState.RUNNING
            return result

    def _start_locked(self, port: int, spec: str) -> StartResult:
        # ─────────────────────────────────────────────────────────────────
        # RESOLVE AND CHECK THE DOCUMENT ROOT
        # ─────────────────────────────────────────────────────────────────
        root = resolve_document_root(spec, self.storage)
        if spec == INTERNAL_SPECIFIER:
            os.makedirs(root, exist_ok=True)

        if not os.path.exists(root):
            raise LifecycleError(f"Document root does not exist: {root}")
        if not os.path.isdir(root):
            raise LifecycleError(f"Document root is not a directory: {root}")
        if not os.access(root, os.R_OK | os.X_OK):
            raise LifecycleError(
                f"Cannot read document root. Please grant storage permissions: {root}"
            )

        config = ServerConfig(
            port=port,
            document_root=root,
            max_workers=self.max_workers,
            shutdown_grace=self.shutdown_grace,
            accept_poll_interval=self.accept_poll_interval,
        )
        try:
            config.validate()
        except ValueError as e:
            raise LifecycleError(str(e)) from e

        # ─────────────────────────────────────────────────────────────────
        # BIND
        # ─────────────────────────────────────────────────────────────────
        listener = SocketServer(config)
        try:
            bound_port = listener.bind()
        except OSError as e:
            raise LifecycleError(e.strerror or str(e)) from e
        self._listener = listener

        # ─────────────────────────────────────────────────────────────────
        # POOL + ACCEPT THREAD
        # ─────────────────────────────────────────────────────────────────
        pool = ThreadPool(workers=config.max_workers)
        pool.start()
        self._pool = pool

        handler = StaticFileHandler(config.document_root, config.index_file)
        parser = RequestParser()
        writer = ResponseWriter(config.server_name, config.chunk_size)

        def submit(conn: Connection):
            pool.submit(
                handle_connection,
                args=(conn, handler, parser, writer),
                on_cancel=conn.abort,
            )

        self._accept_thread = threading.Thread(
            target=listener.serve,
            args=(submit,),
            name="linkbeam-accept",
            daemon=True,
        )
        self._accept_thread.start()

        self._config = config
        self._port = bound_port
        self._document_root = root

        urls = self._compose_urls(bound_port)
        logger.info(f"Serving {root} on {config.bind_host}:{bound_port} ({urls['url']})")

        return StartResult(
            success=True,
            url=urls["url"],
            local_url=urls["local_url"],
            wifi_url=urls["wifi_url"],
            document_root=root,
            port=bound_port,
        )

    # =========================================================================
    # STOP
    # =========================================================================

    def stop(self) -> StopResult:
        """
        Stop the server, giving in-flight requests the grace period.

        Idempotent: stopping a stopped server succeeds and does nothing.
        """
        with self._lock:
            if self._state is ServerState.STOPPED:
                return StopResult(success=True)

            self._state = ServerState.STOPPING
            logger.info("Stopping server...")
            try:
                finished = self._teardown(grace=self.shutdown_grace)
            except Exception as e:
                logger.exception(f"Error while stopping server: {e}")
                return StopResult(success=False, error=str(e))
            finally:
                self._state = ServerState.STOPPED

            logger.info("Server stopped" if finished else "Server stopped (in-flight requests cancelled)")
            return StopResult(success=True, forced=not finished)

    def _teardown(self, grace: float) -> bool:
        """
        Release listener, accept thread and pool. Caller holds the lock.

        Returns:
            False if the pool needed forced cancellation.
        """
        listener, self._listener = self._listener, None
        pool, self._pool = self._pool, None
        accept_thread, self._accept_thread = self._accept_thread, None
        self._config = None

        if listener is not None:
            listener.close()

        # The accept thread may be parked in pool.submit() waiting for a
        # slot; pool shutdown releases it.
        if listener is not None and accept_thread is not None:
            listener.wait_closed(timeout=self.accept_poll_interval + 0.5)

        finished = True
        if pool is not None:
            finished = pool.shutdown(grace=grace)

        if accept_thread is not None and accept_thread.is_alive():
            accept_thread.join(timeout=1.0)

        self._state = ServerState.STOPPED
        return finished

    # =========================================================================
    # STATUS
    # =========================================================================

    def is_running(self) -> bool:
        return self._state is ServerState.RUNNING

    def get_server_info(self) -> ServerInfo:
        running = self.is_running()
        info = ServerInfo(
            is_running=running,
            port=self._port,
            document_root=self._document_root,
        )
        if running:
            urls = self._compose_urls(self._port)
            info.url = urls["url"]
            info.local_url = urls["local_url"]
            info.wifi_url = urls["wifi_url"]
        return info

    def _compose_urls(self, port: int) -> Dict[str, Optional[str]]:
        try:
            wifi_ip = self.ip_provider()
        except Exception as e:
            logger.warning(f"IP discovery failed: {e}")
            wifi_ip = None

        local_url = f"http://{LOOPBACK_HOST}:{port}"
        wifi_url = f"http://{wifi_ip}:{port}" if wifi_ip else None
        return {"url": wifi_url or local_url, "local_url": local_url, "wifi_url": wifi_url}

    # =========================================================================
    # DIAGNOSTICS
    # =========================================================================

    def check_storage_access(self) -> StorageAccess:
        return check_storage_access(self.storage.public_root)

    def create_sample_files(self) -> SampleFilesResult:
        """Seed the current (or last used) document root with sample files."""
        return create_sample_files(self._document_root or None)
