"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Decides what a GET/HEAD for a decoded path should return. This is the one
decision point for every outcome a request can have once it parsed:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   request path                                                       │
    │        │                                                             │
    │        ▼                                                             │
    │   security gate (paths.py) ──── violation ──────────────► 403        │
    │        │                  ──── resolve error ───────────► 500        │
    │        ▼                                                             │
    │   DIRECTORY ── no trailing "/" ─────────────────────────► 301 + "/"  │
    │        │                                                             │
    │        ├──── index.html inside ─────────────► 200 index (text/html)  │
    │        │                                                             │
    │        └──── otherwise ─────────────────────► 200 listing            │
    │                                                                      │
    │   MISSING ──────────────────────────────────► 404 File not found     │
    │                                                                      │
    │   FILE ─────────────────────────────────────► 200 streamed file      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The handler only builds the HTTPResponse. Whether the body is sent (GET)
or suppressed (HEAD) is up to the caller, so both methods always see the
same status and headers, including Content-Length.

The handler holds no per-request state and touches nothing but the
filesystem, so it is safe to share one instance between all workers.

=============================================================================
"""

import logging
import stat
from pathlib import Path
from typing import Union
from urllib.parse import quote

from ..http.errors import HTTPError, InternalError, NotFound
from ..http.mime_types import get_mime_type
from ..http.response import (
    HTTPResponse,
    error_response,
    file_response,
    html_response,
    redirect,
    text_response,
)
from ..http.status_codes import HTTPStatus
from .listing import render_listing, scan_directory
from .paths import ResolvedTarget, TargetKind, resolve_target


logger = logging.getLogger(__name__)


class StaticFileHandler:
    """
    Serves files and directory listings from one document root.

    =========================================================================
    USAGE
    =========================================================================

        handler = StaticFileHandler("/srv/share/")
        response = handler.handle("/docs/")       # listing or index.html
        response = handler.handle("/docs")        # 301 → /docs/
        response = handler.handle("/../etc")      # 403

    =========================================================================
    """

    def __init__(self, document_root: Union[str, Path], index_file: str = "index.html"):
        self.document_root = Path(document_root)
        self.index_file = index_file

    def handle(self, request_path: str) -> HTTPResponse:
        """
        Build the response for a decoded, query-stripped request path.

        Per-request errors are returned as their plain-text responses;
        nothing is raised for an expected outcome.
        """
        if not request_path:
            request_path = "/"

        try:
            target = resolve_target(self.document_root, request_path)

            if target.kind is TargetKind.DIRECTORY:
                return self._handle_directory(target)

            if target.kind is TargetKind.MISSING:
                raise NotFound(f"File not found: {request_path}")

            return self._serve_file(
                target.canonical_path,
                get_mime_type(target.canonical_path.name),
                request_path,
            )

        except HTTPError as e:
            logger.debug(f"{request_path!r} answered with {e.status:d}: {e.message}")
            return error_response(e)

    def _handle_directory(self, target: ResolvedTarget) -> HTTPResponse:
        path = target.request_path

        # ─────────────────────────────────────────────────────────────────
        # REDIRECT: directories are always addressed with a trailing "/"
        # so relative links in the listing / index.html resolve correctly.
        # ─────────────────────────────────────────────────────────────────
        if not path.endswith("/"):
            return redirect(quote(path + "/", safe="/"))

        # ─────────────────────────────────────────────────────────────────
        # INDEX FILE: goes through the gate again, since index.html may be
        # a symlink of its own.
        # ─────────────────────────────────────────────────────────────────
        index = resolve_target(self.document_root, path + self.index_file)
        if index.kind is TargetKind.FILE:
            return self._serve_file(index.canonical_path, "text/html", index.request_path)

        # ─────────────────────────────────────────────────────────────────
        # LISTING
        # ─────────────────────────────────────────────────────────────────
        try:
            entries = scan_directory(target.canonical_path)
        except OSError as e:
            raise InternalError(f"Error reading file: {e}") from e

        return html_response(render_listing(path, entries))

    def _serve_file(self, path: Path, content_type: str, request_path: str) -> HTTPResponse:
        try:
            stat_result = path.stat()
        except OSError as e:
            raise InternalError(f"Error reading file: {e}") from e

        if stat.S_ISDIR(stat_result.st_mode):
            # Swapped for a directory between classification and stat
            return text_response(
                HTTPStatus.NOT_FOUND,
                f"Path is a directory (missing trailing slash?): {request_path}",
            )

        # ─────────────────────────────────────────────────────────────────
        # The writer only opens the file when a body is sent, so check it
        # here: GET and HEAD must agree on the status.
        # ─────────────────────────────────────────────────────────────────
        try:
            with open(path, "rb"):
                pass
        except OSError as e:
            raise InternalError(f"Error reading file: {e}") from e

        return file_response(path, content_type, stat_result)
