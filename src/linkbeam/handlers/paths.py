"""
=============================================================================
PATH RESOLVER & SECURITY GATE
=============================================================================

Turns a decoded request path into a filesystem target and decides whether
the server is allowed to touch it at all.

=============================================================================
THE TWO CHECKS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   "/docs/../../etc/passwd"                                           │
    │          │                                                           │
    │          ▼                                                           │
    │   1. TOKEN CHECK  ── contains ".." or "\" ? ──► 403 immediately      │
    │          │                                      (no stat, no lookup) │
    │          ▼                                                           │
    │   2. CANONICAL CHECK                                                 │
    │        root      = resolve(document_root)                            │
    │        candidate = resolve(root / path)   ← follows symlinks         │
    │        candidate inside root ?  ── no ──► 403                        │
    │          │                                                           │
    │          ▼                                                           │
    │   3. CLASSIFY  FILE / DIRECTORY / MISSING                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The token check is cheap and catches the obvious attacks. The canonical
check catches the ones that look innocent, such as a symlink inside the
document root that points at /etc:

    /srv/share/etc -> /etc
    GET /etc/passwd   ──►  /etc/passwd  ──►  not under /srv/share  ──► 403

Containment is tested with Path.relative_to(), which compares whole path
components. A plain string prefix test would wrongly let "/srv/share2"
through for a root of "/srv/share".

=============================================================================
"""

import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

from ..http.errors import InternalError, NotFound, SecurityViolation
from ..http.request import decode_request_path


logger = logging.getLogger(__name__)


TRAVERSAL_MESSAGE = "Forbidden - Directory traversal not allowed"
OUTSIDE_ROOT_MESSAGE = "Forbidden - Access outside document root"


class TargetKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"
    MISSING = "missing"


@dataclass(frozen=True)
class ResolvedTarget:
    """
    Where a request path landed on disk.

    Attributes:
        request_path:   Decoded request path the target was built from.
        canonical_path: Fully resolved absolute path.
        kind:           What exists at canonical_path.
        within_root:    True only if canonical_path is the canonical
                        document root or lies beneath it.
    """

    request_path: str
    canonical_path: Path
    kind: TargetKind
    within_root: bool

    @property
    def is_directory(self) -> bool:
        return self.kind is TargetKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is TargetKind.FILE


def has_traversal_token(path: str) -> bool:
    """True if the decoded path contains ".." or a backslash anywhere."""
    return ".." in path or "\\" in path


def canonicalize(path: Union[str, Path]) -> Path:
    """
    Resolve symlinks and "."/".." segments.

    Raises:
        InternalError: The path could not be resolved (symlink loop,
            unreadable intermediate directory, ...).
    """
    try:
        return Path(path).resolve()
    except (OSError, RuntimeError) as e:
        raise InternalError(f"Error resolving path: {e}") from e


def is_within(candidate: Path, root: Path) -> bool:
    """Component-wise containment test on two canonical paths."""
    try:
        candidate.relative_to(root)
        return True
    except ValueError:
        return False


def classify(path: Path) -> TargetKind:
    """
    Stat the path and classify it.

    Anything that is neither a directory nor a regular file (sockets,
    FIFOs, devices, dangling symlinks) is treated as missing.
    """
    try:
        mode = os.stat(path).st_mode
    except FileNotFoundError:
        return TargetKind.MISSING
    except (NotADirectoryError, ValueError):
        return TargetKind.MISSING
    except OSError as e:
        raise InternalError(f"Error reading file: {e}") from e

    if stat.S_ISDIR(mode):
        return TargetKind.DIRECTORY
    if stat.S_ISREG(mode):
        return TargetKind.FILE
    return TargetKind.MISSING


def resolve_target(document_root: Union[str, Path], request_path: str) -> ResolvedTarget:
    """
    Run the security gate and classify the target of a decoded path.

    Args:
        document_root: Directory that every served path must live under.
        request_path: Percent-decoded, query-stripped request path.

    Returns:
        The resolved target. `within_root` is always True on return.

    Raises:
        SecurityViolation: Traversal token present, or the canonical
            path escapes the canonical document root.
        InternalError: Canonicalization or stat failed.
    """
    # ─────────────────────────────────────────────────────────────────
    # 1. TOKEN CHECK (before any filesystem access)
    # ─────────────────────────────────────────────────────────────────
    if has_traversal_token(request_path):
        logger.warning(f"Traversal token in request path: {request_path!r}")
        raise SecurityViolation(TRAVERSAL_MESSAGE)

    # No filesystem name can contain NUL; os and pathlib reject it with
    # ValueError rather than OSError.
    if "\x00" in request_path:
        raise NotFound(f"File not found: {request_path}")

    # ─────────────────────────────────────────────────────────────────
    # 2. CANONICAL CHECK
    # ─────────────────────────────────────────────────────────────────
    relative = request_path[1:] if request_path.startswith("/") else request_path
    root = canonicalize(document_root)
    candidate = canonicalize(root / relative)

    if not is_within(candidate, root):
        logger.warning(
            f"Request path {request_path!r} resolves outside the document root: {candidate}"
        )
        raise SecurityViolation(OUTSIDE_ROOT_MESSAGE)

    # ─────────────────────────────────────────────────────────────────
    # 3. CLASSIFY
    # ─────────────────────────────────────────────────────────────────
    return ResolvedTarget(
        request_path=request_path,
        canonical_path=candidate,
        kind=classify(candidate),
        within_root=True,
    )


__all__ = [
    "TargetKind",
    "ResolvedTarget",
    "resolve_target",
    "canonicalize",
    "classify",
    "is_within",
    "has_traversal_token",
    "decode_request_path",
    "TRAVERSAL_MESSAGE",
    "OUTSIDE_ROOT_MESSAGE",
]
