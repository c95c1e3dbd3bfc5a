"""
=============================================================================
REQUEST HANDLERS
=============================================================================

Everything between a parsed request and the response written for it:

    dispatch.py   method routing + the per-connection unit of work
    static.py     redirect / index.html / listing / file / 404 decisions
    paths.py      traversal checks and canonical containment
    listing.py    HTML directory index

=============================================================================
"""

from .dispatch import dispatch, handle_connection
from .listing import DirectoryEntry, format_file_size, render_listing, scan_directory
from .paths import ResolvedTarget, TargetKind, resolve_target
from .static import StaticFileHandler

__all__ = [
    "dispatch",
    "handle_connection",
    "StaticFileHandler",
    "resolve_target",
    "ResolvedTarget",
    "TargetKind",
    "DirectoryEntry",
    "scan_directory",
    "render_listing",
    "format_file_size",
]
