"""
=============================================================================
CONTENT-TYPE RESOLVER
=============================================================================

Maps a file name's extension to the MIME type sent in the Content-Type
header. This is a pure, static lookup: no filesystem access, no sniffing
of file contents, no platform MIME database.

    "report.PDF"   ──►  extension "pdf"  ──►  "application/pdf"
    "archive.tgz"  ──►  extension "tgz"  ──►  (unknown) application/octet-stream
    "Makefile"     ──►  no extension     ──►  application/octet-stream

The same module also owns the allow-list of static asset extensions
(stylesheets, scripts, images, fonts) that are served with a one-hour
Cache-Control header.

=============================================================================
"""

from pathlib import PurePath
from typing import Union


# =============================================================================
# MIME TYPE TABLE
# =============================================================================
#
# Keys are lowercase extensions without the dot.
#
# =============================================================================

MIME_TYPES = {
    # Text / markup
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "txt": "text/plain",
    "md": "text/markdown",

    # Images
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",

    # Documents and archives
    "pdf": "application/pdf",
    "zip": "application/zip",
    "tar": "application/x-tar",
    "gz": "application/gzip",

    # Audio / video
    "mp4": "video/mp4",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
}

# application/octet-stream = "binary, let the client decide" (download)
DEFAULT_MIME_TYPE = "application/octet-stream"

# Extensions answered with "Cache-Control: public, max-age=3600"
CACHEABLE_EXTENSIONS = frozenset({
    "css", "js",
    "png", "jpg", "jpeg", "gif", "ico", "svg",
    "woff", "woff2", "ttf", "eot",
})

CACHE_CONTROL_STATIC = "public, max-age=3600"


def get_extension(name: Union[str, PurePath]) -> str:
    """
    Return the lowercase extension of a file name, without the dot.

    Only the part after the last dot counts, and only in the final path
    component:

        >>> get_extension("photo.backup.JPG")
        'jpg'
        >>> get_extension("docs.d/README")
        ''
    """
    base = PurePath(name).name
    if "." not in base:
        return ""
    return base.rsplit(".", 1)[1].lower()


def get_mime_type(name: Union[str, PurePath]) -> str:
    """
    Get the MIME type for a file name.

    Unknown or missing extensions map to application/octet-stream.

    Examples:
        >>> get_mime_type("a.txt")
        'text/plain'
        >>> get_mime_type("style.CSS")
        'text/css'
        >>> get_mime_type("unknown.xyz")
        'application/octet-stream'
    """
    return MIME_TYPES.get(get_extension(name), DEFAULT_MIME_TYPE)


def is_cacheable(name: Union[str, PurePath]) -> bool:
    """True if the file is a static asset that browsers may cache for an hour."""
    return get_extension(name) in CACHEABLE_EXTENSIONS
