"""
=============================================================================
DIRECTORY LISTING RENDERER
=============================================================================

Generates the HTML index shown for a directory that has no index.html.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Directory listing                                                   │
    │  /photos/                                                            │
    ├──────────────────────────────┬──────────┬────────────────────────────┤
    │  Name                        │  Size    │  Modified                  │
    ├──────────────────────────────┼──────────┼────────────────────────────┤
    │  ../                         │  -       │  -                         │
    │  2025/                       │  -       │  Jan 04, 2026 18:22        │
    │  beach.jpg                   │  2.4 MB  │  Aug 17, 2025 09:03        │
    │  notes.txt                   │  812 B   │  Feb 11, 2026 21:40        │
    ├──────────────────────────────┴──────────┴────────────────────────────┤
    │                        Served by LinkBeam                            │
    └─────────────────────────────────────────────────────────────────────┘

Rules:
    - Directories first, then files. Inside each group names compare
      case-insensitively; ties fall back to the exact name so the order
      never depends on what the OS returned first.
    - The "../" row links to the parent path and is left out only when
      the listing path is exactly "/".
    - Entry links are the listing path plus the entry name (plus "/" for
      directories), percent-encoded, then HTML-escaped.
    - Every user-controlled string is escaped for & < > " ' before it is
      embedded.

The renderer is a pure function of (path, entries); scan_directory() is
the only part that touches the filesystem.

=============================================================================
"""

import html
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Union
from urllib.parse import quote


logger = logging.getLogger(__name__)


_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

_STYLE = """\
body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 0; padding: 20px; background-color: #f5f5f5; }
.container { max-width: 1200px; margin: 0 auto; background: white; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
.header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 20px; border-radius: 8px 8px 0 0; }
h1 { margin: 0; font-size: 24px; }
.path { font-size: 14px; opacity: 0.9; margin-top: 5px; }
.content { padding: 20px; }
table { width: 100%; border-collapse: collapse; }
th, td { text-align: left; padding: 12px; border-bottom: 1px solid #eee; }
th { background-color: #f8f9fa; font-weight: 600; color: #495057; }
tr:hover { background-color: #f8f9fa; }
a { text-decoration: none; color: #007bff; }
a:hover { text-decoration: underline; }
.directory { font-weight: bold; }
.size { text-align: right; }
.footer { background-color: #f8f9fa; padding: 15px 20px; border-radius: 0 0 8px 8px; text-align: center; color: #6c757d; font-size: 14px; }
@media (max-width: 768px) { .container { margin: 10px; } .content { padding: 10px; } }
"""


@dataclass(frozen=True)
class DirectoryEntry:
    """One row of a listing. Built fresh for every request."""

    name: str
    is_directory: bool
    size_bytes: int
    modified: float  # POSIX timestamp


def scan_directory(directory: Union[str, Path]) -> List[DirectoryEntry]:
    """
    Read the entries of a directory.

    Entries that vanish or cannot be stat'ed between listing and stat
    are skipped.

    Raises:
        OSError: The directory itself could not be opened.
    """
    entries = []
    with os.scandir(directory) as it:
        for item in it:
            try:
                info = item.stat()
                is_dir = item.is_dir()
            except OSError as e:
                logger.debug(f"Skipping unreadable entry {item.path}: {e}")
                continue
            entries.append(DirectoryEntry(
                name=item.name,
                is_directory=is_dir,
                size_bytes=0 if is_dir else info.st_size,
                modified=info.st_mtime,
            ))
    return entries


def sort_entries(entries: Iterable[DirectoryEntry]) -> List[DirectoryEntry]:
    """Directories first, then case-insensitive name order."""
    return sorted(entries, key=lambda e: (not e.is_directory, e.name.lower(), e.name))


def format_file_size(size: int) -> str:
    """
    Human-scaled size using 1024-based units.

        >>> format_file_size(512)
        '512 B'
        >>> format_file_size(1536)
        '1.5 KB'
        >>> format_file_size(5 * 1024 * 1024)
        '5.0 MB'
    """
    if size < 1024:
        return f"{size} B"
    if size < 1024 ** 2:
        return f"{size / 1024:.1f} KB"
    if size < 1024 ** 3:
        return f"{size / 1024 ** 2:.1f} MB"
    return f"{size / 1024 ** 3:.1f} GB"


def format_modified(timestamp: float) -> str:
    """Local time as "Mon DD, YYYY HH:MM" with English month names."""
    dt = datetime.fromtimestamp(timestamp)
    return f"{_MONTHS[dt.month - 1]} {dt.day:02d}, {dt.year} {dt.hour:02d}:{dt.minute:02d}"


def parent_path(path: str) -> str:
    """
    Parent of a listing path, always ending in "/".

        >>> parent_path("/a/b/")
        '/a/'
        >>> parent_path("/a/")
        '/'
    """
    trimmed = path.rstrip("/")
    cut = trimmed.rfind("/")
    return trimmed[:cut + 1] if cut >= 0 else "/"


def _escape(text: str) -> str:
    return html.escape(text, quote=True)


def _href(target: str) -> str:
    return _escape(quote(target, safe="/"))


def render_listing(path: str, entries: Iterable[DirectoryEntry]) -> str:
    """
    Render the listing page for `path`.

    Args:
        path: Decoded request path of the directory (e.g. "/photos/").
        entries: Directory contents, in any order.

    Returns:
        The complete HTML document.
    """
    base = path if path.endswith("/") else path + "/"
    rows = []

    if path != "/":
        rows.append(
            f'<tr><td><a href="{_href(parent_path(path))}" class="directory">../</a></td>'
            f"<td>-</td><td>-</td></tr>"
        )

    for entry in sort_entries(entries):
        name = _escape(entry.name)
        modified = format_modified(entry.modified)
        if entry.is_directory:
            rows.append(
                f'<tr><td><a href="{_href(base + entry.name + "/")}" class="directory">{name}/</a></td>'
                f"<td>-</td><td>{modified}</td></tr>"
            )
        else:
            rows.append(
                f'<tr><td><a href="{_href(base + entry.name)}" class="file">{name}</a></td>'
                f'<td class="size">{format_file_size(entry.size_bytes)}</td><td>{modified}</td></tr>'
            )

    title = _escape(path)
    body_rows = "".join(row + "\n" for row in rows)

    return (
        "<!DOCTYPE html>\n"
        "<html>\n<head>\n"
        '<meta charset="UTF-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>Directory listing for {title}</title>\n"
        f"<style>\n{_STYLE}</style>\n"
        "</head>\n<body>\n"
        '<div class="container">\n'
        '<div class="header">\n'
        "<h1>Directory listing</h1>\n"
        f'<div class="path">{title}</div>\n'
        "</div>\n"
        '<div class="content">\n'
        "<table>\n"
        "<thead>\n"
        "<tr><th>Name</th><th>Size</th><th>Modified</th></tr>\n"
        "</thead>\n"
        "<tbody>\n"
        f"{body_rows}"
        "</tbody>\n"
        "</table>\n"
        "</div>\n"
        '<div class="footer">\n'
        "Served by LinkBeam\n"
        "</div>\n"
        "</div>\n"
        "</body>\n</html>"
    )
