"""
=============================================================================
STORAGE DIAGNOSTICS
=============================================================================

Two convenience helpers for the user-facing layer. Neither is needed to
serve files.

    check_storage_access(public_root)
        Can we see, read and write the public storage root, and which of
        the usual folders (Download, Documents, Pictures, DCIM) can we
        read?

    create_sample_files(document_root)
        Seed a document root with something to look at:

            <root>/index.html              welcome page
            <root>/sample.txt              short text file
            <root>/documents/readme.txt    file in a subdirectory

        Existing files are never overwritten, so calling it twice is the
        same as calling it once.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union


logger = logging.getLogger(__name__)


COMMON_DIRECTORIES = ("Download", "Documents", "Pictures", "DCIM")


@dataclass
class StorageAccess:
    """Result of check_storage_access()."""

    path: str
    exists: bool = False
    can_read: bool = False
    can_write: bool = False
    accessible_dirs: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, object]:
        result: Dict[str, object] = {
            "exists": self.exists,
            "canRead": self.can_read,
            "canWrite": self.can_write,
            "path": self.path,
            "accessibleDirs": ", ".join(self.accessible_dirs),
        }
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class SampleFilesResult:
    """Result of create_sample_files()."""

    success: bool
    message: Optional[str] = None
    created: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, object]:
        if self.success:
            return {"success": True, "message": self.message}
        return {"success": False, "error": self.error}


def _readable_dir(path: Path) -> bool:
    return path.is_dir() and os.access(path, os.R_OK | os.X_OK)


def check_storage_access(public_root: Union[str, Path]) -> StorageAccess:
    """
    Probe the public storage root.

    Never raises; an unexpected failure is reported in `error`.
    """
    root = Path(public_root)
    result = StorageAccess(path=str(root.absolute()))

    try:
        result.exists = root.exists()
        result.can_read = result.exists and os.access(root, os.R_OK)
        result.can_write = result.exists and os.access(root, os.W_OK)
        result.accessible_dirs = [
            name for name in COMMON_DIRECTORIES if _readable_dir(root / name)
        ]
    except OSError as e:
        logger.warning(f"Storage probe of {root} failed: {e}")
        result.exists = result.can_read = result.can_write = False
        result.error = str(e)

    return result


# =============================================================================
# SAMPLE CONTENT
# =============================================================================

WELCOME_HTML = """\
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>LinkBeam File Server</title>
    <style>
        body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 0; padding: 0; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); min-height: 100vh; display: flex; align-items: center; justify-content: center; }}
        .container {{ background: white; border-radius: 12px; padding: 40px; text-align: center; box-shadow: 0 20px 40px rgba(0,0,0,0.1); max-width: 500px; }}
        h1 {{ color: #333; margin-bottom: 20px; font-size: 28px; }}
        p {{ color: #666; line-height: 1.6; margin-bottom: 15px; }}
        .feature {{ background: #f8f9fa; padding: 15px; border-radius: 8px; margin: 10px 0; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>Welcome to LinkBeam File Server</h1>
        <p>This HTTP server is running on your device.</p>
        <div class="feature">
            <p><strong>Browse Files</strong><br>Navigate through directories and files like Python's http.server</p>
        </div>
        <div class="feature">
            <p><strong>Network Access</strong><br>Access from any device on your WiFi network</p>
        </div>
        <div class="feature">
            <p><strong>Secure</strong><br>Requests cannot leave the shared folder</p>
        </div>
        <p><em>Server started: {created}</em></p>
    </div>
</body>
</html>
"""

SAMPLE_TEXT = """\
This is a sample text file served by LinkBeam HTTP Server.
You can add any files to this directory and they will be accessible via the web browser.
Server running from: {root}
"""

README_TEXT = """\
This is a file in a subdirectory.
The server supports directory browsing just like Python's http.server.
Created: {created}
"""


def _write_if_missing(path: Path, content: str, created: List[str]):
    if path.exists():
        return
    path.write_text(content, encoding="utf-8")
    created.append(str(path))
    logger.debug(f"Created sample file {path}")


def create_sample_files(document_root: Optional[Union[str, Path]]) -> SampleFilesResult:
    """
    Seed `document_root` with sample content, skipping existing files.

    Returns a failed result (never raises) when no document root is
    configured or a file cannot be written.
    """
    if not document_root:
        return SampleFilesResult(success=False, error="No document root configured")

    root = Path(document_root)
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    created: List[str] = []

    try:
        _write_if_missing(root / "index.html", WELCOME_HTML.format(created=now), created)
        _write_if_missing(root / "sample.txt", SAMPLE_TEXT.format(root=root), created)

        documents = root / "documents"
        documents.mkdir(exist_ok=True)
        _write_if_missing(documents / "readme.txt", README_TEXT.format(created=now), created)
    except OSError as e:
        logger.error(f"Could not create sample files in {root}: {e}")
        return SampleFilesResult(success=False, error=str(e), created=created)

    logger.info(f"Sample files ready in {root} ({len(created)} created)")
    return SampleFilesResult(
        success=True,
        message=f"Sample files created in {root.absolute()}",
        created=created,
    )
