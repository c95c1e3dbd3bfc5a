"""
Unit tests for Content-Type resolution.
"""

import pytest

from linkbeam.http.mime_types import (
    DEFAULT_MIME_TYPE,
    get_extension,
    get_mime_type,
    is_cacheable,
)


class TestGetMimeType:

    @pytest.mark.parametrize("name, expected", [
        ("a.txt", "text/plain"),
        ("index.html", "text/html"),
        ("style.css", "text/css"),
        ("app.js", "application/javascript"),
        ("photo.JPG", "image/jpeg"),
        ("movie.mp4", "video/mp4"),
        ("doc.pdf", "application/pdf"),
    ])
    def test_known_extensions(self, name, expected):
        assert get_mime_type(name) == expected

    def test_unknown_extension(self):
        assert get_mime_type("archive.xyz") == DEFAULT_MIME_TYPE

    def test_no_extension(self):
        assert get_mime_type("Makefile") == "application/octet-stream"

    def test_last_dot_wins(self):
        assert get_mime_type("backup.tar.gz") == "application/gzip"

    def test_dot_in_directory_ignored(self):
        assert get_extension("docs.d/README") == ""


class TestIsCacheable:

    @pytest.mark.parametrize("name", ["a.css", "b.js", "c.png", "d.SVG", "e.woff2"])
    def test_static_assets(self, name):
        assert is_cacheable(name)

    @pytest.mark.parametrize("name", ["a.html", "b.txt", "c.mp4", "README"])
    def test_everything_else(self, name):
        assert not is_cacheable(name)
