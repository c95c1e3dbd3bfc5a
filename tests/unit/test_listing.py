"""
Unit tests for directory listing rendering.
"""

import re

from linkbeam.handlers.listing import (
    DirectoryEntry,
    format_file_size,
    parent_path,
    render_listing,
    scan_directory,
    sort_entries,
)


def entry(name, is_directory=False, size=0):
    return DirectoryEntry(name=name, is_directory=is_directory, size_bytes=size, modified=0.0)


def rows(html):
    return re.findall(r"<tr><td>.*?</tr>", html)


class TestFormatFileSize:

    def test_bytes(self):
        assert format_file_size(0) == "0 B"
        assert format_file_size(1023) == "1023 B"

    def test_kilobytes(self):
        assert format_file_size(1024) == "1.0 KB"
        assert format_file_size(1536) == "1.5 KB"

    def test_megabytes(self):
        assert format_file_size(5 * 1024 * 1024) == "5.0 MB"

    def test_gigabytes(self):
        assert format_file_size(3 * 1024 ** 3) == "3.0 GB"


class TestSorting:

    def test_directories_first_then_case_insensitive(self):
        entries = [entry("b.txt"), entry("Zeta", True), entry("A.txt"), entry("alpha", True)]

        names = [e.name for e in sort_entries(entries)]

        assert names == ["alpha", "Zeta", "A.txt", "b.txt"]

    def test_case_ties_are_stable(self):
        names = [e.name for e in sort_entries([entry("readme"), entry("README")])]
        assert names == ["README", "readme"]


class TestParentPath:

    def test_nested(self):
        assert parent_path("/a/b/") == "/a/"

    def test_top_level(self):
        assert parent_path("/a/") == "/"


class TestRenderListing:

    def test_empty_root(self):
        """Only the table header, no entry rows, no parent row."""
        html = render_listing("/", [])

        assert "<tr><th>Name</th><th>Size</th><th>Modified</th></tr>" in html
        assert rows(html) == []
        assert "../" not in html

    def test_parent_row_below_root(self):
        html = render_listing("/docs/sub/", [])

        assert rows(html) == [
            '<tr><td><a href="/docs/" class="directory">../</a></td><td>-</td><td>-</td></tr>'
        ]

    def test_entries(self):
        html = render_listing("/docs/", [entry("notes.txt", size=2048), entry("img", True)])
        found = rows(html)

        assert len(found) == 3
        assert 'href="/docs/img/" class="directory">img/</a>' in found[1]
        assert 'href="/docs/notes.txt" class="file">notes.txt</a>' in found[2]
        assert "2.0 KB" in found[2]

    def test_names_escaped(self):
        html = render_listing("/", [entry('<script>"x"&.txt')])

        assert "<script>" not in html
        assert "&lt;script&gt;&quot;x&quot;&amp;.txt" in html

    def test_links_percent_encoded(self):
        html = render_listing("/", [entry("my file#1.txt")])
        assert 'href="/my%20file%231.txt"' in html

    def test_title_and_footer(self):
        html = render_listing("/photos/", [])

        assert "<title>Directory listing for /photos/</title>" in html
        assert "Served by LinkBeam" in html


class TestScanDirectory:

    def test_reads_entries(self, tmp_path):
        (tmp_path / "a.txt").write_bytes(b"hello")
        (tmp_path / "sub").mkdir()

        found = {e.name: e for e in scan_directory(tmp_path)}

        assert found["a.txt"].size_bytes == 5
        assert not found["a.txt"].is_directory
        assert found["sub"].is_directory
        assert found["sub"].size_bytes == 0

    def test_skips_dangling_symlink(self, tmp_path):
        (tmp_path / "dangling").symlink_to(tmp_path / "nowhere")
        assert scan_directory(tmp_path) == []
