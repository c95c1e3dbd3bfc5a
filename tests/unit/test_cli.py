"""
Unit tests for the command-line entry point.
"""

import json

from linkbeam.__main__ import build_parser, main


class TestParser:

    def test_defaults(self, monkeypatch):
        for name in ("LINKBEAM_PORT", "LINKBEAM_ROOT", "LINKBEAM_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        args = build_parser().parse_args([])

        assert args.port == 8080
        assert args.root == ""
        assert args.log_level == "INFO"
        assert not args.json

    def test_environment_defaults(self, monkeypatch):
        monkeypatch.setenv("LINKBEAM_PORT", "3000")
        monkeypatch.setenv("LINKBEAM_ROOT", "Download")

        args = build_parser().parse_args([])

        assert args.port == 3000
        assert args.root == "Download"


class TestMain:

    def test_check_storage_json(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("LINKBEAM_PUBLIC_ROOT", str(tmp_path))
        (tmp_path / "Pictures").mkdir()

        assert main(["--check-storage", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["exists"] is True
        assert data["accessibleDirs"] == "Pictures"

    def test_start_failure_exit_code(self, tmp_path, capsys):
        assert main(["--port", "0", "--root", str(tmp_path / "missing")]) == 1
        assert "Document root does not exist" in capsys.readouterr().err
