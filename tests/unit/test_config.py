"""
Unit tests for configuration and document-root resolution.
"""

import os
from dataclasses import FrozenInstanceError

import pytest

from linkbeam.config import (
    ServerConfig,
    StorageLocations,
    ensure_trailing_separator,
    resolve_document_root,
)


@pytest.fixture
def locations():
    return StorageLocations(public_root="/home/ana", private_root="/data/linkbeam")


class TestResolveDocumentRoot:

    @pytest.mark.parametrize("spec", ["", "/", None])
    def test_public_root(self, locations, spec):
        assert resolve_document_root(spec, locations) == "/home/ana/"

    def test_internal(self, locations):
        assert resolve_document_root("internal", locations) == "/data/linkbeam/"

    def test_absolute_used_verbatim(self, locations):
        assert resolve_document_root("/srv/share", locations) == "/srv/share/"

    def test_relative_under_public_root(self, locations):
        assert resolve_document_root("Download", locations) == "/home/ana/Download/"

    def test_existing_separator_kept(self, locations):
        assert resolve_document_root("/srv/share/", locations) == "/srv/share/"

    def test_ensure_trailing_separator(self):
        assert ensure_trailing_separator("/a") == "/a" + os.sep
        assert ensure_trailing_separator("/a" + os.sep) == "/a" + os.sep


class TestStorageLocationsFromEnv:

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("LINKBEAM_PUBLIC_ROOT", "/mnt/public")
        monkeypatch.setenv("LINKBEAM_PRIVATE_ROOT", "/mnt/private")

        locations = StorageLocations.from_env()

        assert locations.public_root == "/mnt/public"
        assert locations.private_root == "/mnt/private"

    def test_xdg_default(self, monkeypatch):
        monkeypatch.delenv("LINKBEAM_PRIVATE_ROOT", raising=False)
        monkeypatch.setenv("XDG_DATA_HOME", "/xdg")

        assert StorageLocations.from_env().private_root == os.path.join("/xdg", "linkbeam")


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig(port=8080, document_root="/srv/")

        assert config.bind_host == "0.0.0.0"
        assert config.max_workers == 10
        assert config.chunk_size == 8192
        assert config.shutdown_grace == 5.0
        config.validate()

    def test_frozen(self):
        config = ServerConfig(port=8080, document_root="/srv/")
        with pytest.raises(FrozenInstanceError):
            config.port = 9090

    @pytest.mark.parametrize("kwargs, message", [
        ({"port": -1}, "Invalid port"),
        ({"port": 65536}, "Invalid port"),
        ({"document_root": "relative/"}, "absolute"),
        ({"document_root": "/srv"}, "must end with"),
        ({"max_workers": 0}, "max_workers"),
        ({"buffer_size": 100}, "buffer_size"),
        ({"chunk_size": 0}, "chunk_size"),
        ({"accept_poll_interval": 0}, "accept_poll_interval"),
        ({"shutdown_grace": -1}, "shutdown_grace"),
    ])
    def test_validate_rejects(self, kwargs, message):
        values = {"port": 8080, "document_root": "/srv/"}
        values.update(kwargs)

        with pytest.raises(ValueError, match=message):
            ServerConfig(**values).validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0, document_root="/srv/").validate()
