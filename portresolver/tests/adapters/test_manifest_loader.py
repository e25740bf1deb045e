"""Tests for the vcpkg.json / CONTROL loader."""

import json
from pathlib import Path

import pytest

from portresolver.adapters.manifest import ManifestControlFileLoader
from portresolver.adapters.manifest.loader import (
    parse_dependency_list,
    parse_paragraphs,
)
from portresolver.core.errors import ControlFileParseError
from portresolver.core.models import Dependency, Version


@pytest.fixture
def loader() -> ManifestControlFileLoader:
    return ManifestControlFileLoader()


def write_manifest(directory: Path, data: object) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "vcpkg.json").write_text(json.dumps(data), encoding="utf-8")
    return directory


def write_control(directory: Path, text: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "CONTROL").write_text(text, encoding="utf-8")
    return directory


# ============================================================================
# vcpkg.json
# ============================================================================


class TestManifest:
    """Loading ports described by vcpkg.json."""

    def test_loads_minimal_manifest(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        port = write_manifest(tmp_path / "zlib", {"name": "zlib", "version-string": "1.2.11"})

        control_file = loader.try_load(port)

        assert control_file.name == "zlib"
        assert control_file.version == Version("1.2.11")
        assert control_file.dependencies == ()

    def test_loads_full_manifest(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        port = write_manifest(
            tmp_path / "curl",
            {
                "name": "curl",
                "version-semver": "7.74.0",
                "port-version": 2,
                "description": ["A library", "for transfers"],
                "dependencies": [
                    "zlib",
                    {"name": "openssl", "platform": "!windows", "version>=": "1.1.1"},
                ],
                "default-features": ["ssl"],
                "features": {
                    "ssl": {"description": "TLS", "dependencies": ["openssl"]},
                },
                "supports": "!uwp",
            },
        )

        control_file = loader.try_load(port)

        assert control_file.version == Version("7.74.0", 2)
        assert control_file.description == "A library\nfor transfers"
        assert control_file.dependencies == (
            Dependency("zlib"),
            Dependency("openssl", platform="!windows", minimum_version="1.1.1"),
        )
        assert control_file.default_features == ("ssl",)
        assert control_file.features[0].name == "ssl"
        assert control_file.features[0].dependencies == (Dependency("openssl"),)
        assert control_file.supports == "!uwp"
        assert control_file.uses_versioning

    def test_reads_overrides_and_builtin_baseline(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        port = write_manifest(
            tmp_path / "app",
            {
                "name": "app",
                "version": "1.0",
                "builtin-baseline": "abc123",
                "overrides": [{"name": "zlib", "version-string": "1.2.8"}],
            },
        )

        control_file = loader.try_load(port)

        assert control_file.overrides == ("zlib",)
        assert control_file.builtin_baseline == "abc123"

    @pytest.mark.parametrize(
        "data",
        [
            {"name": "zlib"},
            {"name": "zlib", "version": "1", "version-string": "1"},
            {"name": "Zlib", "version": "1"},
            {"name": "zlib", "version": "1", "port-version": -1},
            ["not", "an", "object"],
        ],
    )
    def test_invalid_manifest_is_a_parse_error(
        self, loader: ManifestControlFileLoader, tmp_path: Path, data: object
    ) -> None:
        port = write_manifest(tmp_path / "zlib", data)

        with pytest.raises(ControlFileParseError):
            loader.try_load(port)

    def test_parsed_manifest_is_memoized(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        port = write_manifest(tmp_path / "zlib", {"name": "zlib", "version": "1.0"})
        first = loader.try_load(port)
        write_manifest(port, {"name": "zlib", "version": "2.0"})

        assert loader.try_load(port) is first
        assert ManifestControlFileLoader().try_load(port).version == Version("2.0")

    def test_parse_failures_are_not_memoized(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        port = write_manifest(tmp_path / "zlib", {"name": "zlib"})
        with pytest.raises(ControlFileParseError):
            loader.try_load(port)

        write_manifest(port, {"name": "zlib", "version": "1.0"})

        assert loader.try_load(port).version == Version("1.0")

    def test_malformed_json_is_a_parse_error(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        port = tmp_path / "zlib"
        port.mkdir()
        (port / "vcpkg.json").write_text("{", encoding="utf-8")

        with pytest.raises(ControlFileParseError, match="invalid JSON"):
            loader.try_load(port)

    def test_manifest_wins_over_control(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        port = write_manifest(tmp_path / "zlib", {"name": "zlib", "version": "2.0"})
        write_control(port, "Source: zlib\nVersion: 1.0\n")

        assert loader.try_load(port).version == Version("2.0")


# ============================================================================
# CONTROL
# ============================================================================


class TestControl:
    """Loading ports described by legacy CONTROL files."""

    def test_loads_control_file(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        port = write_control(
            tmp_path / "curl",
            "# comment\n"
            "Source: curl\n"
            "Version: 7.68.0\n"
            "Port-Version: 3\n"
            "Build-Depends: zlib, openssl (!windows)\n"
            "Default-Features: ssl\n"
            "Description: A library\n"
            "  for transfers\n"
            "\n"
            "Feature: ssl\n"
            "Description: TLS support\n"
            "Build-Depends: openssl[tools]\n",
        )

        control_file = loader.try_load(port)

        assert control_file.name == "curl"
        assert control_file.version == Version("7.68.0", 3)
        assert control_file.description == "A library\nfor transfers"
        assert control_file.dependencies == (
            Dependency("zlib"),
            Dependency("openssl", platform="!windows"),
        )
        assert control_file.default_features == ("ssl",)
        assert control_file.features[0].name == "ssl"
        assert control_file.features[0].dependencies == (
            Dependency("openssl", features=("tools",)),
        )
        assert not control_file.uses_versioning

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "Version: 1.0\n",
            "Source: zlib\n",
            "Source: zlib\nVersion: 1.0\nPort-Version: x\n",
            "Source: zlib\nVersion: 1.0\n\nDescription: feature without name\n",
            "Source: zlib\nVersion: 1.0\nBuild-Depends: Bad Name\n",
        ],
    )
    def test_invalid_control_is_a_parse_error(
        self, loader: ManifestControlFileLoader, tmp_path: Path, text: str
    ) -> None:
        port = write_control(tmp_path / "zlib", text)

        with pytest.raises(ControlFileParseError):
            loader.try_load(port)

    def test_parse_paragraphs_rejects_duplicate_fields(self) -> None:
        with pytest.raises(ValueError, match="duplicate field"):
            parse_paragraphs("Source: a\nSource: b\n")

    def test_parse_paragraphs_rejects_orphan_continuation(self) -> None:
        with pytest.raises(ValueError, match="continuation"):
            parse_paragraphs("  dangling\n")

    def test_parse_dependency_list_skips_empty_items(self) -> None:
        assert parse_dependency_list("zlib, , fmt") == (Dependency("zlib"), Dependency("fmt"))


# ============================================================================
# Directory discovery
# ============================================================================


class TestDiscovery:
    """Recognizing and enumerating port directories."""

    def test_is_port_directory(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        manifest_port = write_manifest(tmp_path / "a", {"name": "a", "version": "1"})
        control_port = write_control(tmp_path / "b", "Source: b\nVersion: 1\n")
        empty = tmp_path / "c"
        empty.mkdir()

        assert loader.is_port_directory(manifest_port)
        assert loader.is_port_directory(control_port)
        assert not loader.is_port_directory(empty)

    def test_list_port_directories_is_sorted(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        write_manifest(tmp_path / "zlib", {"name": "zlib", "version": "1"})
        write_control(tmp_path / "fmt", "Source: fmt\nVersion: 1\n")
        (tmp_path / "notes").mkdir()
        (tmp_path / "README.md").write_text("ports", encoding="utf-8")

        assert loader.list_port_directories(tmp_path) == [tmp_path / "fmt", tmp_path / "zlib"]

    def test_list_missing_directory_is_empty(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        assert loader.list_port_directories(tmp_path / "missing") == []

    def test_directory_without_control_file(
        self, loader: ManifestControlFileLoader, tmp_path: Path
    ) -> None:
        with pytest.raises(ControlFileParseError, match="no vcpkg.json or CONTROL"):
            loader.try_load(tmp_path)
