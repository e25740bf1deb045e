"""Control file loader for port directories.

A port directory holds either a ``vcpkg.json`` manifest or a legacy
``CONTROL`` file. When both exist the manifest wins.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from portresolver.adapters.versions.schema import VersionFields
from portresolver.core.errors import ControlFileParseError
from portresolver.core.models import (
    ControlFile,
    Dependency,
    FeatureParagraph,
    Version,
)
from portresolver.core.ports import ControlFileLoaderPort

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "vcpkg.json"
CONTROL_FILENAME = "CONTROL"

_DEPENDENCY_PATTERN = re.compile(
    r"^(?P<name>[a-z0-9\-]+)"
    r"(?:\[(?P<features>[^\]]*)\])?"
    r"\s*(?:\((?P<platform>[^)]*)\))?$"
)


def _join_description(value: str | list[str]) -> str:
    if isinstance(value, list):
        return "\n".join(value)
    return value


# ============================================================================
# vcpkg.json
# ============================================================================


class DependencyModel(BaseModel):
    """An object-form dependency in a manifest."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(min_length=1)
    features: list[str] = Field(default_factory=list)
    platform: str | None = None
    minimum_version: str | None = Field(default=None, alias="version>=")
    default_features: bool = Field(default=True, alias="default-features")

    def to_dependency(self) -> Dependency:
        return Dependency(
            name=self.name,
            features=tuple(self.features),
            platform=self.platform,
            minimum_version=self.minimum_version,
        )


def _to_dependencies(values: list[str | DependencyModel]) -> tuple[Dependency, ...]:
    return tuple(
        Dependency(name=value) if isinstance(value, str) else value.to_dependency()
        for value in values
    )


class FeatureModel(BaseModel):
    """A feature object in a manifest."""

    description: str | list[str] = ""
    dependencies: list[str | DependencyModel] = Field(default_factory=list)


class OverrideModel(VersionFields):
    """An entry of a manifest's ``overrides`` array."""

    name: str = Field(min_length=1)


class ManifestModel(VersionFields):
    """A ``vcpkg.json`` port manifest."""

    name: str = Field(min_length=1)
    description: str | list[str] = ""
    dependencies: list[str | DependencyModel] = Field(default_factory=list)
    default_features: list[str] = Field(default_factory=list, alias="default-features")
    features: dict[str, FeatureModel] = Field(default_factory=dict)
    supports: str | None = None
    overrides: list[OverrideModel] = Field(default_factory=list)
    builtin_baseline: str | None = Field(default=None, alias="builtin-baseline")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure the port name is a valid identifier."""
        if not re.fullmatch(r"[a-z0-9]+(-[a-z0-9]+)*", v):
            raise ValueError(f"invalid port name: {v!r}")
        return v

    def to_control_file(self) -> ControlFile:
        return ControlFile(
            name=self.name,
            version=self.to_version(),
            description=_join_description(self.description),
            dependencies=_to_dependencies(self.dependencies),
            default_features=tuple(self.default_features),
            features=tuple(
                FeatureParagraph(
                    name=feature_name,
                    description=_join_description(feature.description),
                    dependencies=_to_dependencies(feature.dependencies),
                )
                for feature_name, feature in self.features.items()
            ),
            supports=self.supports,
            overrides=tuple(override.name for override in self.overrides),
            builtin_baseline=self.builtin_baseline,
        )


# ============================================================================
# CONTROL
# ============================================================================


def parse_paragraphs(text: str) -> list[dict[str, str]]:
    """Split a CONTROL file into paragraphs of ``Field: value`` pairs.

    Lines starting with whitespace continue the previous field.
    """
    paragraphs: list[dict[str, str]] = []
    current: dict[str, str] = {}
    last_field: str | None = None

    for lineno, line in enumerate(text.splitlines(), start=1):
        if line.startswith("#"):
            continue
        if not line.strip():
            if current:
                paragraphs.append(current)
            current = {}
            last_field = None
            continue
        if line[0].isspace():
            if last_field is None:
                raise ValueError(f"line {lineno}: continuation without a field")
            current[last_field] += "\n" + line.strip()
            continue
        field_name, sep, value = line.partition(":")
        if not sep or not field_name.strip():
            raise ValueError(f"line {lineno}: expected 'Field: value'")
        last_field = field_name.strip()
        if last_field in current:
            raise ValueError(f"line {lineno}: duplicate field {last_field}")
        current[last_field] = value.strip()

    if current:
        paragraphs.append(current)
    return paragraphs


def parse_dependency_list(value: str) -> tuple[Dependency, ...]:
    """Parse a ``Build-Depends`` list such as ``zlib, curl[ssl] (windows)``."""
    dependencies: list[Dependency] = []
    for item in (part.strip() for part in value.split(",")):
        if not item:
            continue
        match = _DEPENDENCY_PATTERN.match(item)
        if match is None:
            raise ValueError(f"invalid dependency: {item!r}")
        features = match.group("features")
        dependencies.append(
            Dependency(
                name=match.group("name"),
                features=tuple(
                    f.strip() for f in features.split(",") if f.strip()
                ) if features else (),
                platform=match.group("platform"),
            )
        )
    return tuple(dependencies)


def control_file_from_paragraphs(paragraphs: list[dict[str, str]]) -> ControlFile:
    if not paragraphs:
        raise ValueError("CONTROL file is empty")

    core = paragraphs[0]
    name = core.get("Source")
    if not name:
        raise ValueError("missing required field: Source")
    version_text = core.get("Version")
    if not version_text:
        raise ValueError("missing required field: Version")
    port_version = core.get("Port-Version", "0")
    if not port_version.isdigit():
        raise ValueError(f"invalid Port-Version: {port_version!r}")

    features = []
    for paragraph in paragraphs[1:]:
        feature_name = paragraph.get("Feature")
        if not feature_name:
            raise ValueError("feature paragraph missing required field: Feature")
        features.append(
            FeatureParagraph(
                name=feature_name,
                description=paragraph.get("Description", ""),
                dependencies=parse_dependency_list(paragraph.get("Build-Depends", "")),
            )
        )

    return ControlFile(
        name=name,
        version=Version(version_text, int(port_version)),
        description=core.get("Description", ""),
        dependencies=parse_dependency_list(core.get("Build-Depends", "")),
        default_features=tuple(
            f.strip() for f in core.get("Default-Features", "").split(",") if f.strip()
        ),
        features=tuple(features),
        supports=core.get("Supports"),
    )


# ============================================================================
# Loader
# ============================================================================


class ManifestControlFileLoader(ControlFileLoaderPort):
    """Loads port metadata from ``vcpkg.json`` or ``CONTROL`` files.

    Successfully parsed control files are memoized per directory for the
    lifetime of the loader, so a registry reading a port's current version
    and a resolver loading the same port share one parse.
    """

    def __init__(self) -> None:
        self._loaded: dict[Path, ControlFile] = {}

    def is_port_directory(self, directory: Path) -> bool:
        return (directory / MANIFEST_FILENAME).is_file() or (
            directory / CONTROL_FILENAME
        ).is_file()

    def list_port_directories(self, directory: Path) -> list[Path]:
        if not directory.is_dir():
            return []
        return sorted(
            child
            for child in directory.iterdir()
            if child.is_dir() and self.is_port_directory(child)
        )

    def try_load(self, directory: Path) -> ControlFile:
        cached = self._loaded.get(directory)
        if cached is not None:
            return cached

        manifest_path = directory / MANIFEST_FILENAME
        control_path = directory / CONTROL_FILENAME
        if manifest_path.is_file():
            control_file = self._load_manifest(manifest_path)
        elif control_path.is_file():
            control_file = self._load_control(control_path)
        else:
            raise ControlFileParseError(
                directory, f"no {MANIFEST_FILENAME} or {CONTROL_FILENAME} found"
            )

        self._loaded[directory] = control_file
        return control_file

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ControlFileParseError(path, f"failed to read file: {e}") from e

    def _load_manifest(self, path: Path) -> ControlFile:
        try:
            data: Any = json.loads(self._read_text(path))
        except json.JSONDecodeError as e:
            raise ControlFileParseError(path, f"invalid JSON: {e}") from e

        try:
            control_file = ManifestModel.model_validate(data).to_control_file()
        except (ValidationError, ValueError) as e:
            raise ControlFileParseError(path, str(e)) from e

        logger.debug(f"Loaded manifest for {control_file.name} from {path}")
        return control_file

    def _load_control(self, path: Path) -> ControlFile:
        try:
            control_file = control_file_from_paragraphs(
                parse_paragraphs(self._read_text(path))
            )
        except ValueError as e:
            raise ControlFileParseError(path, str(e)) from e

        logger.debug(f"Loaded CONTROL for {control_file.name} from {path}")
        return control_file
