"""Domain models for the port resolution engine.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import total_ordering
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from .ports import (
        CheckoutPort,
        ControlFileLoaderPort,
        FeatureFlagCheckerPort,
        RegistrySetPort,
        VersionDatabasePort,
    )

_NATURAL_SPLIT = re.compile(r"(\d+)")


def _natural_key(text: str) -> tuple[tuple[int, int | str], ...]:
    """Split version text into comparable chunks; numbers compare numerically."""
    return tuple(
        (0, int(chunk)) if chunk.isdigit() else (1, chunk)
        for chunk in _NATURAL_SPLIT.split(text)
        if chunk
    )


@total_ordering
@dataclass(frozen=True)
class Version:
    """A port version: upstream version text plus a port revision.

    The port revision disambiguates re-releases of the same upstream
    version. Equality and ordering consider both fields.
    """

    text: str
    port_version: int = 0

    def __post_init__(self) -> None:
        """Validate version invariants on creation."""
        if not self.text or not self.text.strip():
            raise ValueError("version text must be a non-empty string")
        if "#" in self.text:
            raise ValueError(f"version text must not contain '#': {self.text!r}")
        if self.port_version < 0:
            raise ValueError(
                f"port_version must be non-negative, got {self.port_version}"
            )

    @classmethod
    def parse(cls, value: str) -> "Version":
        """Parse ``"1.2.0"`` or ``"1.2.0#3"``."""
        text, sep, revision = value.strip().partition("#")
        if not sep:
            return cls(text)
        if not revision.isdigit():
            raise ValueError(f"invalid port version in {value!r}")
        return cls(text, int(revision))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return (_natural_key(self.text), self.port_version) < (
            _natural_key(other.text),
            other.port_version,
        )

    def __str__(self) -> str:
        if self.port_version:
            return f"{self.text}#{self.port_version}"
        return self.text


@dataclass(frozen=True, order=True)
class VersionSpec:
    """A (port name, version) pair: the key for historical lookups."""

    port_name: str
    version: Version

    def __str__(self) -> str:
        return f"{self.port_name}@{self.version}"


@dataclass(frozen=True)
class Dependency:
    """A dependency declared by a control file."""

    name: str
    features: tuple[str, ...] = ()
    platform: str | None = None
    minimum_version: str | None = None  # version>= constraint, manifests only


@dataclass(frozen=True)
class FeatureParagraph:
    """An optional feature of a port."""

    name: str
    description: str = ""
    dependencies: tuple[Dependency, ...] = ()


@dataclass(frozen=True)
class ControlFile:
    """Parsed metadata of a port.

    Produced by a ControlFileLoaderPort from either a ``vcpkg.json``
    manifest or a legacy ``CONTROL`` file.
    """

    name: str
    version: Version
    description: str = ""
    dependencies: tuple[Dependency, ...] = ()
    default_features: tuple[str, ...] = ()
    features: tuple[FeatureParagraph, ...] = ()
    supports: str | None = None
    overrides: tuple[str, ...] = ()  # port names pinned by "overrides"
    builtin_baseline: str | None = None

    def __post_init__(self) -> None:
        """Validate control file invariants on creation."""
        if not self.name or not self.name.strip():
            raise ValueError("name must be a non-empty string")

    @property
    def all_dependencies(self) -> tuple[Dependency, ...]:
        """Core dependencies followed by the dependencies of every feature."""
        return self.dependencies + tuple(
            dep for feature in self.features for dep in feature.dependencies
        )

    @property
    def uses_versioning(self) -> bool:
        """Whether this control file declares any versioning constraint."""
        if self.overrides or self.builtin_baseline:
            return True
        return any(dep.minimum_version for dep in self.all_dependencies)


@dataclass(frozen=True)
class ControlFileLocation:
    """A parsed control file paired with the directory it was loaded from."""

    control_file: ControlFile
    source_location: Path

    @property
    def name(self) -> str:
        return self.control_file.name

    @property
    def version(self) -> Version:
        return self.control_file.version

    @property
    def version_spec(self) -> VersionSpec:
        return VersionSpec(self.control_file.name, self.control_file.version)


@dataclass(frozen=True)
class VersionEntry:
    """One entry of a port's version database."""

    version: Version
    git_tree: str  # content identifier of the port directory

    def __post_init__(self) -> None:
        """Validate version entry invariants on creation."""
        if not self.git_tree or not self.git_tree.strip():
            raise ValueError("git_tree must be a non-empty string")


BaselineMap: TypeAlias = Mapping[str, Version]


@dataclass(frozen=True)
class ResolutionContext:
    """Everything a resolver is bound to for one invocation of the tool.

    Never mutated after construction; shared read-only by every resolver.

    Layout under ``root``::

        ports/<name>/vcpkg.json
        port_versions/baseline.json
        port_versions/<first letter>-/<name>.json
    """

    root: Path
    loader: "ControlFileLoaderPort"
    registries: "RegistrySetPort"
    database: "VersionDatabasePort"
    checkout: "CheckoutPort"
    feature_checker: "FeatureFlagCheckerPort"
    original_cwd: Path = field(default_factory=Path.cwd)
    feature_flags: frozenset[str] = frozenset()
    versions_dir_name: str = "port_versions"

    @property
    def versions_dir(self) -> Path:
        return self.root / self.versions_dir_name

    @property
    def baseline_file(self) -> Path:
        return self.versions_dir / "baseline.json"

    def versions_file(self, port_name: str) -> Path:
        """Path of a port's version database, sharded by first letter."""
        return self.versions_dir / f"{port_name[:1]}-" / f"{port_name}.json"
