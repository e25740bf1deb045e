"""Port interfaces for the port resolution engine.

These abstract base classes define the boundaries between core
resolution logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - ControlFileLoaderPort: Detect, enumerate and parse port directories
   - RegistrySetPort / RegistryPort / PortEntryPort: Registry capability
   - VersionDatabasePort: Parse version database and baseline documents
   - CheckoutPort: Materialize historical trees from version control
   - FeatureFlagCheckerPort: Gate control files on enabled feature flags

2. **Driving Ports** (dependency-graph builder and CLI call into core)
   - PortfileProvider: Resolve a port name to its current control file
   - BaselineProvider: Default version of a port
   - VersionedPortfileProvider: Resolve a (name, version) pair
"""

from abc import ABC, abstractmethod
from collections.abc import Collection, Sequence
from pathlib import Path

from .models import (
    BaselineMap,
    ControlFile,
    ControlFileLocation,
    Version,
    VersionEntry,
    VersionSpec,
)


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class ControlFileLoaderPort(ABC):
    """Port for reading port metadata from a directory."""

    @abstractmethod
    def is_port_directory(self, directory: Path) -> bool:
        """Return True if the directory contains a control file."""

    @abstractmethod
    def try_load(self, directory: Path) -> ControlFile:
        """Parse the control file in a port directory.

        Raises:
            ControlFileParseError: If the control file is missing or malformed.
        """

    @abstractmethod
    def list_port_directories(self, directory: Path) -> list[Path]:
        """List the port directories directly below a directory-of-ports.

        Returns:
            Port directories in a deterministic (sorted) order.
        """


class PortEntryPort(ABC):
    """A registry's handle on one port's available versions."""

    @abstractmethod
    def get_port_directory(self, version: Version) -> Path | None:
        """Return the directory holding the port at this version.

        Returns:
            Directory path, or None if the registry does not carry the version.
        """


class RegistryPort(ABC):
    """Port for a registry: a source of truth for a set of ports."""

    @abstractmethod
    def get_baseline_version(self, port_name: str) -> Version | None:
        """Default version of the port in this registry, if it has one."""

    @abstractmethod
    def get_port_entry(self, port_name: str) -> PortEntryPort | None:
        """Entry for the port, or None if the registry does not know it."""

    @abstractmethod
    def port_names(self) -> list[str]:
        """Names of every port this registry provides."""


class RegistrySetPort(ABC):
    """Port for the configured set of registries."""

    @abstractmethod
    def registry_for_port(self, port_name: str) -> RegistryPort | None:
        """Registry responsible for a port, or None if no registry claims it."""

    @abstractmethod
    def registries(self) -> Sequence[RegistryPort]:
        """All registries, in precedence order."""


class VersionDatabasePort(ABC):
    """Port for parsing version database and baseline documents."""

    @abstractmethod
    def parse_versions_file(self, port_name: str, path: Path) -> list[VersionEntry]:
        """Parse a port's version database.

        Returns:
            Entries in the order they are declared in the file.

        Raises:
            DocumentParseError: If the document is malformed.
        """

    @abstractmethod
    def parse_baseline_file(self, path: Path, baseline: str = "default") -> BaselineMap:
        """Parse one named baseline out of a baseline document.

        Raises:
            DocumentParseError: If the document is malformed or lacks the baseline.
        """


class CheckoutPort(ABC):
    """Port for materializing historical content from version control."""

    @abstractmethod
    def checkout_baseline(self, commit: str) -> Path:
        """Materialize the baseline document at a commit.

        Returns:
            Path to the extracted baseline document.

        Raises:
            CheckoutError: If version control cannot produce the document.
        """

    @abstractmethod
    def checkout_port(self, port_name: str, git_tree: str) -> Path:
        """Materialize a port directory from its tree identifier.

        Returns:
            Path to the extracted port directory.

        Raises:
            CheckoutError: If version control cannot produce the tree.
        """


class FeatureFlagCheckerPort(ABC):
    """Port for checking a control file against the enabled feature flags."""

    @abstractmethod
    def check(
        self, control_file: ControlFile, location: Path, flags: Collection[str]
    ) -> str | None:
        """Return an error message if the control file needs a disabled flag."""


# ============================================================================
# DRIVING PORTS (Callers invoke core)
# ============================================================================


class PortfileProvider(ABC):
    """Resolve port names to their current control files."""

    @abstractmethod
    def resolve(self, port_name: str) -> ControlFileLocation:
        """Resolve one port.

        Raises:
            PortNotFoundError: If no source provides the port.
            FeatureFlagError: If the port needs a disabled feature flag.
            FatalResolutionError: If the sources are inconsistent.
        """

    @abstractmethod
    def resolve_all(self) -> list[ControlFileLocation]:
        """Every port this provider knows, one entry per name."""


class BaselineProvider(ABC):
    """Default version of a port."""

    @abstractmethod
    def get_baseline_version(self, port_name: str) -> Version | None:
        """Return the default version, or None if there is no constraint."""


class VersionedPortfileProvider(ABC):
    """Resolve (port name, version) pairs to historical control files."""

    @abstractmethod
    def get_versions(self, port_name: str) -> Sequence[VersionSpec]:
        """Known versions of a port, in version database order.

        Raises:
            PortNotFoundError: If the port has neither a version database
                nor a current definition.
        """

    @abstractmethod
    def get_control_file(self, spec: VersionSpec) -> ControlFileLocation:
        """Control file of one specific version.

        Raises:
            VersionNotFoundError: If the version is not in the database.
            PortNameMismatchError: If the historical tree declares another name.
        """
