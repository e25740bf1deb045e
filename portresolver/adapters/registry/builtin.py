"""Builtin registry: the ports tree checked into the local repository.

The baseline version of a port is its entry in the local baseline
document when there is one, otherwise the version its current control
file declares. Only the current version has a directory; any other
baseline version is reported as absent from the registry.

A port directory whose control file is malformed raises CorruptPortError.
"""

import logging
from functools import cached_property
from pathlib import Path

from portresolver.core.errors import (
    BaselineError,
    ControlFileParseError,
    CorruptPortError,
    DocumentParseError,
)
from portresolver.core.models import BaselineMap, Version
from portresolver.core.ports import (
    ControlFileLoaderPort,
    PortEntryPort,
    RegistryPort,
    VersionDatabasePort,
)

logger = logging.getLogger(__name__)


class BuiltinPortEntry(PortEntryPort):
    """A port in the builtin tree, available only at its current version."""

    def __init__(self, directory: Path, current_version: Version):
        self.directory = directory
        self.current_version = current_version

    def get_port_directory(self, version: Version) -> Path | None:
        if version == self.current_version:
            return self.directory
        return None


class BuiltinRegistry(RegistryPort):
    """Registry backed by ``<root>/ports``."""

    def __init__(
        self,
        ports_dir: Path,
        loader: ControlFileLoaderPort,
        database: VersionDatabasePort | None = None,
        baseline_file: Path | None = None,
    ):
        """Initialize the builtin registry.

        Args:
            ports_dir: Directory containing one subdirectory per port.
            loader: Loader used to read current port versions.
            database: Parser for the baseline document, if one is used.
            baseline_file: Local baseline document, if one is used.
        """
        self.ports_dir = ports_dir
        self.loader = loader
        self.database = database
        self.baseline_file = baseline_file
        self._current_versions: dict[str, Version | None] = {}

    @cached_property
    def _baseline(self) -> BaselineMap:
        if (
            self.database is None
            or self.baseline_file is None
            or not self.baseline_file.exists()
        ):
            return {}
        try:
            baselines = self.database.parse_baseline_file(self.baseline_file, "default")
        except DocumentParseError as e:
            raise BaselineError(self.baseline_file, e.reason) from e
        logger.debug(
            f"Loaded builtin baseline with {len(baselines)} ports",
            extra={"path": str(self.baseline_file)},
        )
        return baselines

    def _current_version(self, port_name: str) -> Version | None:
        if port_name not in self._current_versions:
            port_dir = self.ports_dir / port_name
            version = None
            if self.loader.is_port_directory(port_dir):
                try:
                    version = self.loader.try_load(port_dir).version
                except ControlFileParseError as e:
                    raise CorruptPortError(port_name, port_dir, e.reason) from e
            self._current_versions[port_name] = version
        return self._current_versions[port_name]

    def get_baseline_version(self, port_name: str) -> Version | None:
        baseline = self._baseline.get(port_name)
        if baseline is not None:
            return baseline
        return self._current_version(port_name)

    def get_port_entry(self, port_name: str) -> BuiltinPortEntry | None:
        current = self._current_version(port_name)
        if current is None:
            return None
        return BuiltinPortEntry(self.ports_dir / port_name, current)

    def port_names(self) -> list[str]:
        return [path.name for path in self.loader.list_port_directories(self.ports_dir)]
