"""Versioned resolution of historical port definitions.

Each port's version database lists the versions the registry has ever
published, each mapped to the git tree of the port directory at that
version. Trees are checked out on demand and the result memoized per
VersionSpec.

Version databases are not trusted the way directory structure is: a
historical tree that declares another port name is reported to the
caller instead of aborting, since the caller may be iterating candidate
versions during constraint solving.
"""

import logging

from .errors import (
    ControlFileParseError,
    DocumentParseError,
    FeatureFlagError,
    PortLoadError,
    PortNameMismatchError,
    PortNotFoundError,
    VersionDatabaseError,
    VersionNotFoundError,
)
from .models import ControlFileLocation, ResolutionContext, VersionSpec
from .overlay_resolver import load_registry_port
from .ports import VersionedPortfileProvider

logger = logging.getLogger(__name__)


class VersionedPortResolver(VersionedPortfileProvider):
    """Resolve (port name, version) pairs through the version database."""

    def __init__(self, context: ResolutionContext):
        self.context = context
        self._versions_cache: dict[str, list[VersionSpec]] = {}
        self._git_tree_cache: dict[VersionSpec, str] = {}
        self._control_cache: dict[VersionSpec, ControlFileLocation] = {}

    def get_versions(self, port_name: str) -> list[VersionSpec]:
        cached = self._versions_cache.get(port_name)
        if cached is not None:
            return cached

        versions_file = self.context.versions_file(port_name)
        if not versions_file.exists():
            return self._load_current_version(port_name)

        try:
            entries = self.context.database.parse_versions_file(port_name, versions_file)
        except DocumentParseError as e:
            raise VersionDatabaseError(versions_file, e.reason) from e

        specs: list[VersionSpec] = []
        for entry in entries:
            spec = VersionSpec(port_name, entry.version)
            specs.append(spec)
            self._git_tree_cache[spec] = entry.git_tree

        logger.debug(
            f"Loaded {len(specs)} versions of {port_name}",
            extra={"port_name": port_name, "path": str(versions_file)},
        )
        self._versions_cache[port_name] = specs
        return specs

    def _load_current_version(self, port_name: str) -> list[VersionSpec]:
        """Fall back to the single version currently available in the registry."""
        location = load_registry_port(self.context, port_name)
        if location is None:
            raise PortNotFoundError(port_name, "Could not find a definition for port")

        error = self.context.feature_checker.check(
            location.control_file, location.source_location, self.context.feature_flags
        )
        if error:
            raise FeatureFlagError(error, location.source_location)

        spec = location.version_spec
        self._control_cache[spec] = location
        specs = [spec]
        self._versions_cache[port_name] = specs
        return specs

    def get_control_file(self, spec: VersionSpec) -> ControlFileLocation:
        # Pre-populate the version caches
        self.get_versions(spec.port_name)

        cached = self._control_cache.get(spec)
        if cached is not None:
            return cached

        git_tree = self._git_tree_cache.get(spec)
        if git_tree is None:
            raise VersionNotFoundError(spec.port_name, spec.version)

        port_directory = self.context.checkout.checkout_port(spec.port_name, git_tree)
        logger.debug(
            f"Checked out {spec} from {git_tree}",
            extra={"port_name": spec.port_name, "path": str(port_directory)},
        )

        try:
            control_file = self.context.loader.try_load(port_directory)
        except ControlFileParseError as e:
            logger.error(f"Failed to parse control file for {spec}: {e}")
            raise PortLoadError(spec.port_name, port_directory, e.reason) from e

        if control_file.name != spec.port_name:
            raise PortNameMismatchError(port_directory, spec.port_name, control_file.name)

        location = ControlFileLocation(control_file, port_directory)
        self._control_cache[spec] = location
        return location
