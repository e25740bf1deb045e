"""Overlay and registry resolution of current port definitions.

Resolves a port name against a precedence chain: overlay directories in
configured order, then the registry responsible for the port. Directory
structure is trusted here, so a port whose declared name disagrees with
the directory it was found in is a fatal inconsistency.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from .errors import (
    ControlFileParseError,
    CorruptPortError,
    FeatureFlagError,
    InconsistentPortError,
    OverlayConfigurationError,
    PortNotFoundError,
    RegistryInconsistencyError,
)
from .models import ControlFileLocation, ResolutionContext
from .ports import PortfileProvider, RegistryPort

logger = logging.getLogger(__name__)


def _load_trusted(
    context: ResolutionContext, port_name: str, directory: Path
) -> ControlFileLocation:
    """Load a port from a trusted location and require the declared name."""
    try:
        control_file = context.loader.try_load(directory)
    except ControlFileParseError as e:
        raise CorruptPortError(port_name, directory, e.reason) from e
    if control_file.name != port_name:
        raise InconsistentPortError(directory, port_name, control_file.name)
    return ControlFileLocation(control_file, directory)


def load_registry_port(
    context: ResolutionContext,
    port_name: str,
    registry: RegistryPort | None = None,
) -> ControlFileLocation | None:
    """Load the baseline version of a port from its registry.

    Args:
        context: Resolution context.
        port_name: Port to load.
        registry: Registry to use. Defaults to the one responsible for the port.

    Returns:
        The loaded port, or None if the registry has no baseline or no entry.

    Raises:
        RegistryInconsistencyError: If the baseline version has no directory.
        InconsistentPortError: If the loaded port declares another name.
        CorruptPortError: If the port's control file is malformed.
    """
    if registry is None:
        registry = context.registries.registry_for_port(port_name)
        if registry is None:
            logger.debug(f"Failed to find registry for port: `{port_name}`.")
            return None

    baseline_version = registry.get_baseline_version(port_name)
    entry = registry.get_port_entry(port_name)
    if entry is None or baseline_version is None:
        logger.debug(
            f"Failed to find port `{port_name}` in registry",
            extra={
                "port_name": port_name,
                "entry_found": entry is not None,
                "baseline_found": baseline_version is not None,
            },
        )
        return None

    port_directory = entry.get_port_directory(baseline_version)
    if not port_directory:
        raise RegistryInconsistencyError(port_name, baseline_version)
    return _load_trusted(context, port_name, port_directory)


class OverlayAndRegistryResolver(PortfileProvider):
    """Resolve current port definitions from overlays, then registries.

    Results are cached per name for the lifetime of the resolver. Feature
    flag failures are reported to the caller and never cached.
    """

    def __init__(self, context: ResolutionContext, overlay_ports: Iterable[str] = ()):
        """Initialize the resolver and validate the overlay configuration.

        Args:
            context: Resolution context shared by all resolvers.
            overlay_ports: Overlay paths in precedence order. Relative paths
                are taken relative to the context's original working directory.
                Empty strings are ignored.

        Raises:
            OverlayConfigurationError: If an overlay is missing or not a directory.
        """
        self.context = context
        self.overlay_ports: list[Path] = []
        self._cache: dict[str, ControlFileLocation] = {}

        for overlay_path in overlay_ports:
            if not overlay_path:
                continue
            overlay = Path(overlay_path)
            if not overlay.is_absolute():
                overlay = context.original_cwd / overlay
            overlay = overlay.resolve()

            logger.debug(f"Using overlay: {overlay}")

            if not overlay.exists():
                raise OverlayConfigurationError(overlay, "does not exist")
            if not overlay.is_dir():
                raise OverlayConfigurationError(overlay, "must be a directory")
            self.overlay_ports.append(overlay)

    def _try_load_overlay_port(self, port_name: str) -> ControlFileLocation | None:
        loader = self.context.loader
        for ports_dir in self.overlay_ports:
            # The overlay is itself a single port
            if loader.is_port_directory(ports_dir):
                try:
                    control_file = loader.try_load(ports_dir)
                except ControlFileParseError as e:
                    raise CorruptPortError(port_name, ports_dir, e.reason) from e
                if control_file.name == port_name:
                    return ControlFileLocation(control_file, ports_dir)
                continue

            port_dir = ports_dir / port_name
            if loader.is_port_directory(port_dir):
                return _load_trusted(self.context, port_name, port_dir)
        return None

    def resolve(self, port_name: str) -> ControlFileLocation:
        cached = self._cache.get(port_name)
        if cached is not None:
            return cached

        location = self._try_load_overlay_port(port_name)
        if location is None:
            location = load_registry_port(self.context, port_name)
        if location is None:
            raise PortNotFoundError(port_name)

        error = self.context.feature_checker.check(
            location.control_file, location.source_location, self.context.feature_flags
        )
        if error:
            raise FeatureFlagError(error, location.source_location)

        self._cache[port_name] = location
        return location

    def resolve_all(self) -> list[ControlFileLocation]:
        """Reload the cache with every port from every overlay and registry.

        Overlays beat registries, and earlier overlays beat later ones.
        """
        self._cache.clear()
        loaded: list[ControlFileLocation] = []
        loader = self.context.loader

        def add(location: ControlFileLocation) -> None:
            if location.name not in self._cache:
                self._cache[location.name] = location
                loaded.append(location)

        for ports_dir in self.overlay_ports:
            if loader.is_port_directory(ports_dir):
                try:
                    control_file = loader.try_load(ports_dir)
                except ControlFileParseError as e:
                    raise CorruptPortError(ports_dir.name, ports_dir, e.reason) from e
                add(ControlFileLocation(control_file, ports_dir))
                continue

            for port_dir in loader.list_port_directories(ports_dir):
                try:
                    control_file = loader.try_load(port_dir)
                except ControlFileParseError as e:
                    raise CorruptPortError(port_dir.name, port_dir, e.reason) from e
                add(ControlFileLocation(control_file, port_dir))

        for registry in self.context.registries.registries():
            for port_name in registry.port_names():
                if port_name in self._cache:
                    continue
                if self.context.registries.registry_for_port(port_name) is not registry:
                    continue
                location = load_registry_port(self.context, port_name, registry)
                if location is not None:
                    add(location)

        logger.info(
            f"Loaded {len(loaded)} ports",
            extra={"overlay_count": len(self.overlay_ports)},
        )
        return loaded
