"""CLI command implementations for port resolution.

This adapter maps CLI commands (resolve, list, baseline, versions, show)
to the driving ports of the core. It handles CLI-specific formatting and
error reporting.

Recoverable resolution errors (missing ports or versions, feature flag
failures, stale version databases) are returned as error results. Fatal
errors propagate to the composition root.
"""

import logging
from typing import Any

from portresolver.core.errors import FatalResolutionError, PortResolutionError
from portresolver.core.models import ControlFileLocation, Version, VersionSpec
from portresolver.core.ports import (
    BaselineProvider,
    PortfileProvider,
    VersionedPortfileProvider,
)

logger = logging.getLogger(__name__)


def location_to_dict(location: ControlFileLocation) -> dict[str, Any]:
    """Render a resolved port as a JSON-serializable dictionary."""
    control_file = location.control_file
    return {
        "name": control_file.name,
        "version": str(control_file.version),
        "description": control_file.description,
        "dependencies": [dep.name for dep in control_file.dependencies],
        "default_features": list(control_file.default_features),
        "features": [feature.name for feature in control_file.features],
        "supports": control_file.supports,
        "source_location": str(location.source_location),
    }


class CLICommandHandler:
    """Handles CLI commands by delegating to the resolver ports."""

    def __init__(
        self,
        portfiles: PortfileProvider,
        baselines: BaselineProvider,
        versioned: VersionedPortfileProvider,
    ):
        """Initialize the CLI command handler.

        Args:
            portfiles: Resolver for current port definitions.
            baselines: Resolver for default versions.
            versioned: Resolver for historical port definitions.
        """
        self.portfiles = portfiles
        self.baselines = baselines
        self.versioned = versioned

    @staticmethod
    def _error(operation: str, error: PortResolutionError, **fields: Any) -> dict[str, Any]:
        if isinstance(error, FatalResolutionError):
            raise error
        logger.error(f"{operation} failed: {error}")
        return {"status": "error", "operation": operation, **fields, "message": str(error)}

    def resolve_port(self, port_name: str) -> dict[str, Any]:
        """Resolve the current definition of a port.

        Args:
            port_name: Name of the port.

        Returns:
            Dictionary with status and the resolved port.
        """
        try:
            location = self.portfiles.resolve(port_name)
        except PortResolutionError as e:
            return self._error("resolve", e, port_name=port_name)

        return {
            "status": "success",
            "operation": "resolve",
            "port": location_to_dict(location),
        }

    def list_ports(self) -> dict[str, Any]:
        """List every port known to overlays and registries."""
        try:
            locations = self.portfiles.resolve_all()
        except PortResolutionError as e:
            return self._error("list", e)

        ports = sorted(
            ({"name": loc.name, "version": str(loc.version)} for loc in locations),
            key=lambda port: port["name"],
        )
        return {
            "status": "success",
            "operation": "list",
            "total": len(ports),
            "ports": ports,
        }

    def get_baseline(self, port_name: str) -> dict[str, Any]:
        """Report the default version of a port."""
        try:
            version = self.baselines.get_baseline_version(port_name)
        except PortResolutionError as e:
            return self._error("baseline", e, port_name=port_name)

        return {
            "status": "success",
            "operation": "baseline",
            "port_name": port_name,
            "baseline": str(version) if version is not None else None,
        }

    def list_versions(self, port_name: str) -> dict[str, Any]:
        """List the known versions of a port in version database order."""
        try:
            specs = self.versioned.get_versions(port_name)
        except PortResolutionError as e:
            return self._error("versions", e, port_name=port_name)

        return {
            "status": "success",
            "operation": "versions",
            "port_name": port_name,
            "versions": [str(spec.version) for spec in specs],
        }

    def show_version(self, port_name: str, version: str) -> dict[str, Any]:
        """Resolve a specific historical version of a port.

        Args:
            port_name: Name of the port.
            version: Version text, optionally with ``#port-version``.

        Returns:
            Dictionary with status and the resolved port.
        """
        try:
            spec = VersionSpec(port_name, Version.parse(version))
        except ValueError as e:
            logger.error(f"Invalid version {version!r}: {e}")
            return {
                "status": "error",
                "operation": "show",
                "port_name": port_name,
                "message": f"Invalid version {version!r}: {e}",
            }

        try:
            location = self.versioned.get_control_file(spec)
        except PortResolutionError as e:
            return self._error("show", e, port_name=port_name, version=version)

        return {
            "status": "success",
            "operation": "show",
            "port": location_to_dict(location),
        }
