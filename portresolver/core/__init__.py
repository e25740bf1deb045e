"""Core resolution logic for the port resolution engine.

This package contains zero external dependencies and represents the
pure resolution logic of the application. Filesystem formats, version
control and registries are handled by the adapters package.
"""

from .baseline_resolver import BaselineResolver
from .models import (
    BaselineMap,
    ControlFile,
    ControlFileLocation,
    Dependency,
    FeatureParagraph,
    ResolutionContext,
    Version,
    VersionEntry,
    VersionSpec,
)
from .overlay_resolver import OverlayAndRegistryResolver
from .static_map import StaticPortMap
from .versioned_resolver import VersionedPortResolver

__all__ = [
    "BaselineMap",
    "BaselineResolver",
    "ControlFile",
    "ControlFileLocation",
    "Dependency",
    "FeatureParagraph",
    "OverlayAndRegistryResolver",
    "ResolutionContext",
    "StaticPortMap",
    "Version",
    "VersionEntry",
    "VersionSpec",
    "VersionedPortResolver",
]
