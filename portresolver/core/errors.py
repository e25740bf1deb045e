"""Exception hierarchy for port resolution.

Two families:

- ``PortResolutionError`` subclasses that are *recoverable*: the caller may
  legitimately probe for names or versions that do not exist, and may skip
  or retry with another candidate.
- ``FatalResolutionError`` subclasses that indicate corrupted or misconfigured
  state. The composition root turns these into a single error message and a
  non-zero exit.
"""

from pathlib import Path


class PortResolutionError(Exception):
    """Base class for every error raised by the resolvers."""


class PortNotFoundError(PortResolutionError, LookupError):
    """No source provides a definition for the requested port."""

    def __init__(self, port_name: str, detail: str = "Port definition not found"):
        self.port_name = port_name
        super().__init__(f"{detail}: {port_name}")


class VersionNotFoundError(PortResolutionError, LookupError):
    """The requested version is absent from the port's version database."""

    def __init__(self, port_name: str, version: object):
        self.port_name = port_name
        self.version = version
        super().__init__(
            f"No git object SHA for entry {port_name} at version {version}."
        )


class FeatureFlagError(PortResolutionError):
    """A control file uses functionality gated behind a disabled feature flag."""

    def __init__(self, message: str, source_location: Path):
        self.source_location = source_location
        super().__init__(message)


class PortNameMismatchError(PortResolutionError):
    """A loaded control file declares a different name than the one requested."""

    def __init__(self, path: Path, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Failed to load port from {path}: names did not match: "
            f"'{expected}' != '{actual}'"
        )


class PortLoadError(PortResolutionError):
    """A control file could not be parsed."""

    def __init__(self, port_name: str, path: Path, reason: str):
        self.port_name = port_name
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load port {port_name} from {path}: {reason}")


class ControlFileParseError(Exception):
    """Raised by control file loaders for malformed port metadata."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class DocumentParseError(Exception):
    """Raised by version database parsers for malformed documents."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


# ============================================================================
# FATAL ERRORS
# ============================================================================


class FatalResolutionError(PortResolutionError):
    """Corrupted or misconfigured state; resolution cannot safely continue."""


class OverlayConfigurationError(FatalResolutionError):
    """A configured overlay path is missing or is not a directory."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f'Path "{path}" {reason}')


class InconsistentPortError(FatalResolutionError, PortNameMismatchError):
    """Name mismatch found while loading from a trusted directory structure."""


class CorruptPortError(FatalResolutionError, PortLoadError):
    """Parse failure while loading from a trusted directory structure."""


class RegistryInconsistencyError(FatalResolutionError):
    """A registry's baseline names a version it has no directory for."""

    def __init__(self, port_name: str, version: object):
        self.port_name = port_name
        self.version = version
        super().__init__(
            f"registry is incorrect. Baseline version for port `{port_name}` "
            f"is `{version}`, but that version is not in the registry."
        )


class VersionDatabaseError(FatalResolutionError):
    """A port's version database exists but could not be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Couldn't parse versions from file: {path}: {reason}")


class BaselineError(FatalResolutionError):
    """The baseline document is missing or could not be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Couldn't parse baseline `default` from `{path}`: {reason}")


class CheckoutError(FatalResolutionError):
    """Version control could not produce the requested tree."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"git {operation} failed: {message}")
