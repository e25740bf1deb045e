"""Feature flag check for control files.

Versioning constructs in manifests (``version>=`` constraints,
``overrides`` and ``builtin-baseline``) are only honored when the
``versions`` feature flag is enabled.
"""

from collections.abc import Collection
from pathlib import Path

from portresolver.core.models import ControlFile
from portresolver.core.ports import FeatureFlagCheckerPort

VERSIONS_FLAG = "versions"


class ManifestFeatureFlagChecker(FeatureFlagCheckerPort):
    """Rejects control files that need a disabled feature flag."""

    def check(
        self, control_file: ControlFile, location: Path, flags: Collection[str]
    ) -> str | None:
        if VERSIONS_FLAG in flags or not control_file.uses_versioning:
            return None

        constructs = []
        if any(dep.minimum_version for dep in control_file.all_dependencies):
            constructs.append("version>=")
        if control_file.overrides:
            constructs.append("overrides")
        if control_file.builtin_baseline:
            constructs.append("builtin-baseline")
        return (
            f"Port {control_file.name} at {location} uses {', '.join(constructs)}, "
            f"which requires the `{VERSIONS_FLAG}` feature flag"
        )
