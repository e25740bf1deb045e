"""Control file adapters.

- ManifestControlFileLoader: reads ``vcpkg.json`` manifests and legacy
  ``CONTROL`` paragraph files
- ManifestFeatureFlagChecker: gates versioning constructs on feature flags
"""

from .feature_flags import ManifestFeatureFlagChecker
from .loader import ManifestControlFileLoader

__all__ = ["ManifestControlFileLoader", "ManifestFeatureFlagChecker"]
