"""Baseline resolution: the default version of each port.

The baseline document is loaded at most once, on first use, from one of:

1. an explicit baseline commit, checked out through version control;
2. the local ``port_versions/baseline.json``;
3. nowhere: every lookup falls back to the port's current version as
   resolved by an overlay-less OverlayAndRegistryResolver.
"""

import logging
from functools import cached_property
from pathlib import Path
from types import MappingProxyType

from .errors import (
    BaselineError,
    DocumentParseError,
    FatalResolutionError,
    PortResolutionError,
)
from .models import BaselineMap, ResolutionContext, Version
from .overlay_resolver import OverlayAndRegistryResolver
from .ports import BaselineProvider

logger = logging.getLogger(__name__)


class BaselineResolver(BaselineProvider):
    """Lazily loaded baseline with a live-port fallback."""

    def __init__(self, context: ResolutionContext, baseline: str | None = None):
        """Initialize the resolver.

        Args:
            context: Resolution context shared by all resolvers.
            baseline: Optional commit pinning the baseline document.
        """
        self.context = context
        self.baseline = baseline
        self._fallback: OverlayAndRegistryResolver | None = None

    def _parse(self, path: Path) -> BaselineMap:
        try:
            baselines = self.context.database.parse_baseline_file(path, "default")
        except DocumentParseError as e:
            raise BaselineError(path, e.reason) from e
        return MappingProxyType(dict(baselines))

    @cached_property
    def baseline_map(self) -> BaselineMap | None:
        """The baseline map, or None when running in fallback mode."""
        if self.baseline:
            baseline_file = self.context.checkout.checkout_baseline(self.baseline)
            if not baseline_file.exists():
                raise BaselineError(
                    baseline_file, "Baseline database file does not exist"
                )
            logger.debug(f"Using baseline {self.baseline} from {baseline_file}")
            return self._parse(baseline_file)

        baseline_file = self.context.baseline_file
        if baseline_file.exists():
            logger.debug(f"Using local baseline {baseline_file}")
            return self._parse(baseline_file)

        # No baseline file in the current tree: use current port versions
        logger.debug("No baseline file found, falling back to current port versions")
        self._fallback = OverlayAndRegistryResolver(self.context)
        return None

    def get_baseline_version(self, port_name: str) -> Version | None:
        baselines = self.baseline_map
        if baselines is not None:
            return baselines.get(port_name)

        assert self._fallback is not None
        try:
            location = self._fallback.resolve(port_name)
        except FatalResolutionError:
            raise
        except PortResolutionError as e:
            logger.debug(f"No current version for {port_name}: {e}")
            return None
        return location.version
