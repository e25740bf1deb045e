"""Fake/mock implementations of core ports for testing.

These in-memory implementations allow resolution logic to be tested
without real port trees, JSON documents or git:

- FakeControlFileLoader: Port directories mapped to canned control files
- FakeRegistry / FakeRegistrySet: In-memory registry capability
- FakeVersionDatabase: Canned version databases and baselines
- FakeCheckout: Canned checkouts, recording every request
- FakeFeatureFlagChecker: Rejects configured port names
- FakeEnvironment: All of the above bound into a ResolutionContext
"""

from .checkout import FakeCheckout
from .database import FakeVersionDatabase
from .environment import FakeEnvironment, make_control_file
from .feature_flags import FakeFeatureFlagChecker
from .loader import FakeControlFileLoader
from .registry import FakePortEntry, FakeRegistry, FakeRegistrySet

__all__ = [
    "FakeCheckout",
    "FakeControlFileLoader",
    "FakeEnvironment",
    "FakeFeatureFlagChecker",
    "FakePortEntry",
    "FakeRegistry",
    "FakeRegistrySet",
    "FakeVersionDatabase",
    "make_control_file",
]
