"""Registry adapters.

- BuiltinRegistry: the ``ports/`` tree of the local repository
- RegistrySet: default registry plus registries scoped to named ports
"""

from .builtin import BuiltinPortEntry, BuiltinRegistry
from .registry_set import RegistrySet

__all__ = ["BuiltinPortEntry", "BuiltinRegistry", "RegistrySet"]
