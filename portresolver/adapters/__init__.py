"""External adapters for the port resolution engine.

This package contains all external dependencies (pydantic, git, the
filesystem layout of ports and version databases) and provides
implementations of the core port interfaces.

Adapter Organization:

- manifest/: Control file loading (vcpkg.json, CONTROL) and feature flag checks
- versions/: Version database and baseline document parsing
- git/: Checkout of historical baselines and port trees
- registry/: The builtin ports tree and the registry set
- cli/: Command-line interface handlers
"""
