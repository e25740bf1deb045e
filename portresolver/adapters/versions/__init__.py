"""Version database adapters.

Implementations parse the JSON documents stored under ``port_versions/``:
per-port version databases and the baseline document.
"""

from .json_database import JsonVersionDatabase

__all__ = ["JsonVersionDatabase"]
