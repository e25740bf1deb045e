"""JSON version database adapter.

Implements VersionDatabasePort for the documents under ``port_versions/``.

Version database (``port_versions/z-/zlib.json``)::

    {"versions": [
        {"version-string": "1.2.11", "port-version": 9, "git-tree": "..."},
        ...
    ]}

Baseline document (``port_versions/baseline.json``)::

    {"default": {"zlib": {"baseline": "1.2.11", "port-version": 9}}}
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from portresolver.core.errors import DocumentParseError
from portresolver.core.models import BaselineMap, Version, VersionEntry
from portresolver.core.ports import VersionDatabasePort

from .schema import VersionFields

logger = logging.getLogger(__name__)


class VersionEntryModel(VersionFields):
    """One entry of a ``versions`` array."""

    git_tree: str = Field(alias="git-tree", min_length=1)


class VersionsDocument(BaseModel):
    """A per-port version database."""

    versions: list[VersionEntryModel]


class BaselineEntryModel(BaseModel):
    """One port's entry in a baseline."""

    model_config = ConfigDict(populate_by_name=True)

    baseline: str = Field(min_length=1)
    port_version: int = Field(default=0, alias="port-version", ge=0)


class JsonVersionDatabase(VersionDatabasePort):
    """Reads version databases and baselines from JSON files."""

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentParseError(path, f"failed to read file: {e}") from e
        except json.JSONDecodeError as e:
            raise DocumentParseError(path, f"invalid JSON: {e}") from e

    def parse_versions_file(self, port_name: str, path: Path) -> list[VersionEntry]:
        data = self._read_json(path)
        try:
            document = VersionsDocument.model_validate(data)
            entries = [
                VersionEntry(entry.to_version(), entry.git_tree)
                for entry in document.versions
            ]
        except (ValidationError, ValueError) as e:
            raise DocumentParseError(path, f"invalid versions for {port_name}: {e}") from e

        logger.debug(
            f"Parsed {len(entries)} version entries",
            extra={"port_name": port_name, "path": str(path)},
        )
        return entries

    def parse_baseline_file(self, path: Path, baseline: str = "default") -> BaselineMap:
        data = self._read_json(path)
        if not isinstance(data, dict):
            raise DocumentParseError(path, "baseline document must be a JSON object")
        if baseline not in data:
            raise DocumentParseError(path, f"baseline `{baseline}` not found")

        raw_entries = data[baseline]
        if not isinstance(raw_entries, dict):
            raise DocumentParseError(path, f"baseline `{baseline}` must be an object")

        baselines: dict[str, Version] = {}
        for port_name, raw in raw_entries.items():
            try:
                entry = BaselineEntryModel.model_validate(raw)
                baselines[port_name] = Version(entry.baseline, entry.port_version)
            except (ValidationError, ValueError) as e:
                raise DocumentParseError(
                    path, f"invalid baseline entry for {port_name}: {e}"
                ) from e
        return baselines
