"""Pydantic schema shared by manifests and version documents.

A version is declared with exactly one of four scheme-specific keys,
optionally accompanied by ``port-version``.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from portresolver.core.models import Version

VERSION_KEYS = ("version", "version-string", "version-semver", "version-date")


class VersionFields(BaseModel):
    """The version keys of a manifest, version entry or baseline entry."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    version: str | None = None
    version_string: str | None = Field(default=None, alias="version-string")
    version_semver: str | None = Field(default=None, alias="version-semver")
    version_date: str | None = Field(default=None, alias="version-date")
    port_version: int = Field(default=0, alias="port-version", ge=0)

    @model_validator(mode="after")
    def validate_single_scheme(self) -> "VersionFields":
        """Ensure exactly one version key is present."""
        declared = [
            value
            for value in (
                self.version,
                self.version_string,
                self.version_semver,
                self.version_date,
            )
            if value is not None
        ]
        if len(declared) != 1:
            raise ValueError(
                f"expected exactly one of {', '.join(VERSION_KEYS)}, "
                f"found {len(declared)}"
            )
        return self

    def to_version(self) -> Version:
        text = next(
            value
            for value in (
                self.version,
                self.version_string,
                self.version_semver,
                self.version_date,
            )
            if value is not None
        )
        return Version(text, self.port_version)
