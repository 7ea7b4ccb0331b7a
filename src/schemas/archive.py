"""Pydantic models for Debian ftp-master API payloads."""

from pydantic import BaseModel, ConfigDict, Field


class GoImportPathEntry(BaseModel):
    """One entry of the binary/by_metadata/Go-Import-Path listing.

    `metadata_value` is the raw XS-Go-Import-Path field, which may hold
    several comma-separated import paths.
    """

    model_config = ConfigDict(extra="ignore")

    binary: str = Field(min_length=1, description="Binary package name")
    source: str = Field(min_length=1, description="Source package name")
    metadata_value: str = Field(description="XS-Go-Import-Path value")

    def import_paths(self) -> list[str]:
        """Return the individual import paths of this entry."""
        return [p.strip() for p in self.metadata_value.split(",") if p.strip()]


class NewSourceEntry(BaseModel):
    """One entry of the sources_in_suite/new listing."""

    model_config = ConfigDict(extra="ignore")

    source: str = Field(min_length=1, description="Source package name")
    version: str = Field(min_length=1, description="Version waiting in NEW")


class DebianPackage(BaseModel):
    """A Go library already available in Debian."""

    model_config = ConfigDict(frozen=True)

    binary: str = Field(description="Binary package name (the -dev package)")
    source: str = Field(description="Source package name")
