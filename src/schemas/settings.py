"""Pydantic models for validating the go-debian-tools settings file."""

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

DEFAULT_GOLANG_BINARIES_URL = (
    "https://api.ftp-master.debian.org/binary/by_metadata/Go-Import-Path"
)
DEFAULT_SOURCES_IN_NEW_URL = "https://api.ftp-master.debian.org/sources_in_suite/new"

# Modules excluded from estimate output, with the reason shown in the log
DEFAULT_MODULE_BLOCKLIST = {
    "github.com/arduino/go-win32-utils": "Windows only",
    "github.com/Microsoft/go-winio": "Windows only",
}


class ToolSettings(BaseModel):
    """Settings shared by all go-debian-tools commands.

    Every field has a default, so an absent settings file yields a fully
    usable configuration. Unknown keys are rejected to catch typos.
    """

    model_config = ConfigDict(extra="forbid")

    golang_binaries_url: HttpUrl = Field(
        default=DEFAULT_GOLANG_BINARIES_URL,
        validate_default=True,
        description="ftp-master endpoint listing binaries by Go-Import-Path",
    )
    sources_in_new_url: HttpUrl = Field(
        default=DEFAULT_SOURCES_IN_NEW_URL,
        validate_default=True,
        description="ftp-master endpoint listing sources waiting in NEW",
    )
    request_timeout: float = Field(
        default=60.0, gt=0, description="HTTP timeout in seconds"
    )
    resolve_vanity_imports: bool = Field(
        default=True,
        description="Query ?go-get=1 pages to find repository roots of vanity import paths",
    )
    module_blocklist: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_MODULE_BLOCKLIST),
        description="Modules ignored by estimate, mapped to the reason",
    )
    extra_known_hosts: dict[str, str] = Field(
        default_factory=dict,
        description="Additional hostname to short name mappings for package naming",
    )

    @field_validator("extra_known_hosts")
    @classmethod
    def validate_short_names(cls, v: dict[str, str]) -> dict[str, str]:
        """Validate that short host names are usable in package names."""
        for host, short in v.items():
            if not short or not short.replace("-", "").isalnum():
                raise ValueError(
                    f"Short name for {host!r} must be alphanumeric (hyphens allowed), got {short!r}"
                )
        return v
