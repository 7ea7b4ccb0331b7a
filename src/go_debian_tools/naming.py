"""Debian package naming utilities for Go import paths.

This module provides functions for normalizing Debian package names,
mapping import path hosts to their short canonical names, and deriving
source/binary package names from Go import paths.

Library packages follow the pattern golang-{host}-{path}, e.g.
"golang.org/x/text" becomes "golang-golang-x-text" and its binary
package "golang-golang-x-text-dev".
"""

import logging
import re
from enum import Enum
from functools import lru_cache

from publicsuffixlist import PublicSuffixList

logger = logging.getLogger(__name__)

# Canonical short names of known hosters (keep in alphabetical order)
KNOWN_HOSTS = {
    "bazil.org": "bazil",
    "bitbucket.org": "bitbucket",
    "blitiri.com.ar": "blitiri",
    "cloud.google.com": "googlecloud",
    "code.google.com": "googlecode",
    "codeberg.org": "codeberg",
    "filippo.io": "filippo",
    "fortio.org": "fortio",
    "fyne.io": "fyne",
    "git.sr.ht": "sourcehut",
    "github.com": "github",
    "gitlab.com": "gitlab",
    "go.bug.st": "bugst",
    "go.cypherpunks.ru": "cypherpunks",
    "go.mongodb.org": "mongodb",
    "go.opentelemetry.io": "opentelemetry",
    "go.step.sm": "step",
    "go.uber.org": "uber",
    "go4.org": "go4",
    "gocloud.dev": "gocloud",
    "golang.org": "golang",
    "google.golang.org": "google",
    "gopkg.in": "gopkg",
    "honnef.co": "honnef",
    "howett.net": "howett",
    "k8s.io": "k8s",
    "modernc.org": "modernc",
    "pault.ag": "pault",
    "rsc.io": "rsc",
    "salsa.debian.org": "debian",
    "sigs.k8s.io": "k8s-sigs",
    "software.sslmate.com": "sslmate",
}


class PackageType(str, Enum):
    """Kind of Debian package produced from a Go repository."""

    LIBRARY = "library"
    PROGRAM = "program"
    LIBRARY_PROGRAM = "library+program"
    PROGRAM_LIBRARY = "program+library"


PACKAGE_TYPE_ALIASES = {
    "library": PackageType.LIBRARY,
    "lib": PackageType.LIBRARY,
    "l": PackageType.LIBRARY,
    "dev": PackageType.LIBRARY,
    "program": PackageType.PROGRAM,
    "prog": PackageType.PROGRAM,
    "p": PackageType.PROGRAM,
    "library+program": PackageType.LIBRARY_PROGRAM,
    "lib+prog": PackageType.LIBRARY_PROGRAM,
    "l+p": PackageType.LIBRARY_PROGRAM,
    "both": PackageType.LIBRARY_PROGRAM,
    "program+library": PackageType.PROGRAM_LIBRARY,
    "prog+lib": PackageType.PROGRAM_LIBRARY,
    "p+l": PackageType.PROGRAM_LIBRARY,
    "combined": PackageType.PROGRAM_LIBRARY,
}


def parse_package_type(value: str) -> PackageType:
    """Parse a package type name or one of its aliases.

    Raises:
        ValueError: If the value is not recognized
    """
    try:
        return PACKAGE_TYPE_ALIASES[value.strip().lower()]
    except KeyError:
        raise ValueError(f"Package type {value!r} not recognized") from None


def normalize_debian_package_name(name: str) -> str:
    """Normalize a string into a valid Debian package name.

    Package names must consist only of lower case letters, digits, plus,
    minus and periods, be at least two characters long and start with an
    alphanumeric character. This function:
    - Converts to lowercase
    - Replaces underscores with hyphens
    - Drops any other invalid character
    - Strips leading/trailing hyphens

    Args:
        name: The name to normalize

    Returns:
        Normalized package name, or "TODO" if the result would be too short

    Examples:
        >>> normalize_debian_package_name("golang-github-Foo_Bar")
        "golang-github-foo-bar"
        >>> normalize_debian_package_name("x")
        "TODO"
    """
    result = name.lower().replace("_", "-")
    result = re.sub(r"[^a-z0-9.+-]", "", result)
    result = result.strip("-")

    if len(result) < 2:
        return "TODO"

    return result


def short_host_name(
    import_path: str,
    allow_unknown_hoster: bool = False,
    extra_hosts: dict[str, str] | None = None,
) -> str:
    """Map the host of an import path to its canonical short name.

    Args:
        import_path: Go import path (e.g., "github.com/foo/bar")
        allow_unknown_hoster: Derive a name for hosts not in the table
        extra_hosts: Additional host to short name mappings

    Returns:
        Short host name (e.g., "github")

    Raises:
        ValueError: If the host is unknown and unknown hosts are not allowed
    """
    fqdn = import_path.split("/", 1)[0]

    if extra_hosts and fqdn in extra_hosts:
        return extra_hosts[fqdn]
    if fqdn in KNOWN_HOSTS:
        return KNOWN_HOSTS[fqdn]

    if not allow_unknown_hoster:
        raise ValueError(f"Unknown hoster {fqdn!r}")

    # Drop the public suffix (e.g. ".co.uk")
    suffix = _public_suffix_list().publicsuffix(fqdn)
    host = fqdn
    if suffix and fqdn.endswith(f".{suffix}"):
        host = fqdn[: -len(suffix) - 1]
    logger.warning(
        f"Using {host!r} as canonical hostname for {fqdn!r}. "
        "Double-check that the resulting package name is sane."
    )
    return host


def debian_name_from_import_path(
    import_path: str,
    package_type: PackageType = PackageType.LIBRARY,
    program_name: str | None = None,
    allow_unknown_hoster: bool = False,
    extra_hosts: dict[str, str] | None = None,
) -> str:
    """Compute the Debian source package name for a Go repository.

    Args:
        import_path: Repository root import path (e.g., "golang.org/x/text")
        package_type: Kind of package being created
        program_name: Custom name for program packages
        allow_unknown_hoster: Derive a host name for unknown hosters
        extra_hosts: Additional host to short name mappings

    Returns:
        Source package name

    Raises:
        ValueError: If the host is unknown and unknown hosts are not allowed

    Examples:
        >>> debian_name_from_import_path("golang.org/x/text")
        "golang-golang-x-text"
        >>> debian_name_from_import_path("github.com/cli/cli", PackageType.PROGRAM, "gh")
        "gh"
    """
    parts = import_path.split("/")

    if package_type in (PackageType.PROGRAM, PackageType.PROGRAM_LIBRARY):
        if program_name:
            return normalize_debian_package_name(program_name)
        return normalize_debian_package_name(parts[-1])

    parts[0] = short_host_name(import_path, allow_unknown_hoster, extra_hosts)
    return normalize_debian_package_name("golang-" + "-".join(parts))


def library_binary_name(source_name: str) -> str:
    """Return the -dev binary package name for a library source package."""
    return f"{source_name}-dev"


def orig_tarball_name(source_name: str, upstream_version: str, compression: str = "xz") -> str:
    """Return the file name of the upstream orig tarball.

    Examples:
        >>> orig_tarball_name("golang-github-foo-bar", "1.2.3")
        "golang-github-foo-bar_1.2.3.orig.tar.xz"
    """
    return f"{source_name}_{upstream_version}.orig.tar.{compression}"


@lru_cache(maxsize=None)
def _public_suffix_list() -> PublicSuffixList:
    return PublicSuffixList()
