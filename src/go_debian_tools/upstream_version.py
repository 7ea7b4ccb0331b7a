"""Upstream version resolution from git history.

Derives the Debian upstream_version of a checkout from its tags and
commits. A tagged HEAD yields the tag itself (e.g. "v1.0-rc1" becomes
"1.0~rc1"); anything else yields a snapshot version of the form
{base}git{YYYYMMDD}.{hash}, where base is "0.0~" without any tag and
"{tag}+" after the latest tag, so that dpkg ordering follows history:

    1.0~rc1 < 1.0 < 1.0+git20240102.abc1234 < 1.1
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from go_debian_tools.exceptions import GitCommandError, OutputFormatError
from go_debian_tools.git import list_tags, run_git

logger = logging.getLogger(__name__)

# Hash part of "git describe --long" output, e.g. "v4.10.2-232-g9f107c8"
DESCRIBE_PATTERN = re.compile(r"-\d+-g([0-9a-f]+)\s*$")

# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
# with a leading "v" as used by Go modules
SEMVER_PATTERN = re.compile(
    r"^v(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<buildmetadata>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# Upstream pre-release markers; the separator before them becomes "~".
# Must stay in sync with the uversionmangle rule used in debian/watch files.
PRERELEASE_PATTERN = re.compile(r"(\d)[_.\-+]?(RC|rc|pre|dev|beta|alpha)[.]?(\d*)$")

# Tags of nested modules ("sub/dir/v1.2.3") do not version the repository
SUBMODULE_TAG_EXCLUDE = "*/v*"

NO_RELEASE_BASE = "0.0~"


@dataclass
class UpstreamInfo:
    """Result of resolving the upstream version of a checkout."""

    version: str
    commit_ish: str
    tag: str | None = None
    has_release: bool = False
    is_release: bool = False


def is_semver(tag: str) -> bool:
    """Check whether a tag is a Go-style semantic version (vMAJOR.MINOR.PATCH)."""
    return SEMVER_PATTERN.match(tag) is not None


def mangle_upstream_version(tag: str) -> str:
    """Convert a release tag into a Debian upstream version.

    Pre-release markers are joined with "~" so they sort before the final
    release, and any leading non-numeric prefix is removed.

    Args:
        tag: Tag name (e.g., "v1.0-rc1")

    Returns:
        Debian upstream version (e.g., "1.0~rc1")

    Examples:
        >>> mangle_upstream_version("v7.8")
        "7.8"
        >>> mangle_upstream_version("v1.0-rc1")
        "1.0~rc1"
        >>> mangle_upstream_version("release-2.0beta.3")
        "2.0~beta3"
    """
    mangled = PRERELEASE_PATTERN.sub(r"\1~\2\3", tag)
    return re.sub(r"^\D+", "", mangled)


def find_latest_tag(repo_dir: Path, preferred_rev: str | None = None) -> str | None:
    """Find the tag to base the version on.

    A preferred revision is honoured only if it names an existing tag.
    Otherwise the most recent tag reachable from HEAD is used, ignoring
    tags of nested modules.

    Returns:
        Tag name, or None if the repository has no usable tag
    """
    if preferred_rev:
        try:
            if preferred_rev in list_tags(repo_dir):
                return preferred_rev
        except GitCommandError as e:
            logger.debug(f"Could not list tags: {e}")

    try:
        out = run_git(
            repo_dir,
            "describe",
            "--abbrev=0",
            "--tags",
            "--exclude",
            SUBMODULE_TAG_EXCLUDE,
        )
    except GitCommandError:
        return None

    tag = out.strip()
    return tag or None


def count_commits_since(repo_dir: Path, tag: str) -> int:
    """Count commits on HEAD that are not reachable from the tag.

    Raises:
        GitCommandError: If git rev-list fails
        OutputFormatError: If the count is not an integer
    """
    out = run_git(repo_dir, "rev-list", "--count", f"{tag}..HEAD").strip()
    try:
        return int(out)
    except ValueError as e:
        raise OutputFormatError(f"Cannot parse commit count {out!r}") from e


def head_commit_date(repo_dir: Path) -> str:
    """Return the HEAD committer date as YYYYMMDD in UTC.

    Raises:
        GitCommandError: If git log fails
        OutputFormatError: If the timestamp is not an integer
    """
    out = run_git(
        repo_dir, "log", "--pretty=format:%ct", "-n1", "--no-show-signature"
    ).strip()
    try:
        timestamp = int(out)
    except ValueError as e:
        raise OutputFormatError(f"Cannot parse commit timestamp {out!r}") from e
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y%m%d")


def describe_head(repo_dir: Path) -> tuple[str, str]:
    """Identify HEAD for a snapshot version.

    Returns:
        Tuple of (commit_ish, abbreviated hash). The commit-ish is the
        "git describe --long --tags" output, or the bare hash if the
        repository has no tags at all.

    Raises:
        GitCommandError: If git rev-parse fails
        OutputFormatError: If the describe output has an unexpected format
    """
    try:
        described = run_git(repo_dir, "describe", "--long", "--tags")
    except GitCommandError:
        short_hash = run_git(repo_dir, "rev-parse", "--short", "HEAD").strip()
        return short_hash, short_hash

    match = DESCRIBE_PATTERN.search(described)
    if match is None:
        raise OutputFormatError(
            f"git describe output {described!r} does not match expected format"
        )
    return described.strip(), match.group(1)


def resolve_upstream_version(
    repo_dir: Path,
    preferred_rev: str | None = None,
    force_prerelease: bool = False,
) -> UpstreamInfo:
    """Determine the upstream version to package from a git checkout.

    Args:
        repo_dir: Path to the git checkout
        preferred_rev: Revision requested by the user, if any
        force_prerelease: Package HEAD as a snapshot even if a tag matches

    Returns:
        UpstreamInfo with the version and how it was derived

    Raises:
        GitCommandError: If a required git invocation fails
        OutputFormatError: If git output cannot be parsed
    """
    tag = find_latest_tag(repo_dir, preferred_rev)
    tag_version = None

    if tag is not None:
        logger.info(f"Found latest tag {tag!r}")
        if not is_semver(tag):
            logger.warning(f"Latest tag {tag!r} is not a valid SemVer version")

        commits_ahead = count_commits_since(repo_dir, tag)
        if commits_ahead == 0:
            logger.info(f"Latest tag {tag!r} matches HEAD")
        else:
            logger.info(f"HEAD is ahead of {tag!r} by {commits_ahead} commits")

        tag_version = mangle_upstream_version(tag)

        if commits_ahead == 0 and not force_prerelease:
            return UpstreamInfo(
                version=tag_version,
                commit_ish=tag,
                tag=tag,
                has_release=True,
                is_release=True,
            )
        if force_prerelease:
            logger.info("Packaging HEAD as a prerelease as requested")

    base = NO_RELEASE_BASE if tag_version is None else f"{tag_version}+"
    date = head_commit_date(repo_dir)
    commit_ish, short_hash = describe_head(repo_dir)

    return UpstreamInfo(
        version=f"{base}git{date}.{short_hash}",
        commit_ish=commit_ish,
        tag=tag,
        has_release=tag is not None,
        is_release=False,
    )
