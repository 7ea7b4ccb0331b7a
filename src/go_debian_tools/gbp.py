"""Invocations of git-buildpackage."""

import logging
import subprocess
from pathlib import Path

from go_debian_tools.exceptions import GbpCommandError

logger = logging.getLogger(__name__)


def run_gbp(cwd: Path, *args: str) -> str:
    """Run a gbp command and return its stdout.

    Args:
        cwd: Working directory for the command
        *args: Arguments passed to gbp

    Returns:
        Standard output of the command

    Raises:
        GbpCommandError: If gbp exits with a non-zero status or is not installed
    """
    command = ["gbp", *args]
    logger.debug(f"Running {' '.join(command)} in {cwd}")
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise GbpCommandError(command, 127, "gbp not found") from e

    if result.returncode != 0:
        raise GbpCommandError(command, result.returncode, result.stderr)

    return result.stdout


def clone_package(package: str, cwd: Path) -> Path:
    """Clone the packaging repository of a Debian source package.

    Uses the Vcs-Git field of the package (`vcsgit:` URL scheme) and
    downloads the orig tarball after cloning.

    Args:
        package: Debian source package name (e.g., "golang-github-foo-bar")
        cwd: Directory to clone into

    Returns:
        Path of the new checkout
    """
    logger.info(f"Cloning {package}")
    run_gbp(cwd, "clone", f"vcsgit:{package}", "--postclone=origtargz")
    return cwd / package
