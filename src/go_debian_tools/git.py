"""Thin wrapper around the git command-line tool."""

import logging
import subprocess
from pathlib import Path

from go_debian_tools.exceptions import GitCommandError

logger = logging.getLogger(__name__)


def run_git(repo_dir: Path, *args: str) -> str:
    """Run a git command inside a repository and return its stdout.

    Args:
        repo_dir: Working directory for the command
        *args: Arguments passed to git

    Returns:
        Standard output of the command, surrounding whitespace preserved

    Raises:
        GitCommandError: If git exits with a non-zero status or is not installed
    """
    command = ["git", *args]
    logger.debug(f"Running {' '.join(command)} in {repo_dir}")
    try:
        result = subprocess.run(
            command,
            cwd=repo_dir,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise GitCommandError(command, 127, "git not found") from e

    if result.returncode != 0:
        raise GitCommandError(command, result.returncode, result.stderr)

    return result.stdout


def list_tags(repo_dir: Path) -> list[str]:
    """Return all tag names of the repository."""
    return run_git(repo_dir, "tag", "--list").split()
