"""Shared fixtures for go-debian-tools tests."""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from schemas.archive import DebianPackage


class GitRepo:
    """A scratch git repository with deterministic commit dates."""

    def __init__(self, path: Path):
        self.path = path
        self._commits = 0
        self.git("init", "-q")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "user.name", "Test")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")

    def git(self, *args: str, date: str = "2015-04-20 10:00:00 +0000") -> str:
        env = dict(os.environ)
        env.update(
            GIT_AUTHOR_DATE=date,
            GIT_COMMITTER_DATE=date,
            TZ="UTC",
        )
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def commit(self, date: str = "2015-04-20 10:00:00 +0000") -> str:
        """Create a commit touching a file and return its abbreviated hash."""
        self._commits += 1
        (self.path / "file.txt").write_text(f"change {self._commits}\n")
        self.git("add", "file.txt")
        self.git("commit", "-q", "-m", f"commit {self._commits}", date=date)
        return self.git("rev-parse", "--short", "HEAD").strip()

    def tag(self, name: str) -> None:
        self.git("tag", name)


@pytest.fixture
def git_repo(tmp_path):
    """Provide an empty git repository, skipping if git is unavailable."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    return GitRepo(repo_dir)


@pytest.fixture
def packaged():
    """A small packaged set as returned by the archive client."""
    return {
        "golang.org/x/text": DebianPackage(
            binary="golang-golang-x-text-dev", source="golang-golang-x-text"
        ),
        "github.com/mattn/go-runewidth": DebianPackage(
            binary="golang-github-mattn-go-runewidth-dev",
            source="golang-github-mattn-go-runewidth",
        ),
        "gopkg.in/yaml.v2": DebianPackage(
            binary="golang-gopkg-yaml.v2-dev", source="golang-yaml.v2"
        ),
        "github.com/google/go-cmp": DebianPackage(
            binary="golang-github-google-go-cmp-dev",
            source="golang-github-google-go-cmp",
        ),
    }
