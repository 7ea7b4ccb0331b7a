"""Unit tests for the git wrapper."""

from unittest import mock

import pytest

from go_debian_tools.exceptions import GitCommandError
from go_debian_tools.git import list_tags, run_git


class TestRunGit:
    """Tests for run_git function."""

    def test_output(self, git_repo):
        """Test that stdout of git is returned."""
        git_repo.commit()
        assert run_git(git_repo.path, "rev-parse", "--is-inside-work-tree").strip() == "true"

    def test_failure(self, git_repo):
        """Test that a failing git command raises GitCommandError."""
        with pytest.raises(GitCommandError) as exc_info:
            run_git(git_repo.path, "rev-parse", "--verify", "no-such-ref")
        assert exc_info.value.returncode != 0
        assert exc_info.value.command[:2] == ["git", "rev-parse"]

    @mock.patch("go_debian_tools.git.subprocess.run", side_effect=FileNotFoundError)
    def test_git_missing(self, mock_run, tmp_path):
        """Test that a missing git binary raises GitCommandError."""
        with pytest.raises(GitCommandError, match="git not found"):
            run_git(tmp_path, "status")


class TestListTags:
    """Tests for list_tags function."""

    def test_tags(self, git_repo):
        """Test that all tags are listed."""
        git_repo.commit()
        git_repo.tag("v1.0")
        git_repo.tag("sub/v0.1.0")

        assert sorted(list_tags(git_repo.path)) == ["sub/v0.1.0", "v1.0"]

    def test_no_tags(self, git_repo):
        """Test a repository without tags."""
        assert list_tags(git_repo.path) == []
