"""Unit tests for repository root resolution."""

from unittest import mock

import pytest
import requests

from go_debian_tools.repo_root import (
    RepoRootResolver,
    parse_go_import_prefixes,
    static_repo_root,
)

GO_IMPORT_PAGE = """\
<!DOCTYPE html>
<html>
<head>
<meta name="go-import" content="cloud.google.com/go git https://github.com/googleapis/google-cloud-go">
<meta name="go-import" content="cloud.google.com/go/storage git https://github.com/googleapis/google-cloud-go">
<meta name="go-source" content="cloud.google.com/go https://github.com/googleapis/google-cloud-go">
</head>
<body></body>
</html>
"""


class TestStaticRepoRoot:
    """Tests for static_repo_root function."""

    @pytest.mark.parametrize(
        "import_path,expected",
        [
            ("github.com/foo/bar", "github.com/foo/bar"),
            ("github.com/foo/bar/baz/qux", "github.com/foo/bar"),
            ("github.com/foo/bar/v2", "github.com/foo/bar"),
            ("bitbucket.org/foo/bar/sub", "bitbucket.org/foo/bar"),
            ("codeberg.org/foo/bar", "codeberg.org/foo/bar"),
            ("golang.org/x/text/unicode", "golang.org/x/text"),
            ("gopkg.in/yaml.v3", "gopkg.in/yaml.v3"),
            ("gopkg.in/check.v1/sub", "gopkg.in/check.v1"),
            ("gopkg.in/foo/bar.v2", "gopkg.in/foo/bar.v2"),
        ],
    )
    def test_known_layouts(self, import_path, expected):
        """Test hosters with a fixed repository layout."""
        assert static_repo_root(import_path) == expected

    def test_incomplete_path(self):
        """Test that a path without repository element is unresolved."""
        assert static_repo_root("github.com/foo") is None

    def test_vanity_path(self):
        """Test that vanity import paths need a lookup."""
        assert static_repo_root("cloud.google.com/go/storage") is None
        assert static_repo_root("go.uber.org/zap") is None


class TestParseGoImportPrefixes:
    """Tests for parse_go_import_prefixes function."""

    def test_meta_tags(self):
        """Test that go-import prefixes are extracted."""
        assert parse_go_import_prefixes(GO_IMPORT_PAGE) == [
            "cloud.google.com/go",
            "cloud.google.com/go/storage",
        ]

    def test_malformed_content_ignored(self):
        """Test that go-import tags without three fields are skipped."""
        html = '<meta name="go-import" content="example.org/foo git">'
        assert parse_go_import_prefixes(html) == []


class TestRepoRootResolver:
    """Tests for RepoRootResolver class."""

    def test_static_without_network(self):
        """Test that well-known hosts resolve without a session."""
        resolver = RepoRootResolver(allow_network=False)
        assert resolver.resolve("github.com/foo/bar/v2") == "github.com/foo/bar"
        assert resolver.session is None

    def test_fallback_to_import_path(self):
        """Test that unresolved paths map to themselves."""
        resolver = RepoRootResolver(allow_network=False)
        assert resolver("go.uber.org/zap") == "go.uber.org/zap"

    def test_vanity_lookup(self):
        """Test that the longest go-import prefix is used."""
        session = mock.Mock()
        session.get.return_value = mock.Mock(text=GO_IMPORT_PAGE)
        resolver = RepoRootResolver(session=session)

        assert resolver.resolve("cloud.google.com/go/storage/internal") == (
            "cloud.google.com/go/storage"
        )
        session.get.assert_called_once_with(
            "https://cloud.google.com/go/storage/internal?go-get=1", timeout=15
        )

    def test_prefix_must_match_whole_elements(self):
        """Test that a prefix only matches at a path boundary."""
        session = mock.Mock()
        session.get.return_value = mock.Mock(text=GO_IMPORT_PAGE)
        resolver = RepoRootResolver(session=session)

        assert resolver.resolve("cloud.google.com/gopher") == "cloud.google.com/gopher"

    def test_lookup_cached(self):
        """Test that each import path is looked up once."""
        session = mock.Mock()
        session.get.return_value = mock.Mock(text=GO_IMPORT_PAGE)
        resolver = RepoRootResolver(session=session)

        resolver.resolve("cloud.google.com/go/storage")
        resolver.resolve("cloud.google.com/go/storage")

        assert session.get.call_count == 1

    def test_lookup_failure_falls_back(self):
        """Test that HTTP errors are not fatal."""
        session = mock.Mock()
        session.get.side_effect = requests.ConnectionError("no route to host")
        resolver = RepoRootResolver(session=session)

        assert resolver.resolve("go.uber.org/zap") == "go.uber.org/zap"

    def test_http_error_falls_back(self):
        """Test that a non-2xx response is not fatal."""
        response = mock.Mock()
        response.raise_for_status.side_effect = requests.HTTPError("404")
        session = mock.Mock()
        session.get.return_value = response
        resolver = RepoRootResolver(session=session)

        assert resolver.resolve("example.org/missing") == "example.org/missing"
