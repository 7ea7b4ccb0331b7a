"""Unit tests for the Debian archive client."""

from unittest import mock

import pytest
import requests

from go_debian_tools.archive import (
    fetch_golang_binaries,
    fetch_sources_in_new,
    parse_golang_binaries,
    parse_sources_in_new,
)
from go_debian_tools.exceptions import ArchiveError
from schemas.archive import DebianPackage
from schemas.settings import DEFAULT_GOLANG_BINARIES_URL, ToolSettings

GOLANG_BINARIES = [
    {
        "binary": "golang-golang-x-text-dev",
        "source": "golang-golang-x-text",
        "metadata_value": "golang.org/x/text",
        "suite": "sid",
    },
    {
        "binary": "golang-google-cloud-dev",
        "source": "golang-google-cloud",
        "metadata_value": "cloud.google.com/go, cloud.google.com/go/storage",
        "suite": "sid",
    },
    {
        "binary": "fzf",
        "source": "fzf",
        "metadata_value": "github.com/junegunn/fzf",
        "suite": "sid",
    },
    {
        "binary": "golang-golang-x-text-dev-dbgsym",
        "source": "golang-golang-x-text",
        "metadata_value": "golang.org/x/text",
        "suite": "sid",
    },
]


def response(status_code=200, payload=None, json_error=None):
    """Build a fake requests response."""
    resp = mock.Mock(status_code=status_code)
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


class TestParseGolangBinaries:
    """Tests for parse_golang_binaries function."""

    def test_dev_packages_only(self):
        """Test that only -dev binaries make up the packaged set."""
        packaged = parse_golang_binaries(GOLANG_BINARIES)

        assert "github.com/junegunn/fzf" not in packaged
        assert packaged["golang.org/x/text"] == DebianPackage(
            binary="golang-golang-x-text-dev", source="golang-golang-x-text"
        )

    def test_comma_separated_import_paths(self):
        """Test that every import path of an entry is mapped."""
        packaged = parse_golang_binaries(GOLANG_BINARIES)

        assert packaged["cloud.google.com/go"].source == "golang-google-cloud"
        assert packaged["cloud.google.com/go/storage"].source == "golang-google-cloud"

    def test_not_a_list(self):
        """Test that a non-list payload is rejected."""
        with pytest.raises(ArchiveError, match="Expected a JSON list"):
            parse_golang_binaries({"binary": "x"})

    def test_malformed_entry(self):
        """Test that entries missing fields are rejected."""
        with pytest.raises(ArchiveError, match="Malformed Go-Import-Path entry"):
            parse_golang_binaries([{"binary": "golang-foo-dev"}])


class TestParseSourcesInNew:
    """Tests for parse_sources_in_new function."""

    def test_mapping(self):
        """Test source to version mapping."""
        payload = [
            {"source": "golang-github-foo-bar", "version": "0.1.0-1"},
            {"source": "golang-example-baz", "version": "2.0-1"},
        ]
        assert parse_sources_in_new(payload) == {
            "golang-github-foo-bar": "0.1.0-1",
            "golang-example-baz": "2.0-1",
        }

    def test_malformed(self):
        """Test that entries without version are rejected."""
        with pytest.raises(ArchiveError):
            parse_sources_in_new([{"source": "golang-foo"}])


class TestFetch:
    """Tests for the fetch functions."""

    def test_fetch_golang_binaries(self):
        """Test downloading the packaged set with the configured URL."""
        session = mock.Mock()
        session.get.return_value = response(payload=GOLANG_BINARIES)
        settings = ToolSettings(request_timeout=5)

        packaged = fetch_golang_binaries(settings, session)

        assert "golang.org/x/text" in packaged
        session.get.assert_called_once_with(DEFAULT_GOLANG_BINARIES_URL, timeout=5)

    def test_fetch_without_session(self):
        """Test that requests.get is used when no session is given."""
        with mock.patch("go_debian_tools.archive.requests.get") as mock_get:
            mock_get.return_value = response(payload=[])
            assert fetch_sources_in_new(ToolSettings()) == {}
        mock_get.assert_called_once()

    def test_http_status_error(self):
        """Test that a non-200 status is an archive error."""
        session = mock.Mock()
        session.get.return_value = response(status_code=503)

        with pytest.raises(ArchiveError, match="got 503, want 200"):
            fetch_golang_binaries(ToolSettings(), session)

    def test_connection_error(self):
        """Test that transport errors are archive errors."""
        session = mock.Mock()
        session.get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(ArchiveError, match="connection refused"):
            fetch_sources_in_new(ToolSettings(), session)

    def test_invalid_json(self):
        """Test that an undecodable body is an archive error."""
        session = mock.Mock()
        session.get.return_value = response(json_error=ValueError("Expecting value"))

        with pytest.raises(ArchiveError, match="Cannot decode JSON"):
            fetch_golang_binaries(ToolSettings(), session)
