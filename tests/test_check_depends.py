"""Unit tests for check-depends."""

import shutil
from pathlib import Path

import pytest

from go_debian_tools.check_depends import (
    CheckDependsResult,
    Dependency,
    check_depends,
    control_build_dependencies,
    format_check_depends,
    go_mod_dependencies,
    parse_go_mod_requirements,
)
from go_debian_tools.exceptions import OutputFormatError
from go_debian_tools.repo_root import RepoRootResolver
from schemas.archive import DebianPackage

TERMINEWS = Path(__file__).parent / "fixtures" / "terminews"


def dev(import_path):
    """Packaged-set entry named after the import path."""
    host, rest = import_path.split("/", 1)
    short = {"github.com": "github", "golang.org": "golang"}[host]
    source = "golang-" + short + "-" + rest.replace("/", "-").lower()
    return DebianPackage(binary=f"{source}-dev", source=source)


@pytest.fixture
def terminews_packaged():
    paths = [
        "github.com/advancedlogic/goose",
        "github.com/fatih/color",
        "golang.org/x/net",
        "github.com/mattn/go-runewidth",
        "github.com/mmcdole/gofeed",
        "github.com/mattn/go-sqlite3",
    ]
    return {path: dev(path) for path in paths}


@pytest.fixture
def resolver():
    return RepoRootResolver(allow_network=False)


class TestParseGoModRequirements:
    """Tests for parse_go_mod_requirements function."""

    def test_block_and_single_line(self):
        """Test both forms of require directives."""
        text = (TERMINEWS / "go.mod").read_text()

        requirements = parse_go_mod_requirements(text)

        assert [r.path for r in requirements] == [
            "github.com/advancedlogic/goose",
            "github.com/fatih/color",
            "golang.org/x/net",
            "github.com/mattn/go-runewidth",
            "github.com/mmcdole/gofeed",
            "github.com/gilliek/go-opml",
            "github.com/mattn/go-sqlite3",
        ]
        assert requirements[1].version == "v1.10.0"

    def test_indirect_marker(self):
        """Test that indirect requirements are flagged."""
        text = (TERMINEWS / "go.mod").read_text()

        indirect = [r.path for r in parse_go_mod_requirements(text) if r.indirect]

        assert indirect == ["github.com/mattn/go-runewidth"]

    def test_other_directives_ignored(self):
        """Test that replace and exclude blocks are not requirements."""
        text = (
            "module example.com/m\n"
            "replace (\n"
            "\texample.com/a => ../a\n"
            ")\n"
            "exclude example.com/b v1.0.0\n"
            "require example.com/c v1.2.0\n"
        )
        assert [r.path for r in parse_go_mod_requirements(text)] == ["example.com/c"]

    def test_malformed_requirement(self):
        """Test that a requirement without version is an error."""
        with pytest.raises(OutputFormatError, match="line 2"):
            parse_go_mod_requirements("require (\n\texample.com/a\n)\n")


class TestGoModDependencies:
    """Tests for go_mod_dependencies function."""

    def test_direct_only(self, terminews_packaged, resolver):
        """Test that only direct requirements are returned."""
        deps = go_mod_dependencies(TERMINEWS, terminews_packaged, resolver)

        assert "github.com/mattn/go-runewidth" not in [d.import_path for d in deps]
        assert Dependency(
            import_path="github.com/gilliek/go-opml", package_name=""
        ) in deps
        assert Dependency(
            import_path="github.com/fatih/color",
            package_name="golang-github-fatih-color-dev",
        ) in deps

    def test_resolved_to_repo_root(self, tmp_path, resolver):
        """Test that requirements are matched by repository root."""
        (tmp_path / "go.mod").write_text(
            "module example.com/m\n\nrequire github.com/foo/bar/v2 v2.1.0\n"
        )
        packaged = {"github.com/foo/bar": dev("github.com/foo/bar")}

        deps = go_mod_dependencies(tmp_path, packaged, resolver)

        assert deps == [
            Dependency(import_path="github.com/foo/bar", package_name="golang-github-foo-bar-dev")
        ]

    def test_missing_go_mod(self, tmp_path, resolver):
        """Test that a missing go.mod raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            go_mod_dependencies(tmp_path, {}, resolver)


class TestControlBuildDependencies:
    """Tests for control_build_dependencies function."""

    def test_terminews(self):
        """Test that -dev Build-Depends are extracted in order."""
        deps = control_build_dependencies(TERMINEWS)

        assert deps == [
            Dependency(import_path="", package_name="golang-github-advancedlogic-goose-dev"),
            Dependency(import_path="", package_name="golang-github-fatih-color-dev"),
            Dependency(import_path="", package_name="golang-github-jroimartin-gocui-dev"),
            Dependency(import_path="", package_name="golang-github-mattn-go-sqlite3-dev"),
            Dependency(import_path="", package_name="golang-github-mmcdole-gofeed-dev"),
        ]

    def test_alternatives_and_versions(self, tmp_path):
        """Test that version constraints and alternatives are handled."""
        (tmp_path / "debian").mkdir()
        (tmp_path / "debian" / "control").write_text(
            "Source: foo\n"
            "Build-Depends: debhelper-compat (= 13),\n"
            " golang-github-a-dev (>= 1.2),\n"
            " golang-github-b-dev | golang-github-c-dev\n"
            "\n"
            "Package: foo\n"
            "Architecture: any\n"
        )

        names = [d.package_name for d in control_build_dependencies(tmp_path)]

        assert names == ["golang-github-a-dev", "golang-github-b-dev", "golang-github-c-dev"]

    def test_no_source_paragraph(self, tmp_path):
        """Test that a control file without source paragraph is rejected."""
        (tmp_path / "debian").mkdir()
        (tmp_path / "debian" / "control").write_text("Package: foo\nArchitecture: any\n")

        with pytest.raises(OutputFormatError, match="No source paragraph"):
            control_build_dependencies(tmp_path)


class TestCheckDepends:
    """Tests for check_depends and format_check_depends functions."""

    def test_terminews(self, terminews_packaged, resolver):
        """Test the differences between go.mod and debian/control."""
        result = check_depends(TERMINEWS, terminews_packaged, resolver)

        assert [d.import_path for d in result.unpackaged] == ["github.com/gilliek/go-opml"]
        assert [d.package_name for d in result.added] == ["golang-golang-x-net-dev"]
        assert [d.package_name for d in result.removed] == [
            "golang-github-jroimartin-gocui-dev"
        ]
        assert result.in_sync is False

        assert format_check_depends(result) == [
            "NEW dependency github.com/gilliek/go-opml is NOT yet packaged in Debian",
            "NEW dependency golang.org/x/net (golang-golang-x-net-dev)",
            "RM dependency golang-github-jroimartin-gocui-dev",
        ]

    def test_in_sync(self, tmp_path, terminews_packaged, resolver):
        """Test that matching files are reported in sync."""
        shutil.copytree(TERMINEWS / "debian", tmp_path / "debian")
        (tmp_path / "go.mod").write_text(
            "module github.com/antavelos/terminews\n\n"
            "require (\n"
            "\tgithub.com/advancedlogic/goose v0.0.0-20191022053418-d47a1f7d1f97\n"
            "\tgithub.com/fatih/color v1.10.0\n"
            "\tgithub.com/jroimartin/gocui v0.4.0\n"
            "\tgithub.com/mattn/go-sqlite3 v1.14.6\n"
            "\tgithub.com/mmcdole/gofeed v1.1.0\n"
            ")\n"
        )
        packaged = dict(terminews_packaged)
        packaged["github.com/jroimartin/gocui"] = dev("github.com/jroimartin/gocui")

        result = check_depends(tmp_path, packaged, resolver)

        assert result.in_sync is True
        assert format_check_depends(result) == ["go.mod and d/control are in sync"]

    def test_unpackaged_only_still_in_sync(self):
        """Test that unpackaged dependencies alone do not break sync."""
        result = CheckDependsResult(
            unpackaged=[Dependency(import_path="example.com/x", package_name="")]
        )
        assert format_check_depends(result) == [
            "NEW dependency example.com/x is NOT yet packaged in Debian",
            "go.mod and d/control are in sync",
        ]
