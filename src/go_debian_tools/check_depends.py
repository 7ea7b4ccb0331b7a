"""Compare go.mod requirements with debian/control Build-Depends.

Reports dependencies that were added upstream since the packaging was
written, and Build-Depends that upstream no longer needs.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from debian.deb822 import Deb822, PkgRelation

from go_debian_tools.exceptions import OutputFormatError
from schemas.archive import DebianPackage

logger = logging.getLogger(__name__)


@dataclass
class GoModRequirement:
    """A require directive of a go.mod file."""

    path: str
    version: str
    indirect: bool = False


@dataclass
class Dependency:
    """A dependency known by import path and/or Debian package name.

    `package_name` is empty when the import path is not packaged in Debian;
    `import_path` is empty for dependencies read from debian/control.
    """

    import_path: str
    package_name: str


@dataclass
class CheckDependsResult:
    """Differences between go.mod and debian/control."""

    unpackaged: list[Dependency] = field(default_factory=list)
    added: list[Dependency] = field(default_factory=list)
    removed: list[Dependency] = field(default_factory=list)

    @property
    def in_sync(self) -> bool:
        return not self.added and not self.removed


def parse_go_mod_requirements(text: str) -> list[GoModRequirement]:
    """Parse the require directives of a go.mod file.

    Handles both the single-line form and parenthesized blocks; an
    "// indirect" comment marks indirect requirements.

    Raises:
        OutputFormatError: If a requirement line does not have a path and version
    """
    requirements: list[GoModRequirement] = []
    in_block = False

    for lineno, raw in enumerate(text.splitlines(), 1):
        code, _, comment = raw.partition("//")
        code = code.strip()
        indirect = comment.strip().startswith("indirect")

        if in_block:
            if code == ")":
                in_block = False
                continue
            if not code:
                continue
            fields = code.split()
        else:
            words = code.split()
            if not words or words[0] != "require":
                continue
            if words[1:] == ["("]:
                in_block = True
                continue
            fields = words[1:]

        if len(fields) != 2:
            raise OutputFormatError(f"go.mod line {lineno}: malformed requirement {raw!r}")

        path, version = (f.strip('"') for f in fields)
        requirements.append(GoModRequirement(path=path, version=version, indirect=indirect))

    return requirements


def go_mod_dependencies(
    directory: Path,
    packaged: Mapping[str, DebianPackage],
    repo_root_for: Callable[[str], str],
) -> list[Dependency]:
    """Read the direct requirements of go.mod, resolved to repository roots.

    Raises:
        FileNotFoundError: If go.mod does not exist
        OutputFormatError: If go.mod is malformed
    """
    text = (directory / "go.mod").read_text(encoding="utf-8")

    dependencies: list[Dependency] = []
    for requirement in parse_go_mod_requirements(text):
        if requirement.indirect:
            continue
        root = repo_root_for(requirement.path)
        package = packaged.get(root)
        logger.debug(f"go.mod requires {requirement.path} (repository {root})")
        dependencies.append(
            Dependency(import_path=root, package_name=package.binary if package else "")
        )
    return dependencies


def control_build_dependencies(directory: Path) -> list[Dependency]:
    """Read the -dev Build-Depends of debian/control.

    Tooling dependencies (debhelper-compat, dh-golang, golang-any, ...) are
    skipped; every alternative of a relation is kept.

    Raises:
        FileNotFoundError: If debian/control does not exist
        OutputFormatError: If debian/control has no source paragraph
    """
    control_path = directory / "debian" / "control"
    with open(control_path, encoding="utf-8") as f:
        paragraphs = list(Deb822.iter_paragraphs(f))

    if not paragraphs or "Source" not in paragraphs[0]:
        raise OutputFormatError(f"No source paragraph in {control_path}")

    # Trailing commas are common in wrap-and-sort output
    build_depends = paragraphs[0].get("Build-Depends", "").strip().rstrip(",")
    relations = PkgRelation.parse_relations(build_depends)

    dependencies: list[Dependency] = []
    for alternatives in relations:
        for relation in alternatives:
            name = relation["name"].strip()
            if name.endswith("-dev"):
                dependencies.append(Dependency(import_path="", package_name=name))
    return dependencies


def check_depends(
    directory: Path,
    packaged: Mapping[str, DebianPackage],
    repo_root_for: Callable[[str], str],
) -> CheckDependsResult:
    """Compare the go.mod and debian/control of a packaging checkout.

    Args:
        directory: Packaging checkout containing go.mod and debian/control
        packaged: Import path to Debian package mapping
        repo_root_for: Maps an import path to its repository root

    Returns:
        CheckDependsResult listing unpackaged, added and removed dependencies
    """
    go_deps = go_mod_dependencies(directory, packaged, repo_root_for)
    control_deps = control_build_dependencies(directory)

    control_names = {dep.package_name for dep in control_deps}
    go_names = {dep.package_name for dep in go_deps if dep.package_name}

    result = CheckDependsResult()
    for dep in go_deps:
        if not dep.package_name:
            result.unpackaged.append(dep)
        elif dep.package_name not in control_names:
            result.added.append(dep)

    for dep in control_deps:
        if dep.package_name not in go_names:
            result.removed.append(dep)

    return result


def format_check_depends(result: CheckDependsResult) -> list[str]:
    """Render a check result as report lines."""
    lines = [
        f"NEW dependency {dep.import_path} is NOT yet packaged in Debian"
        for dep in result.unpackaged
    ]
    lines.extend(f"NEW dependency {dep.import_path} ({dep.package_name})" for dep in result.added)
    lines.extend(f"RM dependency {dep.package_name}" for dep in result.removed)
    if result.in_sync:
        lines.append("go.mod and d/control are in sync")
    return lines
