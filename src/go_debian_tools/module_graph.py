"""Go module dependency graph construction and traversal.

The graph is built from `go mod graph` output, one "parent child" edge per
line, where each side may carry an "@version" suffix. Nodes are keyed by
module name without version; versions are kept on the edges.

The walker reports every module reachable from the root that is not yet
packaged in Debian. Packaged modules (or modules matched by one of the
alternate-name heuristics) are pruned together with their dependencies.
"""

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from go_debian_tools.exceptions import OutputFormatError
from schemas.archive import DebianPackage

logger = logging.getLogger(__name__)

# Major version suffix of an import path ("/v3" or gopkg.in style ".v3")
MAJOR_VERSION_PATTERN = re.compile(r"([/.])v([0-9]+)$")

# go mod graph lists the required Go version as pseudo-modules
PSEUDO_MODULES = frozenset({"go", "toolchain"})

TRACKER_URL = "https://tracker.debian.org/pkg/{source}"


class NodeState(Enum):
    """Traversal state of a module."""

    UNSEEN = "unseen"
    NEEDED = "needed"
    SATISFIED = "satisfied"


class ReportKind(str, Enum):
    """Kind of line in a dependency report."""

    NEEDED = "needed"
    REPEAT = "repeat"
    IN_NEW = "in-new"


@dataclass(eq=False)
class ModuleNode:
    """A module in the dependency graph.

    Only `needed_by` changes after construction: the walker counts how many
    parents reached the module while it was needed.
    """

    name: str
    children: list["ModuleEdge"] = field(default_factory=list, repr=False)
    needed_by: int = 0


@dataclass(frozen=True, eq=False)
class ModuleEdge:
    """A requirement edge, with the version the parent requires."""

    node: ModuleNode
    version: str | None = None


@dataclass
class ModuleGraph:
    """Adjacency structure of a module graph rooted at one module."""

    root: str
    nodes: dict[str, ModuleNode] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.node(self.root)

    @property
    def root_node(self) -> ModuleNode:
        return self.nodes[self.root]

    def node(self, name: str) -> ModuleNode:
        """Return the node for a module, creating it on first use."""
        if name not in self.nodes:
            self.nodes[name] = ModuleNode(name=name)
        return self.nodes[name]

    def add_edge(self, parent: str, child: str, version: str | None = None) -> None:
        """Record that `parent` requires `child` at `version`."""
        self.node(parent).children.append(ModuleEdge(self.node(child), version))


@dataclass
class ReportLine:
    """One line of a dependency report."""

    kind: ReportKind
    module: str
    depth: int
    count: int = 1
    version: str | None = None
    repo_root: str | None = None
    repo_root_seen: bool = False
    source: str | None = None
    new_version: str | None = None


def split_module_version(value: str) -> tuple[str, str | None]:
    """Split "name@version" into its parts.

    Examples:
        >>> split_module_version("golang.org/x/text@v0.3.0")
        ("golang.org/x/text", "v0.3.0")
        >>> split_module_version("example.com/root")
        ("example.com/root", None)
    """
    name, sep, version = value.partition("@")
    return name, (version if sep else None)


def parse_module_graph(
    text: str,
    root: str,
    main_module: str | None = None,
    direct_deps: Iterable[str] | None = None,
) -> ModuleGraph:
    """Build a module graph from `go mod graph` output.

    Args:
        text: Edge list, one "parent child" pair per line
        root: Module the report is about
        main_module: Synthetic module whose own edges are ignored
            (the wrapper module used to fetch `root`)
        direct_deps: If given, edges from `root` to modules outside this
            set are dropped; indirect requirements are listed by go as
            direct edges of the main module but reappear deeper in the graph

    Returns:
        ModuleGraph rooted at `root`

    Raises:
        OutputFormatError: If a line does not consist of two fields
    """
    graph = ModuleGraph(root=root)
    direct = set(direct_deps) if direct_deps is not None else None

    for lineno, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        fields = line.split()
        if len(fields) != 2:
            raise OutputFormatError(
                f"Line {lineno} of module graph is not a 'parent child' pair: {line!r}"
            )

        parent, _ = split_module_version(fields[0])
        child, version = split_module_version(fields[1])

        if main_module is not None and parent == main_module:
            continue

        # Packages of the root module can require other modules too
        if parent.startswith(root + "/"):
            parent = root

        if parent == root and direct is not None and child not in direct:
            continue

        graph.add_edge(parent, child, version)

    return graph


def other_versions(module: str) -> list[str]:
    """Guess import paths of other major versions of a module.

    Candidates are ordered from the closest lower major version down to
    the unversioned path.

    Examples:
        >>> other_versions("github.com/foo/bar/v4")
        ["github.com/foo/bar/v3", "github.com/foo/bar/v2", "github.com/foo/bar"]
        >>> other_versions("gopkg.in/yaml.v3")
        ["gopkg.in/yaml.v2", "gopkg.in/yaml"]
        >>> other_versions("github.com/foo/bar")
        []
    """
    match = MAJOR_VERSION_PATTERN.search(module)
    if match is None:
        return []

    prefix = module[: match.start()]
    separator = match.group(1)
    major = int(match.group(2))

    candidates = [f"{prefix}{separator}v{v}" for v in range(major - 1, 1, -1)]
    candidates.append(prefix)
    return candidates


def find_other_version(
    packaged: Mapping[str, DebianPackage], module: str
) -> tuple[int, DebianPackage | None]:
    """Search the packaged set for another major version of a module.

    Returns:
        Tuple of (major version found, package). The version is 1 for the
        unversioned path and 0 (with None) if nothing was found.
    """
    candidates = other_versions(module)
    for i, candidate in enumerate(candidates):
        if candidate in packaged:
            return len(candidates) - i, packaged[candidate]
    return 0, None


def walk_dependencies(
    graph: ModuleGraph,
    packaged: Mapping[str, DebianPackage],
    sources_in_new: Mapping[str, str] | None = None,
    repo_root_for: Callable[[str], str] | None = None,
    blocklist: Mapping[str, str] | None = None,
) -> list[ReportLine]:
    """Report the modules of a graph that still need packaging.

    Traversal is depth-first from the root, children in name order. The
    first visit of a module decides its state: packaged (exactly, as
    another major version, or via its repository root) and blocklisted
    modules are satisfied and their dependencies are not visited; any
    other module is needed and emits a line. Reaching a needed module
    again emits a repeat line with its updated parent count instead of
    descending a second time, which also makes cycles terminate.

    Args:
        graph: Module graph to walk
        packaged: Import path to Debian package mapping
        sources_in_new: Source package to version for packages in NEW
        repo_root_for: Maps an import path to its repository root
            (identity if None)
        blocklist: Modules to ignore, mapped to the reason

    Returns:
        Report lines in traversal order (empty if everything is packaged)
    """
    sources_in_new = sources_in_new or {}
    blocklist = blocklist or {}
    if repo_root_for is None:
        repo_root_for = _identity

    states: dict[str, NodeState] = {}
    repo_roots_seen: set[str] = set()
    lines: list[ReportLine] = []

    stack: list[tuple[ModuleNode, int, str | None]] = [(graph.root_node, 0, None)]
    while stack:
        node, depth, version = stack.pop()
        module = node.name
        state = states.get(module, NodeState.UNSEEN)

        if state is NodeState.NEEDED:
            node.needed_by += 1
            lines.append(
                ReportLine(
                    kind=ReportKind.REPEAT,
                    module=module,
                    depth=depth,
                    count=node.needed_by,
                    version=version,
                )
            )
            continue
        if state is NodeState.SATISFIED:
            continue

        states[module] = NodeState.SATISFIED
        if module in PSEUDO_MODULES:
            continue

        package = packaged.get(module)
        if package is not None:
            _append_in_new(lines, sources_in_new, package, module, depth, version)
            continue

        major, package = find_other_version(packaged, module)
        if package is not None:
            tracker = TRACKER_URL.format(source=package.source)
            if major == 1:
                logger.info(f"{module} has no version string in Debian ({tracker})")
            else:
                logger.info(f"{module} is v{major} in Debian ({tracker})")
            _append_in_new(lines, sources_in_new, package, module, depth, version)
            continue

        repo_root = repo_root_for(module)

        # Modules of a multi-module repository are often packaged under
        # the repository root import path
        package = packaged.get(repo_root)
        if package is not None:
            tracker = TRACKER_URL.format(source=package.source)
            logger.info(f"{module} is packaged as {repo_root} in Debian ({tracker})")
            _append_in_new(lines, sources_in_new, package, module, depth, version)
            continue

        if module in blocklist:
            logger.info(f"Ignoring module {module}: {blocklist[module]}")
            continue

        states[module] = NodeState.NEEDED
        node.needed_by = 1
        lines.append(
            ReportLine(
                kind=ReportKind.NEEDED,
                module=module,
                depth=depth,
                version=version,
                repo_root=repo_root,
                repo_root_seen=repo_root in repo_roots_seen,
            )
        )
        repo_roots_seen.add(repo_root)

        children = sorted(node.children, key=lambda edge: edge.node.name)
        for edge in reversed(children):
            stack.append((edge.node, depth + 1, edge.version))

    return lines


def needed_modules(lines: Iterable[ReportLine]) -> list[str]:
    """Return the modules reported as needed, in report order."""
    return [line.module for line in lines if line.kind is ReportKind.NEEDED]


def _identity(module: str) -> str:
    return module


def _append_in_new(
    lines: list[ReportLine],
    sources_in_new: Mapping[str, str],
    package: DebianPackage,
    module: str,
    depth: int,
    version: str | None,
) -> None:
    """Add an in-NEW line if the satisfying package still waits in NEW."""
    new_version = sources_in_new.get(package.source)
    if new_version is None:
        return
    lines.append(
        ReportLine(
            kind=ReportKind.IN_NEW,
            module=module,
            depth=depth,
            version=version,
            source=package.source,
            new_version=new_version,
        )
    )
