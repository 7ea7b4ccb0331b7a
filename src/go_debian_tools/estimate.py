"""Estimate the work needed to bring a Go module into Debian.

Fetches the module with the go toolchain in an isolated GOPATH, builds its
dependency graph and reports every module not yet packaged in Debian.
The archive listings are downloaded in the background while go fetches
the sources.
"""

import logging
import tempfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

import requests

from go_debian_tools import gotool
from go_debian_tools.archive import fetch_golang_binaries, fetch_sources_in_new
from go_debian_tools.module_graph import (
    ReportLine,
    needed_modules,
    parse_module_graph,
    walk_dependencies,
)
from go_debian_tools.repo_root import RepoRootResolver
from go_debian_tools.utils import SizeProgress, find_vendor_dirs, force_remove_tree
from schemas.settings import ToolSettings

logger = logging.getLogger(__name__)

# Wrapper module used to `go get` the estimated module
WRAPPER_MODULE = "dummymod"


@dataclass
class EstimateResult:
    """Outcome of an estimate run."""

    import_path: str
    lines: list[ReportLine] = field(default_factory=list)

    @property
    def fully_packaged(self) -> bool:
        return not self.lines

    @property
    def needed(self) -> list[str]:
        return needed_modules(self.lines)


def _remove_vendor_dirs(directory: Path) -> bool:
    """Delete vendor/ directories below a tree; return whether any existed."""
    vendor_dirs = find_vendor_dirs(directory)
    for vendor in vendor_dirs:
        logger.info(f"Removing vendored code in {vendor}")
        force_remove_tree(directory / vendor)
    return bool(vendor_dirs)


def _fetch_module(
    gopath: Path,
    workdir: Path,
    import_path: str,
    revision: str | None,
    progress_stream: TextIO | None,
) -> None:
    if progress_stream is None:
        gotool.go_get(gopath, workdir, import_path, revision)
        return
    with SizeProgress("go get", gopath, stream=progress_stream):
        gotool.go_get(gopath, workdir, import_path, revision)


def estimate(
    import_path: str,
    revision: str | None = None,
    settings: ToolSettings | None = None,
    session: requests.Session | None = None,
    progress_stream: TextIO | None = None,
) -> EstimateResult:
    """Estimate which modules must be packaged before `import_path`.

    Args:
        import_path: Go module import path
        revision: git revision of the module, or None for go's default
        settings: Tool settings (defaults if None)
        session: Optional HTTP session for archive and go-get requests
        progress_stream: Terminal to show the download size on while go
            fetches sources, or None for no progress display

    Returns:
        EstimateResult with the report lines

    Raises:
        GoToolError: If fetching the module or listing its graph fails
        ArchiveError: If the archive listings cannot be downloaded
        OutputFormatError: If go mod graph output is malformed
    """
    settings = settings or ToolSettings()

    gopath = Path(tempfile.mkdtemp(prefix="go-debian-tools-gopath-"))
    workdir = Path(tempfile.mkdtemp(prefix="go-debian-tools-work-"))

    try:
        (workdir / "go.mod").write_text(f"module {WRAPPER_MODULE}\n", encoding="utf-8")

        with ThreadPoolExecutor(max_workers=2) as executor:
            binaries_future = executor.submit(fetch_golang_binaries, settings, session)
            new_future = executor.submit(fetch_sources_in_new, settings, session)

            _fetch_module(gopath, workdir, import_path, revision, progress_stream)
            if _remove_vendor_dirs(workdir):
                # Fetch the dependencies that were vendored
                _fetch_module(gopath, workdir, import_path, revision, progress_stream)

            graph_text = gotool.mod_graph(gopath, workdir)
            direct = gotool.direct_dependencies(gopath, workdir, import_path)

            packaged = binaries_future.result()
            sources_in_new = new_future.result()

        graph = parse_module_graph(
            graph_text,
            root=import_path,
            main_module=WRAPPER_MODULE,
            direct_deps=direct,
        )
        logger.debug(f"Module graph has {len(graph.nodes)} modules")

        resolver = RepoRootResolver(
            allow_network=settings.resolve_vanity_imports,
            session=session,
        )
        lines = walk_dependencies(
            graph,
            packaged,
            sources_in_new=sources_in_new,
            repo_root_for=resolver,
            blocklist=settings.module_blocklist,
        )
        return EstimateResult(import_path=import_path, lines=lines)

    finally:
        for path in (gopath, workdir):
            try:
                force_remove_tree(path)
            except OSError as e:
                logger.warning(f"Could not remove {path}: {e}")
