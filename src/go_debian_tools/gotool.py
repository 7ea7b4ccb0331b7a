"""Invocations of the go toolchain."""

import logging
import os
import subprocess
from pathlib import Path

from go_debian_tools.exceptions import GoToolError

logger = logging.getLogger(__name__)

# Environment variables forwarded to go, in addition to GOPATH
PASSTHROUGH_ENV_VARS = [
    "HOME",
    "PATH",
    "HTTP_PROXY",
    "http_proxy",
    "HTTPS_PROXY",
    "https_proxy",
    "ALL_PROXY",
    "all_proxy",
    "NO_PROXY",
    "no_proxy",
    "GIT_PROXY_COMMAND",
    "GIT_HTTP_PROXY_AUTHMETHOD",
]


def passthrough_env(gopath: Path | None = None) -> dict[str, str]:
    """Build the environment for go, with GOPATH pointing at a private tree."""
    env = {name: os.environ[name] for name in PASSTHROUGH_ENV_VARS if name in os.environ}
    if gopath is not None:
        env["GOPATH"] = str(gopath)
    return env


def run_go(args: list[str], cwd: Path, gopath: Path | None = None) -> str:
    """Run a go subcommand and return its stdout.

    Args:
        args: Arguments passed to go
        cwd: Working directory
        gopath: GOPATH to use (isolates the module cache)

    Returns:
        Standard output of the command

    Raises:
        GoToolError: If go exits with a non-zero status or is not installed
    """
    command = ["go", *args]
    logger.debug(f"Running {' '.join(command)} in {cwd}")
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            env=passthrough_env(gopath),
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise GoToolError(command, 127, "go not found") from e

    if result.returncode != 0:
        raise GoToolError(command, result.returncode, result.stderr)

    return result.stdout


def go_get(gopath: Path, workdir: Path, import_path: str, revision: str | None = None) -> None:
    """Fetch all packages of a module and their test dependencies.

    The arguments to `go get` are packages, not repositories, so
    "{import_path}/..." is requested to cover repositories without Go
    files at their top level.
    """
    packages = f"{import_path}/..."
    if revision:
        packages += f"@{revision}"
    logger.info(f"Downloading {packages}")
    run_go(["get", "-t", packages], cwd=workdir, gopath=gopath)


def mod_graph(gopath: Path, workdir: Path) -> str:
    """Return the `go mod graph` edge list of the module in workdir."""
    return run_go(["mod", "graph"], cwd=workdir, gopath=gopath)


def module_dir(gopath: Path, workdir: Path, module: str) -> Path:
    """Return the directory holding the sources of a module."""
    out = run_go(["list", "-f", "{{.Dir}}", module], cwd=workdir, gopath=gopath)
    return Path(out.strip())


def direct_dependencies(gopath: Path, workdir: Path, module: str) -> set[str]:
    """Return the modules a module requires directly.

    Runs `go list -m all` inside the module's own directory, so its go.mod
    decides what is direct and what is indirect.
    """
    directory = module_dir(gopath, workdir, module)
    out = run_go(
        ["list", "-m", "-f", "{{if not .Indirect}}{{.Path}}{{end}}", "all"],
        cwd=directory,
        gopath=gopath,
    )
    return {line.strip() for line in out.splitlines() if line.strip()}
