"""Command-line interface for go-debian-tools."""

import argparse
import logging
import re
import shutil
import sys
import traceback
from pathlib import Path

from go_debian_tools import __version__
from go_debian_tools.archive import fetch_golang_binaries
from go_debian_tools.check_depends import check_depends, format_check_depends
from go_debian_tools.estimate import estimate
from go_debian_tools.exceptions import (
    ArchiveError,
    OutputFormatError,
    SettingsError,
    ToolInvocationError,
)
from go_debian_tools.gbp import clone_package
from go_debian_tools.naming import (
    PackageType,
    debian_name_from_import_path,
    library_binary_name,
    orig_tarball_name,
    parse_package_type,
)
from go_debian_tools.repo_root import RepoRootResolver
from go_debian_tools.report import format_report
from go_debian_tools.search import search_packaged
from go_debian_tools.settings import load_settings
from go_debian_tools.upstream_version import resolve_upstream_version
from schemas.settings import ToolSettings

# Exit codes
EXIT_SUCCESS = 0
EXIT_VALIDATION_ERROR = 1
EXIT_TOOL_ERROR = 2
EXIT_ARCHIVE_ERROR = 3
EXIT_DEPENDENCY_ERROR = 4

logger = logging.getLogger(__name__)


def version_command(args: argparse.Namespace, settings: ToolSettings) -> int:
    """Execute version subcommand.

    Resolves the upstream version of a local git checkout and, when an
    import path is given, the matching Debian package and tarball names.

    Args:
        args: Parsed command-line arguments
        settings: Loaded tool settings

    Returns:
        Exit code
    """
    repo_dir = Path(args.repo_dir).resolve()
    if not repo_dir.is_dir():
        logger.error(f"Repository directory does not exist: {repo_dir}")
        return EXIT_VALIDATION_ERROR

    package_type = PackageType.LIBRARY
    if args.type:
        try:
            package_type = parse_package_type(args.type)
        except ValueError as e:
            logger.error(str(e))
            return EXIT_VALIDATION_ERROR

    check_dependencies("git")

    info = resolve_upstream_version(
        repo_dir,
        preferred_rev=args.git_revision,
        force_prerelease=args.force_prerelease,
    )

    print(f"Version: {info.version}")
    print(f"  Commit-ish: {info.commit_ish}")
    print(f"  Latest tag: {info.tag or '(none)'}")
    print(f"  Release: {'yes' if info.is_release else 'no'}")

    if args.import_path:
        try:
            source = debian_name_from_import_path(
                args.import_path,
                package_type,
                program_name=args.program_package_name,
                allow_unknown_hoster=args.allow_unknown_hoster,
                extra_hosts=settings.extra_known_hosts,
            )
        except ValueError as e:
            logger.error(f"Cannot derive Debian package name: {e}")
            print(
                "ERROR: Cannot derive Debian package name. See --allow-unknown-hoster",
                file=sys.stderr,
            )
            return EXIT_VALIDATION_ERROR

        print(f"  Source: {source}")
        if package_type in (PackageType.LIBRARY, PackageType.LIBRARY_PROGRAM):
            print(f"  Binary: {library_binary_name(source)}")
        print(f"  Orig tarball: {orig_tarball_name(source, info.version)}")

    return EXIT_SUCCESS


def estimate_command(args: argparse.Namespace, settings: ToolSettings) -> int:
    """Execute estimate subcommand.

    Args:
        args: Parsed command-line arguments
        settings: Loaded tool settings

    Returns:
        Exit code
    """
    check_dependencies("go")

    import_path = args.import_path.strip()
    result = estimate(
        import_path,
        revision=args.git_revision,
        settings=settings,
        progress_stream=sys.stdout,
    )

    if result.fully_packaged:
        print(f"{import_path} is already fully packaged in Debian")
        return EXIT_SUCCESS

    logger.info(
        f"Bringing {import_path} to Debian requires packaging the following Go modules:"
    )
    color = _use_color(args.color)
    print(format_report(result.lines, color=color, show_versions=args.show_versions))
    return EXIT_SUCCESS


def check_depends_command(args: argparse.Namespace, settings: ToolSettings) -> int:
    """Execute check-depends subcommand.

    Args:
        args: Parsed command-line arguments
        settings: Loaded tool settings

    Returns:
        Exit code
    """
    directory = Path(args.directory).resolve()
    for required in ("go.mod", "debian/control"):
        if not (directory / required).exists():
            logger.error(f"Required file not found: {directory / required}")
            return EXIT_VALIDATION_ERROR

    packaged = fetch_golang_binaries(settings)
    resolver = RepoRootResolver(allow_network=settings.resolve_vanity_imports)
    result = check_depends(directory, packaged, resolver)

    for line in format_check_depends(result):
        print(line)
    return EXIT_SUCCESS


def search_command(args: argparse.Namespace, settings: ToolSettings) -> int:
    """Execute search subcommand.

    Args:
        args: Parsed command-line arguments
        settings: Loaded tool settings

    Returns:
        Exit code
    """
    try:
        re.compile(args.pattern)
    except re.error as e:
        logger.error(f"Invalid pattern {args.pattern!r}: {e}")
        return EXIT_VALIDATION_ERROR

    packaged = fetch_golang_binaries(settings)
    for import_path, package in search_packaged(packaged, args.pattern):
        print(f"{package.binary}: {import_path}")
    return EXIT_SUCCESS


def clone_command(args: argparse.Namespace, settings: ToolSettings) -> int:
    """Execute clone subcommand.

    Clones the packaging repository of a Debian source package and
    downloads its orig tarball.

    Args:
        args: Parsed command-line arguments
        settings: Loaded tool settings

    Returns:
        Exit code
    """
    check_dependencies("gbp")

    clone_package(args.package, Path.cwd())
    print(f"Successfully cloned {args.package}")
    return EXIT_SUCCESS


COMMANDS = {
    "version": version_command,
    "estimate": estimate_command,
    "check-depends": check_depends_command,
    "search": search_command,
    "clone": clone_command,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args)

    if not args.command:
        parser.print_help(sys.stderr)
        return EXIT_VALIDATION_ERROR

    try:
        settings = load_settings(Path(args.config) if args.config else None)
        return COMMANDS[args.command](args, settings)

    except SettingsError as e:
        logger.error(f"Settings error: {e}")
        print(f"\nERROR: {e}\n", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    except (ToolInvocationError, OutputFormatError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"\nERROR: {args.command} failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        if args.debug:
            traceback.print_exc()
        return EXIT_TOOL_ERROR

    except ArchiveError as e:
        logger.error(f"Could not query the Debian archive: {e}")
        print(f"\nERROR: {e}\n", file=sys.stderr)
        if args.debug:
            traceback.print_exc()
        return EXIT_ARCHIVE_ERROR

    except FileNotFoundError as e:
        logger.error(f"Dependency check failed: {e}")
        print(f"\nERROR: {e}\n", file=sys.stderr)
        return EXIT_DEPENDENCY_ERROR

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return EXIT_TOOL_ERROR

    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        print("\nERROR: Unexpected error\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        if args.debug:
            traceback.print_exc()
        return EXIT_TOOL_ERROR


def create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser with all subcommands.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="go-debian-tools",
        description="Tools for bringing Go modules into Debian",
        epilog="For more information, see the documentation.",
    )

    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Settings file (default: $GO_DEBIAN_TOOLS_CONFIG or "
        "~/.config/go-debian-tools/config.yaml)",
    )

    # Verbosity options
    verbosity_group = parser.add_mutually_exclusive_group()
    verbosity_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (show progress details)",
    )
    verbosity_group.add_argument(
        "--debug", action="store_true", help="Debug output (show all details)"
    )
    verbosity_group.add_argument(
        "-q", "--quiet", action="store_true", help="Quiet mode (errors only)"
    )

    # Version
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    version_parser = subparsers.add_parser(
        "version",
        help="Determine the Debian upstream version of a git checkout",
        description="Determine the Debian upstream version of a git checkout "
        "from its tags and commits",
    )
    version_parser.add_argument(
        "repo_dir",
        metavar="REPO_DIR",
        help="Path to the git checkout",
    )
    version_parser.add_argument(
        "--git-revision",
        metavar="REV",
        help="Preferred revision; used as the release if it names a tag",
    )
    version_parser.add_argument(
        "--force-prerelease",
        action="store_true",
        help="Package HEAD as a snapshot even if it is tagged",
    )
    version_parser.add_argument(
        "--import-path",
        metavar="PATH",
        help="Go import path of the repository, to show Debian package names",
    )
    version_parser.add_argument(
        "--type",
        metavar="TYPE",
        help="Package type: library, program, library+program or program+library",
    )
    version_parser.add_argument(
        "--program-package-name",
        metavar="NAME",
        help="Override the program package name",
    )
    version_parser.add_argument(
        "--allow-unknown-hoster",
        action="store_true",
        help="Derive a short host name for hosters not in the built-in table",
    )

    estimate_parser = subparsers.add_parser(
        "estimate",
        help="Estimate the amount of work for a package",
        description="Estimate the work necessary to bring a Go module into Debian "
        "by printing all modules not yet packaged",
    )
    estimate_parser.add_argument(
        "import_path",
        metavar="IMPORT_PATH",
        help="Go module import path (e.g., github.com/foo/bar)",
    )
    estimate_parser.add_argument(
        "--git-revision",
        metavar="REV",
        help="Revision of the module to estimate (default: go get's default)",
    )
    estimate_parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Colorize the report (default: auto)",
    )
    estimate_parser.add_argument(
        "--show-versions",
        action="store_true",
        help="Show the required version of each module",
    )

    check_parser = subparsers.add_parser(
        "check-depends",
        help="Compare go.mod with debian/control Build-Depends",
        description="Compare the dependencies of go.mod with the Build-Depends "
        "of debian/control",
    )
    check_parser.add_argument(
        "directory",
        metavar="DIR",
        nargs="?",
        default=".",
        help="Packaging checkout (default: current directory)",
    )

    search_parser = subparsers.add_parser(
        "search",
        help="Search Go import paths packaged in Debian",
        description="Search Go import paths packaged in Debian with a regular expression",
    )
    search_parser.add_argument(
        "pattern",
        metavar="PATTERN",
        help="Regular expression matched against import paths",
    )

    clone_parser = subparsers.add_parser(
        "clone",
        help="Clone a Go package from its Debian packaging repository",
        description="Clone the packaging repository of a Debian source package "
        "and download the appropriate tarball",
        epilog="Example: go-debian-tools clone golang-github-mmcdole-goxpp",
    )
    clone_parser.add_argument(
        "package",
        metavar="PACKAGE",
        help="Debian source package name",
    )

    return parser


def setup_logging(args: argparse.Namespace) -> None:
    """Configure logging based on command-line arguments.

    Args:
        args: Parsed command-line arguments
    """
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def check_dependencies(tool: str) -> None:
    """Check that a required system tool is available.

    Raises:
        FileNotFoundError: If the tool is missing
    """
    if not shutil.which(tool):
        raise FileNotFoundError(
            f"{tool} not found.\nInstall with: sudo apt install {_APT_PACKAGES[tool]}"
        )


_APT_PACKAGES = {"git": "git", "go": "golang-go", "gbp": "git-buildpackage"}


def _use_color(mode: str) -> bool:
    if mode == "always":
        return True
    if mode == "never":
        return False
    return sys.stdout.isatty()


if __name__ == "__main__":
    sys.exit(main())
