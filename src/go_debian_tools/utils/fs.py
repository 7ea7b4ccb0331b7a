"""Filesystem utilities."""

import os
import shutil
import stat
from pathlib import Path

# Version control metadata directories never hold vendored code
VCS_DIRS = {".git", ".hg", ".bzr"}


def find_vendor_dirs(directory: Path) -> list[Path]:
    """Find vendor/ directories below a source tree.

    Args:
        directory: Root of the source tree

    Returns:
        Paths of vendor directories relative to `directory`, sorted
    """
    found: list[Path] = []
    for dirpath, dirnames, _filenames in os.walk(directory):
        dirnames[:] = [d for d in dirnames if d not in VCS_DIRS]
        if "vendor" in dirnames:
            found.append(Path(dirpath, "vendor").relative_to(directory))
            # Nested vendor trees go away with their parent
            dirnames.remove("vendor")
    return sorted(found)


def force_remove_tree(path: Path) -> None:
    """Remove a directory tree, including read-only files and directories.

    The Go module cache is written read-only, which makes a plain
    shutil.rmtree fail.
    """
    if not path.exists():
        return

    for dirpath, _dirnames, _filenames in os.walk(path):
        os.chmod(dirpath, os.stat(dirpath).st_mode | stat.S_IRWXU)

    shutil.rmtree(path)
