"""Search the Go import paths packaged in Debian."""

import re
from collections.abc import Mapping

from schemas.archive import DebianPackage


def search_packaged(
    packaged: Mapping[str, DebianPackage], pattern: str
) -> list[tuple[str, DebianPackage]]:
    """Find packaged import paths matching a regular expression.

    Args:
        packaged: Import path to Debian package mapping
        pattern: Regular expression, matched anywhere in the import path

    Returns:
        (import_path, package) pairs sorted by import path

    Raises:
        re.error: If the pattern is not a valid regular expression
    """
    regex = re.compile(pattern)
    return sorted(
        (import_path, package)
        for import_path, package in packaged.items()
        if regex.search(import_path)
    )
