"""Schema definitions for go-debian-tools settings and archive data."""

from .archive import DebianPackage, GoImportPathEntry, NewSourceEntry
from .settings import ToolSettings

__all__ = [
    "DebianPackage",
    "GoImportPathEntry",
    "NewSourceEntry",
    "ToolSettings",
]
