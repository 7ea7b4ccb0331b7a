"""Utility functions for go-debian-tools."""

from .fs import find_vendor_dirs, force_remove_tree
from .progress import SizeProgress, humanize_bytes

__all__ = ["SizeProgress", "find_vendor_dirs", "force_remove_tree", "humanize_bytes"]
