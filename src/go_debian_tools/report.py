"""Text rendering of dependency reports."""

from collections.abc import Iterable

from go_debian_tools.module_graph import ReportKind, ReportLine

INDENT = "  "

DIM = "\033[90m"
CYAN = "\033[36m"
RESET = "\033[0m"

NEW_QUEUE_URL = "https://ftp-master.debian.org/new/{source}_{version}.html"


def _dim(text: str, color: bool) -> str:
    return f"{DIM}{text}{RESET}" if color else text


def _hyperlink(url: str, text: str) -> str:
    """Wrap text in an OSC 8 terminal hyperlink."""
    return f"\033]8;;{url}\033\\{text}\033]8;;\033\\"


def format_report_line(
    line: ReportLine, color: bool = True, show_versions: bool = False
) -> str:
    """Render one report line.

    Args:
        line: Line to render
        color: Use ANSI colours and terminal hyperlinks
        show_versions: Append the required "@version" to module names

    Returns:
        Rendered line without trailing newline
    """
    indent = INDENT * line.depth
    module = line.module
    if show_versions and line.version:
        module = f"{module}@{line.version}"

    if line.kind is ReportKind.REPEAT:
        return indent + _dim(f"{module} ({line.count})", color)

    if line.kind is ReportKind.IN_NEW:
        url = NEW_QUEUE_URL.format(source=line.source, version=line.new_version)
        if color:
            return f"{indent}{CYAN}{module} ({_hyperlink(url, 'in NEW')}){RESET}"
        return f"{indent}{module} (in NEW: {url})"

    if line.repo_root_seen:
        return indent + _dim(module, color)

    root = line.repo_root
    if root and line.module.startswith(root) and len(line.module) > len(root):
        return indent + root + _dim(module[len(root) :], color)

    return indent + module


def format_report(
    lines: Iterable[ReportLine], color: bool = True, show_versions: bool = False
) -> str:
    """Render a whole report, one module per line."""
    return "\n".join(
        format_report_line(line, color=color, show_versions=show_versions)
        for line in lines
    )
