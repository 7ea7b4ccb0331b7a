"""Terminal progress display for long downloads."""

import os
import stat
import sys
import threading
from pathlib import Path
from typing import TextIO

KIBI = 1 << 10
MEBI = 1 << 20
GIBI = 1 << 30
TEBI = 1 << 40


def humanize_bytes(size: int) -> str:
    """Format a byte count with a binary unit.

    Examples:
        >>> humanize_bytes(3 * MEBI)
        "3.00 MiB"
        >>> humanize_bytes(512)
        "0.50 KiB"
    """
    if size > TEBI:
        return f"{size / TEBI:.2f} TiB"
    if size > GIBI:
        return f"{size / GIBI:.2f} GiB"
    if size > MEBI:
        return f"{size / MEBI:.2f} MiB"
    return f"{size / KIBI:.2f} KiB"


def directory_size(path: Path) -> int:
    """Return the total size of the regular files below a directory."""
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for name in filenames:
            try:
                st = os.lstat(os.path.join(dirpath, name))
            except OSError:
                # Removed while walking
                continue
            if stat.S_ISREG(st.st_mode):
                total += st.st_size
    return total


class SizeProgress:
    """Show the growing size of a directory while a block runs.

    The line is redrawn in place every `interval` seconds. Nothing is
    written unless the stream is a terminal.

    Usage:
        with SizeProgress("go get", gopath):
            run_download()
    """

    def __init__(
        self,
        prefix: str,
        path: Path,
        stream: TextIO | None = None,
        interval: float = 0.25,
    ):
        self.prefix = prefix
        self.path = path
        self.stream = stream or sys.stdout
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._previous = 0

    def __enter__(self) -> "SizeProgress":
        if self.stream.isatty():
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, exc_type, exc_value, tb) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self.stream.write("\r" + " " * self._previous + "\r")
            self.stream.flush()

    def _run(self) -> None:
        while True:
            self.update()
            if self._stop.wait(self.interval):
                return

    def update(self) -> None:
        """Redraw the progress line with the current directory size."""
        line = f"{self.prefix}: {humanize_bytes(directory_size(self.path))}"
        self.stream.write("\r" + " " * self._previous + "\r" + line)
        self.stream.flush()
        self._previous = len(line)
