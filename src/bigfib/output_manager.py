# output_manager.py

from __future__ import annotations

import os

from bigfib.fmt import strip_ansi
from bigfib.workspace import workspace_dir


def resolve_output_path(path: str, workspace_root: str | os.PathLike) -> str:
    """
    Resolve user-provided output path.

    Rules:
    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to <workspace>/output
    """
    if not path:
        raise ValueError("Output path is empty")

    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(os.fspath(workspace_root), "output", path))


class OutputManager:
    """
    Handles all printing/output, to screen and/or an append-only file.

    Usage:
        om = OutputManager(output_file="fib.txt")
        om.write("F(10) = 55")   # prints and appends (ANSI stripped)
        om.close()               # blank line between runs
    """

    def __init__(self, output_file: str | None = None, quiet: bool = False):
        self.quiet = quiet
        self._buffer: list[str] = []
        self.path: str | None = None

        if output_file:
            self.path = resolve_output_path(output_file, workspace_dir())
            parent = os.path.dirname(self.path)
            if parent:
                os.makedirs(parent, exist_ok=True)

    def __enter__(self) -> OutputManager:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def write(self, *args, sep: str = " ", end: str = "\n") -> None:
        """Write to screen and file (if configured)."""
        text = sep.join(str(a) for a in args) + end
        self._buffer.append(text)

        if not self.quiet:
            print(text, end="", flush=True)

        if self.path:
            with open(self.path, "a", encoding="utf-8") as fh:
                fh.write(strip_ansi(text))

    def getvalue(self) -> str:
        """Returns everything written (with color codes)."""
        return "".join(self._buffer)

    def close(self) -> None:
        """Add a separator line between runs in the output file."""
        if self.path and self._buffer:
            with open(self.path, "a", encoding="utf-8") as fh:
                fh.write("\n")
            self._buffer.clear()
