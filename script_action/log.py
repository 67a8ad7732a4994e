"""Line-oriented log sink for the action.

Every component receives an ``ActionLog`` instead of printing directly. Lines
are tagged with the component name (``[render] ...``, ``[deps][WARN] ...``) and
written to stdout, where the GitHub runner picks them up. Writes are best
effort: a closed or broken stream never raises into the caller.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import IO, Iterator, List, Optional


class ActionLog:
    def __init__(self, *, debug: bool = False, stream: Optional[IO[str]] = None, tags: Optional[List[str]] = None):
        self.debug_enabled = bool(debug)
        self._stream = stream
        self._tags = list(tags or [])

    def child(self, tag: str) -> "ActionLog":
        """Return a sink that prefixes every line with ``[tag]``."""
        return ActionLog(debug=self.debug_enabled, stream=self._stream, tags=self._tags + [tag])

    def _prefix(self, level: str = "") -> str:
        head = "".join(f"[{t}]" for t in self._tags)
        if level:
            head += f"[{level}]"
        return f"{head} " if head else ""

    def _write(self, line: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        try:
            stream.write(line + "\n")
            stream.flush()
        except (OSError, ValueError):
            # Closed or broken stream.
            pass

    def info(self, msg: str) -> None:
        self._write(self._prefix() + msg)

    def warning(self, msg: str) -> None:
        self._write(self._prefix("WARN") + msg)

    def debug(self, msg: str) -> None:
        if self.debug_enabled:
            self._write(self._prefix("DEBUG") + msg)

    def raw(self, text: str) -> None:
        """Forward text untouched (child process output)."""
        if text:
            self._write(text.rstrip("\n"))

    @contextmanager
    def group(self, title: str) -> Iterator["ActionLog"]:
        """Fold the enclosed lines into a collapsible group in the Actions log."""
        self._write(f"::group::{title}")
        try:
            yield self
        finally:
            self._write("::endgroup::")


class NullLog(ActionLog):
    """Sink that drops everything; used when a caller does not pass a log."""

    def _write(self, line: str) -> None:
        return None

    def child(self, tag: str) -> "ActionLog":
        return self
