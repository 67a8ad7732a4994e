from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class ActionError(Exception):
    """Base class for errors raised while running the action."""


class ConfigurationError(ActionError):
    """Raised when a required input, the config file, or the template set is invalid."""


class WorkspaceError(ActionError):
    """Raised when a filesystem operation on the workspace fails."""

    def __init__(self, message: str, path: Optional[Path] = None):
        if path is not None:
            message = f"{message}: {path}"
        super().__init__(message)
        self.path = path


class CommandError(ActionError):
    """Raised when an external command exits non-zero."""

    def __init__(self, argv: Sequence[str], returncode: Optional[int], stderr: str = ""):
        cmd = " ".join(str(a) for a in argv)
        message = f"Failed to execute command: {cmd} (exit code {returncode})"
        if stderr.strip():
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr


class MissingArtifactError(ActionError):
    """Raised when an expected binary, launcher or rendered file is absent."""


class DownloadError(ActionError):
    """Raised when fetching a vendor installer or release asset fails."""
