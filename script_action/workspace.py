from __future__ import annotations

import secrets
import string
import tempfile
from pathlib import Path
from typing import Optional

from .errors import WorkspaceError
from .utils.fs import ensure_dir

_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LEN = 13


def random_suffix(length: int = _SUFFIX_LEN) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def create_workspace(*, prefix: str = "ts-", base_dir: Optional[Path] = None) -> Path:
    """Create ``<base_dir>/<prefix><random>`` and return its absolute path.

    ``base_dir`` defaults to the system temp directory. The workspace belongs to
    one invocation only; deleting it is left to the runner's own cleanup.
    """
    base = Path(base_dir) if base_dir is not None else Path(tempfile.gettempdir())
    path = (base / f"{prefix}{random_suffix()}").resolve()
    if path.exists():
        raise WorkspaceError("Workspace already exists", path)
    return ensure_dir(path)
