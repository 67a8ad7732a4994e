from __future__ import annotations

import os
import shutil
import stat
from pathlib import Path

from ..errors import WorkspaceError


def ensure_dir(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WorkspaceError(f"Failed to create directory ({e.strerror or e})", path) from e
    return path


def remove_tree(path: Path) -> bool:
    """Delete a directory tree. Returns False when there was nothing to delete."""
    if not path.exists():
        return False
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise WorkspaceError(f"Failed to delete directory ({e.strerror or e})", path) from e
    return True


def write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    ensure_dir(path.parent)
    try:
        # newline="" keeps template line endings byte-for-byte.
        with path.open("w", encoding=encoding, newline="") as f:
            f.write(text)
    except OSError as e:
        raise WorkspaceError(f"Failed to write file ({e.strerror or e})", path) from e


def read_text(path: Path, encoding: str = "utf-8") -> str:
    try:
        with path.open("r", encoding=encoding, newline="") as f:
            return f.read()
    except OSError as e:
        raise WorkspaceError(f"Failed to read file ({e.strerror or e})", path) from e


def move_into(src: Path, dst_dir: Path) -> Path:
    """Move ``src`` into ``dst_dir``, replacing a file of the same name."""
    target = dst_dir / src.name
    try:
        if target.exists():
            target.unlink()
        shutil.move(str(src), str(target))
    except OSError as e:
        raise WorkspaceError(f"Failed to move file ({e.strerror or e})", src) from e
    return target


def make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
