"""Build the pre-fetched assets consumed by the runtime and dependency steps.

Two kinds of files live in the assets directory:

- ``bun-<os>-<arch>.zip``: bun release archives, named with Node's os/arch
  names so the installer can pick one without network access.
- ``tsx.tar.gz``: an offline copy of ``node_modules`` for the default packages,
  with ``package.json`` / ``package-lock.json`` at the archive root.
"""
from __future__ import annotations

import json
import tarfile
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import requests

from .config import ActionSettings
from .dependencies import BUNDLE_MANIFESTS, combine_packages
from .errors import MissingArtifactError
from .executor import CommandRunner, run_command
from .log import ActionLog, NullLog
from .runtime import download_file
from .utils.fs import ensure_dir, write_text

DEFAULT_PLATFORMS: Tuple[Tuple[str, str], ...] = (
    ("linux", "x64"),
    ("linux", "arm64"),
    ("darwin", "x64"),
    ("darwin", "arm64"),
    ("win32", "x64"),
)

_BUN_OS = {"linux": "linux", "darwin": "darwin", "win32": "windows"}
_BUN_ARCH = {"x64": "x64", "arm64": "aarch64"}


def bun_release_url(os_name: str, arch: str, version: Optional[str] = None) -> str:
    """Download URL of the bun release zip for a Node-style os/arch pair."""
    if os_name not in _BUN_OS or arch not in _BUN_ARCH:
        raise ValueError(f"Unsupported bun platform: {os_name}-{arch}")
    asset = f"bun-{_BUN_OS[os_name]}-{_BUN_ARCH[arch]}.zip"
    if version:
        tag = version if version.startswith("bun-v") else f"bun-v{version.lstrip('v')}"
        return f"https://github.com/oven-sh/bun/releases/download/{tag}/{asset}"
    return f"https://github.com/oven-sh/bun/releases/latest/download/{asset}"


def fetch_bun_archives(
    settings: ActionSettings,
    *,
    platforms: Iterable[Tuple[str, str]] = DEFAULT_PLATFORMS,
    version: Optional[str] = None,
    session: Optional[requests.Session] = None,
    log: Optional[ActionLog] = None,
) -> List[Path]:
    log = log or NullLog()
    out: List[Path] = []
    for os_name, arch in platforms:
        url = bun_release_url(os_name, arch, version)
        dest = settings.bun_archive_path(os_name, arch)
        log.info(f"Download {url} -> {dest}")
        out.append(download_file(url, dest, timeout=settings.http_timeout_s, session=session))
    return out


def build_offline_bundle(
    settings: ActionSettings,
    *,
    extra_packages: Sequence[str] = (),
    runner: CommandRunner = run_command,
    log: Optional[ActionLog] = None,
) -> Path:
    """npm-install the default tsx packages in a scratch dir and archive them."""
    log = log or NullLog()
    packages = combine_packages(extra_packages, settings.always_packages, settings.node_packages)
    dest = settings.offline_bundle_path
    ensure_dir(dest.parent)

    with tempfile.TemporaryDirectory(prefix="tsx-bundle-") as td:
        work = Path(td)
        write_text(work / "package.json", json.dumps({"name": "tsx-bundle", "private": True}, indent=2) + "\n")
        log.info(f"npm install {' '.join(packages)}")
        runner(["npm", "install", *packages], cwd=work, silent=not log.debug_enabled, log=log)

        modules_dir = work / settings.modules_dir
        if not modules_dir.is_dir():
            raise MissingArtifactError(f"npm install produced no {settings.modules_dir}: {work}")

        with tarfile.open(dest, "w:gz") as tf:
            for entry in sorted(modules_dir.iterdir(), key=lambda p: p.name):
                tf.add(entry, arcname=entry.name)
            for name in BUNDLE_MANIFESTS:
                manifest = work / name
                if manifest.is_file():
                    tf.add(manifest, arcname=name)

    log.info(f"Wrote {dest}")
    return dest
