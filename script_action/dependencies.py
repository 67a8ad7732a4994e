from __future__ import annotations

import tarfile
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .config import ActionSettings
from .errors import WorkspaceError
from .executor import CommandRunner, run_command
from .log import ActionLog, NullLog
from .models import RuntimeHandle
from .utils.fs import ensure_dir, move_into, remove_tree

# Manifest files shipped at the top of the offline bundle; they belong in the
# workspace root next to node_modules.
BUNDLE_MANIFESTS = ("package.json", "package-lock.json")


def combine_packages(user_packages: Iterable[str], *defaults: Iterable[str]) -> List[str]:
    """User packages first, then defaults. Keeps the first occurrence of each id."""
    out: List[str] = []
    seen = set()
    for group in (user_packages, *defaults):
        for pkg in group:
            p = str(pkg or "").strip()
            if not p or p in seen:
                continue
            out.append(p)
            seen.add(p)
    return out


def default_packages(settings: ActionSettings, *, use_bun: bool, use_zx: bool) -> List[str]:
    out = list(settings.always_packages)
    if not use_bun:
        out.extend(settings.node_packages)
    if use_zx:
        out.extend(settings.zx_packages)
    return out


def extract_offline_bundle(bundle: Path, *, workspace: Path, modules_dir: Path) -> List[Path]:
    """Seed ``modules_dir`` from a pre-packaged ``.tar.gz`` of node_modules.

    The bundle's top-level ``package.json`` / ``package-lock.json`` are moved
    into the workspace root. Returns the moved manifest paths.
    """
    ensure_dir(modules_dir)
    try:
        with tarfile.open(bundle, "r:gz") as tf:
            tf.extractall(modules_dir, filter="data")
    except (OSError, tarfile.TarError) as e:
        raise WorkspaceError(f"Failed to extract offline bundle ({e})", bundle) from e

    moved: List[Path] = []
    for name in BUNDLE_MANIFESTS:
        src = modules_dir / name
        if src.is_file():
            moved.append(move_into(src, workspace))
    return moved


def install_command(runtime: RuntimeHandle, packages: Sequence[str]) -> List[str]:
    if runtime.kind == "bun":
        return [str(runtime.executable), "install", *packages]
    return ["npm", "install", *packages]


def install_dependencies(
    *,
    workspace: Path,
    packages: Sequence[str],
    runtime: RuntimeHandle,
    settings: ActionSettings,
    auto_install: bool = False,
    use_zx: bool = False,
    silent: bool = False,
    log: Optional[ActionLog] = None,
    runner: CommandRunner = run_command,
) -> List[str]:
    """Populate ``<workspace>/node_modules`` for the script.

    With bun and ``auto_install`` the directory is removed instead, which makes
    bun resolve imports itself on first run. Returns the package ids handed to
    the package manager (empty in auto-install mode).

    Raises:
        CommandError: the package manager exits non-zero.
        WorkspaceError: creating, deleting or extracting into the directory fails.
    """
    log = log or NullLog()
    modules_dir = workspace / settings.modules_dir
    use_bun = runtime.kind == "bun"

    if use_bun and auto_install:
        log.info(f"auto_install is enabled, deleting {settings.modules_dir} directory")
        remove_tree(modules_dir)
        return []

    ensure_dir(modules_dir)

    bundle = settings.offline_bundle_path
    if bundle.is_file():
        log.info(f"Extracting {bundle.name} to {settings.modules_dir}")
        extract_offline_bundle(bundle, workspace=workspace, modules_dir=modules_dir)
    else:
        log.debug(f"No offline bundle at {bundle}")

    combined = combine_packages(packages, default_packages(settings, use_bun=use_bun, use_zx=use_zx))
    installer = "bun" if use_bun else "npm"
    log.info(f"Use {installer} to install packages {', '.join(combined)}")
    runner(install_command(runtime, combined), cwd=workspace, silent=silent, log=log)
    return combined
