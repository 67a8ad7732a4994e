from __future__ import annotations

import os
import platform
import shutil
import sys
import tempfile
import time
import zipfile
from pathlib import Path
from typing import Mapping, Optional

import requests

from .config import ActionSettings
from .errors import DownloadError, MissingArtifactError, WorkspaceError
from .executor import CommandRunner, run_command
from .log import ActionLog, NullLog
from .models import DeployMode, RuntimeHandle, RuntimeKind
from .utils.fs import ensure_dir, make_executable

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


def host_os() -> str:
    """Host OS in Node's naming (win32 | linux | darwin)."""
    if sys.platform.startswith("win"):
        return "win32"
    if sys.platform == "darwin":
        return "darwin"
    return "linux"


def host_arch() -> str:
    machine = platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine)


def bun_install_dir(env: Mapping[str, str]) -> Path:
    custom = str(env.get("BUN_INSTALL", "") or "").strip()
    if custom:
        return Path(custom).expanduser()
    return Path.home() / ".bun"


def bun_binary_path(install_dir: Path, os_name: str) -> Path:
    return install_dir / "bin" / ("bun.exe" if os_name == "win32" else "bun")


def extract_bun_archive(archive: Path, bin_dir: Path) -> Path:
    """Extract the bun executable from a release zip into ``bin_dir``.

    Release zips nest the binary one level down (``bun-linux-x64/bun``); the
    directory part is dropped.
    """
    ensure_dir(bin_dir)
    try:
        with zipfile.ZipFile(archive, "r") as zf:
            members = [n for n in zf.namelist() if Path(n).name in ("bun", "bun.exe")]
            if not members:
                raise MissingArtifactError(f"No bun executable inside archive: {archive}")
            member = sorted(members)[0]
            target = bin_dir / Path(member).name
            with zf.open(member) as src, target.open("wb") as dst:
                shutil.copyfileobj(src, dst)
    except (OSError, zipfile.BadZipFile) as e:
        raise WorkspaceError(f"Failed to extract bun archive ({e})", archive) from e
    make_executable(target)
    return target


def download_file(url: str, dest: Path, *, timeout: float, session: Optional[requests.Session] = None) -> Path:
    sess = session or requests.Session()
    try:
        r = sess.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e
    ensure_dir(dest.parent)
    dest.write_bytes(r.content)
    return dest


def _install_bun_from_vendor(
    *,
    settings: ActionSettings,
    os_name: str,
    install_dir: Path,
    log: ActionLog,
    runner: CommandRunner,
    session: Optional[requests.Session],
) -> None:
    with tempfile.TemporaryDirectory(prefix="bun-install-") as td:
        scratch = Path(td)
        if os_name == "win32":
            url = settings.bun_install_script_url_windows
            script = download_file(url, scratch / "install.ps1", timeout=settings.http_timeout_s, session=session)
            argv = ["powershell", "-NoProfile", "-ExecutionPolicy", "Bypass", "-File", str(script)]
        else:
            url = settings.bun_install_script_url
            script = download_file(url, scratch / "install.sh", timeout=settings.http_timeout_s, session=session)
            argv = ["bash", str(script)]

        log.info(f"Install from vendor script <{url}>")
        runner(argv, cwd=scratch, silent=not log.debug_enabled, log=log, env={"BUN_INSTALL": str(install_dir)})


def ensure_bun(
    *,
    settings: ActionSettings,
    log: Optional[ActionLog] = None,
    runner: CommandRunner = run_command,
    env: Optional[Mapping[str, str]] = None,
    session: Optional[requests.Session] = None,
) -> RuntimeHandle:
    """Make sure bun is installed and return its handle.

    Order: existing binary, pre-fetched ``bun-<os>-<arch>.zip``, vendor install
    script. Calling this again after a successful install is a no-op.
    """
    log = log or NullLog()
    env = dict(os.environ) if env is None else env
    t0 = time.time()

    os_name = host_os()
    arch = host_arch()
    install_dir = bun_install_dir(env)
    binary = bun_binary_path(install_dir, os_name)
    log.info(f"System: {os_name} {arch}")
    log.info(f"Bun install directory: {install_dir}")

    if binary.is_file():
        log.info(f"Bun already installed: {binary}")
        return RuntimeHandle(kind="bun", executable=binary)

    archive = settings.bun_archive_path(os_name, arch)
    if archive.is_file():
        log.info(f"Install from local file {archive}")
        extract_bun_archive(archive, binary.parent)
    else:
        _install_bun_from_vendor(
            settings=settings,
            os_name=os_name,
            install_dir=install_dir,
            log=log,
            runner=runner,
            session=session,
        )

    if not binary.is_file():
        raise MissingArtifactError(f"bun executable not found after install: {binary}")

    log.info(f"Spend time: {round((time.time() - t0) * 1000)}ms")
    return RuntimeHandle(kind="bun", executable=binary)


def find_executable(name: str, env: Mapping[str, str]) -> Optional[Path]:
    found = shutil.which(name, path=env.get("PATH"))
    return Path(found) if found else None


def resolve_preinstalled_bun(env: Mapping[str, str]) -> RuntimeHandle:
    """Locate bun provided by an earlier workflow step (composite mode)."""
    found = find_executable("bun", env)
    if found is None:
        candidate = bun_binary_path(bun_install_dir(env), host_os())
        found = candidate if candidate.is_file() else None
    if found is None:
        raise MissingArtifactError("bun executable not found on PATH or in the bun install directory")
    return RuntimeHandle(kind="bun", executable=found)


def ensure_runtime(
    kind: RuntimeKind,
    *,
    settings: ActionSettings,
    mode: DeployMode = "node",
    log: Optional[ActionLog] = None,
    runner: CommandRunner = run_command,
    env: Optional[Mapping[str, str]] = None,
    session: Optional[requests.Session] = None,
) -> RuntimeHandle:
    """Return a handle for the requested runtime, installing bun if needed.

    tsx needs no install here: the tsx package arrives with the dependency step
    and runs on the host ``node``.
    """
    env = dict(os.environ) if env is None else env

    if kind == "bun":
        if mode == "composite":
            return resolve_preinstalled_bun(env)
        return ensure_bun(settings=settings, log=log, runner=runner, env=env, session=session)

    node = find_executable("node", env)
    if node is None:
        raise MissingArtifactError("node executable not found on PATH")
    return RuntimeHandle(kind="tsx", executable=node)
