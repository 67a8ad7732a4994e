from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

from .errors import CommandError, MissingArtifactError
from .log import ActionLog, NullLog
from .models import ExecutionResult, RuntimeHandle

# Signature shared by run_command and the fakes used in tests.
CommandRunner = Callable[..., ExecutionResult]


def run_command(
    argv: Sequence[str],
    *,
    cwd: Optional[Path] = None,
    silent: bool = False,
    log: Optional[ActionLog] = None,
    env: Optional[Dict[str, str]] = None,
) -> ExecutionResult:
    """Run ``argv`` to completion and capture its output.

    stdout and stderr are captured separately and right-trimmed. Unless
    ``silent``, stdout is forwarded to ``log``; stderr is forwarded when debug
    logging is on.

    Raises:
        MissingArtifactError: the executable does not exist.
        CommandError: the process exits non-zero.
    """
    log = log or NullLog()
    args = [str(a) for a in argv]
    proc_env = None
    if env:
        proc_env = dict(os.environ)
        proc_env.update(env)

    log.debug(f"$ {' '.join(args)}")
    try:
        cp = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            env=proc_env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except FileNotFoundError as e:
        raise MissingArtifactError(f"Executable not found: {args[0]}") from e

    out = (cp.stdout or "").rstrip()
    err = (cp.stderr or "").rstrip()
    if not silent:
        log.raw(out)
    if err:
        log.debug(err)

    if cp.returncode != 0:
        raise CommandError(args, cp.returncode, err)
    return ExecutionResult(argv=tuple(args), returncode=cp.returncode, stdout=out, stderr=err)


def script_argv(runtime: RuntimeHandle, *, entry_file: Path, modules_dir: Path, tsx_launcher: str) -> list:
    """Command line that runs ``entry_file`` under ``runtime``.

    For tsx the launcher file must already exist; it is checked here so a
    missing install fails with a clear message instead of a node stack trace.
    """
    if runtime.kind == "bun":
        # -i: let bun resolve missing imports on the fly (auto_install mode).
        return [str(runtime.executable), "run", "-i", str(entry_file)]

    launcher = modules_dir / tsx_launcher
    if not launcher.is_file():
        raise MissingArtifactError(f"tsx launcher not found: {launcher}")
    return [str(runtime.executable), str(launcher), str(entry_file)]


def run_script(
    *,
    runtime: RuntimeHandle,
    workspace: Path,
    entry_file: Path,
    modules_dir: Path,
    tsx_launcher: str,
    silent: bool = False,
    log: Optional[ActionLog] = None,
    runner: CommandRunner = run_command,
) -> ExecutionResult:
    argv = script_argv(runtime, entry_file=entry_file, modules_dir=modules_dir, tsx_launcher=tsx_launcher)
    return runner(argv, cwd=workspace, silent=silent, log=log)
