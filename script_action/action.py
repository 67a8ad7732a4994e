from __future__ import annotations

from pathlib import Path
from typing import IO, Mapping, Optional

import requests

from .config import ActionSettings, load_action_config
from .dependencies import install_dependencies
from .errors import MissingArtifactError
from .executor import CommandRunner, run_command, run_script
from .github.workflow import GithubActionsHost
from .inputs import resolve_inputs
from .log import ActionLog
from .models import DeployMode
from .reporter import report_failure, report_success
from .runtime import ensure_runtime
from .templates import render_templates
from .utils.fs import read_text
from .workspace import create_workspace


def run_action(
    host: GithubActionsHost,
    *,
    mode: DeployMode = "node",
    settings: Optional[ActionSettings] = None,
    config_path: Optional[str] = None,
    runner: CommandRunner = run_command,
    env: Optional[Mapping[str, str]] = None,
    session: Optional[requests.Session] = None,
    workspace_base: Optional[Path] = None,
    stream: Optional[IO[str]] = None,
) -> int:
    """Run the whole action once and report exactly one outcome.

    Steps run strictly in order: inputs, workspace, runtime, dependencies,
    templates, script. The first exception stops the flow and becomes the
    failure reason. Returns the process exit code.
    """
    try:
        cfg = resolve_inputs(host, mode=mode)
        log = ActionLog(debug=cfg.debug, stream=stream)
        if settings is None:
            settings = load_action_config(config_path)

        log.info(f"Mode: {mode}")
        log.info(f"Runner: {'bun' if cfg.use_bun else 'tsx'}")

        workspace = create_workspace(prefix=settings.workspace_prefix, base_dir=workspace_base)
        modules_dir = workspace / settings.modules_dir
        entry_file = workspace / settings.entry_file
        log.info(f"Directory: {workspace}")

        runtime = ensure_runtime(
            cfg.runtime_kind,
            settings=settings,
            mode=mode,
            log=log.child("runtime"),
            runner=runner,
            env=env,
            session=session,
        )
        log.info(f"Runtime executable: {runtime.executable}")

        install_dependencies(
            workspace=workspace,
            packages=cfg.packages,
            runtime=runtime,
            settings=settings,
            auto_install=cfg.auto_install,
            use_zx=cfg.use_zx,
            silent=cfg.silent,
            log=log.child("deps"),
            runner=runner,
        )

        with log.group("Script"):
            log.raw(cfg.script)

        render_templates(settings.template_root, workspace, cfg.template_answers(), log=log.child("render"))
        if not entry_file.is_file():
            raise MissingArtifactError(f"Entry file not found after rendering: {entry_file}")

        with log.group("Content"):
            log.raw(read_text(entry_file))

        run_script(
            runtime=runtime,
            workspace=workspace,
            entry_file=entry_file,
            modules_dir=modules_dir,
            tsx_launcher=settings.tsx_launcher,
            silent=cfg.silent,
            log=log,
            runner=runner,
        )
        report_success(host)
    except Exception as e:
        report_failure(host, e)
        return 1
    return 0
