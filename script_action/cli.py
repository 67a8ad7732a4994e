from __future__ import annotations

import argparse
import json
import os
from pathlib import Path

from .action import run_action
from .config import load_action_config
from .github.workflow import GithubActionsHost
from .log import ActionLog
from .models import DEPLOY_MODE_VALUES, RUNTIME_KIND_VALUES
from .runtime import ensure_runtime
from .templates import render_templates
from .utils.fs import read_text


def _mode(args: argparse.Namespace) -> str:
    if args.mode:
        return args.mode
    env_mode = str(os.environ.get("SCRIPT_ACTION_MODE", "") or "").strip()
    return env_mode if env_mode in DEPLOY_MODE_VALUES else "node"


def cmd_run(args: argparse.Namespace) -> int:
    host = GithubActionsHost()
    return run_action(host, mode=_mode(args), config_path=args.config)


def cmd_render(args: argparse.Namespace) -> int:
    settings = load_action_config(args.config)
    if args.script_file:
        script = read_text(Path(args.script_file))
    else:
        script = args.script or ""
    dest = Path(args.dest).resolve()
    log = ActionLog().child("render")
    files = render_templates(settings.template_root, dest, {"script": script, "bun": args.bun, "zx": args.zx}, log=log)
    print(json.dumps({"dest": str(dest), "files": [str(p) for p in files]}))
    return 0


def cmd_install_runtime(args: argparse.Namespace) -> int:
    settings = load_action_config(args.config)
    log = ActionLog(debug=args.debug).child("runtime")
    handle = ensure_runtime(args.kind, settings=settings, mode=_mode(args), log=log)
    print(json.dumps({"kind": handle.kind, "executable": str(handle.executable)}))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="script-action")
    p.add_argument("--config", default=None, help="Path to action_config.yml (default: bundled)")
    p.add_argument("--mode", choices=list(DEPLOY_MODE_VALUES), default=None)
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("run", help="Run the action using INPUT_* environment variables")
    sp.set_defaults(func=cmd_run)

    sp = sub.add_parser("render", help="Render the project templates around a script")
    sp.add_argument("--dest", required=True)
    src = sp.add_mutually_exclusive_group(required=True)
    src.add_argument("--script")
    src.add_argument("--script-file")
    sp.add_argument("--bun", action="store_true")
    sp.add_argument("--zx", action="store_true")
    sp.set_defaults(func=cmd_render)

    sp = sub.add_parser("install-runtime", help="Ensure a runtime is installed and print its path")
    sp.add_argument("--kind", choices=list(RUNTIME_KIND_VALUES), default="bun")
    sp.add_argument("--debug", action="store_true")
    sp.set_defaults(func=cmd_install_runtime)

    return p


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    return int(args.func(args) or 0)


if __name__ == "__main__":
    raise SystemExit(main())
