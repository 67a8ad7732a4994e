from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import jsonschema
import yaml

from ..errors import ConfigurationError

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
REPO_ROOT = PACKAGE_ROOT.parent
DEFAULT_CONFIG_PATH = PACKAGE_ROOT / "config" / "action_config.yml"


def _string_list() -> Dict[str, Any]:
    return {"type": "array", "items": {"type": "string", "minLength": 1}}


def _non_empty_string() -> Dict[str, Any]:
    return {"type": "string", "minLength": 1}


def _section(required: Tuple[str, ...], properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "required": list(required),
        "properties": properties,
        "additionalProperties": False,
    }


ACTION_CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["version", "workspace", "templates", "default_packages", "tsx", "assets", "bun"],
    "properties": {
        "version": {"type": "integer", "enum": [1]},
        "workspace": _section(
            ("prefix", "entry_file", "modules_dir"),
            {
                "prefix": _non_empty_string(),
                "entry_file": _non_empty_string(),
                "modules_dir": _non_empty_string(),
            },
        ),
        "templates": _section(("root",), {"root": _non_empty_string()}),
        "default_packages": _section(
            ("always",),
            {"always": _string_list(), "node": _string_list(), "zx": _string_list()},
        ),
        "tsx": _section(("launcher",), {"launcher": _non_empty_string()}),
        "assets": _section(
            ("dir", "offline_bundle", "bun_archive_pattern"),
            {
                "dir": _non_empty_string(),
                "offline_bundle": _non_empty_string(),
                "bun_archive_pattern": {"type": "string", "pattern": r"\{os\}.*\{arch\}"},
            },
        ),
        "bun": _section(
            ("install_script_url", "install_script_url_windows"),
            {
                "install_script_url": _non_empty_string(),
                "install_script_url_windows": _non_empty_string(),
                "http_timeout_s": {"type": "number", "exclusiveMinimum": 0},
            },
        ),
    },
    "additionalProperties": False,
}


@dataclass(frozen=True)
class ActionSettings:
    """Validated view of action_config.yml with paths resolved."""

    workspace_prefix: str = "ts-"
    entry_file: str = "src/index.ts"
    modules_dir: str = "node_modules"
    template_root: Path = PACKAGE_ROOT / "templates" / "project"
    always_packages: Tuple[str, ...] = ("@actions/core", "@actions/exec")
    node_packages: Tuple[str, ...] = ("tsx",)
    zx_packages: Tuple[str, ...] = ("zx",)
    tsx_launcher: str = "tsx/dist/cli.mjs"
    assets_dir: Path = REPO_ROOT / "public"
    offline_bundle: str = "tsx.tar.gz"
    bun_archive_pattern: str = "bun-{os}-{arch}.zip"
    bun_install_script_url: str = "https://bun.sh/install"
    bun_install_script_url_windows: str = "https://bun.sh/install.ps1"
    http_timeout_s: float = 60.0
    source_path: Optional[Path] = field(default=None, compare=False)

    @property
    def offline_bundle_path(self) -> Path:
        return self.assets_dir / self.offline_bundle

    def bun_archive_path(self, os_name: str, arch: str) -> Path:
        return self.assets_dir / self.bun_archive_pattern.format(os=os_name, arch=arch)


def resolve_action_config_path(cli_path: Optional[str] = None) -> Path:
    """Resolve the action config YAML path.

    Precedence:
      1) CLI flag --config
      2) SCRIPT_ACTION_CONFIG
      3) script_action/config/action_config.yml
    """
    if cli_path and str(cli_path).strip():
        return Path(str(cli_path).strip()).expanduser().resolve()

    env_path = str(os.environ.get("SCRIPT_ACTION_CONFIG", "") or "").strip()
    if env_path:
        return Path(env_path).expanduser().resolve()

    return DEFAULT_CONFIG_PATH


def _resolve_under(base: Path, value: str) -> Path:
    p = Path(value).expanduser()
    return p if p.is_absolute() else (base / p).resolve()


def _resolve_assets_dir(value: str) -> Path:
    # Pre-fetched archives may live outside the checkout (e.g. a runner tool cache).
    env_dir = str(os.environ.get("SCRIPT_ACTION_ASSETS_DIR", "") or "").strip()
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    return _resolve_under(REPO_ROOT, value)


def load_action_config(cli_path: Optional[str] = None) -> ActionSettings:
    """Load, validate and resolve the action config.

    Raises:
        ConfigurationError: the file is missing, is not YAML, or fails the schema.
    """
    path = resolve_action_config_path(cli_path)
    if not path.exists():
        raise ConfigurationError(f"action config not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"action config is not valid YAML: {path}: {e}") from e

    try:
        jsonschema.validate(instance=data, schema=ACTION_CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigurationError(f"action config schema validation failed at {where}: {e.message}") from e

    ws = data["workspace"]
    pkgs = data["default_packages"]
    assets = data["assets"]
    bun = data["bun"]

    return ActionSettings(
        workspace_prefix=ws["prefix"],
        entry_file=ws["entry_file"],
        modules_dir=ws["modules_dir"],
        template_root=_resolve_under(PACKAGE_ROOT, data["templates"]["root"]),
        always_packages=tuple(pkgs.get("always") or ()),
        node_packages=tuple(pkgs.get("node") or ()),
        zx_packages=tuple(pkgs.get("zx") or ()),
        tsx_launcher=data["tsx"]["launcher"],
        assets_dir=_resolve_assets_dir(assets["dir"]),
        offline_bundle=assets["offline_bundle"],
        bun_archive_pattern=assets["bun_archive_pattern"],
        bun_install_script_url=bun["install_script_url"],
        bun_install_script_url_windows=bun["install_script_url_windows"],
        http_timeout_s=float(bun.get("http_timeout_s", 60)),
        source_path=path,
    )
