from __future__ import annotations

import tomllib
from pathlib import Path


def test_requires_python_supports_tar_data_filter() -> None:
    """Offline bundles are extracted with ``tarfile`` ``filter="data"``, which
    older 3.10/3.11 patch releases reject with TypeError."""

    repo_root = Path(__file__).resolve().parents[1]
    meta = tomllib.loads((repo_root / "pyproject.toml").read_text(encoding="utf-8"))
    assert meta["project"]["requires-python"] == ">=3.12"


def test_templates_ship_no_package_manifest() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    project = repo_root / "script_action" / "templates" / "project"
    assert (project / "src" / "index.ts").is_file()
    assert not (project / "package.json").exists()
