from __future__ import annotations

import sys
from pathlib import Path as _Path

# Allow running from a checkout without installing the package.
_REPO_ROOT = _Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

import argparse  # noqa: E402
from typing import List, Tuple  # noqa: E402

from script_action.assets import DEFAULT_PLATFORMS, build_offline_bundle, fetch_bun_archives  # noqa: E402
from script_action.config import load_action_config  # noqa: E402
from script_action.log import ActionLog  # noqa: E402


def _parse_platforms(values: List[str]) -> List[Tuple[str, str]]:
    out: List[Tuple[str, str]] = []
    for v in values:
        os_name, _, arch = v.partition("-")
        if not os_name or not arch:
            raise SystemExit(f"--platform expects <os>-<arch>, got {v!r}")
        out.append((os_name, arch))
    return out


def main() -> int:
    ap = argparse.ArgumentParser(description="Prefetch bun archives and build the offline tsx bundle")
    ap.add_argument("--config", default=None)
    ap.add_argument("--bun-version", default=None, help="e.g. 1.1.30 (default: latest)")
    ap.add_argument("--platform", action="append", default=[], help="<os>-<arch>, repeatable (Node naming)")
    ap.add_argument("--skip-bun", action="store_true")
    ap.add_argument("--skip-bundle", action="store_true")
    ap.add_argument("--package", action="append", default=[], help="extra package for the offline bundle")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args()

    settings = load_action_config(args.config)
    log = ActionLog(debug=args.debug).child("assets")
    log.info(f"assets_dir: {settings.assets_dir}")

    if not args.skip_bun:
        platforms = _parse_platforms(args.platform) if args.platform else list(DEFAULT_PLATFORMS)
        fetch_bun_archives(settings, platforms=platforms, version=args.bun_version, log=log)

    if not args.skip_bundle:
        build_offline_bundle(settings, extra_packages=args.package, log=log)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
