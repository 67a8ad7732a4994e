from __future__ import annotations

import re
from typing import List, Sequence

from .github.workflow import GithubActionsHost
from .models import DeployMode, InvocationConfig

_PACKAGE_SPLIT_RE = re.compile(r"[,\s]+")


def normalize_packages(lines: Sequence[str]) -> List[str]:
    """Turn the ``packages`` input into package identifiers.

    A single line may hold several identifiers separated by commas or whitespace
    (``zod, axios typescript``); multi-line input is taken one identifier per line.
    """
    items = [str(x).strip() for x in lines if str(x or "").strip()]
    if len(items) == 1:
        items = [p for p in _PACKAGE_SPLIT_RE.split(items[0]) if p]
    return items


def resolve_inputs(host: GithubActionsHost, *, mode: DeployMode = "node") -> InvocationConfig:
    """Read the action inputs.

    Raises ConfigurationError when ``script`` is missing; nothing else is touched
    before that check.
    """
    script = host.get_input("script", required=True)
    packages = normalize_packages(host.get_multiline_input("packages"))

    if mode == "node":
        use_bun = host.get_bool_input("bun")
        use_zx = host.get_bool_input("zx")
    else:
        use_bun, use_zx = True, False

    return InvocationConfig(
        script=script,
        packages=tuple(packages),
        use_bun=use_bun,
        use_zx=use_zx,
        auto_install=host.get_bool_input("auto_install"),
        silent=host.get_bool_input("silent"),
        debug=host.get_bool_input("debug") or host.is_debug(),
    )
