from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Literal, Tuple

# Runtime discriminator shared by the installer, dependency step and executor.
RuntimeKind = Literal["bun", "tsx"]
RUNTIME_KIND_VALUES: Tuple[str, ...] = ("bun", "tsx")

# Deployment mode of the action itself.
#   node:      the action installs bun on demand and honours the bun/zx inputs
#   composite: bun is provided by an earlier workflow step and always used
DeployMode = Literal["node", "composite"]
DEPLOY_MODE_VALUES: Tuple[str, ...] = ("node", "composite")


@dataclass(frozen=True)
class InvocationConfig:
    """Resolved inputs for a single action invocation."""

    script: str
    packages: Tuple[str, ...] = ()
    use_bun: bool = False
    use_zx: bool = False
    auto_install: bool = False
    silent: bool = False
    debug: bool = False

    @property
    def runtime_kind(self) -> RuntimeKind:
        return "bun" if self.use_bun else "tsx"

    def template_answers(self) -> Dict[str, Any]:
        return {"script": self.script, "bun": self.use_bun, "zx": self.use_zx}


@dataclass(frozen=True)
class RuntimeHandle:
    kind: RuntimeKind
    executable: Path


@dataclass(frozen=True)
class ExecutionResult:
    """Captured result of one external process."""

    argv: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0
