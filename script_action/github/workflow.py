from __future__ import annotations

import os
import sys
import uuid
from pathlib import Path
from typing import IO, List, Mapping, Optional

from ..errors import ConfigurationError

_TRUE_VALUES = ("true", "1", "yes", "on")


def _input_env_name(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").upper()


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class GithubActionsHost:
    """Input/output channel to the GitHub Actions runner.

    Inputs arrive as ``INPUT_<NAME>`` environment variables. Outputs are appended
    to the file named by ``GITHUB_OUTPUT``; when that variable is missing (older
    runners, local runs) the legacy ``::set-output`` command is printed instead.
    """

    def __init__(self, env: Optional[Mapping[str, str]] = None, stream: Optional[IO[str]] = None):
        self.env = dict(os.environ) if env is None else dict(env)
        self._stream = stream
        self.outputs: dict = {}
        self.failed_message: Optional[str] = None

    def _emit(self, line: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(line + "\n")
        stream.flush()

    # --- inputs ---

    def get_input(self, name: str, *, required: bool = False) -> str:
        value = str(self.env.get(_input_env_name(name), "") or "").strip()
        if required and not value:
            raise ConfigurationError(f"Input required and not supplied: {name}")
        return value

    def get_multiline_input(self, name: str) -> List[str]:
        raw = str(self.env.get(_input_env_name(name), "") or "")
        return [line.strip() for line in raw.splitlines() if line.strip()]

    def get_bool_input(self, name: str, default: bool = False) -> bool:
        value = self.get_input(name)
        if not value:
            return default
        return value.lower() in _TRUE_VALUES

    def is_debug(self) -> bool:
        return str(self.env.get("RUNNER_DEBUG", "") or "").strip() == "1"

    # --- outputs ---

    def set_output(self, name: str, value: str) -> None:
        value = str(value)
        out_file = str(self.env.get("GITHUB_OUTPUT", "") or "").strip()
        if not out_file:
            self._emit(f"::set-output name={name}::{_escape_data(value)}")
            self.outputs[name] = value
            return
        if "\n" in value:
            delim = f"ghadelimiter_{uuid.uuid4()}"
            record = f"{name}<<{delim}\n{value}\n{delim}\n"
        else:
            record = f"{name}={value}\n"
        with Path(out_file).open("a", encoding="utf-8") as f:
            f.write(record)
        self.outputs[name] = value

    def set_failed(self, message: str) -> None:
        self.failed_message = message
        self._emit(f"::error::{_escape_data(message)}")
