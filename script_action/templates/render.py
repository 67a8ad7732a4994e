from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional

from ..errors import ConfigurationError
from ..log import ActionLog, NullLog
from ..utils.fs import ensure_dir, read_text, write_text

# Handlebars-compatible subset:
#   {{#if name}} ... {{else if other}} ... {{else}} ... {{/if}}
#   {{{ name }}} / {{ name }}   (inserted verbatim, never escaped)
_BLOCK_TAG = r"\{\{\s*(?:#if\s+(?P<if>\w+)|else\s+if\s+(?P<elif>\w+)|(?P<else>else)|(?P<end>/if))\s*\}\}"
_BLOCK_RE = re.compile(_BLOCK_TAG)
_ANY_BLOCK_TAG = r"\{\{\s*(?:#if\s+\w+|else\s+if\s+\w+|else|/if)\s*\}\}"
# A block tag alone on its line consumes the whole line, as in Handlebars.
_STANDALONE_RE = re.compile(r"^[ \t]*(" + _ANY_BLOCK_TAG + r")[ \t]*(?:\r?\n|\Z)", re.M)
_VALUE_RE = re.compile(r"\{\{\{\s*(?P<raw>\w+)\s*\}\}\}|\{\{\s*(?P<plain>\w+)\s*\}\}")


@dataclass
class _Branch:
    active: bool
    taken: bool


def _strip_standalone_tags(text: str) -> str:
    return _STANDALONE_RE.sub(lambda m: m.group(1), text)


def _render_conditionals(text: str, answers: Mapping[str, Any], source: str) -> str:
    out: List[str] = []
    stack: List[_Branch] = []
    pos = 0

    def emitting() -> bool:
        return all(b.active for b in stack)

    for m in _BLOCK_RE.finditer(text):
        if emitting():
            out.append(text[pos:m.start()])
        pos = m.end()

        if m.group("if") is not None:
            cond = bool(answers.get(m.group("if")))
            stack.append(_Branch(active=cond, taken=cond))
            continue

        if not stack:
            raise ConfigurationError(f"Template {source}: {m.group(0)!r} without a matching {{{{#if}}}}")
        branch = stack[-1]

        if m.group("elif") is not None:
            cond = (not branch.taken) and bool(answers.get(m.group("elif")))
            branch.active = cond
            branch.taken = branch.taken or cond
        elif m.group("else") is not None:
            branch.active = not branch.taken
            branch.taken = True
        else:
            stack.pop()

    if stack:
        raise ConfigurationError(f"Template {source}: unclosed {{{{#if}}}} block")

    out.append(text[pos:])
    return "".join(out)


def _render_values(text: str, answers: Mapping[str, Any]) -> str:
    def repl(m: "re.Match[str]") -> str:
        name = m.group("raw") or m.group("plain")
        value = answers.get(name)
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    # re.sub never rescans inserted text, so "{{" inside the script survives as-is.
    return _VALUE_RE.sub(repl, text)


def render_text(text: str, answers: Mapping[str, Any], *, source: str = "<string>") -> str:
    """Render one template string.

    Conditional blocks are resolved first, then value placeholders are filled
    in a single pass.
    """
    text = _strip_standalone_tags(text)
    text = _render_conditionals(text, answers, source)
    return _render_values(text, answers)


def _log_best_effort(log: ActionLog, msg: str) -> None:
    try:
        log.info(msg)
    except Exception:
        # Diagnostics only; a broken sink must not fail the render.
        pass


def render_templates(
    template_root: Path,
    dest_root: Path,
    answers: Mapping[str, Any],
    *,
    log: Optional[ActionLog] = None,
) -> List[Path]:
    """Copy ``template_root`` into ``dest_root``, rendering every file.

    Entries are visited in sorted name order so output is deterministic.
    Returns the rendered destination files.

    Raises:
        ConfigurationError: ``template_root`` does not exist, or a template has
            unbalanced conditional blocks.
        WorkspaceError: a read or write fails.
    """
    log = log or NullLog()
    template_root = Path(template_root)
    dest_root = Path(dest_root)

    if not template_root.is_dir():
        raise ConfigurationError(f"Template directory {template_root} not found")

    ensure_dir(dest_root)

    rendered: List[Path] = []
    for entry in sorted(template_root.iterdir(), key=lambda p: p.name):
        dest = dest_root / entry.name
        if entry.is_dir():
            rendered.extend(render_templates(entry, dest, answers, log=log))
            continue

        content = render_text(read_text(entry), answers, source=str(entry))
        write_text(dest, content)
        rendered.append(dest)
        _log_best_effort(log, f"Render {entry} to {dest}")

    return rendered
