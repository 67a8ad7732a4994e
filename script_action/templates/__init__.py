from __future__ import annotations

from pathlib import Path

from .render import render_templates, render_text

# Bundled project skeleton rendered around the user's script.
PROJECT_TEMPLATE_ROOT = Path(__file__).resolve().parent / "project"

__all__ = ["PROJECT_TEMPLATE_ROOT", "render_templates", "render_text"]
