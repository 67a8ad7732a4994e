from __future__ import annotations

from .workflow import GithubActionsHost

__all__ = ["GithubActionsHost"]
