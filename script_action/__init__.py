"""script-action: run a TypeScript/JavaScript snippet inside a GitHub Actions job.

The action provisions a throwaway project directory, installs a runtime
(``bun`` or ``tsx`` over Node), renders a small template project around the
user's script, installs declared packages and runs the script.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.2.0"
