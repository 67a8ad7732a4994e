from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from _testutil import ensure_repo_on_path


class TestCreateWorkspace(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()

    def test_creates_fresh_prefixed_dirs(self) -> None:
        from script_action.workspace import create_workspace

        with tempfile.TemporaryDirectory() as td:
            base = Path(td) / "a" / "b"
            ws1 = create_workspace(prefix="ts-", base_dir=base)
            ws2 = create_workspace(prefix="ts-", base_dir=base)

            self.assertTrue(ws1.is_dir())
            self.assertTrue(ws2.is_dir())
            self.assertNotEqual(ws1, ws2)
            self.assertTrue(ws1.name.startswith("ts-"))
            self.assertEqual(len(ws1.name), len("ts-") + 13)
            self.assertTrue(ws1.is_absolute())

    @unittest.skipIf(os.name == "nt" or (hasattr(os, "geteuid") and os.geteuid() == 0), "permission bits not enforced")
    def test_permission_denied_is_workspace_error(self) -> None:
        from script_action.errors import WorkspaceError
        from script_action.workspace import create_workspace

        with tempfile.TemporaryDirectory() as td:
            locked = Path(td) / "locked"
            locked.mkdir()
            os.chmod(locked, 0o500)
            try:
                with self.assertRaises(WorkspaceError) as ctx:
                    create_workspace(base_dir=locked / "inner")
                self.assertIn(str(locked), str(ctx.exception))
            finally:
                os.chmod(locked, 0o700)


if __name__ == "__main__":
    unittest.main()
