from __future__ import annotations

import os
import sys
import tempfile
import unittest
import zipfile
from pathlib import Path

from _testutil import FakeRunner, ensure_repo_on_path, make_fake_executable


class _FakeResponse:
    def __init__(self, content: bytes, status: int = 200):
        self.content = content
        self.status_code = status

    def raise_for_status(self) -> None:
        import requests

        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.exc is not None:
            raise self.exc
        return self.response


@unittest.skipIf(sys.platform.startswith("win"), "POSIX layout")
class TestEnsureBun(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()
        self._td = tempfile.TemporaryDirectory()
        self.tmp = Path(self._td.name)
        self.env = {"BUN_INSTALL": str(self.tmp / "bun-home"), "PATH": str(self.tmp / "empty-bin")}

    def tearDown(self) -> None:
        self._td.cleanup()

    def _settings(self):
        from script_action.config import ActionSettings

        return ActionSettings(assets_dir=self.tmp / "assets")

    def test_existing_binary_is_reused(self) -> None:
        from script_action.runtime import ensure_runtime

        binary = make_fake_executable(self.tmp / "bun-home" / "bin" / "bun")
        runner = FakeRunner()
        session = _FakeSession()

        h1 = ensure_runtime("bun", settings=self._settings(), runner=runner, env=self.env, session=session)
        h2 = ensure_runtime("bun", settings=self._settings(), runner=runner, env=self.env, session=session)

        self.assertEqual(h1, h2)
        self.assertEqual(h1.kind, "bun")
        self.assertEqual(h1.executable, binary)
        self.assertEqual(runner.calls, [])
        self.assertEqual(session.urls, [])

    def test_prefetched_archive_is_extracted(self) -> None:
        from script_action.runtime import ensure_runtime, host_arch, host_os

        settings = self._settings()
        archive = settings.bun_archive_path(host_os(), host_arch())
        archive.parent.mkdir(parents=True)
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("bun-linux-x64/bun", "#!/bin/sh\necho 1.1.0\n")

        runner = FakeRunner()
        handle = ensure_runtime("bun", settings=settings, runner=runner, env=self.env, session=_FakeSession())

        self.assertEqual(handle.executable, self.tmp / "bun-home" / "bin" / "bun")
        self.assertTrue(handle.executable.is_file())
        self.assertTrue(os.access(handle.executable, os.X_OK))
        self.assertEqual(runner.calls, [])

    def test_vendor_script_used_without_archive(self) -> None:
        from script_action.runtime import ensure_runtime

        def fake_install(argv, cwd):
            make_fake_executable(self.tmp / "bun-home" / "bin" / "bun")

        runner = FakeRunner(on_call=fake_install)
        session = _FakeSession(response=_FakeResponse(b"#!/bin/bash\necho install\n"))
        handle = ensure_runtime("bun", settings=self._settings(), runner=runner, env=self.env, session=session)

        self.assertEqual(session.urls, ["https://bun.sh/install"])
        self.assertEqual(len(runner.calls), 1)
        self.assertEqual(runner.calls[0]["argv"][0], "bash")
        self.assertEqual(runner.calls[0]["env"], {"BUN_INSTALL": str(self.tmp / "bun-home")})
        self.assertTrue(handle.executable.is_file())
        self.assertFalse(Path(runner.calls[0]["cwd"]).exists())

    def test_vendor_scratch_removed_on_failure(self) -> None:
        from script_action.errors import CommandError
        from script_action.runtime import ensure_runtime

        runner = FakeRunner(fail_when=lambda argv: argv[0] == "bash")
        session = _FakeSession(response=_FakeResponse(b"exit 1\n"))
        with self.assertRaises(CommandError):
            ensure_runtime("bun", settings=self._settings(), runner=runner, env=self.env, session=session)
        self.assertFalse(Path(runner.calls[0]["cwd"]).exists())

    def test_download_failure_is_fatal(self) -> None:
        import requests

        from script_action.errors import DownloadError
        from script_action.runtime import ensure_runtime

        runner = FakeRunner()
        session = _FakeSession(exc=requests.ConnectionError("offline"))
        with self.assertRaises(DownloadError):
            ensure_runtime("bun", settings=self._settings(), runner=runner, env=self.env, session=session)
        self.assertEqual(runner.calls, [])

    def test_http_error_is_fatal(self) -> None:
        from script_action.errors import DownloadError
        from script_action.runtime import ensure_runtime

        session = _FakeSession(response=_FakeResponse(b"", status=503))
        with self.assertRaises(DownloadError):
            ensure_runtime("bun", settings=self._settings(), runner=FakeRunner(), env=self.env, session=session)

    def test_binary_missing_after_vendor_install(self) -> None:
        from script_action.errors import MissingArtifactError
        from script_action.runtime import ensure_runtime

        session = _FakeSession(response=_FakeResponse(b"echo noop\n"))
        with self.assertRaises(MissingArtifactError):
            ensure_runtime("bun", settings=self._settings(), runner=FakeRunner(), env=self.env, session=session)

    def test_composite_mode_uses_preinstalled_bun(self) -> None:
        from script_action.errors import MissingArtifactError
        from script_action.runtime import ensure_runtime

        with self.assertRaises(MissingArtifactError):
            ensure_runtime("bun", settings=self._settings(), mode="composite", env=self.env)

        on_path = make_fake_executable(self.tmp / "empty-bin" / "bun")
        handle = ensure_runtime("bun", settings=self._settings(), mode="composite", env=self.env)
        self.assertEqual(handle.executable, on_path)


@unittest.skipIf(sys.platform.startswith("win"), "POSIX layout")
class TestEnsureTsx(unittest.TestCase):
    def test_host_node_is_returned(self) -> None:
        ensure_repo_on_path()
        from script_action.config import ActionSettings
        from script_action.runtime import ensure_runtime

        with tempfile.TemporaryDirectory() as td:
            node = make_fake_executable(Path(td) / "bin" / "node")
            runner = FakeRunner()
            handle = ensure_runtime("tsx", settings=ActionSettings(), runner=runner, env={"PATH": str(node.parent)})
            self.assertEqual(handle.kind, "tsx")
            self.assertEqual(handle.executable, node)
            self.assertEqual(runner.calls, [])

    def test_missing_node(self) -> None:
        ensure_repo_on_path()
        from script_action.config import ActionSettings
        from script_action.errors import MissingArtifactError
        from script_action.runtime import ensure_runtime

        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(MissingArtifactError):
                ensure_runtime("tsx", settings=ActionSettings(), env={"PATH": td})


class TestHostNames(unittest.TestCase):
    def test_node_style_names(self) -> None:
        ensure_repo_on_path()
        from script_action.runtime import host_os

        self.assertIn(host_os(), ("linux", "darwin", "win32"))


if __name__ == "__main__":
    unittest.main()
