from __future__ import annotations

import unittest

from _testutil import ensure_repo_on_path


class TestResolveInputs(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()

    def test_missing_script_names_the_input(self) -> None:
        from script_action.errors import ConfigurationError
        from script_action.github.workflow import GithubActionsHost
        from script_action.inputs import resolve_inputs

        host = GithubActionsHost(env={"INPUT_PACKAGES": "zod"})
        with self.assertRaises(ConfigurationError) as ctx:
            resolve_inputs(host)
        self.assertIn("script", str(ctx.exception))

    def test_blank_script_is_missing(self) -> None:
        from script_action.errors import ConfigurationError
        from script_action.github.workflow import GithubActionsHost
        from script_action.inputs import resolve_inputs

        with self.assertRaises(ConfigurationError):
            resolve_inputs(GithubActionsHost(env={"INPUT_SCRIPT": "   \n"}))

    def test_flags_and_packages_in_node_mode(self) -> None:
        from script_action.github.workflow import GithubActionsHost
        from script_action.inputs import resolve_inputs

        host = GithubActionsHost(
            env={
                "INPUT_SCRIPT": "console.log('hi')",
                "INPUT_PACKAGES": "zod, axios typescript",
                "INPUT_BUN": "true",
                "INPUT_ZX": "false",
                "INPUT_AUTO_INSTALL": "TRUE",
                "INPUT_SILENT": "no",
            }
        )
        cfg = resolve_inputs(host, mode="node")

        self.assertEqual(cfg.script, "console.log('hi')")
        self.assertEqual(cfg.packages, ("zod", "axios", "typescript"))
        self.assertTrue(cfg.use_bun)
        self.assertFalse(cfg.use_zx)
        self.assertTrue(cfg.auto_install)
        self.assertFalse(cfg.silent)
        self.assertFalse(cfg.debug)
        self.assertEqual(cfg.runtime_kind, "bun")

    def test_composite_mode_forces_bun_and_ignores_zx(self) -> None:
        from script_action.github.workflow import GithubActionsHost
        from script_action.inputs import resolve_inputs

        host = GithubActionsHost(env={"INPUT_SCRIPT": "1", "INPUT_BUN": "false", "INPUT_ZX": "true"})
        cfg = resolve_inputs(host, mode="composite")
        self.assertTrue(cfg.use_bun)
        self.assertFalse(cfg.use_zx)

    def test_runner_debug_flag_enables_debug(self) -> None:
        from script_action.github.workflow import GithubActionsHost
        from script_action.inputs import resolve_inputs

        cfg = resolve_inputs(GithubActionsHost(env={"INPUT_SCRIPT": "1", "RUNNER_DEBUG": "1"}))
        self.assertTrue(cfg.debug)
        self.assertEqual(cfg.runtime_kind, "tsx")


class TestNormalizePackages(unittest.TestCase):
    def test_single_line_is_split_on_commas_and_whitespace(self) -> None:
        ensure_repo_on_path()
        from script_action.inputs import normalize_packages

        self.assertEqual(normalize_packages(["zod,axios,  lodash-es"]), ["zod", "axios", "lodash-es"])

    def test_multiline_input_keeps_one_id_per_line(self) -> None:
        ensure_repo_on_path()
        from script_action.inputs import normalize_packages

        self.assertEqual(normalize_packages(["zod", "", "@actions/github"]), ["zod", "@actions/github"])
        self.assertEqual(normalize_packages([]), [])


if __name__ == "__main__":
    unittest.main()
