from __future__ import annotations

import json
from pathlib import Path
import tempfile
import unittest

from sinkscan.config import DEFAULT_CONFIG, CheckOptions, IgnoreMatcher, load_config


class ConfigLoaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.project_root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _write(self, relative: str, data: dict) -> Path:
        path = self.project_root / relative
        path.write_text(json.dumps(data))
        return path

    def test_uses_defaults_when_no_files_present(self) -> None:
        config = load_config(self.project_root)
        self.assertEqual(config.project_root, self.project_root.resolve())
        self.assertEqual(config.severity, DEFAULT_CONFIG["severity"])
        self.assertEqual(config.ignore, ["node_modules"])
        self.assertEqual(config.disabled_checks, [])
        options = config.options_for("xss")
        self.assertEqual(options.trusted_libraries, ["dompurify", "sanitize-html", "xss"])
        self.assertEqual(options.lookback, 5)
        self.assertFalse(options.ignore_in_tests)
        self.assertTrue(config.options_for("security-headers").ignore_in_tests)
        self.assertTrue(config.options_for("open-redirect").ignore_in_tests)

    def test_layers_merge_in_order(self) -> None:
        self._write(
            ".sinkscanrc.json",
            {
                "severity": "medium",
                "checks": {"xss": {"trusted_libraries": ["myCleaner"], "lookback": 3}},
            },
        )
        custom = self._write(
            "custom.json",
            {"severity": "high", "checks": {"xss": {"lookback": 7}}},
        )
        config = load_config(self.project_root, config_path=custom)
        self.assertEqual(config.severity, "high")
        options = config.options_for("xss")
        self.assertEqual(options.trusted_libraries, ["myCleaner"])
        self.assertEqual(options.lookback, 7)

        overridden = load_config(
            self.project_root,
            config_path=custom,
            overrides={"severity": "critical", "disabled_checks": ["redos"]},
        )
        self.assertEqual(overridden.severity, "critical")
        self.assertFalse(overridden.is_enabled("redos"))
        self.assertTrue(overridden.is_enabled("xss"))

    def test_invalid_json_raises(self) -> None:
        (self.project_root / ".sinkscanrc.json").write_text("{not json")
        with self.assertRaises(ValueError) as ctx:
            load_config(self.project_root)
        self.assertIn(".sinkscanrc.json", str(ctx.exception))


class CheckOptionsTests(unittest.TestCase):
    def test_invalid_values_fall_back(self) -> None:
        with self.assertLogs("sinkscan.config", level="WARNING") as logs:
            options = CheckOptions.from_dict(
                "code-injection",
                {"strategy": "rewrite", "lookback": 0, "max_pattern_length": -1, "bogus": True},
            )
        self.assertEqual(options.strategy, "auto")
        self.assertEqual(options.lookback, 5)
        self.assertEqual(options.max_pattern_length, 100)
        self.assertTrue(any("bogus" in line for line in logs.output))

    def test_boolean_is_not_a_window_size(self) -> None:
        with self.assertLogs("sinkscan.config", level="WARNING"):
            options = CheckOptions.from_dict("xss", {"lookback": True, "max_pattern_length": False})
        self.assertEqual(options.lookback, 5)
        self.assertEqual(options.max_pattern_length, 100)

    def test_string_is_accepted_for_lists(self) -> None:
        options = CheckOptions.from_dict("command-injection", {"additional_sink_methods": "runScript"})
        self.assertEqual(options.additional_sink_methods, ["runScript"])

    def test_ignore_matcher_regex_and_fallback(self) -> None:
        matcher = IgnoreMatcher(["^safe", "(Trusted"])
        self.assertTrue(matcher.matches("safeElement"))
        self.assertFalse(matcher.matches("unsafe"))
        self.assertTrue(matcher.matches("node(trusted)"))
        self.assertFalse(IgnoreMatcher([]))

    def test_invalid_ignore_pattern_logs_warning(self) -> None:
        with self.assertLogs("sinkscan.config", level="WARNING"):
            CheckOptions.from_dict("xss", {"ignore_patterns": ["[unclosed"]})


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
