from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazymarks import config


class ConfigBehaviorTests(unittest.TestCase):
    def test_defaults_use_audit_words(self) -> None:
        settings = config.settings_from_dict({})

        self.assertEqual(set(settings.words), {"blue", "purple", "green", "red"})
        self.assertEqual(settings.words["red"], (r"@audit\-issue[ \t\n]",))
        self.assertEqual(settings.search.includes, config.DEFAULT_INCLUDES)
        self.assertEqual(settings.search.max_files, config.DEFAULT_MAX_FILES)
        self.assertFalse(settings.view.expanded)
        self.assertEqual(settings.custom_styles, {})

    def test_split_unique_list_trims_and_deduplicates(self) -> None:
        self.assertEqual(config.split_unique_list(" a, b ,, a ,c "), ["a", "b", "c"])
        self.assertEqual(config.split_unique_list(["x", " x", "y"]), ["x", "y"])
        self.assertEqual(config.split_unique_list(None), [])
        self.assertEqual(config.split_unique_list(3), [])

    def test_default_words_override_and_custom_mapping(self) -> None:
        settings = config.settings_from_dict(
            {
                "default": {"words": {"red": "TODO, FIXME"}},
                "expert": {
                    "custom": {
                        "words": {"mapping": {"warn": ["XXX", "a{1,2}"], "red": "HACK"}},
                        "styles": {"warn": {"gutterIconColor": "#ff0000"}, "bad": "nope"},
                    }
                },
            }
        )

        self.assertEqual(settings.words["red"], ("HACK",))
        self.assertEqual(settings.words["warn"], ("XXX", "a{1,2}"))
        self.assertEqual(list(settings.custom_styles), ["warn"])
        self.assertIn("XXX", settings.all_words())

    def test_exceptions_become_scan_rules(self) -> None:
        settings = config.settings_from_dict(
            {
                "exceptions": {
                    "file": {"extensions": {"ignore": ".min.js, .lock"}},
                    "words": {"ignore": "@audit-ok"},
                }
            }
        )

        rules = settings.scan_rules

        self.assertTrue(rules.is_blacklisted("file:///w/app.min.js"))
        self.assertFalse(rules.is_blacklisted("file:///w/app.js"))
        self.assertTrue(rules.is_ignored_word("@audit-ok[ \\t\\n]"))

    def test_malformed_values_fall_back_to_defaults(self) -> None:
        settings = config.settings_from_dict(
            {
                "search": {"maxFiles": -4, "includes": 7, "excludes": ["**/dist/**", 3]},
                "view": {"expanded": "yes", "words": {"hide": True}},
                "default": "broken",
            }
        )

        self.assertEqual(settings.search.max_files, config.DEFAULT_MAX_FILES)
        self.assertEqual(settings.search.includes, config.DEFAULT_INCLUDES)
        self.assertEqual(settings.search.excludes, ("**/dist/**",))
        self.assertFalse(settings.view.expanded)
        self.assertTrue(settings.view.hide_words)
        self.assertEqual(settings.words["blue"], (r"@audit\-info[ \t\n]",))

    def test_max_files_rejects_booleans(self) -> None:
        settings = config.settings_from_dict({"search": {"maxFiles": True}})

        self.assertEqual(settings.search.max_files, config.DEFAULT_MAX_FILES)

    def test_load_and_save_round_trip_under_patched_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            with mock.patch("lazymarks.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
                config.save_config({"search": {"maxFiles": 10}})
                self.assertEqual(config.load_config(), {"search": {"maxFiles": 10}})
                self.assertEqual(config.load_settings().search.max_files, 10)

    def test_load_ignores_malformed_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("{broken", encoding="utf-8")

            with self.assertLogs("lazymarks.config", level="WARNING"):
                self.assertEqual(config.load_config(config_path), {})

            config_path.write_text(json.dumps([1, 2]), encoding="utf-8")
            self.assertEqual(config.load_config(config_path), {})


if __name__ == "__main__":
    unittest.main()
