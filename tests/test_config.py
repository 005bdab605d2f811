"""Tests for tt.core.config: settings.json load/save with defaults."""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path


class TestConfig(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self._tmppath = Path(self.tmpdir)

        # Monkey-patch the settings path to use temp dir
        from tt.core import config
        self._orig_settings_path = config.SETTINGS_PATH
        config.SETTINGS_PATH = self._tmppath / "settings.json"

    def tearDown(self):
        from tt.core import config
        config.SETTINGS_PATH = self._orig_settings_path
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_fresh_start_returns_defaults(self):
        from tt.core.config import load_settings
        state = load_settings()
        self.assertEqual(state["meta"]["schema_version"], 1)
        self.assertEqual(state["settings"]["theme"], "Light")
        self.assertEqual(state["settings"]["reminder_minutes"], 30)
        self.assertEqual(state["settings"]["supabase_url"], "")
        self.assertEqual(state["stopwatch"], {"elapsed": 0, "running": False, "anchor": None})

    def test_defaults_are_not_shared(self):
        from tt.core.config import build_default_settings
        a = build_default_settings()
        a["settings"]["theme"] = "Dark"
        self.assertEqual(build_default_settings()["settings"]["theme"], "Light")

    def test_save_and_load_roundtrip(self):
        from tt.core import config
        state = config.load_settings()
        state["settings"]["supabase_url"] = "https://example.supabase.co"
        state["settings"]["theme"] = "Dark"
        state["stopwatch"] = {"elapsed": 125, "running": True, "anchor": "2025-03-05T09:00:00+00:00"}
        config.save_settings(state)
        self.assertTrue(os.path.exists(config.SETTINGS_PATH))

        loaded = config.load_settings()
        self.assertEqual(loaded["settings"]["supabase_url"], "https://example.supabase.co")
        self.assertEqual(loaded["settings"]["theme"], "Dark")
        self.assertEqual(loaded["stopwatch"]["elapsed"], 125)
        self.assertTrue(loaded["stopwatch"]["running"])

    def test_missing_keys_are_defaulted(self):
        from tt.core import config
        with open(config.SETTINGS_PATH, "w", encoding="utf-8") as f:
            json.dump({"settings": {"theme": "Dark"}}, f)

        loaded = config.load_settings()
        self.assertEqual(loaded["settings"]["theme"], "Dark")
        self.assertEqual(loaded["settings"]["request_timeout"], 10.0)
        self.assertEqual(loaded["meta"]["schema_version"], 1)
        self.assertEqual(loaded["stopwatch"]["elapsed"], 0)

    def test_malformed_stopwatch_is_reset(self):
        from tt.core import config
        with open(config.SETTINGS_PATH, "w", encoding="utf-8") as f:
            json.dump({"settings": {}, "stopwatch": {"elapsed": "lots"}}, f)
        self.assertEqual(config.load_settings()["stopwatch"]["elapsed"], 0)

    def test_corrupt_file_falls_back_to_defaults(self):
        from tt.core import config
        with open(config.SETTINGS_PATH, "w", encoding="utf-8") as f:
            f.write("{not json")
        state = config.load_settings()
        self.assertEqual(state["settings"]["theme"], "Light")

    def test_non_object_falls_back_to_defaults(self):
        from tt.core import config
        with open(config.SETTINGS_PATH, "w", encoding="utf-8") as f:
            json.dump([1, 2, 3], f)
        self.assertIn("settings", config.load_settings())


if __name__ == "__main__":
    unittest.main()
