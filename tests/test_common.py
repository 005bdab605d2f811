"""Tests for tt.common: data directory resolution and logger setup."""

import logging
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch


class TestProjectPaths(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_home_override_creates_subfolders(self):
        from tt.common.setup import ProjectPaths
        home = Path(self.tmpdir) / "tt-home"
        with patch.dict(os.environ, {"TIMETRACKER_HOME": str(home)}):
            paths = ProjectPaths.build()
        self.assertEqual(paths.data, home)
        self.assertEqual(paths.logs, home / "logs")
        self.assertEqual(paths.exports, home / "exports")
        self.assertTrue(paths.logs.is_dir())
        self.assertTrue(paths.exports.is_dir())

    def test_ensure_directory_creates_parents(self):
        from tt.common.setup import ensure_directory
        nested = Path(self.tmpdir) / "a" / "b"
        self.assertEqual(ensure_directory(nested), nested)
        self.assertTrue(nested.is_dir())
        # Existing directory is fine
        self.assertEqual(ensure_directory(nested), nested)


class TestLogger(unittest.TestCase):

    NAME = "timetracker_test"

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.log_dir = Path(self.tmpdir)

    def tearDown(self):
        logger = logging.getLogger(self.NAME)
        for handler in list(logger.handlers):
            for lib_name in ("httpx", "httpcore"):
                logging.getLogger(lib_name).removeHandler(handler)
            logger.removeHandler(handler)
            handler.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_writes_persistent_latest_and_debug_logs(self):
        from tt.common.logger import get_logger
        logger = get_logger(name=self.NAME, log_dir=self.log_dir, historical_debugs=2)
        logger.info("hello")
        logger.debug("details")
        for handler in logger.handlers:
            handler.flush()

        self.assertIn("hello", (self.log_dir / f"{self.NAME}.log").read_text(encoding="utf-8"))
        latest = (self.log_dir / "latest.log").read_text(encoding="utf-8")
        self.assertIn("hello", latest)
        self.assertNotIn("details", latest)
        debug_logs = list((self.log_dir / "debug").glob(f"{self.NAME}_*.log"))
        self.assertEqual(len(debug_logs), 1)
        self.assertIn("details", debug_logs[0].read_text(encoding="utf-8"))

    def test_second_call_does_not_duplicate_handlers(self):
        from tt.common.logger import get_logger
        logger = get_logger(name=self.NAME, log_dir=self.log_dir, historical_debugs=0)
        count = len(logger.handlers)
        get_logger(name=self.NAME, log_dir=self.log_dir, historical_debugs=0)
        self.assertEqual(len(logger.handlers), count)
        self.assertEqual(count, 2)

    def test_env_level(self):
        from tt.common.logger import _env_level
        with patch.dict(os.environ, {"TT_TEST_LEVEL": "warning"}):
            self.assertEqual(_env_level("TT_TEST_LEVEL", logging.INFO), logging.WARNING)
        with patch.dict(os.environ, {"TT_TEST_LEVEL": "chatty"}):
            self.assertEqual(_env_level("TT_TEST_LEVEL", logging.INFO), logging.INFO)
        self.assertEqual(_env_level("TT_TEST_LEVEL_UNSET", logging.ERROR), logging.ERROR)


if __name__ == "__main__":
    unittest.main()
