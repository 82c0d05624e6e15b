#!/usr/bin/env python3
"""
test_config.py

Unit tests for diligence/config.py

Tests:
- Settings paths derived from the output directory
- Environment overrides and defaults
"""

import os
import unittest
import sys
import tempfile
import shutil
from pathlib import Path
from unittest import mock

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

from diligence.config import build_settings, ensure_dirs, load_settings


class TestSettings(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_build_settings(self):
        s = build_settings(self.test_dir)
        self.assertEqual(s.charts_dir, Path(self.test_dir) / "charts")
        self.assertEqual(s.tables_dir, Path(self.test_dir) / "tables")
        self.assertEqual((s.host, s.port, s.stress_test), ("127.0.0.1", 8050, False))

    def test_ensure_dirs(self):
        s = build_settings(str(Path(self.test_dir) / "out"))
        ensure_dirs(s)
        self.assertTrue(s.charts_dir.is_dir())
        self.assertTrue(s.tables_dir.is_dir())

    def test_load_settings_from_env(self):
        env = {
            "ANALYSIS_OUTPUT_DIR": self.test_dir,
            "DASH_HOST": "0.0.0.0",
            "DASH_PORT": "9000",
            "DD_STRESS_TEST": "1",
        }
        with mock.patch.dict(os.environ, env):
            s = load_settings()
        self.assertEqual(s.output_dir, Path(self.test_dir))
        self.assertEqual(s.host, "0.0.0.0")
        self.assertEqual(s.port, 9000)
        self.assertTrue(s.stress_test)

    def test_explicit_output_dir_wins(self):
        with mock.patch.dict(os.environ, {"ANALYSIS_OUTPUT_DIR": "elsewhere"}):
            s = load_settings(self.test_dir)
        self.assertEqual(s.output_dir, Path(self.test_dir))

    def test_invalid_port(self):
        with mock.patch.dict(os.environ, {"DASH_PORT": "eighty"}):
            with self.assertRaises(ValueError):
                load_settings(self.test_dir)


if __name__ == "__main__":
    unittest.main(verbosity=2)
