#!/usr/bin/env python3
"""
test_run_analysis.py

Integration tests for run_analysis.py

Tests:
- Report writes tables, workbook and chart
- Stress test and reported EBITDA override flow into the tables
"""

import unittest
import sys
import tempfile
import shutil
from pathlib import Path

import pandas as pd

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

from diligence.config import build_settings
from run_analysis import build_scenario, run


class TestRunAnalysis(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.settings = build_settings(self.test_dir)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_outputs_written(self):
        run(self.settings)
        out = Path(self.test_dir)
        self.assertTrue((out / "due_diligence.xlsx").exists())
        self.assertTrue((out / "charts" / "ebitda_bridge.png").exists())
        for name in ["summary", "adjustments", "ebitda_bridge", "working_capital", "concentration"]:
            self.assertTrue((out / "tables" / f"{name}.csv").exists(), name)

        bridge = pd.read_csv(out / "tables" / "ebitda_bridge.csv")
        self.assertEqual(bridge.iloc[-1]["End"], 5435000)

    def test_stress_test_flag(self):
        tables = run(self.settings, stress_test=True)
        adjustments = tables["Adjustments"]
        self.assertEqual(adjustments.iloc[-1]["id"], "sim-crisis")
        self.assertEqual(tables["EBITDA_Bridge"].iloc[-1]["End"], 5435000 - 1902250)

    def test_stress_test_from_settings(self):
        settings = build_settings(self.test_dir, stress_test=True)
        tables = run(settings)
        self.assertEqual(int(tables["Adjustments"]["is_simulation"].sum()), 1)

    def test_reported_override(self):
        scenario = build_scenario(reported_ebitda=6000000)
        self.assertEqual(scenario.reported_ebitda, 6000000)
        self.assertFalse(scenario.crisis_mode)


if __name__ == "__main__":
    unittest.main(verbosity=2)
