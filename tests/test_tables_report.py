#!/usr/bin/env python3
"""
test_tables_report.py

Unit tests for diligence/tables.py, diligence/report.py and diligence/charts.py

Tests:
- Table views of the scenario and derived metrics
- CSV / Excel writers
- Plotly figures and static waterfall export
"""

import unittest
import sys
import tempfile
import shutil
from pathlib import Path

import pandas as pd

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

from diligence.charts import (
    COLORS,
    build_concentration_figure,
    build_nof_figure,
    build_waterfall_figure,
    plot_waterfall,
)
from diligence.report import save_csv, save_excel, write_report
from diligence.scenario import (
    activate_stress_test,
    default_scenario,
    derive_metrics,
    update_client_share,
    update_working_capital,
)
from diligence.tables import (
    adjustments_frame,
    concentration_frame,
    summary_frame,
    waterfall_frame,
    working_capital_frame,
)


class TestTables(unittest.TestCase):

    def setUp(self):
        self.scenario = default_scenario()
        self.metrics = derive_metrics(self.scenario)

    def test_adjustments_frame(self):
        df = adjustments_frame(activate_stress_test(self.scenario))
        self.assertEqual(len(df), 5)
        self.assertTrue(df.iloc[-1]["is_simulation"])
        self.assertEqual(df["is_simulation"].sum(), 1)

    def test_waterfall_frame(self):
        df = waterfall_frame(self.metrics.waterfall)
        self.assertEqual(list(df.columns), ["Label", "Kind", "Delta", "Start", "Magnitude", "End"])
        self.assertEqual(len(df), 6)
        self.assertEqual(df.iloc[-1]["End"], 5435000)
        self.assertEqual(df.iloc[3]["Kind"], "negative")

    def test_working_capital_frame(self):
        df = working_capital_frame(self.scenario, self.metrics)
        self.assertEqual(len(df), 2)
        self.assertEqual(df.iloc[0]["Cycle_Days"], 50)
        self.assertAlmostEqual(df.iloc[1]["NOF"], 3125000, delta=0.01)

    def test_concentration_frame(self):
        df = concentration_frame(self.scenario, self.metrics)
        self.assertEqual(len(df), 6)
        self.assertEqual(df.iloc[-1]["Client"], "Otros Clientes")
        self.assertEqual(df.iloc[-1]["Share"], 27)
        self.assertAlmostEqual(df.iloc[0]["Revenue"], 8750000)

    def test_concentration_frame_over_100(self):
        s = update_client_share(self.scenario, "c1", 90)
        df = concentration_frame(s, derive_metrics(s))
        self.assertEqual(df.iloc[-1]["Share"], 0)

    def test_summary_frame(self):
        df = summary_frame(self.scenario, self.metrics).set_index("Metric")
        self.assertEqual(df.loc["Margen Real", "Display"], "21.7%")
        self.assertEqual(df.loc["EBITDA Normalizado", "Display"], "5.435.000\u00a0€")
        self.assertEqual(df.loc["Modo Crisis", "Display"], "No")

    def test_summary_frame_zero_revenue(self):
        s = update_working_capital(self.scenario, revenue=0)
        df = summary_frame(s, derive_metrics(s)).set_index("Metric")
        self.assertEqual(df.loc["Margen Real", "Display"], "N/A")


class TestReport(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_save_csv(self):
        metrics = derive_metrics(default_scenario())
        path = self.test_dir / "bridge.csv"
        save_csv(waterfall_frame(metrics.waterfall), path)
        back = pd.read_csv(path)
        self.assertEqual(len(back), 6)

    def test_save_excel_truncates_sheet_names(self):
        path = self.test_dir / "out.xlsx"
        tables = {
            "Summary": pd.DataFrame({"a": [1]}),
            "A_Very_Long_Sheet_Name_Beyond_Excel_Limit": pd.DataFrame({"b": [2]}),
        }
        save_excel(tables, path)
        sheets = pd.read_excel(path, sheet_name=None)
        self.assertIn("Summary", sheets)
        self.assertIn("A_Very_Long_Sheet_Name_Beyond_E", sheets)

    def test_write_report(self):
        metrics = derive_metrics(default_scenario())
        tables = {"EBITDA_Bridge": waterfall_frame(metrics.waterfall)}
        workbook = write_report(tables, self.test_dir, self.test_dir)
        self.assertTrue((self.test_dir / "ebitda_bridge.csv").exists())
        self.assertEqual(workbook, self.test_dir / "due_diligence.xlsx")
        self.assertIn("EBITDA_Bridge", pd.read_excel(workbook, sheet_name=None))

    def test_plot_waterfall(self):
        path = self.test_dir / "bridge.png"
        plot_waterfall(derive_metrics(default_scenario()).waterfall, path, "Bridge")
        self.assertTrue(path.exists())
        self.assertGreater(path.stat().st_size, 0)


class TestFigures(unittest.TestCase):

    def setUp(self):
        self.scenario = default_scenario()
        self.metrics = derive_metrics(self.scenario)

    def test_waterfall_figure_stacks_invisible_base(self):
        fig = build_waterfall_figure(self.metrics.waterfall)
        base, visible = fig.data
        self.assertEqual(list(base.y), [b.start for b in self.metrics.waterfall])
        self.assertEqual(list(visible.y), [b.magnitude for b in self.metrics.waterfall])
        self.assertEqual(fig.layout.barmode, "stack")

    def test_waterfall_colors(self):
        fig = build_waterfall_figure(self.metrics.waterfall)
        colors = list(fig.data[1].marker.color)
        self.assertEqual(colors[0], COLORS["total"])
        self.assertEqual(colors[1], COLORS["positive"])
        self.assertEqual(colors[3], COLORS["negative"])
        self.assertEqual(colors[-1], COLORS["highlight"])

    def test_nof_figure(self):
        fig = build_nof_figure(self.metrics)
        self.assertEqual(len(fig.data[0].y), 2)

    def test_concentration_figure(self):
        fig = build_concentration_figure(self.scenario.clients, self.metrics.other_clients_share)
        self.assertEqual(len(fig.data[0].labels), 6)
        self.assertEqual(fig.data[0].labels[-1], "Otros Clientes")

    def test_concentration_figure_without_remainder(self):
        fig = build_concentration_figure(self.scenario.clients, 0)
        self.assertEqual(len(fig.data[0].labels), 5)


if __name__ == "__main__":
    unittest.main(verbosity=2)
