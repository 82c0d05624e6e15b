#!/usr/bin/env python3
"""
test_waterfall.py

Unit tests for diligence/waterfall.py

Tests:
- Opening/closing totals and running total
- Negative deltas drop from the pre-delta total
- Empty adjustment list
- Label abbreviation policy
"""

import unittest
import sys
from pathlib import Path

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

from diligence.scenario import Adjustment
from diligence.waterfall import BarKind, abbreviate_label, build_waterfall, waterfall_end


SAMPLE_DELTAS = [
    ("Indemnizaciones Extraordinarias", 250000),
    ("Reparaciones No Recurrentes", 120000),
    ("Ajuste de Alquileres (Mercado)", -85000),
    ("Gastos Personales Socios", 150000),
]


class TestBuildWaterfall(unittest.TestCase):

    def setUp(self):
        self.bars = build_waterfall(5000000, SAMPLE_DELTAS)

    def test_bar_count_and_final_total(self):
        self.assertEqual(len(self.bars), 6)
        self.assertEqual(waterfall_end(self.bars), 5435000)

    def test_opening_total(self):
        first = self.bars[0]
        self.assertEqual(first.kind, BarKind.TOTAL)
        self.assertTrue(first.is_total)
        self.assertEqual(first.start, 0)
        self.assertEqual(first.magnitude, 5000000)
        self.assertEqual(first.label, "EBITDA Rep.")

    def test_positive_bars_stack_on_running_total(self):
        self.assertEqual(self.bars[1].start, 5000000)
        self.assertEqual(self.bars[1].magnitude, 250000)
        self.assertEqual(self.bars[1].kind, BarKind.POSITIVE)
        self.assertEqual(self.bars[2].start, 5250000)

    def test_negative_bar_drops_from_previous_total(self):
        neg = self.bars[3]
        self.assertEqual(neg.kind, BarKind.NEGATIVE)
        self.assertEqual(neg.delta, -85000)
        self.assertEqual(neg.magnitude, 85000)
        self.assertEqual(neg.start, 5285000)
        self.assertEqual(neg.end, 5370000)

    def test_closing_total(self):
        last = self.bars[-1]
        self.assertTrue(last.is_total)
        self.assertEqual(last.start, 0)
        self.assertEqual(last.delta, 5435000)
        self.assertEqual(last.label, "EBITDA Norm.")

    def test_empty_deltas_gives_two_bars(self):
        bars = build_waterfall(1000, [])
        self.assertEqual(len(bars), 2)
        self.assertEqual(bars[0].magnitude, bars[1].magnitude)
        self.assertTrue(all(b.is_total for b in bars))

    def test_accepts_adjustments(self):
        bars = build_waterfall(100, [Adjustment("1", "Up", 10), Adjustment("2", "Down", -30)])
        self.assertEqual([b.kind for b in bars[1:-1]], [BarKind.POSITIVE, BarKind.NEGATIVE])
        self.assertEqual(waterfall_end(bars), 80)

    def test_zero_delta_is_positive(self):
        bars = build_waterfall(100, [("Nuevo Ajuste", 0)])
        self.assertEqual(bars[1].kind, BarKind.POSITIVE)
        self.assertEqual(bars[1].start, 100)

    def test_custom_total_labels(self):
        bars = build_waterfall(0, [], start_label="Start", end_label="End")
        self.assertEqual([b.label for b in bars], ["Start", "End"])


class TestAbbreviateLabel(unittest.TestCase):

    def test_short_label_unchanged(self):
        self.assertEqual(abbreviate_label("Short label"), "Short label")
        self.assertEqual(abbreviate_label("Twelve chars"), "Twelve chars")

    def test_long_words_shortened(self):
        self.assertEqual(abbreviate_label("Indemnizaciones Extraordinarias"), "Inde. Extr.")
        self.assertEqual(abbreviate_label("Gastos Personales Socios"), "Gast. Pers. Soci.")

    def test_exactly_twenty_kept(self):
        self.assertEqual(abbreviate_label("Ajuste de Alquileres (Mercado)"), "Ajus. de Alqu. (Mer.")

    def test_hard_truncation(self):
        label = abbreviate_label("a b c d e f g h i j k l")
        self.assertEqual(label, "a b c d e f g h i ..")
        self.assertEqual(len(label), 20)

    def test_empty(self):
        self.assertEqual(abbreviate_label(""), "")


if __name__ == "__main__":
    unittest.main(verbosity=2)
