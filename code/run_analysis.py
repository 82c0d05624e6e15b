#!/usr/bin/env python3
"""
run_analysis.py

Headless due-diligence report for the sample scenario.

Writes:
- tables/*.csv (summary, adjustments, ebitda_bridge, working_capital, concentration)
- due_diligence.xlsx (one sheet per table)
- charts/ebitda_bridge.png

Env
- ANALYSIS_OUTPUT_DIR (optional): default outputs
- DD_STRESS_TEST (optional): 1 to apply the top-client stress test
"""

from __future__ import annotations

import argparse

from diligence.charts import plot_waterfall
from diligence.config import ensure_dirs, load_settings
from diligence.formatting import format_currency, format_percent
from diligence.report import write_report
from diligence.scenario import activate_stress_test, default_scenario, derive_metrics, set_reported_ebitda
from diligence.tables import (
    adjustments_frame,
    concentration_frame,
    summary_frame,
    waterfall_frame,
    working_capital_frame,
)
from diligence.validation import ScenarioValidationError, require_valid


def build_scenario(reported_ebitda=None, stress_test=False):
    scenario = default_scenario()
    if reported_ebitda is not None:
        scenario = set_reported_ebitda(scenario, reported_ebitda)
    if stress_test:
        scenario = activate_stress_test(scenario)
    return scenario


def run(settings, reported_ebitda=None, stress_test=False) -> dict:
    scenario = build_scenario(reported_ebitda, stress_test or settings.stress_test)

    try:
        warnings = require_valid(scenario)
    except ScenarioValidationError as e:
        print(f"[ERROR] {e}")
        raise
    for w in warnings:
        print(f"  {w}")

    metrics = derive_metrics(scenario)
    ensure_dirs(settings)

    tables = {
        "Summary": summary_frame(scenario, metrics),
        "Adjustments": adjustments_frame(scenario),
        "EBITDA_Bridge": waterfall_frame(metrics.waterfall),
        "Working_Capital": working_capital_frame(scenario, metrics),
        "Concentration": concentration_frame(scenario, metrics),
    }

    write_report(tables, settings.tables_dir, settings.output_dir)

    plot_waterfall(
        metrics.waterfall,
        settings.charts_dir / "ebitda_bridge.png",
        "Puente de EBITDA",
    )

    print(f"[OK] Normalized EBITDA: {format_currency(metrics.normalized_ebitda)} "
          f"(margin {format_percent(metrics.real_margin)})")
    print(f"[OK] NOF: {format_currency(metrics.current_nof)} -> {format_currency(metrics.optimized_nof)} "
          f"(savings {format_currency(metrics.cash_savings)})")
    if metrics.cycle_alert:
        print(f"[WARNING] Cash conversion cycle is {metrics.cycle_days:g} days")
    if scenario.crisis_mode:
        print(f"[INFO] Stress test applied: {scenario.simulation_adjustments[0].description}")
    print(f"[OK] Report written to: {settings.output_dir}")

    return tables


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--output_dir", type=str, required=False, help="Directory to write outputs")
    ap.add_argument("--reported_ebitda", type=float, required=False, help="Override reported EBITDA")
    ap.add_argument("--stress_test", action="store_true", help="Simulate losing the top client")
    args = ap.parse_args()

    s = load_settings(args.output_dir)
    run(s, reported_ebitda=args.reported_ebitda, stress_test=args.stress_test)

    print("Analysis complete.")


if __name__ == "__main__":
    main()
