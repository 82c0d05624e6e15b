"""
pandas views of a scenario and its derived values, shared by the dashboard
tables and the report export.
"""

from __future__ import annotations

import pandas as pd

from .constants import OTHER_CLIENTS_LABEL
from .formatting import format_currency, format_percent
from .scenario import Scenario, ScenarioMetrics


def adjustments_frame(scenario: Scenario) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": a.id,
                "description": a.description,
                "value": a.value,
                "is_simulation": a.is_simulation,
            }
            for a in scenario.adjustments
        ],
        columns=["id", "description", "value", "is_simulation"],
    )


def waterfall_frame(bars) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Label": b.label,
                "Kind": b.kind.value,
                "Delta": b.delta,
                "Start": b.start,
                "Magnitude": b.magnitude,
                "End": b.end,
            }
            for b in bars
        ],
        columns=["Label", "Kind", "Delta", "Start", "Magnitude", "End"],
    )


def working_capital_frame(scenario: Scenario, metrics: ScenarioMetrics) -> pd.DataFrame:
    wc = scenario.working_capital
    opt = metrics.optimized_days
    return pd.DataFrame({
        "Scenario": ["Situación Actual", "Optimizada (Eficiencia +10%)"],
        "DSO": [wc.dso, opt.dso],
        "DIO": [wc.dio, opt.dio],
        "DPO": [wc.dpo, opt.dpo],
        "Cycle_Days": [metrics.cycle_days, opt.dso + opt.dio - opt.dpo],
        "NOF": [metrics.current_nof, metrics.optimized_nof],
    })


def concentration_frame(scenario: Scenario, metrics: ScenarioMetrics) -> pd.DataFrame:
    rows = [{"Client_ID": c.id, "Client": c.name, "Share": c.share} for c in scenario.clients]
    rows.append({"Client_ID": "", "Client": OTHER_CLIENTS_LABEL, "Share": metrics.other_clients_share})
    df = pd.DataFrame(rows, columns=["Client_ID", "Client", "Share"])
    df["Revenue"] = df["Share"] / 100 * scenario.working_capital.revenue
    return df


def summary_frame(scenario: Scenario, metrics: ScenarioMetrics) -> pd.DataFrame:
    """Headline metrics with raw and display values (margin N/A on zero revenue)."""
    rows = [
        ("EBITDA Reportado", metrics.reported_ebitda, format_currency(metrics.reported_ebitda)),
        ("EBITDA Normalizado", metrics.normalized_ebitda, format_currency(metrics.normalized_ebitda)),
        ("Ajustes Netos", metrics.net_adjustments, format_currency(metrics.net_adjustments)),
        ("Margen Real", metrics.real_margin, format_percent(metrics.real_margin)),
        ("NOF Actual", metrics.current_nof, format_currency(metrics.current_nof)),
        ("NOF Optimizada", metrics.optimized_nof, format_currency(metrics.optimized_nof)),
        ("Ahorro de Caja", metrics.cash_savings, format_currency(metrics.cash_savings)),
        ("Ciclo de Caja (días)", metrics.cycle_days, f"{metrics.cycle_days:g}"),
        ("Modo Crisis", scenario.crisis_mode, "Sí" if scenario.crisis_mode else "No"),
    ]
    return pd.DataFrame(rows, columns=["Metric", "Value", "Display"])
