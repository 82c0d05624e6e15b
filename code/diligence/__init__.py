"""
Due-diligence analytics: EBITDA normalization, working capital (NOF) and
client concentration stress testing.
"""

from .scenario import (
    Adjustment,
    Client,
    Scenario,
    ScenarioMetrics,
    WorkingCapitalState,
    default_scenario,
    derive_metrics,
    reduce_scenario,
)
from .validation import (
    ScenarioValidationError,
    require_valid,
    validate_scenario,
)
from .waterfall import BarKind, WaterfallBar, build_waterfall

__all__ = [
    "Adjustment",
    "Client",
    "Scenario",
    "ScenarioMetrics",
    "WorkingCapitalState",
    "default_scenario",
    "derive_metrics",
    "reduce_scenario",
    "ScenarioValidationError",
    "require_valid",
    "validate_scenario",
    "BarKind",
    "WaterfallBar",
    "build_waterfall",
]
