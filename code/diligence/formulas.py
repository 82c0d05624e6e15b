"""
formulas.py

Stateless financial formulas behind the dashboard.

- EBITDA normalization (reported + analyst adjustments)
- Net operating funds requirement (NOF) on a 360-day commercial year
- Cash conversion cycle and the 10% efficiency scenario
- Top-client stress test impact

Margins are returned as None when revenue is zero so that no NaN/inf value
ever reaches the formatter.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from .constants import (
    CASH_CYCLE_ALERT_DAYS,
    COMMERCIAL_YEAR_DAYS,
    FALLBACK_MARGIN,
    OPTIMIZATION_DIO_FACTOR,
    OPTIMIZATION_DPO_FACTOR,
    OPTIMIZATION_DSO_FACTOR,
)


@dataclass(frozen=True)
class OptimizedDays:
    dso: float
    dio: float
    dpo: float


def _value_of(adjustment) -> float:
    # Accepts Adjustment objects or bare numbers
    return float(getattr(adjustment, "value", adjustment))


def normalized_ebitda(reported: float, adjustments: Iterable) -> float:
    """Reported EBITDA plus the signed sum of all adjustments."""
    return reported + sum(_value_of(a) for a in adjustments)


def net_operating_funds(revenue: float, gross_margin_pct: float, dso: float, dio: float, dpo: float) -> float:
    """
    NOF = Sales/360 * DSO + COGS/360 * DIO - COGS/360 * DPO

    COGS = revenue * (1 - gross margin).
    """
    cogs = revenue * (1 - gross_margin_pct / 100)
    daily_sales = revenue / COMMERCIAL_YEAR_DAYS
    daily_cogs = cogs / COMMERCIAL_YEAR_DAYS
    return (daily_sales * dso) + (daily_cogs * dio) - (daily_cogs * dpo)


def optimized_days(dso: float, dio: float, dpo: float) -> OptimizedDays:
    return OptimizedDays(
        dso=dso * OPTIMIZATION_DSO_FACTOR,
        dio=dio * OPTIMIZATION_DIO_FACTOR,
        dpo=dpo * OPTIMIZATION_DPO_FACTOR,
    )


def cash_savings(current_nof: float, optimized_nof: float) -> float:
    return current_nof - optimized_nof


def cycle_days(dso: float, dio: float, dpo: float) -> float:
    """Cash conversion cycle. Not clamped: negative when DPO > DSO + DIO."""
    return dso + dio - dpo


def cash_cycle_alert(days: float) -> bool:
    return days > CASH_CYCLE_ALERT_DAYS


def real_margin(normalized: float, revenue: float) -> Optional[float]:
    """Normalized EBITDA over revenue, in percent. None when undefined."""
    if not revenue:
        return None
    margin = (normalized / revenue) * 100
    if not math.isfinite(margin):
        return None
    return margin


def estimated_margin_fraction(margin_pct: Optional[float]) -> float:
    if margin_pct is not None and margin_pct > 0:
        return margin_pct / 100
    return FALLBACK_MARGIN


def round_half_up(value: float) -> int:
    # .5 goes toward +inf (-2.5 -> -2), unlike round()
    return int(math.floor(value + 0.5))


def stress_test_impact(revenue: float, top_client_share_pct: float, margin_fraction: float) -> int:
    """EBITDA lost if the top client leaves, as a negative whole amount."""
    lost_revenue = revenue * (top_client_share_pct / 100)
    return round_half_up(-(lost_revenue * margin_fraction))


def other_clients_share(shares: Iterable[float]) -> float:
    """Remainder not covered by the listed clients, floored at zero."""
    return max(0, 100 - sum(shares))
