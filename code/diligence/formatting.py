"""
Display formatting (es-ES, EUR) and form-input coercion.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

CURRENCY_SYMBOL = "€"
THOUSANDS_SEP = "."
NBSP = "\u00a0"
NOT_APPLICABLE = "N/A"

# es-ES leaves four-digit amounts ungrouped ("1000 €", "10.000 €")
_MIN_GROUPING_DIGITS = 5


def _is_number(value) -> bool:
    return (
        value is not None
        and not isinstance(value, (bool, np.bool_))
        and isinstance(value, (int, float, np.number))
        and math.isfinite(value)
    )


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _group(digits: str) -> str:
    if len(digits) < _MIN_GROUPING_DIGITS:
        return digits
    head = len(digits) % 3 or 3
    parts = [digits[:head]] + [digits[i:i + 3] for i in range(head, len(digits), 3)]
    return THOUSANDS_SEP.join(parts)


def format_currency(value: Optional[float]) -> str:
    """5435000 -> '5.435.000 €'; None / NaN / inf -> 'N/A'."""
    if not _is_number(value):
        return NOT_APPLICABLE
    rounded = _round_half_away(value)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{_group(str(abs(rounded)))}{NBSP}{CURRENCY_SYMBOL}"


def format_currency_short(value: Optional[float]) -> str:
    """Compact axis/label form: '5.4M', '250k', '500'."""
    if not _is_number(value):
        return NOT_APPLICABLE
    if abs(value) >= 1000000:
        return f"{value / 1000000:.1f}M"
    if abs(value) >= 1000:
        return f"{value / 1000:.0f}k"
    return f"{value:g}"


def format_percent(value: Optional[float]) -> str:
    if not _is_number(value):
        return NOT_APPLICABLE
    return f"{value:.1f}%"


def format_days(value: float) -> str:
    return f"{value:g}d"


def parse_number(raw, fallback: float = 0.0) -> float:
    """
    Coerce a form value to a float.

    Empty, non-numeric or non-finite input yields `fallback` (0 for amounts,
    the previous value for revenue / margin / shares). Never raises.
    """
    if raw is None or isinstance(raw, (bool, np.bool_)):
        return fallback
    if isinstance(raw, (int, float, np.number)):
        return float(raw) if math.isfinite(raw) else fallback
    try:
        value = float(str(raw).strip())
    except ValueError:
        return fallback
    return value if math.isfinite(value) else fallback
