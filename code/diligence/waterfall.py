"""
waterfall.py

Builds the EBITDA bridge series: an opening total, one floating bar per
signed adjustment, and a closing total. Each bar carries a start offset
(invisible stacked base) and an unsigned magnitude (visible bar height), so
any stacked-bar renderer can draw it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple

LABEL_ABBREVIATE_OVER = 12
WORD_KEEP_CHARS = 4
LABEL_MAX_CHARS = 20

START_LABEL = "EBITDA Rep."
END_LABEL = "EBITDA Norm."


class BarKind(str, Enum):
    TOTAL = "total"
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class WaterfallBar:
    label: str
    delta: float       # signed contribution (tooltip / colour)
    magnitude: float   # bar height
    start: float       # stacking offset
    kind: BarKind

    @property
    def is_total(self) -> bool:
        return self.kind is BarKind.TOTAL

    @property
    def end(self) -> float:
        return self.start + self.magnitude


def abbreviate_label(text: str) -> str:
    if not text:
        return ""
    if len(text) > LABEL_ABBREVIATE_OVER:
        text = " ".join(
            word[:WORD_KEEP_CHARS] + "." if len(word) > WORD_KEEP_CHARS else word
            for word in text.split(" ")
        )
    if len(text) > LABEL_MAX_CHARS:
        text = text[: LABEL_MAX_CHARS - 2] + ".."
    return text


def _as_pair(item) -> Tuple[str, float]:
    if hasattr(item, "description"):
        return item.description, float(item.value)
    label, delta = item
    return label, float(delta)


def build_waterfall(
    base: float,
    deltas: Iterable,
    start_label: str = START_LABEL,
    end_label: str = END_LABEL,
) -> Tuple[WaterfallBar, ...]:
    """
    Args:
        base: opening total (reported EBITDA)
        deltas: ordered (label, delta) pairs or Adjustment objects

    Returns:
        Tuple of bars: opening total, one per delta, closing total.
    """
    bars = [WaterfallBar(start_label, base, base, 0, BarKind.TOTAL)]

    current = base
    for item in deltas:
        label, delta = _as_pair(item)
        if delta >= 0:
            start = current
            current += delta
            kind = BarKind.POSITIVE
        else:
            current += delta
            start = current
            kind = BarKind.NEGATIVE
        bars.append(WaterfallBar(abbreviate_label(label), delta, abs(delta), start, kind))

    bars.append(WaterfallBar(end_label, current, current, 0, BarKind.TOTAL))
    return tuple(bars)


def waterfall_end(bars) -> float:
    return bars[-1].magnitude
