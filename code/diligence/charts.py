"""
Figures for the dashboard (plotly) and the static report export (matplotlib).
"""

from __future__ import annotations

import matplotlib.pyplot as plt
import plotly.graph_objects as go

from .formatting import format_currency, format_currency_short
from .waterfall import BarKind

FONT_STACK = "Inter, -apple-system, BlinkMacSystemFont, \"Segoe UI\", Roboto, Helvetica, Arial, sans-serif"

COLORS = {
    "total": "#002855",        # dark blue
    "positive": "#10b981",     # emerald
    "negative": "#ef4444",     # red
    "highlight": "#f97316",    # industrial orange
    "neutral": "#94a3b8",      # slate
    "dark_text": "#1e293b",
    "muted_text": "#475569",
    "bg_primary": "#ffffff",
    "border": "#e2e8f0",
}

# Donut slices: top five clients, then "Otros Clientes"
CLIENT_COLORS = ["#002855", "#334155", "#475569", "#94a3b8", "#cbd5e1", "#e2e8f0"]


def bar_color(bar, is_last: bool) -> str:
    if bar.kind is BarKind.TOTAL:
        return COLORS["highlight"] if is_last else COLORS["total"]
    if bar.kind is BarKind.POSITIVE:
        return COLORS["positive"]
    return COLORS["negative"]


def _bar_colors(bars) -> list[str]:
    return [bar_color(b, i == len(bars) - 1) for i, b in enumerate(bars)]


def _base_layout(fig: go.Figure, title: str) -> go.Figure:
    fig.update_layout(
        title=dict(text=title, font=dict(size=16, color=COLORS["dark_text"])),
        font=dict(family=FONT_STACK, size=12, color=COLORS["dark_text"]),
        plot_bgcolor=COLORS["bg_primary"],
        paper_bgcolor=COLORS["bg_primary"],
        margin=dict(t=60, b=60, l=60, r=30),
        separators=",.",  # es-ES: decimal comma, thousands dot
    )
    fig.update_xaxes(gridcolor=COLORS["border"])
    fig.update_yaxes(gridcolor=COLORS["border"])
    return fig


def build_waterfall_figure(bars) -> go.Figure:
    """EBITDA bridge drawn as an invisible base stacked under the visible bar."""
    labels = [b.label for b in bars]

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=labels,
        y=[b.start for b in bars],
        marker_color="rgba(0,0,0,0)",
        hoverinfo="skip",
        showlegend=False,
    ))
    fig.add_trace(go.Bar(
        x=labels,
        y=[b.magnitude for b in bars],
        marker_color=_bar_colors(bars),
        text=[format_currency_short(b.delta) for b in bars],
        textposition="outside",
        customdata=[format_currency(b.delta) for b in bars],
        hovertemplate="%{x}<br>Impacto: %{customdata}<extra></extra>",
        showlegend=False,
    ))

    _base_layout(fig, "Puente de EBITDA (Waterfall)")
    fig.update_layout(barmode="stack", bargap=0.3)
    fig.update_xaxes(tickfont=dict(size=10, color=COLORS["muted_text"]))
    fig.update_yaxes(tickformat=",.0f")
    fig.add_hline(y=0, line_color=COLORS["neutral"], line_width=1)
    return fig


def build_nof_figure(metrics) -> go.Figure:
    names = ["Situación Actual", "Optimizada (Eficiencia +10%)"]
    values = [metrics.current_nof, metrics.optimized_nof]

    fig = go.Figure(go.Bar(
        x=names,
        y=values,
        marker_color=COLORS["total"],
        width=0.4,
        customdata=[format_currency(v) for v in values],
        hovertemplate="%{x}<br>%{customdata}<extra></extra>",
    ))
    _base_layout(fig, "Necesidades Operativas de Fondos (NOF)")
    fig.update_layout(showlegend=False)
    fig.update_yaxes(tickformat=",.0f", ticksuffix=" €")
    return fig


def build_concentration_figure(clients, other_share: float) -> go.Figure:
    labels = [c.name for c in clients]
    values = [c.share for c in clients]
    if other_share > 0:
        labels.append("Otros Clientes")
        values.append(other_share)

    fig = go.Figure(go.Pie(
        labels=labels,
        values=values,
        hole=0.6,
        sort=False,
        marker=dict(colors=CLIENT_COLORS[: len(values)]),
        hovertemplate="%{label}: %{value}%<extra></extra>",
    ))
    _base_layout(fig, "Concentración de Clientes")
    fig.update_layout(legend=dict(orientation="h", yanchor="top", y=-0.05))
    return fig


def plot_waterfall(bars, outpath, title):
    """Static PNG of the EBITDA bridge for the report export."""
    labels = [b.label for b in bars]
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.bar(labels, [b.magnitude for b in bars], bottom=[b.start for b in bars], color=_bar_colors(bars))
    for i, b in enumerate(bars):
        ax.annotate(format_currency_short(b.delta), (i, b.end), ha="center", va="bottom", fontsize=8)
    ax.axhline(0, color=COLORS["neutral"], linewidth=1)
    ax.tick_params(axis="x", labelsize=8, rotation=20)
    plt.title(title)
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close(fig)
