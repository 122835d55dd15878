from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import plotly.graph_objects as go

from ..domain.models import NO_RANK, Rank
from ..domain.services import CategoryRow, ChartAxis, DisciplineSection


def hex_to_rgb(h: str) -> tuple[int, int, int]:
    h = h.lstrip("#")
    return (
        int(h[0:2], 16),
        int(h[2:4], 16),
        int(h[4:6], 16),
    )


def rgb_to_hex(rgb: tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f"#{r:02X}{g:02X}{b:02X}"


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


# Percentage of the discipline maximum -> colour
DEFAULT_STOPS: list[tuple[float, str]] = [
    (0.0, "#D73027"),
    (60.0, "#FC8D59"),
    (72.6, "#FEE08B"),
    (85.0, "#1A9850"),
    (100.0, "#3027D7"),
]

RANK_COLORS: dict[str, str] = {
    Rank.AAA.value: "#3027D7",
    Rank.AA.value: "#1A9850",
    Rank.A.value: "#FEE08B",
    Rank.B.value: "#FC8D59",
    NO_RANK: "#BDBDBD",
}

SERIES_COLORS = {"current": "#E75480", "previous": "#7F7F7F", "national": "#4C78A8"}


def gradient_color(value: float, stops: list[tuple[float, str]] = DEFAULT_STOPS) -> str:
    """Piecewise-linear interpolation across hex color stops."""
    v = float(value)
    if v <= stops[0][0]:
        return stops[0][1]
    if v >= stops[-1][0]:
        return stops[-1][1]
    for i in range(len(stops) - 1):
        v0, c0 = stops[i]
        v1, c1 = stops[i + 1]
        if v0 <= v <= v1:
            t = 0.0 if v1 == v0 else (v - v0) / (v1 - v0)
            r0, g0, b0 = hex_to_rgb(c0)
            r1, g1, b1 = hex_to_rgb(c1)
            return rgb_to_hex(
                (
                    int(round(lerp(r0, r1, t))),
                    int(round(lerp(g0, g1, t))),
                    int(round(lerp(b0, b1, t))),
                )
            )
    return stops[-1][1]


def rank_color(label: str) -> str:
    rank = Rank.parse(label)
    return RANK_COLORS[rank.value if rank is not None else NO_RANK]


def _closed(values: Sequence[float]) -> list[float]:
    # Scatterpolar needs the first point repeated to close the outline
    return [*values, values[0]] if values else []


def make_radar(axes: Sequence[ChartAxis], title: str = "") -> go.Figure:
    """Current, previous and national percentages per chart group."""
    labels = _closed([a.label for a in axes])
    fig = go.Figure()

    series = {
        "current": [a.current for a in axes],
        "previous": [a.previous for a in axes],
        "national": [a.national for a in axes],
    }
    for name, values in series.items():
        if not values or any(v is None for v in values):
            continue
        fig.add_trace(
            go.Scatterpolar(
                r=_closed([round(float(v), 1) for v in values]),
                theta=labels,
                name=name.capitalize(),
                mode="lines+markers",
                line=dict(color=SERIES_COLORS[name], width=2),
                fill="toself" if name == "current" else None,
                opacity=0.8 if name == "current" else 0.6,
                hovertemplate="%{theta}: %{r:.1f}%<extra>" + name + "</extra>",
            )
        )

    fig.update_layout(
        title=title,
        polar=dict(radialaxis=dict(range=[0, 100], ticksuffix="%")),
        showlegend=True,
        margin=dict(l=40, r=40, t=60, b=40),
    )
    return fig


def make_category_bars(rows: Sequence[CategoryRow], title: str = "") -> go.Figure:
    """Category scores against their allocations, with the allocation as target line."""
    labels = [f"{r.category} {r.label}" for r in rows]
    current = np.array([r.current for r in rows], dtype=float)
    allocation = np.array([r.allocation for r in rows], dtype=float)
    pct = np.divide(current, allocation, out=np.zeros_like(current), where=allocation > 0) * 100

    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=labels,
            y=current,
            name="Current",
            marker_color=[gradient_color(p) for p in pct],
            customdata=pct,
            hovertemplate="%{x}: %{y:.0f} (%{customdata:.0f}%)<extra></extra>",
        )
    )
    if any(r.previous is not None for r in rows):
        fig.add_trace(
            go.Bar(
                x=labels,
                y=[r.previous if r.previous is not None else 0 for r in rows],
                name="Previous",
                marker_color=SERIES_COLORS["previous"],
                opacity=0.5,
            )
        )
    fig.add_trace(
        go.Scatter(
            x=labels,
            y=allocation,
            name="Target",
            mode="lines+markers",
            line=dict(color="#333333", dash="dash"),
        )
    )
    fig.update_layout(
        title=title,
        barmode="group",
        yaxis=dict(rangemode="tozero"),
        margin=dict(l=40, r=20, t=60, b=120),
    )
    return fig


def section_figures(section: DisciplineSection) -> dict[str, go.Figure]:
    label = section.summary.label
    return {
        "radar": make_radar(section.axes, title=f"{label} balance"),
        "categories": make_category_bars(section.categories, title=f"{label} by category"),
    }
