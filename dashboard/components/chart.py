"""Plotly figure for the throughput curve."""

from __future__ import annotations

import plotly.graph_objects as go

from features.curve import ThroughputCurve

PER_USER_COLOR = "#1a237e"
TOTAL_COLOR = "#cc8899"


def build_throughput_figure(curve: ThroughputCurve) -> go.Figure:
    """Two line traces (per-user and total) over sequence length."""

    xs = list(curve.seq_lens)
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=xs,
            y=list(curve.per_user),
            mode="lines",
            name="Per-User",
            line=dict(width=2, color=PER_USER_COLOR),
        )
    )
    fig.add_trace(
        go.Scatter(
            x=xs,
            y=list(curve.total),
            mode="lines",
            name="Total",
            line=dict(width=2, color=TOTAL_COLOR),
        )
    )
    fig.update_layout(
        margin=dict(t=40, r=30, b=50, l=60),
        xaxis=dict(title="Sequence Length", gridcolor="#e0e0e0"),
        yaxis=dict(title="Throughput (tokens/s)", gridcolor="#e0e0e0"),
        legend=dict(orientation="h", x=0, y=1.1),
        hovermode="x unified",
        height=600,
    )
    return fig


__all__ = ["build_throughput_figure"]
