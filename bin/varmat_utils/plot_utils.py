#!/usr/bin/env python3
"""
Plotly visualizations for the cleaning workflow.
"""

from typing import Dict, Optional

import pandas as pd
import plotly.graph_objects as go

STAGE_COLORS = {
    "warning": "#EF553B",
    "pipe_count": "#AB63FA",
    "chr_end": "#FFA15A",
    "missing_locus_info": "#19D3F3",
    "none_annotation": "#FF6692",
    "no_variants": "#636EFA",
}


def apply_stage_colors(stages, color_map: Optional[Dict[str, str]] = None):
    """Map stages to colors with gray fallback."""
    color_map = color_map or STAGE_COLORS
    return [color_map.get(stage, "#8A8A8A") for stage in stages]


def plot_removal_summary(summary_df: pd.DataFrame, title: str = "Rows removed per stage") -> go.Figure:
    """Bar chart of removed rows per stage from cleaning_statistics.summary_frame()."""
    total = summary_df["Count"].sum()
    pcts = summary_df["Count"] / total * 100 if total else summary_df["Count"] * 0.0

    fig = go.Figure()
    fig.add_bar(
        x=summary_df["Description"],
        y=summary_df["Count"],
        marker_color=apply_stage_colors(summary_df["Stage"]),
        text=[f"{c:,}<br>({p:.1f}%)" for c, p in zip(summary_df["Count"], pcts)],
        textposition="outside",
        hovertext=summary_df["Stage"],
    )
    fig.update_layout(
        title=title,
        xaxis=dict(title="Stage"),
        yaxis=dict(title="Rows removed"),
        height=500,
        showlegend=False,
    )
    return fig
