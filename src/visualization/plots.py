"""
Assay charts for Molecular Assay Explorer.
"""

import math
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import plotly.graph_objects as go
import streamlit as st

from data.models import AssayRecord, Dataset
from ui.components.toxicity_palette import color_for
from utils.config import AppConfig


def toxicity_distribution(dataset: Dataset) -> List[Tuple[str, int, float]]:
    """Group records by toxicity level and count them.

    Returns ``(level, count, fraction)`` per distinct level, ordered by first
    appearance in the dataset.
    """
    counts = Counter(record.toxicity for record in dataset)
    total = sum(counts.values())
    if total == 0:
        return []
    return [(level, count, count / total) for level, count in counts.items()]


def pie_label(level: str, fraction: float) -> str:
    return f"{level}: {fraction * 100:.0f}%"


class AssayPlots:
    """Generates the IC50 bar chart, the toxicity pie chart and summary stats."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.chart_height = config.visualization.chart_height

    def ic50_bar_figure(self, dataset: Dataset) -> go.Figure:
        """One bar per compound; height is IC50, fill is the toxicity color."""
        names = [r.compound_id for r in dataset]
        # NaN bars are drawn as gaps
        values = [None if math.isnan(r.ic50) else r.ic50 for r in dataset]
        colors = [color_for(r.toxicity) for r in dataset]
        fig = go.Figure(
            go.Bar(
                x=names,
                y=values,
                marker_color=colors,
                customdata=[r.toxicity for r in dataset],
                hovertemplate="%{x}<br>IC50: %{y:.1f} nM<br>Toxicity: %{customdata}<extra></extra>",
            )
        )
        fig.update_layout(
            height=self.chart_height,
            margin=dict(t=20, r=30, l=20, b=5),
            yaxis_title="IC50 (nM)",
            xaxis=dict(type="category"),
            showlegend=False,
        )
        return fig

    def toxicity_pie_figure(self, dataset: Dataset) -> go.Figure:
        """One slice per toxicity level present, labelled with its percentage."""
        distribution = toxicity_distribution(dataset)
        fig = go.Figure(
            go.Pie(
                labels=[level for level, _, _ in distribution],
                values=[count for _, count, _ in distribution],
                text=[pie_label(level, fraction) for level, _, fraction in distribution],
                textinfo="text",
                marker=dict(colors=[color_for(level) for level, _, _ in distribution]),
                sort=False,
            )
        )
        fig.update_layout(height=self.chart_height, margin=dict(t=20, r=20, l=20, b=20), showlegend=True)
        return fig

    def summary_stats(self, dataset: Dataset) -> Dict[str, Any]:
        values = np.array([r.ic50 for r in dataset], dtype=float)
        finite = values[~np.isnan(values)] if values.size else values
        most_potent: Optional[AssayRecord] = None
        if finite.size:
            most_potent = min(
                (r for r in dataset if not math.isnan(r.ic50)), key=lambda r: r.ic50
            )
        return {
            'compounds': len(dataset),
            'most_potent': most_potent.compound_id if most_potent else None,
            'most_potent_ic50': most_potent.ic50 if most_potent else None,
            'median_ic50': float(np.median(finite)) if finite.size else None,
            'toxicity_counts': {level: count for level, count, _ in toxicity_distribution(dataset)},
        }

    def render_ic50_chart(self, dataset: Dataset):
        st.subheader("IC50 Distribution")
        st.caption("Lower IC50 values indicate higher potency")
        st.plotly_chart(self.ic50_bar_figure(dataset), use_container_width=True)

    def render_toxicity_pie(self, dataset: Dataset):
        st.subheader("Toxicity Distribution")
        st.caption("Breakdown of compounds by toxicity level")
        if not dataset:
            st.info("No compounds to summarise")
            return
        st.plotly_chart(self.toxicity_pie_figure(dataset), use_container_width=True)

    def render_summary(self, dataset: Dataset):
        stats = self.summary_stats(dataset)
        col1, col2, col3 = st.columns(3)
        col1.metric("Compounds", stats['compounds'])
        if stats['most_potent']:
            col2.metric("Most Potent", stats['most_potent'], f"{stats['most_potent_ic50']:.1f} nM", delta_color="off")
        else:
            col2.metric("Most Potent", "n/a")
        median = stats['median_ic50']
        col3.metric("Median IC50 (nM)", f"{median:.1f}" if median is not None else "n/a")
