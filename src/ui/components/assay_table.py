"""Assay Table Component

Tabular view of the loaded dataset with a colored toxicity column and
single-row activation. The page owns what activation means; this component
only reports which record was picked.
"""
from __future__ import annotations

from typing import Callable, Optional

import pandas as pd
import streamlit as st

from data.models import AssayRecord, Dataset
from ui.components.toxicity_palette import color_for

TABLE_COLUMNS = ["Compound ID", "IC50 (nM)", "Toxicity Level"]
TABLE_KEY = "assay_table"


def build_table_frame(dataset: Dataset) -> pd.DataFrame:
    rows = [
        {
            "Compound ID": r.compound_id,
            "IC50 (nM)": r.ic50_display,
            "Toxicity Level": r.toxicity,
        }
        for r in dataset
    ]
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def _toxicity_cell_style(value) -> str:
    return f"background-color: {color_for(value)}; color: white; font-weight: 600;"


def style_table(frame: pd.DataFrame):
    return frame.style.map(_toxicity_cell_style, subset=["Toxicity Level"])


def selected_record(dataset: Dataset, rows) -> Optional[AssayRecord]:
    """Map a Streamlit row selection back to its record."""
    if not rows:
        return None
    index = rows[0]
    if 0 <= index < len(dataset):
        return dataset[index]
    return None


def render_assay_table(dataset: Dataset, on_activate: Callable[[AssayRecord], None]):
    st.subheader("Compound Assay Results")
    st.caption("IC50 values and toxicity levels")
    frame = build_table_frame(dataset)

    def _on_select():
        event = st.session_state.get(TABLE_KEY)
        rows = event.selection.rows if event is not None else []
        record = selected_record(dataset, rows)
        if record is not None:
            on_activate(record)

    st.dataframe(
        style_table(frame),
        hide_index=True,
        use_container_width=True,
        key=TABLE_KEY,
        on_select=_on_select,
        selection_mode="single-row",
    )
