"""
Main user interface for Molecular Assay Explorer.
"""

import asyncio

import streamlit as st
from loguru import logger

from data.assay_loader import AssayLoader
from data.models import AssayRecord
from ui.components.assay_table import render_assay_table
from ui.components.toxicity_palette import render_toxicity_legend
from ui.dashboard_state import DashboardController
from utils.config import AppConfig
from visualization.plots import AssayPlots
from visualization.structure_viewer import StructureViewer


class MainInterface:
    """Main Streamlit UI: protein selector, 3D viewer and assay views."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.viewer = StructureViewer(config)
        self.loader = AssayLoader(config)
        self.controller = DashboardController(config, self.loader, self.viewer.handle())
        self.plots = AssayPlots(config)

    def _on_protein_change(self):
        label = st.session_state.get("protein_selector")
        for target in self.config.targets:
            if target.label == label:
                self.controller.request_protein(target.pdb_id)
                return

    def _on_row_activated(self, record: AssayRecord):
        logger.debug(f"Row activated: {record.compound_id} ({record.toxicity})")
        self.controller.activate_row(record)

    def _sync(self):
        if not self.controller.needs_sync:
            return
        with st.spinner("Loading molecular data..."):
            asyncio.run(self.controller.sync())

    def _render_header(self):
        st.title(self.config.app_name)
        st.caption(self.config.tagline)

    def _render_protein_selector(self):
        labels = [t.label for t in self.config.targets]
        current = self.config.get_target(self.controller.state.selected_protein)
        st.selectbox(
            "Target Protein:",
            labels,
            index=labels.index(current.label) if current else 0,
            key="protein_selector",
            on_change=self._on_protein_change,
        )

    def render(self):
        self._render_header()
        self._sync()
        state = self.controller.state

        left, right = st.columns(2)
        with left:
            self._render_protein_selector()
            self.viewer.render()
            render_toxicity_legend(
                selected=state.selected_toxicity,
                unclassified=state.unclassified_toxicity,
                title="Structure color",
            )

        with right:
            if self.controller.load_error:
                st.warning(self.controller.load_error)
            dataset = self.controller.dataset
            render_assay_table(dataset, self._on_row_activated)
            self.plots.render_summary(dataset)
            self.plots.render_ic50_chart(dataset)
            self.plots.render_toxicity_pie(dataset)
