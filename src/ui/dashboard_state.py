"""Page-level state and wiring, kept free of Streamlit calls.

``DashboardController`` owns the selection, the dataset and the loading flag.
Child views receive the ``SelectionState`` read-only and request changes
through the controller's methods.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Optional

from loguru import logger

from data.assay_loader import AssayLoader
from data.models import AssayRecord, Dataset, EMPTY_DATASET, Toxicity
from utils.config import AppConfig
from visualization.structure_viewer import ViewerHandle


@dataclass(frozen=True)
class SelectionState:
    selected_protein: str
    selected_toxicity: Toxicity = Toxicity.LOW
    # Out-of-range value the structure is currently painted with, if any
    unclassified_toxicity: Optional[str] = None


class DashboardController:
    def __init__(self, config: AppConfig, loader: AssayLoader, viewer: ViewerHandle):
        self.config = config
        self._loader = loader
        self._viewer = viewer
        self.state = SelectionState(selected_protein=config.default_protein)
        self._loaded_protein: Optional[str] = None

    @property
    def dataset(self) -> Dataset:
        # Only expose rows that belong to the current selection
        if self._loader.protein_id != self.state.selected_protein:
            return EMPTY_DATASET
        return self._loader.dataset

    @property
    def loading(self) -> bool:
        return self._loader.loading

    @property
    def load_error(self) -> Optional[str]:
        return self._loader.error

    @property
    def needs_sync(self) -> bool:
        return self._loaded_protein != self.state.selected_protein

    async def select_protein(self, protein_id: str) -> None:
        """Switch protein and reload dataset and structure concurrently."""
        protein_id = protein_id.strip().upper()
        if self.config.get_target(protein_id) is None:
            logger.warning(f"Ignoring unsupported protein selection {protein_id}")
            return
        self.state = replace(self.state, selected_protein=protein_id)
        self._loaded_protein = protein_id
        logger.info(f"Protein selection changed to {protein_id}")
        # Independent sequences; either may finish first
        await asyncio.gather(
            self._loader.load(protein_id),
            self._viewer.reload_structure(protein_id),
        )

    def request_protein(self, protein_id: str) -> None:
        """Record a selection made by the UI; loads happen on the next ``sync``."""
        protein_id = protein_id.strip().upper()
        if self.config.get_target(protein_id) is None:
            logger.warning(f"Ignoring unsupported protein selection {protein_id}")
            return
        self.state = replace(self.state, selected_protein=protein_id)

    async def sync(self) -> None:
        if self.needs_sync:
            await self.select_protein(self.state.selected_protein)

    def activate_row(self, record: AssayRecord) -> None:
        """Row-click contract: recolor by the row's toxicity and focus the camera."""
        level = Toxicity.parse(record.toxicity)
        if level is not None:
            self.state = replace(self.state, selected_toxicity=level, unclassified_toxicity=None)
            self._viewer.recolor(level)
        else:
            logger.warning(f"Row {record.compound_id} has unknown toxicity {record.toxicity!r}")
            self.state = replace(self.state, unclassified_toxicity=record.toxicity)
            self._viewer.recolor(record.toxicity)
        self._viewer.focus_compound(record.compound_id)
