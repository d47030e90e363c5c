"""Assay data model shared by the loader, the views and the orchestrator."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Toxicity(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"

    @classmethod
    def parse(cls, value) -> "Toxicity | None":
        """Return the matching level or None for out-of-enum input (case-sensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class AssayRecord:
    """One row of an assay table.

    ``toxicity`` keeps the string as authored in the CSV so that malformed
    values still reach the color fallback instead of failing the parse.
    """

    compound_id: str
    ic50: float
    toxicity: str

    @property
    def toxicity_level(self) -> "Toxicity | None":
        return Toxicity.parse(self.toxicity)

    @property
    def ic50_display(self) -> str:
        if math.isnan(self.ic50):
            return "NaN"
        return f"{self.ic50:.1f}"


Dataset = Tuple[AssayRecord, ...]

EMPTY_DATASET: Dataset = ()
