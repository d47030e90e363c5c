"""
PDB structure retrieval for Molecular Assay Explorer.

Downloads the coordinate file for a structure identifier and derives the
bounding sphere the viewer uses for camera focus.
"""

import io
import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

import httpx
import numpy as np
from Bio.PDB.PDBExceptions import PDBConstructionException
from Bio.PDB.PDBParser import PDBParser
from loguru import logger

from utils.config import AppConfig


@dataclass(frozen=True)
class BoundingSphere:
    center: Tuple[float, float, float]
    radius: float


def structure_url(base_url: str, pdb_id: str, fmt: str = "pdb") -> str:
    return f"{base_url.rstrip('/')}/{pdb_id.strip().upper()}.{fmt}"


def bounding_sphere(pdb_text: str) -> Optional[BoundingSphere]:
    """Centroid-based bounding sphere over all atoms of the first model.

    Returns None when no coordinates can be parsed.
    """
    if not pdb_text:
        return None
    parser = PDBParser(QUIET=True)
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            structure = parser.get_structure("structure", io.StringIO(pdb_text))
    except (PDBConstructionException, ValueError, IndexError, KeyError) as e:
        logger.warning(f"Could not parse structure coordinates: {e}")
        return None

    models = list(structure)
    if not models:
        return None
    coords = np.array([atom.get_coord() for atom in models[0].get_atoms()], dtype=float)
    if coords.size == 0:
        return None
    center = coords.mean(axis=0)
    radius = float(np.linalg.norm(coords - center, axis=1).max())
    return BoundingSphere(center=tuple(float(c) for c in center), radius=radius)


class StructureSource:
    """Fetches structure files from the configured PDB download service."""

    def __init__(self, config: AppConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    def url_for(self, pdb_id: str) -> str:
        return structure_url(self.config.data.pdb_base_url, pdb_id, self.config.data.structure_format)

    async def fetch(self, pdb_id: str) -> str:
        """Download the structure text; raises httpx.HTTPError on failure."""
        url = self.url_for(pdb_id)
        logger.info(f"Downloading structure {pdb_id} from {url}")
        async with httpx.AsyncClient(
            timeout=self.config.data.request_timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text
