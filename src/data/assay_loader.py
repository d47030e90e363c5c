"""
Assay dataset loading for Molecular Assay Explorer.

Each supported protein has one CSV resource named ``<PROTEIN>_assay.csv``
under the configured assay base, which is either a local directory or an
http(s) URL prefix. The CSV carries a header row with the columns
``Compound ID``, ``IC50 (nM)`` and ``Toxicity``.
"""

import asyncio
import io
from pathlib import Path
from typing import Optional

import httpx
import pandas as pd
from loguru import logger

from data.models import AssayRecord, Dataset, EMPTY_DATASET
from utils.config import AppConfig

COMPOUND_COLUMN = "Compound ID"
IC50_COLUMN = "IC50 (nM)"
TOXICITY_COLUMN = "Toxicity"
REQUIRED_COLUMNS = (COMPOUND_COLUMN, IC50_COLUMN, TOXICITY_COLUMN)


class AssayFormatError(ValueError):
    """The CSV header cannot be mapped onto the assay columns."""


def _is_remote(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def assay_resource_path(base: str, protein_id: str) -> str:
    """Build the CSV location for a protein: ``<base>/<PROTEIN>_assay.csv``."""
    filename = f"{protein_id.strip().upper()}_assay.csv"
    if _is_remote(base):
        return f"{base.rstrip('/')}/{filename}"
    return str(Path(base) / filename)


def parse_assay_csv(text: str) -> Dataset:
    """Parse CSV text into assay records, preserving row order.

    Non-numeric IC50 values become NaN rather than failing the parse. A header
    missing a required column, or naming one twice, raises AssayFormatError.
    """
    if not text or not text.strip():
        return EMPTY_DATASET
    frame = pd.read_csv(
        io.StringIO(text),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        skipinitialspace=True,
    )
    frame.columns = [str(c).strip() for c in frame.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise AssayFormatError(f"missing required columns {missing}")
    duplicated = sorted({c for c in frame.columns[frame.columns.duplicated()] if c in REQUIRED_COLUMNS})
    if duplicated:
        raise AssayFormatError(f"duplicate columns {duplicated}")

    frame = frame[list(REQUIRED_COLUMNS)].fillna("")
    frame[COMPOUND_COLUMN] = frame[COMPOUND_COLUMN].str.strip()
    frame = frame[frame[COMPOUND_COLUMN] != ""]
    ic50 = pd.to_numeric(frame[IC50_COLUMN].str.strip(), errors="coerce")

    records = [
        AssayRecord(compound_id=cid, ic50=float(value), toxicity=tox.strip())
        for cid, value, tox in zip(frame[COMPOUND_COLUMN], ic50, frame[TOXICITY_COLUMN])
    ]
    non_numeric = int(ic50.isna().sum())
    if non_numeric:
        logger.warning(f"{non_numeric} assay row(s) have a non-numeric IC50 value")
    return tuple(records)


class AssayLoader:
    """Fetches and parses the assay table for the selected protein.

    Holds the last applied dataset together with the ``loading`` flag and the
    last ``error``. Overlapping loads are resolved in favour of the most
    recently started one: an older response arriving late is discarded.
    """

    def __init__(self, config: AppConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport
        self._generation = 0
        self.dataset: Dataset = EMPTY_DATASET
        self.protein_id: Optional[str] = None
        self.loading = False
        self.error: Optional[str] = None

    async def _read_resource(self, location: str) -> str:
        if _is_remote(location):
            async with httpx.AsyncClient(
                timeout=self.config.data.request_timeout, transport=self._transport
            ) as client:
                response = await client.get(location)
                response.raise_for_status()
                return response.text
        return await asyncio.to_thread(Path(location).read_text, encoding="utf-8")

    async def load(self, protein_id: str) -> Dataset:
        """Load the dataset for ``protein_id`` and return the dataset now in effect."""
        self._generation += 1
        token = self._generation
        location = assay_resource_path(self.config.data.assay_base, protein_id)
        self.loading = True
        self.error = None
        logger.info(f"Loading assay data for {protein_id} from {location}")

        dataset: Dataset = EMPTY_DATASET
        error: Optional[str] = None
        try:
            text = await self._read_resource(location)
            dataset = parse_assay_csv(text)
        except (httpx.HTTPError, httpx.InvalidURL, OSError, ValueError) as e:
            # ValueError covers pandas ParserError/EmptyDataError and AssayFormatError
            error = f"Failed to load assay data for {protein_id}: {e}"
            logger.error(error)
        except Exception as e:
            error = f"Failed to load assay data for {protein_id}: {e}"
            logger.exception(error)

        if token != self._generation:
            logger.debug(f"Discarding stale assay response for {protein_id}")
            return self.dataset

        self.dataset = dataset
        self.protein_id = protein_id
        self.error = error
        self.loading = False
        logger.info(f"Loaded {len(dataset)} assay records for {protein_id}")
        return dataset
