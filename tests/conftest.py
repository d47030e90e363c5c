"""Test configuration ensuring src package discoverability & shared fakes."""
import asyncio
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from utils.config import AppConfig, DataConfig  # noqa: E402


def pdb_atom(serial, name, x, y, z, element="C", resseq=1):
    return (
        f"ATOM  {serial:5d} {name:<4s} ALA A{resseq:4d}    "
        f"{x:8.3f}{y:8.3f}{z:8.3f}  1.00  0.00          {element:>2s}"
    )


def make_pdb(*coords):
    lines = [pdb_atom(i + 1, "CA", x, y, z, resseq=i + 1) for i, (x, y, z) in enumerate(coords)]
    return "\n".join(lines + ["END", ""])


PDB_6LU7 = make_pdb((0.0, 0.0, 0.0), (2.0, 0.0, 0.0))
PDB_1HSG = make_pdb((10.0, 10.0, 10.0), (10.0, 14.0, 10.0), (10.0, 12.0, 10.0))

CSV_6LU7 = "Compound ID,IC50 (nM),Toxicity\nC001,12.5,Moderate\nC002,45.2,Low\nC003,8.7,High\n"
CSV_1HSG = "Compound ID,IC50 (nM),Toxicity\nHIV-101,0.6,Moderate\nHIV-102,2.3,Low\n"


class FakeStructureSource:
    """Structure source serving canned PDB text; optional gates hold a fetch open."""

    def __init__(self, texts, gates=None):
        self.texts = dict(texts)
        self.gates = dict(gates or {})
        self.calls = []

    async def fetch(self, pdb_id):
        self.calls.append(pdb_id)
        gate = self.gates.get(pdb_id)
        if gate is not None:
            await gate.wait()
        if pdb_id not in self.texts:
            raise httpx.ConnectError(f"no route to structure {pdb_id}")
        return self.texts[pdb_id]


class RecordingViewer:
    """Stands in for ViewerHandle and records the commands it receives."""

    def __init__(self):
        self.calls = []

    async def reload_structure(self, protein_id):
        self.calls.append(("reload", protein_id))
        return True

    def recolor(self, toxicity):
        self.calls.append(("recolor", toxicity))

    def focus_compound(self, compound_id):
        self.calls.append(("focus", compound_id))
        return True


def gated_transport(responses, gates=None):
    """httpx MockTransport answering by URL path; gated paths wait for their event."""
    gates = gates or {}

    async def handler(request: httpx.Request):
        path = request.url.path
        gate = gates.get(path)
        if gate is not None:
            await gate.wait()
        if path not in responses:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, text=responses[path])

    return httpx.MockTransport(handler)


@pytest.fixture
def config(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "6LU7_assay.csv").write_text(CSV_6LU7)
    (data_dir / "1HSG_assay.csv").write_text(CSV_1HSG)
    return AppConfig(base_dir=tmp_path, data=DataConfig(assay_base=str(data_dir)))


@pytest.fixture
def remote_config(tmp_path):
    return AppConfig(base_dir=tmp_path, data=DataConfig(assay_base="https://assays.test/data"))


@pytest.fixture
def run():
    return asyncio.run
