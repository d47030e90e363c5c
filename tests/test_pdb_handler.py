"""Structure download and bounding sphere derivation."""
import math

import httpx
import pytest

from conftest import PDB_1HSG, PDB_6LU7, gated_transport
from utils.pdb_handler import StructureSource, bounding_sphere, structure_url


def test_bounding_sphere_two_atoms():
    sphere = bounding_sphere(PDB_6LU7)
    assert sphere is not None
    assert sphere.center == pytest.approx((1.0, 0.0, 0.0), abs=1e-3)
    assert sphere.radius == pytest.approx(1.0, abs=1e-3)


def test_bounding_sphere_covers_all_atoms():
    sphere = bounding_sphere(PDB_1HSG)
    assert sphere.center == pytest.approx((10.0, 12.0, 10.0), abs=1e-3)
    assert math.isclose(sphere.radius, 2.0, abs_tol=1e-3)


def test_bounding_sphere_without_coordinates():
    assert bounding_sphere("") is None
    assert bounding_sphere("HEADER    NOTHING HERE\nEND\n") is None


def test_structure_url():
    assert structure_url("https://files.rcsb.org/download/", "6lu7") == "https://files.rcsb.org/download/6LU7.pdb"


def test_fetch_uses_configured_base(config, run):
    source = StructureSource(config, transport=gated_transport({"/download/6LU7.pdb": PDB_6LU7}))
    assert run(source.fetch("6LU7")) == PDB_6LU7


def test_fetch_raises_http_error(config, run):
    source = StructureSource(config, transport=gated_transport({}))
    with pytest.raises(httpx.HTTPStatusError):
        run(source.fetch("0XXX"))
