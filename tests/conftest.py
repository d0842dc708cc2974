"""Pytest configuration and shared fixtures for the hvcore tests."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def column():
    """Uniform 16-cell column on [0, 1] with boundaries bottom/top."""
    from hvcore.cases import column_space

    return column_space(0.0, 1.0, 16)


@pytest.fixture
def stretched_column():
    """Exponentially stretched 20-cell column on [0, 10]."""
    from hvcore.cases import column_space

    return column_space(0.0, 10.0, 20, stretching_H=3.0)


@pytest.fixture
def periodic_space():
    """3x3 periodic spectral-element space on [-pi, pi]^2 with Nq=5."""
    from hvcore.cases import periodic_plane

    return periodic_plane(-np.pi, np.pi, 3, 5)


@pytest.fixture
def bounded_space():
    """2x3 non-periodic spectral-element space on [0, 2] x [0, 3] with Nq=4."""
    from hvcore.domains import RectangleDomain
    from hvcore.meshing import EquispacedRectangleMesh
    from hvcore.spaces import SpectralElementSpace2D
    from hvcore.spectral import GLL
    from hvcore.topologies import GridTopology

    domain = RectangleDomain(0.0, 2.0, 0.0, 3.0, x1boundary=("west", "east"), x2boundary=("south", "north"))
    return SpectralElementSpace2D(GridTopology(EquispacedRectangleMesh(domain, 2, 3)), GLL(4))


@pytest.fixture
def make_topology():
    """Factory for grid or tensor-product topologies on [0, 1]^2."""
    from hvcore.domains import RectangleDomain
    from hvcore.meshing import EquispacedRectangleMesh, TensorProductMesh
    from hvcore.topologies import GridTopology, TensorProductTopology

    def build(n1, n2, x1periodic, x2periodic, kind="grid"):
        domain = RectangleDomain(
            0.0, 1.0, 0.0, 1.0,
            x1periodic=x1periodic,
            x2periodic=x2periodic,
            x1boundary=None if x1periodic else ("west", "east"),
            x2boundary=None if x2periodic else ("south", "north"),
        )
        if kind == "grid":
            return GridTopology(EquispacedRectangleMesh(domain, n1, n2))
        return TensorProductTopology(TensorProductMesh(domain, n1, n2))

    return build
