"""Tests for domains and meshes: validation, stretching and warping."""

import numpy as np
import pytest

from hvcore.domains import CubePanelDomain, IntervalDomain, RectangleDomain, SphereDomain, WarpedDomain
from hvcore.exceptions import ConstructionError, DimensionMismatch, RangeError
from hvcore.meshing import (
    EquispacedRectangleMesh,
    ExponentialStretching,
    IntervalMesh,
    Point2D,
    TensorProductMesh,
    warped_mesh,
)
from hvcore.topologies import TensorProductTopology


class TestDomains:
    """Tests for domain validation."""

    def test_interval_requires_ordered_extent(self):
        """coord_min must be below coord_max."""
        with pytest.raises(ConstructionError):
            IntervalDomain(1.0, 0.0, boundary_tags=("bottom", "top"))

    def test_periodic_interval_rejects_tags(self):
        """Periodic axes carry no boundary names."""
        with pytest.raises(ConstructionError):
            IntervalDomain(0.0, 1.0, boundary_tags=("bottom", "top"), periodic=True)

    def test_non_periodic_rectangle_needs_tags(self):
        """Each non-periodic axis names two boundaries."""
        with pytest.raises(ConstructionError):
            RectangleDomain(0.0, 1.0, 0.0, 1.0, x1periodic=True)

    def test_rectangle_boundary_names(self):
        """Names are listed x1 first, low side first."""
        domain = RectangleDomain(0.0, 1.0, 0.0, 2.0, x1boundary=("west", "east"), x2boundary=("south", "north"))
        assert domain.boundary_names == ("west", "east", "south", "north")

    def test_duplicate_rectangle_names_rejected(self):
        """Boundary names must be unique across axes."""
        with pytest.raises(ConstructionError):
            RectangleDomain(0.0, 1.0, 0.0, 1.0, x1boundary=("a", "b"), x2boundary=("b", "c"))

    def test_cube_panel_maps_to_unit_sphere(self):
        """Panel points land on the sphere of the given radius."""
        panel = CubePanelDomain()
        x = np.linspace(-1.0, 1.0, 5)
        points = panel.panel_to_sphere(x, x[::-1], radius=2.0)
        assert np.allclose(np.linalg.norm(points, axis=-1), 2.0)

    def test_sphere_has_no_boundaries(self):
        """The sphere is closed."""
        assert SphereDomain(1.0).boundary_names == ()
        with pytest.raises(ConstructionError):
            SphereDomain(0.0)


class TestIntervalMesh:
    """Tests for uniform and stretched interval meshes."""

    def test_uniform_faces(self):
        """Faces are equally spaced and hit both ends."""
        mesh = IntervalMesh(IntervalDomain(0.0, 2.0, boundary_tags=("bottom", "top")), nelems=4)
        assert np.allclose(mesh.faces, [0.0, 0.5, 1.0, 1.5, 2.0])
        assert dict(mesh.boundaries) == {"bottom": 5, "top": 6}

    @pytest.mark.parametrize(
        "lo, hi, H, nelems",
        [
            (0.0, 25.0, 2.0, 30),
            (0.0, 25.0, 7.0, 30),
            (0.0, 25.0, 100.0, 30),
            (0.0, 1.0, 1e-3, 30),
            (0.0, 1.0, 1e12, 30),
            (1.0, 2.0, 0.05, 30),
            (1.0, 2.0, 1e-6, 30),
            (1.0, 2.0, 1e6, 30),
            (1.0, 2.0, 0.05, 1),
            (1.0, 2.0, 1e-20, 1),
            (1.0, 2.0, 0.05, 2),
            (1.0, 2.0, 1e6, 2),
        ],
    )
    def test_stretched_faces_monotone_with_exact_ends(self, lo, hi, H, nelems):
        """Stretched faces increase strictly and keep the domain end points."""
        domain = IntervalDomain(lo, hi, boundary_tags=("bottom", "top"))
        faces = IntervalMesh(domain, ExponentialStretching(H), nelems=nelems).faces
        assert len(faces) == nelems + 1
        assert faces[0] == lo
        assert faces[-1] == hi
        assert np.all(np.diff(faces) > 0)

    def test_large_scale_height_is_nearly_uniform(self):
        """As H grows the stretching approaches uniform spacing."""
        domain = IntervalDomain(1.0, 2.0, boundary_tags=("bottom", "top"))
        faces = IntervalMesh(domain, ExponentialStretching(1e6), nelems=10).faces
        assert np.allclose(faces, np.linspace(1.0, 2.0, 11), atol=1e-6)

    @pytest.mark.parametrize("nelems", [2, 30])
    def test_collapsed_faces_rejected(self, nelems):
        """A scale height that rounds interior faces onto the bottom is refused."""
        domain = IntervalDomain(1.0, 2.0, boundary_tags=("bottom", "top"))
        with pytest.raises(ConstructionError):
            IntervalMesh(domain, ExponentialStretching(1e-20), nelems=nelems)

    def test_stretching_clusters_near_bottom(self):
        """The lowest cell is thinner than the highest one."""
        domain = IntervalDomain(0.0, 10.0, boundary_tags=("bottom", "top"))
        dz = np.diff(IntervalMesh(domain, ExponentialStretching(3.0), nelems=20).faces)
        assert dz[0] < dz[-1]

    @pytest.mark.parametrize("H", [0.0, -1.0])
    def test_non_positive_scale_height_rejected(self, H):
        """H must be positive."""
        with pytest.raises(ConstructionError):
            ExponentialStretching(H)

    def test_nelems_must_be_positive(self):
        """An interval mesh needs at least one element."""
        with pytest.raises(ConstructionError):
            IntervalMesh(IntervalDomain(0.0, 1.0, boundary_tags=("bottom", "top")), nelems=0)

    def test_faces_read_only(self):
        """Face coordinates cannot be modified in place."""
        mesh = IntervalMesh(IntervalDomain(0.0, 1.0, boundary_tags=("bottom", "top")), nelems=2)
        with pytest.raises(ValueError):
            mesh.faces[0] = 1.0


class TestRectangleMeshes:
    """Tests for equispaced and tensor-product rectangle meshes."""

    @pytest.fixture
    def domain(self):
        return RectangleDomain(0.0, 3.0, 0.0, 2.0, x1boundary=("west", "east"), x2boundary=("south", "north"))

    def test_vertex_coordinates(self, domain):
        """Corners of element 4 in a 3x2 mesh, in vertex order."""
        mesh = EquispacedRectangleMesh(domain, 3, 2)
        assert mesh.vertex_coordinates(4) == (
            Point2D(0.0, 1.0), Point2D(1.0, 1.0), Point2D(0.0, 2.0), Point2D(1.0, 2.0)
        )

    def test_element_out_of_range(self, domain):
        """Element numbers are checked."""
        with pytest.raises(RangeError):
            EquispacedRectangleMesh(domain, 3, 2).vertex_coordinates(7)

    def test_tensor_product_defaults_to_equispaced(self, domain):
        """Without coordinates, the tensor-product mesh matches the equispaced one."""
        equi = EquispacedRectangleMesh(domain, 3, 2)
        tensor = TensorProductMesh(domain, 3, 2)
        for elem in range(1, 7):
            assert np.allclose(tensor.vertex_coordinates(elem), equi.vertex_coordinates(elem))

    def test_tensor_product_face_table(self, domain):
        """The face table stores one row per element face."""
        mesh = TensorProductMesh(domain, 3, 2)
        assert mesh.faces.shape == (24, 3)
        assert mesh.face_entry(1, 2) == (2, 1, False)
        assert mesh.face_entry(1, 1) == (0, 1, False)

    def test_coordinate_count_mismatch(self, domain):
        """Supplying the wrong number of vertices raises DimensionMismatch."""
        with pytest.raises(DimensionMismatch):
            TensorProductMesh(domain, 3, 2, coordinates=np.zeros((5, 2)))

    def test_vertex_count(self, domain):
        """Non-periodic meshes have (n1 + 1)(n2 + 1) vertices."""
        assert EquispacedRectangleMesh(domain, 3, 2).nvertices == 12


def _interior_sine_warp(X1, X2):
    """Shift interior vertices by half an element height times sin(x1)."""
    height = X2[0, 1] - X2[0, 0]
    W2 = X2.copy()
    W2[1:-1, 1:-1] += 0.5 * height * np.sin(X1[1:-1, 1:-1])
    return X1, W2


class TestWarpedMesh:
    """Tests for meshes with displaced interior vertices."""

    @pytest.fixture
    def topology(self):
        base = RectangleDomain(0.0, 2 * np.pi, 0.0, 2 * np.pi,
                               x1boundary=("east", "west"), x2boundary=("south", "north"))
        domain = WarpedDomain(base, _interior_sine_warp)
        return TensorProductTopology(warped_mesh(domain, 3, 3))

    def test_corner_element(self, topology):
        """Element 1 keeps its boundary corners; its inner corner moves."""
        e1 = topology.vertex_coordinates(1)
        assert np.allclose(e1[0], (0.0, 0.0))
        assert np.allclose(e1[1], (2 * np.pi / 3, 0.0))
        assert np.allclose(e1[2], (0.0, 2 * np.pi / 3))
        assert np.allclose(e1[3], (2 * np.pi / 3, 2 * np.pi / 3 + np.pi / 3 * np.sin(2 * np.pi / 3)))

    def test_interior_element(self, topology):
        """All four corners of the centre element are warped."""
        e5 = topology.vertex_coordinates(5)
        assert np.allclose(e5[1], (4 * np.pi / 3, 2 * np.pi / 3 + np.pi / 3 * np.sin(4 * np.pi / 3)))
        assert np.allclose(e5[2], (2 * np.pi / 3, 4 * np.pi / 3 + np.pi / 3 * np.sin(2 * np.pi / 3)))

    def test_opposite_corner_element(self, topology):
        """Element 9 touches the boundary at three corners."""
        e9 = topology.vertex_coordinates(9)
        assert np.allclose(e9[1], (2 * np.pi, 4 * np.pi / 3))
        assert np.allclose(e9[2], (4 * np.pi / 3, 2 * np.pi))
        assert np.allclose(e9[3], (2 * np.pi, 2 * np.pi))

    def test_boundary_vertices_unchanged(self, topology):
        """Every vertex on the domain edge keeps its equispaced position."""
        coords = topology.mesh.coordinates
        grid = np.linspace(0.0, 2 * np.pi, 4)
        assert np.allclose(coords[0, :, 1], grid)
        assert np.allclose(coords[-1, :, 1], grid)
        assert np.allclose(coords[:, 0, 1], 0.0)
        assert np.allclose(coords[:, -1, 1], 2 * np.pi)

    def test_faces_never_reversed(self):
        """Warping moves vertices but keeps the logical orientation of every face."""
        base = RectangleDomain(0.0, 2 * np.pi, 0.0, 2 * np.pi, x1periodic=True, x2periodic=True)
        mesh = warped_mesh(WarpedDomain(base, _interior_sine_warp), 4, 3)
        assert not np.any(mesh.faces[:, 2])
        assert mesh.face_entry(1, 1) == (4, 2, False)
        assert mesh.face_entry(1, 3) == (9, 4, False)

    def test_warped_domain_delegates(self):
        """Extents and tags come from the underlying rectangle."""
        base = RectangleDomain(0.0, 1.0, 0.0, 1.0, x1periodic=True, x2boundary=("south", "north"))
        domain = WarpedDomain(base, _interior_sine_warp)
        assert domain.x1max == 1.0
        assert domain.x1periodic
        assert domain.boundary_names == ("south", "north")
