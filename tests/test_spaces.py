"""Tests for finite-difference, spectral-element and extruded spaces, and DSS."""

import numpy as np
import pytest

from hvcore.cases import column_space, periodic_plane
from hvcore.domains import IntervalDomain, RectangleDomain
from hvcore.exceptions import ConstructionError
from hvcore.fields import Field, coordinate_field, vector_field, zeros
from hvcore.geometry import Basis, covariant
from hvcore.meshing import EquispacedRectangleMesh, IntervalMesh
from hvcore.spaces import (
    CenterFiniteDifferenceSpace,
    ExtrudedFiniteDifferenceSpace,
    FaceFiniteDifferenceSpace,
    FiniteDifferenceSpace,
    SpectralElementSpace2D,
    column,
    dss_sum,
    integrate,
    weighted_dss,
)
from hvcore.spectral import GLL
from hvcore.topologies import GridTopology


class TestFiniteDifferenceSpace:
    """Tests for column geometry and construction."""

    def test_shapes(self, column):
        """n cells give n centers and n + 1 faces."""
        assert column.center.shape == (16,)
        assert column.face.shape == (17,)
        assert column.center.axes == (3,)

    def test_center_geometry(self, stretched_column):
        """Centers sit at cell midpoints with J = WJ = dz."""
        faces = stretched_column.mesh.faces
        geom = stretched_column.center.local_geometry
        assert np.allclose(geom.coordinate(3), 0.5 * (faces[1:] + faces[:-1]))
        assert np.allclose(geom.J, np.diff(faces))
        assert np.allclose(geom.WJ, np.diff(faces))

    def test_face_geometry(self, stretched_column):
        """Interior face J averages the adjacent cells; end weights are halved."""
        faces = stretched_column.mesh.faces
        geom = stretched_column.face.local_geometry
        assert np.allclose(geom.J[1:-1], 0.5 * (faces[2:] - faces[:-2]))
        assert np.isclose(geom.J[0], faces[1] - faces[0])
        assert np.isclose(geom.WJ[0], 0.5 * geom.J[0])
        assert np.isclose(geom.WJ[-1], 0.5 * geom.J[-1])

    def test_weights_sum_to_length(self, stretched_column):
        """Both staggerings integrate 1 to the column height."""
        assert np.isclose(stretched_column.center.local_geometry.WJ.sum(), 10.0)
        assert np.isclose(stretched_column.face.local_geometry.WJ.sum(), 10.0)

    def test_metric_is_inverse(self, stretched_column):
        """dxdxi and dxidx are reciprocal."""
        geom = stretched_column.face.local_geometry
        assert np.allclose(geom.dxdxi[:, 0, 0] * geom.dxidx[:, 0, 0], 1.0)

    def test_views_are_unique(self, column):
        """Constructing a view from the column or its sibling returns the same object."""
        assert CenterFiniteDifferenceSpace(column) is column.center
        assert FaceFiniteDifferenceSpace(column.center) is column.face
        assert column.face.center is column.center

    def test_view_from_mesh(self):
        """A view built from a mesh owns a fresh column."""
        mesh = IntervalMesh(IntervalDomain(0.0, 1.0, boundary_tags=("bottom", "top")), nelems=4)
        center = CenterFiniteDifferenceSpace(mesh)
        assert center.nlevels == 4
        assert center.face.nlevels == 5

    def test_boundary_names(self, column):
        """Left and right boundaries follow the domain tags."""
        assert column.left_boundary_name == "bottom"
        assert column.face.right_boundary_name == "top"

    def test_periodic_column_rejected(self):
        """Finite-difference columns need two boundaries."""
        mesh = IntervalMesh(IntervalDomain(0.0, 1.0, periodic=True), nelems=4)
        with pytest.raises(ConstructionError):
            FiniteDifferenceSpace(mesh)

    def test_horizontal_interval_rejected(self):
        """Only vertical intervals make finite-difference columns."""
        mesh = IntervalMesh(IntervalDomain(0.0, 1.0, boundary_tags=("left", "right"), axis="x"), nelems=4)
        with pytest.raises(ConstructionError):
            FiniteDifferenceSpace(mesh)

    def test_axis_mismatch_is_an_assertion(self):
        """A wrong axis tag fails as an assertion as well as a value error."""
        mesh = IntervalMesh(IntervalDomain(0.0, 1.0, boundary_tags=("left", "right"), axis="x"), nelems=4)
        with pytest.raises(AssertionError):
            FiniteDifferenceSpace(mesh)
        with pytest.raises(ValueError):
            FiniteDifferenceSpace(mesh)


class TestSpectralElementSpace:
    """Tests for 2D spectral-element geometry."""

    def test_shape(self, periodic_space):
        """Nodes are laid out (nelem, Nq, Nq)."""
        assert periodic_space.shape == (9, 5, 5)

    def test_area(self, periodic_space, bounded_space):
        """WJ sums to the domain area."""
        assert np.isclose(periodic_space.local_geometry.WJ.sum(), (2 * np.pi) ** 2)
        assert np.isclose(bounded_space.local_geometry.WJ.sum(), 6.0)

    def test_affine_jacobian(self, bounded_space):
        """Unit square elements map from [-1, 1]^2 with J = 1/4."""
        geom = bounded_space.local_geometry
        assert np.allclose(geom.J, 0.25)
        assert np.allclose(geom.dxdxi[..., 0, 0], 0.5)
        assert np.allclose(geom.dxdxi[..., 0, 1], 0.0)

    def test_node_coordinates(self, bounded_space):
        """Element 1 starts at the origin; element 6 ends at the far corner."""
        x = bounded_space.local_geometry.coordinates
        assert np.allclose(x[0, 0, 0], (0.0, 0.0))
        assert np.allclose(x[5, -1, -1], (2.0, 3.0))

    def test_inverted_element_rejected(self):
        """Meshes with negative Jacobians are refused."""
        from hvcore.meshing import TensorProductMesh
        from hvcore.topologies import TensorProductTopology

        domain = RectangleDomain(0.0, 1.0, 0.0, 1.0, x1boundary=("west", "east"), x2boundary=("south", "north"))
        flipped = np.array([[[1.0, 0.0], [1.0, 1.0]], [[0.0, 0.0], [0.0, 1.0]]])
        with pytest.raises(ConstructionError):
            SpectralElementSpace2D(TensorProductTopology(TensorProductMesh(domain, 1, 1, flipped)), GLL(3))

    def test_requires_2d_topology(self, column):
        """A column is not a horizontal topology."""
        with pytest.raises(ConstructionError):
            SpectralElementSpace2D(column, GLL(3))


class TestExtrudedSpace:
    """Tests for the product of a spectral-element plane and a column."""

    @pytest.fixture
    def space(self, periodic_space, column):
        return ExtrudedFiniteDifferenceSpace(periodic_space, column)

    def test_shapes(self, space):
        """Levels come first, then horizontal nodes."""
        assert space.center.shape == (16, 9, 5, 5)
        assert space.face.shape == (17, 9, 5, 5)
        assert space.center.axes == (1, 2, 3)

    def test_volume(self, space):
        """WJ sums to area times height on both staggerings."""
        assert np.isclose(space.center.local_geometry.WJ.sum(), (2 * np.pi) ** 2)
        assert np.isclose(space.face.local_geometry.WJ.sum(), (2 * np.pi) ** 2)

    def test_block_diagonal_metric(self, space):
        """The vertical metric does not couple to the horizontal one."""
        geom = space.center.local_geometry
        assert np.allclose(geom.dxdxi[..., 2, 0], 0.0)
        assert np.allclose(geom.dxdxi[..., 0, 2], 0.0)
        assert np.allclose(geom.dxdxi[..., 2, 2], 1.0 / 16)

    def test_column_extraction(self, space):
        """A column of an extruded field lives on the vertical view."""
        z = coordinate_field(space.center, 3)
        col = column(z, 2, 3, 4)
        assert col.space is space.center.vertical
        assert np.allclose(col.data, space.center.vertical.local_geometry.coordinate(3))

    def test_column_field_is_a_view(self, space):
        """Writing into a face column writes into the extruded field."""
        f = zeros(space.face)
        col = space.face.column_field(f, 1, 2, 3)
        assert col.space is space.face.vertical
        assert col.data.shape == (17,)
        col.data[0] = 7.0
        assert f.data[0, 2, 0, 1] == 7.0
        assert np.count_nonzero(f.data) == 1

    def test_column_field_keeps_vector_components(self, space):
        """Vector columns carry their basis, axes and components."""
        u = vector_field(space.center, [1.0, 2.0, 3.0])
        col = space.center.column_field(u, 5, 5, 9)
        assert col.basis is Basis.CARTESIAN
        assert col.axes == (1, 2, 3)
        assert np.allclose(col.data, [1.0, 2.0, 3.0])

    def test_column_field_wrong_space(self, space):
        """A face field has no columns on the center view."""
        with pytest.raises(ValueError):
            space.center.column_field(zeros(space.face), 1, 1, 1)

    def test_requires_column(self, periodic_space):
        """The vertical factor must be a finite-difference column."""
        with pytest.raises(ConstructionError):
            ExtrudedFiniteDifferenceSpace(periodic_space, periodic_space)


def _single_element_space():
    domain = RectangleDomain(0.0, 1.0, 0.0, 1.0, x1boundary=("west", "east"), x2boundary=("south", "north"))
    return SpectralElementSpace2D(GridTopology(EquispacedRectangleMesh(domain, 1, 1)), GLL(4))


class TestWeightedDSS:
    """Tests for weighted direct stiffness summation."""

    def test_group_count(self, periodic_space, bounded_space):
        """Shared nodes collapse to the number of distinct physical points."""
        assert periodic_space.dss.ngroups == (3 * 4) ** 2
        assert bounded_space.dss.ngroups == (2 * 3 + 1) * (3 * 3 + 1)

    def test_continuous_field_unchanged(self, periodic_space):
        """A field sampled from a continuous function is a fixed point."""
        f = np.sin(coordinate_field(periodic_space, 1)) * np.cos(coordinate_field(periodic_space, 2))
        before = f.data.copy()
        weighted_dss(f)
        assert np.allclose(f.data, before, atol=1e-13)

    def test_idempotent(self, bounded_space):
        """Applying DSS twice equals applying it once."""
        rng = np.random.default_rng(0)
        f = Field(rng.standard_normal(bounded_space.shape), bounded_space)
        once = weighted_dss(f).data.copy()
        twice = weighted_dss(f).data
        assert np.allclose(once, twice)

    def test_shared_face_nodes_agree(self, bounded_space):
        """East face of element 1 equals west face of element 2 after DSS."""
        rng = np.random.default_rng(1)
        f = weighted_dss(Field(rng.standard_normal(bounded_space.shape), bounded_space))
        assert np.allclose(f.data[0, -1, :], f.data[1, 0, :])
        assert np.allclose(f.data[0, :, -1], f.data[2, :, 0])

    def test_preserves_integral(self, periodic_space):
        """Weighted averaging keeps the WJ-weighted total."""
        rng = np.random.default_rng(2)
        f = Field(rng.standard_normal(periodic_space.shape), periodic_space)
        before = integrate(f)
        assert np.isclose(integrate(weighted_dss(f)), before)

    def test_single_element_is_noop(self):
        """Without neighbours there is nothing to assemble."""
        space = _single_element_space()
        rng = np.random.default_rng(3)
        data = rng.standard_normal(space.shape)
        f = weighted_dss(Field(data.copy(), space))
        assert np.allclose(f.data, data)

    def test_multiplicity(self, periodic_space):
        """Unweighted summation of ones counts the elements sharing each node."""
        f = dss_sum(Field(np.ones(periodic_space.shape), periodic_space))
        assert f.data[0, 0, 0] == 4.0
        assert f.data[0, 0, 2] == 2.0
        assert f.data[0, 2, 2] == 1.0

    def test_inverse_mass(self, bounded_space):
        """inverse_mass is the reciprocal of the assembled WJ."""
        assembled = dss_sum(Field(bounded_space.local_geometry.WJ.copy(), bounded_space)).data
        assert np.allclose(bounded_space.inverse_mass * assembled, 1.0)

    def test_vector_field_in_covariant_basis(self, periodic_space):
        """Vectors are assembled componentwise in Cartesian form and keep their basis."""
        rng = np.random.default_rng(4)
        u = covariant(vector_field(periodic_space, rng.standard_normal((2,) + periodic_space.shape)))
        weighted_dss(u)
        assert u.basis is Basis.COVARIANT
        assert np.allclose(u.data[0, -1, :, :], u.data[1, 0, :, :])

    def test_extruded_levels_independent(self, periodic_space, column):
        """DSS on an extruded field acts level by level."""
        space = ExtrudedFiniteDifferenceSpace(periodic_space, column)
        rng = np.random.default_rng(5)
        data = rng.standard_normal(space.center.shape)
        f = weighted_dss(Field(data.copy(), space.center))
        level = weighted_dss(Field(data[3].copy(), periodic_space))
        assert np.allclose(f.data[3], level.data)

    def test_rejects_columns(self, column):
        """Columns have no horizontal structure to assemble."""
        with pytest.raises(TypeError):
            weighted_dss(Field(np.zeros(column.center.shape), column.center))
