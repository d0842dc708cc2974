"""Tests for structured topologies: face connectivity, boundaries and vertices."""

import itertools

import pytest

from hvcore.domains import IntervalDomain
from hvcore.exceptions import RangeError
from hvcore.meshing import EquispacedLineMesh
from hvcore.topologies import GridTopology1D, face_node_index, vertex_node_index

PERIODICITIES = list(itertools.product([False, True], repeat=2))


class TestOpposingFace:
    """Tests for opposing_face on grid and tensor-product topologies."""

    @pytest.mark.parametrize("kind", ["grid", "tensor"])
    def test_single_periodic_element_wraps_onto_itself(self, make_topology, kind):
        """A 1x1 doubly periodic mesh connects each face to its opposite."""
        topology = make_topology(1, 1, True, True, kind)
        assert topology.opposing_face(1, 1) == (1, 2, False)
        assert topology.opposing_face(1, 2) == (1, 1, False)
        assert topology.opposing_face(1, 3) == (1, 4, False)
        assert topology.opposing_face(1, 4) == (1, 3, False)

    @pytest.mark.parametrize("kind", ["grid", "tensor"])
    def test_single_element_mixed_periodicity(self, make_topology, kind):
        """Non-periodic faces report element 0 and their own face number."""
        topology = make_topology(1, 1, True, False, kind)
        assert topology.opposing_face(1, 1) == (1, 2, False)
        assert topology.opposing_face(1, 3) == (0, 3, False)
        assert topology.opposing_face(1, 4) == (0, 4, False)

    @pytest.mark.parametrize("kind", ["grid", "tensor"])
    def test_two_by_two_non_periodic(self, make_topology, kind):
        """Neighbours in a 2x2 mesh follow row-major numbering."""
        topology = make_topology(2, 2, False, False, kind)
        assert topology.opposing_face(1, 1) == (0, 1, False)
        assert topology.opposing_face(1, 2) == (2, 1, False)
        assert topology.opposing_face(1, 3) == (0, 3, False)
        assert topology.opposing_face(1, 4) == (3, 3, False)
        assert topology.opposing_face(2, 1) == (1, 2, False)
        assert topology.opposing_face(2, 2) == (0, 2, False)
        assert topology.opposing_face(2, 4) == (4, 3, False)

    @pytest.mark.parametrize("kind", ["grid", "tensor"])
    @pytest.mark.parametrize("elem, face", [(0, 1), (2, 1), (1, 0), (1, 5)])
    def test_out_of_range_raises(self, make_topology, kind, elem, face):
        """Element or face numbers outside the mesh are rejected."""
        topology = make_topology(1, 1, True, True, kind)
        with pytest.raises(RangeError):
            topology.opposing_face(elem, face)

    def test_out_of_range_is_an_assertion_error(self, make_topology):
        """RangeError is catchable as AssertionError."""
        topology = make_topology(1, 1, False, False)
        with pytest.raises(AssertionError):
            topology.opposing_face(2, 1)

    @pytest.mark.parametrize("x1periodic, x2periodic", PERIODICITIES)
    def test_opposing_face_is_an_involution(self, make_topology, x1periodic, x2periodic):
        """Crossing a face twice returns to the starting face."""
        topology = make_topology(3, 2, x1periodic, x2periodic)
        for elem in range(1, 7):
            for face in range(1, 5):
                opelem, opface, _ = topology.opposing_face(elem, face)
                if opelem == 0:
                    continue
                assert topology.opposing_face(opelem, opface)[:2] == (elem, face)

    @pytest.mark.parametrize("x1periodic, x2periodic", PERIODICITIES)
    def test_grid_and_tensor_product_agree(self, make_topology, x1periodic, x2periodic):
        """The stored face table matches the index arithmetic."""
        grid = make_topology(3, 4, x1periodic, x2periodic, "grid")
        tensor = make_topology(3, 4, x1periodic, x2periodic, "tensor")
        for elem in range(1, 13):
            for face in range(1, 5):
                assert grid.opposing_face(elem, face) == tensor.opposing_face(elem, face)


class TestInteriorFaces:
    """Tests for the interior face iterator."""

    @pytest.mark.parametrize(
        "n1, n2, x1periodic, x2periodic, expected",
        [
            (1, 1, True, True, 2),
            (1, 1, True, False, 1),
            (1, 1, False, False, 0),
            (2, 2, False, False, 4),
            (3, 2, True, False, 9),
        ],
    )
    def test_count(self, make_topology, n1, n2, x1periodic, x2periodic, expected):
        """Length matches the number of yielded faces."""
        faces = make_topology(n1, n2, x1periodic, x2periodic).interior_faces()
        assert len(faces) == expected
        assert len(list(faces)) == expected

    def test_order_two_by_two(self, make_topology):
        """Faces come per element, x1 face before x2 face."""
        faces = list(make_topology(2, 2, False, False).interior_faces())
        assert faces == [
            (2, 1, 1, 2, False),
            (3, 3, 1, 4, False),
            (4, 1, 3, 2, False),
            (4, 3, 2, 4, False),
        ]

    @pytest.mark.parametrize("kind", ["grid", "tensor"])
    @pytest.mark.parametrize("x1periodic, x2periodic", PERIODICITIES)
    def test_consistent_with_opposing_face(self, make_topology, kind, x1periodic, x2periodic):
        """Every interior face is seen from elem1 as facing elem2."""
        topology = make_topology(3, 3, x1periodic, x2periodic, kind)
        for elem1, face1, elem2, face2, reversed_ in topology.interior_faces():
            assert topology.opposing_face(elem1, face1) == (elem2, face2, reversed_)

    @pytest.mark.parametrize("x1periodic, x2periodic", PERIODICITIES)
    def test_each_face_listed_once(self, make_topology, x1periodic, x2periodic):
        """No element face appears on two interior faces."""
        topology = make_topology(3, 2, x1periodic, x2periodic)
        seen = []
        for elem1, face1, elem2, face2, _ in topology.interior_faces():
            seen += [(elem1, face1), (elem2, face2)]
        assert len(seen) == len(set(seen))


class TestBoundaryFaces:
    """Tests for the boundary face iterator and boundary names."""

    def test_non_periodic_boundaries(self, make_topology):
        """West and south faces of a 2x3 mesh."""
        topology = make_topology(2, 3, False, False)
        assert list(topology.boundary_faces(1)) == [(1, 1), (3, 1), (5, 1)]
        assert list(topology.boundary_faces(2)) == [(2, 2), (4, 2), (6, 2)]
        assert list(topology.boundary_faces(3)) == [(1, 3), (2, 3)]
        assert list(topology.boundary_faces(4)) == [(5, 4), (6, 4)]

    def test_periodic_axes_have_no_boundary_faces(self, make_topology):
        """A doubly periodic mesh has empty boundary iterators."""
        topology = make_topology(1, 1, True, True)
        for tag in range(1, 5):
            assert list(topology.boundary_faces(tag)) == []
            assert len(topology.boundary_faces(tag)) == 0

    def test_lookup_by_name(self, make_topology):
        """Boundary names resolve to tags 1..4 in x1-then-x2 order."""
        topology = make_topology(2, 3, False, False)
        assert topology.boundary_names == ("west", "east", "south", "north")
        assert topology.boundary_tag("north") == 4
        assert list(topology.boundary_faces("south")) == [(1, 3), (2, 3)]

    def test_unknown_name_raises(self, make_topology):
        """Unknown boundary names raise KeyError."""
        topology = make_topology(2, 2, False, True)
        with pytest.raises(KeyError):
            topology.boundary_tag("south")

    def test_boundary_faces_face_nothing(self, make_topology):
        """opposing_face reports element 0 on every boundary face."""
        topology = make_topology(3, 2, False, False)
        for tag in range(1, 5):
            for elem, face in topology.boundary_faces(tag):
                assert topology.opposing_face(elem, face) == (0, tag, False)


class TestVertices:
    """Tests for vertex groups."""

    def test_interior_vertex_of_two_by_two(self, make_topology):
        """The centre vertex is shared by all four elements."""
        topology = make_topology(2, 2, False, False)
        vertices = list(topology.vertices())
        assert len(vertices) == 9
        assert list(vertices[4]) == [(4, 1), (3, 2), (2, 3), (1, 4)]
        assert list(vertices[0]) == [(1, 1)]
        assert list(vertices[8]) == [(4, 4)]

    @pytest.mark.parametrize("x1periodic, x2periodic", PERIODICITIES)
    def test_every_corner_in_exactly_one_group(self, make_topology, x1periodic, x2periodic):
        """The groups partition all element corners."""
        topology = make_topology(3, 2, x1periodic, x2periodic)
        corners = [pair for vertex in topology.vertices() for pair in vertex]
        assert len(corners) == 4 * topology.nlocalelems
        assert len(set(corners)) == len(corners)

    @pytest.mark.parametrize("x1periodic, x2periodic", PERIODICITIES)
    def test_group_lengths(self, make_topology, x1periodic, x2periodic):
        """len(Vertex) matches the number of yielded pairs."""
        topology = make_topology(2, 3, x1periodic, x2periodic)
        for vertex in topology.vertices():
            assert len(vertex) == len(list(vertex))

    def test_group_members_coincide(self, make_topology):
        """All corners of a group sit at the same coordinate (non-periodic)."""
        topology = make_topology(3, 2, False, False)
        for vertex in topology.vertices():
            points = {topology.vertex_coordinates(elem)[vert - 1] for elem, vert in vertex}
            assert len(points) == 1


class TestNodeIndices:
    """Tests for face and vertex node index helpers."""

    @pytest.mark.parametrize(
        "face, expected",
        [(1, (1, 2)), (2, (4, 2)), (3, (2, 1)), (4, (2, 4))],
    )
    def test_face_node(self, face, expected):
        """Second node along each face of a 4-point element."""
        assert face_node_index(face, 4, 2) == expected

    def test_reversed_face_node(self):
        """Reversal counts from the other end."""
        assert face_node_index(1, 4, 1, reversed=True) == (1, 4)

    def test_vertex_nodes(self):
        """Vertices map to the four slab corners."""
        assert [vertex_node_index(v, 5) for v in range(1, 5)] == [(1, 1), (5, 1), (1, 5), (5, 5)]

    @pytest.mark.parametrize("face, q", [(0, 1), (5, 1), (1, 0), (1, 5)])
    def test_out_of_range(self, face, q):
        """Invalid faces or positions raise RangeError."""
        with pytest.raises(RangeError):
            face_node_index(face, 4, q)


class TestGridTopology1D:
    """Tests for the one-dimensional grid topology."""

    def _topology(self, periodic):
        if periodic:
            domain = IntervalDomain(0.0, 3.0, periodic=True, axis="x")
        else:
            domain = IntervalDomain(0.0, 3.0, boundary_tags=("left", "right"), axis="x")
        return GridTopology1D(EquispacedLineMesh(domain, 3))

    def test_non_periodic_connectivity(self):
        """Inner faces connect neighbours; end faces are boundaries."""
        topology = self._topology(False)
        assert topology.opposing_face(1, 1) == (0, 1, False)
        assert topology.opposing_face(1, 2) == (2, 1, False)
        assert topology.interior_faces() == [(2, 1, 1, 2, False), (3, 1, 2, 2, False)]
        assert topology.boundary_faces("right") == [(3, 2)]
        assert list(topology.vertices()) == [[(1, 1)], [(2, 1), (1, 2)], [(3, 1), (2, 2)], [(3, 2)]]

    def test_periodic_connectivity(self):
        """The first element wraps onto the last."""
        topology = self._topology(True)
        assert topology.opposing_face(1, 1) == (3, 2, False)
        assert len(topology.interior_faces()) == 3
        assert topology.boundary_faces(1) == []
        assert list(topology.vertices())[0] == [(1, 1), (3, 2)]

    def test_vertex_coordinates(self):
        """Element end points on the equispaced line."""
        assert self._topology(False).vertex_coordinates(2) == pytest.approx((1.0, 2.0))
