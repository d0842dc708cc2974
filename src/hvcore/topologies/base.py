"""Connectivity queries shared by the structured quadrilateral topologies.

A topology answers three questions about a mesh: which face sits across a
given element face, which faces lie on the interior or on a named
boundary, and which element corners coincide at each physical vertex.
All element, face and vertex numbers are 1-based; element ``0`` across a
face means the face lies on a physical boundary.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterator, Mapping, Tuple, Union

from ..exceptions import RangeError
from ..meshing.rectangle import logical_neighbor

log = logging.getLogger(__name__)

InteriorFace = Tuple[int, int, int, int, bool]
BoundaryFace = Tuple[int, int]


def face_node_index(face: int, Nq: int, q: int, reversed: bool = False) -> Tuple[int, int]:
    """Slab node ``(i, j)`` of the ``q``-th node along ``face``.

    Parameters
    ----------
    face : int
        Face number 1..4.
    Nq : int
        Number of nodes per direction.
    q : int
        Position along the face, 1..Nq.
    reversed : bool
        Traverse the face in the opposite direction.

    Returns
    -------
    tuple of int
        1-based ``(i, j)`` node indices, ``i`` along x1.
    """
    if not 1 <= face <= 4:
        raise RangeError(f"face {face} outside 1..4")
    if not 1 <= q <= Nq:
        raise RangeError(f"face node {q} outside 1..{Nq}")
    if reversed:
        q = Nq - q + 1
    if face == 1:
        return 1, q
    if face == 2:
        return Nq, q
    if face == 3:
        return q, 1
    return q, Nq


def vertex_node_index(vertex: int, Nq: int) -> Tuple[int, int]:
    """Slab node ``(i, j)`` at local ``vertex`` (1-based)."""
    if vertex == 1:
        return 1, 1
    if vertex == 2:
        return Nq, 1
    if vertex == 3:
        return 1, Nq
    if vertex == 4:
        return Nq, Nq
    raise RangeError(f"vertex {vertex} outside 1..4")


def boundary_table(x1boundary, x2boundary) -> Mapping[str, int]:
    """Read-only ``name -> tag`` mapping; x1 tags are 1, 2 and x2 tags are 3, 4."""
    table = {}
    if x1boundary is not None:
        table[x1boundary[0]] = 1
        table[x1boundary[1]] = 2
    if x2boundary is not None:
        table[x2boundary[0]] = 3
        table[x2boundary[1]] = 4
    return MappingProxyType(table)


class InteriorFaceIterator:
    """Each interior face once, as ``(elem1, face1, elem2, face2, reversed)``.

    ``elem1`` is the element at logical position ``(z1, z2)`` and ``elem2``
    its neighbour towards lower ``z1`` (face pair 1/2) or lower ``z2``
    (face pair 3/4). Faces are emitted per element in row-major order, the
    x1 face before the x2 face. Periodic axes contribute the wrap-around
    faces.
    """

    def __init__(self, topology: "StructuredTopology"):
        self.topology = topology

    def __len__(self) -> int:
        t = self.topology
        n1, n2 = t.n1, t.n2
        return (n1 if t.x1periodic else n1 - 1) * n2 + n1 * (n2 if t.x2periodic else n2 - 1)

    def __iter__(self) -> Iterator[InteriorFace]:
        t = self.topology
        n1, n2 = t.n1, t.n2
        for z2 in range(n2):
            for z1 in range(n1):
                elem1 = z2 * n1 + z1 + 1
                if z1 > 0 or t.x1periodic:
                    y1 = n1 - 1 if z1 == 0 else z1 - 1
                    elem2 = z2 * n1 + y1 + 1
                    yield (elem1, 1, elem2, 2, t.face_reversed(elem1, 1))
                if z2 > 0 or t.x2periodic:
                    y2 = n2 - 1 if z2 == 0 else z2 - 1
                    elem2 = y2 * n1 + z1 + 1
                    yield (elem1, 3, elem2, 4, t.face_reversed(elem1, 3))

    def __repr__(self) -> str:
        return f"InteriorFaceIterator({len(self)} faces)"


class BoundaryFaceIterator:
    """The ``(elem, face)`` pairs on boundary ``tag``; empty on a periodic axis."""

    def __init__(self, topology: "StructuredTopology", tag: int):
        if tag not in (1, 2, 3, 4):
            raise RangeError(f"boundary tag {tag} outside 1..4")
        self.topology = topology
        self.tag = tag

    def _active(self) -> bool:
        if self.tag in (1, 2):
            return not self.topology.x1periodic
        return not self.topology.x2periodic

    def __len__(self) -> int:
        if not self._active():
            return 0
        return self.topology.n2 if self.tag in (1, 2) else self.topology.n1

    def __iter__(self) -> Iterator[BoundaryFace]:
        if not self._active():
            return
        n1, n2 = self.topology.n1, self.topology.n2
        tag = self.tag
        for z in range(len(self)):
            if tag == 1:
                elem = z * n1 + 1
            elif tag == 2:
                elem = z * n1 + n1
            elif tag == 3:
                elem = z + 1
            else:
                elem = (n2 - 1) * n1 + z + 1
            yield elem, tag


class Vertex:
    """The ``(elem, vertex)`` pairs meeting at logical vertex ``(z1, z2)``."""

    def __init__(self, topology: "StructuredTopology", z1: int, z2: int):
        self.topology = topology
        self.num = (z1, z2)

    def _skipped(self) -> frozenset:
        t = self.topology
        z1, z2 = self.num
        skip = set()
        if not t.x1periodic:
            if z1 == 0:
                skip.update((2, 4))
            if z1 == t.n1:
                skip.update((1, 3))
        if not t.x2periodic:
            if z2 == 0:
                skip.update((3, 4))
            if z2 == t.n2:
                skip.update((1, 2))
        return frozenset(skip)

    def __len__(self) -> int:
        t = self.topology
        z1, z2 = self.num
        k1 = 1 if not t.x1periodic and z1 in (0, t.n1) else 2
        k2 = 1 if not t.x2periodic and z2 in (0, t.n2) else 2
        return k1 * k2

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        t = self.topology
        nv1, nv2 = t.nvertices_per_axis
        skip = self._skipped()
        for vert in range(1, 5):
            if vert in skip:
                continue
            z1, z2 = self.num
            if vert in (2, 4):
                z1 = (z1 - 1) % nv1
            if vert in (3, 4):
                z2 = (z2 - 1) % nv2
            yield z2 * t.n1 + z1 + 1, vert

    def __repr__(self) -> str:
        return f"Vertex{self.num}: {list(self)}"


class VertexIterator:
    """Unique vertices in row-major order (``z1`` fastest)."""

    def __init__(self, topology: "StructuredTopology"):
        self.topology = topology

    def __len__(self) -> int:
        nv1, nv2 = self.topology.nvertices_per_axis
        return nv1 * nv2

    def __iter__(self) -> Iterator[Vertex]:
        nv1, nv2 = self.topology.nvertices_per_axis
        for z2 in range(nv2):
            for z1 in range(nv1):
                yield Vertex(self.topology, z1, z2)


class StructuredTopology:
    """Common query surface of the ``n1 x n2`` quadrilateral topologies.

    Subclasses provide ``mesh`` and may override :meth:`opposing_face`
    and :meth:`face_reversed` when the mesh stores its own face table.
    """

    def __init__(self, mesh):
        self.mesh = mesh
        domain = mesh.domain
        self.boundaries: Mapping[str, int] = boundary_table(
            getattr(domain, "x1boundary", None), getattr(domain, "x2boundary", None)
        )
        log.debug("Built %s: %d elements, %d vertices", type(self).__name__,
                  self.nlocalelems, mesh.nvertices)

    @property
    def domain(self):
        return self.mesh.domain

    @property
    def n1(self) -> int:
        return self.mesh.n1

    @property
    def n2(self) -> int:
        return self.mesh.n2

    @property
    def x1periodic(self) -> bool:
        return self.mesh.x1periodic

    @property
    def x2periodic(self) -> bool:
        return self.mesh.x2periodic

    @property
    def nlocalelems(self) -> int:
        return self.n1 * self.n2

    @property
    def nghostelems(self) -> int:
        # single-process topologies never reference remote elements
        return 0

    @property
    def nvertices_per_axis(self) -> Tuple[int, int]:
        nv1 = self.n1 if self.x1periodic else self.n1 + 1
        nv2 = self.n2 if self.x2periodic else self.n2 + 1
        return nv1, nv2

    @property
    def boundary_names(self) -> Tuple[str, ...]:
        return tuple(self.boundaries)

    def boundary_tag(self, name: str) -> int:
        try:
            return self.boundaries[name]
        except KeyError:
            raise KeyError(f"invalid boundary name {name!r}; expected one of {self.boundary_names}") from None

    def _check(self, elem: int, face: int) -> None:
        if not 1 <= elem <= self.nlocalelems:
            raise RangeError(f"element {elem} outside 1..{self.nlocalelems}")
        if not 1 <= face <= 4:
            raise RangeError(f"face {face} outside 1..4")

    def opposing_face(self, elem: int, face: int) -> Tuple[int, int, bool]:
        """``(opelem, opface, reversed)`` across ``face`` of ``elem``.

        ``opelem == 0`` marks a physical boundary, in which case ``opface``
        is the boundary tag of the face.
        """
        self._check(elem, face)
        return logical_neighbor(self.n1, self.n2, self.x1periodic, self.x2periodic, elem, face)

    def face_reversed(self, elem: int, face: int) -> bool:
        return False

    def vertex_coordinates(self, elem: int):
        return self.mesh.vertex_coordinates(elem)

    def interior_faces(self) -> InteriorFaceIterator:
        return InteriorFaceIterator(self)

    def boundary_faces(self, tag: Union[int, str]) -> BoundaryFaceIterator:
        if isinstance(tag, str):
            tag = self.boundary_tag(tag)
        return BoundaryFaceIterator(self, tag)

    def vertices(self) -> VertexIterator:
        return VertexIterator(self)

    def __len__(self) -> int:
        return self.nlocalelems

    def __repr__(self) -> str:
        return f"{type(self).__name__} on {self.mesh!r}"
