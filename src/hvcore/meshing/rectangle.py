"""Two-dimensional quadrilateral meshes on rectangles.

Elements are numbered row-major from 1: element ``e`` sits at logical
position ``(z1, z2)`` with ``z2, z1 = divmod(e - 1, n1)``. Vertices and
faces follow the p4est convention::

              4
          3-------4
     ^    |       |
     |  1 |       | 2
    x2    |       |
          1-------2
              3
            x1-->
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Tuple, Union

import numpy as np

from ..domains import CubePanelDomain, RectangleDomain, WarpedDomain
from ..exceptions import ConstructionError, DimensionMismatch, RangeError

log = logging.getLogger(__name__)

Rectangle = Union[RectangleDomain, CubePanelDomain]


class Point2D(NamedTuple):
    x1: float
    x2: float


def logical_neighbor(n1: int, n2: int, x1periodic: bool, x2periodic: bool,
                     elem: int, face: int) -> Tuple[int, int, bool]:
    """Opposing ``(elem, face, reversed)`` across ``face`` of ``elem``.

    Returns ``(0, face, False)`` when the face lies on a non-periodic
    boundary. Structured layouts never reverse orientation.
    """
    z2, z1 = divmod(elem - 1, n1)
    if face == 1:
        z1 -= 1
        if z1 < 0:
            if not x1periodic:
                return 0, 1, False
            z1 += n1
        opface = 2
    elif face == 2:
        z1 += 1
        if z1 == n1:
            if not x1periodic:
                return 0, 2, False
            z1 -= n1
        opface = 1
    elif face == 3:
        z2 -= 1
        if z2 < 0:
            if not x2periodic:
                return 0, 3, False
            z2 += n2
        opface = 4
    else:
        z2 += 1
        if z2 == n2:
            if not x2periodic:
                return 0, 4, False
            z2 -= n2
        opface = 3
    return z2 * n1 + z1 + 1, opface, False


class _QuadMesh:
    """Shared bookkeeping for ``n1 x n2`` quadrilateral meshes."""

    domain: Rectangle
    n1: int
    n2: int

    def _init_counts(self, domain, n1, n2):
        if int(n1) < 1 or int(n2) < 1:
            raise ConstructionError(f"{type(self).__name__}: element counts must be >= 1, got ({n1}, {n2})")
        self.domain = domain
        self.n1 = int(n1)
        self.n2 = int(n2)

    @property
    def x1periodic(self) -> bool:
        return bool(self.domain.x1periodic)

    @property
    def x2periodic(self) -> bool:
        return bool(self.domain.x2periodic)

    @property
    def nelems(self) -> int:
        return self.n1 * self.n2

    @property
    def nvertices(self) -> int:
        nv1 = self.n1 if self.x1periodic else self.n1 + 1
        nv2 = self.n2 if self.x2periodic else self.n2 + 1
        return nv1 * nv2

    def _check_elem(self, elem: int) -> Tuple[int, int]:
        if not 1 <= elem <= self.nelems:
            raise RangeError(f"element {elem} outside 1..{self.nelems}")
        z2, z1 = divmod(elem - 1, self.n1)
        return z1, z2


class EquispacedRectangleMesh(_QuadMesh):
    """A regular ``n1 x n2`` mesh of a rectangle.

    Only the coordinate bounds are stored; vertex positions are computed
    on demand.
    """

    def __init__(self, domain: Rectangle, n1: int, n2: int):
        self._init_counts(domain, n1, n2)
        self.x1min, self.x1max = float(domain.x1min), float(domain.x1max)
        self.x2min, self.x2max = float(domain.x2min), float(domain.x2max)
        log.debug("Built %s", self)

    def coordinate1(self, i: int) -> float:
        return self.x1min + (self.x1max - self.x1min) * i / self.n1

    def coordinate2(self, j: int) -> float:
        return self.x2min + (self.x2max - self.x2min) * j / self.n2

    @property
    def range1(self) -> np.ndarray:
        return np.linspace(self.x1min, self.x1max, self.n1 + 1)

    @property
    def range2(self) -> np.ndarray:
        return np.linspace(self.x2min, self.x2max, self.n2 + 1)

    def vertex_coordinates(self, elem: int) -> Tuple[Point2D, Point2D, Point2D, Point2D]:
        """The four corner coordinates of ``elem`` in vertex order 1..4."""
        z1, z2 = self._check_elem(elem)
        a1, b1 = self.coordinate1(z1), self.coordinate1(z1 + 1)
        a2, b2 = self.coordinate2(z2), self.coordinate2(z2 + 1)
        return Point2D(a1, a2), Point2D(b1, a2), Point2D(a1, b2), Point2D(b1, b2)

    def vertex_grid(self) -> Tuple[np.ndarray, np.ndarray]:
        """All ``(n1 + 1, n2 + 1)`` vertex coordinates as two arrays."""
        return np.meshgrid(self.range1, self.range2, indexing="ij")

    def __repr__(self) -> str:
        return f"{self.n1}x{self.n2} EquispacedRectangleMesh of {self.domain}"


class TensorProductMesh(_QuadMesh):
    """Tensor-product connectivity with explicitly stored vertex coordinates.

    Parameters
    ----------
    domain : RectangleDomain or CubePanelDomain
        Domain providing periodicity and boundary tags.
    n1, n2 : int
        Element counts along each axis.
    coordinates : array_like, optional
        Vertex coordinates of shape ``(n1 + 1, n2 + 1, 2)``, or a flat
        sequence of ``(n1 + 1) * (n2 + 1)`` points ordered with the
        x2 index fastest. Defaults to the equispaced layout.

    Notes
    -----
    The face table holds, for face ``f`` of element ``e`` at row
    ``4 * (e - 1) + f - 1``, the triple ``(opelem, opface, reversed)``.
    """

    def __init__(self, domain: Rectangle, n1: int, n2: int, coordinates=None):
        self._init_counts(domain, n1, n2)
        shape = (self.n1 + 1, self.n2 + 1, 2)
        if coordinates is None:
            X1, X2 = EquispacedRectangleMesh(domain, n1, n2).vertex_grid()
            coordinates = np.stack([X1, X2], axis=-1)
        coordinates = np.array(coordinates, dtype=float)
        if coordinates.size != np.prod(shape):
            raise DimensionMismatch(
                f"TensorProductMesh: expected {np.prod(shape) // 2} vertices, got {coordinates.size // 2}"
            )
        coordinates = coordinates.reshape(shape)
        coordinates.setflags(write=False)
        self.coordinates = coordinates

        # Elements are always numbered in logical (z1, z2) order with vertices
        # wound the same way, so neighbours never see a face reversed and the
        # flag is stored as False rather than derived from vertex winding.
        faces = np.zeros((4 * self.nelems, 3), dtype=np.int64)
        for elem in range(1, self.nelems + 1):
            for face in range(1, 5):
                opelem, opface, reversed_ = logical_neighbor(
                    self.n1, self.n2, self.x1periodic, self.x2periodic, elem, face
                )
                faces[4 * (elem - 1) + face - 1] = (opelem, opface, int(reversed_))
        faces.setflags(write=False)
        self.faces = faces
        log.debug("Built %s", self)

    def vertex_coordinates(self, elem: int) -> Tuple[Point2D, Point2D, Point2D, Point2D]:
        z1, z2 = self._check_elem(elem)
        c = self.coordinates
        return (
            Point2D(*c[z1, z2]),
            Point2D(*c[z1 + 1, z2]),
            Point2D(*c[z1, z2 + 1]),
            Point2D(*c[z1 + 1, z2 + 1]),
        )

    def face_entry(self, elem: int, face: int) -> Tuple[int, int, bool]:
        opelem, opface, reversed_ = self.faces[4 * (elem - 1) + face - 1]
        return int(opelem), int(opface), bool(reversed_)

    def __repr__(self) -> str:
        return f"{self.n1}x{self.n2} TensorProductMesh of {self.domain}"


def warped_mesh(domain: WarpedDomain, n1: int, n2: int,
                underlying: Optional[EquispacedRectangleMesh] = None) -> TensorProductMesh:
    """Apply ``domain.warp`` to an equispaced vertex grid.

    Vertices on non-periodic edges are expected to be left in place by the
    warp; this is part of the warp's contract and is not re-checked here.
    """
    if underlying is None:
        underlying = EquispacedRectangleMesh(domain.domain, n1, n2)
    X1, X2 = underlying.vertex_grid()
    W1, W2 = domain.warp(X1, X2)
    coordinates = np.stack([np.asarray(W1, dtype=float), np.asarray(W2, dtype=float)], axis=-1)
    return TensorProductMesh(domain.domain, n1, n2, coordinates)
