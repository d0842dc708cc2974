"""Topologies of equispaced meshes, where all connectivity is index arithmetic."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterator, List, Mapping, Tuple, Union

from ..exceptions import ConstructionError, RangeError
from ..meshing.interval import EquispacedLineMesh
from ..meshing.rectangle import EquispacedRectangleMesh
from .base import BoundaryFace, InteriorFace, StructuredTopology

log = logging.getLogger(__name__)


class GridTopology(StructuredTopology):
    """Connectivity of an :class:`EquispacedRectangleMesh`."""

    def __init__(self, mesh: EquispacedRectangleMesh):
        if not isinstance(mesh, EquispacedRectangleMesh):
            raise ConstructionError(f"GridTopology requires an EquispacedRectangleMesh, got {type(mesh).__name__}")
        super().__init__(mesh)


class GridTopology1D:
    """Connectivity of an :class:`EquispacedLineMesh`.

    Elements have two faces: 1 at the low end and 2 at the high end, which
    double as the element's two vertices.
    """

    def __init__(self, mesh: EquispacedLineMesh):
        if not isinstance(mesh, EquispacedLineMesh):
            raise ConstructionError(f"GridTopology1D requires an EquispacedLineMesh, got {type(mesh).__name__}")
        self.mesh = mesh
        tags = mesh.domain.boundary_tags
        self.boundaries: Mapping[str, int] = MappingProxyType(
            {} if tags is None else {tags[0]: 1, tags[1]: 2}
        )
        log.debug("Built GridTopology1D: %d elements", mesh.nelems)

    @property
    def domain(self):
        return self.mesh.domain

    @property
    def n1(self) -> int:
        return self.mesh.n1

    @property
    def periodic(self) -> bool:
        return self.mesh.x1periodic

    @property
    def nlocalelems(self) -> int:
        return self.n1

    @property
    def nghostelems(self) -> int:
        return 0

    @property
    def boundary_names(self) -> Tuple[str, ...]:
        return tuple(self.boundaries)

    def boundary_tag(self, name: str) -> int:
        try:
            return self.boundaries[name]
        except KeyError:
            raise KeyError(f"invalid boundary name {name!r}; expected one of {self.boundary_names}") from None

    def opposing_face(self, elem: int, face: int) -> Tuple[int, int, bool]:
        if not 1 <= elem <= self.n1:
            raise RangeError(f"element {elem} outside 1..{self.n1}")
        if face not in (1, 2):
            raise RangeError(f"face {face} outside 1..2")
        z1 = elem - 1 + (1 if face == 2 else -1)
        if not 0 <= z1 < self.n1:
            if not self.periodic:
                return 0, face, False
            z1 %= self.n1
        return z1 + 1, 3 - face, False

    def vertex_coordinates(self, elem: int) -> Tuple[float, float]:
        if not 1 <= elem <= self.n1:
            raise RangeError(f"element {elem} outside 1..{self.n1}")
        return self.mesh.coordinate(elem - 1), self.mesh.coordinate(elem)

    def interior_faces(self) -> List[InteriorFace]:
        faces = []
        for z1 in range(self.n1):
            if z1 > 0 or self.periodic:
                y1 = self.n1 - 1 if z1 == 0 else z1 - 1
                faces.append((z1 + 1, 1, y1 + 1, 2, False))
        return faces

    def boundary_faces(self, tag: Union[int, str]) -> List[BoundaryFace]:
        if isinstance(tag, str):
            tag = self.boundary_tag(tag)
        if tag not in (1, 2):
            raise RangeError(f"boundary tag {tag} outside 1..2")
        if self.periodic:
            return []
        return [(1, 1)] if tag == 1 else [(self.n1, 2)]

    def vertices(self) -> Iterator[List[Tuple[int, int]]]:
        nv = self.mesh.nvertices
        for z in range(nv):
            group = []
            if z < self.n1:
                group.append((z + 1, 1))
            if z > 0 or self.periodic:
                group.append((((z - 1) % self.n1) + 1, 2))
            yield group

    def __len__(self) -> int:
        return self.n1

    def __repr__(self) -> str:
        return f"GridTopology1D on {self.mesh!r}"
