"""Topology of a :class:`TensorProductMesh`, reading its stored face table."""

from __future__ import annotations

from typing import Tuple

from ..exceptions import ConstructionError
from ..meshing.rectangle import EquispacedRectangleMesh, TensorProductMesh
from .base import StructuredTopology


class TensorProductTopology(StructuredTopology):
    """Tensor-product connectivity over explicitly stored vertex coordinates.

    An :class:`EquispacedRectangleMesh` is accepted and converted to its
    explicit tensor-product form.
    """

    def __init__(self, mesh):
        if isinstance(mesh, EquispacedRectangleMesh):
            mesh = TensorProductMesh(mesh.domain, mesh.n1, mesh.n2)
        if not isinstance(mesh, TensorProductMesh):
            raise ConstructionError(f"TensorProductTopology requires a rectangle mesh, got {type(mesh).__name__}")
        super().__init__(mesh)

    def opposing_face(self, elem: int, face: int) -> Tuple[int, int, bool]:
        self._check(elem, face)
        return self.mesh.face_entry(elem, face)

    def face_reversed(self, elem: int, face: int) -> bool:
        return self.mesh.face_entry(elem, face)[2]
