"""Staggered finite-difference column spaces.

A column of ``n`` cells has ``n`` center nodes and ``n + 1`` face nodes.
Both node sets are views over one :class:`FiniteDifferenceSpace`, which
owns the mesh and the two geometry tables.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from ..exceptions import ConstructionError
from ..geometry import LocalGeometry
from ..meshing.interval import IntervalMesh

log = logging.getLogger(__name__)

CENTER = "center"
FACE = "face"


def _column_geometry(coords: np.ndarray, J: np.ndarray, WJ: np.ndarray) -> LocalGeometry:
    return LocalGeometry(
        coordinates=coords[:, np.newaxis],
        J=J,
        WJ=WJ,
        dxdxi=J[:, np.newaxis, np.newaxis].copy(),
        dxidx=(1.0 / J)[:, np.newaxis, np.newaxis],
        axes=(3,),
    )


def center_geometry(faces: np.ndarray) -> LocalGeometry:
    """Cell centers: midpoint coordinate and ``J = WJ = dz``."""
    dz = np.diff(faces)
    return _column_geometry(0.5 * (faces[1:] + faces[:-1]), dz.copy(), dz.copy())


def face_geometry(faces: np.ndarray) -> LocalGeometry:
    """Cell faces: one-sided ``J`` with halved weight at the ends, centered inside."""
    J = np.empty_like(faces)
    J[0] = faces[1] - faces[0]
    J[-1] = faces[-1] - faces[-2]
    J[1:-1] = 0.5 * (faces[2:] - faces[:-2])
    WJ = J.copy()
    WJ[0] *= 0.5
    WJ[-1] *= 0.5
    return _column_geometry(faces.copy(), J, WJ)


class FiniteDifferenceSpace:
    """
    Geometry shared by the center and face views of one column.

    Parameters
    ----------
    mesh : IntervalMesh
        A non-periodic vertical interval mesh.

    Raises
    ------
    ConstructionError
        If the mesh is periodic or is not along the vertical axis.
    """

    def __init__(self, mesh: IntervalMesh):
        if not isinstance(mesh, IntervalMesh):
            raise ConstructionError(f"finite-difference spaces require an IntervalMesh, got {type(mesh).__name__}")
        if mesh.coordinate_axes != (3,):
            raise ConstructionError(
                f"finite-difference operators act along the vertical axis only, got axes {mesh.coordinate_axes}"
            )
        if mesh.domain.periodic:
            raise ConstructionError("finite-difference columns must have two boundaries; got a periodic mesh")
        self.mesh = mesh
        self.center_local_geometry = center_geometry(np.asarray(mesh.faces, dtype=float))
        self.face_local_geometry = face_geometry(np.asarray(mesh.faces, dtype=float))
        self.center = CenterFiniteDifferenceSpace(self)
        self.face = FaceFiniteDifferenceSpace(self)
        log.debug("Built FiniteDifferenceSpace: %d cells on %s", mesh.nelems, mesh.domain)

    @property
    def left_boundary_name(self) -> str:
        return tuple(self.mesh.boundaries)[0]

    @property
    def right_boundary_name(self) -> str:
        return tuple(self.mesh.boundaries)[1]

    def __repr__(self) -> str:
        return f"FiniteDifferenceSpace({self.mesh!r})"


class _StaggeredView:
    """One staggering of a :class:`FiniteDifferenceSpace`.

    Constructed from a mesh, a :class:`FiniteDifferenceSpace` or the
    other staggering; views of one column are unique, so fields on them
    compare by identity.
    """

    staggering: str = ""
    parent: FiniteDifferenceSpace

    def __new__(cls, space_or_mesh):
        if isinstance(space_or_mesh, _StaggeredView):
            parent = space_or_mesh.parent
        elif isinstance(space_or_mesh, FiniteDifferenceSpace):
            parent = space_or_mesh
        else:
            parent = FiniteDifferenceSpace(space_or_mesh)
        existing = parent.__dict__.get(cls.staggering)
        if existing is not None:
            return existing
        view = super().__new__(cls)
        view.parent = parent
        return view

    @property
    def mesh(self) -> IntervalMesh:
        return self.parent.mesh

    @property
    def column(self) -> "FiniteDifferenceSpace":
        return self.parent

    @property
    def center(self) -> "CenterFiniteDifferenceSpace":
        return self.parent.center

    @property
    def face(self) -> "FaceFiniteDifferenceSpace":
        return self.parent.face

    @property
    def axes(self) -> Tuple[int, ...]:
        return (3,)

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.local_geometry.shape

    @property
    def nlevels(self) -> int:
        return self.shape[0]

    @property
    def left_boundary_name(self) -> str:
        return self.parent.left_boundary_name

    @property
    def right_boundary_name(self) -> str:
        return self.parent.right_boundary_name

    def __len__(self) -> int:
        return self.nlevels

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.nlevels} levels)"


class CenterFiniteDifferenceSpace(_StaggeredView):
    """Cell-center nodes of a column."""

    staggering = CENTER

    @property
    def local_geometry(self) -> LocalGeometry:
        return self.parent.center_local_geometry


class FaceFiniteDifferenceSpace(_StaggeredView):
    """Cell-face nodes of a column."""

    staggering = FACE

    @property
    def local_geometry(self) -> LocalGeometry:
        return self.parent.face_local_geometry
