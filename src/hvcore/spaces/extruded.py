"""Spectral-element horizontal spaces extruded by a finite-difference column."""

from __future__ import annotations

import logging
from typing import Tuple

from ..exceptions import ConstructionError
from ..fields import Field
from ..geometry import block_diagonal
from .finite_difference import CENTER, FACE, FiniteDifferenceSpace, _StaggeredView
from .spectral_element import SpectralElementSpace2D

log = logging.getLogger(__name__)


class ExtrudedFiniteDifferenceSpace:
    """
    The product of a 2D spectral-element space with a vertical column.

    Node layout is ``(nlevels, nelem, Nq, Nq)``. Horizontal operators act
    level by level, vertical finite-difference operators act along the
    first axis, and the 3x3 metric is block diagonal.

    Parameters
    ----------
    horizontal : SpectralElementSpace2D
        Horizontal discretization.
    vertical : FiniteDifferenceSpace or one of its staggered views
        Vertical column.
    """

    def __init__(self, horizontal: SpectralElementSpace2D, vertical):
        if not isinstance(horizontal, SpectralElementSpace2D):
            raise ConstructionError(f"horizontal space must be SpectralElementSpace2D, got {type(horizontal).__name__}")
        if isinstance(vertical, _StaggeredView):
            vertical = vertical.parent
        if not isinstance(vertical, FiniteDifferenceSpace):
            raise ConstructionError(f"vertical space must be a finite-difference column, got {type(vertical).__name__}")
        self.horizontal = horizontal
        self.vertical = vertical
        self.center_local_geometry = block_diagonal(horizontal.local_geometry, vertical.center_local_geometry)
        self.face_local_geometry = block_diagonal(horizontal.local_geometry, vertical.face_local_geometry)
        self.center = ExtrudedCenterSpace(self)
        self.face = ExtrudedFaceSpace(self)
        log.debug("Built ExtrudedFiniteDifferenceSpace: %s x %d levels", horizontal, vertical.center.nlevels)

    @property
    def left_boundary_name(self) -> str:
        return self.vertical.left_boundary_name

    @property
    def right_boundary_name(self) -> str:
        return self.vertical.right_boundary_name

    def __repr__(self) -> str:
        return f"ExtrudedFiniteDifferenceSpace({self.horizontal!r}, {self.vertical!r})"


class _ExtrudedView:
    staggering = ""
    axes = (1, 2, 3)

    def __init__(self, parent: ExtrudedFiniteDifferenceSpace):
        self.parent = parent

    @property
    def horizontal(self) -> SpectralElementSpace2D:
        return self.parent.horizontal

    @property
    def column(self) -> FiniteDifferenceSpace:
        return self.parent.vertical

    @property
    def vertical(self):
        return getattr(self.parent.vertical, self.staggering)

    @property
    def center(self) -> "ExtrudedCenterSpace":
        return self.parent.center

    @property
    def face(self) -> "ExtrudedFaceSpace":
        return self.parent.face

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

    def column_field(self, field: Field, i: int, j: int, h: int) -> Field:
        """The column under node ``(i, j)`` of element ``h`` (1-based) as a view."""
        if field.space is not self:
            raise ValueError(f"field lives on {field.space!r}, not {self!r}")
        data = field.data[:, h - 1, i - 1, j - 1]
        return Field(data, self.vertical, field.basis, field.axes)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.nlevels} levels x {self.horizontal!r})"


class ExtrudedCenterSpace(_ExtrudedView):
    staggering = CENTER

    @property
    def local_geometry(self):
        return self.parent.center_local_geometry


class ExtrudedFaceSpace(_ExtrudedView):
    staggering = FACE

    @property
    def local_geometry(self):
        return self.parent.face_local_geometry


def column(field: Field, i: int, j: int, h: int) -> Field:
    """Column of an extruded field at horizontal node ``(i, j)`` of element ``h``."""
    return field.space.column_field(field, i, j, h)
