"""Per-node local geometry and vector-basis transforms.

Every node carries a coordinate, the Jacobian determinant ``J``, the
quadrature-weighted Jacobian ``WJ`` and the two metric matrices

* ``dxdxi[..., a, i] = dx_a / dxi^i`` (covariant basis vectors in columns)
* ``dxidx[..., i, a] = dxi^i / dx_a`` (contravariant basis vectors in rows)

acting on the coordinate ``axes`` of the space (1, 2 horizontal; 3 vertical).
Vector components are converted between bases with

* contravariant ``u^i = dxidx[i, a] v_a``
* covariant ``u_i = dxdxi[a, i] v_a``

and back to Cartesian ``v_a = dxdxi[a, i] u^i = dxidx[i, a] u_i``.
Axes not covered by the geometry use the identity metric.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .exceptions import DimensionMismatch

ALL_AXES = (1, 2, 3)


class Basis(enum.Enum):
    CARTESIAN = "cartesian"
    COVARIANT = "covariant"
    CONTRAVARIANT = "contravariant"


@dataclass(frozen=True)
class LocalGeometry:
    """
    Geometry tables of one node set, stored as arrays over the nodes.

    Attributes
    ----------
    coordinates : np.ndarray
        Node coordinates, shape ``nodes + (len(axes),)``.
    J, WJ : np.ndarray
        Jacobian determinant and quadrature weight times ``J``, shape ``nodes``.
    dxdxi, dxidx : np.ndarray
        Metric matrices, shape ``nodes + (len(axes), len(axes))``.
    axes : tuple of int
        Coordinate axes the metric acts on.
    """

    coordinates: np.ndarray
    J: np.ndarray
    WJ: np.ndarray
    dxdxi: np.ndarray
    dxidx: np.ndarray
    axes: Tuple[int, ...]

    def __post_init__(self) -> None:
        n = len(self.axes)
        nodes = self.J.shape
        expected = {
            "coordinates": nodes + (n,),
            "WJ": nodes,
            "dxdxi": nodes + (n, n),
            "dxidx": nodes + (n, n),
        }
        for name, shape in expected.items():
            if getattr(self, name).shape != shape:
                raise DimensionMismatch(f"LocalGeometry.{name}: expected shape {shape}, got {getattr(self, name).shape}")
        for name in ("coordinates", "J", "WJ", "dxdxi", "dxidx"):
            getattr(self, name).setflags(write=False)

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.J.shape

    def coordinate(self, axis: int) -> np.ndarray:
        return self.coordinates[..., self.axes.index(axis)]

    def full_metric(self) -> Tuple[np.ndarray, np.ndarray]:
        """``dxdxi`` and ``dxidx`` embedded in 3x3 matrices over axes 1..3."""
        shape = self.shape + (3, 3)
        dxdxi = np.zeros(shape)
        dxidx = np.zeros(shape)
        for k in range(3):
            dxdxi[..., k, k] = 1.0
            dxidx[..., k, k] = 1.0
        idx = [a - 1 for a in self.axes]
        dxdxi[..., idx[0]:idx[-1] + 1, idx[0]:idx[-1] + 1] = self.dxdxi
        dxidx[..., idx[0]:idx[-1] + 1, idx[0]:idx[-1] + 1] = self.dxidx
        return dxdxi, dxidx


def block_diagonal(horizontal: LocalGeometry, vertical: LocalGeometry) -> LocalGeometry:
    """Combine horizontal (1, 2) and vertical (3,) geometry on a product grid.

    ``horizontal`` has node shape ``h`` and ``vertical`` node shape
    ``(nlevels,)``; the result has node shape ``(nlevels,) + h``.
    """
    nl = vertical.shape[0]
    h = horizontal.shape
    hexp = (np.newaxis,) + (slice(None),) * len(h)
    vexp = (slice(None),) + (np.newaxis,) * len(h)
    J = vertical.J[vexp] * horizontal.J[hexp]
    WJ = vertical.WJ[vexp] * horizontal.WJ[hexp]
    nh = len(horizontal.axes)
    n = nh + 1
    shape = (nl,) + h
    coords = np.empty(shape + (n,))
    coords[..., :nh] = horizontal.coordinates[hexp]
    coords[..., nh] = vertical.coordinates[..., 0][vexp]
    dxdxi = np.zeros(shape + (n, n))
    dxidx = np.zeros(shape + (n, n))
    dxdxi[..., :nh, :nh] = horizontal.dxdxi[hexp]
    dxidx[..., :nh, :nh] = horizontal.dxidx[hexp]
    dxdxi[..., nh, nh] = vertical.dxdxi[..., 0, 0][vexp]
    dxidx[..., nh, nh] = vertical.dxidx[..., 0, 0][vexp]
    return LocalGeometry(coords, J, WJ, dxdxi, dxidx, tuple(horizontal.axes) + tuple(vertical.axes))


def _embed(data: np.ndarray, axes: Sequence[int]) -> np.ndarray:
    full = np.zeros(data.shape[:-1] + (3,), dtype=data.dtype)
    for k, a in enumerate(axes):
        full[..., a - 1] = data[..., k]
    return full


def transform_components(data: np.ndarray, geometry: LocalGeometry, source: Basis, target: Basis,
                         axes: Sequence[int], target_axes: Sequence[int] = None) -> np.ndarray:
    """Convert vector components ``data[..., k]`` on ``axes`` between bases.

    The result holds the ``target_axes`` components (default ``axes``).
    Components on axes outside ``axes`` are taken as zero.
    """
    if target_axes is None:
        target_axes = axes
    if data.shape[-1] != len(axes):
        raise DimensionMismatch(f"vector data has {data.shape[-1]} components for axes {tuple(axes)}")
    full = _embed(np.asarray(data, dtype=float), axes)
    if source != target:
        dxdxi, dxidx = geometry.full_metric()
        if source is Basis.COVARIANT:
            full = np.einsum("...ia,...i->...a", dxidx, full)
        elif source is Basis.CONTRAVARIANT:
            full = np.einsum("...ai,...i->...a", dxdxi, full)
        if target is Basis.COVARIANT:
            full = np.einsum("...ai,...a->...i", dxdxi, full)
        elif target is Basis.CONTRAVARIANT:
            full = np.einsum("...ia,...a->...i", dxidx, full)
    return np.stack([full[..., a - 1] for a in target_axes], axis=-1)


def transform(field, basis: Basis, axes: Sequence[int] = None):
    """Return ``field`` re-expressed in ``basis`` on ``axes`` (default: the field's axes)."""
    from .fields import Field

    if field.basis is None:
        raise TypeError("transform requires a vector field")
    target_axes = tuple(field.axes if axes is None else axes)
    data = transform_components(field.data, field.space.local_geometry, field.basis, basis, field.axes, target_axes)
    return Field(data, field.space, basis=basis, axes=target_axes)


def cartesian(field):
    return transform(field, Basis.CARTESIAN)


def covariant(field, axes: Sequence[int] = None):
    return transform(field, Basis.COVARIANT, axes)


def contravariant(field, axes: Sequence[int] = None):
    return transform(field, Basis.CONTRAVARIANT, axes)


def dot(a, b):
    """Pointwise Euclidean inner product of two vector fields."""
    from .fields import Field

    axes = tuple(sorted(set(a.axes) | set(b.axes)))
    ua = transform(a, Basis.CARTESIAN, axes).data
    ub = transform(b, Basis.CARTESIAN, axes).data
    return Field(np.sum(ua * ub, axis=-1), a.space)


def norm(field):
    """Pointwise Euclidean length of a vector field."""
    from .fields import Field

    v = transform(field, Basis.CARTESIAN).data
    return Field(np.sqrt(np.sum(v * v, axis=-1)), field.space)


def cross(a, b):
    """Cross product of a covariant-12 vector with a contravariant-3 vector.

    Uses ``(u x w)_1 = J u^2 w^3`` and ``(u x w)_2 = -J u^1 w^3``, with
    ``u^i`` the contravariant components of ``a``.
    """
    from .fields import Field

    if a.axes != (1, 2) or b.axes != (3,):
        raise DimensionMismatch(f"cross expects axes (1, 2) x (3,), got {a.axes} x {b.axes}")
    u = transform(a, Basis.CONTRAVARIANT).data
    w = transform(b, Basis.CONTRAVARIANT).data[..., 0]
    J = a.space.local_geometry.J
    data = np.stack([J * u[..., 1] * w, -J * u[..., 0] * w], axis=-1)
    return Field(data, a.space, basis=Basis.COVARIANT, axes=(1, 2))
