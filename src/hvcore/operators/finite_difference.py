"""Staggered finite-difference operators along the vertical axis.

Operators act along the first (level) axis of center or face fields on a
column or an extruded space and map between the two staggerings:

* ``C2F`` operators read centers and write faces,
* ``F2C`` operators read faces and write centers,
* ``C2C`` / ``F2F`` operators keep the staggering.

Differences are taken in the reference coordinate, so a gradient yields
the covariant component ``dtheta/dxi`` and velocities enter through their
contravariant component ``w^3``. Boundary values of vector quantities are
given as Cartesian vertical components.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from ..exceptions import BandwidthError, DimensionMismatch
from ..fields import Field
from ..geometry import Basis, transform
from ..matrices import GeneralBidiagonal
from ..spaces.finite_difference import CENTER, FACE
from .boundary import Extrapolate, SetDivergence, SetGradient, SetValue, resolve_boundaries

log = logging.getLogger(__name__)


def _trail(a, like: np.ndarray) -> np.ndarray:
    """Append singleton axes to ``a`` so it broadcasts against ``like``."""
    a = np.asarray(a, dtype=float)
    return a.reshape(a.shape + (1,) * (like.ndim - a.ndim))


def _value(bc, like: np.ndarray) -> np.ndarray:
    v = bc.value.data if isinstance(bc.value, Field) else bc.value
    return np.broadcast_to(_trail(v, like), like.shape)


def _vertical_metric(space) -> Tuple[np.ndarray, np.ndarray]:
    """``dx3/dxi3`` and ``dxi3/dx3`` at every node of ``space``."""
    geom = space.local_geometry
    k = geom.axes.index(3)
    return geom.dxdxi[..., k, k], geom.dxidx[..., k, k]


def _contravariant3(field: Field) -> np.ndarray:
    if field.basis is None:
        raise TypeError("expected a vector field with a vertical component")
    return transform(field, Basis.CONTRAVARIANT, (3,)).data[..., 0]


def _vector3(data: np.ndarray, space, basis: Basis) -> Field:
    return Field(data[..., np.newaxis], space, basis=basis, axes=(3,))


class FiniteDifferenceOperator:
    """
    Base class: boundary validation, input checking and ``out`` handling.

    Subclasses set ``inputs`` (staggering of each argument), ``target``
    (staggering of the result), the accepted policy classes ``allowed`` and
    whether both ends need a policy (``required``), and implement
    :meth:`evaluate`.
    """

    inputs: Tuple[str, ...] = ()
    target: str = ""
    allowed: Tuple[type, ...] = ()
    required: bool = False

    def __init__(self, space, **boundaries):
        self.space = space
        self.left, self.right = resolve_boundaries(
            type(self).__name__, space, boundaries, self.allowed, self.required
        )

    @property
    def output_space(self):
        return getattr(self.space, self.target)

    def _check_inputs(self, args) -> None:
        if len(args) != len(self.inputs):
            raise TypeError(f"{type(self).__name__} takes {len(self.inputs)} field(s), got {len(args)}")
        for arg, staggering in zip(args, self.inputs):
            if not isinstance(arg, Field):
                raise TypeError(f"{type(self).__name__}: expected Field, got {type(arg).__name__}")
            expected = getattr(self.space, staggering)
            if arg.space is not expected:
                raise DimensionMismatch(
                    f"{type(self).__name__}: argument lives on {arg.space!r}, expected {expected!r}"
                )

    def __call__(self, *args: Field, out: Field = None) -> Field:
        self._check_inputs(args)
        if out is not None:
            for arg in args:
                if np.shares_memory(out.data, arg.data):
                    raise ValueError(f"{type(self).__name__}: out must not alias an input")
        result = self.evaluate(*args)
        if out is None:
            return result
        if out.space is not result.space or out.shape != result.shape or out.basis != result.basis:
            raise DimensionMismatch(f"{type(self).__name__}: out {out!r} does not match result {result!r}")
        out.data[...] = result.data
        return out

    def evaluate(self, *args: Field) -> Field:
        raise NotImplementedError

    def _column_sizes(self) -> Tuple[int, int]:
        center = self.space.center
        if len(center.shape) != 1:
            raise TypeError(f"{type(self).__name__}.linear_matrix is defined on single columns only")
        n = center.shape[0]
        return n, n + 1

    def __repr__(self) -> str:
        return f"{type(self).__name__}(left={self.left!r}, right={self.right!r})"


class InterpolateF2C(FiniteDifferenceOperator):
    """Face-to-center average ``(f[k] + f[k+1]) / 2``."""

    inputs = (FACE,)
    target = CENTER

    def evaluate(self, f: Field) -> Field:
        x = f.data
        return Field(0.5 * (x[1:] + x[:-1]), self.output_space, f.basis, f.axes)

    def linear_matrix(self) -> GeneralBidiagonal:
        n, nf = self._column_sizes()
        A = GeneralBidiagonal.allocate(True, n, nf)
        A.d[:] = 0.5
        A.d2[:] = 0.5
        return A


class InterpolateC2F(FiniteDifferenceOperator):
    """Center-to-face average with boundary values from ``SetValue``,
    ``SetGradient`` or ``Extrapolate`` (required at both ends)."""

    inputs = (CENTER,)
    target = FACE
    allowed = (SetValue, SetGradient, Extrapolate)
    required = True

    def _boundary(self, bc, c: np.ndarray, J: np.ndarray, sign: int) -> np.ndarray:
        if isinstance(bc, SetValue):
            return _value(bc, c)
        if isinstance(bc, SetGradient):
            # linear extrapolation over half a cell
            return c + sign * 0.5 * _trail(J, c) * _value(bc, c)
        return c

    def evaluate(self, c: Field) -> Field:
        x = c.data
        out = np.empty((x.shape[0] + 1,) + x.shape[1:])
        out[1:-1] = 0.5 * (x[1:] + x[:-1])
        J, _ = _vertical_metric(self.output_space)
        out[0] = self._boundary(self.left, x[0], J[0], -1)
        out[-1] = self._boundary(self.right, x[-1], J[-1], +1)
        return Field(out, self.output_space, c.basis, c.axes)

    def linear_matrix(self) -> GeneralBidiagonal:
        n, nf = self._column_sizes()
        A = GeneralBidiagonal.allocate(False, nf, n)
        A.d[:] = 0.5
        A.d2[:] = 0.5
        A.d[0] = 0.0 if isinstance(self.left, SetValue) else 1.0
        A.d2[-1] = 0.0 if isinstance(self.right, SetValue) else 1.0
        return A


class GradientF2C(FiniteDifferenceOperator):
    """Covariant vertical gradient of a face scalar, ``f[k+1] - f[k]``, at centers.

    ``SetValue`` replaces the boundary face value; ``Extrapolate`` copies
    the neighbouring center's gradient.
    """

    inputs = (FACE,)
    target = CENTER
    allowed = (SetValue, Extrapolate)

    def evaluate(self, f: Field) -> Field:
        if f.basis is not None:
            raise TypeError("GradientF2C expects a scalar field")
        x = f.data
        out = x[1:] - x[:-1]
        n = out.shape[0]
        if isinstance(self.left, SetValue):
            out[0] = x[1] - _value(self.left, x[0])
        if isinstance(self.right, SetValue):
            out[-1] = _value(self.right, x[-1]) - x[-2]
        if n > 1:
            if isinstance(self.left, Extrapolate):
                out[0] = out[1]
            if isinstance(self.right, Extrapolate):
                out[-1] = out[-2]
        return _vector3(out, self.output_space, Basis.COVARIANT)


class GradientC2F(FiniteDifferenceOperator):
    """Covariant vertical gradient of a center scalar, ``c[k] - c[k-1]``, at faces.

    Boundary faces need ``SetValue`` (one-sided difference over half a
    cell) or ``SetGradient`` (prescribed ``dtheta/dz``).
    """

    inputs = (CENTER,)
    target = FACE
    allowed = (SetValue, SetGradient)
    required = True

    def evaluate(self, c: Field) -> Field:
        if c.basis is not None:
            raise TypeError("GradientC2F expects a scalar field")
        x = c.data
        out = np.empty((x.shape[0] + 1,) + x.shape[1:])
        out[1:-1] = x[1:] - x[:-1]
        J, _ = _vertical_metric(self.output_space)
        if isinstance(self.left, SetValue):
            out[0] = 2.0 * (x[0] - _value(self.left, x[0]))
        else:
            out[0] = J[0] * _value(self.left, x[0])
        if isinstance(self.right, SetValue):
            out[-1] = 2.0 * (_value(self.right, x[-1]) - x[-1])
        else:
            out[-1] = J[-1] * _value(self.right, x[-1])
        return _vector3(out, self.output_space, Basis.COVARIANT)

    def linear_matrix(self, basis: Basis = Basis.COVARIANT) -> GeneralBidiagonal:
        """Linear part as a lower bidiagonal ``(n + 1) x n`` matrix.

        With ``basis=Basis.CONTRAVARIANT`` the rows are scaled by the face
        metric so the result feeds :meth:`DivergenceF2C.linear_matrix`.
        """
        n, nf = self._column_sizes()
        A = GeneralBidiagonal.allocate(False, nf, n)
        A.d[:] = 1.0
        A.d2[:] = -1.0
        A.d[0] = 2.0 if isinstance(self.left, SetValue) else 0.0
        A.d2[-1] = -2.0 if isinstance(self.right, SetValue) else 0.0
        if basis is Basis.CONTRAVARIANT:
            _, inv = _vertical_metric(self.output_space)
            scale = inv ** 2
            A.d *= scale[:n]
            A.d2 *= scale[1:]
        return A


class DivergenceF2C(FiniteDifferenceOperator):
    """Divergence ``(J w^3)[k+1] - (J w^3)[k]`` over ``J`` of a face vector at centers.

    ``SetValue`` replaces the boundary flux; ``Extrapolate`` copies the
    neighbouring center's divergence.
    """

    inputs = (FACE,)
    target = CENTER
    allowed = (SetValue, Extrapolate)

    def evaluate(self, w: Field) -> Field:
        face = self.space.face
        u = _contravariant3(w)
        _, inv = _vertical_metric(face)
        Jf = face.local_geometry.J
        if isinstance(self.left, SetValue):
            u[0] = inv[0] * _value(self.left, u[0])
        if isinstance(self.right, SetValue):
            u[-1] = inv[-1] * _value(self.right, u[-1])
        Ju = Jf * u
        out = (Ju[1:] - Ju[:-1]) / self.output_space.local_geometry.J
        if out.shape[0] > 1:
            if isinstance(self.left, Extrapolate):
                out[0] = out[1]
            if isinstance(self.right, Extrapolate):
                out[-1] = out[-2]
        return Field(out, self.output_space)

    def linear_matrix(self) -> GeneralBidiagonal:
        """Linear part acting on contravariant components, upper ``n x (n + 1)``."""
        n, nf = self._column_sizes()
        if isinstance(self.left, Extrapolate) or isinstance(self.right, Extrapolate):
            raise BandwidthError("extrapolated boundary rows do not fit a bidiagonal band")
        Jf = self.space.face.local_geometry.J
        Jc = self.space.center.local_geometry.J
        A = GeneralBidiagonal.allocate(True, n, nf)
        A.d[:] = -Jf[:-1] / Jc
        A.d2[:] = Jf[1:] / Jc
        if isinstance(self.left, SetValue):
            A.d[0] = 0.0
        if isinstance(self.right, SetValue):
            A.d2[-1] = 0.0
        return A


class DivergenceC2F(FiniteDifferenceOperator):
    """Divergence of a center vector at faces.

    Boundary faces need ``SetValue`` (flux on the face, differenced over
    half a cell) or ``SetDivergence``.
    """

    inputs = (CENTER,)
    target = FACE
    allowed = (SetValue, SetDivergence)
    required = True

    def _boundary(self, bc, Ju_inner, J, inv, sign):
        if isinstance(bc, SetDivergence):
            return _value(bc, Ju_inner)
        Ju_b = J * inv * _value(bc, Ju_inner)
        return sign * (Ju_inner - Ju_b) / (0.5 * J)

    def evaluate(self, w: Field) -> Field:
        center = self.space.center
        face_geom = self.output_space.local_geometry
        Ju = center.local_geometry.J * _contravariant3(w)
        Jf = face_geom.J
        _, inv = _vertical_metric(self.output_space)
        out = np.empty((Ju.shape[0] + 1,) + Ju.shape[1:])
        out[1:-1] = (Ju[1:] - Ju[:-1]) / Jf[1:-1]
        out[0] = self._boundary(self.left, Ju[0], Jf[0], inv[0], +1)
        out[-1] = self._boundary(self.right, Ju[-1], Jf[-1], inv[-1], -1)
        return Field(out, self.output_space)


def _center_differences(theta: np.ndarray, left, right) -> Tuple[np.ndarray, np.ndarray]:
    """Forward and backward differences at centers with boundary values applied."""
    diff = theta[1:] - theta[:-1]
    dplus = np.empty_like(theta)
    dminus = np.empty_like(theta)
    dplus[:-1] = diff
    dminus[1:] = diff
    dminus[0] = 2.0 * (theta[0] - _value(left, theta[0])) if isinstance(left, SetValue) else 0.0
    dplus[-1] = 2.0 * (_value(right, theta[-1]) - theta[-1]) if isinstance(right, SetValue) else 0.0
    return dplus, dminus


class AdvectionC2C(FiniteDifferenceOperator):
    """Centered advection ``w^3 dtheta/dxi`` of a center scalar by a face velocity.

    ``A(w, theta)[k] = (w^3[k+1] (theta[k+1] - theta[k]) + w^3[k] (theta[k] - theta[k-1])) / 2``.
    ``SetValue`` supplies the boundary value half a cell outside the first
    center; ``Extrapolate`` keeps only the one-sided interior term.
    """

    inputs = (FACE, CENTER)
    target = CENTER
    allowed = (SetValue, Extrapolate)
    required = True

    def evaluate(self, w: Field, theta: Field) -> Field:
        u = _contravariant3(w)
        x = theta.data
        dplus, dminus = _center_differences(x, self.left, self.right)
        out = 0.5 * (u[1:] * dplus + u[:-1] * dminus)
        if x.shape[0] > 1:
            if isinstance(self.left, Extrapolate):
                out[0] = u[1] * dplus[0]
            if isinstance(self.right, Extrapolate):
                out[-1] = u[-2] * dminus[-1]
        return Field(out, self.output_space)


class UpwindBiasedProductC2F(FiniteDifferenceOperator):
    """Upwinded flux ``w^3 theta_upwind`` at faces, as a contravariant-3 vector.

    ``SetValue`` supplies the upstream value outside the column;
    ``Extrapolate`` copies the neighbouring interior face.
    """

    inputs = (FACE, CENTER)
    target = FACE
    allowed = (SetValue, Extrapolate)
    required = True

    @staticmethod
    def _product(u, lower, upper):
        return 0.5 * ((u + np.abs(u)) * lower + (u - np.abs(u)) * upper)

    def evaluate(self, w: Field, theta: Field) -> Field:
        u = _contravariant3(w)
        x = theta.data
        out = np.empty_like(u)
        out[1:-1] = self._product(u[1:-1], x[:-1], x[1:])
        if isinstance(self.left, SetValue):
            out[0] = self._product(u[0], _value(self.left, x[0]), x[0])
        elif out.shape[0] > 2:
            out[0] = out[1]
        else:
            out[0] = u[0] * x[0]
        if isinstance(self.right, SetValue):
            out[-1] = self._product(u[-1], x[-1], _value(self.right, x[-1]))
        elif out.shape[0] > 2:
            out[-1] = out[-2]
        else:
            out[-1] = u[-1] * x[-1]
        return _vector3(out, self.output_space, Basis.CONTRAVARIANT)


class FluxCorrectionC2C(FiniteDifferenceOperator):
    """Upwind correction ``(|w^3[k+1]| dtheta^+ - |w^3[k]| dtheta^-) / 2`` at centers.

    Subtracting :class:`AdvectionC2C` and adding this correction gives
    first-order upwind advection. Only ``Extrapolate`` is accepted; it
    drops the missing term at each end.
    """

    inputs = (FACE, CENTER)
    target = CENTER
    allowed = (Extrapolate,)
    required = True

    def evaluate(self, w: Field, theta: Field) -> Field:
        a = np.abs(_contravariant3(w))
        x = theta.data
        dplus, dminus = _center_differences(x, None, None)
        return Field(0.5 * (a[1:] * dplus - a[:-1] * dminus), self.output_space)


class FluxCorrectionF2F(FiniteDifferenceOperator):
    """Face analogue of :class:`FluxCorrectionC2C`, with velocity at centers."""

    inputs = (CENTER, FACE)
    target = FACE
    allowed = (Extrapolate,)
    required = True

    def evaluate(self, w: Field, theta: Field) -> Field:
        a = np.abs(_contravariant3(w))
        x = theta.data
        diff = x[1:] - x[:-1]
        out = np.zeros_like(x)
        out[:-1] += 0.5 * a * diff
        out[1:] -= 0.5 * a * diff
        return Field(out, self.output_space)
