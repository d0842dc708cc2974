"""Horizontal spectral-element operators.

Strong-form operators differentiate the element-local interpolant and are
pointwise values at once. Weak-form operators return element-local
integrals divided by the node weight ``WJ``; they only represent the global
operator after :func:`~hvcore.spaces.weighted_dss`.

All operators act on the last three node axes ``(nelem, Nq, Nq)`` and
therefore apply level by level on extruded spaces.
"""

from __future__ import annotations

import numpy as np

from ..exceptions import DimensionMismatch
from ..fields import Field
from ..geometry import Basis, transform
from ..spaces.spectral_element import d_dxi1, d_dxi2


class SpectralElementOperator:
    """Base class handling space checks and the ``out`` argument."""

    def __call__(self, field: Field, out: Field = None) -> Field:
        if not isinstance(field, Field):
            raise TypeError(f"{type(self).__name__}: expected Field, got {type(field).__name__}")
        if getattr(field.space, "horizontal", None) is None:
            raise TypeError(f"{type(self).__name__} needs a spectral-element or extruded space, got {field.space!r}")
        if out is not None and np.shares_memory(out.data, field.data):
            raise ValueError(f"{type(self).__name__}: out must not alias the input")
        result = self.evaluate(field)
        if out is None:
            return result
        if out.space is not result.space or out.shape != result.shape or out.basis != result.basis:
            raise DimensionMismatch(f"{type(self).__name__}: out {out!r} does not match result {result!r}")
        out.data[...] = result.data
        return out

    @staticmethod
    def _D(field: Field) -> np.ndarray:
        return field.space.horizontal.quadrature.D

    def evaluate(self, field: Field) -> Field:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _covariant12(data1, data2, space) -> Field:
    return Field(np.stack([data1, data2], axis=-1), space, Basis.COVARIANT, (1, 2))


def _contravariant12(data1, data2, space) -> Field:
    return Field(np.stack([data1, data2], axis=-1), space, Basis.CONTRAVARIANT, (1, 2))


def _contravariant3(data, space) -> Field:
    return Field(data[..., np.newaxis], space, Basis.CONTRAVARIANT, (3,))


def _scalar_input(op, field: Field) -> np.ndarray:
    if field.basis is not None:
        raise TypeError(f"{type(op).__name__} expects a scalar field")
    return field.data


class Gradient(SpectralElementOperator):
    """Strong gradient of a scalar as a covariant-12 vector ``dtheta/dxi``."""

    def evaluate(self, field: Field) -> Field:
        D = self._D(field)
        x = _scalar_input(self, field)
        return _covariant12(d_dxi1(D, x), d_dxi2(D, x), field.space)


class WeakGradient(SpectralElementOperator):
    """Weak gradient ``-(1/WJ) D^T (WJ theta)`` per reference direction."""

    def evaluate(self, field: Field) -> Field:
        D = self._D(field)
        WJ = field.space.local_geometry.WJ
        Wx = WJ * _scalar_input(self, field)
        return _covariant12(-d_dxi1(D.T, Wx) / WJ, -d_dxi2(D.T, Wx) / WJ, field.space)


class Divergence(SpectralElementOperator):
    """Strong divergence ``(1/J) d(J u^i)/dxi^i`` of a horizontal vector."""

    def evaluate(self, field: Field) -> Field:
        D = self._D(field)
        J = field.space.local_geometry.J
        u = transform(field, Basis.CONTRAVARIANT, (1, 2)).data
        out = (d_dxi1(D, J * u[..., 0]) + d_dxi2(D, J * u[..., 1])) / J
        return Field(out, field.space)


class WeakDivergence(SpectralElementOperator):
    """Weak divergence ``-(1/WJ) D^T (WJ u^i)`` summed over directions."""

    def evaluate(self, field: Field) -> Field:
        D = self._D(field)
        WJ = field.space.local_geometry.WJ
        u = transform(field, Basis.CONTRAVARIANT, (1, 2)).data
        out = -(d_dxi1(D.T, WJ * u[..., 0]) + d_dxi2(D.T, WJ * u[..., 1])) / WJ
        return Field(out, field.space)


class Curl(SpectralElementOperator):
    """Strong curl.

    A covariant-12 input gives the contravariant-3 vorticity
    ``(1/J) (du_2/dxi^1 - du_1/dxi^2)``; a covariant-3 input gives the
    contravariant-12 vector ``(1/J) (du_3/dxi^2, -du_3/dxi^1)``.
    """

    def evaluate(self, field: Field) -> Field:
        D = self._D(field)
        J = field.space.local_geometry.J
        if field.axes == (1, 2):
            u = transform(field, Basis.COVARIANT).data
            return _contravariant3((d_dxi1(D, u[..., 1]) - d_dxi2(D, u[..., 0])) / J, field.space)
        if field.axes == (3,):
            u3 = transform(field, Basis.COVARIANT).data[..., 0]
            return _contravariant12(d_dxi2(D, u3) / J, -d_dxi1(D, u3) / J, field.space)
        raise DimensionMismatch(f"Curl is defined for axes (1, 2) or (3,), got {field.axes}")


class WeakCurl(SpectralElementOperator):
    """Weak curl, the integration-by-parts counterpart of :class:`Curl`."""

    def evaluate(self, field: Field) -> Field:
        D = self._D(field)
        geom = field.space.local_geometry
        WJ = geom.WJ
        W = WJ / geom.J
        if field.axes == (1, 2):
            u = transform(field, Basis.COVARIANT).data
            out = (-d_dxi1(D.T, W * u[..., 1]) + d_dxi2(D.T, W * u[..., 0])) / WJ
            return _contravariant3(out, field.space)
        if field.axes == (3,):
            Wu3 = W * transform(field, Basis.COVARIANT).data[..., 0]
            return _contravariant12(-d_dxi2(D.T, Wu3) / WJ, d_dxi1(D.T, Wu3) / WJ, field.space)
        raise DimensionMismatch(f"WeakCurl is defined for axes (1, 2) or (3,), got {field.axes}")
