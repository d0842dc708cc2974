"""Gauss-Lobatto-Legendre quadrature for spectral elements."""

from __future__ import annotations

import numpy as np

from ..exceptions import ConstructionError
from .polynomial import (
    interpolation_matrix,
    legendre_diff_matrix,
    legendre_gauss_lobatto_nodes,
    legendre_gauss_lobatto_weights,
)


class GLL:
    """
    Legendre-Gauss-Lobatto rule with ``Nq`` points on [-1, 1].

    Parameters
    ----------
    Nq : int
        Number of quadrature points per direction, at least 2.

    Attributes
    ----------
    nodes : np.ndarray
        Quadrature points, ascending, including both end points.
    weights : np.ndarray
        Quadrature weights; they sum to 2.
    D : np.ndarray
        Collocation differentiation matrix, ``(D @ f)[i] ~ f'(nodes[i])``.
    barycentric : np.ndarray
        Barycentric interpolation weights, scaled by a common factor.
    """

    def __init__(self, Nq: int):
        if int(Nq) < 2:
            raise ConstructionError(f"GLL: need Nq >= 2, got {Nq}")
        self.Nq = int(Nq)
        self.nodes = legendre_gauss_lobatto_nodes(self.Nq)
        self.weights = legendre_gauss_lobatto_weights(self.nodes)
        self.D = legendre_diff_matrix(self.nodes)
        # barycentric weights of Lobatto points: (-1)^j sqrt(w_j), up to a common factor
        self.barycentric = (-1.0) ** np.arange(self.Nq) * np.sqrt(self.weights)
        for arr in (self.nodes, self.weights, self.D, self.barycentric):
            arr.setflags(write=False)

    @property
    def degree(self) -> int:
        return self.Nq - 1

    def interpolation_matrix(self, x_new) -> np.ndarray:
        """Matrix mapping nodal values to the interpolant evaluated at ``x_new``."""
        return interpolation_matrix(self.nodes, x_new, self.barycentric)

    def __repr__(self) -> str:
        return f"GLL({self.Nq})"

    def __eq__(self, other) -> bool:
        return isinstance(other, GLL) and other.Nq == self.Nq

    def __hash__(self) -> int:
        return hash(("GLL", self.Nq))
