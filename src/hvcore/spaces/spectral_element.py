"""Two-dimensional spectral-element spaces on quadrilateral topologies."""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from ..exceptions import ConstructionError
from ..geometry import LocalGeometry
from ..spectral.quadrature import GLL
from ..topologies.base import StructuredTopology

log = logging.getLogger(__name__)


def d_dxi1(D: np.ndarray, x: np.ndarray) -> np.ndarray:
    """Derivative along the first reference direction of ``x[..., i, j]``."""
    return np.einsum("ik,...kj->...ij", D, x)


def d_dxi2(D: np.ndarray, x: np.ndarray) -> np.ndarray:
    """Derivative along the second reference direction of ``x[..., i, j]``."""
    return np.einsum("jk,...ik->...ij", D, x)


def element_nodes(corners: np.ndarray, xi: np.ndarray) -> np.ndarray:
    """Bilinear map of quadrature points into quadrilaterals.

    Parameters
    ----------
    corners : np.ndarray
        Corner coordinates of shape ``(nelem, 4, 2)`` in vertex order 1..4.
    xi : np.ndarray
        Reference points in [-1, 1].

    Returns
    -------
    np.ndarray
        Node coordinates of shape ``(nelem, Nq, Nq, 2)``.
    """
    lo = 0.5 * (1.0 - xi)
    hi = 0.5 * (1.0 + xi)
    # shape functions for vertices 1..4 at every (i, j)
    N = np.stack([
        np.outer(lo, lo),
        np.outer(hi, lo),
        np.outer(lo, hi),
        np.outer(hi, hi),
    ])
    return np.einsum("vij,evc->eijc", N, corners)


class SpectralElementSpace2D:
    """
    Tensor-product GLL nodes on every element of a 2D topology.

    Parameters
    ----------
    topology : StructuredTopology
        Connectivity and vertex coordinates of the elements.
    quadrature : GLL
        Quadrature rule used in both reference directions.

    Attributes
    ----------
    shape : tuple
        Node layout ``(nelem, Nq, Nq)``; ``i`` runs along x1, ``j`` along x2.
    local_geometry : LocalGeometry
        Coordinates, ``J``, ``WJ`` and 2x2 metric at every node.
    """

    axes = (1, 2)

    def __init__(self, topology: StructuredTopology, quadrature: GLL):
        if not isinstance(topology, StructuredTopology):
            raise ConstructionError(
                f"SpectralElementSpace2D requires a 2D topology, got {type(topology).__name__}"
            )
        self.topology = topology
        self.quadrature = quadrature
        Nq = quadrature.Nq
        nelem = topology.nlocalelems

        corners = np.array(
            [[tuple(p) for p in topology.vertex_coordinates(e)] for e in range(1, nelem + 1)],
            dtype=float,
        )
        X = element_nodes(corners, quadrature.nodes)
        D = quadrature.D
        dxdxi = np.empty((nelem, Nq, Nq, 2, 2))
        for a in range(2):
            dxdxi[..., a, 0] = d_dxi1(D, X[..., a])
            dxdxi[..., a, 1] = d_dxi2(D, X[..., a])
        J = np.linalg.det(dxdxi)
        if np.any(J <= 0.0):
            raise ConstructionError("SpectralElementSpace2D: element mapping is inverted or degenerate")
        dxidx = np.linalg.inv(dxdxi)
        w = quadrature.weights
        WJ = np.outer(w, w)[np.newaxis] * J
        self.local_geometry = LocalGeometry(X, J, WJ, dxdxi, dxidx, self.axes)
        self._dss = None
        log.debug("Built SpectralElementSpace2D: %d elements, Nq=%d", nelem, Nq)

    @property
    def Nq(self) -> int:
        return self.quadrature.Nq

    @property
    def nelem(self) -> int:
        return self.topology.nlocalelems

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (self.nelem, self.Nq, self.Nq)

    @property
    def horizontal(self) -> "SpectralElementSpace2D":
        return self

    @property
    def dss(self):
        """Node-sharing structure used by weighted DSS, built on first use."""
        if self._dss is None:
            from .dss import DSSOperator

            self._dss = DSSOperator(self)
        return self._dss

    @property
    def dss_weights(self) -> np.ndarray:
        return self.dss.weights

    @property
    def inverse_mass(self) -> np.ndarray:
        """Reciprocal of the assembled (DSS-summed) ``WJ`` at every node."""
        return self.dss.inverse_mass

    def __repr__(self) -> str:
        return f"SpectralElementSpace2D({self.nelem} elements, Nq={self.Nq})"
