"""Weighted direct stiffness summation (DSS) across element boundaries.

Nodes shared between elements (along interior faces and at vertices) form
groups. Weighted DSS replaces every member of a group with the
``WJ``-weighted average over the group, which makes a field continuous
and turns element-local weak-form contributions into assembled values.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy import sparse
from scipy.sparse import csgraph

from ..exceptions import DimensionMismatch
from ..fields import Field, FieldVector
from ..geometry import Basis, transform
from ..topologies.base import face_node_index, vertex_node_index

log = logging.getLogger(__name__)


class DSSOperator:
    """
    Node-group summation over a :class:`SpectralElementSpace2D`.

    Attributes
    ----------
    summation : scipy.sparse.csr_matrix
        ``S`` with ``(S f)_k`` the sum of ``f`` over the group of node ``k``.
    weights : np.ndarray
        ``WJ / (S WJ)``: each node's share of its group, shape ``(nelem, Nq, Nq)``.
    inverse_mass : np.ndarray
        ``1 / (S WJ)``.
    ngroups : int
        Number of distinct physical nodes.
    """

    def __init__(self, space):
        topology = space.topology
        Nq = space.Nq
        self.space = space
        self.n = space.nelem * Nq * Nq

        def node(elem, ij):
            i, j = ij
            return ((elem - 1) * Nq + (i - 1)) * Nq + (j - 1)

        rows, cols = [], []
        for elem1, face1, elem2, face2, reversed_ in topology.interior_faces():
            for q in range(2, Nq):
                rows.append(node(elem1, face_node_index(face1, Nq, q)))
                cols.append(node(elem2, face_node_index(face2, Nq, q, reversed_)))
        for vertex in topology.vertices():
            members = [node(elem, vertex_node_index(vert, Nq)) for elem, vert in vertex]
            rows.extend(members[:1] * (len(members) - 1))
            cols.extend(members[1:])

        links = sparse.coo_matrix(
            (np.ones(len(rows)), (np.array(rows, dtype=np.int64), np.array(cols, dtype=np.int64))),
            shape=(self.n, self.n),
        )
        self.ngroups, labels = csgraph.connected_components(links, directed=False)
        G = sparse.csr_matrix(
            (np.ones(self.n), (labels, np.arange(self.n))), shape=(self.ngroups, self.n)
        )
        self.summation = (G.T @ G).tocsr()

        WJ = space.local_geometry.WJ
        assembled = (self.summation @ WJ.ravel()).reshape(WJ.shape)
        self.weights = WJ / assembled
        self.inverse_mass = 1.0 / assembled
        log.debug("DSS: %d nodes in %d groups", self.n, self.ngroups)

    def _sum(self, x: np.ndarray, lead: int) -> np.ndarray:
        shape = x.shape
        flat = np.moveaxis(x.reshape(shape[:lead] + (self.n, -1)), lead, 0)
        inner = flat.shape
        summed = self.summation @ flat.reshape(self.n, -1)
        return np.moveaxis(summed.reshape(inner), 0, lead).reshape(shape)

    def _weights_for(self, x: np.ndarray, lead: int) -> np.ndarray:
        trailing = x.ndim - lead - 3
        return self.weights.reshape((1,) * lead + self.weights.shape + (1,) * trailing)

    def weighted(self, x: np.ndarray, lead: int = 0) -> np.ndarray:
        return self._sum(x * self._weights_for(x, lead), lead)

    def unweighted(self, x: np.ndarray, lead: int = 0) -> np.ndarray:
        return self._sum(x, lead)


def _horizontal(space):
    horizontal = getattr(space, "horizontal", None)
    if horizontal is None:
        raise TypeError(f"DSS needs a spectral-element or extruded space, got {space!r}")
    lead = len(space.shape) - len(horizontal.shape)
    return horizontal.dss, lead


def _apply(field: Field, weighted: bool) -> Field:
    op, lead = _horizontal(field.space)
    apply = op.weighted if weighted else op.unweighted
    if field.basis is None or field.basis is Basis.CARTESIAN:
        field.data[...] = apply(field.data, lead)
        return field
    cart = transform(field, Basis.CARTESIAN)
    cart.data[...] = apply(cart.data, lead)
    field.data[...] = transform(cart, field.basis, field.axes).data
    return field


def weighted_dss(x):
    """
    In-place weighted DSS of a field, or of every DSS-able member of a FieldVector.

    Vector fields are assembled in Cartesian components and converted back
    to their own basis. Returns ``x``.
    """
    if isinstance(x, FieldVector):
        for f in x.values():
            if getattr(f.space, "horizontal", None) is not None:
                _apply(f, weighted=True)
        return x
    if not isinstance(x, Field):
        raise TypeError(f"weighted_dss expects a Field or FieldVector, got {type(x).__name__}")
    return _apply(x, weighted=True)


def dss_sum(field: Field) -> Field:
    """In-place unweighted summation over shared nodes."""
    return _apply(field, weighted=False)


def integrate(field: Field):
    """Quadrature ``sum(WJ * f)`` of a field; per component for vectors."""
    WJ = field.space.local_geometry.WJ
    if field.basis is None:
        if field.shape != WJ.shape:
            raise DimensionMismatch(f"field shape {field.shape} does not match space {WJ.shape}")
        return float(np.sum(WJ * field.data))
    return np.sum(WJ[..., np.newaxis] * field.data, axis=tuple(range(WJ.ndim)))
