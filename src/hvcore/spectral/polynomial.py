"""Orthogonal polynomial utilities for nodal spectral elements."""

from __future__ import annotations

import numpy as np
from numpy.polynomial import legendre as npleg
from scipy.special import gammaln


def jacobi_polynomial(x: np.ndarray, alpha: float, beta: float, n: int) -> np.ndarray:
    r"""
    Evaluate the orthonormal Jacobi polynomial :math:`\tilde P_n^{(\alpha,\beta)}`.

    Parameters
    ----------
    x : np.ndarray
        Evaluation points in [-1, 1]
    alpha, beta : float
        Jacobi parameters (``alpha = beta = 0`` gives Legendre)
    n : int
        Polynomial degree

    Returns
    -------
    np.ndarray
        Polynomial values, normalized so that the polynomials are
        orthonormal with respect to the Jacobi weight.

    Notes
    -----
    Uses the three-term recurrence of Hesthaven & Warburton (2008),
    Appendix A.
    """
    x = np.asarray(x, dtype=float)
    ab = alpha + beta
    gamma0 = np.exp(
        (ab + 1) * np.log(2.0) + gammaln(alpha + 1) + gammaln(beta + 1) - gammaln(ab + 1)
    ) / (ab + 1)
    P = [np.full_like(x, 1.0 / np.sqrt(gamma0))]
    if n == 0:
        return P[0]
    gamma1 = (alpha + 1) * (beta + 1) / (ab + 3) * gamma0
    P.append(((ab + 2) * x / 2 + (alpha - beta) / 2) / np.sqrt(gamma1))

    a_old = 2 / (2 + ab) * np.sqrt((alpha + 1) * (beta + 1) / (ab + 3))
    for i in range(1, n):
        h1 = 2 * i + ab
        a_new = 2 / (h1 + 2) * np.sqrt(
            (i + 1) * (i + 1 + ab) * (i + 1 + alpha) * (i + 1 + beta) / (h1 + 1) / (h1 + 3)
        )
        b_new = -(alpha ** 2 - beta ** 2) / h1 / (h1 + 2)
        P.append(1 / a_new * (-a_old * P[i - 1] + (x - b_new) * P[i]))
        a_old = a_new
    return P[n]


def jacobi_polynomial_x(x: np.ndarray, alpha: float, beta: float, n: int) -> np.ndarray:
    """Derivative of :func:`jacobi_polynomial` with respect to ``x``."""
    x = np.asarray(x, dtype=float)
    if n == 0:
        return np.zeros_like(x)
    return np.sqrt(n * (n + alpha + beta + 1)) * jacobi_polynomial(x, alpha + 1, beta + 1, n - 1)


def vandermonde(x: np.ndarray, alpha: float, beta: float) -> np.ndarray:
    """Orthonormal Jacobi Vandermonde matrix ``V[i, j] = P_j(x_i)``."""
    x = np.asarray(x, dtype=float)
    return np.column_stack([jacobi_polynomial(x, alpha, beta, j) for j in range(x.size)])


def vandermonde_x(x: np.ndarray, alpha: float, beta: float) -> np.ndarray:
    """Derivative Vandermonde matrix ``Vx[i, j] = P_j'(x_i)``."""
    x = np.asarray(x, dtype=float)
    return np.column_stack([jacobi_polynomial_x(x, alpha, beta, j) for j in range(x.size)])


def legendre_gauss_lobatto_nodes(num_points: int) -> np.ndarray:
    """
    Return Legendre-Gauss-Lobatto nodes on [-1, 1].

    Parameters
    ----------
    num_points : int
        Number of nodes (N+1), at least 2

    Returns
    -------
    np.ndarray
        The end points together with the roots of :math:`P_N'`, ascending.
    """
    if num_points < 2:
        raise ValueError(f"Gauss-Lobatto rules need at least 2 points, got {num_points}")
    N = num_points - 1
    interior = npleg.Legendre.basis(N).deriv().roots() if N > 1 else np.array([])
    nodes = np.concatenate(([-1.0], np.sort(np.real(interior)), [1.0]))
    # enforce exact symmetry
    return 0.5 * (nodes - nodes[::-1])


def legendre_gauss_lobatto_weights(nodes: np.ndarray) -> np.ndarray:
    r"""Quadrature weights :math:`w_j = 2 / (N (N+1) P_N(x_j)^2)`."""
    N = nodes.size - 1
    PN = npleg.legval(nodes, [0.0] * N + [1.0])
    return 2.0 / (N * (N + 1) * PN ** 2)


def legendre_diff_matrix(nodes: np.ndarray) -> np.ndarray:
    r"""
    Return Legendre spectral differentiation matrix at arbitrary nodes.

    Notes
    -----
    Constructed as :math:`D = V_x V^{-1}`, which works for any node
    distribution. Rows are corrected to sum to zero so constants
    differentiate to zero exactly.
    """
    V = vandermonde(nodes, 0.0, 0.0)
    Vx = vandermonde_x(nodes, 0.0, 0.0)
    D = np.linalg.solve(V.T, Vx.T).T
    D[np.diag_indices_from(D)] -= np.sum(D, axis=1)
    return D


def legendre_mass_matrix(nodes: np.ndarray) -> np.ndarray:
    """Exact Legendre mass matrix ``(V V^T)^{-1}`` for the orthonormal basis."""
    V = vandermonde(nodes, 0.0, 0.0)
    return np.linalg.inv(V @ V.T)


def interpolation_matrix(nodes: np.ndarray, x_new: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """
    Matrix evaluating the Lagrange interpolant through ``nodes`` at ``x_new``.

    Parameters
    ----------
    nodes : np.ndarray
        Original interpolation nodes
    x_new : np.ndarray
        Points where to evaluate the interpolant
    weights : np.ndarray
        Barycentric weights of ``nodes``, known up to a common factor

    Returns
    -------
    np.ndarray
        Matrix of shape ``(len(x_new), len(nodes))``
    """
    x_new = np.atleast_1d(np.asarray(x_new, dtype=float))
    M = np.zeros((x_new.size, nodes.size))
    for i, x in enumerate(x_new):
        diff = x - nodes
        hit = np.abs(diff) < 1e-14
        if np.any(hit):
            M[i, np.argmax(hit)] = 1.0
        else:
            terms = weights / diff
            M[i] = terms / np.sum(terms)
    return M
