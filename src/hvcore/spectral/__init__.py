"""Nodal polynomial bases and quadrature rules."""

from .polynomial import (
    interpolation_matrix,
    jacobi_polynomial,
    jacobi_polynomial_x,
    legendre_diff_matrix,
    legendre_gauss_lobatto_nodes,
    legendre_gauss_lobatto_weights,
    legendre_mass_matrix,
    vandermonde,
    vandermonde_x,
)
from .quadrature import GLL

__all__ = [
    "GLL",
    "interpolation_matrix",
    "jacobi_polynomial",
    "jacobi_polynomial_x",
    "legendre_diff_matrix",
    "legendre_gauss_lobatto_nodes",
    "legendre_gauss_lobatto_weights",
    "legendre_mass_matrix",
    "vandermonde",
    "vandermonde_x",
]
