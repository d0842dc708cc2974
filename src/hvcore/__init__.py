"""Spectral-element and finite-difference discretizations for PDE tendencies.

Object Hierarchy:
-----------------
Domain (IntervalDomain, RectangleDomain, ...)
└── Mesh (IntervalMesh, EquispacedRectangleMesh, TensorProductMesh)
    └── Topology (GridTopology, TensorProductTopology)
        └── Space
            ├── FiniteDifferenceSpace (center / face columns)
            ├── SpectralElementSpace2D (GLL nodes, weighted DSS)
            └── ExtrudedFiniteDifferenceSpace (horizontal x column)

Fields live on spaces; operators (``hvcore.operators``) map fields to
fields, and ``hvcore.timestepping`` integrates tendencies built from them.
"""

from .exceptions import BandwidthError, ConstructionError, DimensionMismatch, RangeError
from .fields import Field, FieldVector, coordinate_field, ones, vector_field, zeros
from .geometry import Basis, LocalGeometry, cartesian, contravariant, covariant, cross, dot, norm, transform
from .matrices import GeneralBidiagonal, Tridiagonal, bidiagonal_product

__all__ = [
    # Errors
    "ConstructionError",
    "DimensionMismatch",
    "RangeError",
    "BandwidthError",
    # Fields
    "Field",
    "FieldVector",
    "coordinate_field",
    "vector_field",
    "zeros",
    "ones",
    # Geometry
    "Basis",
    "LocalGeometry",
    "transform",
    "cartesian",
    "covariant",
    "contravariant",
    "cross",
    "dot",
    "norm",
    # Column matrices
    "GeneralBidiagonal",
    "Tridiagonal",
    "bidiagonal_product",
]
