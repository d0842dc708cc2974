"""Discretizations of domains into logical grids of elements."""

from .interval import EquispacedLineMesh, ExponentialStretching, IntervalMesh, Uniform
from .rectangle import (
    EquispacedRectangleMesh,
    Point2D,
    TensorProductMesh,
    logical_neighbor,
    warped_mesh,
)

__all__ = [
    "EquispacedLineMesh",
    "EquispacedRectangleMesh",
    "ExponentialStretching",
    "IntervalMesh",
    "Point2D",
    "TensorProductMesh",
    "Uniform",
    "logical_neighbor",
    "warped_mesh",
]
