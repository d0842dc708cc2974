"""Element connectivity over structured meshes."""

from .base import (
    BoundaryFaceIterator,
    InteriorFaceIterator,
    StructuredTopology,
    Vertex,
    VertexIterator,
    face_node_index,
    vertex_node_index,
)
from .grid import GridTopology, GridTopology1D
from .tensor_product import TensorProductTopology

__all__ = [
    "BoundaryFaceIterator",
    "GridTopology",
    "GridTopology1D",
    "InteriorFaceIterator",
    "StructuredTopology",
    "TensorProductTopology",
    "Vertex",
    "VertexIterator",
    "face_node_index",
    "vertex_node_index",
]
