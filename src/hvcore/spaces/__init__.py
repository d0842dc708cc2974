"""Discrete function spaces: node sets with their local geometry."""

from .dss import DSSOperator, dss_sum, integrate, weighted_dss
from .extruded import ExtrudedCenterSpace, ExtrudedFaceSpace, ExtrudedFiniteDifferenceSpace, column
from .finite_difference import CenterFiniteDifferenceSpace, FaceFiniteDifferenceSpace, FiniteDifferenceSpace
from .spectral_element import SpectralElementSpace2D

__all__ = [
    "CenterFiniteDifferenceSpace",
    "DSSOperator",
    "ExtrudedCenterSpace",
    "ExtrudedFaceSpace",
    "ExtrudedFiniteDifferenceSpace",
    "FaceFiniteDifferenceSpace",
    "FiniteDifferenceSpace",
    "SpectralElementSpace2D",
    "column",
    "dss_sum",
    "integrate",
    "weighted_dss",
]
