"""Differential operators on spectral-element and finite-difference spaces."""

from .boundary import BoundaryCondition, Extrapolate, SetDivergence, SetGradient, SetValue
from .finite_difference import (
    AdvectionC2C,
    DivergenceC2F,
    DivergenceF2C,
    FiniteDifferenceOperator,
    FluxCorrectionC2C,
    FluxCorrectionF2F,
    GradientC2F,
    GradientF2C,
    InterpolateC2F,
    InterpolateF2C,
    UpwindBiasedProductC2F,
)
from .spectral_element import Curl, Divergence, Gradient, WeakCurl, WeakDivergence, WeakGradient

__all__ = [
    "AdvectionC2C",
    "BoundaryCondition",
    "Curl",
    "Divergence",
    "DivergenceC2F",
    "DivergenceF2C",
    "Extrapolate",
    "FiniteDifferenceOperator",
    "FluxCorrectionC2C",
    "FluxCorrectionF2F",
    "Gradient",
    "GradientC2F",
    "GradientF2C",
    "InterpolateC2F",
    "InterpolateF2C",
    "SetDivergence",
    "SetGradient",
    "SetValue",
    "UpwindBiasedProductC2F",
    "WeakCurl",
    "WeakDivergence",
    "WeakGradient",
]
