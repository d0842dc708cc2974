"""Data structures for experiment configuration and results.

Structure:
- CaseParameters: input configuration of an example case
- Metrics: output results of a run
- Case: everything needed to integrate a case
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Optional, Tuple

import pandas as pd

from .fields import FieldVector


# ========================================================
# Parameters (Input Configuration)
# ========================================================


@dataclass
class CaseParameters:
    """Resolution and physical parameters shared by the example cases."""

    name: str = ""
    nelems: int = 64  # vertical cells
    helem: int = 4  # horizontal elements per direction
    Nq: int = 4  # GLL points per direction
    t_end: float = 1.0
    velocity: float = 1.0
    vertical_velocity: float = 0.0
    pulse_width: float = 0.3
    domain_min: float = 0.0
    domain_max: float = 1.0
    stretching_H: Optional[float] = None
    upwind: bool = False
    wave_speed: float = 1.0
    hyperviscosity: float = 0.0

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])


# ========================================================
# Metrics (Output Results)
# ========================================================


@dataclass
class Metrics:
    """Run metrics - computed after integration."""

    max_error: float = float("nan")
    l2_error: float = float("nan")
    mass_initial: float = 0.0
    mass_final: float = 0.0
    wall_time_seconds: float = 0.0
    rhs_evaluations: int = 0

    @property
    def mass_drift(self) -> float:
        return self.mass_final - self.mass_initial

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])


# ========================================================
# Case (what the driver integrates)
# ========================================================


@dataclass
class Case:
    """A tendency with its initial state and, when known, the exact solution."""

    rhs: Callable
    y0: FieldVector
    t_span: Tuple[float, float]
    parameters: Any = None
    exact: Optional[Callable[[float], FieldVector]] = None
    config: CaseParameters = field(default_factory=CaseParameters)
    conserved: Optional[str] = None  # component whose integral is tracked
