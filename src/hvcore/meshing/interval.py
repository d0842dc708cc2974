"""One-dimensional meshes: stretched interval meshes and equispaced lines."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union

import numpy as np

from ..domains import IntervalDomain
from ..exceptions import ConstructionError

log = logging.getLogger(__name__)


class Uniform:
    """Equally spaced element faces."""

    def face_positions(self, nelems: int) -> np.ndarray:
        return np.linspace(0.0, 1.0, nelems + 1)

    def __repr__(self) -> str:
        return "Uniform()"


@dataclass(frozen=True)
class ExponentialStretching:
    """Exponential stretching with scale height ``H``.

    Faces cluster near the lower boundary; with ``R`` the domain extent and
    ``h = H / R`` the normalized face position is

        eta(zeta) = -h * log1p(-(1 - exp(-1 / h)) * zeta)

    for ``zeta = i / nelems``.
    """

    H: float

    def __post_init__(self) -> None:
        if not float(self.H) > 0.0:
            raise ConstructionError(f"ExponentialStretching: H must be positive, got {self.H}")

    def face_positions(self, nelems: int, extent: float = 1.0) -> np.ndarray:
        h = float(self.H) / float(extent)
        eta = np.linspace(0.0, 1.0, nelems + 1)
        # expm1(-1/h) == -(1 - exp(-1/h)); the end points are exact, only interior faces use the closed form
        eta[1:-1] = -h * np.log1p(np.expm1(-1.0 / h) * eta[1:-1])
        return eta


Stretching = Union[Uniform, ExponentialStretching]


class IntervalMesh:
    """An interval split into ``nelems`` elements with explicit face coordinates.

    Parameters
    ----------
    domain : IntervalDomain
        The interval being discretized.
    stretching : Uniform or ExponentialStretching, optional
        Face placement rule (default: uniform).
    nelems : int
        Number of elements, at least 1.
    """

    def __init__(self, domain: IntervalDomain, stretching: Stretching = None, *, nelems: int):
        if int(nelems) < 1:
            raise ConstructionError(f"IntervalMesh: nelems must be >= 1, got {nelems}")
        if stretching is None:
            stretching = Uniform()
        self.domain = domain
        self.stretching = stretching
        self.nelems = int(nelems)

        cmin, cmax = float(domain.coord_min), float(domain.coord_max)
        if isinstance(stretching, ExponentialStretching):
            eta = stretching.face_positions(self.nelems, extent=cmax - cmin)
        else:
            eta = stretching.face_positions(self.nelems)
        faces = cmin + (cmax - cmin) * eta
        faces[0], faces[-1] = cmin, cmax
        if not np.all(np.diff(faces) > 0.0):
            # e.g. a scale height so small that the lowest faces round onto coord_min
            raise ConstructionError(
                f"IntervalMesh: {stretching!r} with nelems={self.nelems} on [{cmin}, {cmax}] "
                "does not give strictly increasing faces"
            )
        faces.setflags(write=False)
        self.faces = faces

        if domain.periodic:
            self.boundaries: Mapping[str, int] = MappingProxyType({})
        else:
            lo, hi = domain.boundary_tags
            self.boundaries = MappingProxyType({lo: 5, hi: 6})
        log.debug("Built %s", self)

    @property
    def nfaces(self) -> int:
        return self.nelems + 1

    @property
    def coordinate_axes(self):
        return self.domain.coordinate_axes

    def __len__(self) -> int:
        return self.nelems

    def __repr__(self) -> str:
        return f"{self.nelems}-element IntervalMesh ({self.stretching!r}) of {self.domain}"


class EquispacedLineMesh:
    """Equispaced line of ``n1`` elements; stores only the coordinate range."""

    def __init__(self, domain: IntervalDomain, n1: int):
        if int(n1) < 1:
            raise ConstructionError(f"EquispacedLineMesh: n1 must be >= 1, got {n1}")
        self.domain = domain
        self.n1 = int(n1)
        self.n2 = 1
        self.x1min = float(domain.coord_min)
        self.x1max = float(domain.coord_max)

    @property
    def x1periodic(self) -> bool:
        return self.domain.periodic

    @property
    def nelems(self) -> int:
        return self.n1

    @property
    def nvertices(self) -> int:
        return self.n1 if self.x1periodic else self.n1 + 1

    def coordinate(self, i: int) -> float:
        """Coordinate of the 0-based vertex ``i`` along the line."""
        if not 0 <= i <= self.n1:
            raise IndexError(f"vertex index {i} outside 0..{self.n1}")
        return self.x1min + (self.x1max - self.x1min) * i / self.n1

    def __repr__(self) -> str:
        return f"({self.n1}) EquispacedLineMesh of {self.domain}"
