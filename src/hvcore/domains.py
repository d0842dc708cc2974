"""Continuous domains: intervals, rectangles, cube panels and spheres.

A domain only describes the region and how its edges are labelled. Axes
that are periodic carry no boundary tags; every non-periodic axis must
name exactly two boundaries (low side first).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

import numpy as np

from .exceptions import ConstructionError


BoundaryTags = Optional[Tuple[str, str]]


def _check_axis_tags(name: str, periodic: bool, tags: BoundaryTags) -> None:
    if periodic:
        if tags is not None:
            raise ConstructionError(f"{name}: periodic axis cannot carry boundary tags, got {tags!r}")
        return
    if tags is None:
        raise ConstructionError(f"{name}: non-periodic axis requires two boundary tags")
    if len(tags) != 2:
        raise ConstructionError(f"{name}: expected 2 boundary tags, got {len(tags)}")
    if tags[0] == tags[1]:
        raise ConstructionError(f"{name}: boundary tags must be distinct, got {tags!r}")


def _check_extent(name: str, lo: float, hi: float) -> None:
    if not float(lo) < float(hi):
        raise ConstructionError(f"{name}: require min < max, got ({lo}, {hi})")


@dataclass(frozen=True)
class IntervalDomain:
    """A closed interval ``[coord_min, coord_max]``.

    ``axis="z"`` marks a vertical (column) coordinate, the only kind that
    finite-difference spaces accept; ``axis="x"`` is a horizontal line.
    """

    coord_min: float
    coord_max: float
    boundary_tags: BoundaryTags = None
    periodic: bool = False
    axis: str = "z"

    def __post_init__(self) -> None:
        _check_extent("IntervalDomain", self.coord_min, self.coord_max)
        if self.axis not in ("x", "z"):
            raise ConstructionError(f"IntervalDomain: axis must be 'x' or 'z', got {self.axis!r}")
        if self.boundary_tags is not None:
            object.__setattr__(self, "boundary_tags", tuple(self.boundary_tags))
        _check_axis_tags("IntervalDomain", self.periodic, self.boundary_tags)

    @property
    def coordinate_axes(self) -> Tuple[int, ...]:
        return (3,) if self.axis == "z" else (1,)

    @property
    def dimension(self) -> int:
        return 1

    @property
    def length(self) -> float:
        return float(self.coord_max) - float(self.coord_min)

    @property
    def boundary_names(self) -> Tuple[str, ...]:
        return () if self.boundary_tags is None else self.boundary_tags

    def __str__(self) -> str:
        return f"IntervalDomain[{self.coord_min}, {self.coord_max}]"


@dataclass(frozen=True)
class RectangleDomain:
    """An axis-aligned rectangle with independent periodicity per axis."""

    x1min: float
    x1max: float
    x2min: float
    x2max: float
    x1periodic: bool = False
    x2periodic: bool = False
    x1boundary: BoundaryTags = None
    x2boundary: BoundaryTags = None

    def __post_init__(self) -> None:
        _check_extent("RectangleDomain x1", self.x1min, self.x1max)
        _check_extent("RectangleDomain x2", self.x2min, self.x2max)
        for attr in ("x1boundary", "x2boundary"):
            tags = getattr(self, attr)
            if tags is not None:
                object.__setattr__(self, attr, tuple(tags))
        _check_axis_tags("RectangleDomain x1", self.x1periodic, self.x1boundary)
        _check_axis_tags("RectangleDomain x2", self.x2periodic, self.x2boundary)
        names = self.boundary_names
        if len(set(names)) != len(names):
            raise ConstructionError(f"RectangleDomain: boundary names must be unique, got {names!r}")

    @property
    def coordinate_axes(self) -> Tuple[int, ...]:
        return (1, 2)

    @property
    def dimension(self) -> int:
        return 2

    @property
    def boundary_names(self) -> Tuple[str, ...]:
        return (self.x1boundary or ()) + (self.x2boundary or ())

    def __str__(self) -> str:
        return f"RectangleDomain[{self.x1min}, {self.x1max}] x [{self.x2min}, {self.x2max}]"


@dataclass(frozen=True)
class CubePanelDomain:
    """One ``[-1, 1]^2`` panel of a cubed sphere in gnomonic coordinates.

    Panels are never periodic on their own, so both axes need tags.
    """

    x1boundary: BoundaryTags = ("west", "east")
    x2boundary: BoundaryTags = ("south", "north")

    x1min: float = field(default=-1.0, init=False)
    x1max: float = field(default=1.0, init=False)
    x2min: float = field(default=-1.0, init=False)
    x2max: float = field(default=1.0, init=False)
    x1periodic: bool = field(default=False, init=False)
    x2periodic: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        _check_axis_tags("CubePanelDomain x1", False, self.x1boundary)
        _check_axis_tags("CubePanelDomain x2", False, self.x2boundary)

    @property
    def coordinate_axes(self) -> Tuple[int, ...]:
        return (1, 2)

    @property
    def dimension(self) -> int:
        return 2

    @property
    def boundary_names(self) -> Tuple[str, ...]:
        return tuple(self.x1boundary) + tuple(self.x2boundary)

    def panel_to_sphere(self, x1, x2, radius: float = 1.0) -> np.ndarray:
        """Map equiangular panel coordinates onto the ``+z`` face of a sphere."""
        t1 = np.tan(0.25 * np.pi * np.asarray(x1))
        t2 = np.tan(0.25 * np.pi * np.asarray(x2))
        d = np.sqrt(1.0 + t1 ** 2 + t2 ** 2)
        return radius * np.stack([t1 / d, t2 / d, 1.0 / d], axis=-1)


@dataclass(frozen=True)
class SphereDomain:
    """The surface of a sphere; closed, so it has no boundaries."""

    radius: float

    def __post_init__(self) -> None:
        if not float(self.radius) > 0.0:
            raise ConstructionError(f"SphereDomain: radius must be positive, got {self.radius}")

    @property
    def coordinate_axes(self) -> Tuple[int, ...]:
        return (1, 2, 3)

    @property
    def dimension(self) -> int:
        return 2

    @property
    def boundary_names(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class WarpedDomain:
    """A rectangle whose mesh vertices are displaced by ``warp``.

    ``warp(X1, X2)`` receives the equispaced vertex coordinates as two
    ``(n1 + 1, n2 + 1)`` arrays and returns the displaced pair. The
    callable must leave vertices on non-periodic edges untouched; the mesh
    does not check this.
    """

    domain: RectangleDomain
    warp: Callable[[np.ndarray, np.ndarray], Tuple[np.ndarray, np.ndarray]]

    def __getattr__(self, name):
        # delegate extents, periodicity and tags to the underlying rectangle
        if name in ("domain", "warp"):
            raise AttributeError(name)
        return getattr(self.domain, name)
