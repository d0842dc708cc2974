"""Example cases: tendencies with initial states and, where known, exact solutions.

Every case function builds its spaces and operators once and returns a
:class:`~hvcore.datastructures.Case` whose ``rhs(out, state, parameters, t)``
fills ``out`` in place. Cases are plain functions of keyword arguments so
the experiment driver can instantiate them from configuration.

Column cases
------------
- column_wave: first-order wave system on staggered centers/faces
- column_advection: advection of a Gaussian pulse, centered or upwind
- column_stepfunction: upwind advection of a step with inflow boundary

Horizontal and 3D cases
-----------------------
- horizontal_advection: weak-form advection on a periodic spectral-element plane
- extruded_advection: horizontal spectral elements with vertical finite differences
- bickley_jet: vector-invariant shallow water with hyperviscosity
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .datastructures import Case, CaseParameters
from .domains import IntervalDomain, RectangleDomain
from .fields import Field, FieldVector, coordinate_field, vector_field, zeros
from .geometry import Basis, cartesian, covariant, cross, norm, transform
from .meshing import EquispacedRectangleMesh, ExponentialStretching, IntervalMesh
from .operators import (
    AdvectionC2C,
    Curl,
    Divergence,
    DivergenceF2C,
    Gradient,
    GradientC2F,
    SetValue,
    UpwindBiasedProductC2F,
    WeakCurl,
    WeakDivergence,
    WeakGradient,
)
from .spaces import ExtrudedFiniteDifferenceSpace, FiniteDifferenceSpace, SpectralElementSpace2D, weighted_dss
from .spectral import GLL
from .topologies import GridTopology

log = logging.getLogger(__name__)

COLUMN_BOUNDARIES = ("bottom", "top")


# ========================================================
# Space builders
# ========================================================


def column_space(zmin: float, zmax: float, nelems: int, stretching_H: Optional[float] = None,
                 boundary_tags: Tuple[str, str] = COLUMN_BOUNDARIES) -> FiniteDifferenceSpace:
    """Vertical column on ``[zmin, zmax]``, optionally exponentially stretched."""
    domain = IntervalDomain(zmin, zmax, boundary_tags=boundary_tags)
    stretching = None if stretching_H is None else ExponentialStretching(stretching_H)
    return FiniteDifferenceSpace(IntervalMesh(domain, stretching, nelems=nelems))


def periodic_plane(xmin: float, xmax: float, helem: int, Nq: int) -> SpectralElementSpace2D:
    """Doubly periodic square of ``helem x helem`` spectral elements."""
    domain = RectangleDomain(xmin, xmax, xmin, xmax, x1periodic=True, x2periodic=True)
    topology = GridTopology(EquispacedRectangleMesh(domain, helem, helem))
    return SpectralElementSpace2D(topology, GLL(Nq))


# ========================================================
# Column cases
# ========================================================


def column_wave(nelems: int = 30, wave_speed: float = 1.0, t_end: float = 4 * np.pi,
                stretching_H: Optional[float] = None) -> Case:
    """
    Linear wave system ``du/dt = -c dp/dz``, ``dp/dt = -c du/dz`` on ``[0, 4 pi]``.

    ``u`` lives at centers and ``p`` is a Cartesian vertical vector at
    faces; ``u`` vanishes at both ends. The exact solution is
    ``u = sin(z) cos(ct)``, ``p = -cos(z) sin(ct)``.
    """
    config = CaseParameters(name="column_wave", nelems=nelems, wave_speed=wave_speed, t_end=t_end,
                            domain_min=0.0, domain_max=4 * np.pi, stretching_H=stretching_H)
    space = column_space(config.domain_min, config.domain_max, nelems, stretching_H)
    zc = coordinate_field(space.center)
    zf = coordinate_field(space.face)

    grad = GradientC2F(space, bottom=SetValue(0.0), top=SetValue(0.0))
    div = DivergenceF2C(space)
    c = float(wave_speed)

    def rhs(out: FieldVector, state: FieldVector, parameters, t: float) -> FieldVector:
        out.p[...] = -c * cartesian(grad(state.u))
        out.u[...] = -c * div(state.p)
        return out

    def exact(t: float) -> FieldVector:
        u = np.sin(zc) * np.cos(c * t)
        p = vector_field(space.face, [-np.cos(zf.data) * np.sin(c * t)])
        return FieldVector(u=u, p=p)

    y0 = FieldVector(u=np.sin(zc), p=zeros(space.face, Basis.CARTESIAN))
    return Case(rhs, y0, (0.0, float(t_end)), exact=exact, config=config)


def column_advection(nelems: int = 256, velocity: float = 1.0, t_end: float = 1.0,
                     pulse_width: float = 0.3, upwind: bool = False,
                     stretching_H: Optional[float] = None) -> Case:
    """
    Advection of ``theta = exp(-((z - 1/2) / width)^2)`` on ``[0, 5]``.

    ``upwind=False`` uses the centered :class:`AdvectionC2C`;
    ``upwind=True`` the conservative first-order upwind flux
    ``-div(UpwindBiasedProductC2F(w, theta))``. Both ends carry zero inflow
    values. The exact solution translates the pulse with the velocity.
    """
    config = CaseParameters(name="column_advection", nelems=nelems, velocity=velocity, t_end=t_end,
                            pulse_width=pulse_width, upwind=upwind, domain_min=0.0, domain_max=5.0,
                            stretching_H=stretching_H)
    space = column_space(config.domain_min, config.domain_max, nelems, stretching_H)
    zc = coordinate_field(space.center)
    w = vector_field(space.face, [velocity])

    def profile(z):
        return np.exp(-(((z - 0.5) / pulse_width) ** 2))

    if upwind:
        flux = UpwindBiasedProductC2F(space, bottom=SetValue(0.0), top=SetValue(0.0))
        div = DivergenceF2C(space)

        def tendency(theta: Field) -> Field:
            return -div(flux(w, theta))
    else:
        advect = AdvectionC2C(space, bottom=SetValue(0.0), top=SetValue(0.0))

        def tendency(theta: Field) -> Field:
            return -advect(w, theta)

    def rhs(out: FieldVector, state: FieldVector, parameters, t: float) -> FieldVector:
        out.theta[...] = tendency(state.theta)
        return out

    def exact(t: float) -> FieldVector:
        return FieldVector(theta=profile(zc - velocity * t))

    y0 = FieldVector(theta=profile(zc))
    return Case(rhs, y0, (0.0, float(t_end)), exact=exact, config=config, conserved="theta")


def column_stepfunction(nelems: int = 128, velocity: float = -1.0, t_end: float = 8.0,
                        stretching_H: Optional[float] = None) -> Case:
    """
    Upwind advection of the step ``theta = H(z - 1)`` on ``[-10, 10]``.

    Inflow values are 0 at the bottom and 1 at the top, so with the
    default downward velocity the step moves towards the bottom.
    """
    config = CaseParameters(name="column_stepfunction", nelems=nelems, velocity=velocity, t_end=t_end,
                            upwind=True, domain_min=-10.0, domain_max=10.0, stretching_H=stretching_H)
    space = column_space(config.domain_min, config.domain_max, nelems, stretching_H)
    zc = coordinate_field(space.center)
    w = vector_field(space.face, [velocity])
    flux = UpwindBiasedProductC2F(space, bottom=SetValue(0.0), top=SetValue(1.0))
    div = DivergenceF2C(space)

    def rhs(out: FieldVector, state: FieldVector, parameters, t: float) -> FieldVector:
        out.theta[...] = -div(flux(w, state.theta))
        return out

    def exact(t: float) -> FieldVector:
        return FieldVector(theta=np.heaviside(zc - 1.0 - velocity * t, 1.0))

    y0 = FieldVector(theta=np.heaviside(zc - 1.0, 1.0))
    return Case(rhs, y0, (0.0, float(t_end)), exact=exact, config=config)


# ========================================================
# Horizontal and extruded cases
# ========================================================


def horizontal_advection(helem: int = 4, Nq: int = 8, velocity: float = 1.0,
                         t_end: float = 2 * np.pi) -> Case:
    """
    Weak-form advection ``dtheta/dt = -div(theta u)`` with ``u = (velocity, 0)``
    on the periodic square ``[-pi, pi]^2``.

    The exact solution is ``sin(x - velocity t) cos(y)``; one full period
    returns the initial state.
    """
    config = CaseParameters(name="horizontal_advection", helem=helem, Nq=Nq, velocity=velocity, t_end=t_end,
                            domain_min=-np.pi, domain_max=np.pi)
    space = periodic_plane(config.domain_min, config.domain_max, helem, Nq)
    x = coordinate_field(space, 1)
    y = coordinate_field(space, 2)
    u = vector_field(space, [velocity, 0.0])
    wdiv = WeakDivergence()

    def rhs(out: FieldVector, state: FieldVector, parameters, t: float) -> FieldVector:
        out.theta[...] = -wdiv(state.theta * u)
        weighted_dss(out)
        return out

    def exact(t: float) -> FieldVector:
        return FieldVector(theta=np.sin(x - velocity * t) * np.cos(y))

    return Case(rhs, exact(0.0), (0.0, float(t_end)), exact=exact, config=config, conserved="theta")


def extruded_advection(helem: int = 4, Nq: int = 4, nelems: int = 32, velocity: float = 1.0,
                       vertical_velocity: float = 0.0, pulse_width: float = 0.1,
                       t_end: float = 1.0) -> Case:
    """
    Advection of ``sin(x) exp(-((z - 1/2) / width)^2)`` on ``[-pi, pi]^2 x [0, 1]``.

    The horizontal flux goes through the weak divergence and weighted DSS
    level by level; the vertical part is centered :class:`AdvectionC2C` with
    zero boundary values. The translated profile is exact while the pulse
    stays clear of the top and bottom.
    """
    config = CaseParameters(name="extruded_advection", helem=helem, Nq=Nq, nelems=nelems, velocity=velocity,
                            vertical_velocity=vertical_velocity, pulse_width=pulse_width, t_end=t_end,
                            domain_min=0.0, domain_max=1.0)
    horizontal = periodic_plane(-np.pi, np.pi, helem, Nq)
    space = ExtrudedFiniteDifferenceSpace(horizontal, column_space(0.0, 1.0, nelems))
    x = coordinate_field(space.center, 1)
    z = coordinate_field(space.center, 3)
    uh = vector_field(space.center, [velocity, 0.0], axes=(1, 2))
    w = vector_field(space.face, [vertical_velocity], axes=(3,))
    wdiv = WeakDivergence()
    advect = AdvectionC2C(space, bottom=SetValue(0.0), top=SetValue(0.0))

    def rhs(out: FieldVector, state: FieldVector, parameters, t: float) -> FieldVector:
        theta = state.theta
        out.theta[...] = -wdiv(theta * uh) - advect(w, theta)
        weighted_dss(out)
        return out

    def exact(t: float) -> FieldVector:
        zt = z - 0.5 - vertical_velocity * t
        return FieldVector(theta=np.sin(x - velocity * t) * np.exp(-((zt / pulse_width) ** 2)))

    return Case(rhs, exact(0.0), (0.0, float(t_end)), exact=exact, config=config, conserved="theta")


# ========================================================
# Bickley jet
# ========================================================


@dataclass(frozen=True)
class BickleyJetParameters:
    epsilon: float = 0.1  # perturbation size
    l: float = 0.5  # Gaussian width
    k: float = 0.5  # sinusoidal wavenumber
    rho0: float = 1.0
    g: float = 10.0
    D4: float = 1e-4  # hyperdiffusion coefficient


def bickley_initial_state(space: SpectralElementSpace2D, p: BickleyJetParameters) -> FieldVector:
    """Unstable jet ``U = sech(y)^2`` with a vortical perturbation and tracer ``sin(ky)``."""
    x = coordinate_field(space, 1).data
    y = coordinate_field(space, 2).data
    gaussian = np.exp(-((y + p.l / 10) ** 2) / (2 * p.l ** 2))
    u1 = gaussian * (y + p.l / 10) / p.l ** 2 * np.cos(p.k * x) * np.cos(p.k * y)
    u1 += p.k * gaussian * np.cos(p.k * x) * np.sin(p.k * y)
    u2 = -p.k * gaussian * np.sin(p.k * x) * np.cos(p.k * y)
    U = np.cosh(y) ** -2
    u = vector_field(space, [U + p.epsilon * u1, p.epsilon * u2])
    rho = Field(np.full(space.shape, p.rho0), space)
    return FieldVector(rho=rho, u=covariant(u), rhotheta=rho * np.sin(p.k * y))


def total_energy(state: FieldVector, p: BickleyJetParameters) -> float:
    """Kinetic plus potential energy ``sum(WJ (rho |u|^2 / 2 + g rho^2 / 2))``."""
    rho = state.rho
    energy = rho * norm(state.u) ** 2 / 2 + p.g * rho ** 2 / 2
    return float(np.sum(rho.space.local_geometry.WJ * energy.data))


def bickley_jet(helem: int = 16, Nq: int = 4, t_end: float = 80.0, hyperviscosity: float = 1e-4) -> Case:
    """
    Shallow-water Bickley jet in vector-invariant form on ``[-2 pi, 2 pi]^2``.

    The tendency applies fourth-order hyperviscosity as two passes of the
    weak vector Laplacian ``wgrad(div u) - wcurl(curl u)`` with a weighted
    DSS in between, then adds the mass, momentum and tracer fluxes.
    """
    config = CaseParameters(name="bickley_jet", helem=helem, Nq=Nq, t_end=t_end, hyperviscosity=hyperviscosity,
                            domain_min=-2 * np.pi, domain_max=2 * np.pi)
    params = BickleyJetParameters(D4=hyperviscosity)
    space = periodic_plane(config.domain_min, config.domain_max, helem, Nq)

    sdiv = Divergence()
    wdiv = WeakDivergence()
    grad = Gradient()
    wgrad = WeakGradient()
    curl = Curl()
    wcurl = WeakCurl()

    def vector_laplacian(u: Field) -> Field:
        return wgrad(sdiv(u)) - transform(wcurl(curl(u)), Basis.COVARIANT)

    def rhs(out: FieldVector, state: FieldVector, p: BickleyJetParameters, t: float) -> FieldVector:
        rho, u, rhotheta = state.rho, state.u, state.rhotheta

        out.u[...] = vector_laplacian(u)
        out.rhotheta[...] = wdiv(grad(rhotheta))
        out.rho[...] = 0.0
        weighted_dss(out)
        out.u[...] = -p.D4 * vector_laplacian(out.u)
        out.rhotheta[...] = -p.D4 * wdiv(grad(out.rhotheta))

        out.rho[...] = -wdiv(rho * u)
        out.u[...] += -grad(p.g * rho + norm(u) ** 2 / 2) + cross(u, curl(u))
        out.rhotheta[...] += -wdiv(rhotheta * u)
        weighted_dss(out)
        return out

    y0 = bickley_initial_state(space, params)
    log.info("Bickley jet: %d x %d elements, Nq=%d, initial energy %.6e", helem, helem, Nq, total_energy(y0, params))
    return Case(rhs, y0, (0.0, float(t_end)), parameters=params, config=config, conserved="rho")
