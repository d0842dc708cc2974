"""Adapter between in-place tendencies and ``scipy.integrate.solve_ivp``.

A tendency has the signature ``rhs(out, state, parameters, t)``: it reads
``state`` (a :class:`FieldVector`), writes the time derivative into
``out`` and returns it. It keeps no state between calls, so the integrator
may evaluate it at any time and in any order.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Tuple

import numpy as np
from scipy.integrate import solve_ivp

from .fields import FieldVector

log = logging.getLogger(__name__)

Tendency = Callable[[FieldVector, FieldVector, Any, float], FieldVector]


def ivp_function(rhs: Tendency, template: FieldVector, parameters: Any = None) -> Callable[[float, np.ndarray], np.ndarray]:
    """Wrap ``rhs`` as ``f(t, y) -> dy/dt`` on flat state vectors."""

    def f(t: float, y: np.ndarray) -> np.ndarray:
        state = template.unflatten(y)
        out = state.similar()
        rhs(out, state, parameters, t)
        return out.flatten()

    return f


def integrate(rhs: Tendency, y0: FieldVector, t_span: Tuple[float, float], parameters: Any = None,
              t_eval: Optional[np.ndarray] = None, **options) -> Tuple[np.ndarray, list]:
    """
    Integrate ``rhs`` from ``y0`` over ``t_span``.

    Parameters
    ----------
    rhs : callable
        In-place tendency ``rhs(out, state, parameters, t)``.
    y0 : FieldVector
        Initial state; it is not modified.
    t_span : tuple of float
        Start and end time.
    parameters : object, optional
        Passed unchanged to every ``rhs`` call.
    t_eval : array_like, optional
        Output times (default: end points only).
    **options
        Forwarded to :func:`scipy.integrate.solve_ivp` (``method``,
        ``rtol``, ``atol``, ``max_step``, ...).

    Returns
    -------
    times : np.ndarray
        Output times.
    states : list of FieldVector
        State at each output time.

    Raises
    ------
    RuntimeError
        If the integrator does not reach the end of ``t_span``.
    """
    if t_eval is None:
        t_eval = np.asarray(t_span, dtype=float)
    options.setdefault("method", "RK45")
    log.debug("Integrating %d unknowns over %s with %s", y0.size, t_span, options)
    sol = solve_ivp(ivp_function(rhs, y0, parameters), t_span, y0.flatten(), t_eval=t_eval, **options)
    if not sol.success:
        raise RuntimeError(f"time integration failed: {sol.message}")
    log.debug("solve_ivp finished: %d rhs evaluations", sol.nfev)
    states = [y0.unflatten(sol.y[:, k]) for k in range(sol.y.shape[1])]
    return sol.t, states
