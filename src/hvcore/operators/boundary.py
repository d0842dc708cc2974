"""Boundary policies for finite-difference operators.

Operators are constructed with one policy per boundary, keyed by the
boundary name of the column::

    grad = GradientC2F(space, bottom=SetValue(0.0), top=SetGradient(1.0))

Every operator declares which policy kinds it accepts and whether both
ends need one; anything else is rejected when the operator is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..exceptions import ConstructionError


class BoundaryCondition:
    """Base of all boundary policies."""


@dataclass(frozen=True)
class SetValue(BoundaryCondition):
    """Prescribe the value on the boundary face (Dirichlet)."""

    value: Any


@dataclass(frozen=True)
class SetGradient(BoundaryCondition):
    """Prescribe the vertical gradient on the boundary face (Neumann)."""

    value: Any


@dataclass(frozen=True)
class SetDivergence(BoundaryCondition):
    """Prescribe the divergence on the boundary face."""

    value: Any


@dataclass(frozen=True)
class Extrapolate(BoundaryCondition):
    """Continue the nearest interior stencil to the boundary."""


Policies = Tuple[Optional[BoundaryCondition], Optional[BoundaryCondition]]


def resolve_boundaries(opname: str, space, policies: Dict[str, BoundaryCondition],
                       allowed: Tuple[type, ...], required: bool) -> Policies:
    """
    Validate ``policies`` and return them ordered ``(left, right)``.

    Parameters
    ----------
    opname : str
        Operator name used in error messages.
    space : object
        Any finite-difference or extruded space; provides the boundary names.
    policies : dict
        Boundary name to policy.
    allowed : tuple of type
        Accepted policy classes.
    required : bool
        Whether both ends must carry a policy.

    Raises
    ------
    ConstructionError
        On unknown boundary names, disallowed policy kinds or missing
        required policies.
    """
    names = (space.left_boundary_name, space.right_boundary_name)
    for name, bc in policies.items():
        if name not in names:
            raise ConstructionError(f"{opname}: unknown boundary {name!r}; column boundaries are {names}")
        if not isinstance(bc, allowed):
            accepted = ", ".join(cls.__name__ for cls in allowed) or "none"
            raise ConstructionError(
                f"{opname}: {type(bc).__name__} is not supported on {name!r} (accepted: {accepted})"
            )
    left, right = (policies.get(n) for n in names)
    if required:
        missing = [n for n, bc in zip(names, (left, right)) if bc is None]
        if missing:
            raise ConstructionError(f"{opname}: missing boundary condition for {', '.join(missing)}")
    return left, right
