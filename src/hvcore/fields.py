"""Fields: node-indexed arrays tagged with the space they live on."""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from numpy.lib.mixins import NDArrayOperatorsMixin

from .exceptions import DimensionMismatch
from .geometry import Basis


def _check_same_space(a, b) -> None:
    if a is not b and a != b:
        raise DimensionMismatch(f"fields live on different spaces: {a!r} and {b!r}")


class Field(NDArrayOperatorsMixin):
    """
    A scalar or vector field on a space.

    Parameters
    ----------
    data : array_like
        Values with shape ``space.shape`` for scalars, or
        ``space.shape + (len(axes),)`` for vectors.
    space : object
        The owning space; it provides ``shape`` and ``local_geometry``.
    basis : Basis, optional
        Component basis of a vector field; ``None`` marks a scalar.
    axes : sequence of int, optional
        Coordinate axes of the vector components, e.g. ``(1, 2)`` or ``(3,)``.

    Notes
    -----
    Arithmetic follows numpy ufunc semantics on the underlying data. A
    scalar field combined with a vector field broadcasts over the
    components; two vector fields must agree on basis and axes.
    """

    __array_priority__ = 10

    def __init__(self, data, space, basis: Optional[Basis] = None, axes: Optional[Sequence[int]] = None):
        data = np.asarray(data)
        if basis is None:
            if axes is not None:
                raise ValueError("scalar fields take no axes")
            expected = tuple(space.shape)
        else:
            if axes is None:
                axes = tuple(space.axes)
            axes = tuple(int(a) for a in axes)
            expected = tuple(space.shape) + (len(axes),)
        if data.shape != expected:
            raise DimensionMismatch(f"field data has shape {data.shape}, expected {expected} on {space!r}")
        self.data = data
        self.space = space
        self.basis = basis
        self.axes = axes

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.data.shape

    @property
    def is_vector(self) -> bool:
        return self.basis is not None

    @property
    def local_geometry(self):
        return self.space.local_geometry

    @property
    def coordinates(self) -> np.ndarray:
        return self.space.local_geometry.coordinates

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self.data
        return self.data.astype(dtype)

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        basis, axes = None, None
        for x in inputs + kwargs.get("out", ()):
            if isinstance(x, Field):
                _check_same_space(self.space, x.space)
                if x.basis is not None:
                    if basis is not None and (x.basis, x.axes) != (basis, axes):
                        raise DimensionMismatch(
                            f"cannot combine {basis.value}{axes} with {x.basis.value}{x.axes} vectors"
                        )
                    basis, axes = x.basis, x.axes

        def unwrap(x):
            if not isinstance(x, Field):
                return x
            if basis is not None and x.basis is None:
                return x.data[..., np.newaxis]
            return x.data

        args = tuple(unwrap(x) for x in inputs)
        out = kwargs.pop("out", None)
        if out is not None:
            kwargs["out"] = tuple(o.data if isinstance(o, Field) else o for o in out)
        result = getattr(ufunc, method)(*args, **kwargs)
        if out is not None:
            return out[0] if len(out) == 1 else out
        if method != "__call__":
            return result

        def wrap(r):
            return Field(r, self.space, basis, axes)

        if isinstance(result, tuple):
            return tuple(wrap(r) for r in result)
        return wrap(result)

    def __getitem__(self, index):
        return self.data[index]

    def __setitem__(self, index, value):
        self.data[index] = np.asarray(value)

    def __len__(self) -> int:
        return len(self.data)

    def copy(self) -> "Field":
        return Field(self.data.copy(), self.space, self.basis, self.axes)

    def similar(self) -> "Field":
        """A zero-filled field of the same space, basis and axes."""
        return Field(np.zeros_like(self.data, dtype=float), self.space, self.basis, self.axes)

    def component(self, axis: int) -> "Field":
        """Scalar field of the component along ``axis``."""
        if self.basis is None:
            raise TypeError("component() requires a vector field")
        return Field(self.data[..., self.axes.index(axis)], self.space)

    def max(self) -> float:
        return float(np.max(self.data))

    def min(self) -> float:
        return float(np.min(self.data))

    def to_dataframe(self) -> pd.DataFrame:
        """Flatten the field and its node coordinates into a table."""
        geom = self.space.local_geometry
        columns = {}
        for k, a in enumerate(geom.axes):
            columns[f"x{a}"] = geom.coordinates[..., k].ravel()
        if self.basis is None:
            columns["value"] = self.data.ravel()
        else:
            prefix = {Basis.CARTESIAN: "u", Basis.COVARIANT: "u_", Basis.CONTRAVARIANT: "u^"}[self.basis]
            for k, a in enumerate(self.axes):
                columns[f"{prefix}{a}"] = self.data[..., k].ravel()
        return pd.DataFrame(columns)

    def __repr__(self) -> str:
        kind = "scalar" if self.basis is None else f"{self.basis.value}{self.axes}"
        return f"Field({kind}, shape={self.data.shape}, space={self.space!r})"


def zeros(space, basis: Optional[Basis] = None, axes: Optional[Sequence[int]] = None) -> Field:
    if basis is None:
        return Field(np.zeros(space.shape), space)
    axes = tuple(space.axes if axes is None else axes)
    return Field(np.zeros(tuple(space.shape) + (len(axes),)), space, basis, axes)


def ones(space) -> Field:
    return Field(np.ones(space.shape), space)


def coordinate_field(space, axis: Optional[int] = None) -> Field:
    """Scalar field of the node coordinate along ``axis``.

    ``axis`` may be omitted on spaces with a single coordinate axis.
    """
    geom = space.local_geometry
    if axis is None:
        if len(geom.axes) != 1:
            raise ValueError(f"space has axes {geom.axes}; pass the axis explicitly")
        axis = geom.axes[0]
    return Field(np.array(geom.coordinate(axis)), space)


def vector_field(space, components: Sequence, basis: Basis = Basis.CARTESIAN,
                 axes: Optional[Sequence[int]] = None) -> Field:
    """Stack scalar fields or arrays into a vector field."""
    axes = tuple(space.axes if axes is None else axes)
    if len(components) != len(axes):
        raise DimensionMismatch(f"{len(components)} components given for axes {axes}")
    arrays = []
    for c in components:
        if isinstance(c, Field):
            _check_same_space(space, c.space)
            c = c.data
        arrays.append(np.broadcast_to(np.asarray(c, dtype=float), space.shape))
    return Field(np.stack(arrays, axis=-1), space, basis, axes)


class FieldVector:
    """Named collection of fields that flattens to one state vector.

    External integrators see a flat ``numpy`` array; :meth:`flatten` and
    :meth:`unflatten` convert in both directions without changing the
    component order.
    """

    def __init__(self, **fields: Field):
        if not fields:
            raise ValueError("FieldVector needs at least one field")
        object.__setattr__(self, "_fields", dict(fields))

    def __getattr__(self, name: str) -> Field:
        try:
            return self.__dict__["_fields"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Field) -> None:
        if name not in self._fields:
            raise AttributeError(f"FieldVector has no component {name!r}")
        current = self._fields[name]
        if not isinstance(value, Field) or value.shape != current.shape:
            raise DimensionMismatch(f"component {name!r} must keep shape {current.shape}")
        self._fields[name] = value

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def items(self):
        return self._fields.items()

    def values(self):
        return self._fields.values()

    @property
    def size(self) -> int:
        return sum(f.data.size for f in self._fields.values())

    def flatten(self) -> np.ndarray:
        return np.concatenate([f.data.ravel() for f in self._fields.values()])

    def unflatten(self, vec: np.ndarray) -> "FieldVector":
        """New FieldVector shaped like this one, holding a copy of ``vec``."""
        vec = np.asarray(vec, dtype=float)
        if vec.shape != (self.size,):
            raise DimensionMismatch(f"state vector has shape {vec.shape}, expected ({self.size},)")
        fields: Dict[str, Field] = {}
        offset = 0
        for name, f in self._fields.items():
            n = f.data.size
            fields[name] = Field(vec[offset:offset + n].reshape(f.shape).copy(), f.space, f.basis, f.axes)
            offset += n
        return FieldVector(**fields)

    def copy(self) -> "FieldVector":
        return FieldVector(**{k: f.copy() for k, f in self._fields.items()})

    def similar(self) -> "FieldVector":
        return FieldVector(**{k: f.similar() for k, f in self._fields.items()})

    def __repr__(self) -> str:
        return f"FieldVector({', '.join(self._fields)})"
