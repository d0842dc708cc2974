"""Error taxonomy shared by meshes, topologies, spaces and operators.

All errors are raised eagerly: construction problems when an object is
built, range problems at the call boundary, and shape problems before any
output buffer is touched.
"""


class ConstructionError(ValueError, AssertionError):
    """Invalid configuration detected while building an object.

    Also an ``AssertionError``: construction preconditions such as a column
    mesh lying along the vertical axis are assertions in the space contract.
    """


class RangeError(IndexError, AssertionError):
    """Element, face or vertex number outside its valid range."""


class DimensionMismatch(ValueError):
    """Array or field shape does not match the declared space."""


class BandwidthError(ValueError):
    """Banded-matrix operation whose result would not fit the target band."""
