"""Banded column matrices: general bidiagonal and tridiagonal.

A general bidiagonal matrix may be rectangular. Its main diagonal holds
``nd = min(nrows, ncols)`` entries and its second band (super- or
sub-diagonal) ``nd`` or ``nd - 1`` entries, depending on whether the band
runs past the last diagonal entry::

    upper, wide     lower, wide     upper, tall    lower, tall

    1 2 . . .       1 . . . .       1 2 .          1 . .
    . 1 2 . .       2 1 . . .       . 1 2          2 1 .
    . . 1 2 .       . 2 1 . .       . . 1          . 2 1
                                    . . .          . . 2
                                    . . .          . . .

Indices are 0-based.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from scipy import sparse
from scipy.linalg import solve_banded

from .exceptions import BandwidthError, DimensionMismatch


def _scale_or_fill(x: np.ndarray, beta: float) -> np.ndarray:
    if beta == 0:
        x[...] = 0.0
    else:
        x *= beta
    return x


class GeneralBidiagonal:
    """
    Rectangular bidiagonal matrix stored as two bands.

    Parameters
    ----------
    d : np.ndarray
        Main diagonal, length ``min(nrows, ncols)``.
    d2 : np.ndarray
        Second band: ``A[i, i + 1] = d2[i]`` if upper, ``A[j + 1, j] = d2[j]`` if lower.
    is_upper : bool
        Orientation of the second band.
    nrows, ncols : int
        Matrix shape.
    """

    def __init__(self, d: np.ndarray, d2: np.ndarray, is_upper: bool, nrows: int, ncols: int):
        nd, nd2 = self.band_lengths(is_upper, nrows, ncols)
        if len(d) != nd or len(d2) != nd2:
            raise DimensionMismatch(f"bands of length ({len(d)}, {len(d2)}), expected ({nd}, {nd2})")
        self.d = np.asarray(d, dtype=float)
        self.d2 = np.asarray(d2, dtype=float)
        self.is_upper = bool(is_upper)
        self.nrows = int(nrows)
        self.ncols = int(ncols)

    @staticmethod
    def band_lengths(is_upper: bool, nrows: int, ncols: int) -> Tuple[int, int]:
        nd = min(nrows, ncols)
        nd2 = nd if (ncols if is_upper else nrows) > nd else nd - 1
        if nd2 <= 0:
            raise DimensionMismatch(f"a {nrows}x{ncols} matrix has no second band")
        return nd, nd2

    @classmethod
    def allocate(cls, is_upper: bool, nrows: int, ncols: int) -> "GeneralBidiagonal":
        nd, nd2 = cls.band_lengths(is_upper, nrows, ncols)
        return cls(np.zeros(nd), np.zeros(nd2), is_upper, nrows, ncols)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.nrows, self.ncols

    def _check(self, i: int, j: int) -> None:
        if not (0 <= i < self.nrows and 0 <= j < self.ncols):
            raise IndexError(f"index ({i}, {j}) outside matrix of shape {self.shape}")

    def __getitem__(self, ij) -> float:
        i, j = ij
        self._check(i, j)
        if i == j:
            return float(self.d[i])
        if self.is_upper and j == i + 1:
            return float(self.d2[i])
        if not self.is_upper and i == j + 1:
            return float(self.d2[j])
        return 0.0

    def __setitem__(self, ij, value) -> None:
        i, j = ij
        self._check(i, j)
        if i == j:
            self.d[i] = value
        elif self.is_upper and j == i + 1:
            self.d2[i] = value
        elif not self.is_upper and i == j + 1:
            self.d2[j] = value
        elif value != 0:
            raise BandwidthError(f"setting A[{i}, {j}] = {value} leaves the bidiagonal band")

    def matvec(self, b: np.ndarray, out: Optional[np.ndarray] = None,
               alpha: float = 1.0, beta: float = 0.0) -> np.ndarray:
        """``out = alpha * A @ b + beta * out``."""
        b = np.asarray(b, dtype=float)
        if out is None:
            out = np.zeros(self.nrows)
            beta = 0.0
        if len(out) != self.nrows:
            raise DimensionMismatch(f"A has {self.nrows} rows, but out has length {len(out)}")
        if len(b) != self.ncols:
            raise DimensionMismatch(f"A has {self.ncols} columns, but b has length {len(b)}")
        if alpha == 0:
            return _scale_or_fill(out, beta)
        d, d2 = self.d, self.d2
        nd, nd2 = len(d), len(d2)
        if self.is_upper:
            if nd2 == nd:
                out[:nd] = alpha * (d * b[:nd] + d2 * b[1:nd + 1]) + beta * out[:nd]
            else:
                out[:nd - 1] = alpha * (d[:nd - 1] * b[:nd - 1] + d2 * b[1:nd]) + beta * out[:nd - 1]
                out[nd - 1] = alpha * d[nd - 1] * b[nd - 1] + beta * out[nd - 1]
        else:
            out[0] = alpha * d[0] * b[0] + beta * out[0]
            out[1:nd] = alpha * (d[1:nd] * b[1:nd] + d2[:nd - 1] * b[:nd - 1]) + beta * out[1:nd]
            if nd2 == nd:
                out[nd] = alpha * d2[nd - 1] * b[nd - 1] + beta * out[nd]
        out[nd2 + 1:] = 0.0
        return out

    def __matmul__(self, b):
        if isinstance(b, GeneralBidiagonal):
            C = Tridiagonal.allocate(self.nrows)
            return bidiagonal_product(C, self, b)
        return self.matvec(b)

    def to_sparse(self) -> sparse.csr_matrix:
        nd, nd2 = len(self.d), len(self.d2)
        diag = np.arange(nd)
        band = np.arange(nd2)
        if self.is_upper:
            rows = np.concatenate([diag, band])
            cols = np.concatenate([diag, band + 1])
        else:
            rows = np.concatenate([diag, band + 1])
            cols = np.concatenate([diag, band])
        vals = np.concatenate([self.d, self.d2])
        return sparse.csr_matrix((vals, (rows, cols)), shape=self.shape)

    def toarray(self) -> np.ndarray:
        return self.to_sparse().toarray()

    def __repr__(self) -> str:
        kind = "upper" if self.is_upper else "lower"
        return f"GeneralBidiagonal({kind}, {self.nrows}x{self.ncols})"


@dataclass
class Tridiagonal:
    """Square tridiagonal matrix with bands ``dl`` (sub), ``d`` and ``du`` (super)."""

    dl: np.ndarray
    d: np.ndarray
    du: np.ndarray

    def __post_init__(self) -> None:
        n = len(self.d)
        if len(self.dl) != n - 1 or len(self.du) != n - 1:
            raise DimensionMismatch(f"off-diagonals must have length {n - 1}")

    @classmethod
    def allocate(cls, n: int) -> "Tridiagonal":
        return cls(np.zeros(n - 1), np.zeros(n), np.zeros(n - 1))

    @property
    def n(self) -> int:
        return len(self.d)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.n, self.n

    def matvec(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if len(x) != self.n:
            raise DimensionMismatch(f"matrix has {self.n} columns, vector has length {len(x)}")
        y = self.d * x
        y[:-1] += self.du * x[1:]
        y[1:] += self.dl * x[:-1]
        return y

    def solve(self, rhs: np.ndarray) -> np.ndarray:
        """Solve ``A x = rhs`` with a banded LU factorization."""
        ab = np.zeros((3, self.n))
        ab[0, 1:] = self.du
        ab[1] = self.d
        ab[2, :-1] = self.dl
        return solve_banded((1, 1), ab, rhs)

    def to_sparse(self) -> sparse.csr_matrix:
        return sparse.diags([self.dl, self.d, self.du], [-1, 0, 1], shape=self.shape, format="csr")

    def toarray(self) -> np.ndarray:
        return self.to_sparse().toarray()


def bidiagonal_product(C: Tridiagonal, A: GeneralBidiagonal, B: GeneralBidiagonal,
                       alpha: float = 1.0, beta: float = 0.0) -> Tridiagonal:
    """
    ``C = alpha * A @ B + beta * C`` for bidiagonal ``A`` and ``B``.

    Only upper-times-lower and lower-times-upper products are tridiagonal.

    Raises
    ------
    BandwidthError
        If ``A`` and ``B`` have the same orientation; their product has a
        second off-diagonal and does not fit ``C``.
    DimensionMismatch
        If the shapes are incompatible.
    """
    n = C.n
    if A.nrows != B.ncols or A.nrows != n:
        raise DimensionMismatch(
            f"A has {A.nrows} rows, B has {B.ncols} columns, and C has {n} rows/columns, but all three must match"
        )
    if A.ncols != B.nrows:
        raise DimensionMismatch(f"A has {A.ncols} columns, but B has {B.nrows} rows")
    if A.is_upper and B.is_upper:
        raise BandwidthError("A and B are both upper bidiagonal, so C is not tridiagonal")
    if not A.is_upper and not B.is_upper:
        raise BandwidthError("A and B are both lower bidiagonal, so C is not tridiagonal")
    if alpha == 0:
        for band in (C.dl, C.d, C.du):
            _scale_or_fill(band, beta)
        return C

    nd, nd2 = len(A.d), len(A.d2)
    if A.is_upper:
        if nd2 == nd:
            C.d[:] = alpha * (A.d * B.d + A.d2 * B.d2) + beta * C.d
        else:
            C.d[:nd - 1] = alpha * (A.d[:nd - 1] * B.d[:nd - 1] + A.d2 * B.d2) + beta * C.d[:nd - 1]
            C.d[nd - 1] = alpha * A.d[nd - 1] * B.d[nd - 1] + beta * C.d[nd - 1]
        C.du[:nd - 1] = alpha * A.d2[:nd - 1] * B.d[1:nd] + beta * C.du[:nd - 1]
        C.dl[:nd - 1] = alpha * A.d[1:nd] * B.d2[:nd - 1] + beta * C.dl[:nd - 1]
    else:
        C.d[0] = alpha * A.d[0] * B.d[0] + beta * C.d[0]
        C.d[1:nd] = alpha * (A.d[1:nd] * B.d[1:nd] + A.d2[:nd - 1] * B.d2[:nd - 1]) + beta * C.d[1:nd]
        if nd2 == nd:
            C.d[nd] = alpha * A.d2[nd - 1] * B.d2[nd - 1] + beta * C.d[nd]
        C.du[:nd2] = alpha * A.d[:nd2] * B.d2 + beta * C.du[:nd2]
        C.dl[:nd2] = alpha * A.d2 * B.d[:nd2] + beta * C.dl[:nd2]
    C.d[nd2 + 1:] = 0.0
    C.du[nd2:] = 0.0
    C.dl[nd2:] = 0.0
    return C
