"""
Selling-Scalar Lattice Representations (S6 and C3).

For cell edges a, b, c add the fourth vector d = -(a + b + c). The six
Selling scalars are the pairwise dot products of these four vectors:

    S6 = (b·c, a·c, a·b, a·d, b·d, c·d)

A lattice is Selling (Delone) reduced when all six scalars are <= 0.
C3 is the same information written as three complex numbers, pairing each
scalar with the one of the "opposite" edge pair:

    C3 = (s0 + i·s3, s1 + i·s4, s2 + i·s5)

Author: Lattice Cell Project
"""

import numpy as np
from typing import Iterator, Sequence

from vectors.metric_tensor import G6

# Pairs of tetrahedron edge vectors (0=a, 1=b, 2=c, 3=d) for each scalar
SELLING_PAIRS = ((1, 2), (0, 2), (0, 1), (0, 3), (1, 3), (2, 3))


class S6:
    """
    Six Selling scalars.

    Parameters
    ----------
    values : sequence of float
        (b·c, a·c, a·b, a·d, b·d, c·d).
    valid : bool, optional
        Validity asserted by the producer; combined with a finiteness check.

    Examples
    --------
    >>> s = S6.from_g6(G6([1, 1, 1, 0, 0, 0]))
    >>> s.to_array()
    array([ 0.,  0.,  0., -1., -1., -1.])
    """

    __array_ufunc__ = None

    def __init__(self, values: Sequence[float], valid: bool = True):
        arr = np.array(values, dtype=np.float64).reshape(-1)
        if arr.shape != (6,):
            raise ValueError(f"S6 needs exactly 6 components, got {arr.size}")
        arr.setflags(write=False)
        self._s6 = arr
        self.valid = bool(valid) and bool(np.all(np.isfinite(arr)))

    @classmethod
    def from_g6(cls, g6: G6) -> 'S6':
        """Convert a metric-tensor vector to Selling scalars."""
        g = g6.to_array()
        bc, ac, ab = 0.5 * g[3], 0.5 * g[4], 0.5 * g[5]
        ad = -(g[0] + ab + ac)
        bd = -(g[1] + ab + bc)
        cd = -(g[2] + ac + bc)
        return cls([bc, ac, ab, ad, bd, cd], g6.valid)

    def to_g6(self) -> G6:
        """Convert back to the metric-tensor vector."""
        s = self._s6
        aa = -(s[1] + s[2] + s[3])
        bb = -(s[0] + s[2] + s[4])
        cc = -(s[0] + s[1] + s[5])
        return G6([aa, bb, cc, 2.0 * s[0], 2.0 * s[1], 2.0 * s[2]], self.valid)

    def __getitem__(self, n):
        return self._s6[n]

    def __len__(self) -> int:
        return 6

    def __iter__(self) -> Iterator[float]:
        return iter(self._s6.tolist())

    def to_array(self) -> np.ndarray:
        return self._s6.copy()

    def norm(self) -> float:
        return float(np.linalg.norm(self._s6))

    def __add__(self, other: 'S6') -> 'S6':
        if not isinstance(other, S6):
            return NotImplemented
        return S6(self._s6 + other._s6, self.valid and other.valid)

    def __sub__(self, other: 'S6') -> 'S6':
        if not isinstance(other, S6):
            return NotImplemented
        return S6(self._s6 - other._s6, self.valid and other.valid)

    def __mul__(self, d: float) -> 'S6':
        if not np.isscalar(d):
            return NotImplemented
        return S6(self._s6 * d, self.valid)

    __rmul__ = __mul__

    def __rmatmul__(self, matrix) -> 'S6':
        m = np.asarray(matrix, dtype=np.float64)
        if m.shape != (6, 6):
            return NotImplemented
        return S6(m @ self._s6, self.valid)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, S6):
            return NotImplemented
        return bool(np.array_equal(self._s6, other._s6))

    def __hash__(self) -> int:
        return hash(tuple(self._s6.tolist()))

    def __repr__(self) -> str:
        vals = ", ".join(f"{x:.6g}" for x in self._s6)
        return f"S6([{vals}], valid={self.valid})"


class C3:
    """
    Selling scalars as three complex numbers.

    Parameters
    ----------
    values : sequence of complex
        Three complex components.
    valid : bool, optional
        Validity asserted by the producer.
    """

    def __init__(self, values: Sequence[complex], valid: bool = True):
        arr = np.array(values, dtype=np.complex128).reshape(-1)
        if arr.shape != (3,):
            raise ValueError(f"C3 needs exactly 3 components, got {arr.size}")
        arr.setflags(write=False)
        self._c3 = arr
        self.valid = bool(valid) and bool(np.all(np.isfinite(arr)))

    @classmethod
    def from_s6(cls, s6: S6) -> 'C3':
        s = s6.to_array()
        return cls(s[:3] + 1j * s[3:], s6.valid)

    @classmethod
    def from_g6(cls, g6: G6) -> 'C3':
        return cls.from_s6(S6.from_g6(g6))

    def to_s6(self) -> S6:
        return S6(np.concatenate([self._c3.real, self._c3.imag]), self.valid)

    def to_g6(self) -> G6:
        return self.to_s6().to_g6()

    def __getitem__(self, n):
        return self._c3[n]

    def __len__(self) -> int:
        return 3

    def norm(self) -> float:
        return float(np.linalg.norm(self._c3))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, C3):
            return NotImplemented
        return bool(np.array_equal(self._c3, other._c3))

    def __hash__(self) -> int:
        return hash(tuple(self._c3.tolist()))

    def __repr__(self) -> str:
        vals = ", ".join(f"{x:.6g}" for x in self._c3)
        return f"C3([{vals}], valid={self.valid})"
