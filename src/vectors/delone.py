"""
Delone Representations (D7 and B4).

The Bravais tetrahedron of a lattice is the set of four vectors
a, b, c, d with a + b + c + d = 0. Two encodings are built on it:

    B4 : the four edge vectors themselves, as a 4x3 Cartesian array
    D7 : (|a|², |b|², |c|², |d|², |b+c|², |a+c|², |a+b|²)

Author: Lattice Cell Project
"""

import numpy as np
from typing import Iterator, Sequence

from vectors.metric_tensor import G6


class D7:
    """
    Seven Delone scalars.

    Parameters
    ----------
    values : sequence of float
        (|a|², |b|², |c|², |d|², |b+c|², |a+c|², |a+b|²).
    valid : bool, optional
        Validity asserted by the producer. Also requires every component
        to be finite and positive (they are all squared lengths).
    """

    __array_ufunc__ = None

    def __init__(self, values: Sequence[float], valid: bool = True):
        arr = np.array(values, dtype=np.float64).reshape(-1)
        if arr.shape != (7,):
            raise ValueError(f"D7 needs exactly 7 components, got {arr.size}")
        arr.setflags(write=False)
        self._d7 = arr
        self.valid = (bool(valid) and bool(np.all(np.isfinite(arr)))
                      and bool(np.all(arr > 0.0)))

    @classmethod
    def from_g6(cls, g6: G6) -> 'D7':
        g = g6.to_array()
        dd = g[0] + g[1] + g[2] + g[3] + g[4] + g[5]
        return cls([g[0], g[1], g[2], dd,
                    g[1] + g[2] + g[3],
                    g[0] + g[2] + g[4],
                    g[0] + g[1] + g[5]], g6.valid)

    def to_g6(self) -> G6:
        d = self._d7
        return G6([d[0], d[1], d[2],
                   d[4] - d[1] - d[2],
                   d[5] - d[0] - d[2],
                   d[6] - d[0] - d[1]], self.valid)

    def __getitem__(self, n):
        return self._d7[n]

    def __len__(self) -> int:
        return 7

    def __iter__(self) -> Iterator[float]:
        return iter(self._d7.tolist())

    def to_array(self) -> np.ndarray:
        return self._d7.copy()

    def norm(self) -> float:
        return float(np.linalg.norm(self._d7))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, D7):
            return NotImplemented
        return bool(np.array_equal(self._d7, other._d7))

    def __hash__(self) -> int:
        return hash(tuple(self._d7.tolist()))

    def __repr__(self) -> str:
        vals = ", ".join(f"{x:.6g}" for x in self._d7)
        return f"D7([{vals}], valid={self.valid})"


class B4:
    """
    Bravais tetrahedron: four Cartesian edge vectors summing to zero.

    Parameters
    ----------
    vectors : array-like
        Shape (4, 3) array of a, b, c, d, or shape (3, 3) array of a, b, c
        (d is then completed as -(a + b + c)).
    valid : bool, optional
        Validity asserted by the producer.

    Attributes
    ----------
    vectors : np.ndarray
        Read-only (4, 3) array; rows are a, b, c, d.
    """

    def __init__(self, vectors, valid: bool = True):
        v = np.array(vectors, dtype=np.float64)
        if v.shape == (3, 3):
            v = np.vstack([v, -v.sum(axis=0)])
        if v.shape != (4, 3):
            raise ValueError(f"B4 needs a (4, 3) or (3, 3) array, got {v.shape}")
        v.setflags(write=False)
        self.vectors = v
        self.valid = bool(valid) and bool(np.all(np.isfinite(v)))

    @classmethod
    def from_g6(cls, g6: G6) -> 'B4':
        """
        Build edge vectors from a metric-tensor vector.

        The Cholesky factor L of the Gram matrix (G = L Lᵀ) is lower
        triangular, so its rows put a along x and b in the xy-plane.
        A metric that is not positive definite yields a NaN-filled,
        invalid B4.
        """
        try:
            basis = np.linalg.cholesky(g6.metric_matrix())
        except np.linalg.LinAlgError:
            return cls(np.full((4, 3), np.nan), False)
        return cls(basis, g6.valid)

    def to_g6(self) -> G6:
        a, b, c = self.vectors[:3]
        return G6([a @ a, b @ b, c @ c, 2.0 * (b @ c), 2.0 * (a @ c), 2.0 * (a @ b)],
                  self.valid)

    def __getitem__(self, n):
        return self.vectors[n]

    def __len__(self) -> int:
        return 4

    def norm(self) -> float:
        return float(np.linalg.norm(self.vectors))

    def __sub__(self, other: 'B4') -> 'B4':
        if not isinstance(other, B4):
            return NotImplemented
        return B4(self.vectors - other.vectors, self.valid and other.valid)

    def __add__(self, other: 'B4') -> 'B4':
        if not isinstance(other, B4):
            return NotImplemented
        return B4(self.vectors + other.vectors, self.valid and other.valid)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, B4):
            return NotImplemented
        return bool(np.array_equal(self.vectors, other.vectors))

    def __hash__(self) -> int:
        return hash(tuple(self.vectors.ravel().tolist()))

    def __repr__(self) -> str:
        return f"B4({self.vectors.tolist()}, valid={self.valid})"
