"""
Metric-Tensor Vector (G6) for Lattice Representations.

The G6 vector packs the symmetric Gram (metric) tensor of the three cell
edge vectors a, b, c into six scalars:

    g0 = a·a,  g1 = b·b,  g2 = c·c,
    g3 = 2 b·c,  g4 = 2 a·c,  g5 = 2 a·b

It is the common currency between unit cells, the Selling/Delone scalar
vectors and the primitive-cell transforms.

Units:
    Squared lengths in Å² (or whatever length unit the cell uses).

Author: Lattice Cell Project
"""

import numpy as np
from typing import Iterator, Optional, Sequence, Union

# Cosines at or beyond this magnitude mark a collapsed or unstable cell
COSINE_LIMIT = 0.9999


class G6:
    """
    Six-component metric-tensor vector.

    Parameters
    ----------
    values : sequence of float
        The six components (g0..g5).
    valid : bool, optional
        Validity asserted by the producer. The stored flag is the
        conjunction of this and the geometric check in ``is_geometric``.

    Attributes
    ----------
    valid : bool
        True if the vector describes a physically realizable cell.

    Examples
    --------
    >>> g = G6([1.0, 1.0, 1.0, 0.0, 0.0, 0.0])
    >>> g.valid
    True
    >>> g.norm()
    1.7320508075688772
    """

    # Let numpy defer to the reflected operators (matrix @ g6, scalar * g6)
    __array_ufunc__ = None

    def __init__(self, values: Sequence[float], valid: bool = True):
        arr = np.array(values, dtype=np.float64).reshape(-1)
        if arr.shape != (6,):
            raise ValueError(f"G6 needs exactly 6 components, got {arr.size}")
        arr.setflags(write=False)
        self._g6 = arr
        self.valid = bool(valid) and G6.is_geometric(arr)

    @staticmethod
    def is_geometric(g: Sequence[float]) -> bool:
        """
        Check that six metric values can belong to a real cell.

        Requires finite components, positive squared lengths and all three
        derived cosines strictly inside the guard band ``|cos| < 0.9999``.
        """
        g = np.asarray(g, dtype=np.float64)
        if not np.all(np.isfinite(g)):
            return False
        if g[0] <= 0.0 or g[1] <= 0.0 or g[2] <= 0.0:
            return False
        a, b, c = np.sqrt(g[:3])
        cosines = (0.5 * g[3] / (b * c), 0.5 * g[4] / (a * c), 0.5 * g[5] / (a * b))
        return all(abs(x) < COSINE_LIMIT for x in cosines)

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    def __getitem__(self, n):
        return self._g6[n]

    def __len__(self) -> int:
        return 6

    def __iter__(self) -> Iterator[float]:
        return iter(self._g6.tolist())

    def to_array(self) -> np.ndarray:
        """Return a writable copy of the six components."""
        return self._g6.copy()

    def norm(self) -> float:
        """Euclidean norm of the six components."""
        return float(np.linalg.norm(self._g6))

    # ------------------------------------------------------------------
    # Gram matrix
    # ------------------------------------------------------------------

    def metric_matrix(self) -> np.ndarray:
        """
        Return the symmetric 3x3 Gram matrix.

        Returns
        -------
        np.ndarray
            [[a·a, a·b, a·c],
             [a·b, b·b, b·c],
             [a·c, b·c, c·c]]
        """
        g = self._g6
        return np.array([
            [g[0], 0.5 * g[5], 0.5 * g[4]],
            [0.5 * g[5], g[1], 0.5 * g[3]],
            [0.5 * g[4], 0.5 * g[3], g[2]],
        ])

    @classmethod
    def from_metric_matrix(cls, m: np.ndarray, valid: bool = True) -> 'G6':
        """Build a G6 vector from a 3x3 Gram matrix."""
        m = np.asarray(m, dtype=np.float64)
        return cls([m[0, 0], m[1, 1], m[2, 2],
                    2.0 * m[1, 2], 2.0 * m[0, 2], 2.0 * m[0, 1]], valid)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other: 'G6') -> 'G6':
        if not isinstance(other, G6):
            return NotImplemented
        return G6(self._g6 + other._g6, self.valid and other.valid)

    def __sub__(self, other: 'G6') -> 'G6':
        if not isinstance(other, G6):
            return NotImplemented
        return G6(self._g6 - other._g6, self.valid and other.valid)

    def __neg__(self) -> 'G6':
        return G6(-self._g6, self.valid)

    def __mul__(self, d: float) -> 'G6':
        if not np.isscalar(d):
            return NotImplemented
        return G6(self._g6 * d, self.valid)

    __rmul__ = __mul__

    def __truediv__(self, d: float) -> 'G6':
        if not np.isscalar(d):
            return NotImplemented
        with np.errstate(divide='ignore', invalid='ignore'):
            return G6(self._g6 / d, self.valid and d != 0)

    def __rmatmul__(self, matrix: Union[np.ndarray, Sequence[Sequence[float]]]) -> 'G6':
        """Apply a 6x6 linear transform: ``M @ g6``."""
        m = np.asarray(matrix, dtype=np.float64)
        if m.shape != (6, 6):
            return NotImplemented
        return G6(m @ self._g6, self.valid)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, G6):
            return NotImplemented
        return bool(np.array_equal(self._g6, other._g6))

    def __hash__(self) -> int:
        return hash(tuple(self._g6.tolist()))

    def allclose(self, other: 'G6', atol: float = 1e-8) -> bool:
        """Component-wise comparison within an absolute tolerance."""
        return bool(np.allclose(self._g6, np.asarray(list(other)), rtol=0.0, atol=atol))

    def __repr__(self) -> str:
        vals = ", ".join(f"{x:.6g}" for x in self._g6)
        return f"G6([{vals}], valid={self.valid})"


def zero_small_offdiagonals(values: Sequence[float], tolerance: Optional[float] = 1e-10) -> np.ndarray:
    """
    Return a copy of G6 values with tiny cross terms set to exactly zero.

    Parameters
    ----------
    values : sequence of float
        Six metric-tensor components.
    tolerance : float or None
        Magnitude below which g3..g5 are zeroed. ``None`` disables zeroing.
    """
    v = np.array(values, dtype=np.float64)
    if tolerance is not None:
        small = np.abs(v[3:]) < tolerance
        v[3:][small] = 0.0
    return v
