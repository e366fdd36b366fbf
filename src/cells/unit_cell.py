"""
Unit Cell with Conversions to Lattice-Vector Encodings.

A unit cell is stored as (a, b, c, alpha, beta, gamma) with the angles
ALWAYS in radians, whatever the input units were. Cells convert to and
from the metric-tensor vector (G6) and the Selling/Delone encodings
(S6, C3, D7, B4), and support volume, reciprocal cell, arithmetic and
primitive-cell extraction.

Geometric failures never raise. Each cell carries a ``valid`` flag;
construction paths that meet impossible geometry return a flagged cell
(often the degenerate cell of six zeros) and record why in
``invalid_reason``. Any invalid operand makes the result of an
operation invalid. ``UnitCell.checked`` is the raising alternative.

Units:
    Lengths in Angstroms (Å) unless the caller uses another unit.
    Angles are degrees on input from numbers or strings, radians in storage.

Author: Lattice Cell Project
"""

import logging
import numpy as np
from collections.abc import Sequence as SequenceABC
from typing import Any, Optional, Sequence, Tuple

from vectors.metric_tensor import G6, COSINE_LIMIT, zero_small_offdiagonals
from vectors.selling import S6, C3
from vectors.delone import D7, B4
from lattices.bravais import centering_matrix, primitive_transform
from cells.cell_text import parse_cell_values, format_cell_values

logger = logging.getLogger(__name__)

DEGREES_PER_RADIAN = 57.2957795130823

# Smallest length/angle (Å and degrees) accepted from explicit numbers
NUMERIC_LOWER_LIMIT = 0.001
MAX_ANGLE_DEGREES = 179.99
# Smallest squared length, length and angle (radians) accepted from a G6
G6_LOWER_LIMIT = 0.0001
NEAR_ZERO_NORM = 1.0e-10
OFFDIAGONAL_ZERO_TOLERANCE = 1.0e-10


class InvalidGeometryError(ValueError):
    """Raised by ``UnitCell.checked`` when a source does not describe a cell."""


def closure_satisfied(alpha: float, beta: float, gamma: float) -> bool:
    """
    Angle closure test: alpha + beta + gamma - 2*max(alpha, beta, gamma) >= 0.

    Works in any angular unit. Equivalent to each angle being no larger
    than the sum of the other two.
    """
    return alpha + beta + gamma - 2.0 * max(alpha, beta, gamma) >= 0.0


def _degree_problem(a: float, b: float, c: float,
                    alpha: float, beta: float, gamma: float) -> Optional[str]:
    """Return why six degree-space values are not a cell, or None."""
    if not all(x > NUMERIC_LOWER_LIMIT for x in (a, b, c)):
        return f"edge lengths must exceed {NUMERIC_LOWER_LIMIT}"
    if not all(x > NUMERIC_LOWER_LIMIT for x in (alpha, beta, gamma)):
        return f"angles must exceed {NUMERIC_LOWER_LIMIT} degrees"
    if not all(x < MAX_ANGLE_DEGREES for x in (alpha, beta, gamma)):
        return f"angles must be below {MAX_ANGLE_DEGREES} degrees"
    if not alpha + beta + gamma < 360.0:
        return "angle sum must be below 360 degrees"
    if not closure_satisfied(alpha, beta, gamma):
        return "angles violate the closure constraint"
    return None


def _radian_problem(cell: np.ndarray) -> Optional[str]:
    """Return why six radian-space values are not a cell, or None."""
    lengths, angles = cell[:3], cell[3:]
    if not np.all(lengths > G6_LOWER_LIMIT):
        return f"edge lengths must exceed {G6_LOWER_LIMIT}"
    if not np.all(angles > G6_LOWER_LIMIT):
        return "angles must be positive"
    if not np.all(angles < np.pi):
        return "angles must be below pi"
    if not angles.sum() < 2.0 * np.pi:
        return "angle sum must be below 2*pi"
    if not closure_satisfied(*angles):
        return "angles violate the closure constraint"
    return None


class UnitCell:
    """
    Crystallographic unit cell (a, b, c, alpha, beta, gamma).

    Parameters
    ----------
    a, b, c : float
        Edge lengths.
    alpha, beta, gamma : float
        Inter-axial angles in DEGREES. They are stored in radians.

    Attributes
    ----------
    valid : bool
        True if the cell is geometrically realizable.
    invalid_reason : str or None
        Short description of the first failed check for invalid cells.

    Examples
    --------
    >>> cell = UnitCell(1, 1, 1, 90, 90, 90)
    >>> cell.valid, round(cell.volume(), 6)
    (True, 1.0)
    >>> UnitCell(1, 1, 1, 179, 179, 179).valid
    False
    """

    # Let numpy scalars defer to our reflected operators (np.float64(2) * cell)
    __array_ufunc__ = None

    def __init__(self, a: float = 0.0, b: float = 0.0, c: float = 0.0,
                 alpha: float = 0.0, beta: float = 0.0, gamma: float = 0.0):
        values = np.array([a, b, c, alpha, beta, gamma], dtype=np.float64)
        values[3:] /= DEGREES_PER_RADIAN
        values.setflags(write=False)
        self._cell = values
        self.invalid_reason = _degree_problem(a, b, c, alpha, beta, gamma)
        self.valid = self.invalid_reason is None

    @classmethod
    def _from_radians(cls, values: Sequence[float], valid: bool,
                      reason: Optional[str] = None) -> 'UnitCell':
        cell = cls.__new__(cls)
        arr = np.array(values, dtype=np.float64)
        arr.setflags(write=False)
        cell._cell = arr
        cell.valid = bool(valid)
        cell.invalid_reason = None if cell.valid else (reason or "invalid cell")
        return cell

    @classmethod
    def degenerate(cls, reason: str = "degenerate cell") -> 'UnitCell':
        """The canonical degenerate cell (0, 0, 0, 0, 0, 0), flagged invalid."""
        return cls._from_radians(np.zeros(6), False, reason)

    def _flagged(self, valid: bool, reason: str) -> 'UnitCell':
        """Same values with validity narrowed by ``valid``."""
        if valid or not self.valid:
            return self
        return UnitCell._from_radians(self._cell, False, reason)

    # ------------------------------------------------------------------
    # Construction from other representations
    # ------------------------------------------------------------------

    @classmethod
    def from_string(cls, text: str) -> 'UnitCell':
        """
        Build a cell from six numbers in text (lengths, then degrees).

        Applies the same validity rules as numeric construction. Text that
        cannot be parsed yields the degenerate cell, flagged invalid.
        """
        try:
            values = parse_cell_values(text)
        except ValueError as exc:
            logger.debug("Unparseable cell text %r: %s", text, exc)
            return cls.degenerate(str(exc))
        return cls(*values)

    @classmethod
    def from_g6(cls, g6: G6) -> 'UnitCell':
        """
        Convert a metric-tensor vector to lengths and angles.

        Vectors that are flagged invalid, have a near-zero norm, have a
        squared length <= 1e-4 or a cosine outside ``|cos| < 0.9999``
        collapse to the degenerate cell. Angles come from atan2 so they
        stay in (0, pi) even close to 0 or 180 degrees.
        """
        g = g6.to_array()
        reason = None
        if not np.all(np.isfinite(g)):
            reason = "metric-tensor vector is not finite"
        elif g6.norm() < NEAR_ZERO_NORM:
            reason = "metric-tensor vector has near-zero norm"
        elif g[0] <= G6_LOWER_LIMIT or g[1] <= G6_LOWER_LIMIT or g[2] <= G6_LOWER_LIMIT:
            reason = f"squared edge lengths must exceed {G6_LOWER_LIMIT}"
        if reason is None:
            lengths = np.sqrt(g[:3])
            a, b, c = lengths
            cosines = np.array([0.5 * g[3] / (b * c),
                                0.5 * g[4] / (a * c),
                                0.5 * g[5] / (a * b)])
            if np.any(np.abs(cosines) >= COSINE_LIMIT):
                reason = f"cosine of an angle reaches the {COSINE_LIMIT} guard"
            elif not g6.valid:
                reason = "metric-tensor vector flagged invalid"
        if reason is not None:
            logger.debug("Collapsing %r to the degenerate cell: %s", g6, reason)
            return cls.degenerate(reason)

        sines = np.sqrt(1.0 - cosines * cosines)
        values = np.concatenate([lengths, np.arctan2(sines, cosines)])
        problem = _radian_problem(values)
        return cls._from_radians(values, problem is None, problem)

    @classmethod
    def _from_vector(cls, source: Any, name: str) -> 'UnitCell':
        # Geometry is judged on the converted values; the source flag is
        # applied afterwards so the values survive for diagnostics.
        g6 = source.to_g6()
        cell = cls.from_g6(G6(g6.to_array()))
        return cell._flagged(source.valid, f"{name} source vector flagged invalid")

    @classmethod
    def from_s6(cls, s6: S6) -> 'UnitCell':
        return cls._from_vector(s6, "S6")

    @classmethod
    def from_c3(cls, c3: C3) -> 'UnitCell':
        return cls._from_vector(c3, "C3")

    @classmethod
    def from_d7(cls, d7: D7) -> 'UnitCell':
        return cls._from_vector(d7, "D7")

    @classmethod
    def from_b4(cls, b4: B4) -> 'UnitCell':
        return cls._from_vector(b4, "B4")

    @classmethod
    def from_any(cls, source: Any) -> 'UnitCell':
        """
        Build a cell from any supported source.

        Parameters
        ----------
        source : UnitCell, G6, S6, C3, D7, B4, str or sequence of 6 numbers
            Strings and plain sequences are read as lengths plus degrees.

        Raises
        ------
        TypeError
            If the source type is not supported.
        """
        if isinstance(source, UnitCell):
            return source
        if isinstance(source, str):
            return cls.from_string(source)
        for kind, build in _VECTOR_BUILDERS:
            if isinstance(source, kind):
                return build(source)
        if isinstance(source, (SequenceABC, np.ndarray)) and len(source) == 6:
            return cls(*source)
        raise TypeError(f"Cannot build a UnitCell from {type(source).__name__}")

    @classmethod
    def checked(cls, source: Any) -> 'UnitCell':
        """
        Like ``from_any`` but raise for sources that are not a valid cell.

        Raises
        ------
        InvalidGeometryError
            With the reason the cell was rejected.
        """
        cell = cls.from_any(source)
        if not cell.valid:
            raise InvalidGeometryError(cell.invalid_reason)
        return cell

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def __getitem__(self, n):
        """Element access; angles are radians. Out-of-range raises IndexError."""
        value = self._cell[n]
        if np.ndim(value) == 0:
            return float(value)
        return value.copy()

    def __len__(self) -> int:
        return 6

    def __iter__(self):
        return iter(self._cell.tolist())

    @property
    def lengths(self) -> Tuple[float, float, float]:
        return tuple(self._cell[:3].tolist())

    @property
    def angles(self) -> Tuple[float, float, float]:
        """Angles in radians."""
        return tuple(self._cell[3:].tolist())

    def degrees(self) -> np.ndarray:
        """Return (a, b, c, alpha, beta, gamma) with angles in degrees."""
        out = self._cell.copy()
        out[3:] *= DEGREES_PER_RADIAN
        return out

    def to_array(self) -> np.ndarray:
        """Return a writable copy of the six stored values (radians)."""
        return self._cell.copy()

    # ------------------------------------------------------------------
    # Derived geometry
    # ------------------------------------------------------------------

    def volume(self) -> float:
        """
        Cell volume, abc * sqrt(1 - cos²α - cos²β - cos²γ + 2 cosα cosβ cosγ).

        Follows Stout and Jensen. Not guarded: angles that violate the
        closure constraint give NaN, which ``valid`` already signals.
        """
        a, b, c = self._cell[:3]
        ca, cb, cg = np.cos(self._cell[3:])
        with np.errstate(invalid='ignore'):
            return float(a * b * c * np.sqrt(1.0 - ca**2 - cb**2 - cg**2
                                              + 2.0 * ca * cb * cg))

    def inverse(self) -> 'UnitCell':
        """
        Reciprocal cell.

        Lengths a* = bc·sinα / V (cyclic); angles from
        cosα* = (cosβ cosγ - cosα) / |sinβ sinγ| (cyclic). The absolute
        value in the denominator keeps the angles in (0, pi). The result
        has the validity of this cell.
        """
        a, b, c = self._cell[:3]
        alpha, beta, gamma = self._cell[3:]
        cos_a, cos_b, cos_g = np.cos([alpha, beta, gamma])
        sin_a, sin_b, sin_g = np.sin([alpha, beta, gamma])

        with np.errstate(divide='ignore', invalid='ignore'):
            v = self.volume()
            astar = b * c * sin_a / v
            bstar = a * c * sin_b / v
            cstar = a * b * sin_g / v

            cos_astar = (cos_b * cos_g - cos_a) / abs(sin_b * sin_g)
            cos_bstar = (cos_a * cos_g - cos_b) / abs(sin_a * sin_g)
            cos_gstar = (cos_a * cos_b - cos_g) / abs(sin_a * sin_b)
            cos_star = np.array([cos_astar, cos_bstar, cos_gstar])
            angles = np.arctan2(np.sqrt(1.0 - cos_star**2), cos_star)

        values = np.concatenate([[astar, bstar, cstar], angles])
        return UnitCell._from_radians(values, self.valid,
                                      self.invalid_reason or "reciprocal of invalid cell")

    def basis_vectors(self) -> np.ndarray:
        """
        Cartesian edge vectors as rows of a 3x3 matrix.

        Convention: a along x, b in the xy-plane, c completing a
        right-handed set.
        """
        a, b, c = self._cell[:3]
        alpha, beta, gamma = self._cell[3:]

        a1 = np.array([a, 0.0, 0.0])
        a2 = np.array([b * np.cos(gamma), b * np.sin(gamma), 0.0])

        with np.errstate(divide='ignore', invalid='ignore'):
            a3x = c * np.cos(beta)
            a3y = c * (np.cos(alpha) - np.cos(beta) * np.cos(gamma)) / np.sin(gamma)
            a3z_sq = c**2 - a3x**2 - a3y**2
            a3z = np.sqrt(max(a3z_sq, 0.0))  # Protect against numerical issues
        return np.array([a1, a2, [a3x, a3y, a3z]])

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def to_g6(self) -> G6:
        """
        Metric-tensor vector (a², b², c², 2bc cosα, 2ac cosβ, 2ab cosγ).

        Cross terms with magnitude below 1e-10 are set to exactly zero so
        that right angles give clean zeros.
        """
        a, b, c = self._cell[:3]
        cos_a, cos_b, cos_g = np.cos(self._cell[3:])
        values = [a * a, b * b, c * c,
                  2.0 * b * c * cos_a,
                  2.0 * a * c * cos_b,
                  2.0 * a * b * cos_g]
        return G6(zero_small_offdiagonals(values, OFFDIAGONAL_ZERO_TOLERANCE), self.valid)

    def to_s6(self) -> S6:
        return S6.from_g6(self.to_g6())

    def to_c3(self) -> C3:
        return C3.from_g6(self.to_g6())

    def to_d7(self) -> D7:
        return D7.from_g6(self.to_g6())

    def to_b4(self) -> B4:
        return B4(self.basis_vectors(), self.valid)

    @staticmethod
    def distance_between(c1: 'UnitCell', c2: 'UnitCell') -> float:
        """Distance between two cells as the norm of their B4 difference."""
        return (c1.to_b4() - c2.to_b4()).norm()

    # ------------------------------------------------------------------
    # Primitive cells
    # ------------------------------------------------------------------

    def lattice_symmetry_matrix(self, latsym: str) -> np.ndarray:
        """
        6x6 G6 transform from this (centered) cell to a primitive cell.

        Parameters
        ----------
        latsym : str
            Centering letter (P, A, B, C, I, F, R, H) or Bravais code.
        """
        matrix, _ = primitive_transform(self.to_g6(), latsym)
        return matrix

    def lattice_symmetry_matrix_3x3(self, latsym: str) -> np.ndarray:
        """The same transform acting on the edge vectors."""
        return centering_matrix(latsym)

    def primitive_g6(self, latsym: str) -> G6:
        _, primitive = primitive_transform(self.to_g6(), latsym)
        return primitive

    def primitive_cell(self, latsym: str) -> 'UnitCell':
        """Primitive cell of this conventional cell for the given centering."""
        return UnitCell.from_g6(self.primitive_g6(latsym))._flagged(
            self.valid, self.invalid_reason or "primitive of invalid cell")

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _with_lengths(self, lengths: np.ndarray, factor: float) -> 'UnitCell':
        values = np.concatenate([lengths, self._cell[3:]])
        valid = (self.valid and bool(np.isfinite(factor)) and factor > 0
                 and bool(np.all(np.isfinite(values))))
        reason = self.invalid_reason or "scale factor must be finite and positive"
        return UnitCell._from_radians(values, valid, reason)

    def __mul__(self, d: float) -> 'UnitCell':
        """Scale the edge lengths; angles are unchanged."""
        if not np.isscalar(d):
            return NotImplemented
        with np.errstate(invalid='ignore', over='ignore'):
            return self._with_lengths(self._cell[:3] * d, d)

    __rmul__ = __mul__

    def __truediv__(self, d: float) -> 'UnitCell':
        if not np.isscalar(d):
            return NotImplemented
        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            return self._with_lengths(self._cell[:3] / d, d)

    def __add__(self, other: 'UnitCell') -> 'UnitCell':
        """Sum taken in metric-tensor space, then converted back."""
        if not isinstance(other, UnitCell):
            return NotImplemented
        result = UnitCell.from_g6(self.to_g6() + other.to_g6())
        return result._flagged(self.valid and other.valid, "sum with an invalid cell")

    def __sub__(self, other: 'UnitCell') -> 'UnitCell':
        """
        Difference taken in metric-tensor space.

        A difference with norm below 1e-10 gives the degenerate cell.
        """
        if not isinstance(other, UnitCell):
            return NotImplemented
        diff = G6(self.to_g6().to_array() - other.to_g6().to_array())
        if diff.norm() < NEAR_ZERO_NORM:
            return UnitCell.degenerate("difference of equal cells")
        result = UnitCell.from_g6(diff)
        return result._flagged(self.valid and other.valid, "difference with an invalid cell")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnitCell):
            return NotImplemented
        return bool(np.array_equal(self._cell, other._cell))

    def __hash__(self) -> int:
        return hash(tuple(self._cell.tolist()))

    def allclose(self, other: 'UnitCell', atol: float = 1e-8) -> bool:
        """Component-wise comparison (radians for angles)."""
        return bool(np.allclose(self._cell, other._cell, rtol=0.0, atol=atol))

    # ------------------------------------------------------------------
    # Random cells
    # ------------------------------------------------------------------

    @classmethod
    def rand(cls, d: Optional[float] = None, sampler=None) -> 'UnitCell':
        """Random valid cell; see ``cells.random_cells.CellSampler.rand``."""
        from cells.random_cells import rand
        return rand(d, sampler)

    @classmethod
    def rand_delone_reduced(cls, d: Optional[float] = None, sampler=None) -> 'UnitCell':
        from cells.random_cells import rand_delone_reduced
        return rand_delone_reduced(d, sampler)

    @classmethod
    def rand_delone_unreduced(cls, d: Optional[float] = None, sampler=None) -> 'UnitCell':
        from cells.random_cells import rand_delone_unreduced
        return rand_delone_unreduced(d, sampler)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return format_cell_values(self._cell)

    def __repr__(self) -> str:
        a, b, c, alpha, beta, gamma = self.degrees()
        return (f"UnitCell(a={a:.4f}, b={b:.4f}, c={c:.4f}, "
                f"alpha={alpha:.4f}, beta={beta:.4f}, gamma={gamma:.4f}, "
                f"valid={self.valid})")


_VECTOR_BUILDERS = (
    (G6, UnitCell.from_g6),
    (S6, UnitCell.from_s6),
    (C3, UnitCell.from_c3),
    (D7, UnitCell.from_d7),
    (B4, UnitCell.from_b4),
)
