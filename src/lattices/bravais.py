"""
Centering Transforms from Conventional to Primitive Cells.

A conventional (centered) cell holds more than one lattice point. This
module maps a lattice-centering symbol to the linear transform that
produces a primitive cell, both as a 3x3 matrix acting on the edge
vectors and as the equivalent 6x6 matrix acting on the G6 vector.

Centering symbols:
    - P: Primitive (1 lattice point)
    - A, B, C: Base-centered on the bc, ac or ab face (2 points)
    - I: Body-centered (2 points)
    - F: Face-centered (4 points)
    - R: Rhombohedral, hexagonal axes, obverse setting (3 points)
    - H: Hexagonal (primitive, 1 point)

The two-letter Bravais codes (cP, cI, cF, tP, tI, oP, oI, oF, oC, hP, hR,
mP, mC, aP) are accepted as well; their second letter is the centering.

Author: Lattice Cell Project
"""

import numpy as np
from typing import Dict, Tuple

from vectors.metric_tensor import G6


# Rows are the primitive vectors in terms of the conventional a, b, c
CENTERING_MATRICES: Dict[str, np.ndarray] = {
    'P': np.eye(3),
    'H': np.eye(3),
    'A': np.array([
        [1.0, 0.0, 0.0],
        [0.0, 0.5, -0.5],
        [0.0, 0.5, 0.5],
    ]),
    'B': np.array([
        [0.5, 0.0, -0.5],
        [0.0, 1.0, 0.0],
        [0.5, 0.0, 0.5],
    ]),
    'C': np.array([
        [0.5, 0.5, 0.0],
        [-0.5, 0.5, 0.0],
        [0.0, 0.0, 1.0],
    ]),
    'I': np.array([
        [-0.5, 0.5, 0.5],
        [0.5, -0.5, 0.5],
        [0.5, 0.5, -0.5],
    ]),
    'F': np.array([
        [0.0, 0.5, 0.5],
        [0.5, 0.0, 0.5],
        [0.5, 0.5, 0.0],
    ]),
    'R': np.array([
        [2.0 / 3.0, 1.0 / 3.0, 1.0 / 3.0],
        [-1.0 / 3.0, 1.0 / 3.0, 1.0 / 3.0],
        [-1.0 / 3.0, -2.0 / 3.0, 1.0 / 3.0],
    ]),
}

# Fractional coordinates of the lattice points in one conventional cell
CENTERING_MOTIFS: Dict[str, np.ndarray] = {
    'P': np.array([[0.0, 0.0, 0.0]]),
    'H': np.array([[0.0, 0.0, 0.0]]),
    'A': np.array([[0.0, 0.0, 0.0], [0.0, 0.5, 0.5]]),
    'B': np.array([[0.0, 0.0, 0.0], [0.5, 0.0, 0.5]]),
    'C': np.array([[0.0, 0.0, 0.0], [0.5, 0.5, 0.0]]),
    'I': np.array([[0.0, 0.0, 0.0], [0.5, 0.5, 0.5]]),
    'F': np.array([
        [0.0, 0.0, 0.0],
        [0.5, 0.5, 0.0],
        [0.5, 0.0, 0.5],
        [0.0, 0.5, 0.5],
    ]),
    'R': np.array([
        [0.0, 0.0, 0.0],
        [2.0 / 3.0, 1.0 / 3.0, 1.0 / 3.0],
        [1.0 / 3.0, 2.0 / 3.0, 2.0 / 3.0],
    ]),
}

LATTICE_TYPES = {
    'cP', 'cI', 'cF',  # Cubic
    'tP', 'tI',        # Tetragonal
    'oP', 'oI', 'oF', 'oC',  # Orthorhombic
    'hP', 'hR',        # Hexagonal/Rhombohedral
    'mP', 'mC',        # Monoclinic
    'aP'               # Triclinic
}


def centering_symbol(latsym: str) -> str:
    """
    Reduce a lattice symbol to its single centering letter.

    Parameters
    ----------
    latsym : str
        A centering letter ('P', 'i', 'F', ...) or a Bravais code ('cF').

    Returns
    -------
    str
        Upper-case centering letter.

    Raises
    ------
    ValueError
        If the symbol is empty or not recognized.
    """
    if not latsym:
        raise ValueError("Lattice symbol must not be empty")
    if latsym in LATTICE_TYPES:
        return latsym[1]
    letter = latsym[0].upper()
    if letter not in CENTERING_MATRICES:
        raise ValueError(f"Unknown lattice symbol: {latsym}. "
                         f"Valid centerings: {sorted(CENTERING_MATRICES)}")
    return letter


def centering_matrix(latsym: str) -> np.ndarray:
    """Return the 3x3 conventional-to-primitive matrix for a symbol."""
    return CENTERING_MATRICES[centering_symbol(latsym)].copy()


def g6_transform_from_3x3(m: np.ndarray) -> np.ndarray:
    """
    Convert a 3x3 edge-vector transform into the matching 6x6 G6 transform.

    If the new edges are ``M @ [a, b, c]`` the new Gram matrix is
    ``M G Mᵀ``, which is linear in the six G6 components. Each column of
    the result is the image of one G6 unit vector.

    Parameters
    ----------
    m : np.ndarray
        (3, 3) transform.

    Returns
    -------
    np.ndarray
        (6, 6) matrix M6 with G6(M G Mᵀ) = M6 @ G6(G).
    """
    m = np.asarray(m, dtype=np.float64)
    m6 = np.zeros((6, 6))
    for col in range(6):
        unit = np.zeros(6)
        unit[col] = 1.0
        gram = G6(unit, valid=False).metric_matrix()
        m6[:, col] = G6.from_metric_matrix(m @ gram @ m.T, valid=False).to_array()
    return m6


def primitive_transform(g6: G6, latsym: str) -> Tuple[np.ndarray, G6]:
    """
    Transform a conventional G6 vector to a primitive one.

    Parameters
    ----------
    g6 : G6
        Metric-tensor vector of the conventional cell.
    latsym : str
        Centering letter or Bravais code.

    Returns
    -------
    transform : np.ndarray
        (6, 6) matrix applied to the G6 vector.
    primitive : G6
        Metric-tensor vector of the primitive cell.
    """
    m6 = g6_transform_from_3x3(centering_matrix(latsym))
    return m6, m6 @ g6


class BravaisLattice:
    """
    Centering description of a lattice type.

    Parameters
    ----------
    lattice_type : str
        Two-letter Bravais code (e.g., 'cF', 'tI') or a centering letter.

    Attributes
    ----------
    lattice_type : str
        The symbol as given.
    centering : str
        Single centering letter.
    motif : np.ndarray
        Fractional coordinates of the lattice points per conventional cell.

    Examples
    --------
    >>> BravaisLattice('cF').points_per_cell
    4
    >>> BravaisLattice('hR').centering
    'R'
    """

    def __init__(self, lattice_type: str):
        self.lattice_type = lattice_type
        self.centering = centering_symbol(lattice_type)
        self.motif = CENTERING_MOTIFS[self.centering].copy()

    @property
    def points_per_cell(self) -> int:
        """Number of lattice points in one conventional cell."""
        return len(self.motif)

    def to_primitive_3x3(self) -> np.ndarray:
        return centering_matrix(self.centering)

    def to_primitive_g6(self) -> np.ndarray:
        return g6_transform_from_3x3(self.to_primitive_3x3())

    def primitive_g6(self, g6: G6) -> G6:
        """Apply the G6 transform to a conventional metric-tensor vector."""
        return self.to_primitive_g6() @ g6

    def __repr__(self) -> str:
        return (f"BravaisLattice(type='{self.lattice_type}', "
                f"centering='{self.centering}', "
                f"points_per_cell={self.points_per_cell})")
