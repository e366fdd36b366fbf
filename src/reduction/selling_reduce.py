"""
Selling / Delone Reduction in S6.

A lattice is Delone reduced when every Selling scalar is non-positive.
Reduction repeatedly picks a positive scalar s_ij = v_i·v_j and applies
the Selling reflection

    v_i -> -v_i,   v_k -> v_k + v_i,   v_l -> v_l + v_i

which maps the scalars to

    s_ij -> -s_ij
    s_ik -> s_ij + s_il        s_il -> s_ij + s_ik
    s_jk -> s_jk + s_ij        s_jl -> s_jl + s_ij
    s_kl -> s_kl - s_ij

Every step lowers the sum of the squared edge lengths, so the loop
terminates; a cycle ceiling guards against floating-point churn.

Author: Lattice Cell Project
"""

import logging
import numpy as np
from typing import Dict, Tuple, Union

from vectors.metric_tensor import G6
from vectors.selling import S6, C3, SELLING_PAIRS
from vectors.delone import D7

logger = logging.getLogger(__name__)

ReducibleVector = Union[S6, G6, D7, C3]


def _pair_index() -> Dict[frozenset, int]:
    return {frozenset(p): n for n, p in enumerate(SELLING_PAIRS)}


_PAIR_INDEX = _pair_index()


def reflection_matrix(position: int) -> np.ndarray:
    """
    Build the 6x6 Selling reflection that negates scalar ``position``.

    Parameters
    ----------
    position : int
        Index 0..5 of the scalar to negate.

    Returns
    -------
    np.ndarray
        Integer-valued (6, 6) matrix M with s_new = M @ s_old.
    """
    i, j = SELLING_PAIRS[position]
    k, l = [v for v in range(4) if v not in (i, j)]

    def idx(p, q):
        return _PAIR_INDEX[frozenset((p, q))]

    m = np.zeros((6, 6))
    ij = idx(i, j)
    m[ij, ij] = -1.0
    m[idx(i, k), ij] = 1.0
    m[idx(i, k), idx(i, l)] = 1.0
    m[idx(i, l), ij] = 1.0
    m[idx(i, l), idx(i, k)] = 1.0
    m[idx(j, k), idx(j, k)] = 1.0
    m[idx(j, k), ij] = 1.0
    m[idx(j, l), idx(j, l)] = 1.0
    m[idx(j, l), ij] = 1.0
    m[idx(k, l), idx(k, l)] = 1.0
    m[idx(k, l), ij] = -1.0
    return m


REFLECTIONS = tuple(reflection_matrix(n) for n in range(6))


def to_s6(vector: ReducibleVector) -> S6:
    """Convert any supported scalar vector to S6."""
    if isinstance(vector, S6):
        return vector
    if isinstance(vector, G6):
        return S6.from_g6(vector)
    if isinstance(vector, (D7, C3)):
        return S6.from_g6(vector.to_g6())
    raise TypeError(f"Cannot reduce object of type {type(vector).__name__}")


def is_delone_reduced(vector: ReducibleVector, delta: float = 0.0) -> bool:
    """
    Return True if all six Selling scalars are <= delta.

    Parameters
    ----------
    vector : S6, G6, D7 or C3
        Lattice to test.
    delta : float, optional
        Tolerance on the sign test. Default is 0.0.
    """
    s = to_s6(vector).to_array()
    return bool(np.all(s <= delta))


def selling_reduce(s6: S6, max_cycles: int = 1000,
                   delta: float = 0.0) -> Tuple[bool, np.ndarray, S6]:
    """
    Selling-reduce an S6 vector.

    Parameters
    ----------
    s6 : S6
        Input scalars.
    max_cycles : int, optional
        Ceiling on the number of reflections. Default is 1000.
    delta : float, optional
        Scalars above this value are treated as positive.

    Returns
    -------
    success : bool
        False if the input was invalid or the ceiling was reached.
    transform : np.ndarray
        Accumulated (6, 6) matrix with reduced = transform @ s6.
    reduced : S6
        The reduced (or partially reduced) vector.
    """
    transform = np.eye(6)
    if not s6.valid:
        return False, transform, s6

    s = s6.to_array()
    for _ in range(max_cycles):
        worst = int(np.argmax(s))
        if s[worst] <= delta:
            return True, transform, S6(s, s6.valid)
        m = REFLECTIONS[worst]
        s = m @ s
        transform = m @ transform

    logger.debug("Selling reduction did not converge after %d cycles: %s",
                 max_cycles, s6)
    return False, transform, S6(s, s6.valid)


def delone_reduce(vector: ReducibleVector,
                  max_cycles: int = 1000) -> Tuple[bool, np.ndarray, S6]:
    """
    Delone-reduce any supported representation, working in S6.

    Returns the same triple as ``selling_reduce``.
    """
    return selling_reduce(to_s6(vector), max_cycles=max_cycles)
