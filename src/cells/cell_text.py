"""
Text forms of unit cells.

Cells are written as six numbers: three lengths followed by three
angles. Input text uses degrees; the fixed-width output shows whatever
six values it is given (a UnitCell stores radians).

Author: Lattice Cell Project
"""

import re
import numpy as np
from typing import Sequence

_SEPARATORS = re.compile(r"[\s,;]+")


def parse_cell_values(text: str) -> np.ndarray:
    """
    Parse six numbers from a cell string.

    Parameters
    ----------
    text : str
        Six numeric tokens separated by whitespace, commas or semicolons,
        e.g. ``"10 10 10 90 90 120"``.

    Returns
    -------
    np.ndarray
        The six values, shape (6,).

    Raises
    ------
    ValueError
        If the text does not hold exactly six numbers.

    Examples
    --------
    >>> parse_cell_values("5.0, 6.0, 7.0, 90, 100, 90")
    array([  5.,   6.,   7.,  90., 100.,  90.])
    """
    tokens = [t for t in _SEPARATORS.split(text.strip()) if t]
    if len(tokens) != 6:
        raise ValueError(f"Expected 6 cell values, got {len(tokens)}: {text!r}")
    try:
        return np.array([float(t) for t in tokens])
    except ValueError as exc:
        raise ValueError(f"Non-numeric cell value in {text!r}") from exc


def format_cell_values(values: Sequence[float]) -> str:
    """Format six values as fixed-width, 5-decimal text."""
    return "".join(f"{v:9.5f} " for v in values)
