"""
Random Lattice Generation.

Random cells are drawn as random Selling-scalar (S6) vectors and kept
only when they convert to a valid cell. Two rejection samplers select
draws that are, or are not, already Delone reduced. Every loop is
bounded by ``RandomCellConfig.max_tries`` and raises ``SamplingError``
when the ceiling is reached.

The raw draws have lengths on the scale of the normalization constant;
the scaled variants map them onto a caller-chosen length ``d`` by
multiplying by ``d / normalization_constant``.

Author: Lattice Cell Project
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Callable, Optional

from vectors.selling import S6
from reduction.selling_reduce import is_delone_reduced
from cells.unit_cell import UnitCell

logger = logging.getLogger(__name__)


class SamplingError(RuntimeError):
    """Raised when a rejection sampler exhausts its retry ceiling."""


@dataclass
class RandomCellConfig:
    """
    Configuration for random cell generation.

    Attributes
    ----------
    normalization_constant : float
        Length scale of the raw draws. Scaled variants divide by it.
    max_tries : int
        Retry ceiling for every rejection loop.
    positive_fraction : float
        Each Selling scalar is drawn uniformly from
        [-1, positive_fraction) * normalization_constant².
        Larger values make unreduced draws more likely.
    seed : int or None
        Seed for the default random generator.
    """
    normalization_constant: float = 10.0
    max_tries: int = 10000
    positive_fraction: float = 0.3
    seed: Optional[int] = 19191

    @property
    def normalization_constant_squared(self) -> float:
        return self.normalization_constant ** 2


class CellSampler:
    """
    Source of random unit cells.

    Parameters
    ----------
    config : RandomCellConfig, optional
        Sampling configuration. Defaults to ``RandomCellConfig()``.
    rng : numpy.random.Generator, optional
        Random generator. Defaults to one seeded from ``config.seed``.

    Examples
    --------
    >>> sampler = CellSampler(RandomCellConfig(seed=1))
    >>> cell = sampler.rand_delone_reduced(5.0)
    >>> cell.valid
    True
    """

    def __init__(self, config: Optional[RandomCellConfig] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or RandomCellConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

    def _scaled(self, cell: UnitCell, d: Optional[float]) -> UnitCell:
        if d is None:
            return cell
        return d * cell / self.config.normalization_constant

    def _sample(self, accept: Callable[[UnitCell], bool], what: str) -> UnitCell:
        for attempt in range(1, self.config.max_tries + 1):
            cell = UnitCell.from_s6(self.random_s6())
            if cell.valid and accept(cell):
                if attempt > 1:
                    logger.debug("Drew %s after %d attempts", what, attempt)
                return cell
        logger.warning("Failed to draw %s in %d attempts", what, self.config.max_tries)
        raise SamplingError(f"Failed to draw {what} in {self.config.max_tries} attempts")

    def random_s6(self) -> S6:
        """One raw S6 draw; it may not describe a valid cell."""
        scale = self.config.normalization_constant_squared
        values = self.rng.uniform(-1.0, self.config.positive_fraction, size=6) * scale
        return S6(values)

    def rand(self, d: Optional[float] = None) -> UnitCell:
        """Random valid cell, with no reduction guarantee."""
        return self._scaled(self._sample(lambda cell: True, "a valid cell"), d)

    def rand_delone_reduced(self, d: Optional[float] = None) -> UnitCell:
        """Random cell that is already Delone reduced."""
        cell = self._sample(lambda c: is_delone_reduced(c.to_s6()),
                            "a Delone-reduced cell")
        return self._scaled(cell, d)

    def rand_delone_unreduced(self, d: Optional[float] = None) -> UnitCell:
        """Random cell that is NOT Delone reduced."""
        cell = self._sample(lambda c: not is_delone_reduced(c.to_s6()),
                            "a Delone-unreduced cell")
        return self._scaled(cell, d)

    def rand_in_range(self, min_edge: float, max_edge: float) -> UnitCell:
        """
        Random valid cell with edges drawn from the given range.

        Each edge is ``|max_edge - min_edge| * u + sqrt(min_edge * max_edge)``
        and each angle ``180 * u`` degrees, with u uniform in [0, 1).
        Draws are repeated until the cell is valid.
        """
        span = abs(min_edge - max_edge)
        base = np.sqrt(min_edge * max_edge)
        for _ in range(self.config.max_tries):
            lengths = span * self.rng.uniform(size=3) + base
            angles = 180.0 * self.rng.uniform(size=3)
            cell = UnitCell(*lengths, *angles)
            if cell.valid:
                return cell
        logger.warning("Failed to draw a cell with edges in [%g, %g]", min_edge, max_edge)
        raise SamplingError(f"Failed to draw a cell with edges in "
                            f"[{min_edge}, {max_edge}] in {self.config.max_tries} attempts")


_default_sampler: Optional[CellSampler] = None


def default_sampler() -> CellSampler:
    """Shared sampler used when no sampler is passed explicitly."""
    global _default_sampler
    if _default_sampler is None:
        _default_sampler = CellSampler()
    return _default_sampler


def rand(d: Optional[float] = None, sampler: Optional[CellSampler] = None) -> UnitCell:
    return (sampler or default_sampler()).rand(d)


def rand_delone_reduced(d: Optional[float] = None,
                        sampler: Optional[CellSampler] = None) -> UnitCell:
    return (sampler or default_sampler()).rand_delone_reduced(d)


def rand_delone_unreduced(d: Optional[float] = None,
                          sampler: Optional[CellSampler] = None) -> UnitCell:
    return (sampler or default_sampler()).rand_delone_unreduced(d)
