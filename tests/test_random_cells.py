import pytest

from reduction.selling_reduce import is_delone_reduced
from cells.unit_cell import UnitCell
from cells.random_cells import (
    CellSampler,
    RandomCellConfig,
    SamplingError,
    default_sampler,
    rand,
    rand_delone_reduced,
    rand_delone_unreduced,
)


@pytest.fixture
def sampler():
    return CellSampler(RandomCellConfig(seed=12345))


def test_seeded_samplers_are_reproducible():
    first = CellSampler(RandomCellConfig(seed=3))
    second = CellSampler(RandomCellConfig(seed=3))
    assert [first.rand() for _ in range(5)] == [second.rand() for _ in range(5)]


def test_random_cells_are_valid(sampler):
    for _ in range(50):
        cell = sampler.rand()
        assert cell.valid
        assert cell.volume() > 0.0


def test_reduced_sampler(sampler):
    for _ in range(20):
        cell = sampler.rand_delone_reduced()
        assert cell.valid
        assert is_delone_reduced(cell.to_s6())


def test_unreduced_sampler(sampler):
    for _ in range(20):
        cell = sampler.rand_delone_unreduced()
        assert cell.valid
        assert not is_delone_reduced(cell.to_s6())


def test_scaled_variants_keep_their_reduction_state(sampler):
    assert is_delone_reduced(sampler.rand_delone_reduced(5.0).to_s6())
    assert not is_delone_reduced(sampler.rand_delone_unreduced(5.0).to_s6())


def test_scaled_draw_is_the_raw_draw_rescaled():
    config = RandomCellConfig(seed=5)
    scaled = CellSampler(config).rand(4.0)
    raw = CellSampler(config).rand()
    expected = raw * 4.0 / config.normalization_constant
    assert scaled.allclose(expected, atol=1e-12)
    assert scaled.angles == raw.angles


def test_unreachable_condition_raises_sampling_error():
    # all scalars negative: every draw is already reduced
    config = RandomCellConfig(positive_fraction=-0.5, max_tries=50, seed=1)
    with pytest.raises(SamplingError):
        CellSampler(config).rand_delone_unreduced()


def test_rand_in_range(sampler):
    for _ in range(10):
        cell = sampler.rand_in_range(5.0, 10.0)
        assert cell.valid
        # edges lie in [sqrt(50), sqrt(50) + 5)
        assert all(7.07 < x < 12.08 for x in cell.lengths)


def test_module_functions_use_the_given_sampler():
    config = RandomCellConfig(seed=99)
    assert rand(sampler=CellSampler(config)) == CellSampler(config).rand()
    assert is_delone_reduced(rand_delone_reduced(2.0, CellSampler(config)).to_s6())
    assert not is_delone_reduced(rand_delone_unreduced(2.0, CellSampler(config)).to_s6())


def test_unit_cell_entry_points(sampler):
    config = RandomCellConfig(seed=7)
    assert UnitCell.rand(sampler=CellSampler(config)) == CellSampler(config).rand()
    assert UnitCell.rand_delone_reduced(sampler=sampler).valid
    assert UnitCell.rand_delone_unreduced(3.0, sampler=sampler).valid


def test_default_sampler_is_shared():
    assert default_sampler() is default_sampler()
    assert rand().valid
