import numpy as np
import pytest

from vectors.metric_tensor import G6
from vectors.selling import S6, C3
from vectors.delone import D7, B4


GENERAL_G6 = G6([10.0, 12.0, 15.0, -3.0, 2.0, -4.0])


def test_s6_of_cubic_cell():
    s = S6.from_g6(G6([1.0, 1.0, 1.0, 0.0, 0.0, 0.0]))
    assert s.valid
    assert s.to_array().tolist() == [0.0, 0.0, 0.0, -1.0, -1.0, -1.0]


def test_s6_g6_round_trip():
    s = S6.from_g6(GENERAL_G6)
    assert s.to_g6().allclose(GENERAL_G6, atol=1e-12)


def test_s6_scalars_sum_to_minus_half_the_squared_lengths():
    # |a|² + |b|² + |c|² + |d|² = -2 * sum(s)
    s = S6.from_g6(GENERAL_G6)
    d7 = D7.from_g6(GENERAL_G6)
    assert -2.0 * s.to_array().sum() == pytest.approx(d7.to_array()[:4].sum())


def test_s6_validity_follows_source():
    assert not S6.from_g6(G6([1.0, 1.0, 1.0, 0.0, 0.0, 0.0], valid=False)).valid
    assert not S6([np.inf, 0, 0, 0, 0, 0]).valid
    assert S6([1, 2, 3, 4, 5, 6]).valid


def test_s6_arithmetic_and_matrix():
    s = S6([-1.0, -2.0, -3.0, -4.0, -5.0, -6.0])
    assert (s + s).to_array().tolist() == [-2.0, -4.0, -6.0, -8.0, -10.0, -12.0]
    assert (s - s).norm() == 0.0
    assert (2 * s) == s + s
    assert isinstance(np.eye(6) @ s, S6)


def test_c3_pairs_opposite_scalars():
    s = S6([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    c = C3.from_s6(s)
    assert c[0] == complex(1.0, 4.0)
    assert c[1] == complex(2.0, 5.0)
    assert c[2] == complex(3.0, 6.0)
    assert c.to_s6() == s


def test_c3_g6_round_trip():
    c = C3.from_g6(GENERAL_G6)
    assert c.valid
    assert c.to_g6().allclose(GENERAL_G6, atol=1e-12)


def test_d7_of_cubic_cell():
    d = D7.from_g6(G6([1.0, 1.0, 1.0, 0.0, 0.0, 0.0]))
    assert d.valid
    assert d.to_array().tolist() == [1.0, 1.0, 1.0, 3.0, 2.0, 2.0, 2.0]


def test_d7_round_trip_and_validity():
    d = D7.from_g6(GENERAL_G6)
    assert d.to_g6().allclose(GENERAL_G6, atol=1e-12)
    assert not D7([1.0, 1.0, 1.0, 3.0, 2.0, 2.0, 0.0]).valid
    with pytest.raises(ValueError):
        D7([1.0, 1.0, 1.0])


def test_b4_from_cubic_g6():
    b = B4.from_g6(G6([1.0, 1.0, 1.0, 0.0, 0.0, 0.0]))
    assert b.valid
    assert np.allclose(b.vectors[:3], np.eye(3))
    assert np.allclose(b.vectors[3], [-1.0, -1.0, -1.0])
    assert np.allclose(b.vectors.sum(axis=0), 0.0)


def test_b4_round_trip():
    b = B4.from_g6(GENERAL_G6)
    assert b.valid
    assert b.to_g6().allclose(GENERAL_G6, atol=1e-10)
    # a along x, b in the xy-plane
    assert b[0][1] == 0.0 and b[0][2] == 0.0
    assert b[1][2] == 0.0


def test_b4_from_non_positive_definite_metric_is_invalid():
    b = B4.from_g6(G6([1.0, 1.0, 1.0, 1.9, 1.9, -1.9]))
    assert not b.valid
    assert np.all(np.isnan(b.vectors))


def test_b4_difference_norm():
    b = B4.from_g6(GENERAL_G6)
    assert (b - b).norm() == 0.0
    with pytest.raises(ValueError):
        B4(np.zeros((2, 3)))
