import numpy as np
import pytest

from vectors.metric_tensor import G6
from lattices.bravais import (
    CENTERING_MATRICES,
    LATTICE_TYPES,
    BravaisLattice,
    centering_matrix,
    centering_symbol,
    g6_transform_from_3x3,
    primitive_transform,
)


@pytest.mark.parametrize("symbol, expected", [
    ('P', 'P'), ('f', 'F'), ('I', 'I'), ('cF', 'F'), ('tI', 'I'),
    ('oC', 'C'), ('hR', 'R'), ('hP', 'P'), ('aP', 'P'), ('R', 'R'),
])
def test_centering_symbol(symbol, expected):
    assert centering_symbol(symbol) == expected


@pytest.mark.parametrize("symbol", ['', 'Q', 'xyz'])
def test_unknown_symbols_raise(symbol):
    with pytest.raises(ValueError):
        centering_symbol(symbol)


@pytest.mark.parametrize("symbol", sorted(CENTERING_MATRICES))
def test_determinant_matches_lattice_points(symbol):
    lattice = BravaisLattice(symbol)
    det = np.linalg.det(centering_matrix(symbol))
    assert det == pytest.approx(1.0 / lattice.points_per_cell)


def test_every_bravais_code_has_a_centering():
    for code in LATTICE_TYPES:
        assert BravaisLattice(code).centering in CENTERING_MATRICES


def test_identity_transform():
    assert np.allclose(g6_transform_from_3x3(np.eye(3)), np.eye(6))


def test_g6_transform_agrees_with_metric_transform():
    rng = np.random.default_rng(7)
    m = rng.normal(size=(3, 3))
    g = G6([10.0, 12.0, 15.0, -3.0, 2.0, -4.0])
    expected = G6.from_metric_matrix(m @ g.metric_matrix() @ m.T)
    assert (g6_transform_from_3x3(m) @ g).allclose(expected, atol=1e-10)


def test_face_centered_cubic_primitive():
    g = G6([4.0, 4.0, 4.0, 0.0, 0.0, 0.0])
    transform, primitive = primitive_transform(g, 'F')
    assert transform.shape == (6, 6)
    assert primitive.allclose(G6([2.0, 2.0, 2.0, 2.0, 2.0, 2.0]), atol=1e-12)
    assert primitive.valid


def test_body_centered_cubic_primitive():
    _, primitive = primitive_transform(G6([4.0, 4.0, 4.0, 0.0, 0.0, 0.0]), 'cI')
    # primitive edges (-1, 1, 1) etc. for a = 2
    assert primitive.allclose(G6([3.0, 3.0, 3.0, -2.0, -2.0, -2.0]), atol=1e-12)


def test_primitive_transform_keeps_validity_flag():
    g = G6([4.0, 4.0, 4.0, 0.0, 0.0, 0.0], valid=False)
    _, primitive = primitive_transform(g, 'P')
    assert not primitive.valid


def test_bravais_lattice_helpers():
    lattice = BravaisLattice('cF')
    assert lattice.points_per_cell == 4
    assert lattice.motif.shape == (4, 3)
    assert np.allclose(lattice.to_primitive_3x3(), CENTERING_MATRICES['F'])
    assert lattice.to_primitive_g6().shape == (6, 6)
    assert lattice.primitive_g6(G6([4.0, 4.0, 4.0, 0.0, 0.0, 0.0])).valid
    assert "centering='F'" in repr(lattice)
