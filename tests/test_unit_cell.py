import math

import numpy as np
import pytest

from vectors.metric_tensor import G6
from vectors.selling import S6, C3
from vectors.delone import D7, B4
from cells.unit_cell import InvalidGeometryError, UnitCell, closure_satisfied


VALID_CELLS = [
    (1, 1, 1, 90, 90, 90),
    (5.0, 6.0, 7.0, 90, 100, 90),
    (3.0, 3.0, 10.0, 90, 90, 120),
    (10, 11, 12, 80, 85, 95),
    (4.2, 7.7, 9.1, 61.0, 72.5, 101.3),
    (8.0, 8.0, 8.0, 109.47, 109.47, 109.47),
]


def test_cubic_cell():
    cell = UnitCell(1, 1, 1, 90, 90, 90)
    assert cell.valid
    assert cell.invalid_reason is None
    assert cell.volume() == pytest.approx(1.0)
    assert cell.angles == pytest.approx((math.pi / 2,) * 3)


def test_angle_sum_of_537_degrees_is_invalid():
    cell = UnitCell(1, 1, 1, 179, 179, 179)
    assert not cell.valid
    assert "360" in cell.invalid_reason


def test_angles_are_stored_in_radians():
    cell = UnitCell(1, 2, 3, 90, 90, 120)
    assert cell[5] == pytest.approx(2.0 * math.pi / 3.0)
    assert cell.lengths == (1.0, 2.0, 3.0)
    assert np.allclose(cell.degrees(), [1, 2, 3, 90, 90, 120])


@pytest.mark.parametrize("values", [
    (0.0005, 1, 1, 90, 90, 90),     # length below the lower limit
    (1, 1, 1, 0.0, 90, 90),         # zero angle
    (1, 1, 1, 179.995, 90, 90),     # angle above 179.99
    (1, 1, 1, 120, 120, 120),       # angle sum of exactly 360
    (1, 1, 1, 10, 20, 100),         # closure violated
    (1, 1, float('nan'), 90, 90, 90),
])
def test_numeric_construction_rejects(values):
    cell = UnitCell(*values)
    assert not cell.valid
    assert cell.invalid_reason


def test_closure_message():
    assert "closure" in UnitCell(1, 1, 1, 10, 20, 100).invalid_reason
    assert closure_satisfied(60, 60, 120)
    assert not closure_satisfied(10, 20, 100)


def test_default_cell_is_degenerate():
    cell = UnitCell()
    assert not cell.valid
    assert cell.to_array().tolist() == [0.0] * 6
    assert UnitCell.degenerate() == cell


def test_from_string():
    cell = UnitCell.from_string("5.0 6.0 7.0 90 100 90")
    assert cell.valid
    assert cell == UnitCell(5.0, 6.0, 7.0, 90, 100, 90)
    assert UnitCell.from_string("5, 6, 7, 90, 90, 90").valid


def test_from_string_applies_the_closure_constraint():
    assert not UnitCell.from_string("1 1 1 10 20 100").valid
    assert not UnitCell.from_string("1 1 1 180 90 90").valid


def test_unparseable_string_gives_degenerate_cell():
    cell = UnitCell.from_string("1 2 three 90 90 90")
    assert not cell.valid
    assert cell.to_array().tolist() == [0.0] * 6
    assert not UnitCell.from_string("1 2 3").valid


def test_from_g6_cubic():
    cell = UnitCell.from_g6(G6([4.0, 4.0, 4.0, 0.0, 0.0, 0.0]))
    assert cell.valid
    assert cell.allclose(UnitCell(2, 2, 2, 90, 90, 90), atol=1e-12)


@pytest.mark.parametrize("g6, fragment", [
    (G6([1.0, 1.0, 1.0, 0.0, 0.0, 0.0], valid=False), "flagged invalid"),
    (G6([0.0, 0.0, 0.0, 0.0, 0.0, 1e-11]), "near-zero norm"),
    (G6([1e-5, 1.0, 1.0, 0.0, 0.0, 0.0]), "squared edge"),
    (G6([1.0, 1.0, 1.0, 2 * 0.99995, 0.0, 0.0]), "cosine"),
    (G6([np.nan, 1.0, 1.0, 0.0, 0.0, 0.0]), "not finite"),
])
def test_from_g6_collapses_to_degenerate_cell(g6, fragment):
    cell = UnitCell.from_g6(g6)
    assert not cell.valid
    assert cell.to_array().tolist() == [0.0] * 6
    assert fragment in cell.invalid_reason


def test_from_g6_rejects_cells_that_violate_closure():
    # cosines of 10, 20 and 100 degrees: each inside the guard band
    cosines = np.cos(np.radians([10.0, 20.0, 100.0]))
    g6 = G6([1.0, 1.0, 1.0, *(2.0 * cosines)])
    cell = UnitCell.from_g6(g6)
    assert not cell.valid
    assert np.allclose(cell.degrees()[3:], [10.0, 20.0, 100.0])


@pytest.mark.parametrize("values", VALID_CELLS)
def test_g6_round_trip(values):
    g6 = UnitCell(*values).to_g6()
    back = UnitCell.from_g6(g6)
    assert back.valid
    assert back.to_g6().allclose(g6, atol=1e-8)
    assert back.allclose(UnitCell(*values), atol=1e-10)


def test_g6_round_trip_from_raw_vector():
    g6 = G6([100.0, 121.0, 144.0, -20.0, 30.0, -15.0])
    assert UnitCell.from_g6(g6).to_g6().allclose(g6, atol=1e-8)


@pytest.mark.parametrize("values", VALID_CELLS)
def test_scalar_vector_sources_agree(values):
    cell = UnitCell(*values)
    g6 = cell.to_g6()
    expected = UnitCell.from_g6(g6)
    for source in (S6.from_g6(g6), C3.from_g6(g6), D7.from_g6(g6), B4.from_g6(g6)):
        built = UnitCell.from_any(source)
        assert built.valid
        assert built.allclose(expected, atol=1e-9)


def test_invalid_source_vector_keeps_values_but_flags_cell():
    s6 = UnitCell(5.0, 6.0, 7.0, 90, 100, 90).to_s6()
    flagged = S6(s6.to_array(), valid=False)
    cell = UnitCell.from_s6(flagged)
    assert not cell.valid
    assert "S6" in cell.invalid_reason
    assert cell.allclose(UnitCell.from_s6(s6), atol=1e-12)


def test_from_any_dispatch():
    cubic = UnitCell(1, 1, 1, 90, 90, 90)
    assert UnitCell.from_any(cubic) is cubic
    assert UnitCell.from_any("1 1 1 90 90 90") == cubic
    assert UnitCell.from_any([1, 1, 1, 90, 90, 90]) == cubic
    assert UnitCell.from_any(np.array([1, 1, 1, 90, 90, 90])) == cubic
    assert UnitCell.from_any(cubic.to_g6()).allclose(cubic)
    with pytest.raises(TypeError):
        UnitCell.from_any({'a': 1.0})


def test_checked_raises_for_invalid_geometry():
    assert UnitCell.checked("1 1 1 90 90 90").valid
    with pytest.raises(InvalidGeometryError, match="360"):
        UnitCell.checked((1, 1, 1, 179, 179, 179))
    with pytest.raises(ValueError):
        UnitCell.checked(G6([1.0, 1.0, 1.0, 0.0, 0.0, 0.0], valid=False))


def test_index_access():
    cell = UnitCell(1, 2, 3, 90, 90, 120)
    assert cell[0] == 1.0
    assert cell[-1] == cell[5]
    assert len(cell) == 6
    assert list(cell)[:3] == [1.0, 2.0, 3.0]
    assert cell[:3].tolist() == [1.0, 2.0, 3.0]
    with pytest.raises(IndexError):
        cell[6]


def test_cells_are_immutable_values():
    cell = UnitCell(1, 2, 3, 90, 90, 120)
    arr = cell.to_array()
    arr[0] = 100.0
    assert cell[0] == 1.0
    sliced = cell[:3]
    sliced[0] = 100.0
    assert cell[0] == 1.0


def test_equality_and_hash():
    a = UnitCell(1, 2, 3, 90, 90, 120)
    b = UnitCell.from_string("1 2 3 90 90 120")
    assert a == b
    assert hash(a) == hash(b)
    assert a != UnitCell(1, 2, 3, 90, 90, 90)
    assert len({a, b}) == 1


def test_text_forms():
    cell = UnitCell(1, 1, 1, 90, 90, 90)
    assert str(cell) == "  1.00000   1.00000   1.00000   1.57080   1.57080   1.57080 "
    assert repr(cell) == ("UnitCell(a=1.0000, b=1.0000, c=1.0000, alpha=90.0000, "
                          "beta=90.0000, gamma=90.0000, valid=True)")
