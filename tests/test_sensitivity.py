# tests/test_sensitivity.py
import numpy as np
import pytest

from mc_engine.black_scholes import call_price
from mc_engine.errors import InvalidParameters
from mc_engine.sensitivity import SensitivityCell, centered_ranges, grid_to_frame, linear_range, sweep

K, T, R = 105.0, 1.0, 0.05


def test_linear_range_inclusive_uniform():
    xs = linear_range(80.0, 120.0, 5)
    np.testing.assert_allclose(xs, [80.0, 90.0, 100.0, 110.0, 120.0])
    assert linear_range(0.2, 0.2, 1).tolist() == [0.2]
    with pytest.raises(InvalidParameters):
        linear_range(1.0, 0.5, 3)
    with pytest.raises(InvalidParameters):
        linear_range(0.5, 1.0, 0)

def test_centered_ranges():
    spots, sigmas = centered_ranges(100.0, 0.2, num=9)
    assert spots[0] == pytest.approx(80.0) and spots[-1] == pytest.approx(120.0)
    assert sigmas[0] == pytest.approx(0.1) and sigmas[-1] == pytest.approx(0.5)
    assert len(spots) == len(sigmas) == 9

def test_ordering_and_length():
    spots = [110.0, 90.0, 100.0]
    sigmas = [0.3, 0.1]
    cells = sweep(spots, sigmas, K, T, R, samples_per_cell=500, seed=1)
    assert len(cells) == 6
    assert [(c.S0, c.sigma) for c in cells] == [
        (90.0, 0.1), (90.0, 0.3), (100.0, 0.1), (100.0, 0.3), (110.0, 0.1), (110.0, 0.3)]
    assert all(isinstance(c, SensitivityCell) for c in cells)

def test_sweep_is_deterministic():
    spots, sigmas = linear_range(90.0, 110.0, 3), linear_range(0.1, 0.3, 3)
    a = sweep(spots, sigmas, K, T, R, samples_per_cell=1_000, seed=42)
    b = sweep(spots, sigmas, K, T, R, samples_per_cell=1_000, seed=42)
    assert a == b
    c = sweep(spots, sigmas, K, T, R, samples_per_cell=1_000, seed=43)
    assert a != c

def test_rows_do_not_depend_on_other_rows():
    # S0=100 is row 0 in both grids and both include sigma=0.2
    a = sweep([100.0, 120.0], [0.2, 0.4], K, T, R, samples_per_cell=1_000, seed=8)
    b = sweep([100.0, 130.0], [0.2, 0.5], K, T, R, samples_per_cell=1_000, seed=8)
    assert a[0] == b[0]

def test_non_decreasing_in_sigma():
    spots = linear_range(80.0, 120.0, 5)
    sigmas = linear_range(0.1, 0.5, 5)
    cells = sweep(spots, sigmas, K, T, R, samples_per_cell=20_000, seed=123)
    surface = grid_to_frame(cells)
    for S0 in surface.index:
        row = surface.loc[S0].values
        assert np.all(np.diff(row) >= 0), row


@pytest.mark.parametrize("seed", range(5))
def test_fine_sigma_grid_non_decreasing(seed):
    spots = linear_range(80.0, 120.0, 5)
    sigmas = linear_range(0.1, 0.5, 41)
    surface = grid_to_frame(sweep(spots, sigmas, K, T, R, samples_per_cell=1_000, seed=seed))
    for S0 in surface.index:
        steps = np.diff(surface.loc[S0].values)
        assert np.all(steps >= -1e-10), (S0, steps.min())

def test_sigma_shares_draws_within_row():
    # every sigma in a row reuses the row's z, so a one-sigma sweep reproduces that cell
    row = sweep([100.0], [0.15, 0.25, 0.35], K, T, R, samples_per_cell=2_000, seed=11)
    alone = sweep([100.0], [0.35], K, T, R, samples_per_cell=2_000, seed=11)
    assert row[-1] == alone[0]

def test_cells_close_to_closed_form():
    cells = sweep([100.0], [0.2], K, T, R, samples_per_cell=200_000, seed=5)
    assert abs(cells[0].price - call_price(100.0, K, T, R, 0.2)) < 0.15

def test_grid_to_frame_shape():
    cells = sweep([90.0, 100.0], [0.1, 0.2, 0.3], K, T, R, samples_per_cell=100, seed=0)
    frame = grid_to_frame(cells)
    assert frame.shape == (2, 3)
    assert list(frame.index) == [90.0, 100.0]
    assert frame.loc[100.0, 0.3] == cells[-1].price

@pytest.mark.parametrize("spots,sigmas,samples", [
    ([], [0.2], 100),
    ([100.0], [0.0, 0.2], 100),
    ([-5.0], [0.2], 100),
    ([100.0], [0.2], 0),
    ([100.0, 100.0], [0.2], 100),
    ([100.0], [0.2, 0.3, 0.2], 100),
    ([100.0], [0.2], 100.0),
])
def test_invalid_sweep_inputs(spots, sigmas, samples):
    with pytest.raises(InvalidParameters):
        sweep(spots, sigmas, K, T, R, samples_per_cell=samples, seed=0)
