# mc_engine/sensitivity.py
# ----------------------------
# (S0, sigma) price surface for sensitivity plots
# ----------------------------
import logging
import math
from typing import NamedTuple

import numpy as np
import pandas as pd

from mc_engine.errors import InvalidParameters
from mc_engine.params import require_count, require_finite, require_positive

logger = logging.getLogger(__name__)


class SensitivityCell(NamedTuple):
    S0: float
    sigma: float
    price: float


def linear_range(low, high, num):
    """num evenly spaced points from low to high, both endpoints included."""
    require_finite(low=low, high=high)
    require_count(num=num)
    if high < low:
        raise InvalidParameters(f"range high ({high}) must be >= low ({low})")
    if num == 1 and high != low:
        raise InvalidParameters("a single-point range needs low == high")
    return np.linspace(low, high, int(num))


def centered_ranges(S0, sigma, num=10, spot_width=0.2, sigma_low=0.1, sigma_high=0.5):
    """Default sweep axes: S0 +/- spot_width (relative) and sigma in [sigma_low, sigma_high]."""
    require_positive(S0=S0, sigma=sigma, spot_width=spot_width)
    if spot_width >= 1:
        raise InvalidParameters("spot_width must be < 1 so the lowest spot stays positive")
    return (linear_range(S0 * (1 - spot_width), S0 * (1 + spot_width), num),
            linear_range(sigma_low, sigma_high, num))


def _sorted_axis(name, values):
    raw = np.asarray(values, dtype=float).ravel()
    arr = np.unique(raw)
    if arr.size == 0:
        raise InvalidParameters(f"{name} must not be empty")
    if arr.size != raw.size:
        raise InvalidParameters(f"{name} contains duplicate values")
    if not np.all(np.isfinite(arr)) or arr[0] <= 0:
        raise InvalidParameters(f"{name} values must be finite and > 0")
    return arr


def _cell_price(S0, sigma, K, T, r, z):
    """
    Discounted call payoff mean over single-step terminal draws S0*exp((r - sigma^2/2)T + sigma*sqrt(T)*z),
    moment matched so the sample mean of S_T equals the forward S0*e^{rT}.
    With z fixed, the matched S_T grow in convex order with sigma, so the price never falls as sigma rises.
    """
    growth = np.exp(sigma * np.sqrt(T) * z)
    S_T = S0 * math.exp(r * T) * growth / growth.mean()
    return float(math.exp(-r * T) * np.maximum(S_T - K, 0.0).mean())


def sweep(S0_range, sigma_range, K, T, r, samples_per_cell, seed=None):
    """
    Call price over the Cartesian product S0_range x sigma_range.
    Cells are ordered S0 ascending (outer) then sigma ascending (inner). Row i draws one z vector
    from child i of SeedSequence(seed) and reuses it for every sigma in the row (common random
    numbers), so a row depends only on its position and the surface is monotone in sigma.
    Nothing is shared with the path simulator.
    """
    spots = _sorted_axis("S0_range", S0_range)
    sigmas = _sorted_axis("sigma_range", sigma_range)
    require_positive(K=K, T=T)
    require_finite(r=r)
    require_count(samples_per_cell=samples_per_cell)

    children = np.random.SeedSequence(seed).spawn(spots.size)
    logger.debug("sweep: %d x %d cells, %d samples each", spots.size, sigmas.size, samples_per_cell)

    cells = []
    for S0, child in zip(spots, children):
        z = np.random.default_rng(child).standard_normal(size=samples_per_cell)
        for sigma in sigmas:
            price = _cell_price(S0, sigma, K, T, r, z)
            cells.append(SensitivityCell(float(S0), float(sigma), price))
    return cells


def grid_to_frame(cells):
    """Pivot cells into a DataFrame: index S0, columns sigma, values price."""
    df = pd.DataFrame(cells, columns=list(SensitivityCell._fields))
    return df.pivot(index='S0', columns='sigma', values='price')
