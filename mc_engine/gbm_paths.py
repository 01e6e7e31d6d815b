# mc_engine/gbm_paths.py
import logging
import math
from dataclasses import dataclass

import numpy as np

from mc_engine.errors import InvalidParameters
from mc_engine.params import SimulationParameters, require_count

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathSet:
    """
    Matched pair of GBM path matrices, shape (n_sim, n_steps+1) each.
    Row i of `antithetic` was driven by the negated normals of row i of `normal`,
    so the two views must only ever be consumed together.
    """
    normal: np.ndarray
    antithetic: np.ndarray

    def __post_init__(self):
        if self.normal.ndim != 2 or self.normal.shape != self.antithetic.shape:
            raise InvalidParameters(
                f"normal/antithetic shapes differ or are not 2-D: {self.normal.shape} vs {self.antithetic.shape}")
        if self.normal.shape[1] < 2:
            raise InvalidParameters("a path set needs at least one time step")
        self.normal.setflags(write=False)
        self.antithetic.setflags(write=False)

    @property
    def n_sim(self):
        return self.normal.shape[0]

    @property
    def n_steps(self):
        return self.normal.shape[1] - 1

    @property
    def terminal(self):
        return self.normal[:, -1]

    @property
    def antithetic_terminal(self):
        return self.antithetic[:, -1]

    def log_returns(self):
        """Per-step log returns (n_sim, n_steps) of both views: drift + sigma*sqrt(dt)*z."""
        return (np.log(self.normal[:, 1:] / self.normal[:, :-1]),
                np.log(self.antithetic[:, 1:] / self.antithetic[:, :-1]))


def _build_paths(S0, drift, diffusion, Z):
    """Exact GBM recurrence S[t+1] = S[t] * exp(drift + diffusion * z[t]), S[:, 0] = S0."""
    n_paths, steps = Z.shape
    S = np.empty((n_paths, steps + 1), dtype=float)
    S[:, 0] = S0
    for t in range(steps):
        S[:, t + 1] = S[:, t] * np.exp(drift + diffusion * Z[:, t])
    return S


def _step_coefficients(params):
    dt = params.dt
    drift = (params.r - 0.5 * params.sigma ** 2) * dt
    diffusion = params.sigma * math.sqrt(dt)
    return drift, diffusion


def _path_pair(params, Z, drift, diffusion):
    normal = _build_paths(params.S0, drift, diffusion, Z)
    antithetic = _build_paths(params.S0, drift, diffusion, -Z)
    return PathSet(normal=normal, antithetic=antithetic)


def simulate(params, seed=None):
    """
    Simulate n_sim antithetic GBM path pairs.
    seed: int, SeedSequence or an existing numpy Generator (consumed, never global state).
    Identical (params, seed) gives a bit-identical PathSet.
    """
    if not isinstance(params, SimulationParameters):
        raise InvalidParameters("params must be a SimulationParameters instance")
    params.validate()
    rng = np.random.default_rng(seed)
    drift, diffusion = _step_coefficients(params)

    logger.debug("simulate: n_sim=%d n_steps=%d seed=%r", params.n_sim, params.n_steps, seed)
    Z = rng.standard_normal(size=(params.n_sim, params.n_steps))
    return _path_pair(params, Z, drift, diffusion)


def iter_path_sets(params, seed=None, batch_size=10_000):
    """
    Generator over consecutive row batches of the PathSet `simulate(params, seed)` would build.
    All batches draw from one generator in row order, so stacking them reproduces the
    full PathSet while only batch_size rows are held in memory at a time.
    """
    if not isinstance(params, SimulationParameters):
        raise InvalidParameters("params must be a SimulationParameters instance")
    params.validate()
    require_count(batch_size=batch_size)
    rng = np.random.default_rng(seed)
    drift, diffusion = _step_coefficients(params)

    generated = 0
    while generated < params.n_sim:
        this_n = min(batch_size, params.n_sim - generated)
        Z = rng.standard_normal(size=(this_n, params.n_steps))
        logger.debug("iter_path_sets: rows %d..%d", generated, generated + this_n)
        yield _path_pair(params, Z, drift, diffusion)
        generated += this_n
