# mc_engine/params.py
import math
from dataclasses import dataclass

import numpy as np

from mc_engine.errors import InvalidParameters


def require_positive(**values):
    """Raise InvalidParameters unless every keyword value is finite and > 0."""
    for name, value in values.items():
        if value is None or not math.isfinite(value) or value <= 0:
            raise InvalidParameters(f"{name} must be a finite value > 0, got {value!r}")


def require_finite(**values):
    for name, value in values.items():
        if value is None or not math.isfinite(value):
            raise InvalidParameters(f"{name} must be finite, got {value!r}")


def require_count(minimum=1, **values):
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < minimum:
            raise InvalidParameters(f"{name} must be an integer >= {minimum}, got {value!r}")


@dataclass(frozen=True)
class SimulationParameters:
    """
    Inputs of one pricing request.
      S0: spot, K: strike, T: maturity in years, r: continuously compounded rate,
      sigma: volatility, n_sim: number of (paired) paths, n_steps: time steps per path.
    Validated on construction; an invalid instance cannot exist.
    """
    S0: float
    K: float
    T: float
    r: float
    sigma: float
    n_sim: int = 100_000
    n_steps: int = 252

    def __post_init__(self):
        self.validate()

    def validate(self):
        require_positive(S0=self.S0, K=self.K, T=self.T, sigma=self.sigma)
        require_finite(r=self.r)
        require_count(n_sim=self.n_sim, n_steps=self.n_steps)
        return self

    @property
    def dt(self):
        return self.T / self.n_steps
