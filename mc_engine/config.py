# mc_engine/config.py
import os
from dataclasses import dataclass, fields

ENV_PREFIX = "MC_ENGINE_"


@dataclass(frozen=True)
class EngineConfig:
    """Run defaults for run_examples.py; any field can be overridden by MC_ENGINE_<FIELD>."""
    ticker: str = "SPY"
    strike_moneyness: float = 1.05   # K = S0 * strike_moneyness
    maturity: float = 1.0
    rate: float = 0.05
    default_sigma: float = 0.2
    n_sim: int = 100_000
    n_steps: int = 252
    seed: int = 123
    bump: float = 0.01
    batch_size: int = 10_000
    grid_points: int = 10
    samples_per_cell: int = 10_000

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            try:
                overrides[f.name] = f.type(raw) if f.type is not int else int(float(raw))
            except ValueError as e:
                raise ValueError(f"{ENV_PREFIX}{f.name.upper()}={raw!r}: {e}") from e
        return cls(**overrides)
