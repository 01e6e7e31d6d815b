# run_examples.py
import logging

from mc_engine.config import EngineConfig
from mc_engine.errors import UpstreamDataUnavailable
from mc_engine.params import SimulationParameters
from mc_engine.results import price_summary
from mc_engine.sensitivity import centered_ranges, grid_to_frame, sweep
from mc_engine.utils import resolve_market_inputs

logger = logging.getLogger("run_examples")


def textbook_run(cfg):
    """The S0=100, K=105, T=1, r=5%, sigma=20% reference case; no network needed."""
    params = SimulationParameters(S0=100.0, K=105.0, T=1.0, r=0.05, sigma=0.2,
                                  n_sim=cfg.n_sim, n_steps=cfg.n_steps)
    summary = price_summary(params, seed=cfg.seed, eps=cfg.bump, batch_size=cfg.batch_size)
    print(summary.to_frame().round(4))
    print(summary.greeks_frame().round(6))
    return params


def market_run(cfg):
    try:
        S0, sigma = resolve_market_inputs(cfg.ticker, maturity=cfg.maturity, default_sigma=cfg.default_sigma,
                                          moneyness=cfg.strike_moneyness)
    except UpstreamDataUnavailable as e:
        logger.error("no spot price for %s: %s", cfg.ticker, e)
        return None
    params = SimulationParameters(S0=S0, K=S0 * cfg.strike_moneyness, T=cfg.maturity, r=cfg.rate,
                                  sigma=sigma, n_sim=cfg.n_sim, n_steps=cfg.n_steps)
    print(f"{cfg.ticker}: S0={S0:.2f}, sigma={sigma:.4f}, r={cfg.rate}, K={params.K:.2f}, T={params.T:.4f}")
    summary = price_summary(params, seed=cfg.seed, eps=cfg.bump, batch_size=cfg.batch_size)
    print(summary.to_frame().round(4))
    return params


def sensitivity_run(cfg, params):
    spots, sigmas = centered_ranges(params.S0, params.sigma, num=cfg.grid_points)
    cells = sweep(spots, sigmas, params.K, params.T, params.r, cfg.samples_per_cell, seed=cfg.seed)
    print(grid_to_frame(cells).round(3))


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    cfg = EngineConfig.from_env()
    params = textbook_run(cfg)
    sensitivity_run(cfg, params)
    market_run(cfg)
