# mc_engine/mc_pricer.py
import logging
import math
from dataclasses import dataclass

import numpy as np

from mc_engine.errors import InsufficientSamples, InvalidParameters
from mc_engine.gbm_paths import iter_path_sets, simulate
from mc_engine.params import require_finite, require_positive

logger = logging.getLogger(__name__)

Z_95 = 1.96
OPTIONS = ('call', 'put')


@dataclass(frozen=True)
class PayoffEstimate:
    """Discounted Monte Carlo price of one option kind with its 95% normal-approximation interval."""
    option: str
    price: float
    standard_error: float
    confidence_interval: tuple
    n_samples: int

    @property
    def ci_width(self):
        low, high = self.confidence_interval
        return high - low

    def contains(self, value):
        low, high = self.confidence_interval
        return low <= value <= high


def _check_option(option):
    if option not in OPTIONS:
        raise InvalidParameters(f"option must be 'call' or 'put', got {option!r}")


def antithetic_payoffs(path_set, K, option='call'):
    """Per-row payoff averaged over the matched (normal, antithetic) pair; undiscounted."""
    _check_option(option)
    S_T = path_set.terminal
    S_T_anti = path_set.antithetic_terminal
    if option == 'call':
        return 0.5 * (np.maximum(S_T - K, 0.0) + np.maximum(S_T_anti - K, 0.0))
    return 0.5 * (np.maximum(K - S_T, 0.0) + np.maximum(K - S_T_anti, 0.0))


def estimate_from_payoffs(payoffs, r, T, option='call'):
    """
    Discounted mean of the averaged-payoff vector with SE = e^{-rT} std(ddof=1) / sqrt(n)
    and CI = price +/- 1.96 SE.
    """
    n = len(payoffs)
    if n < 2:
        raise InsufficientSamples(f"standard error needs at least 2 samples, got {n}")
    disc = math.exp(-r * T)
    price = float(disc * payoffs.mean())
    std_error = float(disc * payoffs.std(ddof=1) / math.sqrt(n))
    half_width = Z_95 * std_error
    return PayoffEstimate(option=option, price=price, standard_error=std_error,
                          confidence_interval=(price - half_width, price + half_width),
                          n_samples=n)


def price_from_paths(path_set, K, r, T, option='call'):
    """Monte Carlo price of a European option from a simulated antithetic PathSet."""
    require_positive(K=K, T=T)
    require_finite(r=r)
    payoffs = antithetic_payoffs(path_set, K, option)
    return estimate_from_payoffs(payoffs, r, T, option)


def _collect_payoffs(params, seed, options, batch_size):
    """Averaged payoffs per option kind, all computed from the same matched path sets."""
    if batch_size is None or batch_size >= params.n_sim:
        path_set = simulate(params, seed)
        return {opt: antithetic_payoffs(path_set, params.K, opt) for opt in options}

    blocks = {opt: [] for opt in options}
    for path_set in iter_path_sets(params, seed, batch_size=batch_size):
        for opt in options:
            blocks[opt].append(antithetic_payoffs(path_set, params.K, opt))
    return {opt: np.concatenate(blocks[opt], axis=0) for opt in options}


def mc_price_european(params, seed=None, option='call', batch_size=None):
    """
    Simulate and price in one call. With batch_size set, paths are streamed in row batches
    (same numbers as the unbatched run) and only the payoff vector is kept.
    """
    _check_option(option)
    if params.n_sim < 2:
        raise InsufficientSamples(f"standard error needs at least 2 samples, got {params.n_sim}")
    payoffs = _collect_payoffs(params, seed, (option,), batch_size)[option]
    estimate = estimate_from_payoffs(payoffs, params.r, params.T, option)
    logger.debug("mc_price_european %s: price=%.6f se=%.6f", option, estimate.price, estimate.standard_error)
    return estimate


def mc_price_call_put(params, seed=None, batch_size=None):
    """Call and put estimates from one simulation, returned as (call_estimate, put_estimate)."""
    if params.n_sim < 2:
        raise InsufficientSamples(f"standard error needs at least 2 samples, got {params.n_sim}")
    payoffs = _collect_payoffs(params, seed, OPTIONS, batch_size)
    call = estimate_from_payoffs(payoffs['call'], params.r, params.T, 'call')
    put = estimate_from_payoffs(payoffs['put'], params.r, params.T, 'put')
    logger.debug("mc_price_call_put: call=%.6f (se %.6f) put=%.6f (se %.6f)",
                 call.price, call.standard_error, put.price, put.standard_error)
    return call, put
