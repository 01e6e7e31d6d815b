# mc_engine/black_scholes.py
import math
from dataclasses import dataclass

import numpy as np
from scipy.stats import norm

from mc_engine.errors import InvalidParameters
from mc_engine.params import require_finite, require_positive

DEFAULT_BUMP = 0.01

# ----------------------------
# Black-Scholes analytic
# ----------------------------
def d1_d2(S, K, T, r, sigma):
    """d1, d2 of Black-Scholes. Raises InvalidParameters outside S, K, T, sigma > 0."""
    require_positive(S=S, K=K, T=T, sigma=sigma)
    require_finite(r=r)
    vol_sqrt_t = sigma * np.sqrt(T)
    d1 = (np.log(S / K) + (r + 0.5 * sigma**2) * T) / vol_sqrt_t
    d2 = d1 - vol_sqrt_t
    return d1, d2

def call_price(S, K, T, r, sigma):
    """Black-Scholes price of a European call."""
    d1, d2 = d1_d2(S, K, T, r, sigma)
    return float(S * norm.cdf(d1) - K * np.exp(-r * T) * norm.cdf(d2))

def put_price(S, K, T, r, sigma):
    """Black-Scholes price of a European put."""
    d1, d2 = d1_d2(S, K, T, r, sigma)
    return float(K * np.exp(-r * T) * norm.cdf(-d2) - S * norm.cdf(-d1))

def bs_price(S, K, T, r, sigma, option='call'):
    if option == 'call':
        return call_price(S, K, T, r, sigma)
    if option == 'put':
        return put_price(S, K, T, r, sigma)
    raise InvalidParameters(f"option must be 'call' or 'put', got {option!r}")

def put_call_parity_gap(S, K, T, r, sigma):
    """C - P - (S - K e^{-rT}); zero up to rounding for the closed form."""
    return call_price(S, K, T, r, sigma) - put_price(S, K, T, r, sigma) - (S - K * math.exp(-r * T))

# ----------------------------
# Finite differences (central) on the closed-form call
# ----------------------------
@dataclass(frozen=True)
class GreeksBundle:
    delta: float
    vega: float
    theta: float
    gamma: float
    rho: float

    def as_dict(self):
        return {'delta': self.delta, 'vega': self.vega, 'theta': self.theta,
                'gamma': self.gamma, 'rho': self.rho}

def delta(S, K, T, r, sigma, eps=DEFAULT_BUMP):
    return (call_price(S + eps, K, T, r, sigma) - call_price(S - eps, K, T, r, sigma)) / (2 * eps)

def vega(S, K, T, r, sigma, eps=DEFAULT_BUMP):
    return (call_price(S, K, T, r, sigma + eps) - call_price(S, K, T, r, sigma - eps)) / (2 * eps)

def theta(S, K, T, r, sigma, eps=DEFAULT_BUMP):
    """
    Price decay as time passes: (C(T-eps) - C(T+eps)) / 2eps.
    The T bump runs the opposite way to the other Greeks, so a long call has theta < 0.
    T <= eps puts C(T-eps) outside the domain and raises InvalidParameters.
    """
    return (call_price(S, K, T - eps, r, sigma) - call_price(S, K, T + eps, r, sigma)) / (2 * eps)

def gamma(S, K, T, r, sigma, eps=DEFAULT_BUMP):
    up = call_price(S + eps, K, T, r, sigma)
    mid = call_price(S, K, T, r, sigma)
    dn = call_price(S - eps, K, T, r, sigma)
    return (up - 2 * mid + dn) / (eps ** 2)

def rho(S, K, T, r, sigma, eps=DEFAULT_BUMP):
    return (call_price(S, K, T, r + eps, sigma) - call_price(S, K, T, r - eps, sigma)) / (2 * eps)

def finite_difference_greeks(S, K, T, r, sigma, eps=DEFAULT_BUMP):
    """
    Delta, Vega, Theta, Gamma, Rho of the call by central differences with a fixed bump eps,
    one parameter at a time. Every bumped input must stay inside the closed-form domain.
    """
    require_positive(eps=eps)
    # validate the base point before any bump
    call_price(S, K, T, r, sigma)
    return GreeksBundle(
        delta=delta(S, K, T, r, sigma, eps),
        vega=vega(S, K, T, r, sigma, eps),
        theta=theta(S, K, T, r, sigma, eps),
        gamma=gamma(S, K, T, r, sigma, eps),
        rho=rho(S, K, T, r, sigma, eps),
    )
