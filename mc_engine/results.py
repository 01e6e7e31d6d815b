# mc_engine/results.py
import logging
from dataclasses import dataclass

import pandas as pd

from mc_engine import black_scholes
from mc_engine.mc_pricer import mc_price_call_put

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingSummary:
    call: object      # PayoffEstimate
    put: object       # PayoffEstimate
    bs_call: float
    bs_put: float
    greeks: object    # GreeksBundle

    def as_dict(self):
        return {
            'mc_call': self.call.price, 'mc_call_se': self.call.standard_error,
            'mc_call_ci': self.call.confidence_interval,
            'mc_put': self.put.price, 'mc_put_se': self.put.standard_error,
            'mc_put_ci': self.put.confidence_interval,
            'bs_call': self.bs_call, 'bs_put': self.bs_put,
            **self.greeks.as_dict(),
        }

    def to_frame(self):
        """One row per option kind: MC price, SE, CI bounds and the Black-Scholes benchmark."""
        rows = []
        for est, bench in ((self.call, self.bs_call), (self.put, self.bs_put)):
            low, high = est.confidence_interval
            rows.append({'option': est.option, 'mc_price': est.price, 'std_error': est.standard_error,
                         'ci_low': low, 'ci_high': high, 'black_scholes': bench,
                         'difference': est.price - bench})
        return pd.DataFrame(rows).set_index('option')

    def greeks_frame(self):
        return pd.Series(self.greeks.as_dict(), name='value').to_frame()


def aggregate(call_estimate, put_estimate, bs_call, bs_put, greeks):
    """Assemble the reportable summary; no computation happens here."""
    return PricingSummary(call=call_estimate, put=put_estimate,
                          bs_call=bs_call, bs_put=bs_put, greeks=greeks)


def price_summary(params, seed=None, eps=black_scholes.DEFAULT_BUMP, batch_size=None):
    """
    Full pipeline for one request: MC call/put from one antithetic simulation,
    closed-form benchmark and finite-difference Greeks from the same inputs.
    """
    call_est, put_est = mc_price_call_put(params, seed=seed, batch_size=batch_size)
    args = (params.S0, params.K, params.T, params.r, params.sigma)
    summary = aggregate(call_est, put_est,
                        black_scholes.call_price(*args), black_scholes.put_price(*args),
                        black_scholes.finite_difference_greeks(*args, eps=eps))
    logger.info("priced S0=%.4f K=%.4f T=%.4f: MC call %.4f vs BS %.4f",
                params.S0, params.K, params.T, call_est.price, summary.bs_call)
    return summary
