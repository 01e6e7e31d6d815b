# mc_engine/errors.py

class PricingError(Exception):
    """Base class for every error raised by the pricing engine."""


class InvalidParameters(PricingError, ValueError):
    """Model input outside its domain (S0, K, T, sigma <= 0, n_sim/n_steps < 1, non-finite)."""


class InsufficientSamples(PricingError, ValueError):
    """Fewer than two samples, so a standard error cannot be formed."""


class UpstreamDataUnavailable(PricingError, RuntimeError):
    """Market data provider failed (spot history, implied vol, rates)."""
