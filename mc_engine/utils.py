# mc_engine/utils.py
# Market inputs for the engine: spot, volatility, risk-free rate.
import logging
import math
import os
import time

import numpy as np
import pandas as pd
import yfinance as yf
from fredapi import Fred

from mc_engine.errors import UpstreamDataUnavailable

try:
    from pandas_datareader import data as pdr
except Exception:
    pdr = None

logger = logging.getLogger(__name__)

DEFAULT_SIGMA = 0.2


def _close_series(df, preferred=('Adj Close', 'Close')):
    """Pick the adjusted/plain close column; newer yfinance returns (field, ticker) columns."""
    col = next((c for c in preferred if c in df.columns), None)
    if col is None:
        return None
    series = df[col]
    if isinstance(series, pd.DataFrame):
        series = series.iloc[:, 0]
    return series.dropna().sort_index()


def fetch_spot_history(ticker='SPY', period='2y', interval='1d', retries=3, pause=1.0, threads=False):
    """
    Robust spot fetcher:
    - tries yf.download() a few times
    - falls back to Ticker.history()
    - final fallback to pandas_datareader stooq (if importable)
    Returns a pandas Series of close prices (ascending index).
    Raises UpstreamDataUnavailable when every source fails.
    """
    last_exc = None

    for attempt in range(1, retries + 1):
        try:
            logger.info("attempt %d: yf.download(%s, period=%s, interval=%s)", attempt, ticker, period, interval)
            df = yf.download(ticker, period=period, interval=interval, progress=False, threads=threads)
            if isinstance(df, pd.DataFrame) and len(df) > 0:
                series = _close_series(df)
                if series is not None and len(series) > 0:
                    logger.info("yf.download succeeded, rows=%d", len(series))
                    return series
                last_exc = RuntimeError("download returned no close prices")
            else:
                last_exc = RuntimeError("download returned empty dataframe")
        except Exception as e:
            last_exc = e
            logger.warning("yf.download attempt %d failed: %s: %s", attempt, type(e).__name__, e)
        if attempt < retries:
            time.sleep(pause)

    try:
        logger.info("trying fallback: yf.Ticker(%s).history()", ticker)
        hist = yf.Ticker(ticker).history(period=period, interval=interval)
        if isinstance(hist, pd.DataFrame) and len(hist) > 0:
            series = _close_series(hist, preferred=('Close',))
            if series is not None and len(series) > 0:
                return series
            last_exc = RuntimeError("Ticker.history returned no close prices")
        else:
            last_exc = RuntimeError("Ticker.history returned empty dataframe")
    except Exception as e:
        last_exc = e
        logger.warning("Ticker.history failed: %s: %s", type(e).__name__, e)

    if pdr is not None:
        try:
            logger.info("trying fallback: pandas_datareader stooq")
            st = pdr.DataReader(ticker, 'stooq')
            if isinstance(st, pd.DataFrame) and len(st) > 0:
                # stooq index is descending
                series = _close_series(st, preferred=('Close',))
                if series is not None and len(series) > 0:
                    return series
                last_exc = RuntimeError("stooq returned no close column")
            else:
                last_exc = RuntimeError("stooq returned empty dataframe")
        except Exception as e:
            last_exc = e
            logger.warning("stooq failed: %s: %s", type(e).__name__, e)

    raise UpstreamDataUnavailable(f"All data sources failed for ticker {ticker}. Last exception: {last_exc!r}")


def historical_volatility(price_series, trading_days=252):
    """
    Annualized historical volatility from log returns (sample std, ddof=1).
    """
    logrets = np.log(price_series / price_series.shift(1)).dropna()
    if len(logrets) < 2:
        raise UpstreamDataUnavailable("need at least 3 prices to estimate volatility")
    daily_std = logrets.std(ddof=1)
    return float(daily_std * np.sqrt(trading_days))


def _pick_expiry(expiries, maturity=None):
    """Listed expiry closest to `maturity` years from today (first listed when maturity is None)."""
    if maturity is None:
        return expiries[0]
    target = pd.Timestamp.today().normalize() + pd.Timedelta(days=365.0 * maturity)
    return min(expiries, key=lambda e: abs(pd.Timestamp(e) - target))


def fetch_implied_volatility(ticker, strike, maturity=None):
    """
    Implied volatility of the listed call nearest to `strike` on the expiry closest to `maturity`.
    Raises UpstreamDataUnavailable if the chain is missing or the quote is unusable.
    """
    try:
        tk = yf.Ticker(ticker)
        expiries = tk.options
        if not expiries:
            raise UpstreamDataUnavailable(f"no listed options for {ticker}")
        expiry = _pick_expiry(expiries, maturity)
        calls = tk.option_chain(expiry).calls
    except UpstreamDataUnavailable:
        raise
    except Exception as e:
        raise UpstreamDataUnavailable(f"option chain lookup failed for {ticker}: {e!r}") from e

    if calls is None or len(calls) == 0 or 'impliedVolatility' not in calls.columns:
        raise UpstreamDataUnavailable(f"empty call chain for {ticker} {expiry}")
    row = calls.iloc[(calls['strike'] - strike).abs().argsort().iloc[0]]
    iv = float(row['impliedVolatility'])
    if not math.isfinite(iv) or iv <= 0:
        raise UpstreamDataUnavailable(f"unusable implied vol {iv!r} for {ticker} K={row['strike']}")
    logger.info("implied vol %s %s K=%.2f: %.4f", ticker, expiry, row['strike'], iv)
    return iv


def resolve_market_inputs(ticker, strike=None, maturity=None, default_sigma=DEFAULT_SIGMA, period='2y',
                          moneyness=1.0):
    """
    (S0, sigma) for a ticker. S0 is the last close; sigma is the option-chain implied vol at
    `strike` (S0 * moneyness when strike is None), or default_sigma when that lookup fails.
    A spot failure is not recoverable and propagates.
    """
    series = fetch_spot_history(ticker, period=period)
    S0 = float(series.iloc[-1])
    try:
        sigma = fetch_implied_volatility(ticker, S0 * moneyness if strike is None else strike, maturity)
    except UpstreamDataUnavailable as e:
        logger.warning("implied vol unavailable (%s); falling back to sigma=%.4f", e, default_sigma)
        sigma = default_sigma
    return S0, sigma


def get_risk_free_rate_from_fred(series="DGS3MO"):
    """
    Fetch the most recent risk-free rate from FRED.

    series: FRED series ID (default = 3M T-bill rate)
    Returns the latest value as a decimal (e.g., 0.052 for 5.2%)
    """
    api_key = os.environ.get("FRED_API_KEY")
    if api_key is None:
        raise ValueError("FRED_API_KEY environment variable is not set.")

    try:
        data = Fred(api_key=api_key).get_series(series)
    except Exception as e:
        raise UpstreamDataUnavailable(f"FRED series {series} unavailable: {e!r}") from e
    latest_rate = data.dropna().iloc[-1]

    # percent -> decimal
    return float(latest_rate) / 100.0
