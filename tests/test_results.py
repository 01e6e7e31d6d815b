# tests/test_results.py
import dataclasses

import pytest

from mc_engine.black_scholes import GreeksBundle, call_price, finite_difference_greeks, put_price
from mc_engine.errors import InvalidParameters
from mc_engine.mc_pricer import PayoffEstimate, mc_price_call_put
from mc_engine.params import SimulationParameters
from mc_engine.results import aggregate, price_summary


def _estimate(option, price):
    return PayoffEstimate(option=option, price=price, standard_error=0.1,
                          confidence_interval=(price - 0.196, price + 0.196), n_samples=1000)


def test_aggregate_is_pure_assembly():
    greeks = GreeksBundle(delta=0.5, vega=39.0, theta=-6.0, gamma=0.02, rho=40.0)
    call, put = _estimate('call', 8.0), _estimate('put', 7.9)
    summary = aggregate(call, put, 8.02, 7.90, greeks)
    assert summary.call is call and summary.put is put and summary.greeks is greeks
    d = summary.as_dict()
    assert d['mc_call'] == 8.0 and d['bs_put'] == 7.90 and d['theta'] == -6.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        summary.bs_call = 0.0

def test_summary_frames():
    greeks = GreeksBundle(delta=0.5, vega=39.0, theta=-6.0, gamma=0.02, rho=40.0)
    summary = aggregate(_estimate('call', 8.0), _estimate('put', 7.9), 8.02, 7.90, greeks)
    frame = summary.to_frame()
    assert list(frame.index) == ['call', 'put']
    assert frame.loc['call', 'difference'] == pytest.approx(-0.02)
    assert frame.loc['put', 'ci_low'] == pytest.approx(7.9 - 0.196)
    assert summary.greeks_frame().loc['gamma', 'value'] == 0.02

def test_price_summary_pipeline(textbook):
    params = SimulationParameters(**textbook, n_sim=20_000, n_steps=10)
    summary = price_summary(params, seed=123, batch_size=5_000)
    args = (params.S0, params.K, params.T, params.r, params.sigma)
    assert summary.bs_call == call_price(*args)
    assert summary.bs_put == put_price(*args)
    assert summary.greeks == finite_difference_greeks(*args)
    call, put = mc_price_call_put(params, seed=123)
    assert summary.call == call and summary.put == put

def test_price_summary_propagates_errors(textbook):
    params = SimulationParameters(**dict(textbook, T=0.005), n_sim=100, n_steps=2)
    with pytest.raises(InvalidParameters):
        price_summary(params, seed=1, eps=0.01)
