# tests/conftest.py
import pytest

from mc_engine.params import SimulationParameters


@pytest.fixture
def textbook():
    """S0=100, K=105, T=1, r=5%, sigma=20%."""
    return dict(S0=100.0, K=105.0, T=1.0, r=0.05, sigma=0.2)


@pytest.fixture
def small_params(textbook):
    return SimulationParameters(**textbook, n_sim=2_000, n_steps=12)
