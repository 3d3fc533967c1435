"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def survival_data(rng):
    """Right-censored exponential survival data with two covariates.

    The first covariate shortens survival, the second has no effect.
    """
    n = 60
    X = rng.standard_normal((n, 2))
    event_time = rng.exponential(scale=np.exp(-0.8 * X[:, 0]))
    censor_time = rng.exponential(scale=2.0, size=n)
    time = np.minimum(event_time, censor_time) + 0.01
    censor_type = np.where(event_time <= censor_time, "none", "right")
    return X, time, censor_type


@pytest.fixture
def mixed_censoring_data(rng):
    """Exact, right-, left- and interval-censored subjects with one covariate."""
    n = 48
    X = rng.standard_normal((n, 1))
    t = rng.exponential(scale=np.exp(-0.5 * X[:, 0])) + 0.05
    kinds = np.array(["none", "right", "left", "interval"] * (n // 4))
    time = t.copy()
    upper = np.full(n, np.nan)
    # right: censored at half the event time; left: observed at 1.5x
    time[kinds == "right"] *= 0.5
    time[kinds == "left"] *= 1.5
    interval = kinds == "interval"
    time[interval] = t[interval] * 0.7
    upper[interval] = t[interval] * 1.3
    return X, time, kinds, upper
