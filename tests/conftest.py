"""Pytest configuration and shared fixtures for streamcast tests.

This module provides:
- A deterministic numpy RNG fixture
- Series builders shared by the forecasting tests
"""

import os

import numpy as np
import pytest

from streamcast.timeseries import TimeSeries


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    This ensures tests are reproducible while allowing override for debugging.

    Returns:
        A seeded numpy.random.Generator instance.
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture
def ramp() -> TimeSeries:
    """The series 1, 2, ..., 6 at t = 1, ..., 6."""
    return TimeSeries.from_values([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], start=1.0)


@pytest.fixture
def ar1_series(rng: np.random.Generator) -> TimeSeries:
    """500 points of a mean-zero AR(1) process with phi = 0.7."""
    n = 500
    eps = rng.normal(size=n)
    x = np.zeros(n)
    for t in range(1, n):
        x[t] = 0.7 * x[t - 1] + eps[t]
    return TimeSeries.from_values(x)
