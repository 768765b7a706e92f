"""Numerical primitives shared by the forecasting models.

This module provides the stateless building blocks used throughout the
timeseries package: moments, autocovariance, differencing, binomial
coefficients and the single-step inversion of a differenced forecast.

Insufficient data never raises here. Empty inputs give 0 for the moments
and an empty array for differencing. The only raised conditions are negative
orders and a too-short tail for inverse differencing.

References:
    - Box & Jenkins (1976): Time Series Analysis: Forecasting and Control
    - Brockwell & Davis (2016): Introduction to Time Series and Forecasting
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from .errors import InsufficientHistoryError, InvalidOrderError

ArrayLike = Union[np.ndarray, Sequence[float]]


def as_series(x: ArrayLike, name: str = "x") -> np.ndarray:
    """Convert input to a 1D float array, rejecting other shapes."""
    arr = np.asarray(x, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be 1D array, got shape {arr.shape}")
    return arr


def mean(x: ArrayLike) -> float:
    """Arithmetic mean, 0.0 for an empty series.

    Example:
        >>> mean([1.0, 2.0, 3.0, 4.0, 5.0])
        3.0
        >>> mean([])
        0.0
    """
    x = as_series(x)
    if len(x) == 0:
        return 0.0
    return float(np.mean(x))


def variance(x: ArrayLike, population: bool = False) -> float:
    """Population (divide by n) or sample (divide by n-1) variance.

    Returns 0.0 when there are too few observations for the requested kind:
    always for n=0, and for n=1 when the sample variance is requested.

    Example:
        >>> variance([1.0, 2.0, 3.0, 4.0, 5.0], population=True)
        2.0
        >>> variance([1.0, 2.0, 3.0, 4.0, 5.0])
        2.5
    """
    x = as_series(x)
    ddof = 0 if population else 1
    if len(x) <= ddof:
        return 0.0
    return float(np.var(x, ddof=ddof))


def autocovariance(x: ArrayLike, lag: int) -> float:
    """Biased sample autocovariance at a single lag.

    Computes:
        γ(k) = (1/n) * Σ_{i=0}^{n-k-1} (x_i - x̄)(x_{i+k} - x̄)

    The 1/n divisor keeps the Yule-Walker matrix positive semi-definite and
    makes γ(0) equal the population variance.

    Args:
        x: 1D time series array, shape (n,).
        lag: Lag k.

    Returns:
        γ(k), or 0.0 when k < 0, k >= n or the series is empty.

    Example:
        >>> x = [1.0, 2.0, 3.0, 4.0, 5.0]
        >>> autocovariance(x, 1)
        0.8
    """
    x = as_series(x)
    n = len(x)
    if lag < 0 or lag >= n:
        return 0.0

    centered = x - np.mean(x)
    return float(np.dot(centered[: n - lag], centered[lag:]) / n)


def difference(x: ArrayLike, d: int = 1) -> np.ndarray:
    """Apply first differencing d times: Δx_t = x_t - x_{t-1}.

    Args:
        x: 1D array of time series values, shape (n,).
        d: Number of times to apply first differencing. Must be >= 0.

    Returns:
        Differenced series of length n - d, a copy of x for d=0, or an
        empty array when n <= d.

    Raises:
        InvalidOrderError: If d < 0.

    Example:
        >>> difference([1.0, 3.0, 6.0, 10.0, 15.0], d=1)
        array([2., 3., 4., 5.])
        >>> difference([1.0, 3.0, 6.0, 10.0, 15.0], d=2)
        array([1., 1., 1.])
    """
    x = as_series(x)
    if d < 0:
        raise InvalidOrderError(f"differencing order d must be >= 0, got {d}")
    if d == 0:
        return x.copy()
    if len(x) <= d:
        return np.array([], dtype=float)
    return np.diff(x, n=d)


def combinations(n: int, k: int) -> int:
    """Binomial coefficient C(n, k).

    Evaluated multiplicatively over min(k, n-k) factors, so intermediate
    values stay small for the differencing orders used here.

    Example:
        >>> combinations(4, 2)
        6
        >>> combinations(10, 7)
        120
        >>> combinations(5, -1)
        0
    """
    if k < 0 or k > n:
        return 0
    k = min(k, n - k)
    result = 1
    for i in range(1, k + 1):
        # Exact at every step: result * (n - i + 1) is divisible by i
        result = result * (n - i + 1) // i
    return result


def inverse_difference_forecast(forecast: float, tail: ArrayLike, d: int) -> float:
    """Reconstruct one original-scale value from a d-th difference forecast.

    If y_t = (1 - L)^d x_t then

        x_t = y_t + Σ_{k=1}^{d} (-1)^{k+1} C(d, k) x_{t-k}

    which needs the last d original values x_{t-d}, ..., x_{t-1}.

    Args:
        forecast: Forecast of the d-th differenced series.
        tail: Original-scale values, chronological with the most recent last.
            Only the last d entries are used.
        d: Differencing order.

    Returns:
        The forecast on the original scale.

    Raises:
        InvalidOrderError: If d < 0.
        InsufficientHistoryError: If tail has fewer than d values.

    Example:
        >>> inverse_difference_forecast(6.0, [10.0, 15.0], d=1)
        21.0
        >>> inverse_difference_forecast(1.0, [6.0, 10.0, 15.0], d=2)
        21.0
    """
    if d < 0:
        raise InvalidOrderError(f"differencing order d must be >= 0, got {d}")
    if d == 0:
        return float(forecast)

    tail = as_series(tail, name="tail")
    if len(tail) < d:
        raise InsufficientHistoryError(
            f"inverse differencing of order {d} needs at least {d} original "
            f"values, got {len(tail)}"
        )

    if d == 1:
        return float(forecast + tail[-1])

    value = float(forecast)
    for k in range(1, d + 1):
        sign = 1 if k % 2 == 1 else -1
        value += sign * combinations(d, k) * tail[-k]
    return float(value)
