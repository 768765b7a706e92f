"""Coefficient estimation and one-step prediction rules.

This module provides:
- Yule-Walker estimation for AR models (closed form for p <= 2, LU with
  partial pivoting above that)
- The AR, MA and ARMA one-step prediction rules used by every model
- A placeholder MA estimator with a fixed, reproducible output
- Pluggable estimation strategies for the MA/ARMA models, including an
  optional conditional sum-of-squares (CSS) fit

Singular or under-determined systems never raise. They return zero AR
coefficients so that the models degrade to deterministic forecasts.

References:
    - Box & Jenkins (1976): Time Series Analysis: Forecasting and Control
    - Hamilton (1994): Time Series Analysis
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np
from scipy import linalg, optimize

from ..logging import get_logger
from .utils import ArrayLike, as_series, autocovariance

logger = get_logger(__name__)

# Fixed MA coefficient returned by the placeholder estimator
MA_PLACEHOLDER_COEFFICIENT = 0.1


def yule_walker_system(x: ArrayLike, p: int) -> Tuple[np.ndarray, np.ndarray]:
    """Build the Yule-Walker normal equations R φ = r for an AR(p) model.

    Args:
        x: 1D time series array, shape (n,).
        p: AR order. Must be >= 1.

    Returns:
        Tuple of (R, r) where:
        - R: Toeplitz autocovariance matrix, R[i, j] = γ(|i - j|), shape (p, p).
        - r: Autocovariances [γ(1), ..., γ(p)], shape (p,).

    Raises:
        ValueError: If p < 1 or x is not 1D.
    """
    x = as_series(x)
    if p < 1:
        raise ValueError(f"p must be >= 1, got {p}")

    gamma = np.array([autocovariance(x, k) for k in range(p + 1)])
    return linalg.toeplitz(gamma[:p]), gamma[1:]


def solve_yule_walker(R: np.ndarray, r: np.ndarray) -> np.ndarray:
    """Solve R φ = r for the AR coefficients.

    p = 1 and p = 2 use closed forms (ratio and Cramer's rule). Larger systems
    are solved by LU decomposition with partial pivoting. Any exactly zero
    pivot or determinant yields a vector of zeros instead of an error.

    Args:
        R: Autocovariance matrix, shape (p, p).
        r: Right-hand side, shape (p,).

    Returns:
        AR coefficients [φ_1, ..., φ_p], shape (p,).
    """
    R = np.asarray(R, dtype=float)
    r = np.asarray(r, dtype=float)
    p = len(r)

    if p == 1:
        if R[0, 0] == 0:
            return np.zeros(1)
        return np.array([r[0] / R[0, 0]])

    if p == 2:
        det = R[0, 0] * R[1, 1] - R[0, 1] * R[1, 0]
        if det == 0:
            return np.zeros(2)
        phi1 = (r[0] * R[1, 1] - r[1] * R[0, 1]) / det
        phi2 = (r[1] * R[0, 0] - r[0] * R[1, 0]) / det
        return np.array([phi1, phi2])

    try:
        return np.linalg.solve(R, r)
    except np.linalg.LinAlgError:
        logger.warning(
            "Yule-Walker system for AR(%d) is singular; using zero coefficients", p
        )
        return np.zeros(p)


def estimate_ar_coefficients(x: ArrayLike, p: int) -> np.ndarray:
    """Estimate AR(p) coefficients via the Yule-Walker equations.

    Args:
        x: 1D time series array, shape (n,).
        p: AR order. Must be >= 0.

    Returns:
        AR coefficients [φ_1, ..., φ_p]. Empty for p = 0, and p zeros when
        n <= p or the system is singular.

    Example:
        >>> estimate_ar_coefficients([1.0, 2.0, 3.0, 4.0, 5.0], p=1)
        array([0.4])
    """
    x = as_series(x)
    if p == 0:
        return np.array([], dtype=float)
    if len(x) <= p:
        return np.zeros(p)

    R, r = yule_walker_system(x, p)
    return solve_yule_walker(R, r)


def predict_ar(history: ArrayLike, coefficients: ArrayLike) -> float:
    """One-step AR prediction.

    Args:
        history: Last p values, chronological (oldest first).
        coefficients: [φ_1, ..., φ_p]; φ_1 multiplies the most recent value.

    Returns:
        Σ φ_i x_{t-i}, or 0.0 when the lengths differ.

    Example:
        >>> predict_ar([8.0, 10.0], [0.5, 0.2])
        6.6
    """
    history = as_series(history, name="history")
    coefficients = as_series(coefficients, name="coefficients")
    if len(history) != len(coefficients):
        return 0.0
    return float(np.dot(coefficients, history[::-1]))


def estimate_ma_coefficients(x: ArrayLike, q: int) -> np.ndarray:
    """Placeholder MA(q) estimate.

    This is not a statistical estimator. It returns q copies of
    MA_PLACEHOLDER_COEFFICIENT regardless of the data, which keeps MA and ARMA
    forecasts reproducible. Use ConditionalSumOfSquaresEstimation for a
    data-driven fit.

    Args:
        x: 1D time series array (unused beyond validation).
        q: MA order.

    Returns:
        Array of shape (q,).
    """
    as_series(x)
    return np.full(q, MA_PLACEHOLDER_COEFFICIENT)


def predict_ma(past_errors: ArrayLike, coefficients: ArrayLike) -> float:
    """One-step MA prediction.

    Args:
        past_errors: Residuals most recent first, [e_{t-1}, ..., e_{t-q}].
        coefficients: [θ_1, ..., θ_q].

    Returns:
        Σ θ_i e_{t-i}, or 0.0 when fewer than q errors are given.
    """
    past_errors = as_series(past_errors, name="past_errors")
    coefficients = as_series(coefficients, name="coefficients")
    q = len(coefficients)
    if len(past_errors) < q:
        return 0.0
    return float(np.dot(coefficients, past_errors[:q]))


def predict_arma(
    ar_history: ArrayLike,
    ar_coefficients: ArrayLike,
    ma_errors: ArrayLike,
    ma_coefficients: ArrayLike,
) -> float:
    """One-step ARMA prediction: AR part plus MA part.

    Either part is zero when its coefficient vector is empty.
    """
    ar_part = predict_ar(ar_history, ar_coefficients) if len(ar_coefficients) > 0 else 0.0
    ma_part = predict_ma(ma_errors, ma_coefficients) if len(ma_coefficients) > 0 else 0.0
    return ar_part + ma_part


def estimate_arma_coefficients(
    x: ArrayLike, p: int, q: int
) -> Tuple[np.ndarray, np.ndarray]:
    """Two-stage ARMA(p, q) estimate.

    Fits AR(p) by Yule-Walker, then applies the placeholder MA estimator to the
    AR residuals x_t - predict_ar(x_{t-p..t-1}). This is an approximation, not
    a joint ARMA fit.

    Returns:
        Tuple of (ar_coefficients, ma_coefficients) with shapes (p,) and (q,).
    """
    x = as_series(x)
    ar_coefficients = estimate_ar_coefficients(x, p)

    residuals = x
    if p > 0:
        residuals = np.array(
            [x[t] - predict_ar(x[t - p : t], ar_coefficients) for t in range(p, len(x))]
        )

    return ar_coefficients, estimate_ma_coefficients(residuals, q)


def innovations(
    x: ArrayLike, ar_params: ArrayLike, ma_params: ArrayLike
) -> Tuple[np.ndarray, float]:
    """Compute one-step innovations and their conditional sum of squares.

    The first max(p, q) innovations are conditioned to zero.

    Args:
        x: 1D (centered) time series, shape (n,).
        ar_params: AR parameters [φ_1, ..., φ_p], shape (p,).
        ma_params: MA parameters [θ_1, ..., θ_q], shape (q,).

    Returns:
        Tuple of (innovations, css).
    """
    x = as_series(x)
    ar_params = as_series(ar_params, name="ar_params")
    ma_params = as_series(ma_params, name="ma_params")
    n = len(x)
    p = len(ar_params)
    q = len(ma_params)
    max_lag = max(p, q)

    eps = np.zeros(n)
    for t in range(max_lag, n):
        pred = 0.0
        if p > 0:
            pred += np.dot(ar_params, x[t - p : t][::-1])
        if q > 0:
            pred += np.dot(ma_params, eps[t - q : t][::-1])
        eps[t] = x[t] - pred

    return eps, float(np.sum(eps[max_lag:] ** 2))


class EstimationStrategy(ABC):
    """Coefficient estimator used by the MA and ARMA models.

    Implementations receive the mean-centered series and must return vectors
    of exactly length p and q.
    """

    name: str = "abstract"

    @abstractmethod
    def estimate(
        self, x: np.ndarray, p: int, q: int
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Return (ar_coefficients, ma_coefficients) for an ARMA(p, q) model."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class PlaceholderEstimation(EstimationStrategy):
    """Yule-Walker AR with the fixed placeholder MA coefficients.

    This is the default strategy. Its MA output does not depend on the data.
    """

    name = "placeholder"

    def estimate(
        self, x: np.ndarray, p: int, q: int
    ) -> Tuple[np.ndarray, np.ndarray]:
        return estimate_arma_coefficients(x, p, q)


class ConditionalSumOfSquaresEstimation(EstimationStrategy):
    """Fit ARMA coefficients by minimizing the conditional sum of squares.

    Starts from the Yule-Walker AR estimate and zero MA coefficients and runs
    L-BFGS-B with the MA coefficients bounded inside the invertibility region
    of each individual lag. Falls back to the placeholder result when the series
    is too short or the optimizer does not improve on its starting point.

    Args:
        min_extra_observations: Observations required beyond p + q.
        maxiter: Iteration limit for the optimizer.
        ma_bound: Absolute bound on each MA coefficient.
    """

    name = "css"

    def __init__(
        self,
        min_extra_observations: int = 10,
        maxiter: int = 1000,
        ma_bound: float = 0.99,
    ) -> None:
        if min_extra_observations < 0:
            raise ValueError(
                f"min_extra_observations must be >= 0, got {min_extra_observations}"
            )
        if maxiter < 1:
            raise ValueError(f"maxiter must be >= 1, got {maxiter}")
        if not 0.0 < ma_bound < 1.0:
            raise ValueError(f"ma_bound must be in (0, 1), got {ma_bound}")
        self.min_extra_observations = min_extra_observations
        self.maxiter = maxiter
        self.ma_bound = ma_bound

    def estimate(
        self, x: np.ndarray, p: int, q: int
    ) -> Tuple[np.ndarray, np.ndarray]:
        x = as_series(x)
        ar_start, ma_fallback = estimate_arma_coefficients(x, p, q)
        if p + q == 0:
            return ar_start, ma_fallback

        if len(x) < p + q + self.min_extra_observations:
            logger.debug(
                "CSS needs %d observations for ARMA(%d,%d), got %d; using placeholder",
                p + q + self.min_extra_observations,
                p,
                q,
                len(x),
            )
            return ar_start, ma_fallback

        def objective(params: np.ndarray) -> float:
            _, css = innovations(x, params[:p], params[p:])
            return css

        bounds: List[Tuple[Optional[float], Optional[float]]] = [(None, None)] * p
        bounds += [(-self.ma_bound, self.ma_bound)] * q

        start = np.concatenate([ar_start, np.zeros(q)])
        start_css = objective(start)
        result = optimize.minimize(
            objective,
            start,
            method="L-BFGS-B",
            bounds=bounds,
            options={"maxiter": self.maxiter},
        )
        if not np.all(np.isfinite(result.x)) or not result.fun <= start_css:
            logger.warning(
                "CSS fit for ARMA(%d,%d) failed (%s); using placeholder",
                p,
                q,
                result.message,
            )
            return ar_start, ma_fallback
        if not result.success:
            logger.debug("CSS optimizer stopped early: %s", result.message)

        logger.debug("CSS fit for ARMA(%d,%d): css=%.6g", p, q, result.fun)
        return result.x[:p].copy(), result.x[p:].copy()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(min_extra_observations="
            f"{self.min_extra_observations}, maxiter={self.maxiter}, "
            f"ma_bound={self.ma_bound})"
        )
