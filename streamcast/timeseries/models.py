"""Streaming forecasting models: AR, MA, ARMA, ARIMA.

Every model is constructed from a TimeSeries, kept current by replacing that
series with update_time_series(), and queried with forecast(t, horizon).
Forecasting never changes the residual history used for future observations.

Coefficients that are not supplied through the params object are estimated
from the data and re-estimated whenever the series or the orders change.
Supplied coefficients are pinned and used verbatim. Short data and
coefficient/order mismatches degrade to zero or mean forecasts instead of
raising.

References:
    - Box & Jenkins (1976): Time Series Analysis: Forecasting and Control
    - Hamilton (1994): Time Series Analysis
"""

from __future__ import annotations

from collections import deque
from dataclasses import replace
from typing import Any, Deque, Optional, Tuple

import numpy as np

from ..logging import get_logger
from .estimation import (
    EstimationStrategy,
    PlaceholderEstimation,
    estimate_ar_coefficients,
    predict_ar,
    predict_ma,
)
from .params import (
    ARIMAParams,
    ARMAParams,
    ARParams,
    Coefficients,
    MAParams,
    check_changes,
)
from .types import TimePoint, TimeSeries
from .utils import as_series, difference, inverse_difference_forecast, mean

logger = get_logger(__name__)

_COEFFICIENT_FIELDS = frozenset({"ar_coefficients", "ma_coefficients", "coefficients"})


def _check_horizon(horizon: int) -> None:
    if horizon < 0:
        raise ValueError(f"horizon must be >= 0, got {horizon}")


def _as_coefficients(values: Coefficients, name: str) -> Optional[np.ndarray]:
    if values is None:
        return None
    return as_series(values, name=name).copy()


def _error_window(errors: Coefficients, q: int) -> Deque[float]:
    """Residual history of exactly q values, oldest first.

    Short histories are left-padded with zeros and long ones keep their most
    recent q values.
    """
    values = [] if errors is None else [float(e) for e in errors]
    padded = [0.0] * max(q - len(values), 0) + values
    return deque(padded, maxlen=q)


class AR:
    """Autoregressive (AR) forecaster.

    Models the series as:
        x_t = φ_1 x_{t-1} + ... + φ_p x_{t-p}

    on the raw (not mean-centered) values, with coefficients estimated by
    Yule-Walker unless pinned in ``params``.

    Args:
        time_series: Initial series.
        params: Model parameters. Defaults to AR(1) with estimated coefficients.

    Example:
        >>> ts = TimeSeries.from_values([1.0, 2.0, 3.0, 4.0, 5.0])
        >>> model = AR(ts, ARParams(p=1, coefficients=[0.9]))
        >>> model.forecast(5.0, 1)
        array([4.5])
    """

    name = "AR Forecaster"

    def __init__(self, time_series: TimeSeries, params: Optional[ARParams] = None) -> None:
        self.params = params if params is not None else ARParams()
        self.time_series = time_series
        self.coefficients = np.zeros(self.params.p)
        self._assign_coefficients()

    @property
    def is_pinned(self) -> bool:
        """Whether the coefficients were supplied rather than estimated."""
        return self.params.coefficients is not None

    def _assign_coefficients(self) -> None:
        pinned = _as_coefficients(self.params.coefficients, "coefficients")
        if pinned is not None:
            self.coefficients = pinned
            return

        values = self.time_series.values
        self.coefficients = estimate_ar_coefficients(values, self.params.p)
        logger.debug(
            "Estimated AR(%d) coefficients from %d points: %s",
            self.params.p,
            len(values),
            self.coefficients,
        )

    def update_time_series(self, time_series: TimeSeries) -> None:
        """Replace the series and re-estimate unpinned coefficients."""
        self.time_series = time_series
        if not self.is_pinned:
            self._assign_coefficients()

    def update_params(self, **changes: Any) -> None:
        """Apply a partial parameter update.

        Changing ``p`` or ``coefficients`` re-resolves the coefficients.

        Raises:
            ValueError: If a keyword is not an ARParams field.
            InvalidOrderError: If the new order is negative.
        """
        check_changes(self.params, changes)
        old_p = self.params.p
        self.params = replace(self.params, **changes)
        if self.params.p != old_p or "coefficients" in changes:
            self._assign_coefficients()
        logger.debug("AR parameters updated: %s", self.params)

    def forecast(self, t: float, horizon: int) -> np.ndarray:
        """Recursive multi-step forecast.

        Args:
            t: Time of the first forecast step (unused by the recursion).
            horizon: Number of steps.

        Returns:
            Forecasts, shape (horizon,). Zeros when the series holds fewer
            than p points or the coefficients cannot be matched to p.
        """
        _check_horizon(horizon)
        p = self.params.p
        values = self.time_series.values
        if len(values) < p:
            logger.debug("AR(%d) needs %d points, got %d; forecasting zeros", p, p, len(values))
            return np.zeros(horizon)

        if len(self.coefficients) != p:
            if not self.is_pinned:
                self._assign_coefficients()
            if len(self.coefficients) != p:
                logger.warning(
                    "AR coefficient count %d does not match order p=%d; forecasting zeros",
                    len(self.coefficients),
                    p,
                )
                return np.zeros(horizon)

        history = values[len(values) - p :].copy()
        forecasts = np.zeros(horizon)
        for h in range(horizon):
            forecasts[h] = predict_ar(history, self.coefficients)
            if p > 0:
                history = np.append(history[1:], forecasts[h])
        return forecasts

    def __repr__(self) -> str:
        return f"AR(p={self.params.p}, n={len(self.time_series)})"


class MA:
    """Moving-average (MA) forecaster.

    Models the mean-centered series as:
        x_t - μ = θ_1 e_{t-1} + ... + θ_q e_{t-q}

    and keeps the last q one-step residuals e. Each appended observation
    produces a residual computed from the history as it stood before the
    observation.

    Args:
        time_series: Initial series.
        params: Model parameters. Defaults to MA(1).
        strategy: Coefficient estimator for unpinned coefficients.
    """

    name = "MA Forecaster"

    def __init__(
        self,
        time_series: TimeSeries,
        params: Optional[MAParams] = None,
        strategy: Optional[EstimationStrategy] = None,
    ) -> None:
        self.params = params if params is not None else MAParams()
        self.strategy = strategy if strategy is not None else PlaceholderEstimation()
        self.time_series = time_series
        self.series_mean = 0.0
        self.coefficients = np.zeros(self.params.q)
        self._errors: Deque[float] = deque(maxlen=self.params.q)
        self._initialize(self.params.errors)

    @property
    def errors(self) -> np.ndarray:
        """Residual history, oldest first, shape (q,)."""
        return np.array(self._errors, dtype=float)

    def _initialize(self, errors: Coefficients) -> None:
        self.series_mean = mean(self.time_series.values)
        self._assign_coefficients()
        self._errors = _error_window(errors, self.params.q)

    def _assign_coefficients(self) -> None:
        pinned = _as_coefficients(self.params.coefficients, "coefficients")
        if pinned is not None:
            self.coefficients = pinned
            return
        centered = self.time_series.values - self.series_mean
        _, self.coefficients = self.strategy.estimate(centered, 0, self.params.q)

    def _past_errors(self) -> np.ndarray:
        return self.errors[::-1]

    def _observe(self, value: float) -> None:
        q = self.params.q
        if q == 0:
            return
        predicted = 0.0
        if len(self.coefficients) == q:
            predicted = predict_ma(self._past_errors(), self.coefficients)
        error = (value - self.series_mean) - predicted
        self._errors.append(error)
        logger.debug("MA residual for x=%g: %g", value, error)

    def update_time_series(self, time_series: TimeSeries) -> None:
        """Replace the series and record a residual for each appended point.

        The mean is recomputed over the whole new series before the residuals
        of the appended points are computed, oldest first.
        """
        old_length = len(self.time_series)
        self.time_series = time_series
        values = time_series.values
        self.series_mean = mean(values)
        if self.params.coefficients is None:
            self._assign_coefficients()

        if old_length > 0:
            for value in values[old_length:]:
                self._observe(float(value))

    def update_params(self, **changes: Any) -> None:
        """Apply a partial parameter update.

        Changing ``q`` re-initializes the coefficients and the residual
        history (from ``errors`` when supplied, zeros otherwise). Otherwise
        supplied coefficients replace the current ones and supplied errors are
        padded or truncated to q.
        """
        check_changes(self.params, changes)
        old_q = self.params.q
        self.params = replace(self.params, **changes)
        if self.params.q != old_q:
            self._initialize(changes.get("errors"))
        else:
            if "coefficients" in changes:
                self._assign_coefficients()
            if "errors" in changes:
                self._errors = _error_window(self.params.errors, self.params.q)
        logger.debug("MA parameters updated: %s", self.params)

    def forecast(self, t: float, horizon: int) -> np.ndarray:
        """Multi-step forecast with future residuals taken as zero.

        Returns:
            Forecasts, shape (horizon,). The mean repeated when q = 0 or the
            coefficients cannot be matched to q.
        """
        _check_horizon(horizon)
        q = self.params.q
        if q == 0:
            return np.full(horizon, self.series_mean)

        if len(self.coefficients) != q:
            if self.params.coefficients is None:
                self._assign_coefficients()
            if len(self.coefficients) != q:
                logger.warning(
                    "MA coefficient count %d does not match order q=%d; forecasting the mean",
                    len(self.coefficients),
                    q,
                )
                return np.full(horizon, self.series_mean)

        window = self._past_errors()
        forecasts = np.zeros(horizon)
        for h in range(horizon):
            forecasts[h] = predict_ma(window, self.coefficients) + self.series_mean
            window = np.concatenate(([0.0], window[:-1]))
        return forecasts

    def __repr__(self) -> str:
        return f"MA(q={self.params.q}, n={len(self.time_series)})"


class ARMA:
    """Autoregressive moving-average (ARMA) forecaster.

    Models the mean-centered series as:
        x_t - μ = Σ φ_i (x_{t-i} - μ) + Σ θ_j e_{t-j}

    Each coefficient side comes from, in order of precedence, its pinned
    array in ``params``, the matching slice of the combined
    ``params.coefficients`` array, or the estimation strategy.

    Args:
        time_series: Initial series.
        params: Model parameters. Defaults to ARMA(0, 0), a mean forecaster.
        strategy: Coefficient estimator for unpinned coefficients.

    Example:
        >>> ts = TimeSeries.from_values([8.0, 10.0, 12.0])
        >>> params = ARMAParams(p=1, q=1, ar_coefficients=[0.7],
        ...                     ma_coefficients=[0.3], errors=[0.2])
        >>> ARMA(ts, params).forecast(3.0, 2)
        array([11.46 , 11.022])
    """

    name = "ARMA Forecaster"

    def __init__(
        self,
        time_series: TimeSeries,
        params: Optional[ARMAParams] = None,
        strategy: Optional[EstimationStrategy] = None,
    ) -> None:
        self.params = params if params is not None else ARMAParams()
        self.strategy = strategy if strategy is not None else PlaceholderEstimation()
        self.time_series = time_series
        self.series_mean = 0.0
        self.ar_coefficients = np.zeros(self.params.p)
        self.ma_coefficients = np.zeros(self.params.q)
        self._errors: Deque[float] = deque(maxlen=self.params.q)
        self._initialize(self.params.errors)

    @property
    def errors(self) -> np.ndarray:
        """Residual history, oldest first, shape (q,)."""
        return np.array(self._errors, dtype=float)

    def _centered(self) -> np.ndarray:
        return self.time_series.values - self.series_mean

    def _initialize(self, errors: Coefficients) -> None:
        self.series_mean = mean(self.time_series.values)
        self._assign_coefficients()
        self._errors = _error_window(errors, self.params.q)
        logger.debug(
            "ARMA(%d,%d) initialized: mean=%g ar=%s ma=%s",
            self.params.p,
            self.params.q,
            self.series_mean,
            self.ar_coefficients,
            self.ma_coefficients,
        )

    def _resolve_pinned(self) -> Tuple[Optional[np.ndarray], Optional[np.ndarray]]:
        p, q = self.params.p, self.params.q
        ar = _as_coefficients(self.params.ar_coefficients, "ar_coefficients")
        ma = _as_coefficients(self.params.ma_coefficients, "ma_coefficients")
        combined = _as_coefficients(self.params.coefficients, "coefficients")
        if combined is None or (ar is not None and ma is not None):
            return ar, ma

        if len(combined) < p + q:
            logger.warning(
                "Combined coefficients hold %d values, ARMA(%d,%d) needs %d; estimating instead",
                len(combined),
                p,
                q,
                p + q,
            )
            return ar, ma

        if ar is None:
            ar = combined[:p]
        if ma is None:
            ma = combined[p : p + q]
        return ar, ma

    def _assign_coefficients(self) -> None:
        ar, ma = self._resolve_pinned()
        if ar is None or ma is None:
            est_ar, est_ma = self.strategy.estimate(self._centered(), self.params.p, self.params.q)
            ar = est_ar if ar is None else ar
            ma = est_ma if ma is None else ma
        self.ar_coefficients = ar
        self.ma_coefficients = ma

    def _coefficients_match(self) -> bool:
        p, q = self.params.p, self.params.q
        return (p == 0 or len(self.ar_coefficients) == p) and (
            q == 0 or len(self.ma_coefficients) == q
        )

    def _single_step(self, history: np.ndarray, past_errors: np.ndarray) -> float:
        """Centered one-step prediction from chronological history and
        most-recent-first errors."""
        p, q = self.params.p, self.params.q
        ar_part = 0.0
        if p > 0 and len(self.ar_coefficients) == p and len(history) >= p:
            ar_part = predict_ar(history[len(history) - p :], self.ar_coefficients)
        ma_part = 0.0
        if q > 0 and len(self.ma_coefficients) == q:
            ma_part = predict_ma(past_errors, self.ma_coefficients)
        return ar_part + ma_part

    def update_time_series(self, time_series: TimeSeries) -> None:
        """Replace the series, re-estimate unpinned coefficients and record a
        residual for each appended point, oldest first."""
        p, q = self.params.p, self.params.q
        old_length = len(self.time_series)
        self.time_series = time_series

        if len(time_series) == 0:
            self.series_mean = 0.0
            self._errors = _error_window(None, q)
            logger.debug("ARMA series is empty; mean and residual history reset")
            return

        self.series_mean = mean(time_series.values)
        self._assign_coefficients()
        if q == 0 or old_length == 0:
            return

        centered = self._centered()
        for i in range(old_length, len(centered)):
            if i < p:
                error = centered[i]
            else:
                error = centered[i] - self._single_step(centered[i - p : i], self.errors[::-1])
            self._errors.append(float(error))
            logger.debug("ARMA residual at index %d: %g", i, error)

    def update_params(self, **changes: Any) -> None:
        """Apply a partial parameter update.

        Changes to the orders or any coefficient field re-initialize the
        model, keeping the current residual history unless ``errors`` is
        supplied. An ``errors``-only change pads or truncates the new history
        to q.
        """
        check_changes(self.params, changes)
        old_p, old_q = self.params.p, self.params.q
        self.params = replace(self.params, **changes)
        if self.params.p != old_p or self.params.q != old_q or _COEFFICIENT_FIELDS & changes.keys():
            errors = changes["errors"] if "errors" in changes else list(self._errors)
            self._initialize(errors)
        elif "errors" in changes:
            self._errors = _error_window(self.params.errors, self.params.q)

    def forecast(self, t: float, horizon: int) -> np.ndarray:
        """Recursive multi-step forecast on the mean-centered scale.

        Future residuals are taken as zero and each centered forecast is fed
        back into the AR history.

        Returns:
            Forecasts, shape (horizon,). Zeros for an empty series with p > 0
            or q > 0; the mean when p = q = 0 or the coefficients cannot be
            matched to the orders.
        """
        _check_horizon(horizon)
        p, q = self.params.p, self.params.q
        if len(self.time_series) == 0 and (p > 0 or q > 0):
            return np.zeros(horizon)
        if p == 0 and q == 0:
            return np.full(horizon, self.series_mean)

        if not self._coefficients_match():
            self._assign_coefficients()
            if not self._coefficients_match():
                logger.warning(
                    "ARMA coefficient counts (%d, %d) do not match orders (%d, %d); "
                    "forecasting the mean",
                    len(self.ar_coefficients),
                    len(self.ma_coefficients),
                    p,
                    q,
                )
                return np.full(horizon, self.series_mean)

        centered = self._centered()
        history = centered[max(len(centered) - p, 0) :]
        if len(history) < p:
            history = np.concatenate([np.zeros(p - len(history)), history])
        window = self.errors[::-1]

        forecasts = np.zeros(horizon)
        for h in range(horizon):
            step = self._single_step(history, window)
            forecasts[h] = step + self.series_mean
            if p > 0:
                history = np.append(history[1:], step)
            if q > 0:
                window = np.concatenate(([0.0], window[:-1]))
        return forecasts

    def __repr__(self) -> str:
        return f"ARMA(p={self.params.p}, q={self.params.q}, n={len(self.time_series)})"


class ARIMA:
    """Autoregressive integrated moving-average (ARIMA) forecaster.

    Differences the raw series d times, delegates to an ARMA(p, q) model over
    the differenced series and integrates its forecasts back to the original
    scale.

    The model is uninitialized while the raw series holds d points or fewer;
    it then forecasts the raw mean.

    Args:
        time_series: Initial raw series.
        params: Model parameters. Defaults to ARIMA(0, 0, 0).
        strategy: Forwarded to the inner ARMA model.

    Example:
        >>> ts = TimeSeries.from_values([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], start=1.0)
        >>> ARIMA(ts, ARIMAParams(p=0, d=1, q=0)).forecast(7.0, 2)
        array([7., 8.])
    """

    name = "ARIMA Forecaster"

    def __init__(
        self,
        time_series: TimeSeries,
        params: Optional[ARIMAParams] = None,
        strategy: Optional[EstimationStrategy] = None,
    ) -> None:
        self.params = params if params is not None else ARIMAParams()
        self.strategy = strategy if strategy is not None else PlaceholderEstimation()
        self.time_series = time_series
        self.differenced_series = time_series.with_points(())
        self.arma: Optional[ARMA] = None
        self._rebuild(reuse=False)

    @property
    def is_ready(self) -> bool:
        """Whether an ARMA model over the differenced series exists."""
        return self.arma is not None

    def _rebuild(self, reuse: bool) -> None:
        d = self.params.d
        points = self.time_series.points
        if len(points) <= d:
            self.differenced_series = self.time_series.with_points(())
            self.arma = None
            logger.debug(
                "ARIMA needs more than %d points to difference, got %d; uninitialized",
                d,
                len(points),
            )
            return

        diffed = difference(self.time_series.values, d)
        self.differenced_series = self.time_series.with_points(
            TimePoint(t=points[i + d].t, x=float(v)) for i, v in enumerate(diffed)
        )
        if reuse and self.arma is not None:
            self.arma.update_time_series(self.differenced_series)
        else:
            self.arma = ARMA(self.differenced_series, self.params.arma_params(), self.strategy)
            logger.debug("ARIMA built %r over %d differences", self.arma, len(diffed))

    def update_time_series(self, time_series: TimeSeries) -> None:
        """Replace the raw series and re-derive the differenced series.

        An existing ARMA model receives the new differenced series and so
        keeps its residual history.
        """
        self.time_series = time_series
        self._rebuild(reuse=True)

    def update_params(self, **changes: Any) -> None:
        """Apply a partial parameter update.

        Changing ``d`` rebuilds the ARMA model from scratch. Other changes are
        forwarded to the existing ARMA model.
        """
        check_changes(self.params, changes)
        old_d = self.params.d
        self.params = replace(self.params, **changes)
        if self.params.d != old_d or self.arma is None:
            self._rebuild(reuse=False)
            return

        forwarded = {k: v for k, v in changes.items() if k != "d"}
        if forwarded:
            self.arma.update_params(**forwarded)

    def _original_tail(self, values: np.ndarray) -> np.ndarray:
        d = self.params.d
        tail = list(values[len(values) - d :]) if len(values) > 0 else []
        if len(tail) < d:
            pad = tail[0] if tail else mean(values)
            tail = [pad] * (d - len(tail)) + tail
        return np.array(tail, dtype=float)

    def forecast(self, t: float, horizon: int) -> np.ndarray:
        """Forecast on the original scale.

        Returns:
            Forecasts, shape (horizon,). The raw mean (0 for an empty series)
            while uninitialized.
        """
        _check_horizon(horizon)
        values = self.time_series.values
        if self.arma is None:
            return np.full(horizon, mean(values))

        diff_forecasts = self.arma.forecast(t, horizon)
        d = self.params.d
        if d == 0:
            return diff_forecasts

        tail: Deque[float] = deque(self._original_tail(values), maxlen=d)
        forecasts = np.zeros(horizon)
        for h, step in enumerate(diff_forecasts):
            forecasts[h] = inverse_difference_forecast(step, np.array(tail), d)
            tail.append(forecasts[h])
        return forecasts

    def __repr__(self) -> str:
        return (
            f"ARIMA(p={self.params.p}, d={self.params.d}, q={self.params.q}, "
            f"n={len(self.time_series)})"
        )
