"""Lagged-gradient forecaster.

Extrapolates the last observation along a smoothed slope measured over a
lookback window. Up to three nested segments ending at the last point are
measured, oldest first, and blended with exponential smoothing so that the
most recent segment carries the weight ``smoothing_factor``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, List, Optional

import numpy as np

from ..logging import get_logger
from .params import LaggedGradientParams, check_changes
from .types import TimeSeries

logger = get_logger(__name__)

# Maximum number of segments blended into the smoothed gradient
_MAX_SEGMENTS = 3


class LaggedGradient:
    """Linear extrapolation from a smoothed recent slope.

    Args:
        time_series: Initial series.
        params: Lookback and smoothing settings.

    Example:
        >>> ts = TimeSeries.from_values([10.0, 12.0, 14.0, 16.0, 18.0])
        >>> model = LaggedGradient(ts, LaggedGradientParams(lookback_period=3))
        >>> model.forecast(5.0, 3)
        array([20., 22., 24.])
    """

    name = "Lagged Gradient"

    def __init__(
        self,
        time_series: TimeSeries,
        params: Optional[LaggedGradientParams] = None,
    ) -> None:
        self.params = params if params is not None else LaggedGradientParams()
        self.time_series = time_series

    def update_time_series(self, time_series: TimeSeries) -> None:
        self.time_series = time_series

    def update_params(self, **changes: Any) -> None:
        check_changes(self.params, changes)
        self.params = replace(self.params, **changes)

    def _segment_gradient(self, start: int, end: int) -> float:
        points = self.time_series.points
        if start >= end or end >= len(points):
            return 0.0
        dt = points[end].t - points[start].t
        if dt == 0:
            return 0.0
        return (points[end].x - points[start].x) / dt

    def smoothed_gradient(self) -> float:
        """Exponentially smoothed slope over the lookback window.

        Returns 0.0 for fewer than two points or a zero lookback.
        """
        n = len(self.time_series)
        if n < 2:
            return 0.0

        end = n - 1
        start = max(0, end - self.params.lookback_period)
        segments = min(_MAX_SEGMENTS, end - start)

        gradients: List[float] = []
        for i in range(segments):
            seg_start = start + i
            seg_end = end - (segments - 1 - i)
            if seg_start < seg_end:
                gradients.append(self._segment_gradient(seg_start, seg_end))
        if not gradients:
            return 0.0

        alpha = self.params.smoothing_factor
        smoothed = gradients[0]
        for gradient in gradients[1:]:
            smoothed = alpha * gradient + (1 - alpha) * smoothed
        return smoothed

    def forecast(self, t: float, horizon: int) -> np.ndarray:
        """Forecast at t, t + tick, ..., t + (horizon - 1) * tick.

        Returns:
            Forecasts, shape (horizon,). Zeros for an empty series.
        """
        if horizon < 0:
            raise ValueError(f"horizon must be >= 0, got {horizon}")
        if len(self.time_series) == 0:
            return np.zeros(horizon)

        last = self.time_series.points[-1]
        gradient = self.smoothed_gradient()
        steps = t + np.arange(horizon) * self.time_series.tick_duration
        logger.debug("Lagged gradient %g from t=%g", gradient, last.t)
        return last.x + gradient * (steps - last.t)

    def __repr__(self) -> str:
        return (
            f"LaggedGradient(lookback_period={self.params.lookback_period}, "
            f"smoothing_factor={self.params.smoothing_factor})"
        )
