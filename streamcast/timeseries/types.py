"""Value types exchanged between the forecasting engine and its callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol, Tuple

import numpy as np

from .utils import ArrayLike, as_series


@dataclass(frozen=True)
class TimePoint:
    """A single observation x at time t."""

    t: float
    x: float


@dataclass(frozen=True)
class TimeSeries:
    """Ordered sequence of observations.

    Points are assumed to be in ascending ``t``; the engine never sorts or
    checks them. ``tick_duration`` is the nominal spacing between points and
    ``time_unit`` is a free-form tag such as ``"ms"`` or ``"s"``.

    Attributes:
        points: Observations in chronological order.
        tick_duration: Nominal spacing between consecutive points.
        time_unit: Unit of ``t`` and ``tick_duration``.
    """

    points: Tuple[TimePoint, ...] = field(default_factory=tuple)
    tick_duration: float = 1.0
    time_unit: str = "s"

    def __post_init__(self) -> None:
        # Accept any iterable of points but store an immutable tuple
        object.__setattr__(self, "points", tuple(self.points))

    @classmethod
    def from_values(
        cls,
        values: ArrayLike,
        start: float = 0.0,
        tick_duration: float = 1.0,
        time_unit: str = "s",
    ) -> "TimeSeries":
        """Build an evenly spaced series starting at ``start``.

        Example:
            >>> ts = TimeSeries.from_values([1.0, 2.0, 3.0], start=1.0)
            >>> ts.times
            array([1., 2., 3.])
        """
        values = as_series(values, name="values")
        points = tuple(
            TimePoint(t=start + i * tick_duration, x=float(v))
            for i, v in enumerate(values)
        )
        return cls(points=points, tick_duration=tick_duration, time_unit=time_unit)

    def with_points(self, points: Iterable[TimePoint]) -> "TimeSeries":
        """Return a series with the same spacing and unit but new points."""
        return TimeSeries(
            points=tuple(points),
            tick_duration=self.tick_duration,
            time_unit=self.time_unit,
        )

    @property
    def values(self) -> np.ndarray:
        """Observation values, shape (n,)."""
        return np.array([p.x for p in self.points], dtype=float)

    @property
    def times(self) -> np.ndarray:
        """Observation times, shape (n,)."""
        return np.array([p.t for p in self.points], dtype=float)

    def __len__(self) -> int:
        return len(self.points)


class ForecastModel(Protocol):
    """Protocol shared by every forecaster in the package.

    A forecaster holds the current series, is updated by replacing that series
    or its parameters, and produces point forecasts without altering the state
    used for future observations.
    """

    name: str

    def forecast(self, t: float, horizon: int) -> np.ndarray:
        """
        Forecast ``horizon`` values spaced by the series' tick duration.

        Parameters
        ----------
        t:
            Time of the first forecast step.
        horizon:
            Number of steps to forecast.

        Returns
        -------
        np.ndarray
            Forecasts, shape (horizon,).
        """
        ...

    def update_time_series(self, time_series: TimeSeries) -> None:
        """Replace the current series with ``time_series``."""
        ...

    def update_params(self, **changes: Any) -> None:
        """Apply a partial parameter update."""
        ...
