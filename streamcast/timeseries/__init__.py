"""Streaming time-series forecasting for streamcast.

This module provides AR, MA, ARMA and ARIMA forecasters that are kept current
by replacing their time series as new observations arrive, together with the
numerical primitives and coefficient estimators they are built on.

Example:
    >>> from streamcast.timeseries import ARIMA, ARIMAParams, TimeSeries
    >>>
    >>> ts = TimeSeries.from_values([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], start=1.0)
    >>> model = ARIMA(ts, ARIMAParams(p=1, d=1, q=0, ar_coefficients=[0.5]))
    >>> model.forecast(7.0, 2)
    array([7., 8.])
    >>>
    >>> # Stream a new observation in
    >>> model.update_time_series(TimeSeries.from_values([1, 2, 3, 4, 5, 6, 7], start=1.0))

References:
    - Box & Jenkins (1976): Time Series Analysis: Forecasting and Control
    - Hamilton (1994): Time Series Analysis
"""

from __future__ import annotations

from .errors import InsufficientHistoryError, InvalidOrderError
from .estimation import (
    MA_PLACEHOLDER_COEFFICIENT,
    ConditionalSumOfSquaresEstimation,
    EstimationStrategy,
    PlaceholderEstimation,
    estimate_ar_coefficients,
    estimate_arma_coefficients,
    estimate_ma_coefficients,
    innovations,
    predict_ar,
    predict_arma,
    predict_ma,
    solve_yule_walker,
    yule_walker_system,
)
from .gradient import LaggedGradient
from .models import AR, ARIMA, ARMA, MA
from .params import (
    ARIMAParams,
    ARMAParams,
    ARParams,
    LaggedGradientParams,
    MAParams,
)
from .types import ForecastModel, TimePoint, TimeSeries
from .utils import (
    autocovariance,
    combinations,
    difference,
    inverse_difference_forecast,
    mean,
    variance,
)

__all__ = [
    # Models
    "AR",
    "MA",
    "ARMA",
    "ARIMA",
    "LaggedGradient",
    "ForecastModel",
    # Data and parameters
    "TimePoint",
    "TimeSeries",
    "ARParams",
    "MAParams",
    "ARMAParams",
    "ARIMAParams",
    "LaggedGradientParams",
    # Estimation
    "MA_PLACEHOLDER_COEFFICIENT",
    "EstimationStrategy",
    "PlaceholderEstimation",
    "ConditionalSumOfSquaresEstimation",
    "yule_walker_system",
    "solve_yule_walker",
    "estimate_ar_coefficients",
    "estimate_ma_coefficients",
    "estimate_arma_coefficients",
    "innovations",
    "predict_ar",
    "predict_ma",
    "predict_arma",
    # Utilities
    "mean",
    "variance",
    "autocovariance",
    "difference",
    "combinations",
    "inverse_difference_forecast",
    # Errors
    "InvalidOrderError",
    "InsufficientHistoryError",
]
