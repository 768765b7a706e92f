"""streamcast - incremental time-series forecasting for streaming data."""

__version__ = "0.1.0"

# Logging
from .logging import configure_logging, get_logger, set_log_level

# Forecasting engine
from .timeseries import (
    AR,
    ARIMA,
    ARMA,
    MA,
    ARIMAParams,
    ARMAParams,
    ARParams,
    ConditionalSumOfSquaresEstimation,
    EstimationStrategy,
    ForecastModel,
    InsufficientHistoryError,
    InvalidOrderError,
    LaggedGradient,
    LaggedGradientParams,
    MAParams,
    PlaceholderEstimation,
    TimePoint,
    TimeSeries,
)

__all__ = [
    "__version__",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
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
    # Estimation strategies
    "EstimationStrategy",
    "PlaceholderEstimation",
    "ConditionalSumOfSquaresEstimation",
    # Errors
    "InvalidOrderError",
    "InsufficientHistoryError",
]
