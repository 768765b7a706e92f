"""Tests for logging utilities."""

import logging
from io import StringIO

from streamcast.logging import (
    configure_logging,
    get_logger,
    set_log_level,
)
from streamcast.timeseries import AR, ARParams, TimeSeries


def test_get_logger_returns_logger():
    """Test that get_logger returns a logger instance."""
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name.startswith("streamcast.")


def test_get_logger_keeps_package_names():
    """Test that module names inside the package are not prefixed twice."""
    logger = get_logger("streamcast.timeseries.models")
    assert logger.name == "streamcast.timeseries.models"


def test_get_logger_caching():
    """Test that get_logger caches loggers."""
    logger1 = get_logger("test_module")
    logger2 = get_logger("test_module")
    assert logger1 is logger2


def test_get_logger_different_modules():
    """Test that different modules get different loggers."""
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")
    assert logger1 is not logger2
    assert logger1.name != logger2.name


def test_set_log_level():
    """Test that set_log_level updates logger levels."""
    logger = get_logger("test_module")

    set_log_level(logging.INFO)
    assert logger.level == logging.INFO

    set_log_level(logging.WARNING)
    assert logger.level == logging.WARNING


def test_set_log_level_string():
    """Test that set_log_level accepts string levels."""
    logger = get_logger("test_module")

    set_log_level("DEBUG")
    assert logger.level == logging.DEBUG

    set_log_level("ERROR")
    assert logger.level == logging.ERROR

    set_log_level("WARNING")


def test_configure_logging():
    """Test configure_logging function."""
    logger = get_logger("test_module")
    stream = StringIO()
    try:
        configure_logging(level=logging.DEBUG, stream=stream)
        logger.debug("Debug message")
        assert "[DEBUG] streamcast.test_module: Debug message" in stream.getvalue()
    finally:
        configure_logging(level=logging.WARNING)


def test_logger_does_not_propagate():
    """Test that loggers don't propagate to root logger."""
    logger = get_logger("test_module")
    assert logger.propagate is False


def test_coefficient_mismatch_is_logged():
    """Test that a pinned coefficient/order mismatch emits a warning."""
    stream = StringIO()
    ts = TimeSeries.from_values([1.0, 2.0, 3.0, 4.0, 5.0])
    model = AR(ts, ARParams(p=2, coefficients=[0.5]))
    try:
        configure_logging(level=logging.WARNING, stream=stream)
        model.forecast(6.0, 1)
        assert "does not match order p=2" in stream.getvalue()
    finally:
        configure_logging(level=logging.WARNING)
