"""Exceptions raised by the forecasting engine.

Only contract violations raise. Data that is too short for estimation or
forecasting never raises; the models fall back to zero or mean forecasts.
"""

from __future__ import annotations


class InvalidOrderError(ValueError):
    """A differencing or model order is negative."""


class InsufficientHistoryError(ValueError):
    """Inverse differencing of order d was given fewer than d original values."""
