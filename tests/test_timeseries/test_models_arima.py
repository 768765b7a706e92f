"""Tests for the ARIMA forecaster."""

from __future__ import annotations

import numpy as np
import pytest

from streamcast.timeseries import (
    ARIMA,
    ARIMAParams,
    ARMA,
    ConditionalSumOfSquaresEstimation,
    InvalidOrderError,
    TimeSeries,
)


class TestARIMA:
    """Tests for ARIMA model class."""

    def test_name(self, ramp):
        assert ARIMA(ramp).name == "ARIMA Forecaster"

    @pytest.mark.parametrize("d", [1, 2])
    def test_linear_trend(self, ramp, d):
        """A ramp is continued exactly for d = 1 and d = 2."""
        model = ARIMA(ramp, ARIMAParams(p=0, d=d, q=0))
        np.testing.assert_allclose(model.forecast(7.0, 2), [7.0, 8.0])

    def test_ar_on_differences(self, ramp):
        model = ARIMA(ramp, ARIMAParams(p=1, d=1, q=0, ar_coefficients=[0.5]))
        np.testing.assert_allclose(model.forecast(7.0, 3), [7.0, 8.0, 9.0])

    def test_quadratic_trend_d2(self):
        ts = TimeSeries.from_values([1.0, 4.0, 9.0, 16.0, 25.0])
        model = ARIMA(ts, ARIMAParams(p=0, d=2, q=0))
        np.testing.assert_allclose(model.forecast(5.0, 2), [36.0, 49.0])

    def test_d_zero_matches_arma(self, ramp):
        params = ARIMAParams(p=1, d=0, q=1, ar_coefficients=[0.6], ma_coefficients=[0.2])
        arima = ARIMA(ramp, params)
        arma = ARMA(ramp, params.arma_params())
        np.testing.assert_allclose(arima.forecast(7.0, 4), arma.forecast(7.0, 4))

    def test_differenced_series(self, ramp):
        model = ARIMA(ramp, ARIMAParams(d=1))
        np.testing.assert_allclose(model.differenced_series.values, [1.0] * 5)
        np.testing.assert_allclose(model.differenced_series.times, [2.0, 3.0, 4.0, 5.0, 6.0])
        assert model.is_ready

    def test_uninitialized_forecasts_raw_mean(self):
        model = ARIMA(TimeSeries.from_values([100.0]), ARIMAParams(p=1, d=1, q=0))
        assert not model.is_ready
        np.testing.assert_allclose(model.forecast(1.0, 3), [100.0] * 3)

    def test_uninitialized_exact_d_points(self):
        model = ARIMA(TimeSeries.from_values([2.0, 4.0]), ARIMAParams(d=2))
        assert not model.is_ready
        np.testing.assert_allclose(model.forecast(2.0, 1), [3.0])

    def test_empty_series(self):
        model = ARIMA(TimeSeries(), ARIMAParams(p=0, d=0, q=0))
        assert not model.is_ready
        np.testing.assert_array_equal(model.forecast(0.0, 2), [0.0, 0.0])

    def test_negative_d(self):
        with pytest.raises(InvalidOrderError, match="d must be >= 0"):
            ARIMAParams(d=-1)

    def test_negative_horizon(self, ramp):
        with pytest.raises(ValueError, match="horizon"):
            ARIMA(ramp).forecast(7.0, -2)

    def test_strategy_forwarded(self, ramp):
        strategy = ConditionalSumOfSquaresEstimation()
        model = ARIMA(ramp, ARIMAParams(p=1, d=1, q=1), strategy=strategy)
        assert model.arma.strategy is strategy


class TestARIMAUpdates:
    """Tests for streaming updates of the ARIMA model."""

    def test_becomes_ready(self):
        model = ARIMA(TimeSeries.from_values([1.0]), ARIMAParams(d=1))
        model.update_time_series(TimeSeries.from_values([1.0, 2.0, 3.0]))
        assert model.is_ready
        np.testing.assert_allclose(model.forecast(3.0, 1), [4.0])

    def test_drops_back_to_uninitialized(self, ramp):
        model = ARIMA(ramp, ARIMAParams(d=1))
        model.update_time_series(TimeSeries.from_values([5.0]))
        assert not model.is_ready
        np.testing.assert_allclose(model.forecast(1.0, 1), [5.0])

    def test_arma_reused_and_residuals_replayed(self):
        params = ARIMAParams(p=0, d=1, q=1, ma_coefficients=[0.5])
        model = ARIMA(TimeSeries.from_values([1.0, 2.0, 3.0]), params)
        arma = model.arma
        model.update_time_series(TimeSeries.from_values([1.0, 2.0, 3.0, 5.0]))
        assert model.arma is arma
        # Differences [1, 1, 2], mean 4/3; residual of the appended 2
        np.testing.assert_allclose(arma.errors, [2.0 - 4.0 / 3.0])

    def test_update_params_changing_d_rebuilds(self, ramp):
        model = ARIMA(ramp, ARIMAParams(p=0, d=0, q=0))
        arma = model.arma
        model.update_params(d=1, p=1, ar_coefficients=[0.5])
        assert model.arma is not arma
        assert model.arma.params.p == 1
        np.testing.assert_allclose(model.forecast(7.0, 2), [7.0, 8.0])

    def test_update_params_forwarded(self, ramp):
        model = ARIMA(ramp, ARIMAParams(p=0, d=1, q=0))
        arma = model.arma
        model.update_params(q=1, ma_coefficients=[0.3], errors=[0.1])
        assert model.arma is arma
        assert arma.params.q == 1
        np.testing.assert_allclose(arma.errors, [0.1])

    def test_update_params_when_uninitialized(self):
        model = ARIMA(TimeSeries.from_values([1.0, 2.0]), ARIMAParams(d=2))
        model.update_params(d=1)
        assert model.is_ready

    def test_update_params_unknown_field(self, ramp):
        with pytest.raises(ValueError, match="Unknown parameter"):
            ARIMA(ramp).update_params(coefficients=[0.1])

    def test_repr(self, ramp):
        assert repr(ARIMA(ramp, ARIMAParams(p=1, d=1, q=0))) == "ARIMA(p=1, d=1, q=0, n=6)"
