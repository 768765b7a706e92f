"""Tests for coefficient estimation and prediction rules."""

from __future__ import annotations

import numpy as np
import pytest

from streamcast.timeseries.estimation import (
    MA_PLACEHOLDER_COEFFICIENT,
    ConditionalSumOfSquaresEstimation,
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

RAMP = [1.0, 2.0, 3.0, 4.0, 5.0]


class TestYuleWalker:
    """Tests for the Yule-Walker system and its solver."""

    def test_system_shape(self):
        R, r = yule_walker_system(RAMP, 2)
        np.testing.assert_allclose(R, [[2.0, 0.8], [0.8, 2.0]])
        np.testing.assert_allclose(r, [0.8, -0.2])

    def test_system_invalid_order(self):
        with pytest.raises(ValueError, match="p must be >= 1"):
            yule_walker_system(RAMP, 0)

    def test_ar1_on_ramp(self):
        np.testing.assert_allclose(estimate_ar_coefficients(RAMP, 1), [0.4])

    def test_ar2_closed_form_matches_lu(self):
        R, r = yule_walker_system(RAMP, 2)
        np.testing.assert_allclose(solve_yule_walker(R, r), np.linalg.solve(R, r))

    def test_ar3_solves_system(self, rng):
        x = rng.normal(size=200)
        R, r = yule_walker_system(x, 3)
        phi = estimate_ar_coefficients(x, 3)
        np.testing.assert_allclose(R @ phi, r, atol=1e-10)

    def test_ar1_recovers_phi(self, ar1_series):
        phi = estimate_ar_coefficients(ar1_series.values, 1)
        assert phi[0] == pytest.approx(0.7, abs=0.1)

    def test_order_zero(self):
        assert len(estimate_ar_coefficients(RAMP, 0)) == 0

    def test_insufficient_data_gives_zeros(self):
        np.testing.assert_array_equal(estimate_ar_coefficients([1.0, 2.0], 2), [0.0, 0.0])
        np.testing.assert_array_equal(estimate_ar_coefficients([], 1), [0.0])

    @pytest.mark.parametrize("p", [1, 2, 3, 4])
    def test_constant_series_gives_zeros(self, p):
        """A singular system degrades to zero coefficients for every order."""
        phi = estimate_ar_coefficients([5.0] * 10, p)
        np.testing.assert_array_equal(phi, np.zeros(p))

    def test_singular_matrix(self):
        R = np.ones((3, 3))
        np.testing.assert_array_equal(solve_yule_walker(R, np.ones(3)), np.zeros(3))


class TestPredictionRules:
    """Tests for predict_ar, predict_ma and predict_arma."""

    def test_predict_ar(self):
        assert predict_ar([10.0], [0.5]) == pytest.approx(5.0)
        assert predict_ar([8.0, 10.0], [0.5, 0.2]) == pytest.approx(6.6)

    def test_predict_ar_length_mismatch(self):
        assert predict_ar([1.0, 2.0], [0.5]) == 0.0

    def test_predict_ar_empty(self):
        assert predict_ar([], []) == 0.0

    def test_predict_ma(self):
        assert predict_ma([0.2, 0.1], [0.5, 0.3]) == pytest.approx(0.13)

    def test_predict_ma_uses_first_q_errors(self):
        assert predict_ma([0.2, 0.1, 9.0], [0.5, 0.3]) == pytest.approx(0.13)

    def test_predict_ma_too_few_errors(self):
        assert predict_ma([0.2], [0.5, 0.3]) == 0.0

    def test_predict_arma(self):
        value = predict_arma([2.0], [0.7], [0.2], [0.3])
        assert value == pytest.approx(1.46)

    def test_predict_arma_empty_sides(self):
        assert predict_arma([2.0], [0.7], [0.2], []) == pytest.approx(1.4)
        assert predict_arma([], [], [0.2], [0.3]) == pytest.approx(0.06)


class TestPlaceholderMA:
    """Tests for the placeholder MA estimator."""

    def test_values(self):
        np.testing.assert_array_equal(
            estimate_ma_coefficients(RAMP, 3), [MA_PLACEHOLDER_COEFFICIENT] * 3
        )

    def test_order_zero(self):
        assert len(estimate_ma_coefficients(RAMP, 0)) == 0

    def test_arma_two_stage(self):
        ar, ma = estimate_arma_coefficients(RAMP, 1, 2)
        np.testing.assert_allclose(ar, [0.4])
        np.testing.assert_array_equal(ma, [0.1, 0.1])

    def test_arma_short_series(self):
        ar, ma = estimate_arma_coefficients([], 2, 1)
        np.testing.assert_array_equal(ar, [0.0, 0.0])
        np.testing.assert_array_equal(ma, [0.1])


class TestInnovations:
    """Tests for innovations()."""

    def test_pure_ar(self):
        x = np.array([1.0, 2.0, 3.0])
        eps, css = innovations(x, [0.5], [])
        np.testing.assert_allclose(eps, [0.0, 1.5, 2.0])
        assert css == pytest.approx(6.25)

    def test_ma_feeds_back(self):
        x = np.array([1.0, 1.0, 1.0])
        eps, _ = innovations(x, [], [0.5])
        np.testing.assert_allclose(eps, [0.0, 1.0, 0.5])


class TestStrategies:
    """Tests for the estimation strategies."""

    def test_placeholder_matches_two_stage(self):
        x = np.array(RAMP) - 3.0
        ar, ma = PlaceholderEstimation().estimate(x, 1, 1)
        ar2, ma2 = estimate_arma_coefficients(x, 1, 1)
        np.testing.assert_array_equal(ar, ar2)
        np.testing.assert_array_equal(ma, ma2)

    def test_css_short_series_falls_back(self):
        ar, ma = ConditionalSumOfSquaresEstimation().estimate(np.array(RAMP), 1, 1)
        np.testing.assert_allclose(ar, [0.4])
        np.testing.assert_array_equal(ma, [MA_PLACEHOLDER_COEFFICIENT])

    def test_css_recovers_ma1(self, rng):
        n = 2000
        eps = rng.normal(size=n + 1)
        x = eps[1:] + 0.5 * eps[:-1]
        ar, ma = ConditionalSumOfSquaresEstimation().estimate(x - x.mean(), 0, 1)
        assert len(ar) == 0
        assert ma[0] == pytest.approx(0.5, abs=0.1)

    def test_css_recovers_ar1(self, ar1_series):
        x = ar1_series.values
        ar, ma = ConditionalSumOfSquaresEstimation().estimate(x - x.mean(), 1, 0)
        assert ar[0] == pytest.approx(0.7, abs=0.1)
        assert len(ma) == 0

    def test_css_respects_ma_bound(self, rng):
        x = rng.normal(size=300)
        _, ma = ConditionalSumOfSquaresEstimation(ma_bound=0.5).estimate(x, 0, 2)
        assert np.all(np.abs(ma) <= 0.5 + 1e-12)

    def test_css_invalid_config(self):
        with pytest.raises(ValueError, match="ma_bound"):
            ConditionalSumOfSquaresEstimation(ma_bound=1.5)
        with pytest.raises(ValueError, match="maxiter"):
            ConditionalSumOfSquaresEstimation(maxiter=0)
        with pytest.raises(ValueError, match="min_extra_observations"):
            ConditionalSumOfSquaresEstimation(min_extra_observations=-1)

    def test_strategy_names(self):
        assert PlaceholderEstimation().name == "placeholder"
        assert ConditionalSumOfSquaresEstimation().name == "css"
