"""Tests for predictive-draw diagnostics and coefficient summaries."""

import math

import numpy as np
import pandas as pd
import pytest
from scipy import stats

from sae_mortality.diagnostics import draw_diagnostics, summarize_coefficients
from sae_mortality.predict import summarize_draws


class TestDrawDiagnostics:
    def test_columns_and_values(self):
        draws = np.array([[1.0, 2.0, 3.0, 4.0], [1.0, 2.0, np.nan, 4.0]])
        s = summarize_draws(draws, interval_level=0.5, keep_draws=True)
        diag = draw_diagnostics(s)
        assert list(diag.columns) == [
            "n_valid",
            "missing_fraction",
            "mcse",
            "interval_width",
            "relative_width",
            "normal_lower",
            "normal_upper",
        ]
        np.testing.assert_array_equal(diag["n_valid"], [4, 3])
        np.testing.assert_allclose(diag["missing_fraction"], [0.0, 0.25])
        np.testing.assert_allclose(diag.loc[0, "mcse"], math.sqrt(5.0 / 3.0) / 2.0)
        np.testing.assert_allclose(diag.loc[0, "interval_width"], 1.5)
        np.testing.assert_allclose(diag.loc[0, "relative_width"], 1.5 / 2.5)

    def test_normal_interval(self):
        draws = np.array([[1.0, 2.0, 3.0, 4.0]])
        s = summarize_draws(draws, interval_level=0.95, keep_draws=True)
        diag = draw_diagnostics(s)
        z = stats.norm.ppf(0.975)
        sd = math.sqrt(5.0 / 3.0)
        np.testing.assert_allclose(diag.loc[0, "normal_lower"], 2.5 - z * sd)
        np.testing.assert_allclose(diag.loc[0, "normal_upper"], 2.5 + z * sd)

    def test_log_transform_maps_normal_interval(self):
        draws = np.array([[1.0, 2.0, 3.0, 4.0]])
        s = summarize_draws(draws, transform="log", keep_draws=True)
        diag = draw_diagnostics(s)
        z = stats.norm.ppf(0.975)
        sd = math.sqrt(5.0 / 3.0)
        np.testing.assert_allclose(diag.loc[0, "normal_upper"], math.exp(2.5 + z * sd))

    def test_mcse_stays_on_link_scale_under_log(self):
        draws = np.array([[1.0, 2.0, 3.0, 4.0]])
        s = summarize_draws(draws, transform="log", keep_draws=True)
        diag = draw_diagnostics(s)
        np.testing.assert_allclose(diag.loc[0, "mcse"], math.sqrt(5.0 / 3.0) / 2.0)
        np.testing.assert_allclose(s.mean[0], math.exp(2.5))

    def test_zero_mean_gives_nan_relative_width(self):
        s = summarize_draws(np.array([[-1.0, 1.0]]), keep_draws=True)
        assert np.isnan(draw_diagnostics(s).loc[0, "relative_width"])

    def test_explicit_draws(self):
        draws = np.array([[1.0, 2.0, 3.0]])
        s = summarize_draws(draws)
        assert draw_diagnostics(s, draws)["n_valid"].iloc[0] == 3

    def test_without_draws_raises(self):
        s = summarize_draws(np.array([[1.0, 2.0]]))
        with pytest.raises(ValueError, match="keep_draws"):
            draw_diagnostics(s)

    def test_shape_mismatch_raises(self):
        s = summarize_draws(np.array([[1.0, 2.0]]))
        with pytest.raises(ValueError, match="expected"):
            draw_diagnostics(s, np.ones((2, 2)))


class TestSummarizeCoefficients:
    def test_table(self):
        draws = pd.DataFrame(
            {"(Intercept)": [1.0, 2.0, 3.0, 4.0], "year_std": [-1.0, -2.0, 0.5, -0.5]}
        )
        table = summarize_coefficients(draws, interval_level=0.5)
        assert list(table.index) == ["(Intercept)", "year_std"]
        assert list(table.columns) == ["mean", "sd", "lower", "upper", "prob_positive"]
        np.testing.assert_allclose(table.loc["(Intercept)", "lower"], 1.75)
        np.testing.assert_allclose(table.loc["(Intercept)", "prob_positive"], 1.0)
        np.testing.assert_allclose(table.loc["year_std", "prob_positive"], 0.25)

    def test_missing_draws_skipped(self):
        draws = pd.DataFrame({"a": [1.0, np.nan, 3.0, np.nan]})
        table = summarize_coefficients(draws)
        np.testing.assert_allclose(table.loc["a", "mean"], 2.0)
        assert not np.isnan(table.loc["a", "lower"])
        np.testing.assert_allclose(table.loc["a", "prob_positive"], 1.0)

    def test_unlabelled_array_gets_positional_index(self):
        draws = np.array([[1.0, -1.0], [2.0, -2.0], [3.0, -3.0], [4.0, -4.0]])
        table = summarize_coefficients(draws, interval_level=0.5)
        assert list(table.index) == [0, 1]
        np.testing.assert_allclose(table.loc[1, "upper"], -1.75)
