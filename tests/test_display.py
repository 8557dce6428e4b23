"""Tests for the ASCII prediction table."""

import numpy as np
import pytest

from sae_mortality.display import print_prediction_table
from sae_mortality.predict import summarize_draws


def _summary(transform="identity"):
    draws = np.array(
        [
            [1.0, 2.0, 3.0, 4.0],
            [0.5, 0.7, 0.9, 1.1],
            [1.0, np.nan, np.nan, np.nan],
        ]
    )
    return summarize_draws(draws, interval_level=0.5, transform=transform)


class TestPrintPredictionTable:
    def test_header_and_rows(self, capsys):
        print_prediction_table(_summary(), labels=["Dhaka", "Khulna", "Sylhet"])
        out = capsys.readouterr().out
        assert "Posterior Predictive Summary" in out
        assert "50% credible" in out
        assert "Dhaka" in out and "Khulna" in out
        assert "2.5000" in out
        assert "1.7500" in out

    def test_lines_fit_80_columns(self, capsys):
        print_prediction_table(_summary(), labels=["x" * 60, "b", "c"])
        for line in capsys.readouterr().out.splitlines():
            assert len(line) <= 80

    def test_suppressed_bounds_reported(self, capsys):
        print_prediction_table(_summary())
        out = capsys.readouterr().out
        assert "N/A" in out
        assert "1 observation(s) exceeded" in out

    def test_log_note(self, capsys):
        print_prediction_table(_summary("log"))
        assert "exponentiated" in capsys.readouterr().out

    def test_max_rows(self, capsys):
        print_prediction_table(_summary(), max_rows=1)
        assert "2 more observations" in capsys.readouterr().out

    def test_label_count_mismatch(self):
        with pytest.raises(ValueError, match="labels"):
            print_prediction_table(_summary(), labels=["a"])
