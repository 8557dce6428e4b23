"""Formatted ASCII table display for posterior predictive summaries.

The layout mirrors the statsmodels summary style: a header panel with
the run metadata (interval level, transform, draw count, quantile
rule) and a body with one row per observation showing the mean, SD
and credible bounds.  Observations whose bounds were suppressed for
missing draws are marked so they are not mistaken for real estimates.
"""

from __future__ import annotations

import math
import textwrap
from collections.abc import Sequence

import numpy as np

from ._results import PredictionSummary


def _truncate(name: str, max_len: int) -> str:
    """Truncate *name* to *max_len*, appending ``'...'`` if needed."""
    if len(name) <= max_len:
        return name
    return name[: max_len - 3] + "..."


def _fmt_num(val: float, width: int = 12) -> str:
    """Right-align *val*; NaN prints as ``N/A``."""
    if val is None or (isinstance(val, float) and math.isnan(val)):
        return f"{'N/A':>{width}}"
    if val != 0 and (abs(val) >= 1e6 or abs(val) < 1e-3):
        return f"{val:>{width}.3e}"
    return f"{val:>{width}.4f}"


def print_prediction_table(
    summary: PredictionSummary,
    *,
    labels: Sequence[str] | None = None,
    title: str = "Posterior Predictive Summary",
    max_rows: int | None = 20,
) -> None:
    """Print a predictive summary as a fixed-width table.

    Args:
        summary: Result of :func:`~sae_mortality.posterior_predict`.
        labels: Row labels (e.g. ``"Dhaka 2015 injury"``).  Defaults to
            the summary index.
        title: Title for the output table.
        max_rows: Rows to print before eliding the rest (``None``
            prints everything).
    """
    if labels is None:
        labels = [str(i) for i in summary.index]
    if len(labels) != summary.n_obs:
        raise ValueError(
            f"Got {len(labels)} labels for {summary.n_obs} observations."
        )

    print("=" * 80)
    for line in textwrap.wrap(title, width=78):
        print(f"{line:^80}")
    print("=" * 80)

    col1 = 40
    col2 = 38
    level = f"{summary.interval_level:.0%}"
    print(
        f"{'Transform:':<16}{summary.transform:<{col1 - 16}}"
        f"{'No. Observations:':>{col2 - 11}} {summary.n_obs:>10}"
    )
    print(
        f"{'Interval:':<16}{level + ' credible':<{col1 - 16}}"
        f"{'No. Draws:':>{col2 - 11}} {summary.n_draws:>10}"
    )
    suppressed = int(np.sum(np.isnan(summary.lower) & ~np.isnan(summary.mean)))
    print(
        f"{'Quantiles:':<16}{summary.quantile_method:<{col1 - 16}}"
        f"{'Suppressed CIs:':>{col2 - 11}} {suppressed:>10}"
    )
    print("-" * 80)

    # Label (28, left) + four numeric columns (13 each) = 80.
    lc = 28
    print(f"{'Observation':<{lc}}{'Mean':>13}{'SD':>13}{'Lower':>13}{'Upper':>13}")
    print("-" * 80)

    n_show = summary.n_obs if max_rows is None else min(max_rows, summary.n_obs)
    for i in range(n_show):
        print(
            f"{_truncate(str(labels[i]), lc - 1):<{lc}}"
            f" {_fmt_num(float(summary.mean[i]))}"
            f" {_fmt_num(float(summary.sd[i]))}"
            f" {_fmt_num(float(summary.lower[i]))}"
            f" {_fmt_num(float(summary.upper[i]))}"
        )
    if n_show < summary.n_obs:
        print(f"... {summary.n_obs - n_show} more observations")

    print("=" * 80)
    if summary.transform == "log":
        for line in textwrap.wrap(
            "Mean and bounds are exponentiated; SD is on the log "
            "(linear-predictor) scale.",
            width=80,
        ):
            print(line)
    if suppressed:
        print(
            f"{suppressed} observation(s) exceeded the missing-draw "
            "tolerance; their bounds are N/A."
        )
