"""Diagnostics for posterior predictive draws.

Per-observation diagnostics (:func:`draw_diagnostics`):

* **Valid draws / missing fraction** — how many predictive draws
  survived for each observation.  Observations above the summarizer's
  tolerance have NaN bounds; this table shows how close the others
  came.

* **Monte Carlo standard error** — the naive MCSE of the posterior
  mean, SE = sd / √n_valid.  It ignores autocorrelation in the chain,
  so it is a lower bound for thinned-but-correlated draws.  Like the
  summary SD it stays on the linear-predictor scale under
  ``transform="log"``: it is the error of the link-scale mean, not of
  the exponentiated mean reported beside it.  Compare it with the
  distance between estimates you intend to distinguish.

* **Interval width** — ``upper − lower`` on the reporting scale, and
  the width relative to ``|mean|``.  Wide relative widths flag
  districts whose estimates are dominated by the prior.

* **Normal-approximation interval** — ``mean ± z · sd`` on the linear
  predictor scale (mapped through the same transform).  Large gaps
  between this interval and the empirical one indicate skewed
  predictive distributions, where the SD alone is a poor summary.

Coefficient summaries (:func:`summarize_coefficients`) tabulate a raw
draw matrix (e.g. the fixed effects) with the same quantile rule as
the predictive summaries.
"""

from __future__ import annotations

import logging
import warnings

import numpy as np
import pandas as pd
from scipy import stats

from ._compat import _ensure_matrix_df
from ._results import PredictionSummary
from ._typing import ArrayLike
from .predict import summarize_draws

logger = logging.getLogger(__name__)


def draw_diagnostics(
    summary: PredictionSummary,
    draws: np.ndarray | None = None,
) -> pd.DataFrame:
    """Per-observation diagnostics for a predictive summary.

    Args:
        summary: Result of :func:`~sae_mortality.predict.posterior_predict`
            or :func:`~sae_mortality.predict.summarize_draws`.
        draws: Predictive draws ``(N, S)`` on the linear-predictor
            scale.  Defaults to ``summary.draws`` (set
            ``keep_draws=True`` when summarising).

    Returns:
        DataFrame indexed like the summary with columns ``n_valid``,
        ``missing_fraction``, ``mcse``, ``interval_width``,
        ``relative_width``, ``normal_lower`` and ``normal_upper``.
        ``mcse`` is on the linear-predictor scale, as is ``summary.sd``.

    Raises:
        ValueError: If no draws are available, or their shape does not
            match the summary.
    """
    if draws is None:
        draws = summary.draws
    if draws is None:
        raise ValueError(
            "No predictive draws available; summarise with keep_draws=True "
            "or pass draws explicitly."
        )
    arr = np.asarray(draws, dtype=float)
    if arr.shape != (summary.n_obs, summary.n_draws):
        raise ValueError(
            f"Draws have shape {arr.shape}, expected "
            f"{(summary.n_obs, summary.n_draws)}."
        )

    n_valid = summary.n_draws - np.asarray(summary.n_missing)
    z = stats.norm.ppf(1.0 - (1.0 - summary.interval_level) / 2.0)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        link_mean = np.nanmean(arr, axis=1)
        mcse = summary.sd / np.sqrt(n_valid)
        normal_lower = link_mean - z * summary.sd
        normal_upper = link_mean + z * summary.sd

    if summary.transform == "log":
        normal_lower, normal_upper = np.exp(normal_lower), np.exp(normal_upper)

    width = summary.upper - summary.lower
    zero_mean = summary.mean == 0
    if zero_mean.any():
        logger.debug(
            "%d observations have a zero posterior mean; relative width is NaN",
            int(zero_mean.sum()),
        )
    with np.errstate(divide="ignore", invalid="ignore"):
        relative = np.where(zero_mean, np.nan, width / np.abs(summary.mean))

    return pd.DataFrame(
        {
            "n_valid": n_valid,
            "missing_fraction": np.asarray(summary.n_missing) / summary.n_draws,
            "mcse": mcse,
            "interval_width": width,
            "relative_width": relative,
            "normal_lower": normal_lower,
            "normal_upper": normal_upper,
        },
        index=summary.index,
    )


def summarize_coefficients(
    draws: ArrayLike,
    *,
    interval_level: float = 0.95,
) -> pd.DataFrame:
    """Posterior summary table for a coefficient draw matrix.

    Args:
        draws: Draw matrix ``(S, K)`` with coefficient labels as
            columns.
        interval_level: Credible level in (0, 1).

    Returns:
        DataFrame indexed by coefficient label with columns ``mean``,
        ``sd``, ``lower``, ``upper`` and ``prob_positive`` (share of
        valid draws above zero).
    """
    frame = _ensure_matrix_df(draws, name="draws")
    summary = summarize_draws(
        frame.to_numpy().T,
        interval_level=interval_level,
        index=frame.columns,
        max_missing_fraction=1.0,
    )
    table = summary.to_frame()
    values = frame.to_numpy()
    with np.errstate(invalid="ignore"):
        valid = (~np.isnan(values)).sum(axis=0)
        table["prob_positive"] = (values > 0).sum(axis=0) / np.where(
            valid == 0, np.nan, valid
        )
    return table
