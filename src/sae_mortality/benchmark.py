"""Benchmark national estimates against external reference rates.

Model-based national trends are checked against an independent
reference series (e.g. a UN IGME or vital-registration rate by year).
Three views are reported:

* **Agreement** — absolute and relative differences per key, the RMSE
  and the mean absolute relative difference.
* **Coverage** — the share of reference values inside the credible
  interval.  A well-calibrated 95% interval should cover roughly 95%
  of an unbiased reference series.
* **Calibration** — an OLS regression of log(estimate) on
  log(reference).  Slope ≈ 1 and intercept ≈ 0 mean the estimates
  track the reference proportionally; a slope below 1 indicates the
  model flattens the trend.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.metrics import mean_squared_error

from ._compat import DataFrameLike, _ensure_pandas_df
from ._results import _DictAccessMixin
from .errors import MissingDataError

logger = logging.getLogger(__name__)

# Fewer points than this cannot support a two-parameter regression
# with a residual degree of freedom.
_MIN_CALIBRATION_POINTS = 3


@dataclass(frozen=True)
class BenchmarkResult(_DictAccessMixin):
    """Comparison of estimates with a reference series."""

    _EXCLUDE_FROM_DICT: ClassVar[frozenset[str]] = frozenset({"table"})

    table: pd.DataFrame
    """Merged rows with ``estimate``, ``reference``, ``diff`` (signed,
    estimate minus reference), ``abs_diff``, ``rel_diff`` (signed) and
    ``covered`` columns."""

    n_matched: int
    """Rows present in both inputs."""

    coverage: float
    """Share of reference values inside ``[lower, upper]`` (NaN when
    bounds are unavailable)."""

    rmse: float
    """Root mean squared difference."""

    mean_abs_rel_diff: float
    """Mean of ``|estimate - reference| / reference``."""

    calibration: dict[str, Any] = field(default_factory=dict)
    """``intercept``, ``slope``, ``r_squared`` and ``n`` from the
    log-log OLS fit (NaN entries when too few positive pairs)."""


def _calibration(estimate: np.ndarray, reference: np.ndarray) -> dict[str, Any]:
    positive = (estimate > 0) & (reference > 0)
    n = int(positive.sum())
    if n < len(estimate):
        logger.debug(
            "Excluded %d non-positive pairs from log calibration",
            len(estimate) - n,
        )
    if n < _MIN_CALIBRATION_POINTS:
        logger.debug("Too few positive pairs (%d) for log calibration", n)
        return {"intercept": np.nan, "slope": np.nan, "r_squared": np.nan, "n": n}

    X = sm.add_constant(np.log(reference[positive]), has_constant="add")
    fit = sm.OLS(np.log(estimate[positive]), X).fit()
    return {
        "intercept": float(fit.params[0]),
        "slope": float(fit.params[1]),
        "r_squared": float(fit.rsquared),
        "n": n,
    }


def compare_to_reference(
    estimates: DataFrameLike,
    reference: DataFrameLike,
    *,
    on: str | Sequence[str] = "year",
    estimate_col: str = "mean",
    reference_col: str = "rate",
    lower_col: str | None = "lower",
    upper_col: str | None = "upper",
) -> BenchmarkResult:
    """Compare model estimates with a reference series.

    Args:
        estimates: Table with the key column(s), *estimate_col* and
            optionally the credible bounds.
        reference: Table with the key column(s) and *reference_col*.
        on: Key column(s) shared by both tables.
        estimate_col: Point-estimate column in *estimates*.
        reference_col: Rate column in *reference*.
        lower_col: Lower bound column (``None`` to skip coverage).
        upper_col: Upper bound column (``None`` to skip coverage).

    Returns:
        A :class:`BenchmarkResult`.

    Raises:
        MissingDataError: If a referenced column is absent or the two
            tables share no keys.
    """
    est = _ensure_pandas_df(estimates, name="estimates")
    ref = _ensure_pandas_df(reference, name="reference")
    keys = [on] if isinstance(on, str) else list(on)

    has_bounds = lower_col is not None and upper_col is not None
    need_est = keys + [estimate_col] + ([lower_col, upper_col] if has_bounds else [])
    for name, frame, cols in (
        ("estimates", est, need_est),
        ("reference", ref, keys + [reference_col]),
    ):
        missing = [c for c in cols if c not in frame.columns]
        if missing:
            raise MissingDataError(
                f"{name} table is missing columns: {missing}", name=missing[0]
            )

    left = est[need_est].rename(columns={estimate_col: "estimate"})
    right = ref[keys + [reference_col]].rename(columns={reference_col: "reference"})
    merged = left.merge(right, on=keys, how="inner")
    if merged.empty:
        raise MissingDataError(
            f"Estimates and reference share no values of {keys}.", name=keys[0]
        )

    merged["diff"] = merged["estimate"] - merged["reference"]
    merged["abs_diff"] = merged["diff"].abs()
    with np.errstate(divide="ignore", invalid="ignore"):
        merged["rel_diff"] = merged["diff"] / merged["reference"].where(
            merged["reference"] != 0
        )

    if has_bounds:
        bounded = merged[[lower_col, upper_col]].notna().all(axis=1)
        inside = (merged["reference"] >= merged[lower_col]) & (
            merged["reference"] <= merged[upper_col]
        )
        merged["covered"] = inside.where(bounded)
        coverage = float(inside[bounded].mean()) if bounded.any() else np.nan
    else:
        merged["covered"] = np.nan
        coverage = np.nan

    finite = merged[["estimate", "reference"]].notna().all(axis=1)
    if finite.any():
        rmse = float(
            np.sqrt(
                mean_squared_error(
                    merged.loc[finite, "reference"], merged.loc[finite, "estimate"]
                )
            )
        )
    else:
        rmse = np.nan

    return BenchmarkResult(
        table=merged,
        n_matched=len(merged),
        coverage=coverage,
        rmse=rmse,
        mean_abs_rel_diff=float(merged["rel_diff"].abs().mean()),
        calibration=_calibration(
            merged.loc[finite, "estimate"].to_numpy(dtype=float),
            merged.loc[finite, "reference"].to_numpy(dtype=float),
        ),
    )
