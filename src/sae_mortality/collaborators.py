"""Interfaces for the external estimation services.

Two stages upstream of the summarizer are delegated to established
statistical software and are treated as opaque calls:

1. **Direct estimation** — survey-weighted mortality rates from
   household-survey microdata, with design-based standard errors
   (strata, clusters and weights are the estimator's concern).
2. **Spatio-temporal smoothing** — a hierarchical model (BYM2 spatial
   effect, RW2 temporal effects) fitted by MCMC or INLA, returning
   posterior draws keyed by effect name.

This module fixes the schemas those calls exchange and provides the
small transforms applied between them.  Direct estimates are smoothed
on the log scale; :func:`to_log_scale` applies the delta method

    Var[log m̂] ≈ Var[m̂] / m̂²

to carry the design-based variance across.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

import numpy as np
import pandas as pd

from ._compat import DataFrameLike, _ensure_pandas_df
from .errors import MissingDataError

DIRECT_ESTIMATE_COLUMNS = ("region", "years", "mean", "se")


@runtime_checkable
class DirectEstimator(Protocol):
    """Computes direct survey-weighted estimates.

    Implementations return one row per region × period with the
    columns in :data:`DIRECT_ESTIMATE_COLUMNS`.
    """

    def estimate(self, microdata: pd.DataFrame) -> pd.DataFrame: ...


@runtime_checkable
class SpatialTemporalSmoother(Protocol):
    """Fits a spatio-temporal model to direct estimates.

    Returns posterior draws keyed by effect name, suitable for
    :func:`~sae_mortality.effects.bundle_from_sampler`.
    """

    def fit(
        self,
        direct: pd.DataFrame,
        adjacency: np.ndarray | None = None,
    ) -> Mapping[str, pd.DataFrame]: ...


def validate_direct_estimates(table: DataFrameLike) -> pd.DataFrame:
    """Check a direct-estimate table against the exchange schema.

    Returns:
        The table as a pandas DataFrame.

    Raises:
        MissingDataError: If a schema column is absent.
        ValueError: If a standard error is negative.
    """
    df = _ensure_pandas_df(table, name="direct estimates")
    missing = [c for c in DIRECT_ESTIMATE_COLUMNS if c not in df.columns]
    if missing:
        raise MissingDataError(
            f"Direct estimates are missing columns: {missing}", name=missing[0]
        )
    if (df["se"] < 0).any():
        raise ValueError("Direct estimates contain negative standard errors.")
    return df


def to_log_scale(table: DataFrameLike) -> pd.DataFrame:
    """Add ``log_mean`` and ``log_var`` columns for log-scale smoothing.

    Non-positive means have no log and yield NaN in both columns.
    """
    df = validate_direct_estimates(table).copy()
    mean = df["mean"].astype(float)
    positive = mean > 0
    with np.errstate(divide="ignore", invalid="ignore"):
        df["log_mean"] = np.where(positive, np.log(mean.where(positive)), np.nan)
        df["log_var"] = np.where(positive, df["se"] ** 2 / mean**2, np.nan)
    return df
