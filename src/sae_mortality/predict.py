"""Posterior predictive summaries from MCMC coefficient draws.

The sampler returns draws of every coefficient, not of the fitted
values.  Fitted-value draws are rebuilt here by multiplying each
retained coefficient draw against its design matrix:

    η[:, s] = X_fixed @ β_s  +  Σ_g Σ_block Z_g @ u_{g,block,s}

for s = 1..S.  Stacking the draws turns this into one matrix product
per effect block,

    η = X_fixed @ B_fixed.T + Σ_g Σ_block Z_g @ U_{g,block}.T     (N, S)

so there is no loop over draws and no state carried between them;
permuting the draw order permutes the columns of η and leaves every
summary unchanged.

Summaries
~~~~~~~~~
Each row of η is the empirical predictive distribution of one
observation.  With α = 1 − interval_level:

* ``mean``  — average over draws;
* ``sd``    — sample standard deviation (ddof = 1);
* ``lower`` — the α/2 empirical quantile;
* ``upper`` — the 1 − α/2 empirical quantile.

Quantiles use linear interpolation between order statistics (NumPy
``method="linear"``, Hyndman & Fan type 7, the default in R).  For
draws [1, 2, 3, 4] at interval_level 0.5 this gives lower = 1.75 and
upper = 3.25.

Missing draws are skipped per observation.  When the missing fraction
of an observation exceeds ``max_missing_fraction`` its interval bounds
are reported as NaN; the run itself never aborts for numeric reasons.

Log link
~~~~~~~~
With ``transform="log"`` the mean and both bounds are exponentiated.
The SD is left on the linear-predictor scale; it is not a delta-method
transform and downstream tables expect it in that form.

Reference:
    Hyndman, R. J. & Fan, Y. (1996). Sample quantiles in statistical
    packages. *The American Statistician*, 50(4), 361–365.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence

import numpy as np
import pandas as pd

from ._backends import BackendProtocol, resolve_backend
from ._compat import DataFrameLike, _ensure_pandas_df
from ._results import SUMMARY_COLUMNS, PredictionSummary
from ._typing import TRANSFORMS
from .alignment import align_draws, check_rows
from .effects import PosteriorBundle
from .errors import InputShapeError

logger = logging.getLogger(__name__)

QUANTILE_METHOD = "linear"


def _block_contribution(
    backend: BackendProtocol,
    design: pd.DataFrame,
    draws: pd.DataFrame,
    n_jobs: int,
) -> np.ndarray:
    """``design @ draws.T`` with missing coefficients masked per observation.

    A missing coefficient in draw *s* only invalidates the observations
    whose design row uses that coefficient; every other observation
    keeps a finite value for draw *s*.
    """
    X = design.to_numpy(dtype=float)
    B = draws.to_numpy(dtype=float)
    missing = np.isnan(B)
    if not missing.any():
        return np.asarray(backend.linear_predictor(X, B, n_jobs=n_jobs))

    eta = np.array(
        backend.linear_predictor(X, np.where(missing, 0.0, B), n_jobs=n_jobs)
    )
    touched = (X != 0).astype(float) @ missing.T.astype(float) > 0
    eta[touched] = np.nan
    return eta


def linear_predictor_draws(
    bundle: PosteriorBundle,
    *,
    backend: str | None = None,
    n_jobs: int = 1,
) -> np.ndarray:
    """Reconstruct predictive draws of the linear predictor.

    Every draw matrix is aligned to its design matrix by column label
    before multiplication.

    Args:
        bundle: Designs and draws for the fixed and random effects.
        backend: ``"numpy"``, ``"jax"`` or ``None`` for the configured
            default.
        n_jobs: Thread workers over draw chunks (NumPy backend).

    Returns:
        Array ``(N, S)``: one row per observation, one column per
        retained draw.

    Raises:
        InputShapeError: If a design and its draws disagree on labels,
            a random design has the wrong number of rows, or a block
            has a different number of draws from the fixed effects.
    """
    bk = resolve_backend(backend)
    n_obs, n_draws = bundle.n_obs, bundle.n_draws

    fixed = align_draws(bundle.fixed_design, bundle.fixed_draws, group="fixed")
    eta = _block_contribution(bk, bundle.fixed_design, fixed, n_jobs)

    for group in bundle.random_effects:
        check_rows(group.design, n_obs, group=group.name)
        for block, block_draws in group.draws.items():
            label = group.name if block == group.name else f"{group.name}.{block}"
            aligned = align_draws(group.design, block_draws, group=label)
            if aligned.shape[0] != n_draws:
                raise InputShapeError(
                    f"Effect group '{label}' has {aligned.shape[0]} draws but "
                    f"the fixed effects have {n_draws}.",
                    group=label,
                    dimension="draws",
                )
            eta = eta + _block_contribution(bk, group.design, aligned, n_jobs)

    logger.debug(
        "Predictive draws: %d observations x %d draws, %d random groups (%s backend)",
        n_obs,
        n_draws,
        len(bundle.random_effects),
        bk.name,
    )
    return eta


def _validate_options(
    interval_level: float, transform: str, max_missing_fraction: float
) -> None:
    if not 0.0 < interval_level < 1.0:
        raise ValueError(
            f"interval_level must be in (0, 1), got {interval_level!r}."
        )
    if transform not in TRANSFORMS:
        raise ValueError(
            f"Unknown transform {transform!r}.  Choose from: {list(TRANSFORMS)}"
        )
    if not 0.0 <= max_missing_fraction <= 1.0:
        raise ValueError(
            f"max_missing_fraction must be in [0, 1], got {max_missing_fraction!r}."
        )


def summarize_draws(
    draws: np.ndarray | pd.DataFrame,
    *,
    interval_level: float = 0.95,
    transform: str = "identity",
    max_missing_fraction: float = 0.5,
    index: Sequence | pd.Index | None = None,
    keep_draws: bool = False,
) -> PredictionSummary:
    """Reduce a predictive draw matrix to per-observation summaries.

    Args:
        draws: Matrix ``(N, S)``; rows are observations, columns draws.
            A 1-D array is treated as a single observation.
        interval_level: Credible level in (0, 1).
        transform: ``"identity"`` or ``"log"`` (exponentiate mean and
            bounds; SD unchanged).
        max_missing_fraction: Observations with a larger fraction of
            missing draws get NaN interval bounds.
        index: Observation labels.  Defaults to the DataFrame index,
            else ``0..N-1``.
        keep_draws: Attach the (untransformed) draw matrix to the
            result.

    Returns:
        A :class:`PredictionSummary`.

    Raises:
        ValueError: For an out-of-range level or fraction, or an
            unknown transform.
        InputShapeError: If *draws* is not 1-D/2-D or has no draws.
    """
    _validate_options(interval_level, transform, max_missing_fraction)

    if index is None and isinstance(draws, pd.DataFrame):
        index = draws.index
    arr = np.asarray(draws, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(1, -1)
    if arr.ndim != 2:
        raise InputShapeError(
            f"Predictive draws must be a 2-D (observations, draws) matrix, "
            f"got {arr.ndim} dimensions.",
            dimension="draws",
        )
    n_obs, n_draws = arr.shape
    if n_draws == 0:
        raise InputShapeError(
            "Predictive draws must contain at least one draw.", dimension="draws"
        )
    index = pd.RangeIndex(n_obs) if index is None else pd.Index(index)
    if len(index) != n_obs:
        raise InputShapeError(
            f"Index has {len(index)} labels for {n_obs} observations.",
            dimension="rows",
        )

    n_missing = np.isnan(arr).sum(axis=1)
    alpha = 1.0 - interval_level

    # All-missing rows (and single-draw SDs) are expected to come out
    # NaN; silence NumPy's empty-slice warnings for them.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        mean = np.nanmean(arr, axis=1)
        sd = np.nanstd(arr, axis=1, ddof=1)
        lower, upper = np.nanquantile(
            arr, [alpha / 2.0, 1.0 - alpha / 2.0], axis=1, method=QUANTILE_METHOD
        )

    too_sparse = n_missing > max_missing_fraction * n_draws
    if too_sparse.any():
        logger.debug(
            "%d observations exceed the missing-draw tolerance (%.2f); "
            "interval bounds set to NaN",
            int(too_sparse.sum()),
            max_missing_fraction,
        )
        lower = np.where(too_sparse, np.nan, lower)
        upper = np.where(too_sparse, np.nan, upper)

    if transform == "log":
        mean, lower, upper = np.exp(mean), np.exp(lower), np.exp(upper)

    return PredictionSummary(
        mean=mean,
        sd=sd,
        lower=lower,
        upper=upper,
        index=index,
        interval_level=float(interval_level),
        transform=transform,
        n_draws=int(n_draws),
        n_missing=n_missing,
        quantile_method=QUANTILE_METHOD,
        draws=arr if keep_draws else None,
    )


def posterior_predict(
    bundle: PosteriorBundle,
    *,
    interval_level: float = 0.95,
    transform: str = "identity",
    required_groups: Sequence[str] = (),
    max_missing_fraction: float = 0.5,
    backend: str | None = None,
    n_jobs: int = 1,
    keep_draws: bool = False,
) -> PredictionSummary:
    """Compute posterior predictive summaries for every observation.

    Args:
        bundle: Designs and draws for the fixed and random effects.
        interval_level: Credible level in (0, 1), default 0.95.
        transform: ``"identity"`` or ``"log"``.
        required_groups: Random-effect groups that must be present.
        max_missing_fraction: Per-observation tolerance for missing
            draws before interval bounds become NaN.
        backend: Compute backend (``None`` for the configured default).
        n_jobs: Thread workers over draw chunks (NumPy backend).
        keep_draws: Attach the predictive draw matrix to the result.

    Returns:
        A :class:`PredictionSummary` indexed like the fixed design.

    Raises:
        MissingDataError: If a required group is absent.
        InputShapeError: On unresolvable design/draw mismatches.
        ValueError: For invalid options.
    """
    _validate_options(interval_level, transform, max_missing_fraction)
    for name in required_groups:
        bundle.group(name)

    eta = linear_predictor_draws(bundle, backend=backend, n_jobs=n_jobs)
    return summarize_draws(
        eta,
        interval_level=interval_level,
        transform=transform,
        max_missing_fraction=max_missing_fraction,
        index=bundle.fixed_design.index,
        keep_draws=keep_draws,
    )


def merge_predictions(
    observations: DataFrameLike,
    summary: PredictionSummary,
    *,
    prefix: str = "",
) -> pd.DataFrame:
    """Append ``mean``, ``sd``, ``lower`` and ``upper`` to *observations*.

    Rows are matched by position; the input is not modified.

    Raises:
        InputShapeError: If the row counts differ.
    """
    obs = _ensure_pandas_df(observations, name="observations")
    if len(obs) != summary.n_obs:
        raise InputShapeError(
            f"Observation table has {len(obs)} rows but the summary has "
            f"{summary.n_obs}.",
            group="output",
            dimension="rows",
        )
    out = obs.copy()
    for col in SUMMARY_COLUMNS:
        out[f"{prefix}{col}"] = np.asarray(getattr(summary, col))
    return out
