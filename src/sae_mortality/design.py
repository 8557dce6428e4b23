"""Design matrices for the small-area mortality model.

Fixed effects
-------------
The linear predictor for observation *i* (a district × cause × year
cell) has a fixed part

    η_i = β₀ + β_year · year_std_i
          + Σ_d β_division[d] · 1{division_i = d}
          + Σ_c β_cause[c] · 1{cause_i = c}
          + Σ_c β_cause:year[c] · 1{cause_i = c} · year_std_i

Categoricals are treatment-coded: the first level (in sorted order, or
in the order supplied through ``levels``) is the reference and gets no
column.  Column labels follow the sampler's naming so draw matrices can
be matched to the design by label::

    (Intercept), year_std, division[Khulna], cause[injury],
    cause[injury]:year_std, ...

Random effects
--------------
Each random-effect group (district spatial effect, cause × district
random walk, cause × division random walk) uses a 0/1 indicator matrix
whose columns are the group's levels.  Multi-column groups use
composite labels joined with ``":"`` (e.g. ``"injury:Dhaka:2015"``).

All builders return new frames and never modify their inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from ._compat import DataFrameLike, _ensure_pandas_df
from .errors import InputShapeError, MissingDataError

logger = logging.getLogger(__name__)

INTERCEPT = "(Intercept)"


def standardize_year(
    years: pd.Series | np.ndarray,
    *,
    scaler: StandardScaler | None = None,
) -> tuple[pd.Series, StandardScaler]:
    """Centre and scale calendar years.

    Args:
        years: Calendar years, one per observation.
        scaler: A previously fitted scaler.  Pass the scaler returned
            for the estimation data when standardising prediction
            years so both share the same centre and scale.

    Returns:
        ``(year_std, scaler)`` where ``year_std`` is a float Series
        named ``"year_std"`` (index preserved for Series input).
    """
    index = years.index if isinstance(years, pd.Series) else None
    values = np.asarray(years, dtype=float).reshape(-1, 1)
    if scaler is None:
        scaler = StandardScaler().fit(values)
    scaled = scaler.transform(values).ravel()
    return pd.Series(scaled, index=index, name="year_std"), scaler


def _require_complete(df: pd.DataFrame, cols: Sequence[str], *, group: str) -> None:
    # A missing level would code as the reference (all-zero) row.
    for col in cols:
        n_missing = int(df[col].isna().sum())
        if n_missing:
            raise MissingDataError(
                f"Column '{col}' has {n_missing} missing value(s); group "
                f"'{group}' cannot code a missing level.",
                name=col,
            )


def _level_order(
    series: pd.Series, col: str, levels: Mapping[str, Sequence] | None
) -> list:
    if levels is not None and col in levels:
        order = list(levels[col])
        unknown = set(series.unique()) - set(order)
        if unknown:
            raise InputShapeError(
                f"Column '{col}' has levels not in the supplied level order: "
                f"{sorted(map(str, unknown))}",
                group="fixed",
                dimension="labels",
            )
        return order
    return sorted(series.dropna().unique().tolist())


def fixed_design_matrix(
    covariates: DataFrameLike,
    *,
    year_col: str = "year_std",
    categorical: Sequence[str] = ("division", "cause"),
    interactions: Sequence[tuple[str, str]] = (("cause", "year_std"),),
    intercept: bool = True,
    levels: Mapping[str, Sequence] | None = None,
) -> pd.DataFrame:
    """Build the fixed-effect design matrix.

    Args:
        covariates: Observation table with one row per modelled cell.
        year_col: Standardised-year column (numeric).  ``None`` drops
            the year term.
        categorical: Columns to treatment-code.
        interactions: Pairs of columns to interact.  Categorical
            members expand to their non-reference levels; numeric
            members enter as-is.
        intercept: Prepend an all-ones ``(Intercept)`` column.
        levels: Optional explicit level order per categorical column.
            The first level is the reference.  Use the estimation
            data's order when building a design for new data.

    Returns:
        ``(N, P)`` float DataFrame indexed like *covariates*.

    Raises:
        MissingDataError: If a referenced column is absent, or a
            categorical column has missing values.
        InputShapeError: If the table has no rows, or a level is not in
            the supplied ``levels``.
    """
    df = _ensure_pandas_df(covariates, name="covariates")

    needed = list(categorical)
    if year_col is not None:
        needed.append(year_col)
    for a, b in interactions:
        needed.extend([a, b])
    missing = sorted(set(needed) - set(df.columns))
    if missing:
        raise MissingDataError(
            f"Covariate table is missing required columns: {missing}",
            name=missing[0],
        )
    if len(df) == 0:
        raise InputShapeError(
            "Covariate table must have at least one observation.",
            group="fixed",
            dimension="rows",
        )

    _require_complete(df, list(categorical), group="fixed")
    cat_set = set(categorical)
    orders = {col: _level_order(df[col], col, levels) for col in cat_set}

    def _expand(col: str) -> dict[str, pd.Series]:
        # Non-reference indicator columns for categoricals, raw for numerics.
        if col in cat_set:
            return {
                f"{col}[{lvl}]": (df[col] == lvl).astype(float)
                for lvl in orders[col][1:]
            }
        return {col: df[col].astype(float)}

    columns: dict[str, pd.Series] = {}
    if intercept:
        columns[INTERCEPT] = pd.Series(1.0, index=df.index)
    if year_col is not None:
        columns[year_col] = df[year_col].astype(float)
    for col in categorical:
        columns.update(_expand(col))

    for a, b in interactions:
        for la, va in _expand(a).items():
            for lb, vb in _expand(b).items():
                columns[f"{la}:{lb}"] = va * vb

    design = pd.DataFrame(columns, index=df.index)
    logger.debug("Fixed design: %d rows x %d columns", *design.shape)
    return design


def indicator_design(
    covariates: DataFrameLike,
    by: str | Sequence[str],
    *,
    levels: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Build a 0/1 random-effect design matrix.

    Args:
        covariates: Observation table.
        by: Grouping column, or columns for an interaction group
            (e.g. ``["cause", "district", "year"]``).
        levels: Column order.  Defaults to the sorted observed levels.
            Levels with no observations yield all-zero columns, which
            is how a sampler's full level set is matched.

    Returns:
        ``(N, K_g)`` float DataFrame indexed like *covariates*.

    Raises:
        MissingDataError: If a grouping column is absent or has
            missing values.
        InputShapeError: If an observation's level is not in *levels*.
    """
    df = _ensure_pandas_df(covariates, name="covariates")
    cols = [by] if isinstance(by, str) else list(by)
    group = ":".join(cols)

    missing = sorted(set(cols) - set(df.columns))
    if missing:
        raise MissingDataError(
            f"Covariate table is missing grouping columns for '{group}': {missing}",
            name=missing[0],
        )
    if len(df) == 0:
        raise InputShapeError(
            "Covariate table must have at least one observation.",
            group=group,
            dimension="rows",
        )

    _require_complete(df, cols, group=group)
    keys = df[cols].astype(str).agg(":".join, axis=1)

    if levels is None:
        levels = sorted(keys.unique().tolist())
    else:
        levels = [str(lvl) for lvl in levels]
        unknown = sorted(set(keys) - set(levels))
        if unknown:
            raise InputShapeError(
                f"Random-effect group '{group}': observations have levels "
                f"absent from the level set: {unknown[:10]}",
                group=group,
                dimension="labels",
            )

    position = {lvl: j for j, lvl in enumerate(levels)}
    matrix = np.zeros((len(df), len(levels)))
    matrix[np.arange(len(df)), keys.map(position).to_numpy(dtype=int)] = 1.0

    return pd.DataFrame(matrix, index=df.index, columns=levels)
