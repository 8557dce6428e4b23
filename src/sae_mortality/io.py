"""CSV interchange with the sampler and the downstream tables.

Draw files are wide: one row per retained draw, one column per
coefficient label (the header row carries the labels that
:func:`~sae_mortality.alignment.align_draws` matches on).  Covariate
files have one row per modelled cell.  Summaries are written with the
observation columns followed by ``mean, sd, lower, upper``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from .errors import MissingDataError

logger = logging.getLogger(__name__)

COVARIATE_COLUMNS = ("year", "district", "division", "cause", "year_std")


def read_draws_csv(path: str | Path, *, index_col: int | str | None = None) -> pd.DataFrame:
    """Read a wide draw matrix ``(S, K)`` exported by the sampler.

    Args:
        path: CSV file with a header row of coefficient labels.
        index_col: Column holding the iteration number, if any.

    Raises:
        MissingDataError: If the file does not exist or holds no draws.
    """
    path = Path(path)
    if not path.exists():
        raise MissingDataError(f"Draw file not found: {path}", name=str(path))
    try:
        draws = pd.read_csv(path, index_col=index_col)
    except pd.errors.EmptyDataError:
        raise MissingDataError(f"Draw file is empty: {path}", name=str(path)) from None
    if draws.empty:
        raise MissingDataError(f"Draw file has no draws: {path}", name=str(path))
    logger.debug("Read %d draws x %d coefficients from %s", *draws.shape, path)
    return draws.astype(float)


def read_covariates_csv(
    path: str | Path,
    *,
    required: Sequence[str] = COVARIATE_COLUMNS,
) -> pd.DataFrame:
    """Read the observation-level covariate table.

    Raises:
        MissingDataError: If the file is absent or lacks a required
            column.
    """
    path = Path(path)
    if not path.exists():
        raise MissingDataError(f"Covariate file not found: {path}", name=str(path))
    table = pd.read_csv(path)
    missing = [c for c in required if c not in table.columns]
    if missing:
        raise MissingDataError(
            f"Covariate file {path} is missing required columns: {missing}",
            name=missing[0],
        )
    return table


def write_summary_csv(table: pd.DataFrame, path: str | Path) -> Path:
    """Write an observation table (with merged summaries) to *path*.

    Parent directories are created as needed.

    Returns:
        The written path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(path, index=False)
    logger.debug("Wrote %d rows to %s", len(table), path)
    return path
