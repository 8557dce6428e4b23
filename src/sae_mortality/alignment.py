"""Column alignment between design matrices and posterior draws.

A draw matrix ``(S, K)`` multiplies its design matrix ``(N, K)`` column
for column.  Samplers do not promise to export coefficients in the
order the design was built, and a silent mismatch produces plausible
but wrong predictions rather than an error.  Every product in
:mod:`.predict` therefore goes through :func:`align_draws`, which
re-orders draw columns to the design's labels and refuses to guess
when the label sets differ.

Unlabelled NumPy inputs carry positional labels ``0..K-1``; they align
only against another unlabelled matrix with the same column count.
"""

from __future__ import annotations

import pandas as pd

from ._compat import _ensure_matrix_df
from ._typing import ArrayLike
from .errors import InputShapeError


def _labels_preview(labels: list, limit: int = 8) -> str:
    shown = ", ".join(map(repr, labels[:limit]))
    return shown + (", ..." if len(labels) > limit else "")


def align_draws(
    design: ArrayLike,
    draws: ArrayLike,
    *,
    group: str = "fixed",
) -> pd.DataFrame:
    """Re-order *draws* columns to match *design* columns by label.

    Args:
        design: Design matrix ``(N, K)`` (DataFrame or ndarray).
        draws: Draw matrix ``(S, K)`` (DataFrame or ndarray).
        group: Effect-group name used in error messages.

    Returns:
        Float DataFrame ``(S, K)`` whose columns equal the design's
        columns, in the design's order.

    Raises:
        InputShapeError: On duplicate labels, a column-count mismatch,
            or label sets that differ.
    """
    design_df = _ensure_matrix_df(design, name=f"{group} design")
    draws_df = _ensure_matrix_df(draws, name=f"{group} draws")

    for what, frame in (("design", design_df), ("draws", draws_df)):
        dupes = frame.columns[frame.columns.duplicated()].unique().tolist()
        if dupes:
            raise InputShapeError(
                f"Effect group '{group}': {what} has duplicate column "
                f"labels {_labels_preview(dupes)}.",
                group=group,
                dimension="labels",
            )

    design_cols = list(design_df.columns)
    draw_cols = list(draws_df.columns)
    missing = [c for c in design_cols if c not in set(draw_cols)]
    extra = [c for c in draw_cols if c not in set(design_cols)]

    if len(design_cols) != len(draw_cols):
        raise InputShapeError(
            f"Effect group '{group}': design has {len(design_cols)} columns "
            f"but draws have {len(draw_cols)}.  Missing from draws: "
            f"[{_labels_preview(missing)}]; not in design: "
            f"[{_labels_preview(extra)}].",
            group=group,
            dimension="columns",
        )
    if missing or extra:
        raise InputShapeError(
            f"Effect group '{group}': draw labels do not match design labels.  "
            f"Missing from draws: [{_labels_preview(missing)}]; not in design: "
            f"[{_labels_preview(extra)}].",
            group=group,
            dimension="labels",
        )

    return draws_df.loc[:, design_cols]


def check_rows(design: ArrayLike, n_obs: int, *, group: str) -> None:
    """Raise :class:`InputShapeError` unless *design* has *n_obs* rows."""
    n_rows = _ensure_matrix_df(design, name=f"{group} design").shape[0]
    if n_rows != n_obs:
        raise InputShapeError(
            f"Effect group '{group}': design has {n_rows} rows but the "
            f"fixed-effect design has {n_obs}.",
            group=group,
            dimension="rows",
        )
