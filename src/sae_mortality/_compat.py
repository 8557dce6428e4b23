"""Table inputs: pandas, Polars or bare NumPy matrices.

Everything downstream works on pandas.  Polars frames (eager or lazy)
are converted once at the public boundary; NumPy matrices are wrapped
with positional integer column labels so that label alignment still
applies to them.  Polars itself stays optional.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    import polars as pl

    DataFrameLike: TypeAlias = pd.DataFrame | pl.DataFrame | pl.LazyFrame
else:
    DataFrameLike: TypeAlias = pd.DataFrame

try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False


def _ensure_pandas_df(obj: DataFrameLike, *, name: str = "input") -> pd.DataFrame:
    """Return *obj* as pandas, collecting a ``LazyFrame`` first.

    Raises:
        TypeError: For anything that is not a pandas or Polars frame.
            *name* identifies the argument in the message.
    """
    if isinstance(obj, pd.DataFrame):
        return obj
    if _HAS_POLARS and isinstance(obj, (pl.DataFrame, pl.LazyFrame)):
        eager = obj.collect() if isinstance(obj, pl.LazyFrame) else obj
        return eager.to_pandas()

    accepted = "a pandas or Polars DataFrame" if _HAS_POLARS else "a pandas DataFrame"
    raise TypeError(f"'{name}' must be {accepted}, got {type(obj).__name__}.")


def _ensure_matrix_df(obj: object, *, name: str = "matrix") -> pd.DataFrame:
    """Return *obj* as a labelled 2-D float ``DataFrame``.

    NumPy arrays (1-D arrays are treated as a single column) receive
    positional integer labels ``0..K-1``; DataFrames keep their own.
    """
    if isinstance(obj, np.ndarray):
        arr = obj.reshape(-1, 1) if obj.ndim == 1 else obj
        if arr.ndim != 2:
            raise TypeError(f"'{name}' must be 2-D, got {obj.ndim} dimensions.")
        return pd.DataFrame(arr.astype(float))
    return _ensure_pandas_df(obj, name=name).astype(float)
