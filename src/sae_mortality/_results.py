"""Typed result object for posterior predictive summaries.

A frozen dataclass that provides:

* **Attribute access** — ``summary.mean``, ``summary.lower``, etc.
* **Dict-like access** — ``summary["mean"]``, ``summary.get("key")``,
  ``"key" in summary`` for consumers that prefer bracket syntax.
* **Serialisation** — ``.to_dict()`` returns a plain ``dict[str, Any]``
  with all NumPy types converted to native Python, and ``.to_frame()``
  returns the observation-level table that callers merge back into
  their data.

The summary is frozen: it is a snapshot of one summarisation pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

import numpy as np
import pandas as pd

SUMMARY_COLUMNS = ("mean", "sd", "lower", "upper")


def _numpy_to_python(obj: Any) -> Any:
    """Recursively convert NumPy scalars/arrays to Python-native types."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer, np.bool_)):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, pd.Index):
        return obj.tolist()
    if isinstance(obj, dict):
        return {k: _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        converted = [_numpy_to_python(item) for item in obj]
        return type(obj)(converted)
    return obj


class _DictAccessMixin:
    """Dict-like access convenience for result dataclasses.

    1. ``result["key"]``      — raises ``KeyError`` on miss
    2. ``result.get(key, d)`` — returns *d* on miss (default ``None``)
    3. ``"key" in result``    — membership test
    """

    # Fields to exclude from to_dict() serialisation.
    _EXCLUDE_FROM_DICT: ClassVar[frozenset[str]] = frozenset({"draws"})

    def __getitem__(self, key: str) -> Any:
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return hasattr(self, key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain, JSON-serialisable dictionary."""
        result: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            if f.name in self._EXCLUDE_FROM_DICT:
                continue
            result[f.name] = _numpy_to_python(getattr(self, f.name))
        return result


@dataclass(frozen=True)
class PredictionSummary(_DictAccessMixin):
    """Per-observation posterior predictive summary.

    Returned by :func:`~sae_mortality.predict.summarize_draws` and
    :func:`~sae_mortality.predict.posterior_predict`.
    """

    # ---- Summaries -------------------------------------------------
    mean: np.ndarray
    """Posterior mean, shape ``(N,)``; exponentiated under ``"log"``."""

    sd: np.ndarray
    """Posterior sample SD (ddof=1), always on the linear-predictor scale."""

    lower: np.ndarray
    """Lower credible bound, the ``alpha/2`` empirical quantile."""

    upper: np.ndarray
    """Upper credible bound, the ``1 - alpha/2`` empirical quantile."""

    # ---- Metadata --------------------------------------------------
    index: pd.Index
    """Observation labels (the fixed design's row index)."""

    interval_level: float
    """Credible-interval level in (0, 1)."""

    transform: str
    """``"identity"`` or ``"log"``."""

    n_draws: int
    """Number of retained posterior draws *S*."""

    n_missing: np.ndarray
    """Missing predictive draws per observation, shape ``(N,)``."""

    quantile_method: str = "linear"
    """NumPy quantile interpolation rule (Hyndman–Fan type 7)."""

    # ---- Raw draws (not serialised) --------------------------------
    draws: np.ndarray | None = field(default=None, repr=False, compare=False)
    """Predictive draw matrix ``(N, S)`` on the linear-predictor scale,
    retained only when requested.  Excluded from ``to_dict()``."""

    @property
    def n_obs(self) -> int:
        return int(self.mean.shape[0])

    def to_frame(self) -> pd.DataFrame:
        """Return the summary as a ``(N, 4)`` DataFrame.

        Columns are ``mean``, ``sd``, ``lower`` and ``upper``; the
        index is the observation index.
        """
        return pd.DataFrame(
            {col: getattr(self, col) for col in SUMMARY_COLUMNS},
            index=self.index,
        )
