"""NumPy backend (always available).

A predictive draw is ``design @ beta_s`` for every retained draw *s*.
Stacking all draws turns the loop into one BLAS-3 product::

    design @ draws.T      (N, K) @ (K, S)  ->  (N, S)

Parallelism
~~~~~~~~~~~
Draws are independent, so when ``n_jobs != 1`` the draw matrix is
split into contiguous row chunks, each multiplied on its own thread
with ``joblib.Parallel(prefer="threads")``, and the column blocks are
concatenated back in draw order.  NumPy's matmul releases the GIL, so
threads overlap without serialising the design matrix.

Backends only see finite draws: :mod:`..predict` zero-fills missing
coefficients before dispatch and re-masks the affected observations
afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from joblib import Parallel, delayed

# Below this many draws the joblib dispatch costs more than it saves.
_MIN_DRAWS_PER_CHUNK = 64


@dataclass(frozen=True)
class NumpyBackend:
    """NumPy compute backend."""

    @property
    def name(self) -> str:
        return "numpy"

    @property
    def is_available(self) -> bool:  # noqa: PLR6301
        return True

    def linear_predictor(
        self,
        design: np.ndarray,
        draws: np.ndarray,
        n_jobs: int = 1,
    ) -> np.ndarray:
        design = np.asarray(design, dtype=float)
        draws = np.asarray(draws, dtype=float)
        S = draws.shape[0]

        if n_jobs == 1 or S < 2 * _MIN_DRAWS_PER_CHUNK:
            return design @ draws.T

        n_chunks = max(1, S // _MIN_DRAWS_PER_CHUNK)
        if n_jobs > 0:
            n_chunks = min(n_chunks, n_jobs)
        chunks = np.array_split(np.arange(S), n_chunks)

        blocks = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(np.matmul)(design, draws[idx].T) for idx in chunks
        )
        return np.concatenate(blocks, axis=1)
