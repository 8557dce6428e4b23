"""JAX-accelerated backend for predictive-draw computation.

Wraps a JIT-compiled ``design @ draws.T`` behind the
:class:`~._backends.BackendProtocol` interface.

NumPy <-> JAX boundary
~~~~~~~~~~~~~~~~~~~~~~
All public methods accept NumPy arrays and return NumPy arrays:

* **Inbound:** ``jnp.asarray(x, dtype=jnp.float64)``.  The float64
  cast is explicit because JAX defaults to float32, and predictive
  summaries are compared against reference output to several decimals.
* **Outbound:** ``np.asarray(result)``.

Graceful degradation
~~~~~~~~~~~~~~~~~~~~
If JAX is not installed, :class:`JaxBackend` can still be instantiated
but ``is_available`` returns ``False`` and :func:`resolve_backend`
raises ``ImportError`` when this backend is explicitly requested.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

try:
    import jax

    # Must run before any array creation.
    jax.config.update("jax_enable_x64", True)

    import jax.numpy as jnp
    from jax import jit

    _CAN_IMPORT_JAX = True
except ImportError:
    _CAN_IMPORT_JAX = False


if _CAN_IMPORT_JAX:

    @jit
    def _matmul_t(design, draws):
        return design @ draws.T


@dataclass(frozen=True)
class JaxBackend:
    """JAX compute backend.

    ``n_jobs`` is accepted for interface parity and ignored: XLA
    already vectorises the product across draws.
    """

    @property
    def name(self) -> str:
        return "jax"

    @property
    def is_available(self) -> bool:  # noqa: PLR6301
        return _CAN_IMPORT_JAX

    def linear_predictor(
        self,
        design: np.ndarray,
        draws: np.ndarray,
        n_jobs: int = 1,
    ) -> np.ndarray:
        X_j = jnp.asarray(design, dtype=jnp.float64)
        B_j = jnp.asarray(draws, dtype=jnp.float64)
        return np.asarray(_matmul_t(X_j, B_j))
