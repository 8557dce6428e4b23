"""Compute backends for the per-block products ``design @ draws.T``.

:func:`resolve_backend` maps a name (or the :mod:`.._config` policy
when no name is given) to a cached backend instance.  Asking for
``"jax"`` by name on a machine without JAX is an :class:`ImportError`;
only the automatic policy falls back to NumPy.

Backends receive finite draws only.  Masking of missing coefficient
draws happens in :mod:`..predict` before and after the product.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np

from .._config import get_backend


@runtime_checkable
class BackendProtocol(Protocol):
    """Structural interface of a compute backend."""

    @property
    def name(self) -> str: ...

    @property
    def is_available(self) -> bool: ...

    def linear_predictor(
        self,
        design: np.ndarray,
        draws: np.ndarray,
        n_jobs: int = 1,
    ) -> np.ndarray:
        """Return ``design @ draws.T`` with shape ``(N, S)``.

        *design* is ``(N, K)``; *draws* is ``(S, K)`` with columns
        already aligned to *design*.  *n_jobs* may be ignored by
        backends that parallelise internally.
        """
        ...


_BACKEND_CACHE: dict[str, BackendProtocol] = {}


def _load(name: str) -> BackendProtocol:
    if name == "numpy":
        from ._numpy import NumpyBackend

        return NumpyBackend()
    if name == "jax":
        from ._jax import JaxBackend

        backend = JaxBackend()
        if not backend.is_available:
            raise ImportError(
                "Backend 'jax' was requested but JAX is not installed.  "
                "Install the 'jax' extra or call set_backend('numpy')."
            )
        return backend
    raise ValueError(f"Unknown backend {name!r}.  Choose 'numpy' or 'jax'.")


def resolve_backend(name: str | None = None) -> BackendProtocol:
    """Return the backend called *name*, or the policy default.

    Raises:
        ImportError: If ``"jax"`` is named but JAX is missing.
        ValueError: If *name* is not a known backend.
    """
    key = (get_backend() if name is None else name).strip().lower()
    if key not in _BACKEND_CACHE:
        _BACKEND_CACHE[key] = _load(key)
    return _BACKEND_CACHE[key]
