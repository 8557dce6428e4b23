"""Which compute backend builds the predictive draws.

Two backends exist: ``"numpy"`` (a BLAS product, optionally split over
draw chunks on joblib threads) and ``"jax"`` (a jit-compiled float64
product).  The choice is global and is settled as follows:

    1. a name passed to :func:`set_backend` other than ``"auto"``;
    2. otherwise ``$SAE_MORTALITY_BACKEND`` when it names a backend;
    3. otherwise ``"jax"`` when JAX is installed, else ``"numpy"``.

Names are matched case-insensitively.  Per-call ``backend=`` arguments
to :func:`~sae_mortality.posterior_predict` bypass this policy.

Examples:
    Pin NumPy for a batch job::

        SAE_MORTALITY_BACKEND=numpy python run_summaries.py

    Pin it for the current session and undo the pin::

        sae_mortality.set_backend("numpy")
        sae_mortality.set_backend("auto")
"""

from __future__ import annotations

import importlib.util
import os

_ENV_VAR = "SAE_MORTALITY_BACKEND"

_CONCRETE = ("jax", "numpy")

# None and "auto" both mean "no session pin".
_backend_override: str | None = None


def _normalise(name: str) -> str:
    return name.strip().lower()


def _jax_is_available() -> bool:
    return importlib.util.find_spec("jax") is not None


def get_backend() -> str:
    """Name of the backend the policy currently selects.

    Returns:
        ``"jax"`` or ``"numpy"``.
    """
    if _backend_override in _CONCRETE:
        return _backend_override

    from_env = _normalise(os.environ.get(_ENV_VAR, ""))
    if from_env in _CONCRETE:
        return from_env

    return "jax" if _jax_is_available() else "numpy"


def set_backend(name: str) -> None:
    """Pin the backend for this session, or ``"auto"`` to unpin.

    Raises:
        ValueError: If *name* is neither a backend nor ``"auto"``.
    """
    global _backend_override
    choice = _normalise(name)
    if choice not in _CONCRETE + ("auto",):
        raise ValueError(
            f"Unknown backend '{name}'. Choose from: {sorted(_CONCRETE + ('auto',))}"
        )
    _backend_override = choice
