"""Tests for the compute backends."""

import numpy as np
import pytest

from sae_mortality._backends import BackendProtocol, resolve_backend
from sae_mortality._backends._jax import JaxBackend
from sae_mortality._backends._numpy import NumpyBackend


def _matrices(n=30, k=5, s=400, seed=0):
    rng = np.random.default_rng(seed)
    return rng.standard_normal((n, k)), rng.standard_normal((s, k))


class TestNumpyBackend:
    def test_satisfies_protocol(self):
        assert isinstance(NumpyBackend(), BackendProtocol)

    def test_single_threaded_matches_matmul(self):
        X, B = _matrices()
        out = NumpyBackend().linear_predictor(X, B)
        assert out.shape == (30, 400)
        np.testing.assert_allclose(out, X @ B.T)

    def test_chunked_threads_preserve_draw_order(self):
        X, B = _matrices()
        out = NumpyBackend().linear_predictor(X, B, n_jobs=3)
        np.testing.assert_allclose(out, X @ B.T)

    def test_all_cores(self):
        X, B = _matrices(s=1000)
        out = NumpyBackend().linear_predictor(X, B, n_jobs=-1)
        np.testing.assert_allclose(out, X @ B.T)

    def test_few_draws_skip_parallel_path(self):
        X, B = _matrices(s=10)
        out = NumpyBackend().linear_predictor(X, B, n_jobs=4)
        np.testing.assert_allclose(out, X @ B.T)


class TestResolveBackend:
    def test_numpy_by_name(self):
        assert resolve_backend("numpy").name == "numpy"

    def test_name_is_normalised(self):
        assert resolve_backend(" NumPy ").name == "numpy"

    def test_cached_instance(self):
        assert resolve_backend("numpy") is resolve_backend("numpy")

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            resolve_backend("cupy")

    def test_explicit_jax_without_jax_raises(self):
        if JaxBackend().is_available:
            pytest.skip("JAX is installed")
        with pytest.raises(ImportError, match="JAX is not installed"):
            resolve_backend("jax")


class TestJaxBackend:
    def test_matches_numpy(self):
        pytest.importorskip("jax")
        X, B = _matrices()
        out = resolve_backend("jax").linear_predictor(X, B)
        assert isinstance(out, np.ndarray)
        np.testing.assert_allclose(out, X @ B.T, rtol=1e-12, atol=1e-12)
