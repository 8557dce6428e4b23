"""Predictive-draw benchmark — posterior_predict() across problem sizes.

Measures wall time for the complete prediction pipeline (alignment →
per-block products → summaries) across panel sizes (N observations),
draw counts (S) and backends.

Key questions this benchmark answers
-------------------------------------
1. Does the summary step (sorting for quantiles) or the matrix
   products dominate at realistic N × S?
2. When does thread-chunking the draws (``n_jobs``) pay off on the
   NumPy backend?
3. Is the JAX backend faster once compilation is amortised?

Usage::

    python benchmarks/profile_predict.py          # full suite
    python benchmarks/profile_predict.py --quick  # reduced

Outputs:
    benchmarks/results/predict_profile.csv
"""

from __future__ import annotations

import argparse
import platform
import time
from pathlib import Path

import numpy as np
import pandas as pd

from sae_mortality import PosteriorBundle, RandomEffectGroup, posterior_predict
from sae_mortality._backends._jax import JaxBackend

# Each scenario: N observations, P fixed effects, K district levels,
# R random-walk levels, S retained draws.
SCENARIOS: list[dict] = [
    {"name": "national", "N": 60, "P": 4, "K": 1, "R": 20, "S": 1000},
    {"name": "division", "N": 480, "P": 12, "K": 8, "R": 160, "S": 1000},
    {"name": "district", "N": 3840, "P": 16, "K": 64, "R": 1280, "S": 1000},
    {"name": "district_long", "N": 3840, "P": 16, "K": 64, "R": 1280, "S": 5000},
]

QUICK = {"national", "division"}


def _bundle(N: int, P: int, K: int, R: int, S: int, seed: int = 0) -> PosteriorBundle:
    rng = np.random.default_rng(seed)
    fixed_cols = [f"b{j}" for j in range(P)]
    X = pd.DataFrame(rng.standard_normal((N, P)), columns=fixed_cols)
    X["b0"] = 1.0

    def _indicator(levels: int, prefix: str) -> pd.DataFrame:
        idx = rng.integers(0, levels, N)
        return pd.DataFrame(
            np.eye(levels)[idx], columns=[f"{prefix}{k}" for k in range(levels)]
        )

    def _draws(design: pd.DataFrame, scale: float) -> pd.DataFrame:
        return pd.DataFrame(
            rng.normal(0, scale, (S, design.shape[1])), columns=design.columns
        )

    Z = _indicator(K, "d")
    W = _indicator(R, "rw")
    return PosteriorBundle(
        X,
        _draws(X, 0.1),
        [
            RandomEffectGroup("district", Z, {"structured": _draws(Z, 0.2),
                                              "unstructured": _draws(Z, 0.05)}),
            RandomEffectGroup("rw", W, {"rw": _draws(W, 0.03)}),
        ],
    )


def _time(fn, repeats: int) -> float:
    best = np.inf
    for _ in range(repeats):
        t0 = time.perf_counter()
        fn()
        best = min(best, time.perf_counter() - t0)
    return best


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--quick", action="store_true", help="Small scenarios only.")
    parser.add_argument("--repeats", type=int, default=3)
    args = parser.parse_args()

    configs = [("numpy", 1), ("numpy", -1)]
    if JaxBackend().is_available:
        configs.append(("jax", 1))

    rows = []
    for sc in SCENARIOS:
        if args.quick and sc["name"] not in QUICK:
            continue
        bundle = _bundle(sc["N"], sc["P"], sc["K"], sc["R"], sc["S"])
        for backend, n_jobs in configs:
            # Warm-up (JIT compilation for JAX).
            posterior_predict(bundle, backend=backend, n_jobs=n_jobs)
            seconds = _time(
                lambda: posterior_predict(bundle, backend=backend, n_jobs=n_jobs),
                args.repeats,
            )
            rows.append({**sc, "backend": backend, "n_jobs": n_jobs, "seconds": seconds})
            print(
                f"{sc['name']:<15} {backend:<6} n_jobs={n_jobs:>2}  {seconds * 1e3:9.1f} ms"
            )

    out = Path(__file__).resolve().parent / "results" / "predict_profile.csv"
    out.parent.mkdir(parents=True, exist_ok=True)
    frame = pd.DataFrame(rows)
    frame["machine"] = platform.machine()
    frame.to_csv(out, index=False)
    print(f"\nWrote {out}")


if __name__ == "__main__":
    main()
