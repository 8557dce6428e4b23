"""sae_mortality — Posterior predictive summaries for small-area mortality.

Rebuilds fitted-value draws from MCMC coefficient draws of a
hierarchical mortality model (fixed effects plus BYM2 spatial and
random-walk effects at district and division level), reduces them to
posterior means, SDs and quantile credible intervals (optionally
back-transformed from a log link), and benchmarks national trends
against external reference rates.

Public API:
    .. autosummary::
        posterior_predict
        linear_predictor_draws
        summarize_draws
        merge_predictions
        align_draws
        fixed_design_matrix
        indicator_design
        standardize_year
        PosteriorBundle
        RandomEffectGroup
        bundle_from_sampler
        PredictionSummary
        draw_diagnostics
        summarize_coefficients
        print_prediction_table
        compare_to_reference
        BenchmarkResult
        read_draws_csv
        read_covariates_csv
        write_summary_csv
        DirectEstimator
        SpatialTemporalSmoother
        validate_direct_estimates
        to_log_scale
        InputShapeError
        MissingDataError
        get_backend
        set_backend
"""

from ._config import get_backend, set_backend
from ._results import PredictionSummary
from .alignment import align_draws
from .benchmark import BenchmarkResult, compare_to_reference
from .collaborators import (
    DirectEstimator,
    SpatialTemporalSmoother,
    to_log_scale,
    validate_direct_estimates,
)
from .design import fixed_design_matrix, indicator_design, standardize_year
from .diagnostics import draw_diagnostics, summarize_coefficients
from .display import print_prediction_table
from .effects import PosteriorBundle, RandomEffectGroup, bundle_from_sampler
from .errors import InputShapeError, MissingDataError, SAEMortalityError
from .io import read_covariates_csv, read_draws_csv, write_summary_csv
from .predict import (
    linear_predictor_draws,
    merge_predictions,
    posterior_predict,
    summarize_draws,
)

__all__ = [
    "BenchmarkResult",
    "DirectEstimator",
    "InputShapeError",
    "MissingDataError",
    "PosteriorBundle",
    "PredictionSummary",
    "RandomEffectGroup",
    "SAEMortalityError",
    "SpatialTemporalSmoother",
    "align_draws",
    "bundle_from_sampler",
    "compare_to_reference",
    "draw_diagnostics",
    "fixed_design_matrix",
    "get_backend",
    "indicator_design",
    "linear_predictor_draws",
    "merge_predictions",
    "posterior_predict",
    "print_prediction_table",
    "read_covariates_csv",
    "read_draws_csv",
    "set_backend",
    "standardize_year",
    "summarize_coefficients",
    "summarize_draws",
    "to_log_scale",
    "validate_direct_estimates",
    "write_summary_csv",
]

__version__ = "0.2.0"
