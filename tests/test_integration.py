"""End-to-end pipeline: covariates → designs → draws → summaries → CSV."""

import numpy as np
import pandas as pd

import sae_mortality as sae

_SEED = 42


def _covariates() -> pd.DataFrame:
    rows = []
    divisions = {"Dhaka": ["Dhaka", "Gazipur"], "Khulna": ["Khulna", "Jessore"]}
    for division, districts in divisions.items():
        for district in districts:
            for year in (2005, 2010, 2015):
                for cause in ("infection", "injury"):
                    rows.append(
                        {"year": year, "district": district,
                         "division": division, "cause": cause}
                    )
    cov = pd.DataFrame(rows)
    cov["year_std"], _ = sae.standardize_year(cov["year"])
    return cov


def _sampler_output(fixed, district_design, rw_design, n_draws=300, seed=_SEED):
    """Draws with columns deliberately shuffled relative to the designs."""
    rng = np.random.default_rng(seed)

    def _draws(design, scale, loc=0.0):
        cols = list(design.columns)
        rng.shuffle(cols)
        return pd.DataFrame(
            rng.normal(loc, scale, (n_draws, len(cols))), columns=cols
        )

    return {
        "beta": _draws(fixed, 0.05, loc=-4.0),
        "district.structured": _draws(district_design, 0.2),
        "district.unstructured": _draws(district_design, 0.05),
        "cause_district_rw": _draws(rw_design, 0.03),
    }


class TestPipeline:
    def test_full_run(self, tmp_path):
        cov = _covariates()
        fixed = sae.fixed_design_matrix(cov)
        district_design = sae.indicator_design(cov, "district")
        rw_design = sae.indicator_design(cov, ["cause", "district", "year"])
        draws = _sampler_output(fixed, district_design, rw_design)

        bundle = sae.bundle_from_sampler(
            draws,
            fixed,
            random_designs={
                "district": district_design,
                "cause_district_rw": rw_design,
            },
        )
        summary = sae.posterior_predict(
            bundle,
            transform="log",
            required_groups=["district", "cause_district_rw"],
            backend="numpy",
            keep_draws=True,
        )

        assert summary.n_obs == len(cov)
        assert summary.n_draws == 300
        assert np.all(summary.mean > 0)
        assert np.all(summary.lower < summary.upper)

        out = sae.merge_predictions(cov, summary)
        path = sae.write_summary_csv(out, tmp_path / "district_summary.csv")
        back = pd.read_csv(path)
        np.testing.assert_allclose(back["mean"], summary.mean)

        diag = sae.draw_diagnostics(summary)
        assert (diag["n_valid"] == 300).all()

    def test_shuffled_draw_columns_match_aligned(self):
        cov = _covariates()
        fixed = sae.fixed_design_matrix(cov)
        district_design = sae.indicator_design(cov, "district")
        rw_design = sae.indicator_design(cov, ["cause", "district", "year"])
        draws = _sampler_output(fixed, district_design, rw_design)
        designs = {"district": district_design, "cause_district_rw": rw_design}

        shuffled = sae.posterior_predict(sae.bundle_from_sampler(draws, fixed, random_designs=designs))

        ordered_draws = {
            "beta": draws["beta"][list(fixed.columns)],
            "district.structured": draws["district.structured"][list(district_design.columns)],
            "district.unstructured": draws["district.unstructured"][list(district_design.columns)],
            "cause_district_rw": draws["cause_district_rw"][list(rw_design.columns)],
        }
        ordered = sae.posterior_predict(
            sae.bundle_from_sampler(ordered_draws, fixed, random_designs=designs)
        )
        np.testing.assert_allclose(shuffled.mean, ordered.mean)
        np.testing.assert_allclose(shuffled.upper, ordered.upper)

    def test_national_benchmark(self):
        years = np.array([2000, 2005, 2010, 2015, 2020])
        rng = np.random.default_rng(_SEED)
        true_log = np.log(np.array([0.09, 0.07, 0.05, 0.04, 0.03]))
        draws = true_log[:, None] + rng.normal(0, 0.05, (5, 500))
        summary = sae.summarize_draws(draws, transform="log", index=years)

        estimates = summary.to_frame().reset_index(names="year")
        reference = pd.DataFrame({"year": years, "rate": np.exp(true_log)})
        res = sae.compare_to_reference(estimates, reference)

        assert res.n_matched == 5
        assert res.coverage == 1.0
        assert abs(res.calibration["slope"] - 1.0) < 0.1
