"""Tests for the pipeline: configuration, error isolation and parallel runs."""

import logging

import numpy as np
import pytest

from clindca import (
    DCAConfig,
    DecisionCurvePipeline,
    DegenerateScore,
    EmptyThresholdGrid,
    InvalidPredictorKind,
    MismatchedLength,
    PredictorSpec,
)
from clindca.core.errors import InvalidOutcome, InvalidThresholdGrid, MissingPredictor, MissingPrevalence
from clindca.core.regimes import BinaryRegime, CaseControlRegime, SurvivalRegime


@pytest.fixture
def messy_cohort(synthetic_cohort):
    data = synthetic_cohort.copy()
    data["bad_indicator"] = np.arange(len(data)) % 3
    data["constant"] = 5.0
    return data


def test_predictor_failures_are_isolated(messy_cohort, caplog):
    pipeline = DecisionCurvePipeline(
        score_kinds={"bad_indicator": "binary-indicator", "constant": "raw-score-to-rescale"},
        thresholds=[0.1, 0.2],
    )
    with caplog.at_level(logging.WARNING):
        result = pipeline.run(messy_cohort, "cancer", ["model", "bad_indicator", "constant", "absent"])

    assert result.predictors == ["model"]
    assert isinstance(result.failures["bad_indicator"], InvalidPredictorKind)
    assert isinstance(result.failures["constant"], DegenerateScore)
    assert isinstance(result.failures["absent"], MissingPredictor)
    assert set(result.table["predictor"]) == {"treat_all", "treat_none", "model"}
    assert "Skipping predictor 'constant'" in caplog.text


def test_strict_mode_raises(messy_cohort):
    pipeline = DecisionCurvePipeline(strict=True, score_kinds={"constant": "raw"})
    with pytest.raises(DegenerateScore):
        pipeline.run(messy_cohort, "cancer", ["model", "constant"])


def test_all_predictors_failing_still_returns_reference(messy_cohort):
    result = DecisionCurvePipeline(thresholds=[0.3]).run(
        messy_cohort, "cancer", {"constant": "raw-score-to-rescale"}
    )
    assert result.predictors == []
    assert result.strategies == ["treat_all", "treat_none"]


def test_mismatched_length_from_arrays():
    pipeline = DecisionCurvePipeline(thresholds=[0.2, 0.5])
    result = pipeline.run_arrays([0, 1, 0, 1], {"short": [0.1, 0.9, 0.3], "ok": [0.1, 0.9, 0.3, 0.7]})
    assert isinstance(result.failures["short"], MismatchedLength)
    assert result.predictors == ["ok"]


def test_missing_scores_drop_rows_for_that_predictor_only(synthetic_cohort):
    data = synthetic_cohort.copy()
    data.loc[:49, "model"] = np.nan
    result = DecisionCurvePipeline(thresholds=[0.2]).run(data, "cancer", ["model", "marker"])
    table = result.table.set_index("predictor")
    assert table.loc["model", "n"] == len(data) - 50
    assert table.loc["marker", "n"] == len(data)
    assert table.loc["treat_all", "n"] == len(data)


def test_grid_errors_abort_run(synthetic_cohort):
    with pytest.raises(EmptyThresholdGrid):
        DecisionCurvePipeline(thresholds=[]).run(synthetic_cohort, "cancer", ["model"])
    with pytest.raises(InvalidThresholdGrid):
        DecisionCurvePipeline(thresholds=[0.0, 0.5]).run(synthetic_cohort, "cancer", ["model"])


def test_outcome_errors_abort_run(synthetic_cohort):
    data = synthetic_cohort.copy()
    data.loc[0, "cancer"] = 2
    with pytest.raises(InvalidOutcome):
        DecisionCurvePipeline().run(data, "cancer", ["model"])
    with pytest.raises(InvalidOutcome):
        DecisionCurvePipeline().run(synthetic_cohort, "missing_outcome", ["model"])


def test_reserved_and_duplicate_names(synthetic_cohort):
    pipeline = DecisionCurvePipeline()
    with pytest.raises(ValueError):
        pipeline.run(synthetic_cohort, "cancer", ["model", "model"])
    with pytest.raises(ValueError):
        pipeline.run(synthetic_cohort, "cancer", [PredictorSpec("treat_all", column="model")])


def test_predictor_spec_with_column(synthetic_cohort):
    result = DecisionCurvePipeline(thresholds=[0.2]).run(
        synthetic_cohort, "cancer", [PredictorSpec("Risk model", column="model")]
    )
    assert result.predictors == ["Risk model"]


def test_config_selects_regime():
    assert isinstance(DCAConfig().regime(), BinaryRegime)
    assert isinstance(DCAConfig(prevalence=0.1).regime(), CaseControlRegime)
    regime = DCAConfig(time_horizon=2.0, competing=True).regime()
    assert isinstance(regime, SurvivalRegime)
    assert regime.competing
    with pytest.raises(ValueError):
        DCAConfig(time_horizon=2.0, prevalence=0.1).regime()
    with pytest.raises(MissingPrevalence):
        DCAConfig(case_control=True).regime()
    assert DCAConfig(case_control=True, prevalence=0.2).regime() == CaseControlRegime(prevalence=0.2)


def test_config_from_dict_rejects_unknown_keys():
    config = DCAConfig.from_dict({"thresholds": [0.1, 0.2], "harm": {"model": 0.01}})
    assert config.harm_for("model") == 0.01
    assert config.harm_for("other") == 0.0
    with pytest.raises(ValueError):
        DCAConfig.from_dict({"threshold": [0.1]})


def test_parallel_run_matches_sequential(synthetic_cohort):
    grid = [0.1, 0.2, 0.3, 0.4]
    sequential = DecisionCurvePipeline(thresholds=grid, n_jobs=1).run(
        synthetic_cohort, "cancer", ["model", "marker"]
    )
    parallel = DecisionCurvePipeline(thresholds=grid, n_jobs=2, score_kinds={"marker": "raw"}).run(
        synthetic_cohort, "cancer", ["model", "marker"]
    )
    # marker is not a probability without rescaling, so only the sequential run drops it
    assert "marker" in sequential.failures
    model_seq = sequential.for_predictors(["model"])
    model_par = parallel.for_predictors(["model"])
    np.testing.assert_allclose(model_seq["net_benefit"], model_par["net_benefit"])


def test_summary_lists_strategies(synthetic_cohort):
    pipeline = DecisionCurvePipeline(thresholds=[0.1, 0.2, 0.3])
    assert "No decision curve analysis" in pipeline.summary()
    pipeline.run(synthetic_cohort, "cancer", ["model"])
    text = pipeline.summary()
    assert "Predictors evaluated: model" in text
    assert "Decision Curve Analysis Summary" in text
