"""Tests for predictor preparation and classification."""

import numpy as np
import pytest

from clindca.core.errors import (
    DegenerateScore,
    InvalidHarm,
    InvalidPredictorKind,
    MismatchedLength,
)
from clindca.core.predictors import PredictorSpec, ScoreKind, classify, prepare_predictor


def test_score_kind_parsing():
    assert ScoreKind.parse("probability") is ScoreKind.PROBABILITY
    assert ScoreKind.parse("binary_indicator") is ScoreKind.BINARY_INDICATOR
    assert ScoreKind.parse("raw") is ScoreKind.RAW_SCORE
    with pytest.raises(InvalidPredictorKind):
        ScoreKind.parse("odds")


def test_probability_classification_uses_greater_or_equal():
    predictor = prepare_predictor(PredictorSpec("p"), [0.1, 0.5, 0.9], 3)
    np.testing.assert_array_equal(classify(predictor, 0.5), [False, True, True])
    np.testing.assert_array_equal(classify(predictor, 0.95), [False, False, False])


def test_probability_out_of_range_rejected():
    with pytest.raises(InvalidPredictorKind):
        prepare_predictor(PredictorSpec("p"), [0.2, 1.4], 2)


def test_binary_indicator_invariant_across_thresholds():
    predictor = prepare_predictor(PredictorSpec("b", "binary-indicator"), [0, 1, 1, 0], 4)
    labels = [classify(predictor, t) for t in (0.01, 0.5, 0.99)]
    for label in labels:
        np.testing.assert_array_equal(label, [False, True, True, False])


def test_binary_indicator_rejects_other_values():
    with pytest.raises(InvalidPredictorKind):
        prepare_predictor(PredictorSpec("b", ScoreKind.BINARY_INDICATOR), [0, 1, 2], 3)


def test_raw_scores_rescaled_to_unit_interval():
    predictor = prepare_predictor(PredictorSpec("r", "raw-score-to-rescale"), [10.0, 20.0, 30.0], 3)
    np.testing.assert_allclose(predictor.scores, [0.0, 0.5, 1.0])


def test_constant_raw_score_is_degenerate():
    with pytest.raises(DegenerateScore):
        prepare_predictor(PredictorSpec("r", "raw-score-to-rescale"), [3.0, 3.0, 3.0], 3)


def test_length_mismatch():
    with pytest.raises(MismatchedLength):
        prepare_predictor(PredictorSpec("p"), [0.1, 0.2], 3)


def test_negative_harm_rejected():
    with pytest.raises(InvalidHarm):
        prepare_predictor(PredictorSpec("p"), [0.1, 0.2], 2, harm=-0.01)


def test_missing_scores_dropped_per_predictor():
    predictor = prepare_predictor(PredictorSpec("p"), [0.1, np.nan, 0.7, None], 4)
    np.testing.assert_array_equal(predictor.mask, [True, False, True, False])
    np.testing.assert_allclose(predictor.scores, [0.1, 0.7])
    assert predictor.n == 2


def test_non_numeric_scores_rejected():
    with pytest.raises(InvalidPredictorKind):
        prepare_predictor(PredictorSpec("p"), ["low", "high"], 2)


def test_source_column_defaults_to_name():
    assert PredictorSpec("model").source_column == "model"
    assert PredictorSpec("model", column="pred_col").source_column == "pred_col"
