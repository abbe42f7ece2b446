"""
Net benefit calculations.

Net benefit is measured in net true positives per subject::

    net_benefit(pt) = TP/n - FP/n * pt / (1 - pt) - harm

and the interventions avoided relative to treating everyone::

    net_intervention_avoided(pt) = (net_benefit(pt) - net_benefit_all(pt)) / (pt / (1 - pt))
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from .estimators import BinaryEstimator, OutcomeEstimate, OutcomeEstimator
from .predictors import PredictorSpec, PreparedPredictor, ScoreKind, classify, prepare_predictor
from .thresholds import ThresholdGrid, threshold_odds


@dataclass(frozen=True)
class NetBenefitPoint:
    """Net benefit of one strategy at one threshold."""

    threshold: float
    n: int
    pos_rate: float
    tp_rate: float
    fp_rate: float
    harm: float
    net_benefit: float
    low_confidence: bool = False


def net_benefit(tp_rate: float, fp_rate: float, threshold: float, harm: float = 0.0) -> float:
    return tp_rate - fp_rate * threshold_odds(threshold) - harm


def net_intervention_avoided(nb: float, nb_all: float, threshold: float) -> float:
    return (nb - nb_all) / threshold_odds(threshold)


def _point(estimate: OutcomeEstimate, threshold: float, n: int, n_act: int, harm: float) -> NetBenefitPoint:
    # Harm is only incurred when someone is acted on
    applied_harm = harm if n_act > 0 else 0.0
    return NetBenefitPoint(
        threshold=float(threshold),
        n=n,
        pos_rate=n_act / float(n),
        tp_rate=float(estimate.tp_rate),
        fp_rate=float(estimate.fp_rate),
        harm=applied_harm,
        net_benefit=float(net_benefit(estimate.tp_rate, estimate.fp_rate, threshold, applied_harm)),
        low_confidence=bool(estimate.low_confidence),
    )


def evaluate_predictor(
    predictor: PreparedPredictor,
    estimator: OutcomeEstimator,
    threshold: float,
) -> NetBenefitPoint:
    """Net benefit of acting on ``predictor`` at ``threshold``.

    ``estimator`` must already be restricted to the predictor's kept rows.
    """
    would_act = classify(predictor, threshold)
    estimate = estimator.estimate(would_act, threshold)
    return _point(estimate, threshold, estimator.n, int(would_act.sum()), predictor.harm)


def evaluate_treat_all(estimator: OutcomeEstimator, threshold: float) -> NetBenefitPoint:
    return _point(estimator.treat_all(threshold), threshold, estimator.n, estimator.n, 0.0)


def evaluate_treat_none(estimator: OutcomeEstimator, threshold: float) -> NetBenefitPoint:
    return NetBenefitPoint(
        threshold=float(threshold),
        n=estimator.n,
        pos_rate=0.0,
        tp_rate=0.0,
        fp_rate=0.0,
        harm=0.0,
        net_benefit=0.0,
    )


def net_benefit_treat_all(prevalence: float, thresholds: Iterable[float]) -> np.ndarray:
    """Closed-form treat-all curve for a cohort with known prevalence."""
    odds = ThresholdGrid.coerce(thresholds).odds()
    return prevalence - (1.0 - prevalence) * odds


def calculate_net_benefit_model(
    thresholds: Iterable[float],
    y_pred_proba: np.ndarray,
    y_true: np.ndarray,
    harm: float = 0.0,
    kind: ScoreKind = ScoreKind.PROBABILITY,
    name: Optional[str] = "model",
) -> np.ndarray:
    """Net benefit curve of one predictor on a binary cohort."""
    grid = ThresholdGrid.coerce(thresholds)
    estimator = BinaryEstimator.from_values(y_true)
    predictor = prepare_predictor(PredictorSpec(name, kind), y_pred_proba, estimator.n, harm=harm)
    estimator = estimator.subset(predictor.mask)
    return np.array([evaluate_predictor(predictor, estimator, t).net_benefit for t in grid])
