"""
Core modules for ClinDCA package.

This module contains the analytical components of decision curve analysis:
threshold grids, predictor classification, outcome estimators, net benefit,
smoothing and result aggregation.
"""

from .config import DCAConfig
from .errors import (
    DCAError, InvalidPredictorKind, DegenerateScore, MismatchedLength,
    InvalidHarm, InvalidTimeHorizon, MissingPrevalence, InvalidPrevalence,
    InvalidOutcome, MissingPredictor, EmptyThresholdGrid, InvalidThresholdGrid
)
from .thresholds import ThresholdGrid
from .predictors import ScoreKind, PredictorSpec, PreparedPredictor, prepare_predictor, classify
from .regimes import BinaryRegime, SurvivalRegime, CaseControlRegime, make_regime
from .estimators import (
    OutcomeEstimate, OutcomeEstimator, BinaryEstimator,
    CaseControlEstimator, SurvivalEstimator, build_estimator
)
from .net_benefit import (
    NetBenefitPoint, net_benefit, net_intervention_avoided,
    net_benefit_treat_all, calculate_net_benefit_model
)
from .smoothing import smooth_curve
from .results import DCAResult, ResultAggregator, TREAT_ALL, TREAT_NONE

__all__ = [
    'DCAConfig',
    'DCAError',
    'InvalidPredictorKind',
    'DegenerateScore',
    'MismatchedLength',
    'InvalidHarm',
    'InvalidTimeHorizon',
    'MissingPrevalence',
    'InvalidPrevalence',
    'InvalidOutcome',
    'MissingPredictor',
    'EmptyThresholdGrid',
    'InvalidThresholdGrid',
    'ThresholdGrid',
    'ScoreKind',
    'PredictorSpec',
    'PreparedPredictor',
    'prepare_predictor',
    'classify',
    'BinaryRegime',
    'SurvivalRegime',
    'CaseControlRegime',
    'make_regime',
    'OutcomeEstimate',
    'OutcomeEstimator',
    'BinaryEstimator',
    'CaseControlEstimator',
    'SurvivalEstimator',
    'build_estimator',
    'NetBenefitPoint',
    'net_benefit',
    'net_intervention_avoided',
    'net_benefit_treat_all',
    'calculate_net_benefit_model',
    'smooth_curve',
    'DCAResult',
    'ResultAggregator',
    'TREAT_ALL',
    'TREAT_NONE',
]
