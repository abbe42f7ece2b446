"""
ClinDCA: Decision Curve Analysis for Clinical Prediction

A Python package for evaluating the clinical usefulness of risk predictors
with decision curve analysis.

Main Components:
- Threshold grids and predictor classification
- Outcome estimators for binary, time-to-event (including competing risks)
  and case-control data
- Net benefit and net interventions avoided
- Optional LOWESS smoothing of decision curves
- Long-format result tables with read-only views
"""

__version__ = "0.1.0"
__author__ = "Junrong Li"


# Import main classes and functions for easy access
from .core.config import DCAConfig
from .core.errors import (
    DCAError, InvalidPredictorKind, DegenerateScore, InvalidTimeHorizon,
    MissingPrevalence, EmptyThresholdGrid, MismatchedLength
)
from .core.predictors import PredictorSpec, ScoreKind
from .core.regimes import BinaryRegime, SurvivalRegime, CaseControlRegime
from .core.results import DCAResult
from .core.thresholds import ThresholdGrid
from .pipeline.dca_pipeline import (
    DecisionCurvePipeline, decision_curve_analysis, compute_dca_curves
)

# Main API exports
__all__ = [
    'DCAConfig',
    'DCAError',
    'InvalidPredictorKind',
    'DegenerateScore',
    'InvalidTimeHorizon',
    'MissingPrevalence',
    'EmptyThresholdGrid',
    'MismatchedLength',
    'PredictorSpec',
    'ScoreKind',
    'BinaryRegime',
    'SurvivalRegime',
    'CaseControlRegime',
    'DCAResult',
    'ThresholdGrid',
    'DecisionCurvePipeline',
    'decision_curve_analysis',
    'compute_dca_curves',
]

# Package metadata
PACKAGE_INFO = {
    'name': 'clindca',
    'version': __version__,
    'description': 'Decision Curve Analysis for Clinical Prediction',
    'author': __author__,
    'license': 'MIT',
}
