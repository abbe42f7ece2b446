"""
Pipeline module for ClinDCA.

Contains the DecisionCurvePipeline class that orchestrates a full decision
curve analysis run.
"""

from .dca_pipeline import DecisionCurvePipeline, decision_curve_analysis, compute_dca_curves

__all__ = ['DecisionCurvePipeline', 'decision_curve_analysis', 'compute_dca_curves']
