"""
DecisionCurvePipeline: main pipeline class for decision curve analysis.

This module provides a unified interface for a full decision curve run,
from input validation to the frozen long-format result table.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ..core.config import DCAConfig
from ..core.errors import DCAError, InvalidOutcome, MissingPredictor
from ..core.estimators import OutcomeEstimator, build_estimator
from ..core.net_benefit import (
    NetBenefitPoint,
    evaluate_predictor,
    evaluate_treat_all,
    evaluate_treat_none,
)
from ..core.predictors import PredictorSpec, PreparedPredictor, prepare_predictor
from ..core.regimes import OutcomeRegime, SurvivalRegime
from ..core.results import REFERENCE_STRATEGIES, TREAT_ALL, TREAT_NONE, DCAResult, ResultAggregator

PredictorsArg = Union[Sequence[Union[str, PredictorSpec]], Mapping[str, str]]


def _evaluate_task(
    strategy: str,
    predictor: Optional[PreparedPredictor],
    estimator: OutcomeEstimator,
    threshold: float,
) -> NetBenefitPoint:
    if strategy == TREAT_ALL:
        return evaluate_treat_all(estimator, threshold)
    if strategy == TREAT_NONE:
        return evaluate_treat_none(estimator, threshold)
    return evaluate_predictor(predictor, estimator, threshold)


class DecisionCurvePipeline:
    """
    Main pipeline class for decision curve analysis.

    This class orchestrates a run:
    1. Threshold grid construction
    2. Outcome validation and estimator selection for the regime
    3. Per-predictor validation and score normalization
    4. Net benefit for every (strategy, threshold) pair
    5. Result aggregation and optional smoothing

    Parameters
    ----------
    config : DCAConfig, optional
        Run configuration. Defaults to ``DCAConfig()``.
    **overrides : dict
        Individual ``DCAConfig`` fields to override.
    """

    def __init__(self, config: Optional[DCAConfig] = None, **overrides):
        config = config or DCAConfig()
        self.config = config.updated(**overrides) if overrides else config
        self.results: Optional[DCAResult] = None
        self._setup_logging()

    def _setup_logging(self):
        """Setup logging configuration."""
        handlers = [logging.StreamHandler() if self.config.verbose else logging.NullHandler()]
        if self.config.log_file:
            handlers.append(logging.FileHandler(self.config.log_file))
        logging.basicConfig(
            level=logging.INFO if self.config.verbose else logging.WARNING,
            format='%(asctime)s - %(levelname)s - %(message)s',
            handlers=handlers,
        )
        self.logger = logging.getLogger(__name__)

    def _resolve_specs(self, predictors: PredictorsArg) -> List[PredictorSpec]:
        if isinstance(predictors, Mapping):
            items = [PredictorSpec(name, kind) for name, kind in predictors.items()]
        else:
            if isinstance(predictors, (str, PredictorSpec)):
                predictors = [predictors]
            items = []
            for p in predictors:
                if isinstance(p, PredictorSpec):
                    items.append(p)
                else:
                    items.append(PredictorSpec(p, self.config.score_kind_for(p)))

        names = [spec.name for spec in items]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate predictor names: {duplicates}")
        reserved = [name for name in names if name in REFERENCE_STRATEGIES]
        if reserved:
            raise ValueError(f"Predictor names {reserved} are reserved for reference strategies")
        return items

    def _prepare_predictors(
        self,
        scores: Sequence[Tuple[PredictorSpec, Any]],
        estimator: OutcomeEstimator,
    ) -> Tuple[List[Tuple[PreparedPredictor, OutcomeEstimator]], Dict[str, DCAError]]:
        """Validate and normalize every predictor once.

        Failures are isolated to the predictor that raised them unless the
        configuration is strict.
        """
        prepared = []
        failures: Dict[str, DCAError] = {}
        for spec, values in scores:
            try:
                if values is None:
                    raise MissingPredictor(f"Predictor column '{spec.source_column}' not found in data")
                predictor = prepare_predictor(spec, values, estimator.n, harm=self.config.harm_for(spec.name))
                subset = estimator if predictor.mask.all() else estimator.subset(predictor.mask)
            except DCAError as e:
                if self.config.strict:
                    raise
                self.logger.warning(f"Skipping predictor '{spec.name}': {type(e).__name__}: {e}")
                failures[spec.name] = e
                continue
            self.logger.info(f"Prepared predictor '{spec.name}' ({spec.kind.value}, n={predictor.n})")
            prepared.append((predictor, subset))
        return prepared, failures

    def run(
        self,
        data: pd.DataFrame,
        outcome: str,
        predictors: PredictorsArg,
        regime: Optional[OutcomeRegime] = None,
        time: Optional[str] = None,
    ) -> DCAResult:
        """
        Run decision curve analysis on a subject DataFrame.

        Parameters
        ----------
        data : pd.DataFrame
            One row per subject.
        outcome : str
            Outcome column: 0/1 flag for binary and case-control regimes,
            event code (censoring code for censored rows) for survival.
        predictors : sequence of str or PredictorSpec, or mapping
            Score columns to evaluate. A mapping is read as name -> score kind.
        regime : BinaryRegime, SurvivalRegime or CaseControlRegime, optional
            Outcome regime shared by all predictors. Defaults to the regime
            implied by the configuration (binary unless ``time_horizon`` or
            ``prevalence`` is set).
        time : str, optional
            Time-to-event column, required for the survival regime.

        Returns
        -------
        DCAResult
            Frozen long-format result table.
        """
        regime = regime or self.config.regime()
        if outcome not in data.columns:
            raise InvalidOutcome(f"Outcome column '{outcome}' not found in data")
        time_values = None
        incidence_values = None
        if isinstance(regime, SurvivalRegime):
            if time is None or time not in data.columns:
                raise InvalidOutcome(f"Survival analysis requires a time column, got '{time}'")
            time_values = data[time].to_numpy()
            if regime.incidence is not None:
                if regime.incidence not in data.columns:
                    raise InvalidOutcome(f"Incidence column '{regime.incidence}' not found in data")
                incidence_values = data[regime.incidence].to_numpy()

        specs = self._resolve_specs(predictors)
        scores = [
            (spec, data[spec.source_column].to_numpy() if spec.source_column in data.columns else None)
            for spec in specs
        ]
        return self._run(data[outcome].to_numpy(), scores, regime, time_values, incidence_values)

    def run_arrays(
        self,
        outcome,
        scores: Mapping[str, Any],
        regime: Optional[OutcomeRegime] = None,
        time=None,
        incidence=None,
    ) -> DCAResult:
        """Run decision curve analysis on plain arrays keyed by predictor name."""
        regime = regime or self.config.regime()
        specs = self._resolve_specs(list(scores))
        items = [(spec, scores[spec.name]) for spec in specs]
        return self._run(outcome, items, regime, time, incidence)

    def _run(self, outcome_values, scores, regime, time_values, incidence_values) -> DCAResult:
        self.logger.info(f"Starting decision curve analysis ({type(regime).__name__})...")
        grid = self.config.threshold_grid()

        estimator = build_estimator(
            regime,
            outcome_values,
            time=time_values,
            incidence=incidence_values,
            min_at_risk=self.config.min_at_risk,
        )
        self.logger.info(f"Subjects: {estimator.n}, outcome probability: {estimator.prevalence():.4f}")

        prepared, failures = self._prepare_predictors(scores, estimator)
        units: List[Tuple[str, Optional[PreparedPredictor], OutcomeEstimator]] = [
            (TREAT_ALL, None, estimator),
            (TREAT_NONE, None, estimator),
        ] + [(predictor.name, predictor, subset) for predictor, subset in prepared]

        aggregator = ResultAggregator([name for name, _, _ in units], grid)
        tasks = []
        slots = []
        for i, (name, predictor, unit_estimator) in enumerate(units):
            for j, threshold in enumerate(grid):
                slots.append(aggregator.slot(i, j))
                tasks.append(delayed(_evaluate_task)(name, predictor, unit_estimator, threshold))

        self.logger.info(f"Evaluating {len(units)} strategies at {len(grid)} thresholds")
        points = Parallel(n_jobs=self.config.n_jobs)(tasks)
        for slot, point in zip(slots, points):
            aggregator.put(slot, point)

        result = aggregator.freeze(failures, regime)
        if self.config.smoothing:
            result = result.with_smoothing(
                span=self.config.smoothing_span,
                min_points=self.config.smoothing_min_points,
            )

        n_low = int(result.table["low_confidence"].sum())
        if n_low:
            self.logger.info(f"{n_low} rows carry forward survival estimates beyond observed follow-up")
        self.results = result
        self.logger.info("Decision curve analysis completed successfully!")
        return result

    def summary(self) -> str:
        """Plain-text summary of the last run."""
        if self.results is None:
            return "No decision curve analysis has been run."
        result = self.results
        lines = ["Decision Curve Analysis Summary", "=" * 40, ""]
        lines.append(f"Thresholds: {len(result.grid)} ({result.grid.values[0]:.3f} - {result.grid.values[-1]:.3f})")
        lines.append(f"Predictors evaluated: {', '.join(result.predictors) or 'none'}")
        for name, error in result.failures.items():
            lines.append(f"Excluded {name}: {type(error).__name__}: {error}")
        best = result.best_strategy()
        counts = best["strategy"].value_counts()
        lines.append("")
        lines.append("Thresholds where each strategy has the highest net benefit:")
        for strategy, count in counts.items():
            lines.append(f"  {strategy}: {count}")
        return "\n".join(lines)


def decision_curve_analysis(
    data: pd.DataFrame,
    outcome: str,
    predictors: PredictorsArg,
    regime: Optional[OutcomeRegime] = None,
    time: Optional[str] = None,
    config: Optional[DCAConfig] = None,
    **overrides,
) -> DCAResult:
    """Run decision curve analysis with a one-off pipeline.

    ``overrides`` are ``DCAConfig`` fields, e.g. ``thresholds``, ``harm`` or
    ``smoothing``.
    """
    pipeline = DecisionCurvePipeline(config, **overrides)
    return pipeline.run(data, outcome, predictors, regime=regime, time=time)


def compute_dca_curves(
    y_true,
    scores: Dict[str, Any],
    thresholds: Optional[Sequence[float]] = None,
    harm: Optional[Dict[str, float]] = None,
) -> Tuple[np.ndarray, Dict[str, np.ndarray], np.ndarray]:
    """Compute binary-outcome decision curves for given scores.

    Parameters
    ----------
    y_true : array-like
        True binary labels (0/1).
    scores : Dict[str, array-like]
        Mapping from model name to predicted probabilities.
    thresholds : sequence of float, optional
        Threshold probabilities. Defaults to 0.01 to 0.99 by 0.01.
    harm : Dict[str, float], optional
        Per-model acting cost.

    Returns
    -------
    thresholds, model_curves, treat_all
        Threshold array, net benefit per model, and the treat-all curve.
    """
    pipeline = DecisionCurvePipeline(DCAConfig(thresholds=thresholds, harm=dict(harm or {}), strict=True))
    result = pipeline.run_arrays(np.asarray(list(y_true)), {k: np.asarray(list(v), dtype=float) for k, v in scores.items()})
    nb = result.wide("net_benefit")
    model_curves = {name: nb[name].to_numpy() for name in result.predictors}
    return nb.index.to_numpy(), model_curves, nb[TREAT_ALL].to_numpy()
