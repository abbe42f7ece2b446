"""
Outcome estimators.

Every estimator answers the same question for a would-act labelling of its
subjects: what fraction of all subjects are expected true positives and what
fraction are expected false positives. Net benefit is computed from those two
fractions regardless of the outcome regime.
"""

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Optional

import numpy as np
import pandas as pd

from .errors import InvalidOutcome, InvalidTimeHorizon
from .regimes import BinaryRegime, CaseControlRegime, OutcomeRegime, SurvivalRegime
from .survival import (
    HorizonRisk,
    cumulative_incidence_risk,
    encode_events,
    kaplan_meier_risk,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutcomeEstimate:
    """True and false positive fractions, per subject, at one threshold."""

    tp_rate: float
    fp_rate: float
    low_confidence: bool = False


class OutcomeEstimator:
    """Shared contract for the three outcome regimes."""

    regime: OutcomeRegime

    @property
    def n(self) -> int:
        raise NotImplementedError

    def subset(self, mask: np.ndarray) -> "OutcomeEstimator":
        """Estimator restricted to the rows selected by ``mask``."""
        raise NotImplementedError

    def estimate(self, would_act: np.ndarray, threshold: float) -> OutcomeEstimate:
        raise NotImplementedError

    def treat_all(self, threshold: float) -> OutcomeEstimate:
        return self.estimate(np.ones(self.n, dtype=bool), threshold)

    def prevalence(self) -> float:
        """Probability of the outcome in the population the estimator describes."""
        return self.treat_all(0.5).tp_rate


def _binary_outcome(values, regime_name: str) -> np.ndarray:
    outcome = pd.to_numeric(pd.Series(np.asarray(values).ravel()), errors="coerce").to_numpy(dtype=float)
    if np.isnan(outcome).any():
        raise InvalidOutcome(f"{regime_name} outcome has {int(np.isnan(outcome).sum())} missing or non-numeric values")
    invalid = np.setdiff1d(np.unique(outcome), [0.0, 1.0])
    if invalid.size:
        raise InvalidOutcome(f"{regime_name} outcome must be coded 0/1, found {invalid[:5].tolist()}")
    if outcome.size == 0:
        raise InvalidOutcome(f"{regime_name} outcome is empty")
    return outcome.astype(bool)


class BinaryEstimator(OutcomeEstimator):
    """Direct counting over a cohort."""

    regime = BinaryRegime()

    def __init__(self, outcome: np.ndarray):
        self.outcome = np.asarray(outcome, dtype=bool)

    @classmethod
    def from_values(cls, outcome) -> "BinaryEstimator":
        return cls(_binary_outcome(outcome, "Binary"))

    @property
    def n(self) -> int:
        return int(self.outcome.shape[0])

    def subset(self, mask: np.ndarray) -> "BinaryEstimator":
        return BinaryEstimator(self.outcome[mask])

    def estimate(self, would_act: np.ndarray, threshold: float) -> OutcomeEstimate:
        n = float(self.n)
        tp = np.sum(would_act & self.outcome)
        fp = np.sum(would_act & ~self.outcome)
        return OutcomeEstimate(tp / n, fp / n)


class CaseControlEstimator(OutcomeEstimator):
    """Counts within a case-control sample, reweighted to a known prevalence.

    Sensitivity and false positive rate are estimated within the sample; the
    population fractions are ``sensitivity * prevalence`` and
    ``false_positive_rate * (1 - prevalence)``.
    """

    def __init__(self, outcome: np.ndarray, regime: CaseControlRegime):
        self.outcome = np.asarray(outcome, dtype=bool)
        self.regime = regime
        n_cases = int(self.outcome.sum())
        if n_cases == 0 or n_cases == self.outcome.shape[0]:
            raise InvalidOutcome("Case-control sample must contain both cases and controls")

    @classmethod
    def from_values(cls, outcome, regime: CaseControlRegime) -> "CaseControlEstimator":
        return cls(_binary_outcome(outcome, "Case-control"), regime)

    @property
    def n(self) -> int:
        return int(self.outcome.shape[0])

    def subset(self, mask: np.ndarray) -> "CaseControlEstimator":
        return CaseControlEstimator(self.outcome[mask], self.regime)

    def estimate(self, would_act: np.ndarray, threshold: float) -> OutcomeEstimate:
        prevalence = float(self.regime.prevalence)
        cases = self.outcome
        sensitivity = np.sum(would_act & cases) / float(cases.sum())
        false_positive_rate = np.sum(would_act & ~cases) / float((~cases).sum())
        return OutcomeEstimate(sensitivity * prevalence, false_positive_rate * (1.0 - prevalence))


class SurvivalEstimator(OutcomeEstimator):
    """Event probability by a fixed horizon within acted/not-acted subgroups.

    For a would-act subgroup with event probability ``r`` at the horizon, the
    true positive fraction is ``P(act) * r`` and the false positive fraction
    is ``P(act) * (1 - r)``.
    """

    def __init__(
        self,
        durations: np.ndarray,
        labels: np.ndarray,
        regime: SurvivalRegime,
        incidence: Optional[np.ndarray] = None,
        min_at_risk: int = 1,
    ):
        self.durations = np.asarray(durations, dtype=float)
        self.labels = np.asarray(labels, dtype=int)
        self.regime = regime
        self.incidence = None if incidence is None else np.asarray(incidence, dtype=float)
        self.min_at_risk = min_at_risk

    def check_follow_up(self):
        """Raise InvalidTimeHorizon when too few subjects are followed to the horizon."""
        horizon = float(self.regime.time_horizon)
        at_risk = int(np.sum(self.durations >= horizon))
        if at_risk < self.min_at_risk:
            raise InvalidTimeHorizon(
                f"Only {at_risk} of {self.n} subjects remain under follow-up at time {horizon} "
                f"(maximum follow-up {self.durations.max() if self.n else None}); at least {self.min_at_risk} required"
            )

    @classmethod
    def from_values(
        cls,
        durations,
        codes,
        regime: SurvivalRegime,
        incidence=None,
        min_at_risk: int = 1,
    ) -> "SurvivalEstimator":
        """Validate raw time/event data and build the full-sample estimator."""
        durations = pd.to_numeric(pd.Series(np.asarray(durations).ravel()), errors="coerce").to_numpy(dtype=float)
        codes = pd.to_numeric(pd.Series(np.asarray(codes).ravel()), errors="coerce").to_numpy(dtype=float)
        if durations.shape != codes.shape:
            raise InvalidOutcome(
                f"Time ({durations.shape[0]}) and event ({codes.shape[0]}) columns differ in length"
            )
        if durations.size == 0:
            raise InvalidOutcome("Survival outcome is empty")
        if np.isnan(durations).any() or np.isnan(codes).any():
            raise InvalidOutcome("Survival time and event columns must not contain missing values")
        if np.any(durations < 0) or np.any(np.isinf(durations)):
            raise InvalidOutcome("Survival times must be finite and non-negative")
        if np.any(codes != np.round(codes)):
            raise InvalidOutcome("Event codes must be integers")
        codes = codes.astype(int)

        event_of_interest = None
        if regime.competing:
            event_codes = np.unique(codes[codes != regime.censor_code])
            event_of_interest = regime.event_of_interest
            if event_of_interest is None:
                if event_codes.size == 0:
                    raise InvalidOutcome("Competing-risks analysis found no events")
                event_of_interest = int(event_codes[0])
            elif event_of_interest not in event_codes:
                logger.warning(f"Event of interest {event_of_interest} never occurs in the data")
            logger.info(f"Competing risks: event of interest {event_of_interest}, "
                        f"competing codes {[int(c) for c in event_codes if c != event_of_interest]}")
        labels = encode_events(codes, regime.censor_code, event_of_interest)

        if incidence is not None:
            incidence = pd.to_numeric(pd.Series(np.asarray(incidence).ravel()), errors="coerce").to_numpy(dtype=float)
            if incidence.shape != durations.shape:
                raise InvalidOutcome("Incidence column length differs from the survival data")
            if np.isnan(incidence).any() or incidence.min() < 0.0 or incidence.max() > 1.0:
                raise InvalidOutcome("Cumulative incidence estimates must be non-missing and within [0, 1]")

        estimator = cls(durations, labels, regime, incidence, min_at_risk=min_at_risk)
        estimator.check_follow_up()
        return estimator

    @property
    def n(self) -> int:
        return int(self.durations.shape[0])

    def subset(self, mask: np.ndarray) -> "SurvivalEstimator":
        incidence = None if self.incidence is None else self.incidence[mask]
        estimator = SurvivalEstimator(
            self.durations[mask], self.labels[mask], self.regime, incidence, min_at_risk=self.min_at_risk
        )
        estimator.check_follow_up()
        return estimator

    def subgroup_risk(self, members: np.ndarray) -> HorizonRisk:
        """Probability of the event of interest by the horizon among ``members``."""
        horizon = float(self.regime.time_horizon)
        if self.incidence is not None:
            if not members.any():
                return HorizonRisk(0.0)
            return HorizonRisk(float(self.incidence[members].mean()))
        durations = self.durations[members]
        labels = self.labels[members]
        if self.regime.competing:
            return cumulative_incidence_risk(durations, labels, horizon)
        return kaplan_meier_risk(durations, labels > 0, horizon)

    @cached_property
    def _overall_risk(self) -> HorizonRisk:
        return self.subgroup_risk(np.ones(self.n, dtype=bool))

    def estimate(self, would_act: np.ndarray, threshold: float) -> OutcomeEstimate:
        would_act = np.asarray(would_act, dtype=bool)
        n_act = int(would_act.sum())
        if n_act == 0:
            return OutcomeEstimate(0.0, 0.0)
        if n_act == self.n:
            risk = self._overall_risk
        else:
            risk = self.subgroup_risk(would_act)
        if risk.low_confidence:
            logger.info(
                f"Follow-up ends before time {self.regime.time_horizon} among {n_act} acted subjects "
                f"at threshold {threshold:.3f}; carrying the last estimate forward"
            )
        p_act = n_act / float(self.n)
        return OutcomeEstimate(p_act * risk.risk, p_act * (1.0 - risk.risk), risk.low_confidence)

    def treat_all(self, threshold: float) -> OutcomeEstimate:
        risk = self._overall_risk
        return OutcomeEstimate(risk.risk, 1.0 - risk.risk, risk.low_confidence)


def build_estimator(
    regime: OutcomeRegime,
    outcome,
    time=None,
    incidence=None,
    min_at_risk: int = 1,
) -> OutcomeEstimator:
    """Build the full-sample estimator for ``regime``.

    ``outcome`` holds the 0/1 outcome (binary, case-control) or the event code
    (survival). Regime-level validation errors are raised here and abort the
    run.
    """
    if isinstance(regime, BinaryRegime):
        return BinaryEstimator.from_values(outcome)
    if isinstance(regime, CaseControlRegime):
        return CaseControlEstimator.from_values(outcome, regime)
    if isinstance(regime, SurvivalRegime):
        if time is None:
            raise InvalidOutcome("Survival analysis requires a time-to-event column")
        return SurvivalEstimator.from_values(time, outcome, regime, incidence=incidence, min_at_risk=min_at_risk)
    raise TypeError(f"Unsupported outcome regime: {type(regime).__name__}")
