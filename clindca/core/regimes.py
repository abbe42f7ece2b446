"""Outcome regime descriptors.

Exactly one regime governs an analysis run and every predictor shares it.
The set of regimes is closed: binary cohort, time-to-event (optionally with
competing risks) and case-control sampling.
"""

from dataclasses import dataclass
from typing import Optional, Union

from .errors import InvalidPrevalence, InvalidTimeHorizon, MissingPrevalence


@dataclass(frozen=True)
class BinaryRegime:
    """Cohort data with a 0/1 outcome."""

    name = "binary"


@dataclass(frozen=True)
class SurvivalRegime:
    """Time-to-event outcome evaluated at a fixed horizon.

    Parameters
    ----------
    time_horizon : float
        Time at which the probability of the event is evaluated.
    competing : bool
        Whether event codes other than the event of interest are competing
        events rather than the same event.
    event_of_interest : int, optional
        Event code of interest under competing risks. Defaults to the smallest
        non-censoring code present in the data.
    censor_code : int
        Event code meaning "censored".
    incidence : str, optional
        Column with a per-subject cumulative incidence estimate at the horizon.
        When set, subgroup event probabilities are the mean of this column
        instead of a nonparametric fit.
    """

    time_horizon: float
    competing: bool = False
    event_of_interest: Optional[int] = None
    censor_code: int = 0
    incidence: Optional[str] = None

    name = "survival"

    def __post_init__(self):
        if self.time_horizon is None or not float(self.time_horizon) > 0:
            raise InvalidTimeHorizon(f"time_horizon must be positive, got {self.time_horizon}")


@dataclass(frozen=True)
class CaseControlRegime:
    """Case-control sample reweighted to an externally supplied prevalence."""

    prevalence: Optional[float] = None

    name = "case-control"

    def __post_init__(self):
        if self.prevalence is None:
            raise MissingPrevalence(
                "Case-control analysis requires an external prevalence; "
                "it cannot be estimated from a case-control sample"
            )
        if not 0.0 < float(self.prevalence) < 1.0:
            raise InvalidPrevalence(f"Prevalence must lie in (0, 1), got {self.prevalence}")


OutcomeRegime = Union[BinaryRegime, SurvivalRegime, CaseControlRegime]


def make_regime(
    time_horizon: Optional[float] = None,
    prevalence: Optional[float] = None,
    competing: bool = False,
    event_of_interest: Optional[int] = None,
    case_control: bool = False,
) -> OutcomeRegime:
    """Pick the regime implied by flat options, as used by the CLI."""
    if case_control or prevalence is not None:
        if time_horizon is not None:
            raise ValueError("time_horizon and prevalence cannot be combined in one analysis")
        return CaseControlRegime(prevalence=prevalence)
    if time_horizon is not None:
        return SurvivalRegime(
            time_horizon=time_horizon,
            competing=competing,
            event_of_interest=event_of_interest,
        )
    return BinaryRegime()
