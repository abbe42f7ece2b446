"""
Error taxonomy for decision curve analysis.

Every error derives from ``DCAError`` (itself a ``ValueError``) so callers can
catch the whole family at once. Errors are grouped by scope:

- predictor-level errors only exclude the offending predictor from a run
- regime-level and grid errors abort the whole run
"""


class DCAError(ValueError):
    """Base class for all decision curve analysis errors."""


class InvalidPredictorKind(DCAError):
    """Scores do not match the declared score kind."""


class DegenerateScore(DCAError):
    """A raw score is constant, so min-max rescaling is undefined."""


class MismatchedLength(DCAError):
    """A predictor array and the outcome array differ in length."""


class InvalidHarm(DCAError):
    """A harm value is negative or not finite."""


class InvalidTimeHorizon(DCAError):
    """Time horizon is not positive or lies beyond usable follow-up."""


class MissingPrevalence(DCAError):
    """Case-control analysis was requested without an external prevalence."""


class InvalidPrevalence(DCAError):
    """Prevalence lies outside the open interval (0, 1)."""


class InvalidOutcome(DCAError):
    """Outcome values are missing or not coded as the regime requires."""


class MissingPredictor(DCAError):
    """A predictor column is not present in the data."""


class EmptyThresholdGrid(DCAError):
    """The threshold grid has no points."""


class InvalidThresholdGrid(DCAError):
    """Thresholds are outside (0, 1), duplicated or not increasing."""

