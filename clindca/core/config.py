"""Configuration for decision curve analysis runs."""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Sequence

from .regimes import OutcomeRegime, make_regime
from .thresholds import ThresholdGrid


@dataclass
class DCAConfig:
    """Configuration class for decision curve analysis parameters."""

    # Threshold grid: explicit probabilities, or None for 0.01..0.99 by 0.01
    thresholds: Optional[Sequence[float]] = None

    # Per-predictor acting cost, in net true positives per subject
    harm: Dict[str, float] = field(default_factory=dict)

    # Per-predictor score kind: probability, binary-indicator, raw-score-to-rescale
    score_kinds: Dict[str, str] = field(default_factory=dict)

    # Smoothing configuration
    smoothing: bool = False
    smoothing_span: float = 0.25
    smoothing_min_points: int = 3

    # Outcome regime: binary unless time_horizon, prevalence or case_control is set
    time_horizon: Optional[float] = None
    competing: bool = False
    event_of_interest: Optional[int] = None
    prevalence: Optional[float] = None
    case_control: bool = False
    min_at_risk: int = 1

    # Execution configuration
    n_jobs: int = 1
    strict: bool = False

    # Logging configuration
    verbose: bool = False
    log_file: Optional[str] = None

    def __post_init__(self):
        if not 0.0 < self.smoothing_span <= 1.0:
            raise ValueError(f"smoothing_span must be in (0, 1], got {self.smoothing_span}")
        if self.smoothing_min_points < 1:
            raise ValueError("smoothing_min_points must be at least 1")
        if self.min_at_risk < 1:
            raise ValueError("min_at_risk must be at least 1")

    def threshold_grid(self) -> ThresholdGrid:
        return ThresholdGrid.coerce(self.thresholds)

    def regime(self) -> OutcomeRegime:
        return make_regime(
            time_horizon=self.time_horizon,
            prevalence=self.prevalence,
            competing=self.competing,
            event_of_interest=self.event_of_interest,
            case_control=self.case_control,
        )

    def harm_for(self, predictor: str) -> float:
        return float(self.harm.get(predictor, 0.0))

    def score_kind_for(self, predictor: str, default: str = "probability") -> str:
        return self.score_kinds.get(predictor, default)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "DCAConfig":
        """Build a config from a plain mapping, e.g. a parsed JSON file."""
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**dict(values))

    def updated(self, **overrides) -> "DCAConfig":
        """Return a copy with ``overrides`` applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(overrides)
        return DCAConfig.from_dict(values)
