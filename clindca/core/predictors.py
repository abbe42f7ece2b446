"""
Predictor descriptors and the classification engine.

A predictor is prepared once per run: its scores are checked against the
declared score kind, rows with missing scores are dropped, and raw scores are
min-max rescaled into [0, 1]. The prepared array is then reused unchanged for
every threshold.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler

from .errors import DegenerateScore, InvalidHarm, InvalidPredictorKind, MismatchedLength

logger = logging.getLogger(__name__)


class ScoreKind(str, Enum):
    PROBABILITY = "probability"
    BINARY_INDICATOR = "binary-indicator"
    RAW_SCORE = "raw-score-to-rescale"

    @classmethod
    def parse(cls, value: Union[str, "ScoreKind"]) -> "ScoreKind":
        if isinstance(value, ScoreKind):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        aliases = {
            "prob": cls.PROBABILITY,
            "binary": cls.BINARY_INDICATOR,
            "indicator": cls.BINARY_INDICATOR,
            "raw": cls.RAW_SCORE,
            "raw-score": cls.RAW_SCORE,
            "rescale": cls.RAW_SCORE,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            choices = [kind.value for kind in cls]
            raise InvalidPredictorKind(
                f"Unknown score kind '{value}'. Choose one of {choices}"
            ) from None


@dataclass(frozen=True)
class PredictorSpec:
    """Caller-supplied description of one predictor.

    Parameters
    ----------
    name : str
        Label used in the result table.
    kind : ScoreKind or str
        How the scores are interpreted.
    column : str, optional
        Data column holding the scores. Defaults to ``name``.
    """

    name: str
    kind: ScoreKind = ScoreKind.PROBABILITY
    column: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "kind", ScoreKind.parse(self.kind))

    @property
    def source_column(self) -> str:
        return self.column if self.column is not None else self.name


@dataclass(frozen=True)
class PreparedPredictor:
    """A predictor whose scores are validated and normalized to [0, 1].

    ``mask`` selects the subject rows kept for this predictor (rows with a
    missing score are dropped); ``scores`` is aligned with those rows.
    """

    name: str
    kind: ScoreKind
    scores: np.ndarray
    mask: np.ndarray
    harm: float = 0.0

    @property
    def n(self) -> int:
        return int(self.scores.shape[0])


def _as_float_array(name: str, values) -> np.ndarray:
    try:
        return pd.to_numeric(pd.Series(np.asarray(values).ravel()), errors="raise").to_numpy(dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidPredictorKind(f"Predictor '{name}' contains non-numeric scores: {e}") from e


def rescale_scores(name: str, scores: np.ndarray) -> np.ndarray:
    """Map raw scores monotonically onto [0, 1] by min-max normalization."""
    if scores.size == 0 or np.nanmax(scores) == np.nanmin(scores):
        raise DegenerateScore(f"Predictor '{name}' is constant and cannot be rescaled")
    scaler = MinMaxScaler(feature_range=(0.0, 1.0))
    return scaler.fit_transform(scores.reshape(-1, 1)).ravel()


def prepare_predictor(
    spec: PredictorSpec,
    values,
    n_subjects: int,
    harm: float = 0.0,
) -> PreparedPredictor:
    """Validate and normalize one predictor's scores."""
    scores = _as_float_array(spec.name, values)
    if scores.shape[0] != n_subjects:
        raise MismatchedLength(
            f"Predictor '{spec.name}' has {scores.shape[0]} values but the outcome has {n_subjects}"
        )
    harm = float(harm)
    if not np.isfinite(harm) or harm < 0:
        raise InvalidHarm(f"Harm for predictor '{spec.name}' must be a non-negative number, got {harm}")

    mask = ~np.isnan(scores)
    kept = scores[mask]
    n_dropped = int((~mask).sum())
    if n_dropped:
        logger.info(f"Predictor '{spec.name}': dropped {n_dropped} rows with missing scores")
    if kept.size == 0:
        raise DegenerateScore(f"Predictor '{spec.name}' has no non-missing scores")

    if spec.kind is ScoreKind.BINARY_INDICATOR:
        invalid = np.setdiff1d(np.unique(kept), [0.0, 1.0])
        if invalid.size:
            raise InvalidPredictorKind(
                f"Binary indicator '{spec.name}' must contain only 0 and 1, found {invalid[:5].tolist()}"
            )
    elif spec.kind is ScoreKind.PROBABILITY:
        if np.any(np.isinf(kept)) or kept.min() < 0.0 or kept.max() > 1.0:
            raise InvalidPredictorKind(
                f"Probability predictor '{spec.name}' has scores outside [0, 1]; "
                f"declare it as '{ScoreKind.RAW_SCORE.value}' to rescale"
            )
    else:
        if np.any(np.isinf(kept)):
            raise InvalidPredictorKind(f"Raw score '{spec.name}' contains infinite values")
        kept = rescale_scores(spec.name, kept)

    return PreparedPredictor(name=spec.name, kind=spec.kind, scores=kept, mask=mask, harm=harm)


def classify(predictor: PreparedPredictor, threshold: float) -> np.ndarray:
    """Label each kept subject as would-act (True) at ``threshold``.

    Binary indicators ignore the threshold: the indicator itself is the label.
    """
    if predictor.kind is ScoreKind.BINARY_INDICATOR:
        return predictor.scores == 1.0
    return predictor.scores >= threshold
