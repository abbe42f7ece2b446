"""LOWESS smoothing of net benefit curves.

Smoothing is presentational only: it adds a smoothed series next to the raw
one and never replaces it.
"""

import logging

import numpy as np
import statsmodels.api as sm

logger = logging.getLogger(__name__)


def smooth_curve(
    thresholds: np.ndarray,
    net_benefit: np.ndarray,
    span: float = 0.25,
    min_points: int = 3,
):
    """Return ``(smoothed, applied)`` for one predictor's net benefit series.

    With fewer than ``min_points`` thresholds the raw series is returned
    unchanged and ``applied`` is False.
    """
    x = np.asarray(thresholds, dtype=float)
    y = np.asarray(net_benefit, dtype=float)
    if x.shape[0] < min_points:
        logger.info(f"Skipping smoothing: {x.shape[0]} thresholds, {min_points} required")
        return y.copy(), False
    smoothed = sm.nonparametric.lowess(y, x, frac=span, it=0, return_sorted=False)
    # lowess leaves NaN where a local window is too small to fit
    smoothed = np.where(np.isfinite(smoothed), smoothed, y)
    return smoothed, True
