"""Shared fixtures for ClinDCA tests."""

import numpy as np
import pandas as pd
import pytest


def make_synthetic_data(n: int = 1000, prevalence: float = 0.2, seed: int = 42):
    """Generate a simple synthetic y_true and predicted probabilities.

    Parameters
    ----------
    n : int
        Number of samples.
    prevalence : float
        Desired proportion of positive cases.
    seed : int
        Random seed for reproducibility.
    """
    rng = np.random.default_rng(seed)

    # Binary labels with given prevalence
    y_true = rng.binomial(1, prevalence, size=n)

    # Positives have probabilities centered higher, negatives lower
    pos_probs = rng.normal(loc=0.7, scale=0.15, size=n)
    neg_probs = rng.normal(loc=0.2, scale=0.15, size=n)

    y_pred_proba = np.where(y_true == 1, pos_probs, neg_probs)
    y_pred_proba = np.clip(y_pred_proba, 1e-6, 1 - 1e-6)

    return y_true, y_pred_proba


@pytest.fixture
def synthetic_cohort():
    """Binary cohort with a discriminating model, a marker and a family history flag."""
    y_true, y_proba = make_synthetic_data(n=500, prevalence=0.2, seed=123)
    rng = np.random.default_rng(7)
    marker = y_proba * 40 + rng.normal(0, 2, size=y_true.shape[0])
    famhistory = np.where(rng.random(y_true.shape[0]) < 0.6, y_true, 1 - y_true)
    return pd.DataFrame(
        {
            "cancer": y_true,
            "model": y_proba,
            "marker": marker,
            "famhistory": famhistory,
        }
    )


@pytest.fixture
def perfect_cohort():
    """100 subjects, 20 events, and a predictor equal to the outcome."""
    outcome = np.array([1] * 20 + [0] * 80)
    return pd.DataFrame({"outcome": outcome, "perfect": outcome.astype(float)})


@pytest.fixture
def competing_risks_data():
    """Ten subjects with distinct times: code 1 = event A, 2 = event B, 0 = censored."""
    return pd.DataFrame(
        {
            "time": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0],
            "event": [2, 1, 2, 1, 0, 1, 0, 0, 2, 0],
            "score": [0.9, 0.8, 0.7, 0.6, 0.5, 0.4, 0.3, 0.2, 0.1, 0.0],
        }
    )


@pytest.fixture
def tied_competing_risks_data():
    """Integer follow-up times with ties at 2 and 3: code 1 = event A, 2 = event B, 0 = censored."""
    return pd.DataFrame(
        {
            "time": [1, 2, 2, 3, 3, 3, 4, 5, 5, 6],
            "event": [2, 1, 1, 2, 1, 1, 0, 1, 0, 0],
            "score": [0.9, 0.8, 0.7, 0.6, 0.5, 0.4, 0.3, 0.2, 0.1, 0.0],
        }
    )
