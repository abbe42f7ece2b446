"""
Event probabilities at a fixed horizon for time-to-event subgroups.

Single-event data uses the Kaplan-Meier complement ``1 - S(t)``. Competing
risks use the Aalen-Johansen cumulative incidence of the event of interest,
so competing events reduce the incidence instead of being treated as
censoring.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from lifelines import KaplanMeierFitter
from lifelines.utils import survival_table_from_events

# Internal event labels
CENSORED = 0
EVENT_OF_INTEREST = 1
COMPETING_EVENT = 2


@dataclass(frozen=True)
class HorizonRisk:
    """Probability of the event by the horizon for one subgroup.

    ``low_confidence`` is set when follow-up in the subgroup ends before the
    horizon and the last available estimate was carried forward.
    """

    risk: float
    low_confidence: bool = False


def _value_at(curve: pd.Series, horizon: float, default: float) -> float:
    """Read a right-continuous step function at ``horizon``."""
    observed = curve[curve.index <= horizon]
    if observed.empty:
        return default
    return float(observed.iloc[-1])


def kaplan_meier_risk(durations: np.ndarray, events: np.ndarray, horizon: float) -> HorizonRisk:
    """``1 - S(horizon)`` from a Kaplan-Meier fit; ``events`` is boolean."""
    durations = np.asarray(durations, dtype=float)
    if durations.size == 0:
        return HorizonRisk(0.0)
    events = np.asarray(events, dtype=bool)
    if not events.any():
        return HorizonRisk(0.0, low_confidence=bool(durations.max() < horizon))

    kmf = KaplanMeierFitter()
    kmf.fit(durations, event_observed=events)
    survival = _value_at(kmf.survival_function_.iloc[:, 0], horizon, default=1.0)
    return HorizonRisk(1.0 - survival, low_confidence=bool(durations.max() < horizon))


def cumulative_incidence_risk(durations: np.ndarray, labels: np.ndarray, horizon: float) -> HorizonRisk:
    """Aalen-Johansen cumulative incidence of ``EVENT_OF_INTEREST`` at ``horizon``.

    ``labels`` uses the module constants: censored, event of interest,
    competing event. The estimate is accumulated on the exact event table,
    ``CIF(t) = sum S(u-) * d_interest(u) / n_at_risk(u)`` over ``u <= t``
    with ``S`` the all-cause Kaplan-Meier survival, so tied times are kept
    at their observed values.
    """
    durations = np.asarray(durations, dtype=float)
    if durations.size == 0:
        return HorizonRisk(0.0)
    labels = np.asarray(labels, dtype=int)
    low_confidence = bool(durations.max() < horizon)
    if not np.any(labels == EVENT_OF_INTEREST):
        return HorizonRisk(0.0, low_confidence=low_confidence)
    if not np.any(labels == COMPETING_EVENT):
        # Without competing events the cumulative incidence is the KM complement
        return kaplan_meier_risk(durations, labels == EVENT_OF_INTEREST, horizon)

    table = survival_table_from_events(durations, labels != CENSORED)
    at_risk = table["at_risk"].to_numpy(dtype=float)
    observed = table["observed"].to_numpy(dtype=float)
    of_interest = (
        pd.Series(labels == EVENT_OF_INTEREST, dtype=float)
        .groupby(durations)
        .sum()
        .reindex(table.index, fill_value=0.0)
        .to_numpy()
    )

    with np.errstate(divide="ignore", invalid="ignore"):
        hazard_all = np.where(at_risk > 0, observed / at_risk, 0.0)
        hazard_interest = np.where(at_risk > 0, of_interest / at_risk, 0.0)
    survival_before = np.concatenate([[1.0], np.cumprod(1.0 - hazard_all)[:-1]])
    incidence = pd.Series(np.cumsum(survival_before * hazard_interest), index=table.index)
    return HorizonRisk(_value_at(incidence, horizon, default=0.0), low_confidence=low_confidence)


def encode_events(codes: np.ndarray, censor_code: int, event_of_interest=None) -> np.ndarray:
    """Map raw event codes to censored / event of interest / competing labels.

    With ``event_of_interest`` of ``None`` every non-censoring code counts as
    the event of interest (single-event analysis).
    """
    codes = np.asarray(codes)
    labels = np.full(codes.shape, CENSORED, dtype=int)
    observed = codes != censor_code
    if event_of_interest is None:
        labels[observed] = EVENT_OF_INTEREST
    else:
        labels[observed & (codes == event_of_interest)] = EVENT_OF_INTEREST
        labels[observed & (codes != event_of_interest)] = COMPETING_EVENT
    return labels
