"""
Result aggregation.

The aggregator collects one ``NetBenefitPoint`` per (strategy, threshold)
into a pre-sized slot list and freezes it into a long-format table. The
frozen ``DCAResult`` exposes read-only projections of that table.
"""

import logging
from dataclasses import asdict
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .errors import DCAError
from .net_benefit import NetBenefitPoint
from .smoothing import smooth_curve
from .thresholds import ThresholdGrid

logger = logging.getLogger(__name__)

TREAT_ALL = "treat_all"
TREAT_NONE = "treat_none"
REFERENCE_STRATEGIES = (TREAT_ALL, TREAT_NONE)

COLUMNS = [
    "predictor",
    "threshold",
    "n",
    "pos_rate",
    "tp_rate",
    "fp_rate",
    "n_true_positive",
    "n_false_positive",
    "harm",
    "net_benefit",
    "net_intervention_avoided",
    "low_confidence",
    "smoothed",
    "net_benefit_smoothed",
]


class ResultAggregator:
    """Index-addressed collector for strategy x threshold results.

    Each (strategy, threshold) pair owns exactly one slot, so results can be
    written in any order.
    """

    def __init__(self, strategies: Sequence[str], grid: ThresholdGrid):
        self.strategies = list(strategies)
        if len(set(self.strategies)) != len(self.strategies):
            raise ValueError(f"Strategy names must be unique, got {self.strategies}")
        self.grid = grid
        self._slots: List[Optional[NetBenefitPoint]] = [None] * (len(self.strategies) * len(grid))

    def slot(self, strategy_index: int, threshold_index: int) -> int:
        return strategy_index * len(self.grid) + threshold_index

    def put(self, slot: int, point: NetBenefitPoint):
        if self._slots[slot] is not None:
            raise RuntimeError(f"Result slot {slot} was already written")
        self._slots[slot] = point

    def freeze(
        self,
        failures: Optional[Dict[str, DCAError]] = None,
        regime=None,
    ) -> "DCAResult":
        missing = [i for i, point in enumerate(self._slots) if point is None]
        if missing:
            raise RuntimeError(f"{len(missing)} result slots were never written")

        n_thresholds = len(self.grid)
        names = np.repeat(self.strategies, n_thresholds)
        table = pd.DataFrame([asdict(point) for point in self._slots])
        table.insert(0, "predictor", names)
        table["n_true_positive"] = table["tp_rate"] * table["n"]
        table["n_false_positive"] = table["fp_rate"] * table["n"]

        treat_all = table.loc[table["predictor"] == TREAT_ALL].set_index("threshold")["net_benefit"]
        odds = table["threshold"] / (1.0 - table["threshold"])
        table["net_intervention_avoided"] = (
            table["net_benefit"] - table["threshold"].map(treat_all)
        ) / odds
        table["smoothed"] = False
        table["net_benefit_smoothed"] = np.nan

        predictors = [s for s in self.strategies if s not in REFERENCE_STRATEGIES]
        return DCAResult(table[COLUMNS], predictors, failures or {}, self.grid, regime)


class DCAResult:
    """Frozen long-format decision curve results.

    Attributes
    ----------
    predictors : list of str
        Predictors that were evaluated, in the order supplied.
    failures : dict
        Predictor name -> error for predictors excluded from the run.
    grid : ThresholdGrid
        Thresholds evaluated.
    regime : object
        Outcome regime the run used.
    """

    def __init__(
        self,
        table: pd.DataFrame,
        predictors: Sequence[str],
        failures: Dict[str, DCAError],
        grid: ThresholdGrid,
        regime=None,
    ):
        self._table = table.reset_index(drop=True).copy()
        self.predictors = list(predictors)
        self.failures = dict(failures)
        self.grid = grid
        self.regime = regime

    @property
    def table(self) -> pd.DataFrame:
        """Copy of the full result table."""
        return self._table.copy()

    @property
    def strategies(self) -> List[str]:
        return list(pd.unique(self._table["predictor"]))

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return (
            f"DCAResult(predictors={self.predictors}, thresholds={len(self.grid)}, "
            f"failures={list(self.failures)})"
        )

    def _view(self, mask) -> pd.DataFrame:
        return self._table.loc[mask].reset_index(drop=True).copy()

    def for_predictors(self, names: Iterable[str], include_reference: bool = True) -> pd.DataFrame:
        """Rows for the named strategies, optionally with treat-all/treat-none."""
        names = list(names)
        if include_reference:
            names += [s for s in REFERENCE_STRATEGIES if s not in names]
        return self._view(self._table["predictor"].isin(names))

    def at_thresholds(self, thresholds: Iterable[float], atol: float = 1e-9) -> pd.DataFrame:
        """Rows whose threshold matches one of ``thresholds``."""
        wanted = np.asarray(list(thresholds), dtype=float)
        values = self._table["threshold"].to_numpy()
        mask = np.any(np.abs(values[:, None] - wanted[None, :]) <= atol, axis=1)
        return self._view(mask)

    def between(self, low: float, high: float) -> pd.DataFrame:
        """Rows with ``low <= threshold <= high``."""
        return self._view(self._table["threshold"].between(low, high))

    def net_interventions_avoided(self, nper: int = 100) -> pd.DataFrame:
        """Net interventions avoided per ``nper`` subjects, for every strategy."""
        view = self._table[["predictor", "threshold", "net_intervention_avoided"]].copy()
        view["net_intervention_avoided"] = view["net_intervention_avoided"] * nper
        view["nper"] = nper
        return view.reset_index(drop=True)

    def wide(self, value: str = "net_benefit") -> pd.DataFrame:
        """Threshold x strategy table of ``value``, strategies in result order."""
        if value not in self._table.columns:
            raise KeyError(f"Unknown result column '{value}'")
        pivot = self._table.pivot(index="threshold", columns="predictor", values=value)
        return pivot[self.strategies]

    def best_strategy(self) -> pd.DataFrame:
        """Strategy with the highest raw net benefit at each threshold.

        Ties resolve to the earliest strategy in result order, so the reference
        strategies win ties against predictors.
        """
        nb = self.wide("net_benefit")
        best = nb.idxmax(axis=1)
        return pd.DataFrame(
            {
                "threshold": nb.index.to_numpy(),
                "strategy": best.to_numpy(),
                "net_benefit": nb.max(axis=1).to_numpy(),
            }
        )

    def with_smoothing(self, span: float = 0.25, min_points: int = 3) -> "DCAResult":
        """New result with ``net_benefit_smoothed`` filled for every predictor.

        Predictors with fewer than ``min_points`` thresholds get their raw
        series copied and ``smoothed`` left False. Reference strategies are
        never smoothed and raw net benefit is kept.
        """
        table = self.table
        for name in self.predictors:
            rows = table.index[table["predictor"] == name]
            block = table.loc[rows].sort_values("threshold")
            smoothed, applied = smooth_curve(
                block["threshold"].to_numpy(),
                block["net_benefit"].to_numpy(),
                span=span,
                min_points=min_points,
            )
            table.loc[block.index, "net_benefit_smoothed"] = smoothed
            table.loc[block.index, "smoothed"] = applied
            logger.debug(f"Smoothing {name}: applied={applied}")
        return DCAResult(table, self.predictors, self.failures, self.grid, self.regime)
