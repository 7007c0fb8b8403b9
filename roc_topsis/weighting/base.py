# -*- coding: utf-8 -*-
"""Base classes and utilities for weight calculation."""

import math
import numpy as np
import pandas as pd
from typing import Dict, Sequence
from dataclasses import dataclass, field

from ..exceptions import WeightError


@dataclass
class WeightResult:
    """Result container for weight calculations."""
    weights: Dict[str, float]
    method: str
    details: Dict = field(default_factory=dict)

    @property
    def as_series(self) -> pd.Series:
        return pd.Series(self.weights, dtype=float, name='Weight')

    @property
    def total(self) -> float:
        return float(sum(self.weights.values()))

    def resolve(self, criteria: Sequence[str]) -> np.ndarray:
        """
        Build a dense weight vector aligned with ``criteria``.

        Raises
        ------
        WeightError
            If a criterion has no weight or its weight is NaN.
        """
        return resolve_weights(self.weights, criteria)


def resolve_weights(weights: Dict[str, float], criteria: Sequence[str]) -> np.ndarray:
    """Map name-keyed weights onto the criteria order, failing on any gap."""
    if not weights:
        raise WeightError("Weights are missing or empty.")

    ordered = []
    for crit in criteria:
        weight = weights.get(crit)
        if weight is None or _is_nan(weight):
            raise WeightError(
                f"Weight for criterion '{crit}' is missing or invalid. "
                f"Check the priority order."
            )
        ordered.append(float(weight))
    return np.array(ordered, dtype=float)


def normalize_weights(weights: Dict[str, float]) -> Dict[str, float]:
    """
    Divide every weight by the total.

    A zero total returns the weights unchanged; callers decide what an
    all-zero weighting means.
    """
    total = sum(weights.values())
    if total == 0:
        return dict(weights)
    return {k: w / total for k, w in weights.items()}


def _is_nan(value) -> bool:
    try:
        return math.isnan(value)
    except TypeError:
        return True
