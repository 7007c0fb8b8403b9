# -*- coding: utf-8 -*-
"""
Rank Order Centroid (ROC) weight calculator.

Turns an ordinal importance ranking of n criteria into cardinal weights:
w_j = (1/n) * Σ_{i=j}^{n} 1/i, for the criterion at 1-based rank j.
Reference: Barron & Barrett (1996), Management Science, 42(11), 1515-1523.
"""

from typing import Dict, List, Sequence

from .base import WeightResult, normalize_weights
from ..exceptions import WeightError
from ..logger import get_module_logger

logger = get_module_logger(__name__)


class ROCWeightCalculator:
    """
    Rank Order Centroid weight calculator.

    The centroid weights already sum to one in exact arithmetic; they are
    re-normalized anyway to absorb floating-point drift.
    """

    def calculate(self, priority_order: Sequence[str]) -> WeightResult:
        """
        Calculate ROC weights.

        Parameters
        ----------
        priority_order : sequence of str
            Criterion names from most to least important.

        Returns
        -------
        WeightResult
            Normalized weights keyed by criterion name. Empty when
            ``priority_order`` is empty.
        """
        criteria = list(priority_order)
        n = len(criteria)

        if n == 0:
            logger.warning("No prioritized criteria provided for ROC calculation.")
            return WeightResult(weights={}, method="roc",
                                details={"raw_weights": {}, "ranks": {}, "n_criteria": 0})

        seen = set()
        for crit in criteria:
            if crit in seen:
                raise WeightError(
                    f"Criterion '{crit}' appears more than once in the priority order."
                )
            seen.add(crit)

        raw = {crit: self.centroid(j, n) for j, crit in enumerate(criteria, start=1)}

        if sum(raw.values()) == 0:
            logger.warning("Total ROC weights sum to 0. Returning unnormalized weights.")
        weights = normalize_weights(raw)

        logger.debug(f"ROC weights for {n} criteria: {weights}")

        return WeightResult(
            weights=weights,
            method="roc",
            details={
                "raw_weights": raw,
                "ranks": {crit: j for j, crit in enumerate(criteria, start=1)},
                "n_criteria": n,
            }
        )

    @staticmethod
    def centroid(rank: int, n: int) -> float:
        """Raw centroid weight of the criterion at 1-based ``rank`` out of ``n``."""
        return sum(1.0 / i for i in range(rank, n + 1)) / n


def calculate_roc_weights(priority_order: Sequence[str]) -> Dict[str, float]:
    """Convenience function returning only the weight mapping."""
    return ROCWeightCalculator().calculate(priority_order).weights


def roc_weight_table(n: int) -> List[float]:
    """Normalized ROC weights for ranks 1..n, independent of criterion names."""
    calc = ROCWeightCalculator()
    return list(calc.calculate([str(i) for i in range(n)]).weights.values())
