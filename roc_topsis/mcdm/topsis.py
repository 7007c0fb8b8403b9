# -*- coding: utf-8 -*-
"""
TOPSIS Implementation
=====================

Technique for Order Preference by Similarity to Ideal Solution
(Hwang & Yoon, 1981), as a five-stage pipeline over numpy arrays:

1. Vector normalization of each criterion column
2. Weighting by criterion weight
3. Positive (A+) and negative (A-) ideal solutions per polarity
4. Euclidean distances D+ and D- of every alternative
5. Closeness coefficient C* = D- / (D+ + D-) and ranking

Every stage is a pure module-level function so it can be used and tested on
its own. Degenerate data never produces NaN: a zero-norm column normalizes to
0 and a zero distance sum scores 0.
"""

import numbers
import numpy as np
import pandas as pd
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from dataclasses import dataclass

from .base import CriterionPolarity, RankingResult
from ..config import NormalizationType, TOPSISConfig
from ..exceptions import (
    NumericIntegrityError, PolarityError, ShapeError, WeightError
)
from ..logger import get_module_logger
from ..weighting.base import WeightResult, resolve_weights

logger = get_module_logger(__name__)

WeightsLike = Union[Mapping[str, float], WeightResult]


# =============================================================================
# Stage functions
# =============================================================================

def as_decision_matrix(values: Any) -> np.ndarray:
    """
    Convert ``values`` to a 2-D float array, rejecting anything non-numeric.

    Strings are rejected even when they look like numbers; converting
    text is the data loader's job.
    """
    if hasattr(values, 'to_numpy'):
        values = values.to_numpy()

    if isinstance(values, np.ndarray) and values.dtype.kind in 'iuf':
        if values.ndim != 2:
            raise ShapeError("Input decision matrix must be two-dimensional.")
        matrix = values.astype(float)
    else:
        rows = [list(row) for row in values]
        if rows and any(len(row) != len(rows[0]) for row in rows):
            raise ShapeError("Input decision matrix is jagged: rows differ in length.")
        for i, row in enumerate(rows):
            for j, cell in enumerate(row):
                if not _is_number(cell):
                    raise NumericIntegrityError(
                        f"Data contains non-numeric values at row {i + 1}, "
                        f"column {j + 1}: {cell!r}."
                    )
        matrix = np.array(rows, dtype=float).reshape(len(rows), -1 if rows else 0)

    if matrix.size == 0:
        raise ShapeError("Input decision matrix is empty or invalid.")

    bad = ~np.isfinite(matrix)
    if bad.any():
        i, j = np.argwhere(bad)[0]
        raise NumericIntegrityError(
            f"Data contains non-finite values at row {i + 1}, column {j + 1}."
        )
    return matrix


def normalize_matrix(matrix: Any) -> np.ndarray:
    """
    Stage 1: vector normalization, r_ij = x_ij / sqrt(Σ_i x_ij²).

    A column whose norm is 0 (every value 0) normalizes to all zeros.
    """
    X = as_decision_matrix(matrix)
    norms = np.sqrt((X ** 2).sum(axis=0))
    zero_norm = norms == 0

    for j in np.flatnonzero(zero_norm):
        logger.warning(
            f"Column {j + 1} has a sum of squares of 0. Normalized values will be 0."
        )

    normalized = np.zeros_like(X)
    np.divide(X, norms, out=normalized, where=~zero_norm)
    return normalized


def apply_weights(normalized: np.ndarray, weights: Sequence[float]) -> np.ndarray:
    """Stage 2: v_ij = r_ij * w_j. Every criterion needs a defined, non-NaN weight."""
    n_criteria = normalized.shape[1]
    w = list(weights)

    for j in range(n_criteria):
        weight = w[j] if j < len(w) else None
        if not _is_number(weight) or np.isnan(weight):
            raise WeightError(
                f"Invalid weight for criterion {j + 1}. "
                f"Check ROC calculation or priority order."
            )
    if len(w) != n_criteria:
        raise WeightError(
            f"Got {len(w)} weights for {n_criteria} criteria."
        )

    return normalized * np.asarray(w, dtype=float)


def ideal_solutions(
    weighted: np.ndarray,
    polarities: Sequence[Union[CriterionPolarity, str]],
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Stage 3: positive and negative ideal solutions.

    benefit: A+ = column max, A- = column min
    cost:    A+ = column min, A- = column max
    """
    n_criteria = weighted.shape[1]
    if len(polarities) != n_criteria:
        raise ShapeError(
            f"Mismatch between number of criteria ({n_criteria}) and criteria "
            f"types ({len(polarities)}). Ensure all criteria have a type "
            f"(benefit/cost)."
        )

    is_benefit = np.empty(n_criteria, dtype=bool)
    for j, polarity in enumerate(polarities):
        try:
            is_benefit[j] = CriterionPolarity.parse(polarity) is CriterionPolarity.BENEFIT
        except PolarityError:
            raise PolarityError(
                f"Invalid criteria type {polarity!r} found for criterion {j + 1}."
            ) from None

    col_max = weighted.max(axis=0)
    col_min = weighted.min(axis=0)
    ideal = np.where(is_benefit, col_max, col_min)
    anti_ideal = np.where(is_benefit, col_min, col_max)
    return ideal, anti_ideal


def separation_distances(
    weighted: np.ndarray,
    ideal: np.ndarray,
    anti_ideal: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Stage 4: Euclidean distances D+ (to A+) and D- (to A-) per alternative."""
    if np.isnan(ideal).any() or np.isnan(anti_ideal).any():
        raise NumericIntegrityError(
            "Invalid ideal solution values. Check previous calculation steps."
        )
    d_pos = np.sqrt(((weighted - ideal) ** 2).sum(axis=1))
    d_neg = np.sqrt(((weighted - anti_ideal) ** 2).sum(axis=1))
    return d_pos, d_neg


def closeness_coefficients(d_pos: np.ndarray, d_neg: np.ndarray) -> np.ndarray:
    """
    Stage 5a: C*_i = D-_i / (D+_i + D-_i).

    An alternative with D+ + D- == 0 scores 0.
    """
    total = d_pos + d_neg
    zero_total = total == 0

    for i in np.flatnonzero(zero_total):
        logger.warning(
            f"Sum of distances for alternative {i + 1} is 0. Preference set to 0."
        )

    scores = np.zeros_like(total, dtype=float)
    np.divide(d_neg, total, out=scores, where=~zero_total)
    return scores


def rank_alternatives(alternatives: Sequence[str],
                      scores: Sequence[float]) -> List[RankingResult]:
    """
    Stage 5b: sort by score descending and assign ranks 1..m.

    The sort is stable, so equal scores keep their input order and every
    alternative gets its own rank.
    """
    scores = np.asarray(scores, dtype=float)
    order = np.argsort(-scores, kind='stable')
    return [
        RankingResult(alternative=str(alternatives[i]),
                      preference=float(scores[i]),
                      rank=position)
        for position, i in enumerate(order, start=1)
    ]


# =============================================================================
# Calculator
# =============================================================================

@dataclass
class TOPSISResult:
    """Result container for TOPSIS calculation."""
    ranking: List[RankingResult]             # Sorted by rank
    scores: pd.Series                        # Closeness coefficients (input order)
    ranks: pd.Series                         # Rank per alternative (input order)
    d_positive: pd.Series                    # Distance to ideal
    d_negative: pd.Series                    # Distance to anti-ideal
    normalized_matrix: pd.DataFrame          # Vector-normalized matrix
    weighted_matrix: pd.DataFrame            # Weighted normalized matrix
    ideal_solution: pd.Series                # A+
    anti_ideal_solution: pd.Series           # A-
    weights: Dict[str, float]                # Weights used

    @property
    def winner(self) -> RankingResult:
        return self.ranking[0]

    def to_frame(self) -> pd.DataFrame:
        """Ranking table sorted by rank."""
        return pd.DataFrame({
            'Rank': [r.rank for r in self.ranking],
            'Alternative': [r.alternative for r in self.ranking],
            'Preference': [r.preference for r in self.ranking],
            'D+': [self.d_positive[r.alternative] for r in self.ranking],
            'D-': [self.d_negative[r.alternative] for r in self.ranking],
        })

    def top_n(self, n: int = 10) -> List[RankingResult]:
        """Get top n alternatives."""
        return self.ranking[:n]


class TOPSISCalculator:
    """
    Standard TOPSIS calculator.

    Parameters
    ----------
    config : TOPSISConfig, optional
        Normalization method and intermediate-stage logging.
    """

    def __init__(self, config: Optional[TOPSISConfig] = None):
        self.config = config or TOPSISConfig()
        if self.config.normalization is not NormalizationType.VECTOR:
            raise ValueError(f"Unknown normalization: {self.config.normalization}")

    def calculate(self,
                  alternatives: Sequence[str],
                  criteria: Sequence[str],
                  values: Any,
                  criteria_types: Sequence[Union[CriterionPolarity, str]],
                  weights: WeightsLike) -> TOPSISResult:
        """
        Calculate TOPSIS scores and rankings.

        Parameters
        ----------
        alternatives : sequence of str
            Alternative names, one per row of ``values``.
        criteria : sequence of str
            Criterion names, one per column of ``values``.
        values : array-like
            Decision matrix (alternatives × criteria).
        criteria_types : sequence of str or CriterionPolarity
            'benefit' or 'cost' per criterion.
        weights : mapping or WeightResult
            Weight per criterion name.

        Returns
        -------
        TOPSISResult
            Complete TOPSIS results.
        """
        alternatives = list(alternatives or [])
        criteria = list(criteria or [])
        criteria_types = list(criteria_types or [])

        if not alternatives:
            raise ShapeError("No alternatives provided.")
        if not criteria:
            raise ShapeError("No criteria provided.")
        if values is None or len(values) == 0:
            raise ShapeError("Input decision matrix is empty or invalid.")
        if len(criteria_types) != len(criteria):
            raise ShapeError("Criteria types are missing or do not match criteria count.")

        if isinstance(weights, WeightResult):
            weights = weights.weights
        weight_vector = resolve_weights(dict(weights or {}), criteria)

        matrix = as_decision_matrix(values)
        if matrix.shape != (len(alternatives), len(criteria)):
            raise ShapeError(
                f"Decision matrix is {matrix.shape[0]}×{matrix.shape[1]}, expected "
                f"{len(alternatives)}×{len(criteria)} (alternatives × criteria)."
            )

        # Step 1: Normalize
        normalized = normalize_matrix(matrix)
        self._check_stage("Normalization", normalized)

        # Step 2: Apply weights
        weighted = apply_weights(normalized, weight_vector)
        self._check_stage("Weighting", weighted)

        # Step 3: Ideal solutions
        ideal, anti_ideal = ideal_solutions(weighted, criteria_types)
        self._check_stage("Ideal solution", ideal)
        self._check_stage("Anti-ideal solution", anti_ideal)

        # Step 4: Distances
        d_pos, d_neg = separation_distances(weighted, ideal, anti_ideal)
        self._check_stage("Distance calculation", d_pos)
        self._check_stage("Distance calculation", d_neg)

        # Step 5: Preference and ranking
        scores = closeness_coefficients(d_pos, d_neg)
        self._check_stage("Preference calculation", scores)
        ranking = rank_alternatives(alternatives, scores)

        if self.config.log_intermediate:
            self._log_intermediate(normalized, weighted, ideal, anti_ideal,
                                   d_pos, d_neg, scores)

        index = pd.Index(alternatives, name='Alternative')
        columns = pd.Index(criteria, name='Criterion')
        rank_by_name = {r.alternative: r.rank for r in ranking}

        return TOPSISResult(
            ranking=ranking,
            scores=pd.Series(scores, index=index, name='Preference'),
            ranks=pd.Series([rank_by_name[a] for a in alternatives],
                            index=index, name='Rank'),
            d_positive=pd.Series(d_pos, index=index, name='D+'),
            d_negative=pd.Series(d_neg, index=index, name='D-'),
            normalized_matrix=pd.DataFrame(normalized, index=index, columns=columns),
            weighted_matrix=pd.DataFrame(weighted, index=index, columns=columns),
            ideal_solution=pd.Series(ideal, index=columns, name='A+'),
            anti_ideal_solution=pd.Series(anti_ideal, index=columns, name='A-'),
            weights=dict(zip(criteria, weight_vector.tolist())),
        )

    @staticmethod
    def _check_stage(stage: str, output: np.ndarray) -> None:
        if output.size == 0 or not np.isfinite(output).all():
            raise NumericIntegrityError(
                f"{stage} failed: resulting values are empty or invalid."
            )

    @staticmethod
    def _log_intermediate(normalized, weighted, ideal, anti_ideal,
                          d_pos, d_neg, scores) -> None:
        logger.debug(f"Normalized matrix:\n{normalized}")
        logger.debug(f"Weighted matrix:\n{weighted}")
        logger.debug(f"Ideal solution A+: {ideal}")
        logger.debug(f"Anti-ideal solution A-: {anti_ideal}")
        logger.debug(f"Distances D+: {d_pos}")
        logger.debug(f"Distances D-: {d_neg}")
        logger.debug(f"Preferences: {scores}")


def run_topsis(alternatives: Sequence[str],
               criteria: Sequence[str],
               values: Any,
               criteria_types: Sequence[Union[CriterionPolarity, str]],
               weights: WeightsLike) -> List[RankingResult]:
    """Convenience function returning only the ranking."""
    calc = TOPSISCalculator()
    return calc.calculate(alternatives, criteria, values, criteria_types, weights).ranking


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)
