# -*- coding: utf-8 -*-
"""
Multi-Criteria Decision Making Module
=====================================

TOPSIS ranking over a decision matrix with benefit/cost criteria.

Usage
-----
>>> from roc_topsis.mcdm import TOPSISCalculator
>>> result = TOPSISCalculator().calculate(
...     ["A", "B"], ["cost", "quality"], [[10, 8], [5, 9]],
...     ["cost", "benefit"], {"cost": 0.25, "quality": 0.75})
>>> result.winner.alternative
'B'
"""

from .base import CriterionPolarity, RankingResult, DecisionProblem
from .topsis import (
    TOPSISCalculator,
    TOPSISResult,
    run_topsis,
    as_decision_matrix,
    normalize_matrix,
    apply_weights,
    ideal_solutions,
    separation_distances,
    closeness_coefficients,
    rank_alternatives,
)

__all__ = [
    'CriterionPolarity',
    'RankingResult',
    'DecisionProblem',
    'TOPSISCalculator',
    'TOPSISResult',
    'run_topsis',
    'as_decision_matrix',
    'normalize_matrix',
    'apply_weights',
    'ideal_solutions',
    'separation_distances',
    'closeness_coefficients',
    'rank_alternatives',
]
