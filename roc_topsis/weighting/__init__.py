# -*- coding: utf-8 -*-
"""
Weighting Methods Module

Subjective criterion weighting for MCDM:
- ROC: Rank Order Centroid weights from an importance ranking
"""

from .base import WeightResult, normalize_weights, resolve_weights
from .roc import ROCWeightCalculator, calculate_roc_weights, roc_weight_table

__all__ = [
    'WeightResult',
    'normalize_weights',
    'resolve_weights',
    'ROCWeightCalculator',
    'calculate_roc_weights',
    'roc_weight_table',
]
