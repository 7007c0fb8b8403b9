# -*- coding: utf-8 -*-
"""
Output Management for Ranking Results
=====================================

Persists ranking artefacts into an organised directory structure::

    outputs/
    ├── results/   ranking and weights (CSV)
    └── reports/   full run report (JSON)
"""

import json
import pandas as pd
from pathlib import Path
from typing import Optional, Sequence, Union

from .config import OutputConfig
from .logger import get_module_logger
from .mcdm.base import RankingResult
from .weighting.base import WeightResult

logger = get_module_logger(__name__)


class OutputManager:
    """Writes rankings, weights and run reports below ``base_output_dir``."""

    def __init__(self, base_output_dir: Union[str, Path] = 'outputs',
                 config: Optional[OutputConfig] = None):
        self.config = config or OutputConfig()
        self.base_dir = Path(base_output_dir)
        self.results_dir = self.base_dir / 'results'
        self.reports_dir = self.base_dir / 'reports'
        self._setup_directories()

    def _setup_directories(self) -> None:
        for d in [self.results_dir, self.reports_dir]:
            d.mkdir(parents=True, exist_ok=True)

    # -----------------------------------------------------------------
    # Ranking export
    # -----------------------------------------------------------------

    def save_ranking(self, ranking: Sequence[RankingResult]) -> str:
        """Save a ranking to CSV, sorted by rank."""
        df = pd.DataFrame({
            'Rank': [r.rank for r in ranking],
            'Alternative': [r.alternative for r in ranking],
            'Preference': [r.preference for r in ranking],
        }).sort_values('Rank').reset_index(drop=True)
        path = self.results_dir / self.config.ranking_file
        df.to_csv(path, index=False, float_format=self.config.float_format)
        logger.info(f"Saved ranking to {path}")
        return str(path)

    # -----------------------------------------------------------------
    # Weight export
    # -----------------------------------------------------------------

    def save_weights(self, weights: WeightResult,
                     criteria: Optional[Sequence[str]] = None) -> str:
        """Save criterion weights with their priority position."""
        criteria = list(criteria) if criteria is not None else list(weights.weights)
        ranks = weights.details.get('ranks', {})
        df = pd.DataFrame({
            'Criterion': criteria,
            'Priority': [ranks.get(c) for c in criteria],
            'Weight': [weights.weights.get(c) for c in criteria],
        })
        path = self.results_dir / self.config.weights_file
        df.to_csv(path, index=False, float_format=self.config.float_format)
        logger.info(f"Saved weights to {path}")
        return str(path)

    # -----------------------------------------------------------------
    # Report
    # -----------------------------------------------------------------

    def save_report(self, pipeline_result) -> str:
        """Save the full run (inputs, weights, ideals, ranking) as JSON."""
        path = self.reports_dir / self.config.report_file
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(pipeline_result.to_dict(), f, indent=2, ensure_ascii=False,
                      default=float)
        logger.info(f"Saved report to {path}")
        return str(path)

    def save_all(self, pipeline_result) -> dict:
        """Save ranking, weights and report; returns name → path."""
        return {
            'ranking': self.save_ranking(pipeline_result.ranking),
            'weights': self.save_weights(pipeline_result.weights,
                                         pipeline_result.problem.criteria),
            'report': self.save_report(pipeline_result),
        }
