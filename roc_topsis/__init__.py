# -*- coding: utf-8 -*-
"""
ROC-TOPSIS: Multi-Criteria Ranking with Rank Order Centroid Weights
===================================================================

Ranks alternatives against benefit and cost criteria in two steps:
  Step 1: Rank Order Centroid (ROC) turns a priority order of criteria
          into weights summing to one
  Step 2: TOPSIS scores every alternative by its relative closeness to
          the ideal and anti-ideal solutions and ranks them

Package Structure
-----------------
roc_topsis/
├── weighting/          # Criterion weighting
│   ├── base.py         # WeightResult, name → index resolution
│   └── roc.py          # Rank Order Centroid
│
├── mcdm/
│   ├── base.py         # CriterionPolarity, RankingResult, DecisionProblem
│   └── topsis.py       # Five-stage TOPSIS engine
│
├── pipeline.py         # Compute entry point (validation → ROC → TOPSIS)
├── data_loader.py      # CSV / record loading, qualitative value mapping
├── projects.py         # Named project store (JSON files)
├── output_manager.py   # CSV / JSON export
├── config.py           # Dataclass configuration
├── logger.py           # Logging setup
└── main.py             # Command-line interface

Quick Start
-----------
>>> from roc_topsis import compute_ranking
>>> ranking = compute_ranking(
...     alternatives=["A", "B"],
...     criteria=["cost", "quality"],
...     values=[[10, 8], [5, 9]],
...     criteria_types=["cost", "benefit"],
...     priority_order=["quality", "cost"],
... )
>>> ranking[0].alternative
'B'
"""

from .config import Config, get_default_config, get_config, set_config, reset_config
from .exceptions import (
    RankingError,
    ShapeError,
    WeightError,
    PolarityError,
    NumericIntegrityError,
    DataLoadError,
    ProjectError,
    ProjectNotFoundError,
)
from .logger import setup_logger, get_logger, get_module_logger
from .weighting import ROCWeightCalculator, WeightResult, calculate_roc_weights
from .mcdm import (
    CriterionPolarity,
    RankingResult,
    DecisionProblem,
    TOPSISCalculator,
    TOPSISResult,
    run_topsis,
)
from .pipeline import RankingPipeline, PipelineResult, compute_ranking, run_pipeline
from .data_loader import DecisionDataLoader, LoadedData, CriterionMapping, load_csv
from .projects import Project, ProjectStore, ProjectSummary
from .output_manager import OutputManager

__version__ = "1.0.0"

__all__ = [
    'Config', 'get_default_config', 'get_config', 'set_config', 'reset_config',
    'RankingError', 'ShapeError', 'WeightError', 'PolarityError',
    'NumericIntegrityError', 'DataLoadError', 'ProjectError', 'ProjectNotFoundError',
    'setup_logger', 'get_logger', 'get_module_logger',
    'ROCWeightCalculator', 'WeightResult', 'calculate_roc_weights',
    'CriterionPolarity', 'RankingResult', 'DecisionProblem',
    'TOPSISCalculator', 'TOPSISResult', 'run_topsis',
    'RankingPipeline', 'PipelineResult', 'compute_ranking', 'run_pipeline',
    'DecisionDataLoader', 'LoadedData', 'CriterionMapping', 'load_csv',
    'Project', 'ProjectStore', 'ProjectSummary',
    'OutputManager',
]
