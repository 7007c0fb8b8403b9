# -*- coding: utf-8 -*-
"""
Ranking Pipeline
================

Compute entry point: validates a decision problem, derives ROC weights from
its priority order and ranks the alternatives with TOPSIS.

The call is atomic. It either returns the complete ranking or raises a
:class:`~roc_topsis.exceptions.RankingError` describing the violated
precondition.
"""

import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .config import Config, get_config
from .exceptions import ShapeError, WeightError
from .logger import ProgressLogger, get_module_logger, log_context, log_exceptions
from .mcdm.base import CriterionPolarity, DecisionProblem, RankingResult
from .mcdm.topsis import TOPSISCalculator, TOPSISResult
from .weighting.base import WeightResult
from .weighting.roc import ROCWeightCalculator

logger = get_module_logger(__name__)


@dataclass
class PipelineResult:
    """Container for one ranking run."""
    problem: DecisionProblem
    weights: WeightResult
    topsis: TOPSISResult
    execution_time: float
    run_id: str

    @property
    def ranking(self) -> List[RankingResult]:
        return self.topsis.ranking

    def to_dict(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'input': self.problem.to_dict(),
            'weights': dict(self.weights.weights),
            'ideal_solution': self.topsis.ideal_solution.to_dict(),
            'anti_ideal_solution': self.topsis.anti_ideal_solution.to_dict(),
            'ranking': [r.to_dict() for r in self.ranking],
            'execution_time': self.execution_time,
        }

    def summary(self) -> str:
        lines = [f"{'Rank':>4}  {'Preference':>10}  Alternative"]
        for r in self.ranking:
            lines.append(f"{r.rank:>4}  {r.preference:>10.4f}  {r.alternative}")
        return "\n".join(lines)


class RankingPipeline:
    """
    ROC weighting followed by TOPSIS ranking.

    Parameters
    ----------
    config : Config, optional
        Engine configuration; defaults to the process-wide configuration.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()
        self.weight_calculator = ROCWeightCalculator()
        self.topsis = TOPSISCalculator(self.config.topsis)

    @log_exceptions(logger)
    def run(self, problem: Union[DecisionProblem, Mapping[str, Any]]) -> PipelineResult:
        """
        Rank the alternatives of ``problem``.

        Parameters
        ----------
        problem : DecisionProblem or mapping
            Input; a mapping is read with :meth:`DecisionProblem.from_dict`.

        Returns
        -------
        PipelineResult
            Weights, TOPSIS intermediates and the ranking.
        """
        if not isinstance(problem, DecisionProblem):
            problem = DecisionProblem.from_dict(problem)

        run_id = uuid.uuid4().hex[:8]
        start_time = time.perf_counter()

        with log_context(run_id=run_id):
            with ProgressLogger(logger, "Ranking") as progress:
                validate_problem(problem)
                progress.log_step(
                    f"validated {problem.n_alternatives} alternatives × "
                    f"{problem.n_criteria} criteria"
                )

                weights = self.weight_calculator.calculate(problem.priority_order)
                check_weight_coverage(weights, problem.criteria,
                                      self.config.weighting.sum_tolerance)
                progress.log_step("ROC weights derived")

                topsis_result = self.topsis.calculate(
                    problem.alternatives,
                    problem.criteria,
                    problem.values,
                    problem.criteria_types,
                    weights,
                )
                progress.log_step(f"TOPSIS winner: {topsis_result.winner.alternative}")

        return PipelineResult(
            problem=problem,
            weights=weights,
            topsis=topsis_result,
            execution_time=time.perf_counter() - start_time,
            run_id=run_id,
        )


def validate_problem(problem: DecisionProblem) -> None:
    """
    Check the request shape before any computation runs.

    Raises
    ------
    ShapeError
        Empty, blank, duplicated or misaligned inputs.
    PolarityError
        A criteria type other than benefit/cost.
    WeightError
        A priority order that is not a permutation of the criteria.
    """
    _check_names(problem.alternatives, "alternatives")
    _check_names(problem.criteria, "criteria")

    values = problem.values
    if hasattr(values, 'to_numpy'):
        values = values.to_numpy()
    if hasattr(values, 'tolist'):
        values = values.tolist()
    if not isinstance(values, Sequence) or len(values) == 0:
        raise ShapeError("Missing or invalid values matrix data.")
    if len(values) != problem.n_alternatives:
        raise ShapeError(
            f"Values matrix has {len(values)} rows for "
            f"{problem.n_alternatives} alternatives."
        )
    for i, row in enumerate(values):
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
            raise ShapeError(f"Row {i + 1} of the values matrix is not a sequence.")
        if len(row) != problem.n_criteria:
            raise ShapeError(
                f"Row {i + 1} of the values matrix has {len(row)} values for "
                f"{problem.n_criteria} criteria."
            )

    if len(problem.criteria_types) != problem.n_criteria:
        raise ShapeError("Missing or invalid criteriaTypes data.")
    for ctype in problem.criteria_types:
        CriterionPolarity.parse(ctype)

    declared = set(problem.criteria)
    seen = set()
    for crit in problem.priority_order:
        if crit not in declared:
            raise WeightError(f"Priority order names unknown criterion '{crit}'.")
        if crit in seen:
            raise WeightError(f"Criterion '{crit}' appears more than once in the priority order.")
        seen.add(crit)
    omitted = [c for c in problem.criteria if c not in seen]
    if omitted:
        raise WeightError(
            f"ROC weight for criterion '{omitted[0]}' is undefined. "
            f"Priority order is missing: {', '.join(omitted)}."
        )


def check_weight_coverage(weights: WeightResult, criteria: Sequence[str],
                          tolerance: float) -> None:
    """Fail on a criterion without a weight; warn when the total drifts from 1."""
    weights.resolve(criteria)
    total = weights.total
    if abs(total - 1.0) > tolerance:
        logger.warning(f"ROC weights sum to {total!r}, not 1.0")


def _check_names(names: Sequence[str], label: str) -> None:
    if not names or isinstance(names, str):
        raise ShapeError(f"Missing or invalid {label} data.")
    seen = set()
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise ShapeError(f"All {label} must have a non-empty name.")
        if name in seen:
            raise ShapeError(f"Duplicate name in {label}: '{name}'.")
        seen.add(name)


def compute_ranking(alternatives: Sequence[str],
                    criteria: Sequence[str],
                    values: Sequence[Sequence[float]],
                    criteria_types: Sequence[Union[CriterionPolarity, str]],
                    priority_order: Sequence[str],
                    config: Optional[Config] = None) -> List[RankingResult]:
    """Convenience function: rank alternatives and return the sorted results."""
    problem = DecisionProblem(
        alternatives=list(alternatives),
        criteria=list(criteria),
        values=[list(row) for row in values],
        criteria_types=list(criteria_types),
        priority_order=list(priority_order),
    )
    return RankingPipeline(config).run(problem).ranking


def run_pipeline(problem: Union[DecisionProblem, Mapping[str, Any]],
                 config: Optional[Config] = None) -> PipelineResult:
    """Convenience function for a full pipeline run."""
    return RankingPipeline(config).run(problem)
