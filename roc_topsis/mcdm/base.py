# -*- coding: utf-8 -*-
"""Core data types shared by the ranking engine and its collaborators."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Sequence, Union

from ..exceptions import PolarityError, ShapeError


class CriterionPolarity(Enum):
    """Direction of preference for a criterion."""
    BENEFIT = "benefit"   # higher raw value is better
    COST = "cost"         # lower raw value is better

    @classmethod
    def parse(cls, value: Union['CriterionPolarity', str]) -> 'CriterionPolarity':
        """Accept a member or its string value, case-insensitively."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise PolarityError(
            f"Invalid criteria type: {value!r}. Expected 'benefit' or 'cost'."
        )


@dataclass(frozen=True)
class RankingResult:
    """One ranked alternative."""
    alternative: str
    preference: float
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'alternative': self.alternative,
            'preference': self.preference,
            'rank': self.rank,
        }


# Keys accepted for the priority order in stored/request documents
_PRIORITY_KEYS = ('priority_order', 'priorityOrder', 'prioritizedCriteria')
_TYPES_KEYS = ('criteria_types', 'criteriaTypes')
_VALUES_KEYS = ('values', 'matrixValues')


@dataclass
class DecisionProblem:
    """
    Complete input of one ranking computation.

    Attributes
    ----------
    alternatives : list of str
        Alternative names, one per matrix row.
    criteria : list of str
        Criterion names, one per matrix column.
    values : list of list of float
        Decision matrix (alternatives × criteria).
    criteria_types : list of str or CriterionPolarity
        Polarity per criterion, aligned with ``criteria``.
    priority_order : list of str
        Criteria from most to least important.
    """
    alternatives: List[str]
    criteria: List[str]
    values: List[List[float]]
    criteria_types: List[Union[CriterionPolarity, str]]
    priority_order: List[str] = field(default_factory=list)

    @property
    def n_alternatives(self) -> int:
        return len(self.alternatives)

    @property
    def n_criteria(self) -> int:
        return len(self.criteria)

    @property
    def polarities(self) -> List[CriterionPolarity]:
        return [CriterionPolarity.parse(t) for t in self.criteria_types]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'DecisionProblem':
        """
        Build a problem from a request or project document.

        ``criteriaTypes`` may be a list aligned with ``criteria`` or a
        mapping criterion name → type, as older project documents
        stored it. The matrix is read from ``values`` or, in saved project
        state, ``matrixValues``.
        """
        missing = [k for k in ('alternatives', 'criteria') if k not in data]
        if not any(k in data for k in _VALUES_KEYS):
            missing.append('values')
        if missing:
            raise ShapeError(f"Missing required fields: {', '.join(missing)}")

        criteria = list(data['criteria'] or [])
        types = _first_present(data, _TYPES_KEYS)
        if isinstance(types, Mapping):
            types = [types.get(c) for c in criteria]

        return cls(
            alternatives=list(data['alternatives'] or []),
            criteria=criteria,
            values=_matrix_rows(_first_present(data, _VALUES_KEYS)),
            criteria_types=list(types or []),
            priority_order=list(_first_present(data, _PRIORITY_KEYS) or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'alternatives': list(self.alternatives),
            'criteria': list(self.criteria),
            'values': [list(row) for row in self.values],
            'criteriaTypes': [
                t.value if isinstance(t, CriterionPolarity) else t
                for t in self.criteria_types
            ],
            'priorityOrder': list(self.priority_order),
        }


def _matrix_rows(values: Any) -> List[List[Any]]:
    """Copy a document matrix row by row; jagged rows are left to validation."""
    if hasattr(values, 'tolist'):
        values = values.tolist()
    if not values:
        return []
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise ShapeError("Missing or invalid values matrix data.")

    rows = []
    for i, row in enumerate(values):
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
            raise ShapeError(f"Row {i + 1} of the values matrix is not a sequence.")
        rows.append(list(row))
    return rows


def _first_present(data: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None
