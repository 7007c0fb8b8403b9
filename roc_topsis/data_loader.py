# -*- coding: utf-8 -*-
"""Decision data loading, qualitative value mapping and matrix conversion."""

import math
import numbers
import pandas as pd
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from dataclasses import dataclass, field

from .exceptions import DataLoadError
from .logger import get_module_logger, timed_operation
from .mcdm.base import CriterionPolarity, DecisionProblem

logger = get_module_logger(__name__)


@dataclass
class CriterionMapping:
    """Qualitative labels found in one criterion column and their numeric values."""
    unique_values: List[str] = field(default_factory=list)
    mapping: Dict[str, Optional[float]] = field(default_factory=dict)

    def add(self, label: str) -> None:
        if label not in self.mapping:
            self.unique_values.append(label)
            self.mapping[label] = None

    def set(self, label: str, value: float) -> None:
        if label not in self.mapping:
            raise DataLoadError(f"Unknown qualitative value '{label}'.")
        self.mapping[label] = float(value)

    @property
    def unmapped(self) -> List[str]:
        return [v for v in self.unique_values if not _is_mapped(self.mapping.get(v))]

    @property
    def is_complete(self) -> bool:
        return not self.unmapped


QualitativeMapping = Dict[str, CriterionMapping]


@dataclass
class LoadedData:
    """
    Alternatives and raw cell values selected from a table.

    ``cells`` holds floats for numeric cells and trimmed strings for
    qualitative ones; ``to_matrix`` resolves the latter through
    ``qualitative_mapping``.
    """
    alternatives: List[str]
    criteria: List[str]
    cells: List[List[Union[float, str]]]
    qualitative_mapping: QualitativeMapping

    @property
    def needs_mapping(self) -> bool:
        return any(m.unique_values for m in self.qualitative_mapping.values())

    @property
    def unmapped(self) -> Dict[str, List[str]]:
        return {c: m.unmapped for c, m in self.qualitative_mapping.items() if m.unmapped}

    def set_mapping(self, criterion: str, values: Mapping[str, float]) -> None:
        """Assign numeric values to qualitative labels of ``criterion``."""
        if criterion not in self.qualitative_mapping:
            raise DataLoadError(f"Unknown criterion '{criterion}'.")
        for label, value in values.items():
            self.qualitative_mapping[criterion].set(label, value)

    def to_matrix(self) -> List[List[float]]:
        """
        Convert every cell to a number.

        Raises
        ------
        DataLoadError
            Listing every cell that is neither numeric nor mapped.
        """
        matrix: List[List[float]] = []
        errors: List[str] = []

        for i, row in enumerate(self.cells):
            numeric_row = []
            for crit, raw in zip(self.criteria, row):
                value = _parse_number(raw)
                if value is None:
                    mapped = self.qualitative_mapping[crit].mapping.get(str(raw).strip())
                    if _is_mapped(mapped):
                        value = float(mapped)
                    else:
                        errors.append(
                            f"Row {i + 1}, column '{crit}': value '{raw}' is not a "
                            f"number and has no qualitative mapping."
                        )
                        value = math.nan
                numeric_row.append(value)
            matrix.append(numeric_row)

        if errors:
            raise DataLoadError(
                "Some values could not be converted to numbers:\n" + "\n".join(errors)
            )
        return matrix

    def to_problem(self,
                   criteria_types: Optional[Union[Sequence[str], Mapping[str, str]]] = None,
                   priority_order: Optional[Sequence[str]] = None) -> DecisionProblem:
        """
        Build a :class:`DecisionProblem`; criteria default to benefit and the
        priority order defaults to column order.
        """
        if criteria_types is None:
            types = [CriterionPolarity.BENEFIT.value] * len(self.criteria)
        elif isinstance(criteria_types, Mapping):
            types = [criteria_types.get(c, CriterionPolarity.BENEFIT.value)
                     for c in self.criteria]
        else:
            types = list(criteria_types)

        return DecisionProblem(
            alternatives=list(self.alternatives),
            criteria=list(self.criteria),
            values=self.to_matrix(),
            criteria_types=types,
            priority_order=list(priority_order) if priority_order is not None
            else list(self.criteria),
        )


class DecisionDataLoader:
    """Loads alternatives × criteria tables from CSV files, DataFrames or records."""

    def load_csv(self, filepath: Union[str, Path], alternative_column: str,
                 criteria_columns: Sequence[str]) -> LoadedData:
        """Load a CSV file; every cell is read as text."""
        filepath = Path(filepath)
        with timed_operation(logger, f"loading {filepath}"):
            try:
                df = pd.read_csv(filepath, dtype=str, keep_default_na=False,
                                 skip_blank_lines=True)
            except FileNotFoundError:
                raise DataLoadError(f"Data file not found: {filepath}") from None
            except (pd.errors.EmptyDataError, pd.errors.ParserError,
                    UnicodeDecodeError) as e:
                raise DataLoadError(f"Failed to read CSV file {filepath}: {e}") from e
        return self.load_dataframe(df, alternative_column, criteria_columns)

    def load_records(self, records: Sequence[Mapping[str, Any]],
                     alternative_column: str,
                     criteria_columns: Sequence[str]) -> LoadedData:
        """Load manually entered rows (one mapping per alternative)."""
        df = pd.DataFrame(list(records))
        return self.load_dataframe(df, alternative_column, criteria_columns)

    def load_dataframe(self, df: pd.DataFrame, alternative_column: str,
                       criteria_columns: Sequence[str]) -> LoadedData:
        """
        Select the alternative and criteria columns of ``df``.

        Rows with a blank alternative name are skipped. Cells that do not
        parse as numbers are collected as qualitative values per criterion.
        """
        criteria = list(criteria_columns)
        self._validate_structure(df, alternative_column, criteria)

        mapping: QualitativeMapping = {c: CriterionMapping() for c in criteria}
        alternatives: List[str] = []
        cells: List[List[Union[float, str]]] = []

        for _, row in df.iterrows():
            name = _clean_text(row[alternative_column])
            if not name:
                continue
            alternatives.append(name)

            cell_row: List[Union[float, str]] = []
            for crit in criteria:
                raw = row[crit]
                value = _parse_number(raw)
                if value is None:
                    label = _clean_text(raw)
                    if label:
                        mapping[crit].add(label)
                    cell_row.append(label)
                else:
                    cell_row.append(value)
            cells.append(cell_row)

        if not alternatives:
            raise DataLoadError("The table has no rows with an alternative name.")

        loaded = LoadedData(alternatives=alternatives, criteria=criteria,
                            cells=cells, qualitative_mapping=mapping)
        logger.info(f"Loaded {len(alternatives)} alternatives × {len(criteria)} criteria")
        if loaded.needs_mapping:
            logger.info(
                "Qualitative values need mapping in: "
                + ", ".join(c for c, m in mapping.items() if m.unique_values)
            )
        return loaded

    @staticmethod
    def _validate_structure(df: pd.DataFrame, alternative_column: str,
                            criteria: List[str]) -> None:
        if df.empty or len(df.columns) == 0:
            raise DataLoadError("The table is empty or has no valid data after the header.")
        if not alternative_column:
            raise DataLoadError("Select a column for the alternative names.")
        if not criteria:
            raise DataLoadError("Select at least one criteria column.")

        missing = [c for c in [alternative_column] + criteria if c not in df.columns]
        if missing:
            raise DataLoadError(f"Missing required columns: {missing}")
        if alternative_column in criteria:
            raise DataLoadError(
                f"Column '{alternative_column}' cannot be both the alternative "
                f"column and a criterion."
            )
        dups = sorted({c for c in criteria if criteria.count(c) > 1})
        if dups:
            raise DataLoadError(f"Criteria columns selected more than once: {dups}")


def load_csv(filepath: Union[str, Path], alternative_column: str,
             criteria_columns: Sequence[str]) -> LoadedData:
    """Convenience function for CSV loading."""
    return DecisionDataLoader().load_csv(filepath, alternative_column, criteria_columns)


def _clean_text(value: Any) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return str(value).strip()


def _parse_number(value: Any) -> Optional[float]:
    """Parse a cell as a finite number, or return None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        return float(value) if math.isfinite(value) else None
    text = _clean_text(value)
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _is_mapped(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) \
        and math.isfinite(value)
