# -*- coding: utf-8 -*-
"""
Error taxonomy for the ranking engine.

All errors are deterministic, caller-correctable input errors. They derive
from ``ValueError`` so that code catching bad-input errors generically keeps
working, while the subclasses let callers tell the failure kinds apart.
"""


class RankingError(ValueError):
    """Base class for every error raised by roc_topsis."""


class ShapeError(RankingError):
    """Empty, jagged or misaligned alternatives, criteria or matrix."""


class WeightError(RankingError):
    """Missing or NaN weight, or a priority order inconsistent with the criteria."""


class PolarityError(RankingError):
    """A criterion type that is neither benefit nor cost."""


class NumericIntegrityError(RankingError):
    """Non-numeric or non-finite value found while computing."""


class DataLoadError(RankingError):
    """Tabular input could not be turned into a decision matrix."""


class ProjectError(RankingError):
    """Invalid project name or project data."""


class ProjectNotFoundError(ProjectError, KeyError):
    """No project is stored under the requested id."""

    def __str__(self) -> str:
        # KeyError.__str__ quotes its argument
        return str(self.args[0]) if self.args else ""


__all__ = [
    'RankingError',
    'ShapeError',
    'WeightError',
    'PolarityError',
    'NumericIntegrityError',
    'DataLoadError',
    'ProjectError',
    'ProjectNotFoundError',
]
