# -*- coding: utf-8 -*-
"""
Named project persistence.

Each project is one JSON file ``<id>.json`` in the store directory::

    {"id": ..., "name": ..., "created_at": ..., "updated_at": ..., "data": {...}}

``data`` is an opaque document owned by the caller. When it holds a decision
problem (``alternatives``, ``criteria``, ``values``...) it can be turned back
into a :class:`~roc_topsis.mcdm.base.DecisionProblem`.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .exceptions import ProjectError, ProjectNotFoundError
from .logger import get_module_logger
from .mcdm.base import DecisionProblem

logger = get_module_logger(__name__)

# Client-side UI state that is never persisted
TRANSIENT_KEYS = ('savedProjects', 'showLoadProjectModal', 'loadProjectError')


@dataclass
class ProjectSummary:
    """Project metadata without the stored document."""
    id: str
    name: str
    created_at: str
    updated_at: str


@dataclass
class Project(ProjectSummary):
    """A stored project."""
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def summary(self) -> ProjectSummary:
        return ProjectSummary(self.id, self.name, self.created_at, self.updated_at)

    def problem(self) -> DecisionProblem:
        """Read the stored document as a decision problem."""
        return DecisionProblem.from_dict(self.data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'data': self.data,
        }


class ProjectStore:
    """JSON-file project store."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def create(self, name: str, data: Mapping[str, Any]) -> Project:
        """Save a new project under a fresh id."""
        name = self._clean_name(name)
        document = self._clean_data(data)
        now = _utcnow()
        project = Project(id=uuid.uuid4().hex, name=name,
                          created_at=now, updated_at=now, data=document)
        self._write(project)
        logger.info(f"Created project '{name}' ({project.id})")
        return project

    def list(self) -> List[ProjectSummary]:
        """Metadata of every stored project, newest first."""
        if not self.directory.exists():
            return []
        projects = [self._read(path).summary for path in self.directory.glob('*.json')]
        return sorted(projects, key=lambda p: p.created_at, reverse=True)

    def get(self, project_id: str) -> Project:
        path = self._path(project_id)
        if not path.exists():
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        return self._read(path)

    def update(self, project_id: str, data: Mapping[str, Any],
               name: Optional[str] = None) -> Project:
        """Replace the document of a project and, if given, its name."""
        project = self.get(project_id)
        project.data = self._clean_data(data)
        if name is not None:
            project.name = self._clean_name(name)
        project.updated_at = _utcnow()
        self._write(project)
        logger.info(f"Updated project '{project.name}' ({project.id})")
        return project

    def _path(self, project_id: str) -> Path:
        # ids are uuid hex strings; anything else cannot name a stored file
        if not isinstance(project_id, str) or not project_id.isalnum():
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        return self.directory / f"{project_id}.json"

    def _write(self, project: Project) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(project.id)
        tmp = path.with_suffix('.json.tmp')
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(project.to_dict(), f, indent=2, ensure_ascii=False)
        tmp.replace(path)

    @staticmethod
    def _read(path: Path) -> Project:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            return Project(**raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise ProjectError(f"Corrupt project file {path.name}: {e}") from e

    @staticmethod
    def _clean_name(name: Any) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ProjectError("Project name is required.")
        return name.strip()

    @staticmethod
    def _clean_data(data: Any) -> Dict[str, Any]:
        if not isinstance(data, Mapping) or not data:
            raise ProjectError("Project data is required.")
        return {k: v for k, v in data.items() if k not in TRANSIENT_KEYS}


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()
