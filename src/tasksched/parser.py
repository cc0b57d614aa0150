"""YAML parser for tasksched project files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import Dependency, DependencyType, Project, ProjectData, Task
from .schemas import ProjectFileSchema


class ProjectFileParser:
    """Parser for project YAML files.

    This parser only handles YAML parsing and model creation. For loading
    with reference and cycle validation, use load_project() from
    tasksched.loader.
    """

    def parse_file(self, file_path: Path | str) -> ProjectData:
        """Parse a YAML file into ProjectData."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> ProjectData:
        """Convert already-loaded YAML data into ProjectData."""
        try:
            schema = ProjectFileSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid YAML structure: {e}") from e

        project = Project(
            id=schema.project.id,
            name=schema.project.name,
            progress=schema.project.progress,
        )

        tasks = [
            Task(
                id=task_id,
                project_id=project.id,
                name=task_data.name,
                duration=task_data.duration,
                start_date=task_data.start_date,
                end_date=task_data.end_date,
                expected_start_date=task_data.expected_start_date,
                expected_end_date=task_data.expected_end_date,
                percent_complete=task_data.percent_complete,
                parent_id=task_data.parent,
                is_milestone=task_data.milestone,
                estimated_hours=task_data.estimated_hours,
            )
            for task_id, task_data in schema.tasks.items()
        ]

        dependencies = [
            Dependency(
                predecessor_id=dep.predecessor,
                successor_id=dep.successor,
                type=dep.type or DependencyType.FS.value,
                lag_days=dep.lag,
                id=dep.id,
            )
            for dep in schema.dependencies
        ]

        return ProjectData(project=project, tasks=tasks, dependencies=dependencies)
