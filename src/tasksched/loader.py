"""Project file loading with validation and config discovery."""

from __future__ import annotations

from pathlib import Path

from .exceptions import CyclicDependencyError, DuplicateDependencyError, ValidationError
from .logger import get_logger
from .models import ProjectData
from .parser import ProjectFileParser
from .scheduler.cycles import find_cycle
from .unified_config import CONFIG_FILE_NAME, UnifiedConfig, load_unified_config

logger = get_logger()


def discover_config(
    project_path: Path | str,
    config_path: Path | None = None,
) -> UnifiedConfig:
    """Discover unified config from various locations.

    Search order:
    1. Explicit config_path argument (the CLI passes --config here)
    2. Project file directory / tasksched_config.yaml
    3. Current directory / tasksched_config.yaml

    Falls back to default settings when no file is found.
    """
    # 1. Explicit argument
    if config_path and config_path.exists():
        return load_unified_config(config_path)

    # 2. Project file directory
    dir_config = Path(project_path).parent / CONFIG_FILE_NAME
    if dir_config.exists():
        return load_unified_config(dir_config)

    # 3. Current directory
    cwd_config = Path(CONFIG_FILE_NAME)
    if cwd_config.exists():
        return load_unified_config(cwd_config)

    return UnifiedConfig()


def load_project(path: Path | str) -> ProjectData:
    """Load and validate a project file.

    Args:
        path: Path to the project YAML file

    Returns:
        ProjectData whose dependencies reference known tasks and form no cycle
    """
    project_data = ProjectFileParser().parse_file(path)
    validate_project(project_data)
    return project_data


def validate_project(project_data: ProjectData) -> None:
    """Validate task references, duplicate edges and cycles."""
    all_ids = project_data.get_all_ids()

    for task in project_data.tasks:
        if task.parent_id and task.parent_id not in all_ids:
            raise ValidationError(f"Task {task.id} has unknown parent: {task.parent_id}")

    seen: set[tuple[str, str]] = set()
    for dep in project_data.dependencies:
        for task_id in dep.key:
            if task_id not in all_ids:
                raise ValidationError(f"Dependency {dep} references unknown task: {task_id}")
        if dep.key in seen:
            raise DuplicateDependencyError(f"Duplicate dependency: {dep}")
        seen.add(dep.key)

    cycle = find_cycle(project_data.dependencies)
    if cycle:
        raise CyclicDependencyError(
            f"Circular dependency detected: {' -> '.join(cycle)}", cycle=cycle
        )

    logger.checks(
        f"Validated project '{project_data.project.id}': {len(project_data.tasks)} tasks, "
        f"{len(project_data.dependencies)} dependencies"
    )
