"""Custom exceptions for tasksched."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Dependency


class TaskschedError(Exception):
    """Base exception for all tasksched errors."""

    pass


class ValidationError(TaskschedError):
    """Raised when validation fails."""

    pass


class NotFoundError(TaskschedError):
    """Raised when a referenced task, project, or dependency does not exist."""

    pass


class CyclicDependencyError(ValidationError):
    """Raised when a dependency would create (or already forms) a cycle."""

    def __init__(self, message: str, cycle: list[str] | None = None):
        super().__init__(message)
        self.cycle = cycle or []


class DuplicateDependencyError(ValidationError):
    """Raised when a dependency between the same two tasks already exists."""

    pass


class HasDependentsError(TaskschedError):
    """Raised when deleting a task that still has incident dependencies."""

    def __init__(self, message: str, dependencies: list[Dependency] | None = None):
        super().__init__(message)
        self.dependencies = dependencies or []


class ScheduleError(TaskschedError):
    """Raised when the schedule computation finds an inconsistent graph."""

    pass


class ParseError(TaskschedError):
    """Raised when YAML parsing fails."""

    pass
