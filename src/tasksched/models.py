"""Data models for tasksched."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .exceptions import ValidationError

# Scheduling treats missing or non-positive durations as one day
DEFAULT_DURATION_DAYS = 1
# Progress roll-up weight for tasks without estimated hours
DEFAULT_PROGRESS_WEIGHT = 1.0


class DependencyType(str, Enum):
    """Precedence relationship between two tasks."""

    FS = "FS"  # Finish-to-Start
    SS = "SS"  # Start-to-Start
    FF = "FF"  # Finish-to-Finish
    SF = "SF"  # Start-to-Finish

    @classmethod
    def coerce(cls, value: DependencyType | str | None) -> DependencyType:
        """Convert user input to a DependencyType.

        None means the default finish-to-start relationship. Strings are
        matched case-insensitively.

        Raises:
            ValidationError: If the value names no known relationship
        """
        if value is None:
            return cls.FS
        if isinstance(value, cls):
            return value
        try:
            return cls(value.strip().upper())
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValidationError(
                f"Unknown dependency type '{value}'. Valid types are: {valid}"
            ) from None


@dataclass(frozen=True)
class Task:
    """A unit of work within exactly one project.

    Tasks are read-only snapshots; the store owns their lifecycle.
    """

    id: str
    project_id: str
    name: str
    duration: int | None = None
    start_date: str | None = None  # YYYY-MM-DD
    end_date: str | None = None
    expected_start_date: str | None = None
    expected_end_date: str | None = None
    percent_complete: int = 0
    parent_id: str | None = None
    is_milestone: bool = False
    estimated_hours: float | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.percent_complete <= 100:  # noqa: PLR2004
            raise ValidationError(
                f"Task '{self.id}' has percent_complete {self.percent_complete}, "
                "expected a value between 0 and 100"
            )

    @property
    def effective_duration(self) -> int:
        """Duration in days used for scheduling (never below one day)."""
        if self.duration is None or self.duration < 1:
            return DEFAULT_DURATION_DAYS
        return self.duration

    @property
    def progress_weight(self) -> float:
        """Weight of this task in the project progress roll-up."""
        return self.estimated_hours or DEFAULT_PROGRESS_WEIGHT


@dataclass(frozen=True)
class Dependency:
    """A directed precedence constraint: predecessor -> successor.

    The type is kept as stored (a plain string) so that data written by other
    systems survives a round trip; use DependencyType.coerce() at write time.
    A negative lag is a lead.
    """

    predecessor_id: str
    successor_id: str
    type: str = DependencyType.FS.value
    lag_days: int = 0
    id: str | None = None

    @property
    def link_id(self) -> str:
        """Stable identifier for presentation links."""
        return self.id or f"{self.predecessor_id}->{self.successor_id}"

    @property
    def key(self) -> tuple[str, str]:
        """The (predecessor, successor) pair identifying this edge in a project."""
        return (self.predecessor_id, self.successor_id)

    def touches(self, task_id: str) -> bool:
        """Whether the task is either endpoint of this dependency."""
        return task_id in (self.predecessor_id, self.successor_id)

    def __str__(self) -> str:
        text = f"{self.predecessor_id} -> {self.successor_id} ({self.type}"
        if self.lag_days:
            text += f" {self.lag_days:+d}d"
        return text + ")"


@dataclass
class Project:
    """A project record as far as the scheduler needs it."""

    id: str
    name: str = ""
    progress: float = 0.0


def _default_tasks() -> list[Task]:
    return []


def _default_dependencies() -> list[Dependency]:
    return []


@dataclass
class ProjectData:
    """A project with its tasks and dependencies, as loaded from a file."""

    project: Project
    tasks: list[Task] = field(default_factory=_default_tasks)
    dependencies: list[Dependency] = field(default_factory=_default_dependencies)

    def get_all_ids(self) -> set[str]:
        """Get all task IDs in the project."""
        return {task.id for task in self.tasks}
