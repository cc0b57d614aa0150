"""tasksched - task dependency scheduling with cycle checks, CPM and Gantt projection."""

from .exceptions import (
    CyclicDependencyError,
    DuplicateDependencyError,
    HasDependentsError,
    NotFoundError,
    ParseError,
    ScheduleError,
    TaskschedError,
    ValidationError,
)
from .models import Dependency, DependencyType, Project, ProjectData, Task
from .scheduler import (
    CriticalPathAnalysis,
    CriticalPathAnalyzer,
    GanttConfig,
    GanttProjection,
    GanttProjector,
    ScheduleService,
    SchedulingConfig,
    TaskGraph,
    would_create_cycle,
)

__version__ = "0.1.0"

__all__ = [
    "CriticalPathAnalysis",
    "CriticalPathAnalyzer",
    "CyclicDependencyError",
    "Dependency",
    "DependencyType",
    "DuplicateDependencyError",
    "GanttConfig",
    "GanttProjection",
    "GanttProjector",
    "HasDependentsError",
    "NotFoundError",
    "ParseError",
    "Project",
    "ProjectData",
    "ScheduleError",
    "ScheduleService",
    "SchedulingConfig",
    "Task",
    "TaskGraph",
    "TaskschedError",
    "ValidationError",
    "would_create_cycle",
]
