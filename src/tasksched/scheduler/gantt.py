"""Gantt projection of a task graph."""

from __future__ import annotations

from datetime import date

from tasksched.models import Dependency, DependencyType, Task

from .config import GanttConfig
from .core import GanttBar, GanttLink, GanttProjection
from .graph import TaskGraph

# Link type codes understood by Gantt renderers
GANTT_LINK_TYPES: dict[str, str] = {
    DependencyType.FS.value: "0",
    DependencyType.SS.value: "1",
    DependencyType.FF.value: "2",
    DependencyType.SF.value: "3",
}
DEFAULT_LINK_TYPE = "0"


def link_type_code(dep_type: str | None) -> str:
    """Map a stored dependency type to its Gantt link code ("0" when unknown)."""
    if not dep_type:
        return DEFAULT_LINK_TYPE
    return GANTT_LINK_TYPES.get(str(dep_type).strip().upper(), DEFAULT_LINK_TYPE)


def bar_type(task: Task) -> str:
    """Classify a task as milestone, child task, or top-level project bar."""
    if task.is_milestone:
        return "milestone"
    if task.parent_id:
        return "task"
    return "project"


class GanttProjector:
    """Maps tasks and dependencies to bars and links.

    The projection is independent of CPM metrics: bar dates come from the
    tasks' own explicit or expected dates.
    """

    def __init__(self, config: GanttConfig | None = None):
        self.config = config or GanttConfig()

    def project(self, graph: TaskGraph, *, today: date) -> GanttProjection:
        """Build the projection.

        Args:
            graph: Tasks and dependencies of one project
            today: Fallback date for tasks without explicit or expected dates

        Returns:
            GanttProjection with bars and links in graph order
        """
        fallback = today.isoformat()
        projection = GanttProjection()
        projection.tasks.extend(self._bar(task, fallback) for task in graph.tasks)
        projection.links.extend(self._link(dep) for dep in graph.dependencies)
        return projection

    def _bar(self, task: Task, fallback: str) -> GanttBar:
        return GanttBar(
            id=task.id,
            text=task.name,
            start_date=task.start_date or task.expected_start_date or fallback,
            end_date=task.end_date or task.expected_end_date or fallback,
            duration=task.duration or 1,
            progress=task.percent_complete / 100,
            type=bar_type(task),
            parent=task.parent_id or None,
            open=self.config.open_bars,
        )

    def _link(self, dep: Dependency) -> GanttLink:
        return GanttLink(
            id=dep.link_id,
            source=dep.predecessor_id,
            target=dep.successor_id,
            type=link_type_code(dep.type),
            lag=dep.lag_days,
        )
