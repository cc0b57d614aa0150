"""High-level scheduling service."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING
from uuid import uuid4

from tasksched.exceptions import (
    CyclicDependencyError,
    DuplicateDependencyError,
    HasDependentsError,
    NotFoundError,
)
from tasksched.logger import get_logger
from tasksched.models import Dependency, DependencyType

from .config import GanttConfig, SchedulingConfig
from .core import CriticalPathAnalysis, GanttProjection, ScheduleMetrics
from .critical_path import CriticalPathAnalyzer
from .cycles import find_cycle, would_create_cycle
from .gantt import GanttProjector
from .graph import TaskGraph

if TYPE_CHECKING:
    from .protocols import TaskStore

logger = get_logger()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _LockEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


# Shared by every ScheduleService in the process, keyed by project ID.
# Entries live only while some writer holds or waits for them.
_project_locks: dict[str, _LockEntry] = {}
_project_locks_guard = threading.Lock()


@contextmanager
def _project_lock(project_id: str) -> Iterator[None]:
    with _project_locks_guard:
        entry = _project_locks.setdefault(project_id, _LockEntry())
        entry.users += 1
    try:
        with entry.lock:
            yield
    finally:
        with _project_locks_guard:
            entry.users -= 1
            if entry.users == 0:
                del _project_locks[project_id]


def _round_half_up(value: float, precision: int) -> float:
    quantum = Decimal(1).scaleb(-precision)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


class ScheduleService:
    """Orchestrates the scheduler components over a Task Store.

    This service coordinates:
    - CycleGuard (in-memory check before a dependency is written)
    - CriticalPathAnalyzer (CPM metrics and project duration)
    - GanttProjector (bars and links for renderers)

    Nothing is cached between calls: every read reloads tasks and
    dependencies and builds a fresh TaskGraph. Writes are serialized per
    project across all services in the process, and under the store's own
    write lock, so a cycle check and the insert it guards are atomic with
    respect to other writers.
    """

    def __init__(
        self,
        store: TaskStore,
        config: SchedulingConfig | None = None,
        gantt_config: GanttConfig | None = None,
        *,
        current_date: date | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the service.

        Args:
            store: Task Store collaborator
            config: Optional scheduling configuration
            gantt_config: Optional Gantt projection configuration
            current_date: Fixed anchor date for date rendering (defaults to
                the clock's date on every call)
            clock: Source of the analysis timestamp (defaults to UTC now)
        """
        self.store = store
        self.config = config or SchedulingConfig()
        self.gantt_config = gantt_config or GanttConfig()
        self.current_date = current_date
        self._clock = clock or _utc_now
        self.analyzer = CriticalPathAnalyzer(self.config)
        self.projector = GanttProjector(self.gantt_config)

    @contextmanager
    def _write_lock(self, project_id: str) -> Iterator[None]:
        """Hold the process-wide project lock and the store's write lock."""
        with _project_lock(project_id), self.store.write_lock(project_id):
            yield

    def _anchor_date(self, as_of: date | None) -> date:
        if as_of is not None:
            return as_of
        if self.current_date is not None:
            return self.current_date
        return self._clock().date()

    def _load_graph(self, project_id: str) -> TaskGraph:
        tasks = self.store.list_tasks(project_id)
        dependencies = self.store.list_dependencies(project_id)
        logger.debug(
            f"Loaded project '{project_id}': {len(tasks)} tasks, {len(dependencies)} dependencies"
        )
        return TaskGraph(tasks, dependencies)

    # Writes

    def create_dependency(  # noqa: PLR0913 - mirrors the caller-facing operation
        self,
        project_id: str,
        predecessor_id: str,
        successor_id: str,
        dep_type: DependencyType | str = DependencyType.FS,
        lag_days: int = 0,
    ) -> Dependency:
        """Validate and persist a new dependency.

        Returns:
            The dependency as written to the store

        Raises:
            CyclicDependencyError: If the edge is a self-loop or closes a cycle
            NotFoundError: If either task is not part of the project
            ValidationError: If the dependency type is unknown
            DuplicateDependencyError: If the two tasks are already linked
        """
        if predecessor_id == successor_id:
            raise CyclicDependencyError(
                f"Task '{predecessor_id}' cannot depend on itself",
                cycle=[predecessor_id, predecessor_id],
            )

        kind = DependencyType.coerce(dep_type)

        with self._write_lock(project_id):
            task_ids = {task.id for task in self.store.list_tasks(project_id)}
            for task_id in (predecessor_id, successor_id):
                if task_id not in task_ids:
                    raise NotFoundError(f"Task not found in project '{project_id}': {task_id}")

            existing = self.store.list_dependencies(project_id)
            candidate = Dependency(
                predecessor_id=predecessor_id,
                successor_id=successor_id,
                type=kind.value,
                lag_days=int(lag_days),
                id=str(uuid4()),
            )

            if any(dep.key == candidate.key for dep in existing):
                raise DuplicateDependencyError(
                    f"Dependency already exists: {predecessor_id} -> {successor_id}"
                )

            if would_create_cycle(existing, candidate):
                cycle = find_cycle([*existing, candidate]) or []
                raise CyclicDependencyError(
                    f"Dependency {predecessor_id} -> {successor_id} would create a circular "
                    f"reference: {' -> '.join(cycle)}",
                    cycle=cycle,
                )

            self.store.insert_dependency(candidate)

        logger.changes(f"Created dependency {candidate} in project '{project_id}'")
        return candidate

    def delete_dependency(self, predecessor_id: str, successor_id: str) -> None:
        """Remove a dependency; removing an edge can never introduce a cycle.

        Raises:
            NotFoundError: If the predecessor task or the dependency does not exist
        """
        project_id = self.store.get_task(predecessor_id).project_id
        with self._write_lock(project_id):
            self.store.delete_dependency(predecessor_id, successor_id)
        logger.changes(f"Removed dependency {predecessor_id} -> {successor_id}")

    def delete_task(self, task_id: str) -> None:
        """Delete a task that has no incident dependencies.

        Raises:
            NotFoundError: If the task does not exist
            HasDependentsError: If any dependency references the task
        """
        project_id = self.store.get_task(task_id).project_id
        with self._write_lock(project_id):
            incident = [
                dep for dep in self.store.list_dependencies(project_id) if dep.touches(task_id)
            ]
            if incident:
                raise HasDependentsError(
                    f"Cannot delete task '{task_id}': it has {len(incident)} "
                    f"dependenc{'y' if len(incident) == 1 else 'ies'} "
                    f"({', '.join(str(dep) for dep in incident)})",
                    dependencies=incident,
                )
            self.store.delete_task(task_id)
        logger.changes(f"Deleted task '{task_id}' from project '{project_id}'")

    def recompute_project_progress(self, project_id: str) -> float | None:
        """Roll task completion up to the project record.

        Each task is weighted by its estimated hours (1 when unset or zero).
        The result is rounded half up to ``progress_precision`` decimals.

        Returns:
            The percentage written, or None if the project has no tasks
        """
        with self._write_lock(project_id):
            tasks = self.store.list_tasks(project_id)
            if not tasks:
                logger.checks(f"Project '{project_id}' has no tasks; progress left unchanged")
                return None

            total_weight = sum(task.progress_weight for task in tasks)
            weighted = sum(task.progress_weight * task.percent_complete for task in tasks)
            percent = weighted / total_weight if total_weight > 0 else 0.0
            percent = _round_half_up(percent, self.config.progress_precision)

            self.store.update_project_progress(project_id, percent)

        logger.changes(f"Project '{project_id}' progress set to {percent}%")
        return percent

    # Reads

    def get_critical_path(
        self, project_id: str, *, as_of: date | None = None
    ) -> CriticalPathAnalysis:
        """Compute the critical path from fresh store data.

        Args:
            project_id: Project to analyze
            as_of: Calendar date of day zero (defaults to current_date or today)
        """
        graph = self._load_graph(project_id)
        return self.analyzer.analyze(
            graph,
            project_id,
            anchor_date=self._anchor_date(as_of),
            analysis_time=self._clock(),
        )

    def get_schedule_metrics(self, project_id: str) -> list[ScheduleMetrics]:
        """CPM metrics for every task of the project, critical or not."""
        return self.analyzer.compute_metrics(self._load_graph(project_id))

    def get_gantt_data(self, project_id: str, *, as_of: date | None = None) -> GanttProjection:
        """Project the task graph into Gantt bars and links."""
        graph = self._load_graph(project_id)
        return self.projector.project(graph, today=self._anchor_date(as_of))
