"""Critical Path Method analysis over a task graph."""

from __future__ import annotations

from collections import deque
from datetime import date, datetime

from tasksched.exceptions import ScheduleError
from tasksched.logger import debug_enabled, get_logger
from tasksched.models import Dependency, DependencyType

from .config import RelationshipMode, SchedulingConfig, TerminalAnchor
from .core import CriticalPathAnalysis, CriticalPathTask, ScheduleMetrics
from .cycles import find_cycle
from .graph import TaskGraph

logger = get_logger()

# (other task index, dependency) pairs per task index
EdgeLists = list[list[tuple[int, Dependency]]]


def _relationship(dep: Dependency) -> DependencyType:
    """Relationship used in the arithmetic; unknown stored types act as FS."""
    try:
        return DependencyType(dep.type.strip().upper())
    except (ValueError, AttributeError):
        return DependencyType.FS


class CriticalPathAnalyzer:
    """Forward/backward pass scheduler producing CPM metrics.

    The analyzer processes tasks in topological order (Kahn's algorithm), so
    a cycle that slipped past the write-time check is reported as a
    ScheduleError instead of looping.
    """

    def __init__(self, config: SchedulingConfig | None = None):
        """Initialize the analyzer.

        Args:
            config: Optional scheduling configuration (relationship mode and
                terminal anchoring)
        """
        self.config = config or SchedulingConfig()

    def analyze(
        self,
        graph: TaskGraph,
        project_id: str,
        *,
        anchor_date: date,
        analysis_time: datetime,
    ) -> CriticalPathAnalysis:
        """Compute the critical path of a project.

        Args:
            graph: Tasks and dependencies of the project
            project_id: Project the graph belongs to
            anchor_date: Calendar date of day offset zero
            analysis_time: Timestamp reported as the analysis date

        Returns:
            CriticalPathAnalysis containing only the critical tasks
        """
        metrics = self.compute_metrics(graph)
        project_duration = max((m.early_finish for m in metrics), default=0)
        critical = [
            CriticalPathTask.from_metrics(m, anchor_date) for m in metrics if m.is_critical
        ]

        logger.checks(
            f"Critical path for project '{project_id}': {project_duration} days, "
            f"{len(critical)} of {len(metrics)} tasks critical"
        )

        return CriticalPathAnalysis(
            project_id=project_id,
            critical_path=critical,
            project_duration=project_duration,
            analysis_date=analysis_time,
            anchor_date=anchor_date,
        )

    def compute_metrics(self, graph: TaskGraph) -> list[ScheduleMetrics]:
        """Run both passes and return metrics for every task, in input order.

        Raises:
            ScheduleError: If a dependency references a task outside the graph
                or the dependencies form a cycle
        """
        if not len(graph):
            return []

        self._check_references(graph)
        incoming, outgoing = self._edge_lists(graph)
        order = self._topological_order(graph, incoming, outgoing)
        durations = [task.effective_duration for task in graph.tasks]

        early_start, early_finish = self._forward_pass(order, incoming, durations)
        project_duration = max(early_finish)
        late_start, late_finish = self._backward_pass(
            order, outgoing, durations, early_finish, project_duration
        )

        metrics = [
            ScheduleMetrics(
                task_id=task.id,
                task_name=task.name,
                duration=durations[i],
                early_start=early_start[i],
                early_finish=early_finish[i],
                late_start=late_start[i],
                late_finish=late_finish[i],
            )
            for i, task in enumerate(graph.tasks)
        ]

        if debug_enabled():
            for m in metrics:
                logger.debug(
                    f"  {m.task_id}: ES={m.early_start} EF={m.early_finish} "
                    f"LS={m.late_start} LF={m.late_finish} float={m.total_float}"
                )

        return metrics

    def _check_references(self, graph: TaskGraph) -> None:
        dangling = graph.dangling_dependencies
        if dangling:
            missing = sorted(
                {
                    task_id
                    for dep in dangling
                    for task_id in dep.key
                    if not graph.has_task(task_id)
                }
            )
            raise ScheduleError(
                f"Dependencies reference tasks missing from the project: {', '.join(missing)}"
            )

    def _edge_lists(self, graph: TaskGraph) -> tuple[EdgeLists, EdgeLists]:
        """Index-based predecessor and successor lists."""
        incoming: EdgeLists = [[] for _ in graph.tasks]
        outgoing: EdgeLists = [[] for _ in graph.tasks]
        for dep in graph.dependencies:
            pred = graph.index_of(dep.predecessor_id)
            succ = graph.index_of(dep.successor_id)
            incoming[succ].append((pred, dep))
            outgoing[pred].append((succ, dep))
        return incoming, outgoing

    def _topological_order(
        self, graph: TaskGraph, incoming: EdgeLists, outgoing: EdgeLists
    ) -> list[int]:
        """Kahn's algorithm; ties are broken by input order.

        Raises:
            ScheduleError: If a cycle prevents a complete ordering
        """
        in_degree = [len(edges) for edges in incoming]
        queue = deque(i for i, degree in enumerate(in_degree) if degree == 0)
        order: list[int] = []

        while queue:
            current = queue.popleft()
            order.append(current)
            for succ, _ in outgoing[current]:
                in_degree[succ] -= 1
                if in_degree[succ] == 0:
                    queue.append(succ)

        if len(order) != len(graph):
            cycle = find_cycle(graph.dependencies)
            detail = " -> ".join(cycle) if cycle else "unknown"
            raise ScheduleError(f"Circular dependency detected in task graph: {detail}")

        return order

    def _earliest_start(self, dep: Dependency, pred_es: int, pred_ef: int, duration: int) -> int:
        """Earliest start a single predecessor allows for its successor."""
        if self.config.relationship_mode == RelationshipMode.FINISH_TO_START:
            return pred_ef

        kind = _relationship(dep)
        lag = dep.lag_days
        if kind == DependencyType.SS:
            return pred_es + lag
        if kind == DependencyType.FF:
            return pred_ef + lag - duration
        if kind == DependencyType.SF:
            return pred_es + lag - duration
        return pred_ef + lag

    def _latest_finish(self, dep: Dependency, succ_ls: int, succ_lf: int, duration: int) -> int:
        """Latest finish a single successor allows for its predecessor."""
        if self.config.relationship_mode == RelationshipMode.FINISH_TO_START:
            return succ_ls

        kind = _relationship(dep)
        lag = dep.lag_days
        if kind == DependencyType.SS:
            return succ_ls - lag + duration
        if kind == DependencyType.FF:
            return succ_lf - lag
        if kind == DependencyType.SF:
            return succ_lf - lag + duration
        return succ_ls - lag

    def _forward_pass(
        self, order: list[int], incoming: EdgeLists, durations: list[int]
    ) -> tuple[list[int], list[int]]:
        early_start = [0] * len(durations)
        early_finish = [0] * len(durations)

        for i in order:
            start = 0
            for pred, dep in incoming[i]:
                start = max(
                    start,
                    self._earliest_start(dep, early_start[pred], early_finish[pred], durations[i]),
                )
            early_start[i] = start
            early_finish[i] = start + durations[i]

        return early_start, early_finish

    def _backward_pass(  # noqa: PLR0913 - pass state is threaded explicitly
        self,
        order: list[int],
        outgoing: EdgeLists,
        durations: list[int],
        early_finish: list[int],
        project_duration: int,
    ) -> tuple[list[int], list[int]]:
        anchor_to_project = self.config.terminal_anchor == TerminalAnchor.PROJECT_FINISH
        late_start = [0] * len(durations)
        late_finish = [0] * len(durations)

        for i in reversed(order):
            if not outgoing[i]:
                finish = project_duration if anchor_to_project else early_finish[i]
            else:
                finish = min(
                    self._latest_finish(dep, late_start[succ], late_finish[succ], durations[i])
                    for succ, dep in outgoing[i]
                )
                if anchor_to_project:
                    finish = min(finish, project_duration)
            late_finish[i] = finish
            late_start[i] = finish - durations[i]

        return late_start, late_finish
