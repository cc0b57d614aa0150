"""Scheduler package - task dependency graph, CPM analysis and Gantt projection.

Main entry points:
- ScheduleService: Orchestrator over a TaskStore (the only component doing I/O)
- TaskGraph: Read-only view of one project's tasks and dependencies
- CriticalPathAnalyzer: Forward/backward pass producing float and critical tasks
- GanttProjector: Bars and links for chart renderers
- would_create_cycle / find_cycle: In-memory cycle detection

Configuration:
- SchedulingConfig: Relationship mode, terminal anchoring, progress precision
- GanttConfig: Projection options
"""

from .config import GanttConfig, RelationshipMode, SchedulingConfig, TerminalAnchor
from .core import (
    CriticalPathAnalysis,
    CriticalPathTask,
    GanttBar,
    GanttLink,
    GanttProjection,
    ScheduleMetrics,
)
from .critical_path import CriticalPathAnalyzer
from .cycles import find_cycle, would_create_cycle
from .gantt import GanttProjector, link_type_code
from .graph import TaskGraph
from .protocols import TaskStore
from .service import ScheduleService

__all__ = [
    # Core dataclasses
    "ScheduleMetrics",
    "CriticalPathTask",
    "CriticalPathAnalysis",
    "GanttBar",
    "GanttLink",
    "GanttProjection",
    # Configuration
    "SchedulingConfig",
    "GanttConfig",
    "RelationshipMode",
    "TerminalAnchor",
    # Components
    "TaskGraph",
    "CriticalPathAnalyzer",
    "GanttProjector",
    "link_type_code",
    "would_create_cycle",
    "find_cycle",
    # Protocols
    "TaskStore",
    # High-level service
    "ScheduleService",
]
