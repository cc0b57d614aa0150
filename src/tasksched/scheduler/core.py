"""Core dataclasses for schedule analysis results."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any


def _offset_date(anchor: date, days: int) -> str:
    """Render a day offset from the anchor as a YYYY-MM-DD string."""
    return (anchor + timedelta(days=days)).isoformat()


@dataclass(frozen=True)
class ScheduleMetrics:
    """CPM metrics for one task, as integer day offsets from the project start."""

    task_id: str
    task_name: str
    duration: int
    early_start: int
    early_finish: int
    late_start: int
    late_finish: int

    @property
    def total_float(self) -> int:
        """Days the task can slip without delaying the project."""
        return self.late_start - self.early_start

    @property
    def is_critical(self) -> bool:
        return self.total_float == 0


@dataclass(frozen=True)
class CriticalPathTask:
    """A task on the critical path with its metrics rendered as calendar dates."""

    task_id: str
    task_name: str
    duration: int
    early_start: str
    early_finish: str
    late_start: str
    late_finish: str
    total_float: int
    is_critical: bool

    @classmethod
    def from_metrics(cls, metrics: ScheduleMetrics, anchor_date: date) -> "CriticalPathTask":
        """Render metrics relative to the anchor date."""
        return cls(
            task_id=metrics.task_id,
            task_name=metrics.task_name,
            duration=metrics.duration,
            early_start=_offset_date(anchor_date, metrics.early_start),
            early_finish=_offset_date(anchor_date, metrics.early_finish),
            late_start=_offset_date(anchor_date, metrics.late_start),
            late_finish=_offset_date(anchor_date, metrics.late_finish),
            total_float=metrics.total_float,
            is_critical=metrics.is_critical,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the caller-facing field names."""
        return {
            "taskId": self.task_id,
            "taskName": self.task_name,
            "duration": self.duration,
            "earlyStart": self.early_start,
            "earlyFinish": self.early_finish,
            "lateStart": self.late_start,
            "lateFinish": self.late_finish,
            "totalFloat": self.total_float,
            "isCritical": self.is_critical,
        }


@dataclass(frozen=True)
class CriticalPathAnalysis:
    """Result of a critical path analysis for one project."""

    project_id: str
    critical_path: list[CriticalPathTask]
    project_duration: int
    analysis_date: datetime
    anchor_date: date

    def to_dict(self) -> dict[str, Any]:
        """Convert to the caller-facing shape."""
        return {
            "projectId": self.project_id,
            "criticalPath": [task.to_dict() for task in self.critical_path],
            "projectDuration": self.project_duration,
            "analysisDate": self.analysis_date.isoformat(),
        }


@dataclass(frozen=True)
class GanttBar:
    """A presentation bar for one task."""

    id: str
    text: str
    start_date: str
    end_date: str
    duration: int
    progress: float  # 0..1
    type: str  # "project" | "task" | "milestone"
    parent: str | None = None
    open: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to renderer fields; parent is omitted for top-level bars."""
        result: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "duration": self.duration,
            "progress": self.progress,
        }
        if self.parent is not None:
            result["parent"] = self.parent
        result["type"] = self.type
        result["open"] = self.open
        return result


@dataclass(frozen=True)
class GanttLink:
    """A presentation link for one dependency."""

    id: str
    source: str
    target: str
    type: str  # "0"=FS, "1"=SS, "2"=FF, "3"=SF
    lag: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.type,
            "lag": self.lag,
        }


def _default_bars() -> list[GanttBar]:
    return []


def _default_links() -> list[GanttLink]:
    return []


@dataclass
class GanttProjection:
    """Bars and links of a project, ready for a chart renderer."""

    tasks: list[GanttBar] = field(default_factory=_default_bars)
    links: list[GanttLink] = field(default_factory=_default_links)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tasks": [bar.to_dict() for bar in self.tasks],
            "links": [link.to_dict() for link in self.links],
        }
