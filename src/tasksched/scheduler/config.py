"""Configuration classes for the scheduling system."""

from enum import Enum

from pydantic import BaseModel, Field


class RelationshipMode(str, Enum):
    """How dependency types and lags enter the CPM arithmetic."""

    FINISH_TO_START = "finish_to_start"  # Every edge is FS with zero lag
    TYPED = "typed"  # Honor FS/SS/FF/SF and lag_days


class TerminalAnchor(str, Enum):
    """Where the backward pass anchors tasks without successors."""

    PROJECT_FINISH = "project_finish"  # Late finish = project duration
    OWN_FINISH = "own_finish"  # Late finish = the task's own early finish


class SchedulingConfig(BaseModel):
    """Configuration for critical path analysis and progress roll-up."""

    relationship_mode: RelationshipMode = RelationshipMode.FINISH_TO_START
    terminal_anchor: TerminalAnchor = TerminalAnchor.PROJECT_FINISH
    progress_precision: int = Field(default=2, ge=0, le=6)


class GanttConfig(BaseModel):
    """Configuration for the Gantt projection."""

    open_bars: bool = True  # Value of the "open" flag on every bar
