"""Pydantic schemas for YAML project file validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _to_optional_str(v: Any) -> str | None:
    """Convert YAML scalars (dates, numbers) to strings."""
    if v is None:
        return None
    return str(v)


class TaskSchema(BaseModel):
    """Schema for one task entry under 'tasks'."""

    name: str
    duration: int | None = None
    start_date: str | None = None
    end_date: str | None = None
    expected_start_date: str | None = None
    expected_end_date: str | None = None
    percent_complete: int = Field(default=0, ge=0, le=100)
    estimated_hours: float | None = None
    parent: str | None = None
    milestone: bool = False

    @field_validator(
        "start_date",
        "end_date",
        "expected_start_date",
        "expected_end_date",
        "parent",
        mode="before",
    )
    @classmethod
    def coerce_to_string(cls, v: Any) -> str | None:
        """YAML parses 2025-01-06 as a date; keep the ISO string instead."""
        return _to_optional_str(v)


class DependencySchema(BaseModel):
    """Schema for one entry under 'dependencies'."""

    model_config = ConfigDict(populate_by_name=True)

    predecessor: str = Field(alias="from")
    successor: str = Field(alias="to")
    type: str | None = None  # Defaults to FS
    lag: int = 0
    id: str | None = None

    @field_validator("predecessor", "successor", "type", "id", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> str | None:
        """Task IDs may be written as bare numbers."""
        return _to_optional_str(v)


class ProjectSchema(BaseModel):
    """Schema for the 'project' section."""

    id: str
    name: str = ""
    progress: float = 0.0

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id_to_string(cls, v: Any) -> str:
        return str(v)


class ProjectFileSchema(BaseModel):
    """Schema for the entire project YAML file."""

    project: ProjectSchema
    tasks: dict[str, TaskSchema] = Field(default_factory=dict)
    dependencies: list[DependencySchema] = Field(default_factory=list)

    @field_validator("tasks", mode="before")
    @classmethod
    def coerce_task_keys(cls, v: Any) -> Any:
        """Task IDs may be written as bare numbers."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(key): value for key, value in v.items()}  # type: ignore[misc]
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> Any:
        if v is None:
            return []
        return v
