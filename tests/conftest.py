"""Pytest configuration and fixtures for tasksched tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timezone
from typing import Any

import pytest

from tasksched.logger import reset_logger
from tasksched.models import Dependency, Project, Task
from tasksched.scheduler import ScheduleService, SchedulingConfig, TaskGraph
from tasksched.stores import InMemoryTaskStore

PROJECT_ID = "proj"
AS_OF = date(2025, 1, 6)
ANALYSIS_TIME = datetime(2025, 1, 6, 9, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_logger() -> None:
    """Reset logger state before each test for isolation."""
    reset_logger()


def task(task_id: str, duration: int | None = 1, **kwargs: Any) -> Task:
    """Create a Task in the default test project.

    Example:
        task("a", 5, percent_complete=50)
    """
    kwargs.setdefault("project_id", PROJECT_ID)
    kwargs.setdefault("name", task_id.upper())
    return Task(id=task_id, duration=duration, **kwargs)


def dep(predecessor: str, successor: str, dep_type: str = "FS", lag: int = 0) -> Dependency:
    """Create a Dependency between two task IDs."""
    return Dependency(
        predecessor_id=predecessor, successor_id=successor, type=dep_type, lag_days=lag
    )


def chain(*task_ids: str) -> list[Dependency]:
    """Create finish-to-start dependencies linking the tasks in order."""
    return [dep(a, b) for a, b in zip(task_ids, task_ids[1:])]


def graph(tasks: list[Task], dependencies: list[Dependency] | None = None) -> TaskGraph:
    return TaskGraph(tasks, dependencies or [])


@pytest.fixture
def make_store() -> Callable[..., InMemoryTaskStore]:
    """Factory for an in-memory store holding the default test project."""

    def _make(
        tasks: list[Task] | None = None,
        dependencies: list[Dependency] | None = None,
    ) -> InMemoryTaskStore:
        store = InMemoryTaskStore()
        store.add_project(Project(id=PROJECT_ID, name="Test project"))
        for t in tasks or []:
            store.add_task(t)
        for d in dependencies or []:
            store.insert_dependency(d)
        return store

    return _make


@pytest.fixture
def make_service() -> Callable[..., ScheduleService]:
    """Factory for a ScheduleService with a fixed anchor date and clock."""

    def _make(
        store: InMemoryTaskStore, config: SchedulingConfig | None = None
    ) -> ScheduleService:
        return ScheduleService(
            store, config, current_date=AS_OF, clock=lambda: ANALYSIS_TIME
        )

    return _make
