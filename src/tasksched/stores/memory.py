"""Dictionary-backed Task Store."""

from __future__ import annotations

from contextlib import AbstractContextManager, nullcontext
from dataclasses import replace

from tasksched.exceptions import NotFoundError, ValidationError
from tasksched.models import Dependency, Project, ProjectData, Task


class InMemoryTaskStore:
    """Reference TaskStore keeping projects, tasks and dependencies in memory.

    Dependencies belong to the project of their predecessor task.
    """

    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}
        self._tasks: dict[str, Task] = {}
        self._dependencies: list[Dependency] = []

    @classmethod
    def from_project_data(cls, project_data: ProjectData) -> InMemoryTaskStore:
        """Create a store holding one loaded project."""
        store = cls()
        store.load(project_data)
        return store

    def load(self, project_data: ProjectData) -> None:
        """Add a project with its tasks and dependencies."""
        self.add_project(project_data.project)
        for task in project_data.tasks:
            self.add_task(task)
        self._dependencies.extend(project_data.dependencies)

    def clear(self) -> None:
        """Drop all projects, tasks and dependencies."""
        self._projects.clear()
        self._tasks.clear()
        self._dependencies = []

    def add_project(self, project: Project) -> None:
        if project.id in self._projects:
            raise ValidationError(f"Project already exists: {project.id}")
        self._projects[project.id] = project

    def get_project(self, project_id: str) -> Project:
        try:
            return self._projects[project_id]
        except KeyError:
            raise NotFoundError(f"Project not found: {project_id}") from None

    def add_task(self, task: Task) -> None:
        """Add a task to an existing project."""
        self.get_project(task.project_id)
        if task.id in self._tasks:
            raise ValidationError(f"Task already exists: {task.id}")
        self._tasks[task.id] = task

    # TaskStore protocol

    def write_lock(self, project_id: str) -> AbstractContextManager[None]:
        # In-process writers are already serialized by ScheduleService
        return nullcontext()

    def list_tasks(self, project_id: str) -> list[Task]:
        self.get_project(project_id)
        return [task for task in self._tasks.values() if task.project_id == project_id]

    def get_task(self, task_id: str) -> Task:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise NotFoundError(f"Task not found: {task_id}") from None

    def list_dependencies(self, project_id: str) -> list[Dependency]:
        self.get_project(project_id)
        return [
            dep
            for dep in self._dependencies
            if (task := self._tasks.get(dep.predecessor_id)) and task.project_id == project_id
        ]

    def insert_dependency(self, dependency: Dependency) -> None:
        self._dependencies.append(dependency)

    def delete_dependency(self, predecessor_id: str, successor_id: str) -> None:
        remaining = [
            dep for dep in self._dependencies if dep.key != (predecessor_id, successor_id)
        ]
        if len(remaining) == len(self._dependencies):
            raise NotFoundError(f"Dependency not found: {predecessor_id} -> {successor_id}")
        self._dependencies = remaining

    def update_project_progress(self, project_id: str, percent: float) -> None:
        self.get_project(project_id).progress = percent

    def delete_task(self, task_id: str) -> None:
        """Delete a task; its children become top-level tasks."""
        if task_id not in self._tasks:
            raise NotFoundError(f"Task not found: {task_id}")
        del self._tasks[task_id]
        for child_id, child in list(self._tasks.items()):
            if child.parent_id == task_id:
                self._tasks[child_id] = replace(child, parent_id=None)
