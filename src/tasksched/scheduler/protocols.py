"""Protocol definitions for the scheduling system."""

from contextlib import AbstractContextManager
from typing import Protocol

from tasksched.models import Dependency, Task


class TaskStore(Protocol):
    """Persistence collaborator holding tasks, dependencies and project progress.

    Implementations own their I/O; their exceptions (timeouts, connection
    errors) propagate to ScheduleService callers unchanged.
    """

    def write_lock(self, project_id: str) -> AbstractContextManager[None]:
        """Exclusive access to the project's backing storage.

        ScheduleService holds this across a validation and the write it
        guards. Stores shared with other processes must lock the storage
        and refresh their state from it on entry.
        """
        ...

    def list_tasks(self, project_id: str) -> list[Task]:
        """Return the project's tasks in a stable order."""
        ...

    def get_task(self, task_id: str) -> Task:
        """Return one task.

        Raises:
            NotFoundError: If no task has this ID
        """
        ...

    def list_dependencies(self, project_id: str) -> list[Dependency]:
        """Return the project's dependencies in a stable order."""
        ...

    def insert_dependency(self, dependency: Dependency) -> None:
        """Persist a new dependency."""
        ...

    def delete_dependency(self, predecessor_id: str, successor_id: str) -> None:
        """Remove the dependency between two tasks.

        Raises:
            NotFoundError: If no such dependency exists
        """
        ...

    def update_project_progress(self, project_id: str, percent: float) -> None:
        """Write the rolled-up completion percentage onto the project record."""
        ...

    def delete_task(self, task_id: str) -> None:
        """Remove a task.

        Raises:
            NotFoundError: If no task has this ID
        """
        ...
