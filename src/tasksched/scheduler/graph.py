"""In-memory task graph for one project."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from tasksched.exceptions import NotFoundError
from tasksched.models import Dependency, Task


class TaskGraph:
    """Read-only view of a project's tasks and precedence edges.

    Tasks are addressed internally by their position in the input sequence,
    with parallel adjacency lists per index. A new graph is built for every
    request; there are no mutation methods.

    Dependencies whose endpoints are not both in the task set are kept in
    ``dependencies`` (so callers can report them) but are not indexed.
    """

    def __init__(self, tasks: Sequence[Task], dependencies: Sequence[Dependency]):
        self._tasks: tuple[Task, ...] = tuple(tasks)
        self._dependencies: tuple[Dependency, ...] = tuple(dependencies)
        self._index: dict[str, int] = {task.id: i for i, task in enumerate(self._tasks)}
        self._outgoing: list[list[Dependency]] = [[] for _ in self._tasks]
        self._incoming: list[list[Dependency]] = [[] for _ in self._tasks]
        self._dangling: list[Dependency] = []

        for dep in self._dependencies:
            pred = self._index.get(dep.predecessor_id)
            succ = self._index.get(dep.successor_id)
            if pred is None or succ is None:
                self._dangling.append(dep)
                continue
            self._outgoing[pred].append(dep)
            self._incoming[succ].append(dep)

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    @property
    def dependencies(self) -> tuple[Dependency, ...]:
        return self._dependencies

    @property
    def dangling_dependencies(self) -> list[Dependency]:
        """Dependencies referencing a task outside this graph."""
        return list(self._dangling)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks)

    def has_task(self, task_id: str) -> bool:
        return task_id in self._index

    def index_of(self, task_id: str) -> int:
        """Position of a task in the input order.

        Raises:
            NotFoundError: If the task is not part of the graph
        """
        try:
            return self._index[task_id]
        except KeyError:
            raise NotFoundError(f"Task not found: {task_id}") from None

    def get_task(self, task_id: str) -> Task:
        """Look up a task by ID.

        Raises:
            NotFoundError: If the task is not part of the graph
        """
        return self._tasks[self.index_of(task_id)]

    def successors_of(self, task_id: str) -> list[Dependency]:
        """Dependencies whose predecessor is the given task."""
        return list(self._outgoing[self.index_of(task_id)])

    def predecessors_of(self, task_id: str) -> list[Dependency]:
        """Dependencies whose successor is the given task."""
        return list(self._incoming[self.index_of(task_id)])
