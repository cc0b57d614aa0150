"""Task Store backed by a single project YAML file."""

from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from filelock import FileLock
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from tasksched.loader import load_project
from tasksched.logger import get_logger
from tasksched.models import Dependency, Task

from .memory import InMemoryTaskStore

logger = get_logger()

LOCK_SUFFIX = ".lock"


class YamlFileTaskStore(InMemoryTaskStore):
    """TaskStore for one project file.

    Reads go through the validating loader and pick up changes other
    writers made to the file since it was last read. Every mutation runs
    under an exclusive lock on ``<file>.lock``: the file is reloaded, the
    change applied, and the result written back with ruamel.yaml
    round-tripping so comments, key order and the layout of untouched
    entries survive. The file is replaced atomically, so readers never see
    a partial write.
    """

    def __init__(self, path: Path | str):
        super().__init__()
        self.path = Path(path)
        self._file_lock = FileLock(f"{self.path}{LOCK_SUFFIX}")
        self._signature: tuple[int, int] | None = None
        self.project_id = ""
        self._reload()

    def _file_signature(self) -> tuple[int, int] | None:
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_mtime_ns, stat.st_size)

    def _reload(self) -> None:
        """Replace the in-memory state with the file's current content."""
        signature = self._file_signature()
        project_data = load_project(self.path)
        self.clear()
        self.load(project_data)
        self.project_id = project_data.project.id
        self._signature = signature
        logger.debug(f"Loaded project file {self.path}")

    def _refresh(self) -> None:
        if self._file_signature() != self._signature:
            self._reload()

    @contextmanager
    def write_lock(self, project_id: str) -> Iterator[None]:
        """Hold the file lock with the state freshly loaded from disk."""
        with self._file_lock:
            self._reload()
            yield

    # Reads

    def list_tasks(self, project_id: str) -> list[Task]:
        self._refresh()
        return super().list_tasks(project_id)

    def get_task(self, task_id: str) -> Task:
        self._refresh()
        return super().get_task(task_id)

    def list_dependencies(self, project_id: str) -> list[Dependency]:
        self._refresh()
        return super().list_dependencies(project_id)

    # Writes

    def insert_dependency(self, dependency: Dependency) -> None:
        with self._file_lock:
            self._reload()
            super().insert_dependency(dependency)
            self._write()

    def delete_dependency(self, predecessor_id: str, successor_id: str) -> None:
        with self._file_lock:
            self._reload()
            super().delete_dependency(predecessor_id, successor_id)
            self._write()

    def update_project_progress(self, project_id: str, percent: float) -> None:
        with self._file_lock:
            self._reload()
            super().update_project_progress(project_id, percent)
            self._write()

    def delete_task(self, task_id: str) -> None:
        with self._file_lock:
            self._reload()
            super().delete_task(task_id)
            self._write()

    def _write(self) -> None:
        """Synchronize the file with the in-memory state (file lock held)."""
        yaml_rt = YAML()
        yaml_rt.preserve_quotes = True  # type: ignore[assignment]

        with self.path.open(encoding="utf-8") as f:
            data: Any = yaml_rt.load(f)  # type: ignore[no-untyped-call]

        data["project"]["progress"] = self.get_project(self.project_id).progress

        tasks_section = data.get("tasks")
        if tasks_section:
            for key in list(tasks_section):
                if str(key) not in self._tasks:
                    del tasks_section[key]
                    continue
                entry = tasks_section[key]
                if entry and "parent" in entry and self._tasks[str(key)].parent_id is None:
                    del entry["parent"]

        self._write_dependencies(data)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml_rt.dump(data, f)  # type: ignore[no-untyped-call]
            shutil.copymode(self.path, tmp_name)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        self._signature = self._file_signature()
        logger.debug(f"Wrote project file {self.path}")

    def _write_dependencies(self, data: Any) -> None:
        """Drop removed entries in place and append new ones."""
        current = {dep.key: dep for dep in super().list_dependencies(self.project_id)}

        if data.get("dependencies") is None:
            data["dependencies"] = []
        section = data["dependencies"]

        written: set[tuple[str, str]] = set()
        for index in reversed(range(len(section))):
            entry = section[index]
            key = (str(entry.get("from")), str(entry.get("to")))
            if key in current:
                written.add(key)
            else:
                del section[index]

        for key, dep in current.items():
            if key in written:
                continue
            entry = CommentedMap()
            entry["from"] = dep.predecessor_id
            entry["to"] = dep.successor_id
            entry["type"] = dep.type
            entry["lag"] = dep.lag_days
            if dep.id:
                entry["id"] = dep.id
            section.append(entry)
