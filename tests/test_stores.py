"""Tests for the Task Store implementations."""

from collections.abc import Callable
from pathlib import Path

import pytest
import yaml
from filelock import FileLock, Timeout

from tasksched.exceptions import NotFoundError, ParseError, ValidationError
from tasksched.models import Dependency, Project, ProjectData, Task
from tasksched.stores import InMemoryTaskStore, YamlFileTaskStore
from tests.conftest import PROJECT_ID, dep, task

StoreFactory = Callable[..., InMemoryTaskStore]

PROJECT_YAML = """\
# Release plan
project:
  id: release
  name: Release 2.0
  progress: 0

tasks:
  plan:
    name: Plan
    duration: 2
    percent_complete: 100
  build:
    name: Build  # the long one
    duration: 5
    percent_complete: 20
  ship:
    name: Ship
    duration: 1
  notes:
    name: Notes

dependencies:
  - from: plan
    to: build
  # keep this edge
  - from: build
    to: ship
    type: FS
    lag: 1
"""


@pytest.fixture
def project_file(tmp_path: Path) -> Path:
    path = tmp_path / "release.yaml"
    path.write_text(PROJECT_YAML, encoding="utf-8")
    return path


class TestInMemoryTaskStore:
    """Test the dictionary-backed store."""

    def test_lists_tasks_by_project(self) -> None:
        store = InMemoryTaskStore()
        store.add_project(Project(id="p1"))
        store.add_project(Project(id="p2"))
        store.add_task(Task(id="a", project_id="p1", name="A"))
        store.add_task(Task(id="b", project_id="p2", name="B"))

        assert [t.id for t in store.list_tasks("p1")] == ["a"]
        assert [t.id for t in store.list_tasks("p2")] == ["b"]

    def test_dependencies_belong_to_predecessor_project(self) -> None:
        store = InMemoryTaskStore()
        store.add_project(Project(id="p1"))
        store.add_project(Project(id="p2"))
        store.add_task(Task(id="a", project_id="p1", name="A"))
        store.add_task(Task(id="b", project_id="p1", name="B"))
        store.add_task(Task(id="x", project_id="p2", name="X"))
        store.insert_dependency(dep("a", "b"))

        assert [d.key for d in store.list_dependencies("p1")] == [("a", "b")]
        assert store.list_dependencies("p2") == []

    def test_unknown_project(self) -> None:
        store = InMemoryTaskStore()
        with pytest.raises(NotFoundError, match="Project not found: p"):
            store.list_tasks("p")
        with pytest.raises(NotFoundError):
            store.list_dependencies("p")

    def test_add_task_requires_project(self) -> None:
        with pytest.raises(NotFoundError):
            InMemoryTaskStore().add_task(task("a"))

    def test_duplicate_ids_rejected(self, make_store: StoreFactory) -> None:
        store = make_store([task("a")])
        with pytest.raises(ValidationError, match="Task already exists: a"):
            store.add_task(task("a"))
        with pytest.raises(ValidationError, match="Project already exists"):
            store.add_project(Project(id=PROJECT_ID))

    def test_get_task(self, make_store: StoreFactory) -> None:
        store = make_store([task("a", 3)])
        assert store.get_task("a").duration == 3
        with pytest.raises(NotFoundError, match="Task not found: zz"):
            store.get_task("zz")

    def test_delete_dependency(self, make_store: StoreFactory) -> None:
        store = make_store([task("a"), task("b")], [dep("a", "b")])
        store.delete_dependency("a", "b")
        assert store.list_dependencies(PROJECT_ID) == []
        with pytest.raises(NotFoundError):
            store.delete_dependency("a", "b")

    def test_delete_task(self, make_store: StoreFactory) -> None:
        store = make_store([task("a")])
        store.delete_task("a")
        assert store.list_tasks(PROJECT_ID) == []
        with pytest.raises(NotFoundError):
            store.delete_task("a")

    def test_delete_task_detaches_children(self, make_store: StoreFactory) -> None:
        store = make_store([task("phase"), task("a", parent_id="phase")])
        store.delete_task("phase")
        assert store.get_task("a").parent_id is None

    def test_update_project_progress(self, make_store: StoreFactory) -> None:
        store = make_store()
        store.update_project_progress(PROJECT_ID, 12.5)
        assert store.get_project(PROJECT_ID).progress == 12.5

    def test_from_project_data(self) -> None:
        data = ProjectData(
            project=Project(id="p"),
            tasks=[Task(id="a", project_id="p", name="A"), Task(id="b", project_id="p", name="B")],
            dependencies=[Dependency(predecessor_id="a", successor_id="b")],
        )
        store = InMemoryTaskStore.from_project_data(data)

        assert len(store.list_tasks("p")) == 2
        assert len(store.list_dependencies("p")) == 1


class TestYamlFileTaskStore:
    """Test the YAML-file-backed store."""

    def test_loads_project(self, project_file: Path) -> None:
        store = YamlFileTaskStore(project_file)

        assert store.project_id == "release"
        assert [t.id for t in store.list_tasks("release")] == ["plan", "build", "ship", "notes"]
        deps = store.list_dependencies("release")
        assert [d.key for d in deps] == [("plan", "build"), ("build", "ship")]
        assert deps[1].lag_days == 1

    def test_insert_dependency_appends_entry(self, project_file: Path) -> None:
        store = YamlFileTaskStore(project_file)
        store.insert_dependency(
            Dependency(predecessor_id="plan", successor_id="notes", type="SS", id="d-1")
        )

        data = yaml.safe_load(project_file.read_text(encoding="utf-8"))
        assert data["dependencies"][-1] == {
            "from": "plan",
            "to": "notes",
            "type": "SS",
            "lag": 0,
            "id": "d-1",
        }
        assert len(data["dependencies"]) == 3

    def test_writes_preserve_comments(self, project_file: Path) -> None:
        store = YamlFileTaskStore(project_file)
        store.insert_dependency(dep("plan", "notes"))

        text = project_file.read_text(encoding="utf-8")
        assert "# Release plan" in text
        assert "# the long one" in text

    def test_delete_dependency_removes_entry(self, project_file: Path) -> None:
        store = YamlFileTaskStore(project_file)
        store.delete_dependency("plan", "build")

        data = yaml.safe_load(project_file.read_text(encoding="utf-8"))
        assert data["dependencies"] == [{"from": "build", "to": "ship", "type": "FS", "lag": 1}]

    def test_delete_task_removes_entry(self, project_file: Path) -> None:
        store = YamlFileTaskStore(project_file)
        store.delete_task("notes")

        data = yaml.safe_load(project_file.read_text(encoding="utf-8"))
        assert list(data["tasks"]) == ["plan", "build", "ship"]

    def test_delete_parent_task_keeps_file_loadable(self, tmp_path: Path) -> None:
        path = tmp_path / "phases.yaml"
        path.write_text(
            "project:\n  id: p\ntasks:\n  phase:\n    name: Phase\n"
            "  a:\n    name: A\n    parent: phase\n",
            encoding="utf-8",
        )
        YamlFileTaskStore(path).delete_task("phase")

        reloaded = YamlFileTaskStore(path)
        assert reloaded.get_task("a").parent_id is None

    def test_update_progress_written(self, project_file: Path) -> None:
        store = YamlFileTaskStore(project_file)
        store.update_project_progress("release", 37.5)

        data = yaml.safe_load(project_file.read_text(encoding="utf-8"))
        assert data["project"]["progress"] == 37.5
        assert data["project"]["name"] == "Release 2.0"

    def test_changes_survive_reload(self, project_file: Path) -> None:
        store = YamlFileTaskStore(project_file)
        store.delete_dependency("build", "ship")
        store.insert_dependency(dep("ship", "notes", "FF", -1))

        reloaded = YamlFileTaskStore(project_file)
        deps = reloaded.list_dependencies("release")
        assert [d.key for d in deps] == [("plan", "build"), ("ship", "notes")]
        assert deps[1].type == "FF"
        assert deps[1].lag_days == -1

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ParseError, match="File not found"):
            YamlFileTaskStore(tmp_path / "missing.yaml")

    def test_sees_writes_from_another_store(self, project_file: Path) -> None:
        first = YamlFileTaskStore(project_file)
        second = YamlFileTaskStore(project_file)

        second.insert_dependency(dep("ship", "notes"))

        keys = [d.key for d in first.list_dependencies("release")]
        assert keys == [("plan", "build"), ("build", "ship"), ("ship", "notes")]

    def test_write_keeps_edges_added_by_another_store(self, project_file: Path) -> None:
        first = YamlFileTaskStore(project_file)
        second = YamlFileTaskStore(project_file)

        first.insert_dependency(dep("plan", "notes"))
        second.insert_dependency(dep("ship", "notes"))

        data = yaml.safe_load(project_file.read_text(encoding="utf-8"))
        pairs = [(d["from"], d["to"]) for d in data["dependencies"]]
        assert pairs == [
            ("plan", "build"),
            ("build", "ship"),
            ("plan", "notes"),
            ("ship", "notes"),
        ]

    def test_write_lock_reloads_file(self, project_file: Path) -> None:
        store = YamlFileTaskStore(project_file)
        YamlFileTaskStore(project_file).delete_dependency("plan", "build")

        with store.write_lock("release"):
            cached = InMemoryTaskStore.list_dependencies(store, "release")
            assert [d.key for d in cached] == [("build", "ship")]

    def test_write_lock_excludes_other_writers(self, project_file: Path) -> None:
        store = YamlFileTaskStore(project_file)
        other = FileLock(f"{project_file}.lock", timeout=0)

        with store.write_lock("release"), pytest.raises(Timeout):
            other.acquire()

        with other:
            assert other.is_locked

    def test_write_replaces_file_without_leftovers(self, project_file: Path) -> None:
        store = YamlFileTaskStore(project_file)
        store.insert_dependency(dep("plan", "notes"))

        leftovers = [p.name for p in project_file.parent.iterdir() if p.suffix == ".tmp"]
        assert leftovers == []
