"""Tests for the Gantt projection."""

import pytest

from tasksched.models import Dependency
from tasksched.scheduler import (
    CriticalPathAnalyzer,
    GanttConfig,
    GanttProjector,
    RelationshipMode,
    SchedulingConfig,
    link_type_code,
)
from tasksched.scheduler.gantt import bar_type
from tests.conftest import AS_OF, dep, graph, task


class TestLinkTypeCode:
    """Test dependency type to link code mapping."""

    @pytest.mark.parametrize(
        ("dep_type", "code"),
        [("FS", "0"), ("SS", "1"), ("FF", "2"), ("SF", "3"), ("ss", "1")],
    )
    def test_known_types(self, dep_type: str, code: str) -> None:
        assert link_type_code(dep_type) == code

    @pytest.mark.parametrize("dep_type", ["XX", "", None])
    def test_unknown_or_missing_type_maps_to_finish_to_start(self, dep_type: str | None) -> None:
        assert link_type_code(dep_type) == "0"


class TestBarType:
    """Test bar classification."""

    def test_milestone_wins(self) -> None:
        assert bar_type(task("m", is_milestone=True, parent_id="p")) == "milestone"

    def test_child_task(self) -> None:
        assert bar_type(task("t", parent_id="p")) == "task"

    def test_top_level_task_is_project_bar(self) -> None:
        assert bar_type(task("p")) == "project"


class TestGanttProjector:
    """Test building bars and links."""

    def test_bar_uses_explicit_dates(self) -> None:
        t = task(
            "a",
            3,
            start_date="2025-02-01",
            end_date="2025-02-04",
            expected_start_date="2025-03-01",
            expected_end_date="2025-03-04",
        )
        bar = GanttProjector().project(graph([t]), today=AS_OF).tasks[0]

        assert bar.start_date == "2025-02-01"
        assert bar.end_date == "2025-02-04"

    def test_bar_falls_back_to_expected_dates(self) -> None:
        t = task("a", expected_start_date="2025-03-01", expected_end_date="2025-03-04")
        bar = GanttProjector().project(graph([t]), today=AS_OF).tasks[0]

        assert bar.start_date == "2025-03-01"
        assert bar.end_date == "2025-03-04"

    def test_bar_falls_back_to_today(self) -> None:
        bar = GanttProjector().project(graph([task("a")]), today=AS_OF).tasks[0]

        assert bar.start_date == "2025-01-06"
        assert bar.end_date == "2025-01-06"

    def test_bar_fields(self) -> None:
        t = task("b", 4, name="Build", percent_complete=25, parent_id="a")
        bar = GanttProjector().project(graph([task("a"), t]), today=AS_OF).tasks[1]

        assert bar.id == "b"
        assert bar.text == "Build"
        assert bar.duration == 4
        assert bar.progress == 0.25
        assert bar.type == "task"
        assert bar.parent == "a"
        assert bar.open is True

    def test_missing_duration_shown_as_one_day(self) -> None:
        bar = GanttProjector().project(graph([task("a", None)]), today=AS_OF).tasks[0]
        assert bar.duration == 1

    def test_open_flag_from_config(self) -> None:
        projector = GanttProjector(GanttConfig(open_bars=False))
        bar = projector.project(graph([task("a")]), today=AS_OF).tasks[0]
        assert bar.open is False

    def test_links(self) -> None:
        deps = [
            Dependency(predecessor_id="a", successor_id="b", type="SS", lag_days=2, id="d1"),
            dep("b", "c", "XX"),
        ]
        projection = GanttProjector().project(
            graph([task("a"), task("b"), task("c")], deps), today=AS_OF
        )

        assert [link.to_dict() for link in projection.links] == [
            {"id": "d1", "source": "a", "target": "b", "type": "1", "lag": 2},
            {"id": "b->c", "source": "b", "target": "c", "type": "0", "lag": 0},
        ]

    def test_lower_case_type_matches_scheduled_relationship(self) -> None:
        g = graph([task("a", 5), task("b", 2)], [dep("a", "b", "ss", 2)])
        typed = SchedulingConfig(relationship_mode=RelationshipMode.TYPED)

        metrics = {m.task_id: m for m in CriticalPathAnalyzer(typed).compute_metrics(g)}
        link = GanttProjector().project(g, today=AS_OF).links[0]

        assert metrics["b"].early_start == 2
        assert link.type == "1"

    def test_to_dict_omits_parent_for_top_level_bars(self) -> None:
        projection = GanttProjector().project(
            graph([task("a"), task("b", parent_id="a")]), today=AS_OF
        )
        bars = projection.to_dict()["tasks"]

        assert "parent" not in bars[0]
        assert bars[1]["parent"] == "a"
        assert bars[0] == {
            "id": "a",
            "text": "A",
            "start_date": "2025-01-06",
            "end_date": "2025-01-06",
            "duration": 1,
            "progress": 0.0,
            "type": "project",
            "open": True,
        }

    def test_empty_graph(self) -> None:
        projection = GanttProjector().project(graph([]), today=AS_OF)
        assert projection.to_dict() == {"tasks": [], "links": []}
