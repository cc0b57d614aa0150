"""Command-line interface for tasksched."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Annotated, Any

import typer

from .exceptions import TaskschedError
from .loader import discover_config, load_project
from .logger import setup_logger
from .models import DependencyType
from .scheduler import ScheduleMetrics, ScheduleService
from .stores import YamlFileTaskStore

app = typer.Typer(
    name="tasksched",
    help="Task dependency scheduling - cycle checks, critical path and Gantt data",
    add_completion=False,
)

FileArgument = Annotated[Path, typer.Argument(help="Path to the project YAML file")]
AsOfOption = Annotated[
    str | None,
    typer.Option("--as-of", help="Calendar date of day zero (YYYY-MM-DD, default: today)"),
]
OutputOption = Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")]


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to unified config file (default: tasksched_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for tasksched commands."""
    setup_logger(verbose)
    ctx.obj = config


@contextmanager
def _reporting_errors() -> Iterator[None]:
    """Turn domain and config errors into a one-line message and exit code 1."""
    try:
        yield
    except (TaskschedError, ValueError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _open_service(
    ctx: typer.Context, file: Path
) -> tuple[YamlFileTaskStore, ScheduleService]:
    store = YamlFileTaskStore(file)
    config = discover_config(file, ctx.obj)
    service = ScheduleService(store, config.scheduler, config.gantt)
    return store, service


def _parse_date_option(date_str: str | None, option_name: str) -> date | None:
    """Parse a date string from CLI option."""
    if date_str is None:
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        typer.echo(
            f"Error: Invalid date format '{date_str}' for {option_name}. Use YYYY-MM-DD format.",
            err=True,
        )
        raise typer.Exit(1) from None


def _emit(text: str, output: Path | None, what: str) -> None:
    if output:
        output.write_text(text + "\n", encoding="utf-8")
        typer.echo(f"{what} written to {output}")
    else:
        typer.echo(text)


def _format_metrics_table(metrics: list[ScheduleMetrics]) -> str:
    """Render metrics as an aligned plain-text table."""
    headers = ["TASK", "NAME", "DUR", "ES", "EF", "LS", "LF", "FLOAT", "CRITICAL"]
    rows: list[list[str]] = [
        [
            m.task_id,
            m.task_name,
            str(m.duration),
            str(m.early_start),
            str(m.early_finish),
            str(m.late_start),
            str(m.late_finish),
            str(m.total_float),
            "yes" if m.is_critical else "",
        ]
        for m in metrics
    ]
    widths = [max(len(row[i]) for row in [headers, *rows]) for i in range(len(headers))]
    lines = [
        "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip()
        for row in [headers, *rows]
    ]
    return "\n".join(lines)


@app.command()
def check(file: FileArgument) -> None:
    """Validate task references and check the dependency graph for cycles."""
    with _reporting_errors():
        project_data = load_project(file)
    typer.echo(
        f"OK: project '{project_data.project.id}' has {len(project_data.tasks)} tasks "
        f"and {len(project_data.dependencies)} dependencies, no cycles"
    )


@app.command("critical-path")
def critical_path(
    ctx: typer.Context,
    file: FileArgument,
    *,
    as_of: AsOfOption = None,
    show_all: Annotated[
        bool, typer.Option("--all", help="Show metrics for every task, not only critical ones")
    ] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Emit JSON instead of a table")] = False,
    output: OutputOption = None,
) -> None:
    """Run the critical path analysis for a project file."""
    anchor = _parse_date_option(as_of, "--as-of")

    with _reporting_errors():
        store, service = _open_service(ctx, file)
        analysis = service.get_critical_path(store.project_id, as_of=anchor)
        metrics = service.get_schedule_metrics(store.project_id) if show_all else None

    if as_json:
        payload: dict[str, Any] = analysis.to_dict()
        if metrics is not None:
            payload["tasks"] = [
                {
                    "taskId": m.task_id,
                    "earlyStart": m.early_start,
                    "earlyFinish": m.early_finish,
                    "lateStart": m.late_start,
                    "lateFinish": m.late_finish,
                    "totalFloat": m.total_float,
                    "isCritical": m.is_critical,
                }
                for m in metrics
            ]
        _emit(json.dumps(payload, indent=2), output, "Critical path")
        return

    lines = [
        f"Project {analysis.project_id}: {analysis.project_duration} days "
        f"(day 0 = {analysis.anchor_date.isoformat()})",
    ]
    if metrics is not None:
        lines.append(_format_metrics_table(metrics))
    elif analysis.critical_path:
        lines.append("Critical path:")
        lines.extend(
            f"  {task.task_id}  {task.task_name}  {task.early_start} .. {task.early_finish}"
            for task in analysis.critical_path
        )
    _emit("\n".join(lines), output, "Critical path")


@app.command()
def gantt(
    ctx: typer.Context,
    file: FileArgument,
    *,
    as_of: AsOfOption = None,
    output: OutputOption = None,
) -> None:
    """Emit Gantt bars and links as JSON."""
    anchor = _parse_date_option(as_of, "--as-of")

    with _reporting_errors():
        store, service = _open_service(ctx, file)
        projection = service.get_gantt_data(store.project_id, as_of=anchor)

    _emit(json.dumps(projection.to_dict(), indent=2), output, "Gantt data")


@app.command("add-dependency")
def add_dependency(
    ctx: typer.Context,
    file: FileArgument,
    predecessor: Annotated[str, typer.Argument(help="Task that must come first")],
    successor: Annotated[str, typer.Argument(help="Task that depends on the predecessor")],
    *,
    dep_type: Annotated[
        str, typer.Option("--type", "-t", help="Dependency type: FS, SS, FF or SF")
    ] = DependencyType.FS.value,
    lag: Annotated[int, typer.Option("--lag", help="Lag in days (negative for a lead)")] = 0,
) -> None:
    """Add a dependency after checking it would not create a cycle."""
    with _reporting_errors():
        store, service = _open_service(ctx, file)
        dependency = service.create_dependency(
            store.project_id, predecessor, successor, dep_type, lag
        )
    typer.echo(f"Added dependency {dependency}")


@app.command("remove-dependency")
def remove_dependency(
    ctx: typer.Context,
    file: FileArgument,
    predecessor: Annotated[str, typer.Argument(help="Predecessor task ID")],
    successor: Annotated[str, typer.Argument(help="Successor task ID")],
) -> None:
    """Remove the dependency between two tasks."""
    with _reporting_errors():
        _, service = _open_service(ctx, file)
        service.delete_dependency(predecessor, successor)
    typer.echo(f"Removed dependency {predecessor} -> {successor}")


@app.command("delete-task")
def delete_task(
    ctx: typer.Context,
    file: FileArgument,
    task_id: Annotated[str, typer.Argument(help="Task to delete")],
) -> None:
    """Delete a task that no dependency references."""
    with _reporting_errors():
        _, service = _open_service(ctx, file)
        service.delete_task(task_id)
    typer.echo(f"Deleted task {task_id}")


@app.command()
def progress(ctx: typer.Context, file: FileArgument) -> None:
    """Recompute weighted project progress and write it to the project file."""
    with _reporting_errors():
        store, service = _open_service(ctx, file)
        percent = service.recompute_project_progress(store.project_id)

    if percent is None:
        typer.echo(f"Project {store.project_id} has no tasks; progress unchanged")
    else:
        typer.echo(f"Project {store.project_id} progress: {percent}%")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
