"""CLI helpers for inspecting step progress without starting the server."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import anyio
import typer
from rich.console import Console
from rich.table import Table

from stepcheck.core.config import ProgressMode
from stepcheck.core.discovery import discover_artifacts
from stepcheck.core.errors import StepcheckError
from stepcheck.pipeline import compute_progress, load_settings

app = typer.Typer(help="Inspect numbered test steps and the learner's progress.")
console = Console()


def _settings(
    project_root: Path | None,
    mode: Optional[str],
    force_all_passed: bool,
    test_dir: Path | None,
    pointer_file: Path | None,
    runner: Optional[str] = None,
):
    try:
        return load_settings(
            project_root,
            mode=mode,
            force_all_passed=force_all_passed or None,
            test_dir=test_dir,
            pointer_file=pointer_file,
            runner=runner,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _print_report(payload: Dict[str, Any]) -> None:
    console.print(f"[bold]Mode:[/bold] {payload.get('mode')}")
    table = Table("Metric", "Value")
    for label, key in (
        ("Current", "current"),
        ("Next", "next"),
        ("Total", "total"),
        ("Passed", "passedCount"),
        ("Locked", "lockedCount"),
        ("Passed %", "passedPercent"),
        ("Locked %", "lockedPercent"),
    ):
        value = payload.get(key)
        table.add_row(label, "-" if value is None else str(value))
    console.print(table)

    if payload.get("passed"):
        console.print(f"[green]Passed:[/green] {', '.join(payload['passed'])}")
    if payload.get("locked"):
        console.print(f"[dim]Locked:[/dim] {', '.join(payload['locked'])}")

    execution = payload.get("execution")
    if execution:
        status = "[green]passed[/green]" if execution.get("passed") else f"[red]{execution.get('outcome')}[/red]"
        console.print(f"[bold]Ran {execution.get('file')}:[/bold] {status} (exit={execution.get('exitCode')})")
        if execution.get("errorMessage"):
            console.print(f"  {execution['errorMessage']}")


@app.command()
def report(
    project_root: Path | None = typer.Option(None, "--project-root", show_default=False, help="Exercise root (defaults to cwd)."),
    mode: Optional[str] = typer.Option(None, "--mode", help=f"One of: {', '.join(ProgressMode.choices())}."),
    force_all_passed: bool = typer.Option(False, "--force-all-passed", help="Report every step as passed."),
    test_dir: Path | None = typer.Option(None, "--test-dir", show_default=False, help="Directory of numbered tests."),
    pointer_file: Path | None = typer.Option(None, "--pointer-file", show_default=False, help="Run-config declaring the current step."),
    runner: Optional[str] = typer.Option(None, "--runner", help="Test runner command for executed mode."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of a table."),
) -> None:
    """Compute the progress report once and print it."""

    settings = _settings(project_root, mode, force_all_passed, test_dir, pointer_file, runner)
    try:
        result = anyio.run(compute_progress, settings)
    except StepcheckError as exc:
        typer.echo(json.dumps(exc.to_payload()) if as_json else f"[{exc.category}] {exc.message}", err=not as_json)
        raise typer.Exit(code=1) from exc

    payload = result.to_payload()
    if as_json:
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return
    _print_report(payload)


@app.command()
def steps(
    project_root: Path | None = typer.Option(None, "--project-root", show_default=False, help="Exercise root (defaults to cwd)."),
    test_dir: Path | None = typer.Option(None, "--test-dir", show_default=False, help="Directory of numbered tests."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of a table."),
) -> None:
    """List discovered numbered tests in step order."""

    settings = _settings(project_root, None, False, test_dir, None)
    rows = [
        {"identifier": artifact.identifier, "step": artifact.step, "path": str(artifact.path)}
        for artifact in discover_artifacts(settings.resolved_test_dir)
    ]
    if as_json:
        typer.echo(json.dumps(rows, indent=2, ensure_ascii=False))
        return
    if not rows:
        console.print(f"[yellow]No numbered tests found in {settings.resolved_test_dir}[/yellow]")
        return
    table = Table("Step", "File")
    for row in rows:
        table.add_row(str(row["step"]), row["identifier"])
    console.print(table)


if __name__ == "__main__":
    app()
