"""CLI entrypoints for the research agent."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from arec.config import load_settings
from arec.errors import ConfigError
from arec.logging import configure_logging, get_logger
from arec.orchestrator.runner import RunResult, run_agent

app = typer.Typer(add_completion=False, help="Autonomous Observe-Reason-Act research agent")
logger = get_logger(__name__)
console = Console()


def _print_transcript(result: RunResult) -> None:
    table = Table(title=f"Run {result.run_id}: {result.context.goal}", show_lines=True)
    table.add_column("#", justify="right")
    table.add_column("Action")
    table.add_column("Observation")
    for i, entry in enumerate(result.context.history, start=1):
        table.add_row(str(i), entry.action_repr, entry.observation)
    console.print(table)

    if result.finished:
        console.print(f"[green]Finished in {result.cycle_count} cycles.[/green]")
        console.print(f"Final answer: {result.final_answer}")
    elif result.error:
        console.print(f"[red]Run aborted: {result.error}[/red]")
    else:
        console.print(f"[yellow]Stopped by the safety limit after {result.cycle_count - 1} cycles.[/yellow]")


@app.command()
def run(
    goal: str = typer.Argument(
        "",
        help="What the agent should find out. "
        "If omitted, you must provide --goal-file pointing to a UTF-8 text file.",
        show_default=False,
    ),
    goal_file: Path | None = typer.Option(
        None,
        "--goal-file",
        help="Path to a UTF-8 text file containing the goal.",
    ),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Use the deterministic planner and canned tools instead of the network.",
    ),
    max_cycles: int | None = typer.Option(
        None,
        "--max-cycles",
        min=1,
        help="Cycle ceiling (overrides AREC_MAX_CYCLES)",
    ),
    artifacts_dir: Path | None = typer.Option(
        None,
        "--artifacts-dir",
        help="Record run events under this directory (overrides AREC_ARTIFACTS_DIR)",
    ),
) -> None:
    """Run the agent on GOAL and print the transcript.

    Exit status is 0 when the agent finishes, 2 when the safety limit stops it and 1 on
    configuration or fatal errors.
    """

    goal = goal.strip()
    if not goal:
        if goal_file is None:
            raise typer.BadParameter(
                "You must provide either a positional GOAL or --goal-file pointing to a text file."
            )
        goal = goal_file.read_text(encoding="utf-8").strip()
        if not goal:
            raise typer.BadParameter("The goal file is empty.")

    settings = load_settings()
    if artifacts_dir is not None:
        settings.artifacts_dir = artifacts_dir
        settings.record_events = True

    configure_logging(settings.log_level)
    logger.info("CLI run requested")

    try:
        result = run_agent(goal, settings, offline=offline, max_cycles=max_cycles)
    except ConfigError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1) from e

    _print_transcript(result)
    raise typer.Exit(code=result.exit_code)


if __name__ == "__main__":
    app()
