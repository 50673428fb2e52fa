"""CLI entry point for the UI verification core."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from src.checklist.loader import ChecklistLoadError
from src.checklist.scorer import get_blocking_items
from src.models.config import VerifierConfig
from src.models.visual_diff import VisualDiff
from src.orchestrator import Orchestrator
from src.reporter.summary import count_by_status, format_checklist_summary, format_visual_summary
from src.visual.coordinator import EngineSetupError

console = Console()

DEFAULT_CONFIG = "ui-verify.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(path: str) -> VerifierConfig:
    """Load the config file, falling back to defaults when it does not exist."""
    if not Path(path).exists():
        if path != DEFAULT_CONFIG:
            console.print(f"[red]Config file not found: {path}[/red]")
            sys.exit(1)
        return VerifierConfig()
    try:
        return VerifierConfig.load(path)
    except (ValidationError, json.JSONDecodeError) as e:
        console.print(f"[red]Invalid config {path}:[/red] {e}")
        sys.exit(1)


def _diff_status(diff: VisualDiff) -> str:
    if not diff.baseline_exists:
        return "[yellow]no baseline[/yellow]"
    if diff.comparison_failed:
        return "[red]comparison failed[/red]"
    if diff.has_significant_change:
        return "[red]changed[/red]"
    return "[green]ok[/green]"


def _print_diffs(diffs: list[VisualDiff]) -> None:
    table = Table(title="Visual Regression")
    table.add_column("Screenshot", style="bold")
    table.add_column("Diff", justify="right")
    table.add_column("Status")
    table.add_column("Diff image")
    for d in diffs:
        pct = "-" if not d.baseline_exists or d.comparison_failed else f"{d.diff_percentage:.2f}%"
        table.add_row(d.filename, pct, _diff_status(d), d.diff_image_path or "")
    console.print(table)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Visual regression and checklist scoring for UI test runs"""
    setup_logging(verbose)


@cli.command()
@click.option("--baselines-dir", default="baselines", help="Directory holding baseline images")
@click.option("--threshold", default=5.0, type=float, help="Percent of pixels allowed to differ")
@click.option("--checklist", "checklist_path", default=None, help="Checklist JSON file")
def init(baselines_dir: str, threshold: float, checklist_path: str | None) -> None:
    """Create a default configuration file."""
    config_path = Path(DEFAULT_CONFIG)
    if config_path.exists():
        if not click.confirm(f"{DEFAULT_CONFIG} already exists. Overwrite?"):
            return

    try:
        cfg = VerifierConfig(
            visual={"baselines_dir": baselines_dir, "diff_threshold": threshold},
            checklist_path=checklist_path,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid settings:[/red] {e}")
        sys.exit(1)
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")


@cli.command()
@click.argument("screenshots", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--output-dir", "-o", required=True, help="Run directory; diffs go to <output-dir>/diffs")
@click.option("--fail-on-change", is_flag=True, help="Exit 1 when any screenshot changed significantly")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def compare(screenshots: tuple[str, ...], output_dir: str, fail_on_change: bool, config: str) -> None:
    """Compare screenshots against their baselines."""
    orchestrator = Orchestrator(_load_config(config))
    try:
        diffs = orchestrator.compare_screenshots(list(screenshots), output_dir)
    except EngineSetupError as e:
        console.print(f"[red]Visual regression engine unavailable:[/red] {e}")
        sys.exit(2)

    _print_diffs(diffs)
    console.print(format_visual_summary(diffs))
    if fail_on_change and any(d.has_significant_change for d in diffs):
        sys.exit(1)


@cli.command()
@click.argument("screenshots", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def promote(screenshots: tuple[str, ...], config: str) -> None:
    """Save screenshots as the new baselines, replacing existing ones."""
    orchestrator = Orchestrator(_load_config(config))
    for path in orchestrator.promote(list(screenshots)):
        console.print(f"  [green]baseline[/green] {path}")


@cli.command()
@click.argument("checklist", required=False)
@click.option("--strict", is_flag=True, help="Exit 1 unless every P0 item passes")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def score(checklist: str | None, strict: bool, config: str) -> None:
    """Score a checklist JSON file."""
    orchestrator = Orchestrator(_load_config(config))
    try:
        items = orchestrator.load_checklist(checklist)
    except (FileNotFoundError, ChecklistLoadError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    result = orchestrator.score_checklist(items)
    console.print(format_checklist_summary(result, items))

    table = Table(title="Status Breakdown")
    table.add_column("Status", style="bold")
    table.add_column("Items", justify="right")
    for status, count in count_by_status(items).items():
        table.add_row(status, str(count))
    console.print(table)

    if strict and get_blocking_items(items):
        sys.exit(1)


@cli.command()
@click.argument("screenshots", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option("--output-dir", "-o", required=True, help="Run directory for diffs and the report")
@click.option("--checklist", default=None, help="Checklist JSON file")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def report(screenshots: tuple[str, ...], output_dir: str, checklist: str | None, config: str) -> None:
    """Compare screenshots, score the checklist, and write a JSON report."""
    cfg = _load_config(config)
    orchestrator = Orchestrator(cfg)

    diffs: list[VisualDiff] = []
    if screenshots:
        try:
            diffs = orchestrator.compare_screenshots(list(screenshots), output_dir)
        except EngineSetupError as e:
            console.print(f"[red]Visual regression engine unavailable:[/red] {e}")
            sys.exit(2)

    items = None
    if checklist or cfg.checklist_path:
        try:
            items = orchestrator.load_checklist(checklist)
        except (FileNotFoundError, ChecklistLoadError) as e:
            console.print(f"[yellow]Checklist skipped:[/yellow] {e}")

    path = orchestrator.write_report(diffs, items, output_dir=Path(output_dir))
    console.print(f"  JSON report: [blue]{path}[/blue]")


if __name__ == "__main__":
    cli()
