"""CLI for the Supplier Scoring Engine.

Provides a command-line interface for ranking suppliers from a snapshot
of their job history.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import find_config_file, get_config, load_config
from .exceptions import SnapshotError
from .ranker import RecommendationRanker
from .schema import QualityTier, RecommendationEntry, RecommendationResult, RecommendationStatus
from .snapshot import Snapshot, load_snapshot

console = Console()

TIER_COLORS = {
    QualityTier.EXCELLENT: "green",
    QualityTier.GOOD: "blue",
    QualityTier.FAIR: "yellow",
    QualityTier.POOR: "red",
}


@click.group()
@click.version_option(version="1.0.0", prog_name="supplier-scorer")
def main():
    """Supplier Scoring and Recommendation Engine.

    Scores suppliers from their job history and returns a ranked list
    for assigning a supplier to a quote item.
    """
    pass


def _prepare(config: Optional[str], verbose: bool) -> None:
    """Configure logging and load the scorer configuration."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    config_path = Path(config) if config else find_config_file()
    if config_path:
        load_config(config_path)


def _load(snapshot: str) -> Snapshot:
    try:
        return load_snapshot(Path(snapshot))
    except SnapshotError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


@main.command("recommend")
@click.option(
    "--snapshot", "-s",
    required=True,
    type=click.Path(exists=True),
    help="Path to a supplier snapshot JSON file"
)
@click.option(
    "--top-k", "-k",
    type=int,
    help="Maximum number of recommendations to return (default: all)"
)
@click.option(
    "--category",
    type=int,
    help="Category id of the item (overrides the snapshot)"
)
@click.option(
    "--scope-category",
    is_flag=True,
    help="Only use job history from the item's category"
)
@click.option(
    "--config", "-c",
    type=click.Path(exists=True),
    help="Path to scorer-config.yaml"
)
@click.option(
    "--out", "-o",
    type=click.Path(),
    help="Output file for JSON results (default: stdout)"
)
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show component descriptions and debug logging"
)
def recommend_cmd(
    snapshot: str,
    top_k: Optional[int],
    category: Optional[int],
    scope_category: bool,
    config: Optional[str],
    out: Optional[str],
    json_output: bool,
    verbose: bool,
):
    """Rank the suppliers in a snapshot.

    Examples:
        supplier-scorer recommend -s snapshot.json
        supplier-scorer recommend -s snapshot.json -k 3 -v
        supplier-scorer recommend -s snapshot.json --category 4 --scope-category
    """
    _prepare(config, verbose)
    data = _load(snapshot)
    if category is not None:
        data.category_id = category

    ranker = RecommendationRanker(data.job_source(), config=get_config())
    try:
        result = ranker.evaluate(
            data.suppliers,
            data.item_context(scope_history_to_category=scope_category),
            top_k=top_k,
        )
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if json_output or out:
        output_json(result, out)
    else:
        display_result(result, verbose)


@main.command("explain")
@click.option(
    "--snapshot", "-s",
    required=True,
    type=click.Path(exists=True),
    help="Path to a supplier snapshot JSON file"
)
@click.option(
    "--supplier", "-i",
    "supplier_id",
    required=True,
    type=int,
    help="Supplier id to explain"
)
@click.option(
    "--config", "-c",
    type=click.Path(exists=True),
    help="Path to scorer-config.yaml"
)
def explain_cmd(snapshot: str, supplier_id: int, config: Optional[str]):
    """Show one supplier's score breakdown.

    Example:
        supplier-scorer explain -s snapshot.json -i 12
    """
    _prepare(config, verbose=False)
    data = _load(snapshot)

    ranker = RecommendationRanker(data.job_source(), config=get_config())
    entry = ranker.supplier_score(supplier_id, data.suppliers, data.item_context())
    if entry is None:
        console.print(f"[red]Error:[/red] Supplier {supplier_id} was not ranked (unknown, inactive or unavailable)")
        sys.exit(1)

    display_entry_detail(entry)


@main.command("init-config")
@click.option(
    "--out", "-o",
    type=click.Path(),
    default="scorer-config.yaml",
    help="Output path for the configuration file"
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing config file"
)
def init_config_cmd(out: str, force: bool):
    """Generate a default scorer configuration file.

    Example:
        supplier-scorer init-config --out my-config.yaml
    """
    from .config import save_default_config

    out_path = Path(out)
    if out_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists: {out}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        save_default_config(out_path)
    except OSError as e:
        console.print(f"[red]Error creating config:[/red] {e}")
        sys.exit(1)

    console.print(f"[green]✓[/green] Config file created: {out}")
    console.print("\nThe scorer will look for config in this order:")
    console.print("  1. SUPPLIER_SCORER_CONFIG environment variable")
    console.print("  2. ./scorer-config.yaml (current directory)")
    console.print("  3. ./scorer-config.yml (current directory)")
    console.print("  4. ~/.config/supplier-scorer/config.yaml")


def display_result(result: RecommendationResult, verbose: bool):
    """Display a recommendation result in formatted text."""
    status_text = {
        RecommendationStatus.OK: "[green]ok[/green]",
        RecommendationStatus.NO_ELIGIBLE_SUPPLIERS: "[yellow]no eligible suppliers[/yellow]",
        RecommendationStatus.PARTIAL_FAILURE: "[yellow]partial failure[/yellow]",
        RecommendationStatus.FETCH_FAILED: "[red]job history unavailable[/red]",
    }[result.status]

    top = result.top
    top_name = (top.supplier_company or top.supplier_name) if top else "None"
    console.print(Panel(
        f"Recommended: [bold cyan]{top_name}[/bold cyan]\n"
        f"Status: {status_text}\n"
        f"Eligible: {result.eligible_count} | Excluded: {len(result.excluded)}",
        title="Supplier Recommendations",
    ))

    if not result.recommendations:
        if result.status == RecommendationStatus.NO_ELIGIBLE_SUPPLIERS:
            console.print("\n[yellow]No suppliers available for this item.[/yellow]")
        else:
            console.print("\n[red]No recommendations: supplier job history could not be read.[/red]")
    else:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Rank", justify="right")
        table.add_column("Supplier")
        table.add_column("Score", justify="right")
        table.add_column("Jobs", justify="right")
        table.add_column("On time", justify="right")
        table.add_column("Open", justify="right")

        for entry in result.recommendations:
            color = TIER_COLORS[entry.scores.quality_tier]
            name = entry.supplier_company or entry.supplier_name
            if entry.scores.is_new_supplier:
                name += " [dim](new)[/dim]"
            on_time = entry.metrics.promise_keeping_pct
            table.add_row(
                str(entry.rank),
                name,
                f"[{color}]{entry.total_score:.1f}[/{color}]",
                str(entry.metrics.completed_jobs),
                f"{on_time:.0f}%" if on_time is not None else "-",
                str(entry.metrics.current_load),
            )

        console.print(table)

        if verbose:
            for entry in result.recommendations:
                console.print(f"\n[bold]{entry.rank}. {entry.supplier_company or entry.supplier_name}[/bold]")
                for component in entry.scores.components():
                    console.print(f"  {component.name:<9} {component.value:+6.1f}  {component.description}")
                console.print(f"  {format_history(entry)}")

    if result.excluded:
        console.print("\n[dim]Excluded:[/dim]")
        for ex in result.excluded:
            console.print(f"  [dim]• {ex.supplier_name}: {ex.description}[/dim]")

    if result.processing_warnings:
        console.print("\n[dim]Warnings:[/dim]")
        for warning in result.processing_warnings:
            console.print(f"  [dim]• {warning}[/dim]")


def display_entry_detail(entry: RecommendationEntry):
    """Display one supplier's score breakdown."""
    scores = entry.scores
    color = TIER_COLORS[scores.quality_tier]

    table = Table(show_header=True, header_style="bold", title=entry.supplier_company or entry.supplier_name)
    table.add_column("Component")
    table.add_column("Points", justify="right")
    table.add_column("Range", justify="right")
    table.add_column("Details")

    for component in scores.components():
        table.add_row(
            component.name,
            f"{component.value:+.1f}",
            f"{component.min_value:g}..{component.max_value:g}",
            component.description,
        )

    console.print(table)
    console.print(
        f"Total: [{color}]{scores.total_score:.1f}[/{color}] ({scores.quality_tier.value}) | "
        f"Rank: {entry.rank}"
        + (" | [cyan]new supplier[/cyan]" if scores.is_new_supplier else "")
    )
    console.print(format_history(entry))


def format_history(entry: RecommendationEntry) -> str:
    """Summarize the supporting history statistics for one supplier."""
    m = entry.metrics

    def _fmt(value: Optional[float], pattern: str, suffix: str = "") -> str:
        return "-" if value is None else f"{value:{pattern}}{suffix}"

    return (
        f"[dim]Jobs: {m.completed_jobs} completed, {m.current_load} open, {m.total_jobs} total | "
        f"Rating: {_fmt(m.average_rating, '.1f')} ({m.rated_jobs} rated) | "
        f"Cancelled: {m.cancelled_jobs} ({_fmt(m.cancellation_pct, '.0f', '%')}) | "
        f"Turnaround: {_fmt(m.average_delivery_days, '.1f', ' days')} "
        f"± {_fmt(m.delivery_days_stddev, '.1f')}[/dim]"
    )


def output_json(result: RecommendationResult, out_path: Optional[str]):
    """Output result as JSON."""
    json_str = result.model_dump_json(indent=2)

    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(json_str)
    else:
        print(json_str)


if __name__ == "__main__":
    main()
