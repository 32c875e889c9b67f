"""
Command-line interface for the genealogy relationship engine.

1) Load a JSON dataset (or import a GEDCOM file into one).
2) Validate it and enrich it with ages, family links and generations.
3) Answer questions: relationship paths, bounded subgraphs, statistics.
4) Plot family charts with Graphviz.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer

from diagnostics import Diagnostics
from enrichment import enrich
from models import Dataset, SubgraphConfig
from parsing import DatasetLoadError, gedcom_to_raw, load_dataset_json, parse_gedcom
from pathfinding import find_relationship
from plotting import plot_generation_histogram, plot_graph
from reports import compute_statistics
from settings import settings
from subgraph import extract_subgraph

app = typer.Typer(help="Genealogy relationship engine.", no_args_is_help=True)


@app.callback()
def configure(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO level and report timings."),
):
    level = logging.INFO if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    diagnostics = Diagnostics(level=logging.INFO)
    if verbose:
        diagnostics.attach()
        ctx.call_on_close(diagnostics.detach)
    ctx.obj = {"diagnostics": diagnostics, "verbose": verbose}


def _load(path: Path) -> dict[str, Any]:
    try:
        return load_dataset_json(path)
    except DatasetLoadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def _report_timings(ctx: typer.Context):
    if not (ctx.obj and ctx.obj["verbose"]):
        return
    diagnostics = ctx.obj["diagnostics"]
    for label, ms in diagnostics.durations.items():
        typer.echo(f"Performance: {label} took {ms:.2f}ms")
    warnings = diagnostics.records("warning")
    typer.echo(f"Captured {len(diagnostics.records())} log records, warnings: {len(warnings)}")


def _load_enriched(ctx: typer.Context, path: Path) -> Dataset:
    raw = _load(path)
    with ctx.obj["diagnostics"].timed("enrich"):
        dataset = enrich(raw)
    if not dataset.metadata.get("enriched"):
        typer.echo(f"Error: {path} has no people array", err=True)
        raise typer.Exit(code=1)
    return dataset


def _write_json(data: dict[str, Any], output: Optional[Path]):
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output is None:
        typer.echo(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")
        typer.echo(f"Wrote {output}")


@app.command("enrich")
def enrich_command(
    input_path: Path = typer.Argument(..., help="Raw dataset JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write enriched JSON here."),
    current_year: Optional[int] = typer.Option(None, help="Year used for ages of living people."),
):
    """Enrich a dataset with ages, family links and generation numbers."""
    raw = _load(input_path)
    dataset = enrich(raw, current_year=current_year)
    if not dataset.metadata.get("enriched"):
        typer.echo(f"Error: {input_path} has no people array", err=True)
        raise typer.Exit(code=1)
    for anomaly in dataset.anomalies:
        typer.echo(f"  anomaly ({anomaly.kind}): {anomaly.message}", err=True)
    _write_json(dataset.to_dict(), output)


@app.command("validate")
def validate_command(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help="Raw dataset JSON."),
):
    """Check a dataset for structural errors and suspicious data."""
    result = ctx.obj["diagnostics"].integrity_report(_load(input_path))

    if result.errors:
        typer.echo(f"Found {len(result.errors)} errors:")
        for e in result.errors:
            typer.echo(f"  - {e}")
    if result.warnings:
        typer.echo(f"Found {len(result.warnings)} warnings:")
        for w in result.warnings[:10]:
            typer.echo(f"  - {w}")
        if len(result.warnings) > 10:
            typer.echo(f"  ... and {len(result.warnings) - 10} more")
    if result.valid and not result.warnings:
        typer.echo("No validation issues found")

    _report_timings(ctx)
    if not result.valid:
        raise typer.Exit(code=1)


@app.command("path")
def path_command(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help="Raw dataset JSON."),
    from_id: str = typer.Argument(..., help="Starting person id."),
    to_id: str = typer.Argument(..., help="Target person id."),
    max_depth: Optional[int] = typer.Option(None, help="Maximum number of steps."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    plot: Optional[Path] = typer.Option(None, help="Also render the path onto a chart image."),
):
    """Find the shortest relationship path between two people."""
    dataset = _load_enriched(ctx, input_path)
    result = find_relationship(dataset, from_id, to_id, max_depth)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif not result.found:
        typer.echo(result.error or f"No relationship found between {from_id} and {to_id}")
    else:
        typer.echo(f"{result.relationship} ({result.distance} steps)")
        typer.echo("  " + " -> ".join(node.name for node in result.path))

    if plot is not None and result.found:
        plot_graph(dataset, plot, highlight=result)
        typer.echo(f"Graph saved to {plot}")

    if not result.found:
        raise typer.Exit(code=1)


@app.command("subgraph")
def subgraph_command(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help="Raw dataset JSON."),
    seeds: List[str] = typer.Argument(..., help="Seed person ids."),
    parents: bool = typer.Option(True, "--parents/--no-parents"),
    children: bool = typer.Option(True, "--children/--no-children"),
    siblings: bool = typer.Option(True, "--siblings/--no-siblings"),
    spouses: bool = typer.Option(True, "--spouses/--no-spouses"),
    up: int = typer.Option(settings.SUBGRAPH_MAX_UP, help="Generations of ancestors to include."),
    down: int = typer.Option(settings.SUBGRAPH_MAX_DOWN, help="Generations of descendants to include."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write subgraph JSON here."),
    plot: Optional[Path] = typer.Option(None, help="Render the subgraph to an image."),
):
    """Extract the people around some seed people, within generation limits."""
    dataset = _load_enriched(ctx, input_path)
    config = SubgraphConfig(
        include_parents=parents,
        include_children=children,
        include_siblings=siblings,
        include_spouses=spouses,
        max_generations_up=up,
        max_generations_down=down,
    )
    sub = extract_subgraph(dataset, seeds, config)
    typer.echo(f"Subgraph has {len(sub.people)} people and {len(sub.relationships)} relationships")

    if plot is not None:
        plot_graph(Dataset(people=sub.people, relationships=sub.relationships), plot)
        typer.echo(f"Graph saved to {plot}")
    if output is not None or plot is None:
        _write_json(sub.to_dict(), output)


@app.command("stats")
def stats_command(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help="Raw dataset JSON."),
    histogram: Optional[Path] = typer.Option(None, help="Save a people-per-generation chart."),
):
    """Print dataset statistics."""
    dataset = _load_enriched(ctx, input_path)
    stats = compute_statistics(dataset)
    people = dataset.people_map()

    typer.echo(f"People: {stats.total_persons} ({stats.male_count} male, {stats.female_count} female)")
    typer.echo(f"Relationships: {stats.total_relationships}")
    typer.echo(f"Generations: {stats.generation_count} ({stats.root_count} root ancestors)")
    typer.echo(f"Years: {stats.year_range}")
    if stats.eras:
        typer.echo("Eras: " + ", ".join(f"{era} ({count})" for era, count in stats.eras.items()))
    typer.echo(f"Key figures: {stats.key_figure_count}")
    for kind, count in sorted(stats.relationship_types.items(), key=lambda kv: -kv[1]):
        typer.echo(f"  {kind}: {count}")
    if stats.longest_life:
        pid, age = stats.longest_life
        typer.echo(f"Longest life: {people[pid].display_name} ({age} years)")
    if stats.most_connected:
        pid, degree = stats.most_connected
        typer.echo(f"Most connected: {people[pid].display_name} ({degree} connections)")

    if histogram is not None:
        plot_generation_histogram(stats, histogram)
        typer.echo(f"Chart saved to {histogram}")

    _report_timings(ctx)


@app.command("plot")
def plot_command(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help="Raw dataset JSON."),
    output: Path = typer.Argument(..., help="Image path (png, svg or pdf)."),
):
    """Render the whole family chart."""
    dataset = _load_enriched(ctx, input_path)
    typer.echo(f"Plotting graph to: {output}")
    plot_graph(dataset, output)
    typer.echo("Done!")
    _report_timings(ctx)


@app.command("import-gedcom")
def import_gedcom_command(
    gedcom_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="GEDCOM file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write raw dataset JSON here."),
):
    """Convert a GEDCOM file into the raw JSON dataset format."""
    typer.echo(f"Parsing GEDCOM file: {gedcom_path}", err=True)
    raw = gedcom_to_raw(parse_gedcom(gedcom_path))
    typer.echo(
        f"  Found {len(raw['people'])} persons and {len(raw['relationships'])} relationships",
        err=True,
    )
    _write_json(raw, output)


if __name__ == "__main__":
    app()
