#!/usr/bin/env python3
"""satscope command-line interface.

Usage::

    satscope list data/tle.txt
    satscope track data/tle.txt --index 0 --minutes 120
    satscope track data/tle.txt --name "ISS (ZARYA)" --output iss.csv
    satscope correlate data/tle.txt --index 0
    satscope report data/tle.txt --index 0 --report-dir data/reports/iss
    satscope fetch stations --output data/tle.txt
"""
from __future__ import annotations

import sys
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .tle_parser import ElementSetRecord, format_element_sets
from .propagator import PropagatedSeries, PropagationSettings, propagate
from .metrics import summarize
from .correlation import DEFAULT_VARIABLES, SERIES_VARIABLES, correlate_series
from .sources import CelestrakClient, load_element_file

console = Console()

_DEFAULTS = PropagationSettings()


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """satscope — element-set propagation and orbit analytics."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(name)s — %(message)s")


def _window_options(func):
    func = click.option("--start", type=click.DateTime(),
                        help="Window start, UTC (default: now)")(func)
    func = click.option("--step", "-s", default=_DEFAULTS.step_minutes, type=float,
                        show_default=True, help="Sampling step (minutes)")(func)
    func = click.option("--minutes", "-m", default=_DEFAULTS.window_minutes, type=int,
                        show_default=True, help="Window length (minutes)")(func)
    func = click.option("--name", "-n", "sat_name", help="Select record by name")(func)
    func = click.option("--index", "-i", default=0, show_default=True,
                        help="Select record by index")(func)
    func = click.argument("filepath", type=click.Path(exists=True))(func)
    return func


@main.command("list")
@click.argument("filepath", type=click.Path(exists=True))
def list_records(filepath: str):
    """List the element sets in a file."""
    records = load_element_file(filepath)
    if not records:
        console.print("[yellow]No element sets found.[/yellow]")
        return

    table = Table(title=f"{len(records)} element sets", box=box.SIMPLE_HEAVY)
    table.add_column("Index", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("NORAD", justify="right")
    table.add_column("Checksum")

    for record in records:
        table.add_row(
            str(record.index),
            record.name,
            str(record.norad_id or "–"),
            "[green]ok[/green]" if record.checksum_ok() else "[red]bad[/red]",
        )

    console.print(table)


@main.command()
@_window_options
@click.option("--output", "-o", type=click.Path(), help="Save samples to CSV")
def track(
    filepath: str,
    index: int,
    sat_name: Optional[str],
    minutes: int,
    step: float,
    start: Optional[datetime],
    output: Optional[str],
):
    """Propagate one element set and summarize it."""
    record = _select_record(filepath, index, sat_name)
    series = _run_propagation(record, minutes, step, start)
    _display_summary(record, series)

    if output:
        series.to_dataframe().to_csv(output, index=False)
        console.print(f"\nSamples saved to {output}")


@main.command()
@_window_options
@click.option("--var", "variables", multiple=True,
              type=click.Choice(sorted(SERIES_VARIABLES)),
              help="Variable to include (repeatable)")
def correlate(
    filepath: str,
    index: int,
    sat_name: Optional[str],
    minutes: int,
    step: float,
    start: Optional[datetime],
    variables: tuple[str, ...],
):
    """Correlation matrix between a series' variables."""
    record = _select_record(filepath, index, sat_name)
    series = _run_propagation(record, minutes, step, start)
    if series.is_empty:
        console.print(f"[yellow]{record.name}: no samples propagated.[/yellow]")
        return

    matrix = correlate_series(series, variables or DEFAULT_VARIABLES)

    table = Table(title=f"Correlation — {series.name}", box=box.SIMPLE_HEAVY)
    table.add_column("")
    for label in matrix.labels:
        table.add_column(label.title(), justify="right")

    for label, row in matrix.to_dict().items():
        table.add_row(
            label.title(),
            *("–" if r is None else f"{r:+.2f}" for r in row.values()),
        )

    console.print(table)


@main.command()
@_window_options
@click.option("--report-dir", default="data/reports", show_default=True,
              type=click.Path(), help="Output directory")
def report(
    filepath: str,
    index: int,
    sat_name: Optional[str],
    minutes: int,
    step: float,
    start: Optional[datetime],
    report_dir: str,
):
    """Write charts and a markdown summary for one element set."""
    from .viz import generate_report

    record = _select_record(filepath, index, sat_name)
    series = _run_propagation(record, minutes, step, start)
    path = generate_report(series, output_dir=report_dir)
    console.print(f"Report generated in {path}")


@main.command()
@click.argument("group")
@click.option("--output", "-o", required=True, type=click.Path(), help="TLE file to write")
@click.option("--no-cache", is_flag=True, help="Bypass the download cache")
def fetch(group: str, output: str, no_cache: bool):
    """Download a CelesTrak group (e.g. 'stations') to a TLE file."""
    client = CelestrakClient()
    try:
        records = client.fetch_records(group, use_cache=not no_cache)
    except (ConnectionError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    Path(output).write_text(format_element_sets(records))
    console.print(f"Saved {len(records)} element sets to {output}")


def _select_record(filepath: str, index: int, name: Optional[str]) -> ElementSetRecord:
    records = load_element_file(filepath)
    if name is not None:
        matches = [r for r in records if r.name == name]
        if not matches:
            console.print(f"[red]Error: no element set named {name!r}[/red]")
            sys.exit(1)
        return matches[0]

    if not 0 <= index < len(records):
        console.print(
            f"[red]Error: index {index} out of range ({len(records)} element sets)[/red]"
        )
        sys.exit(1)
    return records[index]


def _run_propagation(
    record: ElementSetRecord,
    minutes: int,
    step: float,
    start: Optional[datetime],
) -> PropagatedSeries:
    try:
        return propagate(record, minutes, step, start)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


def _display_summary(record: ElementSetRecord, series: PropagatedSeries):
    """Display a series summary with rich formatting."""
    metrics = summarize(series)
    window = (
        f"{series.epochs[0]:%Y-%m-%d %H:%M} → {series.epochs[-1]:%Y-%m-%d %H:%M} UTC"
        if not series.is_empty else "–"
    )
    console.print(
        Panel(
            f"[bold]{record.name}[/bold] (NORAD {record.norad_id or '–'})\n"
            f"Samples: {metrics.sample_count}\n"
            f"Window: {window}\n"
            f"Mean altitude: {metrics.format_altitude()} m\n"
            f"Mean speed: {metrics.format_speed()} m/s\n"
            f"Orbit class: [bold green]{metrics.format_orbit_class()}[/bold green]",
            title="Propagation Summary",
            box=box.ROUNDED,
        )
    )

    if series.is_empty:
        return

    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("Time (UTC)", style="cyan")
    table.add_column("Lat (°)", justify="right")
    table.add_column("Lon (°)", justify="right")
    table.add_column("Alt (km)", justify="right")
    table.add_column("Speed (m/s)", justify="right")

    for i in range(min(len(series), 20)):
        table.add_row(
            f"{series.epochs[i]:%Y-%m-%d %H:%M}",
            f"{series.latitudes[i]:+.3f}",
            f"{series.longitudes[i]:+.3f}",
            f"{series.altitudes[i] / 1000:.1f}",
            f"{series.speeds[i]:,.0f}",
        )

    if len(series) > 20:
        console.print(f"(showing 20 of {len(series)} samples)")
    console.print(table)


if __name__ == "__main__":
    main()
