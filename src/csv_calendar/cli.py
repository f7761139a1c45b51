from __future__ import annotations

import csv
import json
from pathlib import Path

import typer
from rich import print
from rich.markup import escape
from rich.table import Table

from csv_calendar.config import Settings, configure_logging, load_settings
from csv_calendar.errors import EventRowError
from csv_calendar.pipeline import BatchResult, EventDescriptor, generate_events
from csv_calendar.timeutil import (
    build_instant,
    format_date,
    format_time,
    parse_date,
    validate_timezone,
)

app = typer.Typer(
    name="csvcal",
    help="Resolve tabular event rows into calendar event intervals.",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Inspect effective settings.")
app.add_typer(config_app, name="config")


def _load_settings() -> Settings:
    try:
        return load_settings()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _read_rows(path: Path) -> list[dict[str, str]]:
    with path.open(newline="", encoding="utf-8-sig") as handle:
        return list(csv.DictReader(handle))


def _when(descriptor: EventDescriptor) -> tuple[str, str]:
    if descriptor.all_day:
        return format_date(descriptor.start), format_date(descriptor.end)
    return (
        f"{format_date(descriptor.start)} {format_time(descriptor.start)}",
        f"{format_date(descriptor.end)} {format_time(descriptor.end)}",
    )


def _print_table(result: BatchResult) -> None:
    table = Table(title=f"Resolved events: {len(result.events)}")
    table.add_column("#", justify="right")
    table.add_column("Subject")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("All day")
    table.add_column("Time zone")
    table.add_column("End rule")
    for index, descriptor in enumerate(result.events, start=1):
        start_text, end_text = _when(descriptor)
        table.add_row(
            str(index),
            escape(descriptor.summary),
            start_text,
            end_text,
            "yes" if descriptor.all_day else "no",
            descriptor.timezone or "-",
            str(descriptor.end_rule),
        )
    print(table)


@app.callback()
def root() -> None:
    """csvcal entrypoint."""


@app.command()
def resolve(
    path: Path = typer.Argument(..., help="CSV file with one event per row."),
    as_json: bool = typer.Option(False, "--json", help="Print one JSON object per resolved event."),
    log_level: str | None = typer.Option(None, "--log-level", help="Override CSVCAL_LOG_LEVEL."),
) -> None:
    """Resolve every row of a CSV file, skipping and reporting rows that fail."""
    settings = _load_settings()
    configure_logging(log_level or settings.log_level)

    try:
        rows = _read_rows(path)
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        typer.secho(f"Could not read {path}: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    result = generate_events(
        rows,
        default_duration_min=settings.default_duration_min,
        all_day_literal=settings.all_day_literal,
    )

    if as_json:
        for descriptor in result.events:
            typer.echo(json.dumps(descriptor.to_dict(), ensure_ascii=False))
    else:
        _print_table(result)

    for diagnostic in result.warnings:
        typer.secho(diagnostic.render(), fg=typer.colors.YELLOW, err=True)
    for diagnostic in result.errors:
        typer.secho(diagnostic.render(), fg=typer.colors.RED, err=True)

    if not as_json:
        print(
            f"rows={len(rows)} resolved={len(result.events)} "
            f"skipped={len(result.errors)} warnings={len(result.warnings)}"
        )
    raise typer.Exit(code=result.exit_code)


@app.command("parse-date")
def parse_date_command(text: str) -> None:
    """Print a date in YYYY-MM-DD after flexible parsing."""
    try:
        instant = build_instant(parse_date(text), source=text)
    except EventRowError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(format_date(instant))


@app.command("check-timezone")
def check_timezone(name: str) -> None:
    """Validate an IANA time zone identifier."""
    try:
        validate_timezone(name)
    except EventRowError as exc:
        typer.secho(f"Invalid timezone: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    print(f"[green]Valid timezone:[/green] {name}")


@config_app.command("show")
def config_show() -> None:
    """Print effective settings as key=value, sorted by key."""
    settings = _load_settings()
    for key, value in settings.as_items():
        typer.echo(f"{key}={value}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
