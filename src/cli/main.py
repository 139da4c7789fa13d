"""CLI de recordguard (Typer).

Comandos:
- `validate`: valida registros contra un esquema JSON y exporta el reporte.
- `inspect`: muestra los campos y reglas de un esquema.
- `demo`: ejecuta los ejemplos de pujas (bids/bidders).
- `doctor`: diagnósticos y configuración.

La CLI solo orquesta: la agregación vive en `core.services.validation_pipeline`.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import httpx
import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn

from adapters.json_exporter import export_report_json
from adapters.report_exporter import export_report_html
from adapters.schema_files import build_serializer_class, load_records, load_schema_file
from cli.doctor import app as doctor_app
from cli.ui_components import (
    build_errors_table,
    build_rules_table,
    build_schema_table,
    build_summary_panel,
    print_banner,
)
from core.config import AppSettings
from core.domain.errors import DocumentFormatError
from core.domain.language import Language
from core.domain.models import BatchReport
from core.logging_config import configure_logging
from core.schemas.bids import BidderSerializer, BidSerializer, BidWithBidderSerializer
from core.services.validation_pipeline import PipelineHooks, ValidationRequest, validate_records

app = typer.Typer(
    no_args_is_help=True,
    help="Declarative record validation: field checks, record checks, aggregated errors.",
)
app.add_typer(doctor_app, name="doctor")

_console = Console()

DEMO_RECORDS: list[tuple[type, list[dict[str, Any]]]] = [
    (
        BidSerializer,
        [
            {"bid_amount": "125.50", "placed_at": "2024-05-01T12:00:00Z"},
            {"bid_amount": -50},
            {"bid_amount": "abc"},
        ],
    ),
    (
        BidderSerializer,
        [
            {"bidder_id": 7, "bidder_name": "Ada"},
            {"bidder_id": 0},
            {"bidder_id": "seven", "bidder_name": "admin"},
        ],
    ),
    (
        BidWithBidderSerializer,
        [
            {"bid_amount": "99.99", "bidder": {"bidder_id": 3, "bidder_name": "Grace"}},
            {"bid_amount": "5000", "bidder": {"bidder_id": 0}},
            {"bid_amount": "10", "bidder": {"bidder_name": "Linus"}},
        ],
    ),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)


def _settings_for(spanish: bool | None) -> AppSettings:
    settings = AppSettings()
    if spanish is not None:
        settings = settings.model_copy(update={"default_language": Language.from_bool(spanish)})
    return settings


def _check_amount(value: str) -> str:
    try:
        amount = Decimal(value.strip())
    except InvalidOperation:
        raise typer.BadParameter(f"{value!r} is not a number") from None
    if not amount.is_finite():
        raise typer.BadParameter(f"{value!r} is not a finite number")
    return value.strip()


def _print_report(report: BatchReport, *, quiet: bool) -> None:
    if not report.all_valid and not quiet:
        _console.print(build_errors_table(report))
    _console.print(build_summary_panel(report))


def _export_target(path: Path, settings: AppSettings) -> Path:
    # A bare file name goes to the configured reports directory.
    if path.is_absolute() or path.parent != Path("."):
        return path
    return settings.reports_dir / path


def _export(
    report: BatchReport,
    settings: AppSettings,
    export_json: Path | None,
    export_html: Path | None,
) -> None:
    if export_json is not None:
        path = export_report_json(report=report, output_path=_export_target(export_json, settings))
        _console.print(f"[green]JSON report:[/green] {path}")
    if export_html is not None:
        path = export_report_html(report=report, output_path=_export_target(export_html, settings))
        _console.print(f"[green]HTML report:[/green] {path}")


@app.command()
def validate(
    schema: str = typer.Argument(..., help="Schema JSON (path or http/https URL)."),
    records: str = typer.Argument(..., help="Records: JSON array, {'records': [...]}, or JSON Lines."),
    partial: bool = typer.Option(False, "--partial", help="Skip required checks for missing fields."),
    spanish: bool | None = typer.Option(None, "--es/--en", help="Language for built-in messages."),
    export_json: Path | None = typer.Option(None, "--export-json", help="Write the report as JSON."),
    export_html: Path | None = typer.Option(None, "--export-html", help="Write the report as HTML."),
    no_fail: bool = typer.Option(False, "--no-fail", help="Exit 0 even when records are invalid."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the summary."),
) -> None:
    """Validate every record in RECORDS against SCHEMA."""

    settings = _settings_for(spanish)
    if not quiet:
        print_banner(_console)

    try:
        schema_file = load_schema_file(schema, settings=settings)
        items = load_records(records, settings=settings)
    except DocumentFormatError as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc
    except (OSError, httpx.HTTPError) as exc:
        _console.print(f"[red]Cannot read input:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    serializer_class = build_serializer_class(schema_file)

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=_console,
        transient=True,
        disable=quiet,
    ) as progress:
        task = progress.add_task(f"Validating {schema_file.name}", total=len(items))
        hooks = PipelineHooks(
            warning=lambda message: _console.print(f"[yellow]{message}[/yellow]"),
            record_done=lambda done, _total, _ok: progress.update(task, completed=done),
        )
        report = validate_records(
            serializer_class=serializer_class,
            settings=settings,
            request=ValidationRequest(records=items, partial=partial, schema_name=schema_file.name),
            hooks=hooks,
        )

    _print_report(report, quiet=quiet)
    _export(report, settings, export_json, export_html)

    if not report.all_valid and not no_fail:
        raise typer.Exit(code=1)


@app.command()
def inspect(
    schema: str = typer.Argument(..., help="Schema JSON (path or http/https URL)."),
) -> None:
    """Show the fields and record rules declared by SCHEMA."""

    settings = AppSettings()
    try:
        schema_file = load_schema_file(schema, settings=settings)
    except DocumentFormatError as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc
    except (OSError, httpx.HTTPError) as exc:
        _console.print(f"[red]Cannot read schema:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    if schema_file.description:
        _console.print(schema_file.description)
    _console.print(build_schema_table(schema_file))
    if schema_file.rules:
        _console.print(build_rules_table(schema_file))


@app.command()
def demo(
    spanish: bool = typer.Option(False, "--es", help="Show built-in messages in Spanish."),
    max_bid_amount: str = typer.Option(
        "1000", "--max-bid", callback=_check_amount, help="Ceiling used by the nested bid example."
    ),
) -> None:
    """Run the bidding examples and print their aggregated errors."""

    settings = _settings_for(spanish)
    print_banner(_console)
    for serializer_class, records in DEMO_RECORDS:
        report = validate_records(
            serializer_class=serializer_class,
            settings=settings,
            request=ValidationRequest(records=records, context={"max_bid_amount": max_bid_amount}),
        )
        _print_report(report, quiet=False)


def run() -> None:
    app()
