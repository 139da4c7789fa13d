"""Doctor command for environment diagnostics."""

from __future__ import annotations

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_client
from adapters.report_exporter import render_report_html
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.language import Language
from core.domain.models import BatchReport, RecordOutcome
from core.schemas.bids import BidderSerializer
from core.services.validation_pipeline import validate_record

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        with build_client(settings) as client:
            response = client.get(url)
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, str(exc)


def _check_template() -> tuple[bool, str]:
    """Render a minimal report to detect template/Jinja2 issues."""

    report = BatchReport(
        schema_name="doctor",
        outcomes=[RecordOutcome(index=0, valid=False, errors={"field": ["message"]})],
    )
    html = render_report_html(report=report)
    if "doctor" not in html:
        return False, "template rendered without the schema name"
    return True, "OK"


def _check_engine(settings: AppSettings) -> tuple[bool, str]:
    """Run the bidder example end to end with the configured context."""

    outcome = validate_record(
        BidderSerializer,
        {"bidder_id": 0},
        context=settings.serializer_context(),
    )
    key = settings.non_field_errors_key
    if outcome.valid or key not in outcome.errors:
        return False, f"expected a whole-record error under {key!r}, got {outcome.errors}"
    return True, str(outcome.errors[key][0])


@app.command()
def run(
    url: str | None = typer.Option(
        None,
        "--url",
        help="Optional schema URL to check connectivity against.",
    ),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="recordguard Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("Language", "OK", settings.default_language.label())
    table.add_row("Non-field errors key", "OK", settings.non_field_errors_key)
    table.add_row("Reject unknown fields", "OK", str(settings.reject_unknown_fields))
    table.add_row("User config", "OK", str(get_user_env_file()))

    ok_engine, detail_engine = _check_engine(settings)
    table.add_row("Validation engine", "OK" if ok_engine else "FAIL", detail_engine)

    ok_template, detail_template = _check_template()
    table.add_row("HTML report template", "OK" if ok_template else "FAIL", detail_template)

    # Connectivity (best-effort)
    if url:
        ok_http, detail_http = _check_http(url, settings)
        table.add_row("Schema URL", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not (ok_engine and ok_template):
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    answer = typer.prompt(
        f"Default message language ({Language.codes()})",
        default=Language.default().value,
        show_default=True,
    )
    try:
        language = Language.coerce(answer).value
    except ValueError:
        raise typer.BadParameter(f"language must be one of {Language.codes()}") from None

    key = typer.prompt(
        "Key for whole-record errors",
        default="non_field_errors",
        show_default=True,
    ).strip()
    if not key:
        raise typer.BadParameter("the whole-record key cannot be empty")

    reject = typer.confirm("Reject unknown fields by default?", default=False)

    env_path = write_user_env_vars(
        {
            "RECORDGUARD_DEFAULT_LANGUAGE": language,
            "RECORDGUARD_NON_FIELD_ERRORS_KEY": key,
            "RECORDGUARD_REJECT_UNKNOWN_FIELDS": "true" if reject else "false",
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
