"""Exportación HTML de reportes.

Por qué está en adapters:
- HTML es un detalle de presentación (Jinja2).
- El Core solo conoce el agregado `BatchReport`.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.domain.models import BatchReport

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def render_report_html(*, report: BatchReport) -> str:
    """Renderiza un HTML autocontenido para el reporte."""

    generated_at_local = datetime.now().astimezone().isoformat(timespec="seconds")
    invalid = [
        {"index": outcome.index, "rows": outcome.error_rows()}
        for outcome in report.outcomes
        if not outcome.valid
    ]
    template = _get_env().get_template("report.html")
    return template.render(
        report=report,
        generated_at=report.generated_at.isoformat(timespec="seconds"),
        generated_at_local=generated_at_local,
        invalid_outcomes=invalid,
        failing_fields=report.failing_fields(),
    )


def export_report_html(*, report: BatchReport, output_path: Path) -> Path:
    """Exporta el reporte como HTML."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_report_html(report=report), encoding="utf-8")
    return output_path
