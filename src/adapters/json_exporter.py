"""Exportación JSON del reporte de validación.

Por qué JSON:
- Interoperabilidad con pipelines (CI, ingestas) que consumen los errores.
- Permite persistir el resultado sin depender del render HTML.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import BatchReport


def report_to_json(report: BatchReport) -> str:
    payload = report.model_dump(mode="json")
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_report_json(*, report: BatchReport, output_path: Path) -> Path:
    """Exporta `BatchReport` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report_to_json(report), encoding="utf-8")
    return output_path
