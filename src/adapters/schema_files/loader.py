"""Carga de esquemas y registros (data-driven).

Soporta:
- Esquema: un objeto JSON `SchemaFile` (ruta local o URL).
- Registros: array JSON, objeto `{"records": [...]}`, un único objeto, o
  JSON Lines (`.jsonl` / `.ndjson`).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from adapters.schema_files.models import SchemaFile
from core.config import AppSettings
from core.domain.errors import DocumentFormatError, SchemaDefinitionError
from core.resources_loader import read_text

_JSON_LINES_SUFFIXES = (".jsonl", ".ndjson")


def parse_schema(data: Any) -> SchemaFile:
    try:
        return SchemaFile.model_validate(data)
    except PydanticValidationError as exc:
        raise SchemaDefinitionError(f"Invalid schema document:\n{exc}") from exc


def load_schema_file(
    source: str | Path,
    *,
    settings: AppSettings | None = None,
    client: httpx.Client | None = None,
) -> SchemaFile:
    raw = read_text(source, settings=settings, client=client)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SchemaDefinitionError(f"Schema {source} is not valid JSON: {exc}") from exc
    return parse_schema(data)


def parse_records(raw: str, *, json_lines: bool = False) -> list[Any]:
    if json_lines:
        records: list[Any] = []
        for lineno, line in enumerate(raw.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise DocumentFormatError(f"line {lineno}: {exc}") from exc
        return records

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DocumentFormatError(f"Records are not valid JSON: {exc}") from exc

    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        inner = data.get("records")
        if isinstance(inner, list):
            return inner
        return [data]
    raise DocumentFormatError(f"Expected a JSON array or object, got {type(data).__name__}.")


def load_records(
    source: str | Path,
    *,
    settings: AppSettings | None = None,
    client: httpx.Client | None = None,
) -> list[Any]:
    raw = read_text(source, settings=settings, client=client)
    json_lines = str(source).lower().endswith(_JSON_LINES_SUFFIXES)
    return parse_records(raw, json_lines=json_lines)
