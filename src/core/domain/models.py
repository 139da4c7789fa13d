"""Modelos del dominio (Pydantic v2).

Por qué Pydantic aquí:
- Los resultados de validación en lote se exportan (JSON/HTML) y se muestran
  en la CLI; un modelo tipado da un contrato estable a esos consumidores.
- El motor de validación en sí (`core.serializers`) no depende de estos modelos.

Nota:
- Estos modelos describen *qué* salió de una validación, no *cómo* se validó.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, computed_field

from core.domain.language import Language


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordOutcome(BaseModel):
    """Resultado de validar un registro.

    Por qué existe:
    - Conserva la posición del registro en la entrada para poder localizarlo.
    - `errors` mantiene la forma del serializer (campo -> mensajes, o
      estructuras anidadas para registros anidados).
    """

    index: int = Field(
        ...,
        ge=0,
        description="Posición del registro en la entrada (base 0).",
    )
    valid: bool = Field(
        ...,
        description="True si no se agregó ningún fallo.",
    )
    data: dict[str, Any] | None = Field(
        default=None,
        description="Representación del registro aceptado (solo si es válido).",
    )
    errors: dict[str, Any] = Field(
        default_factory=dict,
        description="Campo (o marcador de registro) -> motivos legibles.",
    )
    codes: dict[str, Any] = Field(
        default_factory=dict,
        description="Misma forma que `errors`, con códigos en vez de mensajes.",
    )

    def error_rows(self) -> list[tuple[str, str]]:
        """Aplana `errors` a filas `(ruta, mensaje)` para tablas.

        `{"bidder": {"bidder_id": ["..."]}}` -> `[("bidder.bidder_id", "...")]`
        """

        return _flatten_errors(self.errors)


def _flatten_errors(errors: dict[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    rows: list[tuple[str, str]] = []
    for key, value in errors.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            rows.extend(_flatten_errors(value, path))
        elif isinstance(value, list):
            for index, item in enumerate(value):
                if isinstance(item, dict):
                    rows.extend(_flatten_errors(item, f"{path}[{index}]"))
                else:
                    rows.append((path, str(item)))
        else:
            rows.append((path, str(value)))
    return rows


class BatchReport(BaseModel):
    """Agregado de una ejecución de validación en lote."""

    schema_name: str = Field(
        ...,
        min_length=1,
        max_length=256,
        description="Nombre del esquema/serializer usado.",
    )
    outcomes: list[RecordOutcome] = Field(
        default_factory=list,
        description="Un resultado por registro, en orden de entrada.",
    )
    language: Language = Field(
        default=Language.ENGLISH,
        description="Idioma de los mensajes built-in.",
    )
    generated_at: datetime = Field(
        default_factory=_utcnow,
        description="Momento de generación del reporte (UTC).",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return len(self.outcomes)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def valid_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.valid)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def invalid_count(self) -> int:
        return self.total - self.valid_count

    @property
    def all_valid(self) -> bool:
        return self.invalid_count == 0

    def failing_fields(self) -> dict[str, int]:
        """Cuenta, por campo, cuántos registros fallaron en él."""

        counts: dict[str, int] = {}
        for outcome in self.outcomes:
            for key in outcome.errors:
                counts[key] = counts.get(key, 0) + 1
        return dict(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))
