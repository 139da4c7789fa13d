"""Errores del dominio de validación.

Por qué aquí:
- Un fallo de validación es un resultado normal, no un error fatal: los checks
  lanzan `ValidationError` y el serializer lo recoge y agrega por campo.
- El resto de excepciones señalan mal uso de la API o esquemas rotos.
"""

from __future__ import annotations

from typing import Any

NON_FIELD_ERRORS = "non_field_errors"


class ErrorDetail(str):
    """Mensaje legible que además transporta un `code` estable."""

    code: str | None = None

    def __new__(cls, message: str, code: str | None = None) -> "ErrorDetail":
        self = super().__new__(cls, message)
        self.code = code
        return self

    def __eq__(self, other: object) -> bool:
        if not str.__eq__(self, other):
            return False
        if isinstance(other, ErrorDetail):
            return self.code == other.code
        return True

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash(str(self))

    def __repr__(self) -> str:
        return f"ErrorDetail(string={str(self)!r}, code={self.code!r})"


def _get_error_details(data: Any, default_code: str | None = None) -> Any:
    if isinstance(data, (list, tuple)):
        return [_get_error_details(item, default_code) for item in data]
    if isinstance(data, dict):
        return {str(key): _get_error_details(value, default_code) for key, value in data.items()}

    code = getattr(data, "code", default_code)
    return ErrorDetail(str(data), code)


def _get_codes(detail: Any) -> Any:
    if isinstance(detail, list):
        return [_get_codes(item) for item in detail]
    if isinstance(detail, dict):
        return {key: _get_codes(value) for key, value in detail.items()}
    return detail.code


class ValidationError(Exception):
    """Fallo de validación de un campo o del registro completo.

    `detail` acepta:
    - un mensaje (`str`) -> se normaliza a `[mensaje]`
    - una lista de mensajes
    - un dict campo -> mensaje(s), para atribuir fallos de registro a campos
    """

    default_detail = "Invalid input."
    default_code = "invalid"

    def __init__(self, detail: Any = None, code: str | None = None) -> None:
        if detail is None:
            detail = self.default_detail
        if code is None:
            code = self.default_code

        if isinstance(detail, tuple):
            detail = list(detail)
        elif not isinstance(detail, (dict, list)):
            detail = [detail]

        self.detail = _get_error_details(detail, code)
        super().__init__(self.detail)

    def __str__(self) -> str:
        return str(self.detail)

    def get_codes(self) -> Any:
        return _get_codes(self.detail)


class SkipField(Exception):
    """Señal interna: el campo no aparece en el registro aceptado."""


class DocumentFormatError(ValueError):
    """Un documento de entrada (esquema o registros) no se puede interpretar."""


class SchemaDefinitionError(DocumentFormatError):
    """Un documento de esquema declarativo no es válido."""


class SerializerUsageError(RuntimeError):
    """La API del serializer se usó fuera de orden."""
