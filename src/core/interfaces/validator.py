"""Contratos de validadores reutilizables.

Por qué Protocol:
- Cualquier callable vale como validador (funciones simples u objetos).
- Los validadores built-in piden además el contexto (campo o serializer) para
  resolver idioma y nombres; se marcan con `requires_context = True`.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from core.domain.language import Language


@runtime_checkable
class ValidationOwner(Protocol):
    """Lo que un validador con contexto puede consultar de su dueño."""

    @property
    def language(self) -> Language: ...


@runtime_checkable
class ValueValidator(Protocol):
    """Contrato mínimo: lanza `ValidationError` si el valor no es aceptable.

    El valor de retorno se ignora.
    """

    def __call__(self, value: Any) -> Any:
        ...


@runtime_checkable
class ContextValidator(Protocol):
    requires_context: bool

    def __call__(self, value: Any, owner: ValidationOwner) -> Any:
        ...


def call_validator(
    validator: ValueValidator | ContextValidator, value: Any, owner: ValidationOwner
) -> Any:
    """Invoca un validador respetando `requires_context`."""

    if getattr(validator, "requires_context", False):
        return validator(value, owner)
    return validator(value)
