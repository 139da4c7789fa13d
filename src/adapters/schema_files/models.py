"""Modelos para esquemas declarativos (data-driven).

Idea:
- En vez de escribir una clase Serializer por cada tipo de registro, leemos un
  JSON que describe campos y reglas, y construimos el serializer en runtime.

Ejemplo mínimo::

    {
      "name": "bid",
      "fields": [
        {"name": "bid_amount", "type": "decimal", "gt": 0,
         "error_messages": {"greater_than": "Bid amount must be greater than zero."}}
      ],
      "rules": []
    }
"""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from adapters.schema_files.operations import KNOWN_OPERATIONS
from core.validators import COMPARISON_OPERATORS

FieldType = Literal[
    "string",
    "email",
    "integer",
    "float",
    "decimal",
    "boolean",
    "choice",
    "datetime",
    "list",
    "object",
]

RuleKind = Literal["required_together", "mutually_exclusive", "compare", "unique_together"]

_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"
_NUMBER_TYPES = ("integer", "float", "decimal")
_LENGTH_TYPES = ("string", "email", "list")


class RuleSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: RuleKind
    fields: list[str] = Field(default_factory=list)
    message: str | None = None

    # compare
    left: str | None = None
    op: str | None = None
    right: str | None = None
    value: Any = None

    # unique_together: registros ya existentes contra los que comparar
    existing: list[dict[str, Any]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_shape(self) -> "RuleSpec":
        if self.kind == "compare":
            if not self.left or not self.op:
                raise ValueError("compare rules need `left` and `op`")
            if self.op not in COMPARISON_OPERATORS:
                raise ValueError(f"unknown comparison operator {self.op!r}")
            has_value = "value" in self.model_fields_set
            if (self.right is None) == (not has_value):
                raise ValueError("compare rules need exactly one of `right` or `value`")
        elif len(self.fields) < 2 and self.kind != "unique_together":
            raise ValueError(f"{self.kind} rules need at least two fields")
        elif not self.fields:
            raise ValueError("unique_together rules need at least one field")
        return self

    def referenced_fields(self) -> list[str]:
        names = list(self.fields)
        if self.left:
            names.append(self.left)
        if self.right:
            names.append(self.right)
        return names


class FieldSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=128, pattern=_NAME_PATTERN)
    type: FieldType
    label: str | None = None
    help_text: str | None = None

    required: bool | None = None
    allow_null: bool = False
    default: Any = None
    read_only: bool = False
    write_only: bool = False

    # string / email
    allow_blank: bool = False
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    pattern: str | None = None
    normalize: list[str] = Field(default_factory=list)

    # numbers
    min_value: int | float | None = None
    max_value: int | float | None = None
    gt: int | float | None = None
    lt: int | float | None = None
    max_digits: int | None = Field(default=None, ge=1)
    decimal_places: int | None = Field(default=None, ge=0)

    # choice / prohibidos
    choices: list[Any] | None = None
    not_in: list[Any] | None = None

    error_messages: dict[str, str] = Field(default_factory=dict)

    # list / object
    child: "FieldSpec | None" = None
    fields: "list[FieldSpec] | None" = None
    rules: list[RuleSpec] = Field(default_factory=list)
    many: bool = False

    @field_validator("normalize")
    @classmethod
    def _known_operations(cls, value: list[str]) -> list[str]:
        ops = [op.strip().lower() for op in value]
        unknown = [op for op in ops if op not in KNOWN_OPERATIONS]
        if unknown:
            raise ValueError(f"unknown normalizer(s): {', '.join(unknown)}")
        return ops

    @field_validator("pattern")
    @classmethod
    def _compilable_pattern(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as exc:
                raise ValueError(f"invalid pattern {value!r}: {exc}") from exc
        return value

    @model_validator(mode="after")
    def _check_type_options(self) -> "FieldSpec":
        if self.type == "choice" and not self.choices:
            raise ValueError(f"field {self.name!r}: choice fields need `choices`")
        if self.type == "object" and not self.fields:
            raise ValueError(f"field {self.name!r}: object fields need `fields`")
        if self.type != "object" and (self.fields or self.rules or self.many):
            raise ValueError(f"field {self.name!r}: `fields`, `rules` and `many` are only valid for objects")
        if self.type != "list" and self.child is not None:
            raise ValueError(f"field {self.name!r}: `child` is only valid for lists")
        if self.normalize and self.type not in ("string", "email"):
            raise ValueError(f"field {self.name!r}: `normalize` is only valid for string/email fields")
        if self.pattern is not None and self.type != "string":
            raise ValueError(f"field {self.name!r}: `pattern` is only valid for string fields")
        numeric = [name for name in ("min_value", "max_value", "gt", "lt") if getattr(self, name) is not None]
        if numeric and self.type not in _NUMBER_TYPES:
            raise ValueError(f"field {self.name!r}: {', '.join(numeric)} only valid for number fields")
        if (self.max_digits is not None or self.decimal_places is not None) and self.type != "decimal":
            raise ValueError(f"field {self.name!r}: `max_digits` and `decimal_places` are only valid for decimals")
        if (self.min_length is not None or self.max_length is not None) and self.type not in _LENGTH_TYPES:
            raise ValueError(f"field {self.name!r}: `min_length` and `max_length` are only valid for strings and lists")
        if self.read_only and self.required:
            raise ValueError(f"field {self.name!r}: read_only fields cannot be required")
        if self.type == "object":
            _check_names(self.fields or [], self.rules, owner=self.name)
        return self

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set


def _check_names(fields: list[FieldSpec], rules: list[RuleSpec], *, owner: str) -> None:
    names = [f.name for f in fields]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"{owner}: duplicated field name(s): {', '.join(duplicates)}")
    declared = set(names)
    for rule in rules:
        missing = [n for n in rule.referenced_fields() if n not in declared]
        if missing:
            raise ValueError(f"{owner}: rule {rule.kind!r} references unknown field(s): {', '.join(missing)}")


class SchemaFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=128, pattern=_NAME_PATTERN)
    description: str | None = None
    reject_unknown: bool | None = None
    fields: list[FieldSpec] = Field(..., min_length=1)
    rules: list[RuleSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_references(self) -> "SchemaFile":
        _check_names(self.fields, self.rules, owner=self.name)
        return self


FieldSpec.model_rebuild()
