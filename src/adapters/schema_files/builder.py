"""Construcción de serializers a partir de un `SchemaFile`.

Cada `FieldSpec` se traduce al field equivalente de `core.fields` (o a un
serializer anidado para `object`), y cada `RuleSpec` a un validador de
registro de `core.validators`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from adapters.schema_files.models import FieldSpec, RuleSpec, SchemaFile
from adapters.schema_files.operations import apply_input_operations
from core.fields import (
    BooleanField,
    CharField,
    ChoiceField,
    DateTimeField,
    DecimalField,
    EmailField,
    Field,
    FloatField,
    IntegerField,
    ListField,
    RegexField,
)
from core.serializers import Serializer
from core.validators import (
    CompareFieldsValidator,
    GreaterThanValidator,
    LessThanValidator,
    MutuallyExclusiveValidator,
    ProhibitedValuesValidator,
    RequiredTogetherValidator,
    UniqueTogetherValidator,
)


class _NormalizeMixin:
    """Aplica `operations` al texto ya coercionado."""

    def __init__(self, *args: Any, operations: tuple[str, ...] = (), **kwargs: Any) -> None:
        self.operations = tuple(operations)
        super().__init__(*args, **kwargs)

    def to_internal_value(self, data: Any) -> str:
        value = super().to_internal_value(data)  # type: ignore[misc]
        return apply_input_operations(value, self.operations)


class NormalizedCharField(_NormalizeMixin, CharField):
    pass


class NormalizedEmailField(_NormalizeMixin, EmailField):
    pass


class NormalizedRegexField(_NormalizeMixin, RegexField):
    pass


def _number(spec: FieldSpec, value: int | float | None) -> Any:
    if value is None:
        return None
    if spec.type == "decimal":
        return Decimal(str(value))
    return value


def _common_kwargs(spec: FieldSpec) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "allow_null": spec.allow_null,
        "read_only": spec.read_only,
        "write_only": spec.write_only,
        "error_messages": dict(spec.error_messages),
    }
    if spec.label is not None:
        kwargs["label"] = spec.label
    if spec.help_text is not None:
        kwargs["help_text"] = spec.help_text
    if spec.has_default:
        kwargs["default"] = spec.default
        kwargs["required"] = False
    elif spec.required is not None:
        kwargs["required"] = spec.required
    return kwargs


def _extra_validators(spec: FieldSpec) -> list[Any]:
    validators: list[Any] = []
    messages = spec.error_messages
    if spec.gt is not None:
        validators.append(GreaterThanValidator(_number(spec, spec.gt), messages.get("greater_than")))
    if spec.lt is not None:
        validators.append(LessThanValidator(_number(spec, spec.lt), messages.get("less_than")))
    if spec.not_in:
        validators.append(ProhibitedValuesValidator(spec.not_in, messages.get("prohibited")))
    return validators


def build_field(spec: FieldSpec) -> Field:
    kwargs = _common_kwargs(spec)
    validators = _extra_validators(spec)
    if validators:
        kwargs["validators"] = validators

    kind = spec.type
    if kind in ("string", "email"):
        text_kwargs = dict(
            allow_blank=spec.allow_blank,
            min_length=spec.min_length,
            max_length=spec.max_length,
            **kwargs,
        )
        if spec.normalize:
            text_kwargs["operations"] = tuple(spec.normalize)
            if kind == "email":
                return NormalizedEmailField(**text_kwargs)
            if spec.pattern:
                return NormalizedRegexField(spec.pattern, **text_kwargs)
            return NormalizedCharField(**text_kwargs)
        if kind == "email":
            return EmailField(**text_kwargs)
        if spec.pattern:
            return RegexField(spec.pattern, **text_kwargs)
        return CharField(**text_kwargs)

    if kind == "integer":
        return IntegerField(
            min_value=_number(spec, spec.min_value),
            max_value=_number(spec, spec.max_value),
            **kwargs,
        )
    if kind == "float":
        return FloatField(
            min_value=_number(spec, spec.min_value),
            max_value=_number(spec, spec.max_value),
            **kwargs,
        )
    if kind == "decimal":
        return DecimalField(
            max_digits=spec.max_digits,
            decimal_places=spec.decimal_places,
            min_value=_number(spec, spec.min_value),
            max_value=_number(spec, spec.max_value),
            **kwargs,
        )
    if kind == "boolean":
        return BooleanField(**kwargs)
    if kind == "choice":
        return ChoiceField(spec.choices or [], **kwargs)
    if kind == "datetime":
        return DateTimeField(**kwargs)
    if kind == "list":
        child = build_field(spec.child) if spec.child is not None else None
        return ListField(
            child,
            min_length=spec.min_length,
            max_length=spec.max_length,
            **kwargs,
        )
    if kind == "object":
        nested_class = _build_class(
            _class_name(spec.name),
            spec.fields or [],
            spec.rules,
            reject_unknown=None,
        )
        return nested_class(many=spec.many, **kwargs)

    raise AssertionError(f"unhandled field type {kind!r}")


def build_rule(rule: RuleSpec) -> Any:
    if rule.kind == "required_together":
        return RequiredTogetherValidator(rule.fields, rule.message)
    if rule.kind == "mutually_exclusive":
        return MutuallyExclusiveValidator(rule.fields, rule.message)
    if rule.kind == "unique_together":
        return UniqueTogetherValidator(rule.existing, rule.fields, rule.message)
    if rule.kind == "compare":
        compare_kwargs: dict[str, Any] = {"message": rule.message}
        if rule.right is not None:
            compare_kwargs["right"] = rule.right
        else:
            compare_kwargs["value"] = rule.value
        # Sin `fields` el fallo se atribuye al registro completo.
        compare_kwargs["fields"] = rule.fields
        return CompareFieldsValidator(rule.left or "", rule.op or "", **compare_kwargs)
    raise AssertionError(f"unhandled rule kind {rule.kind!r}")


def _class_name(name: str) -> str:
    return "".join(part.capitalize() for part in name.split("_")) + "Serializer"


def _build_class(
    class_name: str,
    fields: list[FieldSpec],
    rules: list[RuleSpec],
    *,
    reject_unknown: bool | None,
) -> type[Serializer]:
    meta = type(
        "Meta",
        (),
        {
            "validators": [build_rule(rule) for rule in rules],
            "reject_unknown": reject_unknown,
        },
    )
    attrs: dict[str, Any] = {spec.name: build_field(spec) for spec in fields}
    attrs["Meta"] = meta
    attrs["__module__"] = __name__
    return type(class_name, (Serializer,), attrs)


def build_serializer_class(schema: SchemaFile) -> type[Serializer]:
    """Crea una subclase de `Serializer` equivalente al esquema."""

    serializer_class = _build_class(
        _class_name(schema.name),
        schema.fields,
        schema.rules,
        reject_unknown=schema.reject_unknown,
    )
    serializer_class.__doc__ = schema.description
    return serializer_class
