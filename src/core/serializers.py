"""Serializers: declarative record validation and representation.

Pipeline for `is_valid()`:

1. Input must be a mapping (otherwise a whole-record error).
2. Every writable field runs its own validation and then the optional
   `validate_<field>` hook. Failures are aggregated per field; every field is
   visited even after the first failure.
3. Only if step 2 produced no failures, record validators (`Meta.validators`)
   and the `validate(attrs)` hook run. Their failures are merged into the
   same mapping, attributed to fields or to the whole-record key.

A serializer instance can also be declared as a field of another serializer
(nested records), and `many=True` wraps it into a `ListSerializer`.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from core.domain.errors import (
    NON_FIELD_ERRORS,
    SerializerUsageError,
    SkipField,
    ValidationError,
)
from core.fields import Field, empty
from core.interfaces.validator import call_validator

logger = logging.getLogger(__name__)

LIST_SERIALIZER_KWARGS = (
    "read_only",
    "write_only",
    "required",
    "default",
    "allow_null",
    "source",
    "label",
    "help_text",
    "error_messages",
    "allow_empty",
    "min_length",
    "max_length",
    "instance",
    "data",
    "partial",
    "context",
)


def _non_field_key(serializer: Field) -> str:
    return serializer.context.get("non_field_errors_key", NON_FIELD_ERRORS)


def as_serializer_error(exc: ValidationError, non_field_key: str = NON_FIELD_ERRORS) -> dict[str, Any]:
    """Normalize any `ValidationError` into a field -> list mapping."""

    detail = exc.detail
    if isinstance(detail, Mapping):
        return {
            key: value if isinstance(value, (list, Mapping)) else [value]
            for key, value in detail.items()
        }
    if isinstance(detail, list):
        return {non_field_key: detail}
    return {non_field_key: [detail]}


def merge_errors(target: dict[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in incoming.items():
        if key in target and isinstance(target[key], list) and isinstance(value, list):
            target[key].extend(value)
        else:
            target[key] = value
    return target


class BaseSerializer(Field):
    """Shared lifecycle: construction, `is_valid`, `errors`, `data`, `save`."""

    def __init__(
        self,
        instance: Any = None,
        data: Any = empty,
        *,
        partial: bool = False,
        context: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        self.instance = instance
        if data is not empty:
            self.initial_data = data
        self.partial = partial
        self._context = dict(context or {})
        kwargs.pop("many", None)
        super().__init__(**kwargs)

    def __new__(cls, *args: Any, **kwargs: Any) -> "BaseSerializer":
        if kwargs.pop("many", False):
            return cls.many_init(*args, **kwargs)
        instance = super().__new__(cls)
        instance._args = args
        instance._kwargs = kwargs
        return instance

    @classmethod
    def many_init(cls, *args: Any, **kwargs: Any) -> "ListSerializer":
        child_kwargs = {key: value for key, value in kwargs.items() if key not in LIST_SERIALIZER_KWARGS}
        list_kwargs = {key: value for key, value in kwargs.items() if key in LIST_SERIALIZER_KWARGS}
        list_kwargs["child"] = cls(**child_kwargs)
        return ListSerializer(*args, **list_kwargs)

    def __deepcopy__(self, memo: dict[int, Any]) -> "BaseSerializer":
        return self.__class__(*self._args, **copy.deepcopy(self._kwargs, memo))

    # -- validation ----------------------------------------------------------

    def is_valid(self, *, raise_exception: bool = False) -> bool:
        if not hasattr(self, "initial_data"):
            raise SerializerUsageError(
                "Cannot call `.is_valid()` without passing `data=` to the serializer."
            )

        if not hasattr(self, "_validated_data"):
            try:
                self._validated_data = self.run_validation(self.initial_data)
            except ValidationError as exc:
                self._validated_data = {}
                self._errors = self.format_errors(exc)
            else:
                self._errors = self.no_errors()
            logger.debug(
                "%s validated: valid=%s", self.__class__.__name__, not bool(self._errors)
            )

        if self._errors and raise_exception:
            raise ValidationError(self._errors)
        return not bool(self._errors)

    def format_errors(self, exc: ValidationError) -> Any:
        return as_serializer_error(exc, _non_field_key(self))

    def no_errors(self) -> Any:
        return {}

    @property
    def errors(self) -> Any:
        if not hasattr(self, "_errors"):
            raise SerializerUsageError("You must call `.is_valid()` before accessing `.errors`.")
        return self._errors

    @property
    def validated_data(self) -> Any:
        if not hasattr(self, "_validated_data"):
            raise SerializerUsageError("You must call `.is_valid()` before accessing `.validated_data`.")
        return self._validated_data

    # -- persistence hooks -----------------------------------------------------

    def create(self, validated_data: Any) -> Any:
        raise NotImplementedError("`create()` must be implemented.")

    def update(self, instance: Any, validated_data: Any) -> Any:
        raise NotImplementedError("`update()` must be implemented.")

    def save(self, **extra: Any) -> Any:
        if not hasattr(self, "_errors"):
            raise SerializerUsageError("You must call `.is_valid()` before calling `.save()`.")
        if self._errors:
            raise SerializerUsageError("You cannot call `.save()` on a serializer with invalid data.")

        validated_data = self._merge_save_kwargs(extra)
        if self.instance is not None:
            self.instance = self.update(self.instance, validated_data)
        else:
            self.instance = self.create(validated_data)
        return self.instance

    def _merge_save_kwargs(self, extra: Mapping[str, Any]) -> Any:
        return {**self.validated_data, **extra}

    # -- representation --------------------------------------------------------

    @property
    def data(self) -> Any:
        if not hasattr(self, "_data"):
            if self.instance is not None and not getattr(self, "_errors", None):
                self._data = self.to_representation(self.instance)
            elif hasattr(self, "_validated_data") and not self._errors:
                self._data = self.to_representation(self.validated_data)
            else:
                self._data = self.get_initial()
        return self._data

    def get_initial(self) -> Any:
        return getattr(self, "initial_data", None)


class SerializerMetaclass(type):
    """Collects declared `Field` attributes into `_declared_fields`.

    Fields declared on base classes are inherited; a subclass redeclaring a
    name wins, and setting it to None removes it.
    """

    @classmethod
    def _get_declared_fields(mcs, bases: tuple[type, ...], attrs: dict[str, Any]) -> dict[str, Field]:
        fields = [(name, attrs.pop(name)) for name, obj in list(attrs.items()) if isinstance(obj, Field)]

        known = set(attrs)

        def visit(name: str) -> str:
            known.add(name)
            return name

        base_fields = [
            (visit(name), field)
            for base in bases
            if hasattr(base, "_declared_fields")
            for name, field in base._declared_fields.items()
            if name not in known
        ]
        return dict(base_fields + fields)

    def __new__(mcs, name: str, bases: tuple[type, ...], attrs: dict[str, Any]) -> type:
        attrs["_declared_fields"] = mcs._get_declared_fields(bases, attrs)
        return super().__new__(mcs, name, bases, attrs)


class Serializer(BaseSerializer, metaclass=SerializerMetaclass):
    """Validates one record (a mapping) against declared fields."""

    _declared_fields: dict[str, Field]

    default_error_messages = {
        "invalid": "Invalid data. Expected a dictionary, but got {datatype}.",
        "unexpected": "Unexpected field.",
    }

    class Meta:
        validators: list[Any] = []
        reject_unknown: bool | None = None

    @property
    def fields(self) -> dict[str, Field]:
        if not hasattr(self, "_fields"):
            self._fields = {}
            for field_name, field in self.get_fields().items():
                field.bind(field_name, self)
                self._fields[field_name] = field
        return self._fields

    def get_fields(self) -> dict[str, Field]:
        return copy.deepcopy(self._declared_fields)

    @property
    def _writable_fields(self) -> list[Field]:
        return [field for field in self.fields.values() if not field.read_only]

    @property
    def _readable_fields(self) -> list[Field]:
        return [field for field in self.fields.values() if not field.write_only]

    def get_validators(self) -> list[Any]:
        meta = getattr(self, "Meta", None)
        return list(getattr(meta, "validators", []) or [])

    def rejects_unknown(self) -> bool:
        meta_value = getattr(getattr(self, "Meta", None), "reject_unknown", None)
        if meta_value is not None:
            return bool(meta_value)
        return bool(self.context.get("reject_unknown_fields", False))

    # -- field level -----------------------------------------------------------

    def get_value(self, data: Mapping[str, Any]) -> Any:
        return data.get(self.field_name, empty)

    def to_internal_value(self, data: Any) -> dict[str, Any]:
        if not isinstance(data, Mapping):
            raise ValidationError(
                {_non_field_key(self): [self.get_message("invalid").format(datatype=type(data).__name__)]},
                code="invalid",
            )

        accepted: dict[str, Any] = {}
        errors: dict[str, Any] = {}

        for field in self._writable_fields:
            hook = getattr(self, f"validate_{field.field_name}", None)
            primitive = field.get_value(data)
            try:
                value = field.run_validation(primitive)
                if hook is not None:
                    value = hook(value)
            except ValidationError as exc:
                errors[field.field_name] = exc.detail
            except SkipField:
                pass
            else:
                accepted[field.source] = value

        if self.rejects_unknown():
            known = set(self.fields)
            for key in data:
                if key not in known:
                    errors[str(key)] = [self.get_message("unexpected")]

        if errors:
            raise ValidationError(errors)
        return accepted

    # -- record level ----------------------------------------------------------

    def run_validation(self, data: Any = empty) -> Any:
        is_empty_value, data = self.validate_empty_values(data)
        if is_empty_value:
            return data

        value = self.to_internal_value(data)
        non_field_key = _non_field_key(self)

        errors: dict[str, Any] = {}
        for validator in self.get_validators():
            try:
                call_validator(validator, value, self)
            except ValidationError as exc:
                merge_errors(errors, as_serializer_error(exc, non_field_key))

        try:
            validated = self.validate(value)
        except ValidationError as exc:
            merge_errors(errors, as_serializer_error(exc, non_field_key))
        else:
            if validated is None:
                raise SerializerUsageError(f"{self.__class__.__name__}.validate() should return the validated data.")
            value = validated

        if errors:
            raise ValidationError(errors)
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        return attrs

    # -- representation --------------------------------------------------------

    def to_representation(self, instance: Any) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for field in self._readable_fields:
            try:
                attribute = field.get_attribute(instance)
            except SkipField:
                continue
            result[field.field_name] = None if attribute is None else field.to_representation(attribute)
        return result

    def get_initial(self) -> Any:
        initial = getattr(self, "initial_data", None)
        if not isinstance(initial, Mapping):
            return initial
        return {name: initial[name] for name in self.fields if name in initial}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(fields={list(self._declared_fields)})"


class ListSerializer(BaseSerializer):
    """Validates a list of records with a shared child serializer."""

    default_error_messages = {
        "not_a_list": 'Expected a list of items but got type "{input_type}".',
        "empty": "This list may not be empty.",
        "min_length": "Ensure this field has at least {min_length} elements.",
        "max_length": "Ensure this field has no more than {max_length} elements.",
    }

    def __init__(
        self,
        *args: Any,
        child: Serializer,
        allow_empty: bool = True,
        min_length: int | None = None,
        max_length: int | None = None,
        **kwargs: Any,
    ) -> None:
        self.child = child
        self.allow_empty = allow_empty
        self.min_length = min_length
        self.max_length = max_length
        super().__init__(*args, **kwargs)
        self.child.bind("", self)

    def __new__(cls, *args: Any, **kwargs: Any) -> "ListSerializer":
        instance = object.__new__(cls)
        instance._args = args
        instance._kwargs = kwargs
        return instance

    def __deepcopy__(self, memo: dict[int, Any]) -> "ListSerializer":
        kwargs = dict(self._kwargs)
        child = kwargs.pop("child")
        return ListSerializer(*self._args, child=copy.deepcopy(child, memo), **copy.deepcopy(kwargs, memo))

    def to_internal_value(self, data: Any) -> list[Any]:
        if isinstance(data, (str, bytes, Mapping)) or not isinstance(data, Iterable):
            self.fail("not_a_list", input_type=type(data).__name__)
        items = list(data)
        if not self.allow_empty and not items:
            self.fail("empty")
        if self.min_length is not None and len(items) < self.min_length:
            self.fail("min_length", min_length=self.min_length)
        if self.max_length is not None and len(items) > self.max_length:
            self.fail("max_length", max_length=self.max_length)

        accepted: list[Any] = []
        errors: list[Any] = []
        for item in items:
            try:
                accepted.append(self.child.run_validation(item))
            except ValidationError as exc:
                detail = exc.detail
                # Items that are not mappings fail as a whole record.
                errors.append(detail if isinstance(detail, Mapping) else {_non_field_key(self): detail})
            else:
                errors.append({})

        if any(errors):
            raise ValidationError(errors)
        return accepted

    def run_validation(self, data: Any = empty) -> Any:
        is_empty_value, data = self.validate_empty_values(data)
        if is_empty_value:
            return data
        return self.to_internal_value(data)

    def format_errors(self, exc: ValidationError) -> Any:
        detail = exc.detail
        if isinstance(detail, list) and all(isinstance(item, Mapping) for item in detail):
            return detail
        return as_serializer_error(exc, _non_field_key(self))

    def no_errors(self) -> Any:
        return []

    def to_representation(self, data: Any) -> list[Any]:
        return [self.child.to_representation(item) for item in data]

    def create(self, validated_data: list[Any]) -> list[Any]:
        return [self.child.create(attrs) for attrs in validated_data]

    def _merge_save_kwargs(self, extra: Mapping[str, Any]) -> list[Any]:
        return [{**attrs, **extra} for attrs in self.validated_data]

    def __repr__(self) -> str:
        return f"ListSerializer(child={self.child!r})"
