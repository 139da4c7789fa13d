"""Declarative fields.

Each field knows how to turn one raw input value into an accepted Python
value (`run_validation`) and back into a JSON-friendly primitive
(`to_representation`). Fields are declared on a `Serializer` class and bound
to it by name.
"""

from __future__ import annotations

import copy
import decimal
import math
import re
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

from core.domain.errors import SkipField, ValidationError
from core.domain.language import Language
from core.domain.messages import translate
from core.interfaces.validator import call_validator
from core.validators import (
    EmailValidator,
    MaxLengthValidator,
    MaxValueValidator,
    MinLengthValidator,
    MinValueValidator,
    RegexValidator,
    format_message,
)


class _Empty:
    """Marker for "no value supplied" (distinct from None)."""

    def __repr__(self) -> str:
        return "empty"


empty: Any = _Empty()


class Field:
    default_error_messages: dict[str, str] = {
        "required": "This field is required.",
        "null": "This field may not be null.",
    }
    default_validators: list[Callable[..., Any]] = []

    def __init__(
        self,
        *,
        read_only: bool = False,
        write_only: bool = False,
        required: bool | None = None,
        default: Any = empty,
        allow_null: bool = False,
        source: str | None = None,
        validators: Iterable[Callable[..., Any]] | None = None,
        error_messages: Mapping[str, str] | None = None,
        label: str | None = None,
        help_text: str | None = None,
    ) -> None:
        if required is None:
            required = default is empty and not read_only
        if read_only and required:
            raise ValueError("A field may not be both read_only and required.")
        if required and default is not empty:
            raise ValueError("A required field may not declare a default.")

        self.read_only = read_only
        self.write_only = write_only
        self.required = required
        self.default = default
        self.allow_null = allow_null
        self.source = source
        self.label = label
        self.help_text = help_text

        self.field_name: str | None = None
        self.parent: Field | None = None

        self._validators = list(validators) if validators is not None else None

        messages: dict[str, str] = {}
        for cls in reversed(self.__class__.__mro__):
            messages.update(getattr(cls, "default_error_messages", {}))
        self.error_messages = messages
        self._custom_messages = dict(error_messages or {})
        self.error_messages.update(self._custom_messages)

    # -- binding -----------------------------------------------------------

    def bind(self, field_name: str, parent: "Field") -> None:
        self.field_name = field_name
        self.parent = parent
        if self.label is None:
            self.label = field_name.replace("_", " ").capitalize()
        if self.source is None:
            self.source = field_name

    @property
    def root(self) -> "Field":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def context(self) -> dict[str, Any]:
        return getattr(self.root, "_context", {})

    @property
    def language(self) -> Language:
        return Language.coerce(self.context.get("language"))

    @property
    def validators(self) -> list[Callable[..., Any]]:
        if self._validators is None:
            self._validators = list(self.default_validators)
        return self._validators

    @validators.setter
    def validators(self, validators: Iterable[Callable[..., Any]]) -> None:
        self._validators = list(validators)

    def __deepcopy__(self, memo: dict[int, Any]) -> "Field":
        # Validators may hold unpicklable state (compiled regexes, callables).
        clone = copy.copy(self)
        clone._validators = list(self._validators) if self._validators is not None else None
        clone.error_messages = dict(self.error_messages)
        clone.field_name = None
        clone.parent = None
        return clone

    # -- input ---------------------------------------------------------------

    def get_value(self, data: Mapping[str, Any]) -> Any:
        return data.get(self.field_name, empty)

    def get_default(self) -> Any:
        if self.default is empty or getattr(self.root, "partial", False):
            raise SkipField()
        if callable(self.default):
            return self.default()
        return self.default

    def validate_empty_values(self, data: Any) -> tuple[bool, Any]:
        """Handle missing and null input.

        Returns `(True, value)` when the value is settled without running
        coercion, `(False, data)` otherwise.
        """

        if self.read_only:
            return True, self.get_default()

        if data is empty:
            if getattr(self.root, "partial", False):
                raise SkipField()
            if self.required:
                self.fail("required")
            return True, self.get_default()

        if data is None:
            if not self.allow_null:
                self.fail("null")
            return True, None

        return False, data

    def run_validation(self, data: Any = empty) -> Any:
        is_empty_value, data = self.validate_empty_values(data)
        if is_empty_value:
            return data
        value = self.to_internal_value(data)
        self.run_validators(value)
        return value

    def run_validators(self, value: Any) -> None:
        errors: list[Any] = []
        for validator in self.validators:
            try:
                call_validator(validator, value, self)
            except ValidationError as exc:
                if isinstance(exc.detail, dict):
                    raise
                errors.extend(exc.detail)
        if errors:
            raise ValidationError(errors)

    def to_internal_value(self, data: Any) -> Any:
        raise NotImplementedError(f"{self.__class__.__name__}.to_internal_value() must be implemented.")

    # -- output --------------------------------------------------------------

    def get_attribute(self, instance: Any) -> Any:
        source = self.source or self.field_name
        if isinstance(instance, Mapping):
            if source not in instance:
                raise SkipField()
            return instance[source]
        try:
            return getattr(instance, source)
        except AttributeError:
            raise SkipField() from None

    def to_representation(self, value: Any) -> Any:
        raise NotImplementedError(f"{self.__class__.__name__}.to_representation() must be implemented.")

    # -- errors --------------------------------------------------------------

    def get_message(self, key: str) -> str:
        if key in self._custom_messages:
            return self._custom_messages[key]
        try:
            message = self.error_messages[key]
        except KeyError:
            raise AssertionError(
                f"{self.__class__.__name__}.fail() called with unknown key {key!r}."
            ) from None
        return translate(message, self.language)

    def fail(self, key: str, **params: Any) -> None:
        raise ValidationError(format_message(self.get_message(key), params), code=key)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.field_name!r}, required={self.required})"


class CharField(Field):
    default_error_messages = {
        "invalid": "Not a valid string.",
        "blank": "This field may not be blank.",
    }

    def __init__(
        self,
        *,
        allow_blank: bool = False,
        trim_whitespace: bool = True,
        min_length: int | None = None,
        max_length: int | None = None,
        **kwargs: Any,
    ) -> None:
        self.allow_blank = allow_blank
        self.trim_whitespace = trim_whitespace
        self.min_length = min_length
        self.max_length = max_length
        super().__init__(**kwargs)
        if min_length is not None:
            self.validators.append(MinLengthValidator(min_length, self._custom_messages.get("min_length")))
        if max_length is not None:
            self.validators.append(MaxLengthValidator(max_length, self._custom_messages.get("max_length")))

    def run_validation(self, data: Any = empty) -> Any:
        if data == "" or (self.trim_whitespace and isinstance(data, str) and data.strip() == ""):
            if not self.allow_blank:
                self.fail("blank")
            return ""
        return super().run_validation(data)

    def to_internal_value(self, data: Any) -> str:
        if isinstance(data, bool) or not isinstance(data, (str, int, float)):
            self.fail("invalid")
        value = str(data)
        return value.strip() if self.trim_whitespace else value

    def to_representation(self, value: Any) -> str:
        return str(value)


class EmailField(CharField):
    default_error_messages = {"invalid": "Enter a valid email address."}

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.validators.append(EmailValidator(self._custom_messages.get("invalid")))


class RegexField(CharField):
    def __init__(self, regex: str | re.Pattern[str], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.validators.append(RegexValidator(regex, self._custom_messages.get("invalid")))


class IntegerField(Field):
    default_error_messages = {
        "invalid": "A valid integer is required.",
        "max_string_length": "String value too large.",
    }
    MAX_STRING_LENGTH = 1000
    re_decimal = re.compile(r"\.0*\s*$")

    def __init__(self, *, min_value: int | None = None, max_value: int | None = None, **kwargs: Any) -> None:
        self.min_value = min_value
        self.max_value = max_value
        super().__init__(**kwargs)
        if max_value is not None:
            self.validators.append(MaxValueValidator(max_value, self._custom_messages.get("max_value")))
        if min_value is not None:
            self.validators.append(MinValueValidator(min_value, self._custom_messages.get("min_value")))

    def to_internal_value(self, data: Any) -> int:
        if isinstance(data, bool):
            self.fail("invalid")
        if isinstance(data, str) and len(data) > self.MAX_STRING_LENGTH:
            self.fail("max_string_length")
        if isinstance(data, float):
            if not data.is_integer():
                self.fail("invalid")
            return int(data)
        try:
            return int(self.re_decimal.sub("", str(data)))
        except (ValueError, TypeError):
            self.fail("invalid")

    def to_representation(self, value: Any) -> int:
        return int(value)


class FloatField(Field):
    default_error_messages = {
        "invalid": "A valid number is required.",
        "max_string_length": "String value too large.",
    }
    MAX_STRING_LENGTH = 1000

    def __init__(
        self, *, min_value: float | None = None, max_value: float | None = None, **kwargs: Any
    ) -> None:
        self.min_value = min_value
        self.max_value = max_value
        super().__init__(**kwargs)
        if max_value is not None:
            self.validators.append(MaxValueValidator(max_value, self._custom_messages.get("max_value")))
        if min_value is not None:
            self.validators.append(MinValueValidator(min_value, self._custom_messages.get("min_value")))

    def to_internal_value(self, data: Any) -> float:
        if isinstance(data, bool):
            self.fail("invalid")
        if isinstance(data, str) and len(data) > self.MAX_STRING_LENGTH:
            self.fail("max_string_length")
        try:
            value = float(data)
        except (TypeError, ValueError, OverflowError):
            self.fail("invalid")
        if not math.isfinite(value):
            self.fail("invalid")
        return value

    def to_representation(self, value: Any) -> float:
        return float(value)


class DecimalField(Field):
    default_error_messages = {
        "invalid": "A valid number is required.",
        "max_string_length": "String value too large.",
        "max_digits": "Ensure there are no more than {max_digits} digits in total.",
        "max_decimal_places": "Ensure there are no more than {max_decimal_places} decimal places.",
        "max_whole_digits": "Ensure there are no more than {max_whole_digits} digits before the decimal point.",
    }
    MAX_STRING_LENGTH = 1000
    # Largest exponent accepted; quantizing beyond it would build huge numbers.
    MAX_MAGNITUDE = 1000

    def __init__(
        self,
        *,
        max_digits: int | None = None,
        decimal_places: int | None = None,
        coerce_to_string: bool | None = None,
        min_value: decimal.Decimal | int | None = None,
        max_value: decimal.Decimal | int | None = None,
        **kwargs: Any,
    ) -> None:
        self.max_digits = max_digits
        self.decimal_places = decimal_places
        self.coerce_to_string = coerce_to_string
        self.min_value = min_value
        self.max_value = max_value
        if max_digits is not None and decimal_places is not None:
            self.max_whole_digits: int | None = max_digits - decimal_places
        else:
            self.max_whole_digits = None
        super().__init__(**kwargs)
        if max_value is not None:
            self.validators.append(MaxValueValidator(decimal.Decimal(max_value), self._custom_messages.get("max_value")))
        if min_value is not None:
            self.validators.append(MinValueValidator(decimal.Decimal(min_value), self._custom_messages.get("min_value")))

    def to_internal_value(self, data: Any) -> decimal.Decimal:
        if isinstance(data, bool):
            self.fail("invalid")
        text = str(data).strip()
        if len(text) > self.MAX_STRING_LENGTH:
            self.fail("max_string_length")
        try:
            value = decimal.Decimal(text)
        except decimal.DecimalException:
            self.fail("invalid")
        if not value.is_finite() or (value and abs(value.adjusted()) > self.MAX_MAGNITUDE):
            self.fail("invalid")
        return self.quantize(self.validate_precision(value))

    def validate_precision(self, value: decimal.Decimal) -> decimal.Decimal:
        _sign, digittuple, exponent = value.as_tuple()
        if exponent >= 0:
            total_digits = len(digittuple) + exponent
            whole_digits = total_digits
            decimal_places = 0
        elif len(digittuple) > abs(exponent):
            total_digits = len(digittuple)
            whole_digits = total_digits - abs(exponent)
            decimal_places = abs(exponent)
        else:
            total_digits = abs(exponent)
            whole_digits = 0
            decimal_places = total_digits

        if self.max_digits is not None and total_digits > self.max_digits:
            self.fail("max_digits", max_digits=self.max_digits)
        if self.decimal_places is not None and decimal_places > self.decimal_places:
            self.fail("max_decimal_places", max_decimal_places=self.decimal_places)
        if self.max_whole_digits is not None and whole_digits > self.max_whole_digits:
            self.fail("max_whole_digits", max_whole_digits=self.max_whole_digits)
        return value

    def quantize(self, value: decimal.Decimal) -> decimal.Decimal:
        if self.decimal_places is None:
            return value
        # The default context (28 digits) is too small for large values.
        precision = max(decimal.getcontext().prec, value.adjusted() + 1 + self.decimal_places)
        return value.quantize(
            decimal.Decimal(1).scaleb(-self.decimal_places),
            context=decimal.Context(prec=precision),
        )

    def to_representation(self, value: Any) -> str | decimal.Decimal:
        coerce_to_string = self.coerce_to_string
        if coerce_to_string is None:
            coerce_to_string = self.context.get("coerce_decimal_to_string", True)
        if not isinstance(value, decimal.Decimal):
            value = decimal.Decimal(str(value).strip())
        quantized = self.quantize(value)
        return f"{quantized:f}" if coerce_to_string else quantized


class BooleanField(Field):
    default_error_messages = {"invalid": "Must be a valid boolean."}
    TRUE_VALUES = {"t", "true", "y", "yes", "on", "1", 1, True}
    FALSE_VALUES = {"f", "false", "n", "no", "off", "0", 0, False}

    def to_internal_value(self, data: Any) -> bool:
        key = data.strip().lower() if isinstance(data, str) else data
        try:
            if key in self.TRUE_VALUES:
                return True
            if key in self.FALSE_VALUES:
                return False
        except TypeError:
            # Unhashable input (lists, dicts).
            pass
        self.fail("invalid")

    def to_representation(self, value: Any) -> bool:
        return bool(value)


class ChoiceField(Field):
    default_error_messages = {"invalid_choice": '"{input}" is not a valid choice.'}

    def __init__(self, choices: Iterable[Any] | Mapping[Any, str], **kwargs: Any) -> None:
        if isinstance(choices, Mapping):
            self.choices = dict(choices)
        else:
            self.choices = {choice: str(choice) for choice in choices}
        self._by_text = {str(key): key for key in self.choices}
        super().__init__(**kwargs)

    def to_internal_value(self, data: Any) -> Any:
        try:
            return self._by_text[str(data)]
        except KeyError:
            self.fail("invalid_choice", input=data)

    def to_representation(self, value: Any) -> Any:
        return value


class DateTimeField(Field):
    default_error_messages = {"invalid": "Datetime has wrong format. Use ISO 8601."}

    def to_internal_value(self, data: Any) -> datetime:
        if isinstance(data, datetime):
            return data
        if not isinstance(data, str):
            self.fail("invalid")
        text = data.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            self.fail("invalid")

    def to_representation(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        return value.isoformat()


class ListField(Field):
    default_error_messages = {
        "not_a_list": 'Expected a list of items but got type "{input_type}".',
        "empty": "This list may not be empty.",
        "min_length": "Ensure this field has at least {min_length} elements.",
        "max_length": "Ensure this field has no more than {max_length} elements.",
    }

    def __init__(
        self,
        child: Field | None = None,
        *,
        allow_empty: bool = True,
        min_length: int | None = None,
        max_length: int | None = None,
        **kwargs: Any,
    ) -> None:
        self.child = copy.deepcopy(child) if child is not None else _AnyField()
        self.allow_empty = allow_empty
        self.min_length = min_length
        self.max_length = max_length
        super().__init__(**kwargs)
        self.child.bind("", self)

    def __deepcopy__(self, memo: dict[int, Any]) -> "ListField":
        clone = super().__deepcopy__(memo)
        clone.child = copy.deepcopy(self.child, memo)
        clone.child.bind("", clone)
        return clone

    def to_internal_value(self, data: Any) -> list[Any]:
        if isinstance(data, (str, bytes, Mapping)) or not hasattr(data, "__iter__"):
            self.fail("not_a_list", input_type=type(data).__name__)
        items = list(data)
        if not self.allow_empty and not items:
            self.fail("empty")
        if self.min_length is not None and len(items) < self.min_length:
            self.fail("min_length", min_length=self.min_length)
        if self.max_length is not None and len(items) > self.max_length:
            self.fail("max_length", max_length=self.max_length)

        result: list[Any] = []
        errors: dict[str, Any] = {}
        for index, item in enumerate(items):
            try:
                result.append(self.child.run_validation(item))
            except ValidationError as exc:
                errors[str(index)] = exc.detail
        if errors:
            raise ValidationError(errors)
        return result

    def to_representation(self, value: Any) -> list[Any]:
        return [None if item is None else self.child.to_representation(item) for item in value]


class _AnyField(Field):
    """Pass-through child for untyped lists."""

    def to_internal_value(self, data: Any) -> Any:
        return data

    def to_representation(self, value: Any) -> Any:
        return value
