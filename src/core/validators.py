"""Reusable validator objects.

Field validators receive a single coerced value; record validators receive
the accepted record (a dict) after every field check passed. Both raise
`ValidationError` on failure. Messages are English by default and are
translated through `core.domain.messages` unless a custom `message` is given.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from core.domain.errors import ValidationError
from core.domain.messages import translate
from core.interfaces.validator import ValidationOwner


def format_message(message: str, params: Mapping[str, Any]) -> str:
    try:
        return message.format(**params)
    except (KeyError, IndexError, ValueError):
        # Custom messages may contain literal braces.
        return message


class _MessageMixin:
    default_message = "Invalid input."
    code = "invalid"
    message: str | None = None

    def render_message(self, owner: ValidationOwner | None, **params: Any) -> str:
        if self.message is not None:
            return format_message(self.message, params)
        language = getattr(owner, "language", None)
        return format_message(translate(self.default_message, language), params)


class BaseValidator(_MessageMixin):
    """Compares a value against `limit_value`."""

    requires_context = True
    default_message = "Ensure this value is {limit_value}."
    code = "limit_value"

    def __init__(self, limit_value: Any, message: str | None = None) -> None:
        self.limit_value = limit_value
        if message is not None:
            self.message = message

    def __call__(self, value: Any, owner: ValidationOwner | None = None) -> None:
        limit_value = self.limit_value() if callable(self.limit_value) else self.limit_value
        cleaned = self.clean(value)
        if self.compare(cleaned, limit_value):
            raise ValidationError(
                self.render_message(owner, limit_value=limit_value, show_value=cleaned),
                code=self.code,
            )

    def compare(self, a: Any, b: Any) -> bool:
        return a is not b

    def clean(self, value: Any) -> Any:
        return value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return NotImplemented
        return (
            self.limit_value == other.limit_value
            and self.message == other.message
            and self.code == other.code
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.limit_value!r})"


class MinValueValidator(BaseValidator):
    default_message = "Ensure this value is greater than or equal to {limit_value}."
    code = "min_value"

    def compare(self, a: Any, b: Any) -> bool:
        return a < b


class MaxValueValidator(BaseValidator):
    default_message = "Ensure this value is less than or equal to {limit_value}."
    code = "max_value"

    def compare(self, a: Any, b: Any) -> bool:
        return a > b


class GreaterThanValidator(BaseValidator):
    default_message = "Ensure this value is greater than {limit_value}."
    code = "greater_than"

    def compare(self, a: Any, b: Any) -> bool:
        return a <= b


class LessThanValidator(BaseValidator):
    default_message = "Ensure this value is less than {limit_value}."
    code = "less_than"

    def compare(self, a: Any, b: Any) -> bool:
        return a >= b


class MinLengthValidator(BaseValidator):
    default_message = "Ensure this field has at least {limit_value} characters."
    code = "min_length"

    def compare(self, a: Any, b: Any) -> bool:
        return a < b

    def clean(self, value: Any) -> int:
        return len(value)


class MaxLengthValidator(BaseValidator):
    default_message = "Ensure this field has no more than {limit_value} characters."
    code = "max_length"

    def compare(self, a: Any, b: Any) -> bool:
        return a > b

    def clean(self, value: Any) -> int:
        return len(value)


class RegexValidator(_MessageMixin):
    requires_context = True
    default_message = "This value does not match the required pattern."
    code = "invalid"

    def __init__(
        self,
        pattern: str | re.Pattern[str],
        message: str | None = None,
        code: str | None = None,
        *,
        inverse_match: bool = False,
        flags: int = 0,
    ) -> None:
        self.regex = re.compile(pattern, flags) if isinstance(pattern, str) else pattern
        self.inverse_match = inverse_match
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code

    def __call__(self, value: Any, owner: ValidationOwner | None = None) -> None:
        matched = bool(self.regex.search(str(value)))
        if matched == self.inverse_match:
            raise ValidationError(self.render_message(owner, value=value), code=self.code)


class EmailValidator(RegexValidator):
    default_message = "Enter a valid email address."

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        super().__init__(
            r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~.-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$",
            message,
            code,
        )


class ProhibitedValuesValidator(_MessageMixin):
    """Rejects any value in `values` (e.g. an identifier that must be nonzero)."""

    requires_context = True
    default_message = "This value is not allowed."
    code = "prohibited"

    def __init__(self, values: Iterable[Any], message: str | None = None) -> None:
        self.values = list(values)
        if message is not None:
            self.message = message

    def __call__(self, value: Any, owner: ValidationOwner | None = None) -> None:
        if value in self.values:
            raise ValidationError(self.render_message(owner, value=value), code=self.code)


# ---------------------------------------------------------------------------
# Record validators


def _field_names(fields: Sequence[str]) -> str:
    return ", ".join(fields)


class RecordRule(_MessageMixin):
    """Generic whole-record rule.

    `predicate(attrs)` returns True when the record is acceptable. On failure
    the message is attributed to `fields`, or to the whole record when none
    are given.
    """

    requires_context = True
    code = "invalid"
    fields: tuple[str, ...] = ()
    attribute_to: tuple[str, ...] = ()

    def __init__(
        self,
        predicate: Callable[[dict[str, Any]], bool],
        message: str,
        *,
        fields: Sequence[str] = (),
        code: str | None = None,
    ) -> None:
        self.predicate = predicate
        self.message = message
        self.fields = tuple(fields)
        self.attribute_to = self.fields
        if code is not None:
            self.code = code

    def __call__(self, attrs: dict[str, Any], owner: ValidationOwner | None = None) -> None:
        if not self.predicate(attrs):
            self.fail(owner)

    def fail(self, owner: ValidationOwner | None, **params: Any) -> None:
        message = self.render_message(owner, field_names=_field_names(self.fields), **params)
        if self.attribute_to:
            raise ValidationError({name: [message] for name in self.attribute_to}, code=self.code)
        raise ValidationError(message, code=self.code)


class RequiredTogetherValidator(RecordRule):
    """Either all of `fields` are present (and not None) or none are."""

    default_message = "The fields {field_names} must be provided together."
    code = "required_together"

    def __init__(self, fields: Sequence[str], message: str | None = None) -> None:
        self.fields = tuple(fields)
        self.message = message

    def __call__(self, attrs: dict[str, Any], owner: ValidationOwner | None = None) -> None:
        present = [attrs.get(name) is not None for name in self.fields]
        if any(present) and not all(present):
            self.fail(owner)


class MutuallyExclusiveValidator(RecordRule):
    default_message = "Only one of the fields {field_names} may be provided."
    code = "mutually_exclusive"

    def __init__(self, fields: Sequence[str], message: str | None = None) -> None:
        self.fields = tuple(fields)
        self.message = message

    def __call__(self, attrs: dict[str, Any], owner: ValidationOwner | None = None) -> None:
        if sum(attrs.get(name) is not None for name in self.fields) > 1:
            self.fail(owner)


COMPARISON_OPERATORS: dict[str, tuple[Callable[[Any, Any], bool], str]] = {
    "==": (operator.eq, "equal to"),
    "!=": (operator.ne, "different from"),
    "<": (operator.lt, "less than"),
    "<=": (operator.le, "less than or equal to"),
    ">": (operator.gt, "greater than"),
    ">=": (operator.ge, "greater than or equal to"),
}

_MISSING = object()


class CompareFieldsValidator(RecordRule):
    """Checks `attrs[left] <op> attrs[right]` or `attrs[left] <op> value`.

    The rule is skipped when an operand is absent or None; presence is the
    job of `required`.
    """

    default_message = "{left} must be {op_label} {right}."
    code = "comparison"

    def __init__(
        self,
        left: str,
        op: str,
        *,
        right: str | None = None,
        value: Any = _MISSING,
        message: str | None = None,
        fields: Sequence[str] | None = None,
    ) -> None:
        if op not in COMPARISON_OPERATORS:
            raise ValueError(f"Unknown comparison operator: {op!r}")
        if (right is None) == (value is _MISSING):
            raise ValueError("Exactly one of `right` or `value` is required.")
        self.left = left
        self.op = op
        self.right = right
        self.value = value
        self.message = message
        self.fields = (left, right) if right is not None else (left,)
        self.attribute_to = tuple(fields) if fields is not None else (left,)

    def __call__(self, attrs: dict[str, Any], owner: ValidationOwner | None = None) -> None:
        left_value = attrs.get(self.left)
        right_value = attrs.get(self.right) if self.right is not None else self.value
        if left_value is None or right_value is None:
            return

        compare, op_label = COMPARISON_OPERATORS[self.op]
        try:
            ok = compare(left_value, right_value)
        except TypeError:
            ok = False
        if not ok:
            right_label = self.right if self.right is not None else repr(self.value)
            self.fail(owner, left=self.left, op_label=op_label, right=right_label)


class UniqueTogetherValidator(RecordRule):
    """Rejects a record whose `fields` match an existing record.

    `existing` is any iterable of mappings, or a callable returning one.
    """

    default_message = "The fields {field_names} must make a unique set."
    code = "unique"

    def __init__(
        self,
        existing: Iterable[Mapping[str, Any]] | Callable[[], Iterable[Mapping[str, Any]]],
        fields: Sequence[str],
        message: str | None = None,
    ) -> None:
        self.existing = existing
        self.fields = tuple(fields)
        self.message = message

    def __call__(self, attrs: dict[str, Any], owner: ValidationOwner | None = None) -> None:
        if any(name not in attrs for name in self.fields):
            return
        key = tuple(attrs[name] for name in self.fields)
        existing = self.existing() if callable(self.existing) else self.existing
        for record in existing:
            if tuple(record.get(name) for name in self.fields) == key:
                self.fail(owner)
