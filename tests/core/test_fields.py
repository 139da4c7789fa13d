# tests/core/test_fields.py
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.domain.errors import SkipField, ValidationError
from core.fields import (
    BooleanField,
    CharField,
    ChoiceField,
    DateTimeField,
    DecimalField,
    EmailField,
    FloatField,
    IntegerField,
    ListField,
    RegexField,
    empty,
)


def _messages(field, value):
    with pytest.raises(ValidationError) as excinfo:
        field.run_validation(value)
    return excinfo.value.detail


class TestFieldOptions:
    def test_required_by_default(self):
        assert IntegerField().required is True
        assert IntegerField(default=1).required is False
        assert IntegerField(read_only=True).required is False

    def test_conflicting_options(self):
        with pytest.raises(ValueError):
            IntegerField(read_only=True, required=True)
        with pytest.raises(ValueError):
            IntegerField(required=True, default=3)

    def test_missing_optional_field_is_skipped(self):
        with pytest.raises(SkipField):
            IntegerField(required=False).run_validation(empty)

    def test_callable_default(self):
        assert CharField(default=lambda: "x").run_validation(empty) == "x"

    def test_allow_null(self):
        assert IntegerField(allow_null=True).run_validation(None) is None

    def test_custom_error_message(self):
        field = IntegerField(error_messages={"invalid": "Whole numbers only."})
        assert _messages(field, "abc") == ["Whole numbers only."]

    def test_every_validator_failure_is_collected(self):
        def no_digits(value):
            if any(ch.isdigit() for ch in value):
                raise ValidationError("No digits.")

        field = CharField(max_length=3, validators=[no_digits])
        assert _messages(field, "abc123") == [
            "No digits.",
            "Ensure this field has no more than 3 characters.",
        ]


class TestCharField:
    def test_trims_whitespace(self):
        assert CharField().run_validation("  Ada ") == "Ada"

    def test_blank(self):
        assert _messages(CharField(), "   ") == ["This field may not be blank."]
        assert CharField(allow_blank=True).run_validation("") == ""

    def test_numbers_become_text(self):
        assert CharField().run_validation(12) == "12"

    def test_rejects_bool_and_containers(self):
        assert _messages(CharField(), True) == ["Not a valid string."]
        assert _messages(CharField(), ["a"]) == ["Not a valid string."]

    def test_length_limits(self):
        assert _messages(CharField(min_length=2), "a") == ["Ensure this field has at least 2 characters."]

    def test_email(self):
        assert EmailField().run_validation("ada@example.org") == "ada@example.org"
        assert _messages(EmailField(), "ada@") == ["Enter a valid email address."]

    def test_regex(self):
        field = RegexField(r"^[A-Z]{3}$")
        assert field.run_validation("USD") == "USD"
        assert _messages(field, "usd") == ["This value does not match the required pattern."]


class TestNumbers:
    @pytest.mark.parametrize("raw", [12, "12", "12.0", 12.0])
    def test_integer_coercion(self, raw):
        assert IntegerField().run_validation(raw) == 12

    @pytest.mark.parametrize("raw", ["12.5", 12.5, True, "seven", [1]])
    def test_integer_rejects(self, raw):
        assert _messages(IntegerField(), raw) == ["A valid integer is required."]

    def test_integer_bounds(self):
        field = IntegerField(min_value=1, max_value=10)
        assert _messages(field, 0) == ["Ensure this value is greater than or equal to 1."]
        assert _messages(field, 11) == ["Ensure this value is less than or equal to 10."]

    def test_float(self):
        assert FloatField().run_validation("1.5") == 1.5
        assert _messages(FloatField(), "nan") == ["A valid number is required."]

    def test_float_rejects_integers_too_large_for_a_float(self):
        assert _messages(FloatField(), int("1" + "0" * 400)) == ["A valid number is required."]

    def test_decimal_quantizes(self):
        assert DecimalField(max_digits=5, decimal_places=2).run_validation("3.1") == Decimal("3.10")

    def test_decimal_precision(self):
        field = DecimalField(max_digits=5, decimal_places=2)
        assert _messages(field, "1.234") == ["Ensure there are no more than 2 decimal places."]
        assert _messages(field, "123456") == ["Ensure there are no more than 5 digits in total."]
        assert _messages(field, "1234.5") == ["Ensure there are no more than 3 digits before the decimal point."]

    def test_decimal_rejects_text(self):
        assert _messages(DecimalField(), "abc") == ["A valid number is required."]

    def test_decimal_places_without_max_digits_accepts_large_values(self):
        field = DecimalField(decimal_places=2)
        assert field.run_validation("1e30") == Decimal("1e30")
        assert field.to_representation(Decimal("1e30")) == "1" + "0" * 30 + ".00"

    @pytest.mark.parametrize("raw", ["1e5000", "-1e5000", "1e-5000"])
    def test_decimal_rejects_extreme_exponents(self, raw):
        assert _messages(DecimalField(decimal_places=2), raw) == ["A valid number is required."]

    def test_decimal_representation(self):
        field = DecimalField(decimal_places=2)
        assert field.to_representation(Decimal("7")) == "7.00"
        assert DecimalField(decimal_places=2, coerce_to_string=False).to_representation("7") == Decimal("7.00")


class TestOtherFields:
    @pytest.mark.parametrize("raw,expected", [("yes", True), ("0", False), (1, True), ("Off", False)])
    def test_boolean(self, raw, expected):
        assert BooleanField().run_validation(raw) is expected

    def test_boolean_rejects_unhashable(self):
        assert _messages(BooleanField(), ["yes"]) == ["Must be a valid boolean."]

    def test_choice(self):
        field = ChoiceField(["USD", "EUR"])
        assert field.run_validation("EUR") == "EUR"
        assert _messages(field, "JPY") == ['"JPY" is not a valid choice.']

    def test_choice_matches_by_text(self):
        assert ChoiceField([1, 2]).run_validation("2") == 2

    def test_datetime(self):
        value = DateTimeField().run_validation("2024-05-01T10:00:00Z")
        assert value == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        assert DateTimeField().to_representation(value) == "2024-05-01T10:00:00+00:00"

    def test_datetime_rejects_garbage(self):
        assert _messages(DateTimeField(), "yesterday") == ["Datetime has wrong format. Use ISO 8601."]


class TestListField:
    def test_children_validated(self):
        assert ListField(child=IntegerField()).run_validation(["1", 2]) == [1, 2]

    def test_errors_keyed_by_position(self):
        detail = _messages(ListField(child=IntegerField()), [1, "x", 3, "y"])
        assert detail == {"1": ["A valid integer is required."], "3": ["A valid integer is required."]}

    def test_not_a_list(self):
        assert _messages(ListField(), "abc") == ['Expected a list of items but got type "str".']

    def test_empty_and_length(self):
        assert _messages(ListField(allow_empty=False), []) == ["This list may not be empty."]
        assert _messages(ListField(max_length=1), [1, 2]) == ["Ensure this field has no more than 1 elements."]

    def test_representation(self):
        assert ListField(child=DecimalField(decimal_places=1)).to_representation([Decimal("1")]) == ["1.0"]
