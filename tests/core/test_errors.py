# tests/core/test_errors.py
from core.domain.errors import (
    NON_FIELD_ERRORS,
    DocumentFormatError,
    ErrorDetail,
    SchemaDefinitionError,
    ValidationError,
)


def test_message_is_wrapped_in_list():
    exc = ValidationError("Bad value.")
    assert exc.detail == ["Bad value."]
    assert exc.get_codes() == ["invalid"]


def test_custom_code_is_carried():
    exc = ValidationError("Bidder ID cannot be zero.", code="zero_id")
    assert exc.detail[0].code == "zero_id"


def test_mapping_detail_keeps_shape():
    exc = ValidationError({"start": "Too early.", "end": ["Too late.", "Not a weekday."]}, code="window")
    assert exc.detail == {"start": "Too early.", "end": ["Too late.", "Not a weekday."]}
    assert exc.get_codes() == {"start": "window", "end": ["window", "window"]}


def test_tuple_detail_becomes_list():
    assert ValidationError(("a", "b")).detail == ["a", "b"]


def test_default_detail():
    assert ValidationError().detail == ["Invalid input."]


def test_error_detail_equality():
    assert ErrorDetail("x", code="a") == "x"
    assert ErrorDetail("x", code="a") != ErrorDetail("x", code="b")
    assert ErrorDetail("x", code="a") == ErrorDetail("x", code="a")


def test_non_field_marker():
    assert NON_FIELD_ERRORS == "non_field_errors"


def test_schema_errors_are_document_errors():
    assert issubclass(SchemaDefinitionError, DocumentFormatError)
    assert issubclass(DocumentFormatError, ValueError)
