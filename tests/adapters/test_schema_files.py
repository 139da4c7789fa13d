# tests/adapters/test_schema_files.py
import json
from decimal import Decimal

import httpx
import pytest

from adapters.http_client import build_client
from adapters.schema_files import (
    FieldSpec,
    RuleSpec,
    build_field,
    build_rule,
    build_serializer_class,
    load_records,
    load_schema_file,
    parse_records,
    parse_schema,
)
from adapters.schema_files.operations import apply_input_operation, apply_input_operations
from core.domain.errors import DocumentFormatError, SchemaDefinitionError, ValidationError
from core.fields import ChoiceField, DecimalField, ListField
from core.services.validation_pipeline import ValidationRequest, validate_records


@pytest.fixture
def bid_serializer(bid_schema_path):
    return build_serializer_class(load_schema_file(bid_schema_path))


class TestSampleSchema:
    def test_builds_named_class(self, bid_serializer):
        assert bid_serializer.__name__ == "BidSerializer"
        assert bid_serializer.__doc__ == "A bid placed by a bidder."
        assert list(bid_serializer._declared_fields) == [
            "bid_id",
            "bid_amount",
            "currency",
            "placed_at",
            "bidder",
        ]

    def test_sample_records(self, bid_serializer, bid_records_path, settings):
        records = load_records(bid_records_path)
        report = validate_records(
            serializer_class=bid_serializer,
            settings=settings,
            request=ValidationRequest(records=records, schema_name="bid"),
        )
        first, second, third, fourth = report.outcomes

        assert first.valid
        assert first.data == {
            "bid_amount": "125.50",
            "currency": "USD",
            "bidder": {"bidder_id": 7, "bidder_name": "Ada Lovelace"},
        }
        assert second.errors == {"bid_amount": ["Bid amount must be greater than zero."]}
        assert third.errors == {
            "currency": ['"JPY" is not a valid choice.'],
            "bidder": {"non_field_errors": ["Bidder ID cannot be zero."]},
        }
        assert fourth.errors == {
            "bid_amount": ["A valid number is required."],
            "bidder": {"bidder_id": ["A valid integer is required."]},
            "note": ["Unexpected field."],
        }
        assert report.valid_count == 1

    def test_spanish_messages(self, bid_serializer):
        serializer = bid_serializer(data={"bid_amount": "1", "bidder": {}}, context={"language": "es"})
        assert not serializer.is_valid()
        assert serializer.errors == {"bidder": {"bidder_id": ["Este campo es obligatorio."]}}


class TestSchemaErrors:
    def _schema(self, **overrides):
        schema = {"name": "thing", "fields": [{"name": "title", "type": "string"}]}
        schema.update(overrides)
        return schema

    def test_minimal_schema(self):
        schema = parse_schema(self._schema())
        assert schema.fields[0].name == "title"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"fields": []},
            {"fields": [{"name": "title", "type": "text"}]},
            {"fields": [{"name": "kind", "type": "choice"}]},
            {"fields": [{"name": "bad name", "type": "string"}]},
            {"fields": [{"name": "a", "type": "string"}, {"name": "a", "type": "integer"}]},
            {"fields": [{"name": "a", "type": "integer", "normalize": ["lower"]}]},
            {"fields": [{"name": "a", "type": "string", "normalize": ["shout"]}]},
            {"fields": [{"name": "a", "type": "string", "colour": "red"}]},
            {"rules": [{"kind": "required_together", "fields": ["title", "missing"]}]},
            {"rules": [{"kind": "required_together", "fields": ["title"]}]},
            {"rules": [{"kind": "compare", "left": "title", "op": "=~", "value": 1}]},
            {"rules": [{"kind": "compare", "left": "title", "op": "=="}]},
            {"fields": [{"name": "a", "type": "string", "pattern": "("}]},
            {"fields": [{"name": "a", "type": "email", "pattern": "^a"}]},
            {"fields": [{"name": "a", "type": "string", "gt": 0}]},
            {"fields": [{"name": "a", "type": "boolean", "min_value": 1}]},
            {"fields": [{"name": "a", "type": "integer", "decimal_places": 2}]},
            {"fields": [{"name": "a", "type": "float", "max_digits": 5}]},
            {"fields": [{"name": "a", "type": "integer", "max_length": 3}]},
        ],
    )
    def test_invalid_documents(self, overrides):
        with pytest.raises(SchemaDefinitionError):
            parse_schema(self._schema(**overrides))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SchemaDefinitionError):
            load_schema_file(path)

    def test_uncompilable_pattern_names_the_field(self):
        with pytest.raises(SchemaDefinitionError) as excinfo:
            parse_schema(self._schema(fields=[{"name": "code", "type": "string", "pattern": "("}]))
        assert "invalid pattern" in str(excinfo.value)

    def test_number_options_on_text_field_rejected_before_validation(self):
        with pytest.raises(SchemaDefinitionError) as excinfo:
            parse_schema(self._schema(fields=[{"name": "code", "type": "string", "gt": 0, "lt": 9}]))
        assert "gt, lt only valid for number fields" in str(excinfo.value)

    def test_compare_value_may_be_null(self):
        rule = RuleSpec(kind="compare", left="a", op="!=", value=None)
        assert rule.value is None


class TestBuilder:
    def test_decimal_limits_are_decimals(self):
        field = build_field(FieldSpec(name="price", type="decimal", decimal_places=2, min_value=1, gt=0))
        assert isinstance(field, DecimalField)
        assert field.run_validation("1.5") == Decimal("1.50")

    def test_gt_and_not_in_messages(self):
        field = build_field(FieldSpec(name="qty", type="integer", gt=0, not_in=[13]))
        with pytest.raises(ValidationError) as too_small:
            field.run_validation(0)
        with pytest.raises(ValidationError) as unlucky:
            field.run_validation(13)
        assert too_small.value.detail == ["Ensure this value is greater than 0."]
        assert unlucky.value.detail == ["This value is not allowed."]

    def test_default_makes_field_optional(self):
        field = build_field(FieldSpec(name="currency", type="choice", choices=["USD"], default="USD"))
        assert isinstance(field, ChoiceField)
        assert field.required is False

    def test_list_of_integers(self):
        field = build_field(FieldSpec(name="lots", type="list", child={"name": "lot", "type": "integer"}, max_length=3))
        assert isinstance(field, ListField)
        assert field.run_validation(["1", 2]) == [1, 2]

    def test_many_objects(self):
        schema = parse_schema(
            {
                "name": "lot",
                "fields": [
                    {
                        "name": "bids",
                        "type": "object",
                        "many": True,
                        "fields": [{"name": "amount", "type": "integer", "min_value": 1}],
                    }
                ],
            }
        )
        serializer = build_serializer_class(schema)(data={"bids": [{"amount": 2}, {"amount": 0}]})
        assert not serializer.is_valid()
        assert serializer.errors == {
            "bids": [{}, {"amount": ["Ensure this value is greater than or equal to 1."]}]
        }

    def test_compare_rule_attributed_to_listed_fields(self):
        validator = build_rule(RuleSpec(kind="compare", left="end", op=">", right="start", fields=["end"]))
        assert validator.attribute_to == ("end",)

    def test_record_rules_in_schema(self):
        schema = parse_schema(
            {
                "name": "contact",
                "fields": [
                    {"name": "email", "type": "email", "required": False, "normalize": ["lower"]},
                    {"name": "phone", "type": "string", "required": False, "pattern": "^[0-9]+$"},
                ],
                "rules": [{"kind": "mutually_exclusive", "fields": ["email", "phone"]}],
            }
        )
        serializer_class = build_serializer_class(schema)

        ok = serializer_class(data={"email": "ADA@Example.org"})
        assert ok.is_valid()
        assert ok.validated_data == {"email": "ada@example.org"}

        both = serializer_class(data={"email": "a@b.org", "phone": "123"})
        assert not both.is_valid()
        assert both.errors == {"non_field_errors": ["Only one of the fields email, phone may be provided."]}


class TestRecordsDocuments:
    def test_array(self):
        assert parse_records('[{"a": 1}, {"a": 2}]') == [{"a": 1}, {"a": 2}]

    def test_wrapped(self):
        assert parse_records('{"records": [{"a": 1}]}') == [{"a": 1}]

    def test_single_object(self):
        assert parse_records('{"a": 1}') == [{"a": 1}]

    def test_json_lines(self, tmp_path):
        path = tmp_path / "records.jsonl"
        path.write_text('{"a": 1}\n\n{"a": 2}\n', encoding="utf-8")
        assert load_records(path) == [{"a": 1}, {"a": 2}]

    def test_json_lines_bad_line(self):
        with pytest.raises(DocumentFormatError, match="line 2"):
            parse_records('{"a": 1}\n{oops', json_lines=True)

    @pytest.mark.parametrize("raw", ["not json", "42"])
    def test_rejected(self, raw):
        with pytest.raises(DocumentFormatError):
            parse_records(raw)


class TestRemoteSources:
    def test_schema_over_http(self, bid_schema_path, settings):
        body = bid_schema_path.read_text(encoding="utf-8")
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["user_agent"] = request.headers["User-Agent"]
            return httpx.Response(200, text=body)

        with build_client(settings, transport=httpx.MockTransport(handler)) as client:
            schema = load_schema_file("https://schemas.example.test/bid.json", client=client)

        assert schema.name == "bid"
        assert seen["user_agent"] == settings.user_agent

    def test_http_errors_propagate(self, settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        with build_client(settings, transport=transport) as client:
            with pytest.raises(httpx.HTTPStatusError):
                load_records("https://schemas.example.test/missing.json", client=client)

    def test_remote_json_lines(self, settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text='{"a": 1}\n{"a": 2}\n'))
        with build_client(settings, transport=transport) as client:
            assert load_records("https://data.example.test/bids.ndjson", client=client) == [{"a": 1}, {"a": 2}]


class TestOperations:
    @pytest.mark.parametrize(
        "operation,expected",
        [("lower", "  ada  lovelace "), ("upper", "  ADA  LOVELACE "), ("strip", "Ada  Lovelace"), ("collapse_whitespace", "Ada Lovelace")],
    )
    def test_single(self, operation, expected):
        assert apply_input_operation("  Ada  Lovelace ", operation) == expected

    def test_chain(self):
        assert apply_input_operations(" ada  lovelace ", ["collapse_whitespace", "title"]) == "Ada Lovelace"

    def test_unknown(self):
        with pytest.raises(ValueError):
            apply_input_operation("x", "shout")


def test_sample_schema_is_plain_json(bid_schema_path):
    assert json.loads(bid_schema_path.read_text(encoding="utf-8"))["name"] == "bid"
