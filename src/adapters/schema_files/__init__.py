from adapters.schema_files.builder import build_field, build_rule, build_serializer_class
from adapters.schema_files.loader import (
    load_records,
    load_schema_file,
    parse_records,
    parse_schema,
)
from adapters.schema_files.models import FieldSpec, RuleSpec, SchemaFile

__all__ = [
    "FieldSpec",
    "RuleSpec",
    "SchemaFile",
    "build_field",
    "build_rule",
    "build_serializer_class",
    "load_records",
    "load_schema_file",
    "parse_records",
    "parse_schema",
]
