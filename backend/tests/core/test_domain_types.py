"""Domain Types — verifies enum members, kind lowering, and editor constants.

Tests:
    - PropertyKind has exactly six kinds; ENUM lowers to JSON Schema "string"
    - Only client-side execution exists
    - Name pattern and defaults match the editor's rules
"""

from app.core.domain_types import (
    DEFAULT_MAX_RETRY_ATTEMPTS,
    DEFAULT_WAIT_TIME_IN_MILLIS,
    MIN_FUNCTION_NAME_LENGTH,
    NAME_PATTERN,
    RESERVED_PROPERTY,
    ErrorCategory,
    ExecutionType,
    PropertyKind,
    PropertyName,
    ToolName,
)


def test_identity_types_wrap_str():
    assert ToolName("get_weather") == "get_weather"
    assert PropertyName("city") == "city"


def test_property_kind_has_six_kinds():
    assert {k.value for k in PropertyKind} == {
        "string", "number", "boolean", "object", "array", "enum",
    }


def test_enum_kind_lowers_to_string_schema_type():
    assert PropertyKind.ENUM.schema_type == "string"
    assert PropertyKind.ARRAY.schema_type == "array"


def test_scalar_kinds():
    assert PropertyKind.STRING.is_scalar
    assert PropertyKind.BOOLEAN.is_scalar
    assert not PropertyKind.OBJECT.is_scalar
    assert not PropertyKind.ENUM.is_scalar


def test_only_client_side_execution():
    assert [t.value for t in ExecutionType] == ["client_side"]


def test_error_categories():
    assert {c.value for c in ErrorCategory} == {"name", "schema_structure", "parse"}


def test_name_pattern():
    assert NAME_PATTERN.match("add_two_numbers")
    assert NAME_PATTERN.match("a1")
    assert not NAME_PATTERN.match("1abc")
    assert not NAME_PATTERN.match("_abc")
    assert not NAME_PATTERN.match("has-dash")


def test_editor_defaults():
    assert RESERVED_PROPERTY == "execution_specs"
    assert MIN_FUNCTION_NAME_LENGTH == 3
    assert DEFAULT_MAX_RETRY_ATTEMPTS == 1
    assert DEFAULT_WAIT_TIME_IN_MILLIS == 60_000


def test_enums_compare_equal_to_their_values():
    assert PropertyKind.NUMBER == "number"
    assert ExecutionType.CLIENT_SIDE == "client_side"
